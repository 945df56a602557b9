"""
Security Utilities

JWT encoding and decoding with PyJWT. Tokens are normally issued by the
identity provider; create_access_token exists for seeding and local testing.
"""

import logging
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt

from app.core.config import settings

logger = logging.getLogger(__name__)


def create_access_token(
    subject: str,
    *,
    role: str,
    email: str = "",
    program_id: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """
    Create a signed access token carrying the actor claims.

    Args:
        subject: User ID placed in the ``sub`` claim
        role: One of student, program_admin, admin
        email: User email
        program_id: Assigned program for program admins
        expires_delta: Token lifetime (defaults to settings)

    Returns:
        Encoded JWT string
    """
    expire = datetime.now(UTC) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    payload: dict[str, Any] = {
        "sub": subject,
        "role": role,
        "email": email,
        "type": "access",
        "exp": expire,
    }
    if program_id:
        payload["program_id"] = program_id

    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict[str, Any] | None:
    """
    Decode and validate a JWT.

    Returns:
        The payload, or None if the signature is invalid or the token expired
    """
    try:
        return jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except jwt.ExpiredSignatureError:
        logger.debug("Token expired")
        return None
    except jwt.InvalidTokenError as e:
        logger.debug(f"Invalid token: {e}")
        return None
