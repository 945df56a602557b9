"""
Authentication and Authorization Module

Provides authentication dependencies for FastAPI endpoints.
Tokens are issued by the identity provider; this module validates them and
turns their claims into an Actor (id, role, assigned program) that services
pass to app.core.permissions.can().

SECURITY NOTE:
- Development mode test tokens are ONLY accepted when PYTHON_ENV=development
- Production environments MUST set PYTHON_ENV=production to disable them
"""

import logging
import os
from dataclasses import dataclass
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.config import settings
from app.core.security import decode_token
from app.modules.users.models import UserRole

logger = logging.getLogger(__name__)

# Security scheme for OpenAPI documentation
security = HTTPBearer(
    auto_error=True,
    description="JWT Bearer token for authentication",
)


@dataclass(frozen=True)
class Actor:
    """
    Represents the authenticated caller.

    Populated from JWT claims after token validation.

    Attributes:
        id: User's unique identifier (UUID)
        role: student, program_admin or admin
        program_id: Assigned program (program admins only)
        email: User's email address
    """

    id: UUID
    role: UserRole
    program_id: UUID | None = None
    email: str = ""

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_staff(self) -> bool:
        return self.role in (UserRole.ADMIN, UserRole.PROGRAM_ADMIN)

    def __str__(self) -> str:
        return f"Actor(id={self.id}, role={self.role.value}, program_id={self.program_id})"


def _is_dev_mode_safe() -> bool:
    """
    Check if development test tokens may be accepted.

    Both the settings and the raw PYTHON_ENV variable must agree that this
    is a development environment.
    """
    env_var = os.getenv("PYTHON_ENV", "").lower()

    is_safe = (
        settings.is_development
        and not settings.is_production
        and env_var not in ("production", "staging")
    )

    if is_safe:
        logger.warning(
            "SECURITY: Development auth mode is ENABLED. This MUST NOT be used in production!"
        )

    return is_safe


_DEVELOPMENT_MODE = _is_dev_mode_safe()

# Development actors for local testing (only used when PYTHON_ENV=development)
_DEV_PROGRAM_ID = UUID("00000000-0000-0000-0000-0000000000a1")
_DEV_ACTORS: dict[str, Actor] = {
    "dev-admin": Actor(
        id=UUID("00000000-0000-0000-0000-000000000001"),
        role=UserRole.ADMIN,
        email="admin@admissions.dev",
    ),
    "dev-program-admin": Actor(
        id=UUID("00000000-0000-0000-0000-000000000002"),
        role=UserRole.PROGRAM_ADMIN,
        program_id=_DEV_PROGRAM_ID,
        email="program-admin@admissions.dev",
    ),
    "dev-student": Actor(
        id=UUID("00000000-0000-0000-0000-000000000003"),
        role=UserRole.STUDENT,
        email="student@admissions.dev",
    ),
}


def _unauthorized(error: str, message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"error": error, "message": message},
        headers={"WWW-Authenticate": "Bearer"},
    )


def actor_from_claims(payload: dict) -> Actor:
    """
    Build an Actor from decoded token claims.

    Raises:
        HTTPException 401: If required claims are missing or malformed
    """
    token_type = payload.get("type", "access")
    if token_type != "access":
        logger.warning(f"Invalid token type: {token_type}")
        raise _unauthorized("INVALID_TOKEN_TYPE", "This endpoint requires an access token.")

    try:
        user_id_str = payload.get("sub")
        if not user_id_str:
            raise ValueError("Missing 'sub' claim in token")

        program_id_str = payload.get("program_id")
        return Actor(
            id=UUID(user_id_str),
            role=UserRole(payload.get("role", "")),
            program_id=UUID(program_id_str) if program_id_str else None,
            email=payload.get("email", ""),
        )
    except (ValueError, KeyError) as e:
        logger.warning(f"Invalid token claims: {e}")
        raise _unauthorized(
            "INVALID_TOKEN_CLAIMS", "Token contains invalid or missing claims."
        ) from e


async def _validate_jwt_token(token: str) -> Actor:
    """
    Validate JWT token and extract the actor.

    Args:
        token: JWT token string from Authorization header

    Returns:
        Actor built from the token claims

    Raises:
        HTTPException 401: If token is invalid or expired
    """
    if _DEVELOPMENT_MODE and token in _DEV_ACTORS:
        logger.debug(f"Development mode: using test token {token}")
        return _DEV_ACTORS[token]

    payload = decode_token(token)

    if payload is None:
        logger.warning("Invalid or expired JWT token")
        raise _unauthorized("INVALID_TOKEN", "Invalid or expired authentication token.")

    return actor_from_claims(payload)


async def get_current_actor(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> Actor:
    """
    FastAPI dependency that validates the bearer token and returns the actor.

    Usage:
        @router.get("/applications")
        async def list_applications(actor: Actor = Depends(get_current_actor)):
            ...

    Raises:
        HTTPException 401: If token is missing, invalid, or expired
    """
    actor = await _validate_jwt_token(credentials.credentials)
    logger.debug(f"Authenticated actor: {actor}")
    return actor


__all__ = [
    "Actor",
    "actor_from_claims",
    "get_current_actor",
]
