"""
Tests for token claims and actor extraction.
"""

from datetime import timedelta
from uuid import uuid4

import pytest
from fastapi import HTTPException

from app.core.auth import _validate_jwt_token, actor_from_claims
from app.core.security import create_access_token, decode_token
from app.modules.users.models import UserRole


def test_actor_from_claims():
    user_id, program_id = uuid4(), uuid4()

    actor = actor_from_claims(
        {
            "sub": str(user_id),
            "role": "program_admin",
            "program_id": str(program_id),
            "email": "padmin@test.edu",
        }
    )

    assert actor.id == user_id
    assert actor.role == UserRole.PROGRAM_ADMIN
    assert actor.program_id == program_id
    assert actor.is_staff is True
    assert actor.is_admin is False


@pytest.mark.parametrize(
    "claims,error",
    [
        ({"sub": str(uuid4()), "role": "student", "type": "refresh"}, "INVALID_TOKEN_TYPE"),
        ({"role": "student"}, "INVALID_TOKEN_CLAIMS"),
        ({"sub": "not-a-uuid", "role": "student"}, "INVALID_TOKEN_CLAIMS"),
        ({"sub": str(uuid4()), "role": "superuser"}, "INVALID_TOKEN_CLAIMS"),
    ],
)
def test_rejected_claims(claims, error):
    with pytest.raises(HTTPException) as exc_info:
        actor_from_claims(claims)

    assert exc_info.value.status_code == 401
    assert exc_info.value.detail["error"] == error


@pytest.mark.asyncio
async def test_token_round_trip():
    user_id = uuid4()
    token = create_access_token(str(user_id), role="student", email="student@test.edu")

    actor = await _validate_jwt_token(token)

    assert actor.id == user_id
    assert actor.role == UserRole.STUDENT
    assert actor.program_id is None


@pytest.mark.asyncio
async def test_expired_token_rejected():
    token = create_access_token(str(uuid4()), role="admin", expires_delta=timedelta(seconds=-5))

    assert decode_token(token) is None
    with pytest.raises(HTTPException) as exc_info:
        await _validate_jwt_token(token)

    assert exc_info.value.detail["error"] == "INVALID_TOKEN"
