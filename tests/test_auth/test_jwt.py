"""Unit tests for JWT token creation and the bearer dependencies."""

from datetime import timedelta

import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials
from jose import JWTError

from bookit.auth.dependencies import get_current_user, get_optional_user
from bookit.auth.jwt import create_access_token, decode_token


def _credentials(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


class TestCreateAccessToken:
    def test_claims(self):
        payload = decode_token(create_access_token("user-123", "tenant-a"))
        assert payload["sub"] == "user-123"
        assert payload["tenant"] == "tenant-a"
        assert payload["type"] == "access"
        assert "exp" in payload

    def test_expired_token_rejected(self):
        token = create_access_token("user-123", expires_delta=timedelta(seconds=-1))
        with pytest.raises(JWTError):
            decode_token(token)


class TestDependencies:
    async def test_current_user(self):
        user = await get_current_user(_credentials(create_access_token("user-1", "tenant-a")))
        assert user.id == "user-1"
        assert user.tenant_id == "tenant-a"

    async def test_current_user_rejects_garbage(self):
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(_credentials("garbage"))
        assert exc_info.value.status_code == 401

    async def test_optional_user_without_credentials(self):
        assert await get_optional_user(None) is None

    async def test_optional_user_with_garbage(self):
        assert await get_optional_user(_credentials("garbage")) is None
