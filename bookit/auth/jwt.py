"""JWT access token creation and verification."""

from datetime import datetime, timedelta, timezone

from jose import jwt

from bookit.config import settings


def create_access_token(user_id: str, tenant_id: str | None = None, expires_delta: timedelta | None = None) -> str:
    """Create a short-lived access token.

    Args:
        user_id: Stored as the ``sub`` claim.
        tenant_id: Home tenant of the user, stored as the ``tenant`` claim.
        expires_delta: Custom expiration duration. Defaults to
            ``settings.jwt_access_token_expire_minutes`` minutes.

    Returns:
        Encoded JWT string.
    """
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.jwt_access_token_expire_minutes))
    to_encode = {"sub": user_id, "tenant": tenant_id, "exp": expire, "iat": now, "type": "access"}
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict:
    """Decode and verify a JWT token.

    Raises:
        jose.JWTError: If the token is invalid, expired, or malformed.
    """
    return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
