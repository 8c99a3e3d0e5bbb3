"""FastAPI authentication dependencies.

Users live in an external identity service; the access token carries
everything the checkout engine needs to know about them.
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError

from bookit.auth.jwt import decode_token
from bookit.schemas.auth import CurrentUser

# Strict bearer, rejects requests without a token
_bearer_scheme = HTTPBearer()

# Optional bearer: returns None if no token provided
_bearer_scheme_optional = HTTPBearer(auto_error=False)


def _user_from_token(token: str) -> CurrentUser | None:
    try:
        payload = decode_token(token)
    except JWTError:
        return None

    # Only accept access tokens
    if payload.get("type") != "access":
        return None

    sub: str | None = payload.get("sub")
    if not sub:
        return None
    return CurrentUser(id=sub, tenant_id=payload.get("tenant"))


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(_bearer_scheme),
) -> CurrentUser:
    """Return the authenticated user.

    Raises:
        HTTPException 401: If the token is invalid, expired or of the wrong type.
    """
    user = _user_from_token(credentials.credentials)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


async def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme_optional),
) -> CurrentUser | None:
    """Authenticate if a Bearer token is present, otherwise check out as a guest."""
    if credentials is None:
        return None
    return _user_from_token(credentials.credentials)
