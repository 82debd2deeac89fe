from typing import Annotated, Callable, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import ValidationError

from libs.auth.models import AuthUser, UserRole
from libs.common.config import get_settings

settings = get_settings()
security = HTTPBearer()
optional_security = HTTPBearer(auto_error=False)


def decode_access_token(token: str) -> AuthUser:
    """Decode a bearer token into an ``AuthUser``; raises JWTError/ValidationError."""
    payload = jwt.decode(
        token,
        settings.JWT_SECRET,
        algorithms=[settings.JWT_ALGORITHM],
        options={"verify_aud": False},
    )
    return AuthUser(**payload)


async def get_current_user(
    token: Annotated[HTTPAuthorizationCredentials, Depends(security)]
) -> AuthUser:
    """
    Validate the bearer JWT and return the authenticated user.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        return decode_access_token(token.credentials)
    except (JWTError, ValidationError):
        raise credentials_exception


async def get_optional_user(
    token: Annotated[
        Optional[HTTPAuthorizationCredentials], Depends(optional_security)
    ],
) -> Optional[AuthUser]:
    """
    Return the caller when a valid token is sent, None for anonymous requests.

    A malformed or expired token is still rejected so clients notice it.
    """
    if token is None:
        return None
    try:
        return decode_access_token(token.credentials)
    except (JWTError, ValidationError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )


def require_roles(*roles: UserRole | str) -> Callable:
    """
    Build a dependency that lets the request through only for the given roles.

    Usage:
        @router.patch("/...", dependencies=[Depends(require_roles(UserRole.ADMIN))])
    """
    allowed = {r.value if isinstance(r, UserRole) else r for r in roles}

    async def _check(
        current_user: Annotated[AuthUser, Depends(get_current_user)]
    ) -> AuthUser:
        if current_user.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient privileges",
            )
        return current_user

    return _check


require_admin = require_roles(UserRole.ADMIN)
