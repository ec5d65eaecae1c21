"""
Authentication dependencies.

Two identities reach the API: bearer tokens signed after a Google sign-in,
and anonymous users identified by an ``x-device-id`` header.
"""

import logging
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from modules.auth.exceptions import UserNotFoundError
from modules.auth.interfaces import IAuthService
from modules.auth.models import User
from shared.exceptions import AuthenticationError, ModelCompareError
from shared.models import AuthenticatedUser

from ..dependencies import get_auth_service

logger = logging.getLogger(__name__)

# Bearer token extractor
bearer_scheme = HTTPBearer(auto_error=False)


class AuthError(HTTPException):
    """Authentication error with consistent format."""

    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


def _validate(auth: IAuthService, token: str) -> AuthenticatedUser:
    try:
        return auth.validate_token(token)
    except AuthenticationError as e:
        raise AuthError(e.message)
    except ModelCompareError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth: IAuthService = Depends(get_auth_service),
) -> AuthenticatedUser:
    """
    Dependency that requires a bearer token.

    Usage:
        @router.get("/protected")
        async def protected_route(user: AuthenticatedUser = Depends(get_current_user)):
            return {"user_id": user.id}
    """
    if credentials is None:
        raise AuthError("Missing authorization header")
    return _validate(auth, credentials.credentials)


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth: IAuthService = Depends(get_auth_service),
) -> Optional[AuthenticatedUser]:
    """Dependency that extracts the bearer user when a valid token is sent."""
    if credentials is None:
        return None
    try:
        return _validate(auth, credentials.credentials)
    except HTTPException:
        return None


async def get_optional_device_user(
    x_device_id: Optional[str] = Header(default=None),
    auth: IAuthService = Depends(get_auth_service),
) -> Optional[User]:
    """The device user for the ``x-device-id`` header, created on first sight."""
    if not x_device_id:
        return None
    return auth.ensure_device_user(x_device_id)


async def get_device_user(
    device_user: Optional[User] = Depends(get_optional_device_user),
) -> User:
    """Dependency that requires an ``x-device-id`` header."""
    if device_user is None:
        raise HTTPException(
            status_code=400,
            detail="Missing device ID. Device identification required. Please refresh the page.",
        )
    return device_user


async def get_optional_account(
    token_user: Optional[AuthenticatedUser] = Depends(get_optional_user),
    device_user: Optional[User] = Depends(get_optional_device_user),
    auth: IAuthService = Depends(get_auth_service),
) -> Optional[User]:
    """The signed-in user if a valid token was sent, else the device user."""
    if token_user is not None:
        try:
            return auth.get_user(token_user.id)
        except UserNotFoundError:
            logger.warning("Token subject %s has no user record", token_user.id)
    return device_user


async def get_account(
    account: Optional[User] = Depends(get_optional_account),
) -> User:
    """Dependency that requires either a bearer token or a device id."""
    if account is None:
        raise AuthError("Not authenticated")
    return account


# Type aliases for cleaner route definitions
RequireAuth = Depends(get_current_user)
OptionalAuth = Depends(get_optional_user)
