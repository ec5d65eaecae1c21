"""
Authentication module.

Handles bearer tokens, anonymous device users and Google sign-in.

Public API:
- IAuthService: Interface for auth operations
- IUserRepository: User and credit persistence
- User: Persisted user with credit balance
- Auth exceptions: InvalidTokenError, ExpiredTokenError, etc.
"""

from .interfaces import IAuthService, IUserRepository
from .models import (
    DEFAULT_CREDITS,
    AuthTokenResponse,
    CreditsResponse,
    GoogleProfile,
    JWTPayload,
    User,
)
from .exceptions import (
    AuthNotConfiguredError,
    ExpiredTokenError,
    InvalidTokenError,
    MissingTokenError,
    OAuthExchangeError,
    UserNotFoundError,
)

__all__ = [
    # Interfaces
    "IAuthService",
    "IUserRepository",
    # Models
    "DEFAULT_CREDITS",
    "AuthTokenResponse",
    "CreditsResponse",
    "GoogleProfile",
    "JWTPayload",
    "User",
    # Exceptions
    "AuthNotConfiguredError",
    "ExpiredTokenError",
    "InvalidTokenError",
    "MissingTokenError",
    "OAuthExchangeError",
    "UserNotFoundError",
]
