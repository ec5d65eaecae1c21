"""
Authentication module exceptions.

These exceptions are raised by the auth module and can be caught
by API error handlers to return appropriate HTTP responses.
"""

from shared.exceptions import (
    AuthenticationError,
    ExternalServiceError,
    ModelCompareError,
    NotFoundError,
)


class InvalidTokenError(AuthenticationError):
    """Raised when a JWT token is invalid or malformed."""

    def __init__(self, message: str = "Invalid authentication token"):
        super().__init__(message, code="INVALID_TOKEN")


class ExpiredTokenError(AuthenticationError):
    """Raised when a JWT token has expired."""

    def __init__(self, message: str = "Authentication token has expired"):
        super().__init__(message, code="TOKEN_EXPIRED")


class MissingTokenError(AuthenticationError):
    """Raised when no authentication is provided."""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message, code="MISSING_TOKEN")


class UserNotFoundError(NotFoundError):
    """Raised when a user doesn't exist in storage."""

    def __init__(self, user_id: str):
        super().__init__(
            f"User not found: {user_id}",
            code="USER_NOT_FOUND",
            details={"user_id": user_id},
        )


class AuthNotConfiguredError(ModelCompareError):
    """Raised when a sign-in path lacks its server-side secrets."""

    status_code = 503

    def __init__(self, what: str):
        super().__init__(
            f"{what} is not configured",
            code="AUTH_NOT_CONFIGURED",
        )


class OAuthExchangeError(ExternalServiceError):
    """Raised when Google rejects the authorization code or profile lookup."""

    def __init__(self, message: str):
        super().__init__(message, service="google", code="OAUTH_EXCHANGE_FAILED")


class OAuthStateError(AuthenticationError):
    """Raised when the OAuth callback's state does not match the one issued."""

    def __init__(self, message: str = "Invalid OAuth state"):
        super().__init__(message, code="INVALID_OAUTH_STATE")
