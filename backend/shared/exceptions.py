"""
Base exception classes for the ModelCompare backend.

Each module should define its own exceptions that inherit from these bases.
This enables consistent error handling across the application: route
handlers translate them to HTTP errors, and the app-level handler renders
anything left over with the class's ``status_code``.
"""

from typing import Optional, Any


class ModelCompareError(Exception):
    """
    Base exception for all ModelCompare errors.

    All custom exceptions should inherit from this class.
    """

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class NotFoundError(ModelCompareError):
    """Resource not found."""

    status_code = 404


class ValidationError(ModelCompareError):
    """Input validation failed."""

    status_code = 400

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code or "VALIDATION_ERROR", details)


class AuthenticationError(ModelCompareError):
    """Authentication failed (invalid or missing credentials)."""

    status_code = 401


class AuthorizationError(ModelCompareError):
    """Authorization failed (insufficient permissions)."""

    status_code = 403


class ExternalServiceError(ModelCompareError):
    """Error communicating with an external service."""

    status_code = 502

    def __init__(
        self,
        message: str,
        service: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code, details)
        self.service = service
        self.details["service"] = service


class TemplateError(ModelCompareError):
    """A prompt template could not be parsed or rendered."""

    status_code = 400

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message, code="TEMPLATE_ERROR", details=details)


class ProviderError(ExternalServiceError):
    """An LLM provider call failed."""

    def __init__(
        self,
        message: str,
        provider: str = "unknown",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, service=provider, code="PROVIDER_ERROR", details=details)
        self.provider = provider


class ModelNotFoundError(NotFoundError):
    """No registered provider serves the requested model id."""

    def __init__(self, model_id: str):
        super().__init__(
            f"Model not found: {model_id}",
            code="MODEL_NOT_FOUND",
            details={"model_id": model_id},
        )
        self.model_id = model_id


class CircuitBreakerError(ModelCompareError):
    """A provider's circuit breaker is open; the call was not attempted."""

    status_code = 503

    def __init__(self, provider: str, failure_count: int, retry_after: int = 30):
        super().__init__(
            f"{provider} service temporarily unavailable",
            code="SERVICE_UNAVAILABLE",
            details={
                "provider": provider,
                "failure_count": failure_count,
                "retry_after": retry_after,
            },
        )
        self.provider = provider
        self.failure_count = failure_count
        self.retry_after = retry_after


class DatabaseError(ModelCompareError):
    """A database connection, query or transaction failed."""

    status_code = 500

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message, code="DATABASE_ERROR", details=details)
