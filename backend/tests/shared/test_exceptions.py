"""Tests for shared/exceptions.py."""

from shared.exceptions import (
    AuthenticationError,
    AuthorizationError,
    CircuitBreakerError,
    DatabaseError,
    ExternalServiceError,
    ModelCompareError,
    ModelNotFoundError,
    NotFoundError,
    ProviderError,
    TemplateError,
    ValidationError,
)


class TestModelCompareError:
    def test_stores_message(self):
        """ModelCompareError should store message."""
        error = ModelCompareError("Test error")
        assert error.message == "Test error"
        assert str(error) == "Test error"

    def test_default_code_is_class_name(self):
        """Code should default to the class name."""
        assert ModelCompareError("x").code == "ModelCompareError"
        assert NotFoundError("x").code == "NotFoundError"

    def test_custom_code_and_details(self):
        """Should accept a custom code and details."""
        error = ModelCompareError("Test error", code="CUSTOM", details={"key": "value"})
        assert error.code == "CUSTOM"
        assert error.details == {"key": "value"}

    def test_to_dict(self):
        """to_dict should render error, message and details."""
        error = ModelCompareError("Test error", code="TEST_ERROR", details={"key": "value"})
        assert error.to_dict() == {
            "error": "TEST_ERROR",
            "message": "Test error",
            "details": {"key": "value"},
        }

    def test_default_status_code(self):
        assert ModelCompareError("x").status_code == 500


class TestStatusCodes:
    def test_client_errors(self):
        """Each base class should carry its HTTP status."""
        assert NotFoundError("x").status_code == 404
        assert ValidationError("x").status_code == 400
        assert AuthenticationError("x").status_code == 401
        assert AuthorizationError("x").status_code == 403
        assert TemplateError("x").status_code == 400

    def test_validation_error_default_code(self):
        assert ValidationError("bad").code == "VALIDATION_ERROR"

    def test_external_service_error_records_service(self):
        """ExternalServiceError should put the service in details."""
        error = ExternalServiceError("down", service="stripe")
        assert error.status_code == 502
        assert error.service == "stripe"
        assert error.details["service"] == "stripe"


class TestProviderErrors:
    def test_provider_error(self):
        """ProviderError is an ExternalServiceError keyed by provider."""
        error = ProviderError("boom", provider="OpenAI", details={"model_id": "gpt-5"})
        assert isinstance(error, ExternalServiceError)
        assert error.provider == "OpenAI"
        assert error.code == "PROVIDER_ERROR"
        assert error.details == {"model_id": "gpt-5", "service": "OpenAI"}

    def test_model_not_found(self):
        error = ModelNotFoundError("nope")
        assert isinstance(error, NotFoundError)
        assert error.message == "Model not found: nope"
        assert error.model_id == "nope"

    def test_circuit_breaker_error(self):
        """CircuitBreakerError should be a 503 with retry metadata."""
        error = CircuitBreakerError("Anthropic", failure_count=3, retry_after=15)
        assert error.status_code == 503
        assert error.code == "SERVICE_UNAVAILABLE"
        assert error.message == "Anthropic service temporarily unavailable"
        assert error.retry_after == 15
        assert error.details["failure_count"] == 3

    def test_database_error(self):
        error = DatabaseError("lost connection")
        assert error.status_code == 500
        assert error.code == "DATABASE_ERROR"
