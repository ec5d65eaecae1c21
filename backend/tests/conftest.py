"""
Shared test fixtures and utilities.

This module provides common test infrastructure used across all test modules.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional

import jwt  # PyJWT
import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel
from langchain_core.runnables import Runnable

from api.dependencies import reset_container
from modules.auth.repository import InMemoryUserRepository
from providers.base import (
    BaseProvider,
    CallOptions,
    ModelCapabilities,
    ModelConfig,
    ModelLimits,
    ModelPricing,
)
from providers.registry import ProviderRegistry
from shared.config import Settings


# Test JWT secret (only for testing)
TEST_JWT_SECRET = "test-secret-key-for-testing-only"


def create_test_token(
    user_id: str = "test-user-123",
    email: Optional[str] = "test@example.com",
    expired: bool = False,
    secret: str = TEST_JWT_SECRET,
) -> str:
    """
    Create a test JWT token for authentication.

    Args:
        user_id: User ID to include in the token
        email: Email to include in the token
        expired: If True, creates an expired token
        secret: Signing secret

    Returns:
        JWT token string
    """
    now = datetime.now(timezone.utc)
    exp = now - timedelta(hours=1) if expired else now + timedelta(hours=1)

    payload = {
        "sub": user_id,
        "email": email,
        "exp": int(exp.timestamp()),
        "iat": int(now.timestamp()),
    }
    return jwt.encode(payload, secret, algorithm="HS256")


def make_model_config(
    model_id: str = "fake-model",
    name: str = "Fake Model",
    provider: str = "Fake",
    reasoning: bool = False,
) -> ModelConfig:
    """Catalog entry with round prices: $1/M input, $2/M output."""
    return ModelConfig(
        id=model_id,
        name=name,
        provider=provider,
        model=model_id,
        capabilities=ModelCapabilities(reasoning=reasoning),
        pricing=ModelPricing(input_per_million=Decimal("1"), output_per_million=Decimal("2")),
        limits=ModelLimits(max_tokens=4096, context_window=128000),
    )


class FakeProvider(BaseProvider):
    """Provider backed by LangChain's fake chat model, cycling ``responses``."""

    api_key_env_var = "FAKE_API_KEY"

    def __init__(
        self,
        name: str = "Fake",
        model_ids: tuple[str, ...] = ("fake-model",),
        responses: Optional[list[str]] = None,
        api_key: str = "fake-key",
    ):
        super().__init__(api_key)
        self.name = name
        self.models = [make_model_config(m, name=m.title(), provider=name) for m in model_ids]
        self.responses = responses or ["Fake response"]
        self.calls: list[tuple[str, CallOptions]] = []

    def get_llm(self, config: ModelConfig, options: CallOptions) -> Runnable:
        self._require_api_key()
        self.calls.append((config.id, options))
        return FakeListChatModel(responses=self.responses)


class FailingProvider(FakeProvider):
    """Provider whose client always raises."""

    def get_llm(self, config: ModelConfig, options: CallOptions) -> Runnable:
        raise RuntimeError("upstream exploded")


@pytest.fixture(autouse=True)
def reset_services():
    """Reset the service container before and after each test."""
    reset_container()
    yield
    reset_container()


@pytest.fixture
def test_settings() -> Settings:
    """Settings for tests: JWT secret set, no database, no Stripe."""
    return Settings(
        _env_file=None,
        jwt_secret=TEST_JWT_SECRET,
        database_url="",
        stripe_secret_key="",
        stripe_webhook_secret="",
        google_client_id="google-client",
        google_client_secret="google-secret",
    )


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider(model_ids=("fake-model", "fake-model-2"))


@pytest.fixture
def provider_registry(fake_provider: FakeProvider) -> ProviderRegistry:
    return ProviderRegistry([fake_provider])


@pytest.fixture
def user_repository() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def test_user_id() -> str:
    """Provide a consistent test user ID."""
    return "test-user-123"


@pytest.fixture
def test_user_email() -> str:
    """Provide a consistent test user email."""
    return "test@example.com"


@pytest.fixture
def auth_token(test_user_id: str, test_user_email: str) -> str:
    """Create a valid auth token for testing."""
    return create_test_token(user_id=test_user_id, email=test_user_email)


@pytest.fixture
def auth_headers(auth_token: str) -> dict[str, str]:
    """Create authorization headers with a valid token."""
    return {"Authorization": f"Bearer {auth_token}"}
