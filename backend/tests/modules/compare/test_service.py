"""Tests for the compare service."""

from unittest.mock import MagicMock

import pytest

from modules.auth.models import DEFAULT_CREDITS
from modules.billing.exceptions import InsufficientCreditsError
from modules.billing.service import BillingService
from modules.compare.exceptions import ComparisonNotFoundError
from modules.compare.models import CompareRequest, RespondRequest
from modules.compare.repository import InMemoryComparisonRepository, PostgresComparisonRepository
from modules.compare.service import CompareService
from providers.registry import ProviderRegistry
from shared.exceptions import ModelNotFoundError, ProviderError
from tests.conftest import FailingProvider, FakeProvider


@pytest.fixture
def registry() -> ProviderRegistry:
    return ProviderRegistry([
        FakeProvider(model_ids=("fake-model", "fake-model-2"), responses=["Forty-two"]),
        FailingProvider(name="Broken", model_ids=("broken-model",)),
    ])


@pytest.fixture
def billing(user_repository, test_settings) -> BillingService:
    return BillingService(user_repository, test_settings)


@pytest.fixture
def service(registry, billing) -> CompareService:
    return CompareService(InMemoryComparisonRepository(), registry, billing)


class TestCompare:
    async def test_all_models_succeed(self, service, user_repository):
        user = user_repository.create("device-hash")
        comparison = await service.compare(
            CompareRequest(prompt="Meaning of life?", model_ids=["fake-model", "fake-model-2"]),
            user,
        )

        assert set(comparison.responses) == {"fake-model", "fake-model-2"}
        assert all(r.status == "success" for r in comparison.responses.values())
        assert comparison.responses["fake-model"].content == "Forty-two"
        assert user_repository.get(user.id).credits == DEFAULT_CREDITS - 10

    async def test_failure_is_isolated_and_not_charged(self, service, user_repository):
        """One model failing leaves the others intact; only successes cost credits."""
        user = user_repository.create("device-hash")
        comparison = await service.compare(
            CompareRequest(prompt="Hello", model_ids=["fake-model", "broken-model", "ghost-model"]),
            user,
        )

        assert comparison.responses["fake-model"].status == "success"
        broken = comparison.responses["broken-model"]
        assert broken.status == "error"
        assert "upstream exploded" in broken.error
        assert comparison.responses["ghost-model"].status == "error"
        assert comparison.selected_models == ["fake-model", "broken-model", "ghost-model"]
        assert user_repository.get(user.id).credits == DEFAULT_CREDITS - 5

    async def test_insufficient_credits(self, service, user_repository):
        user = user_repository.create("device-hash")
        user = user_repository.adjust_credits(user.id, -(DEFAULT_CREDITS - 2))

        with pytest.raises(InsufficientCreditsError) as exc_info:
            await service.compare(CompareRequest(prompt="Hi", model_ids=["fake-model"]), user)
        assert exc_info.value.details["credits"] == 2
        assert service.list_comparisons() == []

    async def test_billing_disabled(self, registry, user_repository, test_settings):
        settings = test_settings.model_copy(update={"enable_billing": False})
        service = CompareService(
            InMemoryComparisonRepository(), registry, BillingService(user_repository, settings)
        )
        user = user_repository.adjust_credits(user_repository.create("device-hash").id, -DEFAULT_CREDITS)

        comparison = await service.compare(CompareRequest(prompt="Hi", model_ids=["fake-model"]), user)

        assert comparison.responses["fake-model"].status == "success"
        assert user_repository.get(user.id).credits == 0

    async def test_comparison_is_stored(self, service, user_repository):
        user = user_repository.create("device-hash")
        comparison = await service.compare(CompareRequest(prompt="Hi", model_ids=["fake-model"]), user)

        assert service.get_comparison(comparison.id) == comparison
        assert service.list_comparisons() == [comparison]

    def test_get_missing_comparison(self, service):
        with pytest.raises(ComparisonNotFoundError):
            service.get_comparison("ghost")


class TestRespond:
    async def test_single_model(self, service):
        response = await service.respond(RespondRequest(model_id="fake-model", prompt="Hi"))
        assert response.content == "Forty-two"
        assert response.model_info is not None

    async def test_unknown_model(self, service):
        with pytest.raises(ModelNotFoundError):
            await service.respond(RespondRequest(model_id="ghost-model", prompt="Hi"))

    async def test_provider_failure(self, service):
        with pytest.raises(ProviderError):
            await service.respond(RespondRequest(model_id="broken-model", prompt="Hi"))


class TestModels:
    def test_list_models(self, service):
        assert [m.id for m in service.list_models()] == ["fake-model", "fake-model-2", "broken-model"]


class TestPostgresComparisonRepository:
    def test_create_serializes_responses(self):
        from datetime import datetime, timezone
        from modules.compare.models import ModelResult

        db = MagicMock()
        db.fetch_one.return_value = {
            "id": "5d6f",
            "prompt": "Hi",
            "selected_models": '["fake-model"]',
            "responses": {"fake-model": {"status": "success", "content": "Yo"}},
            "created_at": datetime(2025, 1, 1, tzinfo=timezone.utc),
        }

        comparison = PostgresComparisonRepository(db).create(
            "Hi", ["fake-model"], {"fake-model": ModelResult(status="success", content="Yo")}
        )

        params = db.fetch_one.call_args.args[1]
        assert params[0] == "Hi"
        assert params[1].adapted == ["fake-model"]
        assert params[2].adapted["fake-model"]["content"] == "Yo"
        assert comparison.responses["fake-model"].content == "Yo"
        assert comparison.selected_models == ["fake-model"]
