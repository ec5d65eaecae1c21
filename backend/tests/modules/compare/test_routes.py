"""Tests for the compare and model catalog endpoints."""

import pytest
from fastapi.testclient import TestClient

from api import app
from api.dependencies import get_auth_service, get_compare_service
from modules.auth.models import DEFAULT_CREDITS
from modules.auth.service import AuthService, hash_device_id
from modules.billing.service import BillingService
from modules.compare.repository import InMemoryComparisonRepository
from modules.compare.service import CompareService
from providers.registry import ProviderRegistry
from tests.conftest import FailingProvider, FakeProvider

DEVICE_HEADERS = {"x-device-id": "device-abc"}


@pytest.fixture
def client(user_repository, test_settings):
    registry = ProviderRegistry([
        FakeProvider(model_ids=("fake-model",)),
        FailingProvider(name="Broken", model_ids=("broken-model",)),
    ])
    compare = CompareService(
        InMemoryComparisonRepository(), registry, BillingService(user_repository, test_settings)
    )
    auth = AuthService(user_repository, test_settings)
    app.dependency_overrides[get_compare_service] = lambda: compare
    app.dependency_overrides[get_auth_service] = lambda: auth
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestModels:
    def test_list_models(self, client):
        response = client.get("/api/models")
        assert response.status_code == 200
        models = response.json()
        assert [m["id"] for m in models] == ["fake-model", "broken-model"]
        assert models[0]["pricing"]["input_per_million"] == "1"


class TestCompare:
    def test_requires_device_id(self, client):
        response = client.post("/api/compare", json={"prompt": "Hi", "model_ids": ["fake-model"]})
        assert response.status_code == 400
        assert "Missing device ID" in response.json()["detail"]

    def test_compare(self, client, user_repository):
        response = client.post(
            "/api/compare",
            json={"prompt": "Hi", "model_ids": ["fake-model", "broken-model"]},
            headers=DEVICE_HEADERS,
        )
        assert response.status_code == 200
        data = response.json()
        assert data["responses"]["fake-model"]["status"] == "success"
        assert data["responses"]["broken-model"]["status"] == "error"

        user = user_repository.get_by_device_hash(hash_device_id("device-abc"))
        assert user.credits == DEFAULT_CREDITS - 5

    def test_insufficient_credits(self, client, user_repository):
        """An exhausted balance answers 402 with a payment prompt."""
        user = user_repository.create(hash_device_id("device-abc"))
        user_repository.adjust_credits(user.id, -DEFAULT_CREDITS)

        response = client.post(
            "/api/compare",
            json={"prompt": "Hi", "model_ids": ["fake-model"]},
            headers=DEVICE_HEADERS,
        )

        assert response.status_code == 402
        detail = response.json()["detail"]
        assert detail["error"] == "Insufficient credits"
        assert detail["credits"] == 0
        assert detail["requires_payment"] is True

    def test_validation(self, client):
        response = client.post("/api/compare", json={"prompt": "", "model_ids": []}, headers=DEVICE_HEADERS)
        assert response.status_code == 422

    def test_history(self, client):
        created = client.post(
            "/api/compare",
            json={"prompt": "Hi", "model_ids": ["fake-model"]},
            headers=DEVICE_HEADERS,
        ).json()

        history = client.get("/api/comparisons").json()
        assert [c["id"] for c in history] == [created["id"]]
        assert client.get(f"/api/comparisons/{created['id']}").json()["prompt"] == "Hi"
        assert client.get("/api/comparisons/ghost").status_code == 404


class TestRespond:
    def test_respond(self, client):
        response = client.post("/api/models/respond", json={"model_id": "fake-model", "prompt": "Hi"})
        assert response.status_code == 200
        assert response.json()["content"] == "Fake response"

    def test_unknown_model(self, client):
        response = client.post("/api/models/respond", json={"model_id": "ghost", "prompt": "Hi"})
        assert response.status_code == 404

    def test_provider_error(self, client):
        response = client.post("/api/models/respond", json={"model_id": "broken-model", "prompt": "Hi"})
        assert response.status_code == 502
