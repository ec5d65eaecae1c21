"""Tests for the debate service and its streaming harness."""

import json

import pytest

from modules.debates.exceptions import (
    DebateSessionNotFoundError,
    SessionRequiredError,
    StreamingDisabledError,
    StreamSessionNotFoundError,
)
from modules.debates.models import (
    CreateDebateSessionRequest,
    DebateRole,
    StreamEventType,
    StreamInitRequest,
    TurnHistoryEntry,
)
from modules.debates.prompts import get_intensity
from modules.debates.repository import InMemoryDebateSessionRepository
from modules.debates.service import (
    DebateService,
    normalize_max_tokens,
    normalize_reasoning_effort,
    normalize_reasoning_summary,
    normalize_temperature,
    normalize_verbosity,
)
from modules.debates.stream_registry import StreamSessionRegistry
from providers.registry import ProviderRegistry
from tests.conftest import FailingProvider


def init_request(**overrides) -> StreamInitRequest:
    data = {
        "model_id": "fake-model",
        "topic": "Tabs beat spaces",
        "role": "affirmative",
        "intensity_level": 2,
        "turn_number": 1,
        "model1_id": "fake-model",
        "model2_id": "fake-model-2",
    }
    data.update(overrides)
    return StreamInitRequest(**data)


async def collect(service: DebateService, entry) -> list:
    return [event async for event in service.stream_turn(entry)]


@pytest.fixture
def repository() -> InMemoryDebateSessionRepository:
    return InMemoryDebateSessionRepository()


@pytest.fixture
def service(repository, provider_registry, test_settings) -> DebateService:
    return DebateService(
        repository=repository,
        providers=provider_registry,
        stream_registry=StreamSessionRegistry(),
        settings=test_settings,
    )


class TestNormalization:
    """Turn option normalization."""

    @pytest.mark.parametrize(
        "value,expected",
        [("minimal", "low"), ("HIGH", "high"), (None, "medium"), ("extreme", "medium")],
    )
    def test_reasoning_effort(self, value, expected):
        assert normalize_reasoning_effort(value) == expected

    def test_reasoning_summary(self):
        assert normalize_reasoning_summary("concise") == "auto"
        assert normalize_reasoning_summary("detailed") == "detailed"
        assert normalize_reasoning_summary("") == "detailed"

    def test_verbosity(self):
        assert normalize_verbosity("low") == "low"
        assert normalize_verbosity("chatty") == "high"

    def test_temperature_clamped(self):
        assert normalize_temperature(None) == 0.7
        assert normalize_temperature(3.5) == 2.0
        assert normalize_temperature(-1) == 0.0

    def test_max_tokens(self):
        assert normalize_max_tokens(None) == 16384
        assert normalize_max_tokens(0) == 16384
        assert normalize_max_tokens(1024) == 1024


class TestSessions:
    def test_create_and_get(self, service):
        session = service.create_session(CreateDebateSessionRequest(
            topic="Tabs beat spaces",
            model1_id="fake-model",
            model2_id="fake-model-2",
            adversarial_level=3,
        ))
        assert service.get_session(session.id) == session
        assert service.list_sessions() == [session]

    def test_get_missing(self, service):
        with pytest.raises(DebateSessionNotFoundError):
            service.get_session("ghost")

    def test_resume_context(self, service, repository):
        session = repository.create("Topic", "fake-model", "fake-model-2", 2)
        repository.append_turn(session.id, TurnHistoryEntry(turn=1, model_id="fake-model", response_id="a1"))

        resume = service.get_resume_context(session.id)

        assert resume.next_model_id == "fake-model-2"
        assert resume.next_turn == 2


class TestInitStream:
    def test_first_turn_creates_session(self, service, repository):
        response = service.init_stream(init_request())

        session = repository.get(response.debate_session_id)
        assert session is not None
        assert session.adversarial_level == 2
        assert response.task_id == f"{session.id}:turn-1:model-fake-model"
        assert response.model_key == "fake-model"

    def test_payload_is_normalized(self, service):
        response = service.init_stream(init_request(reasoning_effort="minimal", temperature=9))
        entry = service.consume_stream(response.task_id, response.model_key, response.session_id)

        payload = entry.payload
        assert payload.role is DebateRole.AFFIRMATIVE
        assert payload.position == "FOR"
        assert payload.reasoning_effort == "low"
        assert payload.temperature == 2.0
        assert payload.intensity_guidance == get_intensity(2).full_text

    def test_existing_session(self, service, repository):
        session = repository.create("Topic", "fake-model", "fake-model-2", 2)
        response = service.init_stream(init_request(session_id=session.id, turn_number=2, model_id="fake-model-2"))
        assert response.debate_session_id == session.id

    def test_unknown_session(self, service):
        with pytest.raises(DebateSessionNotFoundError):
            service.init_stream(init_request(session_id="ghost"))

    def test_later_turn_requires_session(self, service):
        with pytest.raises(SessionRequiredError) as exc_info:
            service.init_stream(init_request(turn_number=3))
        assert exc_info.value.status_code == 400

    def test_streaming_disabled(self, repository, provider_registry, test_settings):
        settings = test_settings.model_copy(update={"streaming_enabled": False})
        service = DebateService(repository, provider_registry, settings=settings)
        with pytest.raises(StreamingDisabledError):
            service.init_stream(init_request())

    def test_ticket_is_single_use(self, service):
        response = service.init_stream(init_request())
        service.consume_stream(response.task_id, response.model_key, response.session_id)
        with pytest.raises(StreamSessionNotFoundError):
            service.consume_stream(response.task_id, response.model_key, response.session_id)

    def test_ticket_must_match_task(self, service):
        response = service.init_stream(init_request())
        with pytest.raises(StreamSessionNotFoundError):
            service.consume_stream("other-task", response.model_key, response.session_id)


class TestStreamTurn:
    async def test_event_sequence(self, service):
        """init, status phases, chunks, persisting, then complete."""
        response = service.init_stream(init_request())
        entry = service.consume_stream(response.task_id, response.model_key, response.session_id)

        events = await collect(service, entry)
        types = [e.type for e in events]

        assert types[0] == StreamEventType.INIT
        assert types[-1] == StreamEventType.COMPLETE
        phases = [e.payload["phase"] for e in events if e.type == StreamEventType.STATUS]
        assert phases == [
            "validating_session",
            "resolving_provider",
            "provider_ready",
            "stream_start",
            "persisting",
        ]
        chunks = [e for e in events if e.type == StreamEventType.CHUNK]
        assert chunks
        assert chunks[-1].payload["cumulative"] == "Fake response"
        assert all(e.session_id == response.session_id for e in events)

    async def test_turn_is_persisted_before_complete(self, service, repository):
        response = service.init_stream(init_request())
        entry = service.consume_stream(response.task_id, response.model_key, response.session_id)

        events = await collect(service, entry)

        session = repository.get(response.debate_session_id)
        assert len(session.turn_history) == 1
        turn = session.turn_history[0]
        assert turn.content == "Fake response"
        assert turn.metadata["role"] == "AFFIRMATIVE"
        complete = events[-1].payload
        assert complete["content"] == "Fake response"
        assert complete["metadata"]["turn_number"] == 1

    async def test_continues_from_stored_response_id(self, service, repository, fake_provider):
        """From turn 3 a model continues its own latest response."""
        session = repository.create("Topic", "fake-model", "fake-model-2", 2)
        repository.append_turn(session.id, TurnHistoryEntry(turn=1, model_id="fake-model", response_id="a1"))
        repository.append_turn(session.id, TurnHistoryEntry(turn=2, model_id="fake-model-2", response_id="b1"))

        response = service.init_stream(init_request(session_id=session.id, turn_number=3))
        entry = service.consume_stream(response.task_id, response.model_key, response.session_id)
        events = await collect(service, entry)

        assert events[-1].payload["metadata"]["previous_response_id"] == "a1"
        assert fake_provider.calls[-1][1].previous_response_id == "a1"

    async def test_unknown_model_emits_error(self, service):
        response = service.init_stream(init_request(model_id="ghost-model"))
        entry = service.consume_stream(response.task_id, response.model_key, response.session_id)

        events = await collect(service, entry)

        assert events[-1].type == StreamEventType.ERROR
        assert events[-1].payload["code"] == "MODEL_NOT_FOUND"

    async def test_provider_failure_emits_error(self, repository, test_settings):
        registry = ProviderRegistry([FailingProvider(model_ids=("fake-model",))])
        service = DebateService(repository, registry, settings=test_settings)
        response = service.init_stream(init_request())
        entry = service.consume_stream(response.task_id, response.model_key, response.session_id)

        events = await collect(service, entry)

        assert events[-1].type == StreamEventType.ERROR
        assert events[-1].payload["code"] == "PROVIDER_ERROR"
        assert "upstream exploded" in events[-1].payload["error"]
        assert repository.get(response.debate_session_id).turn_history == []

    async def test_later_turn_without_history_has_no_continuation(self, service, repository):
        session = repository.create("Topic", "fake-model", "fake-model-2", 2)
        response = service.init_stream(init_request(
            session_id=session.id,
            turn_number=3,
            opponent_message="Spaces are universal.",
        ))
        entry = service.consume_stream(response.task_id, response.model_key, response.session_id)

        events = await collect(service, entry)

        assert events[-1].type == StreamEventType.COMPLETE
        assert events[-1].payload["metadata"]["previous_response_id"] is None


class TestStreamEvent:
    async def test_to_sse_flattens_payload(self, service):
        response = service.init_stream(init_request())
        entry = service.consume_stream(response.task_id, response.model_key, response.session_id)
        events = await collect(service, entry)

        sse = events[0].to_sse()
        data = json.loads(sse["data"])
        assert sse["event"] == "stream.init"
        assert data["task_id"] == response.task_id
        assert data["turn_number"] == 1
        assert "emitted_at" in data
