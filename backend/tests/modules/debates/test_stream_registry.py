"""
Tests for single-use stream tickets.
"""

import pytest

from modules.debates.stream_registry import (
    MIN_TTL_SECONDS,
    STREAM_SESSION_TTL_SECONDS,
    StreamSessionRegistry,
)


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def registry(clock) -> StreamSessionRegistry[dict]:
    return StreamSessionRegistry(clock=clock)


class TestCreateSession:
    def test_default_ttl(self, registry, clock):
        entry = registry.create_session("task-1", "model-a", {"x": 1})
        assert entry.created_at == clock.now
        assert entry.expires_at == clock.now + STREAM_SESSION_TTL_SECONDS
        assert registry.size() == 1

    def test_ttl_has_a_floor(self, registry, clock):
        entry = registry.create_session("task-1", "model-a", {}, ttl_seconds=0)
        assert entry.expires_at == clock.now + MIN_TTL_SECONDS

    def test_unique_ids(self, registry):
        first = registry.create_session("task-1", "model-a", {})
        second = registry.create_session("task-1", "model-a", {})
        assert first.session_id != second.session_id

    def test_create_sweeps_expired(self, registry, clock):
        registry.create_session("old", "model-a", {}, ttl_seconds=5)
        clock.advance(10)
        registry.create_session("new", "model-a", {})
        assert registry.size() == 1


class TestConsumeSession:
    def test_single_use(self, registry):
        """A ticket can be consumed once."""
        entry = registry.create_session("task-1", "model-a", {"x": 1})
        consumed = registry.consume_session(entry.session_id, "task-1", "model-a")
        assert consumed == entry
        assert registry.consume_session(entry.session_id) is None

    def test_expired_ticket_is_removed(self, registry, clock):
        entry = registry.create_session("task-1", "model-a", {}, ttl_seconds=30)
        clock.advance(30)
        assert registry.consume_session(entry.session_id) is None
        assert registry.size() == 0

    def test_mismatch_leaves_ticket(self, registry):
        """A wrong task or model does not burn the ticket."""
        entry = registry.create_session("task-1", "model-a", {})
        assert registry.consume_session(entry.session_id, task_id="task-2") is None
        assert registry.consume_session(entry.session_id, model_key="model-b") is None
        assert registry.consume_session(entry.session_id, "task-1", "model-a") == entry

    def test_unknown_ticket(self, registry):
        assert registry.consume_session("missing") is None


class TestCleanup:
    def test_cleanup_counts_removed(self, registry, clock):
        registry.create_session("a", "m", {}, ttl_seconds=5)
        registry.create_session("b", "m", {}, ttl_seconds=60)
        clock.advance(10)
        assert registry.cleanup_expired() == 1
        assert registry.size() == 1
