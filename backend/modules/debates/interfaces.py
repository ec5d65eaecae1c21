"""
Debates module interfaces.

The API layer depends on IDebateService; the service depends on an
IDebateSessionRepository so storage can be swapped between Postgres and
the in-memory store.
"""

from typing import AsyncIterator, Optional, Protocol, runtime_checkable

from .models import (
    CreateDebateSessionRequest,
    DebateSession,
    DebateStreamPayload,
    StreamEvent,
    StreamInitRequest,
    StreamInitResponse,
    TurnHistoryEntry,
)
from .session_state import ResumeContext
from .stream_registry import StreamSessionEntry


@runtime_checkable
class IDebateSessionRepository(Protocol):
    """Persistence for debate sessions and their turn history."""

    def create(
        self,
        topic: str,
        model1_id: str,
        model2_id: str,
        adversarial_level: int,
    ) -> DebateSession:
        ...

    def get(self, session_id: str) -> Optional[DebateSession]:
        ...

    def list(self) -> list[DebateSession]:
        """Return all sessions, most recently updated first."""
        ...

    def append_turn(self, session_id: str, entry: TurnHistoryEntry) -> DebateSession:
        """
        Append a completed turn.

        Also records the turn's response id against the model that produced
        it and adds the turn cost to the session total.

        Raises:
            DebateSessionNotFoundError: If the session does not exist
        """
        ...


@runtime_checkable
class IDebateService(Protocol):
    """Debate operations exposed to the API layer."""

    def create_session(self, request: CreateDebateSessionRequest) -> DebateSession:
        ...

    def get_session(self, session_id: str) -> DebateSession:
        """
        Raises:
            DebateSessionNotFoundError: If the session does not exist
        """
        ...

    def list_sessions(self) -> list[DebateSession]:
        ...

    def get_resume_context(self, session_id: str) -> ResumeContext:
        """Work out which model speaks next and which response id it continues."""
        ...

    def init_stream(self, request: StreamInitRequest) -> StreamInitResponse:
        """
        Validate a turn and register a single-use stream ticket.

        Raises:
            StreamingDisabledError: If streaming is turned off
            DebateSessionNotFoundError: If ``session_id`` is unknown
            SessionRequiredError: If a turn after the first has no session
        """
        ...

    def consume_stream(
        self,
        task_id: str,
        model_key: str,
        session_id: str,
    ) -> StreamSessionEntry[DebateStreamPayload]:
        """
        Raises:
            StreamSessionNotFoundError: If the ticket is missing, expired,
                already used, or does not match the task and model
        """
        ...

    def stream_turn(
        self,
        entry: StreamSessionEntry[DebateStreamPayload],
    ) -> AsyncIterator[StreamEvent]:
        """Run one turn against its provider and yield SSE events."""
        ...
