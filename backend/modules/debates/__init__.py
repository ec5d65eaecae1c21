"""
Debates module.

Two-model debates streamed turn by turn over SSE, with persisted turn
history and a pure state machine that reconciles client state.

Public API:
- IDebateService: Interface for debate operations
- DebateSessionState: Reconciliation state machine
- StreamSessionRegistry: Single-use stream tickets
"""

from .interfaces import IDebateService, IDebateSessionRepository
from .models import (
    CreateDebateSessionRequest,
    DebatePhase,
    DebateRole,
    DebateSession,
    DebateStreamPayload,
    StreamEvent,
    StreamEventType,
    StreamInitRequest,
    StreamInitResponse,
    TurnHistoryEntry,
)
from .session_state import (
    DebateMessage,
    DebateSessionState,
    JuryAnnotation,
    ResumeContext,
)
from .stream_registry import StreamSessionEntry, StreamSessionRegistry
from .exceptions import (
    DebateError,
    DebateSessionNotFoundError,
    SessionRequiredError,
    StreamingDisabledError,
    StreamSessionNotFoundError,
)

__all__ = [
    # Interfaces
    "IDebateService",
    "IDebateSessionRepository",
    # Models
    "CreateDebateSessionRequest",
    "DebatePhase",
    "DebateRole",
    "DebateSession",
    "DebateStreamPayload",
    "StreamEvent",
    "StreamEventType",
    "StreamInitRequest",
    "StreamInitResponse",
    "TurnHistoryEntry",
    # State
    "DebateMessage",
    "DebateSessionState",
    "JuryAnnotation",
    "ResumeContext",
    "StreamSessionEntry",
    "StreamSessionRegistry",
    # Exceptions
    "DebateError",
    "DebateSessionNotFoundError",
    "SessionRequiredError",
    "StreamingDisabledError",
    "StreamSessionNotFoundError",
]
