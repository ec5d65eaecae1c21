"""
Debates module data models.

These models define the persisted debate session, its turn history, and
the payloads exchanged by the streaming handshake.
"""

import json
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from providers.base import CostBreakdown, TokenUsage


def _now() -> datetime:
    return datetime.now(timezone.utc)


class DebateRole(str, Enum):
    """Side a model argues in a debate."""

    AFFIRMATIVE = "AFFIRMATIVE"
    NEGATIVE = "NEGATIVE"

    @property
    def position(self) -> str:
        return "FOR" if self is DebateRole.AFFIRMATIVE else "AGAINST"


class DebatePhase(str, Enum):
    """Robert's Rules phases, in order."""

    OPENING_STATEMENTS = "OPENING_STATEMENTS"
    REBUTTALS = "REBUTTALS"
    CLOSING_ARGUMENTS = "CLOSING_ARGUMENTS"


# ============================================================================
# Persisted session
# ============================================================================


class TurnHistoryEntry(BaseModel):
    """
    One completed debate turn.

    Identity: ``response_id`` when present, else ``(turn, model_id)``.
    """

    turn: int = Field(..., ge=1)
    model_id: str
    content: str = ""
    reasoning: Optional[str] = None
    response_id: Optional[str] = None
    token_usage: Optional[TokenUsage] = None
    cost: Decimal = Decimal(0)
    cost_breakdown: Optional[CostBreakdown] = None
    duration_ms: Optional[int] = None
    created_at: datetime = Field(default_factory=_now)
    structured_output: Optional[Any] = None
    summary: Optional[str] = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def key(self) -> tuple:
        if self.response_id:
            return ("response", self.response_id)
        return ("turn", self.turn, self.model_id)


class DebateSession(BaseModel):
    """A persisted two-model debate."""

    id: str
    topic_text: str
    model1_id: str
    model2_id: str
    adversarial_level: int
    turn_history: list[TurnHistoryEntry] = Field(default_factory=list)
    model1_response_ids: list[str] = Field(default_factory=list)
    model2_response_ids: list[str] = Field(default_factory=list)
    total_cost: Decimal = Decimal(0)
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)

    def response_ids_for(self, model_id: str) -> list[str]:
        if model_id == self.model1_id:
            return self.model1_response_ids
        return self.model2_response_ids


class CreateDebateSessionRequest(BaseModel):
    """Request to create a debate session."""

    topic: str = Field(..., min_length=1, max_length=2000)
    model1_id: str = Field(..., min_length=1)
    model2_id: str = Field(..., min_length=1)
    adversarial_level: int = Field(..., ge=1, le=4)


class DebateSessionCreated(BaseModel):
    id: str
    topic: str
    model1_id: str
    model2_id: str
    adversarial_level: int
    created_at: datetime


class DebateSessionResponse(BaseModel):
    """Full session as returned by the API."""

    id: str
    topic: str
    model1_id: str
    model2_id: str
    adversarial_level: int
    turn_history: list[TurnHistoryEntry]
    model1_response_ids: list[str]
    model2_response_ids: list[str]
    total_cost: Decimal
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_session(cls, session: DebateSession) -> "DebateSessionResponse":
        return cls(
            topic=session.topic_text,
            **session.model_dump(exclude={"topic_text"}),
        )


class DebateSessionSummary(BaseModel):
    """Session list item."""

    id: str
    topic: str
    model1_id: str
    model2_id: str
    adversarial_level: int
    total_cost: Decimal
    turn_count: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_session(cls, session: DebateSession) -> "DebateSessionSummary":
        return cls(
            id=session.id,
            topic=session.topic_text,
            model1_id=session.model1_id,
            model2_id=session.model2_id,
            adversarial_level=session.adversarial_level,
            total_cost=session.total_cost,
            turn_count=len(session.turn_history),
            created_at=session.created_at,
            updated_at=session.updated_at,
        )


# ============================================================================
# Streaming handshake
# ============================================================================


class StreamInitRequest(BaseModel):
    """Turn request validated by POST /stream/init."""

    model_id: str = Field(..., min_length=1)
    topic: str = Field(..., min_length=1)
    role: DebateRole
    intensity_level: int = Field(..., ge=1, le=4)
    turn_number: int = Field(..., ge=1)
    model1_id: str = Field(..., min_length=1)
    model2_id: str = Field(..., min_length=1)
    session_id: Optional[str] = None
    opponent_message: Optional[str] = None
    previous_response_id: Optional[str] = None
    intensity_guidance: Optional[str] = None
    reasoning_effort: Optional[str] = None
    reasoning_summary: Optional[str] = None
    reasoning_verbosity: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None

    @field_validator("role", mode="before")
    @classmethod
    def upper_role(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value

    @field_validator("model_id", "topic", "model1_id", "model2_id")
    @classmethod
    def strip_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class DebateStreamPayload(BaseModel):
    """Normalized turn parameters held by a stream ticket."""

    model_id: str
    topic: str
    role: DebateRole
    position: Literal["FOR", "AGAINST"]
    intensity_level: int
    intensity_guidance: str = ""
    opponent_message: Optional[str] = None
    previous_response_id: Optional[str] = None
    turn_number: int
    reasoning_effort: Literal["low", "medium", "high"] = "medium"
    reasoning_summary: Literal["auto", "detailed"] = "detailed"
    reasoning_verbosity: Literal["low", "medium", "high"] = "high"
    temperature: float = 0.7
    max_tokens: int = 16384
    debate_session_id: str
    model1_id: str
    model2_id: str

    @property
    def task_id(self) -> str:
        return f"{self.debate_session_id}:turn-{self.turn_number}:model-{self.model_id}"


class StreamInitResponse(BaseModel):
    session_id: str
    task_id: str
    model_key: str
    debate_session_id: str
    expires_at: datetime


class StreamEventType(str, Enum):
    """SSE event names emitted for a debate turn."""

    INIT = "stream.init"
    STATUS = "stream.status"
    CHUNK = "stream.chunk"
    ERROR = "stream.error"
    COMPLETE = "stream.complete"


class StreamEvent(BaseModel):
    """
    One SSE event.

    ``payload`` must already be JSON-safe. It is flattened into the event
    data next to the ticket identity and ``emitted_at``.
    """

    type: StreamEventType
    task_id: str
    model_key: str
    session_id: str
    emitted_at: datetime = Field(default_factory=_now)
    payload: dict[str, Any] = Field(default_factory=dict)

    def to_sse(self) -> dict[str, str]:
        """Format for sse-starlette's EventSourceResponse."""
        data = {
            **self.payload,
            "task_id": self.task_id,
            "model_key": self.model_key,
            "session_id": self.session_id,
            "emitted_at": self.emitted_at.isoformat(),
        }
        return {"event": self.type.value, "data": json.dumps(data)}
