"""
Debate session reconciliation.

DebateSessionState is an immutable snapshot of one debate as a client
sees it: the message list, the turn history, per-model continuation ids,
the Robert's Rules phase, and jury annotations. Every transition returns a
new snapshot, so replaying a stream or rehydrating from storage can be
tested without any UI runtime.

Turns and messages are matched by response id when both sides carry one,
otherwise by (turn number, model id). Re-delivering the same turn replaces
it in place.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from providers.base import (
    CostBreakdown,
    ModelCapabilities,
    ModelConfig,
    ModelInfo,
    ModelPricing,
    TokenUsage,
)

from .models import DebatePhase, DebateSession, TurnHistoryEntry


PHASES: tuple[DebatePhase, ...] = (
    DebatePhase.OPENING_STATEMENTS,
    DebatePhase.REBUTTALS,
    DebatePhase.CLOSING_ARGUMENTS,
)

ZERO_PRICING = ModelPricing(input_per_million=Decimal(0), output_per_million=Decimal(0))


def _now() -> datetime:
    return datetime.now(timezone.utc)


class DebateMessage(BaseModel):
    """A rendered debate turn."""

    model_config = ConfigDict(frozen=True)

    id: str
    model_id: str
    model_name: str
    content: str
    round: int
    timestamp: datetime = Field(default_factory=_now)
    reasoning: Optional[str] = None
    system_prompt: Optional[str] = None
    response_time: int = 0
    response_id: Optional[str] = None
    token_usage: Optional[TokenUsage] = None
    cost: Optional[CostBreakdown] = None
    model_info: Optional[ModelInfo] = None


class JuryAnnotation(BaseModel):
    """A juror's running notes on one speaker."""

    model_config = ConfigDict(frozen=True)

    model_id: str
    label: str
    points: int = 0
    tags: tuple[str, ...] = ()
    notes: str = ""
    needs_review: bool = False


class ResumeContext(BaseModel):
    """Who speaks next and what they continue from."""

    model_config = ConfigDict(frozen=True)

    next_model_id: str
    previous_response_id: Optional[str] = None
    next_turn: int


def _same_turn(
    response_a: Optional[str],
    response_b: Optional[str],
    turn_a: tuple[int, str],
    turn_b: tuple[int, str],
) -> bool:
    if response_a and response_b:
        return response_a == response_b
    return turn_a == turn_b


class DebateSessionState(BaseModel):
    """Immutable debate snapshot; every method returns a new snapshot."""

    model_config = ConfigDict(frozen=True)

    messages: tuple[DebateMessage, ...] = ()
    turn_history: tuple[TurnHistoryEntry, ...] = ()
    current_round: int = 0
    is_running: bool = False
    debate_session_id: Optional[str] = None
    model_a_id: Optional[str] = None
    model_b_id: Optional[str] = None
    model_a_last_response_id: Optional[str] = None
    model_b_last_response_id: Optional[str] = None
    phase_index: int = 0
    phase_timestamps: dict[DebatePhase, datetime] = Field(default_factory=dict)
    floor_open: bool = True
    jury: dict[str, JuryAnnotation] = Field(default_factory=dict)
    resume: Optional[ResumeContext] = None

    @classmethod
    def initial(cls, now: Optional[datetime] = None) -> "DebateSessionState":
        return cls(phase_timestamps={PHASES[0]: now or _now()})

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    def start(self, debate_session_id: str, model_a_id: str, model_b_id: str) -> "DebateSessionState":
        return self.model_copy(update={
            "debate_session_id": debate_session_id,
            "model_a_id": model_a_id,
            "model_b_id": model_b_id,
            "is_running": True,
        })

    def stop(self) -> "DebateSessionState":
        return self.model_copy(update={"is_running": False})

    def reset_session(self, now: Optional[datetime] = None) -> "DebateSessionState":
        return DebateSessionState.initial(now)

    def calculate_total_cost(self) -> Decimal:
        return sum((m.cost.total for m in self.messages if m.cost), Decimal(0))

    # ------------------------------------------------------------------
    # Messages and turn history
    # ------------------------------------------------------------------

    def add_message(self, message: DebateMessage) -> "DebateSessionState":
        """Append a message, or replace the one it re-delivers."""
        messages = list(self.messages)
        for index, existing in enumerate(messages):
            if _same_turn(
                existing.response_id,
                message.response_id,
                (existing.round, existing.model_id),
                (message.round, message.model_id),
            ):
                messages[index] = message
                break
        else:
            messages.append(message)

        jury = dict(self.jury)
        annotation = jury.get(message.model_id)
        if annotation is not None:
            jury[message.model_id] = annotation.model_copy(update={"needs_review": True})

        return self.model_copy(update={
            "messages": tuple(messages),
            "jury": jury,
            "current_round": max(self.current_round, message.round),
        })

    def upsert_turn_history(self, entry: TurnHistoryEntry) -> "DebateSessionState":
        """Insert or replace a turn, keeping history ordered by turn number."""
        history = list(self.turn_history)
        for index, existing in enumerate(history):
            if _same_turn(
                existing.response_id,
                entry.response_id,
                (existing.turn, existing.model_id),
                (entry.turn, entry.model_id),
            ):
                history[index] = entry
                break
        else:
            history.append(entry)
        history.sort(key=lambda e: e.turn)

        update: dict = {"turn_history": tuple(history)}
        if entry.response_id:
            if entry.model_id == self.model_a_id:
                update["model_a_last_response_id"] = entry.response_id
            elif entry.model_id == self.model_b_id:
                update["model_b_last_response_id"] = entry.response_id
        return self.model_copy(update=update)

    def hydrate_from_session(
        self,
        session: DebateSession,
        models: Mapping[str, ModelConfig],
        now: Optional[datetime] = None,
    ) -> "DebateSessionState":
        """
        Replace all state from a persisted session.

        Messages are rebuilt from the turn history. Catalog data fills in
        names and pricing; the reasoning capability is inferred from whether
        the turn recorded reasoning text.
        """
        history = sorted(session.turn_history, key=lambda e: e.turn)
        messages = tuple(self._message_from_turn(session.id, entry, models) for entry in history)

        state = DebateSessionState.initial(now).model_copy(update={
            "messages": messages,
            "turn_history": tuple(history),
            "current_round": max((e.turn for e in history), default=0),
            "debate_session_id": session.id,
            "model_a_id": session.model1_id,
            "model_b_id": session.model2_id,
            "model_a_last_response_id": (session.model1_response_ids or [None])[-1],
            "model_b_last_response_id": (session.model2_response_ids or [None])[-1],
        })
        state = state.initialize_jury([
            (model_id, models[model_id].name if model_id in models else model_id)
            for model_id in (session.model1_id, session.model2_id)
        ])
        return state.model_copy(update={
            "resume": state.get_resume_context(session.model1_id, session.model2_id),
        })

    @staticmethod
    def _message_from_turn(
        session_id: str,
        entry: TurnHistoryEntry,
        models: Mapping[str, ModelConfig],
    ) -> DebateMessage:
        config = models.get(entry.model_id)
        cost = entry.cost_breakdown or CostBreakdown(total=entry.cost)
        return DebateMessage(
            id=entry.response_id or f"{session_id}-turn-{entry.turn}-{entry.model_id}",
            model_id=entry.model_id,
            model_name=config.name if config else entry.model_id,
            content=entry.content,
            round=entry.turn,
            timestamp=entry.created_at,
            reasoning=entry.reasoning,
            response_time=entry.duration_ms or 0,
            response_id=entry.response_id,
            token_usage=entry.token_usage,
            cost=cost,
            model_info=ModelInfo(
                capabilities=ModelCapabilities(
                    reasoning=bool(entry.reasoning),
                    streaming=True,
                ),
                pricing=config.pricing if config else ZERO_PRICING,
            ),
        )

    def get_resume_context(self, model1_id: str, model2_id: str) -> ResumeContext:
        """
        Work out whose turn is next.

        Model 1 speaks on odd turns, so after an odd highest turn model 2 is
        next. The continuation id is that model's latest recorded response.
        """
        highest = max((e.turn for e in self.turn_history), default=0)
        next_model = model2_id if highest % 2 == 1 else model1_id

        previous = next(
            (
                e.response_id
                for e in reversed(self.turn_history)
                if e.model_id == next_model and e.response_id
            ),
            None,
        )
        if previous is None:
            if next_model == self.model_a_id:
                previous = self.model_a_last_response_id
            elif next_model == self.model_b_id:
                previous = self.model_b_last_response_id

        return ResumeContext(
            next_model_id=next_model,
            previous_response_id=previous,
            next_turn=highest + 1,
        )

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------

    @property
    def current_phase(self) -> DebatePhase:
        return PHASES[min(self.phase_index, len(PHASES) - 1)]

    def advance_phase(self, now: Optional[datetime] = None) -> "DebateSessionState":
        """Move to the next phase; closing arguments is terminal."""
        if self.phase_index >= len(PHASES) - 1:
            return self
        next_index = self.phase_index + 1
        phase = PHASES[next_index]
        return self.model_copy(update={
            "phase_index": next_index,
            "phase_timestamps": {**self.phase_timestamps, phase: now or _now()},
            "floor_open": phase != DebatePhase.CLOSING_ARGUMENTS,
        })

    def reopen_phase(self, phase: DebatePhase, now: Optional[datetime] = None) -> "DebateSessionState":
        timestamps = dict(self.phase_timestamps)
        timestamps.setdefault(phase, now or _now())
        return self.model_copy(update={
            "phase_index": PHASES.index(phase),
            "phase_timestamps": timestamps,
            "floor_open": phase != DebatePhase.CLOSING_ARGUMENTS,
        })

    def toggle_floor(self) -> "DebateSessionState":
        return self.model_copy(update={"floor_open": not self.floor_open})

    # ------------------------------------------------------------------
    # Jury
    # ------------------------------------------------------------------

    def initialize_jury(self, speakers: Iterable[tuple[str, str]]) -> "DebateSessionState":
        """
        Ensure one annotation per active speaker.

        Existing annotations keep their scores (relabelled if the name
        changed); speakers no longer present are dropped.
        """
        jury: dict[str, JuryAnnotation] = {}
        for model_id, label in speakers:
            existing = self.jury.get(model_id)
            if existing is None:
                jury[model_id] = JuryAnnotation(model_id=model_id, label=label)
            elif existing.label != label:
                jury[model_id] = existing.model_copy(update={"label": label})
            else:
                jury[model_id] = existing
        return self.model_copy(update={"jury": jury})

    def _update_annotation(self, model_id: str, **changes) -> "DebateSessionState":
        annotation = self.jury.get(model_id)
        if annotation is None:
            return self
        return self.model_copy(update={
            "jury": {**self.jury, model_id: annotation.model_copy(update=changes)},
        })

    def increment_jury_points(self, model_id: str) -> "DebateSessionState":
        annotation = self.jury.get(model_id)
        if annotation is None:
            return self
        return self._update_annotation(model_id, points=annotation.points + 1)

    def decrement_jury_points(self, model_id: str) -> "DebateSessionState":
        annotation = self.jury.get(model_id)
        if annotation is None:
            return self
        return self._update_annotation(model_id, points=max(0, annotation.points - 1))

    def toggle_jury_tag(self, model_id: str, tag: str) -> "DebateSessionState":
        annotation = self.jury.get(model_id)
        if annotation is None:
            return self
        if tag in annotation.tags:
            tags = tuple(t for t in annotation.tags if t != tag)
        else:
            tags = annotation.tags + (tag,)
        return self._update_annotation(model_id, tags=tags)

    def set_jury_notes(self, model_id: str, notes: str) -> "DebateSessionState":
        return self._update_annotation(model_id, notes=notes)

    def mark_jury_reviewed(self, model_id: str, reviewed: bool = True) -> "DebateSessionState":
        return self._update_annotation(model_id, needs_review=not reviewed)

    def has_unresolved_jury_tasks(self) -> bool:
        return any(a.needs_review for a in self.jury.values())
