"""
Debate service.

Session CRUD plus the two-step streaming handshake: ``init_stream``
validates and normalizes a turn and registers a ticket, ``stream_turn``
runs the turn against its provider and yields SSE events, persisting the
turn before the final ``stream.complete``.
"""

import logging
import time
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, AsyncIterator, Optional

from providers.base import CallOptions, ModelResponse
from providers.registry import ProviderRegistry
from shared.config import Settings, get_settings
from shared.exceptions import ModelCompareError, ModelNotFoundError

from .exceptions import (
    DebateSessionNotFoundError,
    SessionRequiredError,
    StreamingDisabledError,
    StreamSessionNotFoundError,
)
from .interfaces import IDebateService, IDebateSessionRepository
from .models import (
    CreateDebateSessionRequest,
    DebateSession,
    DebateStreamPayload,
    StreamEvent,
    StreamEventType,
    StreamInitRequest,
    StreamInitResponse,
    TurnHistoryEntry,
)
from .prompts import build_turn_messages, get_intensity
from .session_state import DebateSessionState, ResumeContext
from .stream_registry import StreamSessionEntry, StreamSessionRegistry

logger = logging.getLogger(__name__)

DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 16384


# ============================================================================
# Turn option normalization
# ============================================================================


def normalize_reasoning_effort(value: Optional[str]) -> str:
    effort = (value or "").strip().lower()
    if effort == "minimal":
        return "low"
    if effort in ("low", "medium", "high"):
        return effort
    return "medium"


def normalize_reasoning_summary(value: Optional[str]) -> str:
    summary = (value or "").strip().lower()
    if summary == "concise":
        return "auto"
    if summary in ("auto", "detailed"):
        return summary
    return "detailed"


def normalize_verbosity(value: Optional[str]) -> str:
    verbosity = (value or "").strip().lower()
    if verbosity in ("low", "medium", "high"):
        return verbosity
    return "high"


def normalize_temperature(value: Optional[float]) -> float:
    if value is None:
        return DEFAULT_TEMPERATURE
    return min(max(float(value), 0.0), 2.0)


def normalize_max_tokens(value: Optional[int]) -> int:
    if value is None or value < 1:
        return DEFAULT_MAX_TOKENS
    return int(value)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class DebateService(IDebateService):
    """
    Debate service backed by a session repository and the provider registry.

    Stream tickets live in an in-process StreamSessionRegistry, so the
    init and SSE requests for one turn must reach the same process.
    """

    def __init__(
        self,
        repository: IDebateSessionRepository,
        providers: ProviderRegistry,
        stream_registry: Optional[StreamSessionRegistry[DebateStreamPayload]] = None,
        settings: Optional[Settings] = None,
    ):
        self._repository = repository
        self._providers = providers
        self._streams = stream_registry or StreamSessionRegistry()
        self._settings = settings or get_settings()

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def create_session(self, request: CreateDebateSessionRequest) -> DebateSession:
        session = self._repository.create(
            topic=request.topic,
            model1_id=request.model1_id,
            model2_id=request.model2_id,
            adversarial_level=request.adversarial_level,
        )
        logger.info("Created debate session %s", session.id)
        return session

    def get_session(self, session_id: str) -> DebateSession:
        session = self._repository.get(session_id)
        if session is None:
            raise DebateSessionNotFoundError(session_id)
        return session

    def list_sessions(self) -> list[DebateSession]:
        return self._repository.list()

    def get_resume_context(self, session_id: str) -> ResumeContext:
        session = self.get_session(session_id)
        models = {config.id: config for config in self._providers.get_all_models()}
        state = DebateSessionState.initial().hydrate_from_session(session, models)
        return state.resume

    # ------------------------------------------------------------------
    # Streaming handshake
    # ------------------------------------------------------------------

    def _require_streaming(self) -> None:
        if not self._settings.streaming_enabled:
            raise StreamingDisabledError()

    def _resolve_session(self, request: StreamInitRequest) -> DebateSession:
        if request.session_id:
            return self.get_session(request.session_id)
        if request.turn_number > 1:
            raise SessionRequiredError(request.turn_number)
        return self._repository.create(
            topic=request.topic,
            model1_id=request.model1_id,
            model2_id=request.model2_id,
            adversarial_level=request.intensity_level,
        )

    def init_stream(self, request: StreamInitRequest) -> StreamInitResponse:
        self._require_streaming()
        session = self._resolve_session(request)

        payload = DebateStreamPayload(
            model_id=request.model_id,
            topic=request.topic,
            role=request.role,
            position=request.role.position,
            intensity_level=request.intensity_level,
            intensity_guidance=(
                request.intensity_guidance or get_intensity(request.intensity_level).full_text
            ),
            opponent_message=request.opponent_message,
            previous_response_id=request.previous_response_id,
            turn_number=request.turn_number,
            reasoning_effort=normalize_reasoning_effort(request.reasoning_effort),
            reasoning_summary=normalize_reasoning_summary(request.reasoning_summary),
            reasoning_verbosity=normalize_verbosity(request.reasoning_verbosity),
            temperature=normalize_temperature(request.temperature),
            max_tokens=normalize_max_tokens(request.max_tokens),
            debate_session_id=session.id,
            model1_id=request.model1_id,
            model2_id=request.model2_id,
        )

        entry = self._streams.create_session(
            task_id=payload.task_id,
            model_key=payload.model_id,
            payload=payload,
        )
        logger.info(
            "Registered stream %s for %s (expires in %ss)",
            entry.session_id,
            entry.task_id,
            int(entry.expires_at - entry.created_at),
        )
        return StreamInitResponse(
            session_id=entry.session_id,
            task_id=entry.task_id,
            model_key=entry.model_key,
            debate_session_id=session.id,
            expires_at=datetime.fromtimestamp(entry.expires_at, tz=timezone.utc),
        )

    def consume_stream(
        self,
        task_id: str,
        model_key: str,
        session_id: str,
    ) -> StreamSessionEntry[DebateStreamPayload]:
        self._require_streaming()
        entry = self._streams.consume_session(session_id, task_id=task_id, model_key=model_key)
        if entry is None:
            raise StreamSessionNotFoundError(session_id)
        return entry

    # ------------------------------------------------------------------
    # Streaming harness
    # ------------------------------------------------------------------

    def _previous_response_id(self, payload: DebateStreamPayload, session: DebateSession) -> Optional[str]:
        if payload.previous_response_id:
            return payload.previous_response_id
        if payload.turn_number > 2:
            ids = session.response_ids_for(payload.model_id)
            return ids[-1] if ids else None
        return None

    async def stream_turn(
        self,
        entry: StreamSessionEntry[DebateStreamPayload],
    ) -> AsyncIterator[StreamEvent]:
        payload = entry.payload

        def event(event_type: StreamEventType, **data: Any) -> StreamEvent:
            return StreamEvent(
                type=event_type,
                task_id=entry.task_id,
                model_key=entry.model_key,
                session_id=entry.session_id,
                payload=data,
            )

        def status(phase: str, **data: Any) -> StreamEvent:
            return event(StreamEventType.STATUS, phase=phase, **data)

        yield event(
            StreamEventType.INIT,
            debate_session_id=payload.debate_session_id,
            turn_number=payload.turn_number,
            model_id=payload.model_id,
            role=payload.role.value,
            connected_at=_now_iso(),
        )

        try:
            yield status("validating_session")
            session = self.get_session(payload.debate_session_id)
            previous_response_id = self._previous_response_id(payload, session)

            yield status("resolving_provider")
            config = self._providers.get_model_by_id(payload.model_id)
            if config is None:
                raise ModelNotFoundError(payload.model_id)
            yield status("provider_ready", provider=config.provider, model=config.name)

            options = CallOptions(
                temperature=payload.temperature if config.supports_temperature else None,
                max_tokens=payload.max_tokens,
                reasoning_effort=payload.reasoning_effort if config.capabilities.reasoning else None,
                previous_response_id=previous_response_id,
            )

            yield status("stream_start")
            started = time.perf_counter()
            text_parts: list[str] = []
            reasoning_parts: list[str] = []
            response: Optional[ModelResponse] = None

            async for chunk in self._providers.stream_model(
                build_turn_messages(payload), payload.model_id, options
            ):
                if chunk.type == "complete":
                    response = chunk.response
                    continue
                parts = reasoning_parts if chunk.type == "reasoning" else text_parts
                parts.append(chunk.delta)
                yield event(
                    StreamEventType.CHUNK,
                    type=chunk.type,
                    delta=chunk.delta,
                    cumulative="".join(parts),
                    timestamp=_now_iso(),
                )

            duration_ms = int((time.perf_counter() - started) * 1000)
            if response is None:
                response = ModelResponse(
                    content="".join(text_parts),
                    reasoning="".join(reasoning_parts) or None,
                    response_time=duration_ms,
                )

            yield status("persisting")
            turn = TurnHistoryEntry(
                turn=payload.turn_number,
                model_id=payload.model_id,
                content=response.content,
                reasoning=response.reasoning,
                response_id=response.response_id,
                token_usage=response.token_usage,
                cost=response.cost.total if response.cost else Decimal(0),
                cost_breakdown=response.cost,
                duration_ms=duration_ms,
                metadata={
                    "role": payload.role.value,
                    "intensity_level": payload.intensity_level,
                    "reasoning_effort": payload.reasoning_effort,
                },
            )
            self._repository.append_turn(payload.debate_session_id, turn)
            logger.info(
                "Persisted turn %s of %s (%s)",
                payload.turn_number,
                payload.debate_session_id,
                payload.model_id,
            )

            yield event(
                StreamEventType.COMPLETE,
                response_id=response.response_id,
                token_usage=response.token_usage.model_dump() if response.token_usage else None,
                cost=response.cost.model_dump(mode="json") if response.cost else None,
                content=response.content,
                reasoning=response.reasoning,
                metadata={
                    "turn_number": payload.turn_number,
                    "debate_session_id": payload.debate_session_id,
                    "response_time": response.response_time,
                    "previous_response_id": previous_response_id,
                },
            )

        except ModelCompareError as e:
            logger.warning("Debate stream %s failed: %s", entry.task_id, e.message)
            yield event(StreamEventType.ERROR, error=e.message, code=e.code)
        except Exception as e:
            logger.exception("Debate stream %s failed", entry.task_id)
            yield event(StreamEventType.ERROR, error=str(e), code="STREAM_ERROR")
