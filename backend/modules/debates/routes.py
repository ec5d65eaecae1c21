"""
Debate API endpoints.

Session CRUD and the two-step SSE handshake:

1. POST /stream/init validates the turn and returns a short-lived ticket
2. GET /stream/{task_id}/{model_key}/{session_id} consumes the ticket and
   streams the turn
"""

from fastapi import APIRouter, Depends, HTTPException
from sse_starlette.sse import EventSourceResponse

from api.dependencies import get_debate_service

from .exceptions import (
    DebateSessionNotFoundError,
    SessionRequiredError,
    StreamingDisabledError,
    StreamSessionNotFoundError,
)
from .interfaces import IDebateService
from .models import (
    CreateDebateSessionRequest,
    DebateSessionCreated,
    DebateSessionResponse,
    DebateSessionSummary,
    StreamInitRequest,
    StreamInitResponse,
)
from .session_state import ResumeContext

router = APIRouter()

# Keep-alive comment interval for open SSE connections
HEARTBEAT_SECONDS = 15


@router.post("/session", response_model=DebateSessionCreated, status_code=201)
async def create_session(
    request: CreateDebateSessionRequest,
    service: IDebateService = Depends(get_debate_service),
) -> DebateSessionCreated:
    """Create a debate session between two models."""
    session = service.create_session(request)
    return DebateSessionCreated(
        id=session.id,
        topic=session.topic_text,
        model1_id=session.model1_id,
        model2_id=session.model2_id,
        adversarial_level=session.adversarial_level,
        created_at=session.created_at,
    )


@router.get("/sessions", response_model=list[DebateSessionSummary])
async def list_sessions(
    service: IDebateService = Depends(get_debate_service),
) -> list[DebateSessionSummary]:
    """List debate sessions, most recently updated first."""
    return [DebateSessionSummary.from_session(s) for s in service.list_sessions()]


@router.get("/session/{session_id}", response_model=DebateSessionResponse)
async def get_session(
    session_id: str,
    service: IDebateService = Depends(get_debate_service),
) -> DebateSessionResponse:
    """Get a debate session with its full turn history."""
    try:
        return DebateSessionResponse.from_session(service.get_session(session_id))
    except DebateSessionNotFoundError:
        raise HTTPException(status_code=404, detail="Debate session not found")


@router.get("/session/{session_id}/resume", response_model=ResumeContext)
async def get_resume_context(
    session_id: str,
    service: IDebateService = Depends(get_debate_service),
) -> ResumeContext:
    """Which model speaks next, on which turn, continuing which response."""
    try:
        return service.get_resume_context(session_id)
    except DebateSessionNotFoundError:
        raise HTTPException(status_code=404, detail="Debate session not found")


@router.post("/stream/init", response_model=StreamInitResponse)
async def init_stream(
    request: StreamInitRequest,
    service: IDebateService = Depends(get_debate_service),
) -> StreamInitResponse:
    """Validate a debate turn and register its stream ticket."""
    try:
        return service.init_stream(request)
    except StreamingDisabledError as e:
        raise HTTPException(status_code=503, detail=e.message)
    except DebateSessionNotFoundError:
        raise HTTPException(status_code=404, detail="Debate session not found")
    except SessionRequiredError as e:
        raise HTTPException(status_code=400, detail=e.message)


@router.get("/stream/{task_id}/{model_key}/{session_id}")
async def stream_turn(
    task_id: str,
    model_key: str,
    session_id: str,
    service: IDebateService = Depends(get_debate_service),
):
    """
    Stream one debate turn via SSE.

    Event format:
        event: <event_type>
        data: {..., "task_id": "...", "model_key": "...", "session_id": "...", "emitted_at": "..."}

    Event types:
    - stream.init: connection accepted
    - stream.status: progress phase (validating_session, resolving_provider,
      provider_ready, stream_start, persisting)
    - stream.chunk: reasoning or text delta with the cumulative text
    - stream.error: the turn failed; the stream ends
    - stream.complete: final content, usage and cost; the turn is persisted
    """
    try:
        entry = service.consume_stream(task_id, model_key, session_id)
    except StreamingDisabledError as e:
        raise HTTPException(status_code=503, detail=e.message)
    except StreamSessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)

    async def event_generator():
        async for event in service.stream_turn(entry):
            yield event.to_sse()

    return EventSourceResponse(
        event_generator(),
        media_type="text/event-stream",
        ping=HEARTBEAT_SECONDS,
    )


@router.post("/stream", status_code=410)
async def legacy_stream() -> None:
    """Single-request streaming was replaced by the init/stream handshake."""
    raise HTTPException(
        status_code=410,
        detail="This endpoint has been replaced. Use POST /api/debate/stream/init then GET /api/debate/stream/{task_id}/{model_key}/{session_id}",
    )
