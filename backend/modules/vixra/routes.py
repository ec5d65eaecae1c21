"""
viXra mode endpoints.
"""

from fastapi import APIRouter, Depends, HTTPException, Query

from api.dependencies import get_vixra_service

from .exceptions import VixraSessionNotFoundError
from .models import (
    CreateVixraSessionRequest,
    ExportRequest,
    ExportResponse,
    SectionsResponse,
    UpdateVixraSessionRequest,
    VixraSession,
)
from .service import VixraService

router = APIRouter()


@router.post("/sessions", response_model=VixraSession, status_code=201)
async def create_session(
    request: CreateVixraSessionRequest,
    service: VixraService = Depends(get_vixra_service),
) -> VixraSession:
    return service.create_session(request)


@router.get("/sessions", response_model=list[VixraSession])
async def list_sessions(
    service: VixraService = Depends(get_vixra_service),
) -> list[VixraSession]:
    return service.list_sessions()


@router.get("/sessions/{session_id}", response_model=VixraSession)
async def get_session(
    session_id: str,
    service: VixraService = Depends(get_vixra_service),
) -> VixraSession:
    try:
        return service.get_session(session_id)
    except VixraSessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)


@router.put("/sessions/{session_id}", response_model=VixraSession)
async def update_session(
    session_id: str,
    request: UpdateVixraSessionRequest,
    service: VixraService = Depends(get_vixra_service),
) -> VixraSession:
    try:
        return service.update_session(session_id, request)
    except VixraSessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)


@router.get("/sections", response_model=SectionsResponse)
async def list_sections(
    completed: list[str] = Query(default=[]),
    service: VixraService = Depends(get_vixra_service),
) -> SectionsResponse:
    """Paper sections in generation order plus the next unlocked section."""
    return service.get_sections(completed)


@router.post("/export", response_model=ExportResponse)
async def export_paper(
    request: ExportRequest,
    service: VixraService = Depends(get_vixra_service),
) -> ExportResponse:
    """Render generated sections as a markdown paper."""
    return service.export(request)
