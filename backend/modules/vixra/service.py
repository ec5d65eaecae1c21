"""
viXra service.

Session bookkeeping for satirical paper generation, section scheduling
and markdown export. Section text itself is produced by the compare and
template endpoints.
"""

import logging
from datetime import datetime
from typing import Optional, Sequence

from providers.registry import ProviderRegistry

from .exceptions import VixraSessionNotFoundError
from .interfaces import IVixraSessionRepository
from .models import (
    CreateVixraSessionRequest,
    ExportRequest,
    ExportResponse,
    PaperModel,
    SectionsResponse,
    UpdateVixraSessionRequest,
    VixraSession,
)
from .paper import (
    SCIENCE_CATEGORIES,
    SECTION_ORDER,
    export_vixra_paper,
    get_next_eligible_section,
    vixra_export_filename,
)

logger = logging.getLogger(__name__)


class VixraService:
    def __init__(self, repository: IVixraSessionRepository, providers: ProviderRegistry):
        self._repository = repository
        self._providers = providers

    def create_session(self, request: CreateVixraSessionRequest) -> VixraSession:
        session = self._repository.create(request.variables, request.template, request.responses)
        logger.info("Created viXra session %s", session.id)
        return session

    def get_session(self, session_id: str) -> VixraSession:
        session = self._repository.get(session_id)
        if session is None:
            raise VixraSessionNotFoundError(session_id)
        return session

    def update_session(self, session_id: str, request: UpdateVixraSessionRequest) -> VixraSession:
        session = self._repository.update(
            session_id,
            variables=request.variables,
            template=request.template,
            responses=request.responses,
        )
        if session is None:
            raise VixraSessionNotFoundError(session_id)
        return session

    def list_sessions(self) -> list[VixraSession]:
        return self._repository.list()

    def get_sections(self, completed: Sequence[str] = ()) -> SectionsResponse:
        return SectionsResponse(
            sections=list(SECTION_ORDER),
            science_categories=list(SCIENCE_CATEGORIES),
            next_section=get_next_eligible_section(list(completed)),
        )

    def _resolve_models(self, model_ids: Sequence[str]) -> list[PaperModel]:
        models = []
        for model_id in model_ids:
            config = self._providers.get_model_by_id(model_id)
            if config is None:
                # Unknown ids still get credited by id
                models.append(PaperModel(id=model_id, name=model_id, provider="Unknown"))
            else:
                models.append(PaperModel(id=config.id, name=config.name, provider=config.provider))
        return models

    def export(self, request: ExportRequest, now: Optional[datetime] = None) -> ExportResponse:
        """Render the paper to markdown along with a download filename."""
        models = self._resolve_models(request.selected_model_ids)
        content = export_vixra_paper(request.variables, request.section_responses, models, now=now)
        filename = vixra_export_filename(request.variables, request.section_responses, today=now)
        return ExportResponse(filename=filename, content=content)
