"""
viXra module.

Satirical paper generation sessions, section scheduling and markdown
export.
"""

from .interfaces import IVixraSessionRepository
from .models import (
    CreateVixraSessionRequest,
    ExportRequest,
    ExportResponse,
    PaperModel,
    PaperSection,
    SectionResponse,
    UpdateVixraSessionRequest,
    VixraSession,
)
from .exceptions import VixraSessionNotFoundError

__all__ = [
    "IVixraSessionRepository",
    "CreateVixraSessionRequest",
    "ExportRequest",
    "ExportResponse",
    "PaperModel",
    "PaperSection",
    "SectionResponse",
    "UpdateVixraSessionRequest",
    "VixraSession",
    "VixraSessionNotFoundError",
]
