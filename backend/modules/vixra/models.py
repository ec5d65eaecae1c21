"""
viXra mode data models.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


def _now() -> datetime:
    return datetime.now(timezone.utc)


class SectionResponse(BaseModel):
    """One model's output for a paper section. Extra response fields ride along."""

    model_config = ConfigDict(extra="allow")

    content: Optional[str] = None


# section id -> model id -> response
SectionResponses = dict[str, dict[str, SectionResponse]]


class PaperModel(BaseModel):
    """Model credited in an exported paper."""

    id: str
    name: str
    provider: str


class PaperSection(BaseModel):
    model_config = {"frozen": True}

    id: str
    name: str
    dependencies: tuple[str, ...] = ()


class VixraSession(BaseModel):
    """A persisted paper-generation session."""

    id: str
    variables: dict[str, str] = Field(default_factory=dict)
    template: str
    responses: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)


class CreateVixraSessionRequest(BaseModel):
    variables: dict[str, str]
    template: str = Field(..., min_length=1)
    responses: dict[str, Any] = Field(default_factory=dict)


class UpdateVixraSessionRequest(BaseModel):
    variables: Optional[dict[str, str]] = None
    template: Optional[str] = None
    responses: Optional[dict[str, Any]] = None


class ExportRequest(BaseModel):
    variables: dict[str, str] = Field(default_factory=dict)
    section_responses: SectionResponses = Field(default_factory=dict)
    selected_model_ids: list[str] = Field(default_factory=list)


class ExportResponse(BaseModel):
    filename: str
    content: str


class SectionsResponse(BaseModel):
    sections: list[PaperSection]
    science_categories: list[str]
    next_section: Optional[str] = None
