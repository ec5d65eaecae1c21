"""
Compare and battle data models.
"""

from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, Field

from providers.base import CallOptions, CostBreakdown, ModelInfo, TokenUsage


def _now() -> datetime:
    return datetime.now(timezone.utc)


class ModelResult(BaseModel):
    """One model's outcome within a comparison. Failures do not fail the batch."""

    content: str = ""
    status: Literal["success", "error"]
    response_time: int = 0
    error: Optional[str] = None
    reasoning: Optional[str] = None
    token_usage: Optional[TokenUsage] = None
    cost: Optional[CostBreakdown] = None
    model_info: Optional[ModelInfo] = None


class Comparison(BaseModel):
    """A persisted prompt comparison across several models."""

    id: str
    prompt: str
    selected_models: list[str]
    responses: dict[str, ModelResult]
    created_at: datetime = Field(default_factory=_now)


class CompareRequest(BaseModel):
    prompt: str = Field(..., min_length=1, max_length=4000)
    mode: Literal["compare", "generate", "reasoning"] = "compare"
    model_ids: list[str] = Field(..., min_length=1)


class CompareResponse(BaseModel):
    id: str
    responses: dict[str, ModelResult]


class RespondRequest(BaseModel):
    """Single-model call."""

    model_id: str = Field(..., min_length=1)
    prompt: str = Field(..., min_length=1)
    options: Optional[CallOptions] = None
