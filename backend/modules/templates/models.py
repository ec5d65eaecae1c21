"""
Templates module data models.

Covers the variable registry schema, render results, the parsed
document tree and compiled templates served over HTTP.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


MISSING = "MISSING"

VariableType = Literal["string", "number", "enum", "date"]
VariablePolicy = Literal["error", "warn", "keep"]


# ============================================================================
# Variable registry
# ============================================================================


class VariableSchema(BaseModel):
    """Declared variable for a prompt mode."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: VariableType = "string"
    required: bool = False
    description: str = ""
    enum: Optional[list[str]] = None
    default: Optional[str] = None
    aliases: list[str] = Field(default_factory=list)
    secret: bool = False


class ValidationResult(BaseModel):
    """Outcome of checking variables against a mode's registry."""

    is_valid: bool
    errors: list[str] = Field(default_factory=list)


class ValidateVariablesRequest(BaseModel):
    """Request body for variable validation."""

    mode: str
    variables: dict[str, str] = Field(default_factory=dict)


# ============================================================================
# Rendering
# ============================================================================


class RenderResult(BaseModel):
    """Rendered template plus the value each placeholder resolved to."""

    resolved: str
    mapping: dict[str, str] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)


# ============================================================================
# Parsed documents
# ============================================================================


class TemplateSections(BaseModel):
    """Structured parts of a template body.

    ``user_template`` falls back to the whole body when the template has
    no ``####`` section headers.
    """

    system_instructions: Optional[str] = None
    user_template: str = ""
    context_template: Optional[str] = None
    response_guidelines: Optional[str] = None


class FrontMatter(BaseModel):
    """Optional YAML header of a template file."""

    model_config = ConfigDict(extra="allow")

    mode: Optional[str] = None
    version: Optional[str] = None
    description: Optional[str] = None


class ParsedTemplate(BaseModel):
    id: str
    name: str
    content: str
    sections: TemplateSections
    line: int


class ParsedCategory(BaseModel):
    id: str
    name: str
    templates: list[ParsedTemplate] = Field(default_factory=list)


class TemplateDocument(BaseModel):
    """One markdown template file after parsing."""

    title: Optional[str] = None
    front_matter: FrontMatter = Field(default_factory=FrontMatter)
    categories: list[ParsedCategory] = Field(default_factory=list)


# ============================================================================
# Compiled templates
# ============================================================================


class TemplateMetadata(BaseModel):
    file_path: str
    last_modified: datetime
    version: str
    description: str


class CompiledTemplate(BaseModel):
    """A validated template ready for rendering."""

    id: str
    name: str
    mode: Optional[str] = None
    category: str
    category_id: str
    content: str
    variables: list[str] = Field(default_factory=list)
    sections: TemplateSections
    metadata: TemplateMetadata


class CompiledCategory(BaseModel):
    id: str
    name: str
    mode: Optional[str] = None
    file_path: str
    templates: list[CompiledTemplate] = Field(default_factory=list)


# ============================================================================
# API responses
# ============================================================================


class CategorySummary(BaseModel):
    id: str
    name: str
    template_count: int


class ModeSummary(BaseModel):
    mode: str
    categories: list[CategorySummary]


class TemplateModesResponse(BaseModel):
    modes: list[ModeSummary]


class ModeTemplatesResponse(BaseModel):
    mode: str
    categories: list[CompiledCategory]
    template_count: int


class CategoryTemplatesResponse(BaseModel):
    mode: str
    category: CompiledCategory
