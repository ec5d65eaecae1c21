"""
Template API endpoints.

Read-only views over the compiled template cache, plus variable
validation against a mode's registry.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_template_compiler

from .compiler import TemplateCompiler
from .models import (
    CategorySummary,
    CategoryTemplatesResponse,
    CompiledCategory,
    CompiledTemplate,
    ModeSummary,
    ModeTemplatesResponse,
    TemplateModesResponse,
    ValidateVariablesRequest,
    ValidationResult,
)
from .variable_registry import VARIABLE_REGISTRIES, validate_variables

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=TemplateModesResponse)
async def list_template_modes(
    compiler: TemplateCompiler = Depends(get_template_compiler),
) -> TemplateModesResponse:
    """List every mode that has templates, with its categories."""
    categories = compiler.get_all_categories()
    modes = [mode for mode in VARIABLE_REGISTRIES if any(c.mode == mode for c in categories)]

    return TemplateModesResponse(
        modes=[
            ModeSummary(
                mode=mode,
                categories=[
                    CategorySummary(id=c.id, name=c.name, template_count=len(c.templates))
                    for c in categories
                    if c.mode == mode
                ],
            )
            for mode in modes
        ]
    )


@router.post("/validate", response_model=ValidationResult)
async def validate_template_variables(request: ValidateVariablesRequest) -> ValidationResult:
    """Check variables against a mode's registry."""
    if request.mode not in VARIABLE_REGISTRIES:
        raise HTTPException(status_code=400, detail=f"Unknown mode: {request.mode}")
    return validate_variables(request.mode, request.variables)


@router.get("/{mode}", response_model=ModeTemplatesResponse)
async def get_mode_templates(
    mode: str,
    compiler: TemplateCompiler = Depends(get_template_compiler),
) -> ModeTemplatesResponse:
    """All templates for a mode, grouped by category."""
    categories = compiler.get_templates_by_mode(mode)
    template_count = sum(len(c.templates) for c in categories)
    if template_count == 0:
        raise HTTPException(status_code=404, detail=f"No templates found for mode: {mode}")

    logger.debug("Templates requested for mode %s (%d)", mode, template_count)
    return ModeTemplatesResponse(mode=mode, categories=categories, template_count=template_count)


@router.get("/{mode}/{category}", response_model=CategoryTemplatesResponse)
async def get_category_templates(
    mode: str,
    category: str,
    compiler: TemplateCompiler = Depends(get_template_compiler),
) -> CategoryTemplatesResponse:
    """Templates in one category of a mode."""
    match: CompiledCategory | None = compiler.get_category(mode, category)
    if match is None or not match.templates:
        raise HTTPException(
            status_code=404,
            detail=f"Category '{category}' not found in mode '{mode}'",
        )
    return CategoryTemplatesResponse(mode=mode, category=match)


@router.get("/{mode}/{category}/{template}", response_model=CompiledTemplate)
async def get_template(
    mode: str,
    category: str,
    template: str,
    compiler: TemplateCompiler = Depends(get_template_compiler),
) -> CompiledTemplate:
    """A single template with its content, variables and metadata."""
    compiled = compiler.get_template_by_path(category, template, mode=mode)
    if compiled is None:
        raise HTTPException(
            status_code=404,
            detail=f"Template '{template}' not found in category '{category}' for mode '{mode}'",
        )
    return compiled
