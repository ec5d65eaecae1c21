"""
Templates module.

Markdown prompt templates, the variable engine that fills them, and the
per-mode variable registries.

Public API:
- VariableEngine: Placeholder substitution with error/warn/keep policies
- TemplateCompiler: Startup compilation and cached template access
- validate_variables: Check variables against a mode's registry
"""

from .compiler import TemplateCompiler, template_version
from .exceptions import TemplateNotFoundError, TemplateParseError, UnknownModeError
from .models import (
    MISSING,
    CompiledCategory,
    CompiledTemplate,
    RenderResult,
    TemplateDocument,
    TemplateSections,
    ValidationResult,
    VariableSchema,
)
from .parser import parse_sections, parse_template_document, slugify
from .variable_engine import VariableEngine, extract_variables
from .variable_registry import (
    VARIABLE_REGISTRIES,
    detect_mode,
    get_default_variables,
    get_variable_aliases,
    validate_variables,
)

__all__ = [
    # Compiler
    "TemplateCompiler",
    "template_version",
    # Engine
    "VariableEngine",
    "extract_variables",
    # Parser
    "parse_template_document",
    "parse_sections",
    "slugify",
    # Registry
    "VARIABLE_REGISTRIES",
    "validate_variables",
    "get_default_variables",
    "get_variable_aliases",
    "detect_mode",
    # Models
    "MISSING",
    "CompiledCategory",
    "CompiledTemplate",
    "RenderResult",
    "TemplateDocument",
    "TemplateSections",
    "ValidationResult",
    "VariableSchema",
    # Exceptions
    "TemplateNotFoundError",
    "TemplateParseError",
    "UnknownModeError",
]
