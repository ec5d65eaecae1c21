"""
Per-mode variable registries.

Each prompt mode declares the variables its templates may use. Routes
validate incoming variables here before rendering.
"""

from typing import Mapping

from .exceptions import UnknownModeError
from .models import ValidationResult, VariableSchema


VARIABLE_REGISTRIES: dict[str, list[VariableSchema]] = {
    "creative": [
        VariableSchema(name="originalPrompt", required=True, description="User creative prompt"),
        VariableSchema(name="response", description="Previous model response"),
        VariableSchema(
            name="category",
            type="enum",
            required=True,
            enum=["poetry", "battle-rap", "story"],
            description="Creative category",
        ),
    ],
    "battle": [
        VariableSchema(name="originalPrompt", required=True, description="Original debate prompt"),
        VariableSchema(name="response", description="Previous response to challenge"),
        VariableSchema(
            name="battleType",
            type="enum",
            required=True,
            enum=["critique", "enhance"],
            description="Battle mode",
        ),
    ],
    "debate": [
        VariableSchema(name="originalPrompt", required=True, description="Debate topic"),
        VariableSchema(name="topic", required=True, description="Debate topic"),
        VariableSchema(
            name="intensity",
            type="number",
            required=True,
            description="Adversarial level 1-4",
            aliases=["intensityLevel"],
        ),
        VariableSchema(name="response", description="Previous argument"),
        VariableSchema(
            name="role",
            type="enum",
            required=True,
            enum=["pro", "con"],
            description="Debate side",
        ),
        VariableSchema(name="position", required=True, description="Detailed position statement"),
    ],
    "compare": [
        VariableSchema(name="originalPrompt", required=True, description="Comparison prompt"),
    ],
    "research": [
        VariableSchema(name="originalPrompt", required=True, description="Research question"),
        VariableSchema(name="response", description="Prior synthesis to build on"),
        VariableSchema(
            name="depth",
            type="enum",
            enum=["overview", "detailed", "exhaustive"],
            default="detailed",
            description="How deep the synthesis should go",
        ),
    ],
    "plan-assessment": [
        VariableSchema(name="plan", required=True, description="Plan text under assessment"),
        VariableSchema(name="goals", description="Stated goals of the plan"),
        VariableSchema(name="constraints", description="Budget, time or staffing limits"),
        VariableSchema(
            name="assessmentFocus",
            type="enum",
            enum=["feasibility", "risk", "strategy"],
            default="feasibility",
            description="Which lens to assess the plan through",
        ),
    ],
    "vixra": [
        VariableSchema(name="Title", description="Paper title"),
        VariableSchema(
            name="Authors",
            description="Author line",
            aliases=["Author", "ResearcherName"],
        ),
        VariableSchema(name="Institution", description="Affiliation, omitted when empty"),
        VariableSchema(
            name="ScienceCategory",
            default="General Science and Philosophy",
            description="viXra subject category",
        ),
        VariableSchema(name="Abstract", description="Abstract fed to later sections"),
        VariableSchema(name="TargetSection", description="Section being generated"),
        VariableSchema(name="PublicationDate", type="date", description="Publication date"),
    ],
}


def get_registry(mode: str) -> list[VariableSchema]:
    """
    Look up a mode's schema list.

    Raises:
        UnknownModeError: If the mode has no registry
    """
    try:
        return VARIABLE_REGISTRIES[mode]
    except KeyError:
        raise UnknownModeError(mode) from None


def _is_number(value: str) -> bool:
    try:
        float(value)
    except ValueError:
        return False
    return value.strip() != ""


def validate_variables(mode: str, variables: Mapping[str, str]) -> ValidationResult:
    """
    Check variables against a mode's registry.

    Required values must be present and non-empty, enum values must be
    listed, and number values must parse as numbers. Variables the registry
    does not declare are ignored.

    An unknown mode yields an invalid result rather than raising.
    """
    if mode not in VARIABLE_REGISTRIES:
        return ValidationResult(is_valid=False, errors=[f"Unknown mode: {mode}"])

    errors: list[str] = []
    for schema in VARIABLE_REGISTRIES[mode]:
        value = variables.get(schema.name)

        if schema.required and (value is None or value == ""):
            errors.append(f"Required variable missing: {schema.name}")
            continue
        if value is None:
            continue

        if schema.type == "enum" and schema.enum and value not in schema.enum:
            errors.append(
                f"Invalid enum value for {schema.name}. Must be one of: {', '.join(schema.enum)}"
            )
        if schema.type == "number" and not _is_number(str(value)):
            errors.append(f"Variable {schema.name} must be a valid number")

    return ValidationResult(is_valid=not errors, errors=errors)


def get_default_variables(mode: str) -> dict[str, str]:
    """Defaults declared by a mode's registry."""
    return {
        schema.name: schema.default
        for schema in get_registry(mode)
        if schema.default is not None
    }


def get_variable_aliases(mode: str) -> dict[str, str]:
    """Deprecated variable names mapped to their current names."""
    return {
        alias: schema.name
        for schema in get_registry(mode)
        for alias in schema.aliases
    }


def get_all_variable_aliases() -> dict[str, str]:
    """Aliases across every mode."""
    aliases: dict[str, str] = {}
    for mode in VARIABLE_REGISTRIES:
        aliases.update(get_variable_aliases(mode))
    return aliases


def detect_mode(name: str) -> str | None:
    """
    Map a template file stem to a mode.

    ``battle-prompts`` becomes ``battle``. An exact match wins, otherwise the
    first mode contained in the name.
    """
    base = name.removesuffix(".md").replace("-prompts", "")
    if base in VARIABLE_REGISTRIES:
        return base
    for mode in VARIABLE_REGISTRIES:
        if mode in base:
            return mode
    return None
