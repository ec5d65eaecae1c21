"""
Placeholder substitution for prompt templates.

Templates contain ``{name}`` or ``{name|default}`` placeholders. A
placeholder written as ``\\{name\\}`` is escaped: it renders as the literal
``{name}`` and is never substituted.

Rendering is idempotent for fully resolved templates with no escapes. An
escaped placeholder comes out as a plain ``{name}``, so rendering the
output a second time substitutes it.

Missing values are handled by the engine's policy:

- ``error``: raise TemplateError
- ``warn``: keep the placeholder and record a warning
- ``keep``: keep the placeholder silently

Usage:
    engine = VariableEngine(policy="warn")
    result = engine.render_final("Debate {topic}", {"topic": "AI"})
    result.resolved  # "Debate AI"
"""

import re
from typing import Any, Mapping, Optional

from shared.exceptions import TemplateError

from .models import MISSING, RenderResult, VariablePolicy


PLACEHOLDER_PATTERN = re.compile(r"\{([^{}|\n]+)(?:\|([^{}\n]+))?\}")
ESCAPED_PATTERN = re.compile(r"\\\{([^{}\n]+)\\\}")

# Sentinels cannot appear in markdown text
_ESCAPE_SENTINEL = "\x00ESC{}\x00"
_SENTINEL_PATTERN = re.compile("\x00ESC(\\d+)\x00")

POLICIES = ("error", "warn", "keep")


def extract_variables(template: str) -> list[str]:
    """
    Return placeholder names in first-appearance order.

    Defaults are stripped and escaped placeholders are ignored.
    """
    unescaped = ESCAPED_PATTERN.sub("", template)
    names: list[str] = []
    for match in PLACEHOLDER_PATTERN.finditer(unescaped):
        name = match.group(1).strip()
        if name not in names:
            names.append(name)
    return names


class VariableEngine:
    """Renders templates against a variable map under a missing-value policy."""

    def __init__(
        self,
        policy: VariablePolicy = "error",
        aliases: Optional[Mapping[str, str]] = None,
    ):
        if policy not in POLICIES:
            raise ValueError(f"Unknown variable policy: {policy}")
        self.policy = policy
        self.aliases = dict(aliases or {})

    def render(
        self,
        template: str,
        variables: Mapping[str, Any],
        policy: Optional[VariablePolicy] = None,
    ) -> RenderResult:
        """
        Substitute placeholders in ``template``.

        Args:
            template: Template text
            variables: Values by placeholder name; None counts as missing
            policy: Overrides the engine policy for this call

        Returns:
            RenderResult with the resolved text, the value each placeholder
            resolved to (or MISSING) and any warnings

        Raises:
            TemplateError: A value is missing under the ``error`` policy
        """
        policy = policy or self.policy
        mapping: dict[str, str] = {}
        warnings: list[str] = []
        escaped: list[str] = []

        def stash(match: re.Match) -> str:
            escaped.append("{" + match.group(1) + "}")
            return _ESCAPE_SENTINEL.format(len(escaped) - 1)

        def substitute(match: re.Match) -> str:
            name = match.group(1).strip()
            default = match.group(2)

            old_name = name
            if name in self.aliases:
                new_name = self.aliases[name]
                warning = f"Deprecated variable {{{name}}} mapped to {{{new_name}}}"
                if warning not in warnings:
                    warnings.append(warning)
                name = new_name

            value = variables.get(name)
            if value is None and old_name != name:
                value = variables.get(old_name)
            if value is None:
                value = default

            if value is None:
                mapping[name] = MISSING
                error = f"Missing variable: {{{name}}}"
                if policy == "error":
                    raise TemplateError(error, details={"variable": name})
                if policy == "warn":
                    warnings.append(error)
                return match.group(0)

            value = str(value)
            mapping[name] = value
            return value

        text = ESCAPED_PATTERN.sub(stash, template)
        text = PLACEHOLDER_PATTERN.sub(substitute, text)
        text = _SENTINEL_PATTERN.sub(lambda m: escaped[int(m.group(1))], text)

        return RenderResult(resolved=text, mapping=mapping, warnings=warnings)

    def render_preview(self, template: str, variables: Mapping[str, Any]) -> str:
        """Render for display. Never raises; unresolved placeholders stay."""
        return self.render(template, variables, policy="keep").resolved

    def render_final(self, template: str, variables: Mapping[str, Any]) -> RenderResult:
        """Render for sending to a model, applying the engine policy."""
        return self.render(template, variables)
