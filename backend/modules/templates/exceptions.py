"""
Templates module exceptions.
"""

from typing import Optional

from shared.exceptions import TemplateError, ValidationError


class TemplateNotFoundError(TemplateError):
    """Raised when a compiled template id is unknown."""

    status_code = 404

    def __init__(self, template_id: str):
        super().__init__(
            f"Template not found: {template_id}",
            details={"template_id": template_id},
        )
        self.code = "TEMPLATE_NOT_FOUND"


class UnknownModeError(ValidationError):
    """Raised when a mode has no variable registry."""

    def __init__(self, mode: str):
        super().__init__(
            f"Unknown mode: {mode}",
            code="UNKNOWN_MODE",
            details={"mode": mode},
        )


class TemplateParseError(TemplateError):
    """Raised when a markdown template document is malformed."""

    def __init__(self, message: str, source: Optional[str] = None, line: Optional[int] = None):
        details = {}
        if source is not None:
            details["source"] = source
        if line is not None:
            details["line"] = line
        location = f" ({source}:{line})" if source and line else ""
        super().__init__(f"{message}{location}", details=details)
        self.line = line
