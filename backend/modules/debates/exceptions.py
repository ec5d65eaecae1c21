"""
Debates module exceptions.
"""

from shared.exceptions import (
    ModelCompareError,
    NotFoundError,
    ValidationError,
)


class DebateError(ModelCompareError):
    """Base exception for debate-related errors."""

    pass


class DebateSessionNotFoundError(NotFoundError):
    """Raised when a debate session is not found."""

    def __init__(self, session_id: str):
        super().__init__(
            "Debate session not found",
            code="DEBATE_SESSION_NOT_FOUND",
            details={"session_id": session_id},
        )


class SessionRequiredError(ValidationError):
    """Raised when a continuing turn arrives without its debate session."""

    def __init__(self, turn_number: int):
        super().__init__(
            "Session ID required for continuing debates",
            code="SESSION_REQUIRED",
            details={"turn_number": turn_number},
        )


class StreamSessionNotFoundError(NotFoundError):
    """Raised when a stream ticket is missing, expired, reused or mismatched."""

    def __init__(self, session_id: str):
        super().__init__(
            "Stream session not found or expired",
            code="STREAM_SESSION_NOT_FOUND",
            details={"session_id": session_id},
        )


class StreamingDisabledError(DebateError):
    """Raised when streaming is turned off by configuration."""

    status_code = 503

    def __init__(self):
        super().__init__(
            "Streaming is disabled by configuration",
            code="STREAMING_DISABLED",
        )
