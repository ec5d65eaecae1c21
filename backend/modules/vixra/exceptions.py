"""
viXra module exceptions.
"""

from shared.exceptions import NotFoundError


class VixraSessionNotFoundError(NotFoundError):
    """Raised when a viXra session does not exist."""

    def __init__(self, session_id: str):
        super().__init__(
            "Session not found",
            code="VIXRA_SESSION_NOT_FOUND",
            details={"session_id": session_id},
        )
