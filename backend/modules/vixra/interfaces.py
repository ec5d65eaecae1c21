"""
viXra module interfaces.
"""

from typing import Any, Optional, Protocol, runtime_checkable

from .models import VixraSession


@runtime_checkable
class IVixraSessionRepository(Protocol):
    """Persistence for paper-generation sessions."""

    def create(self, variables: dict[str, str], template: str, responses: dict[str, Any]) -> VixraSession:
        ...

    def get(self, session_id: str) -> Optional[VixraSession]:
        ...

    def update(
        self,
        session_id: str,
        variables: Optional[dict[str, str]] = None,
        template: Optional[str] = None,
        responses: Optional[dict[str, Any]] = None,
    ) -> Optional[VixraSession]:
        """Apply the supplied fields; returns None when the session is missing."""
        ...

    def list(self) -> list[VixraSession]:
        """Return all sessions, most recently updated first."""
        ...
