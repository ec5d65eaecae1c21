"""
Compare module interfaces.
"""

from typing import Optional, Protocol, runtime_checkable

from .models import Comparison, ModelResult


@runtime_checkable
class IComparisonRepository(Protocol):
    """Persistence for comparison history."""

    def create(
        self,
        prompt: str,
        selected_models: list[str],
        responses: dict[str, ModelResult],
    ) -> Comparison:
        ...

    def get(self, comparison_id: str) -> Optional[Comparison]:
        ...

    def list(self) -> list[Comparison]:
        """Return all comparisons, newest first."""
        ...
