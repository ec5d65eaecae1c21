"""
Compare module exceptions.
"""

from shared.exceptions import NotFoundError


class ComparisonNotFoundError(NotFoundError):
    """Raised when a stored comparison does not exist."""

    def __init__(self, comparison_id: str):
        super().__init__(
            "Comparison not found",
            code="COMPARISON_NOT_FOUND",
            details={"comparison_id": comparison_id},
        )
