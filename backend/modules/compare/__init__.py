"""
Compare module.

Side-by-side prompt comparison across models, comparison history, and
the model catalog.
"""

from .interfaces import IComparisonRepository
from .models import Comparison, CompareRequest, CompareResponse, ModelResult, RespondRequest
from .exceptions import ComparisonNotFoundError

__all__ = [
    "IComparisonRepository",
    "Comparison",
    "CompareRequest",
    "CompareResponse",
    "ModelResult",
    "RespondRequest",
    "ComparisonNotFoundError",
]
