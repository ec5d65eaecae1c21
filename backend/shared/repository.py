"""
Base repository class for database access.

Provides a common abstraction layer for all Postgres repositories,
encapsulating Database access and shared helpers for JSONB columns.
"""

import json
from typing import Any, TypeVar, Generic

from psycopg2.extras import Json

from .database import Database


T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    Base class for all Postgres repositories.

    Provides common functionality for database operations:
    - Database access via self._db
    - Generic type parameter for model type hints

    Subclasses implement domain-specific data access methods and handle
    row-to-Pydantic model mapping internally.

    Example:
        class ComparisonRepository(BaseRepository[Comparison]):
            def get(self, comparison_id: str) -> Optional[Comparison]:
                row = self._db.fetch_one(
                    "SELECT * FROM comparisons WHERE id = %s", (comparison_id,)
                )
                return self._map_row(row) if row else None
    """

    def __init__(self, db: Database) -> None:
        """
        Initialize the repository with a Database.

        Args:
            db: Pooled database used for every query.
        """
        self._db = db

    @staticmethod
    def _json(value: Any) -> Json:
        """Adapt a Python value for a JSONB parameter."""
        return Json(value)

    @staticmethod
    def _load_json(value: Any, default: Any) -> Any:
        """Normalize a JSONB column that may come back as text."""
        if value is None:
            return default
        if isinstance(value, (str, bytes)):
            return json.loads(value)
        return value
