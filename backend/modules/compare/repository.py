"""
Comparison repositories.

Two implementations of IComparisonRepository:
- InMemoryComparisonRepository: used when no DATABASE_URL is configured
- PostgresComparisonRepository: the ``comparisons`` table
"""

import threading
import uuid
from typing import Any, Optional

from shared.repository import BaseRepository

from .models import Comparison, ModelResult


class InMemoryComparisonRepository:
    """Process-local comparison storage."""

    def __init__(self):
        self._comparisons: dict[str, Comparison] = {}
        self._lock = threading.Lock()

    def create(
        self,
        prompt: str,
        selected_models: list[str],
        responses: dict[str, ModelResult],
    ) -> Comparison:
        comparison = Comparison(
            id=str(uuid.uuid4()),
            prompt=prompt,
            selected_models=list(selected_models),
            responses=dict(responses),
        )
        with self._lock:
            self._comparisons[comparison.id] = comparison
        return comparison

    def get(self, comparison_id: str) -> Optional[Comparison]:
        return self._comparisons.get(comparison_id)

    def list(self) -> list[Comparison]:
        return sorted(self._comparisons.values(), key=lambda c: c.created_at, reverse=True)


class PostgresComparisonRepository(BaseRepository[Comparison]):
    """Comparisons in Postgres; model ids and responses are JSONB."""

    _COLUMNS = "id, prompt, selected_models, responses, created_at"

    def create(
        self,
        prompt: str,
        selected_models: list[str],
        responses: dict[str, ModelResult],
    ) -> Comparison:
        row = self._db.fetch_one(
            f"""
            INSERT INTO comparisons (prompt, selected_models, responses)
            VALUES (%s, %s, %s)
            RETURNING {self._COLUMNS}
            """,
            (
                prompt,
                self._json(list(selected_models)),
                self._json({k: v.model_dump(mode="json") for k, v in responses.items()}),
            ),
        )
        return self._map_row(row)

    def get(self, comparison_id: str) -> Optional[Comparison]:
        row = self._db.fetch_one(
            f"SELECT {self._COLUMNS} FROM comparisons WHERE id = %s", (comparison_id,)
        )
        return self._map_row(row) if row else None

    def list(self) -> list[Comparison]:
        rows = self._db.fetch_all(
            f"SELECT {self._COLUMNS} FROM comparisons ORDER BY created_at DESC"
        )
        return [self._map_row(row) for row in rows]

    def _map_row(self, row: dict[str, Any]) -> Comparison:
        return Comparison(
            id=str(row["id"]),
            prompt=row["prompt"],
            selected_models=self._load_json(row.get("selected_models"), []),
            responses={
                model_id: ModelResult.model_validate(result)
                for model_id, result in self._load_json(row.get("responses"), {}).items()
            },
            created_at=row["created_at"],
        )
