"""Tests for shared/repository.py."""

from typing import Optional
from unittest.mock import MagicMock

from psycopg2.extras import Json

from shared.repository import BaseRepository


class TestBaseRepository:
    """Tests for BaseRepository base class."""

    def test_init_stores_db(self):
        """Should store the database in _db attribute."""
        mock_db = MagicMock()
        repo = BaseRepository(mock_db)
        assert repo._db is mock_db

    def test_subclass_can_query(self):
        """Subclass should be able to query through _db."""
        mock_db = MagicMock()
        mock_db.fetch_one.return_value = {"id": "123", "name": "test"}

        class NameRepository(BaseRepository[dict]):
            def get(self, item_id: str) -> Optional[dict]:
                return self._db.fetch_one("SELECT * FROM names WHERE id = %s", (item_id,))

        repo = NameRepository(mock_db)
        assert repo.get("123") == {"id": "123", "name": "test"}
        mock_db.fetch_one.assert_called_once_with("SELECT * FROM names WHERE id = %s", ("123",))

    def test_json_wraps_value(self):
        """_json should adapt values for JSONB parameters."""
        wrapped = BaseRepository._json({"a": 1})
        assert isinstance(wrapped, Json)
        assert wrapped.adapted == {"a": 1}

    def test_load_json_handles_text_and_none(self):
        """_load_json should parse text, pass dicts through and default None."""
        assert BaseRepository._load_json('{"a": 1}', {}) == {"a": 1}
        assert BaseRepository._load_json([1, 2], []) == [1, 2]
        assert BaseRepository._load_json(None, []) == []
