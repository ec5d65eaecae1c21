"""Tests for shared/database.py."""

from unittest.mock import MagicMock, patch

import psycopg2
import pytest

from shared.database import Database, get_database, reset_database
from shared.exceptions import DatabaseError


@pytest.fixture
def pool():
    with patch("shared.database.ThreadedConnectionPool") as pool_cls:
        yield pool_cls.return_value


@pytest.fixture
def connection(pool):
    conn = MagicMock()
    pool.getconn.return_value = conn
    return conn


def cursor_of(connection) -> MagicMock:
    return connection.cursor.return_value.__enter__.return_value


class TestDatabase:
    def test_connect_failure_raises_database_error(self):
        """Pool creation errors should surface as DatabaseError."""
        with patch("shared.database.ThreadedConnectionPool", side_effect=psycopg2.OperationalError("refused")):
            with pytest.raises(DatabaseError) as exc_info:
                Database("postgresql://bad")
        assert "Failed to connect" in exc_info.value.message

    def test_transaction_commits_on_success(self, pool, connection):
        """A clean block should commit and return the connection."""
        db = Database("postgresql://test")
        with db.transaction() as cursor:
            cursor.execute("SELECT 1")

        connection.commit.assert_called_once()
        connection.rollback.assert_not_called()
        pool.putconn.assert_called_once_with(connection)

    def test_transaction_rolls_back_on_database_error(self, pool, connection):
        """psycopg2 errors should roll back and raise DatabaseError."""
        cursor_of(connection).execute.side_effect = psycopg2.ProgrammingError("syntax")
        db = Database("postgresql://test")

        with pytest.raises(DatabaseError):
            with db.transaction() as cursor:
                cursor.execute("SELEC 1")

        connection.rollback.assert_called_once()
        connection.commit.assert_not_called()
        pool.putconn.assert_called_once_with(connection)

    def test_transaction_rolls_back_and_reraises_other_errors(self, pool, connection):
        """Domain errors raised inside a block should pass through untouched."""
        db = Database("postgresql://test")

        with pytest.raises(KeyError):
            with db.transaction():
                raise KeyError("missing")

        connection.rollback.assert_called_once()
        pool.putconn.assert_called_once_with(connection)

    def test_fetch_one_and_fetch_all(self, pool, connection):
        cursor = cursor_of(connection)
        cursor.fetchone.return_value = {"id": 1}
        cursor.fetchall.return_value = [{"id": 1}, {"id": 2}]
        db = Database("postgresql://test")

        assert db.fetch_one("SELECT 1") == {"id": 1}
        assert db.fetch_all("SELECT 1") == [{"id": 1}, {"id": 2}]

    def test_fetch_one_returns_none_for_no_rows(self, pool, connection):
        cursor_of(connection).fetchone.return_value = None
        assert Database("postgresql://test").fetch_one("SELECT 1") is None

    def test_health_check(self, pool, connection):
        """health_check should report failures instead of raising."""
        db = Database("postgresql://test")
        cursor_of(connection).fetchone.return_value = {"ok": 1}
        assert db.health_check()["is_healthy"] is True

        cursor_of(connection).execute.side_effect = psycopg2.OperationalError("gone")
        result = db.health_check()
        assert result["is_healthy"] is False
        assert "gone" in result["message"]


class TestGetDatabase:
    def setup_method(self):
        reset_database()

    def teardown_method(self):
        reset_database()

    @patch("shared.database.get_settings")
    def test_returns_none_without_url(self, mock_settings):
        """No DATABASE_URL selects in-memory storage."""
        mock_settings.return_value.database_url = ""
        assert get_database() is None

    @patch("shared.database.ThreadedConnectionPool")
    @patch("shared.database.get_settings")
    def test_caches_database(self, mock_settings, pool_cls):
        mock_settings.return_value.database_url = "postgresql://test"
        mock_settings.return_value.database_max_connections = 4

        first = get_database()
        assert first is get_database()
        assert first.max_connections == 4
        pool_cls.assert_called_once_with(1, 4, dsn="postgresql://test")
