"""
PostgreSQL connection pool for persistent storage.

Wraps a bounded psycopg2 ``ThreadedConnectionPool``. Every unit of work
checks out a single connection through ``transaction()``, which commits on
success and rolls back on failure, surfacing the problem as a DatabaseError.
"""

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional

import psycopg2
from psycopg2.extras import RealDictCursor
from psycopg2.pool import ThreadedConnectionPool

from .config import get_settings
from .exceptions import DatabaseError

logger = logging.getLogger(__name__)


class Database:
    """Thin transactional facade over a psycopg2 connection pool."""

    def __init__(self, dsn: str, max_connections: int = 10, min_connections: int = 1):
        try:
            self._pool = ThreadedConnectionPool(min_connections, max_connections, dsn=dsn)
        except psycopg2.Error as e:
            raise DatabaseError(f"Failed to connect to database: {e}") from e
        self.max_connections = max_connections

    @contextmanager
    def transaction(self) -> Iterator[Any]:
        """
        Run a block inside a single transaction.

        Yields a dict-row cursor. The transaction is committed when the block
        exits normally and rolled back otherwise.

        Raises:
            DatabaseError: If the connection, a query, or the commit fails.
        """
        try:
            conn = self._pool.getconn()
        except psycopg2.Error as e:
            raise DatabaseError(f"Failed to acquire connection: {e}") from e

        try:
            with conn.cursor(cursor_factory=RealDictCursor) as cursor:
                yield cursor
            conn.commit()
        except psycopg2.Error as e:
            conn.rollback()
            logger.error("Transaction rolled back: %s", e)
            raise DatabaseError(f"Database transaction failed: {e}") from e
        except Exception:
            conn.rollback()
            raise
        finally:
            self._pool.putconn(conn)

    def fetch_one(self, query: str, params: tuple = ()) -> Optional[dict[str, Any]]:
        """Execute a query and return the first row, if any."""
        with self.transaction() as cursor:
            cursor.execute(query, params)
            row = cursor.fetchone()
        return dict(row) if row else None

    def fetch_all(self, query: str, params: tuple = ()) -> list[dict[str, Any]]:
        """Execute a query and return all rows."""
        with self.transaction() as cursor:
            cursor.execute(query, params)
            rows = cursor.fetchall()
        return [dict(row) for row in rows]

    def health_check(self) -> dict[str, Any]:
        """Run a trivial query to confirm the database answers."""
        try:
            self.fetch_one("SELECT 1 AS ok")
            return {"is_healthy": True, "message": "Database connection OK"}
        except DatabaseError as e:
            return {"is_healthy": False, "message": e.message}

    def close(self) -> None:
        """Close every pooled connection."""
        self._pool.closeall()


# Module-level database cache
_database: Optional[Database] = None


def get_database() -> Optional[Database]:
    """
    Get the shared Database, or None when no DATABASE_URL is configured.

    Callers fall back to in-memory repositories when this returns None.
    """
    global _database

    if _database is None:
        settings = get_settings()
        if not settings.database_url:
            return None
        _database = Database(
            settings.database_url,
            max_connections=settings.database_max_connections,
        )

    return _database


def reset_database() -> None:
    """
    Close and forget the cached database.

    Useful for testing or when configuration changes.
    """
    global _database
    if _database is not None:
        _database.close()
    _database = None
