"""
viXra session repositories.

Two implementations of IVixraSessionRepository:
- InMemoryVixraSessionRepository: used when no DATABASE_URL is configured
- PostgresVixraSessionRepository: the ``vixra_sessions`` table
"""

import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from shared.repository import BaseRepository

from .models import VixraSession


class InMemoryVixraSessionRepository:
    """Process-local viXra session storage."""

    def __init__(self):
        self._sessions: dict[str, VixraSession] = {}
        self._lock = threading.Lock()

    def create(self, variables: dict[str, str], template: str, responses: dict[str, Any]) -> VixraSession:
        session = VixraSession(
            id=str(uuid.uuid4()),
            variables=dict(variables),
            template=template,
            responses=dict(responses),
        )
        with self._lock:
            self._sessions[session.id] = session
        return session

    def get(self, session_id: str) -> Optional[VixraSession]:
        return self._sessions.get(session_id)

    def update(
        self,
        session_id: str,
        variables: Optional[dict[str, str]] = None,
        template: Optional[str] = None,
        responses: Optional[dict[str, Any]] = None,
    ) -> Optional[VixraSession]:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None
            changes: dict[str, Any] = {"updated_at": datetime.now(timezone.utc)}
            if variables is not None:
                changes["variables"] = dict(variables)
            if template is not None:
                changes["template"] = template
            if responses is not None:
                changes["responses"] = dict(responses)
            session = session.model_copy(update=changes)
            self._sessions[session_id] = session
        return session

    def list(self) -> list[VixraSession]:
        return sorted(self._sessions.values(), key=lambda s: s.updated_at, reverse=True)


class PostgresVixraSessionRepository(BaseRepository[VixraSession]):
    """viXra sessions in Postgres; variables and responses are JSONB."""

    _COLUMNS = "id, variables, template, responses, created_at, updated_at"

    def create(self, variables: dict[str, str], template: str, responses: dict[str, Any]) -> VixraSession:
        row = self._db.fetch_one(
            f"""
            INSERT INTO vixra_sessions (variables, template, responses)
            VALUES (%s, %s, %s)
            RETURNING {self._COLUMNS}
            """,
            (self._json(variables), template, self._json(responses)),
        )
        return self._map_row(row)

    def get(self, session_id: str) -> Optional[VixraSession]:
        row = self._db.fetch_one(
            f"SELECT {self._COLUMNS} FROM vixra_sessions WHERE id = %s", (session_id,)
        )
        return self._map_row(row) if row else None

    def update(
        self,
        session_id: str,
        variables: Optional[dict[str, str]] = None,
        template: Optional[str] = None,
        responses: Optional[dict[str, Any]] = None,
    ) -> Optional[VixraSession]:
        row = self._db.fetch_one(
            f"""
            UPDATE vixra_sessions
            SET variables = COALESCE(%s, variables),
                template = COALESCE(%s, template),
                responses = COALESCE(%s, responses),
                updated_at = NOW()
            WHERE id = %s
            RETURNING {self._COLUMNS}
            """,
            (
                self._json(variables) if variables is not None else None,
                template,
                self._json(responses) if responses is not None else None,
                session_id,
            ),
        )
        return self._map_row(row) if row else None

    def list(self) -> list[VixraSession]:
        rows = self._db.fetch_all(
            f"SELECT {self._COLUMNS} FROM vixra_sessions ORDER BY updated_at DESC"
        )
        return [self._map_row(row) for row in rows]

    def _map_row(self, row: dict[str, Any]) -> VixraSession:
        return VixraSession(
            id=str(row["id"]),
            variables=self._load_json(row.get("variables"), {}),
            template=row["template"],
            responses=self._load_json(row.get("responses"), {}),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
