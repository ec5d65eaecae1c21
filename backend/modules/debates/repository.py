"""
Debate session repositories.

Two implementations of IDebateSessionRepository:
- InMemoryDebateSessionRepository: used when no DATABASE_URL is configured
- PostgresDebateSessionRepository: the ``debate_sessions`` table
"""

import secrets
import threading
import time
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional

from shared.repository import BaseRepository

from .exceptions import DebateSessionNotFoundError
from .models import DebateSession, TurnHistoryEntry


def new_debate_session_id() -> str:
    return f"debate_{int(time.time() * 1000)}_{secrets.token_hex(5)}"


def _with_turn(session: DebateSession, entry: TurnHistoryEntry) -> DebateSession:
    """Return the session with a completed turn appended."""
    update: dict[str, Any] = {
        "turn_history": [*session.turn_history, entry],
        "total_cost": session.total_cost + entry.cost,
        "updated_at": datetime.now(timezone.utc),
    }
    if entry.response_id:
        if entry.model_id == session.model1_id:
            update["model1_response_ids"] = [*session.model1_response_ids, entry.response_id]
        else:
            update["model2_response_ids"] = [*session.model2_response_ids, entry.response_id]
    return session.model_copy(update=update)


def _sort_newest_first(sessions: list[DebateSession]) -> list[DebateSession]:
    return sorted(sessions, key=lambda s: (s.updated_at, s.created_at), reverse=True)


class InMemoryDebateSessionRepository:
    """Process-local debate session storage."""

    def __init__(self):
        self._sessions: dict[str, DebateSession] = {}
        self._lock = threading.Lock()

    def create(
        self,
        topic: str,
        model1_id: str,
        model2_id: str,
        adversarial_level: int,
    ) -> DebateSession:
        session = DebateSession(
            id=new_debate_session_id(),
            topic_text=topic,
            model1_id=model1_id,
            model2_id=model2_id,
            adversarial_level=adversarial_level,
        )
        with self._lock:
            self._sessions[session.id] = session
        return session

    def get(self, session_id: str) -> Optional[DebateSession]:
        return self._sessions.get(session_id)

    def list(self) -> list[DebateSession]:
        return _sort_newest_first(list(self._sessions.values()))

    def append_turn(self, session_id: str, entry: TurnHistoryEntry) -> DebateSession:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                raise DebateSessionNotFoundError(session_id)
            updated = _with_turn(session, entry)
            self._sessions[session_id] = updated
        return updated


class PostgresDebateSessionRepository(BaseRepository[DebateSession]):
    """
    Debate sessions in Postgres.

    Turn history and response id lists are JSONB columns. Appending a turn
    locks the row so concurrent turns of one debate do not lose updates.
    """

    _COLUMNS = (
        "id, topic_text, model1_id, model2_id, adversarial_level, turn_history, "
        "model1_response_ids, model2_response_ids, total_cost, created_at, updated_at"
    )

    def create(
        self,
        topic: str,
        model1_id: str,
        model2_id: str,
        adversarial_level: int,
    ) -> DebateSession:
        row = self._db.fetch_one(
            f"""
            INSERT INTO debate_sessions
                (id, topic_text, model1_id, model2_id, adversarial_level,
                 turn_history, model1_response_ids, model2_response_ids, total_cost)
            VALUES (%s, %s, %s, %s, %s, '[]'::jsonb, '[]'::jsonb, '[]'::jsonb, 0)
            RETURNING {self._COLUMNS}
            """,
            (new_debate_session_id(), topic, model1_id, model2_id, adversarial_level),
        )
        return self._map_row(row)

    def get(self, session_id: str) -> Optional[DebateSession]:
        row = self._db.fetch_one(
            f"SELECT {self._COLUMNS} FROM debate_sessions WHERE id = %s",
            (session_id,),
        )
        return self._map_row(row) if row else None

    def list(self) -> list[DebateSession]:
        rows = self._db.fetch_all(
            f"SELECT {self._COLUMNS} FROM debate_sessions "
            "ORDER BY updated_at DESC, created_at DESC"
        )
        return [self._map_row(row) for row in rows]

    def append_turn(self, session_id: str, entry: TurnHistoryEntry) -> DebateSession:
        with self._db.transaction() as cursor:
            cursor.execute(
                f"SELECT {self._COLUMNS} FROM debate_sessions WHERE id = %s FOR UPDATE",
                (session_id,),
            )
            row = cursor.fetchone()
            if row is None:
                raise DebateSessionNotFoundError(session_id)

            updated = _with_turn(self._map_row(dict(row)), entry)
            cursor.execute(
                """
                UPDATE debate_sessions
                SET turn_history = %s,
                    model1_response_ids = %s,
                    model2_response_ids = %s,
                    total_cost = %s,
                    updated_at = %s
                WHERE id = %s
                """,
                (
                    self._json([t.model_dump(mode="json") for t in updated.turn_history]),
                    self._json(updated.model1_response_ids),
                    self._json(updated.model2_response_ids),
                    updated.total_cost,
                    updated.updated_at,
                    session_id,
                ),
            )
        return updated

    def _map_row(self, row: dict[str, Any]) -> DebateSession:
        return DebateSession(
            id=row["id"],
            topic_text=row["topic_text"],
            model1_id=row["model1_id"],
            model2_id=row["model2_id"],
            adversarial_level=row["adversarial_level"],
            turn_history=[
                TurnHistoryEntry.model_validate(t)
                for t in self._load_json(row.get("turn_history"), [])
            ],
            model1_response_ids=self._load_json(row.get("model1_response_ids"), []),
            model2_response_ids=self._load_json(row.get("model2_response_ids"), []),
            total_cost=Decimal(str(row.get("total_cost") or 0)),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
