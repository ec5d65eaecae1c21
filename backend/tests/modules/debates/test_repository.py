"""Tests for modules/debates/repository.py."""

import json
from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from modules.debates.exceptions import DebateSessionNotFoundError
from modules.debates.models import TurnHistoryEntry
from modules.debates.repository import (
    InMemoryDebateSessionRepository,
    PostgresDebateSessionRepository,
    new_debate_session_id,
)


def session_row(**overrides) -> dict:
    now = datetime(2025, 1, 1, tzinfo=timezone.utc)
    row = {
        "id": "debate_1",
        "topic_text": "Tabs beat spaces",
        "model1_id": "model-a",
        "model2_id": "model-b",
        "adversarial_level": 3,
        "turn_history": [],
        "model1_response_ids": [],
        "model2_response_ids": [],
        "total_cost": Decimal("0"),
        "created_at": now,
        "updated_at": now,
    }
    row.update(overrides)
    return row


def test_session_id_format():
    session_id = new_debate_session_id()
    prefix, millis, suffix = session_id.split("_")
    assert prefix == "debate"
    assert millis.isdigit()
    assert len(suffix) == 10


class TestInMemoryDebateSessionRepository:
    def test_create_and_get(self):
        repo = InMemoryDebateSessionRepository()
        session = repo.create("Tabs beat spaces", "model-a", "model-b", 2)

        assert repo.get(session.id) == session
        assert session.turn_history == []
        assert session.total_cost == Decimal(0)

    def test_append_turn_tracks_response_ids_and_cost(self):
        """Each model's response ids are recorded on its own list."""
        repo = InMemoryDebateSessionRepository()
        session = repo.create("Topic", "model-a", "model-b", 2)

        repo.append_turn(session.id, TurnHistoryEntry(
            turn=1, model_id="model-a", response_id="a1", cost=Decimal("0.10"),
        ))
        updated = repo.append_turn(session.id, TurnHistoryEntry(
            turn=2, model_id="model-b", response_id="b1", cost=Decimal("0.05"),
        ))

        assert [t.turn for t in updated.turn_history] == [1, 2]
        assert updated.model1_response_ids == ["a1"]
        assert updated.model2_response_ids == ["b1"]
        assert updated.total_cost == Decimal("0.15")
        assert repo.get(session.id) == updated

    def test_turn_without_response_id(self):
        repo = InMemoryDebateSessionRepository()
        session = repo.create("Topic", "model-a", "model-b", 1)
        updated = repo.append_turn(session.id, TurnHistoryEntry(turn=1, model_id="model-a"))
        assert updated.model1_response_ids == []

    def test_append_to_missing_session(self):
        with pytest.raises(DebateSessionNotFoundError):
            InMemoryDebateSessionRepository().append_turn(
                "ghost", TurnHistoryEntry(turn=1, model_id="model-a")
            )

    def test_list_newest_first(self):
        repo = InMemoryDebateSessionRepository()
        first = repo.create("First", "model-a", "model-b", 1)
        second = repo.create("Second", "model-a", "model-b", 1)
        repo.append_turn(first.id, TurnHistoryEntry(turn=1, model_id="model-a"))

        assert [s.id for s in repo.list()][0] == first.id
        assert {s.id for s in repo.list()} == {first.id, second.id}


class TestPostgresDebateSessionRepository:
    def test_get_maps_json_columns(self):
        """JSONB columns returned as text are decoded."""
        db = MagicMock()
        db.fetch_one.return_value = session_row(
            turn_history=json.dumps([{"turn": 1, "model_id": "model-a", "content": "Hi", "cost": "0.5"}]),
            model1_response_ids='["a1"]',
            total_cost="0.5",
        )

        session = PostgresDebateSessionRepository(db).get("debate_1")

        assert session.turn_history[0].content == "Hi"
        assert session.turn_history[0].cost == Decimal("0.5")
        assert session.model1_response_ids == ["a1"]
        assert session.total_cost == Decimal("0.5")

    def test_get_missing(self):
        db = MagicMock()
        db.fetch_one.return_value = None
        assert PostgresDebateSessionRepository(db).get("ghost") is None

    def test_create_passes_parameters(self):
        db = MagicMock()
        db.fetch_one.return_value = session_row()

        session = PostgresDebateSessionRepository(db).create("Tabs beat spaces", "model-a", "model-b", 3)

        params = db.fetch_one.call_args.args[1]
        assert params[0].startswith("debate_")
        assert params[1:] == ("Tabs beat spaces", "model-a", "model-b", 3)
        assert session.topic_text == "Tabs beat spaces"

    def test_list(self):
        db = MagicMock()
        db.fetch_all.return_value = [session_row(id="debate_2"), session_row(id="debate_1")]
        sessions = PostgresDebateSessionRepository(db).list()
        assert [s.id for s in sessions] == ["debate_2", "debate_1"]
        assert "ORDER BY updated_at DESC" in db.fetch_all.call_args.args[0]

    def test_append_turn_locks_and_updates(self):
        """The row is read FOR UPDATE and rewritten in the same transaction."""
        db = MagicMock()
        cursor = db.transaction.return_value.__enter__.return_value
        cursor.fetchone.return_value = session_row()

        updated = PostgresDebateSessionRepository(db).append_turn(
            "debate_1",
            TurnHistoryEntry(turn=1, model_id="model-a", response_id="a1", cost=Decimal("0.2")),
        )

        select_sql = cursor.execute.call_args_list[0].args[0]
        update_sql, update_params = cursor.execute.call_args_list[1].args
        assert "FOR UPDATE" in select_sql
        assert "UPDATE debate_sessions" in update_sql
        assert update_params[1].adapted == ["a1"]
        assert update_params[3] == Decimal("0.2")
        assert update_params[-1] == "debate_1"
        assert updated.model1_response_ids == ["a1"]

    def test_append_turn_missing_session(self):
        db = MagicMock()
        cursor = db.transaction.return_value.__enter__.return_value
        cursor.fetchone.return_value = None

        with pytest.raises(DebateSessionNotFoundError):
            PostgresDebateSessionRepository(db).append_turn(
                "ghost", TurnHistoryEntry(turn=1, model_id="model-a")
            )
