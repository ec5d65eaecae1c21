"""
Tests for the debate reconciliation state machine.
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from modules.debates.models import DebatePhase, DebateSession, TurnHistoryEntry
from modules.debates.session_state import DebateMessage, DebateSessionState
from providers.base import CostBreakdown
from tests.conftest import make_model_config


NOW = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


def make_message(round_: int, model_id: str, response_id=None, content="text", cost=None):
    return DebateMessage(
        id=response_id or f"m-{round_}-{model_id}",
        model_id=model_id,
        model_name=model_id,
        content=content,
        round=round_,
        response_id=response_id,
        cost=CostBreakdown(total=Decimal(cost)) if cost else None,
    )


@pytest.fixture
def state() -> DebateSessionState:
    return DebateSessionState.initial(NOW).start("debate_1", "model-a", "model-b")


class TestMessages:
    """Tests for add_message reconciliation."""

    def test_append(self, state):
        state = state.add_message(make_message(1, "model-a"))
        state = state.add_message(make_message(2, "model-b"))
        assert [m.round for m in state.messages] == [1, 2]
        assert state.current_round == 2

    def test_same_response_id_replaces(self, state):
        """Re-delivering a response id replaces the message in place."""
        state = state.add_message(make_message(1, "model-a", "resp-1", content="partial"))
        state = state.add_message(make_message(1, "model-a", "resp-1", content="final"))
        assert len(state.messages) == 1
        assert state.messages[0].content == "final"

    def test_turn_and_model_match_without_response_id(self, state):
        state = state.add_message(make_message(1, "model-a", content="first"))
        state = state.add_message(make_message(1, "model-a", content="second"))
        assert len(state.messages) == 1
        assert state.messages[0].content == "second"

    def test_different_response_ids_do_not_collide(self, state):
        """Response ids win over (turn, model) when both sides carry one."""
        state = state.add_message(make_message(1, "model-a", "resp-1"))
        state = state.add_message(make_message(1, "model-a", "resp-2"))
        assert len(state.messages) == 2

    def test_snapshot_is_not_mutated(self, state):
        updated = state.add_message(make_message(1, "model-a"))
        assert state.messages == ()
        assert len(updated.messages) == 1

    def test_total_cost(self, state):
        state = state.add_message(make_message(1, "model-a", cost="0.25"))
        state = state.add_message(make_message(2, "model-b", cost="0.5"))
        state = state.add_message(make_message(3, "model-a"))
        assert state.calculate_total_cost() == Decimal("0.75")


class TestTurnHistory:
    """Tests for upsert_turn_history."""

    def test_same_response_id_twice_keeps_one_entry(self, state):
        entry = TurnHistoryEntry(turn=1, model_id="model-a", content="x", response_id="resp-1")
        state = state.upsert_turn_history(entry)
        state = state.upsert_turn_history(entry.model_copy(update={"content": "y"}))
        assert len(state.turn_history) == 1
        assert state.turn_history[0].content == "y"
        assert state.model_a_last_response_id == "resp-1"

    def test_sorted_by_turn(self, state):
        state = state.upsert_turn_history(TurnHistoryEntry(turn=2, model_id="model-b"))
        state = state.upsert_turn_history(TurnHistoryEntry(turn=1, model_id="model-a"))
        assert [e.turn for e in state.turn_history] == [1, 2]

    def test_tracks_last_response_per_model(self, state):
        state = state.upsert_turn_history(TurnHistoryEntry(turn=1, model_id="model-a", response_id="a1"))
        state = state.upsert_turn_history(TurnHistoryEntry(turn=2, model_id="model-b", response_id="b1"))
        state = state.upsert_turn_history(TurnHistoryEntry(turn=3, model_id="model-a", response_id="a2"))
        assert state.model_a_last_response_id == "a2"
        assert state.model_b_last_response_id == "b1"


class TestResumeContext:
    """Tests for choosing the next speaker."""

    def test_empty_debate_starts_with_model_one(self, state):
        resume = state.get_resume_context("model-a", "model-b")
        assert resume.next_model_id == "model-a"
        assert resume.next_turn == 1
        assert resume.previous_response_id is None

    def test_after_odd_turn_model_two_speaks(self, state):
        state = state.upsert_turn_history(TurnHistoryEntry(turn=1, model_id="model-a", response_id="a1"))
        resume = state.get_resume_context("model-a", "model-b")
        assert resume.next_model_id == "model-b"
        assert resume.next_turn == 2
        assert resume.previous_response_id is None

    def test_continues_from_own_latest_response(self, state):
        state = state.upsert_turn_history(TurnHistoryEntry(turn=1, model_id="model-a", response_id="a1"))
        state = state.upsert_turn_history(TurnHistoryEntry(turn=2, model_id="model-b", response_id="b1"))
        resume = state.get_resume_context("model-a", "model-b")
        assert resume.next_model_id == "model-a"
        assert resume.next_turn == 3
        assert resume.previous_response_id == "a1"


class TestHydrate:
    """Tests for rebuilding state from a persisted session."""

    @pytest.fixture
    def session(self) -> DebateSession:
        return DebateSession(
            id="debate_1",
            topic_text="Tabs beat spaces",
            model1_id="fake-model",
            model2_id="unlisted-model",
            adversarial_level=2,
            turn_history=[
                TurnHistoryEntry(turn=2, model_id="unlisted-model", content="No.", response_id="b1"),
                TurnHistoryEntry(
                    turn=1,
                    model_id="fake-model",
                    content="Yes.",
                    reasoning="Because.",
                    response_id="a1",
                    cost=Decimal("0.01"),
                    duration_ms=1200,
                ),
            ],
            model1_response_ids=["a1"],
            model2_response_ids=["b1"],
        )

    def test_rebuilds_messages(self, session):
        models = {"fake-model": make_model_config("fake-model", name="Fake Model")}
        state = DebateSessionState.initial(NOW).hydrate_from_session(session, models, now=NOW)

        assert [m.round for m in state.messages] == [1, 2]
        first, second = state.messages
        assert first.model_name == "Fake Model"
        assert first.response_time == 1200
        assert first.cost.total == Decimal("0.01")
        assert first.model_info.capabilities.reasoning is True
        assert first.model_info.pricing.input_per_million == Decimal("1")
        assert second.model_name == "unlisted-model"
        assert second.model_info.capabilities.reasoning is False
        assert second.model_info.pricing.input_per_million == Decimal(0)

    def test_sets_ids_jury_and_resume(self, session):
        state = DebateSessionState.initial().hydrate_from_session(session, {}, now=NOW)
        assert state.debate_session_id == "debate_1"
        assert state.current_round == 2
        assert state.model_a_last_response_id == "a1"
        assert state.model_b_last_response_id == "b1"
        assert set(state.jury) == {"fake-model", "unlisted-model"}
        assert state.resume.next_model_id == "fake-model"
        assert state.resume.previous_response_id == "a1"
        assert state.resume.next_turn == 3

    def test_replaces_previous_state(self, state, session):
        stale = state.add_message(make_message(9, "other"))
        hydrated = stale.hydrate_from_session(session, {}, now=NOW)
        assert all(m.model_id != "other" for m in hydrated.messages)
        assert hydrated.current_phase == DebatePhase.OPENING_STATEMENTS


class TestPhases:
    """Tests for Robert's Rules phase transitions."""

    def test_initial_phase(self, state):
        assert state.current_phase == DebatePhase.OPENING_STATEMENTS
        assert state.phase_timestamps == {DebatePhase.OPENING_STATEMENTS: NOW}

    def test_advance_to_closing_closes_floor(self, state):
        state = state.advance_phase(NOW)
        assert state.current_phase == DebatePhase.REBUTTALS
        assert state.floor_open
        state = state.advance_phase(NOW)
        assert state.current_phase == DebatePhase.CLOSING_ARGUMENTS
        assert not state.floor_open

    def test_closing_is_terminal(self, state):
        closing = state.advance_phase(NOW).advance_phase(NOW)
        assert closing.advance_phase(NOW) is closing

    def test_reopen_keeps_first_timestamp(self, state):
        later = datetime(2025, 1, 2, tzinfo=timezone.utc)
        state = state.advance_phase(NOW).reopen_phase(DebatePhase.OPENING_STATEMENTS, later)
        assert state.current_phase == DebatePhase.OPENING_STATEMENTS
        assert state.phase_timestamps[DebatePhase.OPENING_STATEMENTS] == NOW

    def test_toggle_floor(self, state):
        assert not state.toggle_floor().floor_open

    def test_reset_session(self, state):
        reset = state.add_message(make_message(1, "model-a")).reset_session(NOW)
        assert reset.messages == ()
        assert reset.debate_session_id is None
        assert not reset.is_running


class TestJury:
    """Tests for jury annotations."""

    @pytest.fixture
    def juried(self, state) -> DebateSessionState:
        return state.initialize_jury([("model-a", "Model A"), ("model-b", "Model B")])

    def test_points_never_negative(self, juried):
        state = juried.increment_jury_points("model-a").increment_jury_points("model-a")
        assert state.jury["model-a"].points == 2
        state = state.decrement_jury_points("model-b")
        assert state.jury["model-b"].points == 0

    def test_toggle_tag(self, juried):
        state = juried.toggle_jury_tag("model-a", "strong-evidence")
        assert state.jury["model-a"].tags == ("strong-evidence",)
        state = state.toggle_jury_tag("model-a", "strong-evidence")
        assert state.jury["model-a"].tags == ()

    def test_new_message_flags_review(self, juried):
        state = juried.add_message(make_message(1, "model-a"))
        assert state.jury["model-a"].needs_review
        assert state.has_unresolved_jury_tasks()
        state = state.mark_jury_reviewed("model-a")
        assert not state.has_unresolved_jury_tasks()

    def test_reinitialize_keeps_scores_and_drops_absent(self, juried):
        state = juried.increment_jury_points("model-a").set_jury_notes("model-a", "sharp")
        state = state.initialize_jury([("model-a", "Renamed A"), ("model-c", "Model C")])
        assert set(state.jury) == {"model-a", "model-c"}
        assert state.jury["model-a"].points == 1
        assert state.jury["model-a"].label == "Renamed A"
        assert state.jury["model-a"].notes == "sharp"

    def test_unknown_speaker_is_ignored(self, juried):
        assert juried.increment_jury_points("nobody") is juried
