"""
Tests for GameSession: questions, accusations and the countdown.
"""

import asyncio
import math

import pytest

from exceptions import (
    CharacterNotFoundError,
    CollaboratorUnavailableError,
    GameAlreadyOverError,
    InvalidRequestError,
    SessionAccessDeniedError,
)
from game_events import EventDispatcher, GameEventListener
from sessions.dialogue_engine import DialogueEngine
from sessions.game_session import SessionStatus
from stress_model import base_increase


class RecordingListener(GameEventListener):
    def __init__(self):
        self.started = []
        self.questions = []
        self.completed = []

    def session_started(self, session_id, player_id, mystery_id):
        self.started.append(session_id)

    def question_asked(self, session_id, player_id, mystery_id, character_name):
        self.questions.append(character_name)

    def session_completed(self, summary):
        self.completed.append(summary)


class ExplodingListener(GameEventListener):
    def session_completed(self, summary):
        raise RuntimeError("stats store is down")


class TestAsk:
    """Test questioning characters."""

    async def test_ask_commits_exchange(self, make_session):
        session = make_session()

        result = await session.ask("Thomas", "Where were you at midnight?", 10.0)

        assert result.character == "Thomas"
        assert result.question == "Where were you at midnight?"
        assert result.response == "I was in the garden all evening."
        assert result.emotion == "nervous"
        assert 0.0 <= result.stress_level <= 100.0
        assert result.stress_change == pytest.approx(result.stress_level - 10.0)
        assert result.stress_state in {"calm", "composed", "nervous", "agitated", "stressed", "panicking"}
        assert session.questions_asked == 1
        assert [m.role for m in session.conversation("Thomas")] == ["system", "user", "assistant"]

    async def test_result_serialises_to_response_fields(self, make_session):
        session = make_session()
        result = await session.ask("Thomas", "Hello?", 0)
        assert set(result.to_dict()) == {
            "character", "question", "response", "emotion",
            "stress_level", "stress_change", "stress_state",
        }

    async def test_unknown_character(self, make_session):
        session = make_session()
        with pytest.raises(CharacterNotFoundError):
            await session.ask("Mrs. Peacock", "Hello?", 0)
        assert session.questions_asked == 0

    async def test_character_match_is_exact(self, make_session):
        session = make_session()
        with pytest.raises(CharacterNotFoundError):
            await session.ask("thomas", "Hello?", 0)

    @pytest.mark.parametrize("stress", [-1, 100.5, math.nan, True, "50", None])
    async def test_invalid_stress_is_rejected(self, make_session, stress):
        session = make_session()
        with pytest.raises(InvalidRequestError):
            await session.ask("Thomas", "Hello?", stress)

    async def test_blank_question_is_rejected(self, make_session):
        session = make_session()
        with pytest.raises(InvalidRequestError):
            await session.ask("Thomas", "   ", 0)

    async def test_failed_call_applies_nothing(self, make_session, fake_model):
        session = make_session()
        fake_model.fail_with = RuntimeError("boom")

        with pytest.raises(CollaboratorUnavailableError):
            await session.ask("Thomas", "Hello?", 20)

        assert session.questions_asked == 0
        assert len(session.conversation("Thomas")) == 0
        assert session.status is SessionStatus.ACTIVE

        # Retrying after the outage works and seeds the persona exactly once
        fake_model.fail_with = None
        await session.ask("Thomas", "Hello?", 20)
        roles = [m.role for m in session.conversation("Thomas")]
        assert roles == ["system", "user", "assistant"]

    async def test_transcripts_are_per_character(self, make_session):
        session = make_session()
        await session.ask("Thomas", "First?", 0)
        await session.ask("Eleanor", "Second?", 0)
        await session.ask("Thomas", "Third?", 0)

        assert len(session.conversation("Thomas")) == 5
        assert len(session.conversation("Eleanor")) == 3
        assert session.questions_asked == 3

    async def test_concurrent_questions_keep_order(self, make_session, fake_model):
        fake_model.delay = 0.02
        session = make_session()

        await asyncio.gather(
            session.ask("Thomas", "Question one?", 0),
            session.ask("Thomas", "Question two?", 0),
            session.ask("Thomas", "Question three?", 0),
        )

        messages = session.conversation("Thomas").messages
        assert [m.role for m in messages] == [
            "system", "user", "assistant", "user", "assistant", "user", "assistant",
        ]
        assert "Question one?" in messages[1].content
        assert "Question two?" in messages[3].content
        assert "Question three?" in messages[5].content
        assert session.questions_asked == 3

    async def test_game_ending_mid_question_discards_exchange(self, make_session, fake_model):
        fake_model.delay = 0.2
        session = make_session()

        pending = asyncio.create_task(session.ask("Thomas", "Hello?", 0))
        await asyncio.sleep(0.05)
        await session.accuse("Eleanor")

        with pytest.raises(GameAlreadyOverError):
            await pending

        assert session.questions_asked == 0
        assert len(session.conversation("Thomas")) == 0

    async def test_cancelled_question_frees_slot_and_commits_nothing(self, make_session, model_factory):
        model = model_factory(delay=0.2)
        engine = DialogueEngine(model, timeout=5, max_concurrent_calls=1)
        session = make_session(dialogue_engine=engine)

        pending = asyncio.create_task(session.ask("Thomas", "Hello?", 0))
        await asyncio.sleep(0.05)
        assert engine._call_slots.locked()

        pending.cancel()
        with pytest.raises(asyncio.CancelledError):
            await pending

        assert not engine._call_slots.locked()
        assert session.questions_asked == 0
        assert len(session.conversation("Thomas")) == 0

        model.delay = 0
        await session.ask("Thomas", "Hello again?", 0)
        assert session.questions_asked == 1

    async def test_question_events_are_emitted(self, make_session):
        listener = RecordingListener()
        session = make_session(events=EventDispatcher([listener]))

        await session.ask("Eleanor", "Hello?", 0)

        assert listener.questions == ["Eleanor"]


class TestAccuse:
    """Test resolution by accusation."""

    async def test_correct_accusation_end_to_end(self, make_session):
        session = make_session()

        await session.ask("Thomas", "What did you see?", 0)
        verdict = await session.accuse("Eleanor")

        assert verdict.correct is True
        assert verdict.killer == "Eleanor"
        assert verdict.weapon == "a candlestick"
        assert verdict.location == "the study"
        assert verdict.questions == 1
        assert verdict.time_spent >= 0
        assert verdict.message == "🎉 Congratulations! You correctly identified Eleanor as the killer!"
        assert session.game_over is True
        assert session.status is SessionStatus.RESOLVED

        with pytest.raises(GameAlreadyOverError):
            await session.accuse("Eleanor")
        with pytest.raises(GameAlreadyOverError):
            await session.ask("Thomas", "One more thing?", 0)

    async def test_pressing_the_killer_then_accusing(self, make_session):
        session = make_session()
        question = "Where were you when the murder happened?"

        result = await session.ask("Eleanor", question, 20)

        # Two high-stress keywords on a calm, secretive personality
        increase = base_increase(question, "Calm and secretive housekeeper")
        assert increase == pytest.approx(35 * 0.7 * 1.2)
        assert max(0, 20 + increase - 5) - 1e-9 <= result.stress_level <= min(100, 20 + increase + 5) + 1e-9

        verdict = await session.accuse("Eleanor")
        assert verdict.correct is True
        assert session.game_over is True
        with pytest.raises(GameAlreadyOverError):
            await session.accuse("Eleanor")

    async def test_wrong_accusation_still_ends_game(self, make_session):
        session = make_session()

        verdict = await session.accuse("Thomas")

        assert verdict.correct is False
        assert verdict.killer == "Eleanor"
        assert verdict.message == "❌ Sorry, that's incorrect. The real killer was Eleanor."
        assert session.status is SessionStatus.RESOLVED

    async def test_accusation_requires_exact_name(self, make_session):
        session = make_session()
        verdict = await session.accuse("eleanor")
        assert verdict.correct is False

    async def test_time_spent_uses_wall_clock(self, make_session, clock):
        session = make_session(clock=clock)
        clock.advance(125.7)
        verdict = await session.accuse("Eleanor")
        assert verdict.time_spent == 125
        assert isinstance(verdict.time_spent, int)

    async def test_completion_event(self, make_session):
        listener = RecordingListener()
        session = make_session(events=EventDispatcher([listener]))

        await session.accuse("Eleanor")

        assert len(listener.completed) == 1
        summary = listener.completed[0]
        assert summary.solved is True
        assert summary.timed_out is False
        assert summary.questions_asked == 0

    async def test_failing_listener_does_not_break_accusation(self, make_session):
        session = make_session(events=EventDispatcher([ExplodingListener()]))
        verdict = await session.accuse("Eleanor")
        assert verdict.correct is True


class TestCountdown:
    """Test the timer."""

    async def test_countdown_from_two_ends_game_after_two_ticks(self, make_session):
        session = make_session(duration=2)

        assert await session.tick() is False
        assert session.remaining_time == 1
        assert session.game_over is False

        assert await session.tick() is True
        assert session.remaining_time == 0
        assert session.game_over is True
        assert session.status is SessionStatus.TIMED_OUT

        assert await session.tick() is False
        assert session.remaining_time == 0

    async def test_timed_out_game_rejects_actions(self, make_session):
        session = make_session(duration=1)
        await session.tick()

        with pytest.raises(GameAlreadyOverError):
            await session.accuse("Eleanor")
        with pytest.raises(GameAlreadyOverError):
            await session.ask("Thomas", "Hello?", 0)
        with pytest.raises(GameAlreadyOverError):
            await session.toggle_timer()

    async def test_timeout_emits_unsolved_completion(self, make_session):
        listener = RecordingListener()
        session = make_session(duration=1, events=EventDispatcher([listener]))

        await session.tick()

        assert listener.completed[0].solved is False
        assert listener.completed[0].timed_out is True

    async def test_paused_timer_does_not_count_down(self, make_session):
        session = make_session(duration=5)

        assert await session.toggle_timer() is False
        await session.tick()
        await session.tick()
        status = await session.timer_status()
        assert status.remaining_time == 5
        assert status.timer_enabled is False

        assert await session.toggle_timer() is True
        await session.tick()
        assert (await session.timer_status()).remaining_time == 4

    async def test_timer_status_fields(self, make_session):
        session = make_session(duration=60)
        assert (await session.timer_status()).to_dict() == {
            "remaining_time": 60,
            "timer_enabled": True,
            "game_over": False,
        }

    async def test_background_countdown_runs(self, make_session):
        session = make_session(duration=3, tick_interval=0.01)
        session.start()

        for _ in range(100):
            if session.game_over:
                break
            await asyncio.sleep(0.01)

        assert session.status is SessionStatus.TIMED_OUT
        assert session.remaining_time == 0

    async def test_accusation_stops_countdown(self, make_session):
        session = make_session(duration=100, tick_interval=0.01)
        session.start()
        task = session._countdown_task

        await session.accuse("Eleanor")
        await asyncio.sleep(0.05)

        assert task.done()
        assert session.remaining_time > 0


class TestAbandon:
    async def test_abandon_ends_game_and_reports_completion(self, make_session):
        listener = RecordingListener()
        session = make_session(events=EventDispatcher([listener]))
        await session.ask("Thomas", "Hello?", 0)

        summary = session.abandon()

        assert summary.abandoned is True
        assert summary.solved is False
        assert summary.timed_out is False
        assert summary.questions_asked == 1
        assert session.status is SessionStatus.ABANDONED
        assert listener.completed == [summary]
        with pytest.raises(GameAlreadyOverError):
            await session.accuse("Eleanor")

    async def test_abandon_after_game_over_is_a_no_op(self, make_session):
        listener = RecordingListener()
        session = make_session(events=EventDispatcher([listener]))
        await session.accuse("Thomas")

        assert session.abandon() is None
        assert session.status is SessionStatus.RESOLVED
        assert len(listener.completed) == 1


class TestOwnership:
    def test_owner_passes(self, make_session):
        make_session().ensure_owner("player-1")

    def test_other_player_is_denied(self, make_session):
        with pytest.raises(SessionAccessDeniedError):
            make_session().ensure_owner("player-2")
