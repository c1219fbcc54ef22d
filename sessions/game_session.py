"""
Game Session Module

One live game: an immutable mystery snapshot, a transcript per character,
the countdown and the resolution state.

Every field is mutated under the session's asyncio.Lock, including by the
countdown task, so a game ends exactly once whichever of "timer reached
zero" and "player accused" gets there first. Model calls never hold that
lock; a per-character lock keeps questions to the same character in order.
"""

from __future__ import annotations

import asyncio
import math
import random
import time
from collections import defaultdict
from dataclasses import asdict, dataclass, replace
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable

from constants import GAME_DURATION_SECONDS, STRESS_MAX, STRESS_MIN, TIMER_TICK_SECONDS
from exceptions import (
    CharacterNotFoundError,
    GameAlreadyOverError,
    InvalidRequestError,
    SessionAccessDeniedError,
)
from game_events import EventDispatcher, GameSummary
from llm_prompt_core.types import ConversationLog
from logging_config import bind_session_logger
from stress_model import compute_stress

if TYPE_CHECKING:
    from mysteries.base import Mystery
    from sessions.dialogue_engine import DialogueEngine

CORRECT_ACCUSATION_MESSAGE = "🎉 Congratulations! You correctly identified {killer} as the killer!"
WRONG_ACCUSATION_MESSAGE = "❌ Sorry, that's incorrect. The real killer was {killer}."


class SessionStatus(str, Enum):
    ACTIVE = "active"
    TIMED_OUT = "timed_out"
    RESOLVED = "resolved"
    ABANDONED = "abandoned"


@dataclass(frozen=True)
class AskResult:
    """Outcome of one question."""

    character: str
    question: str
    response: str
    emotion: str
    stress_level: float
    stress_change: float
    stress_state: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Verdict:
    """Outcome of an accusation. The solution is always revealed."""

    correct: bool
    killer: str
    weapon: str
    location: str
    time_spent: int
    questions: int
    message: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class TimerStatus:
    remaining_time: int
    timer_enabled: bool
    game_over: bool

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class GameSession:
    """
    A single player's game of one mystery.

    States go active -> timed_out, active -> resolved or (when the registry
    drops an idle game) active -> abandoned, and never leave a terminal state.
    """

    def __init__(
        self,
        session_id: str,
        player_id: str,
        mystery: Mystery,
        dialogue_engine: DialogueEngine,
        events: EventDispatcher | None = None,
        duration: int = GAME_DURATION_SECONDS,
        tick_interval: float = TIMER_TICK_SECONDS,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Initialize a game session.

        Args:
            session_id: Opaque, unguessable session id
            player_id: Player who owns the session
            mystery: The mystery snapshot this game plays
            dialogue_engine: Engine used for every question
            events: Lifecycle event dispatcher
            duration: Countdown length in seconds
            tick_interval: Real seconds between countdown ticks; each tick
                removes one second of game time
            rng: Noise source for the stress model
            clock: Wall-clock source, injectable for tests
        """
        self.session_id = session_id
        self.player_id = player_id
        self.mystery = mystery
        self.mystery_id = mystery.id
        self.dialogue_engine = dialogue_engine
        self.events = events or EventDispatcher()
        self.tick_interval = tick_interval
        self._rng = rng
        self._clock = clock

        self.remaining_time = max(0, int(duration))
        self.timer_enabled = True
        self.game_over = False
        self.status = SessionStatus.ACTIVE
        self.questions_asked = 0
        self.started_at = clock()
        self.finished_at: float | None = None
        self.last_activity = self.started_at
        self.conversations: dict[str, ConversationLog] = {}

        self._lock = asyncio.Lock()
        self._character_locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)
        self._countdown_task: asyncio.Task | None = None

        self.logger = bind_session_logger(__name__, session_id, player_id, mystery.id)

    # ------------------------------------------------------------------
    # Lifecycle helpers
    # ------------------------------------------------------------------

    @property
    def is_terminal(self) -> bool:
        return self.status is not SessionStatus.ACTIVE

    def ensure_owner(self, player_id: str) -> None:
        """Raise unless the player owns this session."""
        if player_id != self.player_id:
            raise SessionAccessDeniedError(self.session_id, player_id)

    def _ensure_active(self) -> None:
        if self.game_over:
            raise GameAlreadyOverError(self.session_id, self.status.value)

    def _finish(self, status: SessionStatus) -> GameSummary:
        """Move to a terminal state. Caller must hold the session lock."""
        self.game_over = True
        self.status = status
        self.finished_at = self._clock()
        return GameSummary(
            session_id=self.session_id,
            player_id=self.player_id,
            mystery_id=self.mystery_id,
            solved=False,
            timed_out=status is SessionStatus.TIMED_OUT,
            abandoned=status is SessionStatus.ABANDONED,
            time_spent=self.finished_at - self.started_at,
            questions_asked=self.questions_asked,
        )

    def conversation(self, character_name: str) -> ConversationLog:
        """The committed transcript with a character (empty before first contact)."""
        return self.conversations.get(character_name, ConversationLog())

    def abandon(self) -> GameSummary | None:
        """
        End an idle game that the registry is about to retire.

        Runs synchronously on the event loop. No coroutine holds the session
        lock across an await, so the state cannot be mid-update here.

        Returns:
            The completion summary, or None if the game had already ended
        """
        if self.game_over:
            return None

        summary = self._finish(SessionStatus.ABANDONED)
        self.stop()
        self.logger.info_event(
            "session_abandoned",
            "Idle game abandoned",
            questions_asked=summary.questions_asked,
        )
        self.events.session_completed(summary)
        return summary

    # ------------------------------------------------------------------
    # Countdown
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start the countdown task."""
        if self._countdown_task is None and not self.game_over:
            self._countdown_task = asyncio.create_task(self._countdown_loop())
            self.logger.debug_event("countdown_started", "Started countdown", remaining_time=self.remaining_time)

    def stop(self) -> None:
        """Cancel the countdown task if it is running."""
        task = self._countdown_task
        self._countdown_task = None
        if task is not None and task is not asyncio.current_task() and not task.done():
            task.cancel()

    async def _countdown_loop(self) -> None:
        """Background task that ticks once per interval until the game ends."""
        while not self.game_over:
            await asyncio.sleep(self.tick_interval)
            await self.tick()

    async def tick(self) -> bool:
        """
        Advance the countdown by one second.

        Does nothing while the timer is paused or once the game is over.

        Returns:
            True if this tick ended the game
        """
        async with self._lock:
            if self.game_over or not self.timer_enabled:
                return False

            self.remaining_time = max(0, self.remaining_time - 1)
            if self.remaining_time > 0:
                return False

            summary = self._finish(SessionStatus.TIMED_OUT)

        self.logger.info_event(
            "session_timed_out",
            "Time ran out",
            questions_asked=summary.questions_asked,
        )
        self.events.session_completed(summary)
        return True

    async def toggle_timer(self) -> bool:
        """
        Pause or resume the countdown.

        Returns:
            The new timer_enabled value

        Raises:
            GameAlreadyOverError: If the game has ended
        """
        async with self._lock:
            self._ensure_active()
            self.timer_enabled = not self.timer_enabled
            self.last_activity = self._clock()
            enabled = self.timer_enabled

        self.logger.info_event("timer_toggled", "Timer toggled", timer_enabled=enabled)
        return enabled

    async def timer_status(self) -> TimerStatus:
        async with self._lock:
            return TimerStatus(
                remaining_time=self.remaining_time,
                timer_enabled=self.timer_enabled,
                game_over=self.game_over,
            )

    # ------------------------------------------------------------------
    # Player actions
    # ------------------------------------------------------------------

    async def ask(self, character_name: str, question: str, current_stress: float) -> AskResult:
        """
        Ask a character a question.

        Args:
            character_name: Exact name of the character
            question: The player's question
            current_stress: The character's stress as currently shown to the player

        Returns:
            AskResult with the reply and the character's new stress

        Raises:
            GameAlreadyOverError: If the game has ended (also if it ended
                while the model was answering; the exchange is then discarded)
            CharacterNotFoundError: If no character has that name
            InvalidRequestError: If the question is blank or the stress is out of range
            CollaboratorUnavailableError: If the model failed; nothing is applied
        """
        if not isinstance(question, str) or not question.strip():
            raise InvalidRequestError("question must be a non-empty string")
        if (
            isinstance(current_stress, bool)
            or not isinstance(current_stress, (int, float))
            or math.isnan(current_stress)
            or not STRESS_MIN <= current_stress <= STRESS_MAX
        ):
            raise InvalidRequestError(
                f"current_stress must be a number between {STRESS_MIN:.0f} and {STRESS_MAX:.0f}"
            )

        async with self._lock:
            self._ensure_active()
            character = self.mystery.get_character(character_name)
            if character is None:
                raise CharacterNotFoundError(character_name)

        async with self._character_locks[character.name]:
            async with self._lock:
                self._ensure_active()
                conversation = self.conversation(character.name)

            reply, extended = await self.dialogue_engine.ask(
                character, conversation, question, self.mystery
            )

            async with self._lock:
                if self.game_over:
                    self.logger.info_event(
                        "exchange_discarded",
                        "Game ended while the character was answering",
                        character=character.name,
                    )
                    raise GameAlreadyOverError(self.session_id, self.status.value)

                self.conversations[character.name] = extended
                self.questions_asked += 1
                self.last_activity = self._clock()

        stress = compute_stress(question, character.personality, float(current_stress), self._rng)

        self.logger.info_event(
            "question_answered",
            "Character answered",
            character=character.name,
            emotion=reply.emotion,
            stress_before=round(float(current_stress), 1),
            stress_after=round(stress.new_stress, 1),
            stress_state=stress.state.value,
        )
        self.events.question_asked(self.session_id, self.player_id, self.mystery_id, character.name)

        return AskResult(
            character=character.name,
            question=question,
            response=reply.response,
            emotion=reply.emotion,
            stress_level=stress.new_stress,
            stress_change=stress.stress_change,
            stress_state=stress.state.value,
        )

    async def accuse(self, suspect: str) -> Verdict:
        """
        Accuse a suspect and end the game.

        The game ends whether or not the accusation is right. Matching is
        exact string equality against the killer's name.

        Raises:
            GameAlreadyOverError: If the game has already ended
        """
        async with self._lock:
            self._ensure_active()
            correct = suspect == self.mystery.killer
            summary = self._finish(SessionStatus.RESOLVED)
            summary = replace(summary, solved=correct)

        self.stop()

        killer = self.mystery.killer
        template = CORRECT_ACCUSATION_MESSAGE if correct else WRONG_ACCUSATION_MESSAGE
        verdict = Verdict(
            correct=correct,
            killer=killer,
            weapon=self.mystery.weapon,
            location=self.mystery.location,
            time_spent=int(summary.time_spent),
            questions=summary.questions_asked,
            message=template.format(killer=killer),
        )

        self.logger.info_event(
            "accusation_made",
            "Player accused a suspect",
            suspect=suspect,
            correct=correct,
            time_spent=round(summary.time_spent, 1),
            questions_asked=summary.questions_asked,
        )
        self.events.session_completed(summary)
        return verdict
