"""
Session Registry Module

Owns every live GameSession, keyed by an unguessable id. The registry starts
each session's countdown when it is created and cancels it when the session
is retired. A background sweep bounds memory: finished games are kept for a
short grace window (so the client can still read the final timer), and games
nobody has touched for hours are dropped.
"""

from __future__ import annotations

import asyncio
import logging
import random
import secrets
import time
from typing import TYPE_CHECKING, Callable

from constants import (
    GAME_DURATION_SECONDS,
    MAX_ACTIVE_SESSIONS,
    SESSION_ID_BYTES,
    SESSION_IDLE_TIMEOUT_SECONDS,
    SESSION_RETENTION_SECONDS,
    SESSION_SWEEP_INTERVAL_SECONDS,
    TIMER_TICK_SECONDS,
)
from exceptions import SessionCapacityError, SessionNotFoundError
from game_events import EventDispatcher
from metrics import update_active_sessions
from sessions.game_session import GameSession

if TYPE_CHECKING:
    from mysteries.base import Mystery
    from sessions.dialogue_engine import DialogueEngine

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Creates, looks up and retires game sessions."""

    def __init__(
        self,
        dialogue_engine: DialogueEngine,
        events: EventDispatcher | None = None,
        max_sessions: int = MAX_ACTIVE_SESSIONS,
        retention_seconds: float = SESSION_RETENTION_SECONDS,
        idle_timeout_seconds: float = SESSION_IDLE_TIMEOUT_SECONDS,
        sweep_interval: float = SESSION_SWEEP_INTERVAL_SECONDS,
        game_duration: int = GAME_DURATION_SECONDS,
        tick_interval: float = TIMER_TICK_SECONDS,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.dialogue_engine = dialogue_engine
        self.events = events or EventDispatcher()
        self.max_sessions = max_sessions
        self.retention_seconds = retention_seconds
        self.idle_timeout_seconds = idle_timeout_seconds
        self.sweep_interval = sweep_interval
        self.game_duration = game_duration
        self.tick_interval = tick_interval
        self._rng = rng
        self._clock = clock

        self._sessions: dict[str, GameSession] = {}
        self._sweeper_task: asyncio.Task | None = None

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def _new_session_id(self) -> str:
        while True:
            session_id = secrets.token_urlsafe(SESSION_ID_BYTES)
            if session_id not in self._sessions:
                return session_id

    def create_session(self, mystery: Mystery, player_id: str) -> GameSession:
        """
        Create and start a new game session.

        Args:
            mystery: Mystery snapshot the game plays
            player_id: Player who owns the session

        Returns:
            The running session

        Raises:
            SessionCapacityError: If the registry is full even after a sweep
        """
        if len(self._sessions) >= self.max_sessions:
            self.sweep()
            if len(self._sessions) >= self.max_sessions:
                logger.warning("Session capacity reached (%d)", self.max_sessions)
                raise SessionCapacityError(self.max_sessions)

        session = GameSession(
            session_id=self._new_session_id(),
            player_id=player_id,
            mystery=mystery,
            dialogue_engine=self.dialogue_engine,
            events=self.events,
            duration=self.game_duration,
            tick_interval=self.tick_interval,
            rng=self._rng,
            clock=self._clock,
        )
        self._sessions[session.session_id] = session
        session.start()
        update_active_sessions(len(self._sessions))

        self.events.session_started(session.session_id, player_id, mystery.id)
        return session

    def get_session(self, session_id: str) -> GameSession:
        """
        Look up a session.

        Raises:
            SessionNotFoundError: If no live session has that id
        """
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def retire(self, session_id: str) -> bool:
        """
        Remove a session and cancel its countdown.

        Returns:
            True if a session was removed
        """
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False

        session.stop()
        update_active_sessions(len(self._sessions))
        session.logger.debug_event("session_retired", "Session retired", status=session.status.value)
        return True

    def sweep(self) -> list[str]:
        """
        Retire finished sessions past the retention window and idle sessions.

        Idle sessions that were still active are ended as abandoned first, so
        listeners see a completion for every game.

        Returns:
            Ids of the retired sessions
        """
        now = self._clock()
        expired = []
        for session_id, session in self._sessions.items():
            if session.is_terminal:
                if session.finished_at is not None and now - session.finished_at >= self.retention_seconds:
                    expired.append(session_id)
            elif now - session.last_activity >= self.idle_timeout_seconds:
                expired.append(session_id)

        for session_id in expired:
            # An idle game still in play is reported as abandoned before it goes
            self._sessions[session_id].abandon()
            self.retire(session_id)

        if expired:
            logger.info("Swept %d sessions (%d remain)", len(expired), len(self._sessions))
        return expired

    def start_sweeper(self) -> None:
        """Start the periodic sweep task."""
        if self._sweeper_task is None:
            self._sweeper_task = asyncio.create_task(self._sweep_loop())

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self.sweep_interval)
            try:
                self.sweep()
            except Exception:
                logger.exception("Session sweep failed")

    async def close(self) -> None:
        """Stop the sweeper and retire every session."""
        if self._sweeper_task is not None:
            self._sweeper_task.cancel()
            try:
                await self._sweeper_task
            except asyncio.CancelledError:
                pass
            self._sweeper_task = None

        for session_id in list(self._sessions):
            self.retire(session_id)
