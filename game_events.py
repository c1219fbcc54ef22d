"""
Game lifecycle events.

The engine does not store statistics or achievements itself. It reports
lifecycle events to listeners, and whatever owns that bookkeeping subscribes.
Listeners must never be able to break a game: a failing listener is logged
and skipped.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

import metrics

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GameSummary:
    """What a finished game looked like."""

    session_id: str
    player_id: str
    mystery_id: str
    solved: bool
    timed_out: bool
    time_spent: float
    questions_asked: int
    abandoned: bool = False


class GameEventListener:
    """
    Base listener. Override the hooks you care about; the defaults do nothing.
    """

    def session_started(self, session_id: str, player_id: str, mystery_id: str) -> None:
        pass

    def question_asked(
        self,
        session_id: str,
        player_id: str,
        mystery_id: str,
        character_name: str,
    ) -> None:
        pass

    def session_completed(self, summary: GameSummary) -> None:
        pass


class LoggingEventListener(GameEventListener):
    """Writes every lifecycle event as a structured log line."""

    def session_started(self, session_id: str, player_id: str, mystery_id: str) -> None:
        logger.info(
            "Game started",
            extra={
                "event_type": "session_started",
                "session_id": session_id[:8],
                "player_id": player_id,
                "mystery_id": mystery_id,
            },
        )

    def question_asked(
        self,
        session_id: str,
        player_id: str,
        mystery_id: str,
        character_name: str,
    ) -> None:
        logger.debug(
            "Question asked",
            extra={
                "event_type": "question_asked",
                "session_id": session_id[:8],
                "player_id": player_id,
                "mystery_id": mystery_id,
                "character": character_name,
            },
        )

    def session_completed(self, summary: GameSummary) -> None:
        logger.info(
            "Game completed",
            extra={
                "event_type": "session_completed",
                "session_id": summary.session_id[:8],
                "player_id": summary.player_id,
                "mystery_id": summary.mystery_id,
                "solved": summary.solved,
                "timed_out": summary.timed_out,
                "abandoned": summary.abandoned,
                "time_spent": round(summary.time_spent, 1),
                "questions_asked": summary.questions_asked,
            },
        )


class MetricsEventListener(GameEventListener):
    """Feeds lifecycle events into the Prometheus counters."""

    def question_asked(
        self,
        session_id: str,
        player_id: str,
        mystery_id: str,
        character_name: str,
    ) -> None:
        metrics.track_question(mystery_id)

    def session_completed(self, summary: GameSummary) -> None:
        if summary.abandoned:
            metrics.track_abandoned(summary.mystery_id)
        elif summary.timed_out:
            metrics.track_timeout(summary.mystery_id)
        else:
            metrics.track_accusation(summary.mystery_id, summary.solved)


class EventDispatcher:
    """Fans events out to listeners, isolating each listener's failures."""

    def __init__(self, listeners: Iterable[GameEventListener] = ()) -> None:
        self.listeners: list[GameEventListener] = list(listeners)

    def add_listener(self, listener: GameEventListener) -> None:
        self.listeners.append(listener)

    def _dispatch(self, hook: str, *args) -> None:
        for listener in self.listeners:
            try:
                getattr(listener, hook)(*args)
            except Exception:
                logger.exception(
                    "Event listener %s failed on %s", type(listener).__name__, hook
                )
                metrics.track_error("event_listener_error")

    def session_started(self, session_id: str, player_id: str, mystery_id: str) -> None:
        self._dispatch("session_started", session_id, player_id, mystery_id)

    def question_asked(
        self,
        session_id: str,
        player_id: str,
        mystery_id: str,
        character_name: str,
    ) -> None:
        self._dispatch("question_asked", session_id, player_id, mystery_id, character_name)

    def session_completed(self, summary: GameSummary) -> None:
        self._dispatch("session_completed", summary)


def default_dispatcher() -> EventDispatcher:
    """Dispatcher with the listeners every deployment runs."""
    return EventDispatcher([LoggingEventListener(), MetricsEventListener()])
