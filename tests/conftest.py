"""
Shared fixtures for the investigation engine tests.

FakeCollaborator is a real BaseLLMModel subclass, so tests exercise the
LangChain invoke() path and the executor hand-off without any network.
"""

from __future__ import annotations

import random
import threading
import time
from typing import Any

import pytest
from pydantic import ConfigDict, Field, PrivateAttr

from llm_prompt_core.models.base import BaseLLMModel
from mysteries.loader import mystery_from_dict
from sessions.dialogue_engine import DialogueEngine
from sessions.game_session import GameSession

DEFAULT_REPLY = '{"response": "I was in the garden all evening.", "emotion": "nervous"}'


class FakeCollaborator(BaseLLMModel):
    """Scripted text-generation model."""

    model_name: str = "fake-model"
    replies: list[str] = Field(default_factory=list)
    default_reply: str = DEFAULT_REPLY
    fail_with: Any = None
    delay: float = 0.0
    available: bool = True
    prompts: list[str] = Field(default_factory=list)
    max_in_flight: int = 0

    _in_flight: int = PrivateAttr(default=0)
    _lock: Any = PrivateAttr(default_factory=threading.Lock)

    model_config = ConfigDict(arbitrary_types_allowed=True)

    def _call(self, prompt, stop=None, run_manager=None, **kwargs) -> str:
        with self._lock:
            self.prompts.append(prompt)
            self._in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self._in_flight)
        try:
            if self.delay:
                time.sleep(self.delay)
            if self.fail_with is not None:
                raise self.fail_with
            with self._lock:
                return self.replies.pop(0) if self.replies else self.default_reply
        finally:
            with self._lock:
                self._in_flight -= 1

    def is_model_available(self) -> bool:
        return self.available

    @property
    def _llm_type(self) -> str:
        return "fake"

    @property
    def _identifying_params(self) -> dict[str, Any]:
        return {"model_name": self.model_name}


SAMPLE_MYSTERY = {
    "title": "Murder at the Vicarage",
    "killer": "Eleanor",
    "weapon": "a candlestick",
    "location": "the study",
    "introduction": "The vicar has been found dead in his study.",
    "characters": [
        {
            "name": "Eleanor",
            "personality": "Calm and secretive housekeeper",
            "knowledge": ["She had a key to the study", "She argued with the vicar"],
            "reliable": False,
        },
        {
            "name": "Thomas",
            "personality": "Nervous gardener",
            "knowledge": ["He saw a light in the study at midnight"],
            "reliable": True,
        },
    ],
}


@pytest.fixture
def fake_model():
    return FakeCollaborator()


@pytest.fixture
def sample_mystery():
    return mystery_from_dict("vicarage", SAMPLE_MYSTERY)


@pytest.fixture
def dialogue_engine(fake_model):
    return DialogueEngine(fake_model, timeout=5)


@pytest.fixture
def make_session(sample_mystery, dialogue_engine):
    """Factory for sessions whose countdown is driven by hand via tick()."""

    def _make(**overrides) -> GameSession:
        options = {
            "session_id": "test-session-0123456789",
            "player_id": "player-1",
            "mystery": sample_mystery,
            "dialogue_engine": dialogue_engine,
            "rng": random.Random(7),
        }
        options.update(overrides)
        return GameSession(**options)

    return _make


class FakeClock:
    """Manually advanced wall clock."""

    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def model_factory():
    """Build FakeCollaborators with custom behaviour."""
    return FakeCollaborator
