"""
Stress Model

Derives a character's stress from the content of a question. The signal is a
simplified scalar in [0, 100]: a base increase, keyword bonuses or relief,
personality multipliers and a little uniform noise so repeated questions do
not read as mechanical.

The client owns the current value and sends it with every question; this
module is pure and keeps no state of its own.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum
from typing import Final

from constants import (
    STRESS_AGITATED_BELOW,
    STRESS_BASE_INCREASE,
    STRESS_CALM_BELOW,
    STRESS_COMPOSED_BELOW,
    STRESS_HIGH_KEYWORD_BONUS,
    STRESS_LOW_KEYWORD_RELIEF,
    STRESS_MAX,
    STRESS_MEDIUM_KEYWORD_BONUS,
    STRESS_MIN,
    STRESS_MIN_INCREASE,
    STRESS_NERVOUS_BELOW,
    STRESS_NOISE_AMPLITUDE,
    STRESS_STRESSED_BELOW,
)

HIGH_STRESS_KEYWORDS: Final[tuple[str, ...]] = (
    "murder",
    "kill",
    "weapon",
    "blood",
    "death",
    "guilty",
    "lie",
    "alibi",
    "where were you",
    "motive",
    "why did you",
)

MEDIUM_STRESS_KEYWORDS: Final[tuple[str, ...]] = (
    "suspicious",
    "secret",
    "hidden",
    "truth",
    "evidence",
    "witness",
    "saw",
    "heard",
    "relationship",
    "money",
)

LOW_STRESS_KEYWORDS: Final[tuple[str, ...]] = (
    "weather",
    "family",
    "work",
    "hobby",
    "general",
    "hello",
    "how are",
    "nice day",
    "background",
)

# Checked independently; a "nervous, secretive" personality gets both
PERSONALITY_MULTIPLIERS: Final[tuple[tuple[str, float], ...]] = (
    ("nervous", 1.3),
    ("calm", 0.7),
    ("secretive", 1.2),
    ("aggressive", 1.1),
)


class StressState(str, Enum):
    """Display label for a stress value."""

    CALM = "calm"
    COMPOSED = "composed"
    NERVOUS = "nervous"
    AGITATED = "agitated"
    STRESSED = "stressed"
    PANICKING = "panicking"


_STATE_THRESHOLDS: Final[tuple[tuple[float, StressState], ...]] = (
    (STRESS_CALM_BELOW, StressState.CALM),
    (STRESS_COMPOSED_BELOW, StressState.COMPOSED),
    (STRESS_NERVOUS_BELOW, StressState.NERVOUS),
    (STRESS_AGITATED_BELOW, StressState.AGITATED),
    (STRESS_STRESSED_BELOW, StressState.STRESSED),
)


@dataclass(frozen=True)
class StressResult:
    """Outcome of one stress computation."""

    new_stress: float
    stress_change: float
    state: StressState


def _count_matches(text: str, keywords: tuple[str, ...]) -> int:
    return sum(1 for keyword in keywords if keyword in text)


def base_increase(question: str, personality: str) -> float:
    """
    Stress increase for a question before noise is applied.

    Args:
        question: The player's question
        personality: The character's personality description

    Returns:
        The increase after keyword scoring and personality multipliers
    """
    text = question.lower()
    increase = STRESS_BASE_INCREASE
    increase += STRESS_HIGH_KEYWORD_BONUS * _count_matches(text, HIGH_STRESS_KEYWORDS)
    increase += STRESS_MEDIUM_KEYWORD_BONUS * _count_matches(text, MEDIUM_STRESS_KEYWORDS)

    for keyword in LOW_STRESS_KEYWORDS:
        if keyword in text:
            increase = max(STRESS_MIN_INCREASE, increase - STRESS_LOW_KEYWORD_RELIEF)

    traits = personality.lower()
    for trait, multiplier in PERSONALITY_MULTIPLIERS:
        if trait in traits:
            increase *= multiplier

    return increase


def stress_state(value: float) -> StressState:
    """Map a stress value onto its display label."""
    for upper_bound, state in _STATE_THRESHOLDS:
        if value < upper_bound:
            return state
    return StressState.PANICKING


def compute_stress(
    question: str,
    personality: str,
    current_stress: float,
    rng: random.Random | None = None,
) -> StressResult:
    """
    Compute a character's new stress after being asked a question.

    Args:
        question: The player's question
        personality: The character's personality description
        current_stress: The value the client currently displays
        rng: Source of noise; pass a seeded Random for reproducible results

    Returns:
        StressResult with the clamped new value, the applied change and the
        state label for the new value
    """
    rng = rng or random
    increase = base_increase(question, personality)
    increase += rng.uniform(-STRESS_NOISE_AMPLITUDE, STRESS_NOISE_AMPLITUDE)

    new_stress = max(STRESS_MIN, min(STRESS_MAX, current_stress + increase))
    return StressResult(
        new_stress=new_stress,
        stress_change=new_stress - current_stress,
        state=stress_state(new_stress),
    )
