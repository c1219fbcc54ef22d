"""
Project-wide constants.

Centralizes magic numbers and configuration values for maintainability.
Values that operators tune per deployment are read from the environment;
web_server.py loads .env before this module is imported.
"""

from __future__ import annotations

import os
from typing import Final

# =============================================================================
# LLM Configuration
# =============================================================================
LLM_PROVIDER: Final[str] = os.getenv("LLM_PROVIDER", "openai").lower()
LLM_TEMPERATURE_DIALOGUE: Final[float] = float(os.getenv("LLM_TEMPERATURE_DIALOGUE", "0.7"))
LLM_MAX_TOKENS_DIALOGUE: Final[int] = int(os.getenv("LLM_MAX_TOKENS_DIALOGUE", "1000"))
LLM_TIMEOUT_SECONDS: Final[float] = float(os.getenv("LLM_TIMEOUT_SECONDS", "30"))
MAX_CONCURRENT_LLM_CALLS: Final[int] = int(os.getenv("MAX_CONCURRENT_LLM_CALLS", "16"))

OPENAI_MODEL: Final[str] = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
OPENAI_BASE_URL: Final[str | None] = os.getenv("OPENAI_BASE_URL")
ANTHROPIC_MODEL: Final[str] = os.getenv("ANTHROPIC_MODEL", "claude-3-5-haiku-20241022")
OLLAMA_HOST: Final[str] = os.getenv("OLLAMA_HOST", "http://localhost:11434")
OLLAMA_MODEL: Final[str] = os.getenv("OLLAMA_MODEL", "llama3.2")

# =============================================================================
# Game Mechanics - Timing
# =============================================================================
GAME_DURATION_SECONDS: Final[int] = int(os.getenv("GAME_DURATION_SECONDS", "3600"))  # 1 hour
TIMER_TICK_SECONDS: Final[float] = 1.0

# =============================================================================
# Game Mechanics - Stress
# =============================================================================
STRESS_MIN: Final[float] = 0.0
STRESS_MAX: Final[float] = 100.0
STRESS_BASE_INCREASE: Final[float] = 5.0
STRESS_HIGH_KEYWORD_BONUS: Final[float] = 15.0
STRESS_MEDIUM_KEYWORD_BONUS: Final[float] = 8.0
STRESS_LOW_KEYWORD_RELIEF: Final[float] = 5.0
STRESS_MIN_INCREASE: Final[float] = 1.0  # Calming topics never push the increase below this
STRESS_NOISE_AMPLITUDE: Final[float] = 5.0  # Uniform noise in [-5, +5]

# Upper bounds (exclusive) of each stress state
STRESS_CALM_BELOW: Final[float] = 25.0
STRESS_COMPOSED_BELOW: Final[float] = 40.0
STRESS_NERVOUS_BELOW: Final[float] = 55.0
STRESS_AGITATED_BELOW: Final[float] = 70.0
STRESS_STRESSED_BELOW: Final[float] = 85.0

# =============================================================================
# Session Registry
# =============================================================================
SESSION_ID_BYTES: Final[int] = 32
SESSION_RETENTION_SECONDS: Final[float] = float(os.getenv("SESSION_RETENTION_SECONDS", "900"))
SESSION_IDLE_TIMEOUT_SECONDS: Final[float] = float(os.getenv("SESSION_IDLE_TIMEOUT_SECONDS", "14400"))
SESSION_SWEEP_INTERVAL_SECONDS: Final[float] = 60.0
MAX_ACTIVE_SESSIONS: Final[int] = int(os.getenv("MAX_ACTIVE_SESSIONS", "1000"))

# =============================================================================
# Server Configuration
# =============================================================================
DEFAULT_SERVER_HOST: Final[str] = "0.0.0.0"
DEFAULT_SERVER_PORT: Final[int] = int(os.getenv("PORT", "8080"))
PLAYER_ID_HEADER: Final[str] = "X-Player-ID"
ANONYMOUS_PLAYER_ID: Final[str] = "anonymous"

# =============================================================================
# Logging Configuration
# =============================================================================
LOG_LEVEL_PRODUCTION: Final[str] = "INFO"
LOG_LEVEL_DEVELOPMENT: Final[str] = "DEBUG"
LOG_FORMAT_JSON: Final[bool] = True  # Set to False for development readable format
