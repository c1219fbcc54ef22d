"""
Prometheus metrics instrumentation for the investigation engine.

This module provides metrics tracking for:
- Request count and latency by route
- LLM API latency
- Questions, accusations and timed-out games
- Error rate by type
- Active session count

Usage:
    from metrics import (
        track_request,
        track_llm_call,
        track_error,
        update_active_sessions,
    )

    # Track a request
    with track_request(route="/api/v1/game/{session_id}/ask") as outcome:
        # ... handle request ...
        outcome["status"] = "success"

    # Track LLM call
    with track_llm_call(provider="openai", model="gpt-4o-mini"):
        # ... call LLM ...
        pass

    # Track error
    track_error("collaborator_unavailable")

    # Update active sessions
    update_active_sessions(5)
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Generator

from prometheus_client import Counter, Gauge, Histogram

# === COUNTERS ===

# Total number of HTTP requests by route and outcome
requests_total = Counter(
    "investigation_requests_total",
    "Total number of requests processed",
    ["route", "status"],
)

# Total number of errors by type
errors_total = Counter(
    "investigation_errors_total",
    "Total number of errors encountered",
    ["error_type"],
)

# Questions put to characters, by mystery
questions_total = Counter(
    "investigation_questions_total",
    "Total number of questions asked",
    ["mystery_id"],
)

# Accusations by mystery and whether they were correct
accusations_total = Counter(
    "investigation_accusations_total",
    "Total number of accusations made",
    ["mystery_id", "correct"],
)

# Games that ran out of time
timeouts_total = Counter(
    "investigation_timeouts_total",
    "Total number of games that ended on the countdown",
    ["mystery_id"],
)

# Idle games dropped by the registry sweep
abandoned_total = Counter(
    "investigation_abandoned_total",
    "Total number of idle games abandoned before an accusation",
    ["mystery_id"],
)

# === HISTOGRAMS ===

# Response time distribution (seconds) by route
response_time_seconds = Histogram(
    "investigation_response_time_seconds",
    "Time taken to process a complete request",
    ["route"],
    buckets=(0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, float("inf")),
)

# LLM API latency (seconds) by provider and model
llm_latency_seconds = Histogram(
    "investigation_llm_latency_seconds",
    "Time taken for LLM API calls",
    ["provider", "model"],
    buckets=(0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, float("inf")),
)

# === GAUGES ===

# Current number of live sessions in the registry
active_sessions_gauge = Gauge(
    "investigation_active_sessions",
    "Current number of game sessions held in the registry",
)

# === CONTEXT MANAGERS ===


@contextmanager
def track_request(route: str) -> Generator[dict[str, str], None, None]:
    """
    Context manager to track request metrics.

    The yielded dict carries the outcome; set its "status" before leaving
    the block. It defaults to "error" so an exception is counted as one.

    Args:
        route: The route template (not the concrete path)
    """
    outcome = {"status": "error"}
    start_time = time.time()
    try:
        yield outcome
    finally:
        duration = time.time() - start_time
        response_time_seconds.labels(route=route).observe(duration)
        requests_total.labels(route=route, status=outcome["status"]).inc()


@contextmanager
def track_llm_call(
    provider: str,
    model: str,
) -> Generator[None, None, None]:
    """
    Context manager to track LLM API call metrics.

    Args:
        provider: The LLM provider (e.g., "openai", "anthropic-claude", "ollama")
        model: The model name (e.g., "gpt-4o-mini")

    Example:
        with track_llm_call("openai", "gpt-4o-mini"):
            # ... call LLM API ...
            pass
    """
    start_time = time.time()
    try:
        yield
    finally:
        duration = time.time() - start_time
        llm_latency_seconds.labels(provider=provider, model=model).observe(duration)


def track_error(error_type: str) -> None:
    """
    Track an error occurrence.

    Args:
        error_type: The type of error (e.g., "invalid_request", "llm_timeout")

    Example:
        track_error("invalid_request")
    """
    errors_total.labels(error_type=error_type).inc()


def track_question(mystery_id: str) -> None:
    questions_total.labels(mystery_id=mystery_id).inc()


def track_accusation(mystery_id: str, correct: bool) -> None:
    accusations_total.labels(mystery_id=mystery_id, correct=str(correct).lower()).inc()


def track_timeout(mystery_id: str) -> None:
    timeouts_total.labels(mystery_id=mystery_id).inc()


def track_abandoned(mystery_id: str) -> None:
    abandoned_total.labels(mystery_id=mystery_id).inc()


def update_active_sessions(count: int) -> None:
    """
    Update the active sessions gauge.

    Args:
        count: The current number of sessions in the registry

    Example:
        update_active_sessions(5)
    """
    active_sessions_gauge.set(count)
