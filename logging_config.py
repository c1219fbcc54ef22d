"""
Logging configuration for structured JSON logging.

Provides utilities for setting up JSON logging with contextual data and
different formats for development vs production environments. Session code
logs through a StructuredLoggerAdapter bound to the session's identifiers,
so every line about a game carries session_id, player_id and mystery_id.
"""

import logging
import os
import sys
from typing import Any, Optional

from pythonjsonlogger import jsonlogger

from constants import LOG_FORMAT_JSON, LOG_LEVEL_DEVELOPMENT, LOG_LEVEL_PRODUCTION


class ContextualJsonFormatter(jsonlogger.JsonFormatter):
    """
    JSON formatter that always emits timestamp, level and logger fields.

    Contextual fields passed through ``extra`` (or bound by an adapter) are
    included as top-level keys.
    """

    def __init__(self, *args, rename_fields: Optional[dict] = None, **kwargs):
        """Initialize formatter with optional field renaming."""
        super().__init__(*args, **kwargs)
        self.rename_fields = rename_fields or {}

    def add_fields(self, log_record: dict, record: logging.LogRecord, message_dict: dict) -> None:
        """Add custom fields to the log record."""
        super().add_fields(log_record, record, message_dict)

        if not log_record.get('timestamp'):
            log_record['timestamp'] = self.formatTime(record, self.datefmt)

        if not log_record.get('level'):
            log_record['level'] = record.levelname

        if not log_record.get('logger'):
            log_record['logger'] = record.name

        for old_name, new_name in self.rename_fields.items():
            if old_name in log_record:
                log_record[new_name] = log_record.pop(old_name)


def setup_logging(use_json: Optional[bool] = None, log_level: Optional[str] = None) -> None:
    """
    Configure application logging with JSON or readable format.

    Args:
        use_json: If True, use JSON format. If False, use readable format.
                  If None, reads LOG_FORMAT_JSON from the environment.
        log_level: Logging level (e.g., "INFO", "DEBUG").
                   If None, uses LOG_LEVEL or derives it from ENV.
    """
    if use_json is None:
        use_json = os.getenv("LOG_FORMAT_JSON", str(LOG_FORMAT_JSON)).lower() in ("true", "1", "yes")

    if log_level is None:
        env = os.getenv("ENV", "production").lower()
        default_level = LOG_LEVEL_DEVELOPMENT if env in ("dev", "development") else LOG_LEVEL_PRODUCTION
        log_level = os.getenv("LOG_LEVEL", default_level)

    # Remove all existing handlers
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)

    if use_json:
        formatter = ContextualJsonFormatter(
            '%(timestamp)s %(level)s %(logger)s %(message)s',
            rename_fields={
                'timestamp': '@timestamp',
                'level': 'severity',
            }
        )
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    # aiohttp's access log is noisy at DEBUG and duplicates our request logging
    logging.getLogger("aiohttp.access").setLevel(logging.WARNING)


class StructuredLoggerAdapter(logging.LoggerAdapter):
    """
    Logger adapter that adds contextual information to all log messages.

    Usage:
        logger = StructuredLoggerAdapter(logging.getLogger(__name__), {
            'session_id': session.session_id,
            'mystery_id': session.mystery_id,
        })
        logger.info_event("question_asked", "Question answered", character="Thomas")
    """

    def process(self, msg: str, kwargs: dict) -> tuple[str, dict]:
        """Process log message and add context."""
        # Copy so the caller's dict and the bound context are never mutated
        extra = dict(self.extra)
        extra.update(kwargs.get('extra') or {})
        kwargs['extra'] = extra
        return msg, kwargs

    def log_event(
        self,
        level: int,
        event_type: str,
        message: str,
        **context: Any
    ) -> None:
        """
        Log a structured event with type and context.

        Args:
            level: Logging level (e.g., logging.INFO)
            event_type: Type of event (e.g., "session_started", "accusation_made")
            message: Human-readable message
            **context: Additional contextual key-value pairs
        """
        context['event_type'] = event_type
        self.log(level, message, extra=context)

    def info_event(self, event_type: str, message: str, **context: Any) -> None:
        """Log an INFO level event."""
        self.log_event(logging.INFO, event_type, message, **context)

    def error_event(self, event_type: str, message: str, **context: Any) -> None:
        """Log an ERROR level event."""
        self.log_event(logging.ERROR, event_type, message, **context)

    def warning_event(self, event_type: str, message: str, **context: Any) -> None:
        """Log a WARNING level event."""
        self.log_event(logging.WARNING, event_type, message, **context)

    def debug_event(self, event_type: str, message: str, **context: Any) -> None:
        """Log a DEBUG level event."""
        self.log_event(logging.DEBUG, event_type, message, **context)


def bind_session_logger(
    name: str,
    session_id: str,
    player_id: str,
    mystery_id: str,
) -> StructuredLoggerAdapter:
    """
    Get a logger bound to one game session's identifiers.

    Only a prefix of the session id is logged; the full id is a bearer
    secret for the session.
    """
    return StructuredLoggerAdapter(logging.getLogger(name), {
        'session_id': session_id[:8],
        'player_id': player_id,
        'mystery_id': mystery_id,
    })
