"""
Custom exceptions for the investigation engine.

Every error a request can run into is a subclass of InvestigationError so the
HTTP layer can translate the whole family into status codes in one place.
"""

from __future__ import annotations


class InvestigationError(Exception):
    """Base exception for all investigation engine errors."""

    status_code: int = 500
    error_code: str = "internal_error"


class InvalidRequestError(InvestigationError):
    """Raised when a request body is missing, malformed or out of range."""

    status_code = 400
    error_code = "invalid_request"


class SessionError(InvestigationError):
    """Base exception for session-related errors."""

    pass


class SessionNotFoundError(SessionError):
    """Raised when a requested session doesn't exist (or was retired)."""

    status_code = 404
    error_code = "session_not_found"

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"Game session not found: {session_id}")


class SessionAccessDeniedError(SessionError):
    """Raised when a player touches a session owned by someone else."""

    status_code = 403
    error_code = "access_denied"

    def __init__(self, session_id: str, player_id: str) -> None:
        self.session_id = session_id
        self.player_id = player_id
        super().__init__(f"Player '{player_id}' does not own session {session_id}")


class GameAlreadyOverError(SessionError):
    """Raised when mutating a session that has timed out or been resolved."""

    status_code = 409
    error_code = "game_over"

    def __init__(self, session_id: str, status: str) -> None:
        self.session_id = session_id
        self.status = status
        super().__init__(f"Game session {session_id} is already over ({status})")


class SessionCapacityError(SessionError):
    """Raised when the registry cannot hold another live session."""

    status_code = 503
    error_code = "capacity_exceeded"

    def __init__(self, limit: int) -> None:
        self.limit = limit
        super().__init__(f"Too many active game sessions (limit {limit})")


class CharacterNotFoundError(InvestigationError):
    """Raised when a requested character isn't part of the mystery."""

    status_code = 404
    error_code = "character_not_found"

    def __init__(self, character_name: str) -> None:
        self.character_name = character_name
        super().__init__(f"Character not found: {character_name}")


class MysteryLoadError(InvestigationError):
    """Raised when a mystery file cannot be read or fails validation."""

    status_code = 500
    error_code = "mystery_load_failed"


class MysteryNotFoundError(MysteryLoadError):
    """Raised when a mystery id is not in the catalog."""

    status_code = 404
    error_code = "mystery_not_found"

    def __init__(self, mystery_id: str) -> None:
        self.mystery_id = mystery_id
        super().__init__(f"Mystery not found: {mystery_id}")


class LLMError(InvestigationError):
    """Raised when LLM operations fail."""

    status_code = 503
    error_code = "collaborator_unavailable"


class CollaboratorUnavailableError(LLMError):
    """Raised when the text-generation call fails; the session stays usable."""

    pass


class LLMTimeoutError(CollaboratorUnavailableError):
    """Raised when the text-generation call exceeds its time bound."""

    def __init__(self, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(f"Text generation timed out after {timeout:.0f}s")
