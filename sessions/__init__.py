"""
Sessions Package

This package contains the components that run live games.

Components:
- DialogueEngine: Builds transcripts, calls the model, parses replies
- GameSession: One game's state, countdown and resolution
- SessionRegistry: Creates, looks up and retires sessions

Usage:
    from sessions.dialogue_engine import DialogueEngine
    from sessions.game_session import GameSession
    from sessions.session_registry import SessionRegistry

Note: Import directly from submodules to avoid circular import issues.
"""

__all__ = [
    "DialogueEngine",
    "GameSession",
    "SessionRegistry",
]
