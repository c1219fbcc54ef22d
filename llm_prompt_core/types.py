"""
Data types for the LLM prompt system.

This module defines the core data structures passed to and from the
text-generation collaborator:
- Message: A single transcript entry (system persona, player question, reply)
- ConversationLog: The append-only transcript resent whole on every turn
- CharacterReply: The structured {response, emotion} value parsed from a reply
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterator, Literal

Role = Literal["system", "user", "assistant"]

DEFAULT_EMOTION = "neutral"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Message:
    """
    Represents a single transcript entry.

    Attributes:
        role: Who produced the entry ("system", "user" or "assistant")
        content: The text of the entry
        emotion: Emotion tag reported by the character (assistant entries only)
        timestamp: When the entry was created
    """

    role: Role
    content: str
    emotion: str = ""
    timestamp: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the wire shape used when serialising the transcript."""
        data: dict[str, Any] = {"role": self.role, "content": self.content}
        if self.emotion:
            data["emotions"] = self.emotion
        data["timestamp"] = self.timestamp.isoformat()
        return data


@dataclass(frozen=True)
class ConversationLog:
    """
    Append-only transcript between the player and one character.

    The collaborator keeps no memory between calls, so the whole log is
    serialised and resent on every turn. Instances are immutable: append()
    returns a new log, which lets a caller build the next turn speculatively
    and only commit it once the collaborator has answered.
    """

    messages: tuple[Message, ...] = ()

    def __len__(self) -> int:
        return len(self.messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(self.messages)

    def is_initial_message(self) -> bool:
        """True until the persona message has been committed."""
        return len(self.messages) == 0

    def append(self, message: Message) -> ConversationLog:
        return ConversationLog(self.messages + (message,))

    def serialise(self) -> str:
        """Serialise the entire transcript as a JSON array of messages."""
        return json.dumps([message.to_dict() for message in self.messages])


@dataclass(frozen=True)
class CharacterReply:
    """
    Structured reply from a character.

    Attributes:
        response: What the character says
        emotion: The character's emotional state while saying it
    """

    response: str
    emotion: str = DEFAULT_EMOTION

    def to_dict(self) -> dict[str, str]:
        return {"response": self.response, "emotion": self.emotion}
