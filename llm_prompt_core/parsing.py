"""
Layered parsing of free-text collaborator replies.

The text-generation collaborator is asked for exactly one JSON object with
``response`` and ``emotion`` fields, but nothing guarantees it complies. The
parsers below are tried in order and the first one that produces a reply
wins:

1. StrictJsonParser      - the whole reply is the JSON object
2. BraceExtractionParser - the object is embedded in prose ("Sure! {...} Thanks.")
3. RawTextParser         - give up on structure; the text itself is the response

RawTextParser always succeeds, so parse_character_reply() never raises.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from llm_prompt_core.types import DEFAULT_EMOTION, CharacterReply

logger = logging.getLogger(__name__)


def _reply_from_object(obj: Any) -> CharacterReply | None:
    """Build a reply from a decoded JSON value, or None if it isn't one."""
    if not isinstance(obj, dict) or "response" not in obj:
        return None

    response = obj["response"]
    if response is None:
        response = ""
    elif not isinstance(response, str):
        response = json.dumps(response) if isinstance(response, (dict, list)) else str(response)

    emotion = obj.get("emotion")
    if not isinstance(emotion, str) or not emotion.strip():
        emotion = DEFAULT_EMOTION

    return CharacterReply(response=response, emotion=emotion.strip())


class ReplyParser(ABC):
    """One link in the parsing chain."""

    name: str = "base"

    @abstractmethod
    def parse(self, raw: str) -> CharacterReply | None:
        """Return a reply, or None to hand over to the next parser."""
        pass


class StrictJsonParser(ReplyParser):
    """Accepts a reply that is exactly one JSON object."""

    name = "strict"

    def parse(self, raw: str) -> CharacterReply | None:
        try:
            return _reply_from_object(json.loads(raw))
        except (json.JSONDecodeError, TypeError):
            return None


class BraceExtractionParser(ReplyParser):
    """Parses the span between the first '{' and the last '}'."""

    name = "brace_extraction"

    def parse(self, raw: str) -> CharacterReply | None:
        start = raw.find("{")
        end = raw.rfind("}")
        if start == -1 or end <= start:
            return None

        try:
            return _reply_from_object(json.loads(raw[start : end + 1]))
        except json.JSONDecodeError:
            return None


class RawTextParser(ReplyParser):
    """Last resort: the whole reply is what the character said."""

    name = "raw_text"

    def parse(self, raw: str) -> CharacterReply | None:
        return CharacterReply(response=raw, emotion=DEFAULT_EMOTION)


DEFAULT_PARSERS: tuple[ReplyParser, ...] = (
    StrictJsonParser(),
    BraceExtractionParser(),
    RawTextParser(),
)


def parse_character_reply(
    raw: str,
    parsers: Sequence[ReplyParser] = DEFAULT_PARSERS,
) -> CharacterReply:
    """
    Turn a raw collaborator reply into a CharacterReply.

    Args:
        raw: The text returned by the collaborator
        parsers: Parsing chain, tried in order

    Returns:
        The first reply produced by the chain. With the default chain this
        never fails.
    """
    for parser in parsers:
        reply = parser.parse(raw)
        if reply is not None:
            if parser.name != StrictJsonParser.name:
                logger.warning(
                    "Collaborator reply was not strict JSON, recovered with %s parser: %.200s",
                    parser.name,
                    raw,
                )
            return reply

    # Only reachable with a custom chain that lacks a catch-all
    return CharacterReply(response=raw, emotion=DEFAULT_EMOTION)
