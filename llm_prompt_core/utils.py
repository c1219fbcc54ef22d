"""
Utility functions for the LLM prompt system.

This module contains generic utilities for string formatting and for turning
a serialised transcript back into provider chat messages.
"""

from __future__ import annotations

import json
from typing import Any, List


def list_to_conjunction(L: List[str]) -> str:
    """
    Takes a list of strings and returns a string with every element in the list
    separated by commas, with 'and' before the last element.

    Args:
        L: List of strings to join

    Returns:
        Formatted string with proper conjunction

    Examples:
        >>> list_to_conjunction(["Alice"])
        "Alice"
        >>> list_to_conjunction(["Alice", "Bob"])
        "Alice and Bob"
        >>> list_to_conjunction(["Alice", "Bob", "Charlie"])
        "Alice, Bob, and Charlie"
    """
    if not L:
        return ""
    elif len(L) == 1:
        return L[0]
    elif len(L) == 2:
        return f"{L[0]} and {L[1]}"
    else:
        return ", ".join(L[:-1]) + f", and {L[-1]}"


def transcript_to_chat_messages(prompt: str) -> list[dict[str, str]]:
    """
    Expand a serialised transcript into chat-completion messages.

    The dialogue engine sends the whole transcript as a JSON array. Providers
    with a native chat format get it back as role/content pairs; anything that
    is not such an array is treated as a single user message.

    Args:
        prompt: The prompt text passed to the model

    Returns:
        List of {"role", "content"} dicts
    """
    try:
        entries: Any = json.loads(prompt)
    except (json.JSONDecodeError, TypeError):
        return [{"role": "user", "content": prompt}]

    if not isinstance(entries, list):
        return [{"role": "user", "content": prompt}]

    messages = []
    for entry in entries:
        if not isinstance(entry, dict) or "content" not in entry:
            continue
        role = entry.get("role", "user")
        if role not in ("system", "user", "assistant"):
            role = "user"
        messages.append({"role": role, "content": str(entry["content"])})

    return messages or [{"role": "user", "content": prompt}]
