"""
Configuration loader module.

Provides centralized access to the mystery catalog. The catalog is the
single source of truth for which mysteries exist and where their files live.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from exceptions import MysteryLoadError, MysteryNotFoundError

# Load configuration once at first use
_CONFIG_DIR = Path(__file__).parent
_CATALOG_PATH = _CONFIG_DIR / "mysteries.json"

# Cache for loaded config
_catalog: dict[str, Any] | None = None


def get_catalog() -> dict[str, Any]:
    """
    Load and return the mystery catalog.

    Returns cached version after first load.
    """
    global _catalog

    if _catalog is None:
        if not _CATALOG_PATH.exists():
            raise MysteryLoadError(f"Mystery catalog not found: {_CATALOG_PATH}")

        try:
            with open(_CATALOG_PATH, encoding="utf-8") as f:
                _catalog = json.load(f)
        except json.JSONDecodeError as e:
            raise MysteryLoadError(f"Mystery catalog is not valid JSON: {e}") from e

    return _catalog


def list_mysteries() -> list[dict[str, str]]:
    """
    Get the public listing of available mysteries.

    Example: [{'id': 'blackwood', 'title': 'The Blackwood Manor Murder', ...}]
    """
    return [
        {
            "id": entry["id"],
            "title": entry["title"],
            "description": entry.get("description", ""),
            "difficulty": entry.get("difficulty", ""),
        }
        for entry in get_catalog()["mysteries"]
    ]


def get_catalog_entry(mystery_id: str) -> dict[str, Any]:
    """Get the catalog entry for a mystery id, including its file name."""
    for entry in get_catalog()["mysteries"]:
        if entry["id"] == mystery_id:
            return entry
    raise MysteryNotFoundError(mystery_id)


# Export commonly used items
__all__ = [
    "get_catalog",
    "get_catalog_entry",
    "list_mysteries",
]
