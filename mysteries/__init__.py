"""
Mysteries Package

Mystery scenarios and the loader that turns catalog entries into immutable
Mystery snapshots.

Usage:
    from mysteries import load_mystery

    mystery = load_mystery("blackwood")
"""

from mysteries.base import CharacterProfile, Mystery
from mysteries.loader import load_mystery, mystery_from_dict, parse_mystery

__all__ = [
    "CharacterProfile",
    "Mystery",
    "load_mystery",
    "mystery_from_dict",
    "parse_mystery",
]
