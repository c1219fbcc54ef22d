"""
Mystery and character value types.

A Mystery is loaded once when a game starts and never changes afterwards;
sessions hold it as an immutable snapshot.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class CharacterProfile:
    """
    A suspect or witness in a mystery.

    Attributes:
        name: Display name, unique within the mystery
        personality: Free-text personality description
        knowledge: Facts the character knows about the case
        reliable: Whether the character tells the truth
        sprite: Optional portrait asset for the frontend
    """

    name: str
    personality: str
    knowledge: tuple[str, ...] = ()
    reliable: bool = True
    sprite: str | None = None


@dataclass(frozen=True)
class Mystery:
    """
    A complete murder scenario, including the solution.

    Attributes:
        id: Catalog identifier (e.g., "blackwood")
        title: Display title
        killer: Name of the guilty character
        weapon: The murder weapon
        location: Where the victim was found
        introduction: Opening narration shown to the player
        characters: Everyone the player can question, in display order
    """

    id: str
    title: str
    killer: str
    weapon: str
    location: str
    introduction: str
    characters: tuple[CharacterProfile, ...] = field(default_factory=tuple)

    def get_character(self, name: str) -> CharacterProfile | None:
        """Look up a character by exact name."""
        for character in self.characters:
            if character.name == name:
                return character
        return None
