"""
Mystery loader.

Reads mystery files listed in the catalog (config/mysteries.json), validates
them with pydantic and converts them into immutable Mystery snapshots.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError, model_validator

from config import get_catalog_entry
from exceptions import MysteryLoadError
from mysteries.base import CharacterProfile, Mystery

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).parent / "data"


class CharacterSchema(BaseModel):
    """On-disk shape of a character."""

    name: str = Field(min_length=1)
    personality: str = ""
    knowledge: list[str] = Field(default_factory=list)
    reliable: bool = True
    sprite: str | None = None


class MysterySchema(BaseModel):
    """On-disk shape of a mystery file."""

    title: str = Field(min_length=1)
    killer: str = Field(min_length=1)
    weapon: str
    location: str
    introduction: str = ""
    characters: list[CharacterSchema] = Field(min_length=1)

    @model_validator(mode="after")
    def check_characters(self) -> MysterySchema:
        names = [character.name for character in self.characters]
        if len(names) != len(set(names)):
            raise ValueError("character names must be unique")
        if self.killer not in names:
            raise ValueError(f"killer '{self.killer}' is not one of the characters")
        return self


def parse_mystery(mystery_id: str, raw: str) -> Mystery:
    """
    Validate mystery JSON and build a Mystery.

    Raises:
        MysteryLoadError: If the JSON is malformed or fails validation
    """
    try:
        schema = MysterySchema.model_validate_json(raw)
    except ValidationError as e:
        raise MysteryLoadError(f"Invalid mystery '{mystery_id}': {e}") from e

    return Mystery(
        id=mystery_id,
        title=schema.title,
        killer=schema.killer,
        weapon=schema.weapon,
        location=schema.location,
        introduction=schema.introduction,
        characters=tuple(
            CharacterProfile(
                name=character.name,
                personality=character.personality,
                knowledge=tuple(character.knowledge),
                reliable=character.reliable,
                sprite=character.sprite,
            )
            for character in schema.characters
        ),
    )


def load_mystery(mystery_id: str, data_dir: Path | None = None) -> Mystery:
    """
    Load a mystery by catalog id.

    Args:
        mystery_id: Catalog identifier
        data_dir: Directory holding mystery files (defaults to mysteries/data)

    Returns:
        The loaded Mystery

    Raises:
        MysteryNotFoundError: If the id is not in the catalog
        MysteryLoadError: If the file is missing, unreadable or invalid
    """
    entry = get_catalog_entry(mystery_id)
    path = (data_dir or DATA_DIR) / entry["file"]

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise MysteryLoadError(f"Cannot read mystery file {path}: {e}") from e

    mystery = parse_mystery(mystery_id, raw)
    logger.info(
        "Loaded mystery %s (%s) with %d characters",
        mystery_id,
        mystery.title,
        len(mystery.characters),
    )
    return mystery


def mystery_from_dict(mystery_id: str, data: dict) -> Mystery:
    """Build a Mystery from an already-decoded dict (used by fixtures and tools)."""
    return parse_mystery(mystery_id, json.dumps(data))
