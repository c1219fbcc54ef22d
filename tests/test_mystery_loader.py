"""
Tests for the mystery catalog and loader.
"""

import dataclasses
import json

import pytest

from config import get_catalog_entry, list_mysteries
from exceptions import MysteryLoadError, MysteryNotFoundError
from mysteries.loader import load_mystery, parse_mystery


VALID = {
    "title": "Test Case",
    "killer": "Ann",
    "weapon": "rope",
    "location": "attic",
    "introduction": "Someone died.",
    "characters": [
        {"name": "Ann", "personality": "calm", "knowledge": ["a"], "reliable": False},
        {"name": "Bob", "personality": "nervous"},
    ],
}


class TestCatalog:
    def test_list_mysteries(self):
        listing = list_mysteries()
        assert {entry["id"] for entry in listing} == {
            "diner_secrets", "blackwood", "corporate_betrayal", "cruise_ship",
        }
        assert all("file" not in entry for entry in listing)

    def test_unknown_entry(self):
        with pytest.raises(MysteryNotFoundError):
            get_catalog_entry("atlantis")


class TestLoadMystery:
    @pytest.mark.parametrize("mystery_id", ["diner_secrets", "blackwood", "corporate_betrayal", "cruise_ship"])
    def test_every_catalog_mystery_loads(self, mystery_id):
        mystery = load_mystery(mystery_id)
        assert mystery.id == mystery_id
        assert mystery.get_character(mystery.killer) is not None
        assert len({character.name for character in mystery.characters}) == len(mystery.characters)

    def test_mystery_is_immutable(self):
        mystery = load_mystery("blackwood")
        with pytest.raises(dataclasses.FrozenInstanceError):
            mystery.killer = "Nobody"

    def test_unknown_mystery_is_a_load_error(self):
        with pytest.raises(MysteryLoadError):
            load_mystery("atlantis")

    def test_missing_file(self, tmp_path):
        with pytest.raises(MysteryLoadError, match="Cannot read"):
            load_mystery("blackwood", data_dir=tmp_path)

    def test_load_from_custom_directory(self, tmp_path):
        (tmp_path / "blackwood.json").write_text(json.dumps(VALID))
        mystery = load_mystery("blackwood", data_dir=tmp_path)
        assert mystery.title == "Test Case"


class TestParseMystery:
    def test_defaults(self):
        mystery = parse_mystery("t", json.dumps(VALID))
        bob = mystery.get_character("Bob")
        assert bob.reliable is True
        assert bob.knowledge == ()
        assert mystery.get_character("Ann").knowledge == ("a",)

    def test_malformed_json(self):
        with pytest.raises(MysteryLoadError):
            parse_mystery("t", "{not json")

    def test_killer_must_be_a_character(self):
        data = dict(VALID, killer="Zed")
        with pytest.raises(MysteryLoadError, match="killer"):
            parse_mystery("t", json.dumps(data))

    def test_character_names_must_be_unique(self):
        data = dict(VALID, characters=[VALID["characters"][0], VALID["characters"][0]])
        with pytest.raises(MysteryLoadError, match="unique"):
            parse_mystery("t", json.dumps(data))
