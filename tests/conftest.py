import json
from pathlib import Path
from typing import Any

import pytest

from lorelens.models.card import CatalogCard
from lorelens.models.deck import MetaCorpus
from lorelens.parsers.catalog import decode_catalog
from lorelens.parsers.corpus import decode_corpus
from lorelens.services.card_index import CardIndex, build_index


@pytest.fixture
def sample_catalog_records() -> list[dict[str, Any]]:
    """Sample catalog records in the LorcanaJSON shape."""
    return [
        {
            "code": "TFC-108",
            "name": "Tipo",
            "version": "Growing Son",
            "fullName": "Tipo - Growing Son",
            "cost": 1,
            "lore": 1,
            "strength": 1,
            "willpower": 3,
            "type": "Character",
            "color": "Amethyst",
            "rarity": "Common",
            "inkwell": True,
            "setCode": "1",
        },
        {
            "code": "TFC-4",
            "name": "Hades",
            "version": "Infernal Schemer",
            "fullName": "Hades - Infernal Schemer",
            "cost": 7,
            "lore": 1,
            "type": "Character",
            "color": "Amethyst",
            "rarity": "Legendary",
            "inkwell": True,
            "setCode": "1",
        },
        {
            "code": "TFC-193",
            "name": "Tinker Bell",
            "version": "Giant Fairy",
            "fullName": "Tinker Bell - Giant Fairy",
            "cost": 6,
            "type": "Character",
            "color": "Steel",
            "rarity": "Super Rare",
            "inkwell": True,
            "setCode": "1",
        },
        {
            "code": "TFC-192",
            "name": "Tinker Bell",
            "version": "Tiny Tactician",
            "fullName": "Tinker Bell - Tiny Tactician",
            "cost": 2,
            "type": "Character",
            "color": "Steel",
            "rarity": "Common",
            "inkwell": False,
            "setCode": "1",
        },
        {
            "code": "TFC-128",
            "name": "Be Prepared",
            "fullName": "Be Prepared",
            "cost": 7,
            "type": "Action",
            "color": "Ruby",
            "rarity": "Rare",
            "inkwell": False,
            "setCode": "1",
        },
        {
            "code": "TFC-115",
            "name": "Mickey Mouse",
            "version": "Brave Little Tailor",
            "fullName": "Mickey Mouse - Brave Little Tailor",
            "cost": 8,
            "type": "Character",
            "color": "Ruby",
            "rarity": "Legendary",
            "inkwell": False,
            "setCode": "1",
        },
        {
            "code": "TFC-11",
            "name": "Olaf",
            "version": "Friendly Snowman",
            "fullName": "Olaf - Friendly Snowman",
            "type": "Character",
            "color": "Amber",
            "rarity": "Common",
            "inkwell": True,
            "setCode": "1",
        },
        {
            "code": "TFC-42",
            "name": "Elsa",
            "version": "Snow Queen",
            "fullName": "Elsa - Snow Queen",
            "cost": 4,
            "type": "Character",
            "color": "Amethyst",
            "rarity": "Uncommon",
            "inkwell": True,
            "setCode": "1",
        },
    ]


@pytest.fixture
def sample_cards(sample_catalog_records: list[dict[str, Any]]) -> list[CatalogCard]:
    return decode_catalog({"cards": sample_catalog_records})


@pytest.fixture
def sample_index(sample_cards: list[CatalogCard]) -> CardIndex:
    return build_index(sample_cards)


@pytest.fixture
def sample_corpus_records() -> list[dict[str, Any]]:
    """Historical decks using the different field spellings scrapers produce."""
    return [
        {
            "url": "https://example.com/decks/1",
            "format": "Core",
            "archetype": "Amethyst Steel",
            "event": "Set Championship",
            "standing": "Winner",
            "cards": [
                "4 Tipo - Growing Son",
                "4 Hades - Infernal Schemer",
                "4 Tinker Bell - Giant Fairy",
            ],
        },
        {
            "url": "https://example.com/decks/2",
            "formatName": "Core",
            "title": "Ruby Steel",
            "rankLabel": "Top 8",
            "decklist": [
                {"name": "Mickey Mouse - Brave Little Tailor", "qty": 4},
                {"name": "4 Be Prepared"},
            ],
        },
        {
            "url": "https://example.com/decks/3",
            "format": "Infinity",
            "archetype": "Amethyst Steel",
            "placement": "2nd",
            "cards": {"Tipo - Growing Son": 4, "Elsa - Snow Queen": 4},
        },
        {
            "placement": "Participant",
            "cards": ["4x Tipo - Growing Son", "2 Olaf - Friendly Snowman"],
        },
    ]


@pytest.fixture
def sample_corpus(sample_corpus_records: list[dict[str, Any]]) -> MetaCorpus:
    return decode_corpus({"decks": sample_corpus_records, "source": "test"})


@pytest.fixture
def catalog_file(sample_catalog_records: list[dict[str, Any]], tmp_path: Path) -> Path:
    """Write the sample catalog to a temporary file."""
    path = tmp_path / "cards.json"
    path.write_text(json.dumps({"cards": sample_catalog_records}), encoding="utf-8")
    return path


@pytest.fixture
def corpus_file(sample_corpus_records: list[dict[str, Any]], tmp_path: Path) -> Path:
    """Write the sample corpus to a temporary file."""
    path = tmp_path / "tournament_meta.json"
    path.write_text(json.dumps({"decks": sample_corpus_records}), encoding="utf-8")
    return path
