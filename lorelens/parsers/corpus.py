"""
Meta corpus decoder.

Historical decklists come from several scrapers, each with its own field
names (quantity/qty/count, standing/rankLabel/placement, ...) and card line
shapes. This module is the only place that knows about those variants:
everything downstream works with HistoricalDeck and DeckCard.

Card line shapes:
    "4 Tipo - Growing Son"
    "4x Tipo - Growing Son"
    {"name": "4 Tipo - Growing Son"}
    {"name": "Tipo - Growing Son", "qty": 4}
    {"Tipo - Growing Son": 4, ...}        (whole card list as a mapping)
"""

import hashlib
import logging
import re
from collections import Counter
from typing import Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from lorelens.models.deck import DeckCard, HistoricalDeck, MetaCorpus
from lorelens.parsers.catalog import to_optional_int, to_optional_str

logger = logging.getLogger(__name__)

# Pattern: "4 Card Name", "4x Card Name", "4 x Card Name"
# Groups: (quantity, card_name)
COMBINED_CARD_PATTERN = re.compile(r"^(\d+)\s*(?:x|×)?\s+(.+?)\s*$", re.IGNORECASE)

UNKNOWN_LABEL = "Unknown"


class CorpusCardRecord(BaseModel):
    """A raw card line in any of the known shapes."""

    model_config = ConfigDict(extra="ignore")

    name: str | None = Field(
        default=None, validation_alias=AliasChoices("name", "cardName", "card", "fullName")
    )
    quantity: int | None = Field(
        default=None,
        validation_alias=AliasChoices("quantity", "qty", "count", "amount", "copies"),
    )
    card_id: str | None = Field(
        default=None, validation_alias=AliasChoices("cardId", "code", "id")
    )

    @model_validator(mode="before")
    @classmethod
    def _wrap_plain_line(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {"name": data}
        return data

    @field_validator("name", "card_id", mode="before")
    @classmethod
    def _clean_text(cls, value: Any) -> str | None:
        if value is None:
            return None
        return to_optional_str(str(value).replace("\u00a0", " "))

    @field_validator("quantity", mode="before")
    @classmethod
    def _clean_quantity(cls, value: Any) -> int | None:
        return to_optional_int(value)

    def to_card(self) -> DeckCard | None:
        """Build a DeckCard, None if the line has no name or no positive quantity."""
        if not self.name:
            return None

        name = self.name
        quantity = self.quantity

        # Combined "N Name" form; an explicit quantity field wins
        if quantity is None:
            match = COMBINED_CARD_PATTERN.match(name)
            if match is None:
                return None
            quantity = int(match.group(1))
            name = match.group(2)

        if quantity <= 0 or not name:
            return None

        return DeckCard(name=name, quantity=quantity, card_id=self.card_id)


class CorpusDeckRecord(BaseModel):
    """A raw historical deck record with every known field spelling."""

    model_config = ConfigDict(extra="ignore")

    deck_id: str | None = Field(default=None, validation_alias=AliasChoices("id", "deckId", "deck_id"))
    url: str | None = None
    cards: list[Any] = Field(
        default_factory=list,
        validation_alias=AliasChoices("cards", "decklist", "mainboard", "list"),
    )
    format: str | None = Field(default=None, validation_alias=AliasChoices("format", "formatName"))
    archetype: str | None = Field(
        default=None, validation_alias=AliasChoices("archetype", "title", "deckName")
    )
    event: str | None = Field(
        default=None, validation_alias=AliasChoices("event", "eventName", "tournament")
    )
    date: str | None = Field(default=None, validation_alias=AliasChoices("date", "eventDate"))
    placement: str | None = Field(
        default=None,
        validation_alias=AliasChoices("standing", "rankLabel", "placement", "finish", "rank", "place"),
    )
    players: int | None = Field(
        default=None, validation_alias=AliasChoices("players", "playerCount")
    )
    author: str | None = Field(
        default=None, validation_alias=AliasChoices("author", "player", "pilot")
    )

    @field_validator(
        "deck_id", "url", "format", "archetype", "event", "date", "placement", "author", mode="before"
    )
    @classmethod
    def _clean_text(cls, value: Any) -> str | None:
        return to_optional_str(value)

    @field_validator("players", mode="before")
    @classmethod
    def _clean_players(cls, value: Any) -> int | None:
        return to_optional_int(value)

    @field_validator("cards", mode="before")
    @classmethod
    def _expand_card_mapping(cls, value: Any) -> list[Any]:
        if value is None:
            return []
        if isinstance(value, dict):
            return [{"name": name, "quantity": qty} for name, qty in value.items()]
        if isinstance(value, list | tuple):
            return list(value)
        return []

    def to_deck(self, position: int) -> HistoricalDeck:
        """Build the HistoricalDeck; position seeds the id when the record has none."""
        cards = tuple(card for card in (decode_deck_card(c) for c in self.cards) if card is not None)
        return HistoricalDeck(
            deck_id=self.deck_id or make_deck_id(self.url, position),
            cards=cards,
            format=self.format,
            archetype=self.archetype,
            event=self.event,
            date=self.date,
            placement=self.placement,
            url=self.url,
            players=self.players,
            author=self.author,
        )


def make_deck_id(url: str | None, position: int) -> str:
    """Stable id from the deck URL, or its position when there is no URL."""
    base = url or f"idx:{position}"
    return hashlib.sha1(base.encode("utf-8")).hexdigest()[:12]


def decode_deck_card(raw: Any) -> DeckCard | None:
    """
    Decode one card line.

    Returns:
        DeckCard, or None if the line is unusable
    """
    if not isinstance(raw, str | dict):
        return None
    try:
        record = CorpusCardRecord.model_validate(raw)
    except ValidationError as e:
        logger.debug("Skipping card line %r: %s", raw, e)
        return None
    return record.to_card()


def decode_deck(raw: Any, position: int = 0) -> HistoricalDeck | None:
    """
    Decode one deck record.

    Returns:
        HistoricalDeck, or None if the record is not a mapping or is malformed
    """
    if not isinstance(raw, dict):
        return None
    try:
        record = CorpusDeckRecord.model_validate(raw)
    except ValidationError as e:
        logger.debug("Skipping deck record %d: %s", position, e)
        return None
    return record.to_deck(position)


def decode_corpus(raw: Any) -> MetaCorpus:
    """
    Decode a raw meta corpus payload.

    Args:
        raw: Parsed JSON, either a bare list of decks or
            {"decks": [...], "schemaVersion": 2, "source": ..., "updatedAt": ...}

    Returns:
        MetaCorpus with decks in source order and per-format/archetype counts

    Raises:
        ValueError: If the payload layout is not recognized
    """
    if isinstance(raw, list):
        records: list[Any] = raw
        header: dict[str, Any] = {}
    elif isinstance(raw, dict) and isinstance(raw.get("decks"), list):
        records = raw["decks"]
        header = raw
    else:
        raise ValueError(f"Unrecognized corpus layout: {type(raw).__name__}")

    decks: list[HistoricalDeck] = []
    for position, record in enumerate(records):
        deck = decode_deck(record, position)
        if deck is not None:
            decks.append(deck)

    skipped = len(records) - len(decks)
    if skipped:
        logger.info("Skipped %d malformed corpus records", skipped)

    formats = Counter(deck.format or UNKNOWN_LABEL for deck in decks)
    archetypes = Counter(deck.archetype or UNKNOWN_LABEL for deck in decks)

    return MetaCorpus(
        decks=tuple(decks),
        source=to_optional_str(header.get("source")),
        updated_at=to_optional_str(header.get("updatedAt") or header.get("scrapedAt")),
        schema_version=to_optional_int(header.get("schemaVersion")) or 1,
        formats=dict(formats),
        archetypes=dict(archetypes),
    )
