"""
Card catalog decoder.

Turns raw catalog JSON into CatalogCard records. Catalog exports disagree
on field names (code vs id, version vs subtitle, inkwell vs inkable), so
every alternate spelling is declared once on CatalogRecord and nowhere
else.

Accepted layouts:
    [ {card}, ... ]
    {"cards": [ {card}, ... ], ...}     (LorcanaJSON)
    {"<key>": {card}, ...}
"""

import logging
import re
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from lorelens.models.card import CatalogCard

logger = logging.getLogger(__name__)

_INK_SEPARATORS = re.compile(r"\s*[/,&-]\s*")

TRUTHY_VALUES = frozenset({"1", "true", "yes", "y", "on"})
FALSY_VALUES = frozenset({"0", "false", "no", "n", "off"})


def to_optional_int(value: Any) -> int | None:
    """Coerce a loosely typed number to int, None when it isn't one."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        text = value.strip()
        if text.lstrip("-").isdigit():
            return int(text)
    return None


def to_optional_str(value: Any) -> str | None:
    """Coerce a scalar to a stripped string, None when blank."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def to_optional_bool(value: Any) -> bool | None:
    """Coerce a loosely typed flag to bool, None when unknown."""
    if isinstance(value, bool):
        return value
    if value is None:
        return None
    text = str(value).strip().lower()
    if text in TRUTHY_VALUES:
        return True
    if text in FALSY_VALUES:
        return False
    return None


class CatalogRecord(BaseModel):
    """A raw catalog record with every known field spelling."""

    model_config = ConfigDict(extra="ignore")

    card_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("code", "cardId", "cardIdentifier", "card_identifier", "id", "uuid"),
    )
    name: str | None = Field(default=None, validation_alias=AliasChoices("name", "cardName", "title"))
    version: str | None = Field(
        default=None, validation_alias=AliasChoices("version", "subtitle", "variant")
    )
    full_name: str | None = Field(
        default=None, validation_alias=AliasChoices("fullName", "full_name", "displayName")
    )
    simple_name: str | None = Field(
        default=None, validation_alias=AliasChoices("simpleName", "simple_name")
    )
    cost: int | None = Field(
        default=None, validation_alias=AliasChoices("cost", "inkCost", "ink_cost")
    )
    lore: int | None = None
    strength: int | None = Field(default=None, validation_alias=AliasChoices("strength", "attack"))
    willpower: int | None = Field(
        default=None, validation_alias=AliasChoices("willpower", "defense", "defence")
    )
    card_type: str | None = Field(
        default=None, validation_alias=AliasChoices("type", "cardType", "card_type")
    )
    inks: tuple[str, ...] = Field(
        default=(), validation_alias=AliasChoices("inks", "colors", "ink", "color")
    )
    rarity: str | None = None
    inkable: bool | None = Field(
        default=None,
        validation_alias=AliasChoices("inkable", "inkwell", "isInkable", "is_inkable"),
    )
    set_code: str | None = Field(
        default=None, validation_alias=AliasChoices("setCode", "set_code", "set")
    )

    @field_validator(
        "card_id",
        "name",
        "version",
        "full_name",
        "simple_name",
        "card_type",
        "rarity",
        "set_code",
        mode="before",
    )
    @classmethod
    def _clean_text(cls, value: Any) -> str | None:
        return to_optional_str(value)

    @field_validator("cost", "lore", "strength", "willpower", mode="before")
    @classmethod
    def _clean_number(cls, value: Any) -> int | None:
        return to_optional_int(value)

    @field_validator("inkable", mode="before")
    @classmethod
    def _clean_flag(cls, value: Any) -> bool | None:
        return to_optional_bool(value)

    @field_validator("inks", mode="before")
    @classmethod
    def _clean_inks(cls, value: Any) -> tuple[str, ...]:
        if value is None:
            return ()
        if isinstance(value, str):
            parts = _INK_SEPARATORS.split(value)
        elif isinstance(value, list | tuple):
            parts = [str(v) for v in value if v is not None]
        else:
            return ()
        return tuple(p.strip() for p in parts if p and p.strip())

    def to_card(self) -> CatalogCard | None:
        """Build the canonical card, None if the record has no usable name."""
        name = self.name
        version = self.version

        # Some exports only carry "Name - Version"
        if not name and self.full_name:
            name, _, subtitle = self.full_name.partition(" - ")
            name = name.strip()
            version = version or (subtitle.strip() or None)

        if not name:
            return None

        return CatalogCard(
            card_id=self.card_id,
            name=name,
            version=version,
            cost=self.cost,
            lore=self.lore,
            strength=self.strength,
            willpower=self.willpower,
            card_type=self.card_type,
            inks=self.inks,
            rarity=self.rarity,
            inkable=self.inkable,
            set_code=self.set_code,
            simple_name=self.simple_name,
        )


def decode_card(raw: Any) -> CatalogCard | None:
    """
    Decode a single catalog record.

    Returns:
        CatalogCard, or None if the record is not a mapping or has no name
    """
    if not isinstance(raw, dict):
        return None
    try:
        record = CatalogRecord.model_validate(raw)
    except ValidationError as e:
        logger.debug("Skipping catalog record: %s", e)
        return None
    return record.to_card()


def decode_catalog(raw: Any) -> list[CatalogCard]:
    """
    Decode a raw catalog payload.

    Args:
        raw: Parsed JSON (list, {"cards": [...]} or dict of records)

    Returns:
        Cards in source order. Unusable records are skipped.

    Raises:
        ValueError: If the payload layout is not recognized
    """
    if isinstance(raw, list):
        records: list[Any] = raw
    elif isinstance(raw, dict) and isinstance(raw.get("cards"), list):
        records = raw["cards"]
    elif isinstance(raw, dict):
        records = [v for v in raw.values() if isinstance(v, dict)]
    else:
        raise ValueError(f"Unrecognized catalog layout: {type(raw).__name__}")

    cards: list[CatalogCard] = []
    skipped = 0
    for record in records:
        card = decode_card(record)
        if card is None:
            skipped += 1
            continue
        cards.append(card)

    if skipped:
        logger.info("Skipped %d catalog records without a usable name", skipped)

    return cards
