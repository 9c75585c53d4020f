"""
Card catalog index.

Builds the lookup structures every resolution call reads:
- by_key: normalized alias -> card (exact lookups)
- by_id: catalog identifier -> card
- cards: flat catalog list (fuzzy scans)

INVARIANTS:
1. An index is immutable once built; a catalog change means a new index
2. Key collisions keep the first card registered, unless prefer_newer_sets
3. A missing catalog yields an empty "unavailable" index, never None
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from lorelens.models.card import CatalogCard
from lorelens.parsers.normalize import normalize_name, tokenize

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SearchEntry:
    """Pre-normalized display name for fuzzy scans."""

    card: CatalogCard
    display_name: str
    key: str
    tokens: tuple[str, ...]


@dataclass(frozen=True)
class CardIndex:
    """Read-only lookup view over a catalog snapshot."""

    by_key: Mapping[str, CatalogCard] = field(default_factory=lambda: MappingProxyType({}))
    by_id: Mapping[str, CatalogCard] = field(default_factory=lambda: MappingProxyType({}))
    cards: tuple[CatalogCard, ...] = ()
    search_entries: tuple[SearchEntry, ...] = ()
    available: bool = True
    note: str | None = None

    @classmethod
    def unavailable(cls, note: str) -> "CardIndex":
        """Empty index for a catalog that could not be loaded."""
        return cls(available=False, note=note)

    def __len__(self) -> int:
        return len(self.cards)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and normalize_name(name) in self.by_key

    @property
    def is_empty(self) -> bool:
        return not self.cards

    def get(self, name: str | None) -> CatalogCard | None:
        """Exact lookup by any registered alias (name is normalized first)."""
        key = normalize_name(name)
        if not key:
            return None
        return self.by_key.get(key)

    def get_by_key(self, key: str) -> CatalogCard | None:
        """Exact lookup by an already normalized key."""
        return self.by_key.get(key) if key else None

    def get_by_id(self, card_id: str | None) -> CatalogCard | None:
        """Lookup by catalog identifier."""
        if card_id is None:
            return None
        return self.by_id.get(str(card_id))


def card_aliases(card: CatalogCard) -> list[str]:
    """Every name under which a card may appear in a decklist."""
    aliases = [card.full_name, card.name]
    if card.simple_name:
        aliases.append(card.simple_name)
    return aliases


def _set_number(card: CatalogCard) -> int:
    """Numeric set code, -1 for promo/unnumbered sets."""
    if card.set_code and card.set_code.isdigit():
        return int(card.set_code)
    return -1


def _prefer(existing: CatalogCard, candidate: CatalogCard) -> CatalogCard:
    """Pick the newer printing; ties keep the existing card."""
    return candidate if _set_number(candidate) > _set_number(existing) else existing


def build_index(catalog: Iterable[CatalogCard], prefer_newer_sets: bool = False) -> CardIndex:
    """
    Build a CardIndex over a catalog.

    Args:
        catalog: Catalog cards in source order
        prefer_newer_sets: On key collisions keep the card from the higher
            numbered set instead of the first one registered

    Returns:
        A new, immutable CardIndex
    """
    by_key: dict[str, CatalogCard] = {}
    by_id: dict[str, CatalogCard] = {}
    cards: list[CatalogCard] = []
    entries: list[SearchEntry] = []
    collisions = 0

    for card in catalog:
        cards.append(card)

        if card.card_id and card.card_id not in by_id:
            by_id[card.card_id] = card

        for alias in card_aliases(card):
            key = normalize_name(alias)
            if not key:
                continue

            existing = by_key.get(key)
            if existing is None:
                by_key[key] = card
            elif existing is not card:
                collisions += 1
                if prefer_newer_sets:
                    by_key[key] = _prefer(existing, card)

        display = card.full_name
        display_key = normalize_name(display)
        if display_key:
            entries.append(
                SearchEntry(
                    card=card,
                    display_name=display,
                    key=display_key,
                    tokens=tuple(tokenize(display_key)),
                )
            )

    if collisions:
        logger.debug("Card index: %d alias collisions", collisions)

    return CardIndex(
        by_key=MappingProxyType(by_key),
        by_id=MappingProxyType(by_id),
        cards=tuple(cards),
        search_entries=tuple(entries),
    )
