"""
Deck vectorization.

Turns a deck (resolved user deck or historical decklist) into a multiset
of join keys. Both sides of a comparison MUST go through vectorize() so
that their keys line up.
"""

import math
from collections.abc import Iterable, Mapping
from typing import Protocol

from lorelens.models.deck import DeckCard, DeckVector
from lorelens.parsers.normalize import normalize_name
from lorelens.services.card_index import CardIndex


class CardCount(Protocol):
    """Anything with a card identity and a quantity (ResolvedCard, DeckCard)."""

    @property
    def card_id(self) -> str | None: ...

    @property
    def name(self) -> str: ...

    @property
    def quantity(self) -> int: ...


def _valid_quantity(quantity: object) -> int | None:
    """Positive whole quantity, None otherwise."""
    if isinstance(quantity, bool):
        return None
    if isinstance(quantity, int):
        return quantity if quantity > 0 else None
    if isinstance(quantity, float) and math.isfinite(quantity) and quantity.is_integer():
        return int(quantity) if quantity > 0 else None
    return None


def join_key(card_id: str | None, name: str, index: CardIndex | None = None) -> str | None:
    """
    Key used to compare cards across decks.

    Prefers the catalog identifier. Without one, the name is looked up in
    the index so aliases of the same card collapse; unknown names fall back
    to their normalized form.
    """
    if card_id:
        return f"id:{card_id}"

    key = normalize_name(name)
    if not key:
        return None

    if index is not None:
        card = index.get_by_key(key)
        if card is not None:
            if card.card_id:
                return f"id:{card.card_id}"
            return f"n:{normalize_name(card.full_name)}"

    return f"n:{key}"


def vectorize(entries: Iterable[CardCount], index: CardIndex | None = None) -> DeckVector:
    """
    Build a DeckVector from card entries.

    Args:
        entries: Card lines (repeated cards are summed)
        index: Optional catalog index used to link unidentified names

    Returns:
        DeckVector; non-positive or non-integer quantities are dropped
    """
    counts: dict[str, int] = {}
    total = 0

    for entry in entries:
        quantity = _valid_quantity(entry.quantity)
        if quantity is None:
            continue

        key = join_key(entry.card_id, entry.name, index)
        if key is None:
            continue

        counts[key] = counts.get(key, 0) + quantity
        total += quantity

    return DeckVector(counts=counts, total=total)


def vectorize_counts(cards: Mapping[str, int], index: CardIndex | None = None) -> DeckVector:
    """Build a DeckVector from a {card name: quantity} mapping."""
    return vectorize((DeckCard(name=name, quantity=qty) for name, qty in cards.items()), index)
