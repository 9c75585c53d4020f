from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum

from lorelens.models.card import CatalogCard


@dataclass(frozen=True, slots=True)
class DecklistEntry:
    """
    A parsed decklist line.

    Attributes:
        quantity: Number of copies (always positive)
        raw_name: Card name exactly as written
        normalized_name: Lookup key derived from raw_name
        line_number: 1-based line in the submitted text
    """

    quantity: int
    raw_name: str
    normalized_name: str
    line_number: int = 0


class CardStatus(str, Enum):
    """Resolution status of a decklist line."""

    RECOGNIZED = "recognized"
    UNRECOGNIZED = "unrecognized"


@dataclass(frozen=True, slots=True)
class ResolvedCard:
    """A decklist line joined with its catalog card, if one was found."""

    entry: DecklistEntry
    card: CatalogCard | None = None

    @property
    def status(self) -> CardStatus:
        return CardStatus.RECOGNIZED if self.card is not None else CardStatus.UNRECOGNIZED

    @property
    def card_id(self) -> str | None:
        return self.card.card_id if self.card is not None else None

    @property
    def name(self) -> str:
        return self.card.full_name if self.card is not None else self.entry.raw_name

    @property
    def quantity(self) -> int:
        return self.entry.quantity


@dataclass
class ResolvedDeck:
    """A decklist after exact catalog resolution."""

    cards: list[ResolvedCard] = field(default_factory=list)

    @property
    def recognized(self) -> list[ResolvedCard]:
        return [c for c in self.cards if c.card is not None]

    @property
    def unrecognized(self) -> list[ResolvedCard]:
        return [c for c in self.cards if c.card is None]

    @property
    def recognized_qty(self) -> int:
        return sum(c.quantity for c in self.recognized)

    @property
    def unrecognized_qty(self) -> int:
        return sum(c.quantity for c in self.unrecognized)

    @property
    def total_qty(self) -> int:
        return sum(c.quantity for c in self.cards)


@dataclass(frozen=True, slots=True)
class DeckCard:
    """
    A card line from a historical decklist.

    Attributes:
        name: Card name as published by the source
        quantity: Number of copies
        card_id: Catalog identifier when the source provides one
    """

    name: str
    quantity: int
    card_id: str | None = None


@dataclass(frozen=True)
class DeckVector:
    """
    Multiset view of a deck: join key -> summed quantity.

    Keys are "id:<card_id>" when the card identity is known and
    "n:<normalized name>" otherwise.
    """

    counts: Mapping[str, int] = field(default_factory=dict)
    total: int = 0

    @property
    def is_empty(self) -> bool:
        return self.total == 0

    def __len__(self) -> int:
        return len(self.counts)


@dataclass(frozen=True)
class HistoricalDeck:
    """
    A tournament decklist from the meta corpus.

    Attributes:
        deck_id: Stable identifier (source id or hash of the URL)
        cards: Card lines as published
        format: Play format (e.g., "Core", "Infinity")
        archetype: Archetype label from the source
        event: Event name
        date: Event date as published
        placement: Raw finish label (e.g., "Top 8", "2nd")
        url: Where this deck list came from
        players: Event attendance when known
        author: Pilot or list author
    """

    deck_id: str
    cards: tuple[DeckCard, ...] = ()
    format: str | None = None
    archetype: str | None = None
    event: str | None = None
    date: str | None = None
    placement: str | None = None
    url: str | None = None
    players: int | None = None
    author: str | None = None

    def card_count(self) -> int:
        """Total copies across all lines."""
        return sum(c.quantity for c in self.cards if c.quantity > 0)


@dataclass
class MetaCorpus:
    """Decoded meta corpus with per-format and per-archetype deck counts."""

    decks: tuple[HistoricalDeck, ...] = ()
    source: str | None = None
    updated_at: str | None = None
    schema_version: int = 1
    formats: dict[str, int] = field(default_factory=dict)
    archetypes: dict[str, int] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.decks)


@dataclass(frozen=True)
class SimilarityMatch:
    """A corpus deck scored against the query deck."""

    deck: HistoricalDeck
    score: float  # 0.0-1.0
    finish: int | None


@dataclass
class AggregateResult:
    """Competitive outcomes over a set of compared decks."""

    count: int = 0
    best_finish: int | None = None
    average_finish: float | None = None
    top_cut_rate: float | None = None
    by_archetype: dict[str, int] = field(default_factory=dict)


@dataclass
class MetaComparison:
    """
    Ranked matches plus aggregate statistics for a query deck.

    Attributes:
        matches: Top matches, best first
        aggregate: Outcomes of every deck that passed the filters
        considered: Number of decks scored
        floor_applied: True if the similarity floor narrowed the pool
        pool: Every ranked deck that cleared the floor (all scored decks
            when no floor applies)
    """

    matches: list[SimilarityMatch] = field(default_factory=list)
    aggregate: AggregateResult = field(default_factory=AggregateResult)
    considered: int = 0
    floor_applied: bool = False
    pool: list[SimilarityMatch] = field(default_factory=list)
