from lorelens.models.card import CatalogCard
from lorelens.models.deck import (
    AggregateResult,
    CardStatus,
    DeckCard,
    DecklistEntry,
    DeckVector,
    HistoricalDeck,
    MetaComparison,
    MetaCorpus,
    ResolvedCard,
    ResolvedDeck,
    SimilarityMatch,
)
from lorelens.models.snapshot import Snapshot

__all__ = [
    "AggregateResult",
    "CardStatus",
    "CatalogCard",
    "DeckCard",
    "DecklistEntry",
    "DeckVector",
    "HistoricalDeck",
    "MetaComparison",
    "MetaCorpus",
    "ResolvedCard",
    "ResolvedDeck",
    "SimilarityMatch",
    "Snapshot",
]
