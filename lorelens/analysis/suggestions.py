"""
Meta adds and cuts.

Compares the user's card counts with what similar tournament decks play.
Each similar deck contributes with a weight of similarity times placement
weight, so a winning list close to the user's deck counts the most.

Adds: cards most of the pool plays, in more copies than the user runs.
Cuts: cards the user runs that the pool rarely or never plays.

INVARIANTS:
1. Suggestions are advisory; the deck is never modified
2. An empty pool yields no adds and no cuts
3. A card is never suggested as both an add and a cut
"""

import logging
import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum

from lorelens.analysis.vectorize import CardCount, join_key
from lorelens.models.deck import SimilarityMatch
from lorelens.services.card_index import CardIndex

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

# (finish at or better than, weight); unparsed and later finishes get the floor
PLACEMENT_WEIGHTS: tuple[tuple[int, float], ...] = (
    (1, 1.00),
    (4, 0.90),
    (8, 0.75),
    (16, 0.60),
    (32, 0.45),
    (64, 0.30),
)
PLACEMENT_WEIGHT_FLOOR = 0.15

MAX_COPIES = 4


class Priority(str, Enum):
    """How strongly the pool backs a suggestion."""

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


@dataclass(frozen=True)
class SuggestionOptions:
    """
    Thresholds for adds and cuts.

    Attributes:
        min_similarity: Ignore pool decks below this similarity (0.0-1.0)
        max_pool: Use at most this many pool decks
        add_presence: Minimum share of pool decks playing an add
        add_gap: Minimum copies the pool plays beyond the user's count
        cut_presence: Cards played by fewer pool decks than this are cut
        cut_gap: Minimum copies the user plays beyond the pool's count
        limit: Maximum adds and maximum cuts
    """

    min_similarity: float = 0.20
    max_pool: int = 30
    add_presence: float = 0.45
    add_gap: float = 0.8
    cut_presence: float = 0.30
    cut_gap: float = 0.5
    limit: int = 12


@dataclass(frozen=True, slots=True)
class CardUsage:
    """How the similar-deck pool plays one card."""

    key: str
    name: str
    presence: float  # share of pool decks, 0.0-1.0
    average_qty: float  # weighted by similarity and placement
    user_qty: int


@dataclass(frozen=True, slots=True)
class AddSuggestion:
    name: str
    presence: float
    average_qty: float
    user_qty: int
    suggested_qty: int
    priority: Priority


@dataclass(frozen=True, slots=True)
class CutSuggestion:
    name: str
    presence: float
    average_qty: float
    user_qty: int
    suggested_cut: int
    priority: Priority


@dataclass
class MetaSuggestions:
    """Adds and cuts plus the pool they were drawn from."""

    adds: list[AddSuggestion] = field(default_factory=list)
    cuts: list[CutSuggestion] = field(default_factory=list)
    pool_size: int = 0


def placement_weight(finish: int | None) -> float:
    """Weight of a pool deck by how well it finished."""
    if finish is None:
        return PLACEMENT_WEIGHT_FLOOR
    for cutoff, weight in PLACEMENT_WEIGHTS:
        if finish <= cutoff:
            return weight
    return PLACEMENT_WEIGHT_FLOOR


def _counts_by_key(
    cards: Iterable[CardCount], index: CardIndex | None
) -> tuple[dict[str, int], dict[str, str]]:
    """Summed quantities and first-seen display names per join key."""
    counts: dict[str, int] = {}
    names: dict[str, str] = {}
    for card in cards:
        if card.quantity <= 0:
            continue
        key = join_key(card.card_id, card.name, index)
        if key is None:
            continue
        counts[key] = counts.get(key, 0) + card.quantity
        names.setdefault(key, card.name)
    return counts, names


def select_pool(
    matches: Sequence[SimilarityMatch], options: SuggestionOptions | None = None
) -> list[tuple[SimilarityMatch, float]]:
    """
    Pick the decks suggestions are drawn from.

    Returns:
        (match, placement weight) pairs, ordered by similarity scaled by
        placement weight
    """
    if options is None:
        options = SuggestionOptions()

    weighted = [(m, placement_weight(m.finish)) for m in matches if m.score >= options.min_similarity]
    # Stable: equal ranks keep the caller's order
    weighted.sort(key=lambda pair: -(pair[0].score * (0.5 + 0.5 * pair[1])))
    return weighted[: max(0, options.max_pool)]


def card_usage(
    deck_cards: Iterable[CardCount],
    pool: Sequence[tuple[SimilarityMatch, float]],
    index: CardIndex | None = None,
) -> list[CardUsage]:
    """
    Per-card presence and weighted average quantity across the pool.

    Cards the user plays but no pool deck does are included with
    presence 0, after the pool's cards.
    """
    user_counts, user_names = _counts_by_key(deck_cards, index)
    if not pool:
        return [
            CardUsage(key=key, name=user_names[key], presence=0.0, average_qty=0.0, user_qty=qty)
            for key, qty in user_counts.items()
        ]

    weighted_qty: dict[str, float] = {}
    total_weight: dict[str, float] = {}
    deck_count: dict[str, int] = {}
    names: dict[str, str] = {}

    for match, weight in pool:
        counts, deck_names = _counts_by_key(match.deck.cards, index)
        contribution = weight * match.score
        for key, qty in counts.items():
            weighted_qty[key] = weighted_qty.get(key, 0.0) + qty * contribution
            total_weight[key] = total_weight.get(key, 0.0) + contribution
            deck_count[key] = deck_count.get(key, 0) + 1
            names.setdefault(key, deck_names[key])

    usage = []
    for key, count in deck_count.items():
        weight = total_weight[key]
        usage.append(
            CardUsage(
                key=key,
                name=names[key],
                presence=count / len(pool),
                average_qty=weighted_qty[key] / weight if weight > 0 else 0.0,
                user_qty=user_counts.get(key, 0),
            )
        )

    for key, qty in user_counts.items():
        if key not in deck_count:
            usage.append(
                CardUsage(key=key, name=user_names[key], presence=0.0, average_qty=0.0, user_qty=qty)
            )

    return usage


def _add_priority(presence: float) -> Priority:
    if presence >= 0.75:
        return Priority.HIGH
    if presence >= 0.55:
        return Priority.MEDIUM
    return Priority.LOW


def _cut_priority(presence: float) -> Priority:
    if presence < 0.10:
        return Priority.HIGH
    if presence < 0.20:
        return Priority.MEDIUM
    return Priority.LOW


def suggest_adds_and_cuts(
    deck_cards: Iterable[CardCount],
    matches: Sequence[SimilarityMatch],
    index: CardIndex | None = None,
    options: SuggestionOptions | None = None,
) -> MetaSuggestions:
    """
    Suggest cards to add and cut based on similar tournament decks.

    Args:
        deck_cards: The user's resolved card lines
        matches: Ranked similar decks (MetaComparison.pool)
        index: Catalog index used to link corpus names to card ids; pass
            the index the deck was resolved with
        options: Pool size and thresholds

    Returns:
        MetaSuggestions; adds ordered by presence (highest first), cuts by
        presence (lowest first)
    """
    if options is None:
        options = SuggestionOptions()

    pool = select_pool(matches, options)
    if not pool:
        return MetaSuggestions()

    adds: list[AddSuggestion] = []
    cuts: list[CutSuggestion] = []

    for usage in card_usage(deck_cards, pool, index):
        average = round(usage.average_qty, 1)
        gap = usage.average_qty - usage.user_qty

        if (
            usage.presence >= options.add_presence
            and gap >= options.add_gap
            and usage.user_qty < math.ceil(average)
        ):
            adds.append(
                AddSuggestion(
                    name=usage.name,
                    presence=usage.presence,
                    average_qty=average,
                    user_qty=usage.user_qty,
                    suggested_qty=min(MAX_COPIES, math.ceil(average)),
                    priority=_add_priority(usage.presence),
                )
            )
        elif usage.user_qty > 0 and usage.presence < options.cut_presence and gap < -options.cut_gap:
            cuts.append(
                CutSuggestion(
                    name=usage.name,
                    presence=usage.presence,
                    average_qty=average,
                    user_qty=usage.user_qty,
                    suggested_cut=min(usage.user_qty, math.ceil(abs(gap))),
                    priority=_cut_priority(usage.presence),
                )
            )

    adds.sort(key=lambda a: -a.presence)
    cuts.sort(key=lambda c: c.presence)

    logger.debug("Suggested %d adds and %d cuts from %d decks", len(adds), len(cuts), len(pool))
    return MetaSuggestions(adds=adds[: options.limit], cuts=cuts[: options.limit], pool_size=len(pool))
