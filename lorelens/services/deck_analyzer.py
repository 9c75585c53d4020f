"""
Deck analysis.

Turns decklist text into a resolved deck report: which lines were
recognized, the ink cost curve, inks and inkwell share.

INVARIANTS:
1. Only exact catalog matches are applied to the deck
2. Fuzzy suggestions are attached to unrecognized lines as a report
3. Estimated costs shape the curve only and are counted separately
"""

import logging
from dataclasses import dataclass, field

from lorelens.models.deck import DecklistEntry, ResolvedCard, ResolvedDeck
from lorelens.parsers.decklist import parse_decklist_report
from lorelens.services.card_index import CardIndex
from lorelens.services.card_resolver import NameResolution, ResolverOptions, resolve_name
from lorelens.services.cost_estimator import CostEstimator, KeywordCostEstimator

logger = logging.getLogger(__name__)

CURVE_BUCKETS: tuple[str, ...] = ("0", "1", "2", "3", "4", "5", "6", "7", "8", "9", "10+")


@dataclass
class DeckAnalysis:
    """
    Resolved deck report.

    Attributes:
        deck: Exact resolution of every parsed line
        suggestions: Fuzzy resolution per unrecognized line number
        curve_counts: Copies per cost bucket ("0".."9", "10+")
        inks: Inks of recognized cards, in first-seen order
        inkable_qty: Copies that can go into the inkwell
        inkable_pct: inkable_qty as a rounded percentage of all copies
        estimated_cost_qty: Copies whose curve cost was estimated
        skipped_lines: Lines that did not parse (line_number, content)
        catalog_available: False if analysis ran without a catalog
    """

    deck: ResolvedDeck = field(default_factory=ResolvedDeck)
    suggestions: dict[int, NameResolution] = field(default_factory=dict)
    curve_counts: dict[str, int] = field(default_factory=lambda: dict.fromkeys(CURVE_BUCKETS, 0))
    inks: list[str] = field(default_factory=list)
    inkable_qty: int = 0
    inkable_pct: int = 0
    estimated_cost_qty: int = 0
    skipped_lines: list[tuple[int, str]] = field(default_factory=list)
    catalog_available: bool = True


def curve_bucket(cost: int) -> str:
    """Curve bucket label for an ink cost."""
    if cost >= 10:
        return "10+"
    return str(max(0, cost))


def resolve_deck(entries: list[DecklistEntry], index: CardIndex) -> ResolvedDeck:
    """Join each entry with its catalog card by exact normalized key."""
    return ResolvedDeck(
        cards=[ResolvedCard(entry=e, card=index.get_by_key(e.normalized_name)) for e in entries]
    )


def analyze_decklist(
    text: str | None,
    index: CardIndex,
    options: ResolverOptions | None = None,
    estimator: CostEstimator | None = None,
    suggest: bool = True,
) -> DeckAnalysis:
    """
    Analyze decklist text against a catalog snapshot.

    Args:
        text: Raw decklist text
        index: Catalog index snapshot
        options: Fuzzy resolver options for suggestions
        estimator: Fallback for recognized cards without a cost
        suggest: Attach fuzzy suggestions to unrecognized lines

    Returns:
        DeckAnalysis (empty deck for empty input)
    """
    if estimator is None:
        estimator = KeywordCostEstimator()

    report = parse_decklist_report(text)
    deck = resolve_deck(report.entries, index)
    analysis = DeckAnalysis(
        deck=deck,
        skipped_lines=report.skipped_lines,
        catalog_available=index.available,
    )

    for resolved in deck.cards:
        card = resolved.card
        qty = resolved.quantity

        if card is None:
            if suggest:
                analysis.suggestions[resolved.entry.line_number] = resolve_name(
                    resolved.entry.raw_name, index, options
                )
            continue

        cost = card.cost
        if cost is None:
            cost = estimator.estimate_cost(card.full_name)
            analysis.estimated_cost_qty += qty
        bucket = curve_bucket(cost)
        analysis.curve_counts[bucket] += qty

        if card.inkable is True:
            analysis.inkable_qty += qty

        for ink in card.inks:
            if ink not in analysis.inks:
                analysis.inks.append(ink)

    total = deck.total_qty
    analysis.inkable_pct = round(analysis.inkable_qty / total * 100) if total else 0

    logger.debug(
        "Analyzed deck: %d/%d copies recognized, %d skipped lines",
        deck.recognized_qty,
        total,
        len(report.skipped_lines),
    )
    return analysis
