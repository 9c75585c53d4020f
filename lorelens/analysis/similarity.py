"""
Meta similarity engine.

Compares a query deck against a corpus of tournament decklists using
weighted multiset Jaccard similarity, ranks the corpus and aggregates
the competitive outcomes of the comparable decks.

Similarity:
    sum(min(a[k], b[k])) / sum(max(a[k], b[k]))   over all keys

Shares both which cards are played and how many copies; decks of
different sizes are penalized naturally.
"""

import logging
from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

import numpy as np

from lorelens.analysis.vectorize import vectorize
from lorelens.config import DEFAULT_TOP_CUT, DEFAULT_TOP_K, Settings
from lorelens.models.deck import (
    AggregateResult,
    DeckVector,
    HistoricalDeck,
    MetaComparison,
    SimilarityMatch,
)
from lorelens.parsers.placement import is_top_cut, parse_finish
from lorelens.services.card_index import CardIndex

logger = logging.getLogger(__name__)

UNKNOWN_ARCHETYPE = "Unknown"


@dataclass(frozen=True)
class CompareOptions:
    """
    Filtering and ranking options for a meta comparison.

    Attributes:
        top_k: Number of matches to return
        same_format_only: Drop corpus decks from other formats
        format_name: Format of the query deck
        min_similarity: Similarity floor (0.0-1.0), None for no floor
        min_matches: If fewer decks clear the floor, the floor is ignored
        max_finish: Drop decks that finished worse than this
        max_corpus: Score at most this many decks per call
        top_cut: Finishes at or better than this count as a top cut
    """

    top_k: int = DEFAULT_TOP_K
    same_format_only: bool = True
    format_name: str | None = None
    min_similarity: float | None = None
    min_matches: int = 1
    max_finish: int | None = None
    max_corpus: int | None = None
    top_cut: int = DEFAULT_TOP_CUT

    @classmethod
    def from_settings(cls, settings: Settings, **overrides: object) -> "CompareOptions":
        values: dict[str, object] = {
            "top_k": settings.compare_top_k,
            "max_corpus": settings.max_corpus_size,
            "top_cut": settings.top_cut,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)  # type: ignore[arg-type]


def weighted_jaccard(a: DeckVector, b: DeckVector) -> float:
    """
    Weighted multiset Jaccard similarity between two deck vectors.

    Returns:
        Similarity in [0, 1]; 0 when both vectors are empty
    """
    intersection = 0
    union = 0
    for key in a.counts.keys() | b.counts.keys():
        qa = a.counts.get(key, 0)
        qb = b.counts.get(key, 0)
        intersection += min(qa, qb)
        union += max(qa, qb)
    return intersection / union if union else 0.0


def score_vectors(query: DeckVector, vectors: Sequence[DeckVector]) -> np.ndarray:
    """
    Weighted Jaccard of the query against many vectors at once.

    Uses sum(max) = total_a + total_b - sum(min), so only the query's keys
    need to be laid out as columns.

    Returns:
        Array of similarities, one per vector, in input order
    """
    if not vectors:
        return np.zeros(0, dtype=np.float64)

    keys = list(query.counts)
    totals = np.fromiter((v.total for v in vectors), dtype=np.float64, count=len(vectors))

    if keys:
        q = np.array([query.counts[k] for k in keys], dtype=np.float64)
        matrix = np.array([[v.counts.get(k, 0) for k in keys] for v in vectors], dtype=np.float64)
        intersection = np.minimum(matrix, q).sum(axis=1)
    else:
        intersection = np.zeros(len(vectors), dtype=np.float64)

    union = query.total + totals - intersection
    with np.errstate(divide="ignore", invalid="ignore"):
        scores = np.where(union > 0, intersection / union, 0.0)
    return np.clip(scores, 0.0, 1.0)


def filter_corpus(
    corpus: Iterable[HistoricalDeck],
    options: CompareOptions,
) -> list[tuple[HistoricalDeck, int | None]]:
    """
    Apply format and finish filters.

    Decks without a format are kept when filtering by format; decks whose
    placement could not be parsed are kept when filtering by finish.

    Returns:
        (deck, parsed finish) pairs in corpus order
    """
    target_format = (options.format_name or "").strip().lower()
    kept: list[tuple[HistoricalDeck, int | None]] = []

    for deck in corpus:
        if options.same_format_only and target_format:
            deck_format = (deck.format or "").strip().lower()
            if deck_format and deck_format != target_format:
                continue

        finish = parse_finish(deck.placement)
        if options.max_finish is not None and finish is not None and finish > options.max_finish:
            continue

        kept.append((deck, finish))

    return kept


def _aggregate(outcomes: Sequence[tuple[str | None, int | None]], top_cut: int) -> AggregateResult:
    """Aggregate (archetype, finish) pairs."""
    finishes = [finish for _, finish in outcomes if finish is not None]
    by_archetype = Counter(archetype or UNKNOWN_ARCHETYPE for archetype, _ in outcomes)

    if not finishes:
        return AggregateResult(count=len(outcomes), by_archetype=dict(by_archetype))

    return AggregateResult(
        count=len(outcomes),
        best_finish=min(finishes),
        average_finish=sum(finishes) / len(finishes),
        top_cut_rate=sum(1 for f in finishes if is_top_cut(f, top_cut)) / len(finishes),
        by_archetype=dict(by_archetype),
    )


def aggregate_matches(matches: Sequence[SimilarityMatch], top_cut: int = DEFAULT_TOP_CUT) -> AggregateResult:
    """Aggregate outcomes of scored matches."""
    return _aggregate([(m.deck.archetype, m.finish) for m in matches], top_cut)


def aggregate_finishes(decks: Sequence[HistoricalDeck], top_cut: int = DEFAULT_TOP_CUT) -> AggregateResult:
    """Aggregate outcomes of decks, parsing their placement labels."""
    return _aggregate([(d.archetype, parse_finish(d.placement)) for d in decks], top_cut)


def compare_to_meta(
    query: DeckVector,
    corpus: Sequence[HistoricalDeck],
    options: CompareOptions | None = None,
    index: CardIndex | None = None,
) -> MetaComparison:
    """
    Rank corpus decks by similarity to the query deck.

    Args:
        query: Vector of the deck being compared
        corpus: Historical decks
        options: Filters, floor and result size
        index: Catalog index used to link corpus card names to card ids;
            pass the same index the query deck was resolved with

    Returns:
        MetaComparison with the top matches and aggregate statistics over
        every deck that passed the format and finish filters, whether or
        not it cleared the similarity floor
    """
    if options is None:
        options = CompareOptions()

    candidates = filter_corpus(corpus, options)

    if options.max_corpus is not None and len(candidates) > options.max_corpus:
        logger.warning(
            "Corpus capped at %d of %d decks for this comparison",
            options.max_corpus,
            len(candidates),
        )
        candidates = candidates[: options.max_corpus]

    if not candidates:
        return MetaComparison()

    vectors = [vectorize(deck.cards, index) for deck, _ in candidates]
    scores = score_vectors(query, vectors)

    scored = [
        SimilarityMatch(deck=deck, score=float(score), finish=finish)
        for (deck, finish), score in zip(candidates, scores, strict=True)
    ]

    # Stable sort: equal scores keep corpus order
    ranked = sorted(scored, key=lambda m: -m.score)

    pool = ranked
    floor_applied = False
    if options.min_similarity is not None:
        above = [m for m in ranked if m.score >= options.min_similarity]
        if len(above) >= max(1, options.min_matches):
            pool = above
            floor_applied = True
        else:
            logger.info(
                "Only %d decks reach similarity %.2f, returning top %d without the floor",
                len(above),
                options.min_similarity,
                options.top_k,
            )

    return MetaComparison(
        matches=pool[: max(1, options.top_k)],
        aggregate=aggregate_matches(ranked, options.top_cut),
        considered=len(candidates),
        floor_applied=floor_applied,
        pool=pool,
    )
