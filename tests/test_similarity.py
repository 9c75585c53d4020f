import logging

import pytest

from lorelens.analysis.similarity import (
    CompareOptions,
    aggregate_finishes,
    compare_to_meta,
    filter_corpus,
    score_vectors,
    weighted_jaccard,
)
from lorelens.analysis.vectorize import vectorize, vectorize_counts
from lorelens.config import Settings
from lorelens.models.deck import DeckCard, DeckVector, HistoricalDeck, MetaCorpus
from lorelens.services.card_index import CardIndex


def make_deck(
    deck_id: str,
    cards: dict[str, int],
    placement: str | None = None,
    format_name: str | None = None,
    archetype: str | None = None,
) -> HistoricalDeck:
    return HistoricalDeck(
        deck_id=deck_id,
        cards=tuple(DeckCard(name=n, quantity=q) for n, q in cards.items()),
        format=format_name,
        archetype=archetype,
        placement=placement,
    )


@pytest.fixture
def shared_cards() -> dict[str, int]:
    """Fourteen playsets: 56 cards."""
    return {f"Shared Card {i}": 4 for i in range(14)}


class TestWeightedJaccard:
    def test_sixty_card_decks_differing_in_four(self, shared_cards: dict[str, int]) -> None:
        a = vectorize_counts({**shared_cards, "Only In A": 4})
        b = vectorize_counts({**shared_cards, "Only In B": 4})

        assert a.total == b.total == 60
        assert weighted_jaccard(a, b) == pytest.approx(56 / 64)

    def test_identical(self) -> None:
        a = vectorize_counts({"A": 4, "B": 2})
        assert weighted_jaccard(a, a) == 1.0

    def test_disjoint(self) -> None:
        assert weighted_jaccard(vectorize_counts({"A": 4}), vectorize_counts({"B": 4})) == 0.0

    def test_empty(self) -> None:
        empty = DeckVector()
        assert weighted_jaccard(empty, empty) == 0.0
        assert weighted_jaccard(empty, vectorize_counts({"A": 1})) == 0.0

    def test_quantities_matter(self) -> None:
        a = vectorize_counts({"A": 4})
        b = vectorize_counts({"A": 1})
        assert weighted_jaccard(a, b) == pytest.approx(1 / 4)

    def test_symmetric(self) -> None:
        a = vectorize_counts({"A": 4, "B": 2, "C": 1})
        b = vectorize_counts({"A": 3, "C": 4, "D": 2})
        assert weighted_jaccard(a, b) == pytest.approx(weighted_jaccard(b, a))

    def test_more_overlap_scores_higher(self) -> None:
        query = vectorize_counts({"A": 4, "B": 4})
        less = vectorize_counts({"A": 2, "C": 4})
        more = vectorize_counts({"A": 3, "C": 4})

        assert weighted_jaccard(query, more) > weighted_jaccard(query, less)


class TestScoreVectors:
    def test_matches_pairwise(self) -> None:
        query = vectorize_counts({"A": 4, "B": 2, "C": 1})
        others = [
            vectorize_counts({"A": 4, "B": 2, "C": 1}),
            vectorize_counts({"A": 1, "D": 4}),
            vectorize_counts({"E": 3}),
            DeckVector(),
            vectorize_counts({"A": 4, "B": 4, "C": 4, "F": 1}),
        ]

        scores = score_vectors(query, others)

        assert scores.tolist() == pytest.approx([weighted_jaccard(query, o) for o in others])

    def test_bounds(self) -> None:
        query = vectorize_counts({"A": 4})
        scores = score_vectors(query, [vectorize_counts({"A": 9}), vectorize_counts({"B": 1})])

        assert ((scores >= 0.0) & (scores <= 1.0)).all()

    def test_empty_query(self) -> None:
        scores = score_vectors(DeckVector(), [vectorize_counts({"A": 1}), DeckVector()])
        assert scores.tolist() == [0.0, 0.0]

    def test_no_vectors(self) -> None:
        assert len(score_vectors(vectorize_counts({"A": 1}), [])) == 0


class TestAggregateFinishes:
    def test_five_finishes(self) -> None:
        decks = [
            make_deck("1", {"A": 1}, "Winner"),
            make_deck("2", {"A": 1}, "Top 4"),
            make_deck("3", {"A": 1}, "Top 8"),
            make_deck("4", {"A": 1}, "Top 16"),
            make_deck("5", {"A": 1}, "32nd"),
        ]

        result = aggregate_finishes(decks)

        assert result.count == 5
        assert result.best_finish == 1
        assert result.average_finish == pytest.approx(12.2)
        # Winner, Top 4 and Top 8 are within the cut
        assert result.top_cut_rate == pytest.approx(0.6)

    def test_top_8_counts_as_top_cut(self) -> None:
        decks = [make_deck("1", {"A": 1}, "Top 8"), make_deck("2", {"A": 1}, "9th")]

        result = aggregate_finishes(decks)

        assert result.top_cut_rate == pytest.approx(0.5)
        assert aggregate_finishes(decks[:1]).top_cut_rate == 1.0

    def test_unparsed_finishes_excluded_from_stats(self) -> None:
        decks = [
            make_deck("1", {"A": 1}, "Top 8", archetype="Ruby Steel"),
            make_deck("2", {"A": 1}, "Participant"),
        ]

        result = aggregate_finishes(decks)

        assert result.count == 2
        assert result.best_finish == 8
        assert result.average_finish == 8
        assert result.top_cut_rate == 1.0
        assert result.by_archetype == {"Ruby Steel": 1, "Unknown": 1}

    def test_no_finishes(self) -> None:
        result = aggregate_finishes([make_deck("1", {"A": 1}, "DNF")])

        assert result.count == 1
        assert result.best_finish is None
        assert result.average_finish is None
        assert result.top_cut_rate is None

    def test_custom_top_cut(self) -> None:
        decks = [make_deck("1", {"A": 1}, "Top 16"), make_deck("2", {"A": 1}, "Top 32")]
        assert aggregate_finishes(decks, top_cut=16).top_cut_rate == 0.5


class TestCompareToMeta:
    def test_empty_corpus(self) -> None:
        result = compare_to_meta(vectorize_counts({"A": 4}), [])

        assert result.matches == []
        assert result.considered == 0
        assert result.aggregate.count == 0
        assert result.aggregate.best_finish is None
        assert result.aggregate.average_finish is None
        assert result.aggregate.top_cut_rate is None

    def test_ranked_descending(self, shared_cards: dict[str, int]) -> None:
        query = vectorize_counts(shared_cards)
        corpus = [
            make_deck("far", {"Other": 60}),
            make_deck("close", {**shared_cards, "X": 4}),
            make_deck("same", shared_cards),
        ]

        result = compare_to_meta(query, corpus)

        assert [m.deck.deck_id for m in result.matches] == ["same", "close", "far"]
        assert result.matches[0].score == 1.0
        assert result.matches[1].score == pytest.approx(56 / 60)
        assert result.matches[2].score == 0.0

    def test_ties_keep_corpus_order(self) -> None:
        query = vectorize_counts({"A": 4})
        corpus = [make_deck(str(i), {"A": 4, "B": 4}) for i in range(5)]

        result = compare_to_meta(query, corpus)

        assert [m.deck.deck_id for m in result.matches] == ["0", "1", "2", "3", "4"]

    def test_top_k_limits_matches_not_aggregate(self) -> None:
        query = vectorize_counts({"A": 4})
        corpus = [make_deck(str(i), {"A": 4}, placement=f"Top {2 ** (i + 1)}") for i in range(5)]

        result = compare_to_meta(query, corpus, CompareOptions(top_k=2))

        assert len(result.matches) == 2
        assert result.considered == 5
        assert result.aggregate.count == 5
        assert result.aggregate.best_finish == 2

    def test_best_finish_not_worse_than_average(self) -> None:
        query = vectorize_counts({"A": 4})
        corpus = [
            make_deck("1", {"A": 4}, "Top 8"),
            make_deck("2", {"A": 2}, "3rd"),
            make_deck("3", {"B": 4}, "Top 64"),
        ]

        aggregate = compare_to_meta(query, corpus).aggregate

        assert aggregate.best_finish is not None
        assert aggregate.average_finish is not None
        assert aggregate.best_finish <= aggregate.average_finish

    def test_format_filter(self) -> None:
        query = vectorize_counts({"A": 4})
        corpus = [
            make_deck("core", {"A": 4}, format_name="Core"),
            make_deck("infinity", {"A": 4}, format_name="Infinity"),
            make_deck("unknown", {"A": 4}),
        ]

        filtered = compare_to_meta(query, corpus, CompareOptions(format_name="CORE"))
        unfiltered = compare_to_meta(
            query, corpus, CompareOptions(format_name="core", same_format_only=False)
        )
        no_format = compare_to_meta(query, corpus, CompareOptions())

        assert [m.deck.deck_id for m in filtered.matches] == ["core", "unknown"]
        assert unfiltered.considered == 3
        assert no_format.considered == 3

    def test_max_finish_keeps_unparsed(self) -> None:
        corpus = [
            make_deck("top8", {"A": 4}, "Top 8"),
            make_deck("top64", {"A": 4}, "Top 64"),
            make_deck("unknown", {"A": 4}, "Participant"),
        ]

        filtered = filter_corpus(corpus, CompareOptions(max_finish=8))

        assert [(d.deck_id, finish) for d, finish in filtered] == [("top8", 8), ("unknown", None)]

    def test_similarity_floor_applied(self) -> None:
        query = vectorize_counts({"A": 4, "B": 4})
        corpus = [
            make_deck("same", {"A": 4, "B": 4}, "Top 64"),
            make_deck("half", {"A": 4}, "Winner"),
            make_deck("none", {"C": 8}, "2nd"),
        ]

        result = compare_to_meta(query, corpus, CompareOptions(min_similarity=0.5))

        assert result.floor_applied
        assert [m.deck.deck_id for m in result.matches] == ["same", "half"]
        assert [m.deck.deck_id for m in result.pool] == ["same", "half"]

    def test_aggregate_ignores_similarity_floor(self) -> None:
        query = vectorize_counts({"A": 4, "B": 4})
        corpus = [
            make_deck("same", {"A": 4, "B": 4}, "Top 64"),
            make_deck("none", {"C": 8}, "Winner"),
        ]

        result = compare_to_meta(query, corpus, CompareOptions(min_similarity=0.5))

        assert result.floor_applied
        assert [m.deck.deck_id for m in result.matches] == ["same"]
        # Every deck that passed the format and finish filters
        assert result.aggregate.count == 2
        assert result.aggregate.best_finish == 1

    def test_similarity_floor_fallback(self) -> None:
        query = vectorize_counts({"A": 4})
        corpus = [make_deck("1", {"A": 1, "B": 3}), make_deck("2", {"C": 4})]

        result = compare_to_meta(query, corpus, CompareOptions(min_similarity=0.9))

        assert not result.floor_applied
        assert [m.deck.deck_id for m in result.matches] == ["1", "2"]
        assert result.aggregate.count == 2

    def test_min_matches(self) -> None:
        query = vectorize_counts({"A": 4})
        corpus = [make_deck("1", {"A": 4}), make_deck("2", {"B": 4})]

        result = compare_to_meta(query, corpus, CompareOptions(min_similarity=0.5, min_matches=2))

        assert not result.floor_applied
        assert len(result.matches) == 2

    def test_scores_bounded(self, sample_corpus: MetaCorpus, sample_index: CardIndex) -> None:
        query = vectorize_counts({"Tipo - Growing Son": 4, "Elsa - Snow Queen": 2}, sample_index)

        result = compare_to_meta(
            query, sample_corpus.decks, CompareOptions(same_format_only=False), sample_index
        )

        assert result.considered == len(sample_corpus)
        assert all(0.0 <= m.score <= 1.0 for m in result.matches)

    def test_index_links_corpus_names(self, sample_corpus: MetaCorpus, sample_index: CardIndex) -> None:
        first = sample_corpus.decks[0]
        query = vectorize(first.cards, sample_index)

        result = compare_to_meta(query, [first], index=sample_index)

        assert result.matches[0].score == 1.0

    def test_corpus_cap_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        query = vectorize_counts({"A": 4})
        corpus = [make_deck(str(i), {"A": 4}) for i in range(10)]

        with caplog.at_level(logging.WARNING):
            result = compare_to_meta(query, corpus, CompareOptions(max_corpus=3))

        assert result.considered == 3
        assert "capped" in caplog.text


class TestCompareOptions:
    def test_from_settings(self) -> None:
        options = CompareOptions.from_settings(
            Settings(compare_top_k=5, max_corpus_size=100), format_name="Core", top_k=None
        )

        assert options.top_k == 5
        assert options.max_corpus == 100
        assert options.format_name == "Core"
        assert options.same_format_only is True
