from lorelens.analysis.similarity import (
    CompareOptions,
    aggregate_finishes,
    aggregate_matches,
    compare_to_meta,
    score_vectors,
    weighted_jaccard,
)
from lorelens.analysis.suggestions import (
    MetaSuggestions,
    SuggestionOptions,
    suggest_adds_and_cuts,
)
from lorelens.analysis.vectorize import join_key, vectorize, vectorize_counts

__all__ = [
    "CompareOptions",
    "MetaSuggestions",
    "SuggestionOptions",
    "aggregate_finishes",
    "aggregate_matches",
    "compare_to_meta",
    "join_key",
    "score_vectors",
    "suggest_adds_and_cuts",
    "vectorize",
    "vectorize_counts",
    "weighted_jaccard",
]
