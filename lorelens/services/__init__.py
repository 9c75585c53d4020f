"""
LoreLens services.

Catalog lookups, name resolution and deck analysis.
"""

from lorelens.services.card_database import (
    catalog_loader,
    download_catalog,
    get_catalog_snapshot,
    load_catalog,
)
from lorelens.services.card_index import CardIndex, build_index
from lorelens.services.card_resolver import (
    NameResolution,
    ResolverOptions,
    ScoredCandidate,
    resolve_name,
    resolve_names,
)
from lorelens.services.cost_estimator import CostEstimator, KeywordCostEstimator, estimate_cost
from lorelens.services.deck_analyzer import DeckAnalysis, analyze_decklist, resolve_deck
from lorelens.services.meta_corpus import corpus_loader, get_corpus_snapshot
from lorelens.services.snapshot import FileSnapshotLoader

__all__ = [
    "CardIndex",
    "CostEstimator",
    "DeckAnalysis",
    "FileSnapshotLoader",
    "KeywordCostEstimator",
    "NameResolution",
    "ResolverOptions",
    "ScoredCandidate",
    "analyze_decklist",
    "build_index",
    "catalog_loader",
    "corpus_loader",
    "download_catalog",
    "estimate_cost",
    "get_catalog_snapshot",
    "get_corpus_snapshot",
    "load_catalog",
    "resolve_deck",
    "resolve_name",
    "resolve_names",
]
