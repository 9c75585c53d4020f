"""
Meta comparison API endpoints.

Compares a decklist against historical tournament decks.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from lorelens.analysis.similarity import CompareOptions, compare_to_meta
from lorelens.analysis.suggestions import suggest_adds_and_cuts
from lorelens.analysis.vectorize import vectorize
from lorelens.api.decks import DeckTotals, deck_totals
from lorelens.config import settings
from lorelens.models.deck import MetaCorpus, SimilarityMatch
from lorelens.models.snapshot import Snapshot
from lorelens.services.card_database import get_catalog_snapshot
from lorelens.services.card_index import CardIndex
from lorelens.services.card_resolver import ResolverOptions
from lorelens.services.deck_analyzer import analyze_decklist
from lorelens.services.meta_corpus import get_corpus_snapshot

router = APIRouter(prefix="/meta", tags=["meta"])


class CompareRequest(BaseModel):
    """Request model for meta comparison. Similarities are on a 0-100 scale."""

    decklist: str = Field(min_length=1, max_length=20_000)
    format: str | None = None
    top_k: int | None = Field(default=None, ge=1, le=100)
    same_format_only: bool = True
    min_similarity: float | None = Field(default=None, ge=0.0, le=100.0)
    max_finish: int | None = Field(default=None, ge=1)
    suggest: bool = True


class MatchResponse(BaseModel):
    """A historical deck similar to the submitted one."""

    deck_id: str
    similarity: float = Field(ge=0.0, le=100.0)
    archetype: str | None = None
    format: str | None = None
    event: str | None = None
    date: str | None = None
    placement: str | None = None
    finish: int | None = None
    url: str | None = None
    players: int | None = None
    author: str | None = None


class AggregateResponse(BaseModel):
    """Outcomes of the comparable decks."""

    count: int
    best_finish: int | None = None
    average_finish: float | None = None
    top_cut_rate: float | None = Field(default=None, ge=0.0, le=100.0)
    by_archetype: dict[str, int] = Field(default_factory=dict)


class AddResponse(BaseModel):
    """A card similar decks play more of."""

    name: str
    presence: int = Field(ge=0, le=100)
    average_qty: float
    your_qty: int
    suggested_qty: int
    priority: str


class CutResponse(BaseModel):
    """A card similar decks rarely play."""

    name: str
    presence: int = Field(ge=0, le=100)
    average_qty: float
    your_qty: int
    suggested_cut: int
    priority: str


class CompareResponse(BaseModel):
    """Response model for meta comparison."""

    catalog_available: bool
    corpus_available: bool
    corpus_version: str
    deck: DeckTotals
    considered: int
    floor_applied: bool
    matches: list[MatchResponse]
    aggregate: AggregateResponse
    adds: list[AddResponse] = Field(default_factory=list)
    cuts: list[CutResponse] = Field(default_factory=list)


class MetaStatsResponse(BaseModel):
    """Corpus snapshot statistics."""

    available: bool
    version: str
    source: str | None = None
    updated_at: str | None = None
    schema_version: int
    total_decks: int
    formats: dict[str, int]
    archetypes: dict[str, int]


def match_to_response(match: SimilarityMatch) -> MatchResponse:
    """Convert a similarity match to its response model."""
    deck = match.deck
    return MatchResponse(
        deck_id=deck.deck_id,
        similarity=round(match.score * 100, 2),
        archetype=deck.archetype,
        format=deck.format,
        event=deck.event,
        date=deck.date,
        placement=deck.placement,
        finish=match.finish,
        url=deck.url,
        players=deck.players,
        author=deck.author,
    )


@router.post("/compare", response_model=CompareResponse)
async def compare_deck(
    request: CompareRequest,
    catalog: Annotated[Snapshot[CardIndex], Depends(get_catalog_snapshot)],
    corpus: Annotated[Snapshot[MetaCorpus], Depends(get_corpus_snapshot)],
) -> CompareResponse:
    """
    Find the most similar tournament decks.

    The aggregate covers every deck that passed the format and finish
    filters, not only the returned matches. A decklist with no card lines
    is compared as an empty deck and reported with total_cards=0.
    Adds and cuts are drawn from the decks that cleared the floor.
    """
    analysis = analyze_decklist(
        request.decklist,
        catalog.value,
        ResolverOptions.from_settings(settings),
        suggest=False,
    )
    query = vectorize(analysis.deck.cards, catalog.value)
    options = CompareOptions.from_settings(
        settings,
        top_k=request.top_k,
        same_format_only=request.same_format_only,
        format_name=request.format,
        min_similarity=request.min_similarity / 100 if request.min_similarity is not None else None,
        max_finish=request.max_finish,
    )
    comparison = compare_to_meta(query, corpus.value.decks, options, index=catalog.value)
    aggregate = comparison.aggregate

    adds: list[AddResponse] = []
    cuts: list[CutResponse] = []
    if request.suggest:
        suggestions = suggest_adds_and_cuts(analysis.deck.cards, comparison.pool, catalog.value)
        adds = [
            AddResponse(
                name=a.name,
                presence=round(a.presence * 100),
                average_qty=a.average_qty,
                your_qty=a.user_qty,
                suggested_qty=a.suggested_qty,
                priority=a.priority.value,
            )
            for a in suggestions.adds
        ]
        cuts = [
            CutResponse(
                name=c.name,
                presence=round(c.presence * 100),
                average_qty=c.average_qty,
                your_qty=c.user_qty,
                suggested_cut=c.suggested_cut,
                priority=c.priority.value,
            )
            for c in suggestions.cuts
        ]

    return CompareResponse(
        catalog_available=catalog.available,
        corpus_available=corpus.available,
        corpus_version=corpus.version,
        deck=deck_totals(analysis),
        considered=comparison.considered,
        floor_applied=comparison.floor_applied,
        matches=[match_to_response(m) for m in comparison.matches],
        aggregate=AggregateResponse(
            count=aggregate.count,
            best_finish=aggregate.best_finish,
            average_finish=(
                round(aggregate.average_finish, 2) if aggregate.average_finish is not None else None
            ),
            top_cut_rate=(
                round(aggregate.top_cut_rate * 100, 1) if aggregate.top_cut_rate is not None else None
            ),
            by_archetype=aggregate.by_archetype,
        ),
        adds=adds,
        cuts=cuts,
    )


@router.get("/stats", response_model=MetaStatsResponse)
async def meta_stats(
    corpus: Annotated[Snapshot[MetaCorpus], Depends(get_corpus_snapshot)],
) -> MetaStatsResponse:
    """Describe the loaded corpus snapshot."""
    value = corpus.value
    return MetaStatsResponse(
        available=corpus.available,
        version=corpus.version,
        source=value.source or corpus.source,
        updated_at=value.updated_at,
        schema_version=value.schema_version,
        total_decks=len(value),
        formats=value.formats,
        archetypes=value.archetypes,
    )
