"""
Deck analysis API endpoint.

Parses a decklist, resolves it against the catalog and reports the curve.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, Field

from lorelens.api.cards import CandidateResponse, NameResolutionResponse, resolution_to_response
from lorelens.config import settings
from lorelens.models.snapshot import Snapshot
from lorelens.services.card_database import get_catalog_snapshot
from lorelens.services.card_index import CardIndex
from lorelens.services.card_resolver import ResolverOptions
from lorelens.services.deck_analyzer import DeckAnalysis, analyze_decklist

router = APIRouter(prefix="/decks", tags=["decks"])


class AnalyzeRequest(BaseModel):
    """Request model for deck analysis."""

    decklist: str = Field(min_length=1, max_length=20_000)
    suggest: bool = True


class DeckCardResponse(BaseModel):
    """A decklist line after exact resolution."""

    line_number: int
    quantity: int
    name: str
    status: str
    card: CandidateResponse | None = None


class UnknownCardResponse(BaseModel):
    """An unrecognized line with fuzzy suggestions (never applied)."""

    line_number: int
    quantity: int
    name: str
    resolution: NameResolutionResponse | None = None


class SkippedLineResponse(BaseModel):
    """A line that did not parse."""

    line_number: int
    content: str


class DeckTotals(BaseModel):
    """Copy counts for a resolved deck."""

    total_cards: int
    recognized_qty: int
    unrecognized_qty: int


class AnalyzeResponse(BaseModel):
    """Response model for deck analysis."""

    catalog_available: bool
    totals: DeckTotals
    cards: list[DeckCardResponse]
    unknown_cards: list[UnknownCardResponse]
    skipped_lines: list[SkippedLineResponse]
    curve_counts: dict[str, int]
    inks: list[str]
    inkable_qty: int
    inkable_pct: int = Field(ge=0, le=100)
    estimated_cost_qty: int


def deck_totals(analysis: DeckAnalysis) -> DeckTotals:
    """Copy counts of an analyzed deck."""
    return DeckTotals(
        total_cards=analysis.deck.total_qty,
        recognized_qty=analysis.deck.recognized_qty,
        unrecognized_qty=analysis.deck.unrecognized_qty,
    )


@router.post("/analyze", response_model=AnalyzeResponse)
async def analyze_deck(
    request: AnalyzeRequest,
    catalog: Annotated[Snapshot[CardIndex], Depends(get_catalog_snapshot)],
) -> AnalyzeResponse:
    """
    Analyze a decklist.

    Only exact catalog matches count as recognized. Suggestions for
    unrecognized lines are reported for the user to confirm.
    """
    analysis = await run_in_threadpool(
        analyze_decklist,
        request.decklist,
        catalog.value,
        ResolverOptions.from_settings(settings),
        suggest=request.suggest,
    )

    cards = []
    unknown = []
    for resolved in analysis.deck.cards:
        card_response = None
        if resolved.card is not None:
            card_response = CandidateResponse(
                card_id=resolved.card.card_id,
                name=resolved.card.full_name,
                score=1.0,
                cost=resolved.card.cost,
                inks=list(resolved.card.inks),
            )
        cards.append(
            DeckCardResponse(
                line_number=resolved.entry.line_number,
                quantity=resolved.quantity,
                name=resolved.name,
                status=resolved.status.value,
                card=card_response,
            )
        )

        if resolved.card is None:
            suggestion = analysis.suggestions.get(resolved.entry.line_number)
            unknown.append(
                UnknownCardResponse(
                    line_number=resolved.entry.line_number,
                    quantity=resolved.quantity,
                    name=resolved.entry.raw_name,
                    resolution=resolution_to_response(suggestion) if suggestion else None,
                )
            )

    return AnalyzeResponse(
        catalog_available=analysis.catalog_available,
        totals=deck_totals(analysis),
        cards=cards,
        unknown_cards=unknown,
        skipped_lines=[
            SkippedLineResponse(line_number=n, content=c) for n, c in analysis.skipped_lines
        ],
        curve_counts=analysis.curve_counts,
        inks=analysis.inks,
        inkable_qty=analysis.inkable_qty,
        inkable_pct=analysis.inkable_pct,
        estimated_cost_qty=analysis.estimated_cost_qty,
    )
