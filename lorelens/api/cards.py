"""
Card resolution API endpoint.

Resolves written card names to catalog cards with fuzzy suggestions.
"""

from dataclasses import replace
from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, Field

from lorelens.config import settings
from lorelens.models.snapshot import Snapshot
from lorelens.services.card_database import get_catalog_snapshot
from lorelens.services.card_index import CardIndex
from lorelens.services.card_resolver import (
    NameResolution,
    ResolverOptions,
    ScoredCandidate,
    resolve_names,
)

router = APIRouter(prefix="/cards", tags=["cards"])


class ResolveRequest(BaseModel):
    """Request model for name resolution."""

    names: list[str] = Field(min_length=1, max_length=200)
    limit: int | None = Field(default=None, ge=1, le=50)
    min_score: float | None = Field(default=None, ge=0.0, le=1.0)


class CandidateResponse(BaseModel):
    """A catalog card suggested for a written name."""

    card_id: str | None
    name: str
    score: float = Field(ge=0.0, le=1.0)
    cost: int | None = None
    inks: list[str] = Field(default_factory=list)


class NameResolutionResponse(BaseModel):
    """Resolution of one written name."""

    input: str
    normalized: str
    exact: bool
    best: CandidateResponse | None = None
    gap: float | None = None
    candidates: list[CandidateResponse] = Field(default_factory=list)


class ResolveResponse(BaseModel):
    """Response model for name resolution."""

    catalog_available: bool
    catalog_version: str
    results: list[NameResolutionResponse]


def candidate_to_response(candidate: ScoredCandidate) -> CandidateResponse:
    """Convert a scored candidate to its response model."""
    return CandidateResponse(
        card_id=candidate.card.card_id,
        name=candidate.display_name,
        score=round(candidate.score, 4),
        cost=candidate.card.cost,
        inks=list(candidate.card.inks),
    )


def resolution_to_response(resolution: NameResolution) -> NameResolutionResponse:
    """Convert a name resolution to its response model."""
    return NameResolutionResponse(
        input=resolution.input,
        normalized=resolution.normalized_input,
        exact=resolution.exact,
        best=candidate_to_response(resolution.best) if resolution.best else None,
        gap=round(resolution.gap, 4) if resolution.gap is not None else None,
        candidates=[candidate_to_response(c) for c in resolution.candidates],
    )


@router.post("/resolve", response_model=ResolveResponse)
async def resolve_card_names(
    request: ResolveRequest,
    catalog: Annotated[Snapshot[CardIndex], Depends(get_catalog_snapshot)],
) -> ResolveResponse:
    """
    Resolve card names against the catalog.

    Each name gets ranked candidates; `best` is only set when the match is
    exact or confident. An unavailable catalog yields empty results with
    catalog_available=false.
    """
    options = ResolverOptions.from_settings(settings)
    if request.limit is not None:
        options = replace(options, limit=request.limit)
    if request.min_score is not None:
        options = replace(options, min_score=request.min_score)

    # Full catalog scans run off the event loop
    resolutions = await run_in_threadpool(resolve_names, request.names, catalog.value, options)

    return ResolveResponse(
        catalog_available=catalog.available,
        catalog_version=catalog.version,
        results=[resolution_to_response(r) for r in resolutions],
    )
