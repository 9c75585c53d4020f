"""
Health check endpoints.

Provides liveness and readiness probes with reference data checks.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel

from lorelens.models.deck import MetaCorpus
from lorelens.models.snapshot import Snapshot
from lorelens.services.card_database import get_catalog_snapshot
from lorelens.services.card_index import CardIndex
from lorelens.services.meta_corpus import get_corpus_snapshot

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    catalog: str | None = None
    corpus: str | None = None
    catalog_cards: int | None = None
    corpus_decks: int | None = None


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """
    Liveness probe.

    Returns healthy if the service is running.
    Does not check dependencies.
    """
    return HealthResponse(status="healthy")


@router.get(
    "/ready",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse}},
)
async def ready(
    response: Response,
    catalog: Annotated[Snapshot[CardIndex], Depends(get_catalog_snapshot)],
    corpus: Annotated[Snapshot[MetaCorpus], Depends(get_corpus_snapshot)],
) -> HealthResponse:
    """
    Readiness probe.

    Returns 503 if the card catalog is unavailable. A missing corpus only
    disables meta comparison, so it is reported but does not fail the probe.
    """
    result = HealthResponse(
        status="ready",
        catalog="loaded" if catalog.available else "unavailable",
        corpus="loaded" if corpus.available else "unavailable",
        catalog_cards=len(catalog.value),
        corpus_decks=len(corpus.value),
    )
    if not catalog.available:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        result.status = "not ready"
    return result
