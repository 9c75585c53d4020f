"""
Card database service.

Loads the card catalog (LorcanaJSON layout or compatible) into a CardIndex
snapshot, and downloads fresh catalog files.
"""

import json
from functools import lru_cache
from pathlib import Path

import httpx

from lorelens.config import settings
from lorelens.models.card import CatalogCard
from lorelens.models.snapshot import Snapshot
from lorelens.parsers.catalog import decode_catalog
from lorelens.services.card_index import CardIndex, build_index
from lorelens.services.snapshot import FileSnapshotLoader


async def download_catalog(output_path: Path | None = None, url: str | None = None) -> Path:
    """
    Download the latest card catalog.

    The payload is decoded before it is written, so a broken download
    never replaces a working catalog file.

    Args:
        output_path: Where to save the file. Defaults to settings.catalog_path
        url: Catalog URL. Defaults to settings.catalog_url

    Returns:
        Path to downloaded file.

    Raises:
        ValueError: If the payload is not a catalog or has no cards
        httpx.HTTPError: If download fails
    """
    if output_path is None:
        output_path = settings.catalog_path
    if url is None:
        url = settings.catalog_url

    async with httpx.AsyncClient(timeout=60.0, follow_redirects=True) as client:
        response = await client.get(url)
        response.raise_for_status()
        payload = response.json()

    cards = decode_catalog(payload)
    if not cards:
        raise ValueError(f"Catalog at {url} contains no cards")

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False)

    return output_path


def load_catalog(path: Path | None = None) -> list[CatalogCard]:
    """
    Load catalog cards from file.

    Args:
        path: Path to JSON file. Defaults to settings.catalog_path

    Returns:
        Catalog cards in file order.

    Raises:
        FileNotFoundError: If catalog file doesn't exist
        ValueError: If the file is not a recognized catalog layout
    """
    if path is None:
        path = settings.catalog_path

    if not path.exists():
        raise FileNotFoundError(
            f"Card catalog not found at {path}. "
            "Run `python -m lorelens.jobs.download_cards` first."
        )

    with open(path, encoding="utf-8") as f:
        return decode_catalog(json.load(f))


def catalog_loader(path: Path, prefer_newer_sets: bool = False) -> FileSnapshotLoader[CardIndex]:
    """Snapshot loader that rebuilds the CardIndex whenever the catalog file changes."""
    return FileSnapshotLoader(
        path,
        decode=lambda raw: build_index(decode_catalog(raw), prefer_newer_sets=prefer_newer_sets),
        empty=CardIndex.unavailable,
        name="card catalog",
    )


@lru_cache(maxsize=1)
def get_catalog_loader() -> FileSnapshotLoader[CardIndex]:
    """
    Get the process-wide catalog loader.

    Cached after first call; the loader itself picks up file changes.
    """
    return catalog_loader(settings.catalog_path, settings.prefer_newer_sets)


def get_catalog_snapshot() -> Snapshot[CardIndex]:
    """Current catalog snapshot (FastAPI dependency)."""
    return get_catalog_loader().current()
