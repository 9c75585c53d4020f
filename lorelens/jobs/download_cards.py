"""
Download the card catalog.

Refreshes the catalog file used for name resolution and deck analysis.
A running API picks up the new file on its next request.

Usage:
    python -m lorelens.jobs.download_cards [--output PATH] [--url URL]
"""

import argparse
import asyncio
import logging
from pathlib import Path

from lorelens.config import settings
from lorelens.services.card_database import download_catalog, load_catalog

logger = logging.getLogger(__name__)


async def run_download(output_path: Path | None = None, url: str | None = None) -> int:
    """
    Download the card catalog and report how many cards it holds.

    Returns:
        Number of catalog cards in the downloaded file
    """
    source = url or settings.catalog_url
    logger.info("Downloading card catalog from %s...", source)

    try:
        path = await download_catalog(output_path, source)
    except Exception as e:
        logger.error("Failed to download card catalog: %s", e)
        raise

    count = len(load_catalog(path))
    logger.info("Downloaded %d cards to %s", count, path)
    return count


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Download the card catalog")
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help=f"Where to write the catalog (default: {settings.catalog_path})",
    )
    parser.add_argument("--url", default=None, help="Catalog URL (default: settings.catalog_url)")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    asyncio.run(run_download(args.output, args.url))


if __name__ == "__main__":
    main()
