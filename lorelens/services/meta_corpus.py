"""
Meta corpus service.

Loads historical tournament decklists into a MetaCorpus snapshot.
"""

from functools import lru_cache
from pathlib import Path

from lorelens.config import settings
from lorelens.models.deck import MetaCorpus
from lorelens.models.snapshot import Snapshot
from lorelens.parsers.corpus import decode_corpus
from lorelens.services.snapshot import FileSnapshotLoader


def corpus_loader(path: Path) -> FileSnapshotLoader[MetaCorpus]:
    """Snapshot loader that re-decodes the corpus whenever its file changes."""
    return FileSnapshotLoader(
        path,
        decode=decode_corpus,
        empty=lambda _note: MetaCorpus(),
        name="meta corpus",
    )


@lru_cache(maxsize=1)
def get_corpus_loader() -> FileSnapshotLoader[MetaCorpus]:
    """Get the process-wide corpus loader."""
    return corpus_loader(settings.corpus_path)


def get_corpus_snapshot() -> Snapshot[MetaCorpus]:
    """Current corpus snapshot (FastAPI dependency)."""
    return get_corpus_loader().current()
