"""
File-backed snapshot loader.

Reference data (card catalog, meta corpus) lives in JSON files that are
refreshed out of band. FileSnapshotLoader re-reads a file only when it
changed on disk and swaps the decoded value in one step.

INVARIANTS:
1. current() never raises; bad or missing files give an unavailable snapshot
2. A new file version replaces the whole snapshot, never part of it
3. An unchanged file (same mtime and size) is not decoded again
"""

import hashlib
import json
import logging
from collections.abc import Callable
from pathlib import Path
from threading import Lock
from typing import Any, Generic, TypeVar

from pydantic import ValidationError

from lorelens.models.snapshot import Snapshot

logger = logging.getLogger(__name__)

T = TypeVar("T")

UNAVAILABLE_VERSION = "unavailable"


class FileSnapshotLoader(Generic[T]):
    """
    Loads a JSON file into a Snapshot, reloading when the file changes.

    Args:
        path: JSON file to watch
        decode: Turns parsed JSON into the snapshot value
        empty: Builds the value handed out when the file is unusable
        name: Label used in log messages
    """

    def __init__(
        self,
        path: Path,
        decode: Callable[[Any], T],
        empty: Callable[[str], T],
        name: str = "snapshot",
    ):
        self.path = Path(path)
        self.decode = decode
        self.empty = empty
        self.name = name
        self._lock = Lock()
        self._stamp: tuple[int, int] | None = None
        self._snapshot: Snapshot[T] | None = None

    def _unavailable(self, note: str) -> Snapshot[T]:
        return Snapshot(
            value=self.empty(note),
            version=UNAVAILABLE_VERSION,
            source=str(self.path),
            available=False,
            note=note,
        )

    def current(self) -> Snapshot[T]:
        """Return the snapshot for the file as it is on disk now."""
        try:
            stat = self.path.stat()
        except OSError as e:
            with self._lock:
                if self._stamp is not None or self._snapshot is None:
                    logger.warning("%s unavailable: %s", self.name, e)
                    self._stamp = None
                    self._snapshot = self._unavailable(f"{self.name} not found at {self.path}")
                return self._snapshot

        stamp = (stat.st_mtime_ns, stat.st_size)

        with self._lock:
            if self._snapshot is not None and self._stamp == stamp:
                return self._snapshot

            self._snapshot = self._load(stamp)
            self._stamp = stamp
            return self._snapshot

    def _load(self, stamp: tuple[int, int]) -> Snapshot[T]:
        try:
            raw_bytes = self.path.read_bytes()
            value = self.decode(json.loads(raw_bytes))
        except (OSError, json.JSONDecodeError, ValidationError, ValueError) as e:
            logger.warning("Failed to load %s from %s: %s", self.name, self.path, e)
            return self._unavailable(f"{self.name} could not be decoded: {e}")

        version = hashlib.sha1(raw_bytes).hexdigest()[:12]
        logger.info("Loaded %s from %s (version %s)", self.name, self.path, version)
        return Snapshot(value=value, version=version, source=str(self.path))

    def invalidate(self) -> None:
        """Force a reload on the next current() call."""
        with self._lock:
            self._stamp = None
            self._snapshot = None
