"""
Versioned reference-data snapshots.

A snapshot is handed to request handlers as a complete value. Loaders
replace the snapshot wholesale when the source changes, so readers see
either the previous snapshot or the new one, never a mix.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Snapshot(Generic[T]):
    """
    A point-in-time value loaded from an external source.

    Attributes:
        value: The decoded data (empty when unavailable)
        version: Opaque version string, changes whenever the source changes
        loaded_at: When this snapshot was built
        source: Where the data came from (file path)
        available: False if the source was missing or undecodable
        note: Why the snapshot is unavailable
    """

    value: T
    version: str
    loaded_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    source: str | None = None
    available: bool = True
    note: str | None = None
