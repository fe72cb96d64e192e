"""
Snapshot adapter protocol and probe DTO.

Contract:
    SnapshotAdapter.read() yields one dict per raw row of one collection
    (streaming where the format allows).
    SnapshotAdapter.probe() returns a quick summary: row count per collection.

Architecture: fleetops_ingestion/adapters. File I/O only, no kernel imports.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, Protocol, runtime_checkable

COLLECTIONS: tuple[str, ...] = (
    "vehicles",
    "bookings",
    "repairs",
    "financial_transactions",
    "cash_requisitions",
    "safari_bookings",
    "exchange_rates",
)


@runtime_checkable
class SnapshotAdapter(Protocol):
    """Protocol for reading exported collections into raw row dicts."""

    def read(self, source_path: Path, collection: str) -> Iterator[dict[str, Any]]:
        """Yield one dict per row of ``collection``. A missing collection yields nothing."""
        ...

    def probe(self, source_path: Path) -> "SnapshotProbe":
        """Quick probe: which collections are present and how many rows each has."""
        ...


@dataclass(frozen=True)
class SnapshotProbe:
    """Result of probing an export: (collection, row_count) pairs in file order."""

    collections: tuple[tuple[str, int], ...]

    def row_count(self, collection: str) -> int:
        for name, count in self.collections:
            if name == collection:
                return count
        return 0
