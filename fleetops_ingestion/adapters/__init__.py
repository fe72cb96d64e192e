"""Snapshot adapters (file I/O only, no kernel imports)."""

from fleetops_ingestion.adapters.base import COLLECTIONS, SnapshotAdapter, SnapshotProbe
from fleetops_ingestion.adapters.json_adapter import JsonSnapshotAdapter
from fleetops_ingestion.adapters.xlsx_adapter import XlsxSnapshotAdapter

__all__ = [
    "COLLECTIONS",
    "SnapshotAdapter",
    "SnapshotProbe",
    "JsonSnapshotAdapter",
    "XlsxSnapshotAdapter",
]
