"""
fleetops_ingestion -- loading exported collections into typed snapshots.

Adapters read JSON or XLSX exports into raw row dicts; ``load_snapshot``
parses them into kernel records, skipping malformed rows.
"""

from fleetops_ingestion.snapshot import (
    SkippedRow,
    SnapshotLoadResult,
    load_snapshot,
    parse_rows,
)

__all__ = [
    "SkippedRow",
    "SnapshotLoadResult",
    "load_snapshot",
    "parse_rows",
]
