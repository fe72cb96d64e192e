"""
JSON snapshot adapter.

Reads one JSON document shaped like ``{"vehicles": [{...}], "bookings": [...]}``,
optionally nested under a dotted ``json_path`` (e.g. "data.snapshot").
Nested objects inside a row (``client``, ``profiles``) are kept as dicts.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterator

from fleetops_ingestion.adapters.base import SnapshotProbe


def _get_nested(data: Any, path: str) -> Any:
    """Follow dot-separated path into dict/list. Returns None if key missing."""
    if not path.strip():
        return data
    for key in path.split("."):
        key = key.strip()
        if not key:
            continue
        if isinstance(data, list):
            try:
                data = data[int(key)]
            except (ValueError, IndexError):
                return None
        elif isinstance(data, dict) and key in data:
            data = data[key]
        else:
            return None
    return data


def _normalize_row_keys(item: dict[str, Any]) -> dict[str, Any]:
    """Return a copy with string keys stripped and lowercased."""
    return {str(k).strip().lower(): v for k, v in item.items() if isinstance(k, str)}


class JsonSnapshotAdapter:
    """Read collections out of a single JSON snapshot document."""

    def __init__(self, json_path: str | None = None, encoding: str = "utf-8"):
        self._json_path = json_path
        self._encoding = encoding

    def _load_root(self, source_path: Path) -> dict[str, Any]:
        with source_path.open("r", encoding=self._encoding) as f:
            data = json.load(f)
        root = _get_nested(data, self._json_path) if self._json_path else data
        return root if isinstance(root, dict) else {}

    def read(self, source_path: Path, collection: str) -> Iterator[dict[str, Any]]:
        rows = self._load_root(source_path).get(collection)
        if not isinstance(rows, list):
            return
        for item in rows:
            if isinstance(item, dict):
                yield _normalize_row_keys(item)

    def probe(self, source_path: Path) -> SnapshotProbe:
        root = self._load_root(source_path)
        return SnapshotProbe(
            collections=tuple(
                (str(name), len(rows)) for name, rows in root.items() if isinstance(rows, list)
            )
        )
