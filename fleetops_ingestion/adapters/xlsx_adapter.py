"""
XLSX snapshot adapter for spreadsheet exports of the collections.

One sheet per collection, named after it (``bookings``, ``vehicles``, ...).
The first non-empty row of a sheet is the header.  Dotted headers such as
``client.company_name`` become nested dicts so the row has the same shape
as the remote store returns.  Dates stay ``datetime`` objects as read by
openpyxl; blank cells become None.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Iterator

import openpyxl

from fleetops_ingestion.adapters.base import SnapshotProbe


def _normalize_header_cell(value: Any) -> str:
    """Normalize a header cell to a lower-case key."""
    if value is None:
        return ""
    s = re.sub(r"\s+", " ", str(value)).strip()
    return s.lower().replace(" ", "_")


def _cell_value(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, float) and value == int(value):
        return int(value)
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def _unflatten(row: dict[str, Any]) -> dict[str, Any]:
    """``{"client.company_name": x}`` -> ``{"client": {"company_name": x}}``."""
    result: dict[str, Any] = {}
    for key, value in row.items():
        if "." not in key:
            result[key] = value
            continue
        parent, child = key.split(".", 1)
        nested = result.setdefault(parent, {})
        if isinstance(nested, dict):
            nested[child] = value
    return result


def _headers(header_row: tuple[Any, ...]) -> list[str]:
    headers: list[str] = []
    for c, value in enumerate(header_row):
        key = _normalize_header_cell(value) or f"column_{c + 1}"
        base = key
        cnt = 0
        while key in headers:
            cnt += 1
            key = f"{base}_{cnt}"
        headers.append(key)
    return headers


class XlsxSnapshotAdapter:
    """
    Read .xlsx exports as one dict per row, one sheet per collection.

    A workbook without a sheet for a collection simply yields no rows for it.
    """

    def read(self, source_path: Path, collection: str) -> Iterator[dict[str, Any]]:
        wb = openpyxl.load_workbook(source_path, read_only=True, data_only=True)
        try:
            if collection not in wb.sheetnames:
                return
            rows = wb[collection].iter_rows(values_only=True)
            headers: list[str] | None = None
            for raw in rows:
                values = [_cell_value(v) for v in raw]
                if not any(v is not None for v in values):
                    continue
                if headers is None:
                    headers = _headers(tuple(raw))
                    continue
                yield _unflatten(dict(zip(headers, values)))
        finally:
            wb.close()

    def probe(self, source_path: Path) -> SnapshotProbe:
        wb = openpyxl.load_workbook(source_path, read_only=True, data_only=True)
        try:
            counts = []
            for name in wb.sheetnames:
                non_empty = sum(
                    1
                    for raw in wb[name].iter_rows(values_only=True)
                    if any(_cell_value(v) is not None for v in raw)
                )
                counts.append((name, max(non_empty - 1, 0)))
            return SnapshotProbe(collections=tuple(counts))
        finally:
            wb.close()
