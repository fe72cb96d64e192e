"""
Snapshot loading: raw exported rows -> typed DashboardSnapshot.

Responsibility:
    Reads every collection through a SnapshotAdapter, parses rows into
    kernel records and builds the exchange-rate table from the raw rate
    rows plus configured fallbacks.

Architecture position:
    Ingestion -- the only layer that touches files.  Depends on kernel
    records and the dashboard snapshot type.

Invariants enforced:
    - A malformed row is skipped, never fatal: it is logged at WARNING with
      collection, record id and field name (no field values) and reported
      in ``SnapshotLoadResult.skipped``.
    - Soft-deleted cash requisitions are dropped here, as the data-fetch
      layer does.  Cancelled transactions are kept; the engines ignore them.

Failure modes:
    - FileNotFoundError / json.JSONDecodeError / openpyxl errors propagate.
    - ValueError for a file suffix with no adapter.
    - UnknownCurrencyError from a row whose currency tag is not a currency
      code aborts the load.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Any, TypeVar

from fleetops_ingestion.adapters.base import SnapshotAdapter
from fleetops_ingestion.adapters.json_adapter import JsonSnapshotAdapter
from fleetops_ingestion.adapters.xlsx_adapter import XlsxSnapshotAdapter
from fleetops_kernel.domain.records import (
    Booking,
    CashRequisition,
    FinancialTransaction,
    Repair,
    SafariBooking,
    Vehicle,
)
from fleetops_kernel.domain.values import ExchangeRateTable
from fleetops_kernel.exceptions import MalformedRecordError
from fleetops_kernel.logging_config import get_logger
from fleetops_modules.dashboard.models import DashboardSnapshot

logger = get_logger("ingestion.snapshot")

R = TypeVar("R")

_ADAPTERS_BY_SUFFIX: dict[str, Callable[[], SnapshotAdapter]] = {
    ".json": JsonSnapshotAdapter,
    ".xlsx": XlsxSnapshotAdapter,
}


@dataclass(frozen=True)
class SkippedRow:
    collection: str
    record_id: str | None
    field: str
    reason: str


@dataclass(frozen=True)
class SnapshotLoadResult:
    snapshot: DashboardSnapshot
    skipped: tuple[SkippedRow, ...]


def parse_rows(
    collection: str,
    rows: Iterable[Mapping[str, Any]],
    parser: Callable[[Mapping[str, Any]], R],
    skipped: list[SkippedRow] | None = None,
) -> tuple[R, ...]:
    """Parse rows with ``parser``, skipping (and logging) malformed ones."""
    records: list[R] = []
    for row in rows:
        try:
            records.append(parser(row))
        except MalformedRecordError as e:
            logger.warning(
                "record_skipped",
                extra={
                    "collection": collection,
                    "record_id": e.record_id,
                    "field": e.field,
                    "reason": e.reason,
                },
            )
            if skipped is not None:
                skipped.append(SkippedRow(collection, e.record_id, e.field, e.reason))
    return tuple(records)


def adapter_for(source_path: Path) -> SnapshotAdapter:
    factory = _ADAPTERS_BY_SUFFIX.get(source_path.suffix.lower())
    if factory is None:
        raise ValueError(
            f"No snapshot adapter for '{source_path.suffix}' "
            f"(supported: {', '.join(sorted(_ADAPTERS_BY_SUFFIX))})"
        )
    return factory()


def load_snapshot(
    source_path: Path | str,
    fallback_rates: Mapping[str, Decimal],
    base_currency: str = "USD",
    adapter: SnapshotAdapter | None = None,
    snapshot_id: str | None = None,
) -> SnapshotLoadResult:
    """
    Load every collection of an export into a DashboardSnapshot.

    Args:
        source_path: JSON or XLSX export.
        fallback_rates: Rates used for currencies with no exchange_rates row.
        base_currency: Currency the rates are quoted against.
        adapter: Override the adapter chosen from the file suffix.
        snapshot_id: Identifier carried into logs; defaults to the file name.
    """
    path = Path(source_path)
    adapter = adapter or adapter_for(path)
    skipped: list[SkippedRow] = []

    def collect(collection: str, parser: Callable[[Mapping[str, Any]], R]) -> tuple[R, ...]:
        return parse_rows(collection, adapter.read(path, collection), parser, skipped)

    cash_requisitions = collect("cash_requisitions", CashRequisition.from_row)
    snapshot = DashboardSnapshot(
        rates=ExchangeRateTable.from_rate_rows(
            adapter.read(path, "exchange_rates"), fallback_rates, base=base_currency
        ),
        vehicles=collect("vehicles", Vehicle.from_row),
        bookings=collect("bookings", Booking.from_row),
        repairs=collect("repairs", Repair.from_row),
        financial_transactions=collect("financial_transactions", FinancialTransaction.from_row),
        cash_requisitions=tuple(cr for cr in cash_requisitions if not cr.soft_deleted),
        safari_bookings=collect("safari_bookings", SafariBooking.from_row),
        snapshot_id=snapshot_id or path.name,
    )

    logger.info(
        "snapshot_loaded",
        extra={
            "snapshot_id": snapshot.snapshot_id,
            "skipped_count": len(skipped),
            "rate_currencies": list(snapshot.rates.codes),
            **snapshot.counts(),
        },
    )
    return SnapshotLoadResult(snapshot=snapshot, skipped=tuple(skipped))
