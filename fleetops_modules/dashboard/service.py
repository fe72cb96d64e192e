"""
Dashboard Module Service (``fleetops_modules.dashboard.service``).

Responsibility
--------------
Computes the whole dashboard for one snapshot and one query:
``compute_dashboard`` is the pure function, ``DashboardService`` is the
facade that supplies ``as_of`` from an injected clock and logs the run.

Architecture position
---------------------
**Modules layer** -- thin glue.  All financial logic lives in the pure
builders (``kpis.py``, ``charts.py``, ``widgets.py``) and the engines.
Constructor: ``clock`` + ``config``.

Invariants enforced
-------------------
* Referential transparency: the same snapshot, query and ``as_of`` always
  produce an equal ``DashboardResult``.  No state is kept between calls,
  so one service can serve several charts concurrently.
* All-or-nothing: any currency error aborts the whole computation.  There
  is no partial or zeroed result.

Failure modes
-------------
* ``UnknownCurrencyError`` -- a record (or the display currency) uses a
  code the rate table does not hold.  Propagates to the caller.
* ``CurrencyError`` subclasses from Money arithmetic propagate likewise.

Audit relevance
---------------
Structured log events carry collection counts, the display currency and
the duration.  Customer names and per-customer amounts are never logged.
"""

from __future__ import annotations

import time
from datetime import datetime

from fleetops_engines.conversion import CurrencyConverter
from fleetops_kernel.domain.clock import Clock, SystemClock, to_naive_utc
from fleetops_kernel.logging_config import LogContext, get_logger
from fleetops_modules.dashboard.charts import (
    build_capacity_comparison,
    build_expense_categories,
    build_fleet_status,
    build_monthly_series,
    build_vehicle_ranking,
)
from fleetops_modules.dashboard.config import DashboardConfig
from fleetops_modules.dashboard.kpis import build_kpis, slice_for_period
from fleetops_modules.dashboard.models import (
    DashboardQuery,
    DashboardResult,
    DashboardSnapshot,
)
from fleetops_modules.dashboard.widgets import (
    build_outstanding_payments,
    build_recent_bookings,
)

logger = get_logger("modules.dashboard.service")


def compute_dashboard(
    snapshot: DashboardSnapshot,
    query: DashboardQuery,
    as_of: datetime,
    config: DashboardConfig | None = None,
) -> DashboardResult:
    """
    Pure function from (snapshot, query, as_of) to the dashboard result.

    ``as_of`` is the only notion of "now": it anchors MTD/YTD revenue and
    the ``year``/``quarter``/``month`` chart windows.

    An aware ``as_of`` is converted to naive UTC to match record timestamps.
    """
    config = config or DashboardConfig()
    as_of = to_naive_utc(as_of)
    converter = CurrencyConverter(snapshot.rates, query.display_currency)
    today = as_of.date()

    kpis = build_kpis(snapshot, query, as_of, converter, config)
    scoped = slice_for_period(snapshot, query.period)

    return DashboardResult(
        as_of=as_of,
        display_currency=converter.display_currency,
        kpis=kpis,
        monthly_revenue_expenses=build_monthly_series(
            snapshot,
            query.revenue_expense_window,
            today,
            converter,
            config.expense_categories,
        ),
        expense_categories=build_expense_categories(
            snapshot,
            query.expense_category_window,
            today,
            converter,
            config.expense_categories,
        ),
        top_vehicles=build_vehicle_ranking(
            snapshot,
            query.vehicle_ranking_window,
            today,
            converter,
            config.vehicle_capacity,
            query.capacity_filter,
        ),
        fleet_status=build_fleet_status(snapshot.vehicles),
        capacity_comparison=build_capacity_comparison(
            snapshot,
            query.capacity_comparison_window,
            today,
            converter,
            config.vehicle_capacity,
        ),
        outstanding_payments=build_outstanding_payments(scoped.bookings, converter),
        recent_bookings=build_recent_bookings(
            snapshot.bookings, converter, config.recent_bookings_limit
        ),
    )


class DashboardService:
    """
    Dashboard computation service.

    Contract
    --------
    * ``compute()`` returns a fresh, immutable ``DashboardResult``.
    * The clock is read exactly once per call.

    Guarantees
    ----------
    * No financial logic lives in this class.
    * Clock is injectable for deterministic testing.

    Non-goals
    ---------
    * Does NOT fetch data, subscribe to change feeds or debounce; the
      caller hands in a complete snapshot.
    * Does NOT cache results.  Callers may memoize on (snapshot, query).
    """

    def __init__(
        self,
        clock: Clock | None = None,
        config: DashboardConfig | None = None,
    ):
        self._clock = clock or SystemClock()
        self._config = config or DashboardConfig.with_defaults()

        logger.info(
            "dashboard_service_initialized",
            extra={
                "base_currency": self._config.base_currency,
                "recent_bookings_limit": self._config.recent_bookings_limit,
            },
        )

    @property
    def config(self) -> DashboardConfig:
        return self._config

    def compute(
        self,
        snapshot: DashboardSnapshot,
        query: DashboardQuery | None = None,
    ) -> DashboardResult:
        query = query or DashboardQuery()
        as_of = self._clock.now()

        with LogContext.bind(snapshot_id=snapshot.snapshot_id):
            logger.info(
                "dashboard_computation_started",
                extra={
                    "display_currency": query.display_currency.code,
                    "period_month": query.period.month,
                    "period_year": query.period.year,
                    **snapshot.counts(),
                },
            )
            t0 = time.monotonic()
            try:
                result = compute_dashboard(snapshot, query, as_of, self._config)
            except Exception as e:
                logger.error(
                    "dashboard_computation_failed",
                    extra={"error_code": getattr(e, "code", type(e).__name__)},
                )
                raise
            logger.info(
                "dashboard_computation_completed",
                extra={
                    "duration_ms": round((time.monotonic() - t0) * 1000, 2),
                    "top_vehicle_count": len(result.top_vehicles),
                    "outstanding_count": result.kpis.outstanding_payments_count,
                },
            )
        return result
