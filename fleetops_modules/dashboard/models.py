"""
Dashboard Domain Models (``fleetops_modules.dashboard.models``).

Responsibility
--------------
Frozen dataclass value objects for one dashboard computation: the query
(what the user selected), the snapshot (what the data layer fetched) and
the result tree (KPI bundle, chart datasets and widget projections).

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O.  Built by the
pure functions in ``kpis.py``, ``charts.py`` and ``widgets.py`` and
returned by ``DashboardService``.

Invariants enforced
-------------------
* All models are ``frozen=True`` (immutable after construction).
* Every monetary field is ``Money`` in the display currency, unrounded.
  Presentation rounds via ``Money.round()``.
* The result is replaced wholesale on every computation; nothing in it is
  updated in place.

Failure modes
-------------
* ``InvalidQueryError`` for an unknown capacity filter or a capacity
  comparison window other than ``all``/``specific``.
* ``InvalidCurrencyError`` for a malformed display currency code.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum

from fleetops_engines.time_window import ChartWindow, DashboardPeriod, TimeWindowMode
from fleetops_kernel.domain.records import (
    Booking,
    CashRequisition,
    FinancialTransaction,
    Repair,
    SafariBooking,
    Vehicle,
)
from fleetops_kernel.domain.values import Currency, ExchangeRateTable, Money
from fleetops_kernel.exceptions import InvalidQueryError


# =========================================================================
# Enums
# =========================================================================


class CapacityFilter(str, Enum):
    """Capacity restriction for the vehicle ranking."""

    ALL = "all"
    SEVEN_SEATER = "7seater"
    FIVE_SEATER = "5seater"

    @property
    def capacity_text(self) -> str | None:
        """Free-text capacity of a vehicle in the selected class."""
        return _CAPACITY_TEXT.get(self)

    @classmethod
    def parse(cls, value: CapacityFilter | str) -> CapacityFilter:
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as e:
            raise InvalidQueryError(
                "capacity filter", value, tuple(f.value for f in cls)
            ) from e


_CAPACITY_TEXT = {
    CapacityFilter.SEVEN_SEATER: "7 seater",
    CapacityFilter.FIVE_SEATER: "5 seater",
}


class FleetStatusBucket(str, Enum):
    AVAILABLE = "Available"
    HIRED = "Hired"
    MAINTENANCE = "Maintenance"


# =========================================================================
# Inputs
# =========================================================================


@dataclass(frozen=True)
class DashboardQuery:
    """
    Everything the user selected, as one immutable value.

    The four chart windows are independent of each other and of
    ``period``: the KPIs can show "this month" while a chart shows "this
    year".
    """

    display_currency: Currency = field(default_factory=lambda: Currency("USD"))
    period: DashboardPeriod = field(default_factory=DashboardPeriod)
    revenue_expense_window: ChartWindow = field(
        default_factory=lambda: ChartWindow(TimeWindowMode.YEAR)
    )
    expense_category_window: ChartWindow = field(
        default_factory=lambda: ChartWindow(TimeWindowMode.YEAR)
    )
    vehicle_ranking_window: ChartWindow = field(
        default_factory=lambda: ChartWindow(TimeWindowMode.MONTH)
    )
    capacity_comparison_window: ChartWindow = field(
        default_factory=lambda: ChartWindow(TimeWindowMode.ALL)
    )
    capacity_filter: CapacityFilter = CapacityFilter.ALL

    def __post_init__(self) -> None:
        if isinstance(self.display_currency, str):
            object.__setattr__(self, "display_currency", Currency(self.display_currency))
        object.__setattr__(self, "capacity_filter", CapacityFilter.parse(self.capacity_filter))
        mode = self.capacity_comparison_window.mode
        if mode not in (TimeWindowMode.ALL, TimeWindowMode.SPECIFIC):
            raise InvalidQueryError(
                "capacity comparison window",
                mode.value,
                (TimeWindowMode.ALL.value, TimeWindowMode.SPECIFIC.value),
            )


@dataclass(frozen=True)
class DashboardSnapshot:
    """
    One consistent set of raw collections plus the rate table.

    ``repairs`` is accepted so the snapshot mirrors what the data layer
    fetches; no calculation reads it.
    """

    rates: ExchangeRateTable
    vehicles: tuple[Vehicle, ...] = ()
    bookings: tuple[Booking, ...] = ()
    repairs: tuple[Repair, ...] = ()
    financial_transactions: tuple[FinancialTransaction, ...] = ()
    cash_requisitions: tuple[CashRequisition, ...] = ()
    safari_bookings: tuple[SafariBooking, ...] = ()
    snapshot_id: str | None = None

    def counts(self) -> dict[str, int]:
        return {
            "vehicles": len(self.vehicles),
            "bookings": len(self.bookings),
            "repairs": len(self.repairs),
            "financial_transactions": len(self.financial_transactions),
            "cash_requisitions": len(self.cash_requisitions),
            "safari_bookings": len(self.safari_bookings),
        }


# =========================================================================
# KPI bundle
# =========================================================================


@dataclass(frozen=True)
class BookingCounts:
    """Bookings by status within the global period."""

    confirmed: int
    pending: int
    completed: int
    cancelled: int
    in_progress: int
    total: int


@dataclass(frozen=True)
class FleetCounts:
    hired: int
    maintenance: int
    available: int
    total: int


@dataclass(frozen=True)
class RevenueBreakdown:
    booking_revenue: Money
    safari_profit: Money  # clamped at zero
    transaction_income: Money


@dataclass(frozen=True)
class CategoryAmount:
    category: str
    amount: Money


@dataclass(frozen=True)
class KPIBundle:
    """
    Scalar KPIs for the global period.

    ``revenue_mtd`` and ``revenue_ytd`` are only month/year-to-date when
    the period is "all"; for a selected month they equal the period's
    booking revenue.
    """

    total_revenue: Money
    revenue_mtd: Money
    revenue_ytd: Money
    revenue_breakdown: RevenueBreakdown
    total_expenses: Money
    cr_expenses: Money
    transaction_expenses: Money
    expenses_by_category: tuple[CategoryAmount, ...]
    expenses_by_currency: tuple[Money, ...]
    active_bookings: int
    booking_counts: BookingCounts
    fleet_utilization: int
    fleet: FleetCounts
    avg_booking_value: Money
    outstanding_payments_total: Money
    outstanding_payments_count: int


# =========================================================================
# Charts
# =========================================================================


@dataclass(frozen=True)
class MonthlyPoint:
    year: int
    month: int
    label: str
    revenue: Money
    expenses: Money


@dataclass(frozen=True)
class VehicleRevenue:
    vehicle_id: str
    name: str
    full_name: str
    revenue: Money
    trips: int
    capacity: str


@dataclass(frozen=True)
class FleetStatusCount:
    status: FleetStatusBucket
    count: int


@dataclass(frozen=True)
class CapacityVehicle:
    vehicle_id: str
    name: str
    revenue: Money
    trips: int


@dataclass(frozen=True)
class CapacityClassStats:
    """
    Per-class totals for the capacity comparison.

    ``fleet_count`` counts every vehicle of the class in the fleet. The
    averages divide by the vehicles that earned revenue in the window
    (``len(vehicles)``), not by the fleet count.
    """

    capacity: str
    fleet_count: int
    total_revenue: Money
    total_trips: int
    avg_revenue_per_vehicle: Money
    avg_trips_per_vehicle: Decimal
    vehicles: tuple[CapacityVehicle, ...]


@dataclass(frozen=True)
class CapacityComparison:
    classes: tuple[CapacityClassStats, ...]

    def for_class(self, capacity: str) -> CapacityClassStats | None:
        for stats in self.classes:
            if stats.capacity == capacity:
                return stats
        return None

    @property
    def total_fleet_count(self) -> int:
        return sum(stats.fleet_count for stats in self.classes)


# =========================================================================
# Widgets
# =========================================================================


@dataclass(frozen=True)
class OutstandingPayment:
    booking_id: str
    booking_number: str | None
    client_name: str
    balance_due: Money
    total_amount: Money
    amount_paid: Money
    start_date: datetime | None
    end_date: datetime | None
    booking_currency: Currency


@dataclass(frozen=True)
class RecentBooking:
    booking_id: str
    booking_number: str | None
    start_date: datetime | None
    end_date: datetime | None
    status: str
    amount: Money
    client_name: str
    assigned_vehicle_id: str | None
    created_at: datetime


# =========================================================================
# Result
# =========================================================================


@dataclass(frozen=True)
class DashboardResult:
    """The single immutable output of one dashboard computation."""

    as_of: datetime
    display_currency: Currency
    kpis: KPIBundle
    monthly_revenue_expenses: tuple[MonthlyPoint, ...]
    expense_categories: tuple[CategoryAmount, ...]
    top_vehicles: tuple[VehicleRevenue, ...]
    fleet_status: tuple[FleetStatusCount, ...]
    capacity_comparison: CapacityComparison
    outstanding_payments: tuple[OutstandingPayment, ...]
    recent_bookings: tuple[RecentBooking, ...]
