"""
Pure KPI aggregation for the global dashboard period.

These functions turn a snapshot, a query and an explicit ``as_of`` into the
KPI bundle. ZERO I/O. ZERO side effects. No clock access: "current month"
and "current year" always come from ``as_of``.

Sums are accumulated in the base currency and converted to the display
currency once, at the end. Nothing is rounded here except fleet
utilization (whole percent).
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from fleetops_engines.conversion import CurrencyConverter
from fleetops_engines.eligibility import (
    has_outstanding_balance,
    is_active_booking,
    is_revenue_eligible,
    outstanding_balance,
    safari_profit,
)
from fleetops_engines.reconciliation import reconcile_expenses
from fleetops_engines.time_window import DashboardPeriod
from fleetops_engines.tracer import traced_engine
from fleetops_kernel.domain.records import (
    Booking,
    BookingStatus,
    CashRequisition,
    FinancialTransaction,
    SafariBooking,
    TransactionType,
    Vehicle,
    VehicleStatus,
)
from fleetops_kernel.domain.values import Money
from fleetops_modules.dashboard.config import DashboardConfig
from fleetops_modules.dashboard.models import (
    BookingCounts,
    CategoryAmount,
    DashboardQuery,
    DashboardSnapshot,
    FleetCounts,
    KPIBundle,
    RevenueBreakdown,
)

SAFARI_PROFIT_CURRENCY = "USD"


@dataclass(frozen=True)
class PeriodSlice:
    """The collections that fall inside the global dashboard period."""

    bookings: tuple[Booking, ...]
    transactions: tuple[FinancialTransaction, ...]
    cash_requisitions: tuple[CashRequisition, ...]
    safari_bookings: tuple[SafariBooking, ...]


def slice_for_period(snapshot: DashboardSnapshot, period: DashboardPeriod) -> PeriodSlice:
    """
    Restrict each collection by its own date field.

    Bookings and safaris by start_date, transactions by transaction_date,
    CRs by created_at. With "all" every record is kept, dated or not.
    """
    return PeriodSlice(
        bookings=tuple(b for b in snapshot.bookings if period.contains(b.start_date)),
        transactions=tuple(
            t for t in snapshot.financial_transactions if period.contains(t.transaction_date)
        ),
        cash_requisitions=tuple(
            cr for cr in snapshot.cash_requisitions if period.contains(cr.created_at)
        ),
        safari_bookings=tuple(
            s for s in snapshot.safari_bookings if period.contains(s.start_date)
        ),
    )


# =========================================================================
# Revenue components (base currency)
# =========================================================================


def booking_revenue(bookings: Iterable[Booking], converter: CurrencyConverter) -> Money:
    """Sum of amount_paid over revenue-eligible bookings."""
    return converter.sum_to_base(
        b.paid for b in bookings if is_revenue_eligible(b) and b.amount_paid > 0
    )


def safari_profit_total(
    safaris: Iterable[SafariBooking], converter: CurrencyConverter
) -> Money:
    """Raw (unclamped) USD-leg profit across trips."""
    return converter.sum_to_base(
        Money(safari_profit(s), SAFARI_PROFIT_CURRENCY) for s in safaris
    )


def transaction_income(
    transactions: Iterable[FinancialTransaction], converter: CurrencyConverter
) -> Money:
    """Income transactions of any status; only the expense side skips cancelled ones."""
    return converter.sum_to_base(
        t.money for t in transactions if t.transaction_type == TransactionType.INCOME.value
    )


def revenue_to_date(
    bookings: Iterable[Booking],
    period: DashboardPeriod,
    as_of: datetime,
    converter: CurrencyConverter,
) -> tuple[Money, Money]:
    """
    Month-to-date and year-to-date booking revenue.

    Only meaningful for the "all" period. When a month is selected the
    bookings are already restricted, and both figures collapse to that
    month's booking revenue. The dashboard does not flag this to the user.
    """
    bookings = tuple(bookings)
    if not period.is_all:
        total = booking_revenue(bookings, converter)
        return total, total

    start_of_month = datetime(as_of.year, as_of.month, 1)
    mtd = booking_revenue(
        (
            b for b in bookings
            if b.start_date is not None and start_of_month <= b.start_date <= as_of
        ),
        converter,
    )
    ytd = booking_revenue(
        (b for b in bookings if b.start_date is not None and b.start_date.year == as_of.year),
        converter,
    )
    return mtd, ytd


# =========================================================================
# Counts
# =========================================================================


def count_booking_statuses(bookings: Iterable[Booking]) -> BookingCounts:
    statuses = [b.status for b in bookings]
    return BookingCounts(
        confirmed=statuses.count(BookingStatus.CONFIRMED.value),
        pending=statuses.count(BookingStatus.PENDING.value),
        completed=statuses.count(BookingStatus.COMPLETED.value),
        cancelled=statuses.count(BookingStatus.CANCELLED.value),
        in_progress=statuses.count(BookingStatus.IN_PROGRESS.value),
        total=len(statuses),
    )


def count_fleet(vehicles: Iterable[Vehicle]) -> FleetCounts:
    """Hired is the literal ``booked`` status; ``rented`` is not counted as hired."""
    statuses = [v.status for v in vehicles]
    return FleetCounts(
        hired=statuses.count(VehicleStatus.BOOKED),
        maintenance=statuses.count(VehicleStatus.MAINTENANCE)
        + statuses.count(VehicleStatus.OUT_OF_SERVICE),
        available=statuses.count(VehicleStatus.AVAILABLE),
        total=len(statuses),
    )


def fleet_utilization(fleet: FleetCounts) -> int:
    """Hired vehicles as a whole percentage of the fleet; 0 for an empty fleet."""
    if fleet.total == 0:
        return 0
    ratio = Decimal(fleet.hired * 100) / Decimal(fleet.total)
    return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def average_booking_value(bookings: Iterable[Booking], converter: CurrencyConverter) -> Money:
    bookings = tuple(bookings)
    if not bookings:
        return converter.zero_base()
    return converter.sum_to_base(b.total for b in bookings) / len(bookings)


def outstanding_total(
    bookings: Iterable[Booking], converter: CurrencyConverter
) -> tuple[Money, int]:
    owing = [b for b in bookings if has_outstanding_balance(b)]
    return converter.sum_to_base(outstanding_balance(b) for b in owing), len(owing)


# =========================================================================
# KPI bundle
# =========================================================================


@traced_engine("dashboard_kpis", "1.0", fingerprint_fields=("query", "as_of"))
def build_kpis(
    snapshot: DashboardSnapshot,
    query: DashboardQuery,
    as_of: datetime,
    converter: CurrencyConverter,
    config: DashboardConfig,
) -> KPIBundle:
    """
    Compute every scalar KPI for the global period.

    Active bookings and the average booking value ignore the
    period and read the full booking set.
    """
    scoped = slice_for_period(snapshot, query.period)
    display = converter.to_display

    bookings_base = booking_revenue(scoped.bookings, converter)
    safari_base = safari_profit_total(scoped.safari_bookings, converter).clamp_min_zero()
    income_base = transaction_income(scoped.transactions, converter)
    revenue_base = bookings_base + safari_base + income_base

    mtd_base, ytd_base = revenue_to_date(scoped.bookings, query.period, as_of, converter)

    expenses = reconcile_expenses(
        scoped.cash_requisitions,
        scoped.transactions,
        converter,
        categorize=config.expense_categories,
    )

    fleet = count_fleet(snapshot.vehicles)
    outstanding_base, outstanding_count = outstanding_total(scoped.bookings, converter)

    return KPIBundle(
        total_revenue=display(revenue_base),
        revenue_mtd=display(mtd_base),
        revenue_ytd=display(ytd_base),
        revenue_breakdown=RevenueBreakdown(
            booking_revenue=display(bookings_base),
            safari_profit=display(safari_base),
            transaction_income=display(income_base),
        ),
        total_expenses=display(expenses.total),
        cr_expenses=display(expenses.cr_total),
        transaction_expenses=display(expenses.transaction_total),
        expenses_by_category=tuple(
            CategoryAmount(category, display(amount))
            for category, amount in expenses.by_category
        ),
        expenses_by_currency=tuple(converter.in_every_currency(expenses.total).values()),
        active_bookings=sum(1 for b in snapshot.bookings if is_active_booking(b)),
        booking_counts=count_booking_statuses(scoped.bookings),
        fleet_utilization=fleet_utilization(fleet),
        fleet=fleet,
        avg_booking_value=display(average_booking_value(snapshot.bookings, converter)),
        outstanding_payments_total=display(outstanding_base),
        outstanding_payments_count=outstanding_count,
    )
