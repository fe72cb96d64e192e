"""
Pure time-series and ranking builders.

Each chart owns an independent ChartWindow and reads the FULL snapshot,
never the slice selected by the global dashboard period. ZERO I/O. ZERO
side effects. ``today`` is passed in.

Outputs are display-currency Money, unrounded. Orderings are total: ties
on amount are broken by name or id so that equal inputs always give
identical outputs.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal

from fleetops_engines.classification import RuleTable
from fleetops_engines.conversion import CurrencyConverter
from fleetops_engines.eligibility import is_revenue_eligible, is_valid_expense_cr
from fleetops_engines.reconciliation import (
    cr_base_amount,
    reconcile_expenses,
    valid_cr_numbers,
)
from fleetops_engines.time_window import ChartWindow, month_abbreviation, month_bounds
from fleetops_engines.tracer import traced_engine
from fleetops_kernel.domain.records import Booking, Vehicle, VehicleStatus
from fleetops_kernel.domain.values import Money
from fleetops_kernel.exceptions import InvalidQueryError
from fleetops_modules.dashboard.kpis import (
    booking_revenue,
    safari_profit_total,
    transaction_income,
)
from fleetops_modules.dashboard.models import (
    CapacityClassStats,
    CapacityComparison,
    CapacityFilter,
    CapacityVehicle,
    CategoryAmount,
    DashboardSnapshot,
    FleetStatusBucket,
    FleetStatusCount,
    MonthlyPoint,
    VehicleRevenue,
)

UNKNOWN_VEHICLE_NAME = "Unknown"
_ONE_DECIMAL = Decimal("0.1")

def _capacity_class_for(capacity_filter: CapacityFilter, capacity_rules: RuleTable) -> str | None:
    """The rule-table class a capacity filter selects; None for no filter.

    Resolved through the rule table so renamed classes keep working.
    """
    if capacity_filter.capacity_text is None:
        return None
    wanted = capacity_rules(capacity_filter.capacity_text)
    if wanted == capacity_rules.default:
        raise InvalidQueryError(
            "capacity filter",
            capacity_filter.value,
            tuple(v for v in capacity_rules.values if v != capacity_rules.default),
        )
    return wanted


def _in_bounds(timestamp: datetime | None, start: datetime, end: datetime) -> bool:
    return timestamp is not None and start <= timestamp < end


def _short_vehicle_name(vehicle_id: str, vehicle: Vehicle | None) -> str:
    return vehicle.license_plate if vehicle is not None else vehicle_id[:8]


# =========================================================================
# Monthly revenue / expense series
# =========================================================================


@traced_engine("monthly_series", "1.0", fingerprint_fields=("window", "today"))
def build_monthly_series(
    snapshot: DashboardSnapshot,
    window: ChartWindow,
    today: date,
    converter: CurrencyConverter,
    categorize: RuleTable,
) -> tuple[MonthlyPoint, ...]:
    """
    One point per month of the resolved window.

    Revenue per month is eligible booking revenue plus clamped safari
    profit plus transaction income. Expenses per month are reconciled CRs
    (bucketed by created_at) plus unlinked expense transactions; the CR
    numbers used for the exact reference match come from every valid CR,
    not just the month's.
    """
    year = window.resolve_year(today)
    known_numbers = valid_cr_numbers(snapshot.cash_requisitions)
    points: list[MonthlyPoint] = []

    for month in window.resolve_months(today):
        start, end = month_bounds(year, month)
        bookings = [b for b in snapshot.bookings if _in_bounds(b.start_date, start, end)]
        safaris = [s for s in snapshot.safari_bookings if _in_bounds(s.start_date, start, end)]
        transactions = [
            t for t in snapshot.financial_transactions
            if _in_bounds(t.transaction_date, start, end)
        ]
        crs = [
            cr for cr in snapshot.cash_requisitions
            if _in_bounds(cr.created_at, start, end)
        ]

        revenue = (
            booking_revenue(bookings, converter)
            + safari_profit_total(safaris, converter).clamp_min_zero()
            + transaction_income(transactions, converter)
        )
        expenses = reconcile_expenses(
            crs,
            transactions,
            converter,
            categorize=categorize,
            known_cr_numbers=known_numbers,
        ).total

        points.append(
            MonthlyPoint(
                year=year,
                month=month,
                label=month_abbreviation(month),
                revenue=converter.to_display(revenue),
                expenses=converter.to_display(expenses),
            )
        )
    return tuple(points)


# =========================================================================
# Expense categories
# =========================================================================


def build_expense_categories(
    snapshot: DashboardSnapshot,
    window: ChartWindow,
    today: date,
    converter: CurrencyConverter,
    categorize: RuleTable,
) -> tuple[CategoryAmount, ...]:
    """
    Valid-CR spend per canonical category, bucketed by CR created_at.

    Only cash requisitions feed this chart. Zero buckets are dropped and
    the rest sorted by amount, largest first.
    """
    totals: dict[str, Money] = {}
    for cr in snapshot.cash_requisitions:
        if not is_valid_expense_cr(cr) or not window.matches(cr.created_at, today):
            continue
        category = categorize(cr.expense_category)
        amount = cr_base_amount(cr, converter)
        totals[category] = totals.get(category, converter.zero_base()) + amount

    rows = [
        CategoryAmount(category, converter.to_display(amount))
        for category, amount in totals.items()
        if amount.is_positive
    ]
    return tuple(sorted(rows, key=lambda row: (-row.amount.amount, row.category)))


# =========================================================================
# Vehicle ranking
# =========================================================================


def _revenue_by_vehicle(
    bookings: Iterable[Booking], converter: CurrencyConverter
) -> dict[str, tuple[Money, int]]:
    """Base revenue and trip count per assigned vehicle id."""
    per_vehicle: dict[str, tuple[Money, int]] = {}
    for b in bookings:
        vehicle_id = b.assigned_vehicle_id
        if not vehicle_id:
            continue
        revenue, trips = per_vehicle.get(vehicle_id, (converter.zero_base(), 0))
        per_vehicle[vehicle_id] = (revenue + converter.to_base(b.paid), trips + 1)
    return per_vehicle


@traced_engine(
    "vehicle_ranking", "1.0", fingerprint_fields=("window", "today", "capacity_filter")
)
def build_vehicle_ranking(
    snapshot: DashboardSnapshot,
    window: ChartWindow,
    today: date,
    converter: CurrencyConverter,
    capacity_rules: RuleTable,
    capacity_filter: CapacityFilter = CapacityFilter.ALL,
) -> tuple[VehicleRevenue, ...]:
    """
    Revenue and trip count per assigned vehicle, highest revenue first.

    Bookings with no assigned vehicle are unattributed and left out.
    A vehicle id missing from the fleet still ranks, named by its id
    prefix and classed from an empty capacity.
    """
    fleet = {v.id: v for v in snapshot.vehicles}
    eligible = [
        b for b in snapshot.bookings
        if is_revenue_eligible(b) and window.matches(b.start_date, today)
    ]

    wanted_class = _capacity_class_for(capacity_filter, capacity_rules)
    rows: list[VehicleRevenue] = []
    for vehicle_id, (revenue, trips) in _revenue_by_vehicle(eligible, converter).items():
        vehicle = fleet.get(vehicle_id)
        capacity = capacity_rules(vehicle.capacity if vehicle else None)
        if wanted_class is not None and capacity != wanted_class:
            continue
        rows.append(
            VehicleRevenue(
                vehicle_id=vehicle_id,
                name=_short_vehicle_name(vehicle_id, vehicle),
                full_name=vehicle.full_name if vehicle else UNKNOWN_VEHICLE_NAME,
                revenue=converter.to_display(revenue),
                trips=trips,
                capacity=capacity,
            )
        )
    return tuple(sorted(rows, key=lambda row: (-row.revenue.amount, row.vehicle_id)))


# =========================================================================
# Fleet status
# =========================================================================


def build_fleet_status(vehicles: Iterable[Vehicle]) -> tuple[FleetStatusCount, ...]:
    """Available / Hired / Maintenance counts, zero buckets dropped."""
    counts = {bucket: 0 for bucket in FleetStatusBucket}
    for v in vehicles:
        if v.status is VehicleStatus.AVAILABLE:
            counts[FleetStatusBucket.AVAILABLE] += 1
        elif v.status is VehicleStatus.BOOKED:
            counts[FleetStatusBucket.HIRED] += 1
        elif v.status in (VehicleStatus.MAINTENANCE, VehicleStatus.OUT_OF_SERVICE):
            counts[FleetStatusBucket.MAINTENANCE] += 1
    return tuple(
        FleetStatusCount(bucket, count) for bucket, count in counts.items() if count > 0
    )


# =========================================================================
# Capacity comparison
# =========================================================================


@traced_engine("capacity_comparison", "1.0", fingerprint_fields=("window", "today"))
def build_capacity_comparison(
    snapshot: DashboardSnapshot,
    window: ChartWindow,
    today: date,
    converter: CurrencyConverter,
    capacity_rules: RuleTable,
) -> CapacityComparison:
    """
    Per-class revenue and trips, with per-vehicle breakdowns.

    Every capacity class the rule table can produce gets an entry, so the
    fleet counts across classes always add up to the fleet size.
    """
    fleet = {v.id: v for v in snapshot.vehicles}
    fleet_counts = {value: 0 for value in capacity_rules.values}
    for v in snapshot.vehicles:
        fleet_counts[capacity_rules(v.capacity)] += 1

    eligible = [
        b for b in snapshot.bookings
        if is_revenue_eligible(b) and window.matches(b.start_date, today)
    ]
    per_class: dict[str, list[CapacityVehicle]] = {value: [] for value in capacity_rules.values}
    for vehicle_id, (revenue, trips) in _revenue_by_vehicle(eligible, converter).items():
        vehicle = fleet.get(vehicle_id)
        capacity = capacity_rules(vehicle.capacity if vehicle else None)
        per_class[capacity].append(
            CapacityVehicle(
                vehicle_id=vehicle_id,
                name=_short_vehicle_name(vehicle_id, vehicle),
                revenue=converter.to_display(revenue),
                trips=trips,
            )
        )

    display = converter.display_currency
    classes = []
    for capacity in capacity_rules.values:
        vehicles = tuple(
            sorted(per_class[capacity], key=lambda v: (-v.revenue.amount, v.vehicle_id))
        )
        total_revenue = Money.total((v.revenue for v in vehicles), display)
        total_trips = sum(v.trips for v in vehicles)
        if vehicles:
            avg_revenue = total_revenue / len(vehicles)
            avg_trips = (Decimal(total_trips) / len(vehicles)).quantize(
                _ONE_DECIMAL, rounding=ROUND_HALF_UP
            )
        else:
            avg_revenue = Money.zero(display)
            avg_trips = Decimal("0")
        classes.append(
            CapacityClassStats(
                capacity=capacity,
                fleet_count=fleet_counts[capacity],
                total_revenue=total_revenue,
                total_trips=total_trips,
                avg_revenue_per_vehicle=avg_revenue,
                avg_trips_per_vehicle=avg_trips,
                vehicles=vehicles,
            )
        )
    return CapacityComparison(classes=tuple(classes))
