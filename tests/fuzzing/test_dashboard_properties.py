"""
Property-based tests for the dashboard calculations.

Properties:
- Converting to the base currency and back recovers the amount
- Fleet utilization is a whole percentage in [0, 100]
- Capacity class fleet counts always add up to the fleet size
- compute_dashboard is deterministic for a fixed (snapshot, query, as_of)
- An open booking contributes all of its payment or nothing; pending never counts
"""

from datetime import datetime
from decimal import Decimal

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from fleetops_engines.conversion import CurrencyConverter
from fleetops_engines.time_window import ChartWindow, TimeWindowMode
from fleetops_kernel.domain.records import Booking, Vehicle, VehicleStatus
from fleetops_kernel.domain.values import Currency, ExchangeRateTable, Money
from fleetops_modules.dashboard.charts import build_capacity_comparison
from fleetops_modules.dashboard.config import DashboardConfig
from fleetops_modules.dashboard.kpis import count_fleet, fleet_utilization
from fleetops_modules.dashboard.models import DashboardQuery, DashboardSnapshot
from fleetops_modules.dashboard.service import compute_dashboard

AS_OF = datetime(2024, 6, 15, 12, 0, 0)
RATES = ExchangeRateTable.of("USD", {"UGX": "3700", "KES": "130"})

amounts = st.decimals(
    min_value=Decimal("0"),
    max_value=Decimal("1000000000"),
    places=2,
    allow_nan=False,
    allow_infinity=False,
)
currencies = st.sampled_from(["USD", "UGX", "KES"])
statuses = st.sampled_from(["Completed", "Confirmed", "Pending", "Cancelled", "In Progress"])
capacities = st.one_of(
    st.sampled_from(["7 seater", "7-Seater", "14 seater", "Fourteen", "bus", "", "5 seater"]),
    st.text(max_size=12),
)
dates = st.one_of(
    st.none(),
    st.datetimes(min_value=datetime(2023, 1, 1), max_value=datetime(2025, 12, 31)),
)


@st.composite
def vehicles(draw, max_size=15):
    count = draw(st.integers(min_value=0, max_value=max_size))
    return tuple(
        Vehicle(
            id=f"veh-{i:04d}",
            license_plate=f"UAX {i:03d}A",
            make="Toyota",
            model="Hiace",
            capacity=draw(capacities),
            status=draw(st.sampled_from(list(VehicleStatus))),
        )
        for i in range(count)
    )


@st.composite
def bookings(draw, fleet=(), max_size=15):
    count = draw(st.integers(min_value=0, max_value=max_size))
    result = []
    for i in range(count):
        paid = draw(amounts)
        start = draw(dates)
        result.append(
            Booking(
                id=f"bk-{i:04d}",
                status=draw(statuses),
                amount_paid=paid,
                total_amount=paid + draw(amounts),
                currency=Currency(draw(currencies)),
                start_date=start,
                end_date=start,
                assigned_vehicle_id=draw(st.sampled_from([v.id for v in fleet])) if fleet else None,
                created_at=start,
            )
        )
    return tuple(result)


@st.composite
def snapshots(draw):
    fleet = draw(vehicles())
    return DashboardSnapshot(rates=RATES, vehicles=fleet, bookings=draw(bookings(fleet)))


class TestConversionProperties:
    @given(amount=amounts, currency=currencies)
    def test_round_trip_within_tolerance(self, amount, currency):
        converter = CurrencyConverter(RATES)
        back = converter.from_base(converter.to_base(Money.of(amount, currency)), currency)
        assert back.currency == Currency(currency)
        assert abs(back.amount - amount) <= Decimal("0.000001")


class TestFleetProperties:
    @given(fleet=vehicles(max_size=40))
    def test_utilization_is_a_percentage(self, fleet):
        utilization = fleet_utilization(count_fleet(fleet))
        assert isinstance(utilization, int)
        assert 0 <= utilization <= 100

    @given(fleet=vehicles(max_size=40))
    def test_capacity_counts_cover_the_fleet(self, fleet):
        comparison = build_capacity_comparison(
            DashboardSnapshot(rates=RATES, vehicles=fleet),
            ChartWindow(TimeWindowMode.ALL),
            AS_OF.date(),
            CurrencyConverter(RATES),
            DashboardConfig().vehicle_capacity,
        )
        assert comparison.total_fleet_count == len(fleet)


class TestDashboardProperties:
    @settings(max_examples=40, suppress_health_check=[HealthCheck.too_slow])
    @given(snapshot=snapshots(), display=currencies)
    def test_deterministic(self, snapshot, display):
        query = DashboardQuery(display_currency=display)
        assert compute_dashboard(snapshot, query, AS_OF) == compute_dashboard(snapshot, query, AS_OF)

    @settings(max_examples=40)
    @given(paid=amounts, outstanding=amounts, status=st.sampled_from(["Confirmed", "Pending", "In Progress"]))
    def test_payment_step(self, paid, outstanding, status):
        booking = Booking(
            id="bk-0001",
            status=status,
            amount_paid=paid,
            total_amount=paid + outstanding,
            currency=Currency("USD"),
            start_date=datetime(2024, 6, 10),
            created_at=datetime(2024, 6, 10),
        )
        snapshot = DashboardSnapshot(rates=RATES, bookings=(booking,))
        result = compute_dashboard(snapshot, DashboardQuery(), AS_OF)
        counted = status != "Pending" and paid > 0
        expected = Money.of(paid, "USD") if counted else Money.zero("USD")
        assert result.kpis.total_revenue == expected

    @settings(max_examples=40, suppress_health_check=[HealthCheck.too_slow])
    @given(snapshot=snapshots())
    def test_revenue_is_never_negative(self, snapshot):
        result = compute_dashboard(snapshot, DashboardQuery(), AS_OF)
        assert result.kpis.total_revenue.amount >= 0
        assert all(point.revenue.amount >= 0 for point in result.monthly_revenue_expenses)
