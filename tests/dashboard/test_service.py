"""
Tests for DashboardService.

The service supplies ``as_of`` from its clock, binds the snapshot id into
the log context and never swallows a failed computation.
"""

from datetime import datetime, timedelta, timezone

import pytest

from fleetops_kernel.domain.values import Money
from fleetops_kernel.exceptions import UnknownCurrencyError
from fleetops_modules.dashboard.config import DashboardConfig
from fleetops_modules.dashboard.models import DashboardQuery, DashboardResult, DashboardSnapshot
from fleetops_modules.dashboard.service import DashboardService, compute_dashboard


@pytest.fixture
def service(clock):
    return DashboardService(clock=clock, config=DashboardConfig(recent_bookings_limit=2))


class TestDashboardService:
    def test_as_of_comes_from_clock(self, service, make_snapshot):
        result = service.compute(make_snapshot())
        assert isinstance(result, DashboardResult)
        assert result.as_of == datetime(2024, 6, 15, 12, 0)

    def test_default_query(self, service, make_snapshot, make_booking):
        result = service.compute(make_snapshot(bookings=[make_booking(amount_paid="7")]))
        assert result.display_currency.code == "USD"
        assert result.kpis.total_revenue == Money.of("7", "USD")

    def test_config_limit_applies(self, service, make_snapshot, make_booking):
        result = service.compute(make_snapshot(bookings=[make_booking() for _ in range(5)]))
        assert len(result.recent_bookings) == 2

    def test_clock_moves_windows(self, service, clock, make_snapshot, make_booking):
        snapshot = make_snapshot(bookings=[make_booking(amount_paid="9", start_date=datetime(2024, 7, 2))])
        assert service.compute(snapshot).kpis.revenue_mtd == Money.zero("USD")
        clock.set_time(datetime(2024, 7, 20))
        assert service.compute(snapshot).kpis.revenue_mtd == Money.of("9", "USD")

    def test_logs_completion_with_snapshot_id(self, service, rates, captured_logs):
        service.compute(DashboardSnapshot(rates=rates, snapshot_id="snap-42"))
        logs = captured_logs()
        completed = [r for r in logs if r["message"] == "dashboard_computation_completed"]
        assert len(completed) == 1
        assert completed[0]["snapshot_id"] == "snap-42"
        assert any(r["message"] == "FLEETOPS_ENGINE_TRACE" for r in logs)

    def test_failure_is_logged_and_raised(self, service, make_snapshot, make_booking, captured_logs):
        snapshot = make_snapshot(bookings=[make_booking(currency="EUR")])
        with pytest.raises(UnknownCurrencyError):
            service.compute(snapshot)
        failed = [r for r in captured_logs() if r["message"] == "dashboard_computation_failed"]
        assert failed[0]["error_code"] == "UNKNOWN_CURRENCY"

    def test_logs_carry_no_client_names(self, service, make_snapshot, make_booking, captured_logs):
        snapshot = make_snapshot(bookings=[make_booking(client_name="Jane Secret", status="Pending", total_amount="500")])
        service.compute(snapshot)
        assert "Jane Secret" not in str(captured_logs())


class TestDeterminism:
    def test_same_inputs_equal_results(
        self, make_snapshot, make_booking, make_cr, make_transaction, make_vehicle, make_safari, as_of
    ):
        snapshot = make_snapshot(
            vehicles=[make_vehicle(vehicle_id="v1", status="booked"), make_vehicle(capacity="sedan")],
            bookings=[make_booking(vehicle_id="v1"), make_booking(status="Pending", total_amount="900")],
            cash_requisitions=[make_cr(currency="UGX", total_cost="7400")],
            financial_transactions=[make_transaction(currency="KES")],
            safari_bookings=[make_safari()],
        )
        query = DashboardQuery(display_currency="KES")
        assert compute_dashboard(snapshot, query, as_of) == compute_dashboard(snapshot, query, as_of)

    def test_inputs_are_not_mutated(self, make_snapshot, make_booking, as_of):
        bookings = (make_booking(), make_booking(status="Pending", total_amount="300"))
        snapshot = make_snapshot(bookings=bookings)
        compute_dashboard(snapshot, DashboardQuery(), as_of)
        assert snapshot.bookings == bookings


class TestAwareAsOf:
    """An aware as_of is read as the same instant in naive UTC."""

    def test_aware_as_of_matches_naive_utc(self, make_snapshot, make_booking, as_of):
        snapshot = make_snapshot(bookings=[make_booking(amount_paid="25", start_date=datetime(2024, 6, 3))])
        aware = datetime(2024, 6, 15, 15, 0, 0, tzinfo=timezone(timedelta(hours=3)))

        result = compute_dashboard(snapshot, DashboardQuery(), aware)

        assert result.as_of == as_of
        assert result == compute_dashboard(snapshot, DashboardQuery(), as_of)
        assert result.kpis.revenue_mtd == Money.of("25", "USD")
