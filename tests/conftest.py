"""
Pytest fixtures for the FleetOps test suite.

Provides:
- Structured logging configuration and log capture
- A deterministic clock pinned to 2024-06-15 12:00 UTC
- The standard rate table {USD: 1, UGX: 3700, KES: 130}
- Record factories for vehicles, bookings, CRs, transactions and safaris

Everything here is pure in-memory data; no test touches the network.
"""

import json
import logging
from datetime import datetime
from decimal import Decimal
from io import StringIO
from itertools import count

import pytest

from fleetops_engines.conversion import CurrencyConverter
from fleetops_kernel.domain.clock import FixedClock
from fleetops_kernel.domain.records import (
    Booking,
    CashRequisition,
    FinancialTransaction,
    SafariBooking,
    Vehicle,
    VehicleStatus,
)
from fleetops_kernel.domain.values import Currency, ExchangeRateTable
from fleetops_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from fleetops_modules.dashboard.config import DashboardConfig
from fleetops_modules.dashboard.models import DashboardSnapshot

AS_OF = datetime(2024, 6, 15, 12, 0, 0)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture fleetops logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            service.compute(snapshot)
            logs = captured_logs()
            assert any(r["message"] == "dashboard_computation_completed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("fleetops")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Clock, rates and config
# =============================================================================


@pytest.fixture
def as_of() -> datetime:
    return AS_OF


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(AS_OF)


@pytest.fixture
def rates() -> ExchangeRateTable:
    return ExchangeRateTable.of("USD", {"UGX": "3700", "KES": "130"})


@pytest.fixture
def converter(rates) -> CurrencyConverter:
    return CurrencyConverter(rates)


@pytest.fixture
def ugx_converter(rates) -> CurrencyConverter:
    return CurrencyConverter(rates, display_currency="UGX")


@pytest.fixture
def dashboard_config() -> DashboardConfig:
    return DashboardConfig()


# =============================================================================
# Record factories
# =============================================================================


@pytest.fixture
def make_vehicle():
    """Factory fixture to create vehicles with sequential ids."""
    seq = count(1)

    def _make(
        status: VehicleStatus | str = VehicleStatus.AVAILABLE,
        capacity: str = "7 seater",
        vehicle_id: str | None = None,
        plate: str | None = None,
    ) -> Vehicle:
        n = next(seq)
        return Vehicle(
            id=vehicle_id or f"veh-{n:04d}",
            license_plate=plate or f"UAX {n:03d}A",
            make="Toyota",
            model="Land Cruiser",
            capacity=capacity,
            status=VehicleStatus(status),
        )

    return _make


@pytest.fixture
def make_booking():
    """Factory fixture to create bookings; amounts are given as strings."""
    seq = count(1)

    def _make(
        status: str = "Completed",
        amount_paid: str = "100",
        total_amount: str | None = None,
        currency: str = "USD",
        start_date: datetime | None = datetime(2024, 6, 10),
        vehicle_id: str | None = None,
        created_at: datetime | None = None,
        booking_id: str | None = None,
        client_name: str | None = "Client",
    ) -> Booking:
        n = next(seq)
        return Booking(
            id=booking_id or f"bk-{n:04d}",
            status=status,
            amount_paid=Decimal(amount_paid),
            total_amount=Decimal(total_amount if total_amount is not None else amount_paid),
            currency=Currency(currency),
            start_date=start_date,
            end_date=start_date,
            booking_number=f"BK-{n:04d}",
            assigned_vehicle_id=vehicle_id,
            client_name=client_name,
            created_at=created_at or start_date,
        )

    return _make


@pytest.fixture
def make_cr():
    """Factory fixture to create cash requisitions."""
    seq = count(1)

    def _make(
        total_cost: str = "50",
        currency: str = "USD",
        status: str = "Completed",
        category: str = "fuel",
        cr_number: str | None = None,
        created_at: datetime | None = datetime(2024, 6, 5),
        date_completed: datetime | None = None,
        amount_usd: str | None = None,
        soft_deleted: bool = False,
    ) -> CashRequisition:
        n = next(seq)
        return CashRequisition(
            id=f"cr-{n:04d}",
            cr_number=cr_number or f"CR-2024-{n:04d}",
            total_cost=Decimal(total_cost),
            currency=Currency(currency),
            status=status,
            expense_category=category,
            created_at=created_at,
            date_completed=date_completed,
            completion_recorded=date_completed is not None,
            amount_usd=Decimal(amount_usd) if amount_usd is not None else None,
            soft_deleted=soft_deleted,
        )

    return _make


@pytest.fixture
def make_transaction():
    """Factory fixture to create ledger transactions."""
    seq = count(1)

    def _make(
        amount: str = "20",
        transaction_type: str = "expense",
        currency: str = "USD",
        transaction_date: datetime | None = datetime(2024, 6, 7),
        reference_number: str | None = None,
        description: str | None = None,
        category: str | None = None,
        status: str = "completed",
    ) -> FinancialTransaction:
        n = next(seq)
        return FinancialTransaction(
            id=f"txn-{n:04d}",
            amount=Decimal(amount),
            transaction_type=transaction_type,
            currency=Currency(currency),
            status=status,
            transaction_date=transaction_date,
            category=category,
            description=description,
            reference_number=reference_number,
        )

    return _make


@pytest.fixture
def make_safari():
    """Factory fixture to create safari trips (USD leg only by default)."""
    seq = count(1)

    def _make(
        price_usd: str = "1000",
        expenses_usd: str = "300",
        hire_usd: str = "200",
        status: str = "Confirmed",
        start_date: datetime | None = datetime(2024, 6, 12),
        end_date: datetime | None = None,
    ) -> SafariBooking:
        n = next(seq)
        return SafariBooking(
            id=f"saf-{n:04d}",
            start_date=start_date,
            end_date=end_date or start_date,
            status=status,
            total_price_usd=Decimal(price_usd),
            total_expenses_usd=Decimal(expenses_usd),
            vehicle_hire_cost_usd=Decimal(hire_usd),
        )

    return _make


@pytest.fixture
def make_snapshot(rates):
    """Factory fixture to build a DashboardSnapshot over the standard rates."""

    def _make(snapshot_rates: ExchangeRateTable | None = None, **collections) -> DashboardSnapshot:
        return DashboardSnapshot(
            rates=snapshot_rates or rates,
            **{name: tuple(records) for name, records in collections.items()},
        )

    return _make
