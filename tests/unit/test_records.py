"""
Unit tests for parsing raw rows into typed records.

Verifies:
- Field aliases (total_cost, booking_reference, plate, type)
- Missing amounts are zero, non-numeric amounts are malformed
- Unparsable dates become None instead of failing the row
- Currency is required on currency-tagged records
"""

from datetime import datetime
from decimal import Decimal

import pytest

from fleetops_kernel.domain.records import (
    Booking,
    CashRequisition,
    FinancialTransaction,
    Repair,
    SafariBooking,
    Vehicle,
    VehicleStatus,
    parse_timestamp,
)
from fleetops_kernel.domain.values import Currency
from fleetops_kernel.exceptions import MalformedRecordError, UnknownCurrencyError


class TestParseTimestamp:
    def test_date_only(self):
        assert parse_timestamp("2024-06-01") == datetime(2024, 6, 1)

    def test_zulu_becomes_naive_utc(self):
        assert parse_timestamp("2024-06-01T10:00:00Z") == datetime(2024, 6, 1, 10, 0)

    def test_offset_is_converted(self):
        assert parse_timestamp("2024-06-01T03:00:00+03:00") == datetime(2024, 6, 1, 0, 0)

    @pytest.mark.parametrize("value", [None, "", "not a date", "2024-13-45", 12345])
    def test_unparsable_is_none(self, value):
        assert parse_timestamp(value) is None


class TestVehicle:
    def test_from_row(self):
        vehicle = Vehicle.from_row(
            {"id": "v1", "plate": "UBA 123X", "make": "Toyota", "model": "Hiace",
             "capacity": "7 seater", "status": "Booked"}
        )
        assert vehicle.status is VehicleStatus.BOOKED
        assert vehicle.license_plate == "UBA 123X"
        assert vehicle.full_name == "Toyota Hiace (UBA 123X)"

    def test_unknown_status_is_malformed(self):
        with pytest.raises(MalformedRecordError) as exc_info:
            Vehicle.from_row({"id": "v1", "status": "stolen"})
        assert exc_info.value.field == "status"

    def test_missing_id_is_malformed(self):
        with pytest.raises(MalformedRecordError) as exc_info:
            Vehicle.from_row({"status": "available"})
        assert exc_info.value.field == "id"


class TestBooking:
    BASE = {"id": "b1", "status": "Completed", "amount_paid": "100", "currency": "USD"}

    def test_from_row(self):
        booking = Booking.from_row({**self.BASE, "total_amount": 250, "start_date": "2024-06-01"})
        assert booking.amount_paid == Decimal("100")
        assert booking.total_amount == Decimal("250")
        assert booking.currency == Currency("USD")
        assert booking.start_date == datetime(2024, 6, 1)

    def test_total_cost_alias(self):
        booking = Booking.from_row({**self.BASE, "total_cost": "300"})
        assert booking.total_amount == Decimal("300")

    def test_missing_amount_is_zero(self):
        booking = Booking.from_row({"id": "b1", "status": "Pending", "currency": "UGX"})
        assert booking.amount_paid == Decimal("0")
        assert booking.total_amount == Decimal("0")

    def test_non_numeric_amount_is_malformed(self):
        with pytest.raises(MalformedRecordError) as exc_info:
            Booking.from_row({**self.BASE, "amount_paid": "a lot"})
        assert exc_info.value.field == "amount_paid"
        assert exc_info.value.record_id == "b1"

    def test_missing_currency_is_malformed(self):
        row = dict(self.BASE)
        del row["currency"]
        with pytest.raises(MalformedRecordError) as exc_info:
            Booking.from_row(row)
        assert exc_info.value.field == "currency"

    def test_non_code_currency_is_unknown(self):
        with pytest.raises(UnknownCurrencyError) as exc_info:
            Booking.from_row({**self.BASE, "currency": "US$"})
        assert exc_info.value.currency == "US$"

    def test_bad_date_is_tolerated(self):
        booking = Booking.from_row({**self.BASE, "start_date": "soon"})
        assert booking.start_date is None

    def test_client_name_precedence(self):
        booking = Booking.from_row(
            {**self.BASE, "client_name": "Jane", "client": {"company_name": "Acme Tours"},
             "profiles": {"full_name": "Agent"}}
        )
        assert booking.display_client_name == "Acme Tours"
        assert Booking.from_row(self.BASE).display_client_name == "Unknown"

    def test_reference_aliases(self):
        booking = Booking.from_row(
            {**self.BASE, "booking_reference": "REF-9", "assigned_to": "u1", "actual_client_id": "c1"}
        )
        assert booking.booking_number == "REF-9"
        assert booking.assigned_user_id == "u1"
        assert booking.client_id == "c1"

    def test_overpayment_is_accepted(self):
        booking = Booking.from_row({**self.BASE, "total_amount": "50"})
        assert booking.amount_paid > booking.total_amount


class TestCashRequisition:
    def test_from_row(self):
        cr = CashRequisition.from_row(
            {"id": "c1", "cr_number": "CR-2024-0001", "total_cost": "50", "currency": "USD",
             "status": "Completed", "expense_category": "Fuel", "amount_usd": "50",
             "created_at": "2024-06-01T08:00:00Z", "date_completed": "2024-06-02"}
        )
        assert cr.cost.amount == Decimal("50")
        assert cr.amount_usd == Decimal("50")
        assert cr.date_completed == datetime(2024, 6, 2)
        assert cr.completion_recorded

    def test_unparsable_completion_date_still_counts_as_recorded(self):
        cr = CashRequisition.from_row(
            {"id": "c1", "currency": "USD", "status": "Pending", "date_completed": "yesterday"}
        )
        assert cr.date_completed is None
        assert cr.completion_recorded

    def test_blank_amount_usd_is_none(self):
        cr = CashRequisition.from_row({"id": "c1", "currency": "UGX", "amount_usd": ""})
        assert cr.amount_usd is None

    @pytest.mark.parametrize("flag, expected", [(True, True), ("true", True), ("no", False), (None, False)])
    def test_soft_deleted_flag(self, flag, expected):
        cr = CashRequisition.from_row({"id": "c1", "currency": "USD", "soft_deleted": flag})
        assert cr.soft_deleted is expected


class TestFinancialTransaction:
    def test_type_alias_and_case(self):
        txn = FinancialTransaction.from_row(
            {"id": "t1", "amount": 20, "type": "Expense", "currency": "usd", "status": "Cancelled"}
        )
        assert txn.transaction_type == "expense"
        assert txn.money.currency == Currency("USD")
        assert txn.is_cancelled


class TestSafariBooking:
    def test_currency_is_optional(self):
        safari = SafariBooking.from_row({"id": "s1", "total_price_usd": "1200"})
        assert safari.currency is None
        assert safari.total_price_usd == Decimal("1200")
        assert safari.total_expenses_usd == Decimal("0")

    def test_bad_currency_is_unknown(self):
        with pytest.raises(UnknownCurrencyError) as exc_info:
            SafariBooking.from_row({"id": "s1", "currency": "dollars"})
        assert exc_info.value.currency == "dollars"


class TestRepair:
    def test_from_row(self):
        repair = Repair.from_row({"id": "r1", "vehicle_id": "v1", "estimated_cost": "80"})
        assert repair.estimated_cost == Decimal("80")
        assert repair.reported_at is None
