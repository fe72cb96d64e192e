"""
Records -- Typed, read-only views of the raw collections.

Responsibility:
    Turns raw rows (as fetched from the remote store or read from an export)
    into frozen dataclasses the engines can rely on: Decimal amounts,
    Currency codes, naive-UTC timestamps and a closed vehicle status enum.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Records are immutable; the engine never mutates its inputs.
    - Vehicle status is a closed enum; exactly one status per vehicle.
    - Booking amounts are NOT cross-checked (amount_paid may exceed
      total_amount); consumers tolerate it.

Failure modes:
    - MalformedRecordError for a missing id, a missing currency on a
      currency-tagged record, a non-numeric amount, or an unknown vehicle
      status.
    - UnknownCurrencyError for a currency tag that is not a currency code.
      The row is not skipped: losing a tagged amount would corrupt totals.
    - Dates are never an error: unparsable or missing dates become None
      and the record drops out of date-bucketed views only.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from fleetops_kernel.exceptions import (
    InvalidCurrencyError,
    MalformedRecordError,
    UnknownCurrencyError,
)
from fleetops_kernel.domain.values import Currency, Money, to_decimal

UNKNOWN_CLIENT = "Unknown"


# =========================================================================
# Status vocabularies
# =========================================================================


class VehicleStatus(str, Enum):
    AVAILABLE = "available"
    BOOKED = "booked"
    RENTED = "rented"
    MAINTENANCE = "maintenance"
    OUT_OF_SERVICE = "out_of_service"


class BookingStatus(str, Enum):
    """Canonical booking statuses. Raw records may carry other spellings."""

    CONFIRMED = "Confirmed"
    IN_PROGRESS = "In-Progress"
    COMPLETED = "Completed"
    PENDING = "Pending"
    CANCELLED = "Cancelled"


class CRStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    COMPLETED = "Completed"
    RESOLVED = "Resolved"
    REJECTED = "Rejected"
    DECLINED = "Declined"
    CANCELLED = "Cancelled"


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


# =========================================================================
# Field parsing helpers
# =========================================================================


def parse_timestamp(value: Any) -> datetime | None:
    """
    Parse a date or timestamp into a naive UTC datetime.

    Accepts datetime, date and ISO-8601 strings (date-only, with or without
    offset, trailing ``Z``). Anything else returns None.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


class _RowReader:
    """Reads typed fields out of one raw row, raising MalformedRecordError."""

    def __init__(self, collection: str, row: Mapping[str, Any]):
        self.collection = collection
        self.row = row
        raw_id = row.get("id")
        self.record_id = str(raw_id).strip() if raw_id not in (None, "") else None

    def fail(self, field: str, reason: str) -> MalformedRecordError:
        return MalformedRecordError(self.collection, self.record_id, field, reason)

    def require_id(self) -> str:
        if not self.record_id:
            raise self.fail("id", "is missing")
        return self.record_id

    def text(self, *fields: str) -> str | None:
        """First non-blank value among ``fields`` as a stripped string."""
        for field in fields:
            value = self.row.get(field)
            if value is not None and str(value).strip():
                return str(value).strip()
        return None

    def nested_text(self, parent: str, field: str) -> str | None:
        value = self.row.get(parent)
        if isinstance(value, Mapping):
            inner = value.get(field)
            if inner is not None and str(inner).strip():
                return str(inner).strip()
        return None

    def amount(self, field: str) -> Decimal:
        """Numeric field; missing or blank is zero."""
        value = self.row.get(field)
        if value is None or value == "":
            return Decimal("0")
        try:
            return to_decimal(value)
        except (InvalidOperation, ValueError, TypeError) as e:
            raise self.fail(field, "is not numeric") from e

    def optional_amount(self, field: str) -> Decimal | None:
        value = self.row.get(field)
        if value is None or value == "":
            return None
        return self.amount(field)

    def currency(self, field: str = "currency") -> Currency:
        value = self.row.get(field)
        if value is None or value == "":
            raise self.fail(field, "is missing")
        try:
            return Currency(str(value))
        except InvalidCurrencyError as e:
            raise UnknownCurrencyError(str(value).strip()) from e

    def timestamp(self, field: str) -> datetime | None:
        return parse_timestamp(self.row.get(field))

    def flag(self, field: str) -> bool:
        value = self.row.get(field)
        if isinstance(value, str):
            return value.strip().lower() in ("true", "1", "yes", "y")
        return bool(value)


# =========================================================================
# Records
# =========================================================================


@dataclass(frozen=True)
class Vehicle:
    id: str
    license_plate: str
    make: str
    model: str
    capacity: str
    status: VehicleStatus

    @property
    def full_name(self) -> str:
        return f"{self.make} {self.model} ({self.license_plate})"

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Vehicle:
        r = _RowReader("vehicles", row)
        record_id = r.require_id()
        raw_status = (r.text("status") or "").lower()
        try:
            status = VehicleStatus(raw_status)
        except ValueError as e:
            raise r.fail("status", "is not a known vehicle status") from e
        return cls(
            id=record_id,
            license_plate=r.text("license_plate", "plate") or "",
            make=r.text("make") or "",
            model=r.text("model") or "",
            capacity=r.text("capacity") or "",
            status=status,
        )


@dataclass(frozen=True)
class Booking:
    id: str
    status: str
    amount_paid: Decimal
    total_amount: Decimal
    currency: Currency
    start_date: datetime | None = None
    end_date: datetime | None = None
    booking_number: str | None = None
    assigned_vehicle_id: str | None = None
    assigned_user_id: str | None = None
    client_id: str | None = None
    client_name: str | None = None
    client_company_name: str | None = None
    profile_full_name: str | None = None
    created_at: datetime | None = None

    @property
    def paid(self) -> Money:
        return Money(self.amount_paid, self.currency)

    @property
    def total(self) -> Money:
        return Money(self.total_amount, self.currency)

    @property
    def display_client_name(self) -> str:
        return (
            self.client_company_name
            or self.client_name
            or self.profile_full_name
            or UNKNOWN_CLIENT
        )

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Booking:
        r = _RowReader("bookings", row)
        record_id = r.require_id()
        total = r.amount("total_amount")
        if not total:
            # total_cost is the legacy alias
            total = r.amount("total_cost")
        return cls(
            id=record_id,
            status=r.text("status") or "",
            amount_paid=r.amount("amount_paid"),
            total_amount=total,
            currency=r.currency(),
            start_date=r.timestamp("start_date"),
            end_date=r.timestamp("end_date"),
            booking_number=r.text("booking_number", "booking_reference"),
            assigned_vehicle_id=r.text("assigned_vehicle_id"),
            assigned_user_id=r.text("assigned_user_id", "assigned_to"),
            client_id=r.text("actual_client_id", "client_id"),
            client_name=r.text("client_name"),
            client_company_name=r.nested_text("client", "company_name"),
            profile_full_name=r.nested_text("profiles", "full_name"),
            created_at=r.timestamp("created_at"),
        )


@dataclass(frozen=True)
class CashRequisition:
    id: str
    cr_number: str
    total_cost: Decimal
    currency: Currency
    status: str
    expense_category: str
    created_at: datetime | None = None
    date_completed: datetime | None = None
    date_needed: datetime | None = None
    amount_usd: Decimal | None = None
    soft_deleted: bool = False
    # True when date_completed was supplied, even if it did not parse
    completion_recorded: bool = False

    @property
    def cost(self) -> Money:
        return Money(self.total_cost, self.currency)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> CashRequisition:
        r = _RowReader("cash_requisitions", row)
        record_id = r.require_id()
        return cls(
            id=record_id,
            cr_number=r.text("cr_number") or "",
            total_cost=r.amount("total_cost"),
            currency=r.currency(),
            status=r.text("status") or "",
            expense_category=r.text("expense_category") or "",
            created_at=r.timestamp("created_at"),
            date_completed=r.timestamp("date_completed"),
            completion_recorded=r.text("date_completed") is not None,
            date_needed=r.timestamp("date_needed"),
            amount_usd=r.optional_amount("amount_usd"),
            soft_deleted=r.flag("soft_deleted"),
        )


@dataclass(frozen=True)
class FinancialTransaction:
    id: str
    amount: Decimal
    transaction_type: str
    currency: Currency
    status: str = ""
    transaction_date: datetime | None = None
    category: str | None = None
    description: str | None = None
    reference_number: str | None = None

    @property
    def money(self) -> Money:
        return Money(self.amount, self.currency)

    @property
    def is_cancelled(self) -> bool:
        return self.status.lower() == "cancelled"

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> FinancialTransaction:
        r = _RowReader("financial_transactions", row)
        record_id = r.require_id()
        return cls(
            id=record_id,
            amount=r.amount("amount"),
            transaction_type=(r.text("transaction_type", "type") or "").lower(),
            currency=r.currency(),
            status=r.text("status") or "",
            transaction_date=r.timestamp("transaction_date"),
            category=r.text("category"),
            description=r.text("description"),
            reference_number=r.text("reference_number"),
        )


@dataclass(frozen=True)
class SafariBooking:
    """Safari trip with price and cost fields split into USD and UGX legs."""

    id: str
    start_date: datetime | None = None
    end_date: datetime | None = None
    status: str = ""
    total_price_usd: Decimal = Decimal("0")
    total_price_ugx: Decimal = Decimal("0")
    total_expenses_usd: Decimal = Decimal("0")
    total_expenses_ugx: Decimal = Decimal("0")
    vehicle_hire_cost_usd: Decimal = Decimal("0")
    vehicle_hire_cost_ugx: Decimal = Decimal("0")
    amount_paid: Decimal = Decimal("0")
    currency: Currency | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> SafariBooking:
        r = _RowReader("safari_bookings", row)
        record_id = r.require_id()
        return cls(
            id=record_id,
            start_date=r.timestamp("start_date"),
            end_date=r.timestamp("end_date"),
            status=r.text("status") or "",
            total_price_usd=r.amount("total_price_usd"),
            total_price_ugx=r.amount("total_price_ugx"),
            total_expenses_usd=r.amount("total_expenses_usd"),
            total_expenses_ugx=r.amount("total_expenses_ugx"),
            vehicle_hire_cost_usd=r.amount("vehicle_hire_cost_usd"),
            vehicle_hire_cost_ugx=r.amount("vehicle_hire_cost_ugx"),
            amount_paid=r.amount("amount_paid"),
            currency=r.currency() if r.text("currency") else None,
        )


@dataclass(frozen=True)
class Repair:
    """Accepted alongside the other collections; no KPI reads it."""

    id: str
    vehicle_id: str | None = None
    description: str | None = None
    status: str = ""
    priority: str = ""
    reported_at: datetime | None = None
    estimated_cost: Decimal | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Repair:
        r = _RowReader("repairs", row)
        record_id = r.require_id()
        return cls(
            id=record_id,
            vehicle_id=r.text("vehicle_id"),
            description=r.text("description"),
            status=r.text("status") or "",
            priority=r.text("priority") or "",
            reported_at=r.timestamp("reported_at"),
            estimated_cost=r.optional_amount("estimated_cost"),
        )
