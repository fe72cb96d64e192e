"""
Pure widget projections: outstanding payments and recent bookings.

Amounts are converted to the display currency through the base currency.
Client names come from ``Booking.display_client_name``; they are placed in
the projection for the UI and never logged.
"""

from __future__ import annotations

from collections.abc import Iterable

from fleetops_engines.conversion import CurrencyConverter
from fleetops_engines.eligibility import has_outstanding_balance, outstanding_balance
from fleetops_kernel.domain.records import Booking
from fleetops_modules.dashboard.models import OutstandingPayment, RecentBooking


def build_outstanding_payments(
    bookings: Iterable[Booking], converter: CurrencyConverter
) -> tuple[OutstandingPayment, ...]:
    """Pending bookings with a positive balance, largest balance first."""
    rows = [
        OutstandingPayment(
            booking_id=b.id,
            booking_number=b.booking_number,
            client_name=b.display_client_name,
            balance_due=converter.to_display(outstanding_balance(b)),
            total_amount=converter.to_display(b.total),
            amount_paid=converter.to_display(b.paid),
            start_date=b.start_date,
            end_date=b.end_date,
            booking_currency=b.currency,
        )
        for b in bookings
        if has_outstanding_balance(b)
    ]
    return tuple(sorted(rows, key=lambda row: (-row.balance_due.amount, row.booking_id)))


def build_recent_bookings(
    bookings: Iterable[Booking], converter: CurrencyConverter, limit: int
) -> tuple[RecentBooking, ...]:
    """The newest ``limit`` bookings by created_at, any status."""
    dated = [b for b in bookings if b.created_at is not None]
    dated.sort(key=lambda b: (b.created_at, b.id), reverse=True)
    return tuple(
        RecentBooking(
            booking_id=b.id,
            booking_number=b.booking_number,
            start_date=b.start_date,
            end_date=b.end_date,
            status=b.status,
            amount=converter.to_display(b.total),
            client_name=b.display_client_name,
            assigned_vehicle_id=b.assigned_vehicle_id,
            created_at=b.created_at,
        )
        for b in dated[:limit]
    )
