"""
fleetops_engines.eligibility -- Revenue and expense eligibility predicates.

Responsibility:
    Decides which bookings count as revenue, which cash requisitions count
    as realized expenses, which bookings are "active" and which carry an
    outstanding balance. Also derives per-trip safari profit.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Revenue eligibility is a step function of payment: a Confirmed
      booking with amount_paid 0 is excluded, with amount_paid > 0 it is
      included in full.
    - Rejection always wins: a CR with a completion date but a Rejected,
      Cancelled or Declined status is not an expense.
    - Soft-deleted CRs are never expenses.
    - Safari profit is computed in the USD leg only and is NOT clamped here;
      the non-negative clamp applies to the aggregated sum.
"""

from __future__ import annotations

from decimal import Decimal

from fleetops_kernel.domain.records import (
    Booking,
    BookingStatus,
    CashRequisition,
    CRStatus,
    SafariBooking,
)
from fleetops_kernel.domain.values import Money

REVENUE_STATUSES = frozenset({BookingStatus.COMPLETED.value, BookingStatus.IN_PROGRESS.value})

# Two spellings of in-progress are both live in the data
ACTIVE_BOOKING_STATUSES = frozenset({"Confirmed", "Active", "In Progress", "In-Progress"})

EXPENSE_CR_STATUSES = frozenset(
    {CRStatus.COMPLETED.value, CRStatus.APPROVED.value, CRStatus.RESOLVED.value}
)
EXCLUDED_CR_STATUSES = frozenset(
    {CRStatus.REJECTED.value, CRStatus.CANCELLED.value, CRStatus.DECLINED.value}
)


def is_revenue_eligible(booking: Booking) -> bool:
    """Completed or In-Progress, or Confirmed with a payment received."""
    if booking.status in REVENUE_STATUSES:
        return True
    return booking.status == BookingStatus.CONFIRMED.value and booking.amount_paid > 0


def is_valid_expense_cr(cr: CashRequisition) -> bool:
    """Completed (by date or status) and not rejected, cancelled or declined."""
    if cr.soft_deleted:
        return False
    if cr.status in EXCLUDED_CR_STATUSES:
        return False
    return cr.completion_recorded or cr.status in EXPENSE_CR_STATUSES


def is_active_booking(booking: Booking) -> bool:
    return booking.status in ACTIVE_BOOKING_STATUSES


def outstanding_balance(booking: Booking) -> Money:
    """``total_amount - amount_paid`` in the booking's own currency; may be negative."""
    return booking.total - booking.paid


def has_outstanding_balance(booking: Booking) -> bool:
    """Pending bookings that still owe money."""
    return (
        booking.status == BookingStatus.PENDING.value
        and outstanding_balance(booking).is_positive
    )


def safari_profit(safari: SafariBooking) -> Decimal:
    """USD-leg profit: price minus (expenses + vehicle hire). Missing legs are 0."""
    return safari.total_price_usd - (safari.total_expenses_usd + safari.vehicle_hire_cost_usd)
