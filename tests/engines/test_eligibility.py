"""
Tests for revenue and expense eligibility.

Revenue eligibility is a step function of payment; rejection always wins
for cash requisitions.
"""

from datetime import datetime
from decimal import Decimal

import pytest

from fleetops_engines.eligibility import (
    has_outstanding_balance,
    is_active_booking,
    is_revenue_eligible,
    is_valid_expense_cr,
    outstanding_balance,
    safari_profit,
)
from fleetops_kernel.domain.values import Money


class TestRevenueEligibility:
    @pytest.mark.parametrize("status", ["Completed", "In-Progress"])
    def test_completed_and_in_progress_count_unpaid(self, make_booking, status):
        assert is_revenue_eligible(make_booking(status=status, amount_paid="0"))

    def test_confirmed_needs_payment(self, make_booking):
        assert not is_revenue_eligible(make_booking(status="Confirmed", amount_paid="0"))
        assert is_revenue_eligible(make_booking(status="Confirmed", amount_paid="1"))

    @pytest.mark.parametrize("status", ["Pending", "Cancelled", "In Progress", ""])
    def test_other_statuses_never_count(self, make_booking, status):
        assert not is_revenue_eligible(make_booking(status=status, amount_paid="500"))


class TestActiveBookings:
    @pytest.mark.parametrize("status", ["Confirmed", "Active", "In Progress", "In-Progress"])
    def test_both_in_progress_spellings(self, make_booking, status):
        assert is_active_booking(make_booking(status=status))

    @pytest.mark.parametrize("status", ["Completed", "Pending", "Cancelled"])
    def test_inactive(self, make_booking, status):
        assert not is_active_booking(make_booking(status=status))


class TestExpenseCR:
    @pytest.mark.parametrize("status", ["Completed", "Approved", "Resolved"])
    def test_valid_statuses(self, make_cr, status):
        assert is_valid_expense_cr(make_cr(status=status))

    def test_completion_date_makes_pending_valid(self, make_cr):
        assert is_valid_expense_cr(make_cr(status="Pending", date_completed=datetime(2024, 6, 3)))

    @pytest.mark.parametrize("status", ["Rejected", "Cancelled", "Declined"])
    def test_rejection_wins_over_completion_date(self, make_cr, status):
        assert not is_valid_expense_cr(make_cr(status=status, date_completed=datetime(2024, 6, 3)))

    def test_pending_without_completion_is_invalid(self, make_cr):
        assert not is_valid_expense_cr(make_cr(status="Pending"))

    def test_soft_deleted_is_invalid(self, make_cr):
        assert not is_valid_expense_cr(make_cr(status="Completed", soft_deleted=True))


class TestOutstanding:
    def test_balance_in_booking_currency(self, make_booking):
        booking = make_booking(status="Pending", amount_paid="100", total_amount="250", currency="UGX")
        assert outstanding_balance(booking) == Money.of("150", "UGX")

    def test_only_pending_with_positive_balance(self, make_booking):
        assert has_outstanding_balance(make_booking(status="Pending", amount_paid="0", total_amount="10"))
        assert not has_outstanding_balance(make_booking(status="Pending", amount_paid="0", total_amount="0"))
        assert not has_outstanding_balance(make_booking(status="Confirmed", amount_paid="0", total_amount="10"))

    def test_overpaid_has_no_balance(self, make_booking):
        booking = make_booking(status="Pending", amount_paid="300", total_amount="250")
        assert not has_outstanding_balance(booking)
        assert outstanding_balance(booking).is_negative


class TestSafariProfit:
    def test_usd_leg(self, make_safari):
        assert safari_profit(make_safari("1000", "300", "200")) == Decimal("500")

    def test_loss_is_not_clamped_per_trip(self, make_safari):
        assert safari_profit(make_safari("100", "300", "0")) == Decimal("-200")
