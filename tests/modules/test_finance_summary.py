"""
Tests for the finance-screen summary.

The summary reports the ledger as recorded (no CR reconciliation) and
splits requisitions into pending and completed queues.
"""

from datetime import datetime

import pytest

from fleetops_kernel.domain.values import Money
from fleetops_modules.finance import FinanceSummary, build_finance_summary


@pytest.fixture
def ledger(make_transaction):
    return [
        make_transaction(amount="100", transaction_type="income", transaction_date=datetime(2024, 6, 2)),
        make_transaction(amount="370000", transaction_type="income", currency="UGX", transaction_date=datetime(2024, 2, 2)),
        make_transaction(amount="50", transaction_type="income", transaction_date=datetime(2023, 6, 2)),
        make_transaction(amount="30", transaction_type="expense", transaction_date=datetime(2024, 6, 9)),
        make_transaction(amount="20", transaction_type="expense", transaction_date=datetime(2024, 1, 9),
                         reference_number="CR-2024-0001"),
        make_transaction(amount="999", transaction_type="expense", status="Cancelled",
                         transaction_date=datetime(2024, 6, 9)),
        make_transaction(amount="5", transaction_type="income", transaction_date=None),
    ]


class TestLedgerTotals:
    def test_to_date_totals(self, ledger, converter, as_of):
        summary = build_finance_summary(ledger, [], converter, as_of)
        assert summary.income_mtd == Money.of("100", "USD")
        assert summary.income_ytd == Money.of("200", "USD")
        assert summary.total_income == Money.of("255", "USD")
        assert summary.expenses_mtd == Money.of("30", "USD")
        assert summary.expenses_ytd == Money.of("50", "USD")
        assert summary.total_expenses == Money.of("50", "USD")

    def test_net_profit(self, ledger, converter, as_of):
        summary = build_finance_summary(ledger, [], converter, as_of)
        assert summary.net_profit_mtd == Money.of("70", "USD")
        assert summary.net_profit_ytd == Money.of("150", "USD")

    def test_display_currency(self, ledger, ugx_converter, as_of):
        summary = build_finance_summary(ledger, [], ugx_converter, as_of)
        assert summary.income_mtd == Money.of("370000", "UGX")

    def test_empty(self, converter, as_of):
        summary = build_finance_summary([], [], converter, as_of)
        assert summary.total_income == Money.zero("USD")
        assert summary.pending_cr_count == 0


class TestRequisitionQueues:
    def test_pending_and_completed(self, make_cr, converter, as_of):
        crs = [
            make_cr(status="Pending"),
            make_cr(status="Approved"),
            make_cr(status="Completed"),
            make_cr(status="Resolved"),
            make_cr(status="Rejected"),
            make_cr(status="Pending", soft_deleted=True),
        ]
        summary = build_finance_summary([], crs, converter, as_of)
        assert isinstance(summary, FinanceSummary)
        assert [cr.status for cr in summary.pending_crs] == ["Pending", "Approved"]
        assert [cr.status for cr in summary.completed_crs] == ["Completed", "Resolved"]
        assert summary.completed_cr_count == 2

    def test_logs_counts_only(self, make_cr, converter, as_of, captured_logs):
        build_finance_summary([], [make_cr(status="Pending")], converter, as_of)
        built = [r for r in captured_logs() if r["message"] == "finance_summary_built"]
        assert built[0]["pending_cr_count"] == 1
