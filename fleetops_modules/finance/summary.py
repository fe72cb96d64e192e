"""
Pure finance-screen summary.

Totals the ledger (financial transactions) to date and splits the cash
requisitions into the pending and completed queues. ZERO I/O; ``as_of`` is
passed in.

Unlike the dashboard KPIs this view does NOT reconcile CRs against the
ledger: it reports the ledger as recorded. Cancelled transactions are
ignored. All conversion goes through the live rate snapshot.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from fleetops_engines.conversion import CurrencyConverter
from fleetops_engines.tracer import traced_engine
from fleetops_kernel.domain.records import (
    CashRequisition,
    CRStatus,
    FinancialTransaction,
    TransactionType,
)
from fleetops_kernel.domain.values import Money
from fleetops_kernel.logging_config import get_logger
from fleetops_modules.finance.models import FinanceSummary

logger = get_logger("modules.finance.summary")

PENDING_CR_STATUSES = frozenset({CRStatus.PENDING.value, CRStatus.APPROVED.value})
COMPLETED_CR_STATUSES = frozenset({CRStatus.COMPLETED.value, CRStatus.RESOLVED.value})


def _display_total(
    transactions: Iterable[FinancialTransaction], converter: CurrencyConverter
) -> Money:
    return converter.to_display(converter.sum_to_base(t.money for t in transactions))


@traced_engine("finance_summary", "1.0", fingerprint_fields=("as_of",))
def build_finance_summary(
    transactions: Iterable[FinancialTransaction],
    cash_requisitions: Iterable[CashRequisition],
    converter: CurrencyConverter,
    as_of: datetime,
) -> FinanceSummary:
    live = [t for t in transactions if not t.is_cancelled]
    income = [t for t in live if t.transaction_type == TransactionType.INCOME.value]
    expenses = [t for t in live if t.transaction_type == TransactionType.EXPENSE.value]

    def this_month(t: FinancialTransaction) -> bool:
        d = t.transaction_date
        return d is not None and d.year == as_of.year and d.month == as_of.month

    def this_year(t: FinancialTransaction) -> bool:
        d = t.transaction_date
        return d is not None and d.year == as_of.year

    active_crs = [cr for cr in cash_requisitions if not cr.soft_deleted]
    summary = FinanceSummary(
        income_mtd=_display_total(filter(this_month, income), converter),
        income_ytd=_display_total(filter(this_year, income), converter),
        expenses_mtd=_display_total(filter(this_month, expenses), converter),
        expenses_ytd=_display_total(filter(this_year, expenses), converter),
        total_income=_display_total(income, converter),
        total_expenses=_display_total(expenses, converter),
        pending_crs=tuple(cr for cr in active_crs if cr.status in PENDING_CR_STATUSES),
        completed_crs=tuple(cr for cr in active_crs if cr.status in COMPLETED_CR_STATUSES),
    )

    logger.info(
        "finance_summary_built",
        extra={
            "income_count": len(income),
            "expense_count": len(expenses),
            "pending_cr_count": summary.pending_cr_count,
            "completed_cr_count": summary.completed_cr_count,
        },
    )
    return summary
