"""
Finance Summary Models (``fleetops_modules.finance.models``).

Frozen value objects for the finance screen: ledger totals to date and the
cash-requisition work queues. Monetary fields are display-currency Money,
unrounded.
"""

from __future__ import annotations

from dataclasses import dataclass

from fleetops_kernel.domain.records import CashRequisition
from fleetops_kernel.domain.values import Money


@dataclass(frozen=True)
class FinanceSummary:
    """Ledger totals plus pending and completed requisitions."""

    income_mtd: Money
    income_ytd: Money
    expenses_mtd: Money
    expenses_ytd: Money
    total_income: Money
    total_expenses: Money
    pending_crs: tuple[CashRequisition, ...]
    completed_crs: tuple[CashRequisition, ...]

    @property
    def net_profit_mtd(self) -> Money:
        return self.income_mtd - self.expenses_mtd

    @property
    def net_profit_ytd(self) -> Money:
        return self.income_ytd - self.expenses_ytd

    @property
    def pending_cr_count(self) -> int:
        return len(self.pending_crs)

    @property
    def completed_cr_count(self) -> int:
        return len(self.completed_crs)
