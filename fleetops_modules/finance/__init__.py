"""
Finance Module (``fleetops_modules.finance``).

Read-only summary of the ledger and the cash-requisition queues for the
finance screen.
"""

from fleetops_modules.finance.models import FinanceSummary
from fleetops_modules.finance.summary import build_finance_summary

__all__ = [
    "FinanceSummary",
    "build_finance_summary",
]
