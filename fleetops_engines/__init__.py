"""
Module: fleetops_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines. This is the canonical import surface for
    fleetops_modules.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import fleetops_kernel (and sibling engine modules).
    MUST NOT import fleetops_modules, fleetops_config or fleetops_ingestion.

Invariants enforced:
    - Purity: engines NEVER call ``datetime.now()`` or ``date.today()``.
      Dates are passed in as explicit parameters.
    - Decimal-only arithmetic: all monetary amounts are Money.
    - Determinism: identical inputs always produce identical outputs.

Usage:
    from fleetops_engines import CurrencyConverter, reconcile_expenses
    from fleetops_engines import ChartWindow, TimeWindowMode
"""

from fleetops_engines.classification import (
    CAPACITY_RULES,
    EXPENSE_CATEGORY_RULES,
    KeywordRule,
    RuleTable,
)
from fleetops_engines.conversion import CurrencyConverter
from fleetops_engines.eligibility import (
    has_outstanding_balance,
    is_active_booking,
    is_revenue_eligible,
    is_valid_expense_cr,
    outstanding_balance,
    safari_profit,
)
from fleetops_engines.reconciliation import (
    ExpenseReconciliation,
    cr_base_amount,
    is_cr_linked,
    reconcile_expenses,
    valid_cr_numbers,
)
from fleetops_engines.time_window import (
    ChartWindow,
    DashboardPeriod,
    TimeWindowMode,
    month_bounds,
    quarter_months,
)
from fleetops_engines.tracer import traced_engine

__all__ = [
    "CAPACITY_RULES",
    "EXPENSE_CATEGORY_RULES",
    "KeywordRule",
    "RuleTable",
    "CurrencyConverter",
    "has_outstanding_balance",
    "is_active_booking",
    "is_revenue_eligible",
    "is_valid_expense_cr",
    "outstanding_balance",
    "safari_profit",
    "ExpenseReconciliation",
    "cr_base_amount",
    "is_cr_linked",
    "reconcile_expenses",
    "valid_cr_numbers",
    "ChartWindow",
    "DashboardPeriod",
    "TimeWindowMode",
    "month_bounds",
    "quarter_months",
    "traced_engine",
]
