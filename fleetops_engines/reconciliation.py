"""
fleetops_engines.reconciliation -- Expense de-duplication across two ledgers.

Responsibility:
    Expenses are recorded twice: once as a structured cash requisition (CR)
    and again as a free-form ledger transaction written when the CR is paid
    out. This engine sums the valid CRs plus only those expense
    transactions that are NOT the payout record of a CR.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Depends on fleetops_engines.conversion, .eligibility and
    .classification.

Invariants enforced:
    - A CR-linked transaction is never summed. A transaction is CR-linked
      when ANY of the following holds:
        * its reference_number exactly matches a valid CR number;
        * its reference_number starts with "CR-";
        * its description contains ``CR-dddd-dddd`` anywhere.
    - The description match is permissive and can misfire both
      ways (a passing mention excludes a real expense; "CR 2024/0001" is
      missed) and is a known source of reconciliation drift.
    - Cancelled transactions never count.
    - A CR's amount is its precomputed ``amount_usd`` when present and
      non-zero, else its total_cost converted to base.
    - All outputs are base-currency Money, unrounded.

Failure modes:
    - UnknownCurrencyError propagates from the converter; the caller's
      whole computation aborts.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from fleetops_engines.classification import EXPENSE_CATEGORY_RULES, OPERATING_EXPENSE
from fleetops_engines.conversion import CurrencyConverter
from fleetops_engines.eligibility import is_valid_expense_cr
from fleetops_engines.tracer import traced_engine
from fleetops_kernel.domain.records import (
    CashRequisition,
    FinancialTransaction,
    TransactionType,
)
from fleetops_kernel.domain.values import Money
from fleetops_kernel.logging_config import get_logger

logger = get_logger("engines.reconciliation")

CR_NUMBER_PATTERN = re.compile(r"CR-\d{4}-\d{4}")
CR_REFERENCE_PREFIX = "CR-"
AMOUNT_USD_CURRENCY = "USD"


@dataclass(frozen=True)
class ExpenseReconciliation:
    """
    Reconciled expense totals in the base currency.

    ``by_category`` is a tuple of ``(category, amount)`` pairs sorted by
    category name; categories with no contribution are absent.
    """

    cr_total: Money
    transaction_total: Money
    by_category: tuple[tuple[str, Money], ...]
    counted_cr_ids: tuple[str, ...]
    counted_transaction_ids: tuple[str, ...]
    linked_transaction_ids: tuple[str, ...]

    @property
    def total(self) -> Money:
        return self.cr_total + self.transaction_total

    def category_amount(self, category: str) -> Money:
        for name, amount in self.by_category:
            if name == category:
                return amount
        return Money.zero(self.cr_total.currency)


def valid_cr_numbers(cash_requisitions: Iterable[CashRequisition]) -> frozenset[str]:
    """CR numbers of every CR that counts as an expense."""
    return frozenset(
        cr.cr_number for cr in cash_requisitions if cr.cr_number and is_valid_expense_cr(cr)
    )


def is_cr_linked(transaction: FinancialTransaction, known_cr_numbers: frozenset[str]) -> bool:
    reference = transaction.reference_number or ""
    if reference and reference in known_cr_numbers:
        return True
    if reference.startswith(CR_REFERENCE_PREFIX):
        return True
    return bool(CR_NUMBER_PATTERN.search(transaction.description or ""))


def is_countable_expense(transaction: FinancialTransaction) -> bool:
    return (
        transaction.transaction_type == TransactionType.EXPENSE.value
        and not transaction.is_cancelled
    )


def cr_base_amount(cr: CashRequisition, converter: CurrencyConverter) -> Money:
    if cr.amount_usd:
        return converter.to_base(Money(cr.amount_usd, AMOUNT_USD_CURRENCY))
    return converter.to_base(cr.cost)


@traced_engine(
    "reconciliation",
    "1.0",
    fingerprint_fields=("cash_requisitions", "transactions"),
)
def reconcile_expenses(
    cash_requisitions: Iterable[CashRequisition],
    transactions: Iterable[FinancialTransaction],
    converter: CurrencyConverter,
    categorize: Callable[[str | None], str] = EXPENSE_CATEGORY_RULES,
    known_cr_numbers: frozenset[str] | None = None,
) -> ExpenseReconciliation:
    """
    Sum valid CRs plus unlinked expense transactions, in base currency.

    Args:
        cash_requisitions: CRs in scope. Invalid CRs are ignored.
        transactions: Ledger transactions in scope. Only non-cancelled
            expense transactions are considered.
        converter: Rate snapshot for base conversion.
        categorize: Maps free-text categories to canonical ones.
        known_cr_numbers: CR numbers used for the exact reference match.
            Defaults to the valid CRs in ``cash_requisitions``.
    """
    crs = [cr for cr in cash_requisitions if is_valid_expense_cr(cr)]
    if known_cr_numbers is None:
        known_cr_numbers = valid_cr_numbers(crs)

    base = converter.base_currency
    categories: dict[str, Money] = {}

    cr_total = Money.zero(base)
    for cr in crs:
        amount = cr_base_amount(cr, converter)
        cr_total = cr_total + amount
        category = categorize(cr.expense_category)
        categories[category] = categories.get(category, Money.zero(base)) + amount

    transaction_total = Money.zero(base)
    counted: list[str] = []
    linked: list[str] = []
    for txn in transactions:
        if not is_countable_expense(txn):
            continue
        if is_cr_linked(txn, known_cr_numbers):
            linked.append(txn.id)
            continue
        amount = converter.to_base(txn.money)
        transaction_total = transaction_total + amount
        counted.append(txn.id)
        category = categorize(txn.category or OPERATING_EXPENSE)
        categories[category] = categories.get(category, Money.zero(base)) + amount

    logger.debug(
        "expenses_reconciled",
        extra={
            "cr_count": len(crs),
            "transaction_count": len(counted),
            "linked_transaction_count": len(linked),
        },
    )

    return ExpenseReconciliation(
        cr_total=cr_total,
        transaction_total=transaction_total,
        by_category=tuple(sorted(categories.items())),
        counted_cr_ids=tuple(cr.id for cr in crs),
        counted_transaction_ids=tuple(counted),
        linked_transaction_ids=tuple(linked),
    )
