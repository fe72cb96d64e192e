"""
fleetops_engines.classification -- Ordered keyword rule tables.

Responsibility:
    Normalizes free text into a closed set of canonical values: expense
    categories ("fuel top-up" -> Fleet Supplies) and vehicle capacity
    classes ("7_seater" -> 7 Seater). Each table is an explicit ordered list
    of ``(predicate, value)`` rules so the tie-break order is visible and
    testable.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - First matching rule wins; rule order is the only tie-break.
    - Matching is case-insensitive on the stripped text.
    - Every input maps to exactly one value; no match yields the default.

Failure modes:
    - ValueError when a rule has neither ``contains`` nor ``equals`` terms
      or an empty value.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

# Canonical expense categories
FLEET_SUPPLIES = "Fleet Supplies"
ADMIN_COSTS = "Admin Costs"
SAFARI_EXPENSE = "Safari Expense"
PETTY_CASH = "Petty Cash"
OPERATING_EXPENSE = "Operating Expense"

# Canonical capacity classes
SEVEN_SEATER = "7 Seater"
FIVE_SEATER = "5 Seater"
OTHER_CAPACITY = "Other"


@dataclass(frozen=True)
class KeywordRule:
    """Matches when the text contains any ``contains`` term or equals any ``equals`` term."""

    value: str
    contains: tuple[str, ...] = ()
    equals: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.value:
            raise ValueError("KeywordRule value must be non-empty")
        if not self.contains and not self.equals:
            raise ValueError(f"KeywordRule {self.value!r} has no terms")
        object.__setattr__(self, "contains", tuple(t.lower() for t in self.contains))
        object.__setattr__(self, "equals", tuple(t.lower() for t in self.equals))

    def matches(self, normalized: str) -> bool:
        if normalized in self.equals:
            return True
        return any(term in normalized for term in self.contains)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> KeywordRule:
        return cls(
            value=str(data.get("value", "")),
            contains=tuple(str(t) for t in data.get("contains", ()) or ()),
            equals=tuple(str(t) for t in data.get("equals", ()) or ()),
        )


@dataclass(frozen=True)
class RuleTable:
    """
    Ordered classifier.

    Contract:
        ``classify(text)`` walks ``rules`` in order and returns the value of
        the first rule that matches, else ``default``.
    """

    rules: tuple[KeywordRule, ...]
    default: str

    def classify(self, text: str | None) -> str:
        normalized = (text or "").strip().lower()
        if not normalized:
            return self.default
        for rule in self.rules:
            if rule.matches(normalized):
                return rule.value
        return self.default

    def __call__(self, text: str | None) -> str:
        return self.classify(text)

    @property
    def values(self) -> tuple[str, ...]:
        """All values the table can produce, rule order first, default last."""
        seen: list[str] = []
        for rule in self.rules:
            if rule.value not in seen:
                seen.append(rule.value)
        if self.default not in seen:
            seen.append(self.default)
        return tuple(seen)

    @classmethod
    def from_dicts(cls, rules: Iterable[Mapping[str, Any]], default: str) -> RuleTable:
        return cls(rules=tuple(KeywordRule.from_dict(r) for r in rules), default=default)


EXPENSE_CATEGORY_RULES = RuleTable(
    rules=(
        KeywordRule(FLEET_SUPPLIES, contains=("fleet", "vehicle", "repair", "maintenance", "fuel")),
        KeywordRule(ADMIN_COSTS, contains=("admin", "office", "supplies", "utilities", "rent")),
        KeywordRule(SAFARI_EXPENSE, contains=("safari", "tour", "accommodation", "park fees")),
        KeywordRule(PETTY_CASH, contains=("petty", "cash")),
    ),
    default=OPERATING_EXPENSE,
)

# "7" is checked before "5" so "7 seater (5 doors)" is a 7 Seater
CAPACITY_RULES = RuleTable(
    rules=(
        KeywordRule(SEVEN_SEATER, contains=("7",), equals=("large", "suv")),
        KeywordRule(FIVE_SEATER, contains=("5",), equals=("medium", "sedan")),
    ),
    default=OTHER_CAPACITY,
)
