"""
Dashboard Configuration Schema.

Defines the classifier rule tables, the base currency, fallback rates and
widget limits used by the dashboard aggregation. The defaults mirror
``fleetops_config/sets/default.yaml``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Self

from fleetops_config.schema import ClassifierDef, FleetOpsConfiguration
from fleetops_engines.classification import (
    CAPACITY_RULES,
    EXPENSE_CATEGORY_RULES,
    KeywordRule,
    RuleTable,
)
from fleetops_kernel.domain.currency import CurrencyRegistry
from fleetops_kernel.logging_config import get_logger

logger = get_logger("modules.dashboard.config")


def _default_fallback_rates() -> dict[str, Decimal]:
    return {"USD": Decimal("1"), "UGX": Decimal("3670"), "KES": Decimal("130")}


@dataclass
class DashboardConfig:
    """
    Configuration schema for the dashboard module.

    Controls expense-category and capacity normalization, the base
    currency and the recent-bookings widget size.
    """

    base_currency: str = "USD"

    # Used when the exchange_rates feed has no row for a currency
    fallback_rates: dict[str, Decimal] = field(default_factory=_default_fallback_rates)

    expense_categories: RuleTable = EXPENSE_CATEGORY_RULES
    vehicle_capacity: RuleTable = CAPACITY_RULES

    recent_bookings_limit: int = 10

    def __post_init__(self):
        if self.recent_bookings_limit < 0:
            raise ValueError("recent_bookings_limit cannot be negative")
        if not CurrencyRegistry.is_well_formed(self.base_currency):
            raise ValueError("base_currency must be a 3-letter currency code")

    @classmethod
    def with_defaults(cls) -> Self:
        """Create config with standard defaults."""
        logger.info("dashboard_config_created_with_defaults")
        return cls()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create config from dictionary."""
        data = dict(data)
        for key in ("expense_categories", "vehicle_capacity"):
            if key in data and isinstance(data[key], dict):
                table = data[key]
                data[key] = RuleTable.from_dicts(table.get("rules", ()), table["default"])
        if "fallback_rates" in data:
            data["fallback_rates"] = {
                str(code).upper(): Decimal(str(rate))
                for code, rate in data["fallback_rates"].items()
            }
        logger.info(
            "dashboard_config_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        return cls(**data)

    @classmethod
    def from_configuration(cls, config: FleetOpsConfiguration) -> Self:
        """Translate the loaded YAML configuration into dashboard settings."""
        logger.info(
            "dashboard_config_from_configuration",
            extra={"config_id": config.config_id, "checksum": config.checksum},
        )
        return cls(
            base_currency=config.currency.base,
            fallback_rates=config.currency.fallback_dict(),
            expense_categories=_rule_table(config.expense_categories),
            vehicle_capacity=_rule_table(config.vehicle_capacity),
            recent_bookings_limit=config.recent_bookings_limit,
        )


def _rule_table(definition: ClassifierDef) -> RuleTable:
    return RuleTable(
        rules=tuple(
            KeywordRule(rule.value, contains=rule.contains, equals=rule.equals)
            for rule in definition.rules
        ),
        default=definition.default,
    )
