"""
FleetOpsConfiguration schema.

The canonical data model for engine configuration. YAML files are parsed
into these types by the loader; ``get_active_config()`` hands the result to
callers. Everything here is plain frozen data with no executable logic:
the engines build their rule tables from these definitions.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class KeywordRuleDef:
    """One ordered classifier rule as authored in YAML."""

    value: str
    contains: tuple[str, ...] = ()
    equals: tuple[str, ...] = ()


@dataclass(frozen=True)
class ClassifierDef:
    """An ordered rule list plus the value used when nothing matches."""

    default: str
    rules: tuple[KeywordRuleDef, ...] = ()


@dataclass(frozen=True)
class CurrencyDef:
    base: str
    # (code, units per one base unit), sorted by code
    fallback_rates: tuple[tuple[str, Decimal], ...] = ()

    def fallback_dict(self) -> dict[str, Decimal]:
        return dict(self.fallback_rates)


@dataclass(frozen=True)
class FleetOpsConfiguration:
    """
    Complete, validated engine configuration.

    ``checksum`` is the SHA-256 of the canonical JSON of the source
    document, so two loads of the same YAML always compare equal.
    """

    config_id: str
    version: int
    currency: CurrencyDef
    expense_categories: ClassifierDef
    vehicle_capacity: ClassifierDef
    recent_bookings_limit: int = 10
    description: str = ""
    checksum: str = ""
