"""
Configuration Loader (``fleetops_config.loader``).

Responsibility
--------------
Loads a YAML configuration file and parses it into the typed
``fleetops_config.schema`` dataclasses.  The single public entry point for
runtime config is ``fleetops_config.get_active_config()``; this module is
its internal tooling.

Architecture position
---------------------
**Config layer**.  Depends on ``fleetops_kernel`` for value parsing and
exceptions only.  No dependency on engines or modules.

Invariants enforced
-------------------
* Required keys are never defaulted silently: a missing key raises
  ``ConfigurationError`` naming the key.
* Fallback rates are Decimal and positive; the base currency is 1.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing or invalid keys  -> ``ConfigurationError``.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Mapping
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from fleetops_config.schema import (
    ClassifierDef,
    CurrencyDef,
    FleetOpsConfiguration,
    KeywordRuleDef,
)
from fleetops_kernel.domain.currency import CurrencyRegistry
from fleetops_kernel.domain.values import to_decimal
from fleetops_kernel.exceptions import ConfigurationError


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _require(data: Mapping[str, Any], key: str, source: str) -> Any:
    if not isinstance(data, Mapping) or key not in data or data[key] is None:
        raise ConfigurationError(source, f"missing required key '{key}'")
    return data[key]


def _terms(value: Any, source: str, key: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str) or not isinstance(value, (list, tuple)):
        raise ConfigurationError(source, f"'{key}' must be a list of strings")
    return tuple(str(term) for term in value)


def parse_keyword_rule(data: Mapping[str, Any], source: str) -> KeywordRuleDef:
    """Parse one classifier rule; it needs a value and at least one term."""
    value = str(_require(data, "value", source)).strip()
    contains = _terms(data.get("contains"), source, "contains")
    equals = _terms(data.get("equals"), source, "equals")
    if not value:
        raise ConfigurationError(source, "rule value must be non-empty")
    if not contains and not equals:
        raise ConfigurationError(source, f"rule '{value}' has no contains/equals terms")
    return KeywordRuleDef(value=value, contains=contains, equals=equals)


def parse_classifier(data: Mapping[str, Any], source: str) -> ClassifierDef:
    default = str(_require(data, "default", source)).strip()
    rules = data.get("rules") or []
    if not isinstance(rules, list):
        raise ConfigurationError(source, "'rules' must be a list")
    return ClassifierDef(
        default=default,
        rules=tuple(parse_keyword_rule(rule, source) for rule in rules),
    )


def parse_currency(data: Mapping[str, Any], source: str) -> CurrencyDef:
    base = str(_require(data, "base", source)).strip().upper()
    if not CurrencyRegistry.is_well_formed(base):
        raise ConfigurationError(source, f"base currency {base!r} is not a currency code")

    raw_rates = data.get("fallback_rates") or {}
    if not isinstance(raw_rates, Mapping):
        raise ConfigurationError(source, "'fallback_rates' must be a mapping")
    rates: dict[str, Decimal] = {}
    for code, rate in raw_rates.items():
        normalized = str(code).strip().upper()
        if not CurrencyRegistry.is_well_formed(normalized):
            raise ConfigurationError(source, f"fallback rate key {code!r} is not a currency code")
        try:
            value = to_decimal(rate)
        except (InvalidOperation, ValueError, TypeError) as e:
            raise ConfigurationError(source, f"fallback rate for {normalized} is not numeric") from e
        if value <= 0:
            raise ConfigurationError(source, f"fallback rate for {normalized} must be positive")
        rates[normalized] = value
    rates[base] = Decimal("1")
    return CurrencyDef(base=base, fallback_rates=tuple(sorted(rates.items())))


def parse_configuration(data: Mapping[str, Any], source: str) -> FleetOpsConfiguration:
    """Parse a whole configuration document (without checksum)."""
    currency = parse_currency(_require(data, "currency", source), source)

    dashboard = data.get("dashboard") or {}
    limit = dashboard.get("recent_bookings_limit", 10)
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 0:
        raise ConfigurationError(source, "'recent_bookings_limit' must be a non-negative integer")

    classifiers = _require(data, "classifiers", source)
    version = _require(data, "version", source)
    if isinstance(version, bool) or not isinstance(version, int):
        raise ConfigurationError(source, "'version' must be an integer")

    return FleetOpsConfiguration(
        config_id=str(_require(data, "config_id", source)),
        version=version,
        currency=currency,
        expense_categories=parse_classifier(
            _require(classifiers, "expense_categories", source), source
        ),
        vehicle_capacity=parse_classifier(
            _require(classifiers, "vehicle_capacity", source), source
        ),
        recent_bookings_limit=limit,
        description=str(data.get("description") or ""),
    )


def compute_checksum(data: Mapping[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
