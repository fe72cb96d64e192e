"""
fleetops_config -- single public entrypoint for engine configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  No other component reads configuration
    files directly.

Architecture position:
    Configuration -- YAML-driven settings.  Sits above ``fleetops_kernel``
    and below ``fleetops_modules``.  The kernel and engines MUST NEVER
    import from ``fleetops_config``; modules translate the configuration
    into engine inputs (see ``DashboardConfig.from_configuration``).

Invariants enforced:
    - Single entrypoint: all runtime config flows through ``get_active_config()``.
    - Deterministic loading: the same YAML always produces the same
      ``FleetOpsConfiguration`` and checksum.

Failure modes:
    - ``FileNotFoundError`` -- the configuration file does not exist.
    - ``yaml.YAMLError`` -- the file is not valid YAML.
    - ``ConfigurationError`` -- a required key is missing or invalid.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``FLEETOPS_CONFIG_TRACE`` log entry containing the config_id, version
    and checksum, which ties each dashboard computation back to the exact
    configuration that governed it.
"""

from __future__ import annotations

import dataclasses
from pathlib import Path

from fleetops_config.loader import compute_checksum, load_yaml_file, parse_configuration
from fleetops_config.schema import (
    ClassifierDef,
    CurrencyDef,
    FleetOpsConfiguration,
    KeywordRuleDef,
)
from fleetops_kernel.logging_config import get_logger

_logger = get_logger("config")

DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "default.yaml"

__all__ = [
    "ClassifierDef",
    "CurrencyDef",
    "DEFAULT_CONFIG_PATH",
    "FleetOpsConfiguration",
    "KeywordRuleDef",
    "get_active_config",
]


def get_active_config(config_path: Path | str | None = None) -> FleetOpsConfiguration:
    """The ONLY public configuration entrypoint.

    Guarantees:
        - The returned configuration has passed parsing and validation.
        - ``checksum`` is the SHA-256 of the canonical source document.
        - A ``FLEETOPS_CONFIG_TRACE`` log entry is emitted on every
          successful call.

    Non-goals:
        - Does NOT cache; callers hold the returned object for as long as
          they need it.

    Args:
        config_path: Override path to a YAML file. Defaults to
            fleetops_config/sets/default.yaml.
    """
    path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH
    data = load_yaml_file(path)
    config = parse_configuration(data, source=path.name)
    config = dataclasses.replace(config, checksum=compute_checksum(data))

    _logger.info(
        "FLEETOPS_CONFIG_TRACE",
        extra={
            "trace_type": "FLEETOPS_CONFIG_TRACE",
            "config_id": config.config_id,
            "config_version": config.version,
            "checksum": config.checksum,
            "base_currency": config.currency.base,
            "fallback_currency_count": len(config.currency.fallback_rates),
        },
    )
    return config
