"""
JSON-friendly rendering of dashboard results.

ZERO I/O. Turns the frozen result tree into plain dicts, lists and
strings so it can be serialized or handed to a presentation layer.
"""

from __future__ import annotations

import dataclasses
from datetime import date
from decimal import Decimal
from enum import Enum

from fleetops_kernel.domain.values import Currency, Money


def render_to_dict(obj: object) -> dict | list | str | int | float | bool | None:
    """
    Convert any dashboard dataclass to a plain dict for JSON serialization.

    Handles:
    - Money -> {"amount": str, "currency": code}
    - Currency -> code
    - Decimal -> str (preserving precision)
    - date / datetime -> ISO format string
    - Enum -> .value
    - Nested frozen dataclasses -> nested dicts
    - Tuples -> lists
    - None preserved
    """
    if obj is None:
        return None
    if isinstance(obj, Money):
        return {"amount": str(obj.amount), "currency": obj.currency.code}
    if isinstance(obj, Currency):
        return obj.code
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, date):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (list, tuple)):
        return [render_to_dict(item) for item in obj]
    if isinstance(obj, dict):
        return {str(k): render_to_dict(v) for k, v in obj.items()}
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {
            f.name: render_to_dict(getattr(obj, f.name))
            for f in dataclasses.fields(obj)
        }
    if isinstance(obj, (str, int, float, bool)):
        return obj
    return str(obj)


def render_rounded(obj: object) -> dict | list | str | int | float | bool | None:
    """Like ``render_to_dict`` but with Money rounded to minor units first."""
    if isinstance(obj, Money):
        return render_to_dict(obj.round())
    if isinstance(obj, (list, tuple)):
        return [render_rounded(item) for item in obj]
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {
            f.name: render_rounded(getattr(obj, f.name))
            for f in dataclasses.fields(obj)
        }
    return render_to_dict(obj)
