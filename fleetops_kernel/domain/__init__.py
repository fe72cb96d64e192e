"""
Pure domain layer.

This module contains value objects and read-only records with NO
dependencies on:
- The remote store or any other I/O
- Wall-clock time (except SystemClock)

All domain objects are immutable and deterministic.
"""

from fleetops_kernel.domain.clock import Clock, FixedClock, SystemClock
from fleetops_kernel.domain.currency import CurrencyInfo, CurrencyRegistry
from fleetops_kernel.domain.records import (
    Booking,
    BookingStatus,
    CashRequisition,
    CRStatus,
    FinancialTransaction,
    Repair,
    SafariBooking,
    TransactionType,
    Vehicle,
    VehicleStatus,
    parse_timestamp,
)
from fleetops_kernel.domain.values import Currency, ExchangeRateTable, Money, to_decimal

__all__ = [
    # Value objects
    "Currency",
    "Money",
    "ExchangeRateTable",
    "to_decimal",
    "CurrencyInfo",
    "CurrencyRegistry",
    # Records
    "Vehicle",
    "VehicleStatus",
    "Booking",
    "BookingStatus",
    "CashRequisition",
    "CRStatus",
    "FinancialTransaction",
    "TransactionType",
    "SafariBooking",
    "Repair",
    "parse_timestamp",
    # Clock
    "Clock",
    "SystemClock",
    "FixedClock",
]
