"""
Values -- Immutable, self-validating monetary value objects.

Responsibility:
    Provides the value types every dashboard computation is written in:
    Currency, Money and ExchangeRateTable. A monetary amount is never a bare
    number: it always travels with its currency, so a UGX booking can not be
    silently summed with a USD ledger entry.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by every other layer. No outward dependencies except
    fleetops_kernel.domain.currency and fleetops_kernel.exceptions.

Invariants enforced:
    - Amounts and rates are Decimal, never float. Floats coming from JSON
      are converted through ``str()`` so 0.1 stays 0.1.
    - Money arithmetic and comparison require the same currency.
    - A rate table lookup for a code it does not hold raises
      UnknownCurrencyError. There is no default rate.
    - The base currency's rate is always exactly 1.

Failure modes:
    - InvalidCurrencyError for codes that are not three letters.
    - CurrencyMismatchError when arithmetic mixes currencies.
    - InvalidExchangeRateError for zero, negative or non-numeric rates.
    - UnknownCurrencyError from ExchangeRateTable.rate_for().
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from fleetops_kernel.domain.currency import CurrencyRegistry
from fleetops_kernel.exceptions import (
    CurrencyMismatchError,
    InvalidCurrencyError,
    InvalidExchangeRateError,
    UnknownCurrencyError,
)
from fleetops_kernel.logging_config import get_logger

logger = get_logger("domain.values")


def to_decimal(value: Any) -> Decimal:
    """
    Convert a raw numeric value to Decimal.

    Floats go through ``str()`` so binary noise does not leak in.

    Raises:
        InvalidOperation / ValueError / TypeError for non-numeric input.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError("bool is not a monetary amount")
    if isinstance(value, (int, float)):
        result = Decimal(str(value))
    elif isinstance(value, str):
        result = Decimal(value.strip())
    else:
        raise TypeError(f"Cannot convert {type(value).__name__} to Decimal")
    if not result.is_finite():
        raise InvalidOperation(f"Non-finite amount: {value!r}")
    return result


@dataclass(frozen=True, slots=True)
class Currency:
    """
    Currency code value object.

    Contract:
        Wraps a three-letter code, normalized to upper case. Whether the
        code can be converted is decided by the rate table, not here.

    Guarantees:
        - Immutable and hashable.
        - ``code`` is always three upper-case ASCII letters.
    """

    code: str

    def __post_init__(self) -> None:
        if not CurrencyRegistry.is_well_formed(self.code):
            raise InvalidCurrencyError(self.code)
        object.__setattr__(self, "code", self.code.strip().upper())

    @property
    def decimal_places(self) -> int:
        return CurrencyRegistry.get_decimal_places(self.code)

    @property
    def rounding_tolerance(self) -> Decimal:
        return CurrencyRegistry.get_rounding_tolerance(self.code)

    def __str__(self) -> str:
        return self.code

    def __repr__(self) -> str:
        return f"Currency({self.code!r})"


@dataclass(frozen=True, slots=True)
class Money:
    """
    Monetary amount value object.

    Contract:
        Pairs a Decimal amount with its Currency. They are never separated.

    Guarantees:
        - Immutable and hashable.
        - ``amount`` is always a Decimal.
        - No silent currency mixing in addition, subtraction or comparison.

    Non-goals:
        - Does NOT convert between currencies (see
          ``fleetops_engines.conversion.CurrencyConverter``).
        - Does NOT auto-round; presentation calls ``round()``.
    """

    amount: Decimal
    currency: Currency

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            try:
                object.__setattr__(self, "amount", to_decimal(self.amount))
            except (InvalidOperation, ValueError, TypeError) as e:
                raise ValueError(f"Invalid amount: {self.amount!r}") from e

        if isinstance(self.currency, str):
            object.__setattr__(self, "currency", Currency(self.currency))
        elif not isinstance(self.currency, Currency):
            raise TypeError(f"currency must be Currency or str, got {type(self.currency)}")

    @classmethod
    def of(cls, amount: Decimal | str | int | float, currency: str | Currency) -> Money:
        """Factory accepting raw amounts and currency codes."""
        return cls(amount=amount, currency=currency)  # type: ignore[arg-type]

    @classmethod
    def zero(cls, currency: str | Currency) -> Money:
        return cls(amount=Decimal("0"), currency=currency)  # type: ignore[arg-type]

    @classmethod
    def total(cls, items: Iterable[Money], currency: str | Currency) -> Money:
        """Sum an iterable of Money; an empty iterable sums to zero."""
        result = cls.zero(currency)
        for item in items:
            result = result + item
        return result

    @property
    def is_zero(self) -> bool:
        return self.amount == 0

    @property
    def is_positive(self) -> bool:
        return self.amount > 0

    @property
    def is_negative(self) -> bool:
        return self.amount < 0

    def round(self, rounding: str = ROUND_HALF_UP) -> Money:
        """Round to the currency's minor units. Presentation boundary only."""
        exponent = Decimal(1).scaleb(-self.currency.decimal_places)
        return Money(amount=self.amount.quantize(exponent, rounding=rounding), currency=self.currency)

    def clamp_min_zero(self) -> Money:
        return self if self.amount >= 0 else Money.zero(self.currency)

    def _check_same(self, other: Money) -> None:
        if self.currency != other.currency:
            raise CurrencyMismatchError(self.currency.code, other.currency.code)

    def __add__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_same(other)
        return Money(amount=self.amount + other.amount, currency=self.currency)

    def __sub__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_same(other)
        return Money(amount=self.amount - other.amount, currency=self.currency)

    def __neg__(self) -> Money:
        return Money(amount=-self.amount, currency=self.currency)

    def __mul__(self, factor: Decimal | int) -> Money:
        if isinstance(factor, bool) or not isinstance(factor, (Decimal, int)):
            return NotImplemented
        return Money(amount=self.amount * factor, currency=self.currency)

    def __rmul__(self, factor: Decimal | int) -> Money:
        return self.__mul__(factor)

    def __truediv__(self, divisor: Decimal | int) -> Money:
        if isinstance(divisor, bool) or not isinstance(divisor, (Decimal, int)):
            return NotImplemented
        return Money(amount=self.amount / divisor, currency=self.currency)

    def __lt__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_same(other)
        return self.amount < other.amount

    def __le__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_same(other)
        return self.amount <= other.amount

    def __gt__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_same(other)
        return self.amount > other.amount

    def __ge__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_same(other)
        return self.amount >= other.amount

    def __str__(self) -> str:
        return f"{self.amount} {self.currency.code}"

    def __repr__(self) -> str:
        return f"Money({self.amount!r}, {self.currency!r})"


@dataclass(frozen=True, slots=True)
class ExchangeRateTable:
    """
    Immutable snapshot of live exchange rates.

    Contract:
        Each entry says how many units of a currency buy one unit of the
        base currency (``UGX: 3700`` means 1 USD = 3700 UGX). The table is
        refreshed by an external service; each computation sees one
        snapshot.

    Guarantees:
        - Immutable and hashable; entries are stored sorted by code.
        - The base currency is always present with rate exactly 1.
        - Every rate is a positive Decimal.
        - ``rate_for()`` on an absent code raises UnknownCurrencyError.
    """

    base: Currency
    entries: tuple[tuple[str, Decimal], ...]

    def __post_init__(self) -> None:
        if isinstance(self.base, str):
            object.__setattr__(self, "base", Currency(self.base))
        normalized: dict[str, Decimal] = {}
        for code, rate in self.entries:
            currency = Currency(code)
            try:
                value = to_decimal(rate)
            except (InvalidOperation, ValueError, TypeError) as e:
                raise InvalidExchangeRateError(currency.code, rate) from e
            if value <= 0:
                raise InvalidExchangeRateError(currency.code, rate)
            normalized[currency.code] = value
        normalized[self.base.code] = Decimal("1")
        object.__setattr__(self, "entries", tuple(sorted(normalized.items())))

    @classmethod
    def of(cls, base: str | Currency, rates: Mapping[str, Any]) -> ExchangeRateTable:
        return cls(base=base, entries=tuple(rates.items()))  # type: ignore[arg-type]

    @classmethod
    def from_rate_rows(
        cls,
        rows: Iterable[Mapping[str, Any]],
        fallback: Mapping[str, Any],
        base: str = "USD",
    ) -> ExchangeRateTable:
        """
        Build a table from raw exchange-rate rows.

        Rows are considered newest first (sorted by ``created_at`` when the
        rows carry it); the first usable row per currency wins. Two row
        shapes are accepted: ``from_currency``/``to_currency``/``rate`` where
        ``from_currency`` is the base, and ``currency``/``rate``. Currencies
        with no usable row keep their ``fallback`` rate.
        """
        base_code = Currency(base).code
        ordered = list(rows)
        if any(row.get("created_at") for row in ordered):
            ordered.sort(key=lambda row: _sort_key(row.get("created_at")), reverse=True)

        latest: dict[str, Decimal] = {}
        skipped = 0
        for row in ordered:
            code = _row_currency(row, base_code)
            if code is None or code in latest:
                continue
            try:
                rate = to_decimal(row.get("rate"))
            except (InvalidOperation, ValueError, TypeError):
                skipped += 1
                continue
            if rate <= 0:
                skipped += 1
                continue
            latest[code] = rate

        missing = sorted(set(fallback) - set(latest) - {base_code})
        if missing or skipped:
            logger.warning(
                "exchange_rate_fallback_used",
                extra={"fallback_currencies": missing, "skipped_rows": skipped},
            )

        merged: dict[str, Any] = {code.upper(): rate for code, rate in fallback.items()}
        merged.update(latest)
        return cls.of(base_code, merged)

    @property
    def codes(self) -> tuple[str, ...]:
        return tuple(code for code, _ in self.entries)

    def has(self, currency: str | Currency) -> bool:
        code = currency.code if isinstance(currency, Currency) else str(currency).strip().upper()
        return code in self.codes

    def rate_for(self, currency: str | Currency) -> Decimal:
        """Units of ``currency`` per one base unit."""
        code = currency.code if isinstance(currency, Currency) else str(currency).strip().upper()
        for entry_code, rate in self.entries:
            if entry_code == code:
                return rate
        raise UnknownCurrencyError(code, self.codes)

    def as_dict(self) -> dict[str, Decimal]:
        return dict(self.entries)


def _row_currency(row: Mapping[str, Any], base_code: str) -> str | None:
    from_code = row.get("from_currency")
    to_code = row.get("to_currency")
    if from_code and to_code:
        if str(from_code).strip().upper() != base_code:
            return None
        code = str(to_code)
    elif row.get("currency"):
        code = str(row["currency"])
    else:
        return None
    if not CurrencyRegistry.is_well_formed(code):
        return None
    return code.strip().upper()


def _sort_key(value: Any) -> str:
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value or "")
