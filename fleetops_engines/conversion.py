"""
fleetops_engines.conversion -- Currency conversion against a rate snapshot.

Responsibility:
    Moves Money between the base currency and any currency held by an
    ExchangeRateTable, and on to the display currency chosen for one
    dashboard computation.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import fleetops_kernel.

Invariants enforced:
    - ``to_base(m) = m.amount / rate[m.currency]``;
      ``from_base(m, c) = m.amount * rate[c]``. The base rate is 1.
    - No rounding at this layer. ``from_base(to_base(x))`` returns x within
      the currency's rounding tolerance.
    - An unknown currency raises UnknownCurrencyError; there is no
      default rate.

Failure modes:
    - UnknownCurrencyError (from ExchangeRateTable.rate_for()) for codes
      absent from the table, including the display currency at
      construction time.
    - CurrencyMismatchError from from_base() when the input is not in the
      base currency.

Usage:
    from fleetops_engines.conversion import CurrencyConverter

    converter = CurrencyConverter(rates, display_currency="UGX")
    base = converter.to_base(Money.of("100", "KES"))
    shown = converter.to_display(base)
"""

from __future__ import annotations

from collections.abc import Iterable

from fleetops_kernel.domain.values import Currency, ExchangeRateTable, Money
from fleetops_kernel.exceptions import CurrencyMismatchError


class CurrencyConverter:
    """
    Converts Money using one immutable rate snapshot.

    Contract:
        Every conversion goes through the base currency. Instances hold no
        mutable state and can be shared between charts.

    Guarantees:
        - Outputs are unrounded Decimal Money.
        - The display currency is validated against the table up front, so
          a bad selector fails before any aggregation starts.
    """

    def __init__(self, rates: ExchangeRateTable, display_currency: str | Currency | None = None):
        self._rates = rates
        if display_currency is None:
            display = rates.base
        elif isinstance(display_currency, Currency):
            display = display_currency
        else:
            display = Currency(display_currency)
        rates.rate_for(display)
        self._display = display

    @property
    def rates(self) -> ExchangeRateTable:
        return self._rates

    @property
    def base_currency(self) -> Currency:
        return self._rates.base

    @property
    def display_currency(self) -> Currency:
        return self._display

    def to_base(self, money: Money) -> Money:
        """Convert any table currency into the base currency."""
        if money.currency == self.base_currency:
            return money
        rate = self._rates.rate_for(money.currency)
        return Money(money.amount / rate, self.base_currency)

    def from_base(self, money: Money, currency: str | Currency) -> Money:
        """Convert a base-currency amount into ``currency``."""
        if money.currency != self.base_currency:
            raise CurrencyMismatchError(money.currency.code, self.base_currency.code)
        target = currency if isinstance(currency, Currency) else Currency(currency)
        if target == self.base_currency:
            return money
        return Money(money.amount * self._rates.rate_for(target), target)

    def to_display(self, money: Money) -> Money:
        """Convert any table currency into the display currency."""
        return self.from_base(self.to_base(money), self._display)

    def sum_to_base(self, items: Iterable[Money]) -> Money:
        return Money.total((self.to_base(m) for m in items), self.base_currency)

    def zero_base(self) -> Money:
        return Money.zero(self.base_currency)

    def in_every_currency(self, money: Money) -> dict[str, Money]:
        """Express a base amount in every currency of the table, keyed by code."""
        return {code: self.from_base(money, code) for code in self._rates.codes}
