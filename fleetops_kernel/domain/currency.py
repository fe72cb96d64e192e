"""Currency -- minor-unit registry and precision-derived rounding."""

from dataclasses import dataclass
from decimal import Decimal
from typing import ClassVar


@dataclass(frozen=True)
class CurrencyInfo:
    """Minor-unit information about a single currency."""

    code: str
    decimal_places: int
    name: str

    @property
    def rounding_tolerance(self) -> Decimal:
        """Smallest representable unit, e.g. 0.01 for USD, 1 for UGX."""
        return Decimal(1).scaleb(-self.decimal_places)

    @property
    def quantize_exponent(self) -> Decimal:
        """Exponent for Decimal.quantize() at this currency's precision."""
        return Decimal(1).scaleb(-self.decimal_places)


class CurrencyRegistry:
    """
    Minor units for the currencies the business trades in.

    The registry only drives display rounding. It does not decide whether a
    currency can be converted; that is the rate table's job, so a code
    missing here still converts if the table has a rate for it and simply
    rounds with ``DEFAULT_DECIMAL_PLACES``.
    """

    DEFAULT_DECIMAL_PLACES: ClassVar[int] = 2

    _CURRENCIES: ClassVar[dict[str, CurrencyInfo]] = {
        "USD": CurrencyInfo("USD", 2, "US Dollar"),
        "EUR": CurrencyInfo("EUR", 2, "Euro"),
        "GBP": CurrencyInfo("GBP", 2, "Pound Sterling"),
        # East African Community
        "UGX": CurrencyInfo("UGX", 0, "Ugandan Shilling"),
        "KES": CurrencyInfo("KES", 2, "Kenyan Shilling"),
        "TZS": CurrencyInfo("TZS", 2, "Tanzanian Shilling"),
        "RWF": CurrencyInfo("RWF", 0, "Rwandan Franc"),
        "BIF": CurrencyInfo("BIF", 0, "Burundian Franc"),
        "SSP": CurrencyInfo("SSP", 2, "South Sudanese Pound"),
        "CDF": CurrencyInfo("CDF", 2, "Congolese Franc"),
        "ZAR": CurrencyInfo("ZAR", 2, "South African Rand"),
    }

    @classmethod
    def get_info(cls, code: str) -> CurrencyInfo | None:
        if not code or not isinstance(code, str):
            return None
        return cls._CURRENCIES.get(code.upper().strip())

    @classmethod
    def get_decimal_places(cls, code: str) -> int:
        info = cls.get_info(code)
        return info.decimal_places if info else cls.DEFAULT_DECIMAL_PLACES

    @classmethod
    def get_rounding_tolerance(cls, code: str) -> Decimal:
        return Decimal(1).scaleb(-cls.get_decimal_places(code))

    @classmethod
    def is_well_formed(cls, code: object) -> bool:
        """Three ASCII letters after stripping; case-insensitive."""
        if not isinstance(code, str):
            return False
        normalized = code.strip()
        return len(normalized) == 3 and normalized.isascii() and normalized.isalpha()

    @classmethod
    def known_codes(cls) -> frozenset[str]:
        return frozenset(cls._CURRENCIES)
