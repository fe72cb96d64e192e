"""
Unit tests for the typed exception hierarchy.

Callers branch on type and ``code``; attributes carry identifiers only.
"""

import pytest

from fleetops_kernel.exceptions import (
    ConfigurationError,
    CurrencyError,
    CurrencyMismatchError,
    FleetOpsError,
    InvalidCurrencyError,
    InvalidExchangeRateError,
    InvalidQueryError,
    InvalidTimeWindowError,
    MalformedRecordError,
    QueryError,
    RecordError,
    UnknownCurrencyError,
)


class TestHierarchy:
    @pytest.mark.parametrize(
        "exc, parent, code",
        [
            (UnknownCurrencyError("EUR", ("USD",)), CurrencyError, "UNKNOWN_CURRENCY"),
            (InvalidCurrencyError("US"), CurrencyError, "INVALID_CURRENCY"),
            (CurrencyMismatchError("USD", "UGX"), CurrencyError, "CURRENCY_MISMATCH"),
            (InvalidExchangeRateError("UGX", "0"), CurrencyError, "INVALID_EXCHANGE_RATE"),
            (MalformedRecordError("bookings", "b1", "currency", "is missing"), RecordError, "MALFORMED_RECORD"),
            (InvalidTimeWindowError("month 13"), QueryError, "INVALID_TIME_WINDOW"),
            (InvalidQueryError("capacity filter", "9seater", ("all",)), QueryError, "INVALID_QUERY"),
            (ConfigurationError("default.yaml", "missing key"), FleetOpsError, "CONFIGURATION_ERROR"),
        ],
    )
    def test_parent_and_code(self, exc, parent, code):
        assert isinstance(exc, parent)
        assert isinstance(exc, FleetOpsError)
        assert exc.code == code


class TestMalformedRecordError:
    def test_carries_identifiers_not_values(self):
        exc = MalformedRecordError("bookings", "bk-1", "amount_paid", "is not numeric")
        assert exc.collection == "bookings"
        assert exc.record_id == "bk-1"
        assert exc.field == "amount_paid"
        assert "bk-1" in str(exc)

    def test_missing_id_is_readable(self):
        exc = MalformedRecordError("vehicles", None, "id", "is missing")
        assert "<no id>" in str(exc)


class TestUnknownCurrencyError:
    def test_lists_known_codes(self):
        exc = UnknownCurrencyError("EUR", ("UGX", "USD"))
        assert "UGX, USD" in str(exc)
        assert exc.known == ("UGX", "USD")
