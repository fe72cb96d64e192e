"""
Typed Exception Hierarchy for the FleetOps kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

The dashboard caller has two very different reactions to a failure:

  - A currency problem means every total on screen would be wrong. The
    whole computation is abandoned and the caller shows a retry affordance.
  - A malformed row means one record is unusable. That record is skipped
    and the rest of the dashboard is still computed.

Callers tell these apart by exception TYPE, never by parsing messages.
Every exception carries a machine-readable ``code`` class attribute and its
context as structured attributes.

Exception attributes hold identifiers (record ids, currency codes, field
names) only. Raw customer data (names, amounts, descriptions) is never put
on an exception, because exceptions end up in logs.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    FleetOpsError (base)
    |
    +-- CurrencyError
    |   +-- UnknownCurrencyError
    |   +-- InvalidCurrencyError
    |   +-- CurrencyMismatchError
    |   +-- InvalidExchangeRateError
    |
    +-- RecordError
    |   +-- MalformedRecordError
    |
    +-- QueryError
    |   +-- InvalidTimeWindowError
    |   +-- InvalidQueryError
    |
    +-- ConfigurationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Currency        | UNKNOWN_CURRENCY            | Amount tagged with a code not in the rate table
                | INVALID_CURRENCY            | Code is not three letters
                | CURRENCY_MISMATCH           | Money arithmetic across currencies
                | INVALID_EXCHANGE_RATE       | Rate is zero, negative or not a number
----------------|-----------------------------|-----------------------------------------
Record          | MALFORMED_RECORD            | Raw row cannot become a typed record
----------------|-----------------------------|-----------------------------------------
Query           | INVALID_TIME_WINDOW         | Month outside 1-12, empty specific set
                | INVALID_QUERY               | Unknown capacity filter or window mode
----------------|-----------------------------|-----------------------------------------
Config          | CONFIGURATION_ERROR         | Missing or invalid configuration key

===============================================================================
HANDLING PATTERNS
===============================================================================

    try:
        result = service.compute(snapshot, query)
    except CurrencyError as e:
        # Fatal for the whole dashboard
        show_retry(code=e.code)

    for row in rows:
        try:
            records.append(Booking.from_row(row))
        except MalformedRecordError as e:
            logger.warning("record_skipped", extra={"record_id": e.record_id})
"""


class FleetOpsError(Exception):
    """
    Base exception for all FleetOps errors.

    All subclasses carry a ``code`` class attribute for machine-readable
    identification.
    """

    code: str = "FLEETOPS_ERROR"


# Currency-related exceptions


class CurrencyError(FleetOpsError):
    """Base exception for currency-related errors."""

    code: str = "CURRENCY_ERROR"


class UnknownCurrencyError(CurrencyError):
    """
    An amount is tagged with a currency that the rate table does not know.

    Fatal to the whole aggregation: defaulting the rate to 1 would corrupt
    every total without any visible sign.
    """

    code: str = "UNKNOWN_CURRENCY"

    def __init__(self, currency: str, known: tuple[str, ...] = ()):
        self.currency = currency
        self.known = known
        super().__init__(
            f"Unknown currency '{currency}'; rate table has {', '.join(known) or 'no rates'}"
        )


class InvalidCurrencyError(CurrencyError):
    """Currency code is not a three-letter alphabetic code."""

    code: str = "INVALID_CURRENCY"

    def __init__(self, currency: object):
        self.currency = currency
        super().__init__(f"Invalid currency code: {currency!r}")


class CurrencyMismatchError(CurrencyError):
    """Attempted arithmetic or comparison across different currencies."""

    code: str = "CURRENCY_MISMATCH"

    def __init__(self, currency1: str, currency2: str):
        self.currency1 = currency1
        self.currency2 = currency2
        super().__init__(f"Currency mismatch: {currency1} vs {currency2}")


class InvalidExchangeRateError(CurrencyError):
    """Exchange rate is zero, negative or not numeric."""

    code: str = "INVALID_EXCHANGE_RATE"

    def __init__(self, currency: str, rate: object):
        self.currency = currency
        self.rate = rate
        super().__init__(f"Invalid exchange rate for {currency}: {rate!r}")


# Record-related exceptions


class RecordError(FleetOpsError):
    """Base exception for raw record problems."""

    code: str = "RECORD_ERROR"


class MalformedRecordError(RecordError):
    """
    A raw row cannot be turned into a typed record.

    Carries the collection, the record id (when known) and the offending
    field name. The field value is never stored.
    """

    code: str = "MALFORMED_RECORD"

    def __init__(self, collection: str, record_id: str | None, field: str, reason: str):
        self.collection = collection
        self.record_id = record_id
        self.field = field
        self.reason = reason
        super().__init__(
            f"Malformed {collection} record {record_id or '<no id>'}: {field} {reason}"
        )


# Query-related exceptions


class QueryError(FleetOpsError):
    """Base exception for invalid dashboard queries."""

    code: str = "QUERY_ERROR"


class InvalidTimeWindowError(QueryError):
    """Time window is not resolvable (bad month, empty month set, bad year)."""

    code: str = "INVALID_TIME_WINDOW"

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"Invalid time window: {detail}")


class InvalidQueryError(QueryError):
    """Query value outside its allowed set."""

    code: str = "INVALID_QUERY"

    def __init__(self, field: str, value: object, allowed: tuple[str, ...]):
        self.field = field
        self.value = value
        self.allowed = allowed
        super().__init__(
            f"Invalid {field}: {value!r} (allowed: {', '.join(allowed)})"
        )


# Configuration exceptions


class ConfigurationError(FleetOpsError):
    """Configuration is missing a required key or holds an invalid value."""

    code: str = "CONFIGURATION_ERROR"

    def __init__(self, source: str, detail: str):
        self.source = source
        self.detail = detail
        super().__init__(f"Configuration error in {source}: {detail}")
