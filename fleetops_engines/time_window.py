"""
fleetops_engines.time_window -- Time-window resolution for KPIs and charts.

Responsibility:
    Expands a user-selected window (year / quarter / month / explicit month
    set / all) into concrete calendar months, and the global dashboard
    period into a half-open ``[start, end)`` range.

Architecture position:
    Engines -- pure calculation layer, zero I/O. ``today`` is always passed
    in; nothing here reads the clock.

Invariants enforced:
    - Months are calendar months 1-12.
    - ``year``, ``quarter`` and ``month`` anchor to the CURRENT calendar
      year (from ``today``), never to the window's own year.
    - ``specific`` uses the window's own year and month set.
    - ``all`` disables date filtering: ``matches()`` is true even for a
      record with no date. For month bucketing it expands to the twelve
      months of the window's year.
    - Every chart owns an independent ChartWindow; none is derived from
      the global DashboardPeriod.
    - Outside ``all``, a record with no (or an unparsable) date matches
      nothing.

Failure modes:
    - InvalidTimeWindowError for a month outside 1-12, a ``specific``
      window with no months, or a non-positive year.
    - InvalidQueryError for an unknown mode string.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum

from fleetops_kernel.exceptions import InvalidQueryError, InvalidTimeWindowError

ALL_MONTHS: tuple[int, ...] = tuple(range(1, 13))
MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


class TimeWindowMode(str, Enum):
    YEAR = "year"
    QUARTER = "quarter"
    MONTH = "month"
    SPECIFIC = "specific"
    ALL = "all"

    @classmethod
    def parse(cls, value: TimeWindowMode | str) -> TimeWindowMode:
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as e:
            raise InvalidQueryError(
                "time window mode", value, tuple(m.value for m in cls)
            ) from e


def month_abbreviation(month: int) -> str:
    return MONTH_ABBREVIATIONS[month - 1]


def month_bounds(year: int, month: int) -> tuple[datetime, datetime]:
    """Half-open ``[first of month, first of next month)``."""
    _check_month(month)
    start = datetime(year, month, 1)
    end = datetime(year + 1, 1, 1) if month == 12 else datetime(year, month + 1, 1)
    return start, end


def quarter_months(month: int) -> tuple[int, ...]:
    """The three months of the quarter containing ``month``."""
    _check_month(month)
    first = ((month - 1) // 3) * 3 + 1
    return (first, first + 1, first + 2)


def _check_month(month: int) -> None:
    if isinstance(month, bool) or not isinstance(month, int) or not 1 <= month <= 12:
        raise InvalidTimeWindowError(f"month {month!r} is outside 1-12")


def _check_year(year: int | None) -> None:
    if year is None:
        return
    if isinstance(year, bool) or not isinstance(year, int) or year < 1:
        raise InvalidTimeWindowError(f"year {year!r} is not a calendar year")


@dataclass(frozen=True)
class ChartWindow:
    """
    Independent time window owned by one chart.

    Contract:
        ``mode`` decides which months are in scope; ``months`` and ``year``
        are read only by ``specific`` (and ``year`` by ``all`` for month
        bucketing). A missing ``year`` means the current year.

    Guarantees:
        - Immutable; ``months`` is a sorted tuple without duplicates.
    """

    mode: TimeWindowMode = TimeWindowMode.YEAR
    months: tuple[int, ...] = ()
    year: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "mode", TimeWindowMode.parse(self.mode))
        for month in self.months:
            _check_month(month)
        _check_year(self.year)
        object.__setattr__(self, "months", tuple(sorted(set(self.months))))
        if self.mode is TimeWindowMode.SPECIFIC and not self.months:
            raise InvalidTimeWindowError("specific window has no months")

    @classmethod
    def specific(cls, months: tuple[int, ...] | list[int], year: int) -> ChartWindow:
        return cls(mode=TimeWindowMode.SPECIFIC, months=tuple(months), year=year)

    @property
    def is_all(self) -> bool:
        return self.mode is TimeWindowMode.ALL

    def resolve_year(self, today: date) -> int:
        if self.mode in (TimeWindowMode.SPECIFIC, TimeWindowMode.ALL):
            return self.year if self.year is not None else today.year
        return today.year

    def resolve_months(self, today: date) -> tuple[int, ...]:
        if self.mode is TimeWindowMode.YEAR or self.mode is TimeWindowMode.ALL:
            return ALL_MONTHS
        if self.mode is TimeWindowMode.QUARTER:
            return quarter_months(today.month)
        if self.mode is TimeWindowMode.MONTH:
            return (today.month,)
        return self.months

    def matches(self, timestamp: datetime | None, today: date) -> bool:
        if self.is_all:
            return True
        if timestamp is None:
            return False
        return (
            timestamp.year == self.resolve_year(today)
            and timestamp.month in self.resolve_months(today)
        )


@dataclass(frozen=True)
class DashboardPeriod:
    """
    The single global dashboard filter: one calendar month, or everything.

    ``month=None`` means "all": no date filtering at all.
    """

    month: int | None = None
    year: int | None = None

    def __post_init__(self) -> None:
        if self.month is not None:
            _check_month(self.month)
            if self.year is None:
                raise InvalidTimeWindowError("a month filter needs a year")
        _check_year(self.year)

    @classmethod
    def all_time(cls) -> DashboardPeriod:
        return cls()

    @property
    def is_all(self) -> bool:
        return self.month is None

    def date_range(self) -> tuple[datetime, datetime] | None:
        if self.month is None or self.year is None:
            return None
        return month_bounds(self.year, self.month)

    def contains(self, timestamp: datetime | None) -> bool:
        bounds = self.date_range()
        if bounds is None:
            return True
        if timestamp is None:
            return False
        start, end = bounds
        return start <= timestamp < end
