"""
Clock -- Injectable source of "now".

Responsibility:
    The dashboard contract depends on the current calendar month and year
    (MTD/YTD revenue, the ``year``/``quarter``/``month`` chart windows). That
    dependency is made explicit: engines and builders receive an ``as_of``
    datetime, and only services hold a ``Clock`` to produce it.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O (except SystemClock,
    which is the one sanctioned read of wall-clock time).

Invariants enforced:
    - All clocks return naive UTC datetimes, matching how record timestamps
      are normalized (see ``fleetops_kernel.domain.records``).
"""

from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta, timezone


class Clock(ABC):
    """
    Abstract clock interface.

    Contract:
        Services that need the current time receive a Clock via
        constructor injection. Engines never read the wall clock.

    Guarantees:
        - ``now()`` returns a naive datetime expressed in UTC.
        - ``today()`` is the calendar date of ``now()``.
    """

    @abstractmethod
    def now(self) -> datetime:
        """Get the current time (naive UTC)."""
        ...

    def today(self) -> date:
        return self.now().date()


class SystemClock(Clock):
    """Production clock reading the system time."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc).replace(tzinfo=None)


class FixedClock(Clock):
    """
    Test clock with controlled time.

    Contract:
        ``now()`` returns the same value on repeated calls until
        ``advance()`` or ``set_time()`` is called. Aware datetimes are
        converted to naive UTC on the way in.
    """

    def __init__(self, fixed_time: datetime | None = None):
        self._fixed_time = to_naive_utc(
            fixed_time or datetime(2024, 6, 15, 12, 0, 0)
        )

    def now(self) -> datetime:
        return self._fixed_time

    def set_time(self, time: datetime) -> None:
        """Set the clock to a specific time."""
        self._fixed_time = to_naive_utc(time)

    def advance(self, *, days: int = 0, seconds: int = 0) -> None:
        """Advance the clock."""
        self._fixed_time = self._fixed_time + timedelta(days=days, seconds=seconds)


def to_naive_utc(value: datetime) -> datetime:
    """Aware datetimes are converted to UTC and stripped; naive ones pass through."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
