"""
Safari schedule buckets for the safari screen.

Pure function of the trips and ``today``. Dates are compared as calendar
days, so a trip that starts at 08:00 today is "active today".
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from fleetops_kernel.domain.records import BookingStatus, SafariBooking
from fleetops_kernel.logging_config import get_logger

logger = get_logger("modules.safari.schedule")

UPCOMING_WEEK_DAYS = 7
UPCOMING_MONTH_DAYS = 30


@dataclass(frozen=True)
class SafariSchedule:
    active_today: tuple[SafariBooking, ...]
    upcoming_this_week: tuple[SafariBooking, ...]
    upcoming_this_month: tuple[SafariBooking, ...]
    completed: tuple[SafariBooking, ...]
    completed_this_month: tuple[SafariBooking, ...]


def _day(value: datetime | None) -> date | None:
    return value.date() if value is not None else None


def categorize_safaris(safaris: Iterable[SafariBooking], today: date) -> SafariSchedule:
    """
    Bucket trips relative to ``today``.

    - active today: In-Progress, or start <= today <= end
    - upcoming this week: Confirmed, start in (today, today + 7]
    - upcoming this month: Confirmed, start in (today + 7, today + 30]
    - completed: Completed
    - completed this month: Completed with an end date in today's month

    A trip can be in more than one bucket (an In-Progress trip whose end
    date passed is still "active today").
    """
    trips = tuple(safaris)
    week_end = today + timedelta(days=UPCOMING_WEEK_DAYS)
    month_end = today + timedelta(days=UPCOMING_MONTH_DAYS)

    def is_active(s: SafariBooking) -> bool:
        if s.status == BookingStatus.IN_PROGRESS.value:
            return True
        start, end = _day(s.start_date), _day(s.end_date)
        return start is not None and end is not None and start <= today <= end

    def starts_between(s: SafariBooking, low: date, high: date) -> bool:
        start = _day(s.start_date)
        return (
            s.status == BookingStatus.CONFIRMED.value
            and start is not None
            and low < start <= high
        )

    completed = tuple(s for s in trips if s.status == BookingStatus.COMPLETED.value)
    schedule = SafariSchedule(
        active_today=tuple(s for s in trips if is_active(s)),
        upcoming_this_week=tuple(s for s in trips if starts_between(s, today, week_end)),
        upcoming_this_month=tuple(s for s in trips if starts_between(s, week_end, month_end)),
        completed=completed,
        completed_this_month=tuple(
            s for s in completed
            if s.end_date is not None
            and s.end_date.year == today.year
            and s.end_date.month == today.month
        ),
    )
    logger.debug(
        "safaris_categorized",
        extra={
            "active_today": len(schedule.active_today),
            "upcoming_this_week": len(schedule.upcoming_this_week),
            "upcoming_this_month": len(schedule.upcoming_this_month),
            "completed_this_month": len(schedule.completed_this_month),
        },
    )
    return schedule
