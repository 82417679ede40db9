"""Calendar and timestamp helpers.

Persisted instants are naive UTC ``datetime`` values. Aware datetimes coming in
from callers are converted once, here, before they reach the database.
Calendar days (due dates, schedule dates) are plain ``date`` objects.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Current time as naive UTC."""

    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_utc(value: datetime) -> datetime:
    """Normalize *value* to naive UTC; naive inputs are assumed to be UTC already."""

    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def last_day_of_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def clamp_day(year: int, month: int, day: int) -> date:
    """Return ``date(year, month, day)`` with *day* clamped to the month length."""

    return date(year, month, min(day, last_day_of_month(year, month)))


def add_months(value: date, months: int) -> date:
    """Add *months* to *value*, clamping the day to the target month end."""

    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    result = clamp_day(year, month, value.day)
    if isinstance(value, datetime):
        return value.replace(year=result.year, month=result.month, day=result.day)
    return result


def sunday_weekday(value: date) -> int:
    """Weekday with 0=Sunday..6=Saturday (``date.weekday`` uses 0=Monday)."""

    return (value.weekday() + 1) % 7


__all__ = [
    "Clock",
    "add_months",
    "clamp_day",
    "last_day_of_month",
    "sunday_weekday",
    "to_utc",
    "utcnow",
]
