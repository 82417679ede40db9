"""Recurring schedule calculators.

Everything here is pure and clock-free: callers pass the reference date.
Weekdays follow the 0=Sunday..6=Saturday convention used by the stored
schedules.

Custom schedules use a deliberately small grammar::

    every [N] day(s) | week(s) | month(s)

``N`` defaults to 1. Anything else is rejected with ``InvalidSchedule``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Optional

from ..errors import InvalidSchedule
from ..timeutils import add_months, clamp_day, sunday_weekday

WEEKLY = "weekly"
BIWEEKLY = "biweekly"
MONTHLY = "monthly"
CUSTOM = "custom"
SCHEDULE_TYPES = (WEEKLY, BIWEEKLY, MONTHLY, CUSTOM)

_CUSTOM_PATTERN = re.compile(r"^every\s+(?:(\d+)\s+)?(day|week|month)s?$", re.IGNORECASE)


@dataclass(frozen=True, slots=True)
class CustomCadence:
    """Parsed form of a custom pattern."""

    count: int
    unit: str  # day | week | month


@dataclass(frozen=True, slots=True)
class RecurringSchedule:
    """How often, and on which day, an income recurs."""

    type: str
    day_of_week: Optional[int] = None
    day_of_month: Optional[int] = None
    custom_pattern: Optional[str] = None

    @classmethod
    def from_income(cls, income) -> "RecurringSchedule":
        """Build the schedule stored on a ``RecurringIncome`` row."""

        return cls(
            type=income.schedule_type,
            day_of_week=income.day_of_week,
            day_of_month=income.day_of_month,
            custom_pattern=income.custom_pattern,
        )

    def validate(self) -> "RecurringSchedule":
        """Raise ``InvalidSchedule`` unless the fields needed by ``type`` are usable."""

        if self.type not in SCHEDULE_TYPES:
            raise InvalidSchedule(f"Unknown schedule type: {self.type!r}")
        if self.type in (WEEKLY, BIWEEKLY):
            if self.day_of_week is None or not 0 <= self.day_of_week <= 6:
                raise InvalidSchedule(
                    f"{self.type} schedules need day_of_week in 0..6, got {self.day_of_week!r}"
                )
        elif self.type == MONTHLY:
            if self.day_of_month is None or not 1 <= self.day_of_month <= 31:
                raise InvalidSchedule(
                    f"monthly schedules need day_of_month in 1..31, got {self.day_of_month!r}"
                )
        else:
            parse_custom_pattern(self.custom_pattern)
        return self


def parse_custom_pattern(pattern: Optional[str]) -> CustomCadence:
    """Parse ``every [N] day|week|month`` into a ``CustomCadence``."""

    if not pattern:
        raise InvalidSchedule("custom schedules need a pattern such as 'every 2 weeks'")
    match = _CUSTOM_PATTERN.match(pattern.strip())
    if match is None:
        raise InvalidSchedule(f"Unsupported custom pattern: {pattern!r}")
    count = int(match.group(1) or 1)
    if count < 1:
        raise InvalidSchedule(f"Custom interval must be at least 1, got {count}")
    return CustomCadence(count=count, unit=match.group(2).lower())


def _as_date(value: date) -> date:
    return value.date() if isinstance(value, datetime) else value


def _align_to_weekday(from_date: date, day_of_week: int) -> date:
    """First date on or after *from_date* falling on *day_of_week*."""

    return from_date + timedelta(days=(day_of_week - sunday_weekday(from_date)) % 7)


def _add_cadence(value: date, cadence: CustomCadence) -> date:
    if cadence.unit == "day":
        return value + timedelta(days=cadence.count)
    if cadence.unit == "week":
        return value + timedelta(weeks=cadence.count)
    return add_months(value, cadence.count)


def next_occurrence(schedule: RecurringSchedule, from_date: date) -> date:
    """Compute the next occurrence of *schedule* counted from *from_date*.

    - weekly: the first matching weekday on or after ``from_date``
    - biweekly: that aligned weekday plus 14 days
    - monthly: ``day_of_month`` in the following month, clamped to its length
    - custom: ``from_date`` plus the parsed interval
    """

    schedule.validate()
    start = _as_date(from_date)

    if schedule.type == WEEKLY:
        return _align_to_weekday(start, schedule.day_of_week)
    if schedule.type == BIWEEKLY:
        return _align_to_weekday(start, schedule.day_of_week) + timedelta(days=14)
    if schedule.type == MONTHLY:
        following = add_months(start.replace(day=1), 1)
        return clamp_day(following.year, following.month, schedule.day_of_month)
    return _add_cadence(start, parse_custom_pattern(schedule.custom_pattern))


def following_occurrence(schedule: RecurringSchedule, previous: date) -> date:
    """Return the occurrence after an already scheduled date.

    Used to advance an established schedule, so weekly and biweekly incomes keep
    a fixed 7/14 day cadence anchored on their first scheduled date.
    """

    schedule.validate()
    previous = _as_date(previous)

    if schedule.type == WEEKLY:
        return previous + timedelta(days=7)
    if schedule.type == BIWEEKLY:
        return previous + timedelta(days=14)
    return next_occurrence(schedule, previous)


def monthly_factor(schedule: RecurringSchedule) -> Decimal:
    """Average number of occurrences per month."""

    schedule.validate()
    if schedule.type == WEEKLY:
        return Decimal(52) / Decimal(12)
    if schedule.type == BIWEEKLY:
        return Decimal(26) / Decimal(12)
    if schedule.type == MONTHLY:
        return Decimal(1)

    cadence = parse_custom_pattern(schedule.custom_pattern)
    per_year = {"day": 365, "week": 52, "month": 12}[cadence.unit]
    return Decimal(per_year) / Decimal(12 * cadence.count)


__all__ = [
    "BIWEEKLY",
    "CUSTOM",
    "CustomCadence",
    "MONTHLY",
    "RecurringSchedule",
    "SCHEDULE_TYPES",
    "WEEKLY",
    "following_occurrence",
    "monthly_factor",
    "next_occurrence",
    "parse_custom_pattern",
]
