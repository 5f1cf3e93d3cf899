"""
Month and week boundaries in shop-local time.

Weeks are rows of a Sunday-first month calendar. A month spans at most six
such rows; reports use five buckets, so the sixth row (only reached by the
last day or two of a long month starting late in the week) folds into the
fifth bucket.
"""

import calendar
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from utils.timezone import get_zone, to_local

WEEKS_PER_MONTH = 5


@dataclass(frozen=True)
class DateRange:
    """Inclusive [start, end] interval of aware datetimes."""

    start: datetime
    end: datetime

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end


def _local(moment: datetime | date, tz_name: str) -> datetime:
    if isinstance(moment, datetime):
        return to_local(moment, tz_name)
    return datetime.combine(moment, time.min, tzinfo=get_zone(tz_name))


def _start_of_day(day: date, tz_name: str) -> datetime:
    return datetime.combine(day, time.min, tzinfo=get_zone(tz_name))


def _end_of_day(day: date, tz_name: str) -> datetime:
    return datetime.combine(day, time.max, tzinfo=get_zone(tz_name))


def sunday_offset(day: date) -> int:
    """Weekday with Sunday = 0 ... Saturday = 6."""
    return (day.weekday() + 1) % 7


def month_range(moment: datetime | date, tz_name: str) -> DateRange:
    """
    First and last instant of the month containing ``moment``.

    Both ends are shop-local: 00:00 on the 1st and 23:59:59.999999 on the
    last day.
    """
    local = _local(moment, tz_name)
    last_day = calendar.monthrange(local.year, local.month)[1]
    return DateRange(
        start=_start_of_day(date(local.year, local.month, 1), tz_name),
        end=_end_of_day(date(local.year, local.month, last_day), tz_name),
    )


def month_range_for(year: int, month: int, tz_name: str) -> DateRange:
    """month_range for an explicit year/month pair."""
    return month_range(date(year, month, 1), tz_name)


def day_range(moment: datetime | date, tz_name: str) -> DateRange:
    """Whole local day containing ``moment``."""
    local = _local(moment, tz_name)
    return DateRange(
        start=_start_of_day(local.date(), tz_name),
        end=_end_of_day(local.date(), tz_name),
    )


def week_start(moment: datetime | date, tz_name: str) -> datetime:
    """Local midnight of the Sunday on or before ``moment``."""
    local = _local(moment, tz_name)
    sunday = local.date() - timedelta(days=sunday_offset(local.date()))
    return _start_of_day(sunday, tz_name)


def week_of_month(moment: datetime | date, tz_name: str) -> int:
    """
    Calendar-row index (0-4) of ``moment`` within its month.

    floor((day + weekday_of_first - 1) / 7) with Sunday = 0, clamped so the
    result is always a valid bucket index.
    """
    local = _local(moment, tz_name)
    offset = sunday_offset(date(local.year, local.month, 1))
    index = (local.day + offset - 1) // 7
    return min(index, WEEKS_PER_MONTH - 1)


def week_ranges(year: int, month: int, tz_name: str) -> list[DateRange]:
    """
    Date ranges of the five week buckets of a month.

    Each range is clamped to the month; the last bucket runs to the month's
    final day so that it matches week_of_month's clamping.
    """
    first = date(year, month, 1)
    last = date(year, month, calendar.monthrange(year, month)[1])
    offset = sunday_offset(first)

    ranges = []
    for index in range(WEEKS_PER_MONTH):
        start_day = first + timedelta(days=index * 7 - offset)
        end_day = start_day + timedelta(days=6)
        if start_day < first:
            start_day = first
        if start_day > last:
            # February starting on a Sunday has only four rows.
            start_day = last
        if index == WEEKS_PER_MONTH - 1 or end_day > last:
            end_day = last
        ranges.append(DateRange(
            start=_start_of_day(start_day, tz_name),
            end=_end_of_day(end_day, tz_name),
        ))
    return ranges
