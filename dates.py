"""
Calendar date utilities for compliance tracking.
Pure functions for ISO keys, ranges and calendar grids.
"""

import calendar
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterator, List, Optional, Union

from errors import InvalidDateError

DateLike = Union[date, datetime, str]

WEEKS_BACK = 12
WEEKS_FORWARD = 52

_ISO_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass(frozen=True)
class DateRange:
    """Inclusive span of calendar days with start <= end."""

    start: date
    end: date

    def __post_init__(self):
        if self.start > self.end:
            raise InvalidDateError(
                f"{self.start.isoformat()}..{self.end.isoformat()}",
                "range start is after range end",
            )

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    def days(self) -> Iterator[date]:
        """Yield every day in the range in chronological order."""
        current = self.start
        while current <= self.end:
            yield current
            current += timedelta(days=1)

    @property
    def total_days(self) -> int:
        return (self.end - self.start).days + 1

    def years(self) -> List[int]:
        return list(range(self.start.year, self.end.year + 1))


def parse_iso(text: str) -> date:
    """
    Parse a strict YYYY-MM-DD string.

    Args:
        text: Date string

    Returns:
        The calendar date

    Raises:
        InvalidDateError: If the string is malformed or not a real day
    """
    if not isinstance(text, str) or not _ISO_PATTERN.match(text):
        raise InvalidDateError(text, "expected YYYY-MM-DD")
    try:
        return date.fromisoformat(text)
    except ValueError as e:
        # e.g. 2026-02-30
        raise InvalidDateError(text, str(e)) from e


def format_iso(day: date) -> str:
    return day.isoformat()


def to_date(value: DateLike) -> date:
    """Coerce a date, datetime or ISO string to a date."""
    # datetime is a subclass of date, check it first
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return parse_iso(value)
    raise InvalidDateError(value, f"unsupported type {type(value).__name__}")


def to_iso(value: DateLike) -> str:
    """Normalize any accepted date representation to the canonical key."""
    return to_date(value).isoformat()


def is_date_in_range(value: DateLike, date_range: DateRange) -> bool:
    return date_range.contains(to_date(value))


def add_weeks(day: date, weeks: int) -> date:
    return day + timedelta(weeks=weeks)


def week_start(day: date) -> date:
    """Sunday on or before the given day."""
    # date.weekday(): Monday=0 .. Sunday=6
    return day - timedelta(days=(day.weekday() + 1) % 7)


def week_end(day: date) -> date:
    """Saturday on or after the given day."""
    return week_start(day) + timedelta(days=6)


def default_range(
    today: Optional[date] = None,
    weeks_back: int = WEEKS_BACK,
    weeks_forward: int = WEEKS_FORWARD,
) -> DateRange:
    """
    Compute the default visible range around today.

    Args:
        today: Reference day (defaults to date.today())
        weeks_back: Weeks of history to include
        weeks_forward: Weeks of future to include

    Returns:
        Range from the Sunday starting the first week to the Saturday
        ending the last week
    """
    if today is None:
        today = date.today()
    start = week_start(add_weeks(today, -weeks_back))
    end = week_end(add_weeks(today, weeks_forward))
    return DateRange(start, end)


def is_weekend(day_date: date) -> bool:
    """Check if date is a weekend (Saturday or Sunday)."""
    return day_date.weekday() >= 5


def get_month_name(month: int) -> str:
    """Get full month name from month number."""
    return calendar.month_name[month]


def add_months(source_date: date, months: int) -> date:
    """Add months to a date, clamping to the end of shorter months."""
    month = source_date.month - 1 + months
    year = source_date.year + month // 12
    month = month % 12 + 1
    day = min(source_date.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def month_grid(year: int, month: int) -> List[List[Optional[date]]]:
    """
    Generate a Sunday-first calendar grid for the given month.

    Args:
        year: Year (e.g., 2026)
        month: Month (1-12)

    Returns:
        List of weeks, each containing 7 days (None for empty cells)
    """
    cal = calendar.Calendar(firstweekday=calendar.SUNDAY)
    grid = []

    for week in cal.monthdayscalendar(year, month):
        grid.append([date(year, month, day) if day else None for day in week])

    return grid
