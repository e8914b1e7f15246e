"""
Error kinds raised by the compliance core.
Callers catch by type; messages are for humans only.
"""

from typing import Optional


class TrackerError(Exception):
    """Base exception for all tracker errors."""


class InvalidDateError(TrackerError, ValueError):
    """Raised when a date cannot be parsed or normalized."""

    def __init__(self, value, reason: Optional[str] = None):
        self.value = value
        message = f"Invalid date: {value!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class OutOfRangeError(TrackerError):
    """Raised when a date falls outside the store's configured range."""

    def __init__(self, iso_date: str, date_range):
        self.iso_date = iso_date
        self.date_range = date_range
        super().__init__(
            f"Date {iso_date} is outside the valid range "
            f"{date_range.start.isoformat()} to {date_range.end.isoformat()}"
        )


class InvalidModeError(TrackerError):
    """Raised when a marking mode is not a member of the cycle."""

    def __init__(self, mode):
        self.mode = mode
        super().__init__(f"Invalid marking mode: {mode!r}")


class HolidayLookupError(TrackerError):
    """Raised by holiday providers when a lookup cannot be served."""
