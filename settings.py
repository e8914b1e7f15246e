"""
Configuration for the compliance tracker.
Values come from Streamlit secrets first, then environment variables.
Nothing here is persisted; the caller owns the settings object.
"""

import os
from dataclasses import dataclass
from typing import Optional

import streamlit as st

from dates import DateRange, WEEKS_BACK, WEEKS_FORWARD, default_range
from holiday_integration import HolidaySelector
from validator import WEEKDAYS_PER_WEEK, ValidationMode, coerce_validation_mode

DEFAULT_WINDOW_WEEKS = 12
# Three in-office days a week across the default window
DEFAULT_MIN_COMPLIANT_DAYS = 36


def get_secret(name: str, default=None):
    # prefer Streamlit secrets, fallback to env vars
    try:
        return st.secrets[name]
    except Exception:
        return os.getenv(name, default)


def _get_int(name: str, default: int) -> int:
    raw = get_secret(name, None)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValueError(f"Setting {name} must be an integer, got {raw!r}")


@dataclass
class TrackerSettings:
    window_weeks: int = DEFAULT_WINDOW_WEEKS
    min_compliant_days: int = DEFAULT_MIN_COMPLIANT_DAYS
    country_code: Optional[str] = None
    company_name: Optional[str] = None
    weeks_back: int = WEEKS_BACK
    weeks_forward: int = WEEKS_FORWARD
    log_level: str = "INFO"
    validation_mode: ValidationMode = ValidationMode.STRICT

    def __post_init__(self):
        if self.window_weeks < 1:
            raise ValueError(f"window_weeks must be at least 1; got {self.window_weeks}")
        if self.min_compliant_days < 0:
            raise ValueError(f"min_compliant_days must be non-negative; got {self.min_compliant_days}")
        self.validation_mode = coerce_validation_mode(self.validation_mode)

    @property
    def holiday_selector(self) -> HolidaySelector:
        return HolidaySelector(self.country_code or None, self.company_name or None)

    @property
    def max_compliant_days(self) -> int:
        """Most in-office days a window can hold (every weekday)."""
        return self.window_weeks * WEEKDAYS_PER_WEEK

    @property
    def is_achievable(self) -> bool:
        return self.min_compliant_days <= self.max_compliant_days

    def date_range(self, today=None) -> DateRange:
        return default_range(today, self.weeks_back, self.weeks_forward)


def load_settings() -> TrackerSettings:
    """
    Build settings from secrets / environment.

    Returns:
        TrackerSettings with defaults for anything unset

    Raises:
        ValueError: If a numeric setting is not an integer or the
            validation mode is unknown
    """
    return TrackerSettings(
        window_weeks=_get_int("RTO_WINDOW_WEEKS", DEFAULT_WINDOW_WEEKS),
        min_compliant_days=_get_int("RTO_MIN_COMPLIANT_DAYS", DEFAULT_MIN_COMPLIANT_DAYS),
        country_code=get_secret("DEFAULT_COUNTRY", "") or None,
        company_name=get_secret("DEFAULT_COMPANY", "") or None,
        weeks_back=_get_int("RTO_WEEKS_BACK", WEEKS_BACK),
        weeks_forward=_get_int("RTO_WEEKS_FORWARD", WEEKS_FORWARD),
        log_level=str(get_secret("RTO_LOG_LEVEL", "INFO")).upper(),
        validation_mode=str(get_secret("RTO_VALIDATION_MODE", "strict")).lower(),
    )
