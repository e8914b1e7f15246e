"""
Rolling-window compliance validation.

A window spans window_weeks * 7 consecutive days. Windows start at the
beginning of the range and advance one week at a time; a window that
would run past the end of the range is not evaluated. Within a window
only weekdays that are not holiday exclusions are counted, and only
in-office marks count toward compliance.

Two modes are supported:
  - strict: a window needs at least min_compliant_days in-office days.
    The scan stops at the first non-compliant window.
  - average: the required days are prorated to the weekdays actually
    available in the window, so a window with holidays needs
    proportionally fewer in-office days. Every window is scanned.
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import FrozenSet, Iterable, Iterator, Mapping, Optional

from dates import DateLike, DateRange, is_weekend, to_iso
from states import IN_OFFICE_STATES, DateState

logger = logging.getLogger(__name__)

DAYS_PER_WEEK = 7
WEEKDAYS_PER_WEEK = 5


class ValidationMode(str, Enum):
    STRICT = "strict"
    AVERAGE = "average"


def coerce_validation_mode(value) -> ValidationMode:
    """Accept a ValidationMode or its string value."""
    try:
        return ValidationMode(value)
    except ValueError:
        raise ValueError(
            f"Unknown validation mode {value!r}; expected one of "
            f"{', '.join(m.value for m in ValidationMode)}"
        )


@dataclass(frozen=True)
class ComplianceWindow:
    start_date: date
    end_date: date
    weekdays_in_window: int
    compliant_days: int
    is_compliant: bool

    @property
    def span(self) -> str:
        return f"{self.start_date.isoformat()} to {self.end_date.isoformat()}"

    @property
    def compliance_percentage(self) -> float:
        """In-office share of counted weekdays (100 when none are counted)."""
        if self.weekdays_in_window == 0:
            return 100.0
        return 100.0 * self.compliant_days / self.weekdays_in_window

    def contains(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    message: str
    violating_window: Optional[ComplianceWindow] = None
    windows_checked: int = 0
    overall_compliance: float = 100.0
    windows_violating: int = 0
    mode: ValidationMode = ValidationMode.STRICT


def normalize_exclusions(holiday_exclusions: Optional[Iterable[DateLike]]) -> FrozenSet[str]:
    """Turn any collection of dates into a set of ISO keys (None means none)."""
    if not holiday_exclusions:
        return frozenset()
    return frozenset(to_iso(d) for d in holiday_exclusions)


def _check_policy(window_weeks: int, min_compliant_days: int) -> None:
    if window_weeks < 1:
        raise ValueError(f"window_weeks must be at least 1; got {window_weeks}")
    if min_compliant_days < 0:
        raise ValueError(f"min_compliant_days must be non-negative; got {min_compliant_days}")


def evaluate_window(
    state_map: Mapping[str, DateState],
    start: date,
    window_days: int,
    exclusions: FrozenSet[str],
    min_compliant_days: int,
    mode: ValidationMode = ValidationMode.STRICT,
) -> ComplianceWindow:
    """
    Count weekdays and in-office days in one window.

    Args:
        state_map: ISO date -> state (absent means unmarked)
        start: First day of the window
        window_days: Window length in days
        exclusions: ISO dates removed from both counts
        min_compliant_days: Threshold for a window with no exclusions
        mode: strict compares counts directly, average prorates the
            threshold to the weekdays left after exclusions

    Returns:
        The evaluated window
    """
    weekdays = 0
    compliant = 0

    for offset in range(window_days):
        day = start + timedelta(days=offset)
        if is_weekend(day):
            continue
        iso = day.isoformat()
        if iso in exclusions:
            continue
        weekdays += 1
        if state_map.get(iso) in IN_OFFICE_STATES:
            compliant += 1

    if mode is ValidationMode.AVERAGE:
        # compliant / weekdays >= min / full_weekdays, kept in integers
        full_weekdays = window_days // DAYS_PER_WEEK * WEEKDAYS_PER_WEEK
        is_compliant = compliant * full_weekdays >= min_compliant_days * weekdays
    else:
        is_compliant = compliant >= min_compliant_days

    return ComplianceWindow(
        start_date=start,
        end_date=start + timedelta(days=window_days - 1),
        weekdays_in_window=weekdays,
        compliant_days=compliant,
        is_compliant=is_compliant,
    )


def iter_windows(
    state_map: Mapping[str, DateState],
    date_range: DateRange,
    holiday_exclusions: Optional[Iterable[DateLike]],
    window_weeks: int,
    min_compliant_days: int,
    mode: ValidationMode = ValidationMode.STRICT,
) -> Iterator[ComplianceWindow]:
    """Yield every window that fits inside the range, in chronological order."""
    _check_policy(window_weeks, min_compliant_days)
    mode = coerce_validation_mode(mode)
    exclusions = normalize_exclusions(holiday_exclusions)
    window_days = window_weeks * DAYS_PER_WEEK

    start = date_range.start
    while start + timedelta(days=window_days - 1) <= date_range.end:
        yield evaluate_window(state_map, start, window_days, exclusions, min_compliant_days, mode)
        start += timedelta(days=DAYS_PER_WEEK)


def _no_window_result(window_weeks: int, mode: ValidationMode) -> ValidationResult:
    return ValidationResult(
        is_valid=True,
        message=f"No complete {window_weeks}-week window in range",
        mode=mode,
    )


def validate(
    state_map: Mapping[str, DateState],
    date_range: DateRange,
    holiday_exclusions: Optional[Iterable[DateLike]],
    window_weeks: int,
    min_compliant_days: int,
    mode: ValidationMode = ValidationMode.STRICT,
) -> ValidationResult:
    """
    Scan all windows and report the first violation.

    Every call starts from the beginning of the range; nothing is cached
    between runs.

    Args:
        state_map: ISO date -> state
        date_range: Range to scan
        holiday_exclusions: Dates excluded from counting (may be empty or None)
        window_weeks: Window length in weeks
        min_compliant_days: Minimum in-office days per window
        mode: strict (default) or average

    Returns:
        ValidationResult with the earliest violating window, if any.
        overall_compliance is the violating window's in-office percentage,
        or the lowest percentage across windows when all pass.
    """
    mode = coerce_validation_mode(mode)
    if mode is ValidationMode.AVERAGE:
        return validate_average(
            state_map, date_range, holiday_exclusions, window_weeks, min_compliant_days
        )

    checked = 0
    lowest = 100.0
    for window in iter_windows(
        state_map, date_range, holiday_exclusions, window_weeks, min_compliant_days
    ):
        checked += 1
        if not window.is_compliant:
            logger.debug("Violation in window %s after %d windows", window.span, checked)
            return ValidationResult(
                is_valid=False,
                message=(
                    f"Window {window.span} has {window.compliant_days} in-office days "
                    f"of {window.weekdays_in_window} weekdays, required: {min_compliant_days}"
                ),
                violating_window=window,
                windows_checked=checked,
                overall_compliance=window.compliance_percentage,
                windows_violating=1,
            )
        lowest = min(lowest, window.compliance_percentage)

    if checked == 0:
        return _no_window_result(window_weeks, mode)

    logger.debug("Validation passed: %d windows checked", checked)
    return ValidationResult(
        is_valid=True,
        message=(
            f"All {checked} windows meet the minimum of "
            f"{min_compliant_days} in-office days"
        ),
        windows_checked=checked,
        overall_compliance=lowest,
    )


def validate_average(
    state_map: Mapping[str, DateState],
    date_range: DateRange,
    holiday_exclusions: Optional[Iterable[DateLike]],
    window_weeks: int,
    min_compliant_days: int,
) -> ValidationResult:
    """
    Scan every window with the threshold prorated to its available weekdays.

    Unlike strict mode the scan does not stop early, so the result also
    reports how many windows fall short.
    """
    mode = ValidationMode.AVERAGE
    windows = list(iter_windows(
        state_map, date_range, holiday_exclusions, window_weeks, min_compliant_days, mode
    ))
    if not windows:
        return _no_window_result(window_weeks, mode)

    required = 100.0 * min_compliant_days / (window_weeks * WEEKDAYS_PER_WEEK)
    violating = [w for w in windows if not w.is_compliant]
    logger.debug("Average validation: %d windows, %d violating", len(windows), len(violating))

    if violating:
        first = violating[0]
        return ValidationResult(
            is_valid=False,
            message=(
                f"{len(violating)} of {len(windows)} windows average below {required:.0f}% "
                f"in-office days; first: {first.span} at {first.compliance_percentage:.0f}%"
            ),
            violating_window=first,
            windows_checked=len(windows),
            overall_compliance=first.compliance_percentage,
            windows_violating=len(violating),
            mode=mode,
        )

    return ValidationResult(
        is_valid=True,
        message=f"All {len(windows)} windows average at least {required:.0f}% in-office days",
        windows_checked=len(windows),
        overall_compliance=min(w.compliance_percentage for w in windows),
        mode=mode,
    )
