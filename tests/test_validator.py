"""
tests/test_validator.py

Covers:
  - Window sizing, weekly step and range overrun
  - Weekend and holiday exclusion from both counts
  - Early exit on the first violation
  - Trivially compliant edge cases
  - Policy argument checks
"""

from datetime import date, timedelta

import pytest

from dates import DateRange
from states import DateState
from validator import ValidationMode, evaluate_window, iter_windows, validate

W = DateState.WORKING


def weekdays(start: date, end: date):
    day = start
    while day <= end:
        if day.weekday() < 5:
            yield day.isoformat()
        day += timedelta(days=1)


def mark(*isos, state=W):
    return {iso: state for iso in isos}


# ── window layout ─────────────────────────────────────────────────────────────

class TestWindowLayout:

    def test_one_week_windows_step_by_seven(self, feb_2026):
        windows = list(iter_windows({}, feb_2026, None, 1, 0))
        assert [w.start_date for w in windows] == [
            date(2026, 2, 1), date(2026, 2, 8), date(2026, 2, 15), date(2026, 2, 22)
        ]
        assert all(w.end_date - w.start_date == timedelta(days=6) for w in windows)

    def test_windows_never_overrun_range(self, feb_2026):
        windows = list(iter_windows({}, feb_2026, None, 3, 0))
        assert [w.start_date for w in windows] == [date(2026, 2, 1), date(2026, 2, 8)]
        assert windows[-1].end_date == date(2026, 2, 28)

    def test_weekdays_only_in_denominator(self, feb_2026):
        window = evaluate_window({}, date(2026, 2, 1), 7, frozenset(), 3)
        assert window.weekdays_in_window == 5

    def test_weekend_marks_do_not_count(self):
        state_map = mark("2026-02-01", "2026-02-07")  # Sunday and Saturday
        window = evaluate_window(state_map, date(2026, 2, 1), 7, frozenset(), 1)
        assert window.compliant_days == 0
        assert not window.is_compliant

    def test_oof_and_holiday_marks_do_not_count(self):
        state_map = {
            "2026-02-02": DateState.OOF,
            "2026-02-03": DateState.HOLIDAY,
            "2026-02-04": W,
        }
        window = evaluate_window(state_map, date(2026, 2, 1), 7, frozenset(), 1)
        assert window.compliant_days == 1


# ── windowing property ────────────────────────────────────────────────────────

class TestExactSpan:

    def setup_method(self):
        self.range = DateRange(date(2026, 2, 1), date(2026, 2, 14))
        self.all_weekdays = list(weekdays(self.range.start, self.range.end))

    def test_full_attendance_is_valid(self):
        result = validate(mark(*self.all_weekdays), self.range, None, 2, len(self.all_weekdays))
        assert result.is_valid
        assert result.violating_window is None
        assert result.windows_checked == 1

    def test_one_day_short_names_the_span(self):
        state_map = mark(*self.all_weekdays[1:])
        result = validate(state_map, self.range, None, 2, len(self.all_weekdays))
        assert not result.is_valid
        window = result.violating_window
        assert window.start_date == self.range.start
        assert window.end_date == self.range.end
        assert window.compliant_days == 9
        assert window.weekdays_in_window == 10
        assert "2026-02-01 to 2026-02-14" in result.message


# ── holiday exclusion ─────────────────────────────────────────────────────────

class TestHolidayExclusion:

    def test_excluded_day_leaves_both_counts(self):
        state_map = mark("2026-02-16", "2026-02-17")
        window = evaluate_window(state_map, date(2026, 2, 15), 7, frozenset({"2026-02-16"}), 1)
        assert window.weekdays_in_window == 4
        assert window.compliant_days == 1

    def test_exclusions_accept_dates(self, feb_2026):
        all_days = list(weekdays(date(2026, 2, 15), date(2026, 2, 21)))
        result = validate(mark(*all_days[1:]), DateRange(date(2026, 2, 15), date(2026, 2, 21)),
                          {date(2026, 2, 16)}, 1, 4)
        assert result.is_valid

    def test_holiday_in_every_overlapping_window(self, feb_2026):
        exclusions = {"2026-02-16"}
        for window in iter_windows({}, feb_2026, exclusions, 2, 0):
            if window.contains(date(2026, 2, 16)):
                assert window.weekdays_in_window == 9
            else:
                assert window.weekdays_in_window == 10


# ── early exit ────────────────────────────────────────────────────────────────

class TestEarlyExit:

    def test_february_scenario(self, feb_2026):
        state_map = mark(
            "2026-02-02", "2026-02-03", "2026-02-04",
            "2026-02-16", "2026-02-17", "2026-02-18",
            "2026-02-23", "2026-02-24", "2026-02-25",
        )
        result = validate(state_map, feb_2026, None, 1, 3)
        assert not result.is_valid
        assert result.violating_window.start_date == date(2026, 2, 8)
        assert result.violating_window.end_date == date(2026, 2, 14)
        assert result.violating_window.compliant_days == 0
        assert result.windows_checked == 2

    def test_first_of_consecutive_violations(self, feb_2026):
        state_map = mark("2026-02-02", "2026-02-03", "2026-02-04")
        result = validate(state_map, feb_2026, None, 1, 3)
        assert result.violating_window.start_date == date(2026, 2, 8)

    def test_first_week_compliant(self, feb_2026):
        state_map = mark("2026-02-02", "2026-02-03", "2026-02-04")
        windows = list(iter_windows(state_map, feb_2026, None, 1, 3))
        assert windows[0].is_compliant
        assert windows[0].compliant_days == 3

    def test_rerun_starts_from_beginning(self, feb_2026):
        state_map = mark(*weekdays(feb_2026.start, feb_2026.end))
        assert validate(state_map, feb_2026, None, 1, 3).is_valid
        for iso in ("2026-02-03", "2026-02-04", "2026-02-05"):
            del state_map[iso]
        result = validate(state_map, feb_2026, None, 1, 3)
        assert result.violating_window.start_date == date(2026, 2, 1)


# ── trivial cases ─────────────────────────────────────────────────────────────

class TestTrivialCompliance:

    def test_range_shorter_than_window(self):
        short = DateRange(date(2026, 2, 1), date(2026, 2, 10))
        result = validate({}, short, None, 2, 5)
        assert result.is_valid
        assert result.windows_checked == 0
        assert "No complete 2-week window" in result.message

    def test_zero_minimum(self, feb_2026):
        result = validate({}, feb_2026, None, 1, 0)
        assert result.is_valid
        assert result.windows_checked == 4

    def test_success_message(self, feb_2026):
        state_map = mark(*weekdays(feb_2026.start, feb_2026.end))
        result = validate(state_map, feb_2026, set(), 2, 10)
        assert result.message == "All 3 windows meet the minimum of 10 in-office days"


class TestPolicyArguments:

    def test_zero_week_window_rejected(self, feb_2026):
        with pytest.raises(ValueError):
            validate({}, feb_2026, None, 0, 3)

    def test_negative_minimum_rejected(self, feb_2026):
        with pytest.raises(ValueError):
            validate({}, feb_2026, None, 1, -1)


# ── validation modes ──────────────────────────────────────────────────────────

class TestValidationModes:

    # Feb 9 and 10 are public holidays, leaving three weekdays in week two
    EXCLUSIONS = {"2026-02-09", "2026-02-10"}

    def setup_method(self):
        self.state_map = mark(
            "2026-02-02", "2026-02-03", "2026-02-04",
            "2026-02-11", "2026-02-12",
            "2026-02-16", "2026-02-17", "2026-02-18",
            "2026-02-23", "2026-02-24", "2026-02-25",
        )

    def test_strict_is_default(self, feb_2026):
        result = validate(self.state_map, feb_2026, self.EXCLUSIONS, 1, 3)
        assert result.mode is ValidationMode.STRICT
        assert not result.is_valid
        assert result.violating_window.start_date == date(2026, 2, 8)
        assert result.windows_checked == 2
        assert result.windows_violating == 1
        assert result.overall_compliance == pytest.approx(200 / 3)

    def test_average_prorates_for_holidays(self, feb_2026):
        result = validate(self.state_map, feb_2026, self.EXCLUSIONS, 1, 3, mode="average")
        assert result.mode is ValidationMode.AVERAGE
        assert result.is_valid
        assert result.windows_checked == 4
        assert result.overall_compliance == pytest.approx(60.0)
        assert result.message == "All 4 windows average at least 60% in-office days"

    def test_average_scans_every_window(self, feb_2026):
        result = validate({}, feb_2026, None, 1, 3, mode=ValidationMode.AVERAGE)
        assert not result.is_valid
        assert result.windows_checked == 4
        assert result.windows_violating == 4
        assert result.violating_window.start_date == date(2026, 2, 1)
        assert result.overall_compliance == 0.0
        assert result.message.startswith("4 of 4 windows average below 60%")

    def test_average_window_without_weekdays_complies(self):
        window = evaluate_window({}, date(2026, 2, 1), 7, frozenset(weekdays(date(2026, 2, 1), date(2026, 2, 7))),
                                 3, ValidationMode.AVERAGE)
        assert window.weekdays_in_window == 0
        assert window.is_compliant
        assert window.compliance_percentage == 100.0

    def test_strict_overall_is_lowest_window(self, feb_2026):
        result = validate(mark(*weekdays(feb_2026.start, feb_2026.end)), feb_2026, None, 1, 3)
        assert result.is_valid
        assert result.overall_compliance == 100.0

    def test_unknown_mode_rejected(self, feb_2026):
        with pytest.raises(ValueError):
            validate({}, feb_2026, None, 1, 3, mode="lenient")
