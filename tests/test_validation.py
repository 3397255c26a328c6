"""Tests for schedule validation."""

from datetime import date, timedelta

import pytest

from mentorshift.domain.models import AssignmentPhase, Day, Mentor
from mentorshift.domain.policies import DefaultWorkloadPolicy
from mentorshift.validation.validator import (
    ScheduleValidator,
    ValidationErrorType,
    busiest_window,
)


def make_days(start: date, count: int, shifts: dict) -> list[Day]:
    return [Day(start + timedelta(days=i), shifts, "winter") for i in range(count)]


def error_types(result) -> list[ValidationErrorType]:
    return [e.error_type for e in result.errors]


class TestScheduleValidator:
    """Tests for ScheduleValidator."""

    @pytest.fixture
    def validator(self):
        """Create a validator with default policies."""
        return ScheduleValidator()

    @pytest.fixture
    def basic_validator(self):
        """Validator that checks only the basic rules."""
        return ScheduleValidator(DefaultWorkloadPolicy(extended_caps=False))

    def test_valid_schedule(self, validator):
        ann = Mentor(name="Ann", hours_wanted=20)
        ben = Mentor(name="Ben", hours_wanted=20)
        days = make_days(date(2026, 2, 2), 2, {"a_shift": 8, "b_shift": 8})
        days[0].assign_mentor("a_shift", ann, sequence=1)
        days[0].assign_mentor("b_shift", ben, sequence=2)
        days[1].assign_mentor("a_shift", ben, sequence=3)

        result = validator.validate(days, [ann, ben])

        assert result.is_valid, [str(e) for e in result.errors]
        assert result.warnings == []

    def test_duplicate_mentor_same_day(self, validator):
        """The later of two same-day assignments is the violating one."""
        ann = Mentor(name="Ann", hours_wanted=40)
        days = make_days(date(2026, 2, 2), 1, {"a_shift": 8, "b_shift": 8})
        days[0].assign_mentor("b_shift", ann, sequence=1)
        days[0].assign_mentor("a_shift", ann, sequence=2)

        result = validator.validate(days, [ann])

        assert error_types(result) == [ValidationErrorType.DUPLICATE_MENTOR_SAME_DAY]
        assert result.errors[0].shift_name == "a_shift"

    def test_hard_date_violation(self, validator):
        ann = Mentor(name="Ann", hours_wanted=20, hard_dates={2})
        days = make_days(date(2026, 2, 2), 1, {"a_shift": 8})
        days[0].assign_mentor("a_shift", ann, sequence=1)

        result = validator.validate(days, [ann])

        assert error_types(result) == [ValidationErrorType.HARD_DATE_VIOLATION]
        assert result.errors[0].work_date == date(2026, 2, 2)

    def test_unavailable_weekday_violation(self, validator):
        ann = Mentor(name="Ann", hours_wanted=20, unavailable_weekdays={"Monday"})
        days = make_days(date(2026, 2, 2), 1, {"a_shift": 8})
        days[0].assign_mentor("a_shift", ann, sequence=1)

        result = validator.validate(days, [ann])

        assert error_types(result) == [ValidationErrorType.UNAVAILABLE_WEEKDAY_VIOLATION]

    def test_pay_period_cap_flags_crossing_assignment(self, basic_validator):
        """Eleven 8h shifts in one pay period: only the eleventh is over 80h."""
        ann = Mentor(name="Ann", hours_wanted=40)
        # 2026-02-01 .. 2026-02-11 all fall in pay period 3
        days = make_days(date(2026, 2, 1), 11, {"a_shift": 8})
        for i, day in enumerate(days):
            day.assign_mentor("a_shift", ann, sequence=i + 1)

        result = basic_validator.validate(days, [ann])

        assert error_types(result) == [ValidationErrorType.PAY_PERIOD_CAP_EXCEEDED]
        assert result.errors[0].work_date == date(2026, 2, 11)
        assert result.errors[0].details["hours"] == 88

    def test_attribution_follows_assignment_order(self, basic_validator):
        """The assignment made last is blamed, whatever its date."""
        ann = Mentor(name="Ann", hours_wanted=40)
        days = make_days(date(2026, 2, 1), 11, {"a_shift": 8})
        for i, day in enumerate(reversed(days)):
            day.assign_mentor("a_shift", ann, sequence=i + 1)

        result = basic_validator.validate(days, [ann])

        assert len(result.errors) == 1
        assert result.errors[0].work_date == date(2026, 2, 1)

    def test_weekly_cap(self, validator):
        ann = Mentor(name="Ann", hours_wanted=10)
        days = make_days(date(2026, 2, 2), 2, {"a_shift": 8})
        days[0].assign_mentor("a_shift", ann, sequence=1)
        days[1].assign_mentor("a_shift", ann, sequence=2)

        result = validator.validate(days, [ann])

        assert error_types(result) == [ValidationErrorType.WEEKLY_CAP_EXCEEDED]
        assert result.errors[0].work_date == date(2026, 2, 3)

    def test_weekly_cap_not_checked_when_disabled(self, basic_validator):
        ann = Mentor(name="Ann", hours_wanted=10)
        days = make_days(date(2026, 2, 2), 2, {"a_shift": 8})
        days[0].assign_mentor("a_shift", ann, sequence=1)
        days[1].assign_mentor("a_shift", ann, sequence=2)

        assert basic_validator.validate(days, [ann]).is_valid

    def test_rolling_window(self, validator):
        """A sixth consecutive day violates the 5-in-7 rule."""
        ann = Mentor(name="Ann", hours_wanted=40)
        days = make_days(date(2026, 2, 2), 6, {"a_shift": 1})
        for i, day in enumerate(days):
            day.assign_mentor("a_shift", ann, sequence=i + 1)

        result = validator.validate(days, [ann])

        assert error_types(result) == [ValidationErrorType.ROLLING_WINDOW_EXCEEDED]
        assert result.errors[0].work_date == date(2026, 2, 7)
        assert result.errors[0].details["days"] == 6

    def test_force_fill_violations_are_accepted(self, validator):
        ann = Mentor(name="Ann", hours_wanted=10)
        days = make_days(date(2026, 2, 2), 2, {"a_shift": 8})
        days[0].assign_mentor("a_shift", ann, sequence=1)
        days[1].assign_mentor(
            "a_shift",
            ann,
            phase=AssignmentPhase.FORCE_FILL,
            sequence=2,
            forced_reasons=["weekly cap exceeded (16h / 15h)"],
        )

        result = validator.validate(days, [ann])

        assert not result.is_valid
        assert result.repairable_errors == []
        assert len(result.accepted_errors) == 1
        assert result.accepted_errors[0].from_force_fill

    def test_earlier_phase_violations_are_repairable(self, validator):
        ann = Mentor(name="Ann", hours_wanted=20, hard_dates={2})
        days = make_days(date(2026, 2, 2), 1, {"a_shift": 8})
        days[0].assign_mentor("a_shift", ann, phase=AssignmentPhase.PREFERENCE, sequence=1)

        result = validator.validate(days, [ann])

        assert len(result.repairable_errors) == 1
        assert result.repairable_errors[0].slot_key == (date(2026, 2, 2), "a_shift")

    def test_bookkeeping_mismatch_warns(self, validator):
        ann = Mentor(name="Ann", hours_wanted=20)
        days = make_days(date(2026, 2, 2), 1, {"a_shift": 8})
        days[0].assign_mentor("a_shift", ann, sequence=1)
        ann.hours_assigned = 12

        result = validator.validate(days, [ann])

        assert result.is_valid
        assert len(result.warnings) == 1
        assert "Ann" in result.warnings[0]

    def test_error_str(self, validator):
        ann = Mentor(name="Ann", hours_wanted=20, hard_dates={2})
        days = make_days(date(2026, 2, 2), 1, {"a_shift": 8})
        days[0].assign_mentor("a_shift", ann, sequence=1)

        error = validator.validate(days, [ann]).errors[0]

        assert str(error).startswith("[hard_date_violation] Day 2 a_shift:")


class TestBusiestWindow:
    """Tests for the rolling-window helper."""

    def test_empty(self):
        assert busiest_window(set(), date(2026, 2, 5), 7) == 0

    def test_excludes_candidate_date(self):
        worked = {date(2026, 2, d) for d in range(2, 7)}
        assert busiest_window(worked, date(2026, 2, 4), 7) == 4

    def test_counts_both_sides(self):
        worked = {date(2026, 2, 2), date(2026, 2, 8)}
        assert busiest_window(worked, date(2026, 2, 5), 7) == 2
