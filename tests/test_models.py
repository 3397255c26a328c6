"""Tests for mentors, days and calendar helpers."""

from datetime import date

import pytest

from mentorshift.domain.models import (
    AssignmentPhase,
    Day,
    ForcedAssignment,
    Mentor,
    MentorSummary,
    RejectionReason,
    ShiftCategory,
    pay_period_number,
    shift_category,
    shift_type,
    week_key,
    weekday_name,
)
from mentorshift.domain.policies import DefaultWorkloadPolicy


def work(mentor: Mentor, d: date, hours: float = 1.0, shift_name: str = "a_shift") -> None:
    """Record a shift directly on a mentor."""
    mentor.assign(d, shift_name, hours, pay_period_number(d), week_key(d))


class TestCalendarHelpers:
    """Tests for date-derived keys."""

    def test_weekday_name(self):
        assert weekday_name(date(2026, 2, 1)) == "Sunday"
        assert weekday_name(date(2024, 1, 1)) == "Monday"

    def test_pay_period_boundaries(self):
        """Pay periods are 14-day blocks counted from January 1st."""
        assert pay_period_number(date(2026, 1, 1)) == 1
        assert pay_period_number(date(2026, 1, 14)) == 1
        assert pay_period_number(date(2026, 1, 15)) == 2
        assert pay_period_number(date(2026, 2, 1)) == 3

    def test_week_key_is_sunday(self):
        """Weeks are anchored on Sunday."""
        assert week_key(date(2026, 2, 4)) == date(2026, 2, 1)
        assert week_key(date(2026, 2, 1)) == date(2026, 2, 1)
        assert week_key(date(2026, 2, 7)) == date(2026, 2, 1)
        assert week_key(date(2026, 2, 8)) == date(2026, 2, 8)

    def test_shift_category(self):
        assert shift_category("a_shift") == ShiftCategory.CORE
        assert shift_category("holiday_b_shift") == ShiftCategory.CORE
        assert shift_category("c_shift") == ShiftCategory.ANCILLARY
        assert shift_category("C Shift") == ShiftCategory.ANCILLARY

    def test_shift_type(self):
        assert shift_type("a_shift") == "A"
        assert shift_type("holiday_b_shift") == "B"
        assert shift_type("c_shift") == "C"
        assert shift_type("errands") == "Other"


class TestMentorCanWork:
    """Tests for the basic legality check."""

    @pytest.fixture
    def mentor(self):
        return Mentor(
            name="Ann",
            hours_wanted=20,
            hard_dates={15},
            unavailable_weekdays={"Tuesday"},
        )

    def test_allowed(self, mentor):
        result = mentor.can_work(2, "Monday", 8, 3)
        assert result.allowed
        assert result.reason is None

    def test_requested_off(self, mentor):
        result = mentor.can_work(15, "Monday", 8, 3)
        assert not result.allowed
        assert result.reason == RejectionReason.REQUESTED_OFF

    def test_requested_off_checked_before_weekday(self, mentor):
        """Rules are evaluated in a fixed order."""
        result = mentor.can_work(15, "Tuesday", 8, 3)
        assert result.reason == RejectionReason.REQUESTED_OFF

    def test_unavailable_weekday(self, mentor):
        result = mentor.can_work(3, "Tuesday", 8, 3)
        assert result.reason == RejectionReason.UNAVAILABLE_WEEKDAY

    def test_already_assigned_today(self, mentor):
        work(mentor, date(2026, 2, 2), 8)
        result = mentor.can_work(2, "Monday", 8, 3)
        assert result.reason == RejectionReason.ALREADY_ASSIGNED_TODAY

    def test_pay_period_cap(self, mentor):
        """Exactly 80 hours is allowed; going over is not."""
        mentor.pay_period_hours[3] = 75
        assert mentor.can_work(2, "Monday", 5, 3).allowed
        result = mentor.can_work(2, "Monday", 6, 3)
        assert result.reason == RejectionReason.PAY_PERIOD_CAP

    def test_pay_period_cap_is_per_period(self, mentor):
        mentor.pay_period_hours[3] = 80
        assert mentor.can_work(2, "Monday", 8, 4).allowed


class TestMentorExtendedCheck:
    """Tests for weekly and rolling-window caps."""

    @pytest.fixture
    def policy(self):
        return DefaultWorkloadPolicy()

    def test_weekly_cap(self, policy):
        """16h in a week exceeds the 15h cap of a 10h/week mentor."""
        mentor = Mentor(name="Ann", hours_wanted=10)
        work(mentor, date(2026, 2, 2), 8)
        result = mentor.can_work_extended(date(2026, 2, 3), 8, policy)
        assert result.reason == RejectionReason.WEEKLY_CAP

    def test_weekly_cap_resets_on_sunday(self, policy):
        mentor = Mentor(name="Ann", hours_wanted=10)
        work(mentor, date(2026, 2, 7), 8)
        assert mentor.can_work_extended(date(2026, 2, 8), 7, policy).allowed

    def test_rolling_window_trailing(self, policy):
        """A sixth day inside seven is rejected."""
        mentor = Mentor(name="Ann", hours_wanted=40)
        for day in range(2, 7):
            work(mentor, date(2026, 2, day))
        result = mentor.can_work_extended(date(2026, 2, 7), 1, policy)
        assert result.reason == RejectionReason.ROLLING_WINDOW_CAP

    def test_rolling_window_allows_after_gap(self, policy):
        mentor = Mentor(name="Ann", hours_wanted=40)
        for day in range(2, 7):
            work(mentor, date(2026, 2, day))
        assert mentor.can_work_extended(date(2026, 2, 9), 1, policy).allowed

    def test_rolling_window_counts_later_days(self, policy):
        """Windows extending past the candidate date are checked as well."""
        mentor = Mentor(name="Ann", hours_wanted=40)
        for day in (2, 3, 5, 6, 7):
            work(mentor, date(2026, 2, day))
        result = mentor.can_work_extended(date(2026, 2, 4), 1, policy)
        assert result.reason == RejectionReason.ROLLING_WINDOW_CAP

    def test_extended_caps_can_be_disabled(self):
        policy = DefaultWorkloadPolicy(extended_caps=False)
        mentor = Mentor(name="Ann", hours_wanted=10)
        work(mentor, date(2026, 2, 2), 8)
        assert mentor.can_work_extended(date(2026, 2, 3), 8, policy).allowed

    def test_basic_rules_still_apply(self, policy):
        mentor = Mentor(name="Ann", hours_wanted=40, hard_dates={3})
        result = mentor.can_work_extended(date(2026, 2, 3), 8, policy)
        assert result.reason == RejectionReason.REQUESTED_OFF


class TestMentorBookkeeping:
    """Tests for assign/unassign and target arithmetic."""

    def test_assign_updates_all_totals(self):
        mentor = Mentor(name="Ann", hours_wanted=20)
        work(mentor, date(2026, 2, 2), 8, "b_shift")

        assert mentor.hours_assigned == 8
        assert mentor.hours_in_pay_period(3) == 8
        assert mentor.hours_in_week(date(2026, 2, 1)) == 8
        assert mentor.days_worked == {2}
        assert mentor.last_shift == "b_shift"

    def test_unassign_is_exact_inverse(self):
        mentor = Mentor(name="Ann", hours_wanted=20)
        work(mentor, date(2026, 2, 2), 8)
        mentor.unassign(date(2026, 2, 2), "a_shift", 8, 3, date(2026, 2, 1))

        assert mentor.hours_assigned == 0
        assert mentor.hours_in_pay_period(3) == 0
        assert mentor.hours_in_week(date(2026, 2, 1)) == 0
        assert mentor.days_worked == set()
        assert mentor.last_shift is None

    def test_percentage_of_target(self):
        mentor = Mentor(name="Ann", hours_wanted=20)
        mentor.hours_assigned = 40
        assert mentor.monthly_target(4) == 80
        assert mentor.percentage_of_target(4) == 50.0
        assert mentor.available_hours(4) == 40

    def test_zero_target_counts_as_satisfied(self):
        mentor = Mentor(name="Ann", hours_wanted=0)
        assert mentor.percentage_of_target(4) == 100.0
        mentor.hours_assigned = 8
        assert mentor.percentage_of_target(4) == float("inf")

    def test_to_record(self):
        mentor = Mentor(
            name="Ann",
            hours_wanted=20,
            hard_dates={9, 3},
            unavailable_weekdays={"Sunday", "Monday"},
        )
        record = mentor.to_record()
        assert record["hard_dates"] == [3, 9]
        assert record["unavailable_weekdays"] == ["Monday", "Sunday"]
        assert record["hours_assigned"] == 0.0


class TestDay:
    """Tests for Day slots and ordering."""

    @pytest.fixture
    def day(self):
        return Day(date(2026, 2, 2), {"c_shift": 4, "a_shift": 8, "b_shift": 8}, "winter")

    def test_derived_fields(self, day):
        assert day.weekday == "Monday"
        assert day.day_of_month == 2
        assert day.pay_period == 3
        assert day.week_key == date(2026, 2, 1)
        assert day.total_hours == 20

    def test_unfilled_shifts_core_first(self, day):
        """A/B shifts come before C shifts."""
        assert day.unfilled_shifts() == ["a_shift", "b_shift", "c_shift"]

    def test_holiday_shifts_are_core(self):
        day = Day(
            date(2026, 12, 25),
            {"c_shift": 4, "holiday_a_shift": 9, "holiday_b_shift": 9},
            "winter",
            is_holiday=True,
        )
        assert day.unfilled_shifts() == ["holiday_a_shift", "holiday_b_shift", "c_shift"]

    def test_assign_mentor_binds_both_sides(self, day):
        mentor = Mentor(name="Ann", hours_wanted=20)
        assignment = day.assign_mentor("a_shift", mentor, AssignmentPhase.PREFERENCE, sequence=7)

        assert assignment.phase == AssignmentPhase.PREFERENCE
        assert assignment.sequence == 7
        assert not assignment.is_forced
        assert day.assigned_hours == 8
        assert mentor.hours_assigned == 8
        assert day.has_mentor(mentor)
        assert day.mentor_on("a_shift") is mentor
        assert day.unfilled_shifts() == ["b_shift", "c_shift"]

    def test_assign_to_filled_slot_raises(self, day):
        day.assign_mentor("a_shift", Mentor(name="Ann", hours_wanted=20))
        with pytest.raises(ValueError):
            day.assign_mentor("a_shift", Mentor(name="Ben", hours_wanted=20))

    def test_assign_unknown_shift_raises(self, day):
        with pytest.raises(KeyError):
            day.assign_mentor("d_shift", Mentor(name="Ann", hours_wanted=20))

    def test_remove_mentor_rolls_back(self, day):
        mentor = Mentor(name="Ann", hours_wanted=20)
        day.assign_mentor("b_shift", mentor)
        removed = day.remove_mentor("b_shift")

        assert removed.mentor is mentor
        assert day.assigned_hours == 0
        assert mentor.hours_assigned == 0
        assert not day.has_mentor(mentor)
        assert day.remove_mentor("b_shift") is None

    def test_is_filled(self, day):
        for name, mentor_name in (("a_shift", "Ann"), ("b_shift", "Ben"), ("c_shift", "Cal")):
            assert not day.is_filled()
            day.assign_mentor(name, Mentor(name=mentor_name, hours_wanted=20))
        assert day.is_filled()

    def test_shift_set_is_immutable(self, day):
        with pytest.raises(TypeError):
            day.shifts["d_shift"] = 4

    def test_to_result(self, day):
        day.assign_mentor("a_shift", Mentor(name="Ann", hours_wanted=20))
        result = day.to_result()

        assert result.weekday == "Monday"
        assert result.assignments == {"c_shift": None, "a_shift": "Ann", "b_shift": None}
        assert result.unfilled == ["c_shift", "b_shift"]
        assert result.to_dict()["date"] == "2026-02-02"


class TestResultRecords:
    """Tests for result value types."""

    def test_forced_assignment_str(self):
        forced = ForcedAssignment(
            date(2026, 2, 3), "a_shift", "Ann", ["weekly cap exceeded (16h / 15h)"]
        )
        assert str(forced) == (
            "Day 3 Tuesday a_shift: FORCED Ann - weekly cap exceeded (16h / 15h)"
        )

    def test_mentor_summary(self):
        mentor = Mentor(name="Ann", hours_wanted=20, hard_dates={5})
        work(mentor, date(2026, 2, 2), 30)
        summary = MentorSummary.from_mentor(mentor, weeks=2)

        assert summary.target_hours == 40
        assert summary.deviation == -10
        assert summary.percentage_of_target == 75.0
        assert summary.hard_dates == [5]
        assert summary.to_dict()["pay_period_hours"] == {"3": 30}
