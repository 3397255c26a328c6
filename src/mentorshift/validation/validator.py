"""Validation module for verifying a completed month.

This module re-derives every rule from the day slots alone, independent of
the mentors' running totals, so it also catches bookkeeping drift. Each
violation is pinned to the single (day, shift) assignment that crossed the
line, which lets the scheduler decide whether to repair it or accept it.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import Optional

from mentorshift.domain.models import (
    AssignmentPhase,
    Day,
    Mentor,
    SlotAssignment,
)
from mentorshift.domain.policies import DefaultWorkloadPolicy, WorkloadPolicy


class ValidationErrorType(Enum):
    """Types of validation errors."""

    DUPLICATE_MENTOR_SAME_DAY = "duplicate_mentor_same_day"
    HARD_DATE_VIOLATION = "hard_date_violation"
    UNAVAILABLE_WEEKDAY_VIOLATION = "unavailable_weekday_violation"
    PAY_PERIOD_CAP_EXCEEDED = "pay_period_cap_exceeded"
    WEEKLY_CAP_EXCEEDED = "weekly_cap_exceeded"
    ROLLING_WINDOW_EXCEEDED = "rolling_window_exceeded"


@dataclass
class ValidationError:
    """A single rule violation pinned to one assignment."""

    error_type: ValidationErrorType
    message: str
    mentor_name: str
    work_date: date
    shift_name: str
    phase: AssignmentPhase
    details: dict = field(default_factory=dict)

    @property
    def from_force_fill(self) -> bool:
        """Violations introduced by force fill are accepted, not repaired."""
        return self.phase == AssignmentPhase.FORCE_FILL

    @property
    def slot_key(self) -> tuple[date, str]:
        return (self.work_date, self.shift_name)

    def __str__(self) -> str:
        return (
            f"[{self.error_type.value}] Day {self.work_date.day} {self.shift_name}: "
            f"{self.message}"
        )


@dataclass
class ValidationResult:
    """Result of validating a schedule."""

    is_valid: bool
    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add_error(self, error: ValidationError) -> None:
        """Add an error and mark as invalid."""
        self.errors.append(error)
        self.is_valid = False

    def add_warning(self, warning: str) -> None:
        """Add a warning (doesn't affect validity)."""
        self.warnings.append(warning)

    @property
    def repairable_errors(self) -> list[ValidationError]:
        return [e for e in self.errors if not e.from_force_fill]

    @property
    def accepted_errors(self) -> list[ValidationError]:
        return [e for e in self.errors if e.from_force_fill]


@dataclass
class _Placement:
    day: Day
    shift_name: str
    assignment: SlotAssignment

    @property
    def hours(self) -> float:
        return self.day.shifts[self.shift_name]


class ScheduleValidator:
    """Validates a month of days against every hard rule.

    Cumulative caps are attributed in assignment order: the assignment whose
    hours first push a total over its cap (and every later one in the same
    bucket) is the violating one.

    Example:
        >>> validator = ScheduleValidator()
        >>> result = validator.validate(days, mentors)
        >>> for error in result.repairable_errors:
        ...     print(error)
    """

    def __init__(self, policy: Optional[WorkloadPolicy] = None):
        self.policy = policy or DefaultWorkloadPolicy()

    def validate(self, days: list[Day], mentors: list[Mentor]) -> ValidationResult:
        """Validate all assignments in the given days.

        Args:
            days: Scheduled days of the run.
            mentors: Roster of the run, used for bookkeeping checks.

        Returns:
            ValidationResult with one error per violating assignment.
        """
        result = ValidationResult(is_valid=True)
        placements = self._collect(days)

        self._validate_same_day(placements, result)
        self._validate_availability(placements, result)
        self._validate_pay_periods(placements, result)
        if self.policy.enforce_extended_caps():
            self._validate_weekly_hours(placements, result)
            self._validate_rolling_window(placements, result)
        self._validate_bookkeeping(placements, mentors, result)

        return result

    def _collect(self, days: list[Day]) -> list[_Placement]:
        placements = [
            _Placement(day, name, slot)
            for day in days
            for name, slot in day.slots.items()
            if slot is not None
        ]
        placements.sort(key=lambda p: p.assignment.sequence)
        return placements

    def _error(
        self,
        result: ValidationResult,
        error_type: ValidationErrorType,
        placement: _Placement,
        message: str,
        **details,
    ) -> None:
        result.add_error(
            ValidationError(
                error_type=error_type,
                message=message,
                mentor_name=placement.assignment.mentor.name,
                work_date=placement.day.date,
                shift_name=placement.shift_name,
                phase=placement.assignment.phase,
                details=details,
            )
        )

    def _validate_same_day(self, placements: list[_Placement], result: ValidationResult) -> None:
        """A mentor may hold at most one slot per day; later slots violate."""
        seen: set[tuple[date, str]] = set()
        for placement in placements:
            key = (placement.day.date, placement.assignment.mentor.name)
            if key in seen:
                self._error(
                    result,
                    ValidationErrorType.DUPLICATE_MENTOR_SAME_DAY,
                    placement,
                    f"{key[1]} assigned multiple shifts on day {placement.day.day_of_month}",
                )
            seen.add(key)

    def _validate_availability(
        self, placements: list[_Placement], result: ValidationResult
    ) -> None:
        for placement in placements:
            mentor = placement.assignment.mentor
            day = placement.day
            if day.day_of_month in mentor.hard_dates:
                self._error(
                    result,
                    ValidationErrorType.HARD_DATE_VIOLATION,
                    placement,
                    f"{mentor.name} scheduled on requested day off ({day.day_of_month})",
                )
            if day.weekday in mentor.unavailable_weekdays:
                self._error(
                    result,
                    ValidationErrorType.UNAVAILABLE_WEEKDAY_VIOLATION,
                    placement,
                    f"{mentor.name} scheduled on unavailable weekday {day.weekday}",
                )

    def _validate_pay_periods(
        self, placements: list[_Placement], result: ValidationResult
    ) -> None:
        cap = self.policy.pay_period_cap_hours()
        totals: dict[tuple[str, int], float] = defaultdict(float)
        for placement in placements:
            key = (placement.assignment.mentor.name, placement.day.pay_period)
            totals[key] += placement.hours
            if totals[key] > cap:
                self._error(
                    result,
                    ValidationErrorType.PAY_PERIOD_CAP_EXCEEDED,
                    placement,
                    f"{key[0]} exceeds {cap:g}h in pay period {key[1]} "
                    f"({totals[key]:g}h)",
                    hours=totals[key],
                    cap=cap,
                )

    def _validate_weekly_hours(
        self, placements: list[_Placement], result: ValidationResult
    ) -> None:
        totals: dict[tuple[str, date], float] = defaultdict(float)
        for placement in placements:
            mentor = placement.assignment.mentor
            cap = self.policy.weekly_cap_hours(mentor.hours_wanted)
            key = (mentor.name, placement.day.week_key)
            totals[key] += placement.hours
            if totals[key] > cap:
                self._error(
                    result,
                    ValidationErrorType.WEEKLY_CAP_EXCEEDED,
                    placement,
                    f"{mentor.name} exceeds weekly limit in week of "
                    f"{key[1].isoformat()} ({totals[key]:g}h / {cap:g}h max)",
                    hours=totals[key],
                    cap=cap,
                )

    def _validate_rolling_window(
        self, placements: list[_Placement], result: ValidationResult
    ) -> None:
        window = self.policy.window_days()
        limit = self.policy.max_days_in_window()
        worked: dict[str, set[date]] = defaultdict(set)
        for placement in placements:
            name = placement.assignment.mentor.name
            work_date = placement.day.date
            if work_date in worked[name]:
                continue
            busiest = busiest_window(worked[name], work_date, window)
            worked[name].add(work_date)
            if busiest + 1 > limit:
                self._error(
                    result,
                    ValidationErrorType.ROLLING_WINDOW_EXCEEDED,
                    placement,
                    f"{name} works {busiest + 1} days in a {window}-day window",
                    days=busiest + 1,
                    limit=limit,
                )

    def _validate_bookkeeping(
        self,
        placements: list[_Placement],
        mentors: list[Mentor],
        result: ValidationResult,
    ) -> None:
        """Warn when a mentor's running total disagrees with the slots."""
        hours: dict[str, float] = defaultdict(float)
        for placement in placements:
            hours[placement.assignment.mentor.name] += placement.hours
        for mentor in mentors:
            if abs(hours[mentor.name] - mentor.hours_assigned) > 1e-6:
                result.add_warning(
                    f"{mentor.name}: running total {mentor.hours_assigned:g}h "
                    f"does not match assigned slots {hours[mentor.name]:g}h"
                )


def busiest_window(worked: set[date], work_date: date, window_days: int) -> int:
    """Most worked days (excluding work_date) in any window containing work_date."""
    busiest = 0
    for offset in range(window_days):
        start = work_date - timedelta(days=offset)
        end = start + timedelta(days=window_days - 1)
        count = sum(1 for d in worked if start <= d <= end and d != work_date)
        busiest = max(busiest, count)
    return busiest
