"""Main scheduler interface.

This module provides the Schedule orchestrator, which owns one month's run
from building the days through validation and repair, and the high-level
Scheduler class that callers use to produce results.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from mentorshift.domain.config import ScheduleConfig
from mentorshift.domain.models import (
    AssignmentPhase,
    Day,
    DayResult,
    ForcedAssignment,
    Mentor,
    MentorSummary,
    UnfilledSlot,
    shift_type,
    weekday_name,
)
from mentorshift.scheduling.heuristic_solver import (
    DEFAULT_MAX_FILL_ITERATIONS,
    HeuristicSolver,
    RunState,
)
from mentorshift.validation.validator import (
    ScheduleValidator,
    ValidationError,
    ValidationResult,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_REPAIR_ROUNDS = 3
BALANCE_TOLERANCE_HOURS = 2.0
VARIETY_RUN_LENGTH = 3


@dataclass
class ScheduleResult:
    """Complete output of one scheduling run."""

    year: int
    month: int
    days: list[DayResult]
    mentors: list[MentorSummary]
    messages: list[str] = field(default_factory=list)
    forced_assignments: list[ForcedAssignment] = field(default_factory=list)
    unfilled_slots: list[UnfilledSlot] = field(default_factory=list)
    accepted_violations: list[ValidationError] = field(default_factory=list)
    repaired_violations: list[ValidationError] = field(default_factory=list)

    @property
    def total_slots(self) -> int:
        return sum(len(day.shifts) for day in self.days)

    @property
    def filled_slots(self) -> int:
        return self.total_slots - len(self.unfilled_slots)

    @property
    def is_complete(self) -> bool:
        return not self.unfilled_slots

    def get_day(self, day_of_month: int) -> Optional[DayResult]:
        for day in self.days:
            if day.work_date.day == day_of_month:
                return day
        return None

    def get_mentor(self, name: str) -> Optional[MentorSummary]:
        for summary in self.mentors:
            if summary.name == name:
                return summary
        return None

    def to_dict(self) -> dict:
        return {
            "year": self.year,
            "month": self.month,
            "days": [day.to_dict() for day in self.days],
            "mentors": [summary.to_dict() for summary in self.mentors],
            "messages": list(self.messages),
            "forced_assignments": [
                {
                    "date": f.work_date.isoformat(),
                    "shift": f.shift_name,
                    "mentor": f.mentor_name,
                    "reasons": list(f.reasons),
                }
                for f in self.forced_assignments
            ],
            "unfilled_slots": [
                {"date": u.work_date.isoformat(), "shift": u.shift_name, "reason": u.reason}
                for u in self.unfilled_slots
            ],
            "accepted_violations": [str(v) for v in self.accepted_violations],
            "repaired_violations": [str(v) for v in self.repaired_violations],
        }


class Schedule:
    """One month's scheduling run.

    Holds the days, the live mentors and the diagnostic log. A Schedule is
    single use: build it from a config, call run() once, read the result.
    All mutable state is private to the instance.

    Example:
        >>> schedule = Schedule(config)
        >>> result = schedule.run()
        >>> print(result.messages[-1])
    """

    def __init__(
        self,
        config: ScheduleConfig,
        max_fill_iterations: int = DEFAULT_MAX_FILL_ITERATIONS,
        max_repair_rounds: int = DEFAULT_MAX_REPAIR_ROUNDS,
    ):
        """Build mentors and days for the configured month.

        Args:
            config: Validated input snapshot.
            max_fill_iterations: Safety bound for the equal-distribution loop.
            max_repair_rounds: How many validate/repair cycles to attempt.
        """
        if max_repair_rounds < 0:
            raise ValueError("max_repair_rounds cannot be negative")

        self.config = config
        self.policy = config.policy
        self.max_repair_rounds = max_repair_rounds
        self.solver = HeuristicSolver(self.policy, max_iterations=max_fill_iterations)
        self.validator = ScheduleValidator(self.policy)

        self.mentors: list[Mentor] = [
            mentor_config.to_mentor(config.year, config.month)
            for mentor_config in config.active_mentors
        ]
        self.days: list[Day] = self._build_days()
        self.weeks = len(self.days) / 7
        self.state = RunState(days=self.days, mentors=self.mentors, weeks=self.weeks)
        self.repaired: list[ValidationError] = []
        self.final_validation: Optional[ValidationResult] = None
        self._finished = False
        logger.debug(
            "Built %d days (%s) for %d mentors",
            len(self.days),
            self.days[0].season,
            len(self.mentors),
        )

    @property
    def messages(self) -> list[str]:
        return self.state.messages

    def _build_days(self) -> list[Day]:
        table = self.config.shift_table
        season = table.season_for_month(self.config.month)
        holidays = self.config.holidays
        days = []
        for work_date in self.config.schedule_dates:
            if holidays.is_holiday(work_date.day):
                days.append(Day(work_date, holidays.shift_info, season, is_holiday=True))
            else:
                shifts = table.shifts_for(season, weekday_name(work_date))
                days.append(Day(work_date, shifts, season))
        return days

    def run(self) -> ScheduleResult:
        """Execute every phase and return the result."""
        if self._finished:
            raise RuntimeError("Schedule.run() can only be called once")
        self._finished = True

        self.state.note(
            f"Scheduling {self.config.year}-{self.config.month:02d}: "
            f"{len(self.days)} days, {len(self.mentors)} mentors"
        )

        self.solver.run_preference_pass(self.state)
        outcome = self.solver.run_equal_distribution(self.state)
        self.state.note(
            f"Equal distribution: {outcome.assigned} shifts assigned "
            f"in {outcome.iterations} iterations"
        )
        if self.state.open_slots():
            self.solver.run_force_fill(self.state)

        self._validate_and_repair()
        self._report()
        return self._build_result()

    def _validate_and_repair(self) -> None:
        """Scan for violations and repair those not made by force fill."""
        for round_number in range(self.max_repair_rounds + 1):
            result = self.validator.validate(self.days, self.mentors)
            self.final_validation = result

            repairable = result.repairable_errors
            if not repairable:
                break
            if round_number == self.max_repair_rounds:
                for error in repairable:
                    self.state.note(f"UNREPAIRED {error}", logging.ERROR)
                break

            vacated = set()
            for error in repairable:
                if error.slot_key in vacated:
                    continue
                day = self.state.day_on(error.work_date)
                day.remove_mentor(error.shift_name)
                vacated.add(error.slot_key)
                self.repaired.append(error)
                self.state.note(f"REPAIRED {error}", logging.WARNING)

            self.solver.run_equal_distribution(
                self.state, restrict_to=vacated, phase=AssignmentPhase.REPAIR
            )
            if self.state.open_slots(vacated):
                self.solver.run_force_fill(self.state, restrict_to=vacated)

        for warning in self.final_validation.warnings:
            self.state.note(warning, logging.WARNING)
        for error in self.final_validation.accepted_errors:
            self.state.note(f"ACCEPTED {error}", logging.WARNING)
        if self.final_validation.is_valid:
            self.state.note("Validation: no violations found")

    def _report(self) -> None:
        self._report_variety()
        self._report_balance()
        for mentor in self.mentors:
            target = mentor.monthly_target(self.weeks)
            self.state.note(
                f"{mentor.name}: {mentor.hours_assigned:g}h assigned / "
                f"{target:.1f}h target ({mentor.percentage_of_target(self.weeks):.0f}%)"
            )
        unfilled = len(self.state.open_slots())
        self.state.note(f"Unfilled slots: {unfilled}")

    def _report_variety(self) -> None:
        """List mentors working the same shift type several days in a row."""
        for mentor in self.mentors:
            history = sorted(mentor.shift_history)
            run_type, run_length, longest = None, 0, 0
            previous_date = None
            for work_date, shift_name in history:
                kind = shift_type(shift_name)
                consecutive = previous_date is not None and (work_date - previous_date).days == 1
                if consecutive and kind == run_type:
                    run_length += 1
                else:
                    run_type, run_length = kind, 1
                previous_date = work_date
                longest = max(longest, run_length)
            if longest >= VARIETY_RUN_LENGTH:
                self.state.note(
                    f"Variety: {mentor.name} works {longest} consecutive days "
                    f"of the same shift type"
                )

    def _report_balance(self) -> None:
        if not self.mentors:
            return
        deviations = []
        for mentor in self.mentors:
            deviation = mentor.hours_assigned - mentor.monthly_target(self.weeks)
            deviations.append(abs(deviation))
            if abs(deviation) > BALANCE_TOLERANCE_HOURS:
                self.state.note(
                    f"Balance: {mentor.name} is {deviation:+.1f}h from target"
                )
        average = sum(deviations) / len(deviations)
        self.state.note(f"Balance: average deviation {average:.1f}h")

    def _build_result(self) -> ScheduleResult:
        open_slots = set(self.state.open_slots())
        unfilled = []
        for day in self.days:
            for shift_name in day.unfilled_shifts():
                key = (day.date, shift_name)
                if key in open_slots:
                    unfilled.append(
                        self.state.unfillable.get(key, UnfilledSlot(day.date, shift_name))
                    )

        return ScheduleResult(
            year=self.config.year,
            month=self.config.month,
            days=[day.to_result() for day in self.days],
            mentors=[MentorSummary.from_mentor(m, self.weeks) for m in self.mentors],
            messages=list(self.messages),
            forced_assignments=[
                f for f in self.state.forced
                if self._still_assigned(f)
            ],
            unfilled_slots=unfilled,
            accepted_violations=list(self.final_validation.accepted_errors),
            repaired_violations=list(self.repaired),
        )

    def _still_assigned(self, forced: ForcedAssignment) -> bool:
        day = self.state.day_on(forced.work_date)
        mentor = day.mentor_on(forced.shift_name)
        return mentor is not None and mentor.name == forced.mentor_name


class Scheduler:
    """High-level scheduler for generating monthly schedules.

    Example:
        >>> scheduler = Scheduler()
        >>> config = ScheduleConfig.from_dict(document)
        >>> result = scheduler.generate_schedule(config)
    """

    def __init__(
        self,
        max_fill_iterations: int = DEFAULT_MAX_FILL_ITERATIONS,
        max_repair_rounds: int = DEFAULT_MAX_REPAIR_ROUNDS,
    ):
        self.max_fill_iterations = max_fill_iterations
        self.max_repair_rounds = max_repair_rounds

    def generate_schedule(self, config: ScheduleConfig) -> ScheduleResult:
        """Generate a complete month for the config.

        Each call builds a fresh Schedule, so one Scheduler can serve many
        configs without sharing mutable state between runs.
        """
        schedule = Schedule(
            config,
            max_fill_iterations=self.max_fill_iterations,
            max_repair_rounds=self.max_repair_rounds,
        )
        return schedule.run()

    def generate_schedule_with_stats(
        self, config: ScheduleConfig
    ) -> tuple[ScheduleResult, dict]:
        """Generate a schedule and return summary statistics.

        Returns:
            Tuple of (ScheduleResult, stats_dict).
        """
        result = self.generate_schedule(config)

        percentages = [s.percentage_of_target for s in result.mentors]
        finite = [p for p in percentages if p != float("inf")]
        stats = {
            "total_slots": result.total_slots,
            "filled_slots": result.filled_slots,
            "unfilled_slots": len(result.unfilled_slots),
            "forced_assignments": len(result.forced_assignments),
            "repaired_violations": len(result.repaired_violations),
            "total_hours": sum(day.total_hours for day in result.days),
            "assigned_hours": sum(day.assigned_hours for day in result.days),
            "min_percentage": min(finite) if finite else 0.0,
            "max_percentage": max(finite) if finite else 0.0,
        }
        return result, stats
