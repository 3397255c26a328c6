"""Domain models for the shift-assignment engine.

This module contains the core data structures of a scheduling run: the
mentors being scheduled, the calendar days and their shift slots, and the
small value types that describe legality decisions and assignments.
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional

from mentorshift.domain.policies import WorkloadPolicy

WEEKDAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

PAY_PERIOD_DAYS = 14
DEFAULT_PAY_PERIOD_CAP = 80.0


def weekday_name(d: date) -> str:
    """English weekday name for a date (locale independent)."""
    return WEEKDAY_NAMES[d.weekday()]


def pay_period_number(d: date) -> int:
    """1-based pay period index: 14-day blocks counted from January 1st."""
    return (d.timetuple().tm_yday - 1) // PAY_PERIOD_DAYS + 1


def week_key(d: date) -> date:
    """Key of the Sunday-anchored calendar week containing a date."""
    return d - timedelta(days=(d.weekday() + 1) % 7)


class ShiftCategory(Enum):
    """Fill priority class of a shift.

    Core shifts (A/B, including holiday variants) cover dinner and meds and
    are always filled before ancillary (C, errands) shifts.
    """

    CORE = "core"
    ANCILLARY = "ancillary"


def shift_category(shift_name: str) -> ShiftCategory:
    """Classify a shift by its name."""
    lowered = shift_name.lower()
    if "c_shift" in lowered or "c shift" in lowered:
        return ShiftCategory.ANCILLARY
    return ShiftCategory.CORE


def shift_type(shift_name: str) -> str:
    """Short type letter (A, B, C) used by the variety report."""
    lowered = shift_name.lower()
    for letter in ("a", "b", "c"):
        if f"{letter}_shift" in lowered or f"{letter} shift" in lowered:
            return letter.upper()
    return "Other"


class RejectionReason(Enum):
    """Why a mentor cannot legally take a shift."""

    REQUESTED_OFF = "requested_off"
    UNAVAILABLE_WEEKDAY = "unavailable_weekday"
    ALREADY_ASSIGNED_TODAY = "already_assigned_today"
    PAY_PERIOD_CAP = "pay_period_cap"
    WEEKLY_CAP = "weekly_cap"
    ROLLING_WINDOW_CAP = "rolling_window_cap"


@dataclass(frozen=True)
class Eligibility:
    """Outcome of a legality check.

    Attributes:
        allowed: True if the assignment is legal.
        reason: The first rule that rejected the assignment, if any.
    """

    allowed: bool
    reason: Optional[RejectionReason] = None

    @classmethod
    def ok(cls) -> "Eligibility":
        return cls(allowed=True)

    @classmethod
    def reject(cls, reason: RejectionReason) -> "Eligibility":
        return cls(allowed=False, reason=reason)


class AssignmentPhase(Enum):
    """Scheduling phase that produced an assignment."""

    PREFERENCE = "preference"
    EQUAL_DISTRIBUTION = "equal_distribution"
    FORCE_FILL = "force_fill"
    REPAIR = "repair"


@dataclass
class Mentor:
    """A roster entry that can be scheduled.

    Hard constraints are the requested days off and unavailable weekdays; the
    preferred weekday is only a soft hint used by the preference pass. All
    running totals are mutated exclusively through assign/unassign.

    Attributes:
        name: Unique name within the roster.
        hours_wanted: Requested hours per week (a rate, not a monthly total).
        hard_dates: Day-of-month numbers the mentor is unavailable.
        unavailable_weekdays: Weekday names the mentor never works.
        preferred_weekday: At most one weekday name the mentor prefers.
        hours_assigned: Total hours assigned in this run.
        pay_period_hours: Hours per pay period number.
        week_hours: Hours per Sunday-anchored week key.
        worked_dates: Dates the mentor already works.
        shift_history: (date, shift name) pairs in assignment order.
    """

    name: str
    hours_wanted: float
    hard_dates: set[int] = field(default_factory=set)
    unavailable_weekdays: set[str] = field(default_factory=set)
    preferred_weekday: Optional[str] = None
    hours_assigned: float = 0.0
    pay_period_hours: dict[int, float] = field(default_factory=dict)
    week_hours: dict[date, float] = field(default_factory=dict)
    worked_dates: set[date] = field(default_factory=set)
    shift_history: list[tuple[date, str]] = field(default_factory=list)

    @property
    def days_worked(self) -> set[int]:
        """Day-of-month numbers already worked."""
        return {d.day for d in self.worked_dates}

    @property
    def last_shift(self) -> Optional[str]:
        """Most recently assigned shift name, for variety heuristics."""
        if not self.shift_history:
            return None
        return self.shift_history[-1][1]

    def hours_in_pay_period(self, pay_period: int) -> float:
        return self.pay_period_hours.get(pay_period, 0.0)

    def hours_in_week(self, key: date) -> float:
        return self.week_hours.get(key, 0.0)

    def is_hard_unavailable(self, day_of_month: int, weekday: str) -> bool:
        """True if the day is requested off or falls on an unavailable weekday."""
        return day_of_month in self.hard_dates or weekday in self.unavailable_weekdays

    def can_work(
        self,
        day_of_month: int,
        weekday: str,
        shift_hours: float,
        pay_period: int,
        pay_period_cap: float = DEFAULT_PAY_PERIOD_CAP,
    ) -> Eligibility:
        """Basic legality check, evaluated in a fixed rule order."""
        if day_of_month in self.hard_dates:
            return Eligibility.reject(RejectionReason.REQUESTED_OFF)
        if weekday in self.unavailable_weekdays:
            return Eligibility.reject(RejectionReason.UNAVAILABLE_WEEKDAY)
        if day_of_month in self.days_worked:
            return Eligibility.reject(RejectionReason.ALREADY_ASSIGNED_TODAY)
        if self.hours_in_pay_period(pay_period) + shift_hours > pay_period_cap:
            return Eligibility.reject(RejectionReason.PAY_PERIOD_CAP)
        return Eligibility.ok()

    def can_work_extended(
        self,
        work_date: date,
        shift_hours: float,
        policy: WorkloadPolicy,
    ) -> Eligibility:
        """Full legality check: basic rules plus weekly and rolling-window caps.

        The extended caps are skipped when the policy disables them.
        """
        result = self.can_work(
            work_date.day,
            weekday_name(work_date),
            shift_hours,
            pay_period_number(work_date),
            policy.pay_period_cap_hours(),
        )
        if not result.allowed or not policy.enforce_extended_caps():
            return result

        weekly_cap = policy.weekly_cap_hours(self.hours_wanted)
        if self.hours_in_week(week_key(work_date)) + shift_hours > weekly_cap:
            return Eligibility.reject(RejectionReason.WEEKLY_CAP)

        busiest = self.busiest_window_days(work_date, policy.window_days())
        if busiest >= policy.max_days_in_window():
            return Eligibility.reject(RejectionReason.ROLLING_WINDOW_CAP)

        return Eligibility.ok()

    def busiest_window_days(self, work_date: date, window_days: int = 7) -> int:
        """Most days already worked in any window that contains work_date.

        The candidate date itself is never counted, so the result is the
        number of other worked days the new shift would sit beside.
        """
        busiest = 0
        for offset in range(window_days):
            start = work_date - timedelta(days=offset)
            end = start + timedelta(days=window_days - 1)
            count = sum(
                1 for d in self.worked_dates if start <= d <= end and d != work_date
            )
            busiest = max(busiest, count)
        return busiest

    def assign(
        self,
        work_date: date,
        shift_name: str,
        shift_hours: float,
        pay_period: int,
        key: date,
    ) -> None:
        """Record a shift. Callers must have validated legality."""
        self.hours_assigned += shift_hours
        self.pay_period_hours[pay_period] = self.hours_in_pay_period(pay_period) + shift_hours
        self.week_hours[key] = self.hours_in_week(key) + shift_hours
        self.worked_dates.add(work_date)
        self.shift_history.append((work_date, shift_name))

    def unassign(
        self,
        work_date: date,
        shift_name: str,
        shift_hours: float,
        pay_period: int,
        key: date,
    ) -> None:
        """Exact inverse of assign, used when repairing violations."""
        self.hours_assigned -= shift_hours
        self.pay_period_hours[pay_period] = self.hours_in_pay_period(pay_period) - shift_hours
        self.week_hours[key] = self.hours_in_week(key) - shift_hours
        entry = (work_date, shift_name)
        if entry in self.shift_history:
            self.shift_history.remove(entry)
        if not any(d == work_date for d, _ in self.shift_history):
            self.worked_dates.discard(work_date)

    def monthly_target(self, weeks: float) -> float:
        """Target hours for a run covering the given number of weeks."""
        return self.hours_wanted * weeks

    def available_hours(self, weeks: float) -> float:
        """Monthly target minus hours already assigned (negative when over)."""
        return self.monthly_target(weeks) - self.hours_assigned

    def percentage_of_target(self, weeks: float) -> float:
        """Assigned hours as a percentage of the monthly target.

        A mentor with a zero target counts as already satisfied.
        """
        target = self.monthly_target(weeks)
        if target <= 0:
            return 100.0 if self.hours_assigned <= 0 else float("inf")
        return self.hours_assigned / target * 100.0

    def to_record(self) -> dict:
        """Serialize the mentor's final state for external consumers."""
        return {
            "name": self.name,
            "hours_wanted": self.hours_wanted,
            "hard_dates": sorted(self.hard_dates),
            "unavailable_weekdays": sorted(
                self.unavailable_weekdays, key=WEEKDAY_NAMES.index
            ),
            "preferred_weekday": self.preferred_weekday,
            "hours_assigned": self.hours_assigned,
            "pay_period_hours": dict(sorted(self.pay_period_hours.items())),
            "days_worked": sorted(self.days_worked),
            "last_shift": self.last_shift,
        }


@dataclass
class SlotAssignment:
    """A mentor occupying one shift slot.

    Attributes:
        mentor: The assigned mentor.
        phase: Phase that made the assignment.
        sequence: Global assignment counter, used to order assignments when
            attributing cumulative cap violations.
        forced_reasons: Rules knowingly broken by a force-fill assignment.
    """

    mentor: Mentor
    phase: AssignmentPhase
    sequence: int = 0
    forced_reasons: list[str] = field(default_factory=list)

    @property
    def is_forced(self) -> bool:
        return bool(self.forced_reasons)


class Day:
    """One calendar day with its fixed shift set and mutable slots.

    The shift set (name to hours) never changes once the day is built; only
    the slot mapping does, and only through assign_mentor/remove_mentor.
    """

    def __init__(
        self,
        work_date: date,
        shifts: Mapping[str, float],
        season: str,
        is_holiday: bool = False,
    ):
        self.date = work_date
        self.season = season
        self.is_holiday = is_holiday
        self.shifts: Mapping[str, float] = MappingProxyType(dict(shifts))
        self.slots: dict[str, Optional[SlotAssignment]] = {name: None for name in shifts}
        self.assigned_hours = 0.0

    def __repr__(self) -> str:
        return f"Day({self.date.isoformat()}, {dict(self.shifts)})"

    @property
    def day_of_month(self) -> int:
        return self.date.day

    @property
    def weekday(self) -> str:
        return weekday_name(self.date)

    @property
    def pay_period(self) -> int:
        return pay_period_number(self.date)

    @property
    def week_key(self) -> date:
        return week_key(self.date)

    @property
    def total_hours(self) -> float:
        return sum(self.shifts.values())

    @property
    def is_saturday(self) -> bool:
        return self.date.weekday() == 5

    def unfilled_shifts(self) -> list[str]:
        """Empty shift names, core shifts first, table order within a class."""
        empty = [name for name, slot in self.slots.items() if slot is None]
        core = [name for name in empty if shift_category(name) == ShiftCategory.CORE]
        ancillary = [name for name in empty if shift_category(name) == ShiftCategory.ANCILLARY]
        return core + ancillary

    def is_filled(self) -> bool:
        return not self.unfilled_shifts()

    def mentor_on(self, shift_name: str) -> Optional[Mentor]:
        slot = self.slots[shift_name]
        return slot.mentor if slot else None

    @property
    def mentors(self) -> list[Mentor]:
        """Mentors on this day in shift-table order."""
        return [slot.mentor for slot in self.slots.values() if slot is not None]

    def has_mentor(self, mentor: Mentor) -> bool:
        return any(m.name == mentor.name for m in self.mentors)

    def assign_mentor(
        self,
        shift_name: str,
        mentor: Mentor,
        phase: AssignmentPhase = AssignmentPhase.EQUAL_DISTRIBUTION,
        sequence: int = 0,
        forced_reasons: Optional[list[str]] = None,
    ) -> SlotAssignment:
        """Bind a mentor to a slot and update both sides' bookkeeping.

        This is the only code path that adds hours to a mentor.
        """
        if shift_name not in self.shifts:
            raise KeyError(f"Unknown shift {shift_name!r} on {self.date.isoformat()}")
        if self.slots[shift_name] is not None:
            raise ValueError(
                f"Shift {shift_name} on {self.date.isoformat()} is already filled"
            )

        hours = self.shifts[shift_name]
        assignment = SlotAssignment(
            mentor=mentor,
            phase=phase,
            sequence=sequence,
            forced_reasons=list(forced_reasons or []),
        )
        self.slots[shift_name] = assignment
        self.assigned_hours += hours
        mentor.assign(self.date, shift_name, hours, self.pay_period, self.week_key)
        return assignment

    def remove_mentor(self, shift_name: str) -> Optional[SlotAssignment]:
        """Vacate a slot and roll back the mentor's bookkeeping."""
        assignment = self.slots.get(shift_name)
        if assignment is None:
            return None

        hours = self.shifts[shift_name]
        self.slots[shift_name] = None
        self.assigned_hours -= hours
        assignment.mentor.unassign(
            self.date, shift_name, hours, self.pay_period, self.week_key
        )
        return assignment

    def to_result(self) -> "DayResult":
        return DayResult(
            work_date=self.date,
            weekday=self.weekday,
            season=self.season,
            is_holiday=self.is_holiday,
            shifts=dict(self.shifts),
            assignments={
                name: (slot.mentor.name if slot else None)
                for name, slot in self.slots.items()
            },
            total_hours=self.total_hours,
            assigned_hours=self.assigned_hours,
        )


@dataclass
class ForcedAssignment:
    """A force-fill assignment that knowingly breaks one or more caps."""

    work_date: date
    shift_name: str
    mentor_name: str
    reasons: list[str] = field(default_factory=list)

    def __str__(self) -> str:
        return (
            f"Day {self.work_date.day} {weekday_name(self.work_date)} {self.shift_name}: "
            f"FORCED {self.mentor_name} - {', '.join(self.reasons)}"
        )


@dataclass
class UnfilledSlot:
    """A slot no mentor could take even under the relaxed check."""

    work_date: date
    shift_name: str
    reason: str = "no candidate available"

    def __str__(self) -> str:
        return f"Day {self.work_date.day} {self.shift_name}: {self.reason}"


@dataclass
class DayResult:
    """Read-only snapshot of a scheduled day for presentation layers."""

    work_date: date
    weekday: str
    season: str
    is_holiday: bool
    shifts: dict[str, float]
    assignments: dict[str, Optional[str]]
    total_hours: float
    assigned_hours: float

    @property
    def unfilled(self) -> list[str]:
        return [name for name, mentor in self.assignments.items() if mentor is None]

    def to_dict(self) -> dict:
        return {
            "date": self.work_date.isoformat(),
            "weekday": self.weekday,
            "season": self.season,
            "is_holiday": self.is_holiday,
            "shifts": dict(self.shifts),
            "assignments": dict(self.assignments),
            "total_hours": self.total_hours,
            "assigned_hours": self.assigned_hours,
        }


@dataclass
class MentorSummary:
    """Final hour totals of one mentor."""

    name: str
    hours_wanted: float
    target_hours: float
    hours_assigned: float
    pay_period_hours: dict[int, float]
    hard_dates: list[int]
    days_worked: list[int]

    @property
    def deviation(self) -> float:
        return self.hours_assigned - self.target_hours

    @property
    def percentage_of_target(self) -> float:
        if self.target_hours <= 0:
            return 100.0 if self.hours_assigned <= 0 else float("inf")
        return self.hours_assigned / self.target_hours * 100.0

    @classmethod
    def from_mentor(cls, mentor: Mentor, weeks: float) -> "MentorSummary":
        return cls(
            name=mentor.name,
            hours_wanted=mentor.hours_wanted,
            target_hours=mentor.monthly_target(weeks),
            hours_assigned=mentor.hours_assigned,
            pay_period_hours=dict(sorted(mentor.pay_period_hours.items())),
            hard_dates=sorted(mentor.hard_dates),
            days_worked=sorted(mentor.days_worked),
        )

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "hours_wanted": self.hours_wanted,
            "target_hours": round(self.target_hours, 2),
            "hours_assigned": self.hours_assigned,
            "pay_period_hours": {str(k): v for k, v in self.pay_period_hours.items()},
            "hard_dates": list(self.hard_dates),
            "days_worked": list(self.days_worked),
        }
