"""Heuristic solver for filling a month of shift slots.

This module implements the greedy passes of a scheduling run:
1. Preference pass: mentors take shifts on their preferred weekday
2. Equal distribution: round-robin by percentage of target
3. Force fill: fill leftovers by raw hours, relaxing caps when needed
"""

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Optional

from mentorshift.domain.models import (
    AssignmentPhase,
    Day,
    ForcedAssignment,
    Mentor,
    UnfilledSlot,
)
from mentorshift.domain.policies import DefaultWorkloadPolicy, WorkloadPolicy

logger = logging.getLogger(__name__)

DEFAULT_MAX_FILL_ITERATIONS = 1000

SlotKey = tuple[date, str]


@dataclass
class RunState:
    """Mutable state owned by a single scheduling run."""

    days: list[Day]
    mentors: list[Mentor]
    weeks: float
    messages: list[str] = field(default_factory=list)
    forced: list[ForcedAssignment] = field(default_factory=list)
    unfillable: dict[SlotKey, UnfilledSlot] = field(default_factory=dict)
    sequence: int = 0

    def __post_init__(self):
        self._days_by_date = {day.date: day for day in self.days}

    def next_sequence(self) -> int:
        self.sequence += 1
        return self.sequence

    def note(self, message: str, level: int = logging.INFO) -> None:
        """Append a diagnostic message and mirror it to the log."""
        self.messages.append(message)
        logger.log(level, message)

    def day_on(self, work_date: date) -> Optional[Day]:
        return self._days_by_date.get(work_date)

    def open_slots(self, restrict_to: Optional[set[SlotKey]] = None) -> list[SlotKey]:
        """Unfilled slots in date order, core shifts first within a day."""
        slots = [
            (day.date, name)
            for day in self.days
            for name in day.unfilled_shifts()
        ]
        if restrict_to is not None:
            slots = [slot for slot in slots if slot in restrict_to]
        return slots


@dataclass
class FillOutcome:
    """Summary of one equal-distribution run."""

    assigned: int = 0
    iterations: int = 0
    stuck: bool = False
    remaining: int = 0


class HeuristicSolver:
    """Greedy solver for the preference, distribution and force-fill passes.

    Every assignment goes through Day.assign_mentor so mentor bookkeeping
    and day slots never drift apart. Legality is always the full check
    (basic rules plus, when the policy enables them, weekly and
    rolling-window caps) except in the relaxed step of force fill.
    """

    def __init__(
        self,
        policy: Optional[WorkloadPolicy] = None,
        max_iterations: int = DEFAULT_MAX_FILL_ITERATIONS,
    ):
        if max_iterations < 1:
            raise ValueError("max_iterations must be at least 1")
        self.policy = policy or DefaultWorkloadPolicy()
        self.max_iterations = max_iterations

    def is_legal(self, mentor: Mentor, day: Day, shift_name: str) -> bool:
        if day.has_mentor(mentor):
            return False
        eligibility = mentor.can_work_extended(
            day.date, day.shifts[shift_name], self.policy
        )
        return eligibility.allowed

    def _assign(
        self,
        state: RunState,
        day: Day,
        shift_name: str,
        mentor: Mentor,
        phase: AssignmentPhase,
        forced_reasons: Optional[list[str]] = None,
    ) -> None:
        day.assign_mentor(
            shift_name,
            mentor,
            phase=phase,
            sequence=state.next_sequence(),
            forced_reasons=forced_reasons,
        )
        state.unfillable.pop((day.date, shift_name), None)

    def _previous_saturday_crew(self, state: RunState, day: Day) -> set[str]:
        """Names on the preceding Saturday, when the anti-repeat rule applies."""
        if not day.is_saturday or day.day_of_month <= 7:
            return set()
        previous = state.day_on(day.date - timedelta(days=7))
        if previous is None:
            return set()
        return {m.name for m in previous.mentors}

    @staticmethod
    def _without_repeat_saturday(
        candidates: list[Mentor], crew: set[str]
    ) -> list[Mentor]:
        # Waived when nobody else is left
        filtered = [m for m in candidates if m.name not in crew]
        return filtered or candidates

    # Phase 1

    def run_preference_pass(self, state: RunState) -> int:
        """Give each mentor one shift on every matching preferred weekday.

        Shifts are tried in fill-priority order and the first legal one is
        taken. Returns the number of assignments made.
        """
        assigned = 0
        for mentor in state.mentors:
            if not mentor.preferred_weekday:
                continue
            for day in state.days:
                if day.weekday != mentor.preferred_weekday or day.has_mentor(mentor):
                    continue
                for shift_name in day.unfilled_shifts():
                    if self.is_legal(mentor, day, shift_name):
                        self._assign(
                            state, day, shift_name, mentor, AssignmentPhase.PREFERENCE
                        )
                        assigned += 1
                        break

        state.note(f"Preference pass: {assigned} shifts assigned")
        return assigned

    # Phase 2

    def rank_by_percentage(self, state: RunState) -> tuple[list[Mentor], bool]:
        """Mentors by ascending percentage of target.

        Mentors at or above 100% are dropped unless everyone is, in which
        case the cap is lifted and the full ranking is returned.

        Returns:
            Tuple of (ranked mentors, whether the cap was lifted).
        """
        ranked = sorted(
            state.mentors, key=lambda m: m.percentage_of_target(state.weeks)
        )
        under = [m for m in ranked if m.percentage_of_target(state.weeks) < 100.0]
        if under:
            return under, False
        return ranked, True

    def _first_legal_slot(
        self,
        state: RunState,
        mentor: Mentor,
        open_slots: list[SlotKey],
        candidates: list[Mentor],
    ) -> Optional[SlotKey]:
        """First open slot the mentor may take.

        A mentor who worked the previous Saturday steps aside only when
        another mentor from this ranking could take the slot.
        """
        for slot in open_slots:
            day = state.day_on(slot[0])
            if not self.is_legal(mentor, day, slot[1]):
                continue
            crew = self._previous_saturday_crew(state, day)
            if mentor.name in crew and any(
                other.name not in crew and self.is_legal(other, day, slot[1])
                for other in candidates
            ):
                continue
            return slot
        return None

    def run_equal_distribution(
        self,
        state: RunState,
        restrict_to: Optional[set[SlotKey]] = None,
        phase: AssignmentPhase = AssignmentPhase.EQUAL_DISTRIBUTION,
    ) -> FillOutcome:
        """Round-robin fill, re-ranking mentors on every iteration.

        Args:
            state: The run being filled.
            restrict_to: Only consider these slots (used when repairing).
            phase: Phase tag recorded on the assignments.

        Returns:
            FillOutcome describing how the loop ended.
        """
        outcome = FillOutcome()
        cap_lifted_noted = False

        for iteration in range(1, self.max_iterations + 1):
            open_slots = state.open_slots(restrict_to)
            if not open_slots:
                outcome.iterations = iteration - 1
                logger.debug("Equal distribution complete after %d iterations", iteration - 1)
                return outcome

            ranked, cap_lifted = self.rank_by_percentage(state)
            if cap_lifted and not cap_lifted_noted:
                state.note("All mentors at or above target; lifting the 100% cap")
                cap_lifted_noted = True

            made = 0
            for mentor in ranked:
                slot = self._first_legal_slot(state, mentor, open_slots, ranked)
                if slot is None:
                    continue
                self._assign(state, state.day_on(slot[0]), slot[1], mentor, phase)
                open_slots.remove(slot)
                made += 1

            outcome.assigned += made
            outcome.iterations = iteration
            if made == 0:
                outcome.stuck = True
                outcome.remaining = len(open_slots)
                state.note(
                    f"Equal distribution stuck after {iteration} iterations "
                    f"with {len(open_slots)} open slots"
                )
                return outcome

        outcome.remaining = len(state.open_slots(restrict_to))
        if outcome.remaining:
            state.note(
                f"Equal distribution stopped at the {self.max_iterations} iteration limit "
                f"with {outcome.remaining} open slots",
                logging.WARNING,
            )
        return outcome

    # Phase 3

    def rank_by_hours(self, state: RunState) -> list[Mentor]:
        """Mentors by raw hours, then under-target first, then largest deficit."""
        return sorted(
            state.mentors,
            key=lambda m: (
                m.hours_assigned,
                0 if m.available_hours(state.weeks) > 0 else 1,
                -m.available_hours(state.weeks),
            ),
        )

    def cap_breaches(self, mentor: Mentor, day: Day, shift_name: str) -> list[str]:
        """Describe every cap the assignment would exceed, with its margin."""
        hours = day.shifts[shift_name]
        reasons = []

        cap = self.policy.pay_period_cap_hours()
        projected = mentor.hours_in_pay_period(day.pay_period) + hours
        if projected > cap:
            reasons.append(f"pay period cap exceeded ({projected:g}h / {cap:g}h)")

        if self.policy.enforce_extended_caps():
            weekly_cap = self.policy.weekly_cap_hours(mentor.hours_wanted)
            projected = mentor.hours_in_week(day.week_key) + hours
            if projected > weekly_cap:
                reasons.append(f"weekly cap exceeded ({projected:g}h / {weekly_cap:g}h)")

            window = self.policy.window_days()
            busiest = mentor.busiest_window_days(day.date, window)
            if busiest >= self.policy.max_days_in_window():
                reasons.append(
                    f"rolling window cap exceeded ({busiest + 1} days in {window})"
                )

        return reasons

    def _unfillable_reason(self, state: RunState, day: Day) -> str:
        on_day = sum(1 for m in state.mentors if day.has_mentor(m))
        off = sum(
            1 for m in state.mentors
            if not day.has_mentor(m) and m.is_hard_unavailable(day.day_of_month, day.weekday)
        )
        return (
            f"no candidate available ({on_day} already working this day, "
            f"{off} unavailable)"
        )

    def run_force_fill(
        self,
        state: RunState,
        restrict_to: Optional[set[SlotKey]] = None,
    ) -> int:
        """Fill every remaining slot, relaxing caps where unavoidable.

        The relaxed check still refuses a second shift on the same day and
        never schedules a mentor on a requested day off or unavailable
        weekday. Slots nobody can take are recorded as unfillable.

        Returns:
            Number of assignments made.
        """
        assigned = 0
        for day in state.days:
            for shift_name in day.unfilled_shifts():
                if restrict_to is not None and (day.date, shift_name) not in restrict_to:
                    continue

                ranked = self.rank_by_hours(state)
                crew = self._previous_saturday_crew(state, day)

                legal = [m for m in ranked if self.is_legal(m, day, shift_name)]
                legal = self._without_repeat_saturday(legal, crew)
                if legal:
                    self._assign(state, day, shift_name, legal[0], AssignmentPhase.FORCE_FILL)
                    assigned += 1
                    continue

                relaxed = [
                    m for m in ranked
                    if not day.has_mentor(m)
                    and not m.is_hard_unavailable(day.day_of_month, day.weekday)
                ]
                relaxed = self._without_repeat_saturday(relaxed, crew)
                if relaxed:
                    mentor = relaxed[0]
                    reasons = self.cap_breaches(mentor, day, shift_name)
                    self._assign(
                        state, day, shift_name, mentor, AssignmentPhase.FORCE_FILL, reasons
                    )
                    assigned += 1
                    forced = ForcedAssignment(day.date, shift_name, mentor.name, reasons)
                    state.forced.append(forced)
                    state.note(str(forced), logging.WARNING)
                    continue

                slot = UnfilledSlot(day.date, shift_name, self._unfillable_reason(state, day))
                state.unfillable[(day.date, shift_name)] = slot
                state.note(f"UNFILLABLE {slot}", logging.WARNING)

        state.note(f"Force fill: {assigned} shifts assigned")
        return assigned
