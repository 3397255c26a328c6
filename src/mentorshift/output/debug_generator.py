"""Debug text output for schedule review.

This module creates a plain-text month report to review:
- Who works which shift on each day
- Hours per mentor against target and per pay period
- Forced assignments, unfillable slots and violations
"""

import calendar
from pathlib import Path
from typing import Union

from mentorshift.scheduling.scheduler import ScheduleResult


class DebugGenerator:
    """Generates a text report of a scheduling run.

    Example:
        >>> generator = DebugGenerator()
        >>> text = generator.generate_to_string(result)
    """

    def __init__(self, include_messages: bool = True):
        self.include_messages = include_messages

    def generate(self, result: ScheduleResult, output_path: Union[str, Path]) -> str:
        """Generate the report and save it to a file.

        Args:
            result: The finished scheduling run.
            output_path: Path to save the text file.

        Returns:
            The generated text content.
        """
        content = self._generate_content(result)
        Path(output_path).write_text(content)
        return content

    def generate_to_string(self, result: ScheduleResult) -> str:
        return self._generate_content(result)

    def _generate_content(self, result: ScheduleResult) -> str:
        lines = []
        month_name = calendar.month_name[result.month]

        lines.append("=" * 80)
        lines.append(f"MENTOR SCHEDULE - {month_name} {result.year}")
        lines.append("=" * 80)
        lines.append("")

        total_hours = sum(day.total_hours for day in result.days)
        assigned_hours = sum(day.assigned_hours for day in result.days)
        lines.append(f"Days Scheduled: {len(result.days)}")
        lines.append(f"Mentors: {len(result.mentors)}")
        lines.append(f"Slots Filled: {result.filled_slots} / {result.total_slots}")
        lines.append(f"Hours Assigned: {assigned_hours:g} / {total_hours:g}")
        lines.append(f"Forced Assignments: {len(result.forced_assignments)}")
        lines.append("")

        lines.append("-" * 80)
        lines.append("DAILY ASSIGNMENTS")
        lines.append("-" * 80)
        lines.append(f"{'Day':>3} {'Weekday':<10} {'Shift':<18} {'Hours':>5}  Mentor")
        lines.append("-" * 80)
        for day in result.days:
            label = f"{day.work_date.day:>3} {day.weekday:<10}"
            if day.is_holiday:
                label += " (holiday)"
                lines.append(label)
                label = " " * 14
            for shift_name, hours in day.shifts.items():
                mentor = day.assignments.get(shift_name) or "-- UNFILLED --"
                lines.append(f"{label} {shift_name:<18} {hours:>5g}  {mentor}")
                label = " " * 14
        lines.append("")

        lines.append("-" * 80)
        lines.append("MENTOR HOURS")
        lines.append("-" * 80)
        lines.append(
            f"{'Name':<20} {'Wanted/wk':>9} {'Target':>8} {'Assigned':>9} {'Pct':>6}  Pay periods"
        )
        lines.append("-" * 80)
        for summary in result.mentors:
            periods = ", ".join(
                f"#{period}: {hours:g}h" for period, hours in summary.pay_period_hours.items()
            )
            pct = summary.percentage_of_target
            pct_str = "n/a" if pct == float("inf") else f"{pct:.0f}%"
            lines.append(
                f"{summary.name[:20]:<20} {summary.hours_wanted:>9g} "
                f"{summary.target_hours:>8.1f} {summary.hours_assigned:>9g} "
                f"{pct_str:>6}  {periods}"
            )
        lines.append("")

        if result.forced_assignments:
            lines.append("-" * 80)
            lines.append("FORCED ASSIGNMENTS (review manually)")
            lines.append("-" * 80)
            for forced in result.forced_assignments:
                lines.append(f"  {forced}")
            lines.append("")

        if result.unfilled_slots:
            lines.append("-" * 80)
            lines.append("UNFILLED SLOTS")
            lines.append("-" * 80)
            for slot in result.unfilled_slots:
                lines.append(f"  {slot}")
            lines.append("")

        if result.accepted_violations or result.repaired_violations:
            lines.append("-" * 80)
            lines.append("VIOLATIONS")
            lines.append("-" * 80)
            for violation in result.accepted_violations:
                lines.append(f"  accepted: {violation}")
            for violation in result.repaired_violations:
                lines.append(f"  repaired: {violation}")
            lines.append("")

        if self.include_messages:
            lines.append("-" * 80)
            lines.append("DIAGNOSTIC LOG")
            lines.append("-" * 80)
            lines.extend(result.messages)
            lines.append("")

        lines.append("=" * 80)
        lines.append("END OF REPORT")
        lines.append("=" * 80)

        return "\n".join(lines)
