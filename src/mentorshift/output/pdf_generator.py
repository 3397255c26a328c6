"""PDF generation for schedule output.

This module creates printable PDF schedules showing:
- A month calendar with each day's shifts and mentors
- A summary page with hours per mentor and review items
"""

import calendar
from io import BytesIO
from pathlib import Path
from typing import Union

from mentorshift.domain.models import shift_type
from mentorshift.scheduling.scheduler import ScheduleResult

# Color definitions (RGB tuples, 0-1 scale)
COLORS = {
    "A": (0.4, 0.7, 0.4),  # Green
    "B": (0.4, 0.4, 0.8),  # Blue
    "C": (0.8, 0.6, 0.2),  # Orange
    "Other": (0.6, 0.6, 0.6),  # Gray
    "holiday": (1.0, 0.9, 0.5),  # Yellow
    "unfilled": (0.85, 0.2, 0.2),  # Red
    "outside": (0.95, 0.95, 0.95),  # Light gray
}

CALENDAR_WEEKDAYS = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")


class PDFGenerator:
    """Generates printable PDF month schedules.

    Example:
        >>> generator = PDFGenerator()
        >>> generator.generate(result, "schedule.pdf")
    """

    def __init__(
        self,
        page_width: float = 792,  # Letter landscape width (11")
        page_height: float = 612,  # Letter landscape height (8.5")
        margin: float = 36,  # 0.5 inch margins
    ):
        self.page_width = page_width
        self.page_height = page_height
        self.margin = margin

    def generate(
        self,
        result: ScheduleResult,
        output_path: Union[str, Path],
        include_summary: bool = True,
    ) -> None:
        """Generate PDF schedule and save to file.

        Args:
            result: The finished scheduling run.
            output_path: Path to save the PDF.
            include_summary: Whether to include the summary page.
        """
        try:
            from reportlab.lib.pagesizes import landscape, letter
            from reportlab.pdfgen import canvas
        except ImportError:
            raise ImportError(
                "reportlab is required for PDF generation. "
                "Install with: pip install reportlab"
            )

        c = canvas.Canvas(str(output_path), pagesize=landscape(letter))
        self._draw_calendar_page(c, result)
        if include_summary:
            self._draw_summary_page(c, result)
        c.save()

    def generate_to_buffer(
        self,
        result: ScheduleResult,
        include_summary: bool = True,
    ) -> BytesIO:
        """Generate PDF and return as bytes buffer.

        Args:
            result: The finished scheduling run.
            include_summary: Whether to include the summary page.

        Returns:
            BytesIO buffer containing PDF data.
        """
        try:
            from reportlab.lib.pagesizes import landscape, letter
            from reportlab.pdfgen import canvas
        except ImportError:
            raise ImportError(
                "reportlab is required for PDF generation. "
                "Install with: pip install reportlab"
            )

        buffer = BytesIO()
        c = canvas.Canvas(buffer, pagesize=landscape(letter))
        self._draw_calendar_page(c, result)
        if include_summary:
            self._draw_summary_page(c, result)
        c.save()
        buffer.seek(0)
        return buffer

    def _draw_calendar_page(self, c, result: ScheduleResult) -> None:
        """Draw the month grid, one cell per day, Sunday first."""
        header_height = 50
        weekday_row = 16

        c.setFont("Helvetica-Bold", 16)
        c.drawString(
            self.margin,
            self.page_height - self.margin - 20,
            f"Mentor Schedule - {calendar.month_name[result.month]} {result.year}",
        )
        c.setFont("Helvetica", 10)
        c.drawString(
            self.margin,
            self.page_height - self.margin - 35,
            f"Slots filled: {result.filled_slots} of {result.total_slots}",
        )

        weeks = calendar.Calendar(firstweekday=6).monthdayscalendar(result.year, result.month)
        grid_top = self.page_height - self.margin - header_height
        grid_width = self.page_width - 2 * self.margin
        cell_width = grid_width / 7
        cell_height = (grid_top - weekday_row - self.margin - 20) / len(weeks)

        c.setFont("Helvetica-Bold", 9)
        for col, name in enumerate(CALENDAR_WEEKDAYS):
            c.drawCentredString(
                self.margin + col * cell_width + cell_width / 2,
                grid_top - weekday_row + 4,
                name,
            )

        days_by_number = {day.work_date.day: day for day in result.days}
        for row, week in enumerate(weeks):
            y = grid_top - weekday_row - (row + 1) * cell_height
            for col, day_number in enumerate(week):
                x = self.margin + col * cell_width
                self._draw_day_cell(
                    c, days_by_number.get(day_number), day_number, x, y, cell_width, cell_height
                )

        self._draw_legend(c, self.margin, self.margin)
        c.showPage()

    def _draw_day_cell(self, c, day, day_number: int, x, y, width, height) -> None:
        if day is None:
            c.setFillColorRGB(*COLORS["outside"])
            c.rect(x, y, width, height, fill=1, stroke=1)
            if day_number:
                c.setFillColorRGB(0.5, 0.5, 0.5)
                c.setFont("Helvetica", 8)
                c.drawString(x + 3, y + height - 10, str(day_number))
            c.setFillColorRGB(0, 0, 0)
            return

        if day.is_holiday:
            c.setFillColorRGB(*COLORS["holiday"])
            c.rect(x, y, width, height, fill=1, stroke=1)
        else:
            c.setStrokeColorRGB(0, 0, 0)
            c.rect(x, y, width, height, fill=0, stroke=1)

        c.setFillColorRGB(0, 0, 0)
        c.setFont("Helvetica-Bold", 9)
        c.drawString(x + 3, y + height - 10, str(day_number))

        line_y = y + height - 21
        for shift_name, hours in day.shifts.items():
            if line_y < y + 2:
                break
            mentor = day.assignments.get(shift_name)
            color = COLORS.get(shift_type(shift_name), COLORS["Other"])
            c.setFillColorRGB(*color)
            c.rect(x + 3, line_y, 5, 7, fill=1, stroke=0)
            if mentor:
                c.setFillColorRGB(0, 0, 0)
                text = f"{mentor[:14]} ({hours:g}h)"
            else:
                c.setFillColorRGB(*COLORS["unfilled"])
                text = f"UNFILLED ({hours:g}h)"
            c.setFont("Helvetica", 7)
            c.drawString(x + 11, line_y, text)
            line_y -= 10
        c.setFillColorRGB(0, 0, 0)

    def _draw_legend(self, c, x: float, y: float) -> None:
        """Draw legend for colors."""
        c.setFont("Helvetica-Bold", 8)
        c.drawString(x, y, "Legend:")

        items = [
            ("A", "A shift"),
            ("B", "B shift"),
            ("C", "C shift"),
            ("holiday", "Holiday"),
            ("unfilled", "Unfilled"),
        ]

        c.setFont("Helvetica", 7)
        current_x = x + 45
        for key, label in items:
            c.setFillColorRGB(*COLORS[key])
            c.rect(current_x, y - 2, 12, 10, fill=1, stroke=1)
            c.setFillColorRGB(0, 0, 0)
            c.drawString(current_x + 15, y, label)
            current_x += 70

    def _draw_summary_page(self, c, result: ScheduleResult) -> None:
        """Draw hours per mentor and the items that need manual review."""
        c.setFont("Helvetica-Bold", 16)
        c.drawString(
            self.margin,
            self.page_height - self.margin - 20,
            f"Schedule Summary - {calendar.month_name[result.month]} {result.year}",
        )

        y = self.page_height - self.margin - 60
        c.setFont("Helvetica-Bold", 12)
        c.drawString(self.margin, y, "Hours by Mentor")
        y -= 18

        c.setFont("Helvetica-Bold", 9)
        columns = (0, 150, 230, 310, 390)
        for offset, title in zip(columns, ("Name", "Wanted/wk", "Target", "Assigned", "Pay periods")):
            c.drawString(self.margin + 20 + offset, y, title)
        y -= 14

        c.setFont("Helvetica", 9)
        for summary in result.mentors:
            if y < self.margin + 40:
                c.showPage()
                y = self.page_height - self.margin - 20
                c.setFont("Helvetica", 9)
            periods = ", ".join(
                f"#{p}: {h:g}h" for p, h in summary.pay_period_hours.items()
            )
            values = (
                summary.name[:24],
                f"{summary.hours_wanted:g}",
                f"{summary.target_hours:.1f}",
                f"{summary.hours_assigned:g}",
                periods,
            )
            for offset, value in zip(columns, values):
                c.drawString(self.margin + 20 + offset, y, value)
            y -= 13

        review = [f"Forced: {f}" for f in result.forced_assignments]
        review += [f"Unfilled: {u}" for u in result.unfilled_slots]
        if review:
            y -= 15
            c.setFont("Helvetica-Bold", 12)
            c.drawString(self.margin, y, "Needs Review")
            y -= 16
            c.setFont("Helvetica", 8)
            for item in review:
                if y < self.margin:
                    c.showPage()
                    y = self.page_height - self.margin - 20
                    c.setFont("Helvetica", 8)
                c.drawString(self.margin + 20, y, item[:140])
                y -= 11

        c.showPage()
