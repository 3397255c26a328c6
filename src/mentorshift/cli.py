"""Command-line interface for the mentor shift scheduler."""

import argparse
import copy
import json
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Optional

from mentorshift.domain.config import ConfigurationError, ScheduleConfig
from mentorshift.output.debug_generator import DebugGenerator
from mentorshift.output.pdf_generator import PDFGenerator
from mentorshift.scheduling.scheduler import ScheduleResult, Scheduler

NATIONAL_HOLIDAYS = {
    1: "1",
    6: "19",
    7: "4,24",
    12: "24,25,31",
}

DEFAULT_SEASONAL_SHIFTS = {
    "summer": {
        "Sunday": {"a_shift": 10, "b_shift": 10},
        "Monday": {"a_shift": 8, "b_shift": 8, "c_shift": 5},
        "Tuesday": {"a_shift": 7, "b_shift": 7, "c_shift": 4},
        "Wednesday": {"a_shift": 7, "b_shift": 7},
        "Thursday": {"a_shift": 7, "b_shift": 7, "c_shift": 4},
        "Friday": {"a_shift": 8, "b_shift": 8, "c_shift": 4},
        "Saturday": {"a_shift": 11, "b_shift": 11, "c_shift": 4},
    },
    "winter": {
        "Sunday": {"a_shift": 9, "b_shift": 9},
        "Monday": {"a_shift": 7, "b_shift": 7, "c_shift": 5},
        "Tuesday": {"a_shift": 6, "b_shift": 6, "c_shift": 4},
        "Wednesday": {"a_shift": 6, "b_shift": 6},
        "Thursday": {"a_shift": 6, "b_shift": 6, "c_shift": 4},
        "Friday": {"a_shift": 8, "b_shift": 8, "c_shift": 4},
        "Saturday": {"a_shift": 11, "b_shift": 11, "c_shift": 4},
    },
}

HOLIDAY_SHIFTS = {"holiday_a_shift": 9, "holiday_b_shift": 9}

SAMPLE_NAMES = [
    "Alice", "Bob", "Carol", "David", "Eve", "Frank", "Grace", "Henry",
    "Ivy", "Jack", "Kate", "Leo", "Mia", "Noah", "Olivia", "Paul",
]

WEEKDAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


def create_sample_config(year: int, month: int, mentor_count: int = 8) -> dict:
    """Create a sample configuration document.

    Mentors get varied weekly targets, a few requested days off and the
    occasional unavailable or preferred weekday.

    Args:
        year: Target year.
        month: Target month (1-12).
        mentor_count: Number of mentors to create.
    """
    mentors = {}
    for i in range(mentor_count):
        name = SAMPLE_NAMES[i % len(SAMPLE_NAMES)]
        if i >= len(SAMPLE_NAMES):
            name = f"{name} {i // len(SAMPLE_NAMES) + 1}"

        record = {
            "hours_wanted": (15, 20, 25, 30)[i % 4],
            "hard_dates": [((i * 5) % 27) + 1, ((i * 5 + 11) % 27) + 1],
            "weekdays": [],
            "preferred_weekdays": [],
        }
        if i % 3 == 0:
            record["weekdays"] = [WEEKDAYS[i % 7]]
        if i % 4 == 1:
            record["preferred_weekdays"] = [WEEKDAYS[(i + 3) % 7]]
        mentors[name] = record

    return {
        "year": year,
        "month": month,
        "mentors": mentors,
        "seasonal_shifts": copy.deepcopy(DEFAULT_SEASONAL_SHIFTS),
        "holidays": {
            "dates": NATIONAL_HOLIDAYS.get(month, ""),
            "shift_info": dict(HOLIDAY_SHIFTS),
        },
    }


def print_summary(result: ScheduleResult) -> None:
    """Print a short console summary of a run."""
    print(f"\nSchedule generated for {result.year}-{result.month:02d}")
    print(f"  Slots filled: {result.filled_slots}/{result.total_slots}")
    print(f"  Forced assignments: {len(result.forced_assignments)}")
    print(f"  Repaired violations: {len(result.repaired_violations)}")

    print("\n  Hours by mentor:")
    for summary in result.mentors:
        print(
            f"    {summary.name:<16} {summary.hours_assigned:>6g}h "
            f"(target {summary.target_hours:.1f}h)"
        )

    if result.unfilled_slots:
        print(f"\n  Unfilled slots ({len(result.unfilled_slots)}):")
        for slot in result.unfilled_slots[:5]:
            print(f"    - {slot}")
        if len(result.unfilled_slots) > 5:
            print(f"    ... and {len(result.unfilled_slots) - 5} more")


def write_outputs(
    result: ScheduleResult,
    pdf_path: Optional[str] = None,
    report_path: Optional[str] = None,
    json_path: Optional[str] = None,
) -> None:
    if pdf_path:
        print(f"\nGenerating PDF: {pdf_path}")
        PDFGenerator().generate(result, pdf_path)
        print("  PDF created successfully!")
    if report_path:
        DebugGenerator().generate(result, report_path)
        print(f"Report written to {report_path}")
    if json_path:
        Path(json_path).write_text(json.dumps(result.to_dict(), indent=2))
        print(f"JSON written to {json_path}")


def run_generate(
    config_path: str,
    pdf_path: Optional[str] = None,
    report_path: Optional[str] = None,
    json_path: Optional[str] = None,
) -> int:
    """Schedule the month described by a JSON config file."""
    try:
        data = json.loads(Path(config_path).read_text())
        config = ScheduleConfig.from_dict(data)
    except (OSError, json.JSONDecodeError) as exc:
        print(f"Could not read {config_path}: {exc}", file=sys.stderr)
        return 2
    except ConfigurationError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2

    result = Scheduler().generate_schedule(config)
    print_summary(result)
    write_outputs(result, pdf_path, report_path, json_path)
    return 0


def run_demo(
    year: Optional[int] = None,
    month: Optional[int] = None,
    mentor_count: int = 8,
    output_path: Optional[str] = None,
) -> None:
    """Run a demo month with sample mentors and the default shift tables."""
    today = date.today()
    year = year or today.year
    month = month or today.month

    print(f"Generating demo schedule for {mentor_count} mentors, {year}-{month:02d}...")
    config = ScheduleConfig.from_dict(create_sample_config(year, month, mentor_count))
    result, stats = Scheduler().generate_schedule_with_stats(config)

    print_summary(result)
    print(
        f"\n  Hours: {stats['assigned_hours']:g} of {stats['total_hours']:g} assigned, "
        f"target range {stats['min_percentage']:.0f}%-{stats['max_percentage']:.0f}%"
    )

    if output_path:
        write_outputs(result, pdf_path=output_path)


def main() -> int:
    """Main entry point for CLI."""
    parser = argparse.ArgumentParser(
        description="Mentor Shift - monthly shift assignment tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log scheduling progress to stderr",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    generate_parser = subparsers.add_parser("generate", help="Schedule a month from a JSON config")
    generate_parser.add_argument("config", help="Path to the JSON configuration file")
    generate_parser.add_argument("--pdf", help="Write a printable PDF calendar")
    generate_parser.add_argument("--report", help="Write a plain-text report")
    generate_parser.add_argument("--json", help="Write the result as JSON")

    demo_parser = subparsers.add_parser("demo", help="Run demo schedule generation")
    demo_parser.add_argument("--year", "-y", type=int, help="Year (default: current)")
    demo_parser.add_argument("--month", "-m", type=int, help="Month (default: current)")
    demo_parser.add_argument(
        "--count", "-c",
        type=int,
        default=8,
        help="Number of mentors to generate (default: 8)",
    )
    demo_parser.add_argument(
        "--output", "-o",
        type=str,
        help="Output PDF path (optional)",
    )

    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    if args.command == "generate":
        return run_generate(args.config, args.pdf, args.report, args.json)
    elif args.command == "demo":
        run_demo(args.year, args.month, args.count, args.output)
        return 0
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
