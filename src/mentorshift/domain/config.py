"""Typed configuration for a scheduling run.

Roster, seasonal shift tables and holiday lists arrive from the surrounding
application as loose records (day numbers as strings or ints, optional keys,
nested "shift_info" wrappers). This module turns them into validated,
immutable structures and rejects malformed input at the boundary, before the
scheduler ever sees it.
"""

import calendar
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Mapping, Optional

from mentorshift.domain.models import WEEKDAY_NAMES, Mentor
from mentorshift.domain.policies import DefaultWorkloadPolicy, WorkloadPolicy


class ConfigurationError(ValueError):
    """Raised when scheduling input is malformed or incomplete."""


DEFAULT_SEASON_MONTHS: dict[str, tuple[int, ...]] = {
    "summer": (5, 6, 7),
    "winter": (8, 9, 10, 11, 12, 1, 2, 3, 4),
}


class WeekdayBehavior(Enum):
    """How a mentor's weekday list is interpreted.

    RESTRICT: the listed weekdays are unavailable.
    ONLY: the mentor works only on the listed weekdays.
    PERMIT: the listed weekdays are exempt from the mentor's hard dates.
    """

    RESTRICT = "restrict"
    ONLY = "only"
    PERMIT = "permit"

    @classmethod
    def parse(cls, value: Any) -> "WeekdayBehavior":
        """Accept a long name or a stored short code (Re, Inv, Pe), any case."""
        key = str(value).strip().lower()
        key = _BEHAVIOR_CODES.get(key, key)
        return cls(key)


_BEHAVIOR_CODES = {"re": "restrict", "inv": "only", "pe": "permit"}


def _parse_day_number(value: Any, what: str) -> int:
    """Accept an int or a digit string as a day-of-month number."""
    if isinstance(value, bool):
        raise ConfigurationError(f"{what}: expected a day number, got {value!r}")
    if isinstance(value, int):
        number = value
    elif isinstance(value, str) and value.strip().isdigit():
        number = int(value.strip())
    else:
        raise ConfigurationError(f"{what}: expected a day number, got {value!r}")
    if not 1 <= number <= 31:
        raise ConfigurationError(f"{what}: day {number} is outside 1-31")
    return number


def _parse_hours(value: Any, what: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise ConfigurationError(f"{what}: expected a number of hours, got {value!r}")
    try:
        hours = float(value)
    except ValueError:
        raise ConfigurationError(f"{what}: expected a number of hours, got {value!r}")
    if hours < 0:
        raise ConfigurationError(f"{what}: hours cannot be negative ({hours})")
    return hours


def _parse_int(value: Any, what: str) -> int:
    if isinstance(value, bool):
        raise ConfigurationError(f"{what} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{what} must be an integer, got {value!r}")


def _as_list(value: Any, what: str) -> list:
    """A missing value is an empty list; anything but a list or tuple is rejected."""
    if value is None:
        return []
    if not isinstance(value, (list, tuple)):
        raise ConfigurationError(f"{what}: expected a list, got {value!r}")
    return list(value)


def _as_mapping(value: Any, what: str) -> Mapping:
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"{what} must be a mapping, got {value!r}")
    return value


def _check_weekdays(names: tuple[str, ...], what: str) -> None:
    for name in names:
        if name not in WEEKDAY_NAMES:
            raise ConfigurationError(f"{what}: unknown weekday {name!r}")


def parse_holiday_dates(text: str) -> list[int]:
    """Parse a holiday list such as "4, 24-25" into sorted day numbers.

    Ranges are inclusive. Blank input yields an empty list.
    """
    dates: set[int] = set()
    for part in text.split(","):
        part = part.strip()
        if not part:
            continue
        if "-" in part:
            start_text, _, end_text = part.partition("-")
            start = _parse_day_number(start_text, "holiday range")
            end = _parse_day_number(end_text, "holiday range")
            if start > end:
                raise ConfigurationError(f"holiday range {part!r} runs backwards")
            dates.update(range(start, end + 1))
        else:
            dates.add(_parse_day_number(part, "holiday date"))
    return sorted(dates)


@dataclass(frozen=True)
class MentorConfig:
    """Validated roster entry for one mentor.

    Attributes:
        name: Unique mentor name.
        hours_wanted: Requested hours per week.
        hard_dates: Day-of-month numbers requested off.
        weekdays: Weekday names, interpreted through weekday_behavior.
        preferred_weekdays: Zero or one preferred weekday name.
        show_on_calendar: Mentors marked False are skipped entirely.
        weekday_behavior: How weekdays relate to availability.
    """

    name: str
    hours_wanted: float
    hard_dates: tuple[int, ...] = ()
    weekdays: tuple[str, ...] = ()
    preferred_weekdays: tuple[str, ...] = ()
    show_on_calendar: bool = True
    weekday_behavior: WeekdayBehavior = WeekdayBehavior.RESTRICT

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ConfigurationError("mentor name cannot be empty")
        if self.hours_wanted < 0:
            raise ConfigurationError(f"{self.name}: hours_wanted cannot be negative")
        for day in self.hard_dates:
            if not 1 <= day <= 31:
                raise ConfigurationError(f"{self.name}: hard date {day} is outside 1-31")
        _check_weekdays(self.weekdays, self.name)
        _check_weekdays(self.preferred_weekdays, self.name)
        if len(self.preferred_weekdays) > 1:
            raise ConfigurationError(
                f"{self.name}: at most one preferred weekday is supported"
            )

    @classmethod
    def from_record(cls, name: str, record: Mapping[str, Any]) -> "MentorConfig":
        """Build from a loose roster record keyed by the mentor's name."""
        if not isinstance(record, Mapping):
            raise ConfigurationError(f"{name}: roster record must be a mapping")
        if "hours_wanted" not in record:
            raise ConfigurationError(f"{name}: missing required field 'hours_wanted'")

        hard_dates = sorted(
            {
                _parse_day_number(d, f"{name} hard_dates")
                for d in _as_list(record.get("hard_dates"), f"{name} hard_dates")
            }
        )
        # Stored rosters keep the behavior as a one-element list such as ["Re"]
        behavior_value = record.get("weekday_behavior") or WeekdayBehavior.RESTRICT.value
        if isinstance(behavior_value, (list, tuple)):
            behavior_value = behavior_value[0] if behavior_value else WeekdayBehavior.RESTRICT.value
        try:
            behavior = WeekdayBehavior.parse(behavior_value)
        except ValueError:
            raise ConfigurationError(f"{name}: unknown weekday_behavior {behavior_value!r}")

        weekdays = _as_list(record.get("weekdays"), f"{name} weekdays")
        preferred = _as_list(record.get("preferred_weekdays"), f"{name} preferred_weekdays")
        return cls(
            name=name,
            hours_wanted=_parse_hours(record["hours_wanted"], f"{name} hours_wanted"),
            hard_dates=tuple(hard_dates),
            weekdays=tuple(weekdays),
            preferred_weekdays=tuple(preferred),
            show_on_calendar=bool(record.get("show_on_calendar", True)),
            weekday_behavior=behavior,
        )

    def to_record(self) -> dict:
        return {
            "hours_wanted": self.hours_wanted,
            "hard_dates": list(self.hard_dates),
            "weekdays": list(self.weekdays),
            "preferred_weekdays": list(self.preferred_weekdays),
            "show_on_calendar": self.show_on_calendar,
            "weekday_behavior": self.weekday_behavior.value,
        }

    def to_mentor(self, year: int, month: int) -> Mentor:
        """Create the live Mentor for one month, resolving weekday behavior."""
        hard_dates = set(self.hard_dates)
        unavailable: set[str] = set()

        if self.weekday_behavior == WeekdayBehavior.RESTRICT:
            unavailable = set(self.weekdays)
        elif self.weekday_behavior == WeekdayBehavior.ONLY and self.weekdays:
            unavailable = set(WEEKDAY_NAMES) - set(self.weekdays)
        elif self.weekday_behavior == WeekdayBehavior.PERMIT:
            days_in_month = calendar.monthrange(year, month)[1]
            hard_dates = {
                day for day in hard_dates
                if day > days_in_month
                or WEEKDAY_NAMES[date(year, month, day).weekday()] not in self.weekdays
            }

        return Mentor(
            name=self.name,
            hours_wanted=self.hours_wanted,
            hard_dates=hard_dates,
            unavailable_weekdays=unavailable,
            preferred_weekday=self.preferred_weekdays[0] if self.preferred_weekdays else None,
        )


@dataclass(frozen=True)
class HolidaySpec:
    """Holiday days of the month and the shift set that replaces the normal one."""

    dates: tuple[int, ...] = ()
    shift_info: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self):
        for day in self.dates:
            if not 1 <= day <= 31:
                raise ConfigurationError(f"holiday date {day} is outside 1-31")
        if self.dates and not self.shift_info:
            raise ConfigurationError("holiday dates given without holiday shift_info")
        for name, hours in self.shift_info.items():
            if hours <= 0:
                raise ConfigurationError(f"holiday shift {name!r} must have positive hours")

    @classmethod
    def from_record(cls, record: Optional[Mapping[str, Any]]) -> "HolidaySpec":
        if not record:
            return cls()
        if not isinstance(record, Mapping):
            raise ConfigurationError("holidays must be a mapping")
        raw_dates = record.get("dates") or []
        if isinstance(raw_dates, str):
            dates = parse_holiday_dates(raw_dates)
        else:
            dates = sorted(
                {
                    _parse_day_number(d, "holiday dates")
                    for d in _as_list(raw_dates, "holiday dates")
                }
            )
        raw_shifts = _as_mapping(record.get("shift_info") or {}, "holiday shift_info")
        shift_info = {
            str(name): _parse_hours(hours, f"holiday shift {name}")
            for name, hours in raw_shifts.items()
        }
        return cls(dates=tuple(dates), shift_info=shift_info)

    def is_holiday(self, day_of_month: int) -> bool:
        return day_of_month in self.dates


@dataclass(frozen=True)
class SeasonalShiftTable:
    """Shift hours per season and weekday.

    Attributes:
        seasons: season name -> weekday name -> shift name -> hours.
        season_months: season name -> calendar months it covers.
    """

    seasons: Mapping[str, Mapping[str, Mapping[str, float]]]
    season_months: Mapping[str, tuple[int, ...]] = field(
        default_factory=lambda: dict(DEFAULT_SEASON_MONTHS)
    )

    def __post_init__(self):
        seen: dict[int, str] = {}
        for season, months in self.season_months.items():
            for month in months:
                if not 1 <= month <= 12:
                    raise ConfigurationError(f"season {season!r}: bad month {month}")
                if month in seen:
                    raise ConfigurationError(
                        f"month {month} belongs to both {seen[month]!r} and {season!r}"
                    )
                seen[month] = season
        for season, weekdays in self.seasons.items():
            _check_weekdays(tuple(weekdays), f"season {season!r}")
            for weekday, shifts in weekdays.items():
                for name, hours in shifts.items():
                    if hours <= 0:
                        raise ConfigurationError(
                            f"{season}/{weekday}/{name}: shift hours must be positive"
                        )

    @classmethod
    def from_record(
        cls,
        record: Mapping[str, Any],
        season_months: Optional[Mapping[str, Any]] = None,
    ) -> "SeasonalShiftTable":
        """Build from either {season: {weekday: shifts}} or the wrapped
        {season: {"shift_info": {weekday: shifts}, "dates": ...}} shape."""
        if not isinstance(record, Mapping) or not record:
            raise ConfigurationError("seasonal shift table must be a non-empty mapping")

        seasons: dict[str, dict[str, dict[str, float]]] = {}
        for season, body in record.items():
            if not isinstance(body, Mapping):
                raise ConfigurationError(f"season {season!r} must be a mapping")
            weekdays = _as_mapping(body.get("shift_info", body), f"season {season!r} shift_info")
            seasons[season] = {
                weekday: {
                    str(name): _parse_hours(hours, f"{season}/{weekday}/{name}")
                    for name, hours in _as_mapping(shifts, f"{season}/{weekday}").items()
                }
                for weekday, shifts in weekdays.items()
            }

        months = DEFAULT_SEASON_MONTHS
        if season_months is not None:
            months = {
                name: tuple(
                    _parse_int(m, f"season {name!r} month")
                    for m in _as_list(values, f"season {name!r} months")
                )
                for name, values in _as_mapping(season_months, "season_months").items()
            }
        return cls(seasons=seasons, season_months=months)

    def season_for_month(self, month: int) -> str:
        for season, months in self.season_months.items():
            if month in months:
                if season not in self.seasons:
                    raise ConfigurationError(
                        f"season {season!r} for month {month} has no shift table"
                    )
                return season
        raise ConfigurationError(f"no season covers month {month}")

    def shifts_for(self, season: str, weekday: str) -> dict[str, float]:
        """Shift hours for a season and weekday; missing entries are fatal."""
        try:
            shifts = self.seasons[season][weekday]
        except KeyError:
            raise ConfigurationError(f"no shift table entry for {season}/{weekday}")
        if not shifts:
            raise ConfigurationError(f"shift table entry for {season}/{weekday} is empty")
        return dict(shifts)


@dataclass(frozen=True)
class ScheduleConfig:
    """Complete, validated input snapshot for one scheduling run.

    Attributes:
        year: Target year.
        month: Target month (1-12).
        mentors: Roster entries in roster order.
        shift_table: Seasonal shift hours.
        holidays: Holiday override.
        first_day: First day of the month to schedule.
        last_day: Last day to schedule (defaults to the month's last day).
        policy: Workload caps.
    """

    year: int
    month: int
    mentors: tuple[MentorConfig, ...]
    shift_table: SeasonalShiftTable
    holidays: HolidaySpec = field(default_factory=HolidaySpec)
    first_day: int = 1
    last_day: Optional[int] = None
    policy: WorkloadPolicy = field(default_factory=DefaultWorkloadPolicy)

    def __post_init__(self):
        if not 1 <= self.month <= 12:
            raise ConfigurationError(f"month must be 1-12, got {self.month}")
        if self.year < 1:
            raise ConfigurationError(f"invalid year {self.year}")
        names = [m.name for m in self.mentors]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ConfigurationError(f"duplicate mentor names: {', '.join(duplicates)}")
        last = self.last_day if self.last_day is not None else self.days_in_month
        if not 1 <= self.first_day <= last <= self.days_in_month:
            raise ConfigurationError(
                f"day range {self.first_day}-{last} is outside the month"
            )
        # Every day must resolve to a shift set before any assignment happens
        for d in self.schedule_dates:
            if not self.holidays.is_holiday(d.day):
                self.shift_table.shifts_for(
                    self.shift_table.season_for_month(self.month),
                    WEEKDAY_NAMES[d.weekday()],
                )

    @property
    def days_in_month(self) -> int:
        return calendar.monthrange(self.year, self.month)[1]

    @property
    def schedule_dates(self) -> list[date]:
        last = self.last_day if self.last_day is not None else self.days_in_month
        return [date(self.year, self.month, day) for day in range(self.first_day, last + 1)]

    @property
    def active_mentors(self) -> list[MentorConfig]:
        return [m for m in self.mentors if m.show_on_calendar]

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Any],
        policy: Optional[WorkloadPolicy] = None,
    ) -> "ScheduleConfig":
        """Build from a JSON-style document.

        Expected keys: year, month, mentors (name -> record), seasonal_shifts;
        optional: season_months, holidays, first_day, last_day, policy.
        """
        _as_mapping(data, "configuration document")
        for key in ("year", "month", "mentors", "seasonal_shifts"):
            if key not in data:
                raise ConfigurationError(f"missing required key {key!r}")

        roster = data["mentors"]
        if not isinstance(roster, Mapping):
            raise ConfigurationError("mentors must map names to roster records")

        if policy is None:
            policy_data = _as_mapping(data.get("policy") or {}, "policy")
            try:
                policy = DefaultWorkloadPolicy(**policy_data)
            except (TypeError, ValueError) as exc:
                raise ConfigurationError(f"invalid policy: {exc}")

        try:
            year, month = int(data["year"]), int(data["month"])
        except (TypeError, ValueError):
            raise ConfigurationError("year and month must be integers")
        first_day = _parse_int(data.get("first_day", 1), "first_day")
        last_day = None
        if data.get("last_day") is not None:
            last_day = _parse_int(data["last_day"], "last_day")

        return cls(
            year=year,
            month=month,
            mentors=tuple(
                MentorConfig.from_record(name, record) for name, record in roster.items()
            ),
            shift_table=SeasonalShiftTable.from_record(
                data["seasonal_shifts"], data.get("season_months")
            ),
            holidays=HolidaySpec.from_record(data.get("holidays")),
            first_day=first_day,
            last_day=last_day,
            policy=policy,
        )
