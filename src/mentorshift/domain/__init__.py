"""Domain models and business rules for shift assignment."""

from mentorshift.domain.config import (
    ConfigurationError,
    HolidaySpec,
    MentorConfig,
    ScheduleConfig,
    SeasonalShiftTable,
    WeekdayBehavior,
    parse_holiday_dates,
)
from mentorshift.domain.models import (
    AssignmentPhase,
    Day,
    DayResult,
    Eligibility,
    ForcedAssignment,
    Mentor,
    MentorSummary,
    RejectionReason,
    ShiftCategory,
    SlotAssignment,
    UnfilledSlot,
)
from mentorshift.domain.policies import DefaultWorkloadPolicy, WorkloadPolicy

__all__ = [
    # Models
    "AssignmentPhase",
    "Day",
    "DayResult",
    "Eligibility",
    "ForcedAssignment",
    "Mentor",
    "MentorSummary",
    "RejectionReason",
    "ShiftCategory",
    "SlotAssignment",
    "UnfilledSlot",
    # Configuration
    "ConfigurationError",
    "HolidaySpec",
    "MentorConfig",
    "ScheduleConfig",
    "SeasonalShiftTable",
    "WeekdayBehavior",
    "parse_holiday_dates",
    # Policies
    "DefaultWorkloadPolicy",
    "WorkloadPolicy",
]
