"""Policy definitions for workload rules.

This module contains the configurable hour and rest caps that decide whether
a mentor may legally take a shift. Policies are kept separate from the
scheduling engine to allow independent testing and easy modification.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


class WorkloadPolicy(ABC):
    """Abstract base class for workload cap policies."""

    @abstractmethod
    def pay_period_cap_hours(self) -> float:
        """Maximum hours a mentor may work in one 14-day pay period."""
        pass

    @abstractmethod
    def weekly_cap_hours(self, hours_wanted: float) -> float:
        """Maximum hours in one calendar week for a mentor's weekly target.

        Args:
            hours_wanted: The mentor's requested hours per week.

        Returns:
            Hour ceiling for a single Sunday-anchored week.
        """
        pass

    @abstractmethod
    def window_days(self) -> int:
        """Length of the rolling rest window in days."""
        pass

    @abstractmethod
    def max_days_in_window(self) -> int:
        """Maximum distinct days worked inside any rolling window."""
        pass

    @abstractmethod
    def enforce_extended_caps(self) -> bool:
        """Whether weekly and rolling-window caps are part of legality."""
        pass


@dataclass
class DefaultWorkloadPolicy(WorkloadPolicy):
    """Default workload policy implementation.

    Caps:
    - 80 hours per pay period
    - 1.5x the requested weekly hours per calendar week
    - At most 5 days worked in any 7-day window

    Setting extended_caps to False keeps only the 80-hour pay period rule.
    """

    pay_period_cap: float = 80.0
    weekly_cap_multiplier: float = 1.5
    rolling_window_days: int = 7
    rolling_window_max_days: int = 5
    extended_caps: bool = True

    def __post_init__(self):
        if self.pay_period_cap <= 0:
            raise ValueError("pay_period_cap must be positive")
        if self.weekly_cap_multiplier <= 0:
            raise ValueError("weekly_cap_multiplier must be positive")
        if self.rolling_window_days < 1:
            raise ValueError("rolling_window_days must be at least 1")
        if not 1 <= self.rolling_window_max_days <= self.rolling_window_days:
            raise ValueError(
                "rolling_window_max_days must be between 1 and rolling_window_days"
            )

    def pay_period_cap_hours(self) -> float:
        return self.pay_period_cap

    def weekly_cap_hours(self, hours_wanted: float) -> float:
        return hours_wanted * self.weekly_cap_multiplier

    def window_days(self) -> int:
        return self.rolling_window_days

    def max_days_in_window(self) -> int:
        return self.rolling_window_max_days

    def enforce_extended_caps(self) -> bool:
        return self.extended_caps
