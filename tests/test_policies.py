"""Tests for workload policies."""

import pytest

from mentorshift.domain.policies import DefaultWorkloadPolicy


class TestDefaultWorkloadPolicy:
    """Tests for DefaultWorkloadPolicy."""

    def test_default_pay_period_cap(self):
        """Pay period cap should be 80 hours."""
        policy = DefaultWorkloadPolicy()
        assert policy.pay_period_cap_hours() == 80.0

    def test_weekly_cap_is_one_and_a_half_times_target(self):
        """Weekly cap should be 1.5x the requested weekly hours."""
        policy = DefaultWorkloadPolicy()
        assert policy.weekly_cap_hours(10) == 15.0
        assert policy.weekly_cap_hours(40) == 60.0

    def test_default_rolling_window(self):
        """At most 5 days in any 7-day window."""
        policy = DefaultWorkloadPolicy()
        assert policy.window_days() == 7
        assert policy.max_days_in_window() == 5

    def test_extended_caps_enabled_by_default(self):
        policy = DefaultWorkloadPolicy()
        assert policy.enforce_extended_caps() is True

    def test_custom_values(self):
        """Custom caps should be respected."""
        policy = DefaultWorkloadPolicy(
            pay_period_cap=60,
            weekly_cap_multiplier=2.0,
            rolling_window_days=10,
            rolling_window_max_days=6,
            extended_caps=False,
        )
        assert policy.pay_period_cap_hours() == 60
        assert policy.weekly_cap_hours(20) == 40.0
        assert policy.window_days() == 10
        assert policy.max_days_in_window() == 6
        assert policy.enforce_extended_caps() is False

    def test_non_positive_pay_period_cap_rejected(self):
        with pytest.raises(ValueError):
            DefaultWorkloadPolicy(pay_period_cap=0)

    def test_non_positive_multiplier_rejected(self):
        with pytest.raises(ValueError):
            DefaultWorkloadPolicy(weekly_cap_multiplier=-1)

    def test_window_max_cannot_exceed_window(self):
        """A window cannot allow more days than it contains."""
        with pytest.raises(ValueError):
            DefaultWorkloadPolicy(rolling_window_days=7, rolling_window_max_days=8)

    def test_empty_window_rejected(self):
        with pytest.raises(ValueError):
            DefaultWorkloadPolicy(rolling_window_days=0)
