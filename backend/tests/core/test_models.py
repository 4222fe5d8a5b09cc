"""Unit tests for data models - validation and defaults."""

import pytest
from datetime import date
from pydantic import ValidationError

from src.core.models import (
    DailySummary,
    ErrorKind,
    Outcome,
    PlannedTreatDay,
    Profile,
    WeeklyPeriod,
)


class TestProfile:
    """Tests for Profile model."""

    def test_defaults(self):
        """A fresh profile has no baseline."""
        profile = Profile()
        assert profile.goal == "maintain"
        assert profile.gender == "other"
        assert profile.baseline_complete is False
        assert profile.weekly_budget is None

    def test_weekly_budget_must_match_target(self):
        """weekly_budget is always seven daily targets."""
        Profile(daily_target=1500, weekly_budget=10500)
        with pytest.raises(ValidationError):
            Profile(daily_target=1500, weekly_budget=10000)

    def test_negative_deficit_allowed(self):
        """A gain goal stores a negative deficit."""
        assert Profile(goal="gain", daily_deficit=-500).daily_deficit == -500

    def test_zero_bmr_rejected(self):
        """BMR must be positive."""
        with pytest.raises(ValidationError):
            Profile(bmr=0)


class TestDailySummary:
    """Tests for DailySummary model."""

    def test_net_calories(self):
        """Net is consumed minus burned."""
        summary = DailySummary(summary_date=date(2024, 12, 23), calories_consumed=2200, calories_burned=400)
        assert summary.net_calories == 1800

    def test_negative_consumed_rejected(self):
        with pytest.raises(ValidationError):
            DailySummary(summary_date=date(2024, 12, 23), calories_consumed=-1)


class TestWeeklyPeriod:
    """Tests for WeeklyPeriod model."""

    def test_valid_period(self):
        """A Monday to Sunday period is created with defaults."""
        period = WeeklyPeriod(
            week_start=date(2024, 12, 23),
            week_end=date(2024, 12, 29),
            weekly_budget=10500,
            baseline_average_daily=1500,
        )
        assert period.status == "active"
        assert period.cumulative_overage == 0
        assert period.daily_base == 1500
        assert period.contains(date(2024, 12, 29))
        assert not period.contains(date(2024, 12, 30))

    def test_start_must_be_monday(self):
        """Periods never start mid-week."""
        with pytest.raises(ValidationError):
            WeeklyPeriod(
                week_start=date(2024, 12, 24),
                week_end=date(2024, 12, 30),
                weekly_budget=10500,
                baseline_average_daily=1500,
            )

    def test_end_must_be_six_days_later(self):
        """Periods are exactly seven days."""
        with pytest.raises(ValidationError):
            WeeklyPeriod(
                week_start=date(2024, 12, 23),
                week_end=date(2024, 12, 30),
                weekly_budget=10500,
                baseline_average_daily=1500,
            )

    def test_negative_overage_rejected(self):
        with pytest.raises(ValidationError):
            WeeklyPeriod(
                week_start=date(2024, 12, 23),
                week_end=date(2024, 12, 29),
                weekly_budget=10500,
                baseline_average_daily=1500,
                cumulative_overage=-10,
            )


class TestPlannedTreatDay:
    """Tests for PlannedTreatDay model."""

    def test_valid_treat_day(self):
        treat_day = PlannedTreatDay(treat_date=date(2024, 12, 27), planned_calories=2500, note="Party")
        assert treat_day.is_completed is False
        assert treat_day.note == "Party"

    def test_zero_calories_rejected(self):
        """Planned calories must be positive."""
        with pytest.raises(ValidationError):
            PlannedTreatDay(treat_date=date(2024, 12, 27), planned_calories=0)


class TestOutcome:
    """Tests for Outcome."""

    def test_ok_without_error(self):
        assert Outcome().ok

    def test_error_serializes_as_value(self):
        """Error kinds serialize to their string value."""
        outcome = Outcome(error=ErrorKind.UNSAFE, message="Too low")
        assert not outcome.ok
        assert outcome.model_dump(mode="json")["error"] == "unsafe"
