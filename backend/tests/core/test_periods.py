"""Unit tests for weekly period helpers - pure functions, no mocks needed."""

from datetime import date, datetime

from src.core.models import WeeklyPeriod
from src.core.periods import (
    analyze_week,
    days_between,
    draft_period,
    find_period_for_date,
    ranges_overlap,
    week_bounds,
)


MONDAY = date(2024, 12, 23)
SUNDAY = date(2024, 12, 29)


def make_period(start: date = MONDAY, created_at: datetime | None = None) -> WeeklyPeriod:
    period = draft_period(start, 10500)
    if created_at is not None:
        period = period.model_copy(update={"created_at": created_at})
    return period


class TestWeekBounds:
    """Tests for week_bounds."""

    def test_midweek(self):
        """A Wednesday maps to its Monday and Sunday."""
        assert week_bounds(date(2024, 12, 25)) == (MONDAY, SUNDAY)

    def test_monday_and_sunday(self):
        """Both ends of the week map to the same bounds."""
        assert week_bounds(MONDAY) == (MONDAY, SUNDAY)
        assert week_bounds(SUNDAY) == (MONDAY, SUNDAY)

    def test_crosses_year_boundary(self):
        """Weeks spanning New Year stay Monday to Sunday."""
        assert week_bounds(date(2025, 1, 1)) == (date(2024, 12, 30), date(2025, 1, 5))


class TestRanges:
    """Tests for ranges_overlap and days_between."""

    def test_overlap(self):
        assert ranges_overlap(MONDAY, SUNDAY, SUNDAY, date(2025, 1, 4))
        assert not ranges_overlap(MONDAY, SUNDAY, date(2024, 12, 30), date(2025, 1, 5))

    def test_days_between(self):
        assert days_between(MONDAY, SUNDAY) == 6
        assert days_between(SUNDAY, MONDAY) == -6


class TestDraftPeriod:
    """Tests for draft_period."""

    def test_fields(self):
        """The draft spans the week and copies the budget."""
        period = draft_period(date(2024, 12, 27), 10500)

        assert period.id is None
        assert period.week_start == MONDAY
        assert period.week_end == SUNDAY
        assert period.weekly_budget == 10500
        assert period.baseline_average_daily == 1500
        assert period.cumulative_overage == 0
        assert period.status == "active"

    def test_explicit_average(self):
        """A baseline average is stored as given."""
        assert draft_period(MONDAY, 10500, 1550).baseline_average_daily == 1550

    def test_daily_base_is_fractional(self):
        """The daily base is budget / 7 without rounding."""
        period = draft_period(MONDAY, 10000)
        assert period.daily_base == 10000 / 7
        assert period.baseline_average_daily == 1429


class TestFindPeriodForDate:
    """Tests for find_period_for_date."""

    def test_finds_containing_period(self):
        """The period whose range contains the date is returned."""
        this_week = make_period()
        next_week = make_period(date(2024, 12, 30))

        assert find_period_for_date([this_week, next_week], date(2025, 1, 2)) is next_week
        assert find_period_for_date([this_week, next_week], SUNDAY) is this_week

    def test_no_match(self):
        """Dates outside every period return None."""
        assert find_period_for_date([make_period()], date(2024, 12, 22)) is None
        assert find_period_for_date([], MONDAY) is None


class TestAnalyzeWeek:
    """Tests for analyze_week."""

    def test_full_week(self):
        """A period created before Monday tracks all seven days."""
        period = make_period(created_at=datetime(2024, 12, 22, 23, 0))

        progress = analyze_week(period, MONDAY)

        assert progress.tracking_start == MONDAY
        assert progress.days_tracked == 7
        assert progress.days_remaining == 7
        assert progress.is_partial_week is False

    def test_partial_week(self):
        """A period created on Wednesday tracks Wednesday through Sunday."""
        period = make_period(created_at=datetime(2024, 12, 25, 9, 30))

        progress = analyze_week(period, date(2024, 12, 26))

        assert progress.tracking_start == date(2024, 12, 25)
        assert progress.days_tracked == 5
        assert progress.days_remaining == 4
        assert progress.is_partial_week is True

    def test_created_on_overrides_timestamp(self):
        """An explicit local creation date wins over created_at."""
        period = make_period(created_at=datetime(2024, 12, 26, 2, 0))

        progress = analyze_week(period, SUNDAY, created_on=date(2024, 12, 25))

        assert progress.days_tracked == 5
        assert progress.days_remaining == 1

    def test_after_period_end(self):
        """No days remain once the week is over."""
        period = make_period(created_at=datetime(2024, 12, 20))

        assert analyze_week(period, date(2025, 1, 3)).days_remaining == 0
