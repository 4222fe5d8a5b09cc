"""Weekly Periods - Pure functions for Monday-Sunday budget windows.

All functions are pure: same input always produces same output, no side effects.
"""

from datetime import date, timedelta

from .models import WeeklyPeriod, WeekProgress
from .rounding import round_half_up


DAYS_IN_PERIOD = 7


def week_bounds(day: date) -> tuple[date, date]:
    """Monday and Sunday of the week containing day."""
    monday = day - timedelta(days=day.weekday())
    return monday, monday + timedelta(days=DAYS_IN_PERIOD - 1)


def ranges_overlap(start_a: date, end_a: date, start_b: date, end_b: date) -> bool:
    """True if two inclusive date ranges share at least one day."""
    return start_a <= end_b and start_b <= end_a


def days_between(start: date, end: date) -> int:
    """Calendar days from start to end (negative if end is earlier)."""
    return (end - start).days


def draft_period(
    day: date,
    weekly_budget: int,
    baseline_average_daily: int | None = None,
) -> WeeklyPeriod:
    """Build the (unsaved) period for the week containing day.

    Args:
        day: Any date in the target week
        weekly_budget: Budget copied from the profile
        baseline_average_daily: Baseline average intake; weekly_budget / 7 if unset

    Returns:
        WeeklyPeriod without an id
    """
    week_start, week_end = week_bounds(day)
    if baseline_average_daily is None:
        baseline_average_daily = round_half_up(weekly_budget / DAYS_IN_PERIOD)
    return WeeklyPeriod(
        week_start=week_start,
        week_end=week_end,
        weekly_budget=weekly_budget,
        baseline_average_daily=baseline_average_daily,
    )


def find_period_for_date(periods: list[WeeklyPeriod], day: date) -> WeeklyPeriod | None:
    """Return the period whose range contains day, if any."""
    for period in periods:
        if period.contains(day):
            return period
    return None


def analyze_week(period: WeeklyPeriod, today: date, created_on: date | None = None) -> WeekProgress:
    """Describe how much of a period the user is actually tracking.

    A period created mid-week is partial: tracking starts on the creation
    date rather than the Monday.

    Args:
        period: The weekly period
        today: The caller's current calendar date
        created_on: Local creation date; defaults to the period's created_at date

    Returns:
        WeekProgress for display
    """
    if created_on is None:
        created_on = period.created_at.date()

    tracking_start = max(period.week_start, created_on)
    tracking_start = min(tracking_start, period.week_end)
    days_tracked = days_between(tracking_start, period.week_end) + 1
    days_remaining = max(0, days_between(today, period.week_end) + 1)
    days_remaining = min(days_remaining, DAYS_IN_PERIOD)

    return WeekProgress(
        total_days_in_period=DAYS_IN_PERIOD,
        tracking_start=tracking_start,
        days_tracked=days_tracked,
        days_remaining=days_remaining,
        is_partial_week=days_tracked < DAYS_IN_PERIOD,
    )
