"""Overage Reconciliation - Pure functions for self-correcting weekly budgets.

Overage is recomputed from scratch on every call: eating under a day's
allowance earns no credit, eating over it adds to the week's overage, and
the unpaid overage is spread across today and the remaining regular days.

All functions are pure: same input always produces same output, no side effects.
"""

from datetime import date

from .models import (
    AdjustedBudget,
    DailySummary,
    DayOverage,
    OverageBreakdown,
    PlannedTreatDay,
    WeeklyPeriod,
)
from .periods import days_between
from .rounding import round_half_up


DEFAULT_FALLBACK_DAILY_BUDGET = 1700


def compute_cumulative_overage(
    period: WeeklyPeriod,
    treat_days: list[PlannedTreatDay],
    summaries: list[DailySummary],
    through_date: date,
) -> OverageBreakdown:
    """Walk the period's days up to through_date and total the excess.

    Regular days are measured against the daily base, treat days against
    their planned calories. Days without a summary contribute nothing.

    Args:
        period: The weekly period
        treat_days: Treat days in the period
        summaries: Daily summaries (anything outside the range is ignored)
        through_date: Last day to include; clamped to the period end

    Returns:
        OverageBreakdown with the rounded total and per-day detail
    """
    last_day = min(through_date, period.week_end)
    planned = {d.treat_date: d.planned_calories for d in treat_days}
    daily_base = period.daily_base

    days: list[DayOverage] = []
    total = 0.0
    for summary in sorted(summaries, key=lambda s: s.summary_date):
        if not period.week_start <= summary.summary_date <= last_day:
            continue
        net = summary.net_calories
        is_treat_day = summary.summary_date in planned
        allowance = planned[summary.summary_date] if is_treat_day else daily_base
        overage = max(0.0, net - allowance)
        total += overage
        days.append(
            DayOverage(
                day=summary.summary_date,
                net_calories=net,
                allowance=allowance,
                overage=overage,
                is_treat_day=is_treat_day,
            )
        )

    return OverageBreakdown(cumulative_overage=round_half_up(total), days=days)


def remaining_days_after(day: date, period: WeeklyPeriod) -> int:
    """Calendar days from tomorrow through the period end, inclusive."""
    return max(0, days_between(day, period.week_end))


def calculate_adjusted_budget(
    period: WeeklyPeriod,
    treat_days: list[PlannedTreatDay],
    day: date,
    floor: int,
) -> AdjustedBudget:
    """Today's budget after spreading the period's overage.

    Args:
        period: The weekly period containing day (with its cumulative overage)
        treat_days: Treat days in the period
        day: The day to budget
        floor: Comfort floor for the user's goal and gender

    Returns:
        AdjustedBudget; treat days get their planned calories unadjusted
    """
    daily_base = period.daily_base
    cumulative_overage = period.cumulative_overage

    todays_treat = next((d for d in treat_days if d.treat_date == day), None)
    if todays_treat is not None:
        return AdjustedBudget(
            base_budget=round_half_up(daily_base),
            adjustment=0,
            adjusted_budget=todays_treat.planned_calories,
            is_treat_day=True,
            treat_day_calories=todays_treat.planned_calories,
            remaining_regular_days=0,
            cumulative_overage=cumulative_overage,
        )

    future_treat_days = sum(1 for d in treat_days if day < d.treat_date <= period.week_end)
    remaining_regular_days = max(1, remaining_days_after(day, period) - future_treat_days)

    # +1 puts today in the pool
    adjustment = round_half_up(cumulative_overage / (remaining_regular_days + 1))
    adjusted_budget = max(daily_base - adjustment, floor)

    return AdjustedBudget(
        base_budget=round_half_up(daily_base),
        adjustment=-adjustment,
        adjusted_budget=round_half_up(adjusted_budget),
        is_treat_day=False,
        remaining_regular_days=remaining_regular_days,
        cumulative_overage=cumulative_overage,
    )


def fallback_budget(daily_budget: int = DEFAULT_FALLBACK_DAILY_BUDGET) -> AdjustedBudget:
    """Static budget served when no period is available."""
    return AdjustedBudget(
        base_budget=daily_budget,
        adjustment=0,
        adjusted_budget=daily_budget,
        is_treat_day=False,
        remaining_regular_days=1,
        cumulative_overage=0,
        is_fallback=True,
    )
