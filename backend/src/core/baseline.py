"""Baseline Estimation - Pure functions turning a baseline week into targets.

Two completion modes share one output contract (BaselineResult):

- measured: at least MIN_BASELINE_DAYS days with food logged; TDEE is a
  blend of the activity formula and observed intake.
- estimated: the fallback when too few days were logged; TDEE comes from
  BMR and the activity level reported at onboarding.

All functions are pure: same input always produces same output, no side effects.
"""

from datetime import date

from .activity import activity_factor, classify_activity, normalize_activity_level
from .models import (
    BaselineOutcome,
    BaselineResult,
    CheckIn,
    DailySummary,
    ErrorKind,
    Gender,
)
from .rounding import round_half_up


MIN_BASELINE_DAYS = 3

# Weight of the formula TDEE in the measured blend; observed intake gets the rest.
FORMULA_BLEND_WEIGHT = 0.5

# Eating at or past this share of the goal deficit already counts as on target.
NATURAL_DEFICIT_RATIO = 0.8

MAX_SURPLUS_OVER_TDEE = 1000
FEMALE_MIN_CALORIES = 1200
DEFAULT_MIN_CALORIES = 1500


def minimum_daily_calories(gender: Gender | str | None) -> int:
    """Lowest daily target the baseline will ever produce."""
    gender_value = gender.value if isinstance(gender, Gender) else (gender or "")
    if gender_value.lower() == Gender.FEMALE.value:
        return FEMALE_MIN_CALORIES
    return DEFAULT_MIN_CALORIES


def clamp_daily_target(target: int, final_tdee: int, gender: Gender | str | None) -> int:
    """Clamp a target into [minimum calories, final TDEE + 1000]."""
    low = minimum_daily_calories(gender)
    high = final_tdee + MAX_SURPLUS_OVER_TDEE
    return max(low, min(high, target))


def blend_tdee(formula_tdee: int, avg_daily_intake: int) -> int:
    """Blend formula and observed maintenance estimates."""
    return round_half_up(
        formula_tdee * FORMULA_BLEND_WEIGHT + avg_daily_intake * (1 - FORMULA_BLEND_WEIGHT)
    )


def measured_daily_target(
    formula_tdee: int,
    final_tdee: int,
    avg_daily_intake: int,
    daily_deficit: int,
) -> int:
    """Pick the unclamped daily target for a measured baseline.

    If the user's natural eating already delivers most of the goal deficit,
    their average intake becomes the target. Otherwise the deficit is taken
    from the blended TDEE, but never below what they already eat.
    """
    implied_deficit = formula_tdee - avg_daily_intake
    if implied_deficit >= NATURAL_DEFICIT_RATIO * daily_deficit:
        return avg_daily_intake
    return max(final_tdee - daily_deficit, avg_daily_intake)


def logged_days(
    summaries: list[DailySummary],
    start: date | None = None,
    end: date | None = None,
) -> list[DailySummary]:
    """Days with food logged, optionally restricted to [start, end]."""
    return [
        s for s in summaries
        if s.calories_consumed > 0
        and (start is None or s.summary_date >= start)
        and (end is None or s.summary_date <= end)
    ]


def estimate_from_logs(
    bmr: int,
    daily_deficit: int,
    gender: Gender | str | None,
    summaries: list[DailySummary],
    check_ins: list[CheckIn],
    start: date | None = None,
    end: date | None = None,
) -> BaselineOutcome:
    """Derive targets from a logged baseline week.

    Args:
        bmr: Basal metabolic rate
        daily_deficit: Goal deficit in kcal/day (negative for a surplus)
        gender: Used for the minimum-calorie clamp
        summaries: Daily summaries for the baseline window
        check_ins: Check-ins carrying workout calories for the same window
        start: Optional first day of the window (inclusive)
        end: Optional last day of the window (inclusive)

    Returns:
        BaselineOutcome with a result, or INSUFFICIENT_DATA
    """
    days = logged_days(summaries, start, end)
    days_used = len(days)
    if days_used < MIN_BASELINE_DAYS:
        return BaselineOutcome(
            error=ErrorKind.INSUFFICIENT_DATA,
            message=(
                f"Need at least {MIN_BASELINE_DAYS} days of data. Found: {days_used}. "
                "Complete the baseline with estimated data instead."
            ),
        )

    total_food = sum(s.calories_consumed for s in days)
    avg_daily_intake = round_half_up(total_food / days_used)
    total_exercise = sum(
        c.workout_calories_burned for c in check_ins
        if (start is None or c.check_in_date >= start)
        and (end is None or c.check_in_date <= end)
    )

    level, factor = classify_activity(total_exercise)
    formula_tdee = round_half_up(bmr * factor)
    final_tdee = blend_tdee(formula_tdee, avg_daily_intake)

    target = measured_daily_target(formula_tdee, final_tdee, avg_daily_intake, daily_deficit)
    daily_target = clamp_daily_target(target, final_tdee, gender)

    return BaselineOutcome(
        result=BaselineResult(
            days_used=days_used,
            avg_daily_intake=avg_daily_intake,
            total_exercise=total_exercise,
            activity_level=level.value,
            activity_factor=factor,
            formula_tdee=formula_tdee,
            final_tdee=final_tdee,
            daily_target=daily_target,
            weekly_budget=daily_target * 7,
        )
    )


def estimate_from_profile(
    bmr: int,
    daily_deficit: int,
    reported_activity_level: str,
    gender: Gender | str | None,
    days_logged: int = 0,
) -> BaselineOutcome:
    """Derive targets from onboarding data alone.

    Args:
        bmr: Basal metabolic rate
        daily_deficit: Goal deficit in kcal/day (negative for a surplus)
        reported_activity_level: Activity level chosen at onboarding
        gender: Used for the minimum-calorie clamp
        days_logged: Days logged so far, reported for display only

    Returns:
        BaselineOutcome with an estimated result
    """
    level = normalize_activity_level(reported_activity_level)
    factor = activity_factor(level.value)
    estimated_tdee = round_half_up(bmr * factor)
    daily_target = clamp_daily_target(estimated_tdee - daily_deficit, estimated_tdee, gender)

    return BaselineOutcome(
        result=BaselineResult(
            days_used=days_logged,
            avg_daily_intake=0,
            total_exercise=0,
            activity_level=level.value,
            activity_factor=factor,
            formula_tdee=estimated_tdee,
            final_tdee=estimated_tdee,
            daily_target=daily_target,
            weekly_budget=daily_target * 7,
            estimated=True,
        )
    )
