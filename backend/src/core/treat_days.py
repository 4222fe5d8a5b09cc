"""Treat Day Planning - Pure functions for reserving extra calories on one day.

A treat day takes calories from the rest of the week, so every
recommendation and validation is bounded by the comfort floor of the
remaining regular days.

All functions are pure: same input always produces same output, no side effects.
"""

from datetime import date

from .models import ErrorKind, PlannedTreatDay, TreatDayRecommendation, TreatDayValidation
from .periods import DAYS_IN_PERIOD
from .rounding import round_half_up


LIGHT_MULTIPLIER = 1.3
MODERATE_MULTIPLIER = 1.5
CELEBRATION_MULTIPLIER = 1.75

# Tier ratios used when the celebration tier hits the safe maximum
CAPPED_MODERATE_RATIO = 0.85
CAPPED_LIGHT_RATIO = 0.70

MIN_TIER_GAP = 200
CHALLENGING_MARGIN = 200

MAX_TREAT_DAYS_PER_WEEK = 3
RECOMMENDED_TREAT_DAYS_PER_WEEK = 2


def other_treat_days(
    treat_days: list[PlannedTreatDay],
    exclude: date | None = None,
) -> list[PlannedTreatDay]:
    """Treat days other than the one being planned or edited."""
    if exclude is None:
        return list(treat_days)
    return [d for d in treat_days if d.treat_date != exclude]


def total_reserved_calories(treat_days: list[PlannedTreatDay]) -> int:
    """Sum of calories reserved across treat days."""
    return sum(d.planned_calories for d in treat_days)


def treat_days_remaining(treat_days: list[PlannedTreatDay], today: date) -> int:
    """Treat days from today onward that have not been completed."""
    return sum(1 for d in treat_days if d.treat_date >= today and not d.is_completed)


def regular_days_after(others: list[PlannedTreatDay]) -> int:
    """Regular days left in the week once the new treat day is added."""
    return DAYS_IN_PERIOD - len(others) - 1


def max_safe_treat(weekly_budget: int, others: list[PlannedTreatDay], floor: int) -> int:
    """Largest treat that still leaves every regular day at the floor."""
    remaining_budget = weekly_budget - total_reserved_calories(others)
    return remaining_budget - regular_days_after(others) * floor


def spread_tiers(daily_base: float, max_safe: int) -> tuple[int, int, int]:
    """Compute (light, moderate, celebration) for a safe maximum.

    Tiers scale off the daily base and are capped at max_safe. If the top
    tier is capped, all three are rescaled off max_safe. Adjacent tiers are
    then kept at least MIN_TIER_GAP apart by lowering the lower tier.
    """
    light = min(round_half_up(daily_base * LIGHT_MULTIPLIER), max_safe)
    moderate = min(round_half_up(daily_base * MODERATE_MULTIPLIER), max_safe)
    celebration = min(round_half_up(daily_base * CELEBRATION_MULTIPLIER), max_safe)

    if celebration >= max_safe:
        celebration = max_safe
        moderate = round_half_up(max_safe * CAPPED_MODERATE_RATIO)
        light = round_half_up(max_safe * CAPPED_LIGHT_RATIO)

    if celebration - moderate < MIN_TIER_GAP:
        moderate = celebration - MIN_TIER_GAP
    if moderate - light < MIN_TIER_GAP:
        light = moderate - MIN_TIER_GAP

    return max(light, 0), max(moderate, 0), celebration


def recommend_treat_day(
    weekly_budget: int,
    others: list[PlannedTreatDay],
    floor: int,
) -> TreatDayRecommendation:
    """Recommend three treat-day sizes for a date.

    A max_safe equal to the daily base is rejected too, since a treat day
    that can be no larger than a regular day has nothing to plan.

    Args:
        weekly_budget: Budget of the period containing the date
        others: Other treat days in that period (excluding the one being edited)
        floor: Comfort floor for the user's goal and gender

    Returns:
        TreatDayRecommendation, or MAX_TREAT_DAYS_REACHED / TOO_MANY_TREAT_DAYS
    """
    daily_base = weekly_budget / DAYS_IN_PERIOD
    max_safe = max_safe_treat(weekly_budget, others, floor)
    shown_base = round_half_up(daily_base)

    if len(others) >= MAX_TREAT_DAYS_PER_WEEK:
        return TreatDayRecommendation(
            error=ErrorKind.MAX_TREAT_DAYS_REACHED,
            message=(
                f"You already have {len(others)} treat days planned this week. "
                f"That's the maximum allowed to keep your weekly budget on track."
            ),
            daily_base=shown_base,
            max_safe=max_safe,
            comfort_floor=floor,
        )

    # A treat no bigger than a regular day leaves nothing to reserve
    if max_safe <= daily_base:
        return TreatDayRecommendation(
            error=ErrorKind.TOO_MANY_TREAT_DAYS,
            message=(
                f"Adding another treat day would make your regular days drop below "
                f"{floor} cal. Consider adjusting existing treat days first."
            ),
            daily_base=shown_base,
            max_safe=max_safe,
            comfort_floor=floor,
        )

    light, moderate, celebration = spread_tiers(daily_base, max_safe)

    warning = None
    if len(others) == RECOMMENDED_TREAT_DAYS_PER_WEEK:
        warning = (
            f"You already have {len(others)} treat days this week. "
            f"We recommend a maximum of {RECOMMENDED_TREAT_DAYS_PER_WEEK} for best results."
        )

    return TreatDayRecommendation(
        daily_base=shown_base,
        max_safe=max_safe,
        light=light,
        moderate=moderate,
        celebration=celebration,
        comfort_floor=floor,
        warning=warning,
    )


def validate_treat_day(
    planned_calories: int,
    weekly_budget: int,
    others: list[PlannedTreatDay],
    floor: int,
) -> TreatDayValidation:
    """Check what a planned amount leaves for the rest of the week.

    Args:
        planned_calories: Calories the user wants to reserve
        weekly_budget: Budget of the period containing the date
        others: Other treat days in that period
        floor: Comfort floor for the user's goal and gender

    Returns:
        TreatDayValidation with status safe, challenging or unsafe
    """
    total_reserved = total_reserved_calories(others) + planned_calories
    regular_days = regular_days_after(others)
    other_days_average = (weekly_budget - total_reserved) / regular_days if regular_days > 0 else 0
    shown_average = round_half_up(other_days_average)

    if other_days_average < floor:
        suggested_max = weekly_budget - regular_days * floor
        return TreatDayValidation(
            status="unsafe",
            is_valid=False,
            regular_days_count=regular_days,
            other_days_average=shown_average,
            message=(
                f"This would leave your other {regular_days} days at only {shown_average} cal each, "
                f"below your safe minimum of {floor}."
            ),
            suggested_max=suggested_max,
        )

    if other_days_average < floor + CHALLENGING_MARGIN:
        return TreatDayValidation(
            status="challenging",
            is_valid=True,
            regular_days_count=regular_days,
            other_days_average=shown_average,
            message=(
                f"This leaves your other {regular_days} days at {shown_average} cal each. "
                "Challenging but doable!"
            ),
        )

    return TreatDayValidation(
        status="safe",
        is_valid=True,
        regular_days_count=regular_days,
        other_days_average=shown_average,
        message=(
            f"Your other {regular_days} days will have {shown_average} cal each - "
            "comfortable and sustainable."
        ),
    )
