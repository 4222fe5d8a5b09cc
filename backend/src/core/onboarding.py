"""Onboarding Calculations - BMR and goal deficit used to seed a profile.

All functions are pure: same input always produces same output, no side effects.
"""

from datetime import date

from .floors import normalize_goal
from .models import Gender, Goal
from .rounding import round_half_up


LBS_TO_KG = 0.453592
INCH_TO_CM = 2.54

GAIN_SURPLUS = 500

# (minimum lbs left to lose, deficit); first match wins
LOSS_DEFICIT_STEPS: tuple[tuple[float, int], ...] = (
    (50, 750),
    (25, 625),
    (15, 500),
)
FINAL_STRETCH_DEFICIT = 375


def pounds_to_kg(weight_lbs: float) -> float:
    return weight_lbs * LBS_TO_KG


def feet_inches_to_cm(feet: int, inches: float) -> float:
    return (feet * 12 + inches) * INCH_TO_CM


def age_on(birth_date: date, on_date: date) -> int:
    """Whole years between birth_date and on_date."""
    age = on_date.year - birth_date.year
    if (on_date.month, on_date.day) < (birth_date.month, birth_date.day):
        age -= 1
    return age


def calculate_bmr(gender: Gender | str, weight_kg: float, height_cm: float, age: int) -> int:
    """Mifflin-St Jeor basal metabolic rate.

    Men: 10w + 6.25h - 5a + 5. Everyone else uses the female constant
    (-161), the more conservative estimate.

    Args:
        gender: User's gender
        weight_kg: Body weight in kilograms
        height_cm: Height in centimeters
        age: Age in whole years

    Returns:
        BMR in kcal/day
    """
    gender_value = gender.value if isinstance(gender, Gender) else gender
    base = 10 * weight_kg + 6.25 * height_cm - 5 * age
    if gender_value.lower() == Gender.MALE.value:
        return round_half_up(base + 5)
    return round_half_up(base - 161)


def daily_deficit_for_goal(
    goal: Goal | str,
    current_weight_lbs: float | None = None,
    target_weight_lbs: float | None = None,
) -> int:
    """Signed daily deficit for a goal.

    Weight loss scales the deficit with how much is left to lose; weight
    gain returns a negative deficit (a surplus); maintenance is zero.
    """
    normalized = normalize_goal(goal)
    if normalized == Goal.GAIN:
        return -GAIN_SURPLUS
    if normalized == Goal.MAINTAIN:
        return 0

    to_lose = 0.0
    if current_weight_lbs and target_weight_lbs:
        to_lose = current_weight_lbs - target_weight_lbs
    for threshold, deficit in LOSS_DEFICIT_STEPS:
        if to_lose >= threshold:
            return deficit
    return FINAL_STRETCH_DEFICIT
