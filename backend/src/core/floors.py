"""Comfort Floors - Minimum daily calories the engine will ever assign.

These are comfort floors, not clinical minimums. Unrecognized goals use
the maintenance row.
"""

from .models import Gender, Goal


COMFORT_FLOORS: dict[Goal, tuple[int, int]] = {
    # goal: (male, everyone else)
    Goal.LOSE: (1500, 1300),
    Goal.MAINTAIN: (1600, 1400),
    Goal.GAIN: (1800, 1500),
}

GOAL_ALIASES: dict[str, Goal] = {
    "lose": Goal.LOSE,
    "lose_weight": Goal.LOSE,
    "weight_loss": Goal.LOSE,
    "weight_loss_aggressive": Goal.LOSE,
    "weight_loss_moderate": Goal.LOSE,
    "maintain": Goal.MAINTAIN,
    "maintenance": Goal.MAINTAIN,
    "maintain_weight": Goal.MAINTAIN,
    "gain": Goal.GAIN,
    "gain_weight": Goal.GAIN,
    "muscle_gain": Goal.GAIN,
    "bulk": Goal.GAIN,
}


def normalize_goal(goal: Goal | str | None) -> Goal:
    """Map a stored or legacy goal string onto Goal, defaulting to maintain."""
    if isinstance(goal, Goal):
        return goal
    if not goal:
        return Goal.MAINTAIN
    return GOAL_ALIASES.get(goal.lower(), Goal.MAINTAIN)


def comfort_floor(goal: Goal | str | None, gender: Gender | str | None) -> int:
    """Minimum safe daily calories for a goal and gender.

    Args:
        goal: User's goal (aliases such as "lose_weight" are accepted)
        gender: User's gender; only "male" selects the male column

    Returns:
        Daily calorie floor
    """
    male_floor, other_floor = COMFORT_FLOORS[normalize_goal(goal)]
    gender_value = gender.value if isinstance(gender, Gender) else (gender or "")
    return male_floor if gender_value.lower() == Gender.MALE.value else other_floor
