"""Activity Classification - Pure functions mapping exercise to activity tiers.

All functions are pure: same input always produces same output, no side effects.
"""

from .models import ActivityLevel


# (level, exclusive upper bound on weekly exercise kcal, TDEE multiplier)
ACTIVITY_TIERS: tuple[tuple[ActivityLevel, float, float], ...] = (
    (ActivityLevel.SEDENTARY, 500, 1.2),
    (ActivityLevel.LIGHTLY_ACTIVE, 1200, 1.375),
    (ActivityLevel.MODERATELY_ACTIVE, 2000, 1.55),
    (ActivityLevel.VERY_ACTIVE, float("inf"), 1.725),
)

ACTIVITY_FACTORS: dict[str, float] = {level.value: factor for level, _, factor in ACTIVITY_TIERS}

ACTIVITY_LABELS: dict[str, str] = {
    ActivityLevel.SEDENTARY.value: "Sedentary",
    ActivityLevel.LIGHTLY_ACTIVE.value: "Lightly Active",
    ActivityLevel.MODERATELY_ACTIVE.value: "Moderately Active",
    ActivityLevel.VERY_ACTIVE.value: "Very Active",
}


def classify_activity(total_exercise: float) -> tuple[ActivityLevel, float]:
    """Classify measured exercise over a window (normally 7 days).

    Boundaries are half-open: exactly 500 kcal is lightly active.

    Args:
        total_exercise: Total exercise calories burned in the window

    Returns:
        Tuple of (activity level, TDEE multiplier)
    """
    for level, upper_bound, factor in ACTIVITY_TIERS:
        if total_exercise < upper_bound:
            return level, factor
    # Unreachable: the last tier is unbounded
    level, _, factor = ACTIVITY_TIERS[-1]
    return level, factor


def normalize_activity_level(level: str | None) -> ActivityLevel:
    """Map a self-reported level onto ActivityLevel; unknown levels are sedentary."""
    if not level:
        return ActivityLevel.SEDENTARY
    try:
        return ActivityLevel(level.lower())
    except ValueError:
        return ActivityLevel.SEDENTARY


def activity_factor(level: str | None) -> float:
    """Multiplier for a self-reported activity level; unknown levels are sedentary."""
    return ACTIVITY_FACTORS[normalize_activity_level(level).value]


def activity_label(level: str) -> str:
    """Human-readable label, falling back to the raw level."""
    return ACTIVITY_LABELS.get(level, level)
