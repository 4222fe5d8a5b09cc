"""MCP Server - Tool definitions for the weekly budget engine.

Defines the MCP tools a client or assistant invokes to calibrate a user's
budget, plan treat days and fetch today's live goal. Identity is resolved
upstream; every tool takes the user_id explicitly.
"""

import logging
from datetime import date

from mcp.server.fastmcp import FastMCP
from mcp.server.transport_security import TransportSecuritySettings

from ..core.activity import activity_label
from ..core.floors import normalize_goal
from ..core.models import Gender
from ..core.treat_days import total_reserved_calories, treat_days_remaining
from .baseline_service import BaselineService
from .config import ServiceConfig
from .firestore_client import BudgetFirestoreClient
from .overage_service import OverageService
from .period_manager import PeriodManager
from .treat_day_service import TreatDayService


logger = logging.getLogger(__name__)

transport_security = TransportSecuritySettings(
    enable_dns_rebinding_protection=True,
    allowed_hosts=[
        "localhost:*",
        "127.0.0.1:*",
        "*.run.app:*",
        "*.run.app",
    ],
)

mcp = FastMCP(
    "budget-engine",
    instructions="""Weekly calorie budget engine.

Use these tools to calibrate a user's daily target from their baseline week,
show today's adjusted budget, and plan treat days.

Call get_today_budget whenever the app opens or food is logged.
Before planning a treat day, call recommend_treat_day and show the three tiers.""",
    stateless_http=True,
    transport_security=transport_security,
)

# Lazy-initialized clients
_config: ServiceConfig | None = None
_store: BudgetFirestoreClient | None = None


def get_config() -> ServiceConfig:
    """Get or load service configuration."""
    global _config
    if _config is None:
        _config = ServiceConfig.from_env()
    return _config


def get_store() -> BudgetFirestoreClient:
    """Get or create Firestore client."""
    global _store
    if _store is None:
        firestore_config = get_config().firestore
        logger.info("Initializing Firestore client (database=%s)", firestore_config.database)
        _store = BudgetFirestoreClient(firestore_config)
    return _store


def get_period_manager() -> PeriodManager:
    return PeriodManager(get_store())


def get_baseline_service() -> BaselineService:
    return BaselineService(get_store(), get_period_manager())


def get_treat_day_service() -> TreatDayService:
    return TreatDayService(get_store(), get_period_manager())


def get_overage_service() -> OverageService:
    return OverageService(get_store(), get_period_manager(), get_config().fallback_daily_budget)


def parse_day(date_str: str | None) -> date:
    """Parse YYYY-MM-DD, defaulting to today.

    Raises:
        ValueError: If the string is not an ISO date
    """
    if not date_str:
        return date.today()
    return date.fromisoformat(date_str)


# ==================== Profile Tools ====================


@mcp.tool()
def setup_profile(
    user_id: str,
    gender: str,
    goal: str,
    weight_kg: float,
    height_cm: float,
    birth_date: str,
    activity_level: str,
    target_weight_kg: float | None = None,
    today: str | None = None,
) -> dict:
    """Seed the user's profile from onboarding answers.

    Call this once before the baseline week starts.

    Args:
        user_id: The user's ID
        gender: male, female or other
        goal: lose, maintain or gain
        weight_kg: Current weight in kilograms
        height_cm: Height in centimeters
        birth_date: Date of birth, YYYY-MM-DD
        activity_level: sedentary, lightly_active, moderately_active or very_active
        target_weight_kg: Optional goal weight in kilograms
        today: Current date, YYYY-MM-DD (defaults to server date)

    Returns:
        Dictionary with the computed BMR and daily deficit
    """
    try:
        born, current = parse_day(birth_date), parse_day(today)
        gender_value, goal_value = Gender(gender.lower()), normalize_goal(goal)
    except ValueError:
        return {"error": "Invalid input. Dates use YYYY-MM-DD; gender is male, female or other."}

    profile = get_baseline_service().seed_profile(
        user_id,
        gender_value,
        goal_value,
        weight_kg,
        height_cm,
        born,
        activity_level,
        current,
        target_weight_kg=target_weight_kg,
    )
    return {
        "bmr": profile.bmr,
        "daily_deficit": profile.daily_deficit,
        "goal": profile.goal.value,
        "activity_level": profile.activity_level,
    }


# ==================== Baseline Tools ====================


@mcp.tool()
def complete_baseline(
    user_id: str,
    baseline_start: str,
    baseline_end: str,
    today: str | None = None,
    restart: bool = False,
) -> dict:
    """Complete the baseline week from logged food and exercise.

    Args:
        user_id: The user's ID
        baseline_start: First baseline day, YYYY-MM-DD
        baseline_end: Last baseline day, YYYY-MM-DD
        today: Current date, YYYY-MM-DD (defaults to server date)
        restart: Recalibrate an already completed baseline

    Returns:
        Dictionary with the derived targets, or an error and guidance
    """
    try:
        start, end, current = parse_day(baseline_start), parse_day(baseline_end), parse_day(today)
    except ValueError:
        return {"error": "Invalid date format. Use YYYY-MM-DD."}

    outcome = get_baseline_service().complete(user_id, start, end, current, restart=restart)
    response = outcome.model_dump(mode="json")
    if outcome.result is not None:
        response["activity_label"] = activity_label(outcome.result.activity_level)
    return response


@mcp.tool()
def complete_baseline_estimated(
    user_id: str,
    baseline_start: str | None = None,
    today: str | None = None,
    restart: bool = False,
) -> dict:
    """Complete the baseline from onboarding data when too few days were logged.

    Args:
        user_id: The user's ID
        baseline_start: When the baseline began, YYYY-MM-DD (optional)
        today: Current date, YYYY-MM-DD (defaults to server date)
        restart: Recalibrate an already completed baseline

    Returns:
        Dictionary with the estimated targets, or an error
    """
    try:
        start = parse_day(baseline_start) if baseline_start else None
        current = parse_day(today)
    except ValueError:
        return {"error": "Invalid date format. Use YYYY-MM-DD."}

    outcome = get_baseline_service().complete_estimated(user_id, current, start, restart=restart)
    return outcome.model_dump(mode="json")


# ==================== Period Tools ====================


@mcp.tool()
def create_weekly_period(user_id: str, today: str | None = None) -> dict:
    """Create this week's budget period if it does not exist yet.

    Returns:
        Dictionary with reason (created | already_exists | no_baseline_data) and period_id
    """
    try:
        current = parse_day(today)
    except ValueError:
        return {"error": "Invalid date format. Use YYYY-MM-DD."}
    return get_period_manager().create(user_id, current).model_dump(mode="json")


@mcp.tool()
def get_week_progress(user_id: str, today: str | None = None) -> dict:
    """Show the current period, its treat days and how much of the week remains."""
    try:
        current = parse_day(today)
    except ValueError:
        return {"error": "Invalid date format. Use YYYY-MM-DD."}

    manager = get_period_manager()
    period = manager.find_for_date(user_id, current)
    if period is None:
        return {"error": "No weekly period for this date."}

    progress = manager.week_progress(user_id, current)
    treat_days = get_treat_day_service().list_for_week(user_id, current)
    return {
        "period": period.model_dump(mode="json"),
        "progress": progress.model_dump(mode="json") if progress else None,
        "treat_days": [d.model_dump(mode="json") for d in treat_days],
        "treat_days_remaining": treat_days_remaining(treat_days, current),
        "calories_reserved": total_reserved_calories(treat_days),
    }


# ==================== Budget Tools ====================


@mcp.tool()
def get_today_budget(user_id: str, today: str | None = None) -> dict:
    """Reconcile overage and return today's adjusted daily budget.

    Returns:
        Dictionary with base budget, adjustment, adjusted budget and treat-day info
    """
    try:
        current = parse_day(today)
    except ValueError:
        return {"error": "Invalid date format. Use YYYY-MM-DD."}

    budget = get_overage_service().refresh(user_id, current)
    response = budget.model_dump(mode="json")
    response["date"] = current.isoformat()
    return response


# ==================== Treat Day Tools ====================


@mcp.tool()
def recommend_treat_day(user_id: str, treat_date: str, editing_date: str | None = None) -> dict:
    """Recommend light, moderate and celebration amounts for a treat day.

    Args:
        user_id: The user's ID
        treat_date: Candidate date, YYYY-MM-DD
        editing_date: Date of the treat day being edited, if any

    Returns:
        Dictionary with the three tiers and the daily base, or an error
    """
    try:
        candidate = parse_day(treat_date)
        editing = parse_day(editing_date) if editing_date else None
    except ValueError:
        return {"error": "Invalid date format. Use YYYY-MM-DD."}
    return get_treat_day_service().recommend(user_id, candidate, editing).model_dump(mode="json")


@mcp.tool()
def plan_treat_day(
    user_id: str,
    treat_date: str,
    planned_calories: int,
    note: str | None = None,
    original_date: str | None = None,
    today: str | None = None,
) -> dict:
    """Save a treat day, or move/edit an existing one.

    Args:
        user_id: The user's ID
        treat_date: Date of the treat day, YYYY-MM-DD
        planned_calories: Calories to reserve
        note: Optional note
        original_date: Existing treat day being edited, YYYY-MM-DD
        today: Current date, YYYY-MM-DD (defaults to server date)

    Returns:
        Dictionary with the saved treat day and its safety validation, or an error
    """
    try:
        target = parse_day(treat_date)
        original = parse_day(original_date) if original_date else None
        current = parse_day(today)
    except ValueError:
        return {"error": "Invalid date format. Use YYYY-MM-DD."}

    outcome = get_treat_day_service().save(
        user_id, target, planned_calories, current, note=note, original_date=original
    )
    return outcome.model_dump(mode="json")


@mcp.tool()
def delete_treat_day(user_id: str, treat_date: str) -> dict:
    """Delete a planned treat day."""
    try:
        target = parse_day(treat_date)
    except ValueError:
        return {"error": "Invalid date format. Use YYYY-MM-DD."}
    outcome = get_treat_day_service().delete(user_id, target)
    return {"success": outcome.ok, **outcome.model_dump(mode="json")}


@mcp.tool()
def complete_treat_day(user_id: str, treat_date: str) -> dict:
    """Mark a treat day as enjoyed."""
    try:
        target = parse_day(treat_date)
    except ValueError:
        return {"error": "Invalid date format. Use YYYY-MM-DD."}
    outcome = get_treat_day_service().mark_completed(user_id, target)
    return {"success": outcome.ok, **outcome.model_dump(mode="json")}
