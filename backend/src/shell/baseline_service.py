"""Baseline Service - Seeds profiles and completes the baseline week.

Completion saves the derived targets on the profile first and only then
asks the PeriodManager for the first weekly period. A failed period
creation is logged and left for the scheduled job; it never undoes the
saved baseline.
"""

import logging
from datetime import date, datetime

from ..core.baseline import estimate_from_logs, estimate_from_profile, logged_days
from ..core.floors import normalize_goal
from ..core.models import (
    BaselineOutcome,
    BaselineResult,
    ErrorKind,
    Gender,
    Goal,
    Profile,
)
from ..core.onboarding import LBS_TO_KG, age_on, calculate_bmr, daily_deficit_for_goal
from .period_manager import PeriodManager
from .store import BudgetStore


logger = logging.getLogger(__name__)


class BaselineService:
    """Runs onboarding seeding and baseline completion for a user."""

    def __init__(self, store: BudgetStore, periods: PeriodManager) -> None:
        self._store = store
        self._periods = periods

    def seed_profile(
        self,
        user_id: str,
        gender: Gender | str,
        goal: Goal | str,
        weight_kg: float,
        height_cm: float,
        birth_date: date,
        activity_level: str,
        today: date,
        target_weight_kg: float | None = None,
    ) -> Profile:
        """Write onboarding-derived BMR and deficit onto the profile.

        Args:
            user_id: The user's ID
            gender: User's gender
            goal: lose, maintain or gain
            weight_kg: Current weight
            height_cm: Height
            birth_date: Date of birth
            activity_level: Self-reported activity level
            today: Current calendar date (for age)
            target_weight_kg: Goal weight, scales the loss deficit

        Returns:
            The saved Profile
        """
        gender, goal = Gender(gender), normalize_goal(goal)
        bmr = calculate_bmr(gender, weight_kg, height_cm, age_on(birth_date, today))
        current_lbs = weight_kg / LBS_TO_KG
        target_lbs = target_weight_kg / LBS_TO_KG if target_weight_kg else None
        deficit = daily_deficit_for_goal(goal, current_lbs, target_lbs)

        profile = self._store.get_profile(user_id) or Profile()
        profile = profile.model_copy(update={
            "bmr": bmr,
            "daily_deficit": deficit,
            "goal": goal,
            "gender": gender,
            "activity_level": activity_level,
        })
        self._store.save_profile(user_id, profile)
        logger.info("Seeded profile for %s: BMR %d, deficit %d", user_id[:8], bmr, deficit)
        return profile

    def _load_profile(self, user_id: str, restart: bool) -> tuple[Profile | None, BaselineOutcome | None]:
        profile = self._store.get_profile(user_id)
        if profile is None:
            return None, BaselineOutcome(error=ErrorKind.NOT_FOUND, message="Profile not found.")
        if profile.baseline_complete and not restart:
            return None, BaselineOutcome(
                error=ErrorKind.BASELINE_ALREADY_COMPLETE,
                message="Baseline is already complete. Restart it explicitly to recalibrate.",
            )
        return profile, None

    def complete(
        self,
        user_id: str,
        baseline_start: date,
        baseline_end: date,
        today: date,
        restart: bool = False,
    ) -> BaselineOutcome:
        """Complete the baseline from logged data.

        Args:
            user_id: The user's ID
            baseline_start: First day of the baseline week
            baseline_end: Last day of the baseline week
            today: Current calendar date (for the first period)
            restart: Allow recalibrating an already completed baseline

        Returns:
            BaselineOutcome; INSUFFICIENT_DATA means offer complete_estimated()
        """
        profile, refusal = self._load_profile(user_id, restart)
        if refusal is not None:
            return refusal

        if profile.bmr is None or profile.daily_deficit is None:
            return BaselineOutcome(
                error=ErrorKind.MISSING_ONBOARDING_DATA,
                message="Missing BMR or deficit in profile. Complete onboarding first.",
            )

        summaries = self._store.get_daily_summaries(user_id, baseline_start, baseline_end)
        check_ins = self._store.get_check_ins(user_id, baseline_start, baseline_end)

        outcome = estimate_from_logs(
            profile.bmr,
            profile.daily_deficit,
            profile.gender,
            summaries,
            check_ins,
            baseline_start,
            baseline_end,
        )
        if not outcome.ok:
            logger.info("Baseline incomplete for %s: %s", user_id[:8], outcome.message)
            return outcome

        return self._finalize(user_id, profile, outcome.result, today)

    def complete_estimated(
        self,
        user_id: str,
        today: date,
        baseline_start: date | None = None,
        restart: bool = False,
    ) -> BaselineOutcome:
        """Complete the baseline from onboarding data only.

        Args:
            user_id: The user's ID
            today: Current calendar date
            baseline_start: When the baseline began; used to count logged days
            restart: Allow recalibrating an already completed baseline

        Returns:
            BaselineOutcome with an estimated result
        """
        profile, refusal = self._load_profile(user_id, restart)
        if refusal is not None:
            return refusal

        if profile.bmr is None or profile.daily_deficit is None or not profile.activity_level:
            return BaselineOutcome(
                error=ErrorKind.MISSING_ONBOARDING_DATA,
                message="Missing BMR, deficit, or activity level. Complete onboarding first.",
            )

        days_logged = 0
        if baseline_start is not None:
            summaries = self._store.get_daily_summaries(user_id, baseline_start, today)
            days_logged = len(logged_days(summaries))

        outcome = estimate_from_profile(
            profile.bmr,
            profile.daily_deficit,
            profile.activity_level,
            profile.gender,
            days_logged,
        )
        return self._finalize(user_id, profile, outcome.result, today)

    def _finalize(
        self,
        user_id: str,
        profile: Profile,
        result: BaselineResult,
        today: date,
    ) -> BaselineOutcome:
        """Persist the result, then try to create the first period."""
        now = datetime.utcnow()
        profile = profile.model_copy(update={
            "baseline_complete": True,
            "baseline_avg_daily_calories": None if result.estimated else result.avg_daily_intake,
            "baseline_total_exercise": result.total_exercise,
            "actual_activity_level": result.activity_level,
            "tdee": result.final_tdee,
            "daily_target": result.daily_target,
            "weekly_budget": result.weekly_budget,
            "baseline_completed_at": now,
            "updated_at": now,
        })
        self._store.save_profile(user_id, profile)
        logger.info(
            "Baseline complete for %s: target %d cal/day, %d cal/week%s",
            user_id[:8], result.daily_target, result.weekly_budget,
            " (estimated)" if result.estimated else "",
        )

        outcome = BaselineOutcome(result=result)
        try:
            creation = self._periods.create(user_id, today)
        except Exception:
            logger.exception("Failed to create weekly period for %s; left for retry", user_id[:8])
            return outcome

        if not creation.ok:
            logger.warning("Weekly period not created for %s: %s", user_id[:8], creation.reason)
        outcome.period_reason = creation.reason
        outcome.period_id = creation.period_id
        return outcome
