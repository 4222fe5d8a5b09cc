"""Overage Service - Recompute overage and serve today's adjusted budget.

The client calls refresh() on every app foreground and after every food
log write. Both steps degrade to safe values instead of raising, so the
logging screens always have a daily goal to show.
"""

import logging
from datetime import date

from ..core.floors import comfort_floor
from ..core.models import AdjustedBudget, ErrorKind, Gender, Goal, ReconcileOutcome
from ..core.overage import (
    DEFAULT_FALLBACK_DAILY_BUDGET,
    calculate_adjusted_budget,
    compute_cumulative_overage,
    fallback_budget,
)
from .period_manager import PeriodManager
from .store import BudgetStore


logger = logging.getLogger(__name__)


class OverageService:
    """Keeps a period's cumulative overage current and budgets each day."""

    def __init__(
        self,
        store: BudgetStore,
        periods: PeriodManager,
        fallback_daily_budget: int = DEFAULT_FALLBACK_DAILY_BUDGET,
    ) -> None:
        self._store = store
        self._periods = periods
        self._fallback_daily_budget = fallback_daily_budget

    def reconcile(self, user_id: str, period_id: str, through_date: date) -> ReconcileOutcome:
        """Recompute and persist the period's cumulative overage.

        Safe to call repeatedly or concurrently: the value is rebuilt from
        the summaries every time.

        Args:
            user_id: The user's ID
            period_id: Weekly period to reconcile
            through_date: Last day to include (normally today)

        Returns:
            ReconcileOutcome; degraded=True with zero overage if the store failed
        """
        try:
            period = self._store.get_period(user_id, period_id)
            if period is None:
                return ReconcileOutcome(
                    error=ErrorKind.NOT_FOUND,
                    message="Weekly period not found.",
                    period_id=period_id,
                )

            treat_days = self._store.get_treat_days(user_id, period.week_start, period.week_end)
            summaries = self._store.get_daily_summaries(
                user_id, period.week_start, min(through_date, period.week_end)
            )
            breakdown = compute_cumulative_overage(period, treat_days, summaries, through_date)
            self._store.update_period_overage(user_id, period_id, breakdown.cumulative_overage)
        except Exception:
            logger.exception("Failed to reconcile overage for %s", user_id[:8])
            return ReconcileOutcome(period_id=period_id, degraded=True)

        logger.info(
            "Reconciled %s through %s: cumulative overage %d cal",
            period_id, through_date, breakdown.cumulative_overage,
        )
        return ReconcileOutcome(
            period_id=period_id,
            cumulative_overage=breakdown.cumulative_overage,
            days=breakdown.days,
        )

    def todays_adjusted_budget(
        self,
        user_id: str,
        day: date,
        goal: Goal | str | None,
        gender: Gender | str | None,
    ) -> AdjustedBudget:
        """Budget for day after spreading the stored overage.

        Args:
            user_id: The user's ID
            day: The day to budget
            goal: User's goal (for the comfort floor)
            gender: User's gender (for the comfort floor)

        Returns:
            AdjustedBudget, or the static fallback when no period is available
        """
        try:
            period = self._periods.find_for_date(user_id, day)
            if period is None:
                logger.warning("No active period for %s on %s, serving fallback budget", user_id[:8], day)
                return fallback_budget(self._fallback_daily_budget)
            treat_days = self._store.get_treat_days(user_id, period.week_start, period.week_end)
        except Exception:
            logger.exception("Failed to load budget for %s, serving fallback budget", user_id[:8])
            return fallback_budget(self._fallback_daily_budget)

        return calculate_adjusted_budget(period, treat_days, day, comfort_floor(goal, gender))

    def refresh(self, user_id: str, day: date) -> AdjustedBudget:
        """Reconcile the current period through day, then budget day."""
        try:
            profile = self._store.get_profile(user_id)
            period = self._periods.find_for_date(user_id, day)
        except Exception:
            logger.exception("Failed to load profile or period for %s", user_id[:8])
            return fallback_budget(self._fallback_daily_budget)

        if period is not None and period.id is not None:
            self.reconcile(user_id, period.id, day)

        goal = profile.goal if profile else None
        gender = profile.gender if profile else None
        return self.todays_adjusted_budget(user_id, day, goal, gender)
