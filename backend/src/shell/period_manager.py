"""Period Manager - Lifecycle of weekly budget periods.

create() is the idempotent createPeriod trigger: it is called right after
baseline completion and by the scheduled weekly job, possibly at the same
time, and both callers converge on the same stored period.
"""

import logging
from datetime import date

from ..core.models import (
    ErrorKind,
    PeriodCreation,
    PeriodJobSummary,
    PeriodStatus,
    WeeklyPeriod,
    WeekProgress,
)
from ..core.periods import analyze_week, draft_period, week_bounds
from .store import BudgetStore


logger = logging.getLogger(__name__)

CREATED = "created"
ALREADY_EXISTS = "already_exists"
NO_BASELINE_DATA = "no_baseline_data"


class PeriodManager:
    """Creates and looks up weekly periods for users."""

    def __init__(self, store: BudgetStore) -> None:
        self._store = store

    def create(self, user_id: str, today: date) -> PeriodCreation:
        """Create the period for the week containing today, if missing.

        Args:
            user_id: The user's ID
            today: The user's current calendar date

        Returns:
            PeriodCreation with reason created, already_exists or no_baseline_data
        """
        week_start, week_end = week_bounds(today)

        existing = self._store.find_period_overlapping(user_id, week_start, week_end)
        if existing is not None:
            logger.info("Period already exists for %s: %s", user_id[:8], existing.id)
            return PeriodCreation(reason=ALREADY_EXISTS, period_id=existing.id)

        profile = self._store.get_profile(user_id)
        if profile is None or not profile.weekly_budget:
            logger.warning("No weekly budget for %s, cannot create period", user_id[:8])
            return PeriodCreation(
                reason=NO_BASELINE_DATA,
                error=ErrorKind.NO_BASELINE_DATA,
                message="Complete onboarding or the baseline week first.",
            )

        self._complete_previous(user_id, week_start)

        draft = draft_period(today, profile.weekly_budget, profile.baseline_avg_daily_calories)
        period, created = self._store.create_period(user_id, draft)
        if not created:
            return PeriodCreation(reason=ALREADY_EXISTS, period_id=period.id)

        logger.info(
            "Created period for %s: %s to %s (%d cal)",
            user_id[:8], period.week_start, period.week_end, period.weekly_budget,
        )
        return PeriodCreation(reason=CREATED, period_id=period.id)

    def _complete_previous(self, user_id: str, week_start: date) -> None:
        """Mark the last active period completed once its week is over."""
        previous = self._store.get_latest_period(user_id)
        if previous is None or previous.id is None:
            return
        if previous.status == PeriodStatus.ACTIVE and previous.week_end < week_start:
            self._store.set_period_status(user_id, previous.id, PeriodStatus.COMPLETED)
            logger.info("Marked previous period as completed: %s", previous.id)

    def find_for_date(self, user_id: str, day: date) -> WeeklyPeriod | None:
        """Return the period containing day, or None."""
        return self._store.find_period_overlapping(user_id, day, day)

    def week_progress(self, user_id: str, today: date) -> WeekProgress | None:
        """Partial-week analysis of the current period, if one exists."""
        period = self.find_for_date(user_id, today)
        if period is None:
            return None
        return analyze_week(period, today)

    def run_weekly_job(self, today: date) -> PeriodJobSummary:
        """Create this week's period for every user with a completed baseline.

        Per-user failures are logged and counted; they never stop the job.
        """
        summary = PeriodJobSummary()
        user_ids = self._store.list_baseline_complete_users()
        logger.info("Weekly period job: %d users with completed baseline", len(user_ids))

        for user_id in user_ids:
            summary.processed += 1
            try:
                result = self.create(user_id, today)
            except Exception:
                logger.exception("Error creating period for user: %s", user_id[:8])
                summary.failed += 1
                continue

            if result.reason == CREATED:
                summary.created += 1
            elif result.reason == ALREADY_EXISTS:
                summary.already_existed += 1
            else:
                summary.failed += 1

        logger.info(
            "Weekly period job completed: %d created, %d already existed, %d failed",
            summary.created, summary.already_existed, summary.failed,
        )
        return summary
