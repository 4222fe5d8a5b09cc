"""Treat Day Service - Recommend, validate and store planned treat days.

Treat days are fully user-managed but only for today and future dates.
(user, date) is unique: the store refuses a second treat day on a date,
which is what keeps a racing create and edit from producing duplicates.
"""

import logging
from datetime import date

from ..core.floors import comfort_floor
from ..core.models import (
    ErrorKind,
    Outcome,
    PlannedTreatDay,
    TreatDayRecommendation,
    TreatDaySave,
    TreatDayValidation,
)
from ..core.treat_days import (
    MAX_TREAT_DAYS_PER_WEEK,
    other_treat_days,
    recommend_treat_day,
    validate_treat_day,
)
from .period_manager import PeriodManager
from .store import BudgetStore


logger = logging.getLogger(__name__)


class TreatDayService:
    """Plans treat days inside a user's weekly periods."""

    def __init__(self, store: BudgetStore, periods: PeriodManager) -> None:
        self._store = store
        self._periods = periods

    def recommend(
        self,
        user_id: str,
        candidate_date: date,
        editing_date: date | None = None,
    ) -> TreatDayRecommendation:
        """Recommend light/moderate/celebration amounts for a date.

        Args:
            user_id: The user's ID
            candidate_date: Date being considered
            editing_date: Date of the treat day being edited, excluded from the others

        Returns:
            TreatDayRecommendation (error set when the date cannot take a treat day)
        """
        period = self._periods.find_for_date(user_id, candidate_date)
        if period is None:
            return TreatDayRecommendation(error=ErrorKind.NOT_FOUND, message="No weekly period covers this date.")

        profile = self._store.get_profile(user_id)
        if profile is None:
            return TreatDayRecommendation(error=ErrorKind.NOT_FOUND, message="Profile not found.")

        treat_days = self._store.get_treat_days(user_id, period.week_start, period.week_end)
        others = other_treat_days(treat_days, editing_date or candidate_date)
        floor = comfort_floor(profile.goal, profile.gender)
        return recommend_treat_day(period.weekly_budget, others, floor)

    def validate(
        self,
        user_id: str,
        treat_date: date,
        planned_calories: int,
        editing_date: date | None = None,
    ) -> TreatDayValidation | None:
        """Validate an amount for a date; None if no period covers the date."""
        period = self._periods.find_for_date(user_id, treat_date)
        profile = self._store.get_profile(user_id)
        if period is None or profile is None:
            return None
        treat_days = self._store.get_treat_days(user_id, period.week_start, period.week_end)
        others = other_treat_days(treat_days, editing_date or treat_date)
        return validate_treat_day(
            planned_calories, period.weekly_budget, others, comfort_floor(profile.goal, profile.gender)
        )

    def save(
        self,
        user_id: str,
        treat_date: date,
        planned_calories: int,
        today: date,
        note: str | None = None,
        original_date: date | None = None,
    ) -> TreatDaySave:
        """Upsert the treat day on treat_date, or move the one on original_date.

        Saving onto a date that already has a treat day updates it in place.
        Edits keep the stored completion flag and creation time, and keep the
        stored note unless a new one is given.

        Args:
            user_id: The user's ID
            treat_date: Target date
            planned_calories: Calories to reserve
            today: Current calendar date
            note: Optional free-text note (None keeps the stored note)
            original_date: Date of the treat day being moved (None or treat_date to edit in place)

        Returns:
            TreatDaySave; unsafe amounts and moves onto a taken date are refused
        """
        if planned_calories <= 0:
            return TreatDaySave(error=ErrorKind.INVALID_AMOUNT, message="Please enter planned calories.")
        if treat_date < today or (original_date is not None and original_date < today):
            return TreatDaySave(error=ErrorKind.PAST_DATE, message="Treat days can only be planned for today or later.")

        period = self._periods.find_for_date(user_id, treat_date)
        if period is None:
            return TreatDaySave(error=ErrorKind.NOT_FOUND, message="No weekly period covers this date.")
        profile = self._store.get_profile(user_id)
        if profile is None:
            return TreatDaySave(error=ErrorKind.NOT_FOUND, message="Profile not found.")

        source_date = original_date or treat_date
        existing = self._store.get_treat_day(user_id, source_date)
        if original_date is not None and existing is None:
            return TreatDaySave(error=ErrorKind.NOT_FOUND, message="Treat day not found.")

        treat_days = self._store.get_treat_days(user_id, period.week_start, period.week_end)
        is_move = source_date != treat_date
        if is_move and any(d.treat_date == treat_date for d in treat_days):
            return TreatDaySave(error=ErrorKind.DATE_CONFLICT, message="A treat day is already planned for this date.")

        others = other_treat_days(treat_days, source_date)
        if len(others) >= MAX_TREAT_DAYS_PER_WEEK:
            return TreatDaySave(
                error=ErrorKind.MAX_TREAT_DAYS_REACHED,
                message=f"You already have {len(others)} treat days planned this week.",
            )

        floor = comfort_floor(profile.goal, profile.gender)
        validation = validate_treat_day(planned_calories, period.weekly_budget, others, floor)
        if not validation.is_valid:
            return TreatDaySave(error=ErrorKind.UNSAFE, message=validation.message, validation=validation)

        if existing is None:
            treat_day = PlannedTreatDay(treat_date=treat_date, planned_calories=planned_calories, note=note)
            if not self._store.create_treat_day(user_id, treat_day):
                return TreatDaySave(error=ErrorKind.DATE_CONFLICT, message="A treat day is already planned for this date.")
        else:
            changes: dict = {"treat_date": treat_date, "planned_calories": planned_calories}
            if note is not None:
                changes["note"] = note
            treat_day = existing.model_copy(update=changes)
            if not is_move:
                self._store.update_treat_day(user_id, treat_day)
            elif not self._store.move_treat_day(user_id, source_date, treat_day):
                return TreatDaySave(error=ErrorKind.DATE_CONFLICT, message="A treat day is already planned for this date.")

        logger.info(
            "Saved treat day for %s on %s: %d cal (%s)",
            user_id[:8], treat_date, planned_calories, validation.status,
        )
        return TreatDaySave(treat_day=treat_day, validation=validation)

    def delete(self, user_id: str, treat_date: date) -> Outcome:
        """Delete a treat day. Ownership is implied by the user-scoped key."""
        if not self._store.delete_treat_day(user_id, treat_date):
            return Outcome(error=ErrorKind.NOT_FOUND, message="Treat day not found.")
        logger.info("Deleted treat day for %s on %s", user_id[:8], treat_date)
        return Outcome()

    def mark_completed(self, user_id: str, treat_date: date) -> Outcome:
        """Flag a treat day as completed."""
        treat_day = self._store.get_treat_day(user_id, treat_date)
        if treat_day is None:
            return Outcome(error=ErrorKind.NOT_FOUND, message="Treat day not found.")
        self._store.update_treat_day(user_id, treat_day.model_copy(update={"is_completed": True}))
        return Outcome()

    def list_for_week(self, user_id: str, day: date) -> list[PlannedTreatDay]:
        """Treat days in the period containing day."""
        period = self._periods.find_for_date(user_id, day)
        if period is None:
            return []
        return self._store.get_treat_days(user_id, period.week_start, period.week_end)
