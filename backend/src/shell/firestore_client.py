"""Firestore Client - Persistence for profiles, periods and treat days.

This module handles all database I/O for the budget engine.
All I/O is contained here; business logic is in the core module.
Errors from Firestore propagate to the caller, except the AlreadyExists
conflicts that implement the store's uniqueness constraints.
"""

import logging
from datetime import date, datetime
from typing import Any

from google.api_core.exceptions import AlreadyExists
from google.cloud import firestore
from pydantic import BaseModel

from ..core.models import (
    CheckIn,
    DailySummary,
    PeriodStatus,
    PlannedTreatDay,
    Profile,
    WeeklyPeriod,
)
from .config import FirestoreConfig


logger = logging.getLogger(__name__)


def _to_doc(model: BaseModel, exclude: set[str] | None = None) -> dict[str, Any]:
    """Serialize a model for Firestore (dates and enums as strings)."""
    return model.model_dump(mode="json", exclude=exclude)


class BudgetFirestoreClient:
    """Client for persisting budget engine data to Firestore.

    Document structure per user:
        users/{user_id}/
            profile/current: { bmr, goal, weekly_budget, ... }
            summaries/{YYYY-MM-DD}: { summary_date, calories_consumed, calories_burned }
            check_ins/{YYYY-MM-DD}: { check_in_date, workout_calories_burned }
            periods/{week_start}: { week_start, week_end, weekly_budget, ... }
            treat_days/{YYYY-MM-DD}: { treat_date, planned_calories, note, ... }
    """

    def __init__(self, config: FirestoreConfig | None = None) -> None:
        """Initialize Firestore client.

        Args:
            config: Firestore configuration
        """
        self.config = config or FirestoreConfig()
        self._client: firestore.Client | None = None

    @property
    def client(self) -> firestore.Client:
        """Lazy initialization of Firestore client."""
        if self._client is None:
            kwargs: dict[str, Any] = {}
            if self.config.project_id:
                kwargs["project"] = self.config.project_id
            if self.config.database:
                kwargs["database"] = self.config.database
            self._client = firestore.Client(**kwargs)
        return self._client

    def _user_ref(self, user_id: str) -> firestore.DocumentReference:
        """Get reference to user document."""
        return self.client.collection("users").document(user_id)

    def _profile_ref(self, user_id: str) -> firestore.DocumentReference:
        return self._user_ref(user_id).collection("profile").document("current")

    def _period_ref(self, user_id: str, period_id: str) -> firestore.DocumentReference:
        return self._user_ref(user_id).collection("periods").document(period_id)

    def _treat_day_ref(self, user_id: str, day: date) -> firestore.DocumentReference:
        return self._user_ref(user_id).collection("treat_days").document(day.isoformat())

    @staticmethod
    def _period_from_doc(doc: firestore.DocumentSnapshot) -> WeeklyPeriod:
        data = doc.to_dict()
        data["id"] = doc.id
        return WeeklyPeriod(**data)

    # ==================== Profile Operations ====================

    def get_profile(self, user_id: str) -> Profile | None:
        """Fetch a user's profile.

        Args:
            user_id: The user's ID

        Returns:
            Profile if found, None otherwise
        """
        logger.debug("Fetching profile for user: %s", user_id[:8])
        doc = self._profile_ref(user_id).get()
        if not doc.exists:
            return None
        return Profile(**doc.to_dict())

    def save_profile(self, user_id: str, profile: Profile) -> None:
        """Save a user's profile."""
        logger.info("Saving profile for user: %s", user_id[:8])
        data = _to_doc(profile)
        data["updated_at"] = datetime.utcnow()
        self._profile_ref(user_id).set(data)

    def list_baseline_complete_users(self) -> list[str]:
        """IDs of all users whose baseline is complete."""
        query = self.client.collection_group("profile").where("baseline_complete", "==", True)
        user_ids = [doc.reference.parent.parent.id for doc in query.stream()]
        logger.debug("Found %d users with completed baseline", len(user_ids))
        return user_ids

    # ==================== Logging Data (read-only) ====================

    def get_daily_summaries(self, user_id: str, start: date, end: date) -> list[DailySummary]:
        """Fetch daily summaries for a date range.

        Args:
            user_id: The user's ID
            start: Start of range (inclusive)
            end: End of range (inclusive)

        Returns:
            Summaries ordered by date (may be empty)
        """
        logger.debug("Fetching summaries for %s from %s to %s", user_id[:8], start, end)
        query = (
            self._user_ref(user_id).collection("summaries")
            .where("summary_date", ">=", start.isoformat())
            .where("summary_date", "<=", end.isoformat())
            .order_by("summary_date")
        )
        return [DailySummary(**doc.to_dict()) for doc in query.stream()]

    def get_check_ins(self, user_id: str, start: date, end: date) -> list[CheckIn]:
        """Fetch check-ins (workout calories) for a date range."""
        query = (
            self._user_ref(user_id).collection("check_ins")
            .where("check_in_date", ">=", start.isoformat())
            .where("check_in_date", "<=", end.isoformat())
            .order_by("check_in_date")
        )
        return [CheckIn(**doc.to_dict()) for doc in query.stream()]

    # ==================== Weekly Period Operations ====================

    def get_period(self, user_id: str, period_id: str) -> WeeklyPeriod | None:
        """Point lookup of a period by ID."""
        doc = self._period_ref(user_id, period_id).get()
        if not doc.exists:
            return None
        return self._period_from_doc(doc)

    def find_period_overlapping(self, user_id: str, start: date, end: date) -> WeeklyPeriod | None:
        """Find the period whose range overlaps [start, end].

        Periods never overlap each other, so only the latest period starting
        on or before end can overlap the range.
        """
        query = (
            self._user_ref(user_id).collection("periods")
            .where("week_start", "<=", end.isoformat())
            .order_by("week_start", direction=firestore.Query.DESCENDING)
            .limit(1)
        )
        for doc in query.stream():
            period = self._period_from_doc(doc)
            if period.week_end >= start:
                return period
        return None

    def get_latest_period(self, user_id: str) -> WeeklyPeriod | None:
        """The user's most recent period, if any."""
        query = (
            self._user_ref(user_id).collection("periods")
            .order_by("week_start", direction=firestore.Query.DESCENDING)
            .limit(1)
        )
        for doc in query.stream():
            return self._period_from_doc(doc)
        return None

    def create_period(self, user_id: str, period: WeeklyPeriod) -> tuple[WeeklyPeriod, bool]:
        """Create a period keyed by its Monday.

        Returns:
            Tuple of (stored period, created). When another caller created the
            same week first, the existing period is returned with created=False.
        """
        period_id = period.week_start.isoformat()
        ref = self._period_ref(user_id, period_id)
        try:
            ref.create(_to_doc(period, exclude={"id"}))
        except AlreadyExists:
            logger.info("Period %s already exists for %s", period_id, user_id[:8])
            return self._period_from_doc(ref.get()), False

        logger.info("Created period %s for %s", period_id, user_id[:8])
        return period.model_copy(update={"id": period_id}), True

    def update_period_overage(self, user_id: str, period_id: str, cumulative_overage: int) -> None:
        """Persist a recomputed cumulative overage."""
        self._period_ref(user_id, period_id).update({"cumulative_overage": cumulative_overage})

    def set_period_status(self, user_id: str, period_id: str, status: PeriodStatus) -> None:
        self._period_ref(user_id, period_id).update({"status": status.value})

    # ==================== Treat Day Operations ====================

    def get_treat_days(self, user_id: str, start: date, end: date) -> list[PlannedTreatDay]:
        """Fetch treat days for a date range, ordered by date."""
        query = (
            self._user_ref(user_id).collection("treat_days")
            .where("treat_date", ">=", start.isoformat())
            .where("treat_date", "<=", end.isoformat())
            .order_by("treat_date")
        )
        return [PlannedTreatDay(**doc.to_dict()) for doc in query.stream()]

    def get_treat_day(self, user_id: str, day: date) -> PlannedTreatDay | None:
        doc = self._treat_day_ref(user_id, day).get()
        if not doc.exists:
            return None
        return PlannedTreatDay(**doc.to_dict())

    def create_treat_day(self, user_id: str, treat_day: PlannedTreatDay) -> bool:
        """Create a treat day; False if one already exists on that date."""
        try:
            self._treat_day_ref(user_id, treat_day.treat_date).create(_to_doc(treat_day))
        except AlreadyExists:
            logger.warning("Treat day already exists for %s on %s", user_id[:8], treat_day.treat_date)
            return False
        return True

    def update_treat_day(self, user_id: str, treat_day: PlannedTreatDay) -> None:
        """Overwrite a treat day in place (same date)."""
        self._treat_day_ref(user_id, treat_day.treat_date).set(_to_doc(treat_day))

    def move_treat_day(self, user_id: str, old_date: date, treat_day: PlannedTreatDay) -> bool:
        """Move a treat day to a new date atomically.

        Returns:
            False if the new date is already taken (nothing is changed)
        """
        batch = self.client.batch()
        batch.create(self._treat_day_ref(user_id, treat_day.treat_date), _to_doc(treat_day))
        batch.delete(self._treat_day_ref(user_id, old_date))
        try:
            batch.commit()
        except AlreadyExists:
            logger.warning("Cannot move treat day for %s to %s: date taken", user_id[:8], treat_day.treat_date)
            return False
        return True

    def delete_treat_day(self, user_id: str, day: date) -> bool:
        """Delete a treat day; False if none existed."""
        ref = self._treat_day_ref(user_id, day)
        if not ref.get().exists:
            return False
        ref.delete()
        return True
