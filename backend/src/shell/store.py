"""Data Store Interface - The persistence operations the budget engine needs.

BudgetFirestoreClient is the production implementation. Uniqueness of
periods (per user and week) and treat days (per user and date) is the
store's job: creators that lose a race get False / the existing row back.
"""

from datetime import date
from typing import Protocol

from ..core.models import (
    CheckIn,
    DailySummary,
    PeriodStatus,
    PlannedTreatDay,
    Profile,
    WeeklyPeriod,
)


class BudgetStore(Protocol):
    # Profiles
    def get_profile(self, user_id: str) -> Profile | None: ...
    def save_profile(self, user_id: str, profile: Profile) -> None: ...
    def list_baseline_complete_users(self) -> list[str]: ...

    # Logging data (read-only here)
    def get_daily_summaries(self, user_id: str, start: date, end: date) -> list[DailySummary]: ...
    def get_check_ins(self, user_id: str, start: date, end: date) -> list[CheckIn]: ...

    # Weekly periods
    def get_period(self, user_id: str, period_id: str) -> WeeklyPeriod | None: ...
    def find_period_overlapping(self, user_id: str, start: date, end: date) -> WeeklyPeriod | None: ...
    def get_latest_period(self, user_id: str) -> WeeklyPeriod | None: ...
    def create_period(self, user_id: str, period: WeeklyPeriod) -> tuple[WeeklyPeriod, bool]: ...
    def update_period_overage(self, user_id: str, period_id: str, cumulative_overage: int) -> None: ...
    def set_period_status(self, user_id: str, period_id: str, status: PeriodStatus) -> None: ...

    # Treat days
    def get_treat_days(self, user_id: str, start: date, end: date) -> list[PlannedTreatDay]: ...
    def get_treat_day(self, user_id: str, day: date) -> PlannedTreatDay | None: ...
    def create_treat_day(self, user_id: str, treat_day: PlannedTreatDay) -> bool: ...
    def update_treat_day(self, user_id: str, treat_day: PlannedTreatDay) -> None: ...
    def move_treat_day(self, user_id: str, old_date: date, treat_day: PlannedTreatDay) -> bool: ...
    def delete_treat_day(self, user_id: str, day: date) -> bool: ...
