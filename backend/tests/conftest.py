"""Shared fixtures: an in-memory BudgetStore and service wiring."""

from datetime import date

import pytest

from src.core.models import (
    CheckIn,
    DailySummary,
    PeriodStatus,
    PlannedTreatDay,
    Profile,
    WeeklyPeriod,
)
from src.shell.baseline_service import BaselineService
from src.shell.overage_service import OverageService
from src.shell.period_manager import PeriodManager
from src.shell.treat_day_service import TreatDayService


class InMemoryStore:
    """Dict-backed store with the same uniqueness rules as Firestore."""

    def __init__(self) -> None:
        self.profiles: dict[str, Profile] = {}
        self.summaries: dict[str, dict[date, DailySummary]] = {}
        self.check_ins: dict[str, dict[date, CheckIn]] = {}
        self.periods: dict[str, dict[str, WeeklyPeriod]] = {}
        self.treat_days: dict[str, dict[date, PlannedTreatDay]] = {}

    # Test helpers

    def add_summary(self, user_id: str, day: date, consumed: int, burned: int = 0) -> None:
        self.summaries.setdefault(user_id, {})[day] = DailySummary(
            summary_date=day, calories_consumed=consumed, calories_burned=burned
        )

    def add_check_in(self, user_id: str, day: date, workout_calories: int) -> None:
        self.check_ins.setdefault(user_id, {})[day] = CheckIn(
            check_in_date=day, workout_calories_burned=workout_calories
        )

    def add_treat_day(self, user_id: str, day: date, calories: int) -> None:
        self.treat_days.setdefault(user_id, {})[day] = PlannedTreatDay(treat_date=day, planned_calories=calories)

    # Profiles

    def get_profile(self, user_id):
        return self.profiles.get(user_id)

    def save_profile(self, user_id, profile):
        self.profiles[user_id] = profile

    def list_baseline_complete_users(self):
        return [uid for uid, p in self.profiles.items() if p.baseline_complete]

    # Logging data

    def get_daily_summaries(self, user_id, start, end):
        rows = self.summaries.get(user_id, {})
        return [rows[d] for d in sorted(rows) if start <= d <= end]

    def get_check_ins(self, user_id, start, end):
        rows = self.check_ins.get(user_id, {})
        return [rows[d] for d in sorted(rows) if start <= d <= end]

    # Periods

    def get_period(self, user_id, period_id):
        return self.periods.get(user_id, {}).get(period_id)

    def find_period_overlapping(self, user_id, start, end):
        for period in self.periods.get(user_id, {}).values():
            if period.week_start <= end and start <= period.week_end:
                return period
        return None

    def get_latest_period(self, user_id):
        periods = list(self.periods.get(user_id, {}).values())
        return max(periods, key=lambda p: p.week_start) if periods else None

    def create_period(self, user_id, period):
        period_id = period.week_start.isoformat()
        user_periods = self.periods.setdefault(user_id, {})
        if period_id in user_periods:
            return user_periods[period_id], False
        stored = period.model_copy(update={"id": period_id})
        user_periods[period_id] = stored
        return stored, True

    def update_period_overage(self, user_id, period_id, cumulative_overage):
        period = self.periods[user_id][period_id]
        self.periods[user_id][period_id] = period.model_copy(update={"cumulative_overage": cumulative_overage})

    def set_period_status(self, user_id, period_id, status: PeriodStatus):
        period = self.periods[user_id][period_id]
        self.periods[user_id][period_id] = period.model_copy(update={"status": status})

    # Treat days

    def get_treat_days(self, user_id, start, end):
        rows = self.treat_days.get(user_id, {})
        return [rows[d] for d in sorted(rows) if start <= d <= end]

    def get_treat_day(self, user_id, day):
        return self.treat_days.get(user_id, {}).get(day)

    def create_treat_day(self, user_id, treat_day):
        rows = self.treat_days.setdefault(user_id, {})
        if treat_day.treat_date in rows:
            return False
        rows[treat_day.treat_date] = treat_day
        return True

    def update_treat_day(self, user_id, treat_day):
        self.treat_days.setdefault(user_id, {})[treat_day.treat_date] = treat_day

    def move_treat_day(self, user_id, old_date, treat_day):
        rows = self.treat_days.setdefault(user_id, {})
        if treat_day.treat_date in rows:
            return False
        rows[treat_day.treat_date] = treat_day
        rows.pop(old_date, None)
        return True

    def delete_treat_day(self, user_id, day):
        return self.treat_days.get(user_id, {}).pop(day, None) is not None


USER_ID = "user-1234567890"

# A Wednesday; its week runs Monday 2024-12-23 to Sunday 2024-12-29
TODAY = date(2024, 12, 25)
WEEK_START = date(2024, 12, 23)
WEEK_END = date(2024, 12, 29)


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def periods(store):
    return PeriodManager(store)


@pytest.fixture
def baseline_service(store, periods):
    return BaselineService(store, periods)


@pytest.fixture
def treat_day_service(store, periods):
    return TreatDayService(store, periods)


@pytest.fixture
def overage_service(store, periods):
    return OverageService(store, periods)


@pytest.fixture
def calibrated_user(store, periods):
    """A user with a 10,500 kcal week (1500/day) and this week's period created."""
    store.save_profile(
        USER_ID,
        Profile(
            bmr=1600,
            daily_deficit=500,
            goal="lose",
            gender="female",
            activity_level="sedentary",
            baseline_complete=True,
            baseline_avg_daily_calories=1550,
            daily_target=1500,
            weekly_budget=10500,
        ),
    )
    creation = periods.create(USER_ID, TODAY)
    return creation.period_id
