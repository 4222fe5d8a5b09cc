"""Core Data Models - Pydantic models for type safety.

Stored records (Profile, DailySummary, CheckIn, WeeklyPeriod, PlannedTreatDay)
and the typed outcomes returned by the budget engine. Expected failures are
carried on outcomes as an ErrorKind, never raised.
"""

from datetime import datetime, timedelta
from datetime import date as DateType
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, model_validator


class Goal(str, Enum):
    LOSE = "lose"
    MAINTAIN = "maintain"
    GAIN = "gain"


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class ActivityLevel(str, Enum):
    SEDENTARY = "sedentary"
    LIGHTLY_ACTIVE = "lightly_active"
    MODERATELY_ACTIVE = "moderately_active"
    VERY_ACTIVE = "very_active"


class PeriodStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"


class ErrorKind(str, Enum):
    """Expected, user-correctable failure kinds."""

    INSUFFICIENT_DATA = "insufficient_data"
    MISSING_ONBOARDING_DATA = "missing_onboarding_data"
    NO_BASELINE_DATA = "no_baseline_data"
    TOO_MANY_TREAT_DAYS = "too_many_treat_days"
    MAX_TREAT_DAYS_REACHED = "max_treat_days_reached"
    UNSAFE = "unsafe"
    DATE_CONFLICT = "date_conflict"
    PAST_DATE = "past_date"
    INVALID_AMOUNT = "invalid_amount"
    NOT_FOUND = "not_found"
    BASELINE_ALREADY_COMPLETE = "baseline_already_complete"


# ==================== Stored Records ====================


class Profile(BaseModel):
    """User profile seeded at onboarding and finalized at baseline completion."""

    bmr: Optional[int] = Field(default=None, gt=0, description="Basal metabolic rate, kcal/day")
    activity_level: Optional[str] = Field(default=None, description="Activity level reported at onboarding")
    goal: Goal = Goal.MAINTAIN
    gender: Gender = Gender.OTHER
    daily_deficit: Optional[int] = Field(
        default=None, description="Signed kcal offset below maintenance (negative = surplus)"
    )

    # Set once the baseline week completes
    baseline_complete: bool = False
    baseline_avg_daily_calories: Optional[int] = Field(default=None, ge=0)
    baseline_total_exercise: Optional[int] = Field(default=None, ge=0)
    actual_activity_level: Optional[str] = None
    tdee: Optional[int] = Field(default=None, ge=0, description="Final TDEE")
    daily_target: Optional[int] = Field(default=None, ge=0)
    weekly_budget: Optional[int] = Field(default=None, ge=0)
    baseline_completed_at: Optional[datetime] = None
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @model_validator(mode="after")
    def _weekly_budget_matches_target(self) -> "Profile":
        if self.daily_target is not None and self.weekly_budget is not None:
            if self.weekly_budget != self.daily_target * 7:
                raise ValueError("weekly_budget must equal daily_target * 7")
        return self


class DailySummary(BaseModel):
    """Net intake for one calendar day, maintained by the logging subsystem."""

    summary_date: DateType
    calories_consumed: int = Field(default=0, ge=0)
    calories_burned: int = Field(default=0, ge=0)

    @property
    def net_calories(self) -> int:
        return self.calories_consumed - self.calories_burned


class CheckIn(BaseModel):
    """Daily check-in carrying measured workout calories."""

    check_in_date: DateType
    workout_calories_burned: int = Field(default=0, ge=0)


class WeeklyPeriod(BaseModel):
    """A Monday-Sunday budget window.

    The store uses week_start as the document id, which is what keeps
    periods for one user from overlapping.
    """

    id: Optional[str] = None
    week_start: DateType = Field(description="Monday")
    week_end: DateType = Field(description="Sunday, week_start + 6 days")
    weekly_budget: int = Field(ge=0)
    baseline_average_daily: int = Field(ge=0, description="Informational average intake")
    cumulative_overage: int = Field(default=0, ge=0)
    status: PeriodStatus = PeriodStatus.ACTIVE
    created_at: datetime = Field(default_factory=datetime.utcnow)

    @model_validator(mode="after")
    def _monday_to_sunday(self) -> "WeeklyPeriod":
        if self.week_start.weekday() != 0:
            raise ValueError("week_start must be a Monday")
        if self.week_end != self.week_start + timedelta(days=6):
            raise ValueError("week_end must be exactly six days after week_start")
        return self

    @property
    def daily_base(self) -> float:
        return self.weekly_budget / 7

    def contains(self, day: DateType) -> bool:
        return self.week_start <= day <= self.week_end


class PlannedTreatDay(BaseModel):
    """A future date with an explicitly reserved calorie allowance."""

    treat_date: DateType
    planned_calories: int = Field(gt=0)
    note: Optional[str] = None
    is_completed: bool = False
    created_at: datetime = Field(default_factory=datetime.utcnow)


# ==================== Outcomes ====================


class Outcome(BaseModel):
    """Base for engine results. A set error means the operation was refused."""

    error: Optional[ErrorKind] = None
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class BaselineResult(BaseModel):
    """Derived calibration numbers, identical shape for both completion modes."""

    days_used: int = Field(ge=0)
    avg_daily_intake: int = Field(ge=0, description="Zero for estimated completion")
    total_exercise: int = Field(ge=0, description="Zero for estimated completion")
    activity_level: str
    activity_factor: float
    formula_tdee: int
    final_tdee: int
    daily_target: int
    weekly_budget: int
    estimated: bool = False


class BaselineOutcome(Outcome):
    result: Optional[BaselineResult] = None
    period_reason: Optional[str] = Field(default=None, description="Outcome of the follow-up period creation")
    period_id: Optional[str] = None


class PeriodCreation(Outcome):
    """Contract of the createPeriod trigger."""

    reason: str = Field(description="created | already_exists | no_baseline_data")
    period_id: Optional[str] = None


class PeriodJobSummary(BaseModel):
    processed: int = 0
    created: int = 0
    already_existed: int = 0
    failed: int = 0
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class WeekProgress(BaseModel):
    total_days_in_period: int = 7
    tracking_start: DateType
    days_tracked: int
    days_remaining: int
    is_partial_week: bool


class TreatDayRecommendation(Outcome):
    daily_base: int = 0
    max_safe: int = 0
    light: int = 0
    moderate: int = 0
    celebration: int = 0
    comfort_floor: int = 0
    warning: Optional[str] = None


class TreatDayValidation(BaseModel):
    status: str = Field(description="safe | challenging | unsafe")
    is_valid: bool
    regular_days_count: int
    other_days_average: int
    message: str
    suggested_max: Optional[int] = None


class TreatDaySave(Outcome):
    treat_day: Optional[PlannedTreatDay] = None
    validation: Optional[TreatDayValidation] = None


class DayOverage(BaseModel):
    day: DateType
    net_calories: int
    allowance: float
    overage: float
    is_treat_day: bool


class OverageBreakdown(BaseModel):
    cumulative_overage: int = 0
    days: list[DayOverage] = Field(default_factory=list)


class ReconcileOutcome(Outcome):
    period_id: Optional[str] = None
    cumulative_overage: int = 0
    days: list[DayOverage] = Field(default_factory=list)
    degraded: bool = False


class AdjustedBudget(BaseModel):
    """Today's live daily goal."""

    base_budget: int
    adjustment: int = Field(description="Zero or negative penalty")
    adjusted_budget: int
    is_treat_day: bool = False
    treat_day_calories: Optional[int] = None
    remaining_regular_days: int
    cumulative_overage: int = 0
    is_fallback: bool = False
