"""
Domain models for user progression.

These models mirror the user_stats, user_badges, user_progress, user_plans
and workout_sessions tables. Rows are validated into these models at the
repository boundary so the progression engine can assume well-formed input.
"""

from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class BadgeTier(str, Enum):
    """Badge tiers, lowest first."""

    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"
    PLATINUM = "platinum"


class PlanStatus(str, Enum):
    """Plan lifecycle status."""

    ACTIVE = "active"
    ARCHIVED = "archived"


class SessionStatus(str, Enum):
    """Workout session status."""

    IN_PROGRESS = "in_progress"
    PAUSED = "paused"
    COMPLETED = "completed"


class ProgressionEvent(str, Enum):
    """Events that can advance badge progress."""

    ACCOUNT_INITIALIZED = "account_initialized"
    WORKOUT_COMPLETED = "workout_completed"
    PERFECT_WORKOUT = "perfect_workout"
    STREAK_EXTENDED = "streak_extended"
    WEEK_COMPLETED = "week_completed"
    PHASE_COMPLETED = "phase_completed"
    PROGRAM_COMPLETED = "program_completed"


class NotificationKind(str, Enum):
    """Kinds of plan progression notifications."""

    WEEK_COMPLETE = "week_complete"
    PHASE_COMPLETE = "phase_complete"
    PROGRAM_COMPLETE = "program_complete"


# =============================================================================
# User Stats
# =============================================================================


class UserStats(BaseModel):
    """
    Per-user progression totals.

    `level` is a cached value derived from `total_xp`; it is only ever
    written together with `total_xp` by the progression engine.
    """

    model_config = ConfigDict(from_attributes=True)

    user_id: str
    plan_start_date: Optional[date] = None
    current_week: int = Field(default=1, ge=1)
    total_workouts_completed: int = Field(default=0, ge=0)
    total_workouts_planned: int = Field(default=0, ge=0)
    current_streak_days: int = Field(default=0, ge=0)
    longest_streak_days: int = Field(default=0, ge=0)
    last_workout_date: Optional[date] = None
    total_xp: int = Field(default=0, ge=0)
    level: int = Field(default=1, ge=1)
    total_badges_earned: int = Field(default=0, ge=0)
    current_x_percent: float = 0.0
    best_x_percent: float = 0.0
    average_x_percent: float = 0.0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# =============================================================================
# Badges
# =============================================================================


class Badge(BaseModel):
    """An awarded or in-progress badge for a user."""

    model_config = ConfigDict(from_attributes=True)

    id: Optional[str] = None
    user_id: str
    badge_key: str
    name: str
    description: str = ""
    tier: BadgeTier = BadgeTier.BRONZE
    theme_exclusive: Optional[str] = None
    xp_earned: int = Field(default=0, ge=0)
    progress_current: int = Field(default=0, ge=0)
    progress_required: int = Field(default=1, ge=1)
    unlocked_at: Optional[datetime] = None

    @model_validator(mode="after")
    def check_progress_bounds(self) -> "Badge":
        if self.progress_current > self.progress_required:
            raise ValueError(
                f"progress_current ({self.progress_current}) exceeds "
                f"progress_required ({self.progress_required})"
            )
        return self

    @property
    def earned(self) -> bool:
        """True once the badge has been unlocked."""
        return self.unlocked_at is not None


# =============================================================================
# Weekly Progress
# =============================================================================


class WeekProgress(BaseModel):
    """Progress for one week of the active plan."""

    model_config = ConfigDict(from_attributes=True)

    id: Optional[str] = None
    user_id: str
    plan_id: Optional[str] = None
    week_number: int = Field(ge=1)
    week_start_date: date
    week_end_date: date
    workouts_planned: int = Field(default=0, ge=0)
    workouts_completed: int = Field(default=0, ge=0)
    current_streak_days: int = Field(default=0, ge=0)
    step_goal_days_hit: int = Field(default=0, ge=0)
    step_goal_days_total: int = Field(default=7, ge=0)
    x_percent_better: float = 0.0

    @model_validator(mode="after")
    def check_dates(self) -> "WeekProgress":
        if self.week_end_date < self.week_start_date:
            raise ValueError("week_end_date is before week_start_date")
        return self


# =============================================================================
# Plan Document (LLM output)
# =============================================================================


class WeekRange(BaseModel):
    """Inclusive range of plan weeks covered by a milestone."""

    start: int
    end: int

    def contains(self, week: int) -> bool:
        return self.start <= week <= self.end


class Milestone(BaseModel):
    """A plan phase. Unknown keys from the generator are kept."""

    model_config = ConfigDict(extra="allow")

    week_range: Optional[WeekRange] = None
    title: str = ""
    focus: List[str] = []


class ScheduleDay(BaseModel):
    """One day of the repeating weekly template."""

    model_config = ConfigDict(extra="allow")

    day_label: str
    workout: Optional[List[Dict[str, Any]]] = None

    @property
    def is_rest_day(self) -> bool:
        return not self.workout


class WeeklyPlan(BaseModel):
    """The repeating weekly schedule."""

    model_config = ConfigDict(extra="allow")

    program_length_weeks: Optional[int] = None
    days_per_week: Optional[int] = None
    schedule: List[ScheduleDay] = []


class PlanDocument(BaseModel):
    """
    Generated plan document.

    Only milestones and the weekly schedule are interpreted; everything
    else (nutrition, assumptions, recovery targets) is carried through.
    """

    model_config = ConfigDict(extra="allow")

    milestones: List[Milestone] = []
    weekly_plan: Optional[WeeklyPlan] = None

    @property
    def schedule(self) -> List[ScheduleDay]:
        if self.weekly_plan is None:
            return []
        return self.weekly_plan.schedule

    @property
    def workout_day_labels(self) -> List[str]:
        return [day.day_label for day in self.schedule if not day.is_rest_day]

    def find_day(self, day_label: str) -> Optional[ScheduleDay]:
        for day in self.schedule:
            if day.day_label == day_label:
                return day
        return None


class Plan(BaseModel):
    """A user's generated plan plus progression metadata."""

    model_config = ConfigDict(from_attributes=True)

    id: Optional[str] = None
    user_id: str
    status: PlanStatus = PlanStatus.ACTIVE
    version: int = Field(default=1, ge=1)
    current_week: int = Field(default=1, ge=1)
    current_phase: int = Field(default=1, ge=1)
    plan_json: PlanDocument
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# =============================================================================
# Workout Sessions
# =============================================================================


class WorkoutSession(BaseModel):
    """
    A single attempted workout.

    completion_percentage, total_duration_minutes and
    estimated_calories_burned are derived when the session is finished.
    """

    model_config = ConfigDict(from_attributes=True)

    id: Optional[str] = None
    user_id: str
    plan_id: Optional[str] = None
    workout_day: str
    week_number: int = Field(default=1, ge=1)
    started_at: datetime
    paused_at: Optional[datetime] = None
    paused_seconds: int = Field(default=0, ge=0)
    finished_at: Optional[datetime] = None
    total_exercises: int = Field(default=0, ge=0)
    completed_exercises: int = Field(default=0, ge=0)
    completion_percentage: int = Field(default=0, ge=0, le=100)
    total_duration_minutes: int = Field(default=0, ge=0)
    estimated_calories_burned: int = Field(default=0, ge=0)
    xp_earned: int = Field(default=0, ge=0)
    status: SessionStatus = SessionStatus.IN_PROGRESS

    @model_validator(mode="after")
    def check_exercise_counts(self) -> "WorkoutSession":
        if self.completed_exercises > self.total_exercises:
            raise ValueError("completed_exercises exceeds total_exercises")
        return self


# =============================================================================
# Notifications
# =============================================================================


class ProgressionNotification(BaseModel):
    """Human-readable plan progression message for the presentation layer."""

    kind: NotificationKind
    title: str
    message: str
    week_number: int
    milestone_title: Optional[str] = None
    next_milestone_title: Optional[str] = None
    program_length_weeks: Optional[int] = None
