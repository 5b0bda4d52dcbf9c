"""Models package for the progression API."""

from models.progression import (
    Badge,
    BadgeTier,
    Milestone,
    NotificationKind,
    Plan,
    PlanDocument,
    PlanStatus,
    ProgressionEvent,
    ProgressionNotification,
    ScheduleDay,
    SessionStatus,
    UserStats,
    WeeklyPlan,
    WeekProgress,
    WeekRange,
    WorkoutSession,
)
from models.generation import (
    GeneratePlanRequest,
    GeneratePlanResponse,
    UserProfile,
)

__all__ = [
    "Badge",
    "BadgeTier",
    "Milestone",
    "NotificationKind",
    "Plan",
    "PlanDocument",
    "PlanStatus",
    "ProgressionEvent",
    "ProgressionNotification",
    "ScheduleDay",
    "SessionStatus",
    "UserStats",
    "WeeklyPlan",
    "WeekProgress",
    "WeekRange",
    "WorkoutSession",
    "GeneratePlanRequest",
    "GeneratePlanResponse",
    "UserProfile",
]
