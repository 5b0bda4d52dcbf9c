"""
Workout session lifecycle and derived metrics.

Completion percentage, duration and calories are always computed from the
exercise counts and timestamps, never accepted as inputs.
"""

import logging
from datetime import datetime
from typing import Optional

from application.exceptions import InvalidStateError, SessionStateError
from core.constants import CALORIES_PER_MINUTE
from models.progression import Plan, PlanStatus, SessionStatus, WorkoutSession

logger = logging.getLogger(__name__)


# =============================================================================
# Derived Metrics
# =============================================================================


def completion_percentage(completed: int, total: int) -> int:
    """
    floor(completed / total * 100), or 0 for a session with no exercises.

    `completed` is clamped into [0, total].
    """
    if total <= 0:
        return 0
    completed = min(max(completed, 0), total)
    return completed * 100 // total


def active_seconds(
    started_at: datetime,
    finished_at: datetime,
    paused_seconds: int = 0,
) -> int:
    """Seconds between start and finish, minus time spent paused."""
    elapsed = int((finished_at - started_at).total_seconds()) - paused_seconds
    return max(elapsed, 0)


def estimate_calories(minutes: int) -> int:
    """Rough calorie estimate for an active duration."""
    return max(minutes, 0) * CALORIES_PER_MINUTE


# =============================================================================
# Lifecycle
# =============================================================================


def start_session(
    user_id: str,
    plan: Plan,
    day_label: str,
    now: datetime,
) -> WorkoutSession:
    """
    Create an in-progress session for a schedule day in the plan's current week.

    Raises:
        InvalidStateError: If the plan is archived, has no schedule, or
            the day label is not a workout day in the schedule
    """
    if plan.status != PlanStatus.ACTIVE:
        raise InvalidStateError(f"Plan {plan.id} is not active")
    if not plan.plan_json.schedule:
        raise InvalidStateError(f"Plan {plan.id} has no weekly schedule")

    day = plan.plan_json.find_day(day_label)
    if day is None:
        raise InvalidStateError(f"'{day_label}' is not a day in plan {plan.id}")
    if day.is_rest_day:
        raise InvalidStateError(f"'{day_label}' is a rest day in plan {plan.id}")

    return WorkoutSession(
        user_id=user_id,
        plan_id=plan.id,
        workout_day=day.day_label,
        week_number=plan.current_week,
        started_at=now,
        total_exercises=len(day.workout or []),
        status=SessionStatus.IN_PROGRESS,
    )


def pause_session(session: WorkoutSession, now: datetime) -> WorkoutSession:
    if session.status != SessionStatus.IN_PROGRESS:
        raise SessionStateError(
            f"Cannot pause session {session.id} in status '{session.status.value}'"
        )
    return session.model_copy(update={"status": SessionStatus.PAUSED, "paused_at": now})


def resume_session(session: WorkoutSession, now: datetime) -> WorkoutSession:
    if session.status != SessionStatus.PAUSED:
        raise SessionStateError(
            f"Cannot resume session {session.id} in status '{session.status.value}'"
        )
    return session.model_copy(
        update={
            "status": SessionStatus.IN_PROGRESS,
            "paused_at": None,
            "paused_seconds": session.paused_seconds + _paused_for(session, now),
        }
    )


def finish_session(
    session: WorkoutSession,
    completed_exercises: int,
    now: datetime,
) -> WorkoutSession:
    """
    Finalize a session and derive its metrics.

    A paused session can be finished directly; the open pause is closed at `now`.

    Raises:
        SessionStateError: If the session is already completed
    """
    if session.status == SessionStatus.COMPLETED:
        raise SessionStateError(f"Session {session.id} is already completed")

    paused_seconds = session.paused_seconds + _paused_for(session, now)
    completed = min(max(completed_exercises, 0), session.total_exercises)
    if completed != completed_exercises:
        logger.warning(
            f"Clamped completed exercises {completed_exercises} -> {completed} "
            f"for session {session.id}"
        )

    minutes = active_seconds(session.started_at, now, paused_seconds) // 60
    return session.model_copy(
        update={
            "status": SessionStatus.COMPLETED,
            "finished_at": now,
            "paused_at": None,
            "paused_seconds": paused_seconds,
            "completed_exercises": completed,
            "completion_percentage": completion_percentage(completed, session.total_exercises),
            "total_duration_minutes": minutes,
            "estimated_calories_burned": estimate_calories(minutes),
        }
    )


def _paused_for(session: WorkoutSession, now: datetime) -> int:
    paused_at: Optional[datetime] = session.paused_at
    if session.status != SessionStatus.PAUSED or paused_at is None:
        return 0
    return max(int((now - paused_at).total_seconds()), 0)
