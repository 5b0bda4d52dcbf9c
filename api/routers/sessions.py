"""
Workout sessions router.

This router provides endpoints for the session lifecycle:
- Start a session for a day of the active plan
- Pause and resume
- Finish, which applies XP, streaks, badges and week/phase advancement
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Path
from pydantic import BaseModel, Field

from api.deps import get_current_user, get_progression_service
from models.progression import (
    Badge,
    ProgressionNotification,
    UserStats,
    WeekProgress,
    WorkoutSession,
)
from services.progression_service import ProgressionService

router = APIRouter(
    prefix="/sessions",
    tags=["Sessions"],
)


# =============================================================================
# Request/Response Models
# =============================================================================


class StartSessionRequest(BaseModel):
    """Request model for starting a workout session."""
    workout_day: str = Field(..., min_length=1, description="Schedule day label, e.g. 'Monday'")


class FinishSessionRequest(BaseModel):
    """Request model for finishing a workout session."""
    completed_exercises: int = Field(..., ge=0, description="Exercises completed")


class FinishSessionResponse(BaseModel):
    """Everything that changed because of a finished workout."""
    session: WorkoutSession
    stats: UserStats
    week_progress: WeekProgress
    new_week_progress: Optional[WeekProgress] = None
    plan_status: str
    current_week: int
    current_phase: int
    progression_state: str
    xp_earned: int
    xp_granted: int
    leveled_up: bool
    new_badges: List[Badge] = []
    notification: Optional[ProgressionNotification] = None


# =============================================================================
# Endpoints
# =============================================================================


@router.post("", response_model=WorkoutSession, status_code=201)
def start_session(
    request: StartSessionRequest,
    user_id: str = Depends(get_current_user),
    service: ProgressionService = Depends(get_progression_service),
) -> WorkoutSession:
    return service.start_workout(user_id, request.workout_day)


@router.post("/{session_id}/pause", response_model=WorkoutSession)
def pause_session(
    session_id: str = Path(..., description="Workout session ID"),
    user_id: str = Depends(get_current_user),
    service: ProgressionService = Depends(get_progression_service),
) -> WorkoutSession:
    return service.pause_workout(user_id, session_id)


@router.post("/{session_id}/resume", response_model=WorkoutSession)
def resume_session(
    session_id: str = Path(..., description="Workout session ID"),
    user_id: str = Depends(get_current_user),
    service: ProgressionService = Depends(get_progression_service),
) -> WorkoutSession:
    return service.resume_workout(user_id, session_id)


@router.post("/{session_id}/finish", response_model=FinishSessionResponse)
def finish_session(
    request: FinishSessionRequest,
    session_id: str = Path(..., description="Workout session ID"),
    user_id: str = Depends(get_current_user),
    service: ProgressionService = Depends(get_progression_service),
) -> FinishSessionResponse:
    """
    Finish a workout session.

    Completion percentage, duration and calories are derived from the
    session; the client only reports how many exercises were completed.
    """
    outcome = service.finish_workout(user_id, session_id, request.completed_exercises)
    return FinishSessionResponse(
        session=outcome.session,
        stats=outcome.stats,
        week_progress=outcome.week_progress,
        new_week_progress=outcome.new_week_progress,
        plan_status=outcome.plan.status.value,
        current_week=outcome.plan.current_week,
        current_phase=outcome.plan.current_phase,
        progression_state=outcome.state.value,
        xp_earned=outcome.workout_xp,
        xp_granted=outcome.xp_granted,
        leveled_up=outcome.leveled_up,
        new_badges=outcome.newly_earned,
        notification=outcome.notification,
    )
