"""
Stats router.

This router provides endpoints for:
- Initializing a user's progression stats (idempotent)
- Reading stats together with level progress
"""

from dataclasses import asdict
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from api.deps import get_current_user, get_progression_service
from models.progression import Badge, UserStats, WeekProgress
from services.progression_service import ProgressionService
from services.xp_curve import LevelProgress, level_progress

router = APIRouter(
    prefix="/stats",
    tags=["Stats"],
)


# =============================================================================
# Response Models
# =============================================================================


class LevelProgressResponse(BaseModel):
    """Progress through the current level."""
    level: int
    total_xp: int
    xp_into_level: int
    xp_for_next_level: int
    xp_remaining: int
    percent_to_next: int

    @classmethod
    def from_progress(cls, progress: LevelProgress) -> "LevelProgressResponse":
        return cls(**asdict(progress))


class StatsResponse(BaseModel):
    """Response model for the stats endpoint."""
    stats: UserStats
    level_progress: LevelProgressResponse


class InitializeStatsResponse(BaseModel):
    """Response model for stats initialization."""
    initialized: bool
    stats: UserStats
    level_progress: LevelProgressResponse
    badges: List[Badge] = []
    week_progress: Optional[WeekProgress] = None
    xp_granted: int = 0


# =============================================================================
# Endpoints
# =============================================================================


@router.post("/initialize", response_model=InitializeStatsResponse)
def initialize_stats(
    user_id: str = Depends(get_current_user),
    service: ProgressionService = Depends(get_progression_service),
) -> InitializeStatsResponse:
    """
    Create the user's stats, starter badge and week 1 progress.

    Calling this again for an initialized user returns the existing stats
    with `initialized: false` and grants nothing.
    """
    result = service.initialize_stats(user_id)
    return InitializeStatsResponse(
        initialized=result.created,
        stats=result.stats,
        level_progress=LevelProgressResponse.from_progress(level_progress(result.stats.total_xp)),
        badges=result.badges,
        week_progress=result.week_progress,
        xp_granted=result.xp_granted,
    )


@router.get("", response_model=StatsResponse)
def get_stats(
    user_id: str = Depends(get_current_user),
    service: ProgressionService = Depends(get_progression_service),
) -> StatsResponse:
    stats = service.get_stats(user_id)
    return StatsResponse(
        stats=stats,
        level_progress=LevelProgressResponse.from_progress(level_progress(stats.total_xp)),
    )
