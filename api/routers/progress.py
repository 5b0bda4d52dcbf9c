"""
Weekly progress router.
"""

from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from api.deps import get_current_user, get_progression_service
from models.progression import WeekProgress
from services.progression_service import ProgressionService

router = APIRouter(
    prefix="/progress",
    tags=["Progress"],
)


class WeekHistoryResponse(BaseModel):
    """Response model for the week history endpoint."""
    weeks: List[WeekProgress]
    total: int


@router.get("/weeks", response_model=WeekHistoryResponse)
def list_weeks(
    user_id: str = Depends(get_current_user),
    service: ProgressionService = Depends(get_progression_service),
) -> WeekHistoryResponse:
    """Week-by-week progress for the active plan, oldest week first."""
    weeks = service.list_weeks(user_id)
    return WeekHistoryResponse(weeks=weeks, total=len(weeks))
