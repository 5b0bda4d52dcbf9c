"""
Badges router.

Lists the user's badge records, both earned and in progress.
"""

from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from api.deps import get_current_user, get_progression_service
from models.progression import Badge
from services.progression_service import ProgressionService

router = APIRouter(
    prefix="/badges",
    tags=["Badges"],
)


class BadgesResponse(BaseModel):
    """Response model for the badges endpoint."""
    badges: List[Badge]
    earned: int
    total: int


@router.get("", response_model=BadgesResponse)
def list_badges(
    user_id: str = Depends(get_current_user),
    service: ProgressionService = Depends(get_progression_service),
) -> BadgesResponse:
    """
    Get the user's badges.

    Earned badges come first (most recent unlock first), followed by
    badges still in progress.
    """
    badges = service.get_badges(user_id)
    earned = sorted((b for b in badges if b.earned), key=lambda b: b.unlocked_at, reverse=True)
    pending = [b for b in badges if not b.earned]
    return BadgesResponse(badges=earned + pending, earned=len(earned), total=len(badges))
