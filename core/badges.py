"""
Badge catalog.

Each definition names the event that advances it and how many of those
events are required. The badge engine only knows the generic
"progress toward threshold, award once" rule; what counts is configured here.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from core.constants import STARTER_BADGE_KEY
from models.progression import BadgeTier, ProgressionEvent


@dataclass(frozen=True)
class BadgeDefinition:
    """Catalog entry for a badge."""

    badge_key: str
    name: str
    description: str
    tier: BadgeTier
    xp_reward: int
    event: ProgressionEvent
    progress_required: int = 1
    theme_exclusive: Optional[str] = None


BADGE_CATALOG: List[BadgeDefinition] = [
    BadgeDefinition(
        badge_key=STARTER_BADGE_KEY,
        name="Journey Begins",
        description="Generated your first AI-powered fitness plan",
        tier=BadgeTier.BRONZE,
        xp_reward=100,
        event=ProgressionEvent.ACCOUNT_INITIALIZED,
    ),
    BadgeDefinition(
        badge_key="first_sweat",
        name="First Sweat",
        description="Finished your first workout",
        tier=BadgeTier.BRONZE,
        xp_reward=50,
        event=ProgressionEvent.WORKOUT_COMPLETED,
    ),
    BadgeDefinition(
        badge_key="iron_regular",
        name="Iron Regular",
        description="Finished 25 workouts",
        tier=BadgeTier.SILVER,
        xp_reward=150,
        event=ProgressionEvent.WORKOUT_COMPLETED,
        progress_required=25,
    ),
    BadgeDefinition(
        badge_key="perfectionist",
        name="Perfectionist",
        description="Completed every exercise in 10 workouts",
        tier=BadgeTier.SILVER,
        xp_reward=100,
        event=ProgressionEvent.PERFECT_WORKOUT,
        progress_required=10,
    ),
    BadgeDefinition(
        badge_key="on_fire",
        name="On Fire",
        description="Trained on back-to-back days 3 times",
        tier=BadgeTier.BRONZE,
        xp_reward=75,
        event=ProgressionEvent.STREAK_EXTENDED,
        progress_required=3,
    ),
    BadgeDefinition(
        badge_key="week_warrior",
        name="Week Warrior",
        description="Completed every workout day in a week",
        tier=BadgeTier.BRONZE,
        xp_reward=75,
        event=ProgressionEvent.WEEK_COMPLETED,
    ),
    BadgeDefinition(
        badge_key="phase_shifter",
        name="Phase Shifter",
        description="Completed a full plan phase",
        tier=BadgeTier.SILVER,
        xp_reward=150,
        event=ProgressionEvent.PHASE_COMPLETED,
    ),
    BadgeDefinition(
        badge_key="finish_line",
        name="Finish Line",
        description="Completed an entire program",
        tier=BadgeTier.GOLD,
        xp_reward=500,
        event=ProgressionEvent.PROGRAM_COMPLETED,
    ),
]


def catalog_by_key(catalog: List[BadgeDefinition] = BADGE_CATALOG) -> Dict[str, BadgeDefinition]:
    """Index a catalog by badge key."""
    return {definition.badge_key: definition for definition in catalog}
