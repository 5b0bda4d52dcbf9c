"""
Badge progress evaluation.

Applies progression events to a user's badges using the catalog in
core.badges: every matching event moves progress forward by one, and a
badge is earned (and its XP granted) exactly once when progress reaches
the required count.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from application.exceptions import DuplicateAwardError
from core.badges import BADGE_CATALOG, BadgeDefinition
from models.progression import Badge, ProgressionEvent

logger = logging.getLogger(__name__)


@dataclass
class BadgeEvaluation:
    """Badge changes produced by one batch of events."""

    updated: List[Badge] = field(default_factory=list)
    newly_earned: List[Badge] = field(default_factory=list)

    @property
    def xp_awarded(self) -> int:
        return sum(badge.xp_earned for badge in self.newly_earned)


class BadgeEngine:
    """Generic "progress toward threshold, award once" mechanism."""

    def __init__(self, catalog: Optional[List[BadgeDefinition]] = None):
        self._catalog = list(catalog if catalog is not None else BADGE_CATALOG)

    @property
    def catalog(self) -> List[BadgeDefinition]:
        return list(self._catalog)

    def evaluate(
        self,
        user_id: str,
        events: Iterable[ProgressionEvent],
        existing: Iterable[Badge],
        now: datetime,
    ) -> BadgeEvaluation:
        """
        Advance badge progress for a batch of events.

        Args:
            user_id: The user's ID
            events: Events raised by the triggering action
            existing: The user's current badge records
            now: Timestamp used for unlocked_at

        Returns:
            BadgeEvaluation with one record per changed badge key
        """
        badges: Dict[str, Badge] = {b.badge_key: b for b in existing}
        changed: Dict[str, Badge] = {}
        earned: List[Badge] = []

        for event in events:
            for definition in self._catalog:
                if definition.event != event:
                    continue
                try:
                    badge = self._advance(user_id, definition, badges.get(definition.badge_key), now)
                except DuplicateAwardError:
                    logger.debug(f"Skipping {definition.badge_key} for {user_id}: already earned")
                    continue
                badges[badge.badge_key] = badge
                changed[badge.badge_key] = badge
                if badge.earned:
                    earned.append(badge)
                    logger.info(
                        f"User {user_id} earned badge '{badge.badge_key}' (+{badge.xp_earned} XP)"
                    )

        return BadgeEvaluation(updated=list(changed.values()), newly_earned=earned)

    def _advance(
        self,
        user_id: str,
        definition: BadgeDefinition,
        current: Optional[Badge],
        now: datetime,
    ) -> Badge:
        """Move one badge forward by one qualifying event."""
        if current is not None and current.earned:
            raise DuplicateAwardError(definition.badge_key)

        if current is None:
            current = Badge(
                user_id=user_id,
                badge_key=definition.badge_key,
                name=definition.name,
                description=definition.description,
                tier=definition.tier,
                theme_exclusive=definition.theme_exclusive,
                progress_current=0,
                progress_required=definition.progress_required,
            )

        progress = min(current.progress_current + 1, current.progress_required)
        if progress < current.progress_required:
            return current.model_copy(update={"progress_current": progress})

        return current.model_copy(
            update={
                "progress_current": progress,
                "xp_earned": definition.xp_reward,
                "unlocked_at": now,
            }
        )
