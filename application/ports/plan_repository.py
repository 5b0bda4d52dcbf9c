"""
Plan repository port (interface).

Plans are only ever created or archived through
ProgressionRepository.apply_update; this port covers the reads.
"""

from typing import Dict, List, Optional, Protocol


class PlanRepository(Protocol):
    """Repository interface for generated plans."""

    def get_active(self, user_id: str) -> Optional[Dict]:
        """
        Get the user's active plan.

        Args:
            user_id: The user's ID

        Returns:
            Plan dictionary if the user has an active plan, None otherwise
        """
        ...

    def get_by_id(self, plan_id: str) -> Optional[Dict]:
        """
        Get a plan by its ID.

        Args:
            plan_id: The plan's UUID as string

        Returns:
            Plan dictionary if found, None otherwise
        """
        ...

    def get_by_user(self, user_id: str) -> List[Dict]:
        """
        Get all plans for a user, newest version first.

        Args:
            user_id: The user's ID

        Returns:
            List of plan dictionaries
        """
        ...
