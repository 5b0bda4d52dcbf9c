"""
Progression repository port (interface).

This Protocol defines the contract for reading progression snapshots and
writing the bundled result of a progression event. Infrastructure
implementations (e.g., Supabase) must satisfy this interface.
"""

from typing import Dict, List, Optional, Protocol


class ProgressionRepository(Protocol):
    """
    Repository interface for user stats, badges, week progress and the
    atomic progression write.

    All methods work with dictionaries for flexibility.
    The service layer handles conversion to/from domain models.
    """

    def get_stats(self, user_id: str) -> Optional[Dict]:
        """
        Get a user's stats row.

        Args:
            user_id: The user's ID

        Returns:
            Stats dictionary if initialized, None otherwise
        """
        ...

    def get_badges(self, user_id: str) -> List[Dict]:
        """
        Get all badge rows for a user, earned and in progress.

        Args:
            user_id: The user's ID

        Returns:
            List of badge dictionaries
        """
        ...

    def get_week_progress(
        self,
        user_id: str,
        plan_id: Optional[str],
        week_number: int,
    ) -> Optional[Dict]:
        """
        Get the progress row for one week of a plan.

        Args:
            user_id: The user's ID
            plan_id: The plan's UUID as string (None for plan-less rows)
            week_number: Week number within the plan

        Returns:
            Week progress dictionary if found, None otherwise
        """
        ...

    def list_week_progress(self, user_id: str, plan_id: Optional[str]) -> List[Dict]:
        """
        Get all week progress rows for a plan, ordered by week number.

        Args:
            user_id: The user's ID
            plan_id: The plan's UUID as string

        Returns:
            List of week progress dictionaries
        """
        ...

    def apply_update(self, update: Dict) -> Dict:
        """
        Write every row changed by one progression event in one transaction.

        Readers must never observe part of the update (e.g. total_xp
        without its level, or an earned badge without its XP).

        Args:
            update: Dictionary with keys:
                "user_id": the user's ID
                "stats": stats row to upsert, or None
                "badges": badge rows to upsert (keyed by user_id, badge_key)
                "plans": plan rows to upsert (keyed by id)
                "week_progress": week rows to upsert
                    (keyed by user_id, plan_id, week_number)
                "session": workout session row to upsert, or None

        Returns:
            The stored rows, same keys as the input

        Raises:
            PersistenceError: If the atomic write fails
        """
        ...
