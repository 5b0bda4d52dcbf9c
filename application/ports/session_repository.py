"""
Workout session repository port (interface).
"""

from typing import Dict, List, Optional, Protocol


class SessionRepository(Protocol):
    """
    Repository interface for workout sessions.

    Finishing a session is written through ProgressionRepository.apply_update
    so the session and the XP it earned land together.
    """

    def get(self, session_id: str) -> Optional[Dict]:
        """
        Get a session by its ID.

        Args:
            session_id: The session's UUID as string

        Returns:
            Session dictionary if found, None otherwise
        """
        ...

    def create(self, data: Dict) -> Dict:
        """
        Create a new session.

        Args:
            data: Session data dictionary

        Returns:
            Created session dictionary with generated ID
        """
        ...

    def update(self, session_id: str, data: Dict) -> Dict:
        """
        Update a session (pause/resume).

        Args:
            session_id: The session's UUID as string
            data: Fields to update

        Returns:
            Updated session dictionary
        """
        ...

    def completed_day_labels(
        self,
        user_id: str,
        plan_id: str,
        week_number: int,
    ) -> List[str]:
        """
        Day labels with a completed session in one week of a plan.

        Args:
            user_id: The user's ID
            plan_id: The plan's UUID as string
            week_number: Week number within the plan

        Returns:
            List of workout_day labels (may contain duplicates)
        """
        ...
