"""
Supabase implementation of SessionRepository.

Queries the workout_sessions table.
"""

from typing import Dict, List, Optional

from supabase import Client


class SupabaseSessionRepository:
    """Supabase-backed workout session repository implementation."""

    def __init__(self, client: Client):
        self._client = client

    def get(self, session_id: str) -> Optional[Dict]:
        response = (
            self._client.table("workout_sessions")
            .select("*")
            .eq("id", session_id)
            .limit(1)
            .execute()
        )
        return response.data[0] if response.data else None

    def create(self, data: Dict) -> Dict:
        response = (
            self._client.table("workout_sessions")
            .insert(data)
            .execute()
        )
        return response.data[0]

    def update(self, session_id: str, data: Dict) -> Dict:
        response = (
            self._client.table("workout_sessions")
            .update(data)
            .eq("id", session_id)
            .execute()
        )
        return response.data[0]

    def completed_day_labels(
        self,
        user_id: str,
        plan_id: str,
        week_number: int,
    ) -> List[str]:
        response = (
            self._client.table("workout_sessions")
            .select("workout_day")
            .eq("user_id", user_id)
            .eq("plan_id", plan_id)
            .eq("week_number", week_number)
            .eq("status", "completed")
            .execute()
        )
        return [row["workout_day"] for row in response.data]
