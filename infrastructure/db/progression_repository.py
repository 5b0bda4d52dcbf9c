"""
Supabase implementation of ProgressionRepository.

Reads go through the table API; the bundled write goes through the
apply_progression_update Postgres function so every row changed by one
event is committed in a single transaction. The function locks the
user's user_stats row first, which serializes concurrent events for the
same user across processes.
"""

import json
from typing import Dict, List, Optional

from supabase import Client

from application.exceptions import PersistenceError


class SupabaseProgressionRepository:
    """
    Supabase-backed progression repository implementation.

    Queries against:
    - user_stats: One row per user with XP, level and streak totals
    - user_badges: Earned and in-progress badges
    - user_progress: One row per (user, plan, week)
    """

    def __init__(self, client: Client):
        """
        Initialize repository with Supabase client.

        Args:
            client: Authenticated Supabase client
        """
        self._client = client

    def get_stats(self, user_id: str) -> Optional[Dict]:
        response = (
            self._client.table("user_stats")
            .select("*")
            .eq("user_id", user_id)
            .limit(1)
            .execute()
        )
        return response.data[0] if response.data else None

    def get_badges(self, user_id: str) -> List[Dict]:
        response = (
            self._client.table("user_badges")
            .select("*")
            .eq("user_id", user_id)
            .order("unlocked_at", desc=True)
            .execute()
        )
        return response.data

    def get_week_progress(
        self,
        user_id: str,
        plan_id: Optional[str],
        week_number: int,
    ) -> Optional[Dict]:
        query = (
            self._client.table("user_progress")
            .select("*")
            .eq("user_id", user_id)
            .eq("week_number", week_number)
        )
        query = query.eq("plan_id", plan_id) if plan_id else query.is_("plan_id", "null")
        response = query.limit(1).execute()
        return response.data[0] if response.data else None

    def list_week_progress(self, user_id: str, plan_id: Optional[str]) -> List[Dict]:
        query = self._client.table("user_progress").select("*").eq("user_id", user_id)
        query = query.eq("plan_id", plan_id) if plan_id else query.is_("plan_id", "null")
        response = query.order("week_number").execute()
        return response.data

    def apply_update(self, update: Dict) -> Dict:
        """
        Write the bundled update through the apply_progression_update RPC.

        Args:
            update: Bundle of rows (see ProgressionRepository.apply_update)

        Returns:
            Stored rows as returned by the function

        Raises:
            PersistenceError: If the RPC call fails
        """
        try:
            response = self._client.rpc(
                "apply_progression_update",
                {"p_update": json.dumps(update)},
            ).execute()

            if response.data is None:
                raise PersistenceError("RPC returned no data")

            return response.data
        except Exception as e:
            if isinstance(e, PersistenceError):
                raise
            raise PersistenceError(f"Progression update failed: {e}") from e
