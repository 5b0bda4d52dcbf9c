"""
Supabase implementation of PlanRepository.

Queries the user_plans table. plan_json holds the generated document.
"""

from typing import Dict, List, Optional

from supabase import Client


class SupabasePlanRepository:
    """Supabase-backed plan repository implementation."""

    def __init__(self, client: Client):
        self._client = client

    def get_active(self, user_id: str) -> Optional[Dict]:
        """
        Get the user's active plan.

        Orders by version so a stray second active row resolves to the newest.
        """
        response = (
            self._client.table("user_plans")
            .select("*")
            .eq("user_id", user_id)
            .eq("status", "active")
            .order("version", desc=True)
            .limit(1)
            .execute()
        )
        return response.data[0] if response.data else None

    def get_by_id(self, plan_id: str) -> Optional[Dict]:
        response = (
            self._client.table("user_plans")
            .select("*")
            .eq("id", plan_id)
            .limit(1)
            .execute()
        )
        return response.data[0] if response.data else None

    def get_by_user(self, user_id: str) -> List[Dict]:
        response = (
            self._client.table("user_plans")
            .select("*")
            .eq("user_id", user_id)
            .order("version", desc=True)
            .execute()
        )
        return response.data
