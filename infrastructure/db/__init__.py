"""
Database infrastructure package.
"""

from infrastructure.db.plan_repository import SupabasePlanRepository
from infrastructure.db.progression_repository import SupabaseProgressionRepository
from infrastructure.db.session_repository import SupabaseSessionRepository

__all__ = [
    "SupabasePlanRepository",
    "SupabaseProgressionRepository",
    "SupabaseSessionRepository",
]
