"""
Infrastructure layer package for the progression API.

This package contains concrete implementations of the port interfaces.
"""

from infrastructure.db import (
    SupabasePlanRepository,
    SupabaseProgressionRepository,
    SupabaseSessionRepository,
)

__all__ = [
    "SupabasePlanRepository",
    "SupabaseProgressionRepository",
    "SupabaseSessionRepository",
]
