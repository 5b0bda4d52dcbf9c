"""
API package for the Apex Progression API.

This package contains:
- deps.py: FastAPI dependency providers for DI
- routers/: API route handlers
"""

# Re-export dependency providers for convenient access
from api.deps import (
    get_settings,
    get_supabase_client,
    get_supabase_client_required,
    get_progression_repo,
    get_plan_repo,
    get_session_repo,
    get_progression_service,
    get_plan_generator,
    get_current_user,
)

__all__ = [
    # Settings
    "get_settings",
    # Database
    "get_supabase_client",
    "get_supabase_client_required",
    # Repositories
    "get_progression_repo",
    "get_plan_repo",
    "get_session_repo",
    # Services
    "get_progression_service",
    "get_plan_generator",
    # Authentication
    "get_current_user",
]
