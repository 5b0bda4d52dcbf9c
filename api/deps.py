"""
FastAPI Dependency Providers for the Apex Progression API.

This module provides FastAPI dependency injection functions that return
interface types (Protocols) rather than concrete implementations, so
routers never depend on Supabase directly and tests can swap in fakes.

Architecture:
- Settings and Supabase client are cached per-process (lru_cache)
- Repository and service providers create new instances per-request
- Auth provider wraps backend.auth

Usage in routers:
    from api.deps import get_current_user, get_progression_service
    from services.progression_service import ProgressionService

    @router.get("/stats")
    def read_stats(
        user_id: str = Depends(get_current_user),
        service: ProgressionService = Depends(get_progression_service),
    ):
        return service.get_stats(user_id)

Testing:
    # Override dependencies in tests
    app.dependency_overrides[get_progression_repo] = lambda: FakeProgressionRepository()
"""

from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header, HTTPException
from supabase import Client, create_client

# Protocol types (interfaces)
from application.ports import (
    PlanRepository,
    ProgressionRepository,
    SessionRepository,
)

# Concrete implementations
from infrastructure import (
    SupabasePlanRepository,
    SupabaseProgressionRepository,
    SupabaseSessionRepository,
)

from backend.settings import Settings, get_settings as _get_settings
from backend.auth import get_current_user as _get_current_user
from services.plan_generator import PlanGenerator
from services.progression_service import ProgressionService


# =============================================================================
# Settings Provider
# =============================================================================


def get_settings() -> Settings:
    """
    Get application settings.

    Returns:
        Settings: Cached settings instance from backend.settings
    """
    return _get_settings()


# =============================================================================
# Supabase Client Provider
# =============================================================================


@lru_cache
def get_supabase_client() -> Optional[Client]:
    """
    Get Supabase client instance (cached).

    Returns:
        Client: Supabase client instance, or None if not configured
    """
    settings = _get_settings()

    if not settings.supabase_url or not settings.supabase_key:
        return None

    return create_client(settings.supabase_url, settings.supabase_key)


def get_supabase_client_required() -> Client:
    """
    Get Supabase client instance, raising if not configured.

    Raises:
        HTTPException: 503 if Supabase is not configured
    """
    client = get_supabase_client()
    if client is None:
        raise HTTPException(
            status_code=503,
            detail="Database not available. Supabase credentials not configured.",
        )
    return client


# =============================================================================
# Repository Providers
# =============================================================================


def get_progression_repo(
    client: Client = Depends(get_supabase_client_required),
) -> ProgressionRepository:
    """Stats, badges and week progress, plus the bundled progression write."""
    return SupabaseProgressionRepository(client)


def get_plan_repo(
    client: Client = Depends(get_supabase_client_required),
) -> PlanRepository:
    return SupabasePlanRepository(client)


def get_session_repo(
    client: Client = Depends(get_supabase_client_required),
) -> SessionRepository:
    return SupabaseSessionRepository(client)


# =============================================================================
# Service Providers
# =============================================================================


def get_progression_service(
    progression_repo: ProgressionRepository = Depends(get_progression_repo),
    plan_repo: PlanRepository = Depends(get_plan_repo),
    session_repo: SessionRepository = Depends(get_session_repo),
) -> ProgressionService:
    """
    Get ProgressionService with injected repositories.

    Args:
        progression_repo: Progression repository (injected)
        plan_repo: Plan repository (injected)
        session_repo: Session repository (injected)

    Returns:
        ProgressionService: Service owning all progression reads and writes
    """
    return ProgressionService(progression_repo, plan_repo, session_repo)


def get_plan_generator(
    settings: Settings = Depends(get_settings),
) -> PlanGenerator:
    """
    Get the Anthropic-backed plan generator.

    Raises:
        HTTPException: 503 if no Anthropic API key is configured
    """
    if not settings.anthropic_api_key:
        raise HTTPException(
            status_code=503,
            detail="Plan generation not available. ANTHROPIC_API_KEY not configured.",
        )
    return PlanGenerator(
        api_key=settings.anthropic_api_key,
        model=settings.plan_model,
        max_tokens=settings.plan_max_tokens,
    )


# =============================================================================
# Authentication Providers
# =============================================================================


async def get_current_user(
    authorization: Optional[str] = Header(None),
) -> str:
    """
    Get the current authenticated user ID.

    Wraps backend.auth.get_current_user for dependency injection.

    Raises:
        HTTPException: 401 if authentication fails
    """
    return await _get_current_user(authorization=authorization)


# =============================================================================
# Exports
# =============================================================================

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
