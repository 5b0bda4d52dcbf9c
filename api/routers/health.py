"""
Health check router.

This router provides health check endpoints for monitoring and load balancers.
"""

from fastapi import APIRouter, Depends

from backend.settings import Settings, get_settings

router = APIRouter(
    tags=["Health"],
)


@router.get("/health")
def health(settings: Settings = Depends(get_settings)):
    """
    Simple liveness endpoint for the progression API.

    Returns:
        dict: Status indicator for health checks
    """
    return {
        "status": "ok",
        "service": "progression-api",
        "environment": settings.environment,
    }
