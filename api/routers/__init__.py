"""
Router package for the Apex Progression API.

This package contains all API routers organized by domain:
- health: Health check endpoint
- stats: Stats initialization and level progress
- badges: Earned and in-progress badges
- plans: Active plan lookup and plan generation
- sessions: Workout session lifecycle and completion
- progress: Weekly progress history
"""

from api.routers.health import router as health_router
from api.routers.stats import router as stats_router
from api.routers.badges import router as badges_router
from api.routers.plans import router as plans_router
from api.routers.sessions import router as sessions_router
from api.routers.progress import router as progress_router

__all__ = [
    "health_router",
    "stats_router",
    "badges_router",
    "plans_router",
    "sessions_router",
    "progress_router",
]
