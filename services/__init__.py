"""
Progression services.

Pure engines (xp_curve, badge_engine, percent_better, session_metrics,
week_progression, progression_engine) plus the I/O-owning
ProgressionService and the LLM-backed PlanGenerator.
"""

from services.badge_engine import BadgeEngine, BadgeEvaluation
from services.plan_generator import GeneratedPlan, PlanGenerator
from services.progression_engine import (
    InitializationResult,
    ProgressionEngine,
    ProgressionOutcome,
)
from services.progression_service import ProgressionService
from services.week_progression import ProgressionState, WeekEvaluation, evaluate_week
from services.xp_curve import LevelProgress, level_for_xp, level_progress, xp_for_level

__all__ = [
    "BadgeEngine",
    "BadgeEvaluation",
    "GeneratedPlan",
    "PlanGenerator",
    "InitializationResult",
    "ProgressionEngine",
    "ProgressionOutcome",
    "ProgressionService",
    "ProgressionState",
    "WeekEvaluation",
    "evaluate_week",
    "LevelProgress",
    "level_for_xp",
    "level_progress",
    "xp_for_level",
]
