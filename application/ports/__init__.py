"""
Port interfaces (Protocols) for the progression API.

This package defines the interface contracts that the infrastructure
layer must implement. Using Protocols enables:
- Clean separation of concerns
- Easy testing with in-memory fakes
- Dependency inversion (depend on abstractions, not concretions)
"""

from application.ports.plan_repository import PlanRepository
from application.ports.progression_repository import ProgressionRepository
from application.ports.session_repository import SessionRepository

__all__ = [
    "PlanRepository",
    "ProgressionRepository",
    "SessionRepository",
]
