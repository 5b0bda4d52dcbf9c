"""
Fake Repository Implementations for Testing.

This package provides in-memory fake implementations of the repository
ports for fast, isolated testing. No database or external dependencies
required.

Features:
- All fakes implement the same Protocol interfaces as real implementations
- Supports seeding with test data
- Supports reset() for test isolation
- Factory function wiring the three fakes to shared storage

Usage:
    from tests.fakes import create_repos

    progression, plans, sessions = create_repos()
    plans.seed([{"id": "p1", "user_id": "user1", "status": "active", ...}])
"""
from typing import Tuple

from tests.fakes.plan_repository import FakePlanRepository
from tests.fakes.session_repository import FakeSessionRepository
from tests.fakes.progression_repository import FakeProgressionRepository


def create_repos() -> Tuple[FakeProgressionRepository, FakePlanRepository, FakeSessionRepository]:
    """
    Create the three fakes with shared storage.

    Returns:
        (progression repo, plan repo, session repo)
    """
    plans = FakePlanRepository()
    sessions = FakeSessionRepository()
    return FakeProgressionRepository(plans, sessions), plans, sessions


__all__ = [
    "FakePlanRepository",
    "FakeSessionRepository",
    "FakeProgressionRepository",
    "create_repos",
]
