"""
Pytest fixtures for progression-api tests.
"""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, Generator
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

# Ensure repo root is on sys.path
ROOT = Path(__file__).resolve().parents[1]
root_str = str(ROOT)
if root_str not in sys.path:
    sys.path.insert(0, root_str)

from backend.main import create_app
from backend.settings import Settings
from api.deps import (
    get_current_user,
    get_plan_generator,
    get_plan_repo,
    get_progression_repo,
    get_session_repo,
)
from models.progression import Plan, PlanDocument, PlanStatus
from services.plan_generator import PlanGenerator
from services.progression_service import ProgressionService, UserLockRegistry
from tests.fakes import create_repos


# ---------------------------------------------------------------------------
# Auth Mock
# ---------------------------------------------------------------------------

TEST_USER_ID = "test-user-123"
OTHER_USER_ID = "other-user-456"

PLAN_CREATED_AT = datetime(2025, 3, 3, 8, 0, tzinfo=timezone.utc)


async def mock_get_current_user() -> str:
    """Mock auth dependency that returns a test user."""
    return TEST_USER_ID


# ---------------------------------------------------------------------------
# Clock
# ---------------------------------------------------------------------------


class FakeClock:
    """Settable clock for deterministic timestamps."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(PLAN_CREATED_AT + timedelta(hours=2))


# ---------------------------------------------------------------------------
# Domain Fixtures - Plans
# ---------------------------------------------------------------------------


def _exercise(name: str, sets: int = 3, reps: str = "10") -> Dict[str, Any]:
    return {"exercise": name, "sets": sets, "reps": reps, "rest_seconds": 90}


@pytest.fixture
def plan_document_data() -> Dict[str, Any]:
    """
    A 12-week plan in three 4-week milestones with three workout days.

    Monday has 2 exercises, Wednesday 3, Friday 2; the rest are rest days.
    """
    return {
        "milestones": [
            {"week_range": {"start": 1, "end": 4}, "title": "Foundation", "focus": ["form"]},
            {"week_range": {"start": 5, "end": 8}, "title": "Build", "focus": ["volume"]},
            {"week_range": {"start": 9, "end": 12}, "title": "Peak", "focus": ["intensity"]},
        ],
        "weekly_plan": {
            "program_length_weeks": 12,
            "days_per_week": 3,
            "schedule": [
                {"day_label": "Monday", "workout": [_exercise("Squat"), _exercise("Bench Press")]},
                {"day_label": "Tuesday", "workout": []},
                {
                    "day_label": "Wednesday",
                    "workout": [_exercise("Deadlift", 3, "5"), _exercise("Row"), _exercise("Plank", 3, "45s")],
                },
                {"day_label": "Thursday", "workout": []},
                {"day_label": "Friday", "workout": [_exercise("Overhead Press"), _exercise("Pull-up")]},
                {"day_label": "Saturday", "workout": []},
                {"day_label": "Sunday"},
            ],
        },
        "nutrition": {"calorie_target_range": {"min": 2200, "max": 2400}},
    }


@pytest.fixture
def plan_document(plan_document_data) -> PlanDocument:
    return PlanDocument.model_validate(plan_document_data)


@pytest.fixture
def make_plan(plan_document):
    """Factory for Plan snapshots at a given week/phase."""

    def _make(
        current_week: int = 1,
        current_phase: int = 1,
        status: PlanStatus = PlanStatus.ACTIVE,
        document: PlanDocument = None,
        plan_id: str = "plan-1",
    ) -> Plan:
        return Plan(
            id=plan_id,
            user_id=TEST_USER_ID,
            status=status,
            version=1,
            current_week=current_week,
            current_phase=current_phase,
            plan_json=document or plan_document,
            created_at=PLAN_CREATED_AT,
            updated_at=PLAN_CREATED_AT,
        )

    return _make


@pytest.fixture
def plan_row(make_plan) -> Dict[str, Any]:
    """Active week-1 plan as stored in the database."""
    return make_plan().model_dump(mode="json")


# ---------------------------------------------------------------------------
# Repositories and Service
# ---------------------------------------------------------------------------


@pytest.fixture
def repos():
    """(progression, plans, sessions) fakes sharing storage."""
    return create_repos()


@pytest.fixture
def progression_repo(repos):
    return repos[0]


@pytest.fixture
def plan_repo(repos):
    return repos[1]


@pytest.fixture
def session_repo(repos):
    return repos[2]


@pytest.fixture
def service(progression_repo, plan_repo, session_repo, clock) -> ProgressionService:
    return ProgressionService(
        progression_repo,
        plan_repo,
        session_repo,
        clock=clock,
        locks=UserLockRegistry(),
    )


# ---------------------------------------------------------------------------
# LLM Mock
# ---------------------------------------------------------------------------


def make_llm_response(text: str) -> MagicMock:
    """Build a fake Anthropic Messages response with one text block."""
    block = MagicMock()
    block.text = text
    response = MagicMock()
    response.content = [block]
    return response


@pytest.fixture
def mock_anthropic() -> MagicMock:
    return MagicMock()


# ---------------------------------------------------------------------------
# Test App and Client
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Test settings with minimal configuration."""
    return Settings(
        environment="test",
        supabase_url="https://test.supabase.co",
        supabase_service_role_key="test-key",
        supabase_jwt_secret="test-jwt-secret",
        anthropic_api_key="test-anthropic-key",
    )


@pytest.fixture(scope="session")
def app(test_settings):
    """Create test application instance."""
    return create_app(settings=test_settings)


@pytest.fixture
def client(app, repos, mock_anthropic) -> Generator[TestClient, None, None]:
    """
    Per-test FastAPI TestClient backed by the in-memory fakes.
    Properly cleans up dependency overrides after each test.
    """
    progression, plans, sessions = repos
    app.dependency_overrides[get_current_user] = mock_get_current_user
    app.dependency_overrides[get_progression_repo] = lambda: progression
    app.dependency_overrides[get_plan_repo] = lambda: plans
    app.dependency_overrides[get_session_repo] = lambda: sessions
    app.dependency_overrides[get_plan_generator] = lambda: PlanGenerator(client=mock_anthropic)
    yield TestClient(app)
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Mock Environment Variables
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def mock_env_vars(monkeypatch):
    """Set mock environment variables for tests."""
    monkeypatch.setenv("SUPABASE_URL", "https://test.supabase.co")
    monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "test-supabase-key")
    monkeypatch.setenv("ENVIRONMENT", "test")
