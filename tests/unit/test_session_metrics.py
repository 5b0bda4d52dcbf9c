"""
Unit tests for the workout session lifecycle and derived metrics.
"""

from datetime import datetime, timedelta, timezone

import pytest

from application.exceptions import InvalidStateError, SessionStateError
from models.progression import PlanStatus, SessionStatus
from services.session_metrics import (
    active_seconds,
    completion_percentage,
    estimate_calories,
    finish_session,
    pause_session,
    resume_session,
    start_session,
)

pytestmark = pytest.mark.unit

START = datetime(2025, 3, 3, 18, 0, tzinfo=timezone.utc)


class TestDerivedMetrics:
    @pytest.mark.parametrize("completed,total,expected", [
        (0, 5, 0),
        (5, 5, 100),
        (1, 3, 33),
        (2, 3, 66),
        (0, 0, 0),
        (3, 0, 0),
    ])
    def test_completion_percentage(self, completed, total, expected):
        assert completion_percentage(completed, total) == expected

    def test_completion_percentage_clamps(self):
        assert completion_percentage(7, 5) == 100
        assert completion_percentage(-1, 5) == 0

    def test_active_seconds_subtracts_pauses(self):
        assert active_seconds(START, START + timedelta(minutes=50), paused_seconds=600) == 2400

    def test_active_seconds_never_negative(self):
        assert active_seconds(START, START - timedelta(minutes=1)) == 0

    def test_calories(self):
        assert estimate_calories(45) == 225


class TestStartSession:
    def test_starts_in_current_week(self, make_plan):
        plan = make_plan(current_week=3)
        session = start_session("user-1", plan, "Wednesday", START)

        assert session.status == SessionStatus.IN_PROGRESS
        assert session.week_number == 3
        assert session.total_exercises == 3
        assert session.plan_id == plan.id
        assert session.started_at == START

    @pytest.mark.parametrize("day", ["Tuesday", "Sunday"])
    def test_rest_day_raises(self, make_plan, day):
        with pytest.raises(InvalidStateError, match="rest day"):
            start_session("user-1", make_plan(), day, START)

    def test_unknown_day_raises(self, make_plan):
        with pytest.raises(InvalidStateError):
            start_session("user-1", make_plan(), "Funday", START)

    def test_archived_plan_raises(self, make_plan):
        with pytest.raises(InvalidStateError):
            start_session("user-1", make_plan(status=PlanStatus.ARCHIVED), "Monday", START)


class TestLifecycle:
    @pytest.fixture
    def session(self, make_plan):
        return start_session("user-1", make_plan(), "Monday", START)

    def test_pause_and_resume_accumulates(self, session):
        paused = pause_session(session, START + timedelta(minutes=10))
        assert paused.status == SessionStatus.PAUSED

        resumed = resume_session(paused, START + timedelta(minutes=15))
        assert resumed.status == SessionStatus.IN_PROGRESS
        assert resumed.paused_at is None
        assert resumed.paused_seconds == 300

    def test_pause_twice_raises(self, session):
        paused = pause_session(session, START)
        with pytest.raises(SessionStateError):
            pause_session(paused, START)

    def test_resume_running_session_raises(self, session):
        with pytest.raises(SessionStateError):
            resume_session(session, START)

    def test_finish_derives_metrics(self, session):
        paused = pause_session(session, START + timedelta(minutes=20))
        resumed = resume_session(paused, START + timedelta(minutes=30))
        finished = finish_session(resumed, 1, START + timedelta(minutes=45, seconds=59))

        assert finished.status == SessionStatus.COMPLETED
        assert finished.completed_exercises == 1
        assert finished.completion_percentage == 50
        assert finished.total_duration_minutes == 35
        assert finished.estimated_calories_burned == 175

    def test_finish_while_paused_closes_pause(self, session):
        paused = pause_session(session, START + timedelta(minutes=30))
        finished = finish_session(paused, 2, START + timedelta(minutes=40))

        assert finished.paused_seconds == 600
        assert finished.paused_at is None
        assert finished.total_duration_minutes == 30

    def test_finish_clamps_completed_count(self, session):
        finished = finish_session(session, 9, START + timedelta(minutes=5))
        assert finished.completed_exercises == 2
        assert finished.completion_percentage == 100

    def test_finish_twice_raises(self, session):
        finished = finish_session(session, 2, START + timedelta(minutes=5))
        with pytest.raises(SessionStateError):
            finish_session(finished, 2, START + timedelta(minutes=6))

    def test_session_state_error_is_invalid_state(self):
        assert issubclass(SessionStateError, InvalidStateError)
