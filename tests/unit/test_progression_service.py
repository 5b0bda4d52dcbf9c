"""
Unit tests for ProgressionService using in-memory fake repositories.
"""

import gc
from datetime import timedelta
from threading import Thread

import pytest

from application.exceptions import (
    InvalidStateError,
    NotFoundError,
    PersistenceError,
    SessionStateError,
)
from models.progression import PlanStatus, SessionStatus
from services.progression_service import ProgressionService, UserLockRegistry
from services.week_progression import ProgressionState
from tests.conftest import OTHER_USER_ID, TEST_USER_ID

pytestmark = pytest.mark.unit


@pytest.fixture
def seeded(service, plan_repo, plan_row):
    """Service with an active week-1 plan and initialized stats."""
    plan_repo.seed([plan_row])
    service.initialize_stats(TEST_USER_ID)
    return service


def run_workout(service, clock, day, completed, minutes=30):
    session = service.start_workout(TEST_USER_ID, day)
    clock.advance(minutes=minutes)
    return service.finish_workout(TEST_USER_ID, session.id, completed)


class TestInitializeStats:
    def test_creates_stats_badge_and_week(self, service, plan_repo, plan_row, progression_repo):
        plan_repo.seed([plan_row])
        result = service.initialize_stats(TEST_USER_ID)

        assert result.created is True
        assert progression_repo.count_updates() == 1
        stats = service.get_stats(TEST_USER_ID)
        assert stats.total_xp == 200
        assert stats.level == 2
        assert [b.badge_key for b in service.get_badges(TEST_USER_ID)] == ["journey_begins"]
        weeks = service.list_weeks(TEST_USER_ID)
        assert len(weeks) == 1
        assert weeks[0].plan_id == plan_row["id"]

    def test_second_call_is_noop(self, seeded, progression_repo):
        result = seeded.initialize_stats(TEST_USER_ID)

        assert result.created is False
        assert result.stats.total_xp == 200
        assert progression_repo.count_updates() == 1
        assert len(seeded.get_badges(TEST_USER_ID)) == 1

    def test_without_plan(self, service):
        result = service.initialize_stats(TEST_USER_ID)
        assert result.created is True
        assert result.week_progress.plan_id is None

    def test_get_stats_before_initialize(self, service):
        with pytest.raises(NotFoundError):
            service.get_stats(TEST_USER_ID)


class TestActivatePlan:
    def test_first_plan(self, service, plan_document):
        plan = service.activate_plan(TEST_USER_ID, plan_document)

        assert plan.version == 1
        assert plan.status == PlanStatus.ACTIVE
        assert plan.current_week == 1
        assert plan.current_phase == 1
        assert service.get_active_plan(TEST_USER_ID).id == plan.id
        assert len(service.list_weeks(TEST_USER_ID)) == 1

    def test_regenerating_archives_previous(self, seeded, plan_repo, plan_document, plan_row):
        new_plan = seeded.activate_plan(TEST_USER_ID, plan_document)

        assert new_plan.version == 2
        plans = {p["id"]: p for p in plan_repo.get_all()}
        assert plans[plan_row["id"]]["status"] == "archived"
        assert plans[new_plan.id]["status"] == "active"
        assert seeded.get_active_plan(TEST_USER_ID).id == new_plan.id

    def test_regenerating_resets_stats_week(self, seeded, plan_document):
        seeded.activate_plan(TEST_USER_ID, plan_document)

        stats = seeded.get_stats(TEST_USER_ID)
        assert stats.current_week == 1
        assert stats.total_xp == 200

    def test_no_active_plan(self, service):
        with pytest.raises(NotFoundError):
            service.get_active_plan(TEST_USER_ID)


class TestSessions:
    def test_start_pause_resume(self, seeded, clock):
        session = seeded.start_workout(TEST_USER_ID, "Monday")
        assert session.id
        assert session.status == SessionStatus.IN_PROGRESS

        clock.advance(minutes=5)
        paused = seeded.pause_workout(TEST_USER_ID, session.id)
        assert paused.status == SessionStatus.PAUSED

        clock.advance(minutes=3)
        resumed = seeded.resume_workout(TEST_USER_ID, session.id)
        assert resumed.status == SessionStatus.IN_PROGRESS
        assert resumed.paused_seconds == 180

    def test_other_users_session_not_found(self, seeded):
        session = seeded.start_workout(TEST_USER_ID, "Monday")
        with pytest.raises(NotFoundError):
            seeded.pause_workout(OTHER_USER_ID, session.id)

    def test_unknown_session(self, seeded):
        with pytest.raises(NotFoundError):
            seeded.finish_workout(TEST_USER_ID, "missing", 1)

    def test_start_without_plan(self, service):
        with pytest.raises(NotFoundError):
            service.start_workout(TEST_USER_ID, "Monday")

    def test_start_unknown_day(self, seeded):
        with pytest.raises(InvalidStateError):
            seeded.start_workout(TEST_USER_ID, "Someday")

    def test_start_rest_day_rejected(self, seeded, session_repo):
        with pytest.raises(InvalidStateError):
            seeded.start_workout(TEST_USER_ID, "Tuesday")
        assert session_repo.count() == 0


class TestFinishWorkout:
    def test_persists_everything_in_one_update(self, seeded, clock, progression_repo, session_repo):
        outcome = run_workout(seeded, clock, "Monday", 2)

        assert progression_repo.count_updates() == 2
        update = progression_repo.updates[-1]
        assert update["stats"]["total_xp"] == outcome.stats.total_xp
        assert update["session"]["status"] == "completed"
        assert {b["badge_key"] for b in update["badges"]} >= {"first_sweat"}
        assert update["plans"] == []

        stored = session_repo.get(outcome.session.id)
        assert stored["status"] == "completed"
        assert stored["xp_earned"] == 50
        assert seeded.get_stats(TEST_USER_ID).total_xp == 300

    def test_finish_twice_rejected(self, seeded, clock):
        outcome = run_workout(seeded, clock, "Monday", 2)
        with pytest.raises(SessionStateError):
            seeded.finish_workout(TEST_USER_ID, outcome.session.id, 2)

    def test_requires_initialized_stats(self, service, plan_repo, plan_row):
        plan_repo.seed([plan_row])
        session = service.start_workout(TEST_USER_ID, "Monday")
        with pytest.raises(InvalidStateError):
            service.finish_workout(TEST_USER_ID, session.id, 2)

    def test_full_week_advances_plan(self, seeded, clock, progression_repo):
        for day in ["Monday", "Wednesday", "Friday"]:
            outcome = run_workout(seeded, clock, day, 2)
            clock.advance(days=1)

        assert outcome.plan.current_week == 2
        plan = seeded.get_active_plan(TEST_USER_ID)
        assert plan.current_week == 2
        assert seeded.get_stats(TEST_USER_ID).current_week == 2

        weeks = seeded.list_weeks(TEST_USER_ID)
        assert [w.week_number for w in weeks] == [1, 2]
        assert weeks[0].workouts_completed == 3
        assert weeks[1].workouts_completed == 0
        assert weeks[1].week_start_date == weeks[0].week_end_date + timedelta(days=1)

    def test_repeating_a_day_does_not_complete_week(self, seeded, clock):
        run_workout(seeded, clock, "Monday", 2)
        outcome = run_workout(seeded, clock, "Monday", 2)

        assert outcome.state == ProgressionState.IN_PHASE
        assert outcome.week_progress.workouts_completed == 2
        assert seeded.get_active_plan(TEST_USER_ID).current_week == 1

    def test_stored_rest_day_session_earns_nothing(self, seeded, clock, session_repo, plan_row):
        session_repo.seed([{
            "id": "rest-1",
            "user_id": TEST_USER_ID,
            "plan_id": plan_row["id"],
            "workout_day": "Tuesday",
            "week_number": 1,
            "started_at": clock().isoformat(),
            "total_exercises": 0,
            "status": "in_progress",
        }])
        clock.advance(minutes=20)

        outcome = seeded.finish_workout(TEST_USER_ID, "rest-1", 0)

        assert outcome.session.status == SessionStatus.COMPLETED
        assert outcome.xp_granted == 0
        assert outcome.newly_earned == []
        assert outcome.week_progress.workouts_completed == 0
        stats = seeded.get_stats(TEST_USER_ID)
        assert stats.total_xp == 200
        assert stats.total_workouts_completed == 0
        assert stats.current_streak_days == 0
        assert stats.last_workout_date is None
        assert "first_sweat" not in {b.badge_key for b in seeded.get_badges(TEST_USER_ID)}

    def test_failed_write_changes_nothing(self, seeded, clock, progression_repo):
        session = seeded.start_workout(TEST_USER_ID, "Monday")
        progression_repo.fail_next_update = True

        with pytest.raises(PersistenceError):
            seeded.finish_workout(TEST_USER_ID, session.id, 2)

        assert seeded.get_stats(TEST_USER_ID).total_xp == 200
        retried = seeded.finish_workout(TEST_USER_ID, session.id, 2)
        assert retried.stats.total_xp == 300

    def test_concurrent_finishes_are_serialized(self, progression_repo, plan_repo, session_repo, plan_row, clock):
        plan_repo.seed([plan_row])
        locks = UserLockRegistry()
        make_service = lambda: ProgressionService(
            progression_repo, plan_repo, session_repo, clock=clock, locks=locks
        )
        make_service().initialize_stats(TEST_USER_ID)
        ids = [make_service().start_workout(TEST_USER_ID, day).id for day in ("Monday", "Wednesday")]

        threads = [
            Thread(target=make_service().finish_workout, args=(TEST_USER_ID, session_id, 2))
            for session_id in ids
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        stats = make_service().get_stats(TEST_USER_ID)
        assert stats.total_workouts_completed == 2
        week = make_service().list_weeks(TEST_USER_ID)[0]
        assert week.workouts_completed == 2


class TestUserLockRegistry:
    def test_same_user_same_lock(self):
        locks = UserLockRegistry()
        assert locks.get("a") is locks.get("a")
        assert locks.get("a") is not locks.get("b")

    def test_held_lock_is_shared(self):
        locks = UserLockRegistry()
        held = locks.get("a")
        with held:
            assert locks.get("a") is held
            assert len(locks) == 1

    def test_released_locks_are_dropped(self):
        locks = UserLockRegistry()
        for user_id in ["a", "b", "c"]:
            with locks.get(user_id):
                pass
        gc.collect()

        assert len(locks) == 0
