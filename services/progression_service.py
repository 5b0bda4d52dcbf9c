"""
Progression service.

The thin layer that owns all I/O around the progression engine: it reads
snapshots through the repositories, hands them to the engine, and writes
the result back as one bundled update. Events for the same user are
serialized with a per-user lock so two finishes cannot interleave their
read-compute-write cycles inside one process; the database function
behind apply_update serializes across processes.
"""

import logging
from datetime import datetime, timezone
from threading import Lock
from typing import Callable, Dict, List, Optional
from uuid import uuid4
from weakref import WeakValueDictionary

from pydantic import BaseModel

from application.exceptions import InvalidStateError, NotFoundError
from application.ports import PlanRepository, ProgressionRepository, SessionRepository
from models.progression import (
    Badge,
    Plan,
    PlanDocument,
    PlanStatus,
    UserStats,
    WeekProgress,
    WorkoutSession,
)
from services.progression_engine import (
    InitializationResult,
    ProgressionEngine,
    ProgressionOutcome,
)
from services.session_metrics import pause_session, resume_session, start_session

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _row(model: Optional[BaseModel]) -> Optional[Dict]:
    """Serialize a model for storage; unset ids are left to the database."""
    if model is None:
        return None
    data = model.model_dump(mode="json")
    if data.get("id") is None:
        data.pop("id", None)
    return data


class UserLockRegistry:
    """
    Hands out one lock per user ID.

    Entries are weak: a lock is dropped once no caller holds a reference to it.
    """

    def __init__(self):
        self._locks: "WeakValueDictionary[str, Lock]" = WeakValueDictionary()
        self._guard = Lock()

    def get(self, user_id: str) -> Lock:
        with self._guard:
            lock = self._locks.get(user_id)
            if lock is None:
                lock = self._locks[user_id] = Lock()
            return lock

    def __len__(self) -> int:
        return len(self._locks)


# Shared across service instances, which are created per request
_USER_LOCKS = UserLockRegistry()


class ProgressionService:
    """
    Coordinates repositories and the progression engine.

    Every method that changes state runs under the user's lock and issues
    exactly one ProgressionRepository.apply_update call (session pause and
    resume, which touch only the session row, use the session repository).
    """

    def __init__(
        self,
        progression_repo: ProgressionRepository,
        plan_repo: PlanRepository,
        session_repo: SessionRepository,
        engine: Optional[ProgressionEngine] = None,
        clock: Callable[[], datetime] = _utcnow,
        locks: Optional[UserLockRegistry] = None,
    ):
        self._progression = progression_repo
        self._plans = plan_repo
        self._sessions = session_repo
        self._engine = engine or ProgressionEngine()
        self._clock = clock
        self._locks = locks or _USER_LOCKS

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get_stats(self, user_id: str) -> UserStats:
        """
        Raises:
            NotFoundError: If the user has not been initialized
        """
        row = self._progression.get_stats(user_id)
        if row is None:
            raise NotFoundError(f"Stats not initialized for user {user_id}")
        return UserStats.model_validate(row)

    def get_badges(self, user_id: str) -> List[Badge]:
        return [Badge.model_validate(row) for row in self._progression.get_badges(user_id)]

    def get_active_plan(self, user_id: str) -> Plan:
        """
        Raises:
            NotFoundError: If the user has no active plan
        """
        plan = self._find_active_plan(user_id)
        if plan is None:
            raise NotFoundError(f"No active plan for user {user_id}")
        return plan

    def list_weeks(self, user_id: str) -> List[WeekProgress]:
        """Week progress rows of the active plan (or plan-less rows if none)."""
        plan = self._find_active_plan(user_id)
        rows = self._progression.list_week_progress(user_id, plan.id if plan else None)
        return [WeekProgress.model_validate(row) for row in rows]

    # -------------------------------------------------------------------------
    # Initialization
    # -------------------------------------------------------------------------

    def initialize_stats(self, user_id: str) -> InitializationResult:
        """
        Create the user's stats, starter badge and week 1 progress.

        Idempotent: an initialized user gets their existing stats back and
        nothing is written.
        """
        with self._locks.get(user_id):
            existing = self._progression.get_stats(user_id)
            plan = self._find_active_plan(user_id)
            result = self._engine.initialize_stats(
                user_id=user_id,
                existing_stats=UserStats.model_validate(existing) if existing else None,
                plan=plan,
                existing_badges=self.get_badges(user_id),
                now=self._clock(),
            )
            if not result.created:
                return result

            week = result.week_progress
            if week is not None and self._progression.get_week_progress(
                user_id, week.plan_id, week.week_number
            ):
                result.week_progress = week = None

            self._progression.apply_update({
                "user_id": user_id,
                "stats": _row(result.stats),
                "badges": [_row(b) for b in result.badges],
                "plans": [],
                "week_progress": [_row(week)] if week else [],
                "session": None,
            })
            return result

    # -------------------------------------------------------------------------
    # Plans
    # -------------------------------------------------------------------------

    def activate_plan(self, user_id: str, document: PlanDocument) -> Plan:
        """
        Make a newly generated plan the user's only active plan.

        The previous active plan is archived, the new plan gets the next
        version number and starts at week 1 / phase 1 with a fresh week 1
        progress row.
        """
        with self._locks.get(user_id):
            now = self._clock()
            existing = [Plan.model_validate(row) for row in self._plans.get_by_user(user_id)]
            version = max((p.version for p in existing), default=0) + 1

            plan = Plan(
                id=str(uuid4()),
                user_id=user_id,
                status=PlanStatus.ACTIVE,
                version=version,
                current_week=1,
                current_phase=1,
                plan_json=document,
                created_at=now,
                updated_at=now,
            )
            archived = [
                p.model_copy(update={"status": PlanStatus.ARCHIVED, "updated_at": now})
                for p in existing
                if p.status == PlanStatus.ACTIVE
            ]

            stats_row = self._progression.get_stats(user_id)
            stats = None
            streak = 0
            if stats_row is not None:
                stats = UserStats.model_validate(stats_row)
                streak = stats.current_streak_days
            week = self._engine.new_week_progress(user_id, plan, 1, now.date(), streak)
            if stats is not None:
                stats = stats.model_copy(
                    update={
                        "current_week": 1,
                        "plan_start_date": now.date(),
                        "total_workouts_planned": stats.total_workouts_planned + week.workouts_planned,
                    }
                )

            self._progression.apply_update({
                "user_id": user_id,
                "stats": _row(stats),
                "badges": [],
                "plans": [_row(p) for p in archived] + [_row(plan)],
                "week_progress": [_row(week)],
                "session": None,
            })
            logger.info(
                f"Activated plan v{version} for {user_id} (archived {len(archived)} previous)"
            )
            return plan

    # -------------------------------------------------------------------------
    # Sessions
    # -------------------------------------------------------------------------

    def start_workout(self, user_id: str, day_label: str) -> WorkoutSession:
        """
        Start a session for a day of the active plan's current week.

        Raises:
            NotFoundError: If the user has no active plan
            InvalidStateError: If the day is not in the plan's schedule
        """
        plan = self.get_active_plan(user_id)
        session = start_session(user_id, plan, day_label, self._clock())
        created = self._sessions.create(_row(session))
        logger.info(f"User {user_id} started '{day_label}' (week {plan.current_week})")
        return WorkoutSession.model_validate(created)

    def pause_workout(self, user_id: str, session_id: str) -> WorkoutSession:
        session = pause_session(self._get_session(user_id, session_id), self._clock())
        return self._save_session(session)

    def resume_workout(self, user_id: str, session_id: str) -> WorkoutSession:
        session = resume_session(self._get_session(user_id, session_id), self._clock())
        return self._save_session(session)

    def finish_workout(
        self,
        user_id: str,
        session_id: str,
        completed_exercises: int,
    ) -> ProgressionOutcome:
        """
        Finish a session and apply every progression consequence.

        Raises:
            NotFoundError: If the session or its plan does not exist
            InvalidStateError: If stats are not initialized or the session
                is already completed
        """
        with self._locks.get(user_id):
            session = self._get_session(user_id, session_id)

            stats_row = self._progression.get_stats(user_id)
            if stats_row is None:
                raise InvalidStateError(f"Stats not initialized for user {user_id}")
            stats = UserStats.model_validate(stats_row)

            plan_row = self._plans.get_by_id(session.plan_id) if session.plan_id else None
            if plan_row is None:
                raise NotFoundError(f"Plan {session.plan_id} not found")
            plan = Plan.model_validate(plan_row)

            now = self._clock()
            week = self._load_week(user_id, plan, plan.current_week)
            if week is None:
                logger.warning(
                    f"No progress row for plan {plan.id} week {plan.current_week}; creating one"
                )
                week = self._engine.new_week_progress(
                    user_id, plan, plan.current_week, now.date(), stats.current_streak_days
                )
            previous = (
                self._load_week(user_id, plan, plan.current_week - 1)
                if plan.current_week > 1
                else None
            )
            history = [
                WeekProgress.model_validate(row)
                for row in self._progression.list_week_progress(user_id, plan.id)
            ]

            outcome = self._engine.finish_workout(
                stats=stats,
                plan=plan,
                session=session,
                completed_exercises=completed_exercises,
                week_progress=week,
                completed_labels=self._sessions.completed_day_labels(
                    user_id, plan.id, plan.current_week
                ),
                badges=self.get_badges(user_id),
                now=now,
                previous_week=previous,
                week_history=history,
            )

            weeks = [outcome.week_progress]
            if outcome.new_week_progress is not None:
                weeks.append(outcome.new_week_progress)
            plan_changed = outcome.plan != plan
            self._progression.apply_update({
                "user_id": user_id,
                "stats": _row(outcome.stats),
                "badges": [_row(b) for b in outcome.badges],
                "plans": [_row(outcome.plan.model_copy(update={"updated_at": now}))]
                if plan_changed
                else [],
                "week_progress": [_row(w) for w in weeks],
                "session": _row(outcome.session),
            })
            return outcome

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _find_active_plan(self, user_id: str) -> Optional[Plan]:
        row = self._plans.get_active(user_id)
        return Plan.model_validate(row) if row else None

    def _load_week(self, user_id: str, plan: Plan, week_number: int) -> Optional[WeekProgress]:
        row = self._progression.get_week_progress(user_id, plan.id, week_number)
        return WeekProgress.model_validate(row) if row else None

    def _get_session(self, user_id: str, session_id: str) -> WorkoutSession:
        """Load a session, hiding other users' sessions as not found."""
        row = self._sessions.get(session_id)
        if row is None or row.get("user_id") != user_id:
            raise NotFoundError(f"Session {session_id} not found")
        return WorkoutSession.model_validate(row)

    def _save_session(self, session: WorkoutSession) -> WorkoutSession:
        data = _row(session)
        data.pop("id", None)
        return WorkoutSession.model_validate(self._sessions.update(session.id, data))
