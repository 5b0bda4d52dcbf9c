"""
Progression engine.

Pure computation over state snapshots: no I/O. Each operation takes the
current UserStats / Plan / WeekProgress / Badge snapshots plus an event and
returns the new snapshots the caller must persist together:

- initialize_stats: starting XP, starter badge and week 1 progress
- finish_workout: workout XP, streaks, badge progress, weekly percent-better,
  and week/phase advancement

total_xp and level are always returned together; level is never set on
its own.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from math import floor
from typing import Iterable, List, Optional, Sequence, Tuple

from application.exceptions import InvalidStateError
from core.constants import (
    DAYS_PER_WEEK,
    DEFAULT_STEP_GOAL_DAYS,
    DEFAULT_WORKOUTS_PLANNED,
    STARTING_XP,
    WORKOUT_XP_RATE,
)
from models.progression import (
    Badge,
    Plan,
    PlanStatus,
    ProgressionEvent,
    ProgressionNotification,
    UserStats,
    WeekProgress,
    WorkoutSession,
)
from services.badge_engine import BadgeEngine
from services.percent_better import WeekScorer, consistency_score, summarize, x_percent_better
from services.session_metrics import finish_session
from services.week_progression import ProgressionState, count_workout_days, evaluate_week
from services.xp_curve import add_xp, level_for_xp

logger = logging.getLogger(__name__)


def workout_xp(completion_percentage: int) -> int:
    """XP for a finished workout: floor(percentage * 0.5), at most 50."""
    percentage = min(max(completion_percentage, 0), 100)
    return floor(percentage * WORKOUT_XP_RATE)


def next_streak(
    last_workout_date: Optional[date],
    current_streak: int,
    today: date,
) -> Tuple[int, bool]:
    """
    Streak length after a workout on `today`.

    Returns:
        (new streak length, whether the streak was extended to a new day)
    """
    if last_workout_date == today:
        return max(current_streak, 1), False
    if last_workout_date is not None and last_workout_date == today - timedelta(days=1):
        return current_streak + 1, True
    return 1, False


# =============================================================================
# Results
# =============================================================================


@dataclass
class InitializationResult:
    """Snapshots produced by stats initialization."""

    stats: UserStats
    created: bool
    badges: List[Badge] = field(default_factory=list)
    week_progress: Optional[WeekProgress] = None
    xp_granted: int = 0


@dataclass
class ProgressionOutcome:
    """Everything a finished workout changes, to be written as one unit."""

    stats: UserStats
    session: WorkoutSession
    plan: Plan
    week_progress: WeekProgress
    state: ProgressionState
    workout_xp: int
    xp_granted: int
    previous_level: int
    new_week_progress: Optional[WeekProgress] = None
    badges: List[Badge] = field(default_factory=list)
    newly_earned: List[Badge] = field(default_factory=list)
    notification: Optional[ProgressionNotification] = None

    @property
    def leveled_up(self) -> bool:
        return self.stats.level > self.previous_level


# =============================================================================
# Engine
# =============================================================================


class ProgressionEngine:
    """
    Turns progression events into new state snapshots.

    The badge catalog and the weekly scoring function are injectable so
    either can be replaced without touching the engine.
    """

    def __init__(
        self,
        badge_engine: Optional[BadgeEngine] = None,
        scorer: WeekScorer = consistency_score,
    ):
        self._badges = badge_engine or BadgeEngine()
        self._scorer = scorer

    # -------------------------------------------------------------------------
    # XP
    # -------------------------------------------------------------------------

    def apply_xp(self, stats: UserStats, amount: int) -> UserStats:
        """
        Add XP and recompute level in the same snapshot.

        Raises:
            ArithmeticBoundaryError: If amount is negative
        """
        total = add_xp(stats.total_xp, amount)
        return stats.model_copy(update={"total_xp": total, "level": level_for_xp(total)})

    # -------------------------------------------------------------------------
    # Initialization
    # -------------------------------------------------------------------------

    def initialize_stats(
        self,
        user_id: str,
        existing_stats: Optional[UserStats],
        plan: Optional[Plan],
        existing_badges: Sequence[Badge],
        now: datetime,
    ) -> InitializationResult:
        """
        Create a user's stats with the starting XP grant and starter badge.

        A no-op returning the existing stats when the user is already
        initialized.

        Args:
            user_id: The user's ID
            existing_stats: Current stats, if any
            plan: Active plan, used for the start date and week 1 target
            existing_badges: Badges the user already holds
            now: Current time

        Returns:
            InitializationResult; `created` is False for the no-op case
        """
        if existing_stats is not None:
            logger.debug(f"Stats already initialized for {user_id}")
            return InitializationResult(stats=existing_stats, created=False)

        start_date = plan.created_at.date() if plan and plan.created_at else now.date()
        stats = UserStats(
            user_id=user_id,
            plan_start_date=start_date,
            current_week=plan.current_week if plan else 1,
        )
        stats = self.apply_xp(stats, STARTING_XP)

        evaluation = self._badges.evaluate(
            user_id, [ProgressionEvent.ACCOUNT_INITIALIZED], existing_badges, now
        )
        stats = self.apply_xp(stats, evaluation.xp_awarded)

        # The plan may already be past week 1; align the row to that week's window
        week_start = start_date + timedelta(days=DAYS_PER_WEEK * (stats.current_week - 1))
        week = self.new_week_progress(user_id, plan, stats.current_week, week_start)
        stats = stats.model_copy(
            update={
                "total_badges_earned": stats.total_badges_earned + len(evaluation.newly_earned),
                "total_workouts_planned": week.workouts_planned,
            }
        )

        logger.info(f"Initialized stats for {user_id}: {stats.total_xp} XP, level {stats.level}")
        return InitializationResult(
            stats=stats,
            created=True,
            badges=evaluation.updated,
            week_progress=week,
            xp_granted=STARTING_XP + evaluation.xp_awarded,
        )

    def new_week_progress(
        self,
        user_id: str,
        plan: Optional[Plan],
        week_number: int,
        start_date: date,
        current_streak_days: int = 0,
    ) -> WeekProgress:
        """Build a fresh progress row for a 7-day week starting on `start_date`."""
        planned = count_workout_days(plan.plan_json) if plan else 0
        return WeekProgress(
            user_id=user_id,
            plan_id=plan.id if plan else None,
            week_number=week_number,
            week_start_date=start_date,
            week_end_date=start_date + timedelta(days=DAYS_PER_WEEK - 1),
            workouts_planned=planned or DEFAULT_WORKOUTS_PLANNED,
            current_streak_days=current_streak_days,
            step_goal_days_total=DEFAULT_STEP_GOAL_DAYS,
        )

    # -------------------------------------------------------------------------
    # Workout Completion
    # -------------------------------------------------------------------------

    def finish_workout(
        self,
        stats: UserStats,
        plan: Plan,
        session: WorkoutSession,
        completed_exercises: int,
        week_progress: WeekProgress,
        completed_labels: Iterable[str],
        badges: Sequence[Badge],
        now: datetime,
        previous_week: Optional[WeekProgress] = None,
        week_history: Sequence[WeekProgress] = (),
    ) -> ProgressionOutcome:
        """
        Apply a workout completion to every progression snapshot.

        Args:
            stats: User stats snapshot
            plan: Active plan snapshot
            session: The session being finished
            completed_exercises: Exercises the user ticked off
            week_progress: Progress row for the plan's current week
            completed_labels: Day labels already completed this week
            badges: The user's badge records
            now: Completion time
            previous_week: Progress row for the week before, if any
            week_history: All progress rows of the plan (for averages)

        Returns:
            ProgressionOutcome to persist as a single update

        Raises:
            InvalidStateError: If the week row does not match the plan's week
                or the plan has no schedule
        """
        if week_progress.week_number != plan.current_week:
            raise InvalidStateError(
                f"Week progress {week_progress.week_number} does not match "
                f"plan week {plan.current_week}"
            )

        finished = finish_session(session, completed_exercises, now)
        is_workout_day = finished.workout_day in plan.plan_json.workout_day_labels
        if not is_workout_day:
            logger.warning(
                f"Session {finished.id} is for rest day '{finished.workout_day}'; "
                f"closing it without progression"
            )
        earned_xp = workout_xp(finished.completion_percentage) if is_workout_day else 0
        finished = finished.model_copy(update={"xp_earned": earned_xp})
        in_current_week = is_workout_day and finished.week_number == plan.current_week

        streak, extended = stats.current_streak_days, False
        if is_workout_day:
            today = now.date()
            streak, extended = next_streak(stats.last_workout_date, stats.current_streak_days, today)
            stats = stats.model_copy(
                update={
                    "total_workouts_completed": stats.total_workouts_completed + 1,
                    "last_workout_date": today,
                    "current_streak_days": streak,
                    "longest_streak_days": max(stats.longest_streak_days, streak),
                }
            )

        week_update = {"current_streak_days": streak}
        if in_current_week:
            week_update["workouts_completed"] = week_progress.workouts_completed + 1
        week = week_progress.model_copy(update=week_update)

        labels = set(completed_labels)
        if in_current_week:
            labels.add(finished.workout_day)
        evaluation = evaluate_week(plan, labels)

        week, stats = self._update_percent_better(stats, week, previous_week, week_history)

        new_week = None
        if evaluation.advanced:
            new_week = self.new_week_progress(
                stats.user_id,
                evaluation.plan,
                evaluation.plan.current_week,
                week.week_end_date + timedelta(days=1),
                current_streak_days=streak,
            )
            stats = stats.model_copy(
                update={
                    "total_workouts_planned": stats.total_workouts_planned + new_week.workouts_planned
                }
            )
        if plan.status == PlanStatus.ACTIVE:
            stats = stats.model_copy(update={"current_week": evaluation.plan.current_week})

        events = (
            self._events_for(finished, extended, evaluation.state, evaluation.week_completed)
            if is_workout_day
            else []
        )
        badge_result = self._badges.evaluate(stats.user_id, events, badges, now)

        previous_level = stats.level
        stats = self.apply_xp(stats, earned_xp + badge_result.xp_awarded)
        stats = stats.model_copy(
            update={
                "total_badges_earned": stats.total_badges_earned + len(badge_result.newly_earned)
            }
        )

        logger.info(
            f"User {stats.user_id} finished '{finished.workout_day}' "
            f"({finished.completion_percentage}%): +{earned_xp} XP, "
            f"+{badge_result.xp_awarded} badge XP, level {stats.level}"
        )
        return ProgressionOutcome(
            stats=stats,
            session=finished,
            plan=evaluation.plan,
            week_progress=week,
            new_week_progress=new_week,
            state=evaluation.state,
            workout_xp=earned_xp,
            xp_granted=earned_xp + badge_result.xp_awarded,
            previous_level=previous_level,
            badges=badge_result.updated,
            newly_earned=badge_result.newly_earned,
            notification=evaluation.notification,
        )

    def _update_percent_better(
        self,
        stats: UserStats,
        week: WeekProgress,
        previous_week: Optional[WeekProgress],
        week_history: Sequence[WeekProgress],
    ) -> Tuple[WeekProgress, UserStats]:
        value = x_percent_better(week, previous_week, self._scorer)
        week = week.model_copy(update={"x_percent_better": value})

        history = [w for w in week_history if w.week_number != week.week_number] + [week]
        summary = summarize(value, history, best_so_far=stats.best_x_percent)
        stats = stats.model_copy(
            update={
                "current_x_percent": summary.current,
                "best_x_percent": summary.best,
                "average_x_percent": summary.average,
            }
        )
        return week, stats

    @staticmethod
    def _events_for(
        session: WorkoutSession,
        streak_extended: bool,
        state: ProgressionState,
        week_completed: bool,
    ) -> List[ProgressionEvent]:
        events = [ProgressionEvent.WORKOUT_COMPLETED]
        if session.total_exercises > 0 and session.completion_percentage == 100:
            events.append(ProgressionEvent.PERFECT_WORKOUT)
        if streak_extended:
            events.append(ProgressionEvent.STREAK_EXTENDED)
        if week_completed:
            events.append(ProgressionEvent.WEEK_COMPLETED)
            if state in (ProgressionState.PHASE_BOUNDARY, ProgressionState.PROGRAM_COMPLETE):
                events.append(ProgressionEvent.PHASE_COMPLETED)
            if state == ProgressionState.PROGRAM_COMPLETE:
                events.append(ProgressionEvent.PROGRAM_COMPLETED)
        return events
