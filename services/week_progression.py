"""
Plan week and phase advancement.

After each finished workout the current week is checked against the plan's
weekly template. Once every workout day of the week has a completed
session the plan moves on:

- inside a milestone: current_week += 1
- at the end of a milestone with another one after it: current_week += 1
  and current_phase += 1
- at the end of the last milestone: the plan is archived as complete

Rest days (schedule entries without exercises) never count toward the week.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Set

from application.exceptions import InvalidStateError
from models.progression import (
    Milestone,
    NotificationKind,
    Plan,
    PlanDocument,
    PlanStatus,
    ProgressionNotification,
)

logger = logging.getLogger(__name__)


class ProgressionState(str, Enum):
    """Where the plan stands after evaluating the current week."""

    IN_PHASE = "in_phase"
    PHASE_BOUNDARY = "phase_boundary"
    PROGRAM_COMPLETE = "program_complete"


@dataclass
class WeekEvaluation:
    """Result of evaluating the current week."""

    state: ProgressionState
    plan: Plan
    week_completed: bool = False
    notification: Optional[ProgressionNotification] = None

    @property
    def advanced(self) -> bool:
        """True when the plan moved to a new week."""
        return self.week_completed and self.state != ProgressionState.PROGRAM_COMPLETE


# =============================================================================
# Schedule Helpers
# =============================================================================


def count_workout_days(document: PlanDocument) -> int:
    """Number of schedule entries with at least one exercise."""
    return len(document.workout_day_labels)


def completed_workout_days(document: PlanDocument, completed_labels: Iterable[str]) -> Set[str]:
    """Completed day labels that are real workout days."""
    return set(completed_labels) & set(document.workout_day_labels)


def locate_milestone(document: PlanDocument, week: int) -> Optional[int]:
    """Index of the milestone whose week range contains `week`, if any."""
    for index, milestone in enumerate(document.milestones):
        if milestone.week_range is not None and milestone.week_range.contains(week):
            return index
    return None


def milestone_title(milestone: Milestone, phase_number: int) -> str:
    return milestone.title or f"Phase {phase_number}"


def program_length_weeks(plan: Plan) -> int:
    """Total program length: the last milestone's end week."""
    ends = [m.week_range.end for m in plan.plan_json.milestones if m.week_range is not None]
    if ends:
        return max(ends)
    weekly = plan.plan_json.weekly_plan
    if weekly is not None and weekly.program_length_weeks:
        return weekly.program_length_weeks
    return plan.current_week


# =============================================================================
# Evaluation
# =============================================================================


def evaluate_week(plan: Plan, completed_labels: Iterable[str]) -> WeekEvaluation:
    """
    Decide whether the plan's current week is done and where it goes next.

    Args:
        plan: Active plan snapshot
        completed_labels: Day labels with a completed session in the current week

    Returns:
        WeekEvaluation with the (possibly) updated plan and notification

    Raises:
        InvalidStateError: If the plan has no weekly schedule
    """
    document = plan.plan_json
    if not document.schedule:
        raise InvalidStateError(f"Plan {plan.id} has no weekly schedule")

    if plan.status != PlanStatus.ACTIVE:
        logger.debug(f"Plan {plan.id} is {plan.status.value}; skipping week evaluation")
        return WeekEvaluation(state=ProgressionState.PROGRAM_COMPLETE, plan=plan)

    total = count_workout_days(document)
    if total == 0:
        logger.warning(f"Plan {plan.id} has no workout days; week cannot complete")
        return WeekEvaluation(state=ProgressionState.IN_PHASE, plan=plan)

    done = completed_workout_days(document, completed_labels)
    if len(done) < total:
        logger.debug(
            f"Plan {plan.id} week {plan.current_week}: {len(done)}/{total} workout days done"
        )
        return WeekEvaluation(state=ProgressionState.IN_PHASE, plan=plan)

    index = locate_milestone(document, plan.current_week)
    if index is None:
        return _advance_without_milestone(plan)

    milestone = document.milestones[index]
    title = milestone_title(milestone, plan.current_phase)

    if plan.current_week < milestone.week_range.end:
        new_week = plan.current_week + 1
        logger.info(f"Plan {plan.id}: week {plan.current_week} complete, advancing to {new_week}")
        return WeekEvaluation(
            state=ProgressionState.IN_PHASE,
            plan=plan.model_copy(update={"current_week": new_week}),
            week_completed=True,
            notification=ProgressionNotification(
                kind=NotificationKind.WEEK_COMPLETE,
                title=f"Week {plan.current_week} complete!",
                message=f"Week {new_week} of {title} starts now.",
                week_number=new_week,
                milestone_title=title,
            ),
        )

    if index + 1 < len(document.milestones):
        upcoming = document.milestones[index + 1]
        upcoming_title = milestone_title(upcoming, plan.current_phase + 1)
        new_week = plan.current_week + 1
        logger.info(
            f"Plan {plan.id}: phase {plan.current_phase} ({title}) complete, "
            f"starting {upcoming_title} at week {new_week}"
        )
        return WeekEvaluation(
            state=ProgressionState.PHASE_BOUNDARY,
            plan=plan.model_copy(
                update={"current_week": new_week, "current_phase": plan.current_phase + 1}
            ),
            week_completed=True,
            notification=ProgressionNotification(
                kind=NotificationKind.PHASE_COMPLETE,
                title=f"{title} complete!",
                message=f"Next up: {upcoming_title}.",
                week_number=new_week,
                milestone_title=title,
                next_milestone_title=upcoming_title,
            ),
        )

    length = program_length_weeks(plan)
    logger.info(f"Plan {plan.id}: program complete after {length} weeks, archiving")
    return WeekEvaluation(
        state=ProgressionState.PROGRAM_COMPLETE,
        plan=plan.model_copy(update={"status": PlanStatus.ARCHIVED}),
        week_completed=True,
        notification=ProgressionNotification(
            kind=NotificationKind.PROGRAM_COMPLETE,
            title="Program complete!",
            message=f"You finished all {length} weeks of your program.",
            week_number=plan.current_week,
            milestone_title=title,
            program_length_weeks=length,
        ),
    )


def _advance_without_milestone(plan: Plan) -> WeekEvaluation:
    """Advance the week when no milestone covers it; the phase number is kept."""
    label = f"Phase {plan.current_phase}"
    new_week = plan.current_week + 1
    logger.warning(
        f"Plan {plan.id}: week {plan.current_week} is outside every milestone; "
        f"advancing as {label}"
    )
    return WeekEvaluation(
        state=ProgressionState.IN_PHASE,
        plan=plan.model_copy(update={"current_week": new_week}),
        week_completed=True,
        notification=ProgressionNotification(
            kind=NotificationKind.WEEK_COMPLETE,
            title=f"Week {plan.current_week} complete!",
            message=f"Week {new_week} of {label} starts now.",
            week_number=new_week,
            milestone_title=label,
        ),
    )
