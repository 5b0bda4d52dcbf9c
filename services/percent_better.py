"""
Weekly "percent better" comparison.

A week's performance is reduced to a single score by a pluggable scoring
function; x_percent_better is the signed change of that score against the
immediately preceding week. Week 1 has nothing to compare to and is 0.
"""

from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from models.progression import WeekProgress

WeekScorer = Callable[[WeekProgress], float]

# Weights for the default consistency score
WORKOUT_WEIGHT = 0.7
STEP_WEIGHT = 0.3


def consistency_score(week: WeekProgress) -> float:
    """
    Default week score: workout adherence blended with step-goal adherence.

    Overcompleting workouts raises the score past 100.
    """
    workout_ratio = (
        week.workouts_completed / week.workouts_planned if week.workouts_planned else 0.0
    )
    step_ratio = (
        week.step_goal_days_hit / week.step_goal_days_total
        if week.step_goal_days_total
        else 0.0
    )
    return (workout_ratio * WORKOUT_WEIGHT + step_ratio * STEP_WEIGHT) * 100


def x_percent_better(
    current: WeekProgress,
    previous: Optional[WeekProgress],
    scorer: WeekScorer = consistency_score,
) -> float:
    """
    Signed percentage change of this week's score over last week's.

    Args:
        current: This week's progress
        previous: Last week's progress, None for week 1
        scorer: Scoring function

    Returns:
        Percentage rounded to one decimal; 0.0 without a previous week
    """
    if previous is None or current.week_number <= 1:
        return 0.0

    current_score = scorer(current)
    previous_score = scorer(previous)
    if previous_score <= 0:
        return 0.0 if current_score <= 0 else 100.0
    return round((current_score - previous_score) / previous_score * 100, 1)


@dataclass
class PercentSummary:
    """Aggregates written back to user stats."""

    current: float
    best: float
    average: float


def summarize(
    current_value: float,
    weeks: Iterable[WeekProgress],
    best_so_far: float = 0.0,
) -> PercentSummary:
    """
    Roll weekly values up into current/best/average.

    The average only covers weeks that had a previous week to compare to.

    Args:
        current_value: This week's x_percent_better
        weeks: Week history including the current week with its new value
        best_so_far: Previously stored best value
    """
    compared = [w.x_percent_better for w in weeks if w.week_number > 1]
    average = round(sum(compared) / len(compared), 1) if compared else 0.0
    return PercentSummary(
        current=current_value,
        best=max(best_so_far, current_value),
        average=average,
    )
