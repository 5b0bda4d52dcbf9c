"""
XP and level curve.

The single place where XP is turned into levels. Level derivation,
grant computation, initialization and display all go through these
functions so the "XP to next level" figure and the progress percentage
always agree.

Curve: advancing from level L to L+1 costs floor(100 * L^1.5) XP.
"""

from dataclasses import dataclass
from math import isqrt

from application.exceptions import ArithmeticBoundaryError


# =============================================================================
# Curve
# =============================================================================


def xp_for_level(level: int) -> int:
    """
    XP required to advance from `level` to `level + 1`.

    floor(100 * L^1.5) == isqrt(10000 * L^3), which avoids float rounding.

    Args:
        level: Current level (>= 1)

    Returns:
        XP needed for the next level
    """
    if level < 1:
        raise ArithmeticBoundaryError(f"Level must be >= 1, got {level}")
    return isqrt(10000 * level ** 3)


def cumulative_xp(level: int) -> int:
    """
    Total XP needed to reach `level` from zero.

    Args:
        level: Target level (>= 1)

    Returns:
        Sum of xp_for_level(i) for i in 1..level-1
    """
    if level < 1:
        raise ArithmeticBoundaryError(f"Level must be >= 1, got {level}")
    return sum(xp_for_level(i) for i in range(1, level))


def level_for_xp(total_xp: int) -> int:
    """
    Highest level whose cumulative requirement does not exceed `total_xp`.

    Negative totals are treated as zero.

    Args:
        total_xp: Cumulative XP

    Returns:
        Level (>= 1)
    """
    remaining = max(0, total_xp)
    level = 1
    while remaining >= xp_for_level(level):
        remaining -= xp_for_level(level)
        level += 1
    return level


def add_xp(total_xp: int, amount: int) -> int:
    """
    Add a grant to a running total.

    Raises:
        ArithmeticBoundaryError: If the grant is negative
    """
    if amount < 0:
        raise ArithmeticBoundaryError(f"XP grant cannot be negative, got {amount}")
    return max(0, total_xp) + amount


# =============================================================================
# Display
# =============================================================================


@dataclass
class LevelProgress:
    """Where a user sits within their current level."""

    level: int
    total_xp: int
    xp_into_level: int
    xp_for_next_level: int
    xp_remaining: int
    percent_to_next: int


def level_progress(total_xp: int) -> LevelProgress:
    """
    Break a total into level and progress toward the next level.

    Args:
        total_xp: Cumulative XP

    Returns:
        LevelProgress for display
    """
    total_xp = max(0, total_xp)
    level = level_for_xp(total_xp)
    xp_into_level = total_xp - cumulative_xp(level)
    needed = xp_for_level(level)
    return LevelProgress(
        level=level,
        total_xp=total_xp,
        xp_into_level=xp_into_level,
        xp_for_next_level=needed,
        xp_remaining=needed - xp_into_level,
        percent_to_next=xp_into_level * 100 // needed,
    )
