"""
Unit tests for the XP/level curve.

Level L -> L+1 costs floor(100 * L^1.5): 100, 282, 519, 800, ...
"""

from math import floor

import pytest

from application.exceptions import ArithmeticBoundaryError
from services.xp_curve import (
    add_xp,
    cumulative_xp,
    level_for_xp,
    level_progress,
    xp_for_level,
)

pytestmark = pytest.mark.unit


class TestXpForLevel:
    """Tests for the per-level cost."""

    @pytest.mark.parametrize("level,expected", [(1, 100), (2, 282), (3, 519), (4, 800), (9, 2700)])
    def test_known_costs(self, level, expected):
        assert xp_for_level(level) == expected

    def test_matches_float_formula(self):
        """Integer form agrees with floor(100 * L^1.5) across a wide range."""
        for level in range(1, 101):
            assert xp_for_level(level) == floor(100 * level ** 1.5)

    def test_level_zero_raises(self):
        with pytest.raises(ArithmeticBoundaryError):
            xp_for_level(0)

    def test_cumulative(self):
        assert cumulative_xp(1) == 0
        assert cumulative_xp(2) == 100
        assert cumulative_xp(3) == 382
        assert cumulative_xp(4) == 901


class TestLevelForXp:
    """Tests for level derivation."""

    def test_zero_xp_is_level_one(self):
        assert level_for_xp(0) == 1

    def test_negative_xp_is_level_one(self):
        assert level_for_xp(-50) == 1

    @pytest.mark.parametrize("level", [2, 3, 4, 10, 25])
    def test_boundary_is_exact(self, level):
        """Exactly the cumulative requirement reaches the level; one less does not."""
        threshold = cumulative_xp(level)
        assert level_for_xp(threshold) == level
        assert level_for_xp(threshold - 1) == level - 1

    def test_starting_grant_levels(self):
        assert level_for_xp(100) == 2
        assert level_for_xp(200) == 2


class TestAddXp:
    """Tests for grant arithmetic."""

    def test_adds(self):
        assert add_xp(200, 50) == 250

    def test_zero_grant(self):
        assert add_xp(200, 0) == 200

    def test_negative_grant_raises(self):
        with pytest.raises(ArithmeticBoundaryError):
            add_xp(200, -1)


class TestLevelProgress:
    """Tests for the display breakdown."""

    def test_fresh_user_after_initialization(self):
        progress = level_progress(200)
        assert progress.level == 2
        assert progress.xp_into_level == 100
        assert progress.xp_for_next_level == 282
        assert progress.xp_remaining == 182
        assert progress.percent_to_next == 35

    def test_zero_xp(self):
        progress = level_progress(0)
        assert progress.level == 1
        assert progress.xp_into_level == 0
        assert progress.xp_remaining == 100
        assert progress.percent_to_next == 0

    @pytest.mark.parametrize("total", [0, 1, 99, 100, 381, 382, 900, 901, 5000, 123456])
    def test_decomposition(self, total):
        """Cumulative requirement plus progress into the level gives back the total."""
        progress = level_progress(total)
        assert cumulative_xp(progress.level) + progress.xp_into_level == total
        assert 0 <= progress.xp_into_level < progress.xp_for_next_level
        assert progress.xp_into_level + progress.xp_remaining == progress.xp_for_next_level
        assert 0 <= progress.percent_to_next < 100
