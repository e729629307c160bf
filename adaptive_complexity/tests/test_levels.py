"""
Tests for the ordered complexity levels.
"""

import unittest

import pytest

from adaptive_complexity.engine.levels import (
    ComplexityLevel,
    DEFAULT_LEVEL,
    MAX_LEVEL,
    MIN_LEVEL,
    nearest_level
)


class TestComplexityLevel(unittest.TestCase):
    """Test the ComplexityLevel enum."""

    def test_ranks(self):
        """Levels map to ranks 1 through 5 in order."""
        ranks = [level.to_numeric() for level in ComplexityLevel]
        self.assertEqual(ranks, [1, 2, 3, 4, 5])
        self.assertEqual(MIN_LEVEL, ComplexityLevel.FOUNDATIONAL)
        self.assertEqual(MAX_LEVEL, ComplexityLevel.EXPERT)
        self.assertEqual(DEFAULT_LEVEL, ComplexityLevel.BASIC)

    def test_ordering(self):
        """Comparison operators follow rank."""
        self.assertLess(ComplexityLevel.BASIC, ComplexityLevel.INTERMEDIATE)
        self.assertGreater(ComplexityLevel.EXPERT, ComplexityLevel.ADVANCED)
        self.assertLessEqual(ComplexityLevel.BASIC, ComplexityLevel.BASIC)
        self.assertEqual(
            sorted([ComplexityLevel.EXPERT, ComplexityLevel.FOUNDATIONAL, ComplexityLevel.BASIC]),
            [ComplexityLevel.FOUNDATIONAL, ComplexityLevel.BASIC, ComplexityLevel.EXPERT]
        )

    def test_distance_and_step(self):
        """Distance is symmetric and steps clamp at the extremes."""
        self.assertEqual(ComplexityLevel.BASIC.distance(ComplexityLevel.EXPERT), 3)
        self.assertEqual(ComplexityLevel.EXPERT.distance(ComplexityLevel.BASIC), 3)
        self.assertEqual(ComplexityLevel.ADVANCED.step(3), ComplexityLevel.EXPERT)
        self.assertEqual(ComplexityLevel.BASIC.step(-4), ComplexityLevel.FOUNDATIONAL)
        self.assertEqual(ComplexityLevel.BASIC.step(1), ComplexityLevel.INTERMEDIATE)

    def test_parse(self):
        """Levels parse from their value regardless of case."""
        self.assertEqual(ComplexityLevel.parse("Advanced"), ComplexityLevel.ADVANCED)
        self.assertEqual(ComplexityLevel.parse(" expert "), ComplexityLevel.EXPERT)
        self.assertIs(ComplexityLevel.parse(ComplexityLevel.BASIC), ComplexityLevel.BASIC)
        with self.assertRaises(ValueError):
            ComplexityLevel.parse("impossible")


@pytest.mark.parametrize("value, expected", [
    (1, ComplexityLevel.FOUNDATIONAL),
    (3, ComplexityLevel.INTERMEDIATE),
    (2.5, ComplexityLevel.BASIC),
    (3.6, ComplexityLevel.ADVANCED),
    (0, ComplexityLevel.FOUNDATIONAL),
    (-7, ComplexityLevel.FOUNDATIONAL),
    (9, ComplexityLevel.EXPERT),
])
def test_from_numeric_nearest_level(value, expected):
    """Numeric ranks map to the nearest level, ties toward the lower rank."""
    assert ComplexityLevel.from_numeric(value) == expected


def test_nearest_level_prefers_lower_rank_on_ties():
    """Equidistant candidates resolve to the lower level."""
    candidates = [ComplexityLevel.ADVANCED, ComplexityLevel.BASIC]
    assert nearest_level(ComplexityLevel.INTERMEDIATE, candidates) == ComplexityLevel.BASIC
    assert nearest_level(ComplexityLevel.EXPERT, candidates) == ComplexityLevel.ADVANCED
    assert nearest_level(ComplexityLevel.BASIC, candidates) == ComplexityLevel.BASIC
    assert nearest_level(ComplexityLevel.BASIC, []) is None
