"""
Tests for level recommendation, confidence and content classification.
"""

import itertools
import unittest

import pytest

from adaptive_complexity.common.config import AdaptiveComplexityConfig
from adaptive_complexity.engine.content import determine_complexity_level
from adaptive_complexity.engine.levels import ComplexityLevel
from adaptive_complexity.engine.models import LearningProfile
from adaptive_complexity.engine.recommender import (
    AdjustmentDirection,
    calculate_confidence,
    classify_content,
    recalculate,
    recommend,
    target_level
)
from adaptive_complexity.engine.store import append_observation
from adaptive_complexity.tests.factories import make_history, make_observation


class TestRecommendScenarios(unittest.TestCase):
    """Recommendations for the reference learner histories."""

    def test_strong_performance_moves_up_one_level(self):
        """Scores around 0.92 from Basic recommend Intermediate."""
        recommendation = recommend(make_history([0.9, 0.95, 0.92]), ComplexityLevel.BASIC)

        self.assertGreater(recommendation.score, 0.8)
        self.assertEqual(recommendation.level, ComplexityLevel.INTERMEDIATE)
        self.assertGreater(recommendation.confidence, 0.5)
        self.assertEqual(recommendation.direction, AdjustmentDirection.INCREASE)
        self.assertTrue(recommendation.changed)

    def test_weak_performance_moves_down_to_floor(self):
        """Scores around 0.2 from Basic recommend Foundational."""
        recommendation = recommend(make_history([0.2, 0.15, 0.25]), ComplexityLevel.BASIC)

        self.assertLess(recommendation.score, 0.4)
        self.assertEqual(recommendation.level, ComplexityLevel.FOUNDATIONAL)
        self.assertEqual(recommendation.direction, AdjustmentDirection.DECREASE)

    def test_middling_performance_keeps_level(self):
        """Scores between the thresholds leave the level alone."""
        recommendation = recommend(make_history([0.6, 0.65, 0.7]), ComplexityLevel.ADVANCED)
        self.assertEqual(recommendation.level, ComplexityLevel.ADVANCED)
        self.assertFalse(recommendation.changed)

    def test_extremes_do_not_move_past_the_range(self):
        """Expert cannot go up and Foundational cannot go down."""
        high = recommend(make_history([1.0, 1.0, 1.0]), ComplexityLevel.EXPERT)
        low = recommend(make_history([0.0, 0.0, 0.0]), ComplexityLevel.FOUNDATIONAL)
        self.assertEqual(high.level, ComplexityLevel.EXPERT)
        self.assertEqual(low.level, ComplexityLevel.FOUNDATIONAL)

    def test_insufficient_data_gives_no_recommendation(self):
        """Histories shorter than the minimum produce nothing."""
        self.assertIsNone(recommend(make_history([1.0, 1.0]), ComplexityLevel.BASIC))
        self.assertIsNone(recommend([], ComplexityLevel.BASIC))

        config = AdaptiveComplexityConfig(min_performance_data_points=1)
        self.assertIsNotNone(recommend(make_history([1.0]), ComplexityLevel.BASIC, config=config))


@pytest.mark.parametrize(
    "jump, level, score",
    list(itertools.product([1, 2, 3, 4], list(ComplexityLevel), [0.0, 0.39, 0.5, 0.81, 1.0]))
)
def test_jump_is_bounded(jump, level, score):
    """A single recommendation never moves more than the configured jump."""
    config = AdaptiveComplexityConfig(max_complexity_jump=jump)
    recommended = target_level(score, level, config)
    assert recommended.distance(level) <= jump


def test_larger_jump_setting():
    """A jump of two from Basic reaches Advanced on strong scores."""
    config = AdaptiveComplexityConfig(max_complexity_jump=2)
    assert target_level(0.95, ComplexityLevel.BASIC, config) == ComplexityLevel.ADVANCED
    assert target_level(0.1, ComplexityLevel.ADVANCED, config) == ComplexityLevel.BASIC


def test_thresholds_are_strict():
    """Scores exactly on a threshold do not move the level."""
    assert target_level(0.8, ComplexityLevel.BASIC) == ComplexityLevel.BASIC
    assert target_level(0.4, ComplexityLevel.BASIC) == ComplexityLevel.BASIC


@pytest.mark.parametrize("length", [3, 4, 6, 10, 30])
def test_ambiguous_scores_cap_confidence(length):
    """All-0.5 histories never yield confidence above 0.5."""
    recommendation = recommend(make_history([0.5] * length), ComplexityLevel.INTERMEDIATE)
    assert recommendation.confidence <= 0.5


@pytest.mark.parametrize(
    "data_points, score",
    list(itertools.product([0, 1, 3, 6, 50], [0.0, 0.25, 0.5, 0.75, 1.0]))
)
def test_confidence_within_bounds(data_points, score):
    """Confidence always lies in [0, 1]."""
    assert 0.0 <= calculate_confidence(data_points, score) <= 1.0


def test_confidence_components():
    """Confidence grows with evidence and with decisive scores."""
    assert calculate_confidence(6, 1.0) == pytest.approx(1.0)
    assert calculate_confidence(3, 0.5) == pytest.approx(0.3)
    assert calculate_confidence(3, 1.0) == pytest.approx(0.7)
    assert calculate_confidence(6, 0.5) == pytest.approx(0.5)
    assert calculate_confidence(6, 0.9) > calculate_confidence(3, 0.9)


def test_decisive_scores_use_the_full_formula():
    """The ambiguity ceiling only binds for scores very close to 0.5."""
    assert calculate_confidence(6, 0.9) == pytest.approx(0.92)
    assert calculate_confidence(6, 0.35) == pytest.approx(0.72)
    assert calculate_confidence(6, 0.2) == pytest.approx(0.84)
    # performance factor 0.1: formula gives 0.64, ceiling 0.6
    assert calculate_confidence(6, 0.55) == pytest.approx(0.6)


def test_classify_content():
    """Per-content averages split into strengths and improvement areas."""
    history = [
        make_observation(content_id="fractions", score=0.9, hours=0),
        make_observation(content_id="ratios", score=0.3, hours=1),
        make_observation(content_id="fractions", score=0.8, hours=2),
        make_observation(content_id="decimals", score=0.6, hours=3),
        make_observation(content_id="ratios", score=0.4, hours=4),
    ]
    strengths, improvements = classify_content(history)
    assert strengths == ["fractions"]
    assert improvements == ["ratios"]


def test_classify_content_limits_lists():
    """At most three ids are listed in each category."""
    history = [make_observation(content_id=f"c{i}", score=0.95, hours=i) for i in range(5)]
    strengths, improvements = classify_content(history)
    assert strengths == ["c0", "c1", "c2"]
    assert improvements == []


class TestRecalculate(unittest.TestCase):
    """Test recalculating a profile's stored recommendations."""

    def _profile_with(self, scores, skill_area="algebra"):
        profile = LearningProfile(user_id="user-1")
        for observation in make_history(scores, skill_area=skill_area):
            append_observation(profile, observation)
        return profile

    def test_updates_subject_and_skill(self):
        """Subject and skill recommendations follow their histories."""
        profile = self._profile_with([0.9, 0.95, 0.92])

        recommendation = recalculate(profile, "math")

        subject = profile.get_subject("math")
        skill = profile.get_skill("math", "algebra")
        self.assertEqual(recommendation.level, ComplexityLevel.INTERMEDIATE)
        self.assertEqual(subject.recommended_level, ComplexityLevel.INTERMEDIATE)
        self.assertEqual(subject.current_level, ComplexityLevel.BASIC)
        self.assertAlmostEqual(subject.confidence_score, recommendation.confidence)
        self.assertEqual(skill.recommended_level, ComplexityLevel.INTERMEDIATE)
        self.assertEqual(skill.strengths, ["content-0", "content-1", "content-2"])

    def test_insufficient_data_leaves_profile_alone(self):
        """Two observations do not change any recommendation."""
        profile = self._profile_with([1.0, 1.0])

        self.assertIsNone(recalculate(profile, "math"))

        subject = profile.get_subject("math")
        self.assertEqual(subject.recommended_level, ComplexityLevel.BASIC)
        self.assertEqual(subject.confidence_score, 0.0)

    def test_skills_need_their_own_history(self):
        """A skill with too little history keeps its previous recommendation."""
        profile = LearningProfile(user_id="user-1")
        observations = make_history([0.95, 0.9, 0.97])
        append_observation(profile, observations[0])
        append_observation(profile, observations[1])
        third = make_observation(score=0.97, skill_area="geometry", hours=2)
        append_observation(profile, third)

        recalculate(profile, "math")

        self.assertEqual(profile.get_subject("math").recommended_level, ComplexityLevel.INTERMEDIATE)
        self.assertEqual(profile.get_skill("math", "algebra").recommended_level, ComplexityLevel.BASIC)
        self.assertEqual(profile.get_skill("math", "geometry").recommended_level, ComplexityLevel.BASIC)

    def test_unknown_subject(self):
        """Recalculating a subject the learner never saw does nothing."""
        profile = LearningProfile(user_id="user-1")
        self.assertIsNone(recalculate(profile, "history"))
        self.assertEqual(profile.subject_preferences, {})

    def test_confident_weak_skill_is_served_below_subject(self):
        """A skill with six scores of 0.35 is trusted enough to serve Foundational."""
        profile = LearningProfile(user_id="user-1")
        for hour in range(6):
            append_observation(profile, make_observation(
                score=0.35, skill_area="weak", content_id=f"weak-{hour}", hours=hour
            ))
        for hour in range(6, 12):
            append_observation(profile, make_observation(
                score=0.75, skill_area="other", content_id=f"other-{hour}", hours=hour
            ))

        recalculate(profile, "math")

        weak = profile.get_skill("math", "weak")
        self.assertEqual(weak.recommended_level, ComplexityLevel.FOUNDATIONAL)
        self.assertAlmostEqual(weak.confidence_score, 0.72)
        self.assertEqual(profile.get_subject("math").recommended_level, ComplexityLevel.BASIC)
        self.assertEqual(
            determine_complexity_level(profile, "math", "weak"), ComplexityLevel.FOUNDATIONAL
        )
        self.assertEqual(determine_complexity_level(profile, "math"), ComplexityLevel.BASIC)
