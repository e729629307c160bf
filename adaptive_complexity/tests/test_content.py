"""
Tests for content adaptation.
"""

import unittest

from adaptive_complexity.common.config import AdaptiveComplexityConfig
from adaptive_complexity.engine.content import (
    adapt_content,
    determine_complexity_level,
    select_variant
)
from adaptive_complexity.engine.levels import ComplexityLevel
from adaptive_complexity.engine.models import (
    AdaptiveElement,
    LearningProfile,
    SkillAreaProfile,
    SubjectPreference
)
from adaptive_complexity.tests.factories import make_content, make_history


def make_profile(
    subject_level=ComplexityLevel.INTERMEDIATE,
    subject_confidence=0.8,
    subject_points=3,
    skill=None
):
    """Profile with a math subject recommending ``subject_level``."""
    subject = SubjectPreference(
        subject_id="math",
        current_level=ComplexityLevel.BASIC,
        recommended_level=subject_level,
        confidence_score=subject_confidence,
        performance_history=make_history([0.9] * subject_points)
    )
    if skill is not None:
        subject.skill_areas[skill.skill_id] = skill
    return LearningProfile(user_id="user-1", subject_preferences={"math": subject})


class TestDetermineComplexityLevel(unittest.TestCase):
    """Test choosing the level to serve."""

    def test_unknown_subject_uses_default(self):
        profile = LearningProfile(user_id="user-1")
        self.assertEqual(determine_complexity_level(profile, "math"), ComplexityLevel.BASIC)

    def test_confident_subject_recommendation(self):
        profile = make_profile()
        self.assertEqual(determine_complexity_level(profile, "math"), ComplexityLevel.INTERMEDIATE)

    def test_low_confidence_falls_back_to_current(self):
        profile = make_profile(subject_confidence=0.55)
        self.assertEqual(determine_complexity_level(profile, "math"), ComplexityLevel.BASIC)

    def test_short_history_falls_back_to_current(self):
        profile = make_profile(subject_points=2)
        self.assertEqual(determine_complexity_level(profile, "math"), ComplexityLevel.BASIC)

    def test_confident_skill_wins_over_subject(self):
        skill = SkillAreaProfile(
            skill_id="algebra",
            recommended_level=ComplexityLevel.ADVANCED,
            confidence_score=0.75,
            performance_history=make_history([0.95] * 3)
        )
        profile = make_profile(skill=skill)
        self.assertEqual(
            determine_complexity_level(profile, "math", "algebra"), ComplexityLevel.ADVANCED
        )

    def test_unsure_skill_defers_to_subject(self):
        skill = SkillAreaProfile(
            skill_id="algebra",
            recommended_level=ComplexityLevel.ADVANCED,
            confidence_score=0.65,
            performance_history=make_history([0.95] * 3)
        )
        profile = make_profile(skill=skill)
        self.assertEqual(
            determine_complexity_level(profile, "math", "algebra"), ComplexityLevel.INTERMEDIATE
        )


class TestAdaptContent(unittest.TestCase):
    """Test substituting content variants."""

    def test_missing_level_uses_nearest_lower_variant(self):
        """Intermediate with only Basic and Advanced variants selects Basic."""
        content = make_content([ComplexityLevel.BASIC, ComplexityLevel.ADVANCED])
        adapted = adapt_content(content, make_profile())

        self.assertEqual(adapted.complexity_level, ComplexityLevel.INTERMEDIATE)
        self.assertEqual(
            [element.selected_variant for element in adapted.elements],
            ["basic-text-0", "basic-text-1"]
        )
        self.assertIsNone(content.elements[0].selected_variant)

    def test_exact_variant_selected(self):
        content = make_content(list(ComplexityLevel))
        adapted = adapt_content(content, make_profile())
        self.assertEqual(adapted.elements[1].selected_variant, "intermediate-text-1")

    def test_idempotent(self):
        """Adapting twice gives the same result as adapting once."""
        content = make_content([ComplexityLevel.BASIC, ComplexityLevel.EXPERT])
        profile = make_profile()
        once = adapt_content(content, profile)
        twice = adapt_content(once, profile)
        self.assertEqual(once, twice)

    def test_content_already_at_level_is_returned_unchanged(self):
        content = make_content(
            [ComplexityLevel.INTERMEDIATE], complexity_level=ComplexityLevel.INTERMEDIATE
        )
        self.assertIs(adapt_content(content, make_profile()), content)

    def test_disabled_adaptation_is_passthrough(self):
        content = make_content([ComplexityLevel.BASIC, ComplexityLevel.ADVANCED])
        config = AdaptiveComplexityConfig(enable_adaptive_content=False)
        self.assertIs(adapt_content(content, make_profile(), config), content)


class TestSelectVariant(unittest.TestCase):
    """Test variant fallback."""

    def test_no_variants(self):
        self.assertIsNone(select_variant(AdaptiveElement(element_id="empty"), ComplexityLevel.BASIC))

    def test_tie_goes_to_lower_level(self):
        element = AdaptiveElement(
            element_id="e",
            variants={ComplexityLevel.FOUNDATIONAL: "easy", ComplexityLevel.INTERMEDIATE: "medium"}
        )
        self.assertEqual(select_variant(element, ComplexityLevel.BASIC), "easy")

    def test_nearest_variant(self):
        element = AdaptiveElement(
            element_id="e",
            variants={ComplexityLevel.BASIC: "basic", ComplexityLevel.ADVANCED: "advanced"}
        )
        self.assertEqual(select_variant(element, ComplexityLevel.EXPERT), "advanced")
        self.assertEqual(element.available_levels, [ComplexityLevel.BASIC, ComplexityLevel.ADVANCED])
