"""
Content Adaptation

Selects which complexity level to serve for a content item and substitutes
each element's variant to match it.
"""

from dataclasses import replace
from typing import Any, Optional

from adaptive_complexity.common.config import AdaptiveComplexityConfig
from adaptive_complexity.common.logger import app_logger
from adaptive_complexity.engine.levels import ComplexityLevel, DEFAULT_LEVEL, nearest_level
from adaptive_complexity.engine.models import AdaptiveContent, AdaptiveElement, LearningProfile

# Module logger
logger = app_logger.getChild("engine.content")

_DEFAULT_CONFIG = AdaptiveComplexityConfig()


def determine_complexity_level(
    profile: LearningProfile,
    subject_id: str,
    skill_id: Optional[str] = None,
    config: Optional[AdaptiveComplexityConfig] = None
) -> ComplexityLevel:
    """
    Level to serve for a subject (and optionally a skill).

    A skill recommendation is used when the skill has enough history and
    confidence; otherwise the subject recommendation under the same rule;
    otherwise the subject's current level. Learners with no data for the
    subject get the default level.

    Args:
        profile: Learner profile
        subject_id: Subject of the content
        skill_id: Optional skill of the content
        config: Engine configuration

    Returns:
        The level to serve, never undefined
    """
    config = config or _DEFAULT_CONFIG
    subject = profile.subject_preferences.get(subject_id)
    if subject is None:
        return DEFAULT_LEVEL

    if skill_id is not None:
        skill = subject.skill_areas.get(skill_id)
        if (
            skill is not None
            and len(skill.performance_history) >= config.min_performance_data_points
            and skill.confidence_score >= config.skill_confidence_threshold
        ):
            return skill.recommended_level

    if (
        len(subject.performance_history) >= config.min_performance_data_points
        and subject.confidence_score >= config.subject_confidence_threshold
    ):
        return subject.recommended_level

    return subject.current_level


def select_variant(element: AdaptiveElement, level: ComplexityLevel) -> Any:
    """
    Variant of an element for a level.

    Falls back to the variant at the nearest rank, preferring the lower one
    on ties. Returns None when the element has no variants at all.
    """
    if level in element.variants:
        return element.variants[level]
    closest = nearest_level(level, element.variants)
    if closest is None:
        return None
    return element.variants[closest]


def adapt_content(
    content: AdaptiveContent,
    profile: LearningProfile,
    config: Optional[AdaptiveComplexityConfig] = None
) -> AdaptiveContent:
    """
    Re-target a content item at the learner's recommended level.

    Args:
        content: Content with per-level element variants
        profile: Learner profile
        config: Engine configuration

    Returns:
        The content unchanged when adaptation is disabled or it is already at
        the target level; otherwise a new item at the target level with each
        element's variant selected
    """
    config = config or _DEFAULT_CONFIG
    if not config.enable_adaptive_content:
        return content

    level = determine_complexity_level(profile, content.subject_area, content.primary_skill, config)
    if content.complexity_level == level:
        return content

    logger.debug(
        f"Adapting {content.content_id!r} for {profile.user_id!r} from "
        f"{content.complexity_level.value} to {level.value}"
    )
    return replace(
        content,
        complexity_level=level,
        elements=tuple(
            replace(element, selected_variant=select_variant(element, level))
            for element in content.elements
        )
    )
