"""
Builders for engine objects used across the test suites.
"""

import datetime
from typing import Iterable, List, Optional

from adaptive_complexity.engine.levels import ComplexityLevel
from adaptive_complexity.engine.models import (
    AdaptiveContent,
    AdaptiveElement,
    LearningProfile,
    PerformanceObservation
)

BASE_TIME = datetime.datetime(2024, 3, 1, 9, 0, 0)


def make_observation(
    score: float = 0.8,
    user_id: str = "user-1",
    content_id: str = "content-1",
    subject_area: str = "math",
    skill_area: str = "algebra",
    time_spent: float = 300.0,
    completion_rate: float = 1.0,
    attempts: int = 1,
    timestamp: Optional[datetime.datetime] = None,
    hours: float = 0.0
) -> PerformanceObservation:
    """Build a valid observation, ``hours`` after the base time by default."""
    return PerformanceObservation(
        user_id=user_id,
        content_id=content_id,
        subject_area=subject_area,
        skill_area=skill_area,
        score=score,
        time_spent=time_spent,
        completion_rate=completion_rate,
        attempts=attempts,
        timestamp=timestamp or BASE_TIME + datetime.timedelta(hours=hours)
    )


def make_history(scores: Iterable[float], **kwargs) -> List[PerformanceObservation]:
    """One observation per score, an hour apart, oldest first."""
    return [
        make_observation(score=score, content_id=f"content-{index}", hours=index, **kwargs)
        for index, score in enumerate(scores)
    ]


def make_content(
    levels: Iterable[ComplexityLevel],
    complexity_level: ComplexityLevel = ComplexityLevel.BASIC,
    subject_area: str = "math",
    skill_areas=("algebra",)
) -> AdaptiveContent:
    """Content with two elements carrying a variant for each given level."""
    levels = list(levels)
    elements = [
        AdaptiveElement(
            element_id=f"element-{index}",
            variants={level: f"{level.value}-text-{index}" for level in levels}
        )
        for index in range(2)
    ]
    return AdaptiveContent(
        content_id="lesson-1",
        subject_area=subject_area,
        skill_areas=skill_areas,
        complexity_level=complexity_level,
        elements=elements,
        title="Linear equations"
    )


def record_all(engine, profile: LearningProfile, observations) -> LearningProfile:
    """Feed observations through the engine one at a time."""
    for observation in observations:
        profile = engine.record_observation(profile, observation)
    return profile
