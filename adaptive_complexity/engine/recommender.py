"""
Level Recommendation

Maps a performance score and the current complexity level to a recommended
level and a confidence value. A single recommendation never moves more than
``max_complexity_jump`` ranks away from the current level.
"""

import enum
from collections import OrderedDict
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from adaptive_complexity.common.config import AdaptiveComplexityConfig
from adaptive_complexity.common.logger import app_logger
from adaptive_complexity.engine.levels import ComplexityLevel, MAX_LEVEL, MIN_LEVEL
from adaptive_complexity.engine.models import (
    LearningProfile,
    NEUTRAL_TRAIT,
    PerformanceObservation,
    SkillAreaProfile
)
from adaptive_complexity.engine.scoring import NEUTRAL_SCORE, calculate_performance_score, clamp

# Module logger
logger = app_logger.getChild("engine.recommender")

# Confidence blend between evidence volume and score decisiveness
DATA_POINT_CONFIDENCE_WEIGHT = 0.6
PERFORMANCE_CONFIDENCE_WEIGHT = 0.4

# Ceiling on confidence when the score carries no signal (score == 0.5)
AMBIGUITY_CONFIDENCE_CAP = 0.5

# Strength / improvement classification of per-content averages
STRENGTH_THRESHOLD = 0.75
IMPROVEMENT_THRESHOLD = 0.5
MAX_LISTED_CONTENT = 3
MIN_OBSERVATIONS_FOR_ANALYSIS = 3

_DEFAULT_CONFIG = AdaptiveComplexityConfig()


class AdjustmentDirection(enum.Enum):
    """Direction of a recommended level change."""
    INCREASE = "increase"
    DECREASE = "decrease"
    MAINTAIN = "maintain"

    @classmethod
    def between(cls, previous: ComplexityLevel, new: ComplexityLevel) -> 'AdjustmentDirection':
        """Direction of the move from ``previous`` to ``new``."""
        if new > previous:
            return cls.INCREASE
        if new < previous:
            return cls.DECREASE
        return cls.MAINTAIN


@dataclass(frozen=True)
class LevelRecommendation:
    """Outcome of evaluating a performance history."""
    level: ComplexityLevel
    confidence: float
    score: float
    previous_level: ComplexityLevel
    data_points: int

    @property
    def direction(self) -> AdjustmentDirection:
        return AdjustmentDirection.between(self.previous_level, self.level)

    @property
    def changed(self) -> bool:
        return self.level != self.previous_level


def calculate_confidence(
    data_points: int,
    score: float,
    config: Optional[AdaptiveComplexityConfig] = None
) -> float:
    """
    Confidence that a recommendation is backed by enough clear evidence.

    Grows with the number of observations (saturating at twice the minimum)
    and with how far the score sits from 0.5. Scores near 0.5 are
    ambiguous, so confidence never exceeds 0.5 plus the performance factor
    regardless of history length. The cap only binds while the score sits
    inside the band where the level cannot move.

    Args:
        data_points: Number of observations behind the score
        score: Performance score in [0, 1]
        config: Engine configuration

    Returns:
        Confidence in [0, 1]
    """
    config = config or _DEFAULT_CONFIG
    data_point_factor = min(1.0, data_points / (2 * config.min_performance_data_points))
    performance_factor = min(1.0, abs(score - NEUTRAL_SCORE) * 2)

    confidence = (
        data_point_factor * DATA_POINT_CONFIDENCE_WEIGHT
        + performance_factor * PERFORMANCE_CONFIDENCE_WEIGHT
    )
    ceiling = AMBIGUITY_CONFIDENCE_CAP + performance_factor
    return clamp(min(confidence, ceiling))


def target_level(
    score: float,
    current_level: ComplexityLevel,
    config: Optional[AdaptiveComplexityConfig] = None
) -> ComplexityLevel:
    """
    Decide whether to stay, step up or step down from ``current_level``.

    Args:
        score: Performance score in [0, 1]
        current_level: Level the learner is working at
        config: Engine configuration supplying thresholds and the jump size

    Returns:
        Recommended level, at most ``max_complexity_jump`` ranks away
    """
    config = config or _DEFAULT_CONFIG
    current_rank = current_level.to_numeric()
    recommended_rank = current_rank

    if score > config.increase_threshold and current_rank < MAX_LEVEL.to_numeric():
        recommended_rank = min(current_rank + config.max_complexity_jump, MAX_LEVEL.to_numeric())
    elif score < config.decrease_threshold and current_rank > MIN_LEVEL.to_numeric():
        recommended_rank = max(current_rank - config.max_complexity_jump, MIN_LEVEL.to_numeric())

    return ComplexityLevel.from_numeric(recommended_rank)


def recommend(
    history: Sequence[PerformanceObservation],
    current_level: ComplexityLevel,
    learning_rate: float = NEUTRAL_TRAIT,
    challenge_preference: float = NEUTRAL_TRAIT,
    config: Optional[AdaptiveComplexityConfig] = None
) -> Optional[LevelRecommendation]:
    """
    Evaluate a history against the current level.

    Args:
        history: Observations in any order
        current_level: Level the learner is working at
        learning_rate: Learner's learning-rate trait
        challenge_preference: Learner's challenge preference
        config: Engine configuration

    Returns:
        The recommendation, or None when the history is shorter than
        ``min_performance_data_points``
    """
    config = config or _DEFAULT_CONFIG
    if len(history) < config.min_performance_data_points:
        return None

    score = calculate_performance_score(history, learning_rate, challenge_preference, config)
    return LevelRecommendation(
        level=target_level(score, current_level, config),
        confidence=calculate_confidence(len(history), score, config),
        score=score,
        previous_level=current_level,
        data_points=len(history)
    )


def classify_content(
    history: Sequence[PerformanceObservation]
) -> Tuple[List[str], List[str]]:
    """
    Split content ids into strengths and areas needing improvement.

    Scores are averaged per content id; above 0.75 is a strength, below 0.5
    needs improvement. At most three of each are returned, in order of first
    appearance in the history.

    Args:
        history: Observations for one skill

    Returns:
        (strengths, areas_for_improvement)
    """
    grouped: Dict[str, List[float]] = OrderedDict()
    for observation in history:
        grouped.setdefault(observation.content_id, []).append(observation.score)

    strengths: List[str] = []
    improvements: List[str] = []
    for content_id, scores in grouped.items():
        average = sum(scores) / len(scores)
        if average > STRENGTH_THRESHOLD:
            strengths.append(content_id)
        elif average < IMPROVEMENT_THRESHOLD:
            improvements.append(content_id)

    return strengths[:MAX_LISTED_CONTENT], improvements[:MAX_LISTED_CONTENT]


def _apply_to_skill(
    skill: SkillAreaProfile,
    profile: LearningProfile,
    config: AdaptiveComplexityConfig
) -> None:
    recommendation = recommend(
        skill.performance_history,
        skill.current_level,
        profile.learning_rate,
        profile.challenge_preference,
        config
    )
    if recommendation is None:
        return

    skill.recommended_level = recommendation.level
    skill.confidence_score = recommendation.confidence

    if len(skill.performance_history) >= MIN_OBSERVATIONS_FOR_ANALYSIS:
        skill.strengths, skill.areas_for_improvement = classify_content(skill.performance_history)


def recalculate(
    profile: LearningProfile,
    subject_id: str,
    config: Optional[AdaptiveComplexityConfig] = None
) -> Optional[LevelRecommendation]:
    """
    Refresh the stored recommendations of a subject and its skills.

    Nothing changes until the subject history reaches
    ``min_performance_data_points``. Each skill is then re-evaluated on its
    own history once that history is long enough.

    Args:
        profile: Profile to update in place
        subject_id: Subject to recalculate
        config: Engine configuration

    Returns:
        The subject-level recommendation, or None when there is not enough data
    """
    config = config or _DEFAULT_CONFIG
    subject = profile.subject_preferences.get(subject_id)
    if subject is None:
        return None

    recommendation = recommend(
        subject.performance_history,
        subject.current_level,
        profile.learning_rate,
        profile.challenge_preference,
        config
    )
    if recommendation is None:
        logger.debug(
            f"Not enough data to recommend for {profile.user_id!r}/{subject_id!r} "
            f"({len(subject.performance_history)}/{config.min_performance_data_points})"
        )
        return None

    if recommendation.level != subject.recommended_level:
        logger.debug(
            f"Recommendation for {profile.user_id!r}/{subject_id!r} moved from "
            f"{subject.recommended_level.value} to {recommendation.level.value} "
            f"(score={recommendation.score:.3f}, confidence={recommendation.confidence:.3f})"
        )

    subject.recommended_level = recommendation.level
    subject.confidence_score = recommendation.confidence

    for skill in subject.skill_areas.values():
        _apply_to_skill(skill, profile, config)

    return recommendation
