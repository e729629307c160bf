"""
Performance Scoring

Turns a performance history plus the learner's traits into a single score in
[0, 1]. Recent observations and fully completed ones weigh more.
"""

from typing import Iterable, Optional

from adaptive_complexity.common.config import AdaptiveComplexityConfig
from adaptive_complexity.engine.models import NEUTRAL_TRAIT, PerformanceObservation

# Score used when there is no usable evidence
NEUTRAL_SCORE = 0.5

_DEFAULT_CONFIG = AdaptiveComplexityConfig()


def clamp(value: float, lower: float = 0.0, upper: float = 1.0) -> float:
    """Limit a value to the closed range [lower, upper]."""
    return max(lower, min(upper, value))


def weighted_average_score(history: Iterable[PerformanceObservation]) -> float:
    """
    Recency- and completion-weighted mean of the observation scores.

    The most recent observation gets recency weight 1 and each older one
    loses 1/N; the completion rate multiplies that weight.

    Args:
        history: Observations in any order

    Returns:
        Weighted mean, or 0.5 when no observation carries weight
    """
    ordered = sorted(history, key=lambda observation: observation.timestamp, reverse=True)
    if not ordered:
        return NEUTRAL_SCORE

    count = len(ordered)
    weighted_sum = 0.0
    weight_sum = 0.0
    for index, observation in enumerate(ordered):
        recency_weight = max(0.0, 1.0 - index / count)
        weight = recency_weight * observation.completion_rate
        weighted_sum += observation.score * weight
        weight_sum += weight

    if weight_sum <= 0:
        return NEUTRAL_SCORE
    return weighted_sum / weight_sum


def calculate_performance_score(
    history: Iterable[PerformanceObservation],
    learning_rate: float = NEUTRAL_TRAIT,
    challenge_preference: float = NEUTRAL_TRAIT,
    config: Optional[AdaptiveComplexityConfig] = None
) -> float:
    """
    Compute the normalized performance score for a history.

    Args:
        history: Observations in any order
        learning_rate: Learner's learning-rate trait (0-1)
        challenge_preference: Learner's challenge preference (0-1)
        config: Engine configuration supplying the trait weights

    Returns:
        Score in [0, 1]; 0.5 for an empty history
    """
    config = config or _DEFAULT_CONFIG
    history = list(history)
    if not history:
        return NEUTRAL_SCORE

    base_score = weighted_average_score(history)
    learning_rate_adjustment = (learning_rate - NEUTRAL_TRAIT) * config.learning_rate_weight
    challenge_adjustment = (challenge_preference - NEUTRAL_TRAIT) * config.challenge_preference_weight

    return clamp(base_score + learning_rate_adjustment + challenge_adjustment)
