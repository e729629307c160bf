"""
Learning-Rate Estimation

Estimates how quickly a learner improves from the slope of score over time
and folds it into the learning-rate trait with exponential smoothing.
"""

import enum
from typing import List, Sequence

from adaptive_complexity.common.logger import app_logger
from adaptive_complexity.engine.models import PerformanceObservation
from adaptive_complexity.engine.scoring import clamp

# Module logger
logger = app_logger.getChild("engine.learning_rate")

# Exponential smoothing: share of the previous trait that is kept
SMOOTHING_RETAIN = 0.7
SMOOTHING_UPDATE = 0.3

# Normalization of the average improvement (score per hour) into [0, 1]
IMPROVEMENT_OFFSET = 0.1
IMPROVEMENT_SCALE = 5.0

SECONDS_PER_HOUR = 3600.0


class LearningRateCategory(enum.Enum):
    """Display buckets for the learning-rate trait."""
    VERY_SLOW = "very_slow"
    SLOW = "slow"
    AVERAGE = "average"
    FAST = "fast"
    VERY_FAST = "very_fast"

    @classmethod
    def from_rate(cls, rate: float) -> 'LearningRateCategory':
        """
        Determine the category for a learning-rate trait value.

        Args:
            rate: Learning-rate trait (0-1)

        Returns:
            Corresponding category
        """
        if rate < 0.2:
            return cls.VERY_SLOW
        elif rate < 0.4:
            return cls.SLOW
        elif rate < 0.6:
            return cls.AVERAGE
        elif rate < 0.8:
            return cls.FAST
        else:
            return cls.VERY_FAST


def improvement_rates(history: Sequence[PerformanceObservation]) -> List[float]:
    """
    Score change per hour between consecutive observations.

    Pairs without a positive time gap are skipped.

    Args:
        history: Observations in any order

    Returns:
        One rate per usable consecutive pair, oldest first
    """
    ordered = sorted(history, key=lambda observation: observation.timestamp)
    rates = []
    for previous, current in zip(ordered, ordered[1:]):
        hours = (current.timestamp - previous.timestamp).total_seconds() / SECONDS_PER_HOUR
        if hours > 0:
            rates.append((current.score - previous.score) / hours)
    return rates


def normalize_improvement(average_rate: float) -> float:
    """Map an average score-per-hour improvement into [0, 1]."""
    return clamp((average_rate + IMPROVEMENT_OFFSET) * IMPROVEMENT_SCALE)


def estimate_learning_rate(
    current_rate: float,
    history: Sequence[PerformanceObservation]
) -> float:
    """
    Update the learning-rate trait from a subject history.

    Args:
        current_rate: Trait value before the update
        history: Subject-level observations (at least two are needed)

    Returns:
        The smoothed trait, or ``current_rate`` unchanged when fewer than
        two observations or no positive time gap are available
    """
    if len(history) < 2:
        return current_rate

    rates = improvement_rates(history)
    if not rates:
        return current_rate

    normalized = normalize_improvement(sum(rates) / len(rates))
    updated = current_rate * SMOOTHING_RETAIN + normalized * SMOOTHING_UPDATE

    logger.debug(
        f"Learning rate {current_rate:.3f} -> {updated:.3f} "
        f"(normalized improvement {normalized:.3f} from {len(rates)} intervals)"
    )
    return updated
