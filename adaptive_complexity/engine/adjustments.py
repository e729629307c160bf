"""
Complexity Adjustment Records

Builds auditable records of level changes and keeps them in an append-only
log.
"""

import datetime
import threading
from typing import Iterator, List, Optional, Tuple

from adaptive_complexity.common.logger import app_logger
from adaptive_complexity.engine.levels import ComplexityLevel
from adaptive_complexity.engine.models import ComplexityAdjustmentResult
from adaptive_complexity.engine.recommender import AdjustmentDirection

# Module logger
logger = app_logger.getChild("engine.adjustments")

# Asserted confidence drops by this much per rank moved, down to the floor
CONFIDENCE_PENALTY_PER_RANK = 0.2
MIN_ADJUSTMENT_CONFIDENCE = 0.4

INCREASE_NEXT_STEPS = (
    "Provide more challenging content in this area",
    "Introduce advanced concepts gradually",
    "Offer opportunities for peer teaching",
)

DECREASE_NEXT_STEPS = (
    "Review foundational concepts in this area",
    "Provide additional practice with immediate feedback",
    "Consider alternative teaching approaches",
)

MONITOR_NEXT_STEP = "Monitor engagement and adjust as needed"


def adjustment_confidence(previous_level: ComplexityLevel, new_level: ComplexityLevel) -> float:
    """Confidence asserted for a move; larger jumps assert less."""
    return max(
        MIN_ADJUSTMENT_CONFIDENCE,
        1.0 - previous_level.distance(new_level) * CONFIDENCE_PENALTY_PER_RANK
    )


def next_steps(previous_level: ComplexityLevel, new_level: ComplexityLevel) -> Tuple[str, ...]:
    """Suggested follow-up actions for a move."""
    if AdjustmentDirection.between(previous_level, new_level) is AdjustmentDirection.INCREASE:
        steps = INCREASE_NEXT_STEPS
    else:
        steps = DECREASE_NEXT_STEPS
    return steps + (MONITOR_NEXT_STEP,)


def record_adjustment(
    user_id: str,
    content_id: str,
    previous_level: ComplexityLevel,
    new_level: ComplexityLevel,
    reason: str,
    timestamp: Optional[datetime.datetime] = None
) -> ComplexityAdjustmentResult:
    """
    Build the audit record for a level change.

    Args:
        user_id: Learner the change applies to
        content_id: Content that triggered or reflects the change
        previous_level: Level before the change
        new_level: Level after the change
        reason: Human-readable explanation
        timestamp: When the change happened (defaults to now)

    Returns:
        The immutable audit record
    """
    result = ComplexityAdjustmentResult(
        user_id=user_id,
        content_id=content_id,
        previous_level=previous_level,
        new_level=new_level,
        reason=reason,
        confidence_score=adjustment_confidence(previous_level, new_level),
        timestamp=timestamp or datetime.datetime.now(),
        recommended_next_steps=next_steps(previous_level, new_level)
    )

    logger.info(
        f"Complexity adjustment recorded for {user_id!r} on {content_id!r}: "
        f"{previous_level.value} -> {new_level.value} ({reason})",
        extra={"data": result.to_dict()}
    )
    return result


class AdjustmentLog:
    """Thread-safe, append-only in-memory log of adjustment records."""

    def __init__(self):
        self._entries: List[ComplexityAdjustmentResult] = []
        self._lock = threading.RLock()

    def append(self, result: ComplexityAdjustmentResult) -> None:
        """Add a record to the end of the log."""
        with self._lock:
            self._entries.append(result)

    def for_user(self, user_id: str) -> List[ComplexityAdjustmentResult]:
        """All records for a user, oldest first."""
        with self._lock:
            return [entry for entry in self._entries if entry.user_id == user_id]

    def recent(self, count: int = 5) -> List[ComplexityAdjustmentResult]:
        """The most recent records, newest first."""
        with self._lock:
            return sorted(self._entries, key=lambda entry: entry.timestamp, reverse=True)[:count]

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __iter__(self) -> Iterator[ComplexityAdjustmentResult]:
        with self._lock:
            return iter(list(self._entries))
