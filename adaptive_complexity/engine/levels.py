"""
Complexity Levels

The five ordered difficulty tiers assigned to content and to a learner's
capability in a subject or skill.
"""

import enum
import functools
from typing import Iterable, Optional, Union


@functools.total_ordering
class ComplexityLevel(enum.Enum):
    """Ordered complexity levels; comparisons operate on the numeric rank."""
    FOUNDATIONAL = "foundational"
    BASIC = "basic"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    EXPERT = "expert"

    @classmethod
    def from_numeric(cls, value: Union[int, float]) -> 'ComplexityLevel':
        """
        Convert a numeric rank to the nearest defined level.

        Ties are broken toward the lower rank; values outside 1-5 map to
        the nearest extreme.

        Args:
            value: Numeric rank

        Returns:
            Nearest complexity level
        """
        return min(cls, key=lambda level: (abs(level.to_numeric() - value), level.to_numeric()))

    @classmethod
    def parse(cls, value: Union[str, 'ComplexityLevel']) -> 'ComplexityLevel':
        """
        Parse a level from its value or name (case-insensitive).

        Raises:
            ValueError: If the string does not name a level
        """
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower()
        for level in cls:
            if level.value == normalized:
                return level
        raise ValueError(f"Unknown complexity level: {value!r}")

    def to_numeric(self) -> int:
        """Convert complexity level to a numeric rank (1-5)."""
        return _RANKS[self]

    def distance(self, other: 'ComplexityLevel') -> int:
        """Absolute rank distance to another level."""
        return abs(self.to_numeric() - other.to_numeric())

    def step(self, delta: int) -> 'ComplexityLevel':
        """Move by ``delta`` ranks, clamped to the defined range."""
        return ComplexityLevel.from_numeric(self.to_numeric() + delta)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, ComplexityLevel):
            return NotImplemented
        return self.to_numeric() < other.to_numeric()


_RANKS = {
    ComplexityLevel.FOUNDATIONAL: 1,
    ComplexityLevel.BASIC: 2,
    ComplexityLevel.INTERMEDIATE: 3,
    ComplexityLevel.ADVANCED: 4,
    ComplexityLevel.EXPERT: 5
}

MIN_LEVEL = ComplexityLevel.FOUNDATIONAL
MAX_LEVEL = ComplexityLevel.EXPERT

# Level assigned to new subject and skill profiles
DEFAULT_LEVEL = ComplexityLevel.BASIC


def nearest_level(
    target: ComplexityLevel,
    candidates: Iterable[ComplexityLevel]
) -> Optional[ComplexityLevel]:
    """
    Pick the candidate closest in rank to ``target``.

    Ties are broken toward the lower rank so missing data never
    over-challenges the learner.

    Args:
        target: Desired level
        candidates: Available levels

    Returns:
        Closest available level, or None if there are no candidates
    """
    target_rank = target.to_numeric()
    best = None
    for level in candidates:
        key = (abs(level.to_numeric() - target_rank), level.to_numeric())
        if best is None or key < best[0]:
            best = (key, level)
    return best[1] if best else None
