"""
Engine Data Model

Observations, per-subject and per-skill learner profiles, adaptive content and
audit records. Everything here serializes to plain dictionaries so callers can
persist profiles and the adjustment log in whatever store they use.
"""

import enum
import datetime
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple

from adaptive_complexity.common.serialization import SerializableMixin, parse_datetime, serialize
from adaptive_complexity.engine.levels import ComplexityLevel, DEFAULT_LEVEL

# Default value for both learner traits
NEUTRAL_TRAIT = 0.5


class ContentType(enum.Enum):
    """Kinds of learning content the engine can adapt."""
    LESSON = "lesson"
    ACTIVITY = "activity"
    ASSESSMENT = "assessment"
    RESOURCE = "resource"


class ElementType(enum.Enum):
    """Kinds of sub-elements inside a content item."""
    TEXT = "text"
    EXAMPLE = "example"
    QUESTION = "question"
    MEDIA = "media"
    INTERACTIVE = "interactive"


@dataclass(frozen=True)
class PerformanceObservation(SerializableMixin):
    """One recorded outcome of a user completing a piece of content."""

    user_id: str
    content_id: str
    subject_area: str
    skill_area: str
    score: float
    time_spent: float
    completion_rate: float
    attempts: int
    timestamp: datetime.datetime

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "user_id": self.user_id,
            "content_id": self.content_id,
            "subject_area": self.subject_area,
            "skill_area": self.skill_area,
            "score": self.score,
            "time_spent": self.time_spent,
            "completion_rate": self.completion_rate,
            "attempts": self.attempts,
            "timestamp": self.timestamp.isoformat()
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PerformanceObservation':
        """Create from dictionary."""
        return cls(
            user_id=data["user_id"],
            content_id=data["content_id"],
            subject_area=data["subject_area"],
            skill_area=data["skill_area"],
            score=float(data["score"]),
            time_spent=float(data.get("time_spent", 0.0)),
            completion_rate=float(data.get("completion_rate", 1.0)),
            attempts=int(data.get("attempts", 1)),
            timestamp=parse_datetime(data["timestamp"])
        )


def _history_to_dicts(history: List[PerformanceObservation]) -> List[Dict[str, Any]]:
    return [observation.to_dict() for observation in history]


def _history_from_dicts(items: List[Dict[str, Any]]) -> List[PerformanceObservation]:
    return [PerformanceObservation.from_dict(item) for item in items]


@dataclass
class SkillAreaProfile:
    """Level, recommendation and history for one skill within a subject."""

    skill_id: str
    current_level: ComplexityLevel = DEFAULT_LEVEL
    recommended_level: ComplexityLevel = DEFAULT_LEVEL
    confidence_score: float = 0.0
    performance_history: List[PerformanceObservation] = field(default_factory=list)
    strengths: List[str] = field(default_factory=list)
    areas_for_improvement: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "skill_id": self.skill_id,
            "current_level": self.current_level.value,
            "recommended_level": self.recommended_level.value,
            "confidence_score": self.confidence_score,
            "performance_history": _history_to_dicts(self.performance_history),
            "strengths": list(self.strengths),
            "areas_for_improvement": list(self.areas_for_improvement)
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SkillAreaProfile':
        """Create from dictionary."""
        return cls(
            skill_id=data["skill_id"],
            current_level=ComplexityLevel.parse(data.get("current_level", DEFAULT_LEVEL)),
            recommended_level=ComplexityLevel.parse(data.get("recommended_level", DEFAULT_LEVEL)),
            confidence_score=data.get("confidence_score", 0.0),
            performance_history=_history_from_dicts(data.get("performance_history", [])),
            strengths=list(data.get("strengths", [])),
            areas_for_improvement=list(data.get("areas_for_improvement", []))
        )


@dataclass
class SubjectPreference:
    """Level, recommendation and history for one subject, with its skills."""

    subject_id: str
    current_level: ComplexityLevel = DEFAULT_LEVEL
    recommended_level: ComplexityLevel = DEFAULT_LEVEL
    confidence_score: float = 0.0
    performance_history: List[PerformanceObservation] = field(default_factory=list)
    skill_areas: Dict[str, SkillAreaProfile] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "subject_id": self.subject_id,
            "current_level": self.current_level.value,
            "recommended_level": self.recommended_level.value,
            "confidence_score": self.confidence_score,
            "performance_history": _history_to_dicts(self.performance_history),
            "skill_areas": {
                skill_id: skill.to_dict() for skill_id, skill in self.skill_areas.items()
            }
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SubjectPreference':
        """Create from dictionary."""
        return cls(
            subject_id=data["subject_id"],
            current_level=ComplexityLevel.parse(data.get("current_level", DEFAULT_LEVEL)),
            recommended_level=ComplexityLevel.parse(data.get("recommended_level", DEFAULT_LEVEL)),
            confidence_score=data.get("confidence_score", 0.0),
            performance_history=_history_from_dicts(data.get("performance_history", [])),
            skill_areas={
                skill_id: SkillAreaProfile.from_dict(skill_data)
                for skill_id, skill_data in data.get("skill_areas", {}).items()
            }
        )


@dataclass
class LearningProfile(SerializableMixin):
    """
    Everything the engine knows about one learner.

    The profile is treated as a snapshot: engine operations return a new
    profile rather than modifying the one they were given. ``version``
    increases with every change so stores can detect concurrent writers.
    """

    user_id: str
    subject_preferences: Dict[str, SubjectPreference] = field(default_factory=dict)
    learning_rate: float = NEUTRAL_TRAIT
    challenge_preference: float = NEUTRAL_TRAIT
    last_updated: datetime.datetime = field(default_factory=datetime.datetime.now)
    version: int = 0

    def get_subject(self, subject_id: str) -> Optional[SubjectPreference]:
        """Get the preference for a subject, if the learner has one."""
        return self.subject_preferences.get(subject_id)

    def get_skill(self, subject_id: str, skill_id: str) -> Optional[SkillAreaProfile]:
        """Get the profile for a skill within a subject, if present."""
        subject = self.subject_preferences.get(subject_id)
        if subject is None:
            return None
        return subject.skill_areas.get(skill_id)

    def with_challenge_preference(self, value: float) -> 'LearningProfile':
        """
        Return a copy with a new challenge preference.

        Raises:
            ValueError: If the value is outside [0, 1]
        """
        if not 0.0 <= value <= 1.0:
            raise ValueError(f"challenge_preference must be between 0 and 1, got {value}")
        return replace(
            self,
            challenge_preference=value,
            last_updated=datetime.datetime.now(),
            version=self.version + 1
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "user_id": self.user_id,
            "subject_preferences": {
                subject_id: subject.to_dict()
                for subject_id, subject in self.subject_preferences.items()
            },
            "learning_rate": self.learning_rate,
            "challenge_preference": self.challenge_preference,
            "last_updated": self.last_updated.isoformat(),
            "version": self.version
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LearningProfile':
        """Create from dictionary."""
        return cls(
            user_id=data["user_id"],
            subject_preferences={
                subject_id: SubjectPreference.from_dict(subject_data)
                for subject_id, subject_data in data.get("subject_preferences", {}).items()
            },
            learning_rate=data.get("learning_rate", NEUTRAL_TRAIT),
            challenge_preference=data.get("challenge_preference", NEUTRAL_TRAIT),
            last_updated=parse_datetime(data["last_updated"])
                if data.get("last_updated") else datetime.datetime.now(),
            version=data.get("version", 0)
        )


@dataclass(frozen=True)
class AdaptiveElement:
    """A sub-element of content carrying one variant per complexity level."""

    element_id: str
    variants: Dict[ComplexityLevel, Any] = field(default_factory=dict)
    element_type: ElementType = ElementType.TEXT
    selected_variant: Any = None

    @property
    def available_levels(self) -> List[ComplexityLevel]:
        """Levels this element has a variant for, lowest first."""
        return sorted(self.variants)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "element_id": self.element_id,
            "element_type": self.element_type.value,
            "variants": serialize(self.variants),
            "selected_variant": serialize(self.selected_variant)
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AdaptiveElement':
        """Create from dictionary."""
        return cls(
            element_id=data["element_id"],
            element_type=ElementType(data.get("element_type", ElementType.TEXT.value)),
            variants={
                ComplexityLevel.parse(level): variant
                for level, variant in data.get("variants", {}).items()
            },
            selected_variant=data.get("selected_variant")
        )


@dataclass(frozen=True)
class AdaptiveContent(SerializableMixin):
    """A content item tagged with a subject, skills and a complexity level."""

    content_id: str
    subject_area: str
    skill_areas: Tuple[str, ...] = ()
    complexity_level: ComplexityLevel = DEFAULT_LEVEL
    elements: Tuple[AdaptiveElement, ...] = ()
    title: str = ""
    content_type: ContentType = ContentType.LESSON

    def __post_init__(self):
        # Accept lists from callers while keeping the stored value immutable
        object.__setattr__(self, "skill_areas", tuple(self.skill_areas))
        object.__setattr__(self, "elements", tuple(self.elements))

    @property
    def primary_skill(self) -> Optional[str]:
        """The first listed skill area, if any."""
        return self.skill_areas[0] if self.skill_areas else None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "content_id": self.content_id,
            "title": self.title,
            "content_type": self.content_type.value,
            "subject_area": self.subject_area,
            "skill_areas": list(self.skill_areas),
            "complexity_level": self.complexity_level.value,
            "elements": [element.to_dict() for element in self.elements]
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AdaptiveContent':
        """Create from dictionary."""
        return cls(
            content_id=data["content_id"],
            title=data.get("title", ""),
            content_type=ContentType(data.get("content_type", ContentType.LESSON.value)),
            subject_area=data["subject_area"],
            skill_areas=tuple(data.get("skill_areas", ())),
            complexity_level=ComplexityLevel.parse(data.get("complexity_level", DEFAULT_LEVEL)),
            elements=tuple(
                AdaptiveElement.from_dict(element) for element in data.get("elements", [])
            )
        )


@dataclass(frozen=True)
class ComplexityAdjustmentResult(SerializableMixin):
    """Write-once audit record of a complexity level change."""

    user_id: str
    content_id: str
    previous_level: ComplexityLevel
    new_level: ComplexityLevel
    reason: str
    confidence_score: float
    timestamp: datetime.datetime
    recommended_next_steps: Tuple[str, ...] = ()

    @property
    def magnitude(self) -> int:
        """Signed rank change of the adjustment."""
        return self.new_level.to_numeric() - self.previous_level.to_numeric()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "user_id": self.user_id,
            "content_id": self.content_id,
            "previous_level": self.previous_level.value,
            "new_level": self.new_level.value,
            "reason": self.reason,
            "confidence_score": self.confidence_score,
            "timestamp": self.timestamp.isoformat(),
            "recommended_next_steps": list(self.recommended_next_steps),
            "magnitude": self.magnitude
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ComplexityAdjustmentResult':
        """Create from dictionary."""
        return cls(
            user_id=data["user_id"],
            content_id=data["content_id"],
            previous_level=ComplexityLevel.parse(data["previous_level"]),
            new_level=ComplexityLevel.parse(data["new_level"]),
            reason=data["reason"],
            confidence_score=data["confidence_score"],
            timestamp=parse_datetime(data["timestamp"]),
            recommended_next_steps=tuple(data.get("recommended_next_steps", ()))
        )
