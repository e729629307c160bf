"""
Adaptive Complexity Engine

AdaptiveComplexityEngine is a stateless facade over the scoring,
recommendation, learning-rate, content and audit components: every operation
takes a LearningProfile snapshot and returns a new one, so a single engine can
be shared freely between threads.

LearningProfileService adds storage on top of the engine and serializes
read-modify-write updates per user.
"""

import copy
import datetime
import logging
from typing import Iterator, List, Optional, Tuple

from adaptive_complexity.common.config import AdaptiveComplexityConfig
from adaptive_complexity.common.init import initialize
from adaptive_complexity.common.error_handling import (
    ConcurrentModificationError,
    ProfileNotFoundError,
    log_error,
    retry
)
from adaptive_complexity.common.locking import KeyedLockRegistry
from adaptive_complexity.common.logger import app_logger, log_execution_time, with_context
from adaptive_complexity.engine.adjustments import AdjustmentLog, record_adjustment
from adaptive_complexity.engine.content import adapt_content, determine_complexity_level
from adaptive_complexity.engine.learning_rate import estimate_learning_rate
from adaptive_complexity.engine.levels import DEFAULT_LEVEL, ComplexityLevel
from adaptive_complexity.engine.models import (
    AdaptiveContent,
    ComplexityAdjustmentResult,
    LearningProfile,
    NEUTRAL_TRAIT,
    PerformanceObservation,
    SkillAreaProfile,
    SubjectPreference
)
from adaptive_complexity.engine.recommender import LevelRecommendation, recalculate, recommend
from adaptive_complexity.engine.repository import InMemoryProfileRepository, ProfileRepository
from adaptive_complexity.engine.store import append_observation

# Module logger
logger = app_logger.getChild("engine.service")


def _scope_label(subject_id: str, skill_id: Optional[str] = None) -> str:
    return f"{subject_id}/{skill_id}" if skill_id else subject_id


class AdaptiveComplexityEngine:
    """
    Stateless adaptive complexity engine.

    The engine holds only its configuration. It proposes levels; the current
    level of a subject or skill changes only through
    ``accept_recommendation``.
    """

    def __init__(self, config: Optional[AdaptiveComplexityConfig] = None):
        """
        Initialize the engine.

        Args:
            config: Engine configuration (defaults to built-in values)
        """
        self.config = config or AdaptiveComplexityConfig()

    @classmethod
    def from_app_config(cls, config_path: Optional[str] = None) -> 'AdaptiveComplexityEngine':
        """
        Create an engine from the application configuration.

        The configuration's logging section is applied to the package logger.
        """
        return cls(initialize(config_path).adaptive)

    def create_profile(
        self,
        user_id: str,
        challenge_preference: float = NEUTRAL_TRAIT
    ) -> LearningProfile:
        """
        Create an empty profile for a learner.

        Raises:
            ValueError: If the challenge preference is outside [0, 1]
        """
        if not 0.0 <= challenge_preference <= 1.0:
            raise ValueError(
                f"challenge_preference must be between 0 and 1, got {challenge_preference}"
            )
        return LearningProfile(user_id=user_id, challenge_preference=challenge_preference)

    @log_execution_time(logger)
    def record_observation(
        self,
        profile: LearningProfile,
        observation: PerformanceObservation
    ) -> LearningProfile:
        """
        Record an observation and refresh the affected recommendations.

        The observation is appended to its subject and skill histories, the
        subject's recommendations are recalculated, and the learning-rate
        trait is updated from the subject history.

        Args:
            profile: Current profile snapshot (left untouched)
            observation: New observation

        Returns:
            Updated profile snapshot with an incremented version

        Raises:
            ObservationValidationError: If the observation is invalid
        """
        updated = copy.deepcopy(profile)
        subject, _ = append_observation(updated, observation)

        recalculate(updated, observation.subject_area, self.config)
        updated.learning_rate = estimate_learning_rate(
            updated.learning_rate, subject.performance_history
        )

        updated.version = profile.version + 1
        updated.last_updated = datetime.datetime.now()
        return updated

    def recommend_level(
        self,
        profile: LearningProfile,
        subject_id: str,
        skill_id: Optional[str] = None
    ) -> ComplexityLevel:
        """
        Level to present next for a subject and optional skill.

        Args:
            profile: Learner profile
            subject_id: Subject identifier
            skill_id: Optional skill identifier

        Returns:
            The stored recommendation when it is trusted enough, otherwise
            the current level
        """
        return determine_complexity_level(profile, subject_id, skill_id, self.config)

    def evaluate(
        self,
        profile: LearningProfile,
        subject_id: str,
        skill_id: Optional[str] = None
    ) -> Optional[LevelRecommendation]:
        """
        Compute a fresh recommendation without changing the profile.

        Returns:
            The recommendation, or None when the subject or skill is unknown
            or has too little history
        """
        target = self._find_target(profile, subject_id, skill_id)
        if target is None:
            return None
        return recommend(
            target.performance_history,
            target.current_level,
            profile.learning_rate,
            profile.challenge_preference,
            self.config
        )

    def adapt_content(
        self,
        content: AdaptiveContent,
        profile: LearningProfile
    ) -> AdaptiveContent:
        """Re-target content at the learner's recommended level."""
        return adapt_content(content, profile, self.config)

    def record_adjustment(
        self,
        user_id: str,
        content_id: str,
        previous_level: ComplexityLevel,
        new_level: ComplexityLevel,
        reason: str
    ) -> ComplexityAdjustmentResult:
        """Build the audit record for a level change."""
        return record_adjustment(user_id, content_id, previous_level, new_level, reason)

    def accept_recommendation(
        self,
        profile: LearningProfile,
        subject_id: str,
        skill_id: Optional[str] = None,
        content_id: str = "",
        reason: Optional[str] = None
    ) -> Tuple[LearningProfile, Optional[ComplexityAdjustmentResult]]:
        """
        Move the current level of a subject or skill to its recommendation.

        Args:
            profile: Current profile snapshot (left untouched)
            subject_id: Subject identifier
            skill_id: Optional skill identifier; the subject is used when omitted
            content_id: Content the change is recorded against
            reason: Explanation for the audit record (generated when omitted)

        Returns:
            The updated snapshot and the audit record, or the original
            snapshot and None when there is nothing to change
        """
        target = self._find_target(profile, subject_id, skill_id)
        if target is None or target.recommended_level == target.current_level:
            return profile, None

        updated = copy.deepcopy(profile)
        updated_target = self._find_target(updated, subject_id, skill_id)
        previous_level = updated_target.current_level
        updated_target.current_level = updated_target.recommended_level
        updated.version = profile.version + 1
        updated.last_updated = datetime.datetime.now()

        if reason is None:
            reason = (
                f"Accepted recommendation for {_scope_label(subject_id, skill_id)} "
                f"(confidence {updated_target.confidence_score:.2f})"
            )

        result = self.record_adjustment(
            profile.user_id,
            content_id or _scope_label(subject_id, skill_id),
            previous_level,
            updated_target.current_level,
            reason
        )
        return updated, result

    def recommendation_changes(
        self,
        before: LearningProfile,
        after: LearningProfile,
        subject_id: str
    ) -> Iterator[Tuple[Optional[str], ComplexityLevel, ComplexityLevel, float]]:
        """
        Recommendations of a subject and its skills that differ between snapshots.

        A subject or skill missing from ``before`` is compared against the
        default level it starts at.

        Yields:
            (skill_id or None for the subject, previous recommendation,
            new recommendation, new confidence)
        """
        new_subject = after.get_subject(subject_id)
        if new_subject is None:
            return
        old_subject = before.get_subject(subject_id)

        old_level = old_subject.recommended_level if old_subject else DEFAULT_LEVEL
        if old_level != new_subject.recommended_level:
            yield None, old_level, new_subject.recommended_level, new_subject.confidence_score

        for skill_id, new_skill in new_subject.skill_areas.items():
            old_skill = old_subject.skill_areas.get(skill_id) if old_subject else None
            old_level = old_skill.recommended_level if old_skill else DEFAULT_LEVEL
            if old_level != new_skill.recommended_level:
                yield (
                    skill_id,
                    old_level,
                    new_skill.recommended_level,
                    new_skill.confidence_score
                )

    @staticmethod
    def _find_target(
        profile: LearningProfile,
        subject_id: str,
        skill_id: Optional[str]
    ):
        subject: Optional[SubjectPreference] = profile.get_subject(subject_id)
        if subject is None:
            return None
        if skill_id is None:
            return subject
        skill: Optional[SkillAreaProfile] = subject.skill_areas.get(skill_id)
        return skill


class LearningProfileService:
    """
    Stored-profile front end to the engine.

    Updates for the same user are serialized with a per-user lock and saved
    with an optimistic version check; updates for different users proceed
    in parallel.
    """

    def __init__(
        self,
        engine: Optional[AdaptiveComplexityEngine] = None,
        repository: Optional[ProfileRepository] = None,
        adjustment_log: Optional[AdjustmentLog] = None
    ):
        """
        Initialize the service.

        Args:
            engine: Engine to delegate to
            repository: Profile storage (in-memory by default)
            adjustment_log: Audit log receiving every recorded adjustment
        """
        self.engine = engine or AdaptiveComplexityEngine()
        self.repository = repository if repository is not None else InMemoryProfileRepository()
        self.adjustment_log = adjustment_log if adjustment_log is not None else AdjustmentLog()
        self._locks = KeyedLockRegistry("profile-locks")

    def get_profile(self, user_id: str) -> LearningProfile:
        """
        Load a stored profile.

        Raises:
            ProfileNotFoundError: If the user has no profile
        """
        profile = self.repository.get(user_id)
        if profile is None:
            raise ProfileNotFoundError(user_id)
        return profile

    def _load_or_create(self, user_id: str) -> LearningProfile:
        profile = self.repository.get(user_id)
        if profile is None:
            profile = self.engine.create_profile(user_id)
        return profile

    def record_observation(self, observation: PerformanceObservation) -> LearningProfile:
        """
        Record an observation for its user and store the new profile.

        Recommendation changes caused by the observation are written to the
        adjustment log.

        Raises:
            ObservationValidationError: If the observation is invalid
        """
        with self._locks.hold(observation.user_id):
            try:
                return self._record_observation(observation)
            except ConcurrentModificationError as e:
                log_error(e, level=logging.ERROR, target=logger)
                raise

    @retry(max_retries=3, retry_exceptions=(ConcurrentModificationError,))
    def _record_observation(self, observation: PerformanceObservation) -> LearningProfile:
        log = with_context(
            logger.name,
            user_id=observation.user_id,
            subject_id=observation.subject_area
        )

        profile = self._load_or_create(observation.user_id)
        updated = self.engine.record_observation(profile, observation)
        self.repository.save(updated, expected_version=profile.version)

        for skill_id, previous, new, confidence in self.engine.recommendation_changes(
            profile, updated, observation.subject_area
        ):
            scope = _scope_label(observation.subject_area, skill_id)
            result = self.engine.record_adjustment(
                observation.user_id,
                observation.content_id,
                previous,
                new,
                f"Recommended level for {scope} changed after new performance data "
                f"(confidence {confidence:.2f})"
            )
            self.adjustment_log.append(result)

        log.debug(f"Recorded observation {observation.content_id!r} (version {updated.version})")
        return updated

    def set_challenge_preference(self, user_id: str, value: float) -> LearningProfile:
        """
        Set a learner's challenge preference, creating the profile if needed.

        Raises:
            ValueError: If the value is outside [0, 1]
        """
        with self._locks.hold(user_id):
            profile = self._load_or_create(user_id)
            updated = profile.with_challenge_preference(value)
            self.repository.save(updated, expected_version=profile.version)
            return updated

    def recommend_level(
        self,
        user_id: str,
        subject_id: str,
        skill_id: Optional[str] = None
    ) -> ComplexityLevel:
        """Level to present next; unknown users get the default level."""
        profile = self._load_or_create(user_id)
        return self.engine.recommend_level(profile, subject_id, skill_id)

    def adapt_content(self, user_id: str, content: AdaptiveContent) -> AdaptiveContent:
        """Re-target content at the user's recommended level."""
        profile = self._load_or_create(user_id)
        return self.engine.adapt_content(content, profile)

    def accept_recommendation(
        self,
        user_id: str,
        subject_id: str,
        skill_id: Optional[str] = None,
        content_id: str = "",
        reason: Optional[str] = None
    ) -> Optional[ComplexityAdjustmentResult]:
        """
        Advance a stored current level to its recommendation.

        Returns:
            The audit record, or None when nothing changed

        Raises:
            ProfileNotFoundError: If the user has no profile
        """
        with self._locks.hold(user_id):
            profile = self.get_profile(user_id)
            updated, result = self.engine.accept_recommendation(
                profile, subject_id, skill_id, content_id, reason
            )
            if result is None:
                return None
            self.repository.save(updated, expected_version=profile.version)
            self.adjustment_log.append(result)
            return result

    def adjustments_for(self, user_id: str) -> List[ComplexityAdjustmentResult]:
        """Audit records for a user, oldest first."""
        return self.adjustment_log.for_user(user_id)
