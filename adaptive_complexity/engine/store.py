"""
Performance Store

Append-only history of observations per subject and per skill. Histories are
kept ordered by timestamp (oldest first); observations with equal timestamps
keep their arrival order.
"""

import bisect
from typing import List, Tuple

from adaptive_complexity.common.error_handling import ObservationValidationError
from adaptive_complexity.common.logger import app_logger
from adaptive_complexity.engine.models import (
    LearningProfile,
    PerformanceObservation,
    SkillAreaProfile,
    SubjectPreference
)
from adaptive_complexity.engine.validation import validate_observation

# Module logger
logger = app_logger.getChild("engine.store")


def insert_chronologically(
    history: List[PerformanceObservation],
    observation: PerformanceObservation
) -> None:
    """Insert after any observation with the same or an earlier timestamp."""
    timestamps = [item.timestamp for item in history]
    index = bisect.bisect_right(timestamps, observation.timestamp)
    history.insert(index, observation)


def ensure_subject(profile: LearningProfile, subject_id: str) -> SubjectPreference:
    """Get the subject preference, creating a fresh one on first sight."""
    subject = profile.subject_preferences.get(subject_id)
    if subject is None:
        subject = SubjectPreference(subject_id=subject_id)
        profile.subject_preferences[subject_id] = subject
        logger.debug(f"Created subject preference {subject_id!r} for user {profile.user_id!r}")
    return subject


def ensure_skill(subject: SubjectPreference, skill_id: str) -> SkillAreaProfile:
    """Get the skill profile, creating a fresh one on first sight."""
    skill = subject.skill_areas.get(skill_id)
    if skill is None:
        skill = SkillAreaProfile(skill_id=skill_id)
        subject.skill_areas[skill_id] = skill
        logger.debug(f"Created skill profile {skill_id!r} in subject {subject.subject_id!r}")
    return skill


def _check_timezone(
    history: List[PerformanceObservation],
    observation: PerformanceObservation
) -> None:
    # Naive and aware datetimes cannot be ordered against each other
    if not history:
        return
    if (history[0].timestamp.tzinfo is None) != (observation.timestamp.tzinfo is None):
        raise ObservationValidationError(
            [{
                "field": "timestamp",
                "message": "timestamp awareness does not match the existing history",
                "type": "timezone_mismatch"
            }],
            context={"user_id": observation.user_id, "content_id": observation.content_id}
        )


def append_observation(
    profile: LearningProfile,
    observation: PerformanceObservation
) -> Tuple[SubjectPreference, SkillAreaProfile]:
    """
    Validate an observation and append it to its subject and skill histories.

    The profile passed in is modified; callers working with snapshots pass a
    copy.

    Args:
        profile: Profile to append to
        observation: Observation to record

    Returns:
        The subject preference and skill profile that received the observation

    Raises:
        ObservationValidationError: If the observation is invalid or belongs
            to a different user
    """
    validate_observation(observation)
    if observation.user_id != profile.user_id:
        raise ObservationValidationError(
            [{
                "field": "user_id",
                "message": f"observation belongs to {observation.user_id!r}, not {profile.user_id!r}",
                "type": "user_mismatch"
            }],
            context={"user_id": profile.user_id, "content_id": observation.content_id}
        )

    subject = ensure_subject(profile, observation.subject_area)
    _check_timezone(subject.performance_history, observation)
    skill = ensure_skill(subject, observation.skill_area)

    insert_chronologically(subject.performance_history, observation)
    insert_chronologically(skill.performance_history, observation)

    return subject, skill
