"""
Profile Repository

Storage interface for learning profiles. The engine only defines the shape of
what is persisted; durable backends implement ProfileRepository. The in-memory
implementation stores serialized snapshots and rejects saves based on a stale
version.
"""

import copy
import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from adaptive_complexity.common.error_handling import ConcurrentModificationError
from adaptive_complexity.common.logger import app_logger
from adaptive_complexity.engine.models import LearningProfile

# Module logger
logger = app_logger.getChild("engine.repository")


class ProfileRepository(ABC):
    """
    Abstract base class for learning profile storage.

    Implementations must treat the profile as a versioned aggregate: ``save``
    succeeds only when the stored version is the one the caller read.
    """

    @abstractmethod
    def get(self, user_id: str) -> Optional[LearningProfile]:
        """
        Retrieve a profile by user id.

        Args:
            user_id: User identifier

        Returns:
            Profile or None if not found
        """
        pass

    @abstractmethod
    def save(self, profile: LearningProfile, expected_version: Optional[int] = None) -> None:
        """
        Store a profile.

        Args:
            profile: Profile to store
            expected_version: Version the caller based its changes on; None
                skips the check

        Raises:
            ConcurrentModificationError: If the stored version differs
        """
        pass

    @abstractmethod
    def list_user_ids(self) -> List[str]:
        """Ids of all stored profiles."""
        pass


class InMemoryProfileRepository(ProfileRepository):
    """
    Dictionary-backed repository.

    Profiles are kept as serialized dictionaries so callers can never mutate
    the stored state through a returned object.
    """

    def __init__(self):
        self._profiles: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.RLock()

    def get(self, user_id: str) -> Optional[LearningProfile]:
        with self._lock:
            data = self._profiles.get(user_id)
            if data is None:
                return None
            return LearningProfile.from_dict(copy.deepcopy(data))

    def save(self, profile: LearningProfile, expected_version: Optional[int] = None) -> None:
        with self._lock:
            stored = self._profiles.get(profile.user_id)
            if expected_version is not None:
                actual_version = stored["version"] if stored is not None else 0
                if actual_version != expected_version:
                    raise ConcurrentModificationError(
                        profile.user_id, expected_version, actual_version
                    )
            self._profiles[profile.user_id] = profile.to_dict()
            logger.debug(f"Saved profile for {profile.user_id!r} at version {profile.version}")

    def list_user_ids(self) -> List[str]:
        with self._lock:
            return list(self._profiles)

    def __len__(self) -> int:
        with self._lock:
            return len(self._profiles)
