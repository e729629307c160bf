"""
Per-key Locking

Profile updates are read-modify-write operations, so updates for the same
user must be serialized while updates for different users run in parallel.
KeyedLockRegistry hands out one re-entrant lock per key.
"""

import threading
from contextlib import contextmanager
from typing import Dict, Hashable, Iterator

from adaptive_complexity.common.logger import app_logger

# Module logger
logger = app_logger.getChild("common.locking")


class KeyedLockRegistry:
    """
    Registry of lazily created re-entrant locks, one per key.

    Locks are never removed while the registry lives, so a key always maps
    to the same lock object.
    """

    def __init__(self, name: str = "keyed-locks"):
        self._name = name
        self._locks: Dict[Hashable, threading.RLock] = {}
        self._registry_lock = threading.Lock()

    @property
    def name(self) -> str:
        """Get the name of this registry."""
        return self._name

    def get_lock(self, key: Hashable) -> threading.RLock:
        """
        Get the lock for a key, creating it on first use.

        Args:
            key: Key to lock on (typically a user id)

        Returns:
            The lock for the key
        """
        with self._registry_lock:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.RLock()
                self._locks[key] = lock
                logger.debug(f"{self._name}: created lock for {key!r}")
            return lock

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        """
        Hold the lock for a key for the duration of the block.

        Args:
            key: Key to lock on
        """
        lock = self.get_lock(key)
        with lock:
            yield

    def __len__(self) -> int:
        with self._registry_lock:
            return len(self._locks)

    def __contains__(self, key: Hashable) -> bool:
        with self._registry_lock:
            return key in self._locks
