from __future__ import annotations

import threading
from typing import Hashable


class KeyedLocks:
    """One lock per key, created on first use (e.g. per (staff, ISO week))."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[Hashable, threading.RLock] = {}

    def lock_for(self, key: Hashable) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.RLock()
                self._locks[key] = lock
            return lock
