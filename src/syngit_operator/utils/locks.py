"""Per-key locking so one object is never reconciled twice at the same time."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Hashable, Iterator


class KeyedLocks:
    """Registry of one lock per key, created on first use.

    Work on distinct keys proceeds in parallel; work sharing a key runs one
    at a time. A key's lock lives as long as someone holds or waits for it,
    so every concurrent holder of a key always contends on the same lock.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[Hashable, threading.Lock] = {}
        self._users: dict[Hashable, int] = {}

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            self._users[key] = self._users.get(key, 0) + 1
        try:
            with lock:
                yield
        finally:
            with self._guard:
                self._users[key] -= 1
                if not self._users[key]:
                    del self._users[key]
                    del self._locks[key]

    def locked(self, key: Hashable) -> bool:
        """Return whether a key is currently held."""
        with self._guard:
            lock = self._locks.get(key)
            return lock is not None and lock.locked()

    def waiters(self, key: Hashable) -> int:
        """Return how many callers hold or wait for a key."""
        with self._guard:
            return self._users.get(key, 0)

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
