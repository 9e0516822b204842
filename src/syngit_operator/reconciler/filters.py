"""Filters deciding which watch events reach the reconciler."""

from __future__ import annotations

import threading
from typing import Any, Mapping

from ..models import ObjectKey

EVENT_ADDED = "ADDED"
EVENT_MODIFIED = "MODIFIED"
EVENT_DELETED = "DELETED"


def remote_user_changed(old: Mapping[str, Any] | None, new: Mapping[str, Any] | None) -> bool:
    """Return True when labels, annotations or spec differ between two versions.

    Status-only changes (our own writes) return False, so writing status
    never triggers another reconciliation.
    """
    if new is None:
        return False
    old = old or {}
    old_meta = old.get("metadata") or {}
    new_meta = new.get("metadata") or {}

    if (old_meta.get("labels") or {}) != (new_meta.get("labels") or {}):
        return True
    if (old_meta.get("annotations") or {}) != (new_meta.get("annotations") or {}):
        return True
    return (old.get("spec") or {}) != (new.get("spec") or {})


class ResourceVersionTracker:
    """Remember the last resourceVersion seen per object.

    Initial listing, ADDED and DELETED events are always admitted. MODIFIED
    events are admitted only if the resourceVersion moved since the last
    observation of the same object.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._versions: dict[ObjectKey, str] = {}

    def observe(self, key: ObjectKey, resource_version: str, event_type: str | None) -> bool:
        """Record an observation and tell whether it should trigger work."""
        with self._lock:
            if event_type == EVENT_DELETED:
                self._versions.pop(key, None)
                return True
            previous = self._versions.get(key)
            self._versions[key] = resource_version
        if event_type == EVENT_MODIFIED:
            return previous is None or previous != resource_version
        return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._versions)
