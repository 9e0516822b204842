"""Secondary index from Secret name to the RemoteUsers that reference it."""

from __future__ import annotations

import threading
from collections import defaultdict
from typing import Iterable

from ..models import ObjectKey, RemoteUser


class SecretRefIndex:
    """Index of RemoteUsers by the Secret named in ``spec.secretRef.name``.

    Entries are scoped to the namespace, since a RemoteUser can only
    reference a Secret of its own namespace. RemoteUsers without a reference
    are not indexed.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._by_secret: dict[ObjectKey, set[ObjectKey]] = defaultdict(set)
        self._by_remote_user: dict[ObjectKey, ObjectKey] = {}

    def upsert(self, remote_user: RemoteUser) -> None:
        """Index (or re-index) a RemoteUser after it was created or changed."""
        with self._lock:
            self._remove_locked(remote_user.key)
            if not remote_user.secret_ref_name:
                return
            secret_key = ObjectKey(remote_user.namespace, remote_user.secret_ref_name)
            self._by_secret[secret_key].add(remote_user.key)
            self._by_remote_user[remote_user.key] = secret_key

    def remove(self, key: ObjectKey) -> None:
        """Drop a deleted RemoteUser from the index."""
        with self._lock:
            self._remove_locked(key)

    def _remove_locked(self, key: ObjectKey) -> None:
        secret_key = self._by_remote_user.pop(key, None)
        if secret_key is None:
            return
        dependents = self._by_secret.get(secret_key)
        if dependents is not None:
            dependents.discard(key)
            if not dependents:
                del self._by_secret[secret_key]

    def rebuild(self, remote_users: Iterable[RemoteUser]) -> None:
        """Replace the whole index with the given RemoteUsers."""
        with self._lock:
            self._by_secret.clear()
            self._by_remote_user.clear()
        for remote_user in remote_users:
            self.upsert(remote_user)

    def lookup(self, namespace: str, secret_name: str) -> set[ObjectKey]:
        """Return the RemoteUsers referencing a Secret."""
        with self._lock:
            return set(self._by_secret.get(ObjectKey(namespace, secret_name), ()))

    def requests_for_secret(self, namespace: str, secret_name: str) -> list[ObjectKey]:
        """Translate a Secret change into the reconciliation requests it causes."""
        return sorted(self.lookup(namespace, secret_name))

    def secret_for(self, key: ObjectKey) -> str | None:
        """Return the Secret name a RemoteUser is indexed under."""
        with self._lock:
            secret_key = self._by_remote_user.get(key)
        return secret_key.name if secret_key else None

    def __len__(self) -> int:
        with self._lock:
            return len(self._by_remote_user)
