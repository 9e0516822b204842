"""Status writer with optimistic-concurrency retry."""

from __future__ import annotations

import logging

from .. import metrics
from ..constants import KIND_REMOTE_USER, STATUS_WRITE_RETRIES
from ..models import ObjectKey, RemoteUserStatus
from ..services.kubernetes.store import ResourceStore
from ..tracing import trace_span
from ..utils.errors import ConflictError

logger = logging.getLogger(__name__)


class StatusWriter:
    """Persist a desired status onto the latest version of a RemoteUser."""

    def __init__(self, store: ResourceStore) -> None:
        self.store = store

    def update_status(
        self,
        key: ObjectKey,
        status: RemoteUserStatus,
        retry_number: int = STATUS_WRITE_RETRIES,
    ) -> None:
        """Overwrite connexionStatus and conditions of ``key`` with ``status``.

        Each attempt re-reads the live object so the write carries its current
        resourceVersion. A version conflict uses up one attempt; at most
        ``retry_number`` extra attempts are made before the conflict is raised.

        Raises:
            NotFoundError: If the object disappeared
            ConflictError: If every attempt lost the race
            StoreError: On any other store failure
        """
        attempts = max(retry_number, 0) + 1
        with trace_span("update_status", kind=KIND_REMOTE_USER, attributes={"remoteuser.key": str(key)}):
            for attempt in range(1, attempts + 1):
                live = self.store.get_remote_user(key)
                try:
                    self.store.replace_remote_user_status(live, status)
                except ConflictError:
                    metrics.status_write_conflicts_total.inc()
                    metrics.status_write_total.labels(result="conflict").inc()
                    if attempt == attempts:
                        raise
                    logger.debug(f"Status write for {key} conflicted (attempt {attempt}/{attempts}), retrying")
                    continue
                except Exception:
                    metrics.status_write_total.labels(result="error").inc()
                    raise
                metrics.status_write_total.labels(result="success").inc()
                return
