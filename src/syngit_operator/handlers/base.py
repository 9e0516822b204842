"""Base handler class with common functionality for all handlers."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Union

from .. import metrics
from ..constants import FIELD_MANAGER
from ..logging import log_resource_event
from ..models import ObjectKey, RemoteUser
from ..utils.context import with_correlation_id
from ..utils.errors import sanitize_exception

Resource = Union[RemoteUser, ObjectKey]


class BaseHandler:
    """Base class for handlers with structured logging and metrics."""

    def __init__(self, kind: str):
        """Initialize base handler.

        Args:
            kind: The Kubernetes resource kind (e.g., "RemoteUser")
        """
        self.kind = kind
        self.logger = logging.getLogger(__name__)

    def _get_resource_context(self, resource: Resource) -> dict[str, Any]:
        """Extract common resource context from a snapshot or a key."""
        return {
            "name": resource.name,
            "namespace": resource.namespace,
            "uid": getattr(resource, "uid", "") or "unknown",
        }

    def _log(
        self,
        level: int,
        resource: Resource,
        message: str,
        event: str,
        reason: str,
        **kwargs: Any,
    ) -> None:
        ctx = self._get_resource_context(resource)
        log_resource_event(
            self.logger,
            controller=FIELD_MANAGER,
            resource_kind=self.kind,
            resource_name=ctx["name"],
            namespace=ctx["namespace"],
            uid=ctx["uid"],
            event=event,
            reason=reason,
            message=message,
            level=level,
            **kwargs,
        )

    def log_debug(self, resource: Resource, message: str, event: str = "debug", reason: str = "Debug", **kwargs: Any) -> None:
        """Log a debug-level structured log message."""
        self._log(logging.DEBUG, resource, message, event, reason, **kwargs)

    def log_info(self, resource: Resource, message: str, event: str = "info", reason: str = "Info", **kwargs: Any) -> None:
        """Log an info-level structured log message.

        Args:
            resource: RemoteUser snapshot or key the message is about
            message: Log message
            event: Event type (default: "info")
            reason: Reason for the event (default: "Info")
            **kwargs: Additional fields to include in the log
        """
        self._log(logging.INFO, resource, message, event, reason, **kwargs)

    def log_warning(
        self,
        resource: Resource,
        message: str,
        error: Exception | None = None,
        event: str = "warning",
        reason: str = "Warning",
        **kwargs: Any,
    ) -> None:
        """Log a warning-level structured log message, with sanitized error details."""
        if error is not None:
            kwargs["error"] = sanitize_exception(error)
            kwargs["error_type"] = type(error).__name__
        self._log(logging.WARNING, resource, message, event, reason, **kwargs)

    def log_error(
        self,
        resource: Resource,
        message: str,
        error: Exception | None = None,
        event: str = "error",
        reason: str = "Error",
        **kwargs: Any,
    ) -> None:
        """Log an error-level structured log message.

        Args:
            resource: RemoteUser snapshot or key the message is about
            message: Log message
            error: Optional exception to include sanitized error details
            event: Event type (default: "error")
            reason: Reason for the event (default: "Error")
            **kwargs: Additional fields to include in the log
        """
        if error is not None:
            kwargs["error"] = sanitize_exception(error)
            kwargs["error_type"] = type(error).__name__
        self._log(logging.ERROR, resource, message, event, reason, **kwargs)

    def reconcile_with_metrics(self, key: ObjectKey, reconcile_fn: Callable[[], None]) -> None:
        """Execute reconciliation with a correlation id, metrics and error logging.

        Args:
            key: Object being reconciled
            reconcile_fn: Function to execute for reconciliation
        """
        with with_correlation_id():
            metrics.reconcile_total.labels(kind=self.kind, result="started").inc()

            start_time = time.time()
            try:
                reconcile_fn()
                metrics.reconcile_total.labels(kind=self.kind, result="success").inc()
            except Exception as e:
                metrics.error_total.labels(kind=self.kind, error_type=type(e).__name__).inc()
                self.log_error(key, "Reconciliation failed", error=e, reason="ReconciliationFailed")
                metrics.reconcile_total.labels(kind=self.kind, result="error").inc()
                raise
            finally:
                duration = time.time() - start_time
                metrics.reconcile_duration_seconds.labels(kind=self.kind).observe(duration)
