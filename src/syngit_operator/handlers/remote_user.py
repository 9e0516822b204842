"""Handler for RemoteUser CRD."""

from __future__ import annotations

import os
import threading
from typing import Any, Mapping

import kopf

from .. import metrics
from ..builders.remote_user import create_remote_user_from_body
from ..builders.verifier import create_verifier_from_token
from ..constants import API_GROUP_VERSION, KIND_REMOTE_USER, KIND_SECRET, STATUS_WRITE_RETRIES
from ..models import ObjectKey, RemoteUser
from ..reconciler.filters import EVENT_DELETED, ResourceVersionTracker, remote_user_changed
from ..reconciler.indexer import SecretRefIndex
from ..reconciler.prober import OUTCOME_FAILED, OUTCOME_SUCCEEDED, ProbeResult, probe_authentication
from ..reconciler.status import StatusWriter
from ..services.identity.base import VerifierFactory
from ..services.kubernetes.store import KubernetesResourceStore, ResourceStore, load_kube_config
from ..tracing import trace_span
from ..utils.errors import NotFoundError, StoreError, sanitize_error_message, sanitize_exception
from ..utils.events import (
    emit_authentication_failed,
    emit_authentication_succeeded,
    emit_status_update_failed,
)
from ..utils.locks import KeyedLocks
from ..utils.secrets import EMPTY_SECRET_DATA
from .base import BaseHandler


class RemoteUserHandler(BaseHandler):
    """Handler for RemoteUser resources."""

    def __init__(
        self,
        store: ResourceStore,
        verifier_factory: VerifierFactory = create_verifier_from_token,
        locks: KeyedLocks | None = None,
        status_retries: int = STATUS_WRITE_RETRIES,
    ):
        """Initialize RemoteUser handler.

        Args:
            store: Resource store to read objects from and write status to
            verifier_factory: Builds an identity verifier for a token
            locks: Per-key locks shared by every path that reconciles
            status_retries: Extra status write attempts after a conflict
        """
        super().__init__(KIND_REMOTE_USER)
        self.store = store
        self.verifier_factory = verifier_factory
        self.status_writer = StatusWriter(store)
        self.locks = locks if locks is not None else KeyedLocks()
        self.status_retries = status_retries

    def reconcile(self, key: ObjectKey) -> None:
        """Reconcile one RemoteUser.

        Raises:
            StoreError: If the RemoteUser itself could not be read for a
                reason other than its deletion
        """
        self.reconcile_with_metrics(key, lambda: self._reconcile(key))

    def _reconcile(self, key: ObjectKey) -> None:
        with self.locks.hold(key), trace_span(
            "reconcile_remote_user", kind=KIND_REMOTE_USER, attributes={"remoteuser.key": str(key)}
        ):
            try:
                remote_user = self.store.get_remote_user(key)
            except NotFoundError:
                self.log_info(key, "RemoteUser not found, nothing to do", event="reconcile", reason="Deleted")
                return

            self.log_info(remote_user, "Reconcile request", event="reconcile", reason="ReconcileRequest")

            secret_data = self._fetch_secret(remote_user)
            result = probe_authentication(remote_user, secret_data, self.verifier_factory)
            self._record_probe(remote_user, result)

            try:
                self.status_writer.update_status(key, result.status, retry_number=self.status_retries)
            except StoreError as e:
                self.log_warning(
                    remote_user,
                    "Status update failed, keeping previous status until the next trigger",
                    error=e,
                    reason="StatusUpdateFailed",
                )
                emit_status_update_failed(remote_user, f"Status update failed: {sanitize_exception(e)}")

    def _fetch_secret(self, remote_user: RemoteUser) -> Mapping[str, bytes]:
        """Read the referenced Secret; any failure means no credential data."""
        secret_key = ObjectKey(remote_user.namespace, remote_user.secret_ref_name)
        try:
            return self.store.get_secret(secret_key)
        except Exception as e:
            self.log_debug(
                remote_user,
                "Referenced secret unavailable, using empty credential",
                reason="SecretUnavailable",
                secret=remote_user.secret_ref_name,
                error=sanitize_exception(e),
            )
            return EMPTY_SECRET_DATA

    def _record_probe(self, remote_user: RemoteUser, result: ProbeResult) -> None:
        metrics.authentication_probe_total.labels(result=result.outcome).inc()
        if result.outcome == OUTCOME_SUCCEEDED:
            self.log_info(
                remote_user,
                f"Authentication was successful with the user {result.login}",
                event="authentication",
                reason="AuthenticationSucceeded",
                login=result.login,
            )
            emit_authentication_succeeded(remote_user, result.login)
        elif result.outcome == OUTCOME_FAILED:
            message = sanitize_error_message(result.error)
            self.log_warning(remote_user, message, event="authentication", reason="AuthenticationFailed")
            emit_authentication_failed(remote_user, message)


# Global handler state
_index = SecretRefIndex()
_secret_versions = ResourceVersionTracker()
_handler: RemoteUserHandler | None = None
_handler_lock = threading.Lock()


def get_handler() -> RemoteUserHandler:
    """Return the process-wide handler, connecting to the cluster on first use."""
    global _handler
    with _handler_lock:
        if _handler is None:
            load_kube_config()
            retries = int(os.getenv("STATUS_WRITE_RETRIES", str(STATUS_WRITE_RETRIES)))
            _handler = RemoteUserHandler(KubernetesResourceStore(), status_retries=retries)
        return _handler


def _reconcile_or_retry(key: ObjectKey) -> None:
    try:
        get_handler().reconcile(key)
    except StoreError as e:
        raise kopf.TemporaryError(f"Cannot read RemoteUser {key}: {sanitize_exception(e)}", delay=10) from e


def remote_user_update_filter(old: Any = None, new: Any = None, **_: Any) -> bool:
    """Let an update through only when labels, annotations or spec changed."""
    return remote_user_changed(old, new)


@kopf.on.create(API_GROUP_VERSION, KIND_REMOTE_USER)
@kopf.on.resume(API_GROUP_VERSION, KIND_REMOTE_USER)
def handle_remote_user(name: str, namespace: str, **kwargs: Any) -> None:
    """Handle RemoteUser creation and operator restarts."""
    _reconcile_or_retry(ObjectKey(namespace, name))


@kopf.on.update(API_GROUP_VERSION, KIND_REMOTE_USER, when=remote_user_update_filter)
def handle_remote_user_update(name: str, namespace: str, **kwargs: Any) -> None:
    """Handle RemoteUser labels, annotations or spec changes."""
    _reconcile_or_retry(ObjectKey(namespace, name))


@kopf.on.startup()
def warm_secret_index(**kwargs: Any) -> None:
    """Fill the secret index from a live listing before any watch starts."""
    try:
        remote_users = get_handler().store.list_remote_users()
    except StoreError as e:
        raise kopf.TemporaryError(f"Cannot list RemoteUsers: {sanitize_exception(e)}", delay=10) from e
    _index.rebuild(remote_users)


@kopf.on.event(API_GROUP_VERSION, KIND_REMOTE_USER)
def index_remote_user(event: dict[str, Any], body: Mapping[str, Any], **kwargs: Any) -> None:
    """Keep the secret index in line with every observed RemoteUser."""
    remote_user = create_remote_user_from_body(body)
    if event.get("type") == EVENT_DELETED:
        _index.remove(remote_user.key)
    else:
        _index.upsert(remote_user)


@kopf.on.event("v1", "secrets")
def handle_secret_event(event: dict[str, Any], body: Mapping[str, Any], **kwargs: Any) -> None:
    """Re-verify every RemoteUser that references a changed Secret."""
    meta = body.get("metadata") or {}
    secret_key = ObjectKey(meta.get("namespace", "default"), meta.get("name", ""))

    if not _secret_versions.observe(secret_key, str(meta.get("resourceVersion", "")), event.get("type")):
        return

    handler = None
    for request in _index.requests_for_secret(secret_key.namespace, secret_key.name):
        handler = handler or get_handler()
        metrics.secret_triggered_reconcile_total.inc()
        handler.log_info(
            request,
            f"{KIND_SECRET} {secret_key.name} changed",
            event="secret_changed",
            reason="SecretChanged",
            secret=secret_key.name,
        )
        try:
            handler.reconcile(request)
        except StoreError as e:
            handler.log_warning(request, "Secret-triggered reconciliation failed", error=e, reason="ReconciliationFailed")
