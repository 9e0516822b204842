"""Kubernetes-backed resource store for RemoteUsers and Secrets."""

from __future__ import annotations

import os
import time
from typing import Any, Callable, Mapping, Protocol, TypeVar

from kubernetes import client, config
from kubernetes.client.exceptions import ApiException
from urllib3.exceptions import HTTPError

from ... import metrics
from ...builders.remote_user import create_remote_user_from_body, create_status_body
from ...constants import API_GROUP, API_VERSION, PLURAL_REMOTE_USERS
from ...models import ObjectKey, RemoteUser, RemoteUserStatus
from ...utils.errors import ConflictError, NotFoundError, StoreError
from ...utils.rate_limit import rate_limit_k8s
from ...utils.secrets import read_secret_data

_T = TypeVar("_T")


class ResourceStore(Protocol):
    """Protocol defining the store operations the reconciler relies on."""

    def get_remote_user(self, key: ObjectKey) -> RemoteUser:
        """Fetch a RemoteUser. Raises NotFoundError when it does not exist."""
        ...

    def get_secret(self, key: ObjectKey) -> Mapping[str, bytes]:
        """Fetch the decoded data of a Secret."""
        ...

    def list_remote_users(self, namespace: str | None = None) -> list[RemoteUser]:
        """List RemoteUsers, in one namespace or cluster wide."""
        ...

    def replace_remote_user_status(self, remote_user: RemoteUser, status: RemoteUserStatus) -> None:
        """Replace the status of the given (live) RemoteUser.

        Raises ConflictError when the object changed since it was read.
        """
        ...


def translate_api_exception(error: ApiException, what: str) -> StoreError:
    """Map an API exception onto the store error hierarchy."""
    message = f"{what}: {error.status} {error.reason}"
    if error.status == 404:
        return NotFoundError(message, status=error.status)
    if error.status == 409:
        return ConflictError(message, status=error.status)
    return StoreError(message, status=error.status)


def load_kube_config() -> None:
    """Load in-cluster configuration, falling back to the local kubeconfig."""
    try:
        config.load_incluster_config()
    except config.ConfigException:
        config.load_kube_config()


class KubernetesResourceStore:
    """Resource store implemented on the Kubernetes API."""

    def __init__(
        self,
        custom_api: client.CustomObjectsApi | None = None,
        core_api: client.CoreV1Api | None = None,
        request_timeout: float | None = None,
    ) -> None:
        self.custom_api = custom_api or client.CustomObjectsApi()
        self.core_api = core_api or client.CoreV1Api()
        if request_timeout is None:
            request_timeout = float(os.getenv("K8S_REQUEST_TIMEOUT_SECONDS", "30"))
        self.request_timeout = request_timeout

    def _call(self, operation: str, what: str, fn: Callable[..., _T], *args: Any, **kwargs: Any) -> _T:
        start_time = time.time()
        try:
            result = rate_limit_k8s(fn)(*args, **kwargs)
            metrics.api_call_total.labels(api_type="k8s", operation=operation, result="success").inc()
            return result
        except ApiException as e:
            metrics.api_call_total.labels(api_type="k8s", operation=operation, result="error").inc()
            raise translate_api_exception(e, what) from e
        except (HTTPError, OSError) as e:
            metrics.api_call_total.labels(api_type="k8s", operation=operation, result="error").inc()
            raise StoreError(f"{what}: {e}") from e
        finally:
            duration = time.time() - start_time
            metrics.api_call_duration_seconds.labels(api_type="k8s", operation=operation).observe(duration)

    def get_remote_user(self, key: ObjectKey) -> RemoteUser:
        body = self._call(
            "get_remote_user",
            f"get remoteuser {key}",
            self.custom_api.get_namespaced_custom_object,
            group=API_GROUP,
            version=API_VERSION,
            namespace=key.namespace,
            plural=PLURAL_REMOTE_USERS,
            name=key.name,
            _request_timeout=self.request_timeout,
        )
        return create_remote_user_from_body(body)

    def get_secret(self, key: ObjectKey) -> Mapping[str, bytes]:
        if not key.name:
            raise NotFoundError(f"get secret {key}: empty secret reference")
        return self._call(
            "get_secret",
            f"get secret {key}",
            read_secret_data,
            self.core_api,
            key.namespace,
            key.name,
            request_timeout=self.request_timeout,
        )

    def list_remote_users(self, namespace: str | None = None) -> list[RemoteUser]:
        common = {"group": API_GROUP, "version": API_VERSION, "plural": PLURAL_REMOTE_USERS}
        if namespace:
            result = self._call(
                "list_remote_users",
                f"list remoteusers in {namespace}",
                self.custom_api.list_namespaced_custom_object,
                namespace=namespace,
                **common,
                _request_timeout=self.request_timeout,
            )
        else:
            result = self._call(
                "list_remote_users",
                "list remoteusers",
                self.custom_api.list_cluster_custom_object,
                **common,
                _request_timeout=self.request_timeout,
            )
        return [create_remote_user_from_body(item) for item in result.get("items", [])]

    def replace_remote_user_status(self, remote_user: RemoteUser, status: RemoteUserStatus) -> None:
        self._call(
            "replace_remote_user_status",
            f"update remoteuser {remote_user.key} status",
            self.custom_api.replace_namespaced_custom_object_status,
            group=API_GROUP,
            version=API_VERSION,
            namespace=remote_user.namespace,
            plural=PLURAL_REMOTE_USERS,
            name=remote_user.name,
            body=create_status_body(remote_user, status),
            _request_timeout=self.request_timeout,
        )
