"""Builder for RemoteUser snapshots and status bodies."""

from __future__ import annotations

import copy
from types import MappingProxyType
from typing import Any, Mapping

from ..constants import API_GROUP_VERSION, KIND_REMOTE_USER
from ..models import RemoteUser, RemoteUserStatus


def secret_ref_name_from_spec(spec: Mapping[str, Any] | None) -> str:
    """Extract the referenced Secret name from a RemoteUser spec.

    Returns an empty string when the spec carries no reference.
    """
    secret_ref = (spec or {}).get("secretRef") or {}
    return secret_ref.get("name") or ""


def create_remote_user_from_body(body: Mapping[str, Any]) -> RemoteUser:
    """Create an immutable RemoteUser snapshot from an API object.

    Args:
        body: RemoteUser object as returned by the API server or kopf

    Returns:
        Snapshot detached from ``body``
    """
    meta = body.get("metadata") or {}
    spec = copy.deepcopy(dict(body.get("spec") or {}))

    return RemoteUser(
        namespace=meta.get("namespace", "default"),
        name=meta.get("name", ""),
        uid=meta.get("uid", ""),
        resource_version=str(meta.get("resourceVersion", "")),
        labels=MappingProxyType(dict(meta.get("labels") or {})),
        annotations=MappingProxyType(dict(meta.get("annotations") or {})),
        spec=MappingProxyType(spec),
        secret_ref_name=secret_ref_name_from_spec(spec),
        status=RemoteUserStatus.from_dict(body.get("status")),
    )


def create_status_body(remote_user: RemoteUser, status: RemoteUserStatus) -> dict[str, Any]:
    """Build the body submitted to the status subresource.

    The live resourceVersion is carried so that a stale write is rejected
    with a conflict.

    Args:
        remote_user: Live snapshot the write is based on
        status: Desired status

    Returns:
        Request body for a status replace
    """
    return {
        "apiVersion": API_GROUP_VERSION,
        "kind": KIND_REMOTE_USER,
        "metadata": {
            "name": remote_user.name,
            "namespace": remote_user.namespace,
            "resourceVersion": remote_user.resource_version,
        },
        "spec": copy.deepcopy(dict(remote_user.spec)),
        "status": status.to_dict(),
    }
