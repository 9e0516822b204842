"""Utilities for emitting Kubernetes events."""

from __future__ import annotations

from typing import Any

import kopf

from ..constants import (
    API_GROUP_VERSION,
    EVENT_REASON_AUTHENTICATION_FAILED,
    EVENT_REASON_AUTHENTICATION_SUCCEEDED,
    EVENT_REASON_STATUS_UPDATE_FAILED,
    KIND_REMOTE_USER,
)
from ..models import RemoteUser


def event_target(remote_user: RemoteUser) -> dict[str, Any]:
    """Build the object reference an event is attached to."""
    return {
        "apiVersion": API_GROUP_VERSION,
        "kind": KIND_REMOTE_USER,
        "metadata": {
            "name": remote_user.name,
            "namespace": remote_user.namespace,
            "uid": remote_user.uid,
        },
    }


def emit_event(
    body: dict[str, Any],
    reason: str,
    message: str,
    type_: str = "Normal",
) -> None:
    """Emit a Kubernetes event.

    Args:
        body: Object the event refers to
        reason: Event reason
        message: Event message
        type_: Event type (Normal or Warning)
    """
    kopf.event(
        body,
        reason=reason,
        message=message,
        type=type_,
    )


def emit_authentication_succeeded(remote_user: RemoteUser, login: str) -> None:
    """Emit authentication succeeded event."""
    emit_event(
        event_target(remote_user),
        EVENT_REASON_AUTHENTICATION_SUCCEEDED,
        f"Authenticated as {login}",
    )


def emit_authentication_failed(remote_user: RemoteUser, message: str) -> None:
    """Emit authentication failed event."""
    emit_event(event_target(remote_user), EVENT_REASON_AUTHENTICATION_FAILED, message, type_="Warning")


def emit_status_update_failed(remote_user: RemoteUser, message: str) -> None:
    """Emit status update failed event."""
    emit_event(event_target(remote_user), EVENT_REASON_STATUS_UPDATE_FAILED, message, type_="Warning")
