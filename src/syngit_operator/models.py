"""Value types for RemoteUser reconciliation."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Mapping

from .constants import CONNEXION_STATUS_CONNECTED


def _empty_mapping() -> Mapping[str, Any]:
    return MappingProxyType({})


def format_time(value: datetime) -> str:
    """Format a timestamp the way Kubernetes serializes metav1.Time."""
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def utc_now() -> str:
    """Current time as a Kubernetes timestamp."""
    return format_time(datetime.now(timezone.utc))


@dataclass(frozen=True, order=True)
class ObjectKey:
    """Namespace and name of an object; also a reconciliation request."""

    namespace: str
    name: str

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"


@dataclass(frozen=True)
class Condition:
    """A typed status condition."""

    type: str
    status: str
    reason: str = ""
    message: str = ""
    last_transition_time: str = ""
    observed_generation: int | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Condition:
        return cls(
            type=data.get("type", ""),
            status=data.get("status", ""),
            reason=data.get("reason", ""),
            message=data.get("message", ""),
            last_transition_time=data.get("lastTransitionTime", ""),
            observed_generation=data.get("observedGeneration"),
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "type": self.type,
            "status": self.status,
            "reason": self.reason,
            "message": self.message,
            "lastTransitionTime": self.last_transition_time,
        }
        if self.observed_generation is not None:
            result["observedGeneration"] = self.observed_generation
        return result


@dataclass(frozen=True)
class ConnexionStatus:
    """Result of the last credential verification."""

    status: str = ""
    details: str = ""

    @property
    def connected(self) -> bool:
        return self.status == CONNEXION_STATUS_CONNECTED

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> ConnexionStatus:
        data = data or {}
        return cls(status=data.get("status", ""), details=data.get("details", ""))

    def to_dict(self) -> dict[str, str]:
        result = {}
        if self.status:
            result["status"] = self.status
        if self.details:
            result["details"] = self.details
        return result


@dataclass(frozen=True)
class RemoteUserStatus:
    """Controller-owned status of a RemoteUser."""

    connexion_status: ConnexionStatus = field(default_factory=ConnexionStatus)
    conditions: tuple[Condition, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> RemoteUserStatus:
        data = data or {}
        return cls(
            connexion_status=ConnexionStatus.from_dict(data.get("connexionStatus")),
            conditions=tuple(Condition.from_dict(c) for c in data.get("conditions") or ()),
        )

    def get_condition(self, condition_type: str) -> Condition | None:
        for condition in self.conditions:
            if condition.type == condition_type:
                return condition
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "connexionStatus": self.connexion_status.to_dict(),
            "conditions": [c.to_dict() for c in self.conditions],
        }


@dataclass(frozen=True)
class RemoteUser:
    """Immutable snapshot of a RemoteUser object."""

    namespace: str
    name: str
    uid: str = ""
    resource_version: str = ""
    labels: Mapping[str, str] = field(default_factory=_empty_mapping)
    annotations: Mapping[str, str] = field(default_factory=_empty_mapping)
    spec: Mapping[str, Any] = field(default_factory=_empty_mapping)
    secret_ref_name: str = ""
    status: RemoteUserStatus = field(default_factory=RemoteUserStatus)

    @property
    def key(self) -> ObjectKey:
        return ObjectKey(self.namespace, self.name)

    def with_status(self, status: RemoteUserStatus) -> RemoteUser:
        return replace(self, status=status)
