"""Shared fixtures for the operator tests."""

from __future__ import annotations

import copy
from typing import Any, Mapping

import pytest

from syngit_operator.builders.remote_user import create_remote_user_from_body
from syngit_operator.constants import ANNOTATION_AUTH_TEST, API_GROUP_VERSION, KIND_REMOTE_USER
from syngit_operator.models import ObjectKey, RemoteUser, RemoteUserStatus
from syngit_operator.utils.errors import ConflictError, NotFoundError, VerificationError


def make_remote_user_body(
    name: str = "alice",
    namespace: str = "default",
    secret_name: str | None = "alice-creds",
    auth_test: str | None = "true",
    status: dict[str, Any] | None = None,
    resource_version: str = "1",
) -> dict[str, Any]:
    """Build a RemoteUser object the way the API server returns it."""
    annotations = {}
    if auth_test is not None:
        annotations[ANNOTATION_AUTH_TEST] = auth_test
    spec: dict[str, Any] = {"email": f"{name}@example.com", "gitBaseDomainFQDN": "github.com"}
    if secret_name is not None:
        spec["secretRef"] = {"name": secret_name}
    body = {
        "apiVersion": API_GROUP_VERSION,
        "kind": KIND_REMOTE_USER,
        "metadata": {
            "name": name,
            "namespace": namespace,
            "uid": f"uid-{name}",
            "resourceVersion": resource_version,
            "annotations": annotations,
        },
        "spec": spec,
    }
    if status is not None:
        body["status"] = status
    return body


class FakeStore:
    """In-memory resource store with optimistic concurrency."""

    def __init__(self) -> None:
        self.remote_users: dict[ObjectKey, dict[str, Any]] = {}
        self.secrets: dict[ObjectKey, Mapping[str, bytes]] = {}
        self.pending_conflicts = 0
        self.secret_error: Exception | None = None
        self.get_error: Exception | None = None
        self.write_error: Exception | None = None
        self.get_calls = 0
        self.write_attempts = 0
        self.writes: list[RemoteUserStatus] = []

    def add_remote_user(self, body: dict[str, Any]) -> ObjectKey:
        meta = body["metadata"]
        key = ObjectKey(meta["namespace"], meta["name"])
        self.remote_users[key] = copy.deepcopy(body)
        return key

    def add_secret(self, namespace: str, name: str, data: Mapping[str, bytes]) -> None:
        self.secrets[ObjectKey(namespace, name)] = dict(data)

    def status_of(self, key: ObjectKey) -> RemoteUserStatus:
        return RemoteUserStatus.from_dict(self.remote_users[key].get("status"))

    def _bump(self, key: ObjectKey) -> None:
        meta = self.remote_users[key]["metadata"]
        meta["resourceVersion"] = str(int(meta["resourceVersion"]) + 1)

    def get_remote_user(self, key: ObjectKey) -> RemoteUser:
        self.get_calls += 1
        if self.get_error is not None:
            raise self.get_error
        if key not in self.remote_users:
            raise NotFoundError(f"get remoteuser {key}: 404 Not Found", status=404)
        return create_remote_user_from_body(copy.deepcopy(self.remote_users[key]))

    def get_secret(self, key: ObjectKey) -> Mapping[str, bytes]:
        if self.secret_error is not None:
            raise self.secret_error
        if key not in self.secrets:
            raise NotFoundError(f"get secret {key}: 404 Not Found", status=404)
        return self.secrets[key]

    def list_remote_users(self, namespace: str | None = None) -> list[RemoteUser]:
        if self.get_error is not None:
            raise self.get_error
        return [
            create_remote_user_from_body(body)
            for key, body in sorted(self.remote_users.items())
            if namespace is None or key.namespace == namespace
        ]

    def replace_remote_user_status(self, remote_user: RemoteUser, status: RemoteUserStatus) -> None:
        self.write_attempts += 1
        key = remote_user.key
        if self.write_error is not None:
            raise self.write_error
        if key not in self.remote_users:
            raise NotFoundError(f"update remoteuser {key} status: 404 Not Found", status=404)
        if self.pending_conflicts > 0:
            self.pending_conflicts -= 1
            self._bump(key)
            raise ConflictError(f"update remoteuser {key} status: 409 Conflict", status=409)
        if self.remote_users[key]["metadata"]["resourceVersion"] != remote_user.resource_version:
            raise ConflictError(f"update remoteuser {key} status: 409 Conflict", status=409)
        self.remote_users[key]["status"] = status.to_dict()
        self._bump(key)
        self.writes.append(status)


class FakeVerifier:
    """Identity verifier returning a fixed login or raising a fixed error."""

    def __init__(self, login: str | None = None, error: Exception | None = None) -> None:
        self.login = login
        self.error = error
        self.tokens: list[str] = []

    def __call__(self, token: str) -> FakeVerifier:
        self.tokens.append(token)
        return self

    def verify(self) -> str:
        if self.error is not None:
            raise self.error
        return self.login or ""


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def accepting_verifier() -> FakeVerifier:
    return FakeVerifier(login="octocat")


@pytest.fixture
def rejecting_verifier() -> FakeVerifier:
    return FakeVerifier(error=VerificationError("GET https://api.github.com/user: 401 Bad credentials []"))


@pytest.fixture(autouse=True)
def no_kopf_events(monkeypatch: pytest.MonkeyPatch) -> list[tuple[Any, ...]]:
    """Capture events instead of posting them through kopf."""
    posted: list[tuple[Any, ...]] = []

    def fake_event(body: Any, *, reason: str, message: str, type: str) -> None:
        posted.append((body, reason, message, type))

    monkeypatch.setattr("syngit_operator.utils.events.kopf.event", fake_event)
    return posted


@pytest.fixture(autouse=True)
def fast_rate_limits(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the client-side rate limiters from slowing the suite down."""
    monkeypatch.setattr("syngit_operator.utils.rate_limit._K8S_RATE_LIMIT_PER_SECOND", 1000.0)
    monkeypatch.setattr("syngit_operator.utils.rate_limit._GITHUB_RATE_LIMIT_PER_SECOND", 1000.0)
