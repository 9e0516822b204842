"""Tests for RemoteUser snapshots and builders."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from conftest import make_remote_user_body
from syngit_operator.builders.remote_user import (
    create_remote_user_from_body,
    create_status_body,
    secret_ref_name_from_spec,
)
from syngit_operator.models import (
    Condition,
    ConnexionStatus,
    ObjectKey,
    RemoteUser,
    RemoteUserStatus,
    format_time,
)


class TestSecretRefNameFromSpec:
    """Test cases for secret_ref_name_from_spec."""

    @pytest.mark.parametrize(
        "spec,expected",
        [
            ({"secretRef": {"name": "alice-creds"}}, "alice-creds"),
            ({"secretRef": {}}, ""),
            ({"secretRef": None}, ""),
            ({}, ""),
            (None, ""),
        ],
    )
    def test_extraction(self, spec, expected):
        """Test the reference name is read or defaults to empty."""
        assert secret_ref_name_from_spec(spec) == expected


class TestCreateRemoteUserFromBody:
    """Test cases for create_remote_user_from_body."""

    def test_fields(self):
        """Test metadata and spec are mapped onto the snapshot."""
        body = make_remote_user_body(resource_version="12")
        body["metadata"]["labels"] = {"team": "a"}

        remote_user = create_remote_user_from_body(body)

        assert remote_user.key == ObjectKey("default", "alice")
        assert remote_user.uid == "uid-alice"
        assert remote_user.resource_version == "12"
        assert remote_user.labels == {"team": "a"}
        assert remote_user.annotations == {"github.syngit.io/auth.test": "true"}
        assert remote_user.secret_ref_name == "alice-creds"
        assert remote_user.status == RemoteUserStatus()

    def test_snapshot_is_detached(self):
        """Test later changes to the body do not leak into the snapshot."""
        body = make_remote_user_body()
        remote_user = create_remote_user_from_body(body)

        body["spec"]["secretRef"]["name"] = "changed"
        body["metadata"]["annotations"].clear()

        assert remote_user.spec["secretRef"]["name"] == "alice-creds"
        assert remote_user.annotations

    def test_snapshot_is_read_only(self):
        """Test the snapshot maps cannot be modified."""
        remote_user = create_remote_user_from_body(make_remote_user_body())

        with pytest.raises(TypeError):
            remote_user.annotations["x"] = "y"  # type: ignore[index]

    def test_status_is_parsed(self):
        """Test connexion status and conditions are read."""
        body = make_remote_user_body(
            status={
                "connexionStatus": {"status": "Connected"},
                "conditions": [
                    {
                        "type": "Authenticated",
                        "status": "True",
                        "reason": "AuthenticationSucceeded",
                        "message": "ok",
                        "lastTransitionTime": "2024-01-01T00:00:00Z",
                    }
                ],
            }
        )

        status = create_remote_user_from_body(body).status

        assert status.connexion_status.connected
        assert status.get_condition("Authenticated").last_transition_time == "2024-01-01T00:00:00Z"


class TestCreateStatusBody:
    """Test cases for create_status_body."""

    def test_body(self):
        """Test the body carries identity, resourceVersion and the full status."""
        remote_user = create_remote_user_from_body(make_remote_user_body(resource_version="5"))
        status = RemoteUserStatus(
            connexion_status=ConnexionStatus(details="401 Bad credentials"),
            conditions=(Condition("Authenticated", "False", "AuthenticationFailed", "401 Bad credentials", "t"),),
        )

        body = create_status_body(remote_user, status)

        assert body["metadata"] == {"name": "alice", "namespace": "default", "resourceVersion": "5"}
        assert body["spec"]["secretRef"] == {"name": "alice-creds"}
        assert body["status"] == {
            "connexionStatus": {"details": "401 Bad credentials"},
            "conditions": [
                {
                    "type": "Authenticated",
                    "status": "False",
                    "reason": "AuthenticationFailed",
                    "message": "401 Bad credentials",
                    "lastTransitionTime": "t",
                }
            ],
        }


class TestFormatTime:
    """Test cases for format_time."""

    def test_utc(self):
        """Test timestamps are rendered in UTC with second precision."""
        value = datetime(2024, 3, 1, 14, 30, 5, 123456, tzinfo=timezone(timedelta(hours=2)))

        assert format_time(value) == "2024-03-01T12:30:05Z"


class TestModelDefaults:
    """Test cases for snapshot defaults."""

    def test_empty_maps(self):
        """Test a bare snapshot has empty read-only maps of its own."""
        first = RemoteUser("default", "alice")
        second = RemoteUser("default", "bob")

        assert first.labels == {} and first.annotations == {} and first.spec == {}
        assert first.labels is not second.labels
        with pytest.raises(TypeError):
            first.labels["x"] = "y"  # type: ignore[index]


class TestConditionObservedGeneration:
    """Test cases for the optional observedGeneration of a condition."""

    def test_carried_through(self):
        """Test observedGeneration is read and written back."""
        data = {
            "type": "Ready",
            "status": "True",
            "reason": "Ready",
            "message": "",
            "lastTransitionTime": "2024-01-01T00:00:00Z",
            "observedGeneration": 3,
        }

        condition = Condition.from_dict(data)

        assert condition.observed_generation == 3
        assert condition.to_dict() == data

    def test_omitted_when_unset(self):
        """Test conditions without a generation do not gain the field."""
        assert "observedGeneration" not in Condition("Authenticated", "True").to_dict()
