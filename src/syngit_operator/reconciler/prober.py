"""Authentication probe: decide whether to verify a credential and derive the status."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from ..constants import (
    ANNOTATION_AUTH_TEST,
    COND_AUTHENTICATED,
    CONNEXION_STATUS_CONNECTED,
    KIND_REMOTE_USER,
    SECRET_KEY_PASSWORD,
)
from ..models import ConnexionStatus, RemoteUser, RemoteUserStatus
from ..services.identity.base import VerifierFactory
from ..tracing import trace_span
from ..utils.conditions import remove_condition, set_authenticated_condition
from ..utils.secrets import get_secret_value

OUTCOME_DISABLED = "disabled"
OUTCOME_SKIPPED = "skipped"
OUTCOME_SUCCEEDED = "succeeded"
OUTCOME_FAILED = "failed"


@dataclass(frozen=True)
class ProbeResult:
    """Status derived from one probe evaluation."""

    status: RemoteUserStatus
    outcome: str
    login: str = ""
    error: str = ""


def auth_test_enabled(remote_user: RemoteUser) -> bool:
    """Only the exact string "true" enables verification."""
    return remote_user.annotations.get(ANNOTATION_AUTH_TEST) == "true"


def probe_authentication(
    remote_user: RemoteUser,
    secret_data: Mapping[str, bytes],
    verifier_factory: VerifierFactory,
    now: str | None = None,
) -> ProbeResult:
    """Compute the status of a RemoteUser from its annotations and credential.

    Without the auth.test annotation the Authenticated condition is dropped
    and the connexion status is kept. With the annotation but no secret data
    nothing changes. Otherwise the ``password`` entry is verified as a bearer
    token and the outcome is written to the connexion status and the
    Authenticated condition.

    Args:
        remote_user: Snapshot to evaluate; never modified
        secret_data: Decoded data of the referenced Secret, empty if absent
        verifier_factory: Builds a verifier for a token
        now: Timestamp for the condition (defaults to the current time)

    Returns:
        The resulting status and what happened
    """
    current = remote_user.status

    if not auth_test_enabled(remote_user):
        status = RemoteUserStatus(
            connexion_status=current.connexion_status,
            conditions=tuple(remove_condition(current.conditions, COND_AUTHENTICATED)),
        )
        return ProbeResult(status=status, outcome=OUTCOME_DISABLED)

    if not secret_data:
        return ProbeResult(status=current, outcome=OUTCOME_SKIPPED)

    token = get_secret_value(secret_data, SECRET_KEY_PASSWORD)
    with trace_span("probe_authentication", kind=KIND_REMOTE_USER, attributes={"remoteuser.name": remote_user.name}):
        try:
            login = verifier_factory(token).verify()
        except Exception as e:
            error = str(e)
            status = RemoteUserStatus(
                connexion_status=ConnexionStatus(status="", details=error),
                conditions=tuple(set_authenticated_condition(current.conditions, False, error, now)),
            )
            return ProbeResult(status=status, outcome=OUTCOME_FAILED, error=error)

    status = RemoteUserStatus(
        connexion_status=ConnexionStatus(status=CONNEXION_STATUS_CONNECTED, details=""),
        conditions=tuple(
            set_authenticated_condition(
                current.conditions,
                True,
                f"Authentication was successful with the user {login}",
                now,
            )
        ),
    )
    return ProbeResult(status=status, outcome=OUTCOME_SUCCEEDED, login=login)
