"""Utilities for managing Kubernetes conditions."""

from __future__ import annotations

from typing import Sequence

from ..constants import (
    COND_AUTHENTICATED,
    CONDITION_FALSE,
    CONDITION_TRUE,
    REASON_AUTHENTICATION_FAILED,
    REASON_AUTHENTICATION_SUCCEEDED,
)
from ..models import Condition, utc_now


def update_condition(
    conditions: Sequence[Condition],
    condition_type: str,
    status: str,
    reason: str,
    message: str,
    now: str | None = None,
) -> list[Condition]:
    """Update or add a condition to the conditions list.

    An existing condition of the same type is replaced in place, keeping its
    position; otherwise the condition is appended. lastTransitionTime is set
    to ``now`` on every call, whether or not the status changed.

    Args:
        conditions: Existing conditions
        condition_type: Type of condition
        status: Status of condition ("True", "False", "Unknown")
        reason: Reason for the condition
        message: Human-readable message
        now: Timestamp to record (defaults to the current time)

    Returns:
        New list of conditions
    """
    new_condition = Condition(
        type=condition_type,
        status=status,
        reason=reason,
        message=message,
        last_transition_time=now or utc_now(),
    )

    result = list(conditions)
    for idx, cond in enumerate(result):
        if cond.type == condition_type:
            result[idx] = new_condition
            return result

    result.append(new_condition)
    return result


def remove_condition(conditions: Sequence[Condition], condition_type: str) -> list[Condition]:
    """Return the conditions without any entry of the given type."""
    return [cond for cond in conditions if cond.type != condition_type]


def set_authenticated_condition(
    conditions: Sequence[Condition],
    status: bool,
    message: str,
    now: str | None = None,
) -> list[Condition]:
    """Set the Authenticated condition."""
    return update_condition(
        conditions,
        COND_AUTHENTICATED,
        CONDITION_TRUE if status else CONDITION_FALSE,
        REASON_AUTHENTICATION_SUCCEEDED if status else REASON_AUTHENTICATION_FAILED,
        message,
        now,
    )
