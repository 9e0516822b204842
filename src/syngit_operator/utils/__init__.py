"""Utility functions for the Syngit RemoteUser Operator."""

from .conditions import (
    remove_condition,
    set_authenticated_condition,
    update_condition,
)
from .context import (
    get_context_dict,
    get_correlation_id,
    with_correlation_id,
)
from .errors import ConflictError, NotFoundError, StoreError, VerificationError
from .events import emit_event
from .locks import KeyedLocks
from .rate_limit import rate_limit_github, rate_limit_k8s
from .secrets import decode_secret_data, get_secret_value, read_secret_data

__all__ = [
    "update_condition",
    "remove_condition",
    "set_authenticated_condition",
    "emit_event",
    "decode_secret_data",
    "get_secret_value",
    "read_secret_data",
    "rate_limit_k8s",
    "rate_limit_github",
    "get_correlation_id",
    "with_correlation_id",
    "get_context_dict",
    "StoreError",
    "NotFoundError",
    "ConflictError",
    "VerificationError",
    "KeyedLocks",
]
