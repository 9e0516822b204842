"""Utilities for reading Kubernetes secrets."""

from __future__ import annotations

import base64
import binascii
from types import MappingProxyType
from typing import Any, Mapping

from kubernetes import client

EMPTY_SECRET_DATA: Mapping[str, bytes] = MappingProxyType({})


def decode_secret_data(data: Mapping[str, Any] | None) -> Mapping[str, bytes]:
    """Decode the data section of a Secret.

    Values come base64 encoded from the API server; values that are already
    bytes are kept as they are.

    Args:
        data: Raw ``data`` section of the Secret

    Returns:
        Read-only mapping of key to raw bytes
    """
    result = {}
    for key, value in (data or {}).items():
        if isinstance(value, bytes):
            result[key] = value
            continue
        try:
            result[key] = base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError):
            result[key] = str(value).encode("utf-8")
    return MappingProxyType(result)


def read_secret_data(
    api: client.CoreV1Api,
    namespace: str,
    secret_name: str,
    request_timeout: float | None = None,
) -> Mapping[str, bytes]:
    """Read all data from a Kubernetes secret.

    Args:
        api: Kubernetes API client
        namespace: Namespace of the secret
        secret_name: Name of the secret
        request_timeout: Optional timeout for the API call

    Returns:
        Decoded secret data

    Raises:
        client.exceptions.ApiException: If the secret cannot be read
    """
    kwargs = {}
    if request_timeout is not None:
        kwargs["_request_timeout"] = request_timeout
    secret = api.read_namespaced_secret(name=secret_name, namespace=namespace, **kwargs)
    return decode_secret_data(secret.data)


def get_secret_value(data: Mapping[str, bytes], key: str) -> str:
    """Return a secret value as text, or an empty string when absent."""
    return data.get(key, b"").decode("utf-8", errors="replace")
