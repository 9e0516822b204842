"""Rate limiting utilities for API calls."""

from __future__ import annotations

import os
import threading
import time
from functools import wraps
from typing import Any, Callable, TypeVar

from .. import metrics

_F = TypeVar("_F", bound=Callable[..., Any])

# Rate limit configuration
_K8S_RATE_LIMIT_PER_SECOND = float(os.getenv("K8S_RATE_LIMIT_PER_SECOND", "10.0"))
_GITHUB_RATE_LIMIT_PER_SECOND = float(os.getenv("GITHUB_RATE_LIMIT_PER_SECOND", "5.0"))

# Track the time slot reserved by the latest call, one lock per API
_k8s_last_call_time: float = 0.0
_github_last_call_time: float = 0.0
_k8s_lock = threading.Lock()
_github_lock = threading.Lock()


def _reserve_slot(last_call_time: float, rate_per_second: float) -> tuple[float, float]:
    """Return the start time of the next call slot and the wait until it."""
    current_time = time.time()
    slot = max(current_time, last_call_time + 1.0 / rate_per_second)
    return slot, slot - current_time


def rate_limit_k8s(func: _F) -> _F:
    """Decorator to rate limit Kubernetes API calls.

    Enforces a minimum interval between calls to avoid overwhelming the
    Kubernetes API server. Each caller reserves a slot under the lock and
    waits for it outside the lock.
    """
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        global _k8s_last_call_time
        with _k8s_lock:
            _k8s_last_call_time, delay = _reserve_slot(_k8s_last_call_time, _K8S_RATE_LIMIT_PER_SECOND)
        if delay > 0:
            metrics.rate_limit_hits_total.labels(api_type="k8s").inc()
            time.sleep(delay)
        return func(*args, **kwargs)

    return wrapper  # type: ignore


def rate_limit_github(func: _F) -> _F:
    """Decorator to rate limit GitHub API calls.

    Enforces a minimum interval between identity probes to stay clear of the
    GitHub secondary rate limits.
    """
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        global _github_last_call_time
        with _github_lock:
            _github_last_call_time, delay = _reserve_slot(_github_last_call_time, _GITHUB_RATE_LIMIT_PER_SECOND)
        if delay > 0:
            metrics.rate_limit_hits_total.labels(api_type="github").inc()
            time.sleep(delay)
        return func(*args, **kwargs)

    return wrapper  # type: ignore
