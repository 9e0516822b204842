"""Prometheus metrics for the Syngit RemoteUser Operator."""

from prometheus_client import Counter, Histogram

# Reconciliation metrics
reconcile_total = Counter(
    "syngit_operator_reconcile_total",
    "Total number of reconciliations",
    ["kind", "result"],
)

reconcile_duration_seconds = Histogram(
    "syngit_operator_reconcile_duration_seconds",
    "Duration of reconciliations in seconds",
    ["kind"],
    buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0],
)

error_total = Counter(
    "syngit_operator_error_total",
    "Total number of reconciliation errors",
    ["kind", "error_type"],
)

# Authentication probe metrics
authentication_probe_total = Counter(
    "syngit_operator_authentication_probe_total",
    "Total number of remote identity verification probes",
    ["result"],
)

# Status write metrics
status_write_total = Counter(
    "syngit_operator_status_write_total",
    "Total number of status write attempts",
    ["result"],
)

status_write_conflicts_total = Counter(
    "syngit_operator_status_write_conflicts_total",
    "Total number of status writes rejected with a version conflict",
)

# Secondary resource metrics
secret_triggered_reconcile_total = Counter(
    "syngit_operator_secret_triggered_reconcile_total",
    "Total number of reconciliations requested by a secret change",
)

# API call metrics
api_call_total = Counter(
    "syngit_operator_api_call_total",
    "Total number of API calls",
    ["api_type", "operation", "result"],
)

api_call_duration_seconds = Histogram(
    "syngit_operator_api_call_duration_seconds",
    "Duration of API calls in seconds",
    ["api_type", "operation"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0],
)

rate_limit_hits_total = Counter(
    "syngit_operator_rate_limit_hits_total",
    "Total number of client-side rate limit waits",
    ["api_type"],
)
