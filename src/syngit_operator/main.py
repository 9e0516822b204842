"""Main entry point for the Syngit RemoteUser Operator."""

from __future__ import annotations

import logging
import os
from typing import Any

import kopf

from . import handlers  # noqa: F401
from . import health
from . import logging as structured_logging
from .tracing import initialize_tracing

logger = logging.getLogger(__name__)


@kopf.on.startup()
def configure(settings: kopf.OperatorSettings, **_: Any) -> None:
    """Configure the operator."""
    structured_logging.setup_structured_logging()
    initialize_tracing()

    # Use AnnotationsProgressStorage to avoid conflicts with status updates
    settings.persistence.progress_storage = kopf.AnnotationsProgressStorage()
    settings.persistence.diffbase_storage = kopf.AnnotationsDiffBaseStorage()

    settings.posting.level = logging.INFO
    settings.networking.request_timeout = float(os.getenv("K8S_REQUEST_TIMEOUT_SECONDS", "30"))
    settings.execution.max_workers = int(os.getenv("MAX_WORKERS", "4"))

    # Start metrics HTTP server with health check endpoints
    metrics_port = int(os.getenv("METRICS_PORT", "8080"))
    health.start_health_server(metrics_port)
    health.set_ready(True)
    logger.info(f"Operator configured, metrics and health endpoints on port {metrics_port}")


@kopf.on.cleanup()
def shutdown(**_: Any) -> None:
    """Report not ready while the operator stops."""
    health.set_ready(False)


def main() -> None:
    """Run the operator in all namespaces."""
    kopf.run(clusterwide=True)


if __name__ == "__main__":
    main()
