"""
Prometheus metrics for the binding operator.

Environment Variables:
    METRICS_ENABLED: Enable metrics server (true/false) - default: false
    METRICS_PORT: HTTP port for /metrics endpoint - default: 8080

Usage:
    from binding_operator.metrics import start_metrics_server, track_build_duration

    start_metrics_server(enabled=True, port=8080)

    with track_build_duration():
        contexts = build_service_contexts(...)
    track_contexts(contexts)
"""

import logging
import threading
from contextlib import contextmanager
from typing import Generator, Optional

from prometheus_client import Counter, Histogram, start_http_server

from binding_engine.core import ServiceContextList

logger = logging.getLogger(__name__)

SERVICE_CONTEXTS_TOTAL: Optional[Counter] = None
ANNOTATIONS_TOTAL: Optional[Counter] = None
SKIPPED_SELECTORS_TOTAL: Optional[Counter] = None
WATCHES_REGISTERED_TOTAL: Optional[Counter] = None
BUILD_DURATION: Optional[Histogram] = None

_metrics_initialized = False
_metrics_lock = threading.Lock()


def init_metrics() -> None:
    """
    Initialize Prometheus metrics (call once at startup).

    Thread-safe via module-level lock.
    """
    global SERVICE_CONTEXTS_TOTAL, ANNOTATIONS_TOTAL, SKIPPED_SELECTORS_TOTAL
    global WATCHES_REGISTERED_TOTAL, BUILD_DURATION
    global _metrics_initialized

    with _metrics_lock:
        if _metrics_initialized:
            return

        # labels: source (selector, owned)
        SERVICE_CONTEXTS_TOTAL = Counter(
            "sbo_service_contexts_total",
            "Total number of service contexts built",
            labelnames=["source"],
        )

        # labels: outcome (applied, skipped, ignored)
        ANNOTATIONS_TOTAL = Counter(
            "sbo_annotations_total",
            "Total number of annotations processed while building service contexts",
            labelnames=["outcome"],
        )

        SKIPPED_SELECTORS_TOTAL = Counter(
            "sbo_skipped_selectors_total",
            "Total number of service selectors skipped as recoverable",
        )

        WATCHES_REGISTERED_TOTAL = Counter(
            "sbo_watches_registered_total",
            "Total number of backing service kinds added to the watch set",
        )

        BUILD_DURATION = Histogram(
            "sbo_build_duration_seconds",
            "Duration of service context builds in seconds",
            buckets=(0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 10.0, 30.0),
        )

        _metrics_initialized = True
        logger.info("Prometheus metrics initialized")


def start_metrics_server(enabled: bool, port: int) -> None:
    """
    Start Prometheus metrics HTTP server in background thread.

    Args:
        enabled: Whether to start metrics server (from METRICS_ENABLED env var)
        port: HTTP port for /metrics endpoint (from METRICS_PORT env var)
    """
    if not enabled:
        logger.info("Metrics server disabled (METRICS_ENABLED=false)")
        return

    init_metrics()

    try:
        start_http_server(port, addr="0.0.0.0")
        logger.info(f"Metrics server started on http://0.0.0.0:{port}/metrics")
    except OSError as e:
        logger.error(f"Failed to start metrics server: {e}")


@contextmanager
def track_build_duration() -> Generator[None, None, None]:
    if BUILD_DURATION is None:
        yield
        return

    with BUILD_DURATION.time():
        yield


def track_contexts(contexts: ServiceContextList) -> None:
    """Count built contexts, annotation outcomes and skipped selectors."""
    if SERVICE_CONTEXTS_TOTAL is None:
        return
    for ctx in contexts:
        source = "owned" if ctx.owned_by else "selector"
        SERVICE_CONTEXTS_TOTAL.labels(source=source).inc()
    for outcome in contexts.outcomes:
        ANNOTATIONS_TOTAL.labels(outcome=outcome.outcome).inc()
    if contexts.skipped:
        SKIPPED_SELECTORS_TOTAL.inc(len(contexts.skipped))


def track_watch_registered() -> None:
    if WATCHES_REGISTERED_TOTAL is not None:
        WATCHES_REGISTERED_TOTAL.inc()
