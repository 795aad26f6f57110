"""Prometheus metrics definitions and helpers.

Provides the metric definitions shared by the Plannora API components.
"""

from functools import lru_cache
from typing import Callable

from prometheus_client import (
    REGISTRY,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)


class HTTPMetrics:
    """Request level metrics recorded by the logging middleware."""

    def __init__(self, registry: CollectorRegistry = REGISTRY) -> None:
        """Initialize HTTP metrics.

        Args:
            registry: Prometheus registry to use
        """
        self.requests_total = Counter(
            "http_requests_total",
            "Total HTTP requests",
            ["method", "endpoint", "status"],
            registry=registry,
        )

        self.request_duration = Histogram(
            "http_request_duration_seconds",
            "HTTP request duration in seconds",
            ["method", "endpoint"],
            registry=registry,
        )

        self.requests_in_progress = Gauge(
            "http_requests_in_progress",
            "HTTP requests currently in progress",
            ["method", "endpoint"],
            registry=registry,
        )


class PlanningMetrics:
    """Domain metrics for planning and collaboration activity."""

    def __init__(self, registry: CollectorRegistry = REGISTRY) -> None:
        """Initialize planning metrics.

        Args:
            registry: Prometheus registry to use
        """
        self.auth_attempts = Counter(
            "plannora_auth_attempts_total",
            "Login and registration attempts",
            ["operation", "outcome"],
            registry=registry,
        )

        self.events_created = Counter(
            "plannora_events_created_total",
            "Events created",
            ["source"],
            registry=registry,
        )

        self.match_requests = Counter(
            "plannora_match_requests_total",
            "Match requests by lifecycle transition",
            ["status"],
            registry=registry,
        )

        self.chat_messages = Counter(
            "plannora_chat_messages_total",
            "Chat messages stored",
            ["channel"],
            registry=registry,
        )

        self.websocket_connections = Gauge(
            "plannora_websocket_connections",
            "Open chat WebSocket connections",
            registry=registry,
        )


@lru_cache()
def setup_metrics() -> tuple[HTTPMetrics, PlanningMetrics]:
    """Create the metric instances once per process.

    Returns:
        Tuple of (HTTPMetrics, PlanningMetrics)
    """
    return HTTPMetrics(), PlanningMetrics()


def get_metrics_handler() -> Callable[[], bytes]:
    """Get metrics handler for HTTP endpoint.

    Returns:
        Function that generates Prometheus metrics output
    """

    def metrics_handler() -> bytes:
        return generate_latest(REGISTRY)

    return metrics_handler
