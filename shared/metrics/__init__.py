"""Metrics module using Prometheus."""

from .prometheus_metrics import (
    HTTPMetrics,
    PlanningMetrics,
    get_metrics_handler,
    setup_metrics,
)

__all__ = [
    "HTTPMetrics",
    "PlanningMetrics",
    "get_metrics_handler",
    "setup_metrics",
]
