"""Logging and metrics for the extraction engine."""

from __future__ import annotations

from typing import Any, Dict, Optional

from .logging import configure_logging
from .metrics import METRICS

__all__ = ["configure_logging", "METRICS", "increment", "histogram", "export_prometheus"]


def increment(name: str, value: float = 1.0, labels: Optional[Dict[str, Any]] = None) -> None:
    """Increment a counter metric."""
    if name in METRICS:
        metric = METRICS[name]
        if labels is not None:
            metric.labels(**labels).inc(value)
        else:
            metric.inc(value)


def histogram(name: str, value: float, labels: Optional[Dict[str, Any]] = None) -> None:
    """Observe a histogram metric."""
    if name in METRICS:
        metric = METRICS[name]
        if labels is not None:
            metric.labels(**labels).observe(value)
        else:
            metric.observe(value)


def export_prometheus() -> str:
    """Export metrics in Prometheus format."""
    from prometheus_client import generate_latest

    return generate_latest().decode("utf-8")
