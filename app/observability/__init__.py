"""Observability layer: in-memory metrics for the audit engine. No external SaaS."""

from app.observability.metrics import MetricsCollector

__all__ = [
    "MetricsCollector",
]
