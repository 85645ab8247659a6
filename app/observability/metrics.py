"""Prometheus-style metrics collector. Thread-safe, in-memory. No real Prometheus dependency."""

import threading
from typing import Any


class MetricsCollector:
    """
    In-memory Prometheus-style registry for the audit engine. Tracks counters and
    store-latency histograms. Thread-safe. Exposes increment, observe_latency, export_metrics.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counters: dict[str, float] = {}
        self._counters_by_labels: dict[str, dict[str, float]] = {}
        self._histograms: dict[str, dict[str, float]] = {}

    def increment(
        self,
        name: str,
        value: float = 1.0,
        *,
        action: str | None = None,
        projection: str | None = None,
    ) -> None:
        """Increment a counter. Optional action or projection label for dimensional metrics."""
        with self._lock:
            if action is not None:
                key = f"{name}:action={action}"
            elif projection is not None:
                key = f"{name}:projection={projection}"
            else:
                self._counters[name] = self._counters.get(name, 0) + value
                return
            labelled = self._counters_by_labels.setdefault(name, {})
            labelled[key] = labelled.get(key, 0) + value

    def observe_latency(
        self,
        name: str,
        latency_ms: float,
        *,
        operation: str | None = None,
    ) -> None:
        """Record a latency observation (histogram-style). Optional store operation label."""
        with self._lock:
            bucket = name if operation is None else f"{name}:operation={operation}"
            stats = self._histograms.setdefault(bucket, {"count": 0, "sum": 0.0})
            stats["count"] += 1
            stats["sum"] += latency_ms

    def get_counter(self, name: str, *, action: str | None = None, projection: str | None = None) -> float:
        with self._lock:
            if action is not None:
                return self._counters_by_labels.get(name, {}).get(f"{name}:action={action}", 0)
            if projection is not None:
                return self._counters_by_labels.get(name, {}).get(f"{name}:projection={projection}", 0)
            return self._counters.get(name, 0)

    def export_metrics(self) -> dict[str, Any]:
        """Export all metrics as a dict (simulated Prometheus-style)."""
        with self._lock:
            return {
                "counters": dict(self._counters),
                "counters_by_labels": {
                    k: dict(v) for k, v in self._counters_by_labels.items()
                },
                "histograms": {k: dict(v) for k, v in self._histograms.items()},
            }

    def reset(self) -> None:
        """Reset all metrics (for tests)."""
        with self._lock:
            self._counters.clear()
            self._counters_by_labels.clear()
            self._histograms.clear()
