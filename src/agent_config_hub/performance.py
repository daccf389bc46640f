"""Timing instrumentation with latency-budget warnings."""

import logging
import time
from collections import deque
from contextlib import asynccontextmanager, contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Deque, Dict, List, Optional

logger = logging.getLogger(__name__)

# Operations slower than this are logged with a [PERF] line
SLOW_OPERATION_MS = 100.0
MAX_METRICS = 1000


@dataclass
class PerformanceMetric:
    """One timed operation."""

    operation: str
    duration_ms: float
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    items_processed: Optional[int] = None
    errors: Optional[int] = None


class PerformanceMonitor:
    """Keeps the most recent metrics in memory and reports slow operations."""

    def __init__(self, max_metrics: int = MAX_METRICS):
        self._metrics: Deque[PerformanceMetric] = deque(maxlen=max_metrics)

    def record(self, metric: PerformanceMetric) -> None:
        self._metrics.append(metric)

    @property
    def metrics(self) -> List[PerformanceMetric]:
        return list(self._metrics)

    def log_if_slow(
        self, metric: PerformanceMetric, budget_ms: Optional[float] = None
    ) -> bool:
        """
        Log the metric when it crossed the slow threshold or its budget.

        Args:
            metric: The finished measurement
            budget_ms: Optional latency budget for the operation

        Returns:
            True if the budget was exceeded, False otherwise
        """
        if metric.duration_ms > SLOW_OPERATION_MS:
            items = (
                f" ({metric.items_processed} items)"
                if metric.items_processed is not None
                else ""
            )
            logger.info(
                f"[PERF] {metric.operation}: {metric.duration_ms:.2f}ms{items}"
            )

        if budget_ms is not None and metric.duration_ms > budget_ms:
            logger.warning(
                f"{metric.operation} took {metric.duration_ms:.0f}ms, "
                f"exceeding the {budget_ms:.0f}ms budget"
            )
            return True
        return False

    def get_stats(self, operation: str) -> Optional[Dict[str, Any]]:
        """Aggregate statistics for one operation name, None if never seen."""
        durations = [m for m in self._metrics if m.operation == operation]
        if not durations:
            return None

        values = [m.duration_ms for m in durations]
        return {
            "count": len(values),
            "avg_duration_ms": sum(values) / len(values),
            "min_duration_ms": min(values),
            "max_duration_ms": max(values),
            "total_items": sum(m.items_processed or 0 for m in durations),
            "total_errors": sum(m.errors or 0 for m in durations),
        }

    def clear(self) -> None:
        self._metrics.clear()


performance_monitor = PerformanceMonitor()


class _Timer:
    """Mutable handle yielded by the timing context managers."""

    def __init__(self, operation: str, items_processed: Optional[int] = None):
        self.operation = operation
        self.items_processed = items_processed
        self.errors: Optional[int] = None
        self.start = time.perf_counter()
        self.duration_ms = 0.0

    def finish(self, budget_ms: Optional[float]) -> PerformanceMetric:
        self.duration_ms = (time.perf_counter() - self.start) * 1000
        metric = PerformanceMetric(
            operation=self.operation,
            duration_ms=self.duration_ms,
            items_processed=self.items_processed,
            errors=self.errors,
        )
        performance_monitor.record(metric)
        performance_monitor.log_if_slow(metric, budget_ms)
        return metric


@asynccontextmanager
async def time_operation(
    operation: str,
    items_processed: Optional[int] = None,
    budget_ms: Optional[float] = None,
):
    """
    Time an async block and record it on the shared monitor.

    The yielded handle lets the block report item and error counts once
    they are known. Exceeding the budget only logs a warning.
    """
    timer = _Timer(operation, items_processed)
    try:
        yield timer
    finally:
        timer.finish(budget_ms)


@contextmanager
def time_operation_sync(
    operation: str,
    items_processed: Optional[int] = None,
    budget_ms: Optional[float] = None,
):
    """Synchronous variant of time_operation."""
    timer = _Timer(operation, items_processed)
    try:
        yield timer
    finally:
        timer.finish(budget_ms)
