"""Observability utilities: live progress display and run metrics."""

import sys
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, TextIO

from .image_utils import format_bytes
from .models import RunningTotals

BAR_WIDTH = 50


def progress_bar(percent: float, width: int = BAR_WIDTH) -> str:
    """Fixed-width bar: '=' fill ending in '>', padded with spaces."""
    filled = int(percent / 100 * width) - 1
    filled = min(max(filled, 0), width - 1)
    return "=" * filled + ">" + " " * (width - filled - 1)


class ProgressAggregator:
    """
    Running totals and a single rewriting status line for one unit of work.

    Only the archive sink's consuming thread may call the mutating methods;
    nothing here is locked. Each sink owns its own instance.
    """

    def __init__(
        self,
        items_expected: int,
        name: str,
        stream: Optional[TextIO] = None,
        enabled: bool = True,
    ):
        self._totals = RunningTotals(items_expected=items_expected)
        self._stream = stream if stream is not None else sys.stdout
        self._enabled = enabled
        self.name = name
        self.start_time = time.time()

    def start(self) -> None:
        """Announce the unit of work on its own line."""
        self.start_time = time.time()
        self._write(f"Processing {self.name}\n")

    @property
    def totals(self) -> RunningTotals:
        return self._totals

    def record(self, original_size: int, encoded_size: int) -> None:
        """Account for one completed item and redraw the status line."""
        totals = self._totals
        totals.items_processed += 1
        totals.total_original_bytes += original_size
        totals.total_encoded_bytes += encoded_size
        self.render()

    def skip(self) -> None:
        """Drop one item from the expected total without counting it."""
        totals = self._totals
        totals.items_skipped += 1
        if totals.items_expected > totals.items_processed:
            totals.items_expected -= 1
        self.render()

    def render(self) -> None:
        totals = self._totals
        percent = totals.percent_complete
        self._write(
            f"\rratio {totals.compression_ratio:6.2f}% "
            f"progress: [{progress_bar(percent)}] {percent:.2f}% "
            f"{format_bytes(totals.total_encoded_bytes):>10}/"
            f"{format_bytes(totals.total_original_bytes)}"
        )

    def finish(self) -> None:
        """End the status line."""
        self._write("\n")

    def snapshot(self) -> RunningTotals:
        return self._totals.model_copy()

    def _write(self, text: str) -> None:
        if not self._enabled:
            return
        self._stream.write(text)
        self._stream.flush()


@dataclass
class PerformanceMetrics:
    """Performance metrics for one unit of work."""

    operation: str
    start_time: float
    end_time: float
    success: bool
    error_message: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def duration(self) -> float:
        """Calculate operation duration in seconds."""
        return self.end_time - self.start_time


class MetricsCollector:
    """Collector for per-unit performance metrics."""

    def __init__(self):
        self._metrics: list[PerformanceMetrics] = []

    def record_metric(self, metric: PerformanceMetrics):
        """Record a performance metric."""
        self._metrics.append(metric)

    def get_metrics(self, operation: Optional[str] = None) -> list[PerformanceMetrics]:
        """Get recorded metrics, optionally filtered by operation."""
        if operation:
            return [m for m in self._metrics if m.operation == operation]
        return self._metrics.copy()

    def get_summary(self, operation: Optional[str] = None) -> Dict[str, Any]:
        """Get summary statistics for metrics."""
        metrics = self.get_metrics(operation)

        if not metrics:
            return {}

        durations = [m.duration for m in metrics]
        successful = [m for m in metrics if m.success]

        return {
            "total_operations": len(metrics),
            "successful_operations": len(successful),
            "failed_operations": len(metrics) - len(successful),
            "avg_duration": sum(durations) / len(durations),
            "max_duration": max(durations),
            "total_duration": sum(durations),
            "items_processed": sum(m.metadata.get("items_processed", 0) for m in metrics),
            "original_bytes": sum(m.metadata.get("original_bytes", 0) for m in metrics),
            "encoded_bytes": sum(m.metadata.get("encoded_bytes", 0) for m in metrics),
        }

    def clear_metrics(self):
        """Clear all recorded metrics."""
        self._metrics.clear()
