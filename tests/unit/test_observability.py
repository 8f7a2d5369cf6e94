"""Unit tests for progress display and metrics."""

import io

import pytest

from images_transcoder.core.observability import (
    BAR_WIDTH,
    MetricsCollector,
    PerformanceMetrics,
    ProgressAggregator,
    progress_bar,
)


class TestProgressBar:
    """Tests for progress_bar."""

    @pytest.mark.parametrize("percent", [0, 1, 33.3, 50, 99.9, 100, 140])
    def test_progress_bar_fixed_width(self, percent):
        assert len(progress_bar(percent)) == BAR_WIDTH

    def test_progress_bar_empty(self):
        assert progress_bar(0) == ">" + " " * 49

    def test_progress_bar_half(self):
        assert progress_bar(50) == "=" * 24 + ">" + " " * 25

    def test_progress_bar_full(self):
        assert progress_bar(100) == "=" * 49 + ">"

    def test_progress_bar_custom_width(self):
        assert progress_bar(100, width=10) == "=========>"


class TestProgressAggregator:
    """Tests for ProgressAggregator."""

    def test_start_prints_header(self):
        stream = io.StringIO()
        ProgressAggregator(2, "chapter1", stream=stream).start()
        assert stream.getvalue() == "Processing chapter1\n"

    def test_record_updates_totals_and_line(self):
        stream = io.StringIO()
        progress = ProgressAggregator(2, "chapter1", stream=stream)

        progress.record(2048, 512)

        totals = progress.totals
        assert totals.items_processed == 1
        assert totals.total_original_bytes == 2048
        assert totals.total_encoded_bytes == 512

        line = stream.getvalue()
        assert line.startswith("\rratio  25.00% progress: [")
        assert "] 50.00% " in line
        assert line.endswith("512 Bytes/2.0 KiB")

    def test_complete_unit_reaches_hundred_percent(self):
        stream = io.StringIO()
        progress = ProgressAggregator(2, "chapter1", stream=stream)
        progress.record(100, 50)
        progress.record(100, 50)
        progress.finish()

        last_line = stream.getvalue().split("\r")[-1]
        assert "100.00%" in last_line
        assert "[" + "=" * 49 + ">]" in last_line
        assert stream.getvalue().endswith("\n")

    def test_skip_lowers_expected_total(self):
        progress = ProgressAggregator(3, "unit", stream=io.StringIO())
        progress.record(10, 5)
        progress.skip()
        progress.record(10, 5)

        totals = progress.totals
        assert totals.items_expected == 2
        assert totals.items_skipped == 1
        assert totals.percent_complete == 100.0

    def test_skip_never_drops_expected_below_processed(self):
        progress = ProgressAggregator(1, "unit", stream=io.StringIO())
        progress.record(10, 5)
        progress.skip()
        assert progress.totals.items_expected == 1

    def test_disabled_aggregator_prints_nothing(self):
        stream = io.StringIO()
        progress = ProgressAggregator(1, "quiet", stream=stream, enabled=False)
        progress.start()
        progress.record(10, 5)
        progress.finish()

        assert stream.getvalue() == ""
        assert progress.totals.items_processed == 1

    def test_snapshot_is_detached(self):
        progress = ProgressAggregator(2, "unit", stream=io.StringIO())
        progress.record(10, 5)
        snapshot = progress.snapshot()
        progress.record(10, 5)

        assert snapshot.items_processed == 1
        assert progress.totals.items_processed == 2


class TestMetricsCollector:
    """Tests for MetricsCollector."""

    def _metric(self, operation, duration, success=True, **metadata):
        return PerformanceMetrics(
            operation=operation,
            start_time=100.0,
            end_time=100.0 + duration,
            success=success,
            metadata=metadata,
        )

    def test_empty_summary(self):
        assert MetricsCollector().get_summary() == {}

    def test_summary_aggregates_units(self):
        collector = MetricsCollector()
        collector.record_metric(
            self._metric("unit:a", 2.0, items_processed=3, original_bytes=300, encoded_bytes=100)
        )
        collector.record_metric(self._metric("unit:b", 4.0, success=False))

        summary = collector.get_summary()
        assert summary["total_operations"] == 2
        assert summary["successful_operations"] == 1
        assert summary["failed_operations"] == 1
        assert summary["avg_duration"] == pytest.approx(3.0)
        assert summary["max_duration"] == pytest.approx(4.0)
        assert summary["items_processed"] == 3
        assert summary["original_bytes"] == 300
        assert summary["encoded_bytes"] == 100

    def test_filter_and_clear(self):
        collector = MetricsCollector()
        collector.record_metric(self._metric("unit:a", 1.0))
        collector.record_metric(self._metric("unit:b", 1.0))

        assert len(collector.get_metrics("unit:a")) == 1
        collector.clear_metrics()
        assert collector.get_metrics() == []
