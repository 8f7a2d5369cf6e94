"""Tests for core data models."""

import pytest
from PIL import Image
from pydantic import ValidationError

from images_transcoder.core.models import (
    EncodeFailurePolicy,
    OutputFormat,
    PipelineConfig,
    ResultItem,
    RunningTotals,
    UnitReport,
    WorkItem,
)


class TestPipelineConfig:
    """Tests for PipelineConfig."""

    def test_pipeline_config_defaults(self):
        """Test PipelineConfig default values."""
        config = PipelineConfig()
        assert config.target_format is OutputFormat.WEBP
        assert config.quality == 75
        assert config.max_width == 1080
        assert config.on_encode_failure is EncodeFailurePolicy.PLACEHOLDER
        assert config.entry_extension is True

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("webp", OutputFormat.WEBP),
            ("jpg", OutputFormat.JPEG),
            ("JPEG", OutputFormat.JPEG),
            ("png", OutputFormat.PNG),
            (" gif ", OutputFormat.GIF),
        ],
    )
    def test_pipeline_config_format_normalization(self, raw, expected):
        """Test that format names are normalized, with jpg as a jpeg alias."""
        assert PipelineConfig(target_format=raw).target_format is expected

    def test_pipeline_config_rejects_unknown_format(self):
        with pytest.raises(ValidationError):
            PipelineConfig(target_format="bmp")

    @pytest.mark.parametrize("quality", [0, 0.5, 100.5, -3])
    def test_pipeline_config_rejects_out_of_range_quality(self, quality):
        with pytest.raises(ValidationError):
            PipelineConfig(quality=quality)

    @pytest.mark.parametrize("quality", [1, 42.5, 100])
    def test_pipeline_config_accepts_quality_bounds(self, quality):
        assert PipelineConfig(quality=quality).quality == quality

    def test_pipeline_config_rejects_negative_max_width(self):
        with pytest.raises(ValidationError):
            PipelineConfig(max_width=-1)

    def test_pipeline_config_is_immutable(self):
        """Test that the config cannot be changed once built."""
        config = PipelineConfig()
        with pytest.raises(ValidationError):
            config.quality = 10

    @pytest.mark.parametrize(
        "fmt, expected",
        [("webp", "p1.webp"), ("jpeg", "p1.jpg"), ("png", "p1.png"), ("gif", "p1.gif")],
    )
    def test_entry_name_carries_target_extension(self, fmt, expected):
        assert PipelineConfig(target_format=fmt).entry_name("p1") == expected

    def test_entry_name_bare_identity(self):
        config = PipelineConfig(entry_extension=False)
        assert config.entry_name("p1") == "p1"


class TestWorkItem:
    """Tests for WorkItem."""

    def test_work_item_creation(self):
        image = Image.new("RGB", (10, 5))
        item = WorkItem(identity="p1", original_size=123, payload=image)
        assert item.identity == "p1"
        assert item.original_size == 123
        assert item.payload is image

    def test_work_item_requires_image_payload(self):
        with pytest.raises(ValidationError):
            WorkItem(identity="p1", original_size=1, payload=b"raw bytes")

    def test_work_item_rejects_negative_size(self):
        with pytest.raises(ValidationError):
            WorkItem(identity="p1", original_size=-1, payload=Image.new("RGB", (1, 1)))


class TestResultItem:
    """Tests for ResultItem."""

    def test_result_item_defaults(self):
        result = ResultItem(identity="p1", original_size=10)
        assert result.encoded_payload == b""
        assert result.encoded_size == 0
        assert result.error == ""
        assert result.failed is False

    def test_result_item_failed_when_error_set(self):
        result = ResultItem(identity="p1", original_size=10, encoded_payload=b"ab", error="boom")
        assert result.failed is True
        assert result.encoded_size == 2


class TestRunningTotals:
    """Tests for RunningTotals derived values."""

    def test_running_totals_percent_and_ratio(self):
        totals = RunningTotals(
            items_expected=4,
            items_processed=1,
            total_original_bytes=2000,
            total_encoded_bytes=500,
        )
        assert totals.percent_complete == 25.0
        assert totals.compression_ratio == 25.0

    def test_running_totals_empty_does_not_divide_by_zero(self):
        totals = RunningTotals()
        assert totals.percent_complete == 0.0
        assert totals.compression_ratio == 0.0


class TestUnitReport:
    """Tests for UnitReport."""

    def test_unit_report_defaults(self):
        report = UnitReport(name="chapter1")
        assert report.archive_path is None
        assert report.totals.items_processed == 0
        assert report.interrupted is False

    def test_unit_report_totals_factory(self):
        """Test that totals uses a factory function for its default."""
        first = UnitReport(name="a")
        second = UnitReport(name="b")
        assert first.totals is not second.totals
