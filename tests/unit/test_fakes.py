"""Tests for the testing fakes themselves."""

import io

import pytest
from PIL import Image

from images_transcoder.core.exceptions import EncodeError
from images_transcoder.core.models import OutputFormat
from images_transcoder.testing.fakes import (
    FailingEncoder,
    FakeLogger,
    create_test_image,
    setup_test_input_tree,
    write_test_image,
)


class TestFakeLogger:
    """Tests for FakeLogger."""

    def test_fake_logger_records_levels(self):
        logger = FakeLogger()
        logger.info("Info message")
        logger.error("Error %s", "formatted", exc_info=True)

        assert len(logger.get_logs()) == 2
        assert logger.get_logs("ERROR")[0]["message"] == "Error formatted"

    def test_fake_logger_clear(self):
        logger = FakeLogger()
        logger.debug("x")
        logger.clear_logs()
        assert logger.get_logs() == []


class TestFailingEncoder:
    """Tests for FailingEncoder."""

    def test_failing_encoder_fails_chosen_widths(self):
        encoder = FailingEncoder(fail_widths=[10], partial=b"half")
        buffer = io.BytesIO()

        with pytest.raises(EncodeError):
            encoder(Image.new("RGB", (10, 10)), OutputFormat.PNG, 75, buffer)

        assert buffer.getvalue() == b"half"
        assert encoder.calls == 1

    def test_failing_encoder_encodes_other_widths(self):
        encoder = FailingEncoder(fail_widths=[10])
        buffer = io.BytesIO()
        encoder(Image.new("RGB", (11, 10)), OutputFormat.PNG, 75, buffer)
        assert buffer.getvalue().startswith(b"\x89PNG")


class TestImageHelpers:
    """Tests for the image helper functions."""

    @pytest.mark.parametrize("fmt", ["PNG", "JPEG", "WEBP", "GIF"])
    def test_create_test_image(self, fmt):
        image = Image.open(io.BytesIO(create_test_image(30, 20, fmt=fmt)))
        assert image.format == fmt
        assert image.size == (30, 20)

    def test_write_test_image_picks_format_from_extension(self, tmp_path):
        path = write_test_image(tmp_path, "photo.JPG", 12, 8)
        assert Image.open(path).format == "JPEG"

    def test_setup_test_input_tree(self, tmp_path):
        root = setup_test_input_tree(tmp_path)

        assert sorted(p.name for p in root.iterdir()) == ["chapter1", "chapter2", "empty"]
        assert Image.open(root / "chapter1" / "p1.jpg").size == (2000, 1000)
        assert (root / "chapter2" / "nested" / "deep.png").exists()
