"""Core utilities and shared components for the images transcoder."""

from .logging_config import (
    get_logger,
    set_debug_logging,
    setup_logger,
)
from .exceptions import (
    ImagesTranscoderError,
    ImageDecodeError,
    EncodeError,
    ArchiveError,
    ConfigurationError,
    HandoffClosedError,
)
from .models import (
    EncodeFailurePolicy,
    OutputFormat,
    PipelineConfig,
    ResultItem,
    RunningTotals,
    UnitReport,
    WorkItem,
)
from .image_utils import (
    decode_image_file,
    encode_image,
    format_bytes,
    identity_from_filename,
    is_image_file,
    resize_to_max_width,
    scaled_size,
)
from .handoff import HandoffQueue

__all__ = [
    "PipelineConfig",
    "OutputFormat",
    "EncodeFailurePolicy",
    "WorkItem",
    "ResultItem",
    "RunningTotals",
    "UnitReport",
    "HandoffQueue",
    "decode_image_file",
    "encode_image",
    "format_bytes",
    "identity_from_filename",
    "is_image_file",
    "resize_to_max_width",
    "scaled_size",
    "setup_logger",
    "get_logger",
    "set_debug_logging",
    "ImagesTranscoderError",
    "ImageDecodeError",
    "EncodeError",
    "ArchiveError",
    "ConfigurationError",
    "HandoffClosedError",
]
