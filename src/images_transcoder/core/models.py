"""Shared data models for the images transcoder."""

from enum import Enum
from typing import Any, Optional

from PIL import Image
from pydantic import BaseModel, ConfigDict, Field, field_validator


class OutputFormat(str, Enum):
    """Target encodings supported by the transform workers."""

    WEBP = "webp"
    JPEG = "jpeg"
    PNG = "png"
    GIF = "gif"

    @property
    def extension(self) -> str:
        """File extension used for archive entry names."""
        return "jpg" if self is OutputFormat.JPEG else self.value

    @property
    def pil_format(self) -> str:
        return self.value.upper()


class EncodeFailurePolicy(str, Enum):
    """What the sink does with an item whose encode failed."""

    PLACEHOLDER = "placeholder"
    SKIP = "skip"


class PipelineConfig(BaseModel):
    """Configuration shared read-only by every stage of one run."""

    model_config = ConfigDict(frozen=True)

    target_format: OutputFormat = OutputFormat.WEBP
    quality: float = Field(default=75.0, ge=1, le=100)
    max_width: int = Field(default=1080, ge=0)
    on_encode_failure: EncodeFailurePolicy = EncodeFailurePolicy.PLACEHOLDER
    entry_extension: bool = True

    @field_validator("target_format", mode="before")
    @classmethod
    def _normalize_format(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip().lower()
            if value == "jpg":
                return OutputFormat.JPEG
        return value

    def entry_name(self, identity: str) -> str:
        """Archive entry name for an item with the given identity."""
        if not self.entry_extension:
            return identity
        return f"{identity}.{self.target_format.extension}"


class WorkItem(BaseModel):
    """A decoded source image on its way to a transform worker."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    identity: str
    original_size: int = Field(ge=0)
    payload: Image.Image


class ResultItem(BaseModel):
    """An encoded image on its way to the archive sink."""

    identity: str
    original_size: int = Field(ge=0)
    encoded_payload: bytes = b""
    error: str = ""

    @property
    def encoded_size(self) -> int:
        return len(self.encoded_payload)

    @property
    def failed(self) -> bool:
        return bool(self.error)


class RunningTotals(BaseModel):
    """Aggregate counters for one unit of work."""

    items_expected: int = 0
    items_processed: int = 0
    items_skipped: int = 0
    total_original_bytes: int = 0
    total_encoded_bytes: int = 0

    @property
    def percent_complete(self) -> float:
        if self.items_expected <= 0:
            return 0.0
        return self.items_processed / self.items_expected * 100

    @property
    def compression_ratio(self) -> float:
        if self.total_original_bytes <= 0:
            return 0.0
        return self.total_encoded_bytes / self.total_original_bytes * 100


class UnitReport(BaseModel):
    """Summary of one processed input set."""

    name: str
    archive_path: Optional[str] = None
    totals: RunningTotals = Field(default_factory=RunningTotals)
    enumeration_errors: int = 0
    archive_errors: int = 0
    elapsed: float = 0.0
    interrupted: bool = False
