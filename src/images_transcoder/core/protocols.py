"""Protocol and stage definitions for dependency injection and composition."""

import io
from abc import ABC, abstractmethod
from typing import Any, Generic, Iterator, Optional, Protocol, TypeVar

from PIL import Image

from .handoff import HandoffQueue

InT = TypeVar("InT")
OutT = TypeVar("OutT")


class LoggerProtocol(Protocol):
    """Protocol for logging operations."""

    def debug(self, message: str, *args: Any, **kwargs: Any) -> None:
        """Log debug message."""
        ...

    def info(self, message: str, *args: Any, **kwargs: Any) -> None:
        """Log info message."""
        ...

    def warning(self, message: str, *args: Any, **kwargs: Any) -> None:
        """Log warning message."""
        ...

    def error(self, message: str, *args: Any, **kwargs: Any) -> None:
        """Log error message."""
        ...


class EncoderProtocol(Protocol):
    """Callable that encodes an image into a caller-owned buffer."""

    def __call__(
        self, image: Image.Image, target_format: Any, quality: float, buffer: io.BytesIO
    ) -> None:
        ...


class ProgressReporter(Protocol):
    """What the archive sink needs from a progress aggregator."""

    def record(self, original_size: int, encoded_size: int) -> None:
        ...

    def skip(self) -> None:
        ...

    def finish(self) -> None:
        ...


class Stage(ABC):
    """One pipeline stage, run to completion on its own thread."""

    name: str = "stage"

    @abstractmethod
    def run(self) -> None:
        """Run the stage until its input is exhausted."""
        ...


class SourceStage(Stage, Generic[OutT]):
    """Stage that produces items into an outbox."""

    def __init__(self, outbox: HandoffQueue[OutT]):
        self.outbox = outbox

    @abstractmethod
    def produce(self) -> Iterator[OutT]:
        """Yield items for the outbox."""
        ...

    def run(self) -> None:
        for item in self.produce():
            self.outbox.put(item)


class TransformStage(Stage, Generic[InT, OutT]):
    """Pull-transform-push stage. Returning None from transform drops the item."""

    def __init__(self, inbox: HandoffQueue[InT], outbox: HandoffQueue[OutT]):
        self.inbox = inbox
        self.outbox = outbox

    @abstractmethod
    def transform(self, item: InT) -> Optional[OutT]:
        """Turn one input item into one output item."""
        ...

    def run(self) -> None:
        for item in self.inbox:
            result = self.transform(item)
            if result is not None:
                self.outbox.put(result)


class SinkStage(Stage, Generic[InT]):
    """Terminal stage that consumes every item of its inbox."""

    def __init__(self, inbox: HandoffQueue[InT]):
        self.inbox = inbox

    @abstractmethod
    def consume(self, item: InT) -> None:
        """Handle one item."""
        ...

    def finish(self) -> None:
        """Called once after the inbox is drained."""

    def run(self) -> None:
        for item in self.inbox:
            self.consume(item)
        self.finish()
