"""Transform worker pool - resizes and re-encodes images in parallel threads."""

import io
import os
import threading
from typing import List, Optional

from ..core import PipelineConfig, ResultItem, WorkItem, get_logger
from ..core.handoff import HandoffQueue
from ..core.image_utils import encode_image, resize_to_max_width
from ..core.protocols import EncoderProtocol, LoggerProtocol, TransformStage
from .common import start_stage


def default_concurrency() -> int:
    """Available parallelism: the logical CPU count."""
    return os.cpu_count() or 1


class TransformWorker(TransformStage[WorkItem, ResultItem]):
    """
    Resize-then-encode stage.

    Workers hold no state between items and can be run in any number.
    A failed encode still yields a ResultItem carrying whatever the buffer
    held and the error text; the archive sink applies the configured
    failure policy to it.
    """

    name = "transform-worker"

    def __init__(
        self,
        inbox: HandoffQueue[WorkItem],
        outbox: HandoffQueue[ResultItem],
        config: PipelineConfig,
        logger: Optional[LoggerProtocol] = None,
        encoder: EncoderProtocol = encode_image,
    ):
        super().__init__(inbox, outbox)
        self.config = config
        self._logger = logger or get_logger("transform-worker")
        self._encoder = encoder

    def transform(self, item: WorkItem) -> ResultItem:
        buffer = io.BytesIO()
        error = ""
        try:
            image = resize_to_max_width(item.payload, self.config.max_width)
            if image is not item.payload:
                self._logger.debug(
                    f"[{item.identity}] Resized {item.payload.width}x{item.payload.height} "
                    f"-> {image.width}x{image.height}"
                )
            self._encoder(image, self.config.target_format, self.config.quality, buffer)
        except Exception as e:  # noqa: BLE001
            error = str(e) or type(e).__name__
            self._logger.error(
                f"[{item.identity}] format {self.config.target_format.value} failed: {error}"
            )

        return ResultItem(
            identity=item.identity,
            original_size=item.original_size,
            encoded_payload=buffer.getvalue(),
            error=error,
        )


class TransformWorkerPool:
    """N identical transform workers sharing one inbox and one outbox."""

    def __init__(
        self,
        inbox: HandoffQueue[WorkItem],
        outbox: HandoffQueue[ResultItem],
        config: PipelineConfig,
        size: Optional[int] = None,
        logger: Optional[LoggerProtocol] = None,
        encoder: EncoderProtocol = encode_image,
    ):
        self.size = default_concurrency() if size is None else size
        if self.size < 1:
            raise ValueError(f"worker pool size must be at least 1, got {self.size}")
        self.workers: List[TransformWorker] = [
            TransformWorker(inbox, outbox, config, logger=logger, encoder=encoder)
            for _ in range(self.size)
        ]
        self._threads: List[threading.Thread] = []

    def start(self, unit_name: str = "") -> None:
        self._threads = [
            start_stage(worker, f"{unit_name}-{worker.name}-{index}")
            for index, worker in enumerate(self.workers)
        ]

    def join(self) -> None:
        """Completion barrier: wait for every worker to drain and exit."""
        for thread in self._threads:
            thread.join()
