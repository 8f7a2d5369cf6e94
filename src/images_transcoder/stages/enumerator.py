"""Source enumerator - lists one input set and decodes its eligible images."""

import os
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Tuple

from PIL import Image

from ..core import WorkItem, get_logger
from ..core.error_handling import BatchOperationContextManager
from ..core.handoff import HandoffQueue
from ..core.image_utils import (
    PathLike,
    decode_image_file,
    identity_from_filename,
    is_image_file,
)
from ..core.protocols import LoggerProtocol, SourceStage

Decoder = Callable[[Path], Tuple[int, Image.Image]]


def list_eligible_files(input_dir: PathLike) -> List[Path]:
    """
    Immediate image files of a directory, in name order.

    Subdirectories are not entered.

    Raises:
        OSError: If the directory cannot be read
    """
    with os.scandir(input_dir) as entries:
        names = sorted(
            entry.name
            for entry in entries
            if not entry.is_dir() and is_image_file(entry.name)
        )
    return [Path(input_dir) / name for name in names]


class SourceEnumerator(SourceStage[WorkItem]):
    """Decodes each eligible file of an input set into a WorkItem."""

    name = "enumerator"

    def __init__(
        self,
        input_dir: PathLike,
        outbox: HandoffQueue[WorkItem],
        logger: Optional[LoggerProtocol] = None,
        decoder: Decoder = decode_image_file,
    ):
        super().__init__(outbox)
        self.input_dir = Path(input_dir)
        self._logger = logger or get_logger("enumerator")
        self._decoder = decoder
        self.emitted = 0
        self.skipped = 0

    def produce(self) -> Iterator[WorkItem]:
        try:
            files = list_eligible_files(self.input_dir)
        except OSError as e:
            self._logger.error(f"open {self.input_dir} failed: {e}")
            return

        with BatchOperationContextManager(
            operation_name=f"Enumerating {self.input_dir.name}"
        ) as batch:
            for path in files:
                try:
                    size, image = self._decoder(path)
                except Exception as e:  # noqa: BLE001
                    # One bad file never aborts the input set
                    self.skipped += 1
                    batch.add_error(str(e), item_identifier=path.name)
                    self._logger.error(f"[{path.name}] Skipping file: {e}")
                    continue

                self._logger.debug(
                    f"[{path.name}] Decoded {image.width}x{image.height} ({size} bytes)"
                )
                self.emitted += 1
                yield WorkItem(
                    identity=identity_from_filename(path),
                    original_size=size,
                    payload=image,
                )
