"""Archive sink - streams encoded images into one zip per input set."""

import threading
import zipfile
from pathlib import Path
from typing import BinaryIO, Optional, Set

from ..core import EncodeFailurePolicy, PipelineConfig, ResultItem, get_logger
from ..core.error_handling import BatchOperationContextManager
from ..core.exceptions import ArchiveError
from ..core.handoff import HandoffQueue
from ..core.image_utils import PathLike
from ..core.protocols import LoggerProtocol, ProgressReporter, SinkStage
from ..core.shutdown import ShutdownCoordinator

CHUNK_SIZE = 64 * 1024


class ArchiveSink(SinkStage[ResultItem]):
    """
    Single consumer of the result queue and sole owner of the output archive.

    Items are written in arrival order. Each entry is written under a lock
    that finalize() also takes, so an interrupt closes the archive between
    entries and never inside one. Once the archive is closed, or the
    shutdown token is set, no further entries are written.
    """

    name = "archive-sink"

    def __init__(
        self,
        inbox: HandoffQueue[ResultItem],
        archive_path: PathLike,
        config: PipelineConfig,
        progress: ProgressReporter,
        coordinator: Optional[ShutdownCoordinator] = None,
        logger: Optional[LoggerProtocol] = None,
    ):
        super().__init__(inbox)
        self.archive_path = Path(archive_path)
        self.config = config
        self.progress = progress
        self._coordinator = coordinator
        self._logger = logger or get_logger("archive-sink")
        self._lock = threading.Lock()
        self._file: Optional[BinaryIO] = None
        self._archive: Optional[zipfile.ZipFile] = None
        self._handle: Optional[int] = None
        self._closed = False
        self._names: Set[str] = set()
        self._batch: Optional[BatchOperationContextManager] = None
        self.entries_written = 0
        self.write_errors = 0
        self.dropped = 0
        self.interrupted = False

    @property
    def closed(self) -> bool:
        return self._closed

    def open(self) -> None:
        """
        Create the archive file and register it for interrupt finalization.

        Raises:
            ArchiveError: If the archive file cannot be created
        """
        if self._archive is not None:
            return
        try:
            self._file = open(self.archive_path, "wb")
            self._archive = zipfile.ZipFile(
                self._file, mode="w", compression=zipfile.ZIP_DEFLATED
            )
        except OSError as e:
            if self._file is not None:
                self._file.close()
            raise ArchiveError(f"open {self.archive_path} failed: {e}") from e

        if self._coordinator is not None:
            self._handle = self._coordinator.register(self.finalize)
        self._logger.debug(f"Opened archive {self.archive_path}")

    def run(self) -> None:
        self.open()
        with BatchOperationContextManager(
            operation_name=f"Archiving {self.archive_path.name}"
        ) as batch:
            self._batch = batch
            for item in self.inbox:
                self.consume(item)
        self.finish()

    def consume(self, item: ResultItem) -> None:
        if self._cancelled():
            # Drain without writing; the process is on its way out
            self.interrupted = True
            self.dropped += 1
            return

        if item.failed and self.config.on_encode_failure is EncodeFailurePolicy.SKIP:
            self._logger.warning(f"[{item.identity}] Dropping failed encode: {item.error}")
            self.dropped += 1
            self.progress.skip()
            return

        self.progress.record(item.original_size, item.encoded_size)
        self._write_entry(self.config.entry_name(item.identity), item.encoded_payload)

    def finish(self) -> None:
        try:
            self.finalize()
        except ArchiveError as e:
            self._logger.error(str(e))
        self.progress.finish()

    def finalize(self) -> None:
        """
        Flush and close the archive. Safe to call more than once and from
        any thread; only the first call does anything.

        Raises:
            ArchiveError: If the archive cannot be flushed or closed
        """
        with self._lock:
            if self._closed or self._archive is None:
                return
            self._closed = True
            if self._coordinator is not None and self._handle is not None:
                self._coordinator.unregister(self._handle)
            try:
                # Writes the central directory; the file stays ours to close
                self._archive.close()
                self._file.flush()
            except (OSError, ValueError, zipfile.BadZipFile) as e:
                raise ArchiveError(f"close {self.archive_path} failed: {e}") from e
            finally:
                self._file.close()
        self._logger.debug(
            f"Closed archive {self.archive_path} with {self.entries_written} entries"
        )

    def _cancelled(self) -> bool:
        return self._coordinator is not None and self._coordinator.is_cancelled

    def _write_entry(self, entry_name: str, payload: bytes) -> bool:
        with self._lock:
            if self._closed:
                self.interrupted = True
                return False
            if entry_name in self._names:
                self._logger.warning(f"Duplicate archive entry name: {entry_name}")
            try:
                force_zip64 = len(payload) >= zipfile.ZIP64_LIMIT
                with self._archive.open(entry_name, mode="w", force_zip64=force_zip64) as entry:
                    view = memoryview(payload)
                    for offset in range(0, len(view), CHUNK_SIZE):
                        entry.write(view[offset:offset + CHUNK_SIZE])
            except (OSError, ValueError, RuntimeError, zipfile.LargeZipFile) as e:
                self.write_errors += 1
                if self._batch is not None:
                    self._batch.add_error(str(e), item_identifier=entry_name)
                self._logger.error(f"[{entry_name}] write to {self.archive_path} failed: {e}")
                return False
            self._names.add(entry_name)
            self.entries_written += 1
            return True
