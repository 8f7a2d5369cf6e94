"""Unit-of-work orchestration and the root driver."""

import os
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import List, Optional, TextIO

from ..stages.common import log_configuration, log_final_statistics, start_stage
from ..stages.enumerator import Decoder, SourceEnumerator, list_eligible_files
from ..stages.sink import ArchiveSink
from ..stages.workers import TransformWorkerPool, default_concurrency
from .exceptions import ArchiveError, ConfigurationError
from .handoff import HandoffQueue
from .image_utils import (
    PathLike,
    archive_path_for,
    decode_image_file,
    encode_image,
    unit_name,
)
from .logging_config import get_logger
from .models import PipelineConfig, ResultItem, UnitReport, WorkItem
from .observability import MetricsCollector, PerformanceMetrics, ProgressAggregator
from .protocols import EncoderProtocol, LoggerProtocol
from .shutdown import ShutdownCoordinator


def count_eligible_files(input_dir: PathLike) -> int:
    """Number of eligible images in a directory; 0 if it cannot be read."""
    try:
        return len(list_eligible_files(input_dir))
    except OSError:
        return 0


def list_input_sets(root: PathLike) -> List[Path]:
    """
    Immediate subdirectories of root, in name order.

    Raises:
        ConfigurationError: If root cannot be read
    """
    try:
        with os.scandir(root) as entries:
            names = sorted(entry.name for entry in entries if entry.is_dir())
    except OSError as e:
        raise ConfigurationError(f"cannot read root directory {root}: {e}") from e
    return [Path(root) / name for name in names]


class UnitOfWorkOrchestrator:
    """
    Wires one enumerator, one worker pool and one archive sink per input set.

    Holds no per-run state, so one instance can run several input sets,
    one after another or from several threads at once.
    """

    def __init__(
        self,
        config: PipelineConfig,
        output_root: PathLike,
        concurrency: Optional[int] = None,
        coordinator: Optional[ShutdownCoordinator] = None,
        logger: Optional[LoggerProtocol] = None,
        show_progress: bool = True,
        progress_stream: Optional[TextIO] = None,
        encoder: EncoderProtocol = encode_image,
        decoder: Decoder = decode_image_file,
        metrics_collector: Optional[MetricsCollector] = None,
    ):
        self.config = config
        self.output_root = Path(output_root)
        self.concurrency = default_concurrency() if concurrency is None else concurrency
        if self.concurrency < 1:
            raise ConfigurationError(f"concurrency must be at least 1, got {self.concurrency}")
        self._coordinator = coordinator
        self._logger = logger or get_logger("orchestrator")
        self._show_progress = show_progress
        self._progress_stream = progress_stream
        self._encoder = encoder
        self._decoder = decoder
        self.metrics_collector = metrics_collector

    def run(self, input_dir: PathLike) -> UnitReport:
        """
        Process one input set into '<basename>.zip' under the output root.

        Returns once the archive is finalized. An input set with no eligible
        files produces no archive and no progress output.

        Raises:
            ArchiveError: If the archive file cannot be created
        """
        input_dir = Path(input_dir)
        name = unit_name(input_dir)
        expected = count_eligible_files(input_dir)
        if expected == 0:
            self._logger.debug(f"No eligible images in {input_dir}, skipping")
            return UnitReport(name=name)

        start_time = time.time()
        work_queue: HandoffQueue[WorkItem] = HandoffQueue(self.concurrency, name=f"{name}-work")
        result_queue: HandoffQueue[ResultItem] = HandoffQueue(
            self.concurrency, name=f"{name}-results"
        )

        progress = ProgressAggregator(
            expected, name, stream=self._progress_stream, enabled=self._show_progress
        )
        sink = ArchiveSink(
            result_queue,
            archive_path_for(input_dir, self.output_root),
            self.config,
            progress,
            coordinator=self._coordinator,
        )
        try:
            sink.open()
        except ArchiveError as e:
            self._record_metric(name, start_time, success=False, error_message=str(e))
            raise
        progress.start()

        enumerator = SourceEnumerator(input_dir, work_queue, decoder=self._decoder)
        pool = TransformWorkerPool(
            work_queue, result_queue, self.config, size=self.concurrency, encoder=self._encoder
        )

        enumerator_thread = start_stage(enumerator, f"{name}-{enumerator.name}")
        pool.start(name)
        sink_thread = start_stage(sink, f"{name}-{sink.name}")

        # Each close happens only after every producer of that queue is done
        enumerator_thread.join()
        work_queue.close()
        pool.join()
        result_queue.close()
        sink_thread.join()

        report = UnitReport(
            name=name,
            archive_path=str(sink.archive_path),
            totals=progress.snapshot(),
            enumeration_errors=enumerator.skipped,
            archive_errors=sink.write_errors,
            elapsed=time.time() - start_time,
            interrupted=sink.interrupted,
        )
        self._record_metric(name, start_time, success=True, report=report)
        return report

    def _record_metric(
        self,
        name: str,
        start_time: float,
        success: bool,
        error_message: Optional[str] = None,
        report: Optional[UnitReport] = None,
    ) -> None:
        if self.metrics_collector is None:
            return
        metadata = {}
        if report is not None:
            metadata = {
                "items_processed": report.totals.items_processed,
                "original_bytes": report.totals.total_original_bytes,
                "encoded_bytes": report.totals.total_encoded_bytes,
            }
        self.metrics_collector.record_metric(
            PerformanceMetrics(
                operation=f"unit:{name}",
                start_time=start_time,
                end_time=time.time(),
                success=success,
                error_message=error_message,
                metadata=metadata,
            )
        )


def _run_unit(orchestrator: UnitOfWorkOrchestrator, input_dir: Path) -> UnitReport:
    logger = get_logger("orchestrator")
    try:
        return orchestrator.run(input_dir)
    except ArchiveError as e:
        # Only this input set is lost
        logger.error(f"Processing directory {input_dir.name} failed: {e}")
        return UnitReport(name=input_dir.name)


def process_root(
    root: PathLike,
    orchestrator: UnitOfWorkOrchestrator,
    parallel_units: int = 1,
) -> List[UnitReport]:
    """
    Run one unit of work per immediate subdirectory of root.

    Units run one after another unless parallel_units > 1, in which case
    they share a thread pool; every unit still owns its own sink and
    progress aggregator.

    Raises:
        ConfigurationError: If root cannot be read
    """
    logger = get_logger("orchestrator")
    log_configuration(orchestrator.config, orchestrator.concurrency, str(root))
    start_time = time.time()

    input_sets = list_input_sets(root)
    output_root = orchestrator.output_root.resolve()
    input_sets = [d for d in input_sets if d.resolve() != output_root]
    logger.info(f"Found {len(input_sets)} input directories in {root}")

    reports: List[UnitReport] = []
    if parallel_units <= 1:
        for input_dir in input_sets:
            reports.append(_run_unit(orchestrator, input_dir))
    else:
        with ThreadPoolExecutor(max_workers=parallel_units) as executor:
            future_to_dir = {
                executor.submit(_run_unit, orchestrator, input_dir): input_dir
                for input_dir in input_sets
            }
            for future in as_completed(future_to_dir):
                reports.append(future.result())
        reports.sort(key=lambda r: r.name)

    log_final_statistics(reports, time.time() - start_time)
    return reports
