"""Common functions shared across the pipeline stages and the driver."""

import threading
from typing import Sequence

from ..core import PipelineConfig, UnitReport, get_logger
from ..core.image_utils import format_bytes
from ..core.protocols import Stage


def start_stage(stage: Stage, thread_name: str) -> threading.Thread:
    """
    Run a stage on its own daemon thread.

    An exception escaping the stage is logged; the thread still ends, so a
    join() on it always returns. Daemon threads are abandoned on interrupt.
    """
    logger = get_logger("orchestrator")

    def _target() -> None:
        try:
            stage.run()
        except Exception as e:  # noqa: BLE001
            logger.error(f"Stage {thread_name} crashed: {e}", exc_info=True)

    thread = threading.Thread(target=_target, name=thread_name, daemon=True)
    thread.start()
    return thread


def log_configuration(config: PipelineConfig, concurrency: int, root: str):
    """Log processing configuration."""
    logger = get_logger("orchestrator")
    logger.info("=" * 80)
    logger.info("IMAGES TRANSCODER")
    logger.info("=" * 80)
    logger.info(f"  Root:             {root}")
    logger.info(f"  Output format:    {config.target_format.value}")
    logger.info(f"  Quality:          {config.quality:g}")
    max_width = config.max_width if config.max_width > 0 else "disabled"
    logger.info(f"  Max width:        {max_width}")
    logger.info(f"  Workers per unit: {concurrency}")
    logger.info(f"  Encode failures:  {config.on_encode_failure.value}")
    logger.info("=" * 80)


def log_final_statistics(reports: Sequence[UnitReport], total_time: float):
    """Log final processing statistics."""
    logger = get_logger("orchestrator")
    archived = [r for r in reports if r.archive_path]
    items = sum(r.totals.items_processed for r in archived)
    original = sum(r.totals.total_original_bytes for r in archived)
    encoded = sum(r.totals.total_encoded_bytes for r in archived)
    skipped = sum(r.enumeration_errors + r.totals.items_skipped for r in archived)
    overall_rate = items / total_time if total_time > 0 else 0

    logger.info("=" * 80)
    logger.info("PROCESSING COMPLETED")
    logger.info("=" * 80)
    logger.info(f"Total execution time: {total_time:.1f}s")
    logger.info(f"Archives written: {len(archived)} of {len(reports)} input sets")
    logger.info(f"Images processed: {items} ({overall_rate:.1f} items/sec)")
    logger.info(f"Images skipped: {skipped}")
    logger.info(f"Bytes: {format_bytes(encoded)} from {format_bytes(original)}")
    logger.info("=" * 80)
