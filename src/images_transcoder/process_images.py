#!/usr/bin/env python3
"""
Batch Image Transcoder CLI

For every immediate subdirectory of a root: decode images → resize/re-encode
in parallel → stream into '<subdirectory>.zip'.
"""

import os
import sys
import argparse
from typing import List, Optional

from .core import ConfigurationError, ImagesTranscoderError, PipelineConfig, get_logger
from .core.factories import PipelineFactory, build_config
from .core.logging_config import set_debug_logging
from .core.models import EncodeFailurePolicy
from .core.services import process_root
from .core.shutdown import get_shutdown_coordinator


def add_process_arguments(parser: argparse.ArgumentParser) -> None:
    """Register the options shared by `transcode-images` and `images-transcoder process`."""
    parser.add_argument(
        "root",
        nargs="?",
        default=".",
        help="Directory whose immediate subdirectories are the input sets (default: current directory)",
    )
    parser.add_argument(
        "--output-root",
        default=None,
        help="Where to write the archives (default: ROOT)",
    )
    parser.add_argument(
        "--format",
        dest="target_format",
        type=str.lower,
        default="webp",
        choices=["webp", "jpg", "jpeg", "png", "gif"],
        help="Output format (default: webp)",
    )
    parser.add_argument(
        "--quality",
        type=float,
        default=75,
        help="Output quality for webp and jpeg, 1-100 (default: 75)",
    )
    parser.add_argument(
        "--max-width",
        type=int,
        default=1080,
        help="Maximum width of the output images, 0 for no resizing (default: 1080)",
    )
    parser.add_argument(
        "--concurrency",
        type=int,
        default=None,
        help="Transform workers and queue capacity per input set (default: CPU count)",
    )
    parser.add_argument(
        "--parallel-units",
        type=int,
        default=1,
        help="Input sets processed at the same time (default: 1)",
    )
    parser.add_argument(
        "--on-encode-failure",
        type=str,
        default=EncodeFailurePolicy.PLACEHOLDER.value,
        choices=[policy.value for policy in EncodeFailurePolicy],
        help="Write failed encodes as placeholder entries or skip them (default: placeholder)",
    )
    parser.add_argument(
        "--bare-entry-names",
        action="store_true",
        help="Name archive entries without the output extension",
    )
    parser.add_argument(
        "--no-progress", action="store_true", help="Disable the progress line"
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parses command-line arguments for the batch transcoder.

    Returns:
        An `argparse.Namespace` object containing the parsed arguments.
    """
    parser = argparse.ArgumentParser(
        description="Re-encode the images of each subdirectory into one zip archive"
    )
    add_process_arguments(parser)
    return parser.parse_args(argv)


def config_from_args(args: argparse.Namespace) -> PipelineConfig:
    """
    Build the pipeline configuration from parsed arguments.

    Raises:
        ConfigurationError: If an option value is invalid
    """
    return build_config(
        target_format=args.target_format,
        quality=args.quality,
        max_width=args.max_width,
        on_encode_failure=args.on_encode_failure,
        entry_extension=not args.bare_entry_names,
    )


def run(args: argparse.Namespace) -> int:
    """
    Run the pipeline for parsed arguments and return the process exit code.

    The shutdown coordinator is created and installed once, here, before
    any unit of work starts.
    """
    logger = get_logger("images-transcoder")
    try:
        if args.debug:
            set_debug_logging()

        config = config_from_args(args)
        if args.parallel_units < 1:
            raise ConfigurationError(f"--parallel-units must be at least 1, got {args.parallel_units}")
        if not os.path.isdir(args.root):
            raise ConfigurationError(f"root {args.root} is not a directory")
        output_root = args.output_root or args.root
        if not os.path.isdir(output_root):
            raise ConfigurationError(f"output root {output_root} is not a directory")

        coordinator = get_shutdown_coordinator()
        coordinator.install()

        orchestrator = PipelineFactory.create_orchestrator(
            config,
            output_root,
            concurrency=args.concurrency,
            coordinator=coordinator,
            show_progress=not args.no_progress,
        )
        process_root(args.root, orchestrator, parallel_units=args.parallel_units)

        summary = orchestrator.metrics_collector.get_summary()
        if summary:
            logger.debug(
                f"Units: {summary['total_operations']} "
                f"(failed: {summary['failed_operations']}), "
                f"avg {summary['avg_duration']:.2f}s, max {summary['max_duration']:.2f}s"
            )
        return 0

    except ConfigurationError as e:
        logger.error(str(e))
        return 1
    except ImagesTranscoderError as e:
        logger.error(f"Processing failed: {e}", exc_info=True)
        return 1


def main(argv: Optional[List[str]] = None) -> None:
    """
    Main entry point for the `transcode-images` script.
    """
    try:
        exit_code = run(parse_args(argv))
    except KeyboardInterrupt:
        get_logger("images-transcoder").warning("Processing interrupted by user.")
        exit_code = 0
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
