"""Main module for the images transcoder CLI."""

import sys
import argparse
from typing import List, Optional

from . import __version__
from .process_images import add_process_arguments, run


def main(argv: Optional[List[str]] = None) -> None:
    """
    Entry point for the unified command-line interface (CLI) of the Images Transcoder.

    This function sets up an `ArgumentParser` with a "process" command, which
    runs the pipeline over a root directory, and a "version" command.
    """
    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="images-transcoder",
        description="Images Transcoder - re-encode per-directory image sets into zip archives",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Transcode every subdirectory of the current directory to webp
  images-transcoder process

  # JPEG at quality 85, no resizing, 4 workers per directory
  images-transcoder process ./chapters --format jpg --quality 85 \\
                            --max-width 0 --concurrency 4

  # Show version
  images-transcoder version
        """,
    )

    subparsers: argparse._SubParsersAction = parser.add_subparsers(
        dest="command", help="Available commands"
    )

    process_parser: argparse.ArgumentParser = subparsers.add_parser(
        "process", help="Transcode each subdirectory of ROOT into ROOT/<name>.zip"
    )
    add_process_arguments(process_parser)

    subparsers.add_parser("version", help="Show version information")

    args: argparse.Namespace = parser.parse_args(argv)

    if args.command == "process":
        try:
            exit_code = run(args)
        except KeyboardInterrupt:
            exit_code = 0
        sys.exit(exit_code)

    elif args.command == "version":
        print("Images Transcoder CLI")
        print(f"Version {__version__}")
        print("Bounded concurrent image transcoding into per-directory archives")
        sys.exit(0)

    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
