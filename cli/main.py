#!/usr/bin/env python3
"""URL Expander - expand shortened URLs in text files.

Usage:
    url-expander process notes.md
    # or
    python -m cli.main process notes.md -c 10 -t 45 -r 3

Each input is written to ``<name>_expanded<ext>`` next to it unless
``--output`` is given.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

from url_expander import URLExpander, __version__, default_output_path

from .config import Config


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="url-expander",
        description="Expand shortened URLs in text files using a headless browser",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Expand links in a Markdown file (writes notes_expanded.md)
  url-expander process notes.md

  # Several files, more parallelism, longer browser timeout
  url-expander process a.md b.txt -c 10 -t 60

  # Explicit output path
  url-expander process notes.md -o clean.md
        """,
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command")

    process = subparsers.add_parser(
        "process", help="Process text files to expand shortened URLs"
    )
    process.add_argument("files", nargs="+", type=Path, help="Text file(s) to process")
    process.add_argument(
        "-c", "--concurrency",
        type=int,
        default=None,
        help="number of concurrent URL expansions (default: 5)",
    )
    process.add_argument(
        "-t", "--timeout",
        type=int,
        default=None,
        help="browser timeout in seconds (default: 30)",
    )
    process.add_argument(
        "-r", "--retries",
        type=int,
        default=None,
        help="number of retry attempts (default: 2)",
    )
    process.add_argument(
        "-o", "--output",
        type=Path,
        default=None,
        help="output path (only with a single input file)",
    )
    process.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="show verbose output",
    )
    return parser


def apply_overrides(config: Config, args: argparse.Namespace) -> Config:
    """Apply command-line flags on top of the loaded configuration.

    Raises:
        ValueError: If a flag value is out of range.
    """
    if args.concurrency is not None:
        if args.concurrency < 1:
            raise ValueError("--concurrency must be >= 1")
        config.concurrency = args.concurrency
    if args.timeout is not None:
        if args.timeout < 1:
            raise ValueError("--timeout must be >= 1")
        config.timeout_seconds = args.timeout
    if args.retries is not None:
        if args.retries < 0:
            raise ValueError("--retries must be >= 0")
        config.retries = args.retries
    if args.verbose:
        config.log_level = "DEBUG"
    return config


async def run(config: Config, files: list[Path], output: Optional[Path] = None) -> int:
    """Process files with one shared expander.

    Returns:
        Process exit code: 0 if every file succeeded, 1 otherwise.
    """
    expander = URLExpander(
        concurrency=config.concurrency,
        timeout=config.timeout_ms,
        max_retries=config.retries,
        extra_shorteners=config.extra_shorteners,
    )

    failures = 0
    try:
        for file in files:
            output_file = output or default_output_path(file, config.output_suffix)
            logger.info(
                f"Processing file: {file} (concurrency: {config.concurrency}, "
                f"timeout: {config.timeout_seconds}s, retries: {config.retries})"
            )

            result = await expander.process_file(file, output_file)

            if result.success:
                logger.info(f"✅ Success: {file} → {output_file}")
            else:
                logger.error(f"❌ Error: {result.error}")
                failures += 1
    finally:
        await expander.close()

    return 1 if failures else 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        config = apply_overrides(Config.load(), args)
    except ValueError as e:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )
        logger.error(f"Configuration error: {e}")
        return 2

    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=config.log_level,
    )

    if args.output is not None and len(args.files) > 1:
        logger.error("--output can only be used with a single input file")
        return 2

    for warning in config.validate():
        logger.warning(warning)

    return asyncio.run(run(config, args.files, args.output))


if __name__ == "__main__":
    sys.exit(main())
