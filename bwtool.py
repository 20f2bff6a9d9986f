#!/usr/bin/env python3
"""
Unified CLI for histogram thresholding.

Usage:
    bwtool histogram <image>                     # Channel and gray histogram summary
    bwtool histogram <image> --json --counts     # Full 256-bucket counts as JSON
    bwtool threshold <image>                     # Binarize with the default method
    bwtool threshold <image> -m percent-black --percent 0.3
    bwtool threshold <image> -m manual --low 50 --high 200
    bwtool threshold <image> --normalize stretch -m minimum-error
    bwtool compare <image>                       # Cutoff of every automatic method
"""

import argparse
import logging
import sys

from logging_utils import configure_logging, add_logging_args
from cli.histogram import add_histogram_subparser
from cli.threshold import add_threshold_subparser, add_compare_subparser

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bwtool",
        description="Histogram statistics and black/white thresholding for images",
    )
    add_logging_args(parser)
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    add_histogram_subparser(subparsers)
    add_threshold_subparser(subparsers)
    add_compare_subparser(subparsers)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level, args.verbose, args.quiet)

    cmd = getattr(args, "_cmd", None)
    if args.command is None or cmd is None:
        parser.print_help()
        return 1
    return cmd(args)


if __name__ == "__main__":
    sys.exit(main())
