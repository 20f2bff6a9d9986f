"""Threshold and compare commands CLI parsing and control flow."""

from __future__ import annotations

import argparse
import logging

from config import (
    MAX_LEVEL,
    DEFAULT_METHOD,
    DEFAULT_PERCENT_BLACK,
    DEFAULT_THRESHOLD_LOW,
    DEFAULT_THRESHOLD_HIGH,
)
from thresholding import (
    ThresholdConfig,
    ThresholdMethod,
    compare_methods,
    run_threshold,
    threshold,
    white_fraction,
)
from thresholding.config import NORMALIZATIONS

from .common import add_image_argument, add_json_argument, load_source, print_json

logger = logging.getLogger(__name__)


def _add_percent_argument(parser) -> None:
    parser.add_argument(
        "--percent",
        type=float,
        default=DEFAULT_PERCENT_BLACK,
        help=f"Black fraction for percent-black, 0-1 (default: {DEFAULT_PERCENT_BLACK})",
    )


def add_threshold_subparser(subparsers: argparse._SubParsersAction) -> None:
    threshold_parser = subparsers.add_parser(
        "threshold",
        help="Binarize an image and report the applied range",
    )
    add_image_argument(threshold_parser)
    threshold_parser.add_argument(
        "-m", "--method",
        choices=[method.value for method in ThresholdMethod],
        default=DEFAULT_METHOD,
        help=f"Threshold strategy (default: {DEFAULT_METHOD})",
    )
    threshold_parser.add_argument(
        "--normalize",
        choices=NORMALIZATIONS,
        help="Normalize contrast before thresholding",
    )
    _add_percent_argument(threshold_parser)
    threshold_parser.add_argument(
        "--low",
        type=int,
        default=DEFAULT_THRESHOLD_LOW,
        help=f"Lower bound for --method manual (default: {DEFAULT_THRESHOLD_LOW})",
    )
    threshold_parser.add_argument(
        "--high",
        type=int,
        default=DEFAULT_THRESHOLD_HIGH,
        help=f"Upper bound for --method manual (default: {DEFAULT_THRESHOLD_HIGH})",
    )
    add_json_argument(threshold_parser)
    threshold_parser.set_defaults(_cmd=cmd_threshold)


def add_compare_subparser(subparsers: argparse._SubParsersAction) -> None:
    compare_parser = subparsers.add_parser(
        "compare",
        help="Run every automatic threshold method on one image",
    )
    add_image_argument(compare_parser)
    _add_percent_argument(compare_parser)
    add_json_argument(compare_parser)
    compare_parser.set_defaults(_cmd=cmd_compare)


def cmd_threshold(args: argparse.Namespace) -> int:
    config = ThresholdConfig(
        method=args.method,
        normalization=args.normalize,
        percent_black=args.percent,
        low=args.low,
        high=args.high,
    )
    try:
        config.validate()
    except ValueError as exc:
        logger.error("%s", exc)
        return 1

    buf = load_source(args.image)
    if buf is None:
        return 1

    result = run_threshold(buf, config)
    if args.json:
        print_json(result.to_dict())
        return 0

    logger.info("Method:         %s", result.method.value)
    if result.normalized:
        logger.info("Normalization:  %s", config.normalization)
    logger.info("Range:          [%d, %d]", result.low, result.high)
    logger.info("White pixels:   %.2f%%", result.white_fraction * 100.0)
    return 0


def cmd_compare(args: argparse.Namespace) -> int:
    buf = load_source(args.image)
    if buf is None:
        return 1

    try:
        cutoffs = compare_methods(buf, percent=args.percent)
    except ValueError as exc:
        logger.error("%s", exc)
        return 1

    rows = [
        {
            "method": method.value,
            "cutoff": cutoff,
            "white_fraction": white_fraction(threshold(buf, cutoff, MAX_LEVEL)),
        }
        for method, cutoff in cutoffs.items()
    ]

    if args.json:
        print_json({"width": buf.width, "height": buf.height, "methods": rows})
        return 0

    logger.info("%-20s %6s %8s", "method", "cutoff", "white")
    for row in rows:
        logger.info(
            "%-20s %6d %7.2f%%",
            row["method"],
            row["cutoff"],
            row["white_fraction"] * 100.0,
        )
    return 0
