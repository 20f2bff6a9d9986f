"""Histogram command CLI parsing and report."""

from __future__ import annotations

import argparse
import logging

from thresholding import (
    channel_histogram,
    grayscale_histogram,
    histogram_summary,
)

from .common import add_image_argument, add_json_argument, load_source, print_json

logger = logging.getLogger(__name__)


def add_histogram_subparser(subparsers: argparse._SubParsersAction) -> None:
    histogram_parser = subparsers.add_parser(
        "histogram",
        help="Summarize the channel and grayscale histograms of an image",
    )
    add_image_argument(histogram_parser)
    histogram_parser.add_argument(
        "--counts",
        action="store_true",
        help="Include the full 256-bucket counts (JSON output only)",
    )
    add_json_argument(histogram_parser)
    histogram_parser.set_defaults(_cmd=cmd_histogram)


def build_histogram_report(buf, include_counts: bool = False) -> dict:
    """Summaries of the R, G, B and gray histograms, keyed by lower-case name."""
    histograms = {
        channel.name.lower(): hist
        for channel, hist in channel_histogram(buf).items()
    }
    histograms["gray"] = grayscale_histogram(buf)

    report = {"width": buf.width, "height": buf.height, "histograms": {}}
    for key, hist in histograms.items():
        entry = histogram_summary(hist).to_dict()
        if include_counts:
            entry["counts"] = hist.tolist()
        report["histograms"][key] = entry
    return report


def cmd_histogram(args: argparse.Namespace) -> int:
    buf = load_source(args.image)
    if buf is None:
        return 1

    report = build_histogram_report(buf, include_counts=args.counts)
    if args.json:
        print_json(report)
        return 0

    logger.info("Image: %s (%dx%d)", args.image, buf.width, buf.height)
    for key, entry in report["histograms"].items():
        if entry["mean"] is None:
            logger.info("%-5s  empty", key)
            continue
        logger.info(
            "%-5s  min=%3d  max=%3d  mean=%7.2f",
            key,
            entry["min"],
            entry["max"],
            entry["mean"],
        )
    return 0
