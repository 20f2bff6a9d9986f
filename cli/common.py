"""Helpers shared by the CLI subcommands."""

from __future__ import annotations

import json
import logging
from typing import Any

from thresholding import PixelBuffer, load_image

logger = logging.getLogger(__name__)


def add_image_argument(parser) -> None:
    parser.add_argument(
        "image",
        help="Path to a PNG/JPEG/... image",
    )


def add_json_argument(parser) -> None:
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the result as JSON on stdout",
    )


def load_source(path: str) -> PixelBuffer | None:
    """Decode the image at path, logging and returning None on failure."""
    try:
        buf = load_image(path)
    except OSError as exc:
        logger.error("Cannot read %s: %s", path, exc)
        return None
    except ValueError as exc:
        logger.error("Cannot decode %s: %s", path, exc)
        return None

    logger.debug("Loaded %s (%dx%d)", path, buf.width, buf.height)
    return buf


def print_json(payload: dict[str, Any]) -> None:
    print(json.dumps(payload, indent=2))
