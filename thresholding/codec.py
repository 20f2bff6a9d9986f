"""
Decoding of encoded image bytes into RGBA8 pixel buffers.

This is the boundary with the image codec: the thresholding functions only
ever see the decoded PixelBuffer. Decode failures are raised here, before
any histogram or threshold code runs.
"""

import io
import logging
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from .buffer import PixelBuffer

logger = logging.getLogger(__name__)


class DecodeError(ValueError):
    """Raised when image bytes cannot be decoded."""


def decode_image(data: bytes) -> PixelBuffer:
    """Decode PNG/JPEG/... bytes into an RGBA8 PixelBuffer.

    The format is guessed from the data itself.

    Args:
        data: Encoded image bytes.

    Returns:
        PixelBuffer with the decoded image converted to RGBA.

    Raises:
        DecodeError: If data is empty, of an unknown format, or corrupt.
    """
    if not data:
        raise DecodeError("Image data is empty")

    try:
        with Image.open(io.BytesIO(data)) as img:
            rgba = img.convert("RGBA")
    except UnidentifiedImageError as e:
        raise DecodeError(f"Unrecognized image format: {e}") from e
    except (OSError, SyntaxError) as e:
        raise DecodeError(f"Unable to decode image: {e}") from e

    width, height = rgba.size
    logger.debug("Decoded %dx%d image (%d bytes)", width, height, len(data))
    return PixelBuffer(width=width, height=height, pixels=rgba.tobytes())


def load_image(path: str | Path) -> PixelBuffer:
    """Read an image file and decode it.

    Raises:
        OSError: If the file cannot be read.
        DecodeError: If its contents cannot be decoded.
    """
    return decode_image(Path(path).read_bytes())
