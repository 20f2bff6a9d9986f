"""Pytest configuration and shared image fixtures.

Slow tests (large random images) are skipped unless --slow is passed.
Run the full suite:   pytest --slow
Run fast tests only:  pytest          (default)
"""
import numpy as np
import pytest

from thresholding import PixelBuffer


def pytest_addoption(parser):
    parser.addoption(
        "--slow",
        action="store_true",
        default=False,
        help="Run slow tests on large images",
    )


def pytest_collection_modifyitems(config, items):
    if config.getoption("--slow"):
        return  # run everything
    skip_slow = pytest.mark.skip(reason="slow test skipped, pass --slow to include")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


def image_from_pixels(pixels, width=None, height=1):
    """Build a PixelBuffer from a list of (R, G, B, A) tuples laid out row-major."""
    if width is None:
        width = len(pixels) // height
    array = np.array(pixels, dtype=np.uint8).reshape(height, width, 4)
    return PixelBuffer.from_array(array)


def gray_image(levels, alpha=255):
    """Single-row image whose pixels are (v, v, v, alpha) for each level v."""
    return image_from_pixels([(v, v, v, alpha) for v in levels])


@pytest.fixture
def two_pixel_image():
    """2x1 image: a dark pixel (10) and a bright pixel (200)."""
    return gray_image([10, 200])


@pytest.fixture
def bimodal_image():
    """Four gray levels in two tight clusters: {20, 22} and {200, 202}."""
    return gray_image([20, 22, 200, 202])


@pytest.fixture
def constant_image():
    return gray_image([100] * 6)


@pytest.fixture
def empty_image():
    return PixelBuffer(width=0, height=0, pixels=b"")


@pytest.fixture
def random_image():
    rng = np.random.default_rng(1234)
    array = rng.integers(0, 256, size=(24, 32, 4), dtype=np.uint8)
    return PixelBuffer.from_array(array)
