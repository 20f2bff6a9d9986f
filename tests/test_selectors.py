"""Tests for the automatic threshold selectors.

Degenerate inputs (empty images, single-level images) must give a defined
cutoff and a clean binary image instead of propagating undefined values.
"""

import numpy as np
import pytest

from conftest import gray_image
from thresholding import (
    AUTOMATIC_METHODS,
    Channel,
    ThresholdMethod,
    entropy,
    entropy_threshold,
    fuzzy_minimum_error,
    fuzzy_minimum_error_threshold,
    grayscale_histogram,
    mean_iterative,
    mean_iterative_threshold,
    minimum_error,
    minimum_error_threshold,
    percent_black,
    percent_black_threshold,
    select_threshold,
    threshold,
)
from thresholding.selectors import (
    entropy_objective,
    fuzzy_minimum_error_objective,
    minimum_error_objective,
    shannon,
)

SELECTOR_FUNCTIONS = [
    percent_black,
    mean_iterative,
    entropy,
    minimum_error,
    fuzzy_minimum_error,
]

CUTOFF_FUNCTIONS = [
    percent_black_threshold,
    mean_iterative_threshold,
    entropy_threshold,
    minimum_error_threshold,
    fuzzy_minimum_error_threshold,
]


def gapped_bimodal_image(seed):
    """Two random gray clusters, 40-83 and 130-189, with nothing in between."""
    rng = np.random.default_rng(seed)
    dark = rng.integers(40, 84, size=30)
    bright = rng.integers(130, 190, size=30)
    return gray_image(np.concatenate([dark, bright]).tolist())


class TestPercentBlack:

    def test_half_of_two_pixels(self, two_pixel_image):
        assert percent_black_threshold(two_pixel_image, 0.5) == 10

    def test_half_of_two_pixels_turns_both_white(self, two_pixel_image):
        result = percent_black(two_pixel_image, 0.5)
        assert result.channel(Channel.RED).ravel().tolist() == [255, 255]

    def test_zero_percent(self, two_pixel_image):
        assert percent_black_threshold(two_pixel_image, 0.0) == 0

    def test_full_percent(self, two_pixel_image):
        assert percent_black_threshold(two_pixel_image, 1.0) == 200

    def test_target_is_floored(self):
        buf = gray_image([10, 20, 30, 40])
        # floor(4 * 0.6) == 2 -> the second level
        assert percent_black_threshold(buf, 0.6) == 20

    @pytest.mark.parametrize("percent", [-0.1, 1.5, float("nan")])
    def test_out_of_range_raises(self, two_pixel_image, percent):
        with pytest.raises(ValueError, match=r"\[0, 1\]"):
            percent_black_threshold(two_pixel_image, percent)

    def test_non_number_raises(self, two_pixel_image):
        with pytest.raises(TypeError):
            percent_black_threshold(two_pixel_image, "half")


class TestMeanIterative:

    def test_two_levels_converge_to_midpoint(self, two_pixel_image):
        assert mean_iterative_threshold(two_pixel_image) == 105

    def test_three_levels(self):
        buf = gray_image([0, 10, 200, 200])
        # mean 102.5 -> (5 + 200) / 2 = 102.5, converged
        assert mean_iterative_threshold(buf) == 102

    def test_constant_image_keeps_its_level(self, constant_image):
        assert mean_iterative_threshold(constant_image) == 100

    def test_black_image(self):
        assert mean_iterative_threshold(gray_image([0, 0, 0])) == 0

    def test_iteration_cap(self, bimodal_image, caplog):
        cutoff = mean_iterative_threshold(bimodal_image, tolerance=0.0, max_iterations=0)
        assert cutoff == 111
        assert "did not converge" in caplog.text


class TestEntropy:

    def test_two_levels(self, two_pixel_image):
        assert entropy_threshold(two_pixel_image) == 10

    def test_bimodal_splits_clusters(self, bimodal_image):
        assert entropy_threshold(bimodal_image) == 22

    def test_objective_skips_undefined_candidates(self):
        objective = entropy_objective(np.bincount([10, 200], minlength=256) / 2.0)
        assert np.isnan(objective[0])
        assert objective[10] == pytest.approx(1.0)
        assert np.isnan(objective[255])

    def test_constant_image_falls_back_to_zero(self, constant_image):
        assert entropy_threshold(constant_image) == 0


class TestMinimumError:

    def test_bimodal_splits_clusters(self, bimodal_image):
        assert minimum_error_threshold(bimodal_image) == 22

    def test_objective_value_between_clusters(self):
        p = np.zeros(256)
        p[[20, 22, 200, 202]] = 0.25
        objective = minimum_error_objective(p)
        assert objective[22] == pytest.approx(3.0)
        assert objective[100] == pytest.approx(3.0)

    def test_zero_variance_and_empty_classes_are_skipped(self):
        p = np.zeros(256)
        p[[20, 22, 200, 202]] = 0.25
        objective = minimum_error_objective(p)
        assert np.isnan(objective[0])         # empty low class
        assert np.isneginf(objective[20])     # single-level low class
        assert np.isnan(objective[255])       # empty high class

    def test_constant_image_falls_back_to_zero(self, constant_image):
        assert minimum_error_threshold(constant_image) == 0

    def test_objective_is_flat_across_empty_gap(self):
        hist = grayscale_histogram(gray_image([60, 70, 83, 83, 130, 135, 150]))
        objective = minimum_error_objective(hist / hist.sum())
        assert np.isfinite(objective[83])
        assert np.all(objective[83:130] == objective[83])

    @pytest.mark.parametrize("seed", range(25))
    def test_cutoff_is_first_level_of_its_plateau(self, seed):
        buf = gapped_bimodal_image(seed)
        cutoff = minimum_error_threshold(buf)
        assert grayscale_histogram(buf)[cutoff] > 0


class TestFuzzyMinimumError:

    def test_two_levels(self, two_pixel_image):
        # Each class is one level sitting on its own mean (membership 1)
        assert fuzzy_minimum_error_threshold(two_pixel_image) == 10

    def test_bimodal_splits_clusters(self, bimodal_image):
        assert fuzzy_minimum_error_threshold(bimodal_image) == 22

    def test_constant_image_falls_back_to_zero(self, constant_image):
        assert fuzzy_minimum_error_threshold(constant_image) == 0

    def test_objective_is_flat_across_empty_gap(self):
        hist = grayscale_histogram(gray_image([60, 70, 83, 83, 130, 135, 150]))
        objective = fuzzy_minimum_error_objective(hist)
        assert np.isnan(objective[59])
        assert np.isfinite(objective[83])
        assert np.all(objective[83:130] == objective[83])

    @pytest.mark.parametrize("seed", range(25))
    def test_cutoff_is_first_level_of_its_plateau(self, seed):
        buf = gapped_bimodal_image(seed)
        cutoff = fuzzy_minimum_error_threshold(buf)
        assert grayscale_histogram(buf)[cutoff] > 0


class TestShannon:

    def test_midpoint_is_one_bit(self):
        assert float(shannon(0.5)) == pytest.approx(1.0)

    @pytest.mark.parametrize("x", [0.0, 1.0])
    def test_limits_are_zero(self, x):
        assert float(shannon(x)) == 0.0

    def test_vectorized(self):
        values = shannon(np.array([0.0, 0.25, 0.75, 1.0]))
        assert values[1] == pytest.approx(values[2])
        assert np.all(np.isfinite(values))


class TestSelectorContract:
    """Properties every selector shares."""

    @pytest.mark.parametrize("selector", SELECTOR_FUNCTIONS)
    def test_result_is_binary_with_alpha(self, selector, random_image):
        result = selector(random_image).as_array()
        assert set(np.unique(result[:, :, :3]).tolist()) <= {0, 255}
        assert np.array_equal(result[:, :, 3], random_image.channel(Channel.ALPHA))

    @pytest.mark.parametrize("selector", SELECTOR_FUNCTIONS)
    def test_pure_function_no_mutation(self, selector, random_image):
        original = random_image.pixels
        _ = selector(random_image)
        assert random_image.pixels == original

    @pytest.mark.parametrize("cutoff_fn", CUTOFF_FUNCTIONS)
    def test_cutoff_is_a_level(self, cutoff_fn, random_image):
        cutoff = cutoff_fn(random_image)
        assert isinstance(cutoff, int)
        assert 0 <= cutoff <= 255

    @pytest.mark.parametrize("selector, cutoff_fn", list(zip(SELECTOR_FUNCTIONS, CUTOFF_FUNCTIONS)))
    def test_selector_applies_its_cutoff(self, selector, cutoff_fn, bimodal_image):
        expected = threshold(bimodal_image, cutoff_fn(bimodal_image), 255)
        assert selector(bimodal_image) == expected

    @pytest.mark.parametrize("cutoff_fn", CUTOFF_FUNCTIONS)
    def test_empty_image_gives_zero(self, cutoff_fn, empty_image):
        assert cutoff_fn(empty_image) == 0

    @pytest.mark.parametrize("selector", SELECTOR_FUNCTIONS)
    def test_constant_image_does_not_crash(self, selector, constant_image):
        result = selector(constant_image).as_array()
        assert set(np.unique(result[:, :, :3]).tolist()) <= {0, 255}

    @pytest.mark.slow
    @pytest.mark.parametrize("cutoff_fn", CUTOFF_FUNCTIONS)
    def test_large_image(self, cutoff_fn):
        from thresholding import PixelBuffer

        rng = np.random.default_rng(7)
        array = rng.integers(0, 256, size=(512, 512, 4), dtype=np.uint8)
        assert 0 <= cutoff_fn(PixelBuffer.from_array(array)) <= 255


class TestSelectThreshold:

    def test_by_name(self, bimodal_image):
        assert select_threshold(bimodal_image, "entropy") == 22

    def test_by_enum(self, two_pixel_image):
        assert select_threshold(two_pixel_image, ThresholdMethod.PERCENT_BLACK, 1.0) == 200

    def test_manual_is_rejected(self, two_pixel_image):
        with pytest.raises(ValueError, match="explicit"):
            select_threshold(two_pixel_image, "manual")

    def test_unknown_method_raises(self, two_pixel_image):
        with pytest.raises(ValueError):
            select_threshold(two_pixel_image, "otsu")

    def test_automatic_methods(self):
        assert ThresholdMethod.MANUAL not in AUTOMATIC_METHODS
        assert len(AUTOMATIC_METHODS) == 5
