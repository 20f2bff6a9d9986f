"""Tests for the bwtool subcommands."""

import json

import pytest
from PIL import Image

import bwtool


@pytest.fixture
def image_path(tmp_path):
    """4x1 PNG with gray levels 20, 22, 200, 202."""
    img = Image.new("RGB", (4, 1))
    for x, level in enumerate((20, 22, 200, 202)):
        img.putpixel((x, 0), (level, level, level))
    path = tmp_path / "bimodal.png"
    img.save(path)
    return path


def _run_json(capsys, argv):
    assert bwtool.main(argv) == 0
    return json.loads(capsys.readouterr().out)


class TestHistogramCommand:

    def test_json_report(self, capsys, image_path):
        report = _run_json(capsys, ["histogram", str(image_path), "--json"])
        assert report["width"] == 4
        assert set(report["histograms"]) == {"red", "green", "blue", "gray"}
        gray = report["histograms"]["gray"]
        assert gray["min"] == 20
        assert gray["max"] == 202
        assert "counts" not in gray

    def test_counts(self, capsys, image_path):
        report = _run_json(capsys, ["histogram", str(image_path), "--json", "--counts"])
        counts = report["histograms"]["gray"]["counts"]
        assert len(counts) == 256
        assert sum(counts) == 4

    def test_text_report(self, caplog, image_path):
        caplog.set_level("INFO")
        assert bwtool.main(["histogram", str(image_path)]) == 0
        assert "gray" in caplog.text


class TestThresholdCommand:

    def test_default_method(self, capsys, image_path):
        payload = _run_json(capsys, ["threshold", str(image_path), "--json"])
        assert payload["method"] == "entropy"
        assert payload["low"] == 22
        assert payload["white_fraction"] == 0.75

    def test_manual_range(self, capsys, image_path):
        payload = _run_json(capsys, [
            "threshold", str(image_path), "-m", "manual", "--low", "100", "--high", "255", "--json",
        ])
        assert (payload["low"], payload["high"]) == (100, 255)
        assert payload["white_fraction"] == 0.5

    def test_normalize_option(self, capsys, image_path):
        payload = _run_json(capsys, [
            "threshold", str(image_path), "--normalize", "equalize", "--json",
        ])
        assert payload["normalization"] == "equalize"

    def test_invalid_range_fails(self, image_path):
        assert bwtool.main(["threshold", str(image_path), "-m", "manual", "--low", "300"]) == 1

    def test_invalid_percent_fails(self, image_path):
        assert bwtool.main(["threshold", str(image_path), "-m", "percent-black", "--percent", "2"]) == 1

    def test_missing_file_fails(self, tmp_path):
        assert bwtool.main(["threshold", str(tmp_path / "missing.png")]) == 1

    def test_undecodable_file_fails(self, tmp_path):
        path = tmp_path / "broken.png"
        path.write_bytes(b"not a png")
        assert bwtool.main(["threshold", str(path)]) == 1


class TestCompareCommand:

    def test_json_lists_every_method(self, capsys, image_path):
        payload = _run_json(capsys, ["compare", str(image_path), "--json"])
        methods = [row["method"] for row in payload["methods"]]
        assert methods == [
            "percent-black",
            "mean-iterative",
            "entropy",
            "minimum-error",
            "fuzzy-minimum-error",
        ]
        cutoffs = {row["method"]: row["cutoff"] for row in payload["methods"]}
        assert cutoffs["mean-iterative"] == 111

    def test_invalid_percent_fails(self, image_path):
        assert bwtool.main(["compare", str(image_path), "--percent", "-1"]) == 1


class TestMain:

    def test_no_command_prints_help(self, capsys):
        assert bwtool.main([]) == 1
        assert "usage" in capsys.readouterr().out
