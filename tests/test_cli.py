"""Tests for the face-verify command-line interface."""

from __future__ import annotations

from unittest.mock import Mock

import cv2
import numpy as np
import pytest

from faceverify.cli import main
from faceverify.core.interfaces import BBox, Detection


@pytest.fixture
def image_dir(tmp_path):
    """Write two small images to an input directory."""
    directory = tmp_path / "images"
    directory.mkdir()
    rng = np.random.default_rng(1)
    for name in ("id.png", "selfie.png"):
        cv2.imwrite(str(directory / name), rng.integers(0, 255, (120, 160, 3), dtype=np.uint8))
    return directory


@pytest.fixture
def base_args(image_dir, tmp_path):
    """Common CLI options pointing at temporary directories."""
    return ["--input-dir", str(image_dir), "--output-dir", str(tmp_path / "reports")]


def model_factory_for(*detections):
    """Build a model factory returning a mock that yields the given detections."""
    model = Mock()
    model.detect_primary_face.side_effect = list(detections)
    return lambda config: model


def detection(score=0.95, offset=0.0):
    """Create a detection whose descriptor is shifted by offset."""
    descriptor = np.zeros(128)
    descriptor[0] = offset
    return Detection(box=BBox(40, 30, 50, 60), score=score, descriptor=descriptor)


def test_verified_output(base_args, capsys, tmp_path):
    """Test the printed summary of a VERIFIED run."""
    factory = model_factory_for(detection(0.9876), detection(0.9123, offset=0.15))

    status = main(["id.png", "selfie.png", *base_args], model_factory=factory)

    assert status == 0
    lines = capsys.readouterr().out.strip().splitlines()
    assert lines[0] == "Face Distance: 0.1500"
    assert lines[1] == "Threshold: 0.6"
    assert lines[2] == "Confidence: 75.0%"
    assert lines[3] == "Detection Scores - Reference: 0.988, Query: 0.912"
    assert lines[4] == "Reference face: face_reference.jpg"
    assert lines[5] == "Query face: face_query.jpg"
    assert lines[6].startswith("Processing time: ")
    assert lines[6].endswith(" seconds")
    run_dirs = [p for p in (tmp_path / "reports").iterdir() if p.is_dir()]
    assert len(run_dirs) == 1
    assert lines[7] == f"Output Directory: {run_dirs[0].name}"
    assert lines[8].startswith("Report: ")
    assert lines[8].endswith(".json")
    assert lines[9] == "VERIFIED"
    assert len(list((tmp_path / "reports").rglob("verify_*.json"))) == 1


def test_rejected_output(base_args, capsys):
    """Test that a REJECTED run still exits 0 and ends with REJECTED."""
    factory = model_factory_for(detection(), detection(offset=0.9))

    status = main(["id.png", "selfie.png", *base_args], model_factory=factory)

    assert status == 0
    lines = capsys.readouterr().out.strip().splitlines()
    assert lines[2] == "Confidence: 0.0%"
    assert lines[-1] == "REJECTED"


def test_threshold_override(base_args, capsys):
    """Test that --threshold changes the decision."""
    factory = model_factory_for(detection(), detection(offset=0.5))

    main(["id.png", "selfie.png", *base_args, "--threshold", "0.4"], model_factory=factory)

    out = capsys.readouterr().out
    assert "Threshold: 0.4" in out
    assert out.strip().endswith("REJECTED")


def test_missing_file_prints_error(base_args, capsys, tmp_path):
    """Test that a missing image prints a one-line error and exits 1."""
    factory = model_factory_for()

    status = main(["id.png", "nobody.png", *base_args], model_factory=factory)

    assert status == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err.strip().splitlines()[-1].startswith("Error: Query image not found:")
    assert "Traceback" not in captured.err
    assert not list((tmp_path / "reports").rglob("*.json"))


def test_low_quality_prints_error(base_args, capsys):
    """Test that a low-quality detection is reported as an error."""
    factory = model_factory_for(detection(score=0.65), detection())

    status = main(["id.png", "selfie.png", *base_args], model_factory=factory)

    assert status == 1
    assert "Error: Low detection score in reference image: 0.65" in capsys.readouterr().err


def test_unexpected_failure_prints_error(base_args, capsys):
    """Test that an unexpected exception is still reported as a one-line error."""
    model = Mock()
    model.detect_primary_face.side_effect = TypeError("boom")

    status = main(["id.png", "selfie.png", *base_args], model_factory=lambda config: model)

    assert status == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err.strip().splitlines()[-1] == "Error: boom"
    assert "Traceback" not in captured.err


def test_invalid_option_value(base_args, capsys):
    """Test that an invalid configuration value is reported as an error."""
    status = main(
        ["id.png", "selfie.png", *base_args, "--face-quality", "3"],
        model_factory=model_factory_for(),
    )

    assert status == 1
    assert capsys.readouterr().err.strip().splitlines()[-1].startswith("Error: FACE_QUALITY")


def test_missing_arguments_prints_usage(capsys):
    """Test that missing positional arguments print usage and exit non-zero."""
    with pytest.raises(SystemExit) as exc:
        main(["only_one.png"], model_factory=model_factory_for())

    assert exc.value.code != 0
    assert "usage:" in capsys.readouterr().err
