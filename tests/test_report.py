"""Unit tests for report assembly and persistence."""

from __future__ import annotations

import json
import re
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import patch

import pytest

from faceverify.core.errors import ArtifactWriteError
from faceverify.core.interfaces import BBox, ImageMetadata, VerificationResult
from faceverify.core.report import (
    assemble_report,
    load_report,
    new_verification_id,
    save_report,
    utc_timestamp,
)


@pytest.fixture
def reference_meta():
    """Create metadata for a reference image stored in a nested directory."""
    return ImageMetadata(
        image_path=Path("/home/alice/private/docs/id_card.jpg"),
        face_detected=True,
        detection_score=0.97,
        face_file="face_reference.jpg",
        coordinates=BBox(92, 92, 65, 65),
        image_width=640,
        image_height=480,
    )


@pytest.fixture
def query_meta():
    """Create metadata for a query image."""
    return ImageMetadata(
        image_path=Path("images/selfie.png"),
        face_detected=True,
        detection_score=0.91,
        face_file="face_query.jpg",
        coordinates=BBox(10, 20, 200, 220),
        image_width=800,
        image_height=600,
    )


@pytest.fixture
def result():
    """Create a REJECTED verification result."""
    return VerificationResult(
        is_match=False, face_distance=0.72, threshold=0.6, confidence=0.0
    )


def test_report_schema(reference_meta, query_meta, result, tmp_path):
    """Test that the report dictionary has exactly the persisted schema."""
    report = assemble_report(reference_meta, query_meta, result, tmp_path / "run-1")
    data = report.to_dict()

    assert set(data) == {
        "verificationId",
        "timestamp",
        "result",
        "referenceImage",
        "queryImage",
        "outputDirectory",
    }
    assert set(data["result"]) == {
        "isMatch",
        "faceDistance",
        "threshold",
        "confidence",
        "status",
    }
    for section in ("referenceImage", "queryImage"):
        assert set(data[section]) == {
            "filename",
            "faceDetected",
            "detectionScore",
            "faceFile",
            "coordinates",
            "imageDimensions",
        }
        assert set(data[section]["coordinates"]) == {"x", "y", "width", "height"}
        assert set(data[section]["imageDimensions"]) == {"width", "height"}


def test_report_copies_values(reference_meta, query_meta, result, tmp_path):
    """Test that metadata and result are copied through verbatim."""
    data = assemble_report(reference_meta, query_meta, result, tmp_path / "run-1").to_dict()

    assert data["result"]["status"] == "REJECTED"
    assert data["result"]["faceDistance"] == 0.72
    assert data["referenceImage"]["detectionScore"] == 0.97
    assert data["referenceImage"]["coordinates"] == {
        "x": 92,
        "y": 92,
        "width": 65,
        "height": 65,
    }
    assert data["queryImage"]["imageDimensions"] == {"width": 800, "height": 600}
    assert data["queryImage"]["faceFile"] == "face_query.jpg"
    assert data["outputDirectory"] == "run-1"


def test_report_uses_basename_only(reference_meta, query_meta, result, tmp_path):
    """Test that full input paths never leak into the report."""
    data = assemble_report(reference_meta, query_meta, result, tmp_path).to_dict()

    assert data["referenceImage"]["filename"] == "id_card.jpg"
    assert data["queryImage"]["filename"] == "selfie.png"
    assert "alice" not in json.dumps(data)


def test_assemble_does_not_touch_filesystem(reference_meta, query_meta, result, tmp_path):
    """Test that assembling a report writes nothing."""
    assemble_report(reference_meta, query_meta, result, tmp_path)

    assert list(tmp_path.iterdir()) == []


def test_verification_ids_unique():
    """Test that ids generated in quick succession do not collide."""
    ids = {new_verification_id() for _ in range(1000)}

    assert len(ids) == 1000
    assert all(i.startswith("verify_") for i in ids)


def test_timestamp_format():
    """Test ISO-8601 UTC timestamp with milliseconds."""
    stamp = utc_timestamp(datetime(2025, 3, 4, 5, 6, 7, 891000, tzinfo=timezone.utc))

    assert stamp == "2025-03-04T05:06:07.891Z"
    assert re.match(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z$", utc_timestamp())


def test_report_is_immutable(reference_meta, query_meta, result, tmp_path):
    """Test that a report cannot be mutated after creation."""
    report = assemble_report(reference_meta, query_meta, result, tmp_path)

    with pytest.raises(AttributeError):
        report.verification_id = "other"


def test_save_and_load(reference_meta, query_meta, result, tmp_path):
    """Test saving a report and reading it back."""
    report = assemble_report(reference_meta, query_meta, result, tmp_path)

    path = save_report(report, tmp_path)

    assert path == tmp_path / f"{report.verification_id}.json"
    assert load_report(path) == report.to_dict()
    # No temporary files left behind
    assert [p.name for p in tmp_path.iterdir()] == [path.name]


def test_save_indented_json(reference_meta, query_meta, result, tmp_path):
    """Test that the report is written as 2-space indented JSON."""
    report = assemble_report(reference_meta, query_meta, result, tmp_path)

    path = save_report(report, tmp_path)

    assert path.read_text().startswith('{\n  "verificationId"')


def test_save_to_missing_directory_fails(reference_meta, query_meta, result, tmp_path):
    """Test that a write failure raises ArtifactWriteError."""
    report = assemble_report(reference_meta, query_meta, result, tmp_path)

    with pytest.raises(ArtifactWriteError):
        save_report(report, tmp_path / "does-not-exist")


def test_failed_rename_leaves_no_files(reference_meta, query_meta, result, tmp_path):
    """Test that a failure during the final rename cleans up the temp file."""
    report = assemble_report(reference_meta, query_meta, result, tmp_path)

    with patch("faceverify.core.report.os.replace", side_effect=OSError("disk full")):
        with pytest.raises(ArtifactWriteError, match="disk full"):
            save_report(report, tmp_path)

    assert list(tmp_path.iterdir()) == []
