"""Verification report assembly and persistence.

assemble_report() builds an immutable VerificationReport in memory;
save_report() is the only function here that touches the filesystem.
"""

from __future__ import annotations

import json
import os
import tempfile
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict

from faceverify.core.errors import ArtifactWriteError
from faceverify.core.interfaces import BBox, ImageMetadata, VerificationResult
from faceverify.core.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ImageReport:
    """Per-image section of a verification report."""

    filename: str
    face_detected: bool
    detection_score: float
    face_file: str
    coordinates: BBox
    image_width: int
    image_height: int

    @classmethod
    def from_metadata(cls, meta: ImageMetadata) -> ImageReport:
        """Build a report section, keeping only the basename of the input path."""
        return cls(
            filename=Path(meta.image_path).name,
            face_detected=meta.face_detected,
            detection_score=meta.detection_score,
            face_file=meta.face_file,
            coordinates=meta.coordinates,
            image_width=meta.image_width,
            image_height=meta.image_height,
        )

    def to_dict(self) -> Dict[str, object]:
        """Convert to the JSON shape of referenceImage/queryImage."""
        return {
            "filename": self.filename,
            "faceDetected": self.face_detected,
            "detectionScore": self.detection_score,
            "faceFile": self.face_file,
            "coordinates": self.coordinates.to_dict(),
            "imageDimensions": {"width": self.image_width, "height": self.image_height},
        }


@dataclass(frozen=True)
class VerificationReport:
    """Complete, self-contained record of one verification run.

    Attributes:
        verification_id: Unique id, also the report file stem
        timestamp: ISO-8601 UTC time of assembly
        result: Distance/decision outcome
        reference_image: Reference image section
        query_image: Query image section
        output_directory: Name of the run directory (basename only)
    """

    verification_id: str
    timestamp: str
    result: VerificationResult
    reference_image: ImageReport
    query_image: ImageReport
    output_directory: str

    @property
    def filename(self) -> str:
        """Get report file name, "<verificationId>.json"."""
        return f"{self.verification_id}.json"

    def to_dict(self) -> Dict[str, object]:
        """Convert to the persisted JSON schema."""
        return {
            "verificationId": self.verification_id,
            "timestamp": self.timestamp,
            "result": self.result.to_dict(),
            "referenceImage": self.reference_image.to_dict(),
            "queryImage": self.query_image.to_dict(),
            "outputDirectory": self.output_directory,
        }


def new_verification_id() -> str:
    """Generate a verification id such as "verify_1730000000000_1a2b3c4d"."""
    return f"verify_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}"


def utc_timestamp(now: datetime | None = None) -> str:
    """Format a UTC ISO-8601 timestamp with milliseconds, e.g. "...T10:00:00.123Z"."""
    if now is None:
        now = datetime.now(timezone.utc)
    stamp = now.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return stamp.replace("+00:00", "Z")


def assemble_report(
    reference_meta: ImageMetadata,
    query_meta: ImageMetadata,
    result: VerificationResult,
    output_dir: str | Path,
) -> VerificationReport:
    """Combine per-image metadata and the decision into one report.

    Args:
        reference_meta: Metadata for the reference image
        query_meta: Metadata for the query image
        result: Verification decision
        output_dir: Run directory (only its name is recorded)

    Returns:
        Immutable VerificationReport with a fresh id and timestamp.
    """
    report = VerificationReport(
        verification_id=new_verification_id(),
        timestamp=utc_timestamp(),
        result=result,
        reference_image=ImageReport.from_metadata(reference_meta),
        query_image=ImageReport.from_metadata(query_meta),
        output_directory=Path(output_dir).name,
    )
    logger.debug(f"Assembled report {report.verification_id}")
    return report


def save_report(report: VerificationReport, output_dir: str | Path) -> Path:
    """Write a report as "<verificationId>.json" inside output_dir.

    The JSON is written to a temporary file in the same directory and then
    renamed, so a reader never sees a truncated report.

    Args:
        report: Report to persist
        output_dir: Run directory

    Returns:
        Path of the written report.

    Raises:
        ArtifactWriteError: If the report cannot be written.
    """
    output_dir = Path(output_dir)
    report_path = output_dir / report.filename

    tmp_name = None
    try:
        with tempfile.NamedTemporaryFile(
            "w",
            dir=output_dir,
            prefix=f".{report.verification_id}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        ) as f:
            tmp_name = f.name
            json.dump(report.to_dict(), f, indent=2)
        os.replace(tmp_name, report_path)
    except OSError as e:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise ArtifactWriteError(report_path, str(e)) from e

    logger.info(f"Saved report to {report_path}")
    return report_path


def load_report(path: str | Path) -> Dict[str, object]:
    """Read a persisted report back as a dictionary."""
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)
