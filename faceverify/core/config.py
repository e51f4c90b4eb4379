"""Configuration management for the face verification pipeline.

This module loads configuration from environment variables (.env file) and
provides an immutable Config value that is passed explicitly to the
verification service.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path

from dotenv import load_dotenv

from faceverify.core.logging_config import VALID_LEVELS

# Load environment variables from .env file
load_dotenv()

VALID_DETECTOR_MODELS = ["hog", "cnn"]


@dataclass(frozen=True)
class Config:
    """Application configuration loaded from environment variables.

    Attributes:
        distance_threshold: Euclidean distance below which two faces match
        zoom_out_factor: Fraction of the box size added around a face crop
        base_output_dir: Root directory for per-run output directories
        face_quality: Minimum acceptable detection score (0.0-1.0)
        input_dir: Directory that CLI image names are resolved against
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        detector_model: dlib detector ("hog" or "cnn")
        upsample: Number of times to upsample images before detection
        num_jitters: Number of re-samples when computing a descriptor
        strict_overlays: Treat overlay rendering failures as fatal
    """

    distance_threshold: float = 0.6
    zoom_out_factor: float = 0.3
    base_output_dir: Path = Path("verification_reports")
    face_quality: float = 0.8
    input_dir: Path = Path("images")
    log_level: str = "INFO"
    detector_model: str = "hog"
    upsample: int = 1
    num_jitters: int = 1
    strict_overlays: bool = False

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.distance_threshold <= 0:
            raise ValueError(
                f"DISTANCE_THRESHOLD must be > 0, got {self.distance_threshold}"
            )

        if self.zoom_out_factor < 0:
            raise ValueError(
                f"ZOOM_OUT_FACTOR must be >= 0, got {self.zoom_out_factor}"
            )

        if not 0.0 <= self.face_quality <= 1.0:
            raise ValueError(
                f"FACE_QUALITY must be between 0.0 and 1.0, got {self.face_quality}"
            )

        if self.log_level not in VALID_LEVELS:
            raise ValueError(
                f"LOG_LEVEL must be one of {VALID_LEVELS}, got {self.log_level}"
            )

        if self.detector_model not in VALID_DETECTOR_MODELS:
            raise ValueError(
                f"DETECTOR_MODEL must be one of {VALID_DETECTOR_MODELS}, "
                f"got {self.detector_model}"
            )

        if self.upsample < 0:
            raise ValueError(f"UPSAMPLE must be >= 0, got {self.upsample}")

        if self.num_jitters < 1:
            raise ValueError(f"NUM_JITTERS must be >= 1, got {self.num_jitters}")

    @classmethod
    def from_env(cls) -> Config:
        """Load configuration from environment variables.

        Returns:
            Config instance with values from environment or defaults.

        Raises:
            ValueError: If environment variables are invalid.
        """
        # Project root (parent of faceverify/)
        project_root = Path(__file__).parent.parent.parent

        base_output_dir = Path(
            os.getenv("BASE_OUTPUT_DIR", str(project_root / "verification_reports"))
        )
        input_dir = Path(os.getenv("INPUT_DIR", str(project_root / "images")))

        return cls(
            distance_threshold=float(os.getenv("DISTANCE_THRESHOLD", "0.6")),
            zoom_out_factor=float(os.getenv("ZOOM_OUT_FACTOR", "0.3")),
            base_output_dir=base_output_dir,
            face_quality=float(os.getenv("FACE_QUALITY", "0.8")),
            input_dir=input_dir,
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            detector_model=os.getenv("DETECTOR_MODEL", "hog").lower(),
            upsample=int(os.getenv("UPSAMPLE", "1")),
            num_jitters=int(os.getenv("NUM_JITTERS", "1")),
            strict_overlays=bool(int(os.getenv("STRICT_OVERLAYS", "0"))),
        )

    def with_overrides(self, **overrides) -> Config:
        """Return a validated copy with the given fields replaced.

        Fields whose override value is None are left unchanged.

        Example:
            >>> config = Config.from_env().with_overrides(distance_threshold=0.5)
        """
        changes = {key: value for key, value in overrides.items() if value is not None}
        for key in ("base_output_dir", "input_dir"):
            if key in changes:
                changes[key] = Path(changes[key])
        return replace(self, **changes)

    def __repr__(self) -> str:
        """Return string representation of config."""
        return (
            f"Config(\n"
            f"  Threshold: {self.distance_threshold},\n"
            f"  Zoom Out: {self.zoom_out_factor},\n"
            f"  Face Quality: {self.face_quality},\n"
            f"  Output Dir: {self.base_output_dir},\n"
            f"  Input Dir: {self.input_dir},\n"
            f"  Detector: {self.detector_model} (upsample={self.upsample}),\n"
            f"  Jitters: {self.num_jitters},\n"
            f"  Strict Overlays: {self.strict_overlays},\n"
            f"  Log Level: {self.log_level}\n"
            f")"
        )
