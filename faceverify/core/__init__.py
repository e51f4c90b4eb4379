"""Core modules for the face verification pipeline.

This package contains the data model, the pure geometry and decision logic,
artifact writers and the ambient config/logging used by all backends.
"""

from faceverify.core.config import Config
from faceverify.core.decision import decide, distance_to_confidence, euclidean_distance
from faceverify.core.errors import (
    ArtifactWriteError,
    ImageDecodeError,
    InputNotFoundError,
    LowDetectionQualityError,
    NoFaceDetectedError,
    VerificationError,
)
from faceverify.core.extractor import extract_face
from faceverify.core.geometry import expand_box
from faceverify.core.image_io import create_run_directory, load_image, write_image
from faceverify.core.interfaces import (
    BBox,
    Detection,
    FaceCropArtifact,
    FaceModel,
    ImageMetadata,
    VerificationResult,
    VerificationStatus,
    image_dimensions,
)
from faceverify.core.logging_config import setup_logging, get_logger
from faceverify.core.overlay import (
    draw_bbox,
    draw_landmarks,
    draw_text,
    draw_detection,
    render_detection_overlay,
)
from faceverify.core.report import (
    ImageReport,
    VerificationReport,
    assemble_report,
    load_report,
    save_report,
)

__all__ = [
    # Config
    "Config",
    # Interfaces
    "BBox",
    "Detection",
    "FaceCropArtifact",
    "FaceModel",
    "ImageMetadata",
    "VerificationResult",
    "VerificationStatus",
    "image_dimensions",
    # Errors
    "VerificationError",
    "InputNotFoundError",
    "ImageDecodeError",
    "NoFaceDetectedError",
    "LowDetectionQualityError",
    "ArtifactWriteError",
    # Logging
    "setup_logging",
    "get_logger",
    # Pipeline stages
    "expand_box",
    "extract_face",
    "decide",
    "distance_to_confidence",
    "euclidean_distance",
    "assemble_report",
    "save_report",
    "load_report",
    "ImageReport",
    "VerificationReport",
    # Image I/O
    "load_image",
    "write_image",
    "create_run_directory",
    # Overlay
    "draw_bbox",
    "draw_landmarks",
    "draw_text",
    "draw_detection",
    "render_detection_overlay",
]
