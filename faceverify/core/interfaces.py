"""Core interfaces and data structures for the face verification pipeline.

This module defines the face model Protocol that the pipeline depends on and
the value types that flow between its stages. Concrete models (see
faceverify.backends) implement the Protocol, so any detector/recognizer can
be substituted without touching the pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Optional, Protocol, Tuple, runtime_checkable

import numpy as np


def image_dimensions(image: np.ndarray) -> Tuple[int, int]:
    """Get (width, height) of a decoded image.

    Args:
        image: Image array, shape [H, W] or [H, W, C]

    Returns:
        Tuple of (width, height) in pixels.
    """
    height, width = image.shape[:2]
    return int(width), int(height)


@dataclass(frozen=True)
class BBox:
    """Axis-aligned bounding box in pixel units.

    Attributes:
        x: Left edge x-coordinate
        y: Top edge y-coordinate
        width: Box width (> 0)
        height: Box height (> 0)
    """

    x: float
    y: float
    width: float
    height: float

    def __post_init__(self) -> None:
        """Validate box geometry after initialization."""
        if self.x < 0 or self.y < 0:
            raise ValueError(f"BBox origin must be >= 0, got ({self.x}, {self.y})")
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"BBox size must be > 0, got {self.width}x{self.height}"
            )

    @property
    def right(self) -> float:
        """Get right edge x-coordinate (exclusive)."""
        return self.x + self.width

    @property
    def bottom(self) -> float:
        """Get bottom edge y-coordinate (exclusive)."""
        return self.y + self.height

    @property
    def area(self) -> float:
        """Get bounding box area in square pixels."""
        return self.width * self.height

    def fits_within(self, img_width: int, img_height: int) -> bool:
        """Check whether the box lies fully inside an image of the given size."""
        return self.right <= img_width and self.bottom <= img_height

    def contains(self, other: BBox) -> bool:
        """Check whether another box lies fully inside this one."""
        return (
            self.x <= other.x
            and self.y <= other.y
            and other.right <= self.right
            and other.bottom <= self.bottom
        )

    def to_dict(self) -> Dict[str, float]:
        """Convert to the {x, y, width, height} mapping used in reports."""
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}

    def __repr__(self) -> str:
        """String representation of bounding box."""
        return f"BBox(x={self.x}, y={self.y}, width={self.width}, height={self.height})"


@dataclass
class Detection:
    """Primary face detection for one image.

    Attributes:
        box: Tight bounding box around the detected face
        score: Detection confidence score (0.0 to 1.0)
        landmarks: Optional landmark positions, shape [N, 2], absolute pixel coords
        descriptor: Optional identity descriptor, shape [D] (128 for dlib)
    """

    box: BBox
    score: float
    landmarks: Optional[np.ndarray] = None
    descriptor: Optional[np.ndarray] = None

    def __post_init__(self) -> None:
        """Validate detection data after initialization."""
        if not 0.0 <= self.score <= 1.0:
            raise ValueError(f"Detection score must be in [0, 1], got {self.score}")

        if self.landmarks is not None:
            if not isinstance(self.landmarks, np.ndarray):
                raise TypeError(
                    f"landmarks must be numpy array, got {type(self.landmarks)}"
                )
            if self.landmarks.ndim != 2 or self.landmarks.shape[1] != 2:
                raise ValueError(
                    f"landmarks must have shape (N, 2), got {self.landmarks.shape}"
                )

        if self.descriptor is not None:
            if not isinstance(self.descriptor, np.ndarray):
                raise TypeError(
                    f"descriptor must be numpy array, got {type(self.descriptor)}"
                )
            if self.descriptor.ndim != 1:
                raise ValueError(
                    f"descriptor must be 1-D, got shape {self.descriptor.shape}"
                )

    def __repr__(self) -> str:
        """String representation of detection."""
        lm_str = "None" if self.landmarks is None else f"array{self.landmarks.shape}"
        desc_str = "None" if self.descriptor is None else f"array{self.descriptor.shape}"
        return (
            f"Detection(box={self.box}, score={self.score:.3f}, "
            f"landmarks={lm_str}, descriptor={desc_str})"
        )


@runtime_checkable
class FaceModel(Protocol):
    """Protocol for the face detection/landmark/descriptor model.

    The model is initialized once and treated as read-only afterwards; the
    pipeline may call it for any number of runs.
    """

    def detect_primary_face(self, image_bgr: np.ndarray) -> Optional[Detection]:
        """Detect the primary face in an image.

        Args:
            image_bgr: Input image in BGR format (OpenCV convention), shape [H, W, 3]

        Returns:
            Detection with landmarks and descriptor attached, or None if the
            image contains no face. When several faces are present the
            model's own ranking picks the primary one.

        Example:
            >>> model = DlibFaceModel()
            >>> detection = model.detect_primary_face(image)
            >>> if detection is not None:
            ...     print(f"Face at {detection.box} with score {detection.score:.3f}")
        """
        ...


class VerificationStatus(str, Enum):
    """Final verdict of a verification run."""

    VERIFIED = "VERIFIED"
    REJECTED = "REJECTED"


@dataclass(frozen=True)
class VerificationResult:
    """Decision produced by comparing two face descriptors.

    Attributes:
        is_match: True if the faces belong to the same person
        face_distance: Euclidean distance between the descriptors (>= 0)
        threshold: Distance threshold used for the decision
        confidence: Linear confidence in [0, 1], 0 at or beyond the threshold
    """

    is_match: bool
    face_distance: float
    threshold: float
    confidence: float

    @property
    def status(self) -> VerificationStatus:
        """Get VERIFIED/REJECTED status derived from is_match."""
        return VerificationStatus.VERIFIED if self.is_match else VerificationStatus.REJECTED

    def to_dict(self) -> Dict[str, object]:
        """Convert to the report's result section."""
        return {
            "isMatch": self.is_match,
            "faceDistance": self.face_distance,
            "threshold": self.threshold,
            "confidence": self.confidence,
            "status": self.status.value,
        }


@dataclass(frozen=True)
class FaceCropArtifact:
    """Metadata about a face crop written to the run directory.

    Attributes:
        filename: Crop file name (e.g. "face_reference.jpg")
        path: Full path of the written crop
        coordinates: Expanded crop rectangle in source image coordinates
        detection_score: Detection score of the cropped face
    """

    filename: str
    path: Path
    coordinates: BBox
    detection_score: float


@dataclass(frozen=True)
class ImageMetadata:
    """Per-image facts gathered by the pipeline for the report.

    Attributes:
        image_path: Input image path (only its basename reaches the report)
        face_detected: Whether a face was found
        detection_score: Detection score of the primary face
        face_file: File name of the saved face crop
        coordinates: Crop rectangle used for the face file
        image_width: Original image width in pixels
        image_height: Original image height in pixels
    """

    image_path: Path
    face_detected: bool
    detection_score: float
    face_file: str
    coordinates: BBox
    image_width: int
    image_height: int
