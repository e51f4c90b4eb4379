"""Exceptions raised by the verification pipeline.

Every fatal condition of a run is a VerificationError subclass, so callers
can report any pipeline failure with a single except clause.
"""

from __future__ import annotations

from pathlib import Path


class VerificationError(Exception):
    """Base exception for verification pipeline errors."""

    pass


class InputNotFoundError(VerificationError):
    """Exception raised when an input image path does not exist."""

    def __init__(self, image_label: str, path: str | Path):
        self.image_label = image_label
        self.path = Path(path)
        super().__init__(f"{image_label.capitalize()} image not found: {path}")


class ImageDecodeError(VerificationError):
    """Exception raised when an input image exists but cannot be decoded."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        super().__init__(f"Could not decode image: {path}")


class NoFaceDetectedError(VerificationError):
    """Exception raised when no face is detected in an image."""

    def __init__(self, image_label: str):
        self.image_label = image_label
        super().__init__(f"Could not detect a face in the {image_label} image")


class LowDetectionQualityError(VerificationError):
    """Exception raised when a face's detection score is below the minimum."""

    def __init__(self, image_label: str, score: float, minimum: float):
        self.image_label = image_label
        self.score = score
        self.minimum = minimum
        super().__init__(
            f"Low detection score in {image_label} image: {score} "
            f"(minimum {minimum})"
        )


class ArtifactWriteError(VerificationError):
    """Exception raised when a crop, overlay or report cannot be written."""

    def __init__(self, path: str | Path, reason: str = "write failed"):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Failed to write {path}: {reason}")
