"""Face crop extraction.

Cuts the expanded face region out of the source image and saves it as a
JPEG next to the run's report.
"""

from __future__ import annotations

from pathlib import Path

import numpy as np

from faceverify.core.geometry import expand_box
from faceverify.core.image_io import write_image
from faceverify.core.interfaces import Detection, FaceCropArtifact, image_dimensions
from faceverify.core.logging_config import get_logger

logger = get_logger(__name__)


def face_filename(label: str) -> str:
    """Get the crop file name for an image label ("reference" or "query")."""
    return f"face_{label}.jpg"


def crop_region(image: np.ndarray, box) -> np.ndarray:
    """Copy a rectangular region of an image into a new buffer.

    The destination has exactly the size of the region; no resampling.

    Args:
        image: Source image, shape [H, W, C]
        box: Integer BBox inside the image

    Returns:
        Contiguous copy of the region, shape [box.height, box.width, C].
    """
    x, y = int(box.x), int(box.y)
    w, h = int(box.width), int(box.height)
    return np.ascontiguousarray(image[y : y + h, x : x + w])


def extract_face(
    image: np.ndarray,
    detection: Detection,
    label: str,
    output_dir: str | Path,
    zoom_factor: float,
) -> FaceCropArtifact:
    """Crop the detected face with a margin and save it to the run directory.

    Args:
        image: Source image in BGR format
        detection: Primary detection for this image
        label: Image label, used for the file name ("reference", "query")
        output_dir: Run directory to write the crop into
        zoom_factor: Fraction of the box size added as margin

    Returns:
        FaceCropArtifact describing the written file.

    Raises:
        ArtifactWriteError: If the crop cannot be encoded or written.

    Example:
        >>> artifact = extract_face(image, detection, "reference", run_dir, 0.3)
        >>> artifact.filename
        'face_reference.jpg'
    """
    width, height = image_dimensions(image)
    crop_box = expand_box(detection.box, zoom_factor, width, height)

    crop = crop_region(image, crop_box)

    filename = face_filename(label)
    path = write_image(Path(output_dir) / filename, crop)

    logger.debug(f"Saved {label} face crop {crop_box} to {path}")

    return FaceCropArtifact(
        filename=filename,
        path=path,
        coordinates=crop_box,
        detection_score=detection.score,
    )
