"""Image decode/encode and run directory helpers.

Thin wrappers around OpenCV that turn its None/False return values into
pipeline exceptions, plus creation of the per-run output directory.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import cv2
import numpy as np

from faceverify.core.errors import ArtifactWriteError, ImageDecodeError
from faceverify.core.logging_config import get_logger
from faceverify.core.report import utc_timestamp

logger = get_logger(__name__)


def load_image(path: str | Path) -> np.ndarray:
    """Decode an image file into a BGR array.

    Args:
        path: Path to a JPEG/PNG (or any format OpenCV reads)

    Returns:
        Image in BGR format, shape [H, W, 3], dtype uint8.

    Raises:
        ImageDecodeError: If the file cannot be read or decoded.
    """
    image = cv2.imread(str(path), cv2.IMREAD_COLOR)
    if image is None or image.size == 0:
        raise ImageDecodeError(path)

    logger.debug(f"Loaded {path} ({image.shape[1]}x{image.shape[0]})")
    return image


def write_image(path: str | Path, image: np.ndarray) -> Path:
    """Encode an image to disk, format chosen from the file extension.

    Args:
        path: Destination path (e.g. "face_reference.jpg")
        image: Image in BGR format

    Returns:
        The destination path.

    Raises:
        ArtifactWriteError: If encoding or writing fails.
    """
    path = Path(path)
    if image is None or image.size == 0:
        raise ArtifactWriteError(path, "empty image")

    try:
        ok = cv2.imwrite(str(path), image)
    except cv2.error as e:
        raise ArtifactWriteError(path, str(e)) from e

    if not ok:
        raise ArtifactWriteError(path)

    return path


def run_directory_name(now: datetime | None = None) -> str:
    """Build a filesystem-safe directory name from a UTC timestamp.

    Example:
        >>> run_directory_name(datetime(2025, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc))
        '2025-01-02T03-04-05-678Z'
    """
    stamp = utc_timestamp(now)
    return stamp.replace(":", "-").replace(".", "-")


def create_run_directory(base_dir: str | Path, now: datetime | None = None) -> Path:
    """Create a fresh, uniquely named output directory for one run.

    The name is derived from the current timestamp. If a directory with that
    name already exists a numeric suffix is appended, so two runs never
    share a directory.

    Args:
        base_dir: Root directory for run directories (created if missing)
        now: Timestamp to name the directory after (default: current time)

    Returns:
        Path of the newly created directory.
    """
    base_dir = Path(base_dir)
    base_dir.mkdir(parents=True, exist_ok=True)

    name = run_directory_name(now)
    candidate = base_dir / name
    suffix = 0
    while True:
        try:
            candidate.mkdir()
            break
        except FileExistsError:
            suffix += 1
            candidate = base_dir / f"{name}-{suffix}"

    logger.debug(f"Created run directory {candidate}")
    return candidate
