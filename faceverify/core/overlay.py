"""Drawing utilities for visualizing detection results.

This module draws the raw detection box, landmarks and score on a copy of an
image and saves it as a diagnostic artifact. Nothing here influences the
verification decision.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Tuple

import cv2
import numpy as np

from faceverify.core.image_io import write_image
from faceverify.core.interfaces import BBox, Detection

# Color palette (BGR format for OpenCV)
COLOR_GREEN = (0, 255, 0)
COLOR_RED = (0, 0, 255)
COLOR_WHITE = (255, 255, 255)


def draw_bbox(
    frame: np.ndarray,
    bbox: BBox,
    color: Tuple[int, int, int] = COLOR_GREEN,
    thickness: int = 3,
) -> None:
    """Draw bounding box outline on frame (in-place).

    Args:
        frame: Image to draw on (modified in-place)
        bbox: Bounding box to draw
        color: BGR color tuple (default: green)
        thickness: Line thickness in pixels

    Example:
        >>> draw_bbox(frame, detection.box, color=(0, 255, 0))
    """
    cv2.rectangle(
        frame,
        (int(bbox.x), int(bbox.y)),
        (int(bbox.right), int(bbox.bottom)),
        color,
        thickness,
    )


def draw_landmarks(
    frame: np.ndarray,
    landmarks: Optional[np.ndarray],
    color: Tuple[int, int, int] = COLOR_RED,
    radius: int = 2,
) -> None:
    """Draw a filled dot at every landmark position (in-place).

    Args:
        frame: Image to draw on (modified in-place)
        landmarks: Landmark array of shape (N, 2) with (x, y) coordinates
        color: BGR color tuple (default: red)
        radius: Circle radius in pixels
    """
    if landmarks is None:
        return

    for x, y in landmarks:
        cv2.circle(
            frame,
            (int(round(x)), int(round(y))),
            radius,
            color,
            -1,  # -1 = filled circle
        )


def draw_text(
    frame: np.ndarray,
    text: str,
    position: Tuple[int, int],
    color: Tuple[int, int, int] = COLOR_WHITE,
    font_scale: float = 0.6,
    thickness: int = 2,
) -> None:
    """Draw text on frame (in-place).

    Args:
        frame: Image to draw on (modified in-place)
        text: Text string to draw
        position: (x, y) position for bottom-left corner of text
        color: Text color in BGR (default: white)
        font_scale: Font size scale factor
        thickness: Text thickness in pixels
    """
    cv2.putText(
        frame,
        text,
        position,
        cv2.FONT_HERSHEY_SIMPLEX,
        font_scale,
        color,
        thickness,
        cv2.LINE_AA,
    )


def score_label(score: float) -> str:
    """Format a detection score for display, e.g. "Score: 0.953"."""
    return f"Score: {score:.3f}"


def draw_detection(
    frame: np.ndarray,
    detection: Detection,
    color: Tuple[int, int, int] = COLOR_GREEN,
    show_landmarks: bool = True,
) -> None:
    """Draw the raw box, landmarks and score label of a detection (in-place).

    The label sits 10 px above the box's top-left corner.

    Args:
        frame: Image to draw on (modified in-place)
        detection: Detection to visualize (its unexpanded box is drawn)
        color: Color for bounding box and label
        show_landmarks: Whether to draw landmark dots
    """
    draw_bbox(frame, detection.box, color=color)

    if show_landmarks and detection.landmarks is not None:
        draw_landmarks(frame, detection.landmarks, color=COLOR_RED)

    text_x = int(detection.box.x)
    text_y = int(detection.box.y) - 10

    draw_text(frame, score_label(detection.score), (text_x, text_y), color=color)


def render_detection_overlay(
    image: np.ndarray,
    detection: Detection,
    output_path: str | Path,
) -> Path:
    """Draw a detection on a full-size copy of the image and save it.

    Args:
        image: Source image in BGR format (not modified)
        detection: Primary detection for this image
        output_path: Destination JPEG path

    Returns:
        The written path.

    Raises:
        ArtifactWriteError: If the overlay cannot be encoded or written.

    Example:
        >>> render_detection_overlay(image, detection, run_dir / "query_detection.jpg")
    """
    canvas = image.copy()
    draw_detection(canvas, detection)
    return write_image(output_path, canvas)
