"""Dlib face model using the face_recognition library.

This module provides the FaceModel implementation used by the verification
pipeline: dlib HOG or CNN detection, 68-point landmarks and the 128-D
ResNet-34 descriptor, all through face_recognition's loaded dlib models.
"""

from __future__ import annotations

from typing import Dict, List, Literal, Optional, Tuple

import cv2
import dlib
import face_recognition
import numpy as np
from face_recognition import api as fr_api

from faceverify.core.interfaces import BBox, Detection
from faceverify.core.logging_config import get_logger

logger = get_logger(__name__)


# Raw score at which each detector's output reaches 1.0. HOG margins of clear
# frontal faces sit around 1.0 and above; CNN MMOD confidences of clear faces
# cluster just above 1.0 and rarely exceed 1.1.
SCORE_FULL_SCALE: Dict[str, float] = {
    "hog": 1.0,
    "cnn": 1.1,
}


def score_to_unit(raw_score: float, model: str = "hog") -> float:
    """Map a raw dlib detector score onto [0, 1] for the quality gate.

    HOG scores are SVM margins and CNN scores are MMOD confidences, both
    unbounded and 0 at the detection threshold. The score is scaled by the
    detector's full-scale value and clipped, so a raw score of 0 or less maps
    to 0 and a confident detection reaches the default 0.8 gate.

    Args:
        raw_score: Score reported by the dlib detector
        model: Detector that produced the score ("hog" or "cnn")

    Returns:
        Score in [0, 1].

    Example:
        >>> score_to_unit(0.9, model="hog")
        0.9
    """
    if model not in SCORE_FULL_SCALE:
        raise ValueError(f"model must be 'hog' or 'cnn', got '{model}'")
    return min(1.0, max(0.0, raw_score / SCORE_FULL_SCALE[model]))


class DlibFaceModel:
    """Face model backed by dlib via the face_recognition library.

    Supports two detection models:
    - HOG: Faster, suitable for CPU, less accurate
    - CNN: More accurate, requires GPU for real-time performance

    Attributes:
        model: Detection model ("hog" or "cnn")
        upsample: Number of times to upsample image (higher = detect smaller faces)
        num_jitters: Number of times to re-sample the face for the descriptor
        descriptor_dim: Dimension of output descriptors (128 for dlib)

    Example:
        >>> model = DlibFaceModel(model="hog")
        >>> detection = model.detect_primary_face(image)
        >>> detection.descriptor.shape
        (128,)
    """

    def __init__(
        self,
        model: Literal["hog", "cnn"] = "hog",
        upsample: int = 1,
        num_jitters: int = 1,
    ):
        """Initialize dlib face model.

        Args:
            model: Detection model to use.
                   "hog" - Histogram of Oriented Gradients (faster, CPU-friendly)
                   "cnn" - Convolutional Neural Network (more accurate, GPU preferred)
            upsample: Number of times to upsample image before detection.
            num_jitters: Number of re-samples when computing the descriptor.
        """
        if model not in ("hog", "cnn"):
            raise ValueError(f"model must be 'hog' or 'cnn', got '{model}'")
        if upsample < 0:
            raise ValueError(f"upsample must be >= 0, got {upsample}")
        if num_jitters < 1:
            raise ValueError(f"num_jitters must be >= 1, got {num_jitters}")

        self.model = model
        self.upsample = upsample
        self.num_jitters = num_jitters
        self.descriptor_dim = 128

        logger.info(
            f"Initializing dlib face model (model={model}, upsample={upsample}, "
            f"num_jitters={num_jitters})"
        )

    def _detect_raw(self, image_rgb: np.ndarray) -> List[Tuple[dlib.rectangle, float]]:
        """Run the dlib detector, returning (rectangle, raw score) pairs."""
        if self.model == "cnn":
            detections = fr_api.cnn_face_detector(image_rgb, self.upsample)
            return [(d.rect, float(d.confidence)) for d in detections]

        rects, scores, _ = fr_api.face_detector.run(image_rgb, self.upsample, 0.0)
        return list(zip(rects, (float(s) for s in scores)))

    def _landmarks(self, image_rgb: np.ndarray, rect: dlib.rectangle) -> np.ndarray:
        """Get the 68 landmark positions for a face rectangle, shape [68, 2]."""
        shape = fr_api.pose_predictor_68_point(image_rgb, rect)
        return np.array([[p.x, p.y] for p in shape.parts()], dtype=np.float32)

    def detect_primary_face(self, image_bgr: np.ndarray) -> Optional[Detection]:
        """Detect the highest-scoring face with landmarks and descriptor.

        Args:
            image_bgr: Input image in BGR format (OpenCV convention), shape [H, W, 3]

        Returns:
            Detection for the primary face, or None if no face is found.

        Raises:
            ValueError: If the image is empty.
            RuntimeError: If a face is found but no descriptor can be computed.
        """
        if image_bgr is None or image_bgr.size == 0:
            raise ValueError("Empty image provided to face model")

        # face_recognition expects RGB
        image_rgb = cv2.cvtColor(image_bgr, cv2.COLOR_BGR2RGB)
        h, w = image_rgb.shape[:2]

        candidates = self._detect_raw(image_rgb)
        if not candidates:
            logger.debug(f"No faces detected (model={self.model})")
            return None

        logger.debug(f"Detected {len(candidates)} face(s) (model={self.model})")

        rect, raw_score = max(candidates, key=lambda c: c[1])

        # Clamp to image bounds
        left = max(0, min(rect.left(), w - 1))
        top = max(0, min(rect.top(), h - 1))
        right = max(left + 1, min(rect.right(), w))
        bottom = max(top + 1, min(rect.bottom(), h))

        box = BBox(x=left, y=top, width=right - left, height=bottom - top)
        landmarks = self._landmarks(image_rgb, rect)

        # face_recognition expects (top, right, bottom, left)
        location = (top, right, bottom, left)
        encodings = face_recognition.face_encodings(
            image_rgb,
            known_face_locations=[location],
            num_jitters=self.num_jitters,
            model="large",
        )
        if not encodings:
            raise RuntimeError("Could not compute face descriptor for detected face")

        # Raw descriptor, not L2-normalized: the 0.6 Euclidean tolerance
        # is calibrated on unnormalized dlib encodings.
        descriptor = np.asarray(encodings[0], dtype=np.float64)
        if descriptor.shape[0] != self.descriptor_dim:
            raise RuntimeError(
                f"Unexpected descriptor dimension {descriptor.shape[0]}, "
                f"expected {self.descriptor_dim}"
            )

        return Detection(
            box=box,
            score=score_to_unit(raw_score, self.model),
            landmarks=landmarks,
            descriptor=descriptor,
        )

    def __repr__(self) -> str:
        """String representation of face model."""
        return (
            f"DlibFaceModel(model='{self.model}', upsample={self.upsample}, "
            f"num_jitters={self.num_jitters})"
        )
