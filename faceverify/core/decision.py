"""Distance and decision logic for face verification.

Descriptors produced by the dlib ResNet model are compared with Euclidean
distance; two faces match when the distance is strictly below the threshold
(0.6 is the standard face_recognition tolerance).
"""

from __future__ import annotations

import numpy as np

from faceverify.core.interfaces import VerificationResult
from faceverify.core.logging_config import get_logger

logger = get_logger(__name__)


def euclidean_distance(vec1: np.ndarray, vec2: np.ndarray) -> float:
    """Compute Euclidean (L2) distance between two descriptors.

    Args:
        vec1: First descriptor, shape [D]
        vec2: Second descriptor, shape [D]

    Returns:
        Non-negative distance. 0.0 for identical vectors.

    Raises:
        ValueError: If the vectors are not 1-D or their shapes differ.
    """
    a = np.asarray(vec1, dtype=np.float64)
    b = np.asarray(vec2, dtype=np.float64)

    if a.ndim != 1 or b.ndim != 1:
        raise ValueError(
            f"Descriptors must be 1-D, got shapes {a.shape} and {b.shape}"
        )
    if a.shape != b.shape:
        raise ValueError(
            f"Descriptor dimensions differ: {a.shape[0]} vs {b.shape[0]}"
        )

    return float(np.linalg.norm(a - b))


def distance_to_confidence(distance: float, threshold: float) -> float:
    """Map a distance to a confidence in [0, 1].

    Confidence falls linearly from 1.0 at distance 0 to 0.0 at the threshold
    and stays 0.0 beyond it. It is a presentation metric, not a probability.

    Example:
        >>> distance_to_confidence(0.3, 0.6)
        0.5
    """
    if threshold <= 0:
        raise ValueError(f"threshold must be > 0, got {threshold}")
    return min(1.0, max(0.0, 1.0 - distance / threshold))


def decide(
    reference_descriptor: np.ndarray,
    query_descriptor: np.ndarray,
    threshold: float,
) -> VerificationResult:
    """Decide whether two descriptors belong to the same person.

    Args:
        reference_descriptor: Descriptor of the reference face, shape [D]
        query_descriptor: Descriptor of the query face, shape [D]
        threshold: Match cutoff; a distance equal to it is a reject

    Returns:
        VerificationResult with distance, decision and confidence.

    Raises:
        ValueError: If the descriptors are malformed or threshold <= 0.

    Example:
        >>> result = decide(ref.descriptor, query.descriptor, threshold=0.6)
        >>> print(result.status.value, f"{result.face_distance:.4f}")
    """
    if threshold <= 0:
        raise ValueError(f"threshold must be > 0, got {threshold}")

    distance = euclidean_distance(reference_descriptor, query_descriptor)
    is_match = distance < threshold
    confidence = distance_to_confidence(distance, threshold)

    logger.debug(
        f"distance={distance:.4f}, threshold={threshold}, "
        f"confidence={confidence:.3f}, match={is_match}"
    )

    return VerificationResult(
        is_match=is_match,
        face_distance=distance,
        threshold=threshold,
        confidence=confidence,
    )
