"""Unit tests for distance computation and the match decision."""

from __future__ import annotations

import numpy as np
import pytest

from faceverify.core.decision import decide, distance_to_confidence, euclidean_distance
from faceverify.core.interfaces import VerificationStatus


@pytest.fixture
def descriptors():
    """Create random 128-D descriptors resembling dlib encodings."""
    rng = np.random.default_rng(7)
    return [rng.normal(0.0, 0.1, 128) for _ in range(20)]


def test_distance_identical_is_zero(descriptors):
    """Test that a descriptor has zero distance to itself."""
    assert euclidean_distance(descriptors[0], descriptors[0]) == 0.0


def test_distance_symmetric_and_non_negative(descriptors):
    """Test distance symmetry and non-negativity."""
    for a in descriptors:
        for b in descriptors:
            d_ab = decide(a, b, 0.6).face_distance
            d_ba = decide(b, a, 0.6).face_distance
            assert d_ab == d_ba
            assert d_ab >= 0.0


def test_distance_known_value():
    """Test distance on a 3-4-5 triangle."""
    a = np.zeros(128)
    b = np.zeros(128)
    b[0], b[1] = 3.0, 4.0

    assert euclidean_distance(a, b) == pytest.approx(5.0)


def test_distance_accepts_float32():
    """Test that float32 descriptors are accepted."""
    a = np.ones(128, dtype=np.float32)
    b = np.zeros(128, dtype=np.float32)

    assert euclidean_distance(a, b) == pytest.approx(np.sqrt(128))


def test_dimension_mismatch_fails_loudly():
    """Test that descriptors of different length raise ValueError."""
    with pytest.raises(ValueError, match="dimensions differ"):
        decide(np.zeros(128), np.zeros(512), 0.6)


def test_non_vector_descriptor_rejected():
    """Test that 2-D descriptors raise ValueError."""
    with pytest.raises(ValueError, match="1-D"):
        euclidean_distance(np.zeros((2, 64)), np.zeros((2, 64)))


def test_identical_descriptors_verified(descriptors):
    """Test identical descriptors: distance 0, match, confidence 1."""
    result = decide(descriptors[3], descriptors[3].copy(), 0.6)

    assert result.face_distance == 0.0
    assert result.is_match is True
    assert result.confidence == 1.0
    assert result.status == VerificationStatus.VERIFIED


def test_distance_equal_to_threshold_rejected():
    """Test that distance exactly at the threshold is a reject."""
    a = np.zeros(128)
    b = np.zeros(128)
    b[0] = 0.6

    result = decide(a, b, 0.6)

    assert result.face_distance == 0.6
    assert result.is_match is False
    assert result.confidence == 0.0
    assert result.status == VerificationStatus.REJECTED


def test_distance_just_below_threshold_matches():
    """Test that distance slightly below the threshold is a match."""
    a = np.zeros(128)
    b = np.zeros(128)
    b[0] = np.nextafter(0.6, 0.0)

    result = decide(a, b, 0.6)

    assert result.is_match is True
    assert 0.0 <= result.confidence < 1e-9


def test_distance_beyond_threshold_clamped():
    """Test that confidence stays at 0 beyond the threshold."""
    a = np.zeros(128)
    b = np.zeros(128)
    b[0] = 1.5

    result = decide(a, b, 0.6)

    assert result.is_match is False
    assert result.confidence == 0.0


def test_confidence_linear():
    """Test linear falloff of confidence."""
    assert distance_to_confidence(0.0, 0.6) == 1.0
    assert distance_to_confidence(0.3, 0.6) == pytest.approx(0.5)
    assert distance_to_confidence(0.6, 0.6) == 0.0
    assert distance_to_confidence(2.0, 0.6) == 0.0


def test_confidence_bounds(descriptors):
    """Test 0 <= confidence <= 1 and confidence == 1 only at distance 0."""
    for threshold in (0.1, 0.4, 0.6, 1.0, 5.0):
        for a in descriptors:
            for b in descriptors:
                result = decide(a, b, threshold)
                assert 0.0 <= result.confidence <= 1.0
                if result.face_distance >= threshold:
                    assert result.confidence == 0.0
                assert (result.confidence == 1.0) == (result.face_distance == 0.0)


def test_invalid_threshold_rejected():
    """Test that a non-positive threshold raises ValueError."""
    with pytest.raises(ValueError, match="threshold"):
        decide(np.zeros(128), np.zeros(128), 0.0)


def test_result_to_dict():
    """Test serialization of the result section."""
    result = decide(np.zeros(128), np.zeros(128), 0.6)

    assert result.to_dict() == {
        "isMatch": True,
        "faceDistance": 0.0,
        "threshold": 0.6,
        "confidence": 1.0,
        "status": "VERIFIED",
    }
