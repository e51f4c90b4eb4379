"""Backend factory for the face verification pipeline.

The face model is created once per process and shared read-only across
verification runs.

Usage:
    model = create_face_model(config)
    model = create_face_model(config, backend_type="dlib")
"""

from __future__ import annotations

from typing import Literal

from faceverify.core.config import Config
from faceverify.core.interfaces import FaceModel
from faceverify.core.logging_config import get_logger

logger = get_logger(__name__)

# Backend type alias
BackendType = Literal["dlib"]

SUPPORTED_BACKENDS = ("dlib",)


def create_face_model(
    config: Config,
    backend_type: BackendType = "dlib",
) -> FaceModel:
    """Create the face model for the specified backend.

    Args:
        config: Configuration providing detector options
        backend_type: Backend to use (only "dlib" is available)

    Returns:
        An initialized FaceModel.

    Raises:
        ValueError: If backend_type is unknown.
    """
    if backend_type not in SUPPORTED_BACKENDS:
        raise ValueError(
            f"Unknown backend: '{backend_type}'. "
            f"Supported backends: {', '.join(SUPPORTED_BACKENDS)}"
        )

    logger.info(f"Creating {backend_type} backend (detector={config.detector_model})...")

    # Imported lazily, loading dlib models is slow
    from faceverify.backends.dlib.model import DlibFaceModel

    model = DlibFaceModel(
        model=config.detector_model,
        upsample=config.upsample,
        num_jitters=config.num_jitters,
    )

    logger.info(f"{backend_type} backend created successfully")
    return model
