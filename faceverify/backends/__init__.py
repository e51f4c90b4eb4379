"""Backend implementations of the face model.

This package contains:
- dlib: HOG/CNN detector + 68-point landmarks + ResNet-34 descriptors (128-D)

Use the factory module to create the model.
"""

from faceverify.backends.factory import (
    create_face_model,
    BackendType,
    SUPPORTED_BACKENDS,
)

__all__ = [
    "create_face_model",
    "BackendType",
    "SUPPORTED_BACKENDS",
]
