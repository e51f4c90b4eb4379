"""dlib backend for face verification.

Components:
- DlibFaceModel: HOG/CNN detection, 68-point landmarks and 128-D descriptors
"""

from faceverify.backends.dlib.model import DlibFaceModel, score_to_unit

__all__ = [
    "DlibFaceModel",
    "score_to_unit",
]
