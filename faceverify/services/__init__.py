"""High-level services for face verification.

This package contains the service that orchestrates detection, quality
gating, decision, artifact writing and reporting.
"""

from faceverify.services.verification import (
    PipelineState,
    VerificationOutcome,
    VerificationRun,
    VerificationService,
)

__all__ = [
    "PipelineState",
    "VerificationOutcome",
    "VerificationRun",
    "VerificationService",
]
