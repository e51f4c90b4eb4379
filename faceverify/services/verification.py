"""Verification service for one-shot reference/query face matching.

This module provides the pipeline orchestrator that turns two image files
into a VERIFIED/REJECTED decision, face crops, detection overlays and a JSON
report. Workflow:

    load both images -> detect both faces -> quality gate -> distance
    -> crop faces -> draw overlays -> assemble report -> save report

Every failure is fatal and leaves no report file behind.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import numpy as np

from faceverify.core.config import Config
from faceverify.core.decision import decide
from faceverify.core.errors import (
    ArtifactWriteError,
    InputNotFoundError,
    LowDetectionQualityError,
    NoFaceDetectedError,
    VerificationError,
)
from faceverify.core.extractor import extract_face
from faceverify.core.image_io import create_run_directory, load_image
from faceverify.core.interfaces import (
    Detection,
    FaceCropArtifact,
    FaceModel,
    ImageMetadata,
    VerificationResult,
    image_dimensions,
)
from faceverify.core.logging_config import get_logger
from faceverify.core.overlay import render_detection_overlay
from faceverify.core.report import VerificationReport, assemble_report, save_report

logger = get_logger(__name__)

REFERENCE = "reference"
QUERY = "query"
IMAGE_LABELS = (REFERENCE, QUERY)


class PipelineState(str, Enum):
    """States of a single verification run."""

    INIT = "Init"
    IMAGES_LOADED = "ImagesLoaded"
    FACES_DETECTED = "FacesDetected"
    QUALITY_CHECKED = "QualityChecked"
    DISTANCE_COMPUTED = "DistanceComputed"
    ARTIFACTS_EXTRACTED = "ArtifactsExtracted"
    OVERLAYS_RENDERED = "OverlaysRendered"
    REPORT_ASSEMBLED = "ReportAssembled"
    PERSISTED = "Persisted"
    DONE = "Done"
    FAILED = "Failed"


@dataclass
class VerificationRun:
    """Mutable state of one run; never shared between runs."""

    state: PipelineState = PipelineState.INIT
    history: List[PipelineState] = field(default_factory=lambda: [PipelineState.INIT])

    @property
    def is_terminal(self) -> bool:
        """True once the run is DONE or FAILED."""
        return self.state in (PipelineState.DONE, PipelineState.FAILED)

    def advance(self, state: PipelineState) -> None:
        """Move to the next state."""
        if self.is_terminal:
            raise RuntimeError(f"Run already finished in state {self.state.value}")
        logger.debug(f"{self.state.value} -> {state.value}")
        self.state = state
        self.history.append(state)

    def fail(self) -> None:
        """Move to FAILED from any non-terminal state."""
        if not self.is_terminal:
            self.advance(PipelineState.FAILED)


@dataclass(frozen=True)
class VerificationOutcome:
    """Everything a caller needs after a successful run.

    Attributes:
        result: Distance/decision outcome
        reference_face: Crop artifact for the reference image
        query_face: Crop artifact for the query image
        reference_score: Detection score of the reference face
        query_score: Detection score of the query face
        overlay_paths: Detection overlays that were written
        report: The persisted report
        report_path: Path of the report JSON
        output_dir: Run directory
        elapsed_seconds: Wall time of the run
        states: State history of the run, INIT through DONE
    """

    result: VerificationResult
    reference_face: FaceCropArtifact
    query_face: FaceCropArtifact
    reference_score: float
    query_score: float
    overlay_paths: Tuple[Path, ...]
    report: VerificationReport
    report_path: Path
    output_dir: Path
    elapsed_seconds: float
    states: Tuple[PipelineState, ...]

    @property
    def is_match(self) -> bool:
        """True if the faces were verified as the same person."""
        return self.result.is_match


class VerificationService:
    """Service for verifying that two images show the same person.

    The service holds only the read-only face model and an immutable
    Config, so one instance can serve any number of runs, including
    concurrent ones writing to different run directories.

    Attributes:
        model: Face model providing detection, landmarks and descriptors
        config: Verification settings (threshold, zoom, quality, output root)

    Example:
        >>> service = VerificationService(model=create_face_model(config), config=config)
        >>> outcome = service.verify("images/id.jpg", "images/selfie.jpg")
        >>> print(outcome.result.status.value, f"{outcome.result.face_distance:.4f}")
    """

    def __init__(self, model: FaceModel, config: Config):
        """Initialize verification service.

        Args:
            model: Initialized face model (shared, not mutated)
            config: Immutable verification configuration
        """
        self.model = model
        self.config = config

        logger.info(
            f"Initialized VerificationService with threshold={config.distance_threshold}, "
            f"face_quality={config.face_quality}, zoom={config.zoom_out_factor}"
        )

    def verify(
        self,
        reference_path: str | Path,
        query_path: str | Path,
        output_dir: Optional[str | Path] = None,
    ) -> VerificationOutcome:
        """Run the full verification pipeline for one image pair.

        Args:
            reference_path: Path of the reference image (e.g. ID document)
            query_path: Path of the query image (e.g. selfie)
            output_dir: Run directory. If None, a fresh timestamped directory
                        is created under config.base_output_dir.

        Returns:
            VerificationOutcome for the run.

        Raises:
            InputNotFoundError: If an input path does not exist.
            ImageDecodeError: If an input file cannot be decoded.
            NoFaceDetectedError: If an image contains no face.
            LowDetectionQualityError: If a detection score is below face_quality.
            ArtifactWriteError: If a crop, overlay (strict mode) or the report
                                cannot be written.
            VerificationError: If the model returns a detection without descriptor.
        """
        run = VerificationRun()
        start = time.perf_counter()
        paths = {REFERENCE: Path(reference_path), QUERY: Path(query_path)}

        try:
            # Init -> ImagesLoaded
            for label in IMAGE_LABELS:
                if not paths[label].exists():
                    raise InputNotFoundError(label, paths[label])

            images = {label: load_image(paths[label]) for label in IMAGE_LABELS}
            run.advance(PipelineState.IMAGES_LOADED)

            # ImagesLoaded -> FacesDetected
            detections = self._detect_faces(images)
            run.advance(PipelineState.FACES_DETECTED)

            # FacesDetected -> QualityChecked
            self._check_quality(detections)
            run.advance(PipelineState.QUALITY_CHECKED)

            # QualityChecked -> DistanceComputed
            result = decide(
                detections[REFERENCE].descriptor,
                detections[QUERY].descriptor,
                self.config.distance_threshold,
            )
            run.advance(PipelineState.DISTANCE_COMPUTED)
            logger.info(
                f"Decision: {result.status.value} (distance={result.face_distance:.4f}, "
                f"threshold={result.threshold}, confidence={result.confidence:.3f})"
            )

            if output_dir is None:
                run_dir = create_run_directory(self.config.base_output_dir)
            else:
                run_dir = Path(output_dir)
                run_dir.mkdir(parents=True, exist_ok=True)

            # DistanceComputed -> ArtifactsExtracted
            artifacts = {
                label: extract_face(
                    images[label],
                    detections[label],
                    label,
                    run_dir,
                    self.config.zoom_out_factor,
                )
                for label in IMAGE_LABELS
            }
            run.advance(PipelineState.ARTIFACTS_EXTRACTED)

            # ArtifactsExtracted -> OverlaysRendered
            overlay_paths = self._render_overlays(images, detections, run_dir)
            run.advance(PipelineState.OVERLAYS_RENDERED)

            # OverlaysRendered -> ReportAssembled
            metadata = {
                label: self._image_metadata(
                    paths[label], images[label], detections[label], artifacts[label]
                )
                for label in IMAGE_LABELS
            }
            report = assemble_report(metadata[REFERENCE], metadata[QUERY], result, run_dir)
            run.advance(PipelineState.REPORT_ASSEMBLED)

            # ReportAssembled -> Persisted -> Done
            report_path = save_report(report, run_dir)
            run.advance(PipelineState.PERSISTED)
            run.advance(PipelineState.DONE)

        except Exception as e:
            run.fail()
            logger.error(f"Verification failed: {e}")
            raise

        return VerificationOutcome(
            result=result,
            reference_face=artifacts[REFERENCE],
            query_face=artifacts[QUERY],
            reference_score=detections[REFERENCE].score,
            query_score=detections[QUERY].score,
            overlay_paths=tuple(overlay_paths),
            report=report,
            report_path=report_path,
            output_dir=run_dir,
            elapsed_seconds=time.perf_counter() - start,
            states=tuple(run.history),
        )

    def _detect_faces(self, images: Dict[str, np.ndarray]) -> Dict[str, Detection]:
        """Detect the primary face in each image; fail if any has none."""
        detections: Dict[str, Optional[Detection]] = {
            label: self.model.detect_primary_face(images[label])
            for label in IMAGE_LABELS
        }

        for label in IMAGE_LABELS:
            detection = detections[label]
            if detection is None:
                raise NoFaceDetectedError(label)
            if detection.descriptor is None:
                raise VerificationError(
                    f"Face model returned no descriptor for the {label} image"
                )
            logger.debug(f"{label}: {detection}")

        return detections

    def _check_quality(self, detections: Dict[str, Detection]) -> None:
        """Reject detections whose score is below config.face_quality."""
        for label in IMAGE_LABELS:
            score = detections[label].score
            if score < self.config.face_quality:
                raise LowDetectionQualityError(label, score, self.config.face_quality)

    def _render_overlays(
        self,
        images: Dict[str, np.ndarray],
        detections: Dict[str, Detection],
        run_dir: Path,
    ) -> List[Path]:
        """Write detection overlays; failures are fatal only in strict mode."""
        written = []
        for label in IMAGE_LABELS:
            path = run_dir / f"{label}_detection.jpg"
            try:
                written.append(
                    render_detection_overlay(images[label], detections[label], path)
                )
            except ArtifactWriteError as e:
                if self.config.strict_overlays:
                    raise
                logger.warning(f"Skipping {label} overlay: {e}")
        return written

    @staticmethod
    def _image_metadata(
        path: Path,
        image: np.ndarray,
        detection: Detection,
        artifact: FaceCropArtifact,
    ) -> ImageMetadata:
        width, height = image_dimensions(image)
        return ImageMetadata(
            image_path=path,
            face_detected=True,
            detection_score=float(detection.score),
            face_file=artifact.filename,
            coordinates=artifact.coordinates,
            image_width=width,
            image_height=height,
        )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"VerificationService(threshold={self.config.distance_threshold}, "
            f"model={self.model})"
        )
