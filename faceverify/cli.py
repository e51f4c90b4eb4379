"""Command-line entry point for face verification.

Usage:
    face-verify reference.jpg query.jpg
    face-verify id_card.jpg selfie.jpg --input-dir data/images --threshold 0.55
    python -m faceverify reference.jpg query.jpg
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Callable, List, Optional

from faceverify.backends import create_face_model
from faceverify.core.config import VALID_DETECTOR_MODELS, Config
from faceverify.core.errors import VerificationError
from faceverify.core.interfaces import FaceModel
from faceverify.core.logging_config import VALID_LEVELS, set_level, setup_logging
from faceverify.services.verification import VerificationOutcome, VerificationService

logger = setup_logging(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="face-verify",
        description="Verify that a reference image and a query image show the same person",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "reference",
        type=str,
        help="Reference image file name, relative to the input directory",
    )

    parser.add_argument(
        "query",
        type=str,
        help="Query image file name, relative to the input directory",
    )

    parser.add_argument(
        "--input-dir",
        type=str,
        default=None,
        help="Directory containing the images (default: INPUT_DIR)",
    )

    parser.add_argument(
        "--output-dir",
        type=str,
        default=None,
        help="Root directory for run outputs (default: BASE_OUTPUT_DIR)",
    )

    parser.add_argument(
        "--threshold",
        type=float,
        default=None,
        help="Distance threshold, lower=stricter (default: DISTANCE_THRESHOLD)",
    )

    parser.add_argument(
        "--zoom",
        type=float,
        default=None,
        help="Crop zoom-out factor (default: ZOOM_OUT_FACTOR)",
    )

    parser.add_argument(
        "--face-quality",
        type=float,
        default=None,
        help="Minimum detection score (default: FACE_QUALITY)",
    )

    parser.add_argument(
        "--detector-model",
        type=str,
        choices=VALID_DETECTOR_MODELS,
        default=None,
        help="Face detector model (hog=faster, cnn=more accurate)",
    )

    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=VALID_LEVELS,
        default=None,
        help="Log level (default: LOG_LEVEL)",
    )

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> Config:
    """Merge command-line overrides into the environment configuration."""
    return Config.from_env().with_overrides(
        input_dir=args.input_dir,
        base_output_dir=args.output_dir,
        distance_threshold=args.threshold,
        zoom_out_factor=args.zoom,
        face_quality=args.face_quality,
        detector_model=args.detector_model,
        log_level=args.log_level,
    )


def print_outcome(outcome: VerificationOutcome) -> None:
    """Print the verification summary, ending with VERIFIED or REJECTED."""
    result = outcome.result
    print(f"Face Distance: {result.face_distance:.4f}")
    print(f"Threshold: {result.threshold}")
    print(f"Confidence: {result.confidence * 100:.1f}%")
    print(
        f"Detection Scores - Reference: {outcome.reference_score:.3f}, "
        f"Query: {outcome.query_score:.3f}"
    )
    print(f"Reference face: {outcome.reference_face.filename}")
    print(f"Query face: {outcome.query_face.filename}")
    print(f"Processing time: {outcome.elapsed_seconds:.3f} seconds")
    print(f"Output Directory: {outcome.output_dir.name}")
    print(f"Report: {outcome.report_path}")
    print(result.status.value)


def main(
    argv: Optional[List[str]] = None,
    model_factory: Callable[[Config], FaceModel] = create_face_model,
) -> int:
    """Main function.

    Args:
        argv: Command-line arguments (default: sys.argv[1:])
        model_factory: Builds the face model from the config

    Returns:
        Process exit status: 0 on a completed verification (VERIFIED or
        REJECTED), 1 on any failure.
    """
    args = parse_args(argv)

    try:
        config = build_config(args)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    set_level(config.log_level)
    logger.debug(f"Using {config!r}")

    reference_path = Path(config.input_dir) / args.reference
    query_path = Path(config.input_dir) / args.query

    try:
        model = model_factory(config)
        service = VerificationService(model=model, config=config)
        outcome = service.verify(reference_path, query_path)
    except (VerificationError, ValueError, RuntimeError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        logger.debug("Unexpected failure", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print_outcome(outcome)
    return 0


if __name__ == "__main__":
    sys.exit(main())
