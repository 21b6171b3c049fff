"""
Command-line entry point for the offside calculator core.

It wires together:
- Line detection (OpenCV Hough on a photo, or segments from JSON)
- Reduction of segments to ranked suggestions
- Acceptance of suggestions into a scene
- Vanishing-point estimation

For example:

    python -m offsidecalc.main \\
        --image data/frame.jpg \\
        --config config.yaml \\
        --accept_all

or, with segments produced elsewhere:

    python -m offsidecalc.main --segments data/segments.json --accept_all
"""

from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

import cv2

from .config import Config, load_config
from .confidence import confidence_level, format_confidence
from .errors import DetectionError
from .logging_config import setup_logging
from .segment_source import (
    HoughSegmentSource,
    OpenCVHandle,
    SegmentSource,
    StaticSegmentSource,
    load_segments_json,
)
from .session import EditingSession
from .vanishing_point import estimate_vanishing_point


def build_config_from_args(args: argparse.Namespace) -> Config:
    """
    Construct a :class:`Config` from CLI arguments and an optional YAML file.
    """
    config = load_config(Path(args.config) if args.config else None)
    detection = config.detection
    if args.min_confidence is not None:
        detection = replace(detection, min_confidence=float(args.min_confidence))
    if args.top_n is not None:
        detection = replace(detection, top_n=int(args.top_n))
    config.detection = detection
    if args.log_level is not None:
        config.log_level = args.log_level
    config.validate()
    return config


def run(args: argparse.Namespace) -> int:
    """
    Run detection and VP estimation; returns a process exit code.
    """
    config = build_config_from_args(args)
    setup_logging(config.log_level, str(config.log_file) if config.log_file else None)

    image = None
    source: SegmentSource
    if args.segments:
        source = StaticSegmentSource(load_segments_json(args.segments), config=config.detection)
    else:
        image = cv2.imread(str(args.image))
        if image is None:
            raise FileNotFoundError(f"Could not read image: {args.image}")
        source = HoughSegmentSource(handle=OpenCVHandle(), config=config.detection)

    session = EditingSession(source, config=config)
    if image is not None:
        h, w = image.shape[:2]
        session.load_image(w, h)
    elif args.width and args.height:
        session.load_image(args.width, args.height)

    try:
        suggestions = session.run_detection(image)
    except DetectionError as exc:
        print(f"Detection failed: {exc}")
        return 1

    if not suggestions:
        print("No line suggestions above the confidence floor.")
        return 0

    print(f"Suggestions (average confidence {format_confidence(session.average_confidence)}):")
    for i, cand in enumerate(suggestions):
        print(
            f"  [{i}] ({cand.p1.x:.0f}, {cand.p1.y:.0f}) -> ({cand.p2.x:.0f}, {cand.p2.y:.0f}) "
            f"angle {cand.angle:.1f} deg, length {cand.length:.0f} px, "
            f"confidence {format_confidence(cand.confidence)} ({confidence_level(cand.confidence)})"
        )

    if not args.accept_all:
        return 0

    session.accept_suggestions()
    scene = session.scene
    estimate = estimate_vanishing_point([l.line for l in scene.reference_lines()])
    if estimate.point is None:
        reason = estimate.failure.value if estimate.failure else "unknown"
        print(f"No vanishing point ({reason}).")
        return 0

    vp = estimate.point
    where = ""
    if scene.image_rect.width > 0 and scene.image_rect.height > 0:
        where = " inside image" if scene.vp_inside_image() else " outside image"
    print(
        f"Vanishing point: ({vp.x:.1f}, {vp.y:.1f}){where} "
        f"from {estimate.line_count} lines, rms residual {estimate.rms_residual:.2f} px"
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Detect pitch reference lines and estimate their vanishing point.",
    )
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--image", type=str, help="Path to the pitch photograph.")
    group.add_argument(
        "--segments",
        type=str,
        help="JSON file with raw segments [[x1, y1, x2, y2], ...] instead of an image.",
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Optional YAML config file (defaults are used when omitted).",
    )
    parser.add_argument("--min_confidence", type=float, help="Confidence floor for suggestions.")
    parser.add_argument("--top_n", type=int, help="Maximum number of suggestions.")
    parser.add_argument("--width", type=float, help="Image width when using --segments.")
    parser.add_argument("--height", type=float, help="Image height when using --segments.")
    parser.add_argument(
        "--accept_all",
        action="store_true",
        help="Accept all suggestions and report the vanishing point.",
    )
    parser.add_argument("--log_level", type=str, help="Logging level, e.g. DEBUG.")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    CLI entrypoint.

    Use ``python -m offsidecalc.main --help`` for available options.
    """
    args = build_parser().parse_args(argv)
    return run(args)


if __name__ == "__main__":
    raise SystemExit(main())
