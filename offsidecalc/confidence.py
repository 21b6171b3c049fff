"""
Confidence scoring and filtering for detected line suggestions.

A raw segment's confidence blends two scores:

- length score: ``min(length / length_saturation_px, 1)``, a linear ramp that
  saturates at 400 px by default;
- angle score: ``1 - deviation / angle_tolerance_deg``, where ``deviation`` is
  the angle to the nearest horizontal direction (0 or 180 degrees).

With the default 0.4 / 0.6 weights, angular precision dominates length.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

from .config import DetectionConfig
from .data_structures import CandidateLine

BGRColor = Tuple[int, int, int]

HIGH_CONFIDENCE = 0.8
MEDIUM_CONFIDENCE = 0.6


def horizontal_deviation(angle: float) -> float:
    """
    Angle in degrees between a direction and the nearest horizontal.
    """
    abs_angle = abs(angle)
    return min(abs_angle, 180.0 - abs_angle)


def length_score(length: float, config: DetectionConfig) -> float:
    return min(length / config.length_saturation_px, 1.0)


def angle_score(angle: float, config: DetectionConfig) -> float:
    return 1.0 - horizontal_deviation(angle) / config.angle_tolerance_deg


def score_segment(length: float, angle: float, config: DetectionConfig | None = None) -> float:
    """
    Confidence of a segment from its length (pixels) and angle (degrees).

    Segments are expected to be pre-filtered to the horizontality tolerance,
    which keeps the result inside ``[0, 1]``.
    """
    config = config or DetectionConfig()
    return (
        config.length_weight * length_score(length, config)
        + config.angle_weight * angle_score(angle, config)
    )


def filter_by_confidence(
    lines: Sequence[CandidateLine], min_confidence: float = 0.5
) -> List[CandidateLine]:
    """
    Keep lines whose confidence is at least ``min_confidence``.
    """
    return [line for line in lines if line.confidence >= min_confidence]


def top_n_lines(lines: Sequence[CandidateLine], n: int = 4) -> List[CandidateLine]:
    """
    The ``n`` most confident lines, highest first.

    The sort is stable, so equally confident lines keep their order. On an
    already ranked sequence this is just a slice.
    """
    return sorted(lines, key=lambda line: line.confidence, reverse=True)[:n]


def average_confidence(lines: Sequence[CandidateLine]) -> float:
    if not lines:
        return 0.0
    return sum(line.confidence for line in lines) / len(lines)


def format_confidence(confidence: float) -> str:
    """
    Confidence as a whole percentage, e.g. ``"87%"``.
    """
    return f"{int(confidence * 100 + 0.5)}%"


def confidence_level(confidence: float) -> str:
    """
    ``"high"``, ``"medium"`` or ``"low"``.
    """
    if confidence >= HIGH_CONFIDENCE:
        return "high"
    if confidence >= MEDIUM_CONFIDENCE:
        return "medium"
    return "low"


def confidence_color(confidence: float) -> BGRColor:
    """
    Overlay color (OpenCV BGR order) for a confidence level.
    """
    level = confidence_level(confidence)
    if level == "high":
        return (135, 255, 0)  # green
    if level == "medium":
        return (22, 115, 249)  # orange
    return (68, 68, 239)  # red
