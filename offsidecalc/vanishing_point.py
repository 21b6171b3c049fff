"""
Least-squares vanishing-point estimation from reference lines.

Pitch lines that are parallel on the ground converge to one image point under
perspective. Hand-drawn or detected lines never meet exactly, so with three or
more lines the vanishing point is the point minimizing the sum of squared
distances to all of them:

    minimize  sum_i (a_i * x + b_i * y + c_i) ** 2

Because every line is unit-normalized, each term is a true geometric residual
and the minimizer is the closed-form solution of the 2x2 normal equations

    [ Saa  Sab ] [x]   [ -Sac ]
    [ Sab  Sbb ] [y] = [ -Sbc ]

with ``Saa = sum a_i**2``, ``Sab = sum a_i*b_i`` and so on. With exactly two
lines this is their intersection.

The estimate is never updated incrementally: callers pass the complete set of
reference lines every time that set changes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from .data_structures import Line, Point
from .errors import FailureReason
from .utils.geometry import EPS, intersect, make_line

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VanishingPointEstimate:
    """
    Result of a vanishing-point fit.

    Attributes:
        point: Estimated vanishing point, or ``None`` when no answer exists.
        line_count: Number of lines used.
        rms_residual: Root-mean-square distance (pixels) of the point to the
            input lines; ``None`` when there is no point.
        failure: Why no point was produced, if it wasn't.
    """

    point: Optional[Point]
    line_count: int
    rms_residual: Optional[float] = None
    failure: Optional[FailureReason] = None

    @property
    def ok(self) -> bool:
        return self.point is not None


def _coefficients(lines: Sequence[Line]) -> np.ndarray:
    return np.array([[line.a, line.b, line.c] for line in lines], dtype=np.float64)


def residuals(point: Point, lines: Sequence[Line]) -> np.ndarray:
    """
    Signed distances from ``point`` to each line, in input order.
    """
    if not lines:
        return np.zeros(0, dtype=np.float64)
    coeffs = _coefficients(lines)
    return coeffs[:, 0] * point.x + coeffs[:, 1] * point.y + coeffs[:, 2]


def _solve_normal_equations(lines: Sequence[Line]) -> Optional[Point]:
    coeffs = _coefficients(lines)
    a, b, c = coeffs[:, 0], coeffs[:, 1], coeffs[:, 2]
    s_aa = float(np.dot(a, a))
    s_ab = float(np.dot(a, b))
    s_bb = float(np.dot(b, b))
    s_ac = float(np.dot(a, c))
    s_bc = float(np.dot(b, c))

    det = s_aa * s_bb - s_ab * s_ab
    if abs(det) < EPS:
        return None
    return Point(
        (s_ab * s_bc - s_bb * s_ac) / det,
        (s_ab * s_ac - s_aa * s_bc) / det,
    )


def best_fit(lines: Sequence[Line]) -> Optional[Point]:
    """
    Best-fit vanishing point of ``lines``.

    Args:
        lines: Reference lines (unit-normalized).

    Returns:
        ``None`` for fewer than two lines, the intersection for exactly two,
        and the least-squares point for three or more. ``None`` is also
        returned when the lines are (near-)parallel.
    """
    return estimate_vanishing_point(lines).point


def estimate_vanishing_point(lines: Sequence[Line]) -> VanishingPointEstimate:
    """
    Same computation as :func:`best_fit`, reporting the failure reason and the
    RMS residual of the fit.
    """
    lines = list(lines)
    n = len(lines)
    if n < 2:
        return VanishingPointEstimate(
            point=None, line_count=n, failure=FailureReason.INSUFFICIENT_EVIDENCE
        )

    if n == 2:
        point = intersect(lines[0], lines[1])
        failure = FailureReason.NO_INTERSECTION
    else:
        point = _solve_normal_equations(lines)
        failure = FailureReason.SINGULAR_SYSTEM

    if point is None:
        logger.debug("No vanishing point from %d lines: %s", n, failure.value)
        return VanishingPointEstimate(point=None, line_count=n, failure=failure)

    res = residuals(point, lines)
    rms = float(np.sqrt(np.mean(res ** 2)))
    logger.debug("Vanishing point (%.2f, %.2f) from %d lines, rms %.3f px", point.x, point.y, n, rms)
    return VanishingPointEstimate(point=point, line_count=n, rms_residual=rms)


def lines_from_points(pairs: Sequence[Sequence[Point]]) -> List[Line]:
    """
    Build lines from ``(p1, p2)`` pairs, skipping degenerate ones.
    """
    built: List[Line] = []
    for p1, p2 in pairs:
        line = make_line(p1, p2)
        if line is not None:
            built.append(line)
    return built
