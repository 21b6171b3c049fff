"""
Geometry helper functions for normalized 2D lines.

This module contains the line math shared between the vanishing-point
estimator, the detection reducer, and the scene:

- Building a unit-normal line ``a*x + b*y + c = 0`` from two points.
- Intersecting two lines.
- Point-to-line distance.
- Clipping an infinite line to a rectangle (usually the image bounds).

Near-degenerate input is reported as ``None`` rather than raised, so callers
can simply skip the attempted line or intersection.
"""

from __future__ import annotations

import logging
import math
from typing import List, Optional, Tuple

import numpy as np

from ..data_structures import Line, Point, Rect, dist_sq
from ..errors import FailureReason

logger = logging.getLogger(__name__)

# Below this magnitude a normal vector or determinant is treated as zero.
EPS = 1e-9

# Clip points closer than this (on both axes) count as the same point.
DEDUP_TOLERANCE_PX = 1.0


def make_line(p1: Point, p2: Point) -> Optional[Line]:
    """
    Build the normalized line through ``p1`` and ``p2``.

    Args:
        p1: First point.
        p2: Second point.

    Returns:
        A :class:`Line` with ``a**2 + b**2 == 1``, or ``None`` when the two
        points coincide (closer than :data:`EPS`).
    """
    dx = p2.x - p1.x
    dy = p2.y - p1.y
    a = -dy
    b = dx
    c = dy * p1.x - dx * p1.y
    n = math.sqrt(a * a + b * b)
    if n < EPS:
        logger.debug("No line from %s to %s: %s", p1, p2, FailureReason.DEGENERATE_LINE.value)
        return None
    # Point is frozen, but copy anyway so equal-but-distinct inputs never alias.
    return Line(
        a=a / n,
        b=b / n,
        c=c / n,
        p1=Point(float(p1.x), float(p1.y)),
        p2=Point(float(p2.x), float(p2.y)),
    )


def intersect(l1: Line, l2: Line) -> Optional[Point]:
    """
    Intersection point of two lines (Cramer's rule).

    Returns ``None`` when the determinant is below :data:`EPS`. Near-parallel
    lines do meet far away, but that point is numerically unreliable.
    """
    d = l1.a * l2.b - l1.b * l2.a
    if abs(d) < EPS:
        return None
    return Point(
        (l1.b * l2.c - l2.b * l1.c) / d,
        (l2.a * l1.c - l1.a * l2.c) / d,
    )


def point_to_line_distance(point: Point, line: Line) -> float:
    """
    Euclidean distance from ``point`` to ``line`` (the line is unit-normalized).
    """
    return abs(line.a * point.x + line.b * point.y + line.c)


def point_to_line_distances(points: np.ndarray, line: Line) -> np.ndarray:
    """
    Vectorized :func:`point_to_line_distance` for an ``(N, 2)`` array of points.
    """
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    return np.abs(pts @ np.array([line.a, line.b]) + line.c)


def clip_to_rectangle(line: Line, rect: Rect) -> Optional[Tuple[Point, Point]]:
    """
    Clip an infinite line to a rectangle.

    The line is intersected with the four rectangle edges; intersections whose
    other coordinate lies inside the rectangle (inclusive) are kept, points
    within one pixel of an earlier kept point are dropped, and the first two
    remaining points are returned.

    Returns:
        The two boundary points, or ``None`` when the line misses the
        rectangle or only touches it at a single point.
    """
    a, b, c = line.a, line.b, line.c
    pts: List[Point] = []

    # Left and right edges need a non-vertical line.
    if abs(b) > EPS:
        y = -(a * rect.left + c) / b
        if rect.top <= y <= rect.bottom:
            pts.append(Point(rect.left, y))
        y = -(a * rect.right + c) / b
        if rect.top <= y <= rect.bottom:
            pts.append(Point(rect.right, y))

    # Top and bottom edges need a non-horizontal line.
    if abs(a) > EPS:
        x = -(b * rect.top + c) / a
        if rect.left <= x <= rect.right:
            pts.append(Point(x, rect.top))
        x = -(b * rect.bottom + c) / a
        if rect.left <= x <= rect.right:
            pts.append(Point(x, rect.bottom))

    unique: List[Point] = []
    for p in pts:
        if any(
            abs(p.x - q.x) < DEDUP_TOLERANCE_PX and abs(p.y - q.y) < DEDUP_TOLERANCE_PX
            for q in unique
        ):
            continue
        unique.append(p)

    if len(unique) < 2:
        return None
    return unique[0], unique[1]


def farther_point(candidates: Tuple[Point, Point], origin: Point) -> Point:
    """
    The one of two points that lies farther from ``origin`` (second wins ties).
    """
    first, second = candidates
    return first if dist_sq(first, origin) > dist_sq(second, origin) else second
