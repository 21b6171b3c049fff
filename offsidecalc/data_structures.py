"""
Core data structures for reference lines, detections, and the vanishing point.

All coordinates are image-space pixels with the origin at the top-left corner
of the photograph (``x`` to the right, ``y`` downwards). Every structure here
is an immutable value; the scene replaces entries instead of mutating them so
older scene versions can share them safely.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Tuple

PointXY = Tuple[float, float]


@dataclass(frozen=True)
class Point:
    """
    Image coordinate in pixels.
    """

    x: float
    y: float

    def as_tuple(self) -> PointXY:
        return self.x, self.y


def dist_sq(a: Point, b: Point) -> float:
    """
    Squared Euclidean distance between two points.
    """
    return (a.x - b.x) ** 2 + (a.y - b.y) ** 2


def distance(a: Point, b: Point) -> float:
    return math.hypot(a.x - b.x, a.y - b.y)


@dataclass(frozen=True)
class Rect:
    """
    Axis-aligned rectangle, usually the image bounds.

    Attributes:
        left: Minimum x.
        top: Minimum y.
        right: Maximum x.
        bottom: Maximum y.
    """

    left: float
    top: float
    right: float
    bottom: float

    @classmethod
    def from_size(cls, width: float, height: float) -> "Rect":
        """
        Rectangle covering an image of ``width`` x ``height`` pixels.
        """
        return cls(0.0, 0.0, float(width), float(height))

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    def contains(self, point: Point) -> bool:
        return self.left <= point.x <= self.right and self.top <= point.y <= self.bottom


@dataclass(frozen=True)
class Line:
    """
    Infinite line in normalized implicit form ``a*x + b*y + c = 0``.

    ``(a, b)`` is a unit normal, so ``a*x + b*y + c`` is the signed Euclidean
    distance of ``(x, y)`` from the line. ``p1`` and ``p2`` are the two points
    the line was built from; they anchor the line for drawing.

    Build instances with :func:`offsidecalc.utils.geometry.make_line`, which
    performs the normalization and rejects coincident points.
    """

    a: float
    b: float
    c: float
    p1: Point
    p2: Point

    def signed_distance(self, point: Point) -> float:
        return self.a * point.x + self.b * point.y + self.c

    @property
    def length(self) -> float:
        """
        Distance between the two defining points.
        """
        return distance(self.p1, self.p2)

    @property
    def angle_deg(self) -> float:
        """
        Direction from ``p1`` to ``p2`` in degrees, in the ``atan2`` range.
        """
        return math.degrees(math.atan2(self.p2.y - self.p1.y, self.p2.x - self.p1.x))


class LineKind(str, Enum):
    """
    Role of a line inside the scene.

    REFERENCE lines lie on the pitch and are the only vanishing-point
    evidence. VP_LINE lines run from the vanishing point through an anchor.
    PLUMB lines connect a player's body point to its ground projection.
    """

    REFERENCE = "reference"
    VP_LINE = "vp_line"
    PLUMB = "plumb"


@dataclass(frozen=True)
class RawSegment:
    """
    Line segment as reported by the edge/Hough detector.

    Attributes:
        p1: First endpoint in pixels.
        p2: Second endpoint in pixels.
        angle: Direction from ``p1`` to ``p2`` in degrees (``atan2`` range).
        length: Segment length in pixels.
    """

    p1: Point
    p2: Point
    angle: float
    length: float

    @classmethod
    def from_endpoints(cls, x1: float, y1: float, x2: float, y2: float) -> "RawSegment":
        """
        Build a segment from endpoint coordinates, deriving angle and length.
        """
        p1 = Point(float(x1), float(y1))
        p2 = Point(float(x2), float(y2))
        angle = math.degrees(math.atan2(p2.y - p1.y, p2.x - p1.x))
        return cls(p1=p1, p2=p2, angle=angle, length=distance(p1, p2))

    @property
    def mid_y(self) -> float:
        return (self.p1.y + self.p2.y) / 2.0


@dataclass(frozen=True)
class CandidateLine:
    """
    Confidence-scored line suggestion awaiting acceptance.

    Attributes:
        line: Normalized line geometry (endpoints in ``line.p1``/``line.p2``).
        confidence: Heuristic score in ``[0, 1]``.
        length: Segment length in pixels.
        angle: Segment direction in degrees (``atan2`` range).
        pending: True until the suggestion is accepted into a scene.
        candidate_id: Identifier unique within one detection run.
    """

    line: Line
    confidence: float
    length: float
    angle: float
    pending: bool = True
    candidate_id: str = ""

    @property
    def p1(self) -> Point:
        return self.line.p1

    @property
    def p2(self) -> Point:
        return self.line.p2

    @property
    def mid_y(self) -> float:
        return (self.line.p1.y + self.line.p2.y) / 2.0

    def accepted(self) -> "CandidateLine":
        """
        Copy of this candidate with the pending flag cleared.
        """
        return replace(self, pending=False)


@dataclass(frozen=True)
class SceneLine:
    """
    Line stored in a scene.

    Attributes:
        line_id: Identifier unique within the scene.
        line: Current geometry. For VP lines this is replaced whenever the
            vanishing point moves.
        kind: Role of the line (reference, VP line, or plumb).
        source_point: Anchor a VP line was explicitly created through
            (a clicked point or a player's ground point), if any.
        confidence: Detector confidence for accepted suggestions (display only).
        ai_detected: True when the line came from an accepted suggestion.
    """

    line_id: int
    line: Line
    kind: LineKind
    source_point: Optional[Point] = None
    confidence: Optional[float] = None
    ai_detected: bool = False

    @property
    def is_reference(self) -> bool:
        return self.kind is LineKind.REFERENCE

    @property
    def is_vp_line(self) -> bool:
        return self.kind is LineKind.VP_LINE

    @property
    def is_plumb(self) -> bool:
        return self.kind is LineKind.PLUMB
