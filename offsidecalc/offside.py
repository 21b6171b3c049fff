"""
Player projection and offside-line comparison.

A player's relevant body point (e.g. a shoulder or knee) is usually above the
ground. It is projected straight down to the ground height the user marks
(the plumb line), and the offside line is the line from the vanishing point
through that ground point. Other players are then compared against the
offside line by which side of it their own ground point lies on.

Everything here is image-space geometry; no camera calibration is involved.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .data_structures import Line, Point
from .utils.geometry import make_line


@dataclass(frozen=True)
class PlayerProjection:
    """
    Result of projecting a player's body point to the ground.

    Attributes:
        body: Clicked body point.
        ground: Ground point directly below (same x, clicked ground height).
        plumb: Vertical line from ``body`` to ``ground``.
        offside_line: Line from the vanishing point through ``ground``, or
            ``None`` when there is no vanishing point.
    """

    body: Point
    ground: Point
    plumb: Line
    offside_line: Optional[Line] = None


def ground_point(body: Point, ground_click: Point) -> Point:
    """
    Point below ``body`` at the height of ``ground_click``.
    """
    return Point(body.x, ground_click.y)


def project_player(
    body: Point, ground_click: Point, vp: Optional[Point] = None
) -> Optional[PlayerProjection]:
    """
    Project ``body`` to the ground and build the offside line.

    Returns ``None`` when the ground click is at the body's own height, so no
    plumb line exists.
    """
    ground = ground_point(body, ground_click)
    plumb = make_line(body, ground)
    if plumb is None:
        return None
    offside_line = make_line(vp, ground) if vp is not None else None
    return PlayerProjection(body=body, ground=ground, plumb=plumb, offside_line=offside_line)


def offside_margin(offside_line: Line, ground: Point, reference: Point) -> float:
    """
    Signed distance (pixels) of ``ground`` from the offside line.

    The sign is oriented so that the side containing ``reference`` (e.g. a
    point towards the defending team's own half) is positive. A negative
    margin means ``ground`` lies beyond the line.
    """
    sign = 1.0 if offside_line.signed_distance(reference) >= 0.0 else -1.0
    return sign * offside_line.signed_distance(ground)


def is_beyond_line(offside_line: Line, ground: Point, reference: Point) -> bool:
    """
    True if ``ground`` is strictly on the opposite side of ``reference``.
    """
    return offside_margin(offside_line, ground, reference) < 0.0
