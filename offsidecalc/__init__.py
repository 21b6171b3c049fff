"""
Top-level package for the offside calculator core.

This package provides:
- Normalized 2D line geometry (construction, intersection, distance, clipping).
- Least-squares vanishing-point estimation from any number of reference lines.
- Reduction of raw detector segments to ranked, de-duplicated suggestions.
- A scene model with vanishing-point state and undo/redo.
- Player ground projection for drawing and comparing offside lines.

See individual submodules for more detailed documentation.
"""

from .data_structures import CandidateLine, Line, LineKind, Point, RawSegment, Rect, SceneLine
from .utils.geometry import clip_to_rectangle, intersect, make_line, point_to_line_distance
from .vanishing_point import best_fit, estimate_vanishing_point
from .detection import reduce_segments, select_suggestions
from .scene import Scene, VPState

__all__ = [
    "CandidateLine",
    "Line",
    "LineKind",
    "Point",
    "RawSegment",
    "Rect",
    "SceneLine",
    "Scene",
    "VPState",
    "best_fit",
    "clip_to_rectangle",
    "estimate_vanishing_point",
    "intersect",
    "make_line",
    "point_to_line_distance",
    "reduce_segments",
    "select_suggestions",
]
