"""
Reduction of raw detector segments to ranked line suggestions.

The edge/Hough front end reports many overlapping segments for a single pitch
marking. This module turns them into a short list of candidate lines:

1. score every segment (:func:`offsidecalc.confidence.score_segment`);
2. group similar segments greedily (:func:`group_similar`);
3. merge each group into one representative line (:func:`merge_group`);
4. rank by confidence, highest first.

:func:`select_suggestions` then applies the acceptance floor and the top-N
cap that the editing session shows to the user.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from .config import DetectionConfig
from .confidence import filter_by_confidence, score_segment, top_n_lines
from .data_structures import CandidateLine, Point, RawSegment
from .utils.geometry import make_line

logger = logging.getLogger(__name__)


def is_near_horizontal(angle: float, tolerance_deg: float) -> bool:
    """
    True if a direction (degrees, ``atan2`` range) is within ``tolerance_deg``
    of 0 or 180 degrees.
    """
    abs_angle = abs(angle)
    return abs_angle <= tolerance_deg or abs_angle >= 180.0 - tolerance_deg


def build_candidates(
    segments: Sequence[RawSegment], config: DetectionConfig | None = None
) -> List[CandidateLine]:
    """
    Wrap raw segments into scored, pending candidate lines.

    Degenerate segments (coincident endpoints) are skipped.
    """
    config = config or DetectionConfig()
    candidates: List[CandidateLine] = []
    for i, seg in enumerate(segments):
        line = make_line(seg.p1, seg.p2)
        if line is None:
            continue
        candidates.append(
            CandidateLine(
                line=line,
                confidence=score_segment(seg.length, seg.angle, config),
                length=seg.length,
                angle=seg.angle,
                candidate_id=f"seg-{i}",
            )
        )
    return candidates


def _similar(seed: CandidateLine, other: CandidateLine, config: DetectionConfig) -> bool:
    angle_diff = abs(seed.angle - other.angle)
    y_diff = abs(seed.mid_y - other.mid_y)
    return angle_diff < config.cluster_angle_deg and y_diff < config.cluster_vertical_px


def group_similar(
    candidates: Sequence[CandidateLine], config: DetectionConfig | None = None
) -> List[List[CandidateLine]]:
    """
    Greedy single-pass grouping of similar candidates.

    Candidates are visited in input order. Each unused candidate seeds a new
    group, and every later unused candidate whose angle and mid-height are
    both within the cluster thresholds *of the seed* joins it. A candidate is
    consumed by the first group that takes it, so input order is the
    tie-break and the result is reproducible.
    """
    config = config or DetectionConfig()
    used = set()
    groups: List[List[CandidateLine]] = []

    for i, seed in enumerate(candidates):
        if i in used:
            continue
        used.add(i)
        group = [seed]
        for j in range(i + 1, len(candidates)):
            if j in used:
                continue
            if _similar(seed, candidates[j], config):
                group.append(candidates[j])
                used.add(j)
        groups.append(group)

    return groups


def merge_group(group: Sequence[CandidateLine], candidate_id: str = "") -> Optional[CandidateLine]:
    """
    Reduce a group of similar candidates to one representative.

    A singleton is returned unchanged. Otherwise the representative spans the
    group's full horizontal extent at the mean endpoint height, i.e. it is
    drawn from ``(min_x, mean_y)`` to ``(max_x, mean_y)``, and carries the
    highest confidence in the group. Length and angle are recomputed from the
    new endpoints.

    Returns ``None`` only for an empty group.
    """
    if not group:
        return None
    if len(group) == 1:
        return group[0]

    xs = [x for c in group for x in (c.p1.x, c.p2.x)]
    ys = [y for c in group for y in (c.p1.y, c.p2.y)]
    mean_y = sum(ys) / len(ys)
    p1 = Point(min(xs), mean_y)
    p2 = Point(max(xs), mean_y)
    best = max(c.confidence for c in group)

    line = make_line(p1, p2)
    if line is None:
        # Members stacked at one x; there is no horizontal extent to span.
        logger.debug("Merged group of %d has no horizontal extent", len(group))
        return max(group, key=lambda c: c.confidence)

    return CandidateLine(
        line=line,
        confidence=best,
        length=line.length,
        angle=line.angle_deg,
        candidate_id=candidate_id or f"merged-{group[0].candidate_id}",
    )


def rank_by_confidence(candidates: Sequence[CandidateLine]) -> List[CandidateLine]:
    """
    Stable sort, highest confidence first.
    """
    return sorted(candidates, key=lambda c: c.confidence, reverse=True)


def reduce_segments(
    segments: Sequence[RawSegment], config: DetectionConfig | None = None
) -> List[CandidateLine]:
    """
    Score, group, merge, and rank raw segments.

    Args:
        segments: Raw detector segments, already filtered to near-horizontal.
        config: Detection parameters (defaults if omitted).

    Returns:
        De-duplicated candidate lines ordered by descending confidence.
    """
    config = config or DetectionConfig()
    candidates = build_candidates(segments, config)
    groups = group_similar(candidates, config)

    merged: List[CandidateLine] = []
    for group in groups:
        rep = merge_group(group)
        if rep is not None:
            merged.append(rep)

    ranked = rank_by_confidence(merged)
    logger.debug(
        "Reduced %d segments to %d candidates (%d groups)",
        len(segments),
        len(ranked),
        len(groups),
    )
    return ranked


def select_suggestions(
    candidates: Sequence[CandidateLine], config: DetectionConfig | None = None
) -> List[CandidateLine]:
    """
    Apply the confidence floor, then keep the top-N candidates.
    """
    config = config or DetectionConfig()
    kept = filter_by_confidence(candidates, config.min_confidence)
    return top_n_lines(kept, config.top_n)
