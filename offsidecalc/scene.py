"""
Scene model: accepted lines, the vanishing point, and undo/redo history.

The scene is a sequence of immutable :class:`SceneVersion` values. Every
mutation (adding or removing lines, accepting suggestions, moving the
vanishing point) builds a new version that shares its unchanged
:class:`~offsidecalc.data_structures.SceneLine` entries with the previous one,
so undo/redo keeps whole versions without copying or serializing lines.

Vanishing-point states:

- no VP: fewer than two usable reference lines;
- computed VP: the best fit of all current reference lines, recomputed from
  scratch whenever the reference set changes;
- manual VP: set by the user; kept until :meth:`Scene.recalculate_vp`.

Whenever the VP moves, every VP line is rebuilt through its anchor.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from .data_structures import CandidateLine, LineKind, Point, Rect, SceneLine
from .errors import NoVanishingPointError
from .offside import PlayerProjection, project_player
from .utils.geometry import clip_to_rectangle, farther_point, make_line, point_to_line_distance
from .vanishing_point import best_fit

logger = logging.getLogger(__name__)


def vp_line_anchor(scene_line: SceneLine, vp: Point, image_rect: Rect) -> Point:
    """
    Point a VP line must keep passing through when the VP moves.

    This is the stored source point if the line has one; otherwise the end of
    the line's clip to the image that is farther from the new VP (the longest
    visible line), or the line's second defining point if it misses the image.
    """
    if scene_line.source_point is not None:
        return scene_line.source_point
    seg = clip_to_rectangle(scene_line.line, image_rect)
    if seg is not None:
        return farther_point(seg, vp)
    return scene_line.line.p2


def reanchor_vp_lines(
    lines: Tuple[SceneLine, ...], vp: Point, image_rect: Rect
) -> Tuple[SceneLine, ...]:
    """
    Rebuild every VP line through ``vp`` and its anchor; other lines are kept
    as they are. A VP line whose anchor coincides with ``vp`` is left unchanged.
    """
    updated: List[SceneLine] = []
    for l in lines:
        if not l.is_vp_line:
            updated.append(l)
            continue
        line = make_line(vp, vp_line_anchor(l, vp, image_rect))
        updated.append(replace(l, line=line) if line is not None else l)
    return tuple(updated)


class VPState(str, Enum):
    NONE = "none"
    COMPUTED = "computed"
    MANUAL = "manual"


@dataclass(frozen=True)
class SceneVersion:
    """
    One immutable state of the scene.

    Attributes:
        lines: Lines in insertion order (order matters for display only).
        vp: Current vanishing point, if any.
        vp_manual: True when ``vp`` was set by the user.
    """

    lines: Tuple[SceneLine, ...] = ()
    vp: Optional[Point] = None
    vp_manual: bool = False


class Scene:
    """
    Mutable editing scene built on immutable versions.

    Args:
        image_size: ``(width, height)`` of the photograph in pixels; used to
            re-anchor VP lines that have no stored source point.
    """

    def __init__(self, image_size: Tuple[float, float] = (0.0, 0.0)) -> None:
        self._version = SceneVersion()
        self._undo: List[SceneVersion] = []
        self._redo: List[SceneVersion] = []
        self._ids = itertools.count(1)
        self.image_rect = Rect.from_size(*image_size)

    # ------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------
    @property
    def version(self) -> SceneVersion:
        return self._version

    @property
    def lines(self) -> Tuple[SceneLine, ...]:
        return self._version.lines

    @property
    def vp(self) -> Optional[Point]:
        return self._version.vp

    @property
    def vp_manual(self) -> bool:
        return self._version.vp_manual

    @property
    def vp_state(self) -> VPState:
        if self._version.vp is None:
            return VPState.NONE
        return VPState.MANUAL if self._version.vp_manual else VPState.COMPUTED

    def reference_lines(self) -> List[SceneLine]:
        """
        Lines used as vanishing-point evidence (not VP lines, not plumb lines).
        """
        return [l for l in self.lines if l.is_reference]

    def vp_lines(self) -> List[SceneLine]:
        return [l for l in self.lines if l.is_vp_line]

    def plumb_lines(self) -> List[SceneLine]:
        return [l for l in self.lines if l.is_plumb]

    def get_line(self, line_id: int) -> Optional[SceneLine]:
        for l in self.lines:
            if l.line_id == line_id:
                return l
        return None

    def find_line(self, pos: Point, threshold: float = 12.0) -> Optional[SceneLine]:
        """
        First line (in insertion order) closer than ``threshold`` to ``pos``.
        """
        for l in self.lines:
            if point_to_line_distance(pos, l.line) < threshold:
                return l
        return None

    def vp_inside_image(self) -> Optional[bool]:
        """
        Whether the VP lies within the image; ``None`` without a VP.
        """
        if self.vp is None:
            return None
        return self.image_rect.contains(self.vp)

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    def set_image_size(self, width: float, height: float) -> None:
        self.image_rect = Rect.from_size(width, height)

    # ------------------------------------------------------------
    # Version handling
    # ------------------------------------------------------------
    def _commit(self, version: SceneVersion) -> None:
        self._undo.append(self._version)
        self._redo.clear()
        self._version = version

    def _next_id(self) -> int:
        return next(self._ids)

    def _with_vp(
        self, lines: Tuple[SceneLine, ...], vp: Optional[Point], manual: bool
    ) -> SceneVersion:
        """
        Version with ``vp`` installed and VP lines re-anchored if it moved.
        """
        if vp is not None and vp != self._version.vp:
            lines = reanchor_vp_lines(lines, vp, self.image_rect)
        return SceneVersion(lines=lines, vp=vp, vp_manual=manual and vp is not None)

    def _recomputed(self, lines: Tuple[SceneLine, ...]) -> SceneVersion:
        """
        Version for a changed line set: recompute the VP unless it is manual.
        """
        if self._version.vp_manual:
            return SceneVersion(lines=lines, vp=self._version.vp, vp_manual=True)
        refs = [l.line for l in lines if l.is_reference]
        vp = best_fit(refs)
        if vp is None and len(refs) >= 2:
            logger.info("Reference lines are parallel; no vanishing point")
        return self._with_vp(lines, vp, manual=False)

    # ------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------
    def add_reference_line(
        self,
        p1: Point,
        p2: Point,
        confidence: Optional[float] = None,
        ai_detected: bool = False,
    ) -> Optional[SceneLine]:
        """
        Add a reference line through two points.

        Returns the new entry, or ``None`` if the points coincide (nothing is
        added and no history entry is made).
        """
        line = make_line(p1, p2)
        if line is None:
            return None
        entry = SceneLine(
            line_id=self._next_id(),
            line=line,
            kind=LineKind.REFERENCE,
            confidence=confidence,
            ai_detected=ai_detected,
        )
        self._commit(self._recomputed(self.lines + (entry,)))
        return entry

    def accept_candidates(self, candidates: Iterable[CandidateLine]) -> List[SceneLine]:
        """
        Promote suggestions to reference lines in one step.

        The confidence is kept for display; geometry is identical to drawing
        the same endpoints by hand.
        """
        added: List[SceneLine] = []
        for cand in candidates:
            accepted = cand.accepted()
            added.append(
                SceneLine(
                    line_id=self._next_id(),
                    line=accepted.line,
                    kind=LineKind.REFERENCE,
                    confidence=accepted.confidence,
                    ai_detected=True,
                )
            )
        if added:
            self._commit(self._recomputed(self.lines + tuple(added)))
            logger.info("Accepted %d suggested line(s)", len(added))
        return added

    def add_vp_line(self, through: Point) -> Optional[SceneLine]:
        """
        Add a line from the vanishing point through ``through``.

        Raises:
            NoVanishingPointError: If the scene has no vanishing point.
        """
        vp = self.vp
        if vp is None:
            raise NoVanishingPointError("Draw at least two reference lines first.")
        line = make_line(vp, through)
        if line is None:
            return None
        entry = SceneLine(
            line_id=self._next_id(),
            line=line,
            kind=LineKind.VP_LINE,
            source_point=through,
        )
        self._commit(replace(self._version, lines=self.lines + (entry,)))
        return entry

    def add_player_projection(self, body: Point, ground_click: Point) -> Optional[PlayerProjection]:
        """
        Add a plumb line for a player and, with a VP, their offside line.

        Returns ``None`` when no plumb line can be built (ground click at the
        body's height).
        """
        projection = project_player(body, ground_click, self.vp)
        if projection is None:
            return None
        new = [SceneLine(line_id=self._next_id(), line=projection.plumb, kind=LineKind.PLUMB)]
        if projection.offside_line is not None:
            new.append(
                SceneLine(
                    line_id=self._next_id(),
                    line=projection.offside_line,
                    kind=LineKind.VP_LINE,
                    source_point=projection.ground,
                )
            )
        self._commit(replace(self._version, lines=self.lines + tuple(new)))
        return projection

    def remove_line(self, line_id: int) -> bool:
        """
        Remove a line by id. Returns False if no such line exists.
        """
        target = self.get_line(line_id)
        if target is None:
            return False
        remaining = tuple(l for l in self.lines if l.line_id != line_id)
        if target.is_reference:
            self._commit(self._recomputed(remaining))
        else:
            self._commit(replace(self._version, lines=remaining))
        return True

    def set_manual_vp(self, point: Point) -> None:
        """
        Override the vanishing point; it is kept until :meth:`recalculate_vp`.
        """
        self._commit(self._with_vp(self.lines, point, manual=True))

    def nudge_vp(self, dx: float, dy: float) -> bool:
        """
        Move the VP by an offset (keyboard nudging). Makes the VP manual.
        """
        if self.vp is None:
            return False
        self.set_manual_vp(Point(self.vp.x + dx, self.vp.y + dy))
        return True

    def recalculate_vp(self) -> Optional[Point]:
        """
        Clear any manual override and recompute the VP from all reference lines.
        """
        refs = [l.line for l in self.reference_lines()]
        self._commit(self._with_vp(self.lines, best_fit(refs), manual=False))
        return self.vp

    def undo(self) -> bool:
        if not self._undo:
            return False
        self._redo.append(self._version)
        self._version = self._undo.pop()
        return True

    def redo(self) -> bool:
        if not self._redo:
            return False
        self._undo.append(self._version)
        self._version = self._redo.pop()
        return True

    def reset(self, keep_lines: bool = False) -> None:
        """
        Prepare for a new image. Without ``keep_lines`` everything, including
        history, is cleared.
        """
        if keep_lines:
            return
        self._version = SceneVersion()
        self._undo.clear()
        self._redo.clear()

