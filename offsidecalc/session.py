"""
Editing session: the caller that connects detection to the scene.

The session owns the scene and a segment source. It allows at most one
detection run at a time, keeps the current suggestions, and promotes the ones
the user accepts into the scene.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from .config import Config
from .confidence import average_confidence
from .data_structures import CandidateLine, Point, SceneLine
from .detection import reduce_segments, select_suggestions
from .errors import DetectionInProgressError
from .scene import Scene
from .segment_source import Image, SegmentSource

logger = logging.getLogger(__name__)


class EditingSession:
    """
    One user's editing session on one photograph.

    Args:
        source: Producer of raw segments.
        config: Session configuration.
        scene: Scene to edit; a new one is created if omitted.
    """

    def __init__(
        self,
        source: SegmentSource,
        config: Optional[Config] = None,
        scene: Optional[Scene] = None,
    ) -> None:
        self.source = source
        self.config = config or Config()
        self.scene = scene or Scene()
        self._suggestions: List[CandidateLine] = []
        self._detecting = False

    @property
    def suggestions(self) -> List[CandidateLine]:
        return list(self._suggestions)

    @property
    def is_detecting(self) -> bool:
        return self._detecting

    @property
    def average_confidence(self) -> float:
        return average_confidence(self._suggestions)

    def load_image(self, width: float, height: float, keep_lines: bool = False) -> None:
        """
        Switch to a new photograph of the given size.
        """
        self.scene.reset(keep_lines=keep_lines)
        self.scene.set_image_size(width, height)
        self._suggestions = []

    def run_detection(self, image: Optional[Image] = None) -> List[CandidateLine]:
        """
        Detect, reduce, and select line suggestions.

        Raises:
            DetectionInProgressError: If a run is already in flight.
            DetectionError: If the source fails. Suggestions are cleared on
                any error before it propagates.
        """
        if self._detecting:
            raise DetectionInProgressError("A line detection is already running.")
        self._detecting = True
        try:
            segments = self.source.detect(image)
            ranked = reduce_segments(segments, self.config.detection)
            self._suggestions = select_suggestions(ranked, self.config.detection)
        except Exception:
            self._suggestions = []
            logger.exception("Line detection failed")
            raise
        finally:
            self._detecting = False

        logger.info(
            "Detection produced %d suggestion(s) from %d segment(s), average confidence %.2f",
            len(self._suggestions),
            len(segments),
            self.average_confidence,
        )
        return self.suggestions

    def accept_suggestions(self, selected: Optional[Sequence[CandidateLine]] = None) -> int:
        """
        Move suggestions into the scene as reference lines.

        Args:
            selected: Subset to accept; all current suggestions when omitted.

        Returns:
            Number of lines added.
        """
        chosen = list(self._suggestions if selected is None else selected)
        added = self.scene.accept_candidates(chosen)
        self._suggestions = []
        return len(added)

    def reject_suggestions(self) -> None:
        self._suggestions = []

    def pick_line(self, pos: Point) -> Optional[SceneLine]:
        """
        Line under a click, using the configured hit threshold.
        """
        return self.scene.find_line(pos, threshold=self.config.hit_threshold_px)
