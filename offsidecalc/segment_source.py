"""
Raw line-segment sources (the edge/Hough detector boundary).

The reducer only needs a list of :class:`RawSegment` objects. This module
wraps the producers of that list behind a small interface:

- :class:`HoughSegmentSource` runs OpenCV (blur, Canny, probabilistic Hough)
  on an image and keeps near-horizontal segments.
- :class:`StaticSegmentSource` returns a fixed list, e.g. loaded from JSON
  with :func:`load_segments_json`.

OpenCV process settings are applied through an explicitly owned
:class:`OpenCVHandle` that is passed to the source, with a one-time,
thread-safe initialization.
"""

from __future__ import annotations

import json
import logging
import math
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional, Protocol, Sequence

import cv2
import numpy as np

from .config import DetectionConfig
from .data_structures import RawSegment
from .detection import is_near_horizontal
from .errors import DetectionError

logger = logging.getLogger(__name__)

Image = np.ndarray[Any, np.dtype[np.uint8]]


class SegmentSource(Protocol):
    """
    Protocol for raw segment producers.
    """

    def detect(self, image: Optional[Image]) -> List[RawSegment]:
        """
        Return near-horizontal raw segments found in ``image``.

        Raises:
            DetectionError: If the detector is unavailable or fails.
        """
        ...


class OpenCVHandle:
    """
    Owned handle for OpenCV process-wide settings.

    :meth:`ensure_initialized` applies the settings once; later calls (from
    any thread) return immediately.

    Args:
        num_threads: Value for ``cv2.setNumThreads``; ``None`` keeps OpenCV's
            default.
        use_optimized: Value for ``cv2.setUseOptimized``.
    """

    def __init__(self, num_threads: Optional[int] = None, use_optimized: bool = True) -> None:
        self.num_threads = num_threads
        self.use_optimized = use_optimized
        self._lock = threading.Lock()
        self._initialized = False
        self.init_count = 0

    @property
    def initialized(self) -> bool:
        return self._initialized

    def ensure_initialized(self) -> None:
        if self._initialized:
            return
        with self._lock:
            if self._initialized:
                return
            try:
                cv2.setUseOptimized(self.use_optimized)
                if self.num_threads is not None:
                    cv2.setNumThreads(int(self.num_threads))
            except cv2.error as exc:
                raise DetectionError(f"OpenCV initialization failed: {exc}") from exc
            self.init_count += 1
            self._initialized = True
            logger.info("OpenCV %s initialized", cv2.__version__)


@dataclass
class HoughSegmentSource:
    """
    Detect near-horizontal segments with Canny + probabilistic Hough.

    Attributes:
        handle: OpenCV handle, initialized on first use.
        config: Detection parameters.
    """

    handle: OpenCVHandle
    config: DetectionConfig = field(default_factory=DetectionConfig)

    def detect(self, image: Optional[Image]) -> List[RawSegment]:
        if image is None or image.size == 0:
            raise DetectionError("No image to run line detection on.")
        self.handle.ensure_initialized()
        cfg = self.config
        try:
            if image.ndim == 3:
                gray = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
            else:
                gray = image
            k = int(cfg.blur_kernel)
            gray = cv2.GaussianBlur(gray, (k, k), 0)
            edges = cv2.Canny(gray, cfg.canny_low, cfg.canny_high)
            lines = cv2.HoughLinesP(
                edges,
                1,
                np.pi / 180,
                int(cfg.hough_threshold),
                minLineLength=cfg.min_line_length,
                maxLineGap=cfg.max_line_gap,
            )
        except cv2.error as exc:
            raise DetectionError(f"Line detection failed: {exc}") from exc

        if lines is None:
            return []

        segments: List[RawSegment] = []
        for x1, y1, x2, y2 in lines.reshape(-1, 4):
            seg = RawSegment.from_endpoints(x1, y1, x2, y2)
            if is_near_horizontal(seg.angle, cfg.angle_tolerance_deg):
                segments.append(seg)
        logger.debug("Hough returned %d segments, %d near-horizontal", len(lines), len(segments))
        return segments


@dataclass
class StaticSegmentSource:
    """
    Source that returns a fixed list of segments, ignoring the image.

    Like :class:`HoughSegmentSource`, only near-horizontal segments are
    returned.
    """

    segments: Sequence[RawSegment] = field(default_factory=list)
    config: DetectionConfig = field(default_factory=DetectionConfig)

    def detect(self, image: Optional[Image] = None) -> List[RawSegment]:
        tolerance = self.config.angle_tolerance_deg
        return [s for s in self.segments if is_near_horizontal(s.angle, tolerance)]


def segments_from_rows(rows: Sequence[Sequence[float]]) -> List[RawSegment]:
    """
    Build segments from ``[x1, y1, x2, y2]`` rows.
    """
    segments: List[RawSegment] = []
    for row in rows:
        if len(row) != 4:
            raise ValueError(f"Expected [x1, y1, x2, y2], got {row!r}")
        x1, y1, x2, y2 = (float(v) for v in row)
        if not all(math.isfinite(v) for v in (x1, y1, x2, y2)):
            raise ValueError(f"Non-finite coordinate in {row!r}")
        segments.append(RawSegment.from_endpoints(x1, y1, x2, y2))
    return segments


def load_segments_json(path: Path | str) -> List[RawSegment]:
    """
    Load raw segments from JSON.

    Accepted shapes are a list of ``[x1, y1, x2, y2]`` rows, or a mapping
    with such a list under ``"segments"``.
    """
    path = Path(path)
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("segments", [])
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a list of segments.")
    return segments_from_rows(data)
