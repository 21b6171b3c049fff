from __future__ import annotations

import math
from typing import List

import pytest

from offsidecalc.data_structures import Point, RawSegment


def segment_at_angle(x: float, y: float, length: float, angle_deg: float) -> RawSegment:
    """
    Raw segment starting at ``(x, y)`` with the given length and direction.
    """
    rad = math.radians(angle_deg)
    return RawSegment.from_endpoints(x, y, x + length * math.cos(rad), y + length * math.sin(rad))


@pytest.fixture
def converging_pairs() -> List[tuple]:
    """
    Three point pairs whose lines meet exactly at (100, 50).
    """
    vp = Point(100.0, 50.0)
    return [
        (Point(0.0, 0.0), vp),
        (Point(0.0, 100.0), vp),
        (Point(300.0, 0.0), vp),
    ]
