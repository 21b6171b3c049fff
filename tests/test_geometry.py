import logging
import math

import numpy as np
import pytest

from offsidecalc.data_structures import Point, Rect
from offsidecalc.utils.geometry import (
    clip_to_rectangle,
    farther_point,
    intersect,
    make_line,
    point_to_line_distance,
    point_to_line_distances,
)


def random_pairs(n=200, seed=7):
    rng = np.random.default_rng(seed)
    coords = rng.uniform(-1000.0, 1000.0, size=(n, 4))
    return [(Point(x1, y1), Point(x2, y2)) for x1, y1, x2, y2 in coords]


def test_make_line_is_unit_normalized():
    for p1, p2 in random_pairs():
        line = make_line(p1, p2)
        assert line is not None
        assert line.a ** 2 + line.b ** 2 == pytest.approx(1.0, abs=1e-6)


def test_defining_points_lie_on_line():
    for p1, p2 in random_pairs():
        line = make_line(p1, p2)
        assert point_to_line_distance(p1, line) == pytest.approx(0.0, abs=1e-6)
        assert point_to_line_distance(p2, line) == pytest.approx(0.0, abs=1e-6)


def test_make_line_coefficients_for_horizontal_line():
    line = make_line(Point(0.0, 5.0), Point(10.0, 5.0))
    assert line.a == pytest.approx(0.0)
    assert line.b == pytest.approx(1.0)
    assert line.c == pytest.approx(-5.0)


def test_make_line_rejects_coincident_points():
    assert make_line(Point(3.0, 4.0), Point(3.0, 4.0)) is None
    assert make_line(Point(3.0, 4.0), Point(3.0 + 1e-12, 4.0)) is None


def test_make_line_stores_own_copies_of_endpoints():
    p1, p2 = Point(1.0, 2.0), Point(5.0, 7.0)
    line = make_line(p1, p2)
    assert line.p1 == p1 and line.p2 == p2
    assert line.p1 is not p1 and line.p2 is not p2


def test_point_to_line_distance_is_euclidean():
    line = make_line(Point(0.0, 5.0), Point(10.0, 5.0))
    assert point_to_line_distance(Point(3.0, 9.0), line) == pytest.approx(4.0)

    diagonal = make_line(Point(0.0, 0.0), Point(1.0, 1.0))
    assert point_to_line_distance(Point(1.0, 0.0), diagonal) == pytest.approx(math.sqrt(0.5))


def test_point_to_line_distances_matches_scalar_version():
    line = make_line(Point(0.0, 0.0), Point(4.0, 3.0))
    pts = np.array([[0.0, 0.0], [3.0, -4.0], [10.0, 2.0]])
    expected = [point_to_line_distance(Point(x, y), line) for x, y in pts]
    np.testing.assert_allclose(point_to_line_distances(pts, line), expected)


def test_intersect_axes_at_origin():
    x_axis = make_line(Point(0.0, 0.0), Point(10.0, 0.0))
    y_axis = make_line(Point(0.0, 0.0), Point(0.0, 10.0))
    p = intersect(x_axis, y_axis)
    assert p.x == pytest.approx(0.0, abs=1e-9)
    assert p.y == pytest.approx(0.0, abs=1e-9)


def test_intersect_general_lines():
    diagonal = make_line(Point(0.0, 0.0), Point(1.0, 1.0))
    horizontal = make_line(Point(-3.0, 5.0), Point(8.0, 5.0))
    p = intersect(diagonal, horizontal)
    assert (p.x, p.y) == (pytest.approx(5.0), pytest.approx(5.0))


def test_intersect_is_symmetric():
    pairs = random_pairs(40, seed=11)
    for (p1, p2), (q1, q2) in zip(pairs[::2], pairs[1::2]):
        l1, l2 = make_line(p1, p2), make_line(q1, q2)
        forward, backward = intersect(l1, l2), intersect(l2, l1)
        if forward is None:
            assert backward is None
            continue
        assert forward.x == pytest.approx(backward.x, rel=1e-9, abs=1e-9)
        assert forward.y == pytest.approx(backward.y, rel=1e-9, abs=1e-9)


def test_intersect_rejects_parallel_lines():
    l1 = make_line(Point(0.0, 0.0), Point(10.0, 0.0))
    l2 = make_line(Point(0.0, 3.0), Point(10.0, 3.0))
    assert intersect(l1, l2) is None
    assert intersect(l1, l1) is None


def test_clip_horizontal_line_to_rectangle():
    line = make_line(Point(-50.0, 5.0), Point(50.0, 5.0))
    seg = clip_to_rectangle(line, Rect(0.0, 0.0, 100.0, 100.0))
    assert seg is not None
    (x1, y1), (x2, y2) = seg[0].as_tuple(), seg[1].as_tuple()
    assert (x1, y1) == (pytest.approx(0.0), pytest.approx(5.0))
    assert (x2, y2) == (pytest.approx(100.0), pytest.approx(5.0))


def test_clip_vertical_line_to_rectangle():
    line = make_line(Point(30.0, -10.0), Point(30.0, 10.0))
    seg = clip_to_rectangle(line, Rect(0.0, 0.0, 100.0, 100.0))
    assert seg is not None
    assert seg[0].as_tuple() == (pytest.approx(30.0), pytest.approx(0.0))
    assert seg[1].as_tuple() == (pytest.approx(30.0), pytest.approx(100.0))


def test_clip_line_outside_rectangle_returns_none():
    rect = Rect(0.0, 0.0, 100.0, 100.0)
    assert clip_to_rectangle(make_line(Point(-50.0, 150.0), Point(50.0, 150.0)), rect) is None
    assert clip_to_rectangle(make_line(Point(-20.0, 0.0), Point(-20.0, 10.0)), rect) is None


def test_clip_sloped_line_crossing_left_and_bottom():
    # y = x + 50 enters on the left edge at (0, 50) and leaves through the bottom at (50, 100).
    line = make_line(Point(0.0, 50.0), Point(10.0, 60.0))
    seg = clip_to_rectangle(line, Rect(0.0, 0.0, 100.0, 100.0))
    assert seg is not None
    assert seg[0].as_tuple() == (pytest.approx(0.0), pytest.approx(50.0))
    assert seg[1].as_tuple() == (pytest.approx(50.0), pytest.approx(100.0))


def test_farther_point():
    a, b = Point(0.0, 0.0), Point(10.0, 0.0)
    assert farther_point((a, b), Point(1.0, 0.0)) == b
    assert farther_point((a, b), Point(9.0, 0.0)) == a
    assert farther_point((a, b), Point(5.0, 0.0)) == b


def test_make_line_logs_degenerate_reason(caplog):
    caplog.set_level(logging.DEBUG, logger="offsidecalc.utils.geometry")
    assert make_line(Point(1.0, 1.0), Point(1.0, 1.0)) is None
    assert "degenerate_line" in caplog.text


def test_line_length_and_direction():
    line = make_line(Point(0.0, 0.0), Point(3.0, -3.0))
    assert line.length == pytest.approx(math.hypot(3.0, 3.0))
    assert line.angle_deg == pytest.approx(-45.0)


def test_rect_from_size():
    rect = Rect.from_size(640, 480)
    assert (rect.width, rect.height) == (640.0, 480.0)
    assert rect.contains(Point(640.0, 0.0))
    assert not rect.contains(Point(-0.5, 10.0))
