import math

import numpy as np
import pytest

from offsidecalc.data_structures import Point
from offsidecalc.errors import FailureReason
from offsidecalc.utils.geometry import make_line
from offsidecalc.vanishing_point import (
    best_fit,
    estimate_vanishing_point,
    lines_from_points,
    residuals,
)


def perturbed_lines(pairs, noise):
    """
    Lines through pairs whose four coordinates are shifted by ``noise`` rows.
    """
    lines = []
    for (p1, p2), (d1x, d1y, d2x, d2y) in zip(pairs, noise):
        lines.append(make_line(Point(p1.x + d1x, p1.y + d1y), Point(p2.x + d2x, p2.y + d2y)))
    return lines


def test_fewer_than_two_lines_gives_no_point():
    assert best_fit([]) is None
    single = make_line(Point(0.0, 0.0), Point(10.0, 0.0))
    assert best_fit([single]) is None
    estimate = estimate_vanishing_point([single])
    assert estimate.failure is FailureReason.INSUFFICIENT_EVIDENCE
    assert not estimate.ok


def test_two_lines_use_exact_intersection():
    x_axis = make_line(Point(0.0, 0.0), Point(10.0, 0.0))
    y_axis = make_line(Point(0.0, 0.0), Point(0.0, 10.0))
    vp = best_fit([x_axis, y_axis])
    assert vp.x == pytest.approx(0.0, abs=1e-6)
    assert vp.y == pytest.approx(0.0, abs=1e-6)


def test_two_parallel_lines_report_no_intersection():
    l1 = make_line(Point(0.0, 0.0), Point(10.0, 0.0))
    l2 = make_line(Point(0.0, 5.0), Point(10.0, 5.0))
    estimate = estimate_vanishing_point([l1, l2])
    assert estimate.point is None
    assert estimate.failure is FailureReason.NO_INTERSECTION


def test_three_concurrent_lines_recover_common_point(converging_pairs):
    lines = lines_from_points(converging_pairs)
    assert len(lines) == 3
    vp = best_fit(lines)
    assert vp.x == pytest.approx(100.0, abs=1e-6)
    assert vp.y == pytest.approx(50.0, abs=1e-6)

    estimate = estimate_vanishing_point(lines)
    assert estimate.line_count == 3
    assert estimate.rms_residual == pytest.approx(0.0, abs=1e-6)


def test_line_order_does_not_matter(converging_pairs):
    lines = perturbed_lines(
        converging_pairs, np.random.default_rng(3).normal(0.0, 2.0, size=(3, 4))
    )
    forward = best_fit(lines)
    backward = best_fit(list(reversed(lines)))
    assert forward.x == pytest.approx(backward.x, abs=1e-6)
    assert forward.y == pytest.approx(backward.y, abs=1e-6)


def test_parallel_lines_give_singular_system():
    lines = [make_line(Point(0.0, y), Point(10.0, y)) for y in (0.0, 10.0, 20.0)]
    estimate = estimate_vanishing_point(lines)
    assert estimate.point is None
    assert estimate.failure is FailureReason.SINGULAR_SYSTEM


def test_perturbation_shifts_result_continuously(converging_pairs):
    base_noise = np.random.default_rng(42).normal(size=(3, 4))
    shifts = []
    for scale in (1e-4, 1e-3, 1e-2, 1e-1):
        vp = best_fit(perturbed_lines(converging_pairs, base_noise * scale))
        shift = math.hypot(vp.x - 100.0, vp.y - 50.0)
        shifts.append(shift)
        assert shift < 50.0 * scale
    assert shifts == sorted(shifts)


def test_noisy_copies_stay_close_to_true_point(converging_pairs):
    rng = np.random.default_rng(0)
    lines = lines_from_points(converging_pairs)
    for _ in range(3):
        lines += perturbed_lines(converging_pairs, rng.normal(0.0, 0.5, size=(3, 4)))
    vp = best_fit(lines)
    assert math.hypot(vp.x - 100.0, vp.y - 50.0) < 5.0


def test_least_squares_point_minimizes_residuals(converging_pairs):
    lines = perturbed_lines(
        converging_pairs, np.random.default_rng(5).normal(0.0, 3.0, size=(3, 4))
    )
    vp = best_fit(lines)
    best = float(np.sum(residuals(vp, lines) ** 2))
    for dx, dy in ((0.5, 0.0), (-0.5, 0.0), (0.0, 0.5), (0.0, -0.5)):
        moved = Point(vp.x + dx, vp.y + dy)
        assert float(np.sum(residuals(moved, lines) ** 2)) > best


def test_lines_from_points_skips_degenerate_pairs():
    p = Point(1.0, 1.0)
    lines = lines_from_points([(p, p), (Point(0.0, 0.0), Point(1.0, 0.0))])
    assert len(lines) == 1
