import math

import numpy as np
import pytest

from pintograph.core.errors import GeometricInfeasibility, NumericDegeneracy
from pintograph.core.geometry import (
    distance,
    extend_rod,
    intersect_circles,
    intersect_circles_both,
    scale_about,
)

FEASIBLE_CASES = [
    ((0.0, 0.0), 5.0, (6.0, 0.0), 5.0),
    ((1.0, -2.0), 3.0, (2.5, 1.0), 4.0),
    ((-4.0, 7.0), 10.0, (3.0, 3.0), 2.5),
    ((0.0, 0.0), 1e-3, (1.5e-3, 0.0), 1e-3),
    ((1e3, 1e3), 800.0, (1.5e3, 0.0), 900.0),
]


@pytest.mark.parametrize("p1,l1,p2,l2", FEASIBLE_CASES)
@pytest.mark.parametrize("branch", [0, 1])
def test_intersection_lies_on_both_circles(p1, l1, p2, l2, branch):
    x = intersect_circles(p1, l1, p2, l2, branch)
    assert distance(x, p1) == pytest.approx(l1, rel=1e-9)
    assert distance(x, p2) == pytest.approx(l2, rel=1e-9)


@pytest.mark.parametrize("p1,l1,p2,l2", FEASIBLE_CASES)
def test_branches_mirror_across_anchor_line(p1, l1, p2, l2):
    b0, b1 = intersect_circles_both(p1, l1, p2, l2)
    ux, uy = p2[0] - p1[0], p2[1] - p1[1]

    def side(p):
        return ux * (p[1] - p1[1]) - uy * (p[0] - p1[0])

    # Same foot on the anchor line, opposite perpendicular offsets.
    mid = ((b0[0] + b1[0]) / 2, (b0[1] + b1[1]) / 2)
    assert side(mid) == pytest.approx(0.0, abs=1e-6 * max(1.0, l1 * l2))
    assert side(b0) == pytest.approx(-side(b1), rel=1e-9)


def test_branch_zero_is_clockwise_of_anchor_direction():
    # Anchors along +x: branch 0 lands below the axis, branch 1 above.
    b0 = intersect_circles((3.0, 0.0), 10.0, (12.0, 0.0), 10.0, 0)
    b1 = intersect_circles((3.0, 0.0), 10.0, (12.0, 0.0), 10.0, 1)
    assert b0 == pytest.approx((7.5, -math.sqrt(79.75)))
    assert b1 == pytest.approx((7.5, math.sqrt(79.75)))


@pytest.mark.parametrize("scale", [1e-6, 1.0, 1e6])
def test_too_far_apart_is_infeasible(scale):
    with pytest.raises(GeometricInfeasibility):
        intersect_circles((0.0, 0.0), 1.0 * scale, (3.0 * scale, 0.0), 1.5 * scale, 0)


@pytest.mark.parametrize("scale", [1e-6, 1.0, 1e6])
def test_nested_circles_are_infeasible(scale):
    with pytest.raises(GeometricInfeasibility) as info:
        intersect_circles((0.0, 0.0), 5.0 * scale, (1.0 * scale, 0.0), 1.0 * scale, 1)
    assert info.value.l1 == pytest.approx(5.0 * scale)
    assert info.value.l2 == pytest.approx(1.0 * scale)


def test_coincident_anchors_raise_degeneracy():
    with pytest.raises(NumericDegeneracy):
        intersect_circles((2.0, 2.0), 1.0, (2.0, 2.0), 1.0, 0)
    assert issubclass(NumericDegeneracy, GeometricInfeasibility)


@pytest.mark.parametrize("p2,l1,l2", [((4.0, 0.0), 1.5, 2.5), ((2.0, 0.0), 5.0, 3.0)])
def test_tangent_circles_give_single_point(p2, l1, l2):
    # Exact tangency (outer and inner) must not fail on a tiny negative radicand.
    b0, b1 = intersect_circles_both((0.0, 0.0), l1, p2, l2)
    assert b0 == pytest.approx(b1)
    assert distance(b0, (0.0, 0.0)) == pytest.approx(l1)


def test_tangent_with_roundoff():
    p1 = (0.1, 0.2)
    p2 = (0.1 + 0.3, 0.2 + 0.4)
    d = distance(p1, p2)
    x = intersect_circles(p1, d * 0.7, p2, d * 0.3, 0)
    assert all(math.isfinite(v) for v in x)


def test_bad_branch_rejected():
    with pytest.raises(ValueError):
        intersect_circles((0.0, 0.0), 1.0, (1.0, 0.0), 1.0, 2)


@pytest.mark.parametrize("base,frm", [((1.0, 2.0), (5.0, -3.0)), ((0.0, 0.0), (0.0, 0.0)), ((-7.5, 3.0), (2.0, 2.0))])
def test_extend_with_zero_ratio_is_base(base, frm):
    assert extend_rod(base, frm, 0.0) == base


def test_extend_is_collinear_beyond_base():
    base, frm = (2.0, 1.0), (0.0, 0.0)
    p = extend_rod(base, frm, 1.5)
    assert p == pytest.approx((5.0, 2.5))
    assert distance(base, p) == pytest.approx(1.5 * distance(frm, base))


def test_scale_about_center():
    pts = scale_about([(1.0, 1.0), (3.0, -1.0)], (1.0, 0.0), 2.0)
    np.testing.assert_allclose(pts, [[1.0, 2.0], [5.0, -2.0]])


@pytest.mark.parametrize(
    "p2,l1,l2",
    [
        ((math.nan, 0.0), 5.0, 5.0),
        ((3.0, 0.0), math.inf, math.inf),
        ((3.0, 0.0), math.nan, 2.0),
        ((math.inf, 0.0), 5.0, 5.0),
    ],
)
def test_non_finite_inputs_are_infeasible(p2, l1, l2):
    with pytest.raises(GeometricInfeasibility, match="non-finite"):
        intersect_circles((0.0, 0.0), l1, p2, l2, 0)
