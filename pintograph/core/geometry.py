# -*- coding: utf-8 -*-
"""Geometry helpers.

Planar points are plain ``(x, y)`` tuples. The two solver primitives used by
the linkage chain live here:

- :func:`intersect_circles` places a joint that sits at fixed rod lengths from
  two anchors (circle-circle intersection, law of cosines).
- :func:`extend_rod` places a joint that continues a rigid rod past one of its
  ends.
"""

from __future__ import annotations

import math
from typing import Sequence, Tuple

import numpy as np

from .errors import GeometricInfeasibility, NumericDegeneracy

Point = Tuple[float, float]

EPS = 1e-12


def distance(p1: Point, p2: Point) -> float:
    return math.hypot(p2[0] - p1[0], p2[1] - p1[1])


def polar_point(center: Point, radius: float, angle: float) -> Point:
    return center[0] + radius * math.cos(angle), center[1] + radius * math.sin(angle)


def _check_feasible(d: float, l1: float, l2: float) -> None:
    if not (math.isfinite(d) and math.isfinite(l1) and math.isfinite(l2)):
        raise GeometricInfeasibility(
            f"non-finite input: |P1P2|={d!r}, l1={l1!r}, l2={l2!r}", d, l1, l2
        )
    if d <= EPS:
        raise NumericDegeneracy("anchors coincide", d, l1, l2)
    # Relative slack so exactly tangent circles are accepted despite round-off.
    tol = EPS * max(1.0, d, l1, l2)
    if d > l1 + l2 + tol:
        raise GeometricInfeasibility(
            f"rods too short: |P1P2|={d:.6g} > {l1:.6g}+{l2:.6g}", d, l1, l2
        )
    if d < abs(l1 - l2) - tol:
        raise GeometricInfeasibility(
            f"one circle inside the other: |P1P2|={d:.6g} < |{l1:.6g}-{l2:.6g}|", d, l1, l2
        )


def intersect_circles_both(p1: Point, l1: float, p2: Point, l2: float) -> Tuple[Point, Point]:
    """Return both points at distance ``l1`` from ``p1`` and ``l2`` from ``p2``.

    The first entry is branch 0, the second branch 1. They are mirror images
    across the line p1-p2 and coincide when the circles are tangent.

    Raises GeometricInfeasibility (or its NumericDegeneracy subtype) when the
    circles do not meet.
    """
    dx = p2[0] - p1[0]
    dy = p2[1] - p1[1]
    d = math.hypot(dx, dy)
    l1 = float(l1)
    l2 = float(l2)
    _check_feasible(d, l1, l2)

    a = (l1 * l1 - l2 * l2 + d * d) / (2.0 * d)
    h = math.sqrt(max(l1 * l1 - a * a, 0.0))
    bx = p1[0] + (a / d) * dx
    by = p1[1] + (a / d) * dy
    ox = dy * (h / d)
    oy = -dx * (h / d)
    return (bx + ox, by + oy), (bx - ox, by - oy)


def intersect_circles(p1: Point, l1: float, p2: Point, l2: float, branch: int = 0) -> Point:
    if branch not in (0, 1):
        raise ValueError(f"branch must be 0 or 1, got {branch!r}")
    return intersect_circles_both(p1, l1, p2, l2)[branch]


def extend_rod(base: Point, frm: Point, ratio: float) -> Point:
    """Point on the line frm->base, past base, at ``ratio`` * |frm base|."""
    return (
        base[0] + ratio * (base[0] - frm[0]),
        base[1] + ratio * (base[1] - frm[1]),
    )


def scale_about(points: Sequence[Point] | np.ndarray, center: Point, factor: float) -> np.ndarray:
    """Uniformly scale an (n, 2) point array about ``center``."""
    arr = np.asarray(points, dtype=float).reshape(-1, 2)
    c = np.asarray(center, dtype=float)
    return c + float(factor) * (arr - c)
