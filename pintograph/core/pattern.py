# -*- coding: utf-8 -*-
"""Two-disk epicycle pattern (the idealised pantograph).

The pen position is the vector sum of two pins rotating about a common
origin, one per disk. No rods are involved, so every phase is feasible.
"""

from __future__ import annotations

import math

import numpy as np

from .errors import ConfigurationError
from .geometry import Point


def epicycle_point(r1: float, s1: float, r2: float, s2: float, t: float) -> Point:
    x = r1 * math.cos(s1 * t) + r2 * math.cos(s2 * t)
    y = r1 * math.sin(s1 * t) + r2 * math.sin(s2 * t)
    return x, y


def epicycle_pattern(r1: float, s1: float, r2: float, s2: float, steps: float) -> np.ndarray:
    """Sample one full turn (t in [0, 2*pi]) as an (n+1, 2) polyline.

    ``steps`` is rounded to the nearest integer.
    """
    n = int(round(float(steps)))
    if n < 1:
        raise ConfigurationError(f"Pattern needs at least one step, got {steps!r}")
    t = np.linspace(0.0, 2.0 * np.pi, n + 1)
    x = r1 * np.cos(s1 * t) + r2 * np.cos(s2 * t)
    y = r1 * np.sin(s1 * t) + r2 * np.sin(s2 * t)
    return np.column_stack((x, y))
