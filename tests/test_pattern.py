import math

import numpy as np
import pytest

from pintograph.core.errors import ConfigurationError
from pintograph.core.pattern import epicycle_pattern, epicycle_point


def test_point_is_sum_of_two_rotations():
    assert epicycle_point(3.0, 1.0, 2.0, -1.5, 0.0) == (5.0, 0.0)
    x, y = epicycle_point(3.0, 1.0, 2.0, 2.0, math.pi / 2)
    assert (x, y) == pytest.approx((-2.0, 3.0))


def test_pattern_shape_and_closure():
    pts = epicycle_pattern(3.0, 1.0, 2.0, -3.0, 100)
    assert pts.shape == (101, 2)
    np.testing.assert_allclose(pts[0], pts[-1], atol=1e-12)
    np.testing.assert_allclose(pts[0], [5.0, 0.0])


def test_pattern_matches_point_function():
    pts = epicycle_pattern(1.5, 2.0, 0.5, 7.0, 8)
    t = 3 * 2 * math.pi / 8
    assert tuple(pts[3]) == pytest.approx(epicycle_point(1.5, 2.0, 0.5, 7.0, t))


def test_steps_are_rounded():
    assert epicycle_pattern(1.0, 1.0, 1.0, 2.0, 2.6).shape == (4, 2)


@pytest.mark.parametrize("steps", [0, 0.4, -3])
def test_too_few_steps(steps):
    with pytest.raises(ConfigurationError):
        epicycle_pattern(1.0, 1.0, 1.0, 2.0, steps)
