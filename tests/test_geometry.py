"""Tests for cuesight.geometry."""

import math

import pytest

from cuesight.geometry import (
    circles_intersect,
    clamp,
    distance,
    is_point_in_circle,
    line_intersection,
)


def test_distance():
    assert distance((0, 0), (3, 4)) == 5
    assert distance((1, 1), (1, 1)) == 0


def test_point_in_circle_boundary_inclusive():
    assert is_point_in_circle((3, 4), (0, 0), 5)
    assert not is_point_in_circle((3, 4.1), (0, 0), 5)


def test_circles_intersect():
    assert circles_intersect((0, 0), 5, (10, 0), 5)
    assert not circles_intersect((0, 0), 5, (10.5, 0), 5)


def test_line_intersection():
    p = line_intersection((0, 0), math.pi / 4, (2, 0), 3 * math.pi / 4)
    assert p is not None
    assert p[0] == pytest.approx(1)
    assert p[1] == pytest.approx(1)


def test_parallel_lines_return_none():
    assert line_intersection((0, 0), 0.3, (5, 5), 0.3) is None
    assert line_intersection((0, 0), 0.0, (0, 1), math.pi) is None


@pytest.mark.parametrize("value, expected", [(-1, 0), (0.5, 0.5), (2, 1)])
def test_clamp(value, expected):
    assert clamp(value, 0, 1) == expected
