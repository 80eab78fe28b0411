"""Small 2-D geometry helpers."""

from __future__ import annotations

import math

Point = tuple[float, float]

# Slopes closer than this are treated as parallel
PARALLEL_EPS = 1e-4


def distance(p1: Point, p2: Point) -> float:
    return math.hypot(p2[0] - p1[0], p2[1] - p1[1])


def is_point_in_circle(point: Point, center: Point, radius: float) -> bool:
    return distance(point, center) <= radius


def circles_intersect(c1: Point, r1: float, c2: Point, r2: float) -> bool:
    return distance(c1, c2) <= r1 + r2


def line_intersection(p1: Point, angle1: float, p2: Point, angle2: float) -> Point | None:
    """Intersection of two lines given as (point, angle in radians).

    Returns None for (near-)parallel lines.
    """
    m1 = math.tan(angle1)
    m2 = math.tan(angle2)
    if abs(m1 - m2) < PARALLEL_EPS:
        return None

    b1 = p1[1] - m1 * p1[0]
    b2 = p2[1] - m2 * p2[0]
    x = (b2 - b1) / (m1 - m2)
    return (x, m1 * x + b1)


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))
