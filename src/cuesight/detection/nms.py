"""Non-maximum suppression over circle candidates."""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from cuesight.detection.circles import CircleCandidate


def non_max_suppression(
    candidates: Iterable[CircleCandidate], overlap_factor: float = 0.6
) -> list[CircleCandidate]:
    """Greedy NMS: keep the best circle of every overlapping cluster.

    Candidates are visited by descending score; one is kept only if its
    center is at least ``(r1 + r2) * overlap_factor`` from every kept center.
    The output is disjoint under that rule and still sorted by score, so
    running it again changes nothing.
    """
    ordered = sorted(candidates, key=lambda c: c.score, reverse=True)
    kept: list[CircleCandidate] = []

    # Kept circles mirrored into arrays so each test is one vector op
    kx = np.empty(len(ordered))
    ky = np.empty(len(ordered))
    kr = np.empty(len(ordered))
    n = 0
    for cand in ordered:
        if n:
            dist = np.hypot(kx[:n] - cand.x, ky[:n] - cand.y)
            if np.any(dist < (kr[:n] + cand.radius) * overlap_factor):
                continue
        kx[n], ky[n], kr[n] = cand.x, cand.y, cand.radius
        n += 1
        kept.append(cand)
    return kept


def select_top(candidates: Iterable[CircleCandidate], max_balls: int = 22) -> list[CircleCandidate]:
    """Highest-scoring ``max_balls`` candidates, best first."""
    return sorted(candidates, key=lambda c: c.score, reverse=True)[:max_balls]
