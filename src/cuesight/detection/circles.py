"""Circle candidate search: pixel heuristics, perimeter scoring, grid search.

The search is a Hough-like scan without an accumulator: every (x, y, r) on a
coarse grid is scored directly from its perimeter. Scoring is vectorized
over all grid centers of one radius at a time.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import numpy as np

from cuesight.detection.nms import non_max_suppression, select_top
from cuesight.detection.params import DEFAULT_PARAMS, DetectionParams

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CircleCandidate:
    """A provisional ball hypothesis in working-resolution pixels."""

    x: int
    y: int
    radius: int
    score: float  # 0.0-1.0


# ---------------------------------------------------------------------------
# Pixel heuristics (scalars or numpy arrays)
# ---------------------------------------------------------------------------


def _channels(r, g, b) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    return (
        np.asarray(r, dtype=np.int32),
        np.asarray(g, dtype=np.int32),
        np.asarray(b, dtype=np.int32),
    )


def brightness(r, g, b) -> np.ndarray:
    """Plain channel mean, not luminance."""
    r, g, b = _channels(r, g, b)
    return (r + g + b) / 3


def is_table_felt(r, g, b) -> np.ndarray:
    """Cyan/turquoise (pool) or green (snooker) cloth."""
    r, g, b = _channels(r, g, b)
    bright = (r + g + b) / 3
    cyan = (g > 100) & (b > 100) & (r < 100) & (bright > 100)
    green = (g > 120) & (g > 1.5 * r) & (g > 1.2 * b) & (bright > 80)
    return cyan | green


def is_pocket(r, g, b, near_border=False) -> np.ndarray:
    """Pocket or deep shadow; slightly brighter pixels count near the rails."""
    bright = brightness(r, g, b)
    return (bright < 15) | (np.asarray(near_border) & (bright < 25))


def is_ball_color(r, g, b) -> np.ndarray:
    """Permissive ball-colour profile: white, saturated colour, or near-black.

    The bands are wide on purpose; pool-hall lighting varies and a pixel
    rejected here cannot be recovered later.
    """
    r, g, b = _channels(r, g, b)
    bright = (r + g + b) / 3
    rg = np.abs(r - g)
    gb = np.abs(g - b)

    white = (bright > 180) & (rg < 40) & (gb < 40)
    spread = np.maximum(np.maximum(r, g), b) - np.minimum(np.minimum(r, g), b)
    colored = (spread > 30) & (bright > 40) & (bright < 230) & ~is_table_felt(r, g, b)
    dark = (bright < 70) & (bright > 10) & (rg < 25) & (gb < 25)
    return white | colored | dark


def is_cue_seed(r, g, b, params: DetectionParams = DEFAULT_PARAMS) -> np.ndarray:
    """Near-white, low-saturation pixel that may be the cue ball's center."""
    r, g, b = _channels(r, g, b)
    return (
        ((r + g + b) / 3 > params.cue_min_brightness)
        & (np.abs(r - g) < params.cue_max_channel_delta)
        & (np.abs(g - b) < params.cue_max_channel_delta)
    )


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------


def score_circles(
    rgba: np.ndarray,
    edges: np.ndarray,
    xs: np.ndarray,
    ys: np.ndarray,
    radius: int,
    params: DetectionParams = DEFAULT_PARAMS,
) -> np.ndarray:
    """Score circles of one radius centred at each (xs[i], ys[i]).

    score = edge_weight * edge_ratio + color_weight * consistency, where
    edge_ratio is the fraction of perimeter samples on an edge and
    consistency is 1 - mean |RGB diff| to the center / divisor, floored at 0.
    Rejected centers (transparent, pocket, felt, not ball-coloured, too few
    edges, no perimeter in frame) score 0. Centers must lie inside the frame.
    """
    xs = np.asarray(xs, dtype=np.int64).ravel()
    ys = np.asarray(ys, dtype=np.int64).ravel()
    if xs.size == 0:
        return np.zeros(0, dtype=np.float64)

    h, w = edges.shape
    n = params.perimeter_samples
    angles = np.arange(n) / n * 2 * np.pi
    px = np.floor(xs[:, None] + np.cos(angles)[None, :] * radius + 0.5).astype(np.int64)
    py = np.floor(ys[:, None] + np.sin(angles)[None, :] * radius + 0.5).astype(np.int64)
    inside = (px >= 0) & (px < w) & (py >= 0) & (py < h)
    px = px.clip(0, w - 1)
    py = py.clip(0, h - 1)
    n_inside = inside.sum(axis=1)

    center = rgba[ys, xs].astype(np.int32)
    cr, cg, cb, ca = center[:, 0], center[:, 1], center[:, 2], center[:, 3]

    edge_hits = ((edges[py, px] > params.edge_threshold) & inside).sum(axis=1)
    edge_ratio = edge_hits / n

    diff = np.abs(rgba[py, px, :3].astype(np.int32) - center[:, None, :3]).sum(axis=2)
    diff_sum = (diff * inside).sum(axis=1)
    avg_diff = diff_sum / np.maximum(n_inside, 1)
    consistency = np.clip(1 - avg_diff / params.color_diff_divisor, 0.0, 1.0)

    margin = 2 * radius
    near_border = (xs < margin) | (xs > w - margin) | (ys < margin) | (ys > h - margin)

    rejected = (
        (ca < 200)
        | is_pocket(cr, cg, cb, near_border)
        | is_table_felt(cr, cg, cb)
        | ~is_ball_color(cr, cg, cb)
        | (n_inside == 0)
        | (edge_ratio < params.min_edge_ratio)
    )
    score = params.edge_weight * edge_ratio + params.color_weight * consistency
    return np.where(rejected, 0.0, score)


def score_circle(
    rgba: np.ndarray,
    edges: np.ndarray,
    x: int,
    y: int,
    radius: int,
    params: DetectionParams = DEFAULT_PARAMS,
) -> float:
    """Score a single circle; see ``score_circles``."""
    return float(score_circles(rgba, edges, [x], [y], radius, params)[0])


# ---------------------------------------------------------------------------
# Grid helpers
# ---------------------------------------------------------------------------


def radius_bounds(width: int, height: int, params: DetectionParams = DEFAULT_PARAMS) -> tuple[int, int]:
    side = min(width, height)
    return (
        math.floor(side * params.min_radius_fraction),
        math.floor(side * params.max_radius_fraction),
    )


def radius_range(r_min: int, r_max: int, params: DetectionParams = DEFAULT_PARAMS) -> list[int]:
    """Radii from r_min to r_max, stepping by a fraction of the current radius."""
    radii = []
    r = max(1, r_min)
    while r <= r_max:
        radii.append(r)
        r += max(1, int(r * params.radius_step_fraction))
    return radii


def grid_step(min_radius: int, params: DetectionParams = DEFAULT_PARAMS) -> int:
    return max(1, int(min_radius * params.grid_step_fraction))


def grid_centers(width: int, height: int, border: int, step: int) -> tuple[np.ndarray, np.ndarray]:
    """Flattened (xs, ys) of a grid that keeps ``border`` px off every edge."""
    gx, gy = np.meshgrid(
        np.arange(border, width - border, step, dtype=np.int64),
        np.arange(border, height - border, step, dtype=np.int64),
    )
    return gx.ravel(), gy.ravel()


def _collect(
    rgba: np.ndarray,
    edges: np.ndarray,
    xs: np.ndarray,
    ys: np.ndarray,
    radii: list[int],
    threshold: float,
    params: DetectionParams,
) -> list[CircleCandidate]:
    found: list[CircleCandidate] = []
    if xs.size == 0:
        return found
    for r in radii:
        scores = score_circles(rgba, edges, xs, ys, r, params)
        for i in np.flatnonzero(scores > threshold):
            found.append(CircleCandidate(int(xs[i]), int(ys[i]), r, float(scores[i])))
    return found


# ---------------------------------------------------------------------------
# Refinement
# ---------------------------------------------------------------------------


def _radius_window(radius: int, params: DetectionParams) -> int:
    return max(2, int(radius * params.radius_step_fraction))


def refine_candidate(
    rgba: np.ndarray,
    edges: np.ndarray,
    cand: CircleCandidate,
    params: DetectionParams = DEFAULT_PARAMS,
) -> CircleCandidate:
    """Re-score a candidate's neighbourhood at 1 px and keep the best circle.

    The window spans one grid step around the center and
    max(2, radius step) around the radius. Returns ``cand`` unchanged when
    nothing nearby scores higher.
    """
    h, w = edges.shape
    r_min, _ = radius_bounds(w, h, params)
    step = grid_step(r_min, params)
    r_window = _radius_window(cand.radius, params)

    gx, gy = np.meshgrid(
        np.arange(max(0, cand.x - step), min(w, cand.x + step + 1), dtype=np.int64),
        np.arange(max(0, cand.y - step), min(h, cand.y + step + 1), dtype=np.int64),
    )
    xs, ys = gx.ravel(), gy.ravel()

    best = cand
    for r in range(max(1, cand.radius - r_window), cand.radius + r_window + 1):
        scores = score_circles(rgba, edges, xs, ys, r, params)
        i = int(np.argmax(scores))
        if scores[i] > best.score:
            best = CircleCandidate(int(xs[i]), int(ys[i]), r, float(scores[i]))
    return best


def refine_candidates(
    rgba: np.ndarray,
    edges: np.ndarray,
    candidates: list[CircleCandidate],
    params: DetectionParams = DEFAULT_PARAMS,
) -> list[CircleCandidate]:
    """Refine coarse candidates, best coarse score first.

    A ball centred between grid points is only seen at reduced coarse
    scores, where fragments inside or beside it can outrank it, so every
    coarse hit is refined before anything is selected or suppressed.
    Hits sharing a center with an already refined one and lying inside its
    radius window are skipped; at most ``params.refine_limit`` are refined.
    """
    ordered = sorted(candidates, key=lambda c: c.score, reverse=True)
    done: dict[tuple[int, int], list[int]] = {}
    refined: list[CircleCandidate] = []
    for cand in ordered:
        if len(refined) >= params.refine_limit:
            break
        seen = done.setdefault((cand.x, cand.y), [])
        if any(abs(cand.radius - r) <= _radius_window(r, params) for r in seen):
            continue
        seen.append(cand.radius)
        refined.append(refine_candidate(rgba, edges, cand, params))
    return refined


def _search(
    rgba: np.ndarray,
    edges: np.ndarray,
    xs: np.ndarray,
    ys: np.ndarray,
    radii: list[int],
    threshold: float,
    params: DetectionParams,
) -> list[CircleCandidate]:
    """Coarse grid scan, then refinement; ``threshold`` applies to final scores."""
    if not params.refine:
        return _collect(rgba, edges, xs, ys, radii, threshold, params)

    coarse = _collect(rgba, edges, xs, ys, radii, min(threshold, params.coarse_threshold), params)
    refined = refine_candidates(rgba, edges, coarse, params)
    log.debug("Refined %d of %d coarse candidates", len(refined), len(coarse))
    return [c for c in refined if c.score > threshold]


# ---------------------------------------------------------------------------
# Search strategies
# ---------------------------------------------------------------------------


def find_cue_ball(
    rgba: np.ndarray, edges: np.ndarray, params: DetectionParams = DEFAULT_PARAMS
) -> CircleCandidate | None:
    """Phase 1: best-scoring circle centred near a near-white grid pixel."""
    h, w = edges.shape
    r_min, r_max = radius_bounds(w, h, params)
    if r_max < max(1, r_min):
        return None

    xs, ys = grid_centers(w, h, r_max, grid_step(r_min, params))
    if xs.size == 0:
        return None
    seed_rgb = rgba[ys, xs, :3]
    seeds = is_cue_seed(seed_rgb[:, 0], seed_rgb[:, 1], seed_rgb[:, 2], params)
    xs, ys = xs[seeds], ys[seeds]

    candidates = _search(
        rgba, edges, xs, ys, radius_range(r_min, r_max, params), params.accept_threshold, params
    )
    if not candidates:
        return None
    return max(candidates, key=lambda c: c.score)


def find_sized_circles(
    rgba: np.ndarray,
    edges: np.ndarray,
    reference: CircleCandidate,
    params: DetectionParams = DEFAULT_PARAMS,
) -> list[CircleCandidate]:
    """Phase 2: search every other grid point near the reference radius.

    Balls on one table share a size, so radii are limited to
    +-``reference_radius_tolerance`` of the cue ball's radius.
    """
    h, w = edges.shape
    r_min, _ = radius_bounds(w, h, params)
    tol = params.reference_radius_tolerance
    r_lo = max(1, math.floor(reference.radius * (1 - tol)))
    r_hi = math.ceil(reference.radius * (1 + tol))

    xs, ys = grid_centers(w, h, r_hi, grid_step(r_min, params))
    away = np.hypot(xs - reference.x, ys - reference.y) >= reference.radius * params.cue_exclusion_factor
    xs, ys = xs[away], ys[away]

    return _search(
        rgba, edges, xs, ys, radius_range(r_lo, r_hi, params), params.sized_accept_threshold, params
    )


def find_circles_standard(
    rgba: np.ndarray, edges: np.ndarray, params: DetectionParams = DEFAULT_PARAMS
) -> list[CircleCandidate]:
    """Single-phase search over the full radius range."""
    h, w = edges.shape
    r_min, r_max = radius_bounds(w, h, params)
    if r_max < max(1, r_min):
        return []
    xs, ys = grid_centers(w, h, r_max, grid_step(r_min, params))
    return _search(
        rgba, edges, xs, ys, radius_range(r_min, r_max, params), params.accept_threshold, params
    )


def find_circles(
    rgba: np.ndarray, edges: np.ndarray, params: DetectionParams = DEFAULT_PARAMS
) -> list[CircleCandidate]:
    """Full candidate search: two-phase (or single-phase) scan, then NMS.

    Candidates are already refined when they reach suppression, so the
    reference ball and the NMS order both use 1 px scores. Returns at most
    ``params.max_balls`` disjoint circles, best first.
    """
    h, w = edges.shape
    log.debug("Circle search on %dx%d, radius bounds %s", w, h, radius_bounds(w, h, params))

    if params.two_phase:
        cue = find_cue_ball(rgba, edges, params)
        if cue is None:
            log.info("No cue ball found; falling back to full-range search")
            candidates = find_circles_standard(rgba, edges, params)
        else:
            log.debug("Reference ball at (%d, %d) r=%d score=%.2f", cue.x, cue.y, cue.radius, cue.score)
            candidates = [cue, *find_sized_circles(rgba, edges, cue, params)]
    else:
        candidates = find_circles_standard(rgba, edges, params)

    kept = non_max_suppression(candidates, params.nms_overlap_factor)
    log.debug("Candidates: %d before NMS, %d after", len(candidates), len(kept))
    return select_top(kept, params.max_balls)
