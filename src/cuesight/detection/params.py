"""Tunable detection parameters.

The defaults are heuristics, not calibrated measurements: there is no camera
calibration, so ball size is only assumed to be a plausible fraction of the
frame. Every constant here is meant to be validated against representative
photos rather than treated as fixed.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class DetectionParams:
    # Loader
    max_dimension: int = 800  # working resolution cap (long side)

    # Edge extraction
    blur_radius: int = 2  # 0 disables the pre-blur
    edge_operator: str = "sobel"  # "sobel" or "forward"

    # Radius range / grid, as fractions of min(width, height)
    min_radius_fraction: float = 0.015
    max_radius_fraction: float = 0.15
    grid_step_fraction: float = 0.8  # grid step = min_radius * this
    radius_step_fraction: float = 0.1  # radius step = r * this (at least 1 px)

    # Circle scoring
    perimeter_samples: int = 24
    edge_threshold: int = 40
    color_diff_divisor: float = 120.0
    edge_weight: float = 0.7
    color_weight: float = 0.3
    min_edge_ratio: float = 0.2
    accept_threshold: float = 0.3
    sized_accept_threshold: float = 0.25  # phase 2, radius already known

    # Cue-ball-first search
    two_phase: bool = True
    cue_min_brightness: float = 180.0
    cue_max_channel_delta: float = 30.0
    reference_radius_tolerance: float = 0.2
    cue_exclusion_factor: float = 1.5

    # 1 px refinement of coarse hits before selection; accept thresholds
    # apply to refined scores
    refine: bool = True
    coarse_threshold: float = 0.15
    refine_limit: int = 300  # coarse candidates refined per search, best first

    # Suppression / output
    nms_overlap_factor: float = 0.6
    max_balls: int = 22  # 15 reds + 6 colours + cue


DEFAULT_PARAMS = DetectionParams()
