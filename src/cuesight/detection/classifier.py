"""Ball colour classification and the pool solid/stripe pattern refiner."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, replace

import numpy as np

from cuesight.detection.colors import (
    HSVColor,
    RGBColor,
    dominant_color,
    hue_difference,
    is_color_in_range,
    rgb_to_hsv,
)
from cuesight.detection.ranges import (
    BALL_COLORS,
    UNKNOWN_BALL_COLOR,
    ColorRange,
    GameMode,
    get_color_ranges,
)

# Inner disk used for the dominant colour; avoids rim highlights and shadows.
DOMINANT_DISK_FRACTION = 0.6
MIN_MATCH_CONFIDENCE = 0.3

FALLBACK_CONFIDENCE = 0.5
FALLBACK_NAME = "Unknown (likely Cue Ball)"

STRIPE_SAMPLES = 16
STRIPE_RING_FRACTION = 0.7
STRIPE_VALUE_THRESHOLD = 30.0
STRIPE_MIN_TRANSITIONS = 4
STRIPE_CONFIDENCE_FACTOR = 0.9


@dataclass(frozen=True)
class Classification:
    """Outcome of classifying one ball."""

    ball_type: str
    confidence: float
    color_name: str
    hex_color: str


def _fallback() -> Classification:
    return Classification(
        ball_type="cue",
        confidence=FALLBACK_CONFIDENCE,
        color_name=FALLBACK_NAME,
        hex_color=BALL_COLORS["cue"],
    )


# ---------------------------------------------------------------------------
# Colour matching
# ---------------------------------------------------------------------------


def _hue_span_and_center(rng: ColorRange) -> tuple[float, float]:
    lo, hi = rng.hsv_min.h, rng.hsv_max.h
    if lo <= hi:
        span = hi - lo
    else:
        span = hi + 360 - lo
    return span, (lo + span / 2) % 360


def color_confidence(color: HSVColor, rng: ColorRange) -> float:
    """Score how centrally ``color`` sits inside ``rng``.

    Each component's distance from the range midpoint is normalized by the
    range's span (a zero span counts as 1). Hue is circular and weighted
    twice; a range spanning the whole hue circle is achromatic and ignores
    hue. The distance maps to ``max(0, 1 - d / 2)`` scaled by the prior.
    """
    hue_span, hue_center = _hue_span_and_center(rng)
    if hue_span >= 360:
        hue_dist = 0.0
    else:
        hue_dist = hue_difference(color.h, hue_center) / (hue_span or 1)

    sat_span = rng.hsv_max.s - rng.hsv_min.s
    val_span = rng.hsv_max.v - rng.hsv_min.v
    sat_center = (rng.hsv_min.s + rng.hsv_max.s) / 2
    val_center = (rng.hsv_min.v + rng.hsv_max.v) / 2
    sat_dist = abs(color.s - sat_center) / (sat_span or 1)
    val_dist = abs(color.v - val_center) / (val_span or 1)

    distance = math.sqrt((hue_dist * 2) ** 2 + sat_dist**2 + val_dist**2)
    return max(0.0, 1 - distance / 2) * rng.confidence


def match_color(color: HSVColor, ranges: Sequence[ColorRange]) -> Classification:
    """Pick the highest-confidence rule containing ``color``."""
    best: ColorRange | None = None
    best_conf = 0.0
    for rng in ranges:
        if not is_color_in_range(color, rng.hsv_min, rng.hsv_max):
            continue
        conf = color_confidence(color, rng)
        if conf > best_conf:
            best, best_conf = rng, conf

    # White is the least harmful guess when nothing fits
    if best is None or best_conf < MIN_MATCH_CONFIDENCE:
        return _fallback()

    return Classification(
        ball_type=best.ball_type,
        confidence=best_conf,
        color_name=best.name,
        hex_color=BALL_COLORS.get(best.ball_type, UNKNOWN_BALL_COLOR),
    )


def classify_ball_color(
    rgba: np.ndarray,
    x: float,
    y: float,
    radius: float,
    game_mode: GameMode | str,
) -> Classification:
    """Classify the ball at (x, y) from the mean colour of its inner disk."""
    rgb = dominant_color(rgba, x, y, math.floor(radius * DOMINANT_DISK_FRACTION))
    return match_color(rgb_to_hsv(rgb), get_color_ranges(game_mode))


# ---------------------------------------------------------------------------
# Stripe detection (pool)
# ---------------------------------------------------------------------------


def count_value_transitions(
    values: Sequence[float], threshold: float = STRIPE_VALUE_THRESHOLD
) -> int:
    """Count consecutive samples whose brightness (V) jumps by more than threshold."""
    return sum(1 for a, b in zip(values, values[1:]) if abs(a - b) > threshold)


def is_striped(
    values: Sequence[float],
    threshold: float = STRIPE_VALUE_THRESHOLD,
    min_transitions: int = STRIPE_MIN_TRANSITIONS,
) -> bool:
    return count_value_transitions(values, threshold) >= min_transitions


def sample_ring_values(
    rgba: np.ndarray,
    x: float,
    y: float,
    radius: float,
    samples: int = STRIPE_SAMPLES,
    ring_fraction: float = STRIPE_RING_FRACTION,
) -> list[float]:
    """V of in-frame points evenly spaced on a ring of ``ring_fraction * radius``."""
    h, w = rgba.shape[:2]
    values: list[float] = []
    for i in range(samples):
        angle = i / samples * math.pi * 2
        sx = math.floor(x + math.cos(angle) * radius * ring_fraction + 0.5)
        sy = math.floor(y + math.sin(angle) * radius * ring_fraction + 0.5)
        if 0 <= sx < w and 0 <= sy < h:
            r, g, b = (int(c) for c in rgba[sy, sx, :3])
            values.append(rgb_to_hsv(RGBColor(r, g, b)).v)
    return values


def has_striped_pattern(
    rgba: np.ndarray,
    x: float,
    y: float,
    radius: float,
    samples: int = STRIPE_SAMPLES,
) -> bool:
    """Coarse periodicity test for a striped ball; cannot recover the number."""
    values = sample_ring_values(rgba, x, y, radius, samples=samples)
    if len(values) < samples / 2:
        return False
    return is_striped(values)


def _striped_name(name: str) -> str:
    if "Striped" in name:
        return name
    return name.replace("Ball", "Striped Ball")


def classify_with_pattern(
    rgba: np.ndarray,
    x: float,
    y: float,
    radius: float,
    game_mode: GameMode | str,
) -> Classification:
    """Colour classification, then solid/stripe refinement in pool mode."""
    base = classify_ball_color(rgba, x, y, radius, game_mode)

    if GameMode(game_mode) is not GameMode.POOL or base.ball_type in ("cue", "eight"):
        return base

    if has_striped_pattern(rgba, x, y, radius):
        return replace(
            base,
            ball_type="stripes",
            color_name=_striped_name(base.color_name),
            confidence=base.confidence * STRIPE_CONFIDENCE_FACTOR,
            hex_color=BALL_COLORS["stripes"],
        )
    return replace(base, ball_type="solids", hex_color=BALL_COLORS["solids"])
