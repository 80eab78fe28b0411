"""Colour-space helpers: RGB <-> HSV, range membership, distances, sampling."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass

import numpy as np


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RGBColor:
    """8-bit RGB triple."""

    r: int  # 0-255
    g: int  # 0-255
    b: int  # 0-255


@dataclass(frozen=True)
class HSVColor:
    """HSV triple with hue in degrees and saturation/value in percent."""

    h: float  # [0, 360)
    s: float  # [0, 100]
    v: float  # [0, 100]


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


# ---------------------------------------------------------------------------
# Conversions
# ---------------------------------------------------------------------------


def rgb_to_hsv(rgb: RGBColor) -> HSVColor:
    """Convert RGB to HSV.

    Hue is taken from whichever channel is the maximum (red checked first),
    saturation is (max - min) / max and value is max.
    """
    r = rgb.r / 255
    g = rgb.g / 255
    b = rgb.b / 255

    hi = max(r, g, b)
    lo = min(r, g, b)
    delta = hi - lo

    h = 0.0
    s = 0.0
    if delta != 0:
        s = delta / hi
        if hi == r:
            h = ((g - b) / delta + (6 if g < b else 0)) / 6
        elif hi == g:
            h = ((b - r) / delta + 2) / 6
        else:
            h = ((r - g) / delta + 4) / 6

    return HSVColor(h=h * 360, s=s * 100, v=hi * 100)


def hsv_to_rgb(hsv: HSVColor) -> RGBColor:
    """Convert HSV back to 8-bit RGB (sector based on floor(h * 6) mod 6)."""
    h = hsv.h / 360
    s = hsv.s / 100
    v = hsv.v / 100

    i = math.floor(h * 6)
    f = h * 6 - i
    p = v * (1 - s)
    q = v * (1 - f * s)
    t = v * (1 - (1 - f) * s)

    r, g, b = {
        0: (v, t, p),
        1: (q, v, p),
        2: (p, v, t),
        3: (p, q, v),
        4: (t, p, v),
        5: (v, p, q),
    }[i % 6]

    return RGBColor(
        r=_round_half_up(r * 255),
        g=_round_half_up(g * 255),
        b=_round_half_up(b * 255),
    )


def is_color_in_range(color: HSVColor, hsv_min: HSVColor, hsv_max: HSVColor) -> bool:
    """Closed-interval HSV box test; a hue range with min > max wraps past 360."""
    if hsv_min.h <= hsv_max.h:
        hue_ok = hsv_min.h <= color.h <= hsv_max.h
    else:
        # e.g. 340 -> 10 for red
        hue_ok = color.h >= hsv_min.h or color.h <= hsv_max.h

    sat_ok = hsv_min.s <= color.s <= hsv_max.s
    val_ok = hsv_min.v <= color.v <= hsv_max.v
    return hue_ok and sat_ok and val_ok


def hue_difference(h1: float, h2: float) -> float:
    """Shortest angular distance between two hues, in degrees (0-180)."""
    diff = abs(h1 - h2) % 360
    return 360 - diff if diff > 180 else diff


def color_distance(c1: HSVColor, c2: HSVColor) -> float:
    """Weighted Euclidean distance in HSV; hue counts double."""
    hue = hue_difference(c1.h, c2.h) / 180
    sat = abs(c1.s - c2.s) / 100
    val = abs(c1.v - c2.v) / 100
    return math.sqrt((hue * 2) ** 2 + sat**2 + val**2)


# ---------------------------------------------------------------------------
# Hex strings
# ---------------------------------------------------------------------------

_HEX_RE = re.compile(r"^#?([a-f\d]{2})([a-f\d]{2})([a-f\d]{2})$", re.IGNORECASE)


def rgb_to_hex(rgb: RGBColor) -> str:
    return "#{:02x}{:02x}{:02x}".format(
        _round_half_up(rgb.r), _round_half_up(rgb.g), _round_half_up(rgb.b)
    )


def hex_to_rgb(value: str) -> RGBColor:
    m = _HEX_RE.match(value)
    if not m:
        raise ValueError(f"Invalid hex color: {value}")
    return RGBColor(*(int(part, 16) for part in m.groups()))


# ---------------------------------------------------------------------------
# Sampling
# ---------------------------------------------------------------------------


def dominant_color(rgba: np.ndarray, x: float, y: float, radius: int) -> RGBColor:
    """Mean RGB of all in-frame pixels within ``radius`` of (x, y).

    Returns black when the disk has no in-frame pixels.
    """
    h, w = rgba.shape[:2]
    cx, cy = _round_half_up(x), _round_half_up(y)
    radius = max(0, int(radius))

    x0, x1 = max(0, cx - radius), min(w, cx + radius + 1)
    y0, y1 = max(0, cy - radius), min(h, cy + radius + 1)
    if x0 >= x1 or y0 >= y1:
        return RGBColor(0, 0, 0)

    yy, xx = np.mgrid[y0:y1, x0:x1]
    disk = (xx - cx) ** 2 + (yy - cy) ** 2 <= radius * radius
    pixels = rgba[y0:y1, x0:x1, :3][disk]
    if pixels.size == 0:
        return RGBColor(0, 0, 0)

    mean = pixels.astype(np.float64).mean(axis=0)
    return RGBColor(*(_round_half_up(c) for c in mean))


def auto_white_balance(rgb: RGBColor) -> RGBColor:
    """Gray-world correction: scale channels so their mean maps to 128."""
    avg = (rgb.r + rgb.g + rgb.b) / 3
    if avg == 0:
        return rgb
    return RGBColor(
        r=min(255, _round_half_up(rgb.r / avg * 128)),
        g=min(255, _round_half_up(rgb.g / avg * 128)),
        b=min(255, _round_half_up(rgb.b / avg * 128)),
    )
