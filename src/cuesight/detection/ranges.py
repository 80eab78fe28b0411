"""Per-game-mode HSV classification tables."""

from __future__ import annotations

import enum
from dataclasses import dataclass

from cuesight.detection.colors import HSVColor


class GameMode(enum.Enum):
    POOL = "pool"
    SNOOKER = "snooker"


@dataclass(frozen=True)
class ColorRange:
    """A named HSV box mapped to a ball type.

    ``confidence`` is a static prior that scales the computed match score.
    Ranges within one table may overlap; the classifier keeps the best score.
    """

    name: str
    ball_type: str
    hsv_min: HSVColor
    hsv_max: HSVColor
    confidence: float


def _range(name: str, ball_type: str, lo: tuple, hi: tuple, confidence: float) -> ColorRange:
    return ColorRange(name, ball_type, HSVColor(*lo), HSVColor(*hi), confidence)


# ---------------------------------------------------------------------------
# Pool (8-ball)
# ---------------------------------------------------------------------------

POOL_COLOR_RANGES: tuple[ColorRange, ...] = (
    _range("Cue Ball", "cue", (0, 0, 80), (360, 15, 100), 0.9),
    _range("8-Ball", "eight", (0, 0, 0), (360, 25, 25), 0.85),
    _range("Ball 1 (Yellow)", "solids", (45, 60, 70), (65, 100, 100), 0.8),
    _range("Ball 2 (Blue)", "solids", (200, 50, 40), (240, 100, 90), 0.8),
    _range("Ball 3 (Red)", "solids", (0, 60, 40), (15, 100, 90), 0.8),
    _range("Ball 4 (Purple)", "solids", (270, 40, 30), (300, 80, 70), 0.75),
    _range("Ball 5 (Orange)", "solids", (15, 60, 60), (35, 100, 100), 0.8),
    _range("Ball 6 (Green)", "solids", (90, 40, 30), (150, 80, 70), 0.75),
    _range("Ball 7 (Maroon)", "solids", (340, 50, 25), (360, 90, 50), 0.7),
    # Catch-all for 9-15; solid/stripe is settled by the pattern refiner
    _range("Striped Ball", "stripes", (0, 20, 30), (360, 100, 100), 0.6),
)

# ---------------------------------------------------------------------------
# Snooker
# ---------------------------------------------------------------------------

SNOOKER_COLOR_RANGES: tuple[ColorRange, ...] = (
    _range("Cue Ball", "cue", (0, 0, 80), (360, 15, 100), 0.9),
    _range("Red Ball", "red", (0, 70, 30), (15, 100, 70), 0.85),
    _range("Yellow Ball", "yellow", (50, 70, 80), (70, 100, 100), 0.85),
    _range("Green Ball", "green", (100, 50, 35), (160, 90, 75), 0.8),
    _range("Brown Ball", "brown", (20, 40, 25), (40, 80, 55), 0.75),
    _range("Blue Ball", "blue", (200, 60, 45), (240, 100, 85), 0.85),
    _range("Pink Ball", "pink", (320, 30, 70), (350, 70, 95), 0.8),
    _range("Black Ball", "black", (0, 0, 0), (360, 25, 20), 0.85),
)

BALL_COLORS: dict[str, str] = {
    "cue": "#FFFFFF",
    "eight": "#000000",
    "solids": "#FF6B35",
    "stripes": "#F7B801",
    "red": "#DC143C",
    "yellow": "#FFD700",
    "green": "#228B22",
    "brown": "#8B4513",
    "blue": "#4169E1",
    "pink": "#FF69B4",
    "black": "#000000",
}

UNKNOWN_BALL_COLOR = "#888888"

SNOOKER_POINTS: dict[str, int] = {
    "red": 1,
    "yellow": 2,
    "green": 3,
    "brown": 4,
    "blue": 5,
    "pink": 6,
    "black": 7,
}


def get_color_ranges(game_mode: GameMode | str) -> tuple[ColorRange, ...]:
    """Return the (immutable) rule table for a game mode (``GameMode`` or its value)."""
    mode = GameMode(game_mode)
    return POOL_COLOR_RANGES if mode is GameMode.POOL else SNOOKER_COLOR_RANGES


def snooker_points(ball_type: str) -> int | None:
    """Point value of a snooker ball type, or None (cue, pool types)."""
    return SNOOKER_POINTS.get(ball_type)
