"""End-to-end ball detection: load -> edges -> circles -> classify."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable

from cuesight.detection.circles import CircleCandidate, find_circles
from cuesight.detection.classifier import Classification, classify_with_pattern
from cuesight.detection.edges import edge_map
from cuesight.detection.loader import ImageSource, load_image
from cuesight.detection.params import DEFAULT_PARAMS, DetectionParams
from cuesight.detection.ranges import GameMode
from cuesight.geometry import clamp

log = logging.getLogger(__name__)

ProgressCallback = Callable[[float, str], None]


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass
class BallDetection:
    """One classified ball, in original image coordinates."""

    id: str
    position: tuple[float, float]
    radius: float
    confidence: float  # classifier confidence x geometric score
    ball_type: str
    color: str  # hex, e.g. "#FFFFFF"
    number: int | None = None  # ball numbers are never read off the ball
    color_name: str = ""


@dataclass
class DetectionResult:
    """Everything handed back to the caller for one image."""

    balls: list[BallDetection] = field(default_factory=list)
    image_width: int = 0  # original width
    image_height: int = 0  # original height
    timestamp: int = 0  # epoch milliseconds
    processing_time_ms: float = 0.0
    scale: float = 1.0  # working / original


def to_detection(
    index: int, circle: CircleCandidate, classification: Classification, scale: float
) -> BallDetection:
    """Map a working-space circle back to original image coordinates."""
    return BallDetection(
        id=f"ball-{index}",
        position=(circle.x / scale, circle.y / scale),
        radius=circle.radius / scale,
        confidence=clamp(classification.confidence * circle.score, 0.0, 1.0),
        ball_type=classification.ball_type,
        color=classification.hex_color,
        color_name=classification.color_name,
    )


def detect_balls(
    image: ImageSource,
    game_mode: GameMode | str,
    progress_callback: ProgressCallback | None = None,
    params: DetectionParams | None = None,
) -> DetectionResult:
    """Locate and classify the balls in a table photo.

    Stateless: every call decodes the image afresh and returns a new result.
    An empty ``balls`` list means processing worked but found nothing.
    Raises ``ImageDecodeError`` / ``FileNotFoundError`` when the image cannot
    be loaded and ``ValueError`` for an unknown game mode.
    """
    params = params or DEFAULT_PARAMS
    mode = GameMode(game_mode)
    start = time.perf_counter()

    def _progress(pct: float, stage: str) -> None:
        if progress_callback:
            progress_callback(pct, stage)

    _progress(10, "Loading image...")
    loaded = load_image(image, max_dimension=params.max_dimension)
    rgba = loaded.pixels

    _progress(20, "Preprocessing image...")
    edges = edge_map(rgba, blur_radius=params.blur_radius, operator=params.edge_operator)

    _progress(40, "Detecting circles...")
    circles = find_circles(rgba, edges, params)

    _progress(60, "Classifying ball colors...")
    balls: list[BallDetection] = []
    for i, circle in enumerate(circles):
        classification = classify_with_pattern(rgba, circle.x, circle.y, circle.radius, mode)
        balls.append(to_detection(i, circle, classification, loaded.scale))
        _progress(60 + (i + 1) / len(circles) * 30, f"Classified {i + 1}/{len(circles)} balls")

    elapsed_ms = (time.perf_counter() - start) * 1000
    _progress(100, "Detection complete!")
    log.debug(
        "Detected %d balls on %dx%d working image in %.0f ms",
        len(balls), loaded.width, loaded.height, elapsed_ms,
    )

    return DetectionResult(
        balls=balls,
        image_width=loaded.original_width,
        image_height=loaded.original_height,
        timestamp=int(time.time() * 1000),
        processing_time_ms=elapsed_ms,
        scale=loaded.scale,
    )


class BallDetector:
    """Detection pipeline bound to a fixed parameter set."""

    def __init__(self, params: DetectionParams | None = None):
        self.params = params or DEFAULT_PARAMS

    def detect(
        self,
        image: ImageSource,
        game_mode: GameMode | str = GameMode.POOL,
        progress_callback: ProgressCallback | None = None,
    ) -> DetectionResult:
        return detect_balls(image, game_mode, progress_callback=progress_callback, params=self.params)
