"""Draw detection overlays on the original (unscaled) photo."""

from __future__ import annotations

import cv2
import numpy as np

from cuesight.detection.colors import hex_to_rgb
from cuesight.detection.detector import DetectionResult

# Outline used for balls whose own colour would vanish on a dark overlay
_DARK_OUTLINE_BGR = (255, 255, 255)


def _bgr(hex_color: str) -> tuple[int, int, int]:
    rgb = hex_to_rgb(hex_color)
    if rgb.r + rgb.g + rgb.b < 60:
        return _DARK_OUTLINE_BGR
    return (rgb.b, rgb.g, rgb.r)


def draw_detections(image_bgr: np.ndarray, result: DetectionResult) -> np.ndarray:
    """Return a copy of ``image_bgr`` with one circle and label per ball."""
    vis = image_bgr.copy()
    for ball in result.balls:
        cx, cy = int(round(ball.position[0])), int(round(ball.position[1]))
        radius = max(1, int(round(ball.radius)))
        color = _bgr(ball.color)
        thickness = max(2, radius // 10)
        cv2.circle(vis, (cx, cy), radius, color, thickness)
        label = f"{ball.ball_type} {ball.confidence:.2f}"
        cv2.putText(
            vis, label, (cx - radius, max(12, cy - radius - 4)),
            cv2.FONT_HERSHEY_SIMPLEX, 0.5, color, 1, cv2.LINE_AA,
        )
    return vis
