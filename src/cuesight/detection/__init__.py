"""Ball detection: edge map + circle search + HSV colour classification."""

from cuesight.detection.circles import CircleCandidate, find_circles, score_circle
from cuesight.detection.classifier import Classification, classify_with_pattern
from cuesight.detection.detector import (
    BallDetection,
    BallDetector,
    DetectionResult,
    detect_balls,
)
from cuesight.detection.loader import ImageDecodeError, LoadedImage, load_image
from cuesight.detection.params import DEFAULT_PARAMS, DetectionParams
from cuesight.detection.ranges import GameMode
from cuesight.detection.result_io import load_result, save_result

__all__ = [
    "BallDetection",
    "BallDetector",
    "CircleCandidate",
    "Classification",
    "DEFAULT_PARAMS",
    "DetectionParams",
    "DetectionResult",
    "GameMode",
    "ImageDecodeError",
    "LoadedImage",
    "classify_with_pattern",
    "detect_balls",
    "find_circles",
    "load_image",
    "load_result",
    "save_result",
    "score_circle",
]
