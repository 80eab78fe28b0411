"""JSON serialization for DetectionResult."""

from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path

from cuesight.detection.detector import BallDetection, DetectionResult


def result_to_dict(result: DetectionResult) -> dict:
    data = asdict(result)
    for ball in data["balls"]:
        ball["position"] = {"x": ball["position"][0], "y": ball["position"][1]}
    return data


def save_result(result: DetectionResult, path: str | Path) -> None:
    """Save a DetectionResult to JSON."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(result_to_dict(result), indent=2))


def load_result(path: str | Path) -> DetectionResult:
    """Load a DetectionResult from JSON."""
    data = json.loads(Path(path).read_text())

    balls = [
        BallDetection(
            id=b["id"],
            position=(b["position"]["x"], b["position"]["y"]),
            radius=b["radius"],
            confidence=b["confidence"],
            ball_type=b["ball_type"],
            color=b["color"],
            number=b.get("number"),
            color_name=b.get("color_name", ""),
        )
        for b in data["balls"]
    ]

    return DetectionResult(
        balls=balls,
        image_width=data["image_width"],
        image_height=data["image_height"],
        timestamp=data["timestamp"],
        processing_time_ms=data["processing_time_ms"],
        scale=data.get("scale", 1.0),
    )
