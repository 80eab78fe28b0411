"""Smoke tests to verify the package is importable and CLI is wired up."""

import json
import subprocess
import sys

import cv2
import numpy as np
from typer.testing import CliRunner

from cuesight.cli import app

runner = CliRunner()


def _write_table(path, with_ball=True):
    frame = np.full((300, 300, 3), (160, 150, 20), dtype=np.uint8)  # BGR cyan felt
    if with_ball:
        cv2.circle(frame, (150, 150), 25, (255, 255, 255), -1)
    cv2.imwrite(str(path), frame)
    return path


def test_import():
    import cuesight
    assert cuesight.__version__ == "0.1.0"


def test_cli_help():
    result = subprocess.run(
        [sys.executable, "-m", "cuesight.cli", "--help"],
        capture_output=True,
        text=True,
    )
    assert result.returncode == 0
    assert "detect" in result.stdout.lower()


def test_detect_writes_json(tmp_path):
    image = _write_table(tmp_path / "table.png")
    out = tmp_path / "detections.json"
    result = runner.invoke(app, ["detect", str(image), "-o", str(out)])

    assert result.exit_code == 0, result.output
    data = json.loads(out.read_text())
    assert len(data["balls"]) == 1
    assert data["balls"][0]["ball_type"] == "cue"


def test_detect_visualize(tmp_path):
    image = _write_table(tmp_path / "table.png")
    vis = tmp_path / "overlay.png"
    result = runner.invoke(
        app,
        ["detect", str(image), "-o", str(tmp_path / "d.json"), "--visualize", "--vis-output", str(vis)],
    )
    assert result.exit_code == 0, result.output
    assert cv2.imread(str(vis)) is not None


def test_detect_no_balls_prints_tips(tmp_path):
    image = _write_table(tmp_path / "empty.png", with_ball=False)
    result = runner.invoke(app, ["detect", str(image), "-o", str(tmp_path / "d.json")])
    assert result.exit_code == 0
    assert "No balls detected" in result.output


def test_detect_bad_mode(tmp_path):
    image = _write_table(tmp_path / "table.png")
    result = runner.invoke(app, ["detect", str(image), "--mode", "carom"])
    assert result.exit_code == 1


def test_detect_missing_file(tmp_path):
    result = runner.invoke(app, ["detect", str(tmp_path / "missing.png"), "-o", str(tmp_path / "d.json")])
    assert result.exit_code == 1


def test_ranges_command():
    result = runner.invoke(app, ["ranges", "--mode", "snooker"])
    assert result.exit_code == 0
    assert "Pink Ball" in result.output
