"""CLI entry point for cuesight."""

import logging
from pathlib import Path

import typer

app = typer.Typer(name="cuesight", help="Pool / snooker ball detection from a table photo.")

_NO_BALLS_TIPS = (
    "Use an overhead view of the table",
    "Ensure good lighting",
    "Make sure balls are clearly visible",
    "Try a different image or angle",
)


@app.callback()
def main() -> None:
    """Configure logging from settings."""
    from cuesight.config import settings

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def detect(
    image_path: Path = typer.Argument(..., help="Path to a table photo"),
    mode: str = typer.Option(None, "--mode", "-m", help="Game mode: pool or snooker"),
    output: Path = typer.Option("detections.json", "-o", "--output", help="Output JSON path"),
    visualize: bool = typer.Option(False, "--visualize", help="Write an annotated copy of the photo"),
    vis_output: Path = typer.Option(None, "--vis-output", help="Annotated image path"),
):
    """Detect and classify the balls in a photo."""
    from cuesight.config import settings
    from cuesight.detection.detector import BallDetector
    from cuesight.detection.loader import ImageDecodeError
    from cuesight.detection.ranges import GameMode, snooker_points
    from cuesight.detection.result_io import save_result

    try:
        game_mode = GameMode(mode or settings.game_mode)
    except ValueError:
        typer.echo(f"[detect] Unknown game mode: {mode!r} (use pool or snooker)")
        raise typer.Exit(1)

    def _progress(pct: float, stage: str) -> None:
        typer.echo(f"  [detect] {pct:3.0f}% {stage}")

    detector = BallDetector(settings.detection_params())
    try:
        result = detector.detect(image_path, game_mode, progress_callback=_progress)
    except (ImageDecodeError, FileNotFoundError) as e:
        typer.echo(f"[detect] {e}")
        raise typer.Exit(1)

    save_result(result, output)

    if not result.balls:
        typer.echo("[detect] No balls detected. Try these tips:")
        for tip in _NO_BALLS_TIPS:
            typer.echo(f"  - {tip}")
    for ball in result.balls:
        points = snooker_points(ball.ball_type) if game_mode is GameMode.SNOOKER else None
        extra = f" ({points} pts)" if points else ""
        typer.echo(
            f"  {ball.id}: {ball.ball_type}{extra} at "
            f"({ball.position[0]:.0f}, {ball.position[1]:.0f}) r={ball.radius:.0f} "
            f"conf={ball.confidence:.2f}"
        )

    if visualize:
        import cv2

        from cuesight.render import draw_detections

        vis_path = vis_output or image_path.with_name(f"{image_path.stem}_detections.png")
        frame = cv2.imread(str(image_path))
        if frame is None:
            typer.echo(f"[detect] Cannot re-read {image_path} for visualization")
            raise typer.Exit(1)
        cv2.imwrite(str(vis_path), draw_detections(frame, result))
        typer.echo(f"[detect] Overlay → {vis_path}")

    typer.echo(
        f"[detect] {len(result.balls)} balls in {result.processing_time_ms:.0f} ms → {output}"
    )


@app.command()
def ranges(
    mode: str = typer.Option("pool", "--mode", "-m", help="Game mode: pool or snooker"),
):
    """Print the HSV classification table for a game mode."""
    from cuesight.detection.ranges import get_color_ranges

    try:
        table = get_color_ranges(mode)
    except ValueError:
        typer.echo(f"[ranges] Unknown game mode: {mode!r} (use pool or snooker)")
        raise typer.Exit(1)

    for rng in table:
        lo, hi = rng.hsv_min, rng.hsv_max
        typer.echo(
            f"{rng.name:<18} {rng.ball_type:<8} "
            f"H {lo.h:g}-{hi.h:g}  S {lo.s:g}-{hi.s:g}  V {lo.v:g}-{hi.v:g}  "
            f"prior {rng.confidence:.2f}"
        )


if __name__ == "__main__":
    app()
