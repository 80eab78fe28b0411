"""Detection configuration via Pydantic settings."""

from pydantic import field_validator
from pydantic_settings import BaseSettings

from cuesight.detection.edges import EDGE_OPERATORS
from cuesight.detection.params import DetectionParams
from cuesight.detection.ranges import GameMode


class Settings(BaseSettings):
    """Global detection settings, loaded from env vars prefixed CUESIGHT_."""

    model_config = {"env_prefix": "CUESIGHT_"}

    # Logging
    log_level: str = "WARNING"

    # Defaults for the CLI
    game_mode: str = "pool"

    # Loader / preprocessing
    max_dimension: int = 800
    blur_radius: int = 2
    edge_operator: str = "sobel"

    # Radius range and grid (fractions of min(width, height))
    min_radius_fraction: float = 0.015
    max_radius_fraction: float = 0.15
    grid_step_fraction: float = 0.8
    radius_step_fraction: float = 0.1

    # Circle scoring
    perimeter_samples: int = 24
    edge_threshold: int = 40
    color_diff_divisor: float = 120.0
    edge_weight: float = 0.7
    color_weight: float = 0.3
    min_edge_ratio: float = 0.2
    accept_threshold: float = 0.3
    sized_accept_threshold: float = 0.25

    # Cue-ball-first search
    two_phase: bool = True
    cue_min_brightness: float = 180.0
    cue_max_channel_delta: float = 30.0
    reference_radius_tolerance: float = 0.2
    cue_exclusion_factor: float = 1.5
    refine: bool = True
    coarse_threshold: float = 0.15
    refine_limit: int = 300

    # Suppression / output
    nms_overlap_factor: float = 0.6
    max_balls: int = 22

    @field_validator("game_mode")
    @classmethod
    def check_game_mode(cls, v: str) -> str:
        return GameMode(v.lower()).value

    @field_validator("edge_operator")
    @classmethod
    def check_edge_operator(cls, v: str) -> str:
        if v not in EDGE_OPERATORS:
            raise ValueError(f"edge_operator must be one of {EDGE_OPERATORS}")
        return v

    def detection_params(self) -> DetectionParams:
        """Snapshot the tunables into the frozen params the pipeline takes."""
        return DetectionParams(
            max_dimension=self.max_dimension,
            blur_radius=self.blur_radius,
            edge_operator=self.edge_operator,
            min_radius_fraction=self.min_radius_fraction,
            max_radius_fraction=self.max_radius_fraction,
            grid_step_fraction=self.grid_step_fraction,
            radius_step_fraction=self.radius_step_fraction,
            perimeter_samples=self.perimeter_samples,
            edge_threshold=self.edge_threshold,
            color_diff_divisor=self.color_diff_divisor,
            edge_weight=self.edge_weight,
            color_weight=self.color_weight,
            min_edge_ratio=self.min_edge_ratio,
            accept_threshold=self.accept_threshold,
            sized_accept_threshold=self.sized_accept_threshold,
            two_phase=self.two_phase,
            cue_min_brightness=self.cue_min_brightness,
            cue_max_channel_delta=self.cue_max_channel_delta,
            reference_radius_tolerance=self.reference_radius_tolerance,
            cue_exclusion_factor=self.cue_exclusion_factor,
            refine=self.refine,
            coarse_threshold=self.coarse_threshold,
            refine_limit=self.refine_limit,
            nms_overlap_factor=self.nms_overlap_factor,
            max_balls=self.max_balls,
        )


settings = Settings()
