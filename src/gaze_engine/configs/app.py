from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, PositiveInt, PositiveFloat, model_validator, Field

from .utils import LoggingConfig


ProcessingModeName = Literal["fast", "medium", "high"]


class DisplaySettings(BaseModel):
    """Viewport used for pixel conversion and in-bounds scoring."""
    width_px: PositiveInt = Field(1920)
    height_px: PositiveInt = Field(1080)
    detect_from_screen: bool = Field(False, description="Read the size of the primary monitor at startup.")


class EstimationSettings(BaseModel):
    """Constants of the geometric gaze heuristic. Tunable, not contractual."""
    scale_factor: PositiveFloat = Field(2.0, description="Pupil offset to normalized gaze gain.")
    head_compensation_divisor: PositiveFloat = Field(60.0, description="Degrees of head rotation per unit of normalized gaze.")
    processing_mode: ProcessingModeName = "medium"


class SmoothingSettings(BaseModel):
    history_size: PositiveInt = 5


class ConfidenceSettings(BaseModel):
    """Head-pose and eye-quality confidence on the landmark path."""
    max_head_angle_deg: PositiveFloat = 30.0
    open_eye_ratio: PositiveFloat = Field(0.3, description="Aspect ratio of a typical open eye.")
    eye_open_threshold: float = Field(0.2, ge=0, description="Aspect ratio above which an eye counts as open.")
    blink_history_size: int = Field(5, ge=3)


class StreamingConfidenceSettings(BaseModel):
    """Attention-gated EMA confidence for streaming gaze sources."""
    attention_floor: float = Field(0.3, ge=0, le=1)
    fresh_ms: float = Field(150.0, ge=0)
    stale_ms: float = Field(600.0, gt=0)
    margin_px: PositiveFloat = 32.0
    time_weight: float = Field(0.45, ge=0, le=1)
    bounds_weight: float = Field(0.55, ge=0, le=1)
    rise_rate: float = Field(0.35, gt=0, le=1)
    fall_rate: float = Field(0.10, gt=0, le=1)
    max_drop: float = Field(0.05, gt=0, le=1)
    ceiling: float = Field(0.90, gt=0, le=1)
    min_interval_ms: float = Field(33.0, ge=0, description="Samples closer together than this are throttled.")

    @model_validator(mode='after')
    def validate_freshness_window(self) -> "StreamingConfidenceSettings":
        if self.stale_ms <= self.fresh_ms:
            raise ValueError('stale_ms must be greater than fresh_ms.')
        return self


class CalibrationSettings(BaseModel):
    """Settings for the calibration procedure."""
    stabilization_s: float = Field(0.5, ge=0, description="Samples are discarded while the eyes settle.")
    collection_s: PositiveFloat = Field(2.0, description="Length of the sample collection period per point.")
    samples_per_point: PositiveInt = 30
    min_samples_per_point: PositiveInt = 15
    max_deviation_px: PositiveFloat = 50.0
    max_error_px: PositiveFloat = 200.0
    pivot_tolerance: PositiveFloat = 1e-10
    watchdog_interval_s: PositiveFloat = 0.05
    points_to_calibrate: list[tuple[float, float]] = Field(
        default=[
            (0.5, 0.5),
            (0.2, 0.2), (0.8, 0.2),
            (0.2, 0.8), (0.8, 0.8),
        ],
        description="List of normalized (0-1) screen coordinates to use as calibration targets."
    )

    @model_validator(mode='after')
    def validate_sample_counts(self) -> "CalibrationSettings":
        if self.min_samples_per_point > self.samples_per_point:
            raise ValueError('min_samples_per_point cannot exceed samples_per_point.')
        return self


class TrackingSettings(BaseModel):
    target_fps: int = Field(30, ge=1, le=60)
    frame_queue_size: PositiveInt = 2
    subscriber_queue_size: PositiveInt = 256
    drop_when_full: bool = True


class EngineSettings(BaseSettings):
    """
    Main engine settings, loaded from environment variables and defaults.
    """
    display: DisplaySettings = Field(default_factory=DisplaySettings)
    estimation: EstimationSettings = Field(default_factory=EstimationSettings)
    smoothing: SmoothingSettings = Field(default_factory=SmoothingSettings)
    confidence: ConfidenceSettings = Field(default_factory=ConfidenceSettings)
    streaming: StreamingConfidenceSettings = Field(default_factory=StreamingConfidenceSettings)
    calibration: CalibrationSettings = Field(default_factory=CalibrationSettings)
    tracking: TrackingSettings = Field(default_factory=TrackingSettings)

    # Logging
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = SettingsConfigDict(
        env_prefix="GAZE_ENGINE__",
        env_file=".env",
        env_nested_delimiter='__',
        case_sensitive=False
    )
