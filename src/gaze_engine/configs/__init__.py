from .app import (
    EngineSettings,
    DisplaySettings,
    EstimationSettings,
    SmoothingSettings,
    ConfidenceSettings,
    StreamingConfidenceSettings,
    CalibrationSettings,
    TrackingSettings,
)
from .utils import LoggingConfig

__all__ = [
    "EngineSettings",
    "DisplaySettings",
    "EstimationSettings",
    "SmoothingSettings",
    "ConfidenceSettings",
    "StreamingConfidenceSettings",
    "CalibrationSettings",
    "TrackingSettings",
    "LoggingConfig",
]
