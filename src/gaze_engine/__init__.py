"""
Gaze estimation and calibration engine.

Turns eye landmarks and head pose from an external detector into
screen-space gaze samples, fits an affine calibration from a multi-point
session, and scores every sample with a confidence in [0, 1].
"""

from .configs import EngineSettings
from .core.state import TrackingState
from .core.tracker import EyeTracker
from .calibration import CalibrationManager, default_calibration_points
from .estimation import GazeProcessor, ProcessingMode, StreamingConfidenceModel, AttentionState
from .models import (
    CalibrationPoint,
    CalibrationTransform,
    EyeLandmarks,
    GazeData,
    HeadPose,
    Point2D,
)

__all__ = [
    "EngineSettings",
    "TrackingState",
    "EyeTracker",
    "CalibrationManager",
    "default_calibration_points",
    "GazeProcessor",
    "ProcessingMode",
    "StreamingConfidenceModel",
    "AttentionState",
    "CalibrationPoint",
    "CalibrationTransform",
    "EyeLandmarks",
    "GazeData",
    "HeadPose",
    "Point2D",
]

__version__ = "0.1.0"
