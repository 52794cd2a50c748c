from .point import Point2D, Vector2D, ORIGIN
from .gaze import GazeData, HeadPose, EyeState, TrackingStatistics
from .landmarks import EyeLandmarks, EyeFeatures, GazeFeatures
from .calibration import CalibrationPoint, CalibrationSample, CalibrationTransform
from .raw import RawGazeSample

__all__ = [
    "Point2D",
    "Vector2D",
    "ORIGIN",
    "GazeData",
    "HeadPose",
    "EyeState",
    "TrackingStatistics",
    "EyeLandmarks",
    "EyeFeatures",
    "GazeFeatures",
    "CalibrationPoint",
    "CalibrationSample",
    "CalibrationTransform",
    "RawGazeSample",
]
