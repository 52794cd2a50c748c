from .features import extract_eye_features, extract_gaze_features, eye_aspect_ratio
from .model import GazeEstimationModel, ProcessingMode
from .smoothing import WeightedMovingAverage
from .confidence import (
    AttentionState,
    StreamingConfidenceModel,
    landmark_confidence,
    eye_quality,
    head_pose_factor,
)
from .eye_state import EyeStateTracker
from .processor import GazeProcessor, ProcessedFrame

__all__ = [
    "extract_eye_features",
    "extract_gaze_features",
    "eye_aspect_ratio",
    "GazeEstimationModel",
    "ProcessingMode",
    "WeightedMovingAverage",
    "AttentionState",
    "StreamingConfidenceModel",
    "landmark_confidence",
    "eye_quality",
    "head_pose_factor",
    "EyeStateTracker",
    "GazeProcessor",
    "ProcessedFrame",
]
