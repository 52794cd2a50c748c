from .base import LandmarkSource
from .dummy import DummyLandmarkSource, synthetic_eye, synthetic_frame
from .detector import DetectorLandmarkSource
from .streaming import StreamingGazeAdapter

__all__ = [
    "LandmarkSource",
    "DummyLandmarkSource",
    "DetectorLandmarkSource",
    "StreamingGazeAdapter",
    "synthetic_eye",
    "synthetic_frame",
]
