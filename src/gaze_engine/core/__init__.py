from .state import TrackingState, CalibrationState, Collecting, CollectionWindow, Idle, IDLE
from .protocols import LandmarkDetector, ViewportProvider, AttentionSignal

__all__ = [
    "TrackingState",
    "CalibrationState",
    "Collecting",
    "CollectionWindow",
    "Idle",
    "IDLE",
    "LandmarkDetector",
    "ViewportProvider",
    "AttentionSignal",
]
