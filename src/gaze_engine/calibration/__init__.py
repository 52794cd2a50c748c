from .manager import CalibrationManager
from .points import default_calibration_points, points_from_normalized, validate_calibration_points

__all__ = [
    "CalibrationManager",
    "default_calibration_points",
    "points_from_normalized",
    "validate_calibration_points",
]
