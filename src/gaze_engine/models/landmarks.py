from dataclasses import dataclass, field

from .gaze import HeadPose
from .point import Point2D, Vector2D


@dataclass(slots=True, frozen=True)
class EyeLandmarks:
    """
    One detector frame: eye contours, pupil estimates and head pose.

    Contours are ordered boundary points in normalized image space. Index 0
    and 3 are the eye corners, 1 and 5 the upper and lower lids.
    """
    left_eye: tuple[Point2D, ...]
    right_eye: tuple[Point2D, ...]
    left_pupil: Point2D
    right_pupil: Point2D
    head_pose: HeadPose
    timestamp_ms: int = 0


@dataclass(slots=True, frozen=True)
class EyeFeatures:
    center: Point2D
    pupil_offset: Vector2D
    aspect_ratio: float
    landmarks: tuple[Point2D, ...] = field(default_factory=tuple)


@dataclass(slots=True, frozen=True)
class GazeFeatures:
    left_eye_features: EyeFeatures
    right_eye_features: EyeFeatures
    head_pose: HeadPose
    eye_distance: float
