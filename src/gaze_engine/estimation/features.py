"""
Feature extraction from eye landmark polygons.

Degenerate input never raises: an eye with too few contour points yields a
neutral feature set (centered pupil, aspect ratio 1.0) so a detector frame
always produces some estimate, even if a low-confidence one.
"""

from typing import Sequence

from ..models import EyeFeatures, EyeLandmarks, GazeFeatures, Point2D, ORIGIN
from ..utils.geometry import centroid, distance

MIN_CONTOUR_POINTS = 6


def eye_aspect_ratio(eye_points: Sequence[Point2D]) -> float:
    """Vertical lid span over horizontal corner span; 1.0 when undefined."""
    if len(eye_points) < MIN_CONTOUR_POINTS:
        return 1.0

    width = abs(eye_points[3].x - eye_points[0].x)
    height = abs(eye_points[1].y - eye_points[5].y)
    return height / width if width > 0 else 1.0


def extract_eye_features(eye_points: Sequence[Point2D], pupil: Point2D) -> EyeFeatures:
    points = tuple(Point2D(*p) for p in eye_points)
    pupil = Point2D(*pupil)

    if len(points) < MIN_CONTOUR_POINTS:
        return EyeFeatures(center=pupil, pupil_offset=ORIGIN, aspect_ratio=1.0, landmarks=points)

    center = centroid(points)
    return EyeFeatures(
        center=center,
        pupil_offset=Point2D(pupil.x - center.x, pupil.y - center.y),
        aspect_ratio=eye_aspect_ratio(points),
        landmarks=points,
    )


def extract_gaze_features(landmarks: EyeLandmarks) -> GazeFeatures:
    left = extract_eye_features(landmarks.left_eye, landmarks.left_pupil)
    right = extract_eye_features(landmarks.right_eye, landmarks.right_pupil)
    # Degenerate contours fall back to the pupil as the eye center.
    return GazeFeatures(
        left_eye_features=left,
        right_eye_features=right,
        head_pose=landmarks.head_pose,
        eye_distance=distance(left.center, right.center),
    )
