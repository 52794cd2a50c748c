from dataclasses import dataclass

import numpy as np

from .point import Point2D


@dataclass(slots=True, frozen=True)
class CalibrationPoint:
    """An on-screen calibration target, in screen pixels."""
    x: float
    y: float
    order: int

    @property
    def point(self) -> Point2D:
        return Point2D(self.x, self.y)


@dataclass(slots=True, frozen=True)
class CalibrationSample:
    """The filtered gaze points collected for one target."""
    target_point: Point2D
    gaze_points: tuple[Point2D, ...]
    timestamp_ms: int


@dataclass(slots=True, frozen=True, eq=False)
class CalibrationTransform:
    """
    A fitted 2-D affine correction.

    ``matrix`` is 3x3 with the homogeneous row ``[0, 0, 1]``; it maps raw
    gaze pixels onto screen pixels. ``accuracy`` is in [0, 1].
    """
    matrix: np.ndarray
    accuracy: float

    def __post_init__(self) -> None:
        matrix = np.array(self.matrix, dtype=float)
        if matrix.shape != (3, 3):
            raise ValueError(f"Affine matrix must be 3x3, got {matrix.shape}.")
        matrix.setflags(write=False)
        object.__setattr__(self, "matrix", matrix)

    def apply(self, point: tuple[float, float]) -> Point2D:
        x, y, _ = self.matrix @ np.array([point[0], point[1], 1.0])
        return Point2D(float(x), float(y))

    def in_normalized_space(self, width: float, height: float) -> "CalibrationTransform":
        """
        Re-expresses the pixel-space transform for normalized [0, 1] input.

        Scaling the result by the viewport size gives the same pixel point
        as scaling first and applying the pixel-space transform.
        """
        scale = np.diag([width, height, 1.0])
        inverse = np.diag([1.0 / width, 1.0 / height, 1.0])
        return CalibrationTransform(inverse @ self.matrix @ scale, self.accuracy)
