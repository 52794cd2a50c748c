from typing import Iterable, Sequence

from ..models import CalibrationPoint


def validate_calibration_points(points: Sequence[CalibrationPoint]) -> bool:
    """A point set is usable when it is non-empty and its orders are unique."""
    if not points:
        return False
    orders = [p.order for p in points]
    return len(orders) == len(set(orders))


def points_from_normalized(
    targets: Iterable[tuple[float, float]],
    width: float,
    height: float,
) -> list[CalibrationPoint]:
    return [
        CalibrationPoint(x=x * width, y=y * height, order=order)
        for order, (x, y) in enumerate(targets)
    ]


def default_calibration_points(width: float, height: float) -> list[CalibrationPoint]:
    """Centre first, then the four corners inset to 20 % / 80 %."""
    return points_from_normalized(
        [(0.5, 0.5), (0.2, 0.2), (0.8, 0.2), (0.2, 0.8), (0.8, 0.8)],
        width,
        height,
    )
