from collections import deque

from ..models import Point2D


class WeightedMovingAverage:
    """
    Fixed-length point history averaged with linearly increasing weights:
    the oldest entry weighs 1, the newest weighs the current history length.
    """

    def __init__(self, history_size: int = 5):
        if history_size <= 0:
            raise ValueError("history_size must be a positive integer.")
        self._history: deque[Point2D] = deque(maxlen=history_size)

    def __len__(self) -> int:
        return len(self._history)

    @property
    def history_size(self) -> int:
        return self._history.maxlen

    def update(self, point: tuple[float, float]) -> Point2D:
        self._history.append(Point2D(*point))

        total_weight = 0.0
        sum_x = 0.0
        sum_y = 0.0
        for weight, (x, y) in enumerate(self._history, start=1):
            total_weight += weight
            sum_x += x * weight
            sum_y += y * weight
        return Point2D(sum_x / total_weight, sum_y / total_weight)

    def reset(self) -> None:
        self._history.clear()
