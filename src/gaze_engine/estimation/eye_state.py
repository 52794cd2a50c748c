from collections import deque
from typing import Optional

from ..configs import ConfidenceSettings
from ..models import EyeState, GazeFeatures


class EyeStateTracker:
    """
    Open/closed classification per eye with blink detection.

    A blink is the open -> closed -> open pattern over the three most
    recent frames.
    """

    def __init__(self, settings: Optional[ConfidenceSettings] = None):
        settings = settings or ConfidenceSettings()
        self.open_threshold = settings.eye_open_threshold
        self._left: deque[bool] = deque(maxlen=settings.blink_history_size)
        self._right: deque[bool] = deque(maxlen=settings.blink_history_size)

    @staticmethod
    def _blinked(history: deque[bool]) -> bool:
        if len(history) < 3:
            return False
        before, during, after = list(history)[-3:]
        return before and not during and after

    def update(self, features: GazeFeatures, timestamp_ms: int) -> EyeState:
        left_open = features.left_eye_features.aspect_ratio > self.open_threshold
        right_open = features.right_eye_features.aspect_ratio > self.open_threshold
        self._left.append(left_open)
        self._right.append(right_open)

        return EyeState(
            left_eye_open=left_open,
            right_eye_open=right_open,
            left_eye_blink=self._blinked(self._left),
            right_eye_blink=self._blinked(self._right),
            timestamp_ms=timestamp_ms,
        )

    def reset(self) -> None:
        self._left.clear()
        self._right.clear()
