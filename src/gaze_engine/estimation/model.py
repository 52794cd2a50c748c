import logging
from enum import Enum
from typing import Optional

from ..models import GazeFeatures, Point2D
from ..utils.geometry import clamp

logger = logging.getLogger(__name__)


class ProcessingMode(Enum):
    """
    Latency/quality trade-off selected by the host.

    The mode does not change the estimation math; downstream components use
    it to decide how much smoothing to apply.
    """
    FAST = "fast"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def smoothing_enabled(self) -> bool:
        return self is not ProcessingMode.FAST


class GazeEstimationModel:
    """
    Geometric gaze heuristic: mean pupil offset, scaled around the screen
    centre, then shifted against head yaw and pitch.

    This is not a trained regressor. Anything implementing ``estimate`` with
    the same signature can replace it.
    """

    def __init__(
        self,
        scale_factor: float = 2.0,
        head_compensation_divisor: float = 60.0,
        processing_mode: ProcessingMode = ProcessingMode.MEDIUM,
    ):
        if head_compensation_divisor == 0:
            raise ValueError("head_compensation_divisor must be non-zero.")
        self.scale_factor = scale_factor
        self.head_compensation_divisor = head_compensation_divisor
        self.processing_mode = processing_mode
        self._initialized = False

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def initialize(self) -> bool:
        self._initialized = True
        logger.info("Gaze estimation model initialized (mode=%s).", self.processing_mode.value)
        return True

    def set_processing_mode(self, mode: ProcessingMode) -> None:
        self.processing_mode = mode

    def estimate(self, features: GazeFeatures) -> Optional[Point2D]:
        """Returns the normalized [0, 1] gaze point, or None before ``initialize``."""
        if not self._initialized:
            return None

        left = features.left_eye_features.pupil_offset
        right = features.right_eye_features.pupil_offset
        offset_x = (left.x + right.x) / 2.0
        offset_y = (left.y + right.y) / 2.0

        gaze_x = 0.5 + offset_x * self.scale_factor
        gaze_y = 0.5 + offset_y * self.scale_factor

        pose = features.head_pose
        gaze_x -= pose.yaw / self.head_compensation_divisor
        gaze_y -= pose.pitch / self.head_compensation_divisor

        return Point2D(clamp(gaze_x), clamp(gaze_y))

    def cleanup(self) -> None:
        self._initialized = False
