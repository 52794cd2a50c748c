import asyncio
import logging
import math
import time
from typing import Optional

from ..models import EyeLandmarks, HeadPose, Point2D
from ..utils.clock import wall_ms
from .base import LandmarkSource

logger = logging.getLogger(__name__)


def synthetic_eye(center: Point2D, width: float = 0.06, height: float = 0.02) -> tuple[Point2D, ...]:
    """
    Six-point eye contour: corners at 0 and 3, lids at 1/2 (upper) and 4/5 (lower).
    The aspect ratio is ``height / width``.
    """
    cx, cy = center
    hw, hh = width / 2, height / 2
    return (
        Point2D(cx - hw, cy),
        Point2D(cx - hw / 2, cy - hh),
        Point2D(cx + hw / 2, cy - hh),
        Point2D(cx + hw, cy),
        Point2D(cx + hw / 2, cy + hh),
        Point2D(cx - hw / 2, cy + hh),
    )


def synthetic_frame(
    pupil_offset: tuple[float, float],
    head_pose: HeadPose,
    timestamp_ms: int = 0,
    eye_height: float = 0.02,
) -> EyeLandmarks:
    """Builds a detector frame whose pupils sit at ``pupil_offset`` from both eye centres."""
    left_center = Point2D(0.4, 0.45)
    right_center = Point2D(0.6, 0.45)
    dx, dy = pupil_offset
    return EyeLandmarks(
        left_eye=synthetic_eye(left_center, height=eye_height),
        right_eye=synthetic_eye(right_center, height=eye_height),
        left_pupil=Point2D(left_center.x + dx, left_center.y + dy),
        right_pupil=Point2D(right_center.x + dx, right_center.y + dy),
        head_pose=head_pose,
        timestamp_ms=timestamp_ms,
    )


class DummyLandmarkSource(LandmarkSource):
    """
    A LandmarkSource that simulates detector output for development and testing.

    This class generates a continuous stream of `EyeLandmarks` at a
    specified frequency, with the pupils following a circular path. It is
    useful for exercising the rest of the engine without a camera or a
    landmark detector.
    """

    def __init__(
        self,
        *args,
        frequency: int = 30,
        radius: float = 0.05,
        speed: float = 0.25,
        **kwargs,
    ):
        """
        Initializes the DummyLandmarkSource.

        Args:
            frequency: The frequency in Hz to emit frames.
            radius: Radius of the pupil path, in normalized image units.
            speed: Revolutions per second along the path.
        """
        super().__init__(*args, **kwargs)
        self.set_frequency(frequency)
        self._radius = radius
        self._speed = speed
        self._fixation: Optional[tuple[float, float]] = None

        logger.info(f"DummyLandmarkSource initialized to run at {self._frequency} Hz.")

    async def run(self) -> None:
        """
        Main execution loop for the dummy source.

        Generates and queues frames at the configured frequency until the
        stop event is set.
        """
        start_time = time.monotonic()
        next_frame = start_time

        logger.info("Starting dummy landmark stream...")
        try:
            while not self._stop_event.is_set():
                elapsed = time.monotonic() - start_time
                angle = elapsed * self._speed * 2 * math.pi
                offset = (self._radius * math.cos(angle), self._radius * math.sin(angle))
                if self._fixation is not None:
                    offset = self._fixation
                pose = HeadPose(pitch=0.0, yaw=0.0, roll=0.0, confidence=0.95, timestamp_ms=wall_ms())

                self.publish(synthetic_frame(offset, pose, timestamp_ms=pose.timestamp_ms))

                # Rate changes take effect from the next frame.
                next_frame += self._interval_s
                await asyncio.sleep(max(0.0, next_frame - time.monotonic()))

        except asyncio.CancelledError:
            logger.info("Dummy source run task was cancelled.")
        finally:
            logger.info("DummyLandmarkSource has stopped.")

    @property
    def frequency(self) -> int:
        return self._frequency

    @property
    def interval_s(self) -> float:
        return self._interval_s

    def set_frequency(self, frequency: int) -> None:
        if frequency <= 0:
            raise ValueError("Frequency must be positive.")
        self._frequency = frequency
        self._interval_s = 1.0 / frequency

    def fixate(self, x: float, y: float, scale_factor: float = 2.0) -> None:
        """Holds the pupils where a model with ``scale_factor`` maps them to normalized (x, y)."""
        self._fixation = ((x - 0.5) / scale_factor, (y - 0.5) / scale_factor)

    def release(self) -> None:
        """Returns to the circular path."""
        self._fixation = None
