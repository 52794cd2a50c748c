import logging
import math
import time
from dataclasses import dataclass
from typing import Optional

from ..configs import EngineSettings
from ..models import CalibrationTransform, EyeLandmarks, GazeData, GazeFeatures, Point2D
from ..utils.clock import WallClock, wall_ms
from ..utils.geometry import is_finite_point
from ..utils.logging import ThrottledLogger
from .confidence import landmark_confidence
from .features import extract_gaze_features
from .model import GazeEstimationModel, ProcessingMode
from .smoothing import WeightedMovingAverage

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class ProcessedFrame:
    """
    Result of one detector frame.

    ``gaze`` is the sample published to consumers. ``uncalibrated`` is the
    same frame in pixels before calibration and smoothing, which is what a
    calibration session fits against.
    """
    gaze: GazeData
    uncalibrated: GazeData
    features: GazeFeatures


def _features_are_finite(features: GazeFeatures) -> bool:
    pose = features.head_pose
    return (
        is_finite_point(features.left_eye_features.pupil_offset)
        and is_finite_point(features.right_eye_features.pupil_offset)
        and math.isfinite(features.left_eye_features.aspect_ratio)
        and math.isfinite(features.right_eye_features.aspect_ratio)
        and all(math.isfinite(v) for v in (pose.pitch, pose.yaw, pose.roll, pose.confidence))
    )


class GazeProcessor:
    """
    Per-frame gaze pipeline.

    features -> raw normalized gaze -> calibration -> pixels -> smoothing
    -> confidence. Frames must be fed one at a time; the calibration
    transform may be swapped from elsewhere and is read once per frame.
    """

    def __init__(
        self,
        settings: Optional[EngineSettings] = None,
        model: Optional[GazeEstimationModel] = None,
        clock: WallClock = wall_ms,
    ):
        self.settings = settings or EngineSettings()
        est = self.settings.estimation
        self.model = model or GazeEstimationModel(
            scale_factor=est.scale_factor,
            head_compensation_divisor=est.head_compensation_divisor,
            processing_mode=ProcessingMode(est.processing_mode),
        )
        self._clock = clock
        self._smoother = WeightedMovingAverage(self.settings.smoothing.history_size)
        self._smoothing_enabled = self.model.processing_mode.smoothing_enabled
        self._transform: Optional[CalibrationTransform] = None
        self._viewport: tuple[float, float] = (
            float(self.settings.display.width_px),
            float(self.settings.display.height_px),
        )
        self._last_timestamp_ms = 0
        self._initialized = False

        self.dropped_frames = 0
        self.last_processing_ms = 0.0
        self._drop_logger = ThrottledLogger(logger, interval_sec=1)

    # --- Lifecycle ---

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def initialize(self) -> bool:
        if self._initialized:
            return True
        if not self.model.initialize():
            logger.error("Failed to initialize gaze estimation model.")
            return False
        self._initialized = True
        logger.info("GazeProcessor initialized with viewport %dx%d.", *self._viewport)
        return True

    def cleanup(self) -> None:
        self._smoother.reset()
        self._transform = None
        self.model.cleanup()
        self._initialized = False
        logger.info("GazeProcessor cleaned up.")

    # --- Configuration ---

    @property
    def viewport(self) -> tuple[float, float]:
        return self._viewport

    def set_viewport(self, width: float, height: float) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"Viewport must be positive, got {width}x{height}.")
        self._viewport = (float(width), float(height))

    @property
    def processing_mode(self) -> ProcessingMode:
        return self.model.processing_mode

    def set_accuracy_mode(self, mode: ProcessingMode) -> None:
        self.model.set_processing_mode(mode)
        self.set_smoothing_enabled(mode.smoothing_enabled)
        logger.info("Gaze processor accuracy mode set to: %s", mode.value)

    @property
    def smoothing_enabled(self) -> bool:
        return self._smoothing_enabled

    def set_smoothing_enabled(self, enabled: bool) -> None:
        self._smoothing_enabled = enabled
        if not enabled:
            self._smoother.reset()

    def reset_history(self) -> None:
        self._smoother.reset()

    # --- Calibration ---

    @property
    def calibration_transform(self) -> Optional[CalibrationTransform]:
        return self._transform

    def set_calibration_transform(self, transform: CalibrationTransform) -> None:
        self._transform = transform
        logger.info("Calibration transform applied with accuracy: %.2f", transform.accuracy)

    def clear_calibration_transform(self) -> None:
        self._transform = None
        logger.info("Calibration transform cleared.")

    # --- Estimation ---

    def _next_timestamp(self) -> int:
        # Emitted timestamps never go backwards, even if the wall clock does.
        self._last_timestamp_ms = max(int(self._clock()), self._last_timestamp_ms)
        return self._last_timestamp_ms

    def _drop(self, reason: str) -> None:
        self.dropped_frames += 1
        self._drop_logger.warning("Dropping frame: %s", reason)

    def process(self, landmarks: EyeLandmarks) -> Optional[ProcessedFrame]:
        """Runs one detector frame through the pipeline; None if nothing is emitted."""
        start = time.perf_counter()

        features = extract_gaze_features(landmarks)
        if not _features_are_finite(features):
            self._drop("non-finite landmarks or head pose")
            return None

        raw = self.model.estimate(features)
        if raw is None:
            return None

        width, height = self._viewport
        transform = self._transform  # single read per frame
        calibrated = raw if transform is None else transform.in_normalized_space(width, height).apply(raw)

        screen = Point2D(calibrated.x * width, calibrated.y * height)
        if not is_finite_point(screen):
            self._drop("non-finite gaze estimate")
            return None

        if self._smoothing_enabled:
            screen = self._smoother.update(screen)

        confidence = landmark_confidence(features, self.settings.confidence)
        timestamp = self._next_timestamp()

        frame = ProcessedFrame(
            gaze=GazeData(x=screen.x, y=screen.y, confidence=confidence, timestamp_ms=timestamp),
            uncalibrated=GazeData(x=raw.x * width, y=raw.y * height, confidence=confidence, timestamp_ms=timestamp),
            features=features,
        )
        self.last_processing_ms = (time.perf_counter() - start) * 1000.0
        logger.debug("Gaze (%.1f, %.1f) confidence %.2f", screen.x, screen.y, confidence)
        return frame

    def estimate_gaze(self, landmarks: EyeLandmarks) -> Optional[GazeData]:
        frame = self.process(landmarks)
        return frame.gaze if frame else None
