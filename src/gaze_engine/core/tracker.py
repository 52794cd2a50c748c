import asyncio
import logging
from typing import Any, Mapping, Optional, Sequence

from .runner import GazeRunner, calibration_watchdog
from .state import TrackingState
from .protocols import AttentionSignal, ViewportProvider
from ..acquisition import LandmarkSource, StreamingGazeAdapter
from ..calibration import CalibrationManager
from ..configs import EngineSettings
from ..estimation import EyeStateTracker, GazeProcessor, ProcessingMode
from ..models import (
    CalibrationPoint,
    CalibrationTransform,
    EyeLandmarks,
    EyeState,
    GazeData,
    HeadPose,
    TrackingStatistics,
)
from ..pipeline import Broadcaster
from ..utils.clock import MonotonicClock, WallClock, monotonic_s, wall_ms
from ..utils.display import FixedViewport

logger = logging.getLogger(__name__)

_ACTIVE_STATES = (TrackingState.TRACKING, TrackingState.CALIBRATING)


class EyeTracker:
    """
    The headless core of the engine.

    Owns the gaze processor, the calibration manager and the output streams,
    and enforces the tracking lifecycle. Hosts feed it either detector
    frames (through a `LandmarkSource` and `start_tracking`, or directly via
    `handle_frame`) or finished points from a streaming tracker via
    `ingest_stream_sample`. Consumers subscribe to `gaze`, `head_pose` and
    `eye_state`.

    All methods are meant to be called from the event loop thread.
    """
    def __init__(
        self,
        settings: Optional[EngineSettings] = None,
        viewport: Optional[ViewportProvider] = None,
        attention: Optional[AttentionSignal] = None,
        clock: MonotonicClock = monotonic_s,
        wall_clock: WallClock = wall_ms,
    ):
        self.settings: EngineSettings = settings or EngineSettings()
        self.viewport: ViewportProvider = viewport or FixedViewport(
            self.settings.display.width_px, self.settings.display.height_px
        )
        self._clock = clock

        self.processor = GazeProcessor(self.settings, clock=wall_clock)
        self.calibration = CalibrationManager(self.settings.calibration, clock=clock, wall_clock=wall_clock)
        self.eye_states = EyeStateTracker(self.settings.confidence)
        self.streaming = StreamingGazeAdapter(self.viewport, attention, self.settings.streaming, clock=wall_clock)

        tracking = self.settings.tracking
        self.gaze: Broadcaster[GazeData] = Broadcaster("gaze", tracking.subscriber_queue_size, tracking.drop_when_full)
        self.head_pose: Broadcaster[HeadPose] = Broadcaster("head_pose", tracking.subscriber_queue_size, tracking.drop_when_full)
        self.eye_state: Broadcaster[EyeState] = Broadcaster("eye_state", tracking.subscriber_queue_size, tracking.drop_when_full)

        self.target_fps: int = tracking.target_fps
        self._state = TrackingState.UNINITIALIZED
        self._state_before_calibration = TrackingState.READY
        self._runner: Optional[GazeRunner] = None
        self._watchdog_task: Optional[asyncio.Task] = None

        self._frames_processed = 0
        self._started_at = clock()

    @property
    def state(self) -> TrackingState:
        return self._state

    @property
    def is_tracking(self) -> bool:
        return self._state in _ACTIVE_STATES

    # --- Lifecycle ---

    def initialize(self) -> bool:
        if self._state is not TrackingState.UNINITIALIZED:
            return self._state is not TrackingState.ERROR

        self._state = TrackingState.INITIALIZING
        if not self.processor.initialize():
            self._state = TrackingState.ERROR
            return False

        self.refresh_viewport()
        self._state = TrackingState.READY
        logger.info("EyeTracker initialized.")
        return True

    def refresh_viewport(self) -> tuple[int, int]:
        width, height = self.viewport.viewport_size()
        self.processor.set_viewport(width, height)
        return width, height

    async def start_tracking(self, source: Optional[LandmarkSource] = None) -> bool:
        """
        Starts publishing gaze. With a source, frames are pulled from it by a
        runner; without one the host pushes frames through `handle_frame`.
        """
        if self._state is TrackingState.PAUSED:
            return self.resume_tracking()
        if self._state is not TrackingState.READY:
            logger.warning("Cannot start tracking from state: %s", self._state.name)
            return False

        if source is not None:
            source.set_frequency(self.target_fps)
            try:
                self._runner = GazeRunner(
                    source,
                    self.handle_frame,
                    poll_calibration=self.calibration.poll,
                    watchdog_interval_s=self.settings.calibration.watchdog_interval_s,
                )
                await self._runner.start()
            except Exception:
                logger.exception("Failed to start the frame runner.")
                self._runner = None
                self._state = TrackingState.ERROR
                return False
        else:
            # Pushed frames may stall; calibration windows still close on time.
            self._watchdog_task = asyncio.create_task(
                calibration_watchdog(self.calibration.poll, self.settings.calibration.watchdog_interval_s)
            )

        self._frames_processed = 0
        self._started_at = self._clock()
        self._state = TrackingState.TRACKING
        logger.info("Eye tracking started.")
        return True

    async def stop_tracking(self) -> bool:
        if self._state not in (TrackingState.TRACKING, TrackingState.PAUSED, TrackingState.CALIBRATING):
            return False

        if self._runner:
            await self._runner.stop()
            self._runner = None
        await self._stop_watchdog()

        self.calibration.abort_calibration()

        self.processor.reset_history()
        self.eye_states.reset()
        self._state = TrackingState.READY
        logger.info("Eye tracking stopped.")
        return True

    async def _stop_watchdog(self) -> None:
        task, self._watchdog_task = self._watchdog_task, None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    def pause_tracking(self) -> bool:
        if self._state is not TrackingState.TRACKING:
            return False
        self._state = TrackingState.PAUSED
        logger.info("Eye tracking paused.")
        return True

    def resume_tracking(self) -> bool:
        if self._state is not TrackingState.PAUSED:
            return False
        self._state = TrackingState.TRACKING
        logger.info("Eye tracking resumed.")
        return True

    async def dispose(self) -> None:
        await self.stop_tracking()
        self.gaze.close()
        self.head_pose.close()
        self.eye_state.close()
        self.processor.cleanup()
        self._state = TrackingState.UNINITIALIZED
        logger.info("EyeTracker disposed.")

    # --- Frame intake ---

    def handle_frame(self, landmarks: EyeLandmarks) -> Optional[GazeData]:
        """Processes one detector frame; frames outside tracking/calibration are ignored."""
        if not self.is_tracking:
            return None

        frame = self.processor.process(landmarks)
        if frame is None:
            return None
        self.head_pose.publish(landmarks.head_pose)

        self._frames_processed += 1
        if self.calibration.is_calibrating:
            self.calibration.add_gaze_sample(frame.uncalibrated)

        self.eye_state.publish(self.eye_states.update(frame.features, frame.gaze.timestamp_ms))
        self.gaze.publish(frame.gaze)
        return frame.gaze

    def ingest_stream_sample(self, record: Mapping[str, Any]) -> Optional[GazeData]:
        """Accepts one record from a streaming tracker (points already in viewport pixels)."""
        if not self.is_tracking:
            return None

        sample = self.streaming.ingest(record)
        if sample is None:
            return None

        if self.calibration.is_calibrating:
            self.calibration.add_gaze_sample(sample)

        transform = self.processor.calibration_transform
        if transform is not None:
            x, y = transform.apply(sample.point)
            sample = GazeData(x=x, y=y, confidence=sample.confidence, timestamp_ms=sample.timestamp_ms)

        self._frames_processed += 1
        self.gaze.publish(sample)
        return sample

    # --- Calibration ---

    def start_calibration(self, points: Sequence[CalibrationPoint]) -> bool:
        if self._state not in (TrackingState.READY, TrackingState.TRACKING):
            logger.warning("Cannot calibrate from state: %s", self._state.name)
            return False
        if not self.calibration.start_calibration(points):
            return False

        self._state_before_calibration = self._state
        self._state = TrackingState.CALIBRATING
        return True

    def add_calibration_point(self, point: CalibrationPoint) -> bool:
        return self.calibration.add_calibration_point(point)

    def finish_calibration(self) -> bool:
        success = self.calibration.finish_calibration()
        if success:
            self.processor.set_calibration_transform(self.calibration.get_calibration_transform())
        self._leave_calibration_state()
        return success

    def clear_calibration(self) -> bool:
        self.calibration.clear_calibration()
        self.processor.clear_calibration_transform()
        self._leave_calibration_state()
        return True

    def _leave_calibration_state(self) -> None:
        if self._state is TrackingState.CALIBRATING:
            self._state = self._state_before_calibration

    def get_calibration_accuracy(self) -> float:
        return self.calibration.get_accuracy()

    def get_calibration_progress(self) -> float:
        return self.calibration.get_progress()

    def get_calibration_transform(self) -> Optional[CalibrationTransform]:
        return self.calibration.get_calibration_transform()

    # --- Configuration ---

    def set_tracking_frequency(self, fps: int) -> bool:
        if not 0 < fps <= 60:
            logger.warning("Rejected tracking frequency %s (must be 1-60).", fps)
            return False
        self.target_fps = fps
        if self._runner is not None:
            self._runner.source.set_frequency(fps)
        logger.info("Tracking frequency set to %d fps.", fps)
        return True

    def set_accuracy_mode(self, mode: str) -> bool:
        try:
            processing_mode = ProcessingMode(mode)
        except ValueError:
            logger.warning("Rejected unknown accuracy mode '%s'.", mode)
            return False
        self.processor.set_accuracy_mode(processing_mode)
        return True

    def set_smoothing_enabled(self, enabled: bool) -> None:
        self.processor.set_smoothing_enabled(enabled)

    # --- Statistics ---

    def get_tracking_statistics(self) -> TrackingStatistics:
        elapsed = self._clock() - self._started_at
        dropped = self.processor.dropped_frames
        if self._runner is not None:
            dropped += self._runner.source.frames_discarded
        return TrackingStatistics(
            frames_processed=self._frames_processed,
            dropped_frames=dropped,
            average_fps=self._frames_processed / elapsed if elapsed > 0 else 0.0,
            last_processing_ms=self.processor.last_processing_ms,
        )
