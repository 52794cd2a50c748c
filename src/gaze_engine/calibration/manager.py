"""
Calibration session state machine.

A session walks an ordered list of on-screen targets. For each target the
host calls ``add_calibration_point`` which opens a timed window: samples are
discarded during a short stabilization period, then accumulated until the
collection period elapses, enough samples arrive, or the host moves on to the
next target. Each closed window keeps only samples near its target; targets
left with too few samples are dropped without failing the session.
``finish_calibration`` fits a least-squares affine transform from the
per-target sample centroids to the targets.

All session progress lives in one immutable state value (``Idle`` or
``Collecting``) that is replaced under a lock, so the frame thread and the
host can call in concurrently.
"""

import logging
import threading
from dataclasses import replace
from typing import Optional, Sequence

from ..configs import CalibrationSettings
from ..core.state import IDLE, CalibrationState, Collecting, CollectionWindow, Idle
from ..models import CalibrationPoint, CalibrationSample, CalibrationTransform, GazeData, Point2D
from ..utils.clock import MonotonicClock, WallClock, monotonic_s, wall_ms
from ..utils.geometry import centroid, distance, fit_affine, mean_residual, residual_accuracy
from .points import validate_calibration_points

logger = logging.getLogger(__name__)


class CalibrationManager:

    MIN_SAMPLES_FOR_FIT = 3

    def __init__(
        self,
        settings: Optional[CalibrationSettings] = None,
        clock: MonotonicClock = monotonic_s,
        wall_clock: WallClock = wall_ms,
    ):
        self.settings = settings or CalibrationSettings()
        self._clock = clock
        self._wall_clock = wall_clock
        self._lock = threading.Lock()
        self._state: CalibrationState = IDLE
        self._transform: Optional[CalibrationTransform] = None

    # --- State ---

    @property
    def state(self) -> CalibrationState:
        return self._state

    @property
    def is_calibrating(self) -> bool:
        return isinstance(self._state, Collecting)

    @property
    def window_duration_s(self) -> float:
        return self.settings.stabilization_s + self.settings.collection_s

    # --- Session control ---

    def start_calibration(self, points: Sequence[CalibrationPoint]) -> bool:
        with self._lock:
            if self.is_calibrating:
                logger.warning("Cannot start calibration: a session is already active.")
                return False
            if not validate_calibration_points(points):
                logger.warning("Cannot start calibration: point set is empty or has duplicate orders.")
                return False

            ordered = tuple(sorted(points, key=lambda p: p.order))
            self._state = Collecting(points=ordered)

        logger.info("Started calibration with %d points.", len(ordered))
        return True

    def add_calibration_point(self, point: CalibrationPoint) -> bool:
        with self._lock:
            state = self._state
            if not isinstance(state, Collecting):
                logger.warning("Not currently calibrating.")
                return False

            target = next((p for p in state.points if p.order == point.order), None)
            if target is None:
                logger.warning("Calibration point with order %d is not in this session.", point.order)
                return False

            if state.window is not None:
                state = self._finalize(state)
            self._state = replace(state, window=CollectionWindow(point=target, started_at=self._clock()))

        logger.info("Collecting data for calibration point %d/%d.", target.order + 1, len(state.points))
        return True

    def add_gaze_sample(self, gaze_data: GazeData) -> None:
        """Feeds one gaze sample (pixels). Never blocks; ignored outside an open window."""
        with self._lock:
            state = self._state
            if not isinstance(state, Collecting) or state.window is None:
                return

            window = state.window
            elapsed = self._clock() - window.started_at

            if elapsed >= self.window_duration_s:
                self._state = self._finalize(state)
                return
            if elapsed < self.settings.stabilization_s:
                return

            window = replace(window, samples=window.samples + (Point2D(gaze_data.x, gaze_data.y),))
            state = replace(state, window=window)
            if len(window.samples) >= self.settings.samples_per_point:
                state = self._finalize(state)
            self._state = state

    def poll(self) -> None:
        """Closes the open window once its duration has elapsed, with or without new samples."""
        with self._lock:
            state = self._state
            if not isinstance(state, Collecting) or state.window is None:
                return
            if self._clock() - state.window.started_at >= self.window_duration_s:
                self._state = self._finalize(state)

    def finish_calibration(self) -> bool:
        with self._lock:
            state = self._state
            if not isinstance(state, Collecting):
                logger.warning("Not currently calibrating.")
                return False

            if state.window is not None:
                state = self._finalize(state)
            self._state = IDLE

            if len(state.samples) < self.MIN_SAMPLES_FOR_FIT:
                logger.warning(
                    "Insufficient calibration data: need at least %d points, got %d.",
                    self.MIN_SAMPLES_FOR_FIT,
                    len(state.samples),
                )
                return False

            transform = self._compute_transform(state.samples)
            if transform is None:
                logger.warning("Failed to calculate calibration transform (degenerate point layout).")
                return False

            self._transform = transform

        logger.info("Calibration completed with accuracy: %.2f", transform.accuracy)
        return True

    def abort_calibration(self) -> bool:
        """Ends the active session without fitting; the installed transform is kept."""
        with self._lock:
            if not self.is_calibrating:
                return False
            self._state = IDLE
        logger.info("Calibration session aborted.")
        return True

    def clear_calibration(self) -> bool:
        with self._lock:
            self._state = IDLE
            self._transform = None
        logger.info("Calibration data cleared.")
        return True

    # --- Accessors ---

    def get_accuracy(self) -> float:
        transform = self._transform
        return transform.accuracy if transform else 0.0

    def get_calibration_transform(self) -> Optional[CalibrationTransform]:
        return self._transform

    def get_progress(self) -> float:
        state = self._state
        if not isinstance(state, Collecting) or not state.points:
            return 0.0
        return len(state.samples) / len(state.points)

    @property
    def current_point_index(self) -> int:
        state = self._state
        return state.index if isinstance(state, Collecting) else 0

    @property
    def total_points(self) -> int:
        state = self._state
        return len(state.points) if isinstance(state, Collecting) else 0

    @property
    def samples(self) -> tuple[CalibrationSample, ...]:
        state = self._state
        return state.samples if isinstance(state, Collecting) else ()

    # --- Internals ---

    def _filter_samples(self, samples: Sequence[Point2D], target: Point2D) -> tuple[Point2D, ...]:
        limit = self.settings.max_deviation_px
        return tuple(s for s in samples if distance(s, target) <= limit)

    def _finalize(self, state: Collecting) -> Collecting:
        """Closes the open window, committing a sample if enough points survive filtering."""
        window = state.window
        target = window.point
        kept = self._filter_samples(window.samples, target.point)

        samples = state.samples
        if len(kept) >= self.settings.min_samples_per_point:
            samples += (CalibrationSample(
                target_point=target.point,
                gaze_points=kept,
                timestamp_ms=self._wall_clock(),
            ),)
            logger.info("Collected %d samples for point %d.", len(kept), target.order + 1)
        else:
            logger.warning(
                "Insufficient quality samples for point %d (got %d, need %d).",
                target.order + 1,
                len(kept),
                self.settings.min_samples_per_point,
            )

        return replace(state, samples=samples, index=state.index + 1, window=None)

    def _compute_transform(self, samples: Sequence[CalibrationSample]) -> Optional[CalibrationTransform]:
        centroids = [centroid(s.gaze_points) for s in samples]
        targets = [s.target_point for s in samples]

        matrix = fit_affine(centroids, targets, self.settings.pivot_tolerance)
        if matrix is None:
            return None

        error = mean_residual(matrix, centroids, targets)
        accuracy = residual_accuracy(error, self.settings.max_error_px)
        logger.debug("Calibration mean residual %.2f px over %d targets.", error, len(samples))
        return CalibrationTransform(matrix=matrix, accuracy=accuracy)
