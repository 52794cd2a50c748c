from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class HeadPose:
    """
    Head orientation reported by the external landmark detector.

    Angles are in degrees. The engine only reads it.
    """
    pitch: float
    yaw: float
    roll: float
    confidence: float = 1.0
    timestamp_ms: int = 0


@dataclass(slots=True, frozen=True)
class GazeData:
    """
    A standardized, immutable container for a single gaze sample.

    This object is the canonical representation of an estimated gaze point
    as it flows from the processor to subscribers. ``x``/``y`` are screen
    pixels on the landmark path and viewport pixels on the streaming path.
    """
    x: float
    y: float
    confidence: float
    timestamp_ms: int

    @property
    def point(self) -> tuple[float, float]:
        return self.x, self.y


@dataclass(slots=True, frozen=True)
class EyeState:
    left_eye_open: bool
    right_eye_open: bool
    left_eye_blink: bool = False
    right_eye_blink: bool = False
    timestamp_ms: int = 0


@dataclass(slots=True, frozen=True)
class TrackingStatistics:
    frames_processed: int = 0
    dropped_frames: int = 0
    average_fps: float = 0.0
    last_processing_ms: float = 0.0
