from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, Union

from ..models import CalibrationPoint, CalibrationSample, Point2D


class TrackingState(Enum):
    """
    Defines the distinct operational states of the eye tracker.

    This enum is used for centralized state management, ensuring callers
    see consistent and predictable transitions.
    """
    UNINITIALIZED = auto() # Created, nothing set up yet.
    INITIALIZING = auto() # Estimator and detector are being prepared.
    READY = auto() # Ready for calibration or tracking.
    TRACKING = auto() # Frames are processed and gaze is published.
    CALIBRATING = auto() # A calibration session is collecting samples.
    PAUSED = auto() # Tracking suspended; frames are ignored.
    ERROR = auto() # Initialization or the frame source failed.


@dataclass(slots=True, frozen=True)
class CollectionWindow:
    """The timed sample window opened for one calibration target."""
    point: CalibrationPoint
    started_at: float
    samples: tuple[Point2D, ...] = ()


@dataclass(slots=True, frozen=True)
class Idle:
    """No calibration session is active."""


@dataclass(slots=True, frozen=True)
class Collecting:
    """
    A calibration session in progress.

    ``index`` counts the targets whose window has closed. ``window`` is the
    open window, if any.
    """
    points: tuple[CalibrationPoint, ...]
    samples: tuple[CalibrationSample, ...] = ()
    index: int = 0
    window: Optional[CollectionWindow] = None


CalibrationState = Union[Idle, Collecting]

IDLE = Idle()
