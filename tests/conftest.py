import pytest

from gaze_engine.acquisition import synthetic_frame
from gaze_engine.configs import EngineSettings
from gaze_engine.models import HeadPose

NEUTRAL_POSE = HeadPose(pitch=0.0, yaw=0.0, roll=0.0, confidence=1.0)


class ManualClock:
    """
    A clock that only moves when told to.

    Serves both clock roles: calling it returns monotonic seconds and
    ``ms()`` returns the same instant as integer milliseconds.
    """

    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def ms(self) -> int:
        return int(round(self.now * 1000))

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now


@pytest.fixture
def clock():
    return ManualClock(start=100.0)


@pytest.fixture
def settings():
    return EngineSettings(_env_file=None)


def frame_looking_at(x: float, y: float, scale_factor: float = 2.0, pose: HeadPose = NEUTRAL_POSE, **kwargs):
    """Detector frame that the default model maps to normalized (x, y)."""
    return synthetic_frame(((x - 0.5) / scale_factor, (y - 0.5) / scale_factor), pose, **kwargs)
