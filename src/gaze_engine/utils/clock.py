import time
from typing import Callable

# Seconds on a monotonic timeline; used for calibration windows and frame pacing.
MonotonicClock = Callable[[], float]
# Milliseconds since the Unix epoch; stamped on emitted samples.
WallClock = Callable[[], int]


def monotonic_s() -> float:
    return time.monotonic()


def wall_ms() -> int:
    return time.time_ns() // 1_000_000

