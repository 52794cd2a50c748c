import sys
import time
import logging

from ..configs.utils import LoggingConfig


class ThrottledLogger:
    """Rate-limits a warning emitted from a hot loop, reporting how many were folded."""

    def __init__(self, logger: logging.Logger, interval_sec: float = 5.0) -> None:
        self._logger = logger
        self._interval = interval_sec
        self._last_log_time = float("-inf")
        self._counter = 0

    def warning(self, message: str, *args, **kwargs):
        self._counter += 1
        now = time.monotonic()

        if now - self._last_log_time >= self._interval:
            self._logger.warning("[%d] " + message, self._counter, *args, **kwargs)
            self._last_log_time = now
            self._counter = 0


def setup_logging(config: LoggingConfig) -> None:
    logging.basicConfig(
        level=config.level.upper(),
        format=config.format,
        stream=sys.stdout,
    )
