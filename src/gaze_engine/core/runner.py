import asyncio
import logging
from typing import Callable, Optional

from ..acquisition import LandmarkSource
from ..models import EyeLandmarks
from ..utils.types import _END

logger = logging.getLogger(__name__)


async def calibration_watchdog(poll: Callable[[], None], interval_s: float) -> None:
    """Calls ``poll`` every ``interval_s`` seconds until cancelled."""
    while True:
        await asyncio.sleep(interval_s)
        try:
            poll()
        except Exception:
            logger.exception("Calibration watchdog failed.")


class GazeRunner:
    """
    Orchestrates the per-frame flow Source -> frame handler.
    Created fresh for every tracking session.

    Frames are handled strictly one at a time in arrival order. A watchdog
    task polls the calibration window on a wall-clock interval so a stalled
    source cannot hold a calibration point open.
    """
    _STOP_TIMEOUT_S = 1.0

    def __init__(
        self,
        source: LandmarkSource,
        handle_frame: Callable[[EyeLandmarks], object],
        poll_calibration: Optional[Callable[[], None]] = None,
        watchdog_interval_s: float = 0.05,
    ):
        self.source = source
        self._handle_frame = handle_frame
        self._poll_calibration = poll_calibration
        self._watchdog_interval_s = watchdog_interval_s
        self._running = False
        self._loop_task: asyncio.Task | None = None
        self._source_task: asyncio.Task | None = None
        self._watchdog_task: asyncio.Task | None = None

    @property
    def is_running(self) -> bool:
        return self._running

    async def start(self) -> None:
        if self._running:
            return

        logger.info("Starting GazeRunner...")
        self._running = True

        self._source_task = asyncio.create_task(self.source.run())
        self._loop_task = asyncio.create_task(self._process_loop())
        if self._poll_calibration is not None:
            self._watchdog_task = asyncio.create_task(
                calibration_watchdog(self._poll_calibration, self._watchdog_interval_s)
            )
        logger.info("GazeRunner active.")

    async def stop(self) -> None:
        if not self._running:
            return

        logger.info("Stopping GazeRunner...")
        self._running = False

        # Stop source
        await self.source.stop()
        if self._source_task:
            try:
                await asyncio.wait_for(self._source_task, timeout=self._STOP_TIMEOUT_S)
            except asyncio.TimeoutError:
                logger.warning("Source did not stop within %.1fs; cancelled.", self._STOP_TIMEOUT_S)

        # Unblock and drain the frame loop
        self.source.publish(_END)
        if self._loop_task:
            await self._loop_task

        if self._watchdog_task:
            self._watchdog_task.cancel()
            try:
                await self._watchdog_task
            except asyncio.CancelledError:
                pass

        logger.info("GazeRunner stopped.")

    async def _process_loop(self) -> None:
        """Hot loop."""
        queue = self.source.output_queue

        try:
            while True:
                item = await queue.get()

                if item is _END:
                    break

                try:
                    self._handle_frame(item)
                except Exception:
                    logger.exception("Unexpected error while processing a frame.")

        except asyncio.CancelledError:
            logger.info("Runner loop cancelled unexpectedly.")

