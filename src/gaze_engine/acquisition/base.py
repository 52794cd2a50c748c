import logging
from abc import ABC, abstractmethod
from asyncio import Queue, QueueEmpty, QueueFull, Event
from typing import final

from ..models import EyeLandmarks
from ..utils.logging import ThrottledLogger

logger = logging.getLogger(__name__)


class LandmarkSource(ABC):
    """
    Abstract Base Class for all landmark sources.

    A LandmarkSource is a runnable component that acquires detector frames
    from a specific origin (camera + detector, file, simulation) and puts
    `EyeLandmarks` objects into a bounded output queue for the runner.
    """

    def __init__(self, output_queue: Queue[EyeLandmarks], stop_event: Event):
        self._output_queue = output_queue
        self._stop_event = stop_event
        self.frames_discarded = 0
        self._discard_logger = ThrottledLogger(logger, interval_sec=5)

    @property
    def output_queue(self) -> Queue[EyeLandmarks]:
        return self._output_queue

    @abstractmethod
    async def run(self) -> None:
        """
        Starts the acquisition process.

        This method should run continuously, publishing frames until the
        `stop_event` is set. It must be implemented by all concrete
        subclasses.
        """
        raise NotImplementedError

    def set_frequency(self, frequency: int) -> None:
        """
        Changes the acquisition rate, in Hz. Sources paced by their device
        (a camera stream, a hardware tracker) keep their own rate.
        """
        logger.debug("%s does not pace its frames; ignoring %d Hz.", type(self).__name__, frequency)

    @final
    def publish(self, frame: EyeLandmarks) -> None:
        """
        Queues a frame without waiting. When the runner is behind, the oldest
        queued frame is discarded so the newest one is always kept.
        """
        try:
            self._output_queue.put_nowait(frame)
        except QueueFull:
            try:
                self._output_queue.get_nowait()
            except QueueEmpty:
                pass
            self._output_queue.put_nowait(frame)
            self.frames_discarded += 1
            self._discard_logger.warning("Processing is behind, discarding late frame.")

    @final
    async def stop(self) -> None:
        """
        Signals the source to stop acquiring data.

        This is a final method and should not be overridden. Subclasses can
        perform cleanup in their 'run' method's finally block.
        """
        self._stop_event.set()
