import asyncio
import logging
from asyncio import Queue
from typing import AsyncIterator, Generic, Optional, TypeVar

from ..utils.logging import ThrottledLogger
from ..utils.types import EndToken, _END

T = TypeVar("T")  # Generic type for the data being distributed
logger = logging.getLogger(__name__)


class Broadcaster(Generic[T]):
    """
    Fans-out a stream to any number of subscriber queues.

    Publishing never blocks the producer. A subscriber that falls behind
    loses its oldest items (or the new one, if `drop_when_full` is off and
    the queue is bounded), so per-subscriber order is always preserved.
    Closing the broadcaster sends `_END` to every subscriber.
    """

    def __init__(self, name: str, queue_size: int = 256, drop_when_full: bool = True):
        if queue_size <= 0:
            raise ValueError("queue_size must be a positive integer.")
        self.name = name
        self._queue_size = queue_size
        self._drop_when_full = drop_when_full
        self._subscribers: list[Queue[T | EndToken]] = []
        self._closed = False
        self.dropped = 0
        self._drop_logger = ThrottledLogger(logger, interval_sec=5)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, maxsize: Optional[int] = None) -> Queue[T | EndToken]:
        queue: Queue[T | EndToken] = Queue(maxsize=maxsize or self._queue_size)
        if self._closed:
            queue.put_nowait(_END)
        else:
            self._subscribers.append(queue)
            logger.debug("New subscriber on '%s' (%d total).", self.name, len(self._subscribers))
        return queue

    def unsubscribe(self, queue: Queue[T | EndToken]) -> None:
        if queue in self._subscribers:
            self._subscribers.remove(queue)

    def publish(self, item: T) -> None:
        if self._closed:
            return
        for queue in self._subscribers:
            try:
                queue.put_nowait(item)
            except asyncio.QueueFull:
                self.dropped += 1
                self._drop_logger.warning("Subscriber queue on '%s' is full, dropping sample.", self.name)
                if self._drop_when_full:
                    queue.get_nowait()
                    queue.put_nowait(item)

    def close(self) -> None:
        """Ends every subscription. Later subscribers receive `_END` immediately."""
        if self._closed:
            return
        self._closed = True
        for queue in self._subscribers:
            if queue.full():
                queue.get_nowait()
            queue.put_nowait(_END)
        self._subscribers.clear()
        logger.info("Broadcaster '%s' closed.", self.name)

    async def stream(self) -> AsyncIterator[T]:
        """Subscribes and yields items until the broadcaster is closed."""
        queue = self.subscribe()
        try:
            while True:
                item = await queue.get()
                if item is _END:
                    break
                yield item
        finally:
            self.unsubscribe(queue)
