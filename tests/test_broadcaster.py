import asyncio

import pytest

from gaze_engine.pipeline import Broadcaster
from gaze_engine.utils.types import _END


def drain(queue):
    items = []
    while not queue.empty():
        items.append(queue.get_nowait())
    return items


class TestBroadcaster:
    def test_fans_out_in_order(self):
        broadcaster = Broadcaster("test")
        first, second = broadcaster.subscribe(), broadcaster.subscribe()
        for i in range(3):
            broadcaster.publish(i)

        assert drain(first) == [0, 1, 2]
        assert drain(second) == [0, 1, 2]
        assert broadcaster.subscriber_count == 2

    def test_full_subscriber_loses_oldest(self):
        broadcaster = Broadcaster("test")
        queue = broadcaster.subscribe(maxsize=2)
        for i in range(3):
            broadcaster.publish(i)

        assert drain(queue) == [1, 2]
        assert broadcaster.dropped == 1

    def test_full_subscriber_loses_newest_when_configured(self):
        broadcaster = Broadcaster("test", queue_size=2, drop_when_full=False)
        queue = broadcaster.subscribe()
        for i in range(3):
            broadcaster.publish(i)

        assert drain(queue) == [0, 1]

    def test_unsubscribe(self):
        broadcaster = Broadcaster("test")
        queue = broadcaster.subscribe()
        broadcaster.unsubscribe(queue)
        broadcaster.publish(1)
        assert queue.empty()

    def test_close_ends_subscriptions(self):
        broadcaster = Broadcaster("test")
        queue = broadcaster.subscribe(maxsize=1)
        broadcaster.publish(1)
        broadcaster.close()
        broadcaster.publish(2)

        assert drain(queue) == [_END]
        assert drain(broadcaster.subscribe()) == [_END]

    def test_stream(self):
        async def scenario():
            broadcaster = Broadcaster("test")
            received = []

            async def consume():
                async for item in broadcaster.stream():
                    received.append(item)

            task = asyncio.create_task(consume())
            await asyncio.sleep(0)
            broadcaster.publish("a")
            broadcaster.publish("b")
            broadcaster.close()
            await asyncio.wait_for(task, timeout=1.0)
            return received, broadcaster.subscriber_count

        received, remaining = asyncio.run(scenario())
        assert received == ["a", "b"]
        assert remaining == 0

    def test_invalid_queue_size(self):
        with pytest.raises(ValueError):
            Broadcaster("test", queue_size=0)
