import asyncio

import pytest

from gaze_engine.acquisition import DetectorLandmarkSource, DummyLandmarkSource

from conftest import frame_looking_at


class FlakyDetector:
    """Returns a frame for 'face', None for 'empty', and raises otherwise."""

    def detect(self, frame):
        if frame == "face":
            return frame_looking_at(0.5, 0.5)
        if frame == "empty":
            return None
        raise RuntimeError("detector crashed")


async def camera(frames):
    for frame in frames:
        yield frame


class TestLandmarkSource:
    def test_publish_keeps_newest_frame(self):
        async def scenario():
            queue = asyncio.Queue(maxsize=1)
            source = DummyLandmarkSource(queue, asyncio.Event())
            first, second = frame_looking_at(0.2, 0.2), frame_looking_at(0.8, 0.8)
            source.publish(first)
            source.publish(second)
            return source.frames_discarded, queue.get_nowait() is second

        discarded, kept_newest = asyncio.run(scenario())
        assert discarded == 1
        assert kept_newest


class TestDummyLandmarkSource:
    def test_emits_until_stopped(self):
        async def scenario():
            queue = asyncio.Queue(maxsize=100)
            source = DummyLandmarkSource(queue, asyncio.Event(), frequency=60)
            task = asyncio.create_task(source.run())
            await asyncio.sleep(0.1)
            await source.stop()
            await asyncio.wait_for(task, timeout=1.0)
            return queue.qsize()

        assert asyncio.run(scenario()) > 0

    def test_frequency_change(self):
        source = DummyLandmarkSource(asyncio.Queue(), asyncio.Event(), frequency=30)
        source.set_frequency(60)
        assert source.frequency == 60
        assert source.interval_s == pytest.approx(1 / 60)

        with pytest.raises(ValueError):
            source.set_frequency(0)

    def test_fixation(self):
        async def scenario():
            queue = asyncio.Queue(maxsize=100)
            source = DummyLandmarkSource(queue, asyncio.Event(), frequency=60)
            source.fixate(0.7, 0.4)
            task = asyncio.create_task(source.run())
            await asyncio.sleep(0.05)
            await source.stop()
            await asyncio.wait_for(task, timeout=1.0)
            return queue.get_nowait()

        frame = asyncio.run(scenario())
        assert frame.left_pupil.x - 0.4 == pytest.approx(0.1)
        assert frame.left_pupil.y - 0.45 == pytest.approx(-0.05)


class TestDetectorLandmarkSource:
    def test_skips_empty_and_failed_frames(self):
        async def scenario():
            queue = asyncio.Queue(maxsize=10)
            source = DetectorLandmarkSource(
                queue,
                asyncio.Event(),
                frames=camera(["face", "empty", "broken", "face"]),
                detector=FlakyDetector(),
            )
            await source.run()
            return queue.qsize(), source.detector_errors

        published, errors = asyncio.run(scenario())
        assert published == 2
        assert errors == 1
