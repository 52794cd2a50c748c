import asyncio

import pytest

from gaze_engine.calibration import default_calibration_points
from gaze_engine.core.state import TrackingState
from gaze_engine.core.tracker import EyeTracker
from gaze_engine.estimation import ProcessingMode
from gaze_engine.factories import create_landmark_source
from gaze_engine.models import HeadPose
from gaze_engine.utils.types import _END

from conftest import frame_looking_at


@pytest.fixture
def tracker(settings, clock):
    tracker = EyeTracker(settings, clock=clock, wall_clock=clock.ms)
    assert tracker.initialize()
    return tracker


def drain(queue):
    items = []
    while not queue.empty():
        items.append(queue.get_nowait())
    return items


class TestLifecycle:
    def test_initialize(self, settings):
        tracker = EyeTracker(settings)
        assert tracker.state is TrackingState.UNINITIALIZED
        assert tracker.initialize()
        assert tracker.state is TrackingState.READY
        assert tracker.initialize()

    def test_cannot_start_before_initialize(self, settings):
        tracker = EyeTracker(settings)
        assert not asyncio.run(tracker.start_tracking())
        assert tracker.state is TrackingState.UNINITIALIZED

    def test_start_pause_resume_stop(self, tracker):
        async def scenario():
            assert await tracker.start_tracking()
            assert tracker.is_tracking
            assert not await tracker.start_tracking()

            assert tracker.pause_tracking()
            assert tracker.state is TrackingState.PAUSED
            assert tracker.handle_frame(frame_looking_at(0.5, 0.5)) is None

            assert await tracker.start_tracking()
            assert tracker.state is TrackingState.TRACKING

            assert await tracker.stop_tracking()
            assert tracker.state is TrackingState.READY
            assert not await tracker.stop_tracking()

        asyncio.run(scenario())

    def test_frames_ignored_when_not_tracking(self, tracker):
        assert tracker.handle_frame(frame_looking_at(0.5, 0.5)) is None

    def test_dispose_closes_streams(self, tracker):
        queue = tracker.gaze.subscribe()
        asyncio.run(tracker.dispose())
        assert tracker.state is TrackingState.UNINITIALIZED
        assert drain(queue) == [_END]


class TestFrameIntake:
    def test_publishes_all_streams(self, tracker):
        gaze, poses, eyes = tracker.gaze.subscribe(), tracker.head_pose.subscribe(), tracker.eye_state.subscribe()
        asyncio.run(tracker.start_tracking())

        pose = HeadPose(0.0, 0.0, 0.0, timestamp_ms=7)
        result = tracker.handle_frame(frame_looking_at(0.5, 0.5, pose=pose))

        assert drain(gaze) == [result]
        assert result.point == pytest.approx((960.0, 540.0))
        assert drain(poses) == [pose]
        (eye_state,) = drain(eyes)
        assert eye_state.left_eye_open and eye_state.right_eye_open

    def test_dropped_frame_publishes_nothing(self, tracker):
        gaze, poses = tracker.gaze.subscribe(), tracker.head_pose.subscribe()
        asyncio.run(tracker.start_tracking())

        assert tracker.handle_frame(frame_looking_at(0.5, 0.5, pose=HeadPose(float("nan"), 0.0, 0.0))) is None
        assert drain(gaze) == []
        assert drain(poses) == []

    def test_statistics(self, tracker, clock):
        asyncio.run(tracker.start_tracking())
        for _ in range(10):
            tracker.handle_frame(frame_looking_at(0.5, 0.5))
        tracker.handle_frame(frame_looking_at(float("nan"), 0.5))
        clock.advance(2.0)

        stats = tracker.get_tracking_statistics()
        assert stats.frames_processed == 10
        assert stats.dropped_frames == 1
        assert stats.average_fps == pytest.approx(5.0)

    def test_stream_samples(self, tracker):
        assert tracker.ingest_stream_sample({"x": 100, "y": 100, "timestamp": 1}) is None

        asyncio.run(tracker.start_tracking())
        gaze = tracker.ingest_stream_sample({"x": 100, "y": 100, "timestamp": 1})
        assert gaze.point == (100.0, 100.0)
        assert 0.0 <= gaze.confidence <= 0.9


class TestConfiguration:
    @pytest.mark.parametrize("fps, accepted", [(0, False), (1, True), (60, True), (61, False)])
    def test_tracking_frequency(self, tracker, fps, accepted):
        assert tracker.set_tracking_frequency(fps) is accepted

    def test_frequency_reaches_running_source(self, settings):
        async def scenario():
            tracker = EyeTracker(settings)
            tracker.initialize()
            source = create_landmark_source(settings)
            assert tracker.set_tracking_frequency(20)
            await tracker.start_tracking(source)
            started_at = source.frequency

            assert tracker.set_tracking_frequency(10)
            changed_to = source.frequency, source.interval_s
            await tracker.dispose()
            return started_at, changed_to

        started_at, (frequency, interval_s) = asyncio.run(scenario())
        assert started_at == 20
        assert frequency == 10
        assert interval_s == pytest.approx(0.1)

    def test_accuracy_mode(self, tracker):
        assert not tracker.set_accuracy_mode("turbo")
        assert tracker.set_accuracy_mode("fast")
        assert tracker.processor.processing_mode is ProcessingMode.FAST
        assert not tracker.processor.smoothing_enabled

    def test_smoothing_toggle(self, tracker):
        tracker.set_smoothing_enabled(False)
        assert not tracker.processor.smoothing_enabled


def run_calibration(tracker, clock, points, width=1920, height=1080):
    for point in points:
        assert tracker.add_calibration_point(point)
        clock.advance(tracker.settings.calibration.stabilization_s)
        for _ in range(20):
            tracker.handle_frame(frame_looking_at(point.x / width, point.y / height))
            clock.advance(0.01)
        clock.advance(tracker.calibration.window_duration_s)
        tracker.calibration.poll()


class TestCalibration:
    def test_requires_ready_or_tracking(self, settings):
        tracker = EyeTracker(settings)
        assert not tracker.start_calibration(default_calibration_points(1920, 1080))

    def test_full_session(self, tracker, clock):
        asyncio.run(tracker.start_tracking())
        points = default_calibration_points(1920, 1080)

        assert tracker.start_calibration(points)
        assert tracker.state is TrackingState.CALIBRATING
        run_calibration(tracker, clock, points)
        assert tracker.get_calibration_progress() == pytest.approx(1.0)

        assert tracker.finish_calibration()
        assert tracker.state is TrackingState.TRACKING
        assert tracker.get_calibration_accuracy() == pytest.approx(1.0)
        assert tracker.processor.calibration_transform is tracker.get_calibration_transform()

    def test_calibrating_from_ready_returns_to_ready(self, tracker, clock):
        points = default_calibration_points(1920, 1080)
        assert tracker.start_calibration(points)
        assert tracker.is_tracking
        run_calibration(tracker, clock, points)
        assert tracker.finish_calibration()
        assert tracker.state is TrackingState.READY

    def test_failed_session_leaves_calibrating_state(self, tracker):
        asyncio.run(tracker.start_tracking())
        assert tracker.start_calibration(default_calibration_points(1920, 1080))
        assert not tracker.finish_calibration()
        assert tracker.state is TrackingState.TRACKING
        assert tracker.processor.calibration_transform is None

    def test_stop_discards_session_but_keeps_transform(self, tracker, clock):
        points = default_calibration_points(1920, 1080)

        async def scenario():
            await tracker.start_tracking()
            tracker.start_calibration(points)
            run_calibration(tracker, clock, points)
            assert tracker.finish_calibration()
            installed = tracker.get_calibration_transform()

            tracker.start_calibration(points)
            await tracker.stop_tracking()
            return installed

        installed = asyncio.run(scenario())
        assert not tracker.calibration.is_calibrating
        assert tracker.state is TrackingState.READY
        assert tracker.get_calibration_transform() is installed
        assert tracker.processor.calibration_transform is installed

    def test_pushed_frames_window_closes_without_frames(self, tracker, clock):
        points = default_calibration_points(1920, 1080)
        tracker.settings.calibration.watchdog_interval_s = 0.01

        async def scenario():
            await tracker.start_tracking()
            tracker.start_calibration(points)
            tracker.add_calibration_point(points[0])
            clock.advance(tracker.settings.calibration.stabilization_s)
            for _ in range(20):
                tracker.handle_frame(frame_looking_at(0.5, 0.5))
                clock.advance(0.01)

            # Frames stop arriving once the window has run out.
            clock.advance(tracker.calibration.window_duration_s)
            await asyncio.sleep(0.1)
            window_open = tracker.calibration.state.window is not None
            committed = len(tracker.calibration.samples)
            await tracker.stop_tracking()
            return window_open, committed

        window_open, committed = asyncio.run(scenario())
        assert not window_open
        assert committed == 1

    def test_clear(self, tracker, clock):
        points = default_calibration_points(1920, 1080)
        tracker.start_calibration(points)
        run_calibration(tracker, clock, points)
        tracker.finish_calibration()

        assert tracker.clear_calibration()
        assert tracker.get_calibration_accuracy() == 0.0
        assert tracker.processor.calibration_transform is None


class TestWithSource:
    def test_runs_against_dummy_source(self, settings):
        async def scenario():
            tracker = EyeTracker(settings)
            tracker.initialize()
            queue = tracker.gaze.subscribe()

            assert await tracker.start_tracking(create_landmark_source(settings))
            await asyncio.sleep(0.3)
            stats = tracker.get_tracking_statistics()
            await tracker.dispose()
            return stats, drain(queue)

        stats, received = asyncio.run(scenario())
        assert stats.frames_processed > 0
        assert received[-1] is _END
        assert len(received) > 1
