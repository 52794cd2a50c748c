from gaze_engine.configs import ConfidenceSettings
from gaze_engine.estimation import EyeStateTracker, extract_gaze_features

from conftest import frame_looking_at

OPEN = extract_gaze_features(frame_looking_at(0.5, 0.5, eye_height=0.02))
CLOSED = extract_gaze_features(frame_looking_at(0.5, 0.5, eye_height=0.0))


class TestEyeStateTracker:
    def test_open_and_closed(self):
        tracker = EyeStateTracker()
        assert tracker.update(OPEN, 1).left_eye_open
        state = tracker.update(CLOSED, 2)
        assert not state.left_eye_open
        assert not state.right_eye_open
        assert state.timestamp_ms == 2

    def test_blink_is_open_closed_open(self):
        tracker = EyeStateTracker()
        tracker.update(OPEN, 1)
        tracker.update(CLOSED, 2)
        state = tracker.update(OPEN, 3)
        assert state.left_eye_blink
        assert state.right_eye_blink

        assert not tracker.update(OPEN, 4).left_eye_blink

    def test_long_closure_is_not_a_blink(self):
        tracker = EyeStateTracker()
        for features in (OPEN, CLOSED, CLOSED, OPEN):
            state = tracker.update(features, 0)
        assert not state.left_eye_blink

    def test_threshold_is_configurable(self):
        tracker = EyeStateTracker(ConfidenceSettings(eye_open_threshold=0.5))
        assert not tracker.update(OPEN, 0).left_eye_open

    def test_reset_forgets_history(self):
        tracker = EyeStateTracker()
        tracker.update(OPEN, 1)
        tracker.update(CLOSED, 2)
        tracker.reset()
        assert not tracker.update(OPEN, 3).left_eye_blink
