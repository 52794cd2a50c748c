import pytest

from gaze_engine.acquisition import StreamingGazeAdapter
from gaze_engine.utils.display import FixedViewport


class Attention:
    def __init__(self, has_focus=True, is_visible=True):
        self.has_focus = has_focus
        self.is_visible = is_visible


@pytest.fixture
def adapter():
    return StreamingGazeAdapter(FixedViewport(1000, 800), clock=lambda: 5_000)


class TestStreamingGazeAdapter:
    def test_accepts_valid_record(self, adapter):
        gaze = adapter.ingest({"x": 500, "y": 400, "timestamp": 1_000})
        assert gaze.point == (500.0, 400.0)
        assert gaze.timestamp_ms == 1_000
        assert gaze.confidence == pytest.approx(0.3 + 0.35 * 0.7)

    def test_numeric_strings_and_extra_fields(self, adapter):
        gaze = adapter.ingest({"x": "120.5", "y": "80", "eyeFeatures": {}})
        assert gaze.point == (120.5, 80.0)

    def test_missing_timestamp_uses_clock(self, adapter):
        assert adapter.ingest({"x": 10, "y": 10}).timestamp_ms == 5_000

    @pytest.mark.parametrize("record", [
        {"x": float("nan"), "y": 1.0},
        {"x": 1.0, "y": float("inf")},
        {"x": "left", "y": 1.0},
        {"y": 1.0},
    ])
    def test_malformed_records_are_rejected(self, adapter, record):
        assert adapter.ingest(record) is None
        assert adapter.rejected == 1

    def test_origin_is_ignored(self, adapter):
        assert adapter.ingest({"x": 0, "y": 0, "timestamp": 1}) is None
        assert adapter.rejected == 0

    def test_throttles_fast_streams(self, adapter):
        assert adapter.ingest({"x": 10, "y": 10, "timestamp": 1_000}) is not None
        assert adapter.ingest({"x": 11, "y": 10, "timestamp": 1_010}) is None
        assert adapter.ingest({"x": 12, "y": 10, "timestamp": 1_040}) is not None

    def test_attention_gate(self):
        attention = Attention()
        adapter = StreamingGazeAdapter(FixedViewport(1000, 800), attention)
        for i in range(10):
            adapter.ingest({"x": 500, "y": 400, "timestamp": i * 40})
        assert adapter.confidence.value > 0.8

        attention.has_focus = False
        assert adapter.ingest({"x": 500, "y": 400, "timestamp": 400}).confidence == pytest.approx(0.3)

    def test_reset(self, adapter):
        adapter.ingest({"x": 10, "y": 10, "timestamp": 1_000})
        adapter.reset()
        assert adapter.confidence.value == pytest.approx(0.3)
        assert adapter.ingest({"x": 10, "y": 10, "timestamp": 1_001}) is not None
