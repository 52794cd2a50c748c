import logging
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from ..configs import StreamingConfidenceSettings
from ..core.protocols import AttentionSignal, ViewportProvider
from ..estimation.confidence import AttentionState, StreamingConfidenceModel
from ..models import GazeData, RawGazeSample
from ..utils.clock import WallClock, wall_ms

logger = logging.getLogger(__name__)


class StreamingGazeAdapter:
    """
    Boundary for gaze sources that deliver finished points instead of
    landmarks (e.g. a browser-based tracker).

    Each raw record is validated once, throttled to the configured minimum
    interval, and scored by a `StreamingConfidenceModel` against the current
    viewport and attention signals.
    """

    def __init__(
        self,
        viewport: ViewportProvider,
        attention: Optional[AttentionSignal] = None,
        settings: Optional[StreamingConfidenceSettings] = None,
        clock: WallClock = wall_ms,
    ):
        self.settings = settings or StreamingConfidenceSettings()
        self.confidence = StreamingConfidenceModel(self.settings)
        self._viewport = viewport
        self._attention = attention
        self._clock = clock
        self._last_accepted_ms: Optional[int] = None
        self.rejected = 0

    def _attention_state(self) -> AttentionState:
        if self._attention is None:
            return AttentionState()
        return AttentionState(has_focus=self._attention.has_focus, is_visible=self._attention.is_visible)

    def reset(self) -> None:
        self.confidence.reset()
        self._last_accepted_ms = None

    def ingest(self, record: Mapping[str, Any]) -> Optional[GazeData]:
        """Converts one raw record to a `GazeData`, or None if it is invalid or throttled."""
        try:
            sample = RawGazeSample.model_validate(record)
        except ValidationError as e:
            self.rejected += 1
            logger.debug("Discarding malformed gaze record: %s", e.errors())
            return None

        if sample.is_origin:
            return None

        timestamp = int(sample.timestamp) if sample.timestamp is not None else self._clock()
        if self._last_accepted_ms is not None:
            if timestamp - self._last_accepted_ms < self.settings.min_interval_ms:
                return None
        self._last_accepted_ms = timestamp

        width, height = self._viewport.viewport_size()
        confidence = self.confidence.update(
            (sample.x, sample.y),
            timestamp,
            (width, height),
            self._attention_state(),
        )
        return GazeData(x=sample.x, y=sample.y, confidence=confidence, timestamp_ms=timestamp)
