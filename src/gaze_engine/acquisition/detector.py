import asyncio
import logging
from typing import Any, AsyncIterable

from ..core.protocols import LandmarkDetector
from .base import LandmarkSource

logger = logging.getLogger(__name__)


class DetectorLandmarkSource(LandmarkSource):
    """
    A LandmarkSource that runs an external detector over camera frames.

    Frames come from any async iterable (the camera capture loop). Detection
    is a blocking call, so it runs in a worker thread to keep the event loop
    responsive; frames without a face are skipped.
    """

    def __init__(self, *args, frames: AsyncIterable[Any], detector: LandmarkDetector, **kwargs):
        super().__init__(*args, **kwargs)
        self._frames = frames
        self._detector = detector
        self.detector_errors = 0

    async def run(self) -> None:
        logger.info("Detector source started.")
        try:
            async for frame in self._frames:
                if self._stop_event.is_set():
                    break

                try:
                    landmarks = await asyncio.to_thread(self._detector.detect, frame)
                except Exception:
                    self.detector_errors += 1
                    logger.exception("Landmark detector failed on a frame.")
                    continue

                if landmarks is not None:
                    self.publish(landmarks)

        except asyncio.CancelledError:
            logger.info("Detector source run task was cancelled.")
        finally:
            logger.info("DetectorLandmarkSource has stopped.")
