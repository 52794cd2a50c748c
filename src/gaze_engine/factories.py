import asyncio
from typing import Any, AsyncIterable, Optional

from .acquisition import DetectorLandmarkSource, DummyLandmarkSource, LandmarkSource
from .configs import EngineSettings
from .core.protocols import LandmarkDetector, ViewportProvider
from .utils.display import FixedViewport, ScreenViewport


def create_viewport(settings: EngineSettings) -> ViewportProvider:
    """Viewport from the primary monitor when configured, else the configured size."""
    display = settings.display
    if display.detect_from_screen:
        return ScreenViewport(fallback=(display.width_px, display.height_px))
    return FixedViewport(display.width_px, display.height_px)


def create_landmark_source(
    settings: EngineSettings,
    frames: Optional[AsyncIterable[Any]] = None,
    detector: Optional[LandmarkDetector] = None,
    frequency: Optional[int] = None,
) -> LandmarkSource:
    """
    Creates a fresh landmark source for a tracking session: a detector
    source when a camera stream and detector are given, otherwise the
    simulated one, paced at ``frequency`` (default: the configured target fps).
    """
    queue: asyncio.Queue = asyncio.Queue(maxsize=settings.tracking.frame_queue_size)
    stop_event = asyncio.Event()

    if frames is not None and detector is not None:
        return DetectorLandmarkSource(queue, stop_event, frames=frames, detector=detector)

    return DummyLandmarkSource(queue, stop_event, frequency=frequency or settings.tracking.target_fps)
