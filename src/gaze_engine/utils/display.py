import logging

from screeninfo import get_monitors, ScreenInfoError

logger = logging.getLogger(__name__)


class FixedViewport:
    """A viewport of known size, e.g. from settings or a host window."""

    def __init__(self, width: int, height: int):
        self.resize(width, height)

    def resize(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"Viewport must be positive, got {width}x{height}.")
        self.width = width
        self.height = height

    def viewport_size(self) -> tuple[int, int]:
        return self.width, self.height


class ScreenViewport:
    """Reports the size of the primary monitor, falling back to a default when none is found."""

    def __init__(self, fallback: tuple[int, int] = (1920, 1080)):
        self._fallback = fallback

    def viewport_size(self) -> tuple[int, int]:
        try:
            monitors = get_monitors()
        except ScreenInfoError:
            logger.warning("No display detected, using fallback viewport %dx%d.", *self._fallback)
            return self._fallback

        primary = next((m for m in monitors if m.is_primary), monitors[0] if monitors else None)
        if primary is None:
            return self._fallback
        return primary.width, primary.height
