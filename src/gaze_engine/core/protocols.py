from typing import Any, Optional, Protocol, runtime_checkable

from ..models import EyeLandmarks


@runtime_checkable
class LandmarkDetector(Protocol):
    """
    The external face/landmark capability.

    Whether it's a vision model, a face-mesh tracker or a native detector,
    it turns one camera frame into eye landmarks and a head pose, or None
    when no face is found.
    """
    def detect(self, frame: Any) -> Optional[EyeLandmarks]: ...


@runtime_checkable
class ViewportProvider(Protocol):
    """Reports the current host viewport size in pixels."""
    def viewport_size(self) -> tuple[int, int]: ...


@runtime_checkable
class AttentionSignal(Protocol):
    """Host focus/visibility flags, which may change asynchronously."""
    @property
    def has_focus(self) -> bool: ...

    @property
    def is_visible(self) -> bool: ...
