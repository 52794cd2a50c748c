"""
Confidence scoring for gaze samples.

Two strategies, chosen by which upstream signals exist:

* ``landmark_confidence`` for detector frames carrying head pose and eye
  contours.
* ``StreamingConfidenceModel`` for continuous sources that only deliver a
  point (e.g. a browser tracker). It blends sample freshness with how far
  the point sits inside the viewport, gated by host attention, and smooths
  the result with an asymmetric EMA.

Both always return a value in [0, 1].
"""

from dataclasses import dataclass
from typing import Optional

from ..configs import ConfidenceSettings, StreamingConfidenceSettings
from ..models import EyeFeatures, GazeFeatures
from ..utils.geometry import clamp


def eye_quality(features: EyeFeatures, open_eye_ratio: float = 0.3) -> float:
    return min(1.0, features.aspect_ratio / open_eye_ratio)


def head_pose_factor(features: GazeFeatures, max_angle_deg: float = 30.0) -> float:
    pose = features.head_pose
    deviation = abs(pose.pitch) + abs(pose.yaw) + abs(pose.roll)
    return max(0.0, 1.0 - deviation / (3.0 * max_angle_deg))


def landmark_confidence(features: GazeFeatures, settings: Optional[ConfidenceSettings] = None) -> float:
    settings = settings or ConfidenceSettings()

    confidence = 1.0
    confidence *= head_pose_factor(features, settings.max_head_angle_deg)
    confidence *= (
        eye_quality(features.left_eye_features, settings.open_eye_ratio)
        + eye_quality(features.right_eye_features, settings.open_eye_ratio)
    ) / 2.0
    confidence *= features.head_pose.confidence
    return clamp(confidence)


@dataclass(slots=True, frozen=True)
class AttentionState:
    """Host focus/visibility flags. The gate is open only when both are set."""
    has_focus: bool = True
    is_visible: bool = True

    @property
    def is_open(self) -> bool:
        return self.has_focus and self.is_visible


class StreamingConfidenceModel:
    """
    Attention-gated, asymmetric EMA over a freshness/in-bounds blend.

    * Gate closed: the EMA snaps to ``attention_floor``.
    * Otherwise the target ``time_weight * f_time + bounds_weight * f_bounds``
      is approached at ``rise_rate`` upwards and ``fall_rate`` downwards.
    * A single update never lowers the EMA by more than ``max_drop``.
    * The stored value is capped at ``ceiling``.
    """

    def __init__(self, settings: Optional[StreamingConfidenceSettings] = None):
        self.settings = settings or StreamingConfidenceSettings()
        self._ema = self.settings.attention_floor
        self._last_timestamp_ms: Optional[float] = None

    @property
    def value(self) -> float:
        return self._ema

    def reset(self) -> None:
        self._ema = self.settings.attention_floor
        self._last_timestamp_ms = None

    def freshness(self, dt_ms: float) -> float:
        s = self.settings
        if dt_ms <= s.fresh_ms:
            return 1.0
        if dt_ms >= s.stale_ms:
            return 0.0
        return 1.0 - (dt_ms - s.fresh_ms) / (s.stale_ms - s.fresh_ms)

    def _axis_score(self, value: float, extent: float) -> float:
        # Signed distance to the nearer edge: positive inside, negative outside.
        margin = self.settings.margin_px
        inside = min(value, extent - value)
        return clamp((inside + margin) / (2.0 * margin))

    def bounds_score(self, point: tuple[float, float], width: float, height: float) -> float:
        return (self._axis_score(point[0], width) + self._axis_score(point[1], height)) / 2.0

    def target(self, dt_ms: float, point: tuple[float, float], width: float, height: float) -> float:
        s = self.settings
        return clamp(
            s.time_weight * self.freshness(dt_ms)
            + s.bounds_weight * self.bounds_score(point, width, height)
        )

    def update(
        self,
        point: tuple[float, float],
        timestamp_ms: float,
        viewport: tuple[float, float],
        attention: AttentionState = AttentionState(),
    ) -> float:
        s = self.settings
        dt_ms = 0.0 if self._last_timestamp_ms is None else max(0.0, timestamp_ms - self._last_timestamp_ms)
        self._last_timestamp_ms = timestamp_ms

        if not attention.is_open:
            self._ema = s.attention_floor
            return self._ema

        target = self.target(dt_ms, point, *viewport)
        previous = self._ema
        rate = s.rise_rate if target > previous else s.fall_rate
        updated = previous + rate * (target - previous)
        updated = max(updated, previous - s.max_drop)

        self._ema = clamp(updated, 0.0, s.ceiling)
        return self._ema
