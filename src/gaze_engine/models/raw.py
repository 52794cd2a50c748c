import math
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator


class RawGazeSample(BaseModel):
    """
    A gaze record as delivered by a streaming tracker (e.g. a browser
    library). Coordinates may arrive as numbers or numeric strings; they are
    validated here once so the rest of the engine only sees ``GazeData``.
    """
    model_config = ConfigDict(extra="ignore", frozen=True)

    x: float
    y: float
    timestamp: Optional[float] = None

    @field_validator("x", "y")
    @classmethod
    def _finite(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("coordinate must be finite")
        return value

    @property
    def is_origin(self) -> bool:
        # Trackers report (0, 0) before they produce a real prediction.
        return self.x == 0.0 and self.y == 0.0
