from typing import NamedTuple


class Point2D(NamedTuple):
    """A 2-D point or displacement; unpacks as ``(x, y)``."""
    x: float
    y: float


# Offsets share the point representation.
Vector2D = Point2D

ORIGIN = Point2D(0.0, 0.0)
