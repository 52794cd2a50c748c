"""
Small numerical helpers shared by the feature extractor, the processor and
the calibration solver.

The affine solver deliberately follows the normal-equations route
(``AᵗA x = Aᵗb``) with explicit Gaussian elimination so that near-singular
point layouts are reported as a failed fit instead of a silently huge
transform.
"""

import math
from typing import Iterable, Optional, Sequence

import numpy as np

from ..models.point import Point2D, ORIGIN

DEFAULT_PIVOT_TOLERANCE = 1e-10


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def distance(a: tuple[float, float], b: tuple[float, float]) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


def centroid(points: Sequence[tuple[float, float]]) -> Point2D:
    """Arithmetic mean of ``points``; the origin for an empty sequence."""
    if not points:
        return ORIGIN
    arr = np.asarray(points, dtype=float)
    x, y = arr.mean(axis=0)
    return Point2D(float(x), float(y))


def is_finite_point(point: tuple[float, float]) -> bool:
    return math.isfinite(point[0]) and math.isfinite(point[1])


def apply_affine(matrix: np.ndarray, point: tuple[float, float]) -> Point2D:
    x, y, _ = np.asarray(matrix, dtype=float) @ np.array([point[0], point[1], 1.0])
    return Point2D(float(x), float(y))


def solve_linear_system(
    matrix: np.ndarray,
    vector: np.ndarray,
    tolerance: float = DEFAULT_PIVOT_TOLERANCE,
) -> Optional[np.ndarray]:
    """
    Solves ``matrix @ x = vector`` by Gaussian elimination with partial pivoting.

    Returns None when a pivot's magnitude is at or below ``tolerance``.
    """
    a = np.array(matrix, dtype=float)
    b = np.array(vector, dtype=float)
    n = a.shape[0]
    if a.shape != (n, n) or b.shape != (n,):
        raise ValueError(f"Expected a square system, got {a.shape} and {b.shape}.")

    for i in range(n):
        pivot_row = i + int(np.argmax(np.abs(a[i:, i])))
        if pivot_row != i:
            a[[i, pivot_row]] = a[[pivot_row, i]]
            b[[i, pivot_row]] = b[[pivot_row, i]]

        if abs(a[i, i]) <= tolerance:
            return None

        for k in range(i + 1, n):
            factor = a[k, i] / a[i, i]
            a[k, i:] -= factor * a[i, i:]
            b[k] -= factor * b[i]

    solution = np.zeros(n)
    for i in range(n - 1, -1, -1):
        solution[i] = (b[i] - a[i, i + 1:] @ solution[i + 1:]) / a[i, i]
    return solution


def solve_least_squares(
    matrix: np.ndarray,
    vector: np.ndarray,
    tolerance: float = DEFAULT_PIVOT_TOLERANCE,
) -> Optional[np.ndarray]:
    """Least-squares solution of an over-determined system via the normal equations."""
    a = np.asarray(matrix, dtype=float)
    b = np.asarray(vector, dtype=float)
    rows, cols = a.shape
    if rows < cols:
        return None
    return solve_linear_system(a.T @ a, a.T @ b, tolerance)


def fit_affine(
    source: Sequence[tuple[float, float]],
    target: Sequence[tuple[float, float]],
    tolerance: float = DEFAULT_PIVOT_TOLERANCE,
) -> Optional[np.ndarray]:
    """
    Fits the 3x3 affine matrix mapping ``source`` points onto ``target`` points.

    Each pair contributes the rows ``[x, y, 1, 0, 0, 0]`` and
    ``[0, 0, 0, x, y, 1]``. Returns None for fewer than three pairs or a
    degenerate (e.g. collinear) layout.
    """
    if len(source) != len(target) or len(source) < 3:
        return None

    n = len(source)
    a = np.zeros((2 * n, 6))
    b = np.zeros(2 * n)
    for i, ((sx, sy), (tx, ty)) in enumerate(zip(source, target)):
        a[2 * i] = (sx, sy, 1.0, 0.0, 0.0, 0.0)
        a[2 * i + 1] = (0.0, 0.0, 0.0, sx, sy, 1.0)
        b[2 * i] = tx
        b[2 * i + 1] = ty

    params = solve_least_squares(a, b, tolerance)
    if params is None:
        return None

    return np.array([
        [params[0], params[1], params[2]],
        [params[3], params[4], params[5]],
        [0.0, 0.0, 1.0],
    ])


def mean_residual(
    matrix: np.ndarray,
    source: Iterable[tuple[float, float]],
    target: Iterable[tuple[float, float]],
) -> float:
    errors = [distance(apply_affine(matrix, s), t) for s, t in zip(source, target)]
    return sum(errors) / len(errors) if errors else 0.0


def residual_accuracy(mean_error: float, max_error: float) -> float:
    """1.0 for zero error, falling linearly to 0.0 at ``max_error`` and beyond."""
    return max(0.0, 1.0 - mean_error / max_error)
