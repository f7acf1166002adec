"""
Seed and query point placement for field-line tracing and field maps.
"""

import math
import numpy as np
from typing import Tuple

Point = Tuple[float, float]
Bounds = Tuple[float, float, float, float]


def line_count(magnitude: float, lines_per_unit_charge: float) -> int:
    """
    Number of field lines spawned by a charge.

    Rounds half up, so a charge of 1.25 at 2 lines per unit gives 3 lines.
    Non-finite products spawn nothing.

    Args:
        magnitude: Signed charge magnitude
        lines_per_unit_charge: Lines per unit of |magnitude|

    Returns:
        Non-negative line count
    """
    wanted = abs(magnitude) * lines_per_unit_charge
    if not math.isfinite(wanted) or wanted <= 0:
        return 0
    return int(math.floor(wanted + 0.5))


def circle_seeds(center: Point, count: int, radius: float) -> np.ndarray:
    """
    Points evenly spaced in angle on a circle around ``center``.

    The first seed sits at angle 0 (to the right of the centre).

    Returns:
        Array of shape (count, 2)
    """
    if count <= 0:
        return np.empty((0, 2), dtype=float)
    angles = 2.0 * np.pi * np.arange(count) / count
    seeds = np.empty((count, 2), dtype=float)
    seeds[:, 0] = center[0] + radius * np.cos(angles)
    seeds[:, 1] = center[1] + radius * np.sin(angles)
    return seeds


def uniform_grid(bounds: Bounds, resolution: Tuple[int, int]) -> np.ndarray:
    """
    Regular grid of query points covering ``bounds``.

    Args:
        bounds: (x_min, x_max, y_min, y_max)
        resolution: (nx, ny) number of points along each axis

    Returns:
        Array of shape (nx * ny, 2), x varying fastest
    """
    x_min, x_max, y_min, y_max = bounds
    nx, ny = resolution
    xs = np.linspace(x_min, x_max, nx)
    ys = np.linspace(y_min, y_max, ny)
    X, Y = np.meshgrid(xs, ys)
    return np.stack([X.ravel(), Y.ravel()], axis=1)
