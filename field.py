# field.py
"""
The analytic vector field that drives the particles.

For a position (x, y) relative to the reference point, the field is the
complex square of x + iy, shifted along the real axis by magnet_length and
scaled by strength:

    Vx = strength * (x*x - y*y - magnet_length)
    Vy = strength * (2*x*y)

The field is even, field(-v) == field(v), and its magnitude grows with the
square of the distance, so it is strongest far from the reference point and
changes direction around |v| ~ sqrt(magnet_length).

This module also provides the regular-grid sampling used to draw the field.
"""
import math
import numpy as np
from typing import Tuple
from numba import jit

from config import SimulationConfig

# --- Data Contracts ---
#
# field_components(x, y, magnet_length, strength) -> Tuple[float, float]:
#   - Numba-jitted scalar kernel, callable from Python and from other
#     jitted code. Pure and total over finite inputs.
#
# field(v: np.ndarray, config: SimulationConfig) -> np.ndarray:
#   - Inputs: a relative position of shape (2,).
#   - Outputs: the field vector (an acceleration) of shape (2,).
#
# grid_sample_count(width, height, spacing_x, spacing_y) -> int:
#   - Outputs: ceil(width / spacing_x) * ceil(height / spacing_y).
#
# sample_field_grid(width, height, spacing_x, spacing_y,
#                   reference_point, config) -> (points, vectors):
#   - Outputs: two float64 arrays of shape (M, 2), M = grid_sample_count.
#     points are absolute (screen) coordinates in row-major order,
#     vectors the field evaluated at point - reference_point.


@jit(nopython=True)
def field_components(x, y, magnet_length, strength):
    """
    Numba-jitted field evaluation on scalars.
    """
    vx = x * x - y * y - magnet_length
    vy = 2.0 * x * y
    return strength * vx, strength * vy


def field(v: np.ndarray, config: SimulationConfig) -> np.ndarray:
    """
    Evaluates the field at a position relative to the reference point.
    """
    fx, fy = field_components(
        float(v[0]), float(v[1]), config.magnet_length, config.strength
    )
    return np.array([fx, fy], dtype=np.float64)


def grid_sample_count(width: float, height: float, spacing_x: float, spacing_y: float) -> int:
    """Number of grid points sample_field_grid produces for a display."""
    if spacing_x <= 0 or spacing_y <= 0:
        raise ValueError(
            f"Grid spacing must be positive, got ({spacing_x}, {spacing_y})."
        )
    return math.ceil(width / spacing_x) * math.ceil(height / spacing_y)


@jit(nopython=True)
def _sample_field_numba(points, reference_x, reference_y, magnet_length, strength):
    """
    Numba-jitted evaluation of the field at every grid point.
    """
    vectors = np.zeros_like(points)
    for i in range(points.shape[0]):
        fx, fy = field_components(
            points[i, 0] - reference_x,
            points[i, 1] - reference_y,
            magnet_length,
            strength,
        )
        vectors[i, 0] = fx
        vectors[i, 1] = fy
    return vectors


def sample_field_grid(
    width: float,
    height: float,
    spacing_x: float,
    spacing_y: float,
    reference_point: Tuple[float, float],
    config: SimulationConfig,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Samples the field on a regular grid covering a width x height display.

    Grid points sit at (i * spacing_x, j * spacing_y) for every i, j that
    lands inside the display, so the sample count only depends on the
    display size and spacing.

    Returns:
        Tuple[np.ndarray, np.ndarray]: The absolute sample points and the
        field vectors at those points, both of shape (M, 2).
    """
    # Raises on non-positive spacing before any array is built.
    grid_sample_count(width, height, spacing_x, spacing_y)

    xs = np.arange(math.ceil(width / spacing_x), dtype=np.float64) * spacing_x
    ys = np.arange(math.ceil(height / spacing_y), dtype=np.float64) * spacing_y
    grid_x, grid_y = np.meshgrid(xs, ys)
    points = np.column_stack((grid_x.ravel(), grid_y.ravel()))

    vectors = _sample_field_numba(
        points,
        float(reference_point[0]),
        float(reference_point[1]),
        config.magnet_length,
        config.strength,
    )
    return points, vectors
