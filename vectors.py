# vectors.py
"""
Small helpers for 2D vectors.

A Vector2 is represented as a NumPy array of shape (2,) with dtype float64,
and a population of vectors as an array of shape (N, 2). Addition,
subtraction and scalar multiplication are the plain NumPy operators; this
module adds the operations that need care around the zero vector.
"""
import numpy as np

# --- Data Contracts ---
#
# vec2(x: float, y: float) -> np.ndarray
#   - Outputs: float64 array of shape (2,).
#
# magnitude(v: np.ndarray) -> float | np.ndarray
#   - Inputs: shape (2,) or (N, 2).
#   - Outputs: Euclidean length, scalar or shape (N,).
#
# normalize(v: np.ndarray) -> np.ndarray
#   - Invariants: The zero vector normalizes to the zero vector, never NaN.
#
# clamp_speed(velocities: np.ndarray, max_speed: float) -> None
#   - Side Effects: Rescales, in place, every row longer than max_speed
#     to exactly max_speed. Zero rows are already within bounds.
#     A row with an infinite component points along the signs of its
#     infinite components and is set to max_speed. A row containing NaN
#     has no direction and becomes zero.
#   - Invariants: After return every row is finite with length <= max_speed.


def vec2(x: float, y: float) -> np.ndarray:
    return np.array([x, y], dtype=np.float64)


def magnitude(v: np.ndarray):
    """Length of a vector, or of every row of an (N, 2) array."""
    v = np.asarray(v, dtype=np.float64)
    if v.ndim == 1:
        return float(np.hypot(v[0], v[1]))
    return np.hypot(v[:, 0], v[:, 1])


def normalize(v: np.ndarray) -> np.ndarray:
    """
    Unit vector in the direction of v.

    Works on a single vector or row-wise on an (N, 2) array. Zero-length
    input yields zeros instead of NaN.
    """
    v = np.asarray(v, dtype=np.float64)
    length = magnitude(v)
    if v.ndim == 1:
        if length == 0.0:
            return np.zeros(2, dtype=np.float64)
        return v / length

    out = np.zeros_like(v)
    nonzero = length > 0.0
    out[nonzero] = v[nonzero] / length[nonzero, np.newaxis]
    return out


def clamp_speed(velocities: np.ndarray, max_speed: float) -> None:
    """Caps the length of every velocity row at max_speed, in place."""
    finite = np.isfinite(velocities).all(axis=1)
    if not finite.all():
        has_nan = np.isnan(velocities).any(axis=1)
        overflowed = ~finite & ~has_nan
        # Infinite components swamp the finite ones, so only their signs remain.
        rows = velocities[overflowed]
        signs = np.where(np.isinf(rows), np.sign(rows), 0.0)
        velocities[overflowed] = normalize(signs) * max_speed
        velocities[has_nan] = 0.0

    speed = magnitude(velocities)
    # Identify particles moving too fast
    over_speed_mask = speed > max_speed
    # For those particles, scale their velocity vector back to max_speed
    velocities[over_speed_mask] = (
        velocities[over_speed_mask] / speed[over_speed_mask, np.newaxis]
    ) * max_speed
