# integrator.py
"""
Fourth-order Runge-Kutta integration of particle motion in the field.

The field is treated as an acceleration: a State is a (position, velocity)
pair relative to the reference point, and its Derivative is
(velocity, field(position)). integrate_step advances one State by one
step h with the classic explicit RK4 scheme.

The State/Derivative functions below are the readable reference path and
are used for single-particle work and tests. integrate_particles_numba is
the same arithmetic, in the same order, unrolled onto scalars so the whole
population can be advanced in one jitted call each frame.
"""
import numpy as np
from dataclasses import dataclass
from numba import jit

from config import SimulationConfig
from field import field, field_components

# --- Data Contracts ---
#
# class State:
#   - position: np.ndarray (2,), relative to the reference point.
#   - velocity: np.ndarray (2,).
#
# class Derivative:
#   - d_position: np.ndarray (2,), equal to the state's velocity.
#   - d_velocity: np.ndarray (2,), equal to the field at the state's position.
#
# evaluate(state: State, config: SimulationConfig) -> Derivative
#
# integrate_step(state: State, h: float, config: SimulationConfig) -> State:
#   - Invariants: integrate_step(state, 0, config) == state.
#     Exact straight-line motion when config.strength == 0.
#
# integrate(state, total_time, substeps, config) -> State:
#   - Applies integrate_step `substeps` times with h = total_time / substeps.
#
# integrate_particles_numba(positions, velocities, reference_x, reference_y,
#                           delta_time, substeps, magnet_length, strength) -> None:
#   - Inputs: positions and velocities are (N, 2) float64 arrays in
#     absolute coordinates.
#   - Side Effects: Overwrites both arrays with the integrated state.
#     Does not clamp speed.


@dataclass(frozen=True)
class State:
    position: np.ndarray
    velocity: np.ndarray

    def advanced(self, derivative: "Derivative", h: float) -> "State":
        """Returns state + derivative * h, componentwise."""
        return State(
            position=self.position + derivative.d_position * h,
            velocity=self.velocity + derivative.d_velocity * h,
        )

    def __eq__(self, other):
        if not isinstance(other, State):
            return NotImplemented
        return (
            np.array_equal(self.position, other.position)
            and np.array_equal(self.velocity, other.velocity)
        )


@dataclass(frozen=True)
class Derivative:
    d_position: np.ndarray
    d_velocity: np.ndarray


def evaluate(state: State, config: SimulationConfig) -> Derivative:
    return Derivative(
        d_position=state.velocity,
        d_velocity=field(state.position, config),
    )


def integrate_step(state: State, h: float, config: SimulationConfig) -> State:
    """
    Advances a state by one RK4 step of size h.
    """
    half = h / 2.0
    k1 = evaluate(state, config)
    k2 = evaluate(state.advanced(k1, half), config)
    k3 = evaluate(state.advanced(k2, half), config)
    k4 = evaluate(state.advanced(k3, h), config)

    sixth = h / 6.0
    d_position = k1.d_position + 2.0 * k2.d_position + 2.0 * k3.d_position + k4.d_position
    d_velocity = k1.d_velocity + 2.0 * k2.d_velocity + 2.0 * k3.d_velocity + k4.d_velocity
    return State(
        position=state.position + d_position * sixth,
        velocity=state.velocity + d_velocity * sixth,
    )


def integrate(state: State, total_time: float, substeps: int, config: SimulationConfig) -> State:
    """
    Advances a state over total_time in `substeps` equal RK4 steps.
    """
    if substeps < 1:
        raise ValueError(f"substeps must be at least 1, got {substeps}.")
    h = total_time / substeps
    for _ in range(substeps):
        state = integrate_step(state, h, config)
    return state


@jit(nopython=True)
def _rk4_step_numba(x, y, vx, vy, h, magnet_length, strength):
    """
    Numba-jitted RK4 step on scalars. Mirrors integrate_step exactly.
    """
    half = h / 2.0

    # k1
    k1_px, k1_py = vx, vy
    k1_vx, k1_vy = field_components(x, y, magnet_length, strength)

    # k2, from state + k1 * h/2
    k2_px = vx + k1_vx * half
    k2_py = vy + k1_vy * half
    k2_vx, k2_vy = field_components(x + k1_px * half, y + k1_py * half, magnet_length, strength)

    # k3, from state + k2 * h/2
    k3_px = vx + k2_vx * half
    k3_py = vy + k2_vy * half
    k3_vx, k3_vy = field_components(x + k2_px * half, y + k2_py * half, magnet_length, strength)

    # k4, from state + k3 * h
    k4_px = vx + k3_vx * h
    k4_py = vy + k3_vy * h
    k4_vx, k4_vy = field_components(x + k3_px * h, y + k3_py * h, magnet_length, strength)

    sixth = h / 6.0
    x_new = x + (k1_px + 2.0 * k2_px + 2.0 * k3_px + k4_px) * sixth
    y_new = y + (k1_py + 2.0 * k2_py + 2.0 * k3_py + k4_py) * sixth
    vx_new = vx + (k1_vx + 2.0 * k2_vx + 2.0 * k3_vx + k4_vx) * sixth
    vy_new = vy + (k1_vy + 2.0 * k2_vy + 2.0 * k3_vy + k4_vy) * sixth
    return x_new, y_new, vx_new, vy_new


@jit(nopython=True)
def integrate_particles_numba(
    positions, velocities, reference_x, reference_y,
    delta_time, substeps, magnet_length, strength
):
    """
    Numba-jitted per-frame update of every particle.

    Each particle is moved into field-relative coordinates, advanced by
    `substeps` RK4 steps of delta_time / substeps, and written back in
    absolute coordinates. Particles do not interact, so the loop order
    does not matter.
    """
    h = delta_time / substeps
    for i in range(positions.shape[0]):
        x = positions[i, 0] - reference_x
        y = positions[i, 1] - reference_y
        vx = velocities[i, 0]
        vy = velocities[i, 1]

        for _ in range(substeps):
            x, y, vx, vy = _rk4_step_numba(x, y, vx, vy, h, magnet_length, strength)

        positions[i, 0] = x + reference_x
        positions[i, 1] = y + reference_y
        velocities[i, 0] = vx
        velocities[i, 1] = vy
