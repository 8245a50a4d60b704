# particle.py
"""
Manages the state of all particles in the simulation.

This module defines the ParticleSystem class, which owns the particle
positions and velocities in NumPy arrays and advances them through the
field once per frame.
"""
import logging
import math
import numpy as np
from typing import Tuple

from config import SimulationConfig
from integrator import integrate_particles_numba
from vectors import clamp_speed, magnitude

# --- Data Contracts ---
#
# sanitize_delta_time(delta_time: float, max_delta_time: float) -> float:
#   - Outputs: A value in [0, max_delta_time]. NaN and negative inputs map
#     to 0, +inf and oversized inputs map to max_delta_time.
#
# class ParticleSystem:
#   - __init__(self, config: SimulationConfig, width: int, height: int):
#     - Inputs:
#       - config: A validated SimulationConfig.
#       - width, height: Size of the display, in pixels.
#     - Side Effects: Places config.particle_count particles uniformly at
#       random (seeded by config.seed) with zero velocity.
#     - Invariants:
#       - self._positions is a NumPy array of shape (N, 2) of dtype float64.
#       - self._velocities is a NumPy array of shape (N, 2) of dtype float64.
#       - N never changes.
#
#   - step(self, reference_point, delta_time) -> None:
#     - Inputs: reference_point, a finite (x, y) pair in screen space;
#       delta_time in seconds, sanitized before use.
#     - Side Effects: Integrates every particle and clamps its speed. A
#       particle whose integration overflows (non-finite position or
#       velocity, e.g. a reference point far off screen) keeps its
#       pre-step position and is stopped.
#     - Invariants: After return, every position and velocity is finite
#       and every |velocity| <= config.max_speed.
#
#   - snapshot(self) -> Tuple[np.ndarray, np.ndarray]:
#     - Outputs: Read-only views of (positions, velocities).


def sanitize_delta_time(delta_time: float, max_delta_time: float) -> float:
    """
    Clamps a frame's time delta into [0, max_delta_time].

    Large gaps (pauses, window drags) would destabilize the integration and
    negative ones would run time backwards, so both are clipped here before
    the delta is split into substeps.
    """
    if math.isnan(delta_time) or delta_time < 0.0:
        return 0.0
    return min(float(delta_time), max_delta_time)


class ParticleSystem:
    """
    The sole owner of particle state. Renderers read it via snapshot().
    """
    def __init__(self, config: SimulationConfig, width: int, height: int):
        """
        Initializes the particle system.

        Args:
            config (SimulationConfig): Validated simulation parameters.
            width (int): The width of the simulation area.
            height (int): The height of the simulation area.
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Simulation area must be positive, got {width}x{height}.")

        self.config = config
        self.width = width
        self.height = height
        self.frame = 0

        self._positions = np.zeros((config.particle_count, 2), dtype=np.float64)
        self._velocities = np.zeros((config.particle_count, 2), dtype=np.float64)
        self.reset()

        logging.info(
            f"ParticleSystem initialized with {self.particle_count} particles "
            f"over a {width}x{height} area."
        )
        logging.debug(
            f"Particle data arrays created. "
            f"Positions shape: {self._positions.shape}, "
            f"Velocities shape: {self._velocities.shape}"
        )

    @property
    def particle_count(self) -> int:
        return self._positions.shape[0]

    def reset(self) -> None:
        """
        Re-places every particle from the master seed and stops it.
        """
        # All randomness comes from a dedicated RNG built from the seed,
        # so a reset reproduces the initial placement exactly.
        rng = np.random.default_rng(self.config.seed)
        self._positions[:] = rng.uniform(
            low=[0, 0],
            high=[self.width, self.height],
            size=(self.particle_count, 2)
        )
        self._velocities.fill(0.0)
        self.frame = 0
        logging.debug("Particle positions seeded and velocities zeroed.")

    def step(self, reference_point: Tuple[float, float], delta_time: float) -> None:
        """
        Advances every particle by one frame.

        Args:
            reference_point (Tuple[float, float]): Where the field is centered
                this frame, in screen coordinates.
            delta_time (float): Frame duration in seconds.
        """
        reference = np.asarray(reference_point, dtype=np.float64)
        if reference.shape != (2,) or not np.all(np.isfinite(reference)):
            raise ValueError(f"Reference point must be a finite (x, y) pair, got {reference_point!r}.")

        dt = sanitize_delta_time(delta_time, self.config.max_delta_time)
        if dt != delta_time:
            logging.debug(f"Frame delta time {delta_time} clamped to {dt}.")

        previous_positions = self._positions.copy()

        # 1-3. Integrate in field-relative coordinates (using Numba)
        integrate_particles_numba(
            self._positions, self._velocities,
            reference[0], reference[1],
            dt, self.config.substeps,
            self.config.magnet_length, self.config.strength
        )

        diverged = ~(
            np.isfinite(self._positions).all(axis=1)
            & np.isfinite(self._velocities).all(axis=1)
        )
        if diverged.any():
            self._positions[diverged] = previous_positions[diverged]
            self._velocities[diverged] = 0.0
            logging.warning(
                f"Integration overflowed for {int(diverged.sum())} particles "
                f"(reference point {reference_point!r}); they were held in place."
            )

        # 4. Apply the speed cap
        clamp_speed(self._velocities, self.config.max_speed)
        self.frame += 1

    def snapshot(self) -> Tuple[np.ndarray, np.ndarray]:
        """
        Returns read-only views of (positions, velocities).

        The views track later steps; copy them to keep a frame's state.
        """
        positions = self._positions.view()
        velocities = self._velocities.view()
        positions.flags.writeable = False
        velocities.flags.writeable = False
        return positions, velocities

    def average_speed(self) -> float:
        """Mean particle speed, for aggregated logging."""
        if self.particle_count == 0:
            return 0.0
        return float(np.mean(magnitude(self._velocities)))
