# config.py
"""
Simulation configuration.

This module defines the immutable SimulationConfig value that carries the
field and integration parameters into every component. It is built once at
startup from the "simulation_parameters" section of config.json and is
validated eagerly, so that nothing invalid ever reaches the per-frame loop.
"""
import logging
import math
from dataclasses import dataclass
from typing import Dict, Any

# --- Data Contracts ---
#
# class SimulationConfig:
#   - Fields:
#     - seed: int >= 0, master seed for particle placement.
#     - particle_count: int >= 0, fixed for the lifetime of the system.
#     - magnet_length: float, shift constant of the field.
#     - strength: float, scale constant of the field.
#     - max_speed: float > 0, speed clamp applied after every step.
#     - substeps: int >= 1, RK4 steps per frame.
#     - max_delta_time: float > 0, cap on a single frame's time delta.
#   - Invariants: All floats are finite. Instances are frozen.
#
#   - from_params(params: Dict[str, Any]) -> SimulationConfig:
#     - Inputs: Dictionary of simulation parameters from config.json.
#       Missing keys fall back to DEFAULT_PARAMETERS.
#     - Outputs: A validated SimulationConfig.
#     - Side Effects: Logs the resolved configuration.

DEFAULT_PARAMETERS = {
    "seed": 42,
    "particle_count": 1000,
    "magnet_length": 4096.0,
    "strength": 1e-4,
    "max_speed": 400.0,
    "substeps": 16,
    "max_delta_time": 0.1,
}


def _fail(msg: str) -> None:
    logging.critical(msg)
    raise ValueError(msg)


@dataclass(frozen=True)
class SimulationConfig:
    """
    Process-wide simulation constants, fixed for a run.
    """
    seed: int = DEFAULT_PARAMETERS["seed"]
    particle_count: int = DEFAULT_PARAMETERS["particle_count"]
    magnet_length: float = DEFAULT_PARAMETERS["magnet_length"]
    strength: float = DEFAULT_PARAMETERS["strength"]
    max_speed: float = DEFAULT_PARAMETERS["max_speed"]
    substeps: int = DEFAULT_PARAMETERS["substeps"]
    max_delta_time: float = DEFAULT_PARAMETERS["max_delta_time"]

    def __post_init__(self):
        # Validate on construction so a bad value fails at startup,
        # never inside the frame loop.
        for name in ("magnet_length", "strength", "max_speed", "max_delta_time"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                _fail(f"Configuration error: '{name}' must be a number, got {value!r}.")
            if not math.isfinite(value):
                _fail(f"Configuration error: '{name}' must be finite, got {value!r}.")
            # Normalize ints to floats so the numba kernels see one signature.
            object.__setattr__(self, name, float(value))

        for name in ("seed", "particle_count", "substeps"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                _fail(f"Configuration error: '{name}' must be an integer, got {value!r}.")

        if self.seed < 0:
            _fail(f"Configuration error: 'seed' must not be negative, got {self.seed}.")
        if self.max_speed <= 0:
            _fail(f"Configuration error: 'max_speed' must be positive, got {self.max_speed}.")
        if self.substeps < 1:
            _fail(f"Configuration error: 'substeps' must be at least 1, got {self.substeps}.")
        if self.particle_count < 0:
            _fail(
                f"Configuration error: 'particle_count' must not be negative, "
                f"got {self.particle_count}."
            )
        if self.max_delta_time <= 0:
            _fail(
                f"Configuration error: 'max_delta_time' must be positive, "
                f"got {self.max_delta_time}."
            )

    @classmethod
    def from_params(cls, params: Dict[str, Any]) -> "SimulationConfig":
        """
        Builds a configuration from the "simulation_parameters" dictionary.

        Unknown keys are ignored with a warning; missing keys use defaults.
        """
        unknown = sorted(set(params) - set(DEFAULT_PARAMETERS))
        if unknown:
            logging.warning(f"Ignoring unknown simulation parameters: {', '.join(unknown)}")

        resolved = {key: params.get(key, default) for key, default in DEFAULT_PARAMETERS.items()}
        config = cls(**resolved)
        logging.info("Simulation configuration validated.")
        logging.debug(f"Resolved simulation parameters: {config.as_dict()}")
        return config

    def as_dict(self) -> Dict[str, Any]:
        """Returns the parameters in config.json order, for display and logging."""
        return {key: getattr(self, key) for key in DEFAULT_PARAMETERS}
