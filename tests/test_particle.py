# test_particle.py
"""
Tests for ParticleSystem stepping, clamping and ownership rules.
"""
import math
import numpy as np
import pytest

from config import SimulationConfig
from integrator import State, integrate
from particle import ParticleSystem, sanitize_delta_time
from vectors import magnitude

WIDTH, HEIGHT = 800, 600


@pytest.fixture
def config():
    return SimulationConfig(
        seed=1234, particle_count=200, magnet_length=4096.0,
        strength=1e-4, max_speed=50.0, substeps=8, max_delta_time=0.1
    )


def test_initial_state_is_seeded_and_at_rest(config):
    system = ParticleSystem(config, WIDTH, HEIGHT)
    positions, velocities = system.snapshot()
    assert positions.shape == velocities.shape == (200, 2)
    assert positions.dtype == np.float64
    assert np.all(positions >= 0.0)
    assert np.all(positions[:, 0] < WIDTH) and np.all(positions[:, 1] < HEIGHT)
    assert not np.any(velocities)

    other, _ = ParticleSystem(config, WIDTH, HEIGHT).snapshot()
    np.testing.assert_array_equal(positions, other)


def test_different_seeds_place_particles_differently(config):
    a, _ = ParticleSystem(config, WIDTH, HEIGHT).snapshot()
    b, _ = ParticleSystem(SimulationConfig(seed=99, particle_count=200), WIDTH, HEIGHT).snapshot()
    assert not np.array_equal(a, b)


def test_snapshot_is_read_only(config):
    system = ParticleSystem(config, WIDTH, HEIGHT)
    positions, velocities = system.snapshot()
    with pytest.raises(ValueError):
        positions[0, 0] = 1.0
    with pytest.raises(ValueError):
        velocities[0] = (1.0, 1.0)
    # Stepping still works after a snapshot was handed out.
    system.step((400.0, 300.0), 1 / 60)


def test_speed_never_exceeds_max_after_step():
    config = SimulationConfig(particle_count=300, strength=1e-3, max_speed=25.0, substeps=16)
    system = ParticleSystem(config, WIDTH, HEIGHT)
    rng = np.random.default_rng(5)
    for _ in range(30):
        system.step(tuple(rng.uniform(0, [WIDTH, HEIGHT])), 1 / 30)
        _, velocities = system.snapshot()
        assert np.all(magnitude(velocities) <= config.max_speed * (1 + 1e-12))
        assert np.all(np.isfinite(velocities))


def test_step_matches_reference_integration_then_clamp(config):
    system = ParticleSystem(config, WIDTH, HEIGHT)
    start, _ = system.snapshot()
    start = start.copy()
    reference = np.array([512.0, 128.0])
    dt = 0.05

    system.step(tuple(reference), dt)
    positions, velocities = system.snapshot()

    for i in range(0, config.particle_count, 17):
        state = State(position=start[i] - reference, velocity=np.zeros(2))
        state = integrate(state, dt, config.substeps, config)
        np.testing.assert_allclose(positions[i], state.position + reference, rtol=1e-12, atol=1e-9)
        speed = magnitude(state.velocity)
        expected_velocity = state.velocity
        if speed > config.max_speed:
            expected_velocity = state.velocity / speed * config.max_speed
        np.testing.assert_allclose(velocities[i], expected_velocity, rtol=1e-12)


def test_runs_are_deterministic(config):
    rng = np.random.default_rng(8)
    references = rng.uniform(0, [WIDTH, HEIGHT], size=(40, 2))
    deltas = rng.uniform(0.0, 0.05, size=40)

    def run():
        system = ParticleSystem(config, WIDTH, HEIGHT)
        for reference, dt in zip(references, deltas):
            system.step(tuple(reference), float(dt))
        positions, velocities = system.snapshot()
        return positions.copy(), velocities.copy()

    first, second = run(), run()
    np.testing.assert_array_equal(first[0], second[0])
    np.testing.assert_array_equal(first[1], second[1])


def test_zero_strength_keeps_particles_at_rest():
    config = SimulationConfig(particle_count=50, strength=0.0)
    system = ParticleSystem(config, WIDTH, HEIGHT)
    start = system.snapshot()[0].copy()
    for _ in range(10):
        system.step((100.0, 100.0), 1 / 60)
    positions, velocities = system.snapshot()
    np.testing.assert_allclose(positions, start, rtol=0, atol=1e-9)
    assert not np.any(velocities)


@pytest.mark.parametrize("bad_dt", [-1.0, math.nan, 0.0])
def test_non_advancing_delta_times_leave_state_unchanged(config, bad_dt):
    system = ParticleSystem(config, WIDTH, HEIGHT)
    start = system.snapshot()[0].copy()
    system.step((400.0, 300.0), bad_dt)
    positions, velocities = system.snapshot()
    np.testing.assert_allclose(positions, start, rtol=0, atol=1e-9)
    assert not np.any(velocities)


@pytest.mark.parametrize("large_dt", [5.0, math.inf])
def test_large_delta_time_is_capped(config, large_dt):
    capped = ParticleSystem(config, WIDTH, HEIGHT)
    capped.step((400.0, 300.0), large_dt)
    explicit = ParticleSystem(config, WIDTH, HEIGHT)
    explicit.step((400.0, 300.0), config.max_delta_time)
    np.testing.assert_array_equal(capped.snapshot()[0], explicit.snapshot()[0])
    np.testing.assert_array_equal(capped.snapshot()[1], explicit.snapshot()[1])


def test_sanitize_delta_time():
    assert sanitize_delta_time(0.016, 0.1) == 0.016
    assert sanitize_delta_time(-0.5, 0.1) == 0.0
    assert sanitize_delta_time(math.nan, 0.1) == 0.0
    assert sanitize_delta_time(math.inf, 0.1) == 0.1
    assert sanitize_delta_time(3.0, 0.1) == 0.1


@pytest.mark.parametrize("reference", [(1.0,), (1.0, 2.0, 3.0), (math.nan, 0.0), (0.0, math.inf)])
def test_invalid_reference_point_is_rejected(config, reference):
    system = ParticleSystem(config, WIDTH, HEIGHT)
    with pytest.raises(ValueError):
        system.step(reference, 0.01)


def test_reset_restores_initial_placement(config):
    system = ParticleSystem(config, WIDTH, HEIGHT)
    start = system.snapshot()[0].copy()
    for _ in range(5):
        system.step((10.0, 20.0), 0.05)
    assert system.frame == 5
    system.reset()
    positions, velocities = system.snapshot()
    np.testing.assert_array_equal(positions, start)
    assert not np.any(velocities)
    assert system.frame == 0


def test_empty_system_steps(config):
    system = ParticleSystem(SimulationConfig(particle_count=0), WIDTH, HEIGHT)
    system.step((0.0, 0.0), 0.016)
    assert system.particle_count == 0
    assert system.average_speed() == 0.0


def test_rejects_empty_area(config):
    with pytest.raises(ValueError):
        ParticleSystem(config, 0, HEIGHT)


def test_far_reference_point_keeps_state_finite_and_clamped():
    config = SimulationConfig(particle_count=5, substeps=4)
    system = ParticleSystem(config, WIDTH, HEIGHT)
    start = system.snapshot()[0].copy()

    system.step((1e9, 0.0), 0.1)
    positions, velocities = system.snapshot()
    assert np.all(np.isfinite(positions))
    assert np.all(np.isfinite(velocities))
    assert np.all(magnitude(velocities) <= config.max_speed * (1 + 1e-12))
    # Overflowed particles are held where they were and stopped.
    diverged = ~np.any(velocities, axis=1)
    np.testing.assert_array_equal(positions[diverged], start[diverged])

    # The system keeps stepping normally once the pointer is back on screen.
    system.step((400.0, 300.0), 1 / 60)
    positions, velocities = system.snapshot()
    assert np.all(np.isfinite(positions)) and np.all(np.isfinite(velocities))
