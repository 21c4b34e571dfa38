"""Tests for the simulation controller."""

import numpy as np
import pytest

from config import Palette
from errors import InvalidConfiguration
from physics import Attractor, SequentialSolver
from simulation import Simulation, SimulationState, create_solver


@pytest.fixture
def sim(calm_config, rng):
    return Simulation(calm_config, 400, 300, rng=rng)


def _snapshot(sim):
    store = sim.store
    return (store.ids.copy(), store.positions.copy(), store.velocities.copy(), store.masses.copy())


def test_defaults_to_sequential_solver(sim) -> None:
    assert isinstance(sim.solver, SequentialSolver)
    assert sim.state is SimulationState.RUNNING


def test_paused_ticks_are_bit_for_bit_no_ops(sim) -> None:
    sim.set_paused(True)
    before = _snapshot(sim)

    for _ in range(5):
        assert sim.tick(Attractor(10.0, 10.0, active=True)) is False

    after = _snapshot(sim)
    for a, b in zip(before, after):
        np.testing.assert_array_equal(a, b)
    assert sim.tick_count == 0
    assert sim.state is SimulationState.PAUSED


def test_toggle_pause_resumes_dynamics(sim) -> None:
    sim.toggle_pause()
    sim.toggle_pause()
    before = sim.store.positions.copy()
    assert sim.tick() is True
    assert not np.array_equal(before, sim.store.positions)


def test_positions_stay_inside_walls_after_every_tick(calm_config, rng) -> None:
    sim = Simulation(calm_config.with_changes(particle_count=60, g=3.0, mouse_strength=20000),
                     200, 150, rng=rng)
    for _ in range(50):
        sim.tick(Attractor(100.0, 75.0))
        radii = sim.store.radii
        x, y = sim.store.positions[:, 0], sim.store.positions[:, 1]
        assert np.all(x >= radii) and np.all(x <= 200 - radii)
        assert np.all(y >= radii) and np.all(y <= 150 - radii)


def test_single_particle_bounces_off_the_left_wall(calm_config, rng) -> None:
    sim = Simulation(calm_config.with_changes(particle_count=1), 100, 100, rng=rng)
    radius = sim.store.radii[0]
    sim.store.positions[0] = (radius - 1.0, 50.0)
    sim.store.velocities[0] = (-2.0, 0.0)

    sim.tick()

    assert sim.store.positions[0, 0] == radius
    assert sim.store.velocities[0, 0] == 1.0


def test_changing_only_g_keeps_particles(sim) -> None:
    before = _snapshot(sim)
    colors = sim.store.colors.copy()

    sim.apply_config(sim.config.with_changes(g=4.0, friction=0.1, collision_elasticity=0.9))

    after = _snapshot(sim)
    for a, b in zip(before, after):
        np.testing.assert_array_equal(a, b)
    np.testing.assert_array_equal(colors, sim.store.colors)
    assert sim.config.g == 4.0


def test_g_change_alters_subsequent_dynamics(calm_config) -> None:
    a = Simulation(calm_config, 400, 300, rng=np.random.default_rng(3))
    b = Simulation(calm_config, 400, 300, rng=np.random.default_rng(3))
    b.apply_config(b.config.with_changes(g=10.0))

    a.tick()
    b.tick()

    assert not np.allclose(a.store.velocities, b.store.velocities)


def test_palette_change_recolors_without_moving(sim) -> None:
    before = _snapshot(sim)
    colors = sim.store.colors.copy()

    sim.apply_config(sim.config.with_changes(palette=Palette.INFERNO))

    for a, b in zip(before, _snapshot(sim)):
        np.testing.assert_array_equal(a, b)
    assert sim.store.palette is Palette.INFERNO
    assert not np.array_equal(colors, sim.store.colors)


def test_particle_count_change_reinitializes(sim) -> None:
    sim.apply_config(sim.config.with_changes(particle_count=30, palette=Palette.EMERALD))
    assert sim.store.count == 30
    assert len(sim.view()) == 30
    assert sim.store.palette is Palette.EMERALD


def test_reset_keeps_count_and_clears_tick_counter(sim) -> None:
    sim.tick()
    old = sim.store.positions.copy()
    sim.reset()
    assert sim.tick_count == 0
    assert sim.store.count == 12
    assert not np.array_equal(old, sim.store.positions)


def test_resize_then_tick_pulls_particles_inside(sim) -> None:
    sim.resize_domain(50, 40)
    assert (sim.width, sim.height) == (50.0, 40.0)
    sim.tick()
    radii = sim.store.radii
    assert np.all(sim.store.positions[:, 0] <= 50 - radii)
    assert np.all(sim.store.positions[:, 1] <= 40 - radii)


def test_view_reflects_latest_tick(sim) -> None:
    sim.tick()
    particle = sim.view()[0]
    assert particle.x == sim.store.positions[0, 0]
    assert particle.vy == sim.store.velocities[0, 1]


def test_attractor_pulls_a_lone_particle(calm_config, rng) -> None:
    sim = Simulation(calm_config.with_changes(particle_count=1, mouse_strength=5000.0),
                     400, 400, rng=rng)
    sim.store.positions[0] = (100.0, 200.0)
    sim.store.velocities[0] = (0.0, 0.0)

    sim.tick(Attractor(300.0, 200.0))

    assert sim.store.velocities[0, 0] > 0.0
    assert sim.store.velocities[0, 1] == 0.0


def test_unknown_strategy_is_rejected() -> None:
    with pytest.raises(InvalidConfiguration):
        create_solver("quantum")
