"""Tests for the sequential force law, attractor, integrator and boundaries."""

import math

import numpy as np
import pytest

from physics import (
    Attractor, SequentialSolver, attractor_forces, compute_forces,
    integrate, pair_force, resolve_boundaries,
)
from constants import GRAVITY_SOFTENING


def test_pair_force_obeys_newtons_third_law_exactly(rng) -> None:
    positions = rng.uniform(0, 500, size=(30, 2))
    masses = rng.uniform(2, 27, size=30)
    for i in range(30):
        for j in range(i + 1, 30):
            fij = pair_force(positions[i, 0], positions[i, 1], masses[i],
                             positions[j, 0], positions[j, 1], masses[j], 1.3, GRAVITY_SOFTENING)
            fji = pair_force(positions[j, 0], positions[j, 1], masses[j],
                             positions[i, 0], positions[i, 1], masses[i], 1.3, GRAVITY_SOFTENING)
            assert fij[0] == -fji[0]
            assert fij[1] == -fji[1]


def test_two_body_force_matches_softened_law() -> None:
    positions = np.array([[10.0, 10.0], [13.0, 14.0]])
    masses = np.array([10.0, 20.0])

    forces = compute_forces(positions, masses, 1.0)

    expected = 1.0 * 10.0 * 20.0 / 45.0
    assert math.hypot(*forces[0]) == pytest.approx(expected)
    assert math.hypot(*forces[1]) == pytest.approx(expected)
    np.testing.assert_allclose(forces[0] / expected, [0.6, 0.8])
    np.testing.assert_allclose(forces[1] / expected, [-0.6, -0.8])


def test_two_body_tick_updates_velocity_by_force_over_mass() -> None:
    positions = np.array([[10.0, 10.0], [13.0, 14.0]])
    velocities = np.zeros((2, 2))
    masses = np.array([10.0, 20.0])
    forces = compute_forces(positions, masses, 1.0)

    integrate(positions, velocities, forces, masses, friction=0.0)

    expected = 200.0 / 45.0
    np.testing.assert_allclose(velocities[0], np.array([0.6, 0.8]) * expected / 10.0)
    np.testing.assert_allclose(velocities[1], np.array([-0.6, -0.8]) * expected / 20.0)
    np.testing.assert_allclose(positions[0], np.array([10.0, 10.0]) + velocities[0])


def test_coincident_particles_produce_finite_zero_force() -> None:
    positions = np.array([[5.0, 5.0], [5.0, 5.0]])
    forces = compute_forces(positions, np.array([3.0, 4.0]), 2.0)
    assert np.all(np.isfinite(forces))
    np.testing.assert_array_equal(forces, np.zeros((2, 2)))


def test_single_and_empty_systems_feel_no_gravity() -> None:
    np.testing.assert_array_equal(compute_forces(np.array([[1.0, 2.0]]), np.array([5.0]), 1.0), [[0.0, 0.0]])
    assert compute_forces(np.zeros((0, 2)), np.zeros(0), 1.0).shape == (0, 2)


def test_gravity_is_symmetric_in_total(rng) -> None:
    positions = rng.uniform(0, 300, size=(40, 2))
    masses = rng.uniform(2, 27, size=40)
    forces = compute_forces(positions, masses, 0.8)
    np.testing.assert_allclose(forces.sum(axis=0), [0.0, 0.0], atol=1e-9)


def test_attractor_sign_selects_attraction_or_repulsion() -> None:
    positions = np.array([[0.0, 0.0]])
    masses = np.array([4.0])

    pull = attractor_forces(positions, masses, (30.0, 40.0), 1000.0)
    push = attractor_forces(positions, masses, (30.0, 40.0), -1000.0)

    magnitude = 1000.0 * 4.0 / (2500.0 + 100.0)
    np.testing.assert_allclose(pull[0], [0.6 * magnitude, 0.8 * magnitude])
    np.testing.assert_allclose(push[0], -pull[0])


def test_attractor_on_top_of_particle_is_harmless() -> None:
    forces = attractor_forces(np.array([[7.0, 7.0]]), np.array([3.0]), (7.0, 7.0), 5000.0)
    np.testing.assert_array_equal(forces, [[0.0, 0.0]])


def test_integrate_applies_friction_before_moving() -> None:
    positions = np.array([[0.0, 0.0]])
    velocities = np.array([[2.0, 0.0]])
    forces = np.array([[4.0, 0.0]])
    integrate(positions, velocities, forces, np.array([2.0]), friction=0.5)
    # (2 + 4/2) * 0.5 = 2, then the position moves by the damped velocity.
    np.testing.assert_allclose(velocities, [[2.0, 0.0]])
    np.testing.assert_allclose(positions, [[2.0, 0.0]])


def test_boundary_reflects_with_elasticity_on_both_edges() -> None:
    radii = np.array([1.0, 1.0])
    positions = np.array([[0.2, 99.5], [50.0, 50.0]])
    velocities = np.array([[-2.0, 3.0], [1.0, 1.0]])

    resolve_boundaries(positions, velocities, radii, 100.0, 100.0, 0.5)

    np.testing.assert_allclose(positions[0], [1.0, 99.0])
    np.testing.assert_allclose(velocities[0], [1.0, -1.5])
    np.testing.assert_allclose(positions[1], [50.0, 50.0])
    np.testing.assert_allclose(velocities[1], [1.0, 1.0])


def test_sequential_solver_ignores_inactive_attractor() -> None:
    from config import SimulationConfig
    from particle import ParticleStore

    config = SimulationConfig(particle_count=5, mouse_strength=1e6)
    a = ParticleStore(5, 200, 200, rng=np.random.default_rng(7))
    b = ParticleStore(5, 200, 200, rng=np.random.default_rng(7))

    SequentialSolver().advance(a, config, Attractor(100.0, 100.0, active=False))
    SequentialSolver().advance(b, config, None)

    np.testing.assert_array_equal(a.positions, b.positions)
    np.testing.assert_array_equal(a.velocities, b.velocities)
