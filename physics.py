# physics.py
"""
Host-side physics and the force solver interface.

This module holds the pieces a tick is composed of: the pairwise
gravitational force accumulation (Numba-jitted, O(n^2)), the attractor
force, the semi-implicit Euler integrator and the boundary resolver.
None of them know about pause state; gating happens in the controller.
It also defines the ForceSolver interface and its sequential
implementation, which composes those pieces on the host.
"""
from abc import ABC, abstractmethod
from typing import NamedTuple, Optional, TYPE_CHECKING

import numpy as np
from numba import jit

from constants import ATTRACTOR_SOFTENING, GRAVITY_SOFTENING, TIMESTEP

if TYPE_CHECKING:
    from config import SimulationConfig
    from particle import ParticleStore

# --- Data Contracts ---
#
# compute_forces(positions, masses, g, softening) -> np.ndarray:
#   - Inputs: positions (N, 2) float64, masses (N,) float64.
#   - Outputs: (N, 2) float64 accumulated force on each particle.
#   - Invariants: pair_force(i <- j) == -pair_force(j <- i) bit for bit.
#
# integrate(positions, velocities, forces, masses, friction, dt) -> None:
#   - Side Effects: updates velocities then positions in place.
#
# resolve_boundaries(positions, velocities, radii, width, height, elasticity) -> None:
#   - Side Effects: clamps positions into [r, extent - r] per axis and
#     reflects the matching velocity component scaled by elasticity.


@jit(nopython=True)
def pair_force(xi, yi, mi, xj, yj, mj, g, softening):
    """Softened inverse-square force exerted on particle i by particle j."""
    dx = xj - xi
    dy = yj - yi
    dist_sq = dx * dx + dy * dy
    if dist_sq == 0.0:
        # Coincident particles: no defined direction.
        return 0.0, 0.0
    dist = np.sqrt(dist_sq)
    # Masses are multiplied first so the product is symmetric in i and j.
    force = g * (mi * mj) / (dist_sq + softening)
    return force * dx / dist, force * dy / dist


@jit(nopython=True)
def _compute_forces_numba(positions, masses, g, softening):
    """
    Numba-jitted all-pairs force accumulation.

    Every particle sums the pull of every other particle. The pair sum is
    evaluated for (i, j) and (j, i) separately, so each output row depends
    only on the input arrays.
    """
    particle_count = positions.shape[0]
    total_force = np.zeros_like(positions)

    for i in range(particle_count):
        xi = positions[i, 0]
        yi = positions[i, 1]
        mi = masses[i]
        fx = 0.0
        fy = 0.0
        for j in range(particle_count):
            if i == j:
                continue
            px, py = pair_force(xi, yi, mi, positions[j, 0], positions[j, 1], masses[j], g, softening)
            fx += px
            fy += py
        total_force[i, 0] = fx
        total_force[i, 1] = fy
    return total_force


def compute_forces(positions: np.ndarray, masses: np.ndarray, g: float,
                   softening: float = GRAVITY_SOFTENING) -> np.ndarray:
    """Mutual gravity on every particle, shape (N, 2)."""
    if positions.shape[0] == 0:
        return np.zeros((0, 2), dtype=np.float64)
    return _compute_forces_numba(
        np.ascontiguousarray(positions, dtype=np.float64),
        np.ascontiguousarray(masses, dtype=np.float64),
        float(g), float(softening)
    )


def attractor_forces(positions: np.ndarray, masses: np.ndarray, point, strength: float,
                     softening: float = ATTRACTOR_SOFTENING) -> np.ndarray:
    """
    Force pulling every particle toward ``point``.

    Positive ``strength`` attracts, negative repels. The magnitude is
    ``strength * m / d^2`` with ``d^2 = |point - p|^2 + softening``.
    """
    delta = np.asarray(point, dtype=np.float64)[np.newaxis, :] - positions
    dist_sq = delta[:, 0] ** 2 + delta[:, 1] ** 2
    dist = np.sqrt(dist_sq)
    magnitude = strength * masses / (dist_sq + softening)
    # A particle sitting exactly on the point feels no force.
    scale = np.divide(magnitude, dist, out=np.zeros_like(magnitude), where=dist > 0.0)
    return delta * scale[:, np.newaxis]


def integrate(positions: np.ndarray, velocities: np.ndarray, forces: np.ndarray,
              masses: np.ndarray, friction: float, dt: float = TIMESTEP) -> None:
    """Accelerate, damp, move."""
    velocities += forces / masses[:, np.newaxis] * dt
    velocities *= (1.0 - friction)
    positions += velocities * dt


def resolve_boundaries(positions: np.ndarray, velocities: np.ndarray, radii: np.ndarray,
                       width: float, height: float, elasticity: float) -> None:
    """Hard walls with energy loss; the two axes are resolved independently."""
    for axis, extent in ((0, width), (1, height)):
        pos = positions[:, axis]
        vel = velocities[:, axis]

        below = pos < radii
        above = ~below & (pos > extent - radii)

        pos[below] = radii[below]
        vel[below] *= -elasticity
        pos[above] = extent - radii[above]
        vel[above] *= -elasticity


class Attractor(NamedTuple):
    """One sample of the host's attractor input (e.g. the mouse cursor)."""
    x: float
    y: float
    active: bool = True


class ForceSolver(ABC):
    """
    Capability interface shared by the sequential and parallel strategies.

    ``compute_forces`` returns the mutual-gravity force on every particle;
    ``advance`` runs one full tick of dynamics (attractor, gravity,
    integration, boundaries) against the store.
    """
    name = "abstract"

    @abstractmethod
    def compute_forces(self, store: "ParticleStore", config: "SimulationConfig") -> np.ndarray:
        ...

    @abstractmethod
    def advance(self, store: "ParticleStore", config: "SimulationConfig",
                attractor: Optional[Attractor] = None) -> None:
        ...


class SequentialSolver(ForceSolver):
    """Single-threaded reference strategy; every step runs on the host."""
    name = "sequential"

    def compute_forces(self, store, config):
        return compute_forces(store.positions, store.masses, config.g)

    def advance(self, store, config, attractor=None):
        forces = self.compute_forces(store, config)
        if attractor is not None and attractor.active and store.count:
            forces += attractor_forces(
                store.positions, store.masses,
                (attractor.x, attractor.y), config.mouse_strength
            )
        integrate(store.positions, store.velocities, forces, store.masses, config.friction)
        resolve_boundaries(
            store.positions, store.velocities, store.radii,
            store.width, store.height, config.collision_elasticity
        )
