# particle.py
"""
Manages the state of all particles in the simulation.

This module defines the ParticleStore class, which owns the dense arrays
holding particle state (position, velocity, mass, color, id) together
with the domain bounds, and the immutable Particle record handed to the
renderer.
"""
import logging
import numpy as np
from dataclasses import dataclass
from typing import Optional, Tuple

from colors import assign_colors
from config import Palette
from constants import INITIAL_SPEED, MASS_MIN, MASS_SPREAD, RADIUS_SCALE

# --- Data Contracts ---
#
# class ParticleStore:
#   - initialize(self, count: int, width: float, height: float, palette: Palette) -> None:
#     - Side Effects: Replaces every particle with a freshly sampled record.
#     - Invariants:
#       - self.positions is a NumPy array of shape (N, 2) of dtype float64.
#       - self.velocities is a NumPy array of shape (N, 2) of dtype float64.
#       - self.masses is a NumPy array of shape (N,) of dtype float64.
#       - self.colors is a NumPy array of shape (N, 4) of dtype float32.
#       - self.ids is a NumPy array of shape (N,) of dtype int64.
#       - Radii are never stored; they are derived from masses on demand.
#       - Masses and the domain extents are float32-representable, so the
#         parallel records hold them without rounding.
#
#   - view(self) -> Tuple[Particle, ...]:
#     - Outputs: immutable snapshot of the state after the most recent
#       completed tick (or initialization).


def radius_of(masses):
    """Collision/render radius derived from mass."""
    return np.sqrt(masses) * RADIUS_SCALE


@dataclass(frozen=True)
class Particle:
    id: int
    x: float
    y: float
    vx: float
    vy: float
    mass: float
    color: Tuple[float, float, float, float]

    @property
    def radius(self) -> float:
        return float(radius_of(self.mass))


def _float32_exact(value: float) -> float:
    """Nearest float32 value, as a Python float (domain extents are shared with float32 records)."""
    return float(np.float32(value))


def _read_only(array: np.ndarray) -> np.ndarray:
    view = array.view()
    view.flags.writeable = False
    return view


class ParticleStore:
    """
    An index-stable arena of particles backed by NumPy arrays.

    Only the force solvers write the arrays, once per tick. Everything
    else reads through ``view()`` or the read-only array properties.
    """
    def __init__(self, count: int, width: float, height: float,
                 palette: Palette = Palette.FIREWORKS,
                 rng: Optional[np.random.Generator] = None):
        self.rng = rng if rng is not None else np.random.default_rng()
        self.initialize(count, width, height, palette)

    def initialize(self, count: int, width: float, height: float, palette: Palette) -> None:
        """
        Replaces all particles with ``count`` freshly sampled records.

        Args:
            count (int): Number of particles to create.
            width (float): Domain width; x is sampled from [0, width).
            height (float): Domain height; y is sampled from [0, height).
            palette (Palette): Palette passed to the Color Assigner.
        """
        self.width = _float32_exact(width)
        self.height = _float32_exact(height)
        self.palette = Palette.parse(palette)

        self.ids = np.arange(count, dtype=np.int64)
        self.positions = self.rng.uniform(
            low=[0.0, 0.0],
            high=[self.width, self.height],
            size=(count, 2)
        )
        self.velocities = self.rng.uniform(
            low=-INITIAL_SPEED,
            high=INITIAL_SPEED,
            size=(count, 2)
        )
        # Product of two uniforms: many light bodies, a few heavy ones.
        # Kept float32-representable so packed records carry the exact mass.
        self.masses = (
            self.rng.random(count) * self.rng.random(count) * MASS_SPREAD + MASS_MIN
        ).astype(np.float32).astype(np.float64)
        self.colors = assign_colors(self.palette, count, self.rng)

        logging.info(
            f"ParticleStore initialized with {count} particles "
            f"in a {self.width:.0f}x{self.height:.0f} domain."
        )
        logging.debug(
            f"Particle data arrays created. "
            f"Positions shape: {self.positions.shape}, "
            f"Velocities shape: {self.velocities.shape}, "
            f"Masses shape: {self.masses.shape}"
        )

    def reset(self) -> None:
        """Re-initializes with the current count, domain and palette."""
        self.initialize(self.count, self.width, self.height, self.palette)

    def resize_domain(self, width: float, height: float) -> None:
        """Updates the bounds only; particles outside are fixed by the next boundary pass."""
        self.width = _float32_exact(width)
        self.height = _float32_exact(height)
        logging.info(f"Domain resized to {self.width:.0f}x{self.height:.0f}.")

    def recolor(self, palette: Palette) -> None:
        """Reassigns every color; positions, velocities, masses and ids are untouched."""
        self.palette = Palette.parse(palette)
        self.colors = assign_colors(self.palette, self.count, self.rng)
        logging.info(f"Particles recolored with the '{self.palette.value}' palette.")

    @property
    def count(self) -> int:
        return int(self.ids.shape[0])

    def __len__(self) -> int:
        return self.count

    @property
    def radii(self) -> np.ndarray:
        return radius_of(self.masses)

    # Read-only accessors for the renderer.
    @property
    def position_view(self) -> np.ndarray:
        return _read_only(self.positions)

    @property
    def velocity_view(self) -> np.ndarray:
        return _read_only(self.velocities)

    @property
    def mass_view(self) -> np.ndarray:
        return _read_only(self.masses)

    @property
    def color_view(self) -> np.ndarray:
        return _read_only(self.colors)

    def view(self) -> Tuple[Particle, ...]:
        return tuple(
            Particle(
                id=int(self.ids[i]),
                x=float(self.positions[i, 0]),
                y=float(self.positions[i, 1]),
                vx=float(self.velocities[i, 0]),
                vy=float(self.velocities[i, 1]),
                mass=float(self.masses[i]),
                color=tuple(float(c) for c in self.colors[i]),
            )
            for i in range(self.count)
        )
