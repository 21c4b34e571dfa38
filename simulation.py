# simulation.py
"""
Handles the orchestration of one simulation tick.

This module defines the Simulation controller, which owns the current
configuration, the particle store and the chosen force solver. It decides
how a configuration change is applied (full reinitialization, recolor, or
plain replacement) and is the single place where pause state gates the
dynamics.
"""
import logging
import numpy as np
from enum import Enum
from typing import Optional, Tuple

from config import SimulationConfig
from errors import InvalidConfiguration
from particle import Particle, ParticleStore
from physics import Attractor, ForceSolver, SequentialSolver

# --- Data Contracts ---
#
# class Simulation:
#   - __init__(self, config: SimulationConfig, width: float, height: float,
#              solver: Optional[ForceSolver] = None, rng=None):
#     - Side Effects: Creates and initializes the ParticleStore.
#
#   - apply_config(self, config: SimulationConfig) -> None:
#     - Side Effects: particle_count changed -> store re-initialized;
#       otherwise palette changed -> store recolored. The stored config is
#       always replaced.
#
#   - tick(self, attractor: Optional[Attractor] = None) -> bool:
#     - Outputs: True if dynamics ran, False while paused.
#     - Invariants: exactly one solver.advance per running tick; particle
#       count is unchanged by a tick.


class SimulationState(Enum):
    RUNNING = "running"
    PAUSED = "paused"


def create_solver(strategy: str = "sequential") -> ForceSolver:
    """
    Builds the requested force solver.

    ``"parallel"`` raises DeviceUnavailable when the batch device cannot be
    initialized; the caller decides whether to fall back.
    """
    strategy = strategy.lower()
    if strategy == "sequential":
        return SequentialSolver()
    if strategy == "parallel":
        # Imported lazily so the sequential path never compiles parallel kernels.
        from parallel import ParallelSolver
        return ParallelSolver()
    raise InvalidConfiguration(
        f"Unknown solver strategy '{strategy}'. Expected 'sequential' or 'parallel'."
    )


class Simulation:
    """
    Owns the configuration, domain and particles, and advances them on demand.

    The driving cadence is external: a host calls ``tick()`` once per frame.
    """
    def __init__(self, config: SimulationConfig, width: float, height: float,
                 solver: Optional[ForceSolver] = None,
                 rng: Optional[np.random.Generator] = None):
        """
        Initializes the simulation environment.

        Args:
            config (SimulationConfig): Initial configuration.
            width (float): Domain width.
            height (float): Domain height.
            solver (ForceSolver): Strategy to use; sequential if omitted.
            rng (np.random.Generator): Source of randomness for the store.
        """
        self.config = config
        self.solver = solver if solver is not None else SequentialSolver()
        self.store = ParticleStore(config.particle_count, width, height, config.palette, rng=rng)
        self.tick_count = 0
        logging.info(
            f"Simulation initialized with the {self.solver.name} solver "
            f"({config.particle_count} particles, G={config.g})."
        )

    @property
    def state(self) -> SimulationState:
        return SimulationState.PAUSED if self.config.paused else SimulationState.RUNNING

    @property
    def width(self) -> float:
        return self.store.width

    @property
    def height(self) -> float:
        return self.store.height

    def apply_config(self, config: SimulationConfig) -> None:
        previous = self.config
        self.config = config

        if config.particle_count != self.store.count:
            logging.info(
                f"Particle count changed ({self.store.count} -> {config.particle_count}). "
                f"Reinitializing particles."
            )
            self.store.initialize(config.particle_count, self.store.width,
                                  self.store.height, config.palette)
        elif config.palette != self.store.palette:
            self.store.recolor(config.palette)

        if config.paused != previous.paused:
            logging.info(f"Simulation {self.state.value}.")

    def set_paused(self, paused: bool) -> None:
        if paused != self.config.paused:
            self.apply_config(self.config.with_changes(paused=paused))

    def toggle_pause(self) -> None:
        self.set_paused(not self.config.paused)

    def reset(self) -> None:
        logging.info("Simulation reset requested. Regenerating particles.")
        self.store.initialize(self.config.particle_count, self.store.width,
                              self.store.height, self.config.palette)
        self.tick_count = 0

    def resize_domain(self, width: float, height: float) -> None:
        self.store.resize_domain(width, height)

    def tick(self, attractor: Optional[Attractor] = None) -> bool:
        """
        Executes one time step of the simulation.

        Args:
            attractor (Attractor): Latest host attractor sample, if any.

        Returns:
            bool: False if the simulation is paused and nothing ran.
        """
        if self.config.paused:
            return False
        self.solver.advance(self.store, self.config, attractor)
        self.tick_count += 1
        return True

    def view(self) -> Tuple[Particle, ...]:
        return self.store.view()
