import numpy as np
import pytest

from config import Palette, SimulationConfig


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def calm_config():
    """Small, undamped configuration used across the simulation tests."""
    return SimulationConfig(
        g=1.0,
        friction=0.0,
        particle_count=12,
        collision_elasticity=0.5,
        mouse_strength=0.0,
        palette=Palette.OCEAN,
    )
