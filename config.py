# config.py
"""
Simulation configuration value and palette identifiers.

The configuration is an immutable value: callers build a modified copy with
``dataclasses.replace`` and hand it to ``Simulation.apply_config``, which
decides whether the change needs a full reinitialization, a recolor, or
nothing more than storing the new value.
"""
import logging
import math
from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Dict, Any

from errors import InvalidConfiguration

# --- Data Contracts ---
#
# class SimulationConfig:
#   - from_dict(cls, params: Dict[str, Any]) -> SimulationConfig:
#     - Inputs:
#       - params: the "simulation" section of config.json. Unknown keys
#         are ignored with a warning, missing keys take their defaults.
#     - Outputs: a validated SimulationConfig.
#     - Raises: InvalidConfiguration for out-of-range values or an
#       unknown palette name.
#
#   - validate(self) -> None:
#     - Raises InvalidConfiguration on the first offending field.
#     - Invariants: g >= 0, 0 <= friction < 1, particle_count >= 0,
#       all numeric fields finite, paused and show_trails real booleans.


class Palette(str, Enum):
    """Color distributions available to the Color Assigner."""
    FIREWORKS = "fireworks"
    CYBERPUNK = "cyberpunk"
    OCEAN = "ocean"
    INFERNO = "inferno"
    EMERALD = "emerald"
    MONOCHROME = "monochrome"

    @classmethod
    def parse(cls, value) -> "Palette":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            names = ", ".join(p.value for p in cls)
            raise InvalidConfiguration(
                f"Unknown palette '{value}'. Expected one of: {names}."
            ) from None

    def next(self) -> "Palette":
        members = list(type(self))
        return members[(members.index(self) + 1) % len(members)]


@dataclass(frozen=True)
class SimulationConfig:
    """
    Physics parameters plus the renderer-only trail settings.

    ``trail_length`` and ``show_trails`` are not read by the core; they ride
    along so the host can keep a single configuration value.
    """
    g: float = 1.2
    friction: float = 0.005
    particle_count: int = 200
    collision_elasticity: float = 0.7
    paused: bool = False
    mouse_strength: float = 10000.0
    palette: Palette = Palette.FIREWORKS
    trail_length: int = 35
    show_trails: bool = True

    @classmethod
    def from_dict(cls, params: Dict[str, Any]) -> "SimulationConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(params) - known)
        if unknown:
            logging.warning(f"Ignoring unknown simulation parameters: {unknown}")

        values = {key: params[key] for key in known if key in params}
        if "palette" in values:
            values["palette"] = Palette.parse(values["palette"])
        try:
            for key in ("g", "friction", "collision_elasticity", "mouse_strength"):
                if key in values:
                    values[key] = float(values[key])
            for key in ("particle_count", "trail_length"):
                if key in values:
                    values[key] = int(values[key])
        except (TypeError, ValueError) as e:
            msg = f"Configuration error: non-numeric simulation parameter ({e})."
            logging.critical(msg)
            raise InvalidConfiguration(msg) from e

        config = cls(**values)
        config.validate()
        return config

    def validate(self) -> None:
        checks = [
            (math.isfinite(self.g) and self.g >= 0.0,
             f"G must be a finite non-negative number, got {self.g}"),
            (0.0 <= self.friction < 1.0,
             f"friction must lie in [0, 1), got {self.friction}"),
            (self.particle_count >= 0,
             f"particle_count must be non-negative, got {self.particle_count}"),
            (math.isfinite(self.collision_elasticity),
             f"collision_elasticity must be finite, got {self.collision_elasticity}"),
            (math.isfinite(self.mouse_strength),
             f"mouse_strength must be finite, got {self.mouse_strength}"),
            (self.trail_length >= 0,
             f"trail_length must be non-negative, got {self.trail_length}"),
            (isinstance(self.paused, bool),
             f"paused must be true or false, got {self.paused!r}"),
            (isinstance(self.show_trails, bool),
             f"show_trails must be true or false, got {self.show_trails!r}"),
        ]
        for ok, message in checks:
            if not ok:
                msg = f"Configuration error: {message}."
                logging.critical(msg)
                raise InvalidConfiguration(msg)

    def with_changes(self, **changes) -> "SimulationConfig":
        """Returns a copy with ``changes`` applied (the original is untouched)."""
        return replace(self, **changes)
