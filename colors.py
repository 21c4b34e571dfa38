# colors.py
"""
Color Assigner: maps a palette to a hue/saturation/lightness sampling rule.

Colors are display values only. The physics never reads them; they are
kept as normalized RGBA float32 so they drop straight into the color slot
of the parallel strategy's particle records.
"""
import logging
import numpy as np
import pygame
from typing import Optional, Tuple

from config import Palette

# Hue ranges in degrees as (low, high) pairs; one pair is chosen uniformly.
_HUE_BANDS = {
    Palette.FIREWORKS: ((0.0, 360.0),),
    Palette.CYBERPUNK: ((280.0, 320.0), (180.0, 220.0)),
    Palette.OCEAN: ((170.0, 230.0),),
    Palette.INFERNO: ((0.0, 50.0),),
    Palette.EMERALD: ((100.0, 160.0),),
}


def _sample_hsl(palette: Palette, rng: np.random.Generator) -> Tuple[float, float, float]:
    if palette is Palette.MONOCHROME:
        return 0.0, 0.0, rng.uniform(50.0, 100.0)
    bands = _HUE_BANDS[palette]
    low, high = bands[int(rng.integers(len(bands)))]
    return rng.uniform(low, high), 100.0, 50.0


def generate_color(palette: Palette, rng: Optional[np.random.Generator] = None) -> Tuple[float, float, float, float]:
    """Returns one random, fully opaque RGBA color (components in [0, 1])."""
    rng = rng if rng is not None else np.random.default_rng()
    hue, saturation, lightness = _sample_hsl(Palette.parse(palette), rng)
    color = pygame.Color(0, 0, 0)
    color.hsla = (hue, saturation, lightness, 100)
    r, g, b, _ = color.normalize()
    return r, g, b, 1.0


def assign_colors(palette: Palette, count: int, rng: Optional[np.random.Generator] = None) -> np.ndarray:
    """Returns a (count, 4) float32 array with one fresh color per particle."""
    rng = rng if rng is not None else np.random.default_rng()
    colors = np.empty((count, 4), dtype=np.float32)
    for i in range(count):
        colors[i] = generate_color(palette, rng)
    logging.debug(f"Assigned {count} colors from the '{Palette.parse(palette).value}' palette.")
    return colors
