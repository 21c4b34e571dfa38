# constants.py
"""
Application-level constants.

These values are static and do not change between simulation runs.
They cover the physical constants of the force law, the sampling ranges
used when the particle store is (re)generated, and default window and
rendering properties of the pygame host.
"""

# --- Force law ---
# Squared-distance softening for mutual gravity between particles.
GRAVITY_SOFTENING = 20.0
# Looser softening for the single interactive attractor point.
ATTRACTOR_SOFTENING = 100.0
# Integration timestep shared by the sequential and parallel strategies.
TIMESTEP = 1.0

# --- Particle sampling ---
# Mass is u1 * u2 * MASS_SPREAD + MASS_MIN, skewed toward light bodies.
MASS_MIN = 2.0
MASS_SPREAD = 25.0
# Initial velocity is uniform in [-INITIAL_SPEED, INITIAL_SPEED) per axis.
INITIAL_SPEED = 1.0
# radius = sqrt(mass) * RADIUS_SCALE
RADIUS_SCALE = 0.5

# Visualization settings
# Set to True to run in borderless fullscreen mode.
# Set to False to run in a fixed-size window (1500x800).
FULLSCREEN = False
WINDOW_WIDTH = 1500
WINDOW_HEIGHT = 800
UI_PANEL_WIDTH = 300
FPS = 60
BACKGROUND_COLOR = (3, 5, 23) # Deep navy
# Drawn particle radius is the physical radius times this factor.
DRAW_RADIUS_SCALE = 2.0

# --- Visual Appeal Enhancements ---
# Ratio of the halo size to the particle radius. e.g., 3 means halo is 3x bigger.
PARTICLE_HALO_RATIO = 3
# Alpha value for the particle halo (0-255).
PARTICLE_HALO_ALPHA = 40
# Alpha for the UI panel background
UI_BACKGROUND_ALPHA = 100
# Lower bound on the per-frame fade used for trails (0-1).
MIN_TRAIL_FADE = 0.015
