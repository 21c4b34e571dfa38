# parallel.py
"""
Data-parallel batch strategy.

Particles are marshalled into a packed buffer of 48-byte float32 records
and advanced by a Numba ``parallel=True`` kernel that assigns one
independent worker (a ``prange`` iteration) per particle. Each worker
reads the whole pre-tick buffer and writes only its own slot of a second
buffer, so no worker ever observes another worker's output within the
same dispatch. The buffers are then swapped.

Record layout (bytes):
    0  pos      float32 x 2
    8  vel      float32 x 2
    16 mass     float32
    20 padding  float32
    24 (align)  8 bytes so the color vec4 starts on a 16-byte boundary
    32 color    float32 x 4 (RGBA)
"""
import logging
import numba
import numpy as np
from numba import njit, prange
from typing import Optional

from constants import (
    ATTRACTOR_SOFTENING, GRAVITY_SOFTENING, RADIUS_SCALE, TIMESTEP
)
from errors import DeviceUnavailable
from physics import Attractor, ForceSolver, pair_force

# --- Data Contracts ---
#
# class ParallelSolver(ForceSolver):
#   - __init__(self):
#     - Side Effects: compiles and runs both kernels on a two-particle
#       probe buffer.
#     - Raises: DeviceUnavailable if the kernels cannot be compiled or run.
#
#   - advance(self, store, config, attractor) -> None:
#     - Side Effects: upload -> one fused dispatch -> synchronized
#       download of positions and velocities back into the store.
#     - Invariants: buffer capacity == store.count after upload.

PARTICLE_RECORD = np.dtype({
    'names': ['pos', 'vel', 'mass', 'padding', 'color'],
    'formats': [('<f4', (2,)), ('<f4', (2,)), '<f4', '<f4', ('<f4', (4,))],
    'offsets': [0, 8, 16, 20, 32],
    'itemsize': 48,
})
RECORD_FLOATS = PARTICLE_RECORD.itemsize // 4

SIM_PARAMS = np.dtype({
    'names': [
        'g', 'friction', 'attractor', 'attractor_strength', 'particle_count',
        'width', 'height', 'dt', 'elasticity'
    ],
    'formats': ['<f4', '<f4', ('<f4', (2,)), '<f4', '<u4', '<f4', '<f4', '<f4', '<f4'],
    'offsets': [0, 4, 8, 16, 20, 24, 28, 32, 36],
    'itemsize': 64,
})

# Column indices into the flat (N, 12) float32 view of the record buffer.
POS_X, POS_Y, VEL_X, VEL_Y, MASS = 0, 1, 2, 3, 4
COLOR = 8


@njit
def _inside_float32(value, low, high):
    """
    Rounds a float64 coordinate to float32 without leaving [low, high].

    Round-to-nearest can land one float32 step outside a wall; that step
    is undone toward the interior.
    """
    stored = np.float32(value)
    if low <= high:
        if stored < low:
            stored = np.nextafter(stored, np.float32(np.inf))
        elif stored > high:
            stored = np.nextafter(stored, np.float32(-np.inf))
    return stored


@njit(parallel=True)
def _forces_kernel(src, out, count, g, softening):
    """One worker per particle: mutual gravity only."""
    for i in prange(count):
        xi = np.float64(src[i, POS_X])
        yi = np.float64(src[i, POS_Y])
        mi = np.float64(src[i, MASS])
        fx = 0.0
        fy = 0.0
        for j in range(count):
            if j == i:
                continue
            px, py = pair_force(
                xi, yi, mi,
                np.float64(src[j, POS_X]), np.float64(src[j, POS_Y]), np.float64(src[j, MASS]),
                g, softening
            )
            fx += px
            fy += py
        out[i, 0] = fx
        out[i, 1] = fy


@njit(parallel=True)
def _step_kernel(src, dst, count, g, friction, attractor_x, attractor_y, attractor_strength,
                 width, height, dt, elasticity, softening, attractor_softening):
    """
    Fused tick: gravity + attractor -> integrate -> boundary, one worker per particle.

    Reads only ``src`` and writes only ``dst[i]``.
    """
    for i in prange(count):
        xi = np.float64(src[i, POS_X])
        yi = np.float64(src[i, POS_Y])
        vx = np.float64(src[i, VEL_X])
        vy = np.float64(src[i, VEL_Y])
        mi = np.float64(src[i, MASS])

        fx = 0.0
        fy = 0.0
        for j in range(count):
            if j == i:
                continue
            px, py = pair_force(
                xi, yi, mi,
                np.float64(src[j, POS_X]), np.float64(src[j, POS_Y]), np.float64(src[j, MASS]),
                g, softening
            )
            fx += px
            fy += py

        # Attractor; strength is zero when the host input is inactive.
        dx = attractor_x - xi
        dy = attractor_y - yi
        dist_sq = dx * dx + dy * dy
        if dist_sq > 0.0:
            dist = np.sqrt(dist_sq)
            magnitude = attractor_strength * mi / (dist_sq + attractor_softening)
            fx += dx * (magnitude / dist)
            fy += dy * (magnitude / dist)

        vx += fx / mi * dt
        vy += fy / mi * dt
        vx *= (1.0 - friction)
        vy *= (1.0 - friction)
        xi += vx * dt
        yi += vy * dt

        radius = np.sqrt(mi) * RADIUS_SCALE
        if xi < radius:
            xi = radius
            vx *= -elasticity
        elif xi > width - radius:
            xi = width - radius
            vx *= -elasticity
        if yi < radius:
            yi = radius
            vy *= -elasticity
        elif yi > height - radius:
            yi = height - radius
            vy *= -elasticity

        for k in range(RECORD_FLOATS):
            dst[i, k] = src[i, k]
        dst[i, POS_X] = _inside_float32(xi, radius, width - radius)
        dst[i, POS_Y] = _inside_float32(yi, radius, height - radius)
        dst[i, VEL_X] = vx
        dst[i, VEL_Y] = vy


def flat_view(records: np.ndarray) -> np.ndarray:
    """(N, 12) float32 view sharing memory with a PARTICLE_RECORD array."""
    return records.view(np.float32).reshape(-1, RECORD_FLOATS)


def pack_particles(store) -> np.ndarray:
    """Host-side marshalling of the store into PARTICLE_RECORD layout."""
    records = np.zeros(store.count, dtype=PARTICLE_RECORD)
    records['pos'] = store.positions
    records['vel'] = store.velocities
    records['mass'] = store.masses
    records['color'] = store.colors
    return records


def pack_params(config, attractor: Optional[Attractor], count: int,
                width: float, height: float) -> np.ndarray:
    """Builds the 64-byte parameter block consumed by one dispatch."""
    params = np.zeros(1, dtype=SIM_PARAMS)
    params['g'] = config.g
    params['friction'] = config.friction
    if attractor is not None and attractor.active:
        params['attractor'] = (attractor.x, attractor.y)
        params['attractor_strength'] = config.mouse_strength
    params['particle_count'] = count
    params['width'] = width
    params['height'] = height
    params['dt'] = TIMESTEP
    params['elasticity'] = config.collision_elasticity
    return params


def _probe_kernels() -> None:
    """Compiles and runs both kernels on a tiny buffer."""
    probe = np.zeros(2, dtype=PARTICLE_RECORD)
    probe['pos'] = [(10.0, 10.0), (20.0, 20.0)]
    probe['mass'] = 4.0
    src = flat_view(probe)
    dst = np.empty_like(src)
    out = np.empty((2, 2), dtype=np.float64)
    _forces_kernel(src, out, 2, 1.0, GRAVITY_SOFTENING)
    _step_kernel(src, dst, 2, 1.0, 0.0, 0.0, 0.0, 0.0,
                 100.0, 100.0, TIMESTEP, 1.0, GRAVITY_SOFTENING, ATTRACTOR_SOFTENING)


class ParallelSolver(ForceSolver):
    """
    Parallel-batch strategy backed by the Numba threading layer.

    The solver owns a front/back pair of record buffers sized exactly to
    the store's particle count. Host code never reads the buffers directly;
    ``download`` is the one synchronized copy back into the store.
    """
    name = "parallel"

    def __init__(self):
        try:
            threads = numba.get_num_threads()
            if threads < 1:
                raise RuntimeError(f"numba reports {threads} worker threads")
            _probe_kernels()
            layer = numba.threading_layer()
        except Exception as e:
            msg = f"Parallel strategy unavailable: {e}"
            logging.error(msg)
            raise DeviceUnavailable(msg) from e

        self.threads = threads
        self.capacity = 0
        self._front = np.zeros(0, dtype=PARTICLE_RECORD)
        self._back = np.zeros(0, dtype=PARTICLE_RECORD)
        logging.info(
            f"ParallelSolver ready: {threads} worker threads on the '{layer}' threading layer."
        )

    def _reserve(self, count: int) -> None:
        if count != self.capacity:
            self._front = np.zeros(count, dtype=PARTICLE_RECORD)
            self._back = np.zeros(count, dtype=PARTICLE_RECORD)
            self.capacity = count
            logging.debug(
                f"Particle buffers resized to {count} records "
                f"({count * PARTICLE_RECORD.itemsize} bytes each)."
            )

    def upload(self, store) -> None:
        self._reserve(store.count)
        self._front[:] = pack_particles(store)

    def download(self, store) -> None:
        if store.count != self.capacity:
            raise ValueError(
                f"Store holds {store.count} particles but the buffer holds {self.capacity}."
            )
        store.positions[:] = self._front['pos']
        store.velocities[:] = self._front['vel']

    def compute_forces(self, store, config):
        self.upload(store)
        forces = np.zeros((self.capacity, 2), dtype=np.float64)
        if self.capacity:
            _forces_kernel(flat_view(self._front), forces, self.capacity,
                           float(config.g), GRAVITY_SOFTENING)
        return forces

    def advance(self, store, config, attractor=None):
        self.upload(store)
        params = pack_params(config, attractor, self.capacity, store.width, store.height)
        self.dispatch(params)
        self.download(store)

    def dispatch(self, params: np.ndarray) -> None:
        """Runs the fused kernel once and swaps the buffers."""
        block = params[0]
        count = int(block['particle_count'])
        if count == 0:
            return
        ax, ay = block['attractor']
        _step_kernel(
            flat_view(self._front), flat_view(self._back), count,
            float(block['g']), float(block['friction']),
            float(ax), float(ay), float(block['attractor_strength']),
            float(block['width']), float(block['height']),
            float(block['dt']), float(block['elasticity']),
            GRAVITY_SOFTENING, ATTRACTOR_SOFTENING
        )
        self._front, self._back = self._back, self._front
        logging.debug(f"Dispatched {count} particle workers across {self.threads} threads.")
