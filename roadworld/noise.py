# roadworld/noise.py

"""
================================================================================
NOISE GENERATION UTILITIES
================================================================================
This module provides improved 3D Perlin noise and its fractal (octave) sum.
The kernels are pure, stateless functions JIT-compiled with Numba; the
`NoiseField` class only binds them to a seeded permutation table.

Data Contract:
---------------
- Inputs:
    - p: A doubled (512-entry) NumPy permutation table (int array).
    - x, y, z: Scalar coordinates, or 2D NumPy arrays of x and z.
    - octaves, persistence, scale: Standard fractal-sum parameters.
- Outputs:
    - Noise values in approximately [-1, 1]. Octave sums are normalized by
      their total amplitude.
- Side Effects: None.
- Invariants:
    - Noise is exactly 0 at integer lattice points.
    - Noise is periodic with period 256 along every axis.
    - The shape of grid outputs matches the shape of the coordinate arrays.
================================================================================
"""

import numpy as np
from numba import njit

from . import config as DEFAULTS


def build_permutation_table(seed: int) -> np.ndarray:
    """
    Shuffles 0..255 deterministically from the seed and doubles the result so
    that `p[i + 1]` never needs wrapping.
    """
    p = np.arange(DEFAULTS.PERMUTATION_SIZE, dtype=np.int64)
    rng = np.random.default_rng(seed)
    rng.shuffle(p)
    table = np.concatenate([p, p])
    table.setflags(write=False)
    return table


@njit
def _fade(t):
    "6t^5 - 15t^4 + 10t^3"
    return t * t * t * (t * (t * 6.0 - 15.0) + 10.0)


@njit
def _lerp(t, a, b):
    "Linear interpolation."
    return a + t * (b - a)


@njit
def _gradient(h, x, y, z):
    """Dot product with one of the 12 cube-edge directions picked by the low nibble."""
    h = h & 15
    u = x if h < 8 else y
    if h < 4:
        v = y
    elif h == 12 or h == 14:
        v = x
    else:
        v = z
    return (u if (h & 1) == 0 else -u) + (v if (h & 2) == 0 else -v)


@njit
def perlin_noise_3d(p, x, y, z):
    """Improved Perlin noise at a single point."""
    fx = np.floor(x)
    fy = np.floor(y)
    fz = np.floor(z)
    xi = int(fx) & 255
    yi = int(fy) & 255
    zi = int(fz) & 255

    x -= fx
    y -= fy
    z -= fz

    u = _fade(x)
    v = _fade(y)
    w = _fade(z)

    a = p[xi] + yi
    aa = p[a] + zi
    ab = p[a + 1] + zi
    b = p[xi + 1] + yi
    ba = p[b] + zi
    bb = p[b + 1] + zi

    return _lerp(
        w,
        _lerp(
            v,
            _lerp(u, _gradient(p[aa], x, y, z), _gradient(p[ba], x - 1.0, y, z)),
            _lerp(u, _gradient(p[ab], x, y - 1.0, z), _gradient(p[bb], x - 1.0, y - 1.0, z)),
        ),
        _lerp(
            v,
            _lerp(u, _gradient(p[aa + 1], x, y, z - 1.0), _gradient(p[ba + 1], x - 1.0, y, z - 1.0)),
            _lerp(u, _gradient(p[ab + 1], x, y - 1.0, z - 1.0), _gradient(p[bb + 1], x - 1.0, y - 1.0, z - 1.0)),
        ),
    )


@njit
def octave_noise_3d(p, x, y, z, octaves, persistence, scale):
    """
    Fractal sum of `octaves` samples. Frequency doubles and amplitude is
    multiplied by `persistence` at each octave; the sum is divided by the
    total amplitude so the result stays in [-1, 1] for persistence <= 1.
    """
    value = 0.0
    amplitude = 1.0
    frequency = scale
    max_value = 0.0

    for _ in range(octaves):
        value += perlin_noise_3d(p, x * frequency, y * frequency, z * frequency) * amplitude
        max_value += amplitude
        amplitude *= persistence
        frequency *= 2.0

    return value / max_value


@njit
def octave_noise_grid(p, xs, zs, y, octaves, persistence, scale):
    """
    Evaluates `octave_noise_3d` on the y-plane for every (xs[i, j], zs[i, j]).
    Uses explicit loops, which Numba compiles to efficient machine code.
    """
    rows, cols = xs.shape
    out = np.empty((rows, cols))
    for i in range(rows):
        for j in range(cols):
            out[i, j] = octave_noise_3d(p, xs[i, j], y, zs[i, j], octaves, persistence, scale)
    return out


class NoiseField:
    """
    A seeded gradient-noise source. The permutation table is immutable after
    construction, so one instance can be shared by every generation request.
    """
    def __init__(self, seed: int = DEFAULTS.DEFAULT_SEED, permutation_table: np.ndarray = None):
        self.seed = seed
        if permutation_table is not None:
            table = np.asarray(permutation_table, dtype=np.int64)
            if table.shape != (2 * DEFAULTS.PERMUTATION_SIZE,):
                raise ValueError(f"Permutation table must have 512 entries, got shape {table.shape}")
            table = table.copy()
            table.setflags(write=False)
            self.permutation_table = table
        else:
            self.permutation_table = build_permutation_table(seed)

    def noise3(self, x: float, y: float, z: float) -> float:
        return float(perlin_noise_3d(self.permutation_table, float(x), float(y), float(z)))

    def octave(self, x: float, y: float, z: float, octaves: int, persistence: float, scale: float) -> float:
        if octaves < 1:
            raise ValueError(f"octaves must be >= 1, got {octaves}")
        return float(octave_noise_3d(
            self.permutation_table, float(x), float(y), float(z),
            int(octaves), float(persistence), float(scale)
        ))

    def octave_grid(self, xs: np.ndarray, zs: np.ndarray, octaves: int, persistence: float,
                    scale: float, y: float = 0.0) -> np.ndarray:
        """Octave noise over matching 2D arrays of x and z coordinates."""
        if octaves < 1:
            raise ValueError(f"octaves must be >= 1, got {octaves}")
        xs = np.ascontiguousarray(xs, dtype=np.float64)
        zs = np.ascontiguousarray(zs, dtype=np.float64)
        return octave_noise_grid(
            self.permutation_table, xs, zs, float(y),
            int(octaves), float(persistence), float(scale)
        )
