# roadworld/heightfield.py

"""
================================================================================
HEIGHT FIELD
================================================================================
Maps world positions to elevation in metres. A raw elevation is the sum of a
few octave-noise layers (low-frequency layers shape landforms, high-frequency
layers add roughness); a biome-dependent clamp then reshapes it so that
oceans stay under water and urban footprints stay buildable-flat.

The biome is always an input. The height field never classifies a position
itself, so a generation pass that classified a vertex as City is guaranteed
to clamp that same vertex with the City band.
================================================================================
"""
import numpy as np

from .biomes import Biome, BIOMES_BY_CODE
from .noise import NoiseField


class HeightField:
    """Layered octave-noise elevation with per-biome clamping."""

    def __init__(self, noise: NoiseField, layers, bands: dict):
        """
        Args:
            noise (NoiseField): The shared noise source.
            layers: Sequence of (feature_size, octaves, persistence, amplitude).
            bands (dict): Biome -> (low, high); None leaves a side unbounded.
        """
        self.noise = noise
        self.layers = tuple(tuple(layer) for layer in layers)
        self.bands = dict(bands)

        # Per-code bound tables so the clamp is a single vectorized step.
        self._low = np.full(len(BIOMES_BY_CODE), -np.inf)
        self._high = np.full(len(BIOMES_BY_CODE), np.inf)
        for biome, (low, high) in self.bands.items():
            if low is not None:
                self._low[biome.code] = low
            if high is not None:
                self._high[biome.code] = high

    @property
    def max_amplitude(self) -> float:
        """The largest magnitude the raw layer sum can reach."""
        return float(sum(abs(layer[3]) for layer in self.layers))

    def raw_grid(self, xs: np.ndarray, zs: np.ndarray) -> np.ndarray:
        xs = np.asarray(xs, dtype=np.float64)
        zs = np.asarray(zs, dtype=np.float64)
        height = np.zeros(xs.shape)
        for feature_size, octaves, persistence, amplitude in self.layers:
            height += self.noise.octave_grid(
                xs / feature_size, zs / feature_size, octaves, persistence, 1.0
            ) * amplitude
        return height

    def reshape(self, heights: np.ndarray, biome_codes: np.ndarray) -> np.ndarray:
        """Clamps every height into the band of its biome."""
        codes = np.asarray(biome_codes, dtype=np.intp)
        return np.clip(heights, self._low[codes], self._high[codes])

    def sample_grid(self, xs: np.ndarray, zs: np.ndarray, biome_codes: np.ndarray) -> np.ndarray:
        """Final heights for coordinate arrays already classified by the caller."""
        return self.reshape(self.raw_grid(xs, zs), biome_codes)

    def height_at(self, x: float, z: float, biome: Biome) -> float:
        xs = np.array([[x]], dtype=np.float64)
        zs = np.array([[z]], dtype=np.float64)
        codes = np.array([[biome.code]], dtype=np.int8)
        return float(self.sample_grid(xs, zs, codes)[0, 0])
