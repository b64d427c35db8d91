# roadworld/generator.py

"""
================================================================================
CHUNK GENERATOR
================================================================================
This module contains the ChunkGenerator class, responsible for turning a
chunk coordinate into a complete ChunkRecord: vertex height grid, per-vertex
biome codes, sparse height samples, chunk biome and placed objects.

Data Contract:
---------------
- Inputs (on initialization):
    - profile (WorldProfile): The immutable session configuration.
    - logger: A configured Python logging object for runtime messages.
    - permutation_table (np.ndarray, optional): Injected noise table.
    - traffic_lights (TrafficLightRegistry, optional): The session registry.
- Outputs (from methods):
    - generate_chunk(cx, cz) -> ChunkRecord.
- Side Effects: Logs messages; creates traffic lights in the registry.
- Invariants: Given the same profile and seed, the output is deterministic.
  Adjacent chunks sample identical world coordinates along their shared edge,
  so their edge heights agree exactly.
================================================================================
"""
import logging
import math
import time
from dataclasses import dataclass

import numpy as np

from . import config as DEFAULTS
from .biomes import Biome, BiomeClassifier, BIOMES_BY_CODE
from .heightfield import HeightField
from .noise import NoiseField
from .placement import create_placer, intersection_cell_size
from .profiles import WorldProfile
from .traffic import TrafficLightRegistry


@dataclass(frozen=True, eq=False)
class ChunkRecord:
    """
    A generated chunk. Arrays are read-only; the record is never regenerated.

    vertices: (resolution**2, 3) rows of (x, height, z), x-major order.
    biome_codes: (resolution, resolution) biome code of every vertex.
    height_samples: (n, 3) rows of (x, z, height), every stride-th vertex.

    Records compare by content (arrays element-wise) and are unhashable.
    """
    cx: int
    cz: int
    biome: Biome
    resolution: int
    vertices: np.ndarray
    biome_codes: np.ndarray
    height_samples: np.ndarray
    objects: tuple

    def __eq__(self, other):
        if not isinstance(other, ChunkRecord):
            return NotImplemented
        return (
            self.coordinate == other.coordinate
            and self.biome is other.biome
            and self.resolution == other.resolution
            and np.array_equal(self.vertices, other.vertices)
            and np.array_equal(self.biome_codes, other.biome_codes)
            and np.array_equal(self.height_samples, other.height_samples)
            and self.objects == other.objects
        )

    __hash__ = None

    @property
    def coordinate(self) -> tuple:
        return (self.cx, self.cz)

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    def heights(self) -> np.ndarray:
        """The height grid as a (resolution, resolution) view indexed [i_x, j_z]."""
        return self.vertices[:, 1].reshape(self.resolution, self.resolution)

    def objects_of_kind(self, kind) -> list:
        return [obj for obj in self.objects if obj.kind == kind]


def check_finite(*values):
    for value in values:
        if not math.isfinite(value):
            raise ValueError(f"Coordinate must be finite, got {value}")


def clamp_coordinate(value: float) -> float:
    """Rejects non-finite input and clamps absurd magnitudes."""
    check_finite(value)
    limit = DEFAULTS.MAX_ABS_COORDINATE
    return min(max(float(value), -limit), limit)


class ChunkGenerator:
    """
    Generates chunks for one world profile. The noise table, classifier and
    height field are built once and shared read-only by every request.
    """
    def __init__(self, profile: WorldProfile, logger: logging.Logger = None,
                 permutation_table: np.ndarray = None, traffic_lights: TrafficLightRegistry = None):
        self.logger = logger or logging.getLogger(__name__)
        self.profile = profile
        self.logger.info(f"ChunkGenerator initializing for profile '{profile.name}'...")

        self.noise = NoiseField(profile.seed, permutation_table)
        if permutation_table is not None:
            self.logger.debug("Initialized with injected permutation table.")

        self.classifier = BiomeClassifier(self.noise, profile.biome_rules)
        self.height_field = HeightField(self.noise, profile.height_layers, profile.height_bands)
        self.traffic_lights = traffic_lights if traffic_lights is not None else TrafficLightRegistry(
            intersection_cell_size(profile)
        )
        self.placer = create_placer(profile, self.classifier, self.traffic_lights, self.logger)

        # Largest chunk index whose center stays inside the coordinate clamp.
        self.max_chunk_index = int(DEFAULTS.MAX_ABS_COORDINATE // profile.chunk_size)

        world_km = profile.world_extent / DEFAULTS.M_PER_KM
        self.logger.info(
            f"ChunkGenerator ready: seed {profile.seed}, ruleset '{profile.ruleset.value}', "
            f"{profile.world_size_chunks}x{profile.world_size_chunks} chunks of {profile.chunk_size:.0f} m "
            f"({world_km:.1f}x{world_km:.1f} km), {profile.vertex_resolution}x{profile.vertex_resolution} vertices"
        )

    def clamp_chunk_index(self, c: int) -> int:
        return min(max(int(c), -self.max_chunk_index), self.max_chunk_index)

    def get_coordinate_grid(self, cx: int, cz: int):
        """
        World coordinates of the chunk's vertices, indexed [i_x, j_z]. The grid
        spans the chunk's centered square including both edges.
        """
        size = self.profile.chunk_size
        resolution = self.profile.vertex_resolution
        offsets = np.linspace(-size / 2.0, size / 2.0, resolution)
        xs = cx * size + offsets
        zs = cz * size + offsets
        return np.meshgrid(xs, zs, indexing='ij')

    def classify(self, x: float, z: float) -> Biome:
        return self.classifier.classify(clamp_coordinate(x), clamp_coordinate(z))

    def chunk_biome(self, cx: int, cz: int) -> Biome:
        """The biome that drives object placement: the one at the chunk center."""
        cx = self.clamp_chunk_index(cx)
        cz = self.clamp_chunk_index(cz)
        return self.classifier.classify(cx * self.profile.chunk_size, cz * self.profile.chunk_size)

    def height_at(self, x: float, z: float, biome: Biome = None) -> float:
        """Exact height at a position. Classifies the position when no biome is given."""
        x = clamp_coordinate(x)
        z = clamp_coordinate(z)
        if biome is None:
            biome = self.classifier.classify(x, z)
        return self.height_field.height_at(x, z, biome)

    def generate_chunk(self, cx: int, cz: int) -> ChunkRecord:
        start_time = time.perf_counter()
        cx = self.clamp_chunk_index(cx)
        cz = self.clamp_chunk_index(cz)
        profile = self.profile

        # 1. Classify every vertex, then sample heights with those biomes.
        wx_grid, wz_grid = self.get_coordinate_grid(cx, cz)
        biome_codes = self.classifier.classify_grid(wx_grid, wz_grid)
        heights = self.height_field.sample_grid(wx_grid, wz_grid, biome_codes)

        vertices = np.column_stack((wx_grid.ravel(), heights.ravel(), wz_grid.ravel()))
        vertices.setflags(write=False)
        biome_codes.setflags(write=False)

        # 2. Sparse height samples for fast nearest-neighbour lookups.
        stride = profile.sample_stride
        sample_x = wx_grid[::stride, ::stride].ravel()
        sample_z = wz_grid[::stride, ::stride].ravel()
        sample_h = heights[::stride, ::stride].ravel()
        height_samples = np.column_stack((sample_x, sample_z, sample_h))
        height_samples.setflags(write=False)

        # 3. One biome for the whole chunk, taken at its center.
        biome = self.chunk_biome(cx, cz)
        objects = tuple(self.placer.place_objects(cx, cz, biome))

        self.logger.debug(
            f"Generated chunk ({cx}, {cz}): {biome.label}, {len(vertices)} vertices, "
            f"{len(objects)} objects in {time.perf_counter() - start_time:.3f}s"
        )
        return ChunkRecord(
            cx=cx,
            cz=cz,
            biome=biome,
            resolution=profile.vertex_resolution,
            vertices=vertices,
            biome_codes=biome_codes,
            height_samples=height_samples,
            objects=objects,
        )

    def biome_counts(self, record: ChunkRecord) -> dict:
        """Vertex count per biome label, for diagnostics."""
        codes, counts = np.unique(record.biome_codes, return_counts=True)
        return {BIOMES_BY_CODE[int(c)].label: int(n) for c, n in zip(codes, counts)}
