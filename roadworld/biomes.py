# roadworld/biomes.py

"""
================================================================================
BIOME CLASSIFICATION
================================================================================
This module defines the biome tags and the `BiomeClassifier`, which maps a
world (x, z) position to exactly one biome through an ordered decision
cascade over layered noise values and geometric region tests.

Data Contract:
---------------
- Inputs (on initialization):
    - noise (NoiseField): The shared, read-only noise source.
    - rules (dict): Cascade thresholds, radii and footprint rectangles.
- Outputs:
    - classify(): a single `Biome`.
    - classify_grid(): an int8 array of biome codes matching the input shape.
- Side Effects: None.
- Invariants: Classification is pure and total. The first matching rule wins
  and the order of the rules is fixed; profiles only change the numbers.
================================================================================
"""
from enum import Enum

import numpy as np

from . import config as DEFAULTS
from .noise import NoiseField


class Biome(Enum):
    """A biome tag with its display label, display color and nominal height."""
    OCEAN = ("Ocean", 0x006994, -20.0)
    BEACH = ("Beach", 0xF4A460, 0.0)
    PLAINS = ("Plains", 0x90EE90, 5.0)
    FOREST = ("Forest", 0x228B22, 10.0)
    HILLS = ("Hills", 0x8FBC8F, 25.0)
    MOUNTAINS = ("Mountains", 0x708090, 60.0)
    SNOW = ("Snow", 0xFFFAFA, 80.0)
    CITY = ("City", 0x696969, 8.0)
    AIRPORT = ("Airport", 0x333333, 5.0)
    RIVER = ("River", 0x4169E1, -5.0)
    VILLAGE = ("Village", 0xDEB887, 6.0)
    INDUSTRIAL = ("Industrial", 0x8B8378, 4.0)
    PARK = ("Park", 0x7CFC00, 6.0)
    DESERT = ("Desert", 0xEDC9AF, 12.0)

    def __init__(self, label, color, nominal_height):
        self.label = label
        self.color = color
        self.nominal_height = nominal_height
        # Dense integer code used in per-vertex biome arrays.
        self.code = len(self.__class__.__members__)

    @property
    def rgb(self) -> tuple:
        return ((self.color >> 16) & 0xFF, (self.color >> 8) & 0xFF, self.color & 0xFF)

    @classmethod
    def from_code(cls, code: int) -> "Biome":
        return BIOMES_BY_CODE[int(code)]

    @classmethod
    def from_label(cls, label: str) -> "Biome":
        for biome in cls:
            if biome.label.lower() == label.lower() or biome.name == label.upper():
                return biome
        raise ValueError(f"Unknown biome '{label}'")


BIOMES_BY_CODE = tuple(Biome)


def _in_rectangles(xs: np.ndarray, zs: np.ndarray, rectangles) -> np.ndarray:
    """True where a point falls strictly inside any (cx, cz, half_w, half_d) box."""
    mask = np.zeros(xs.shape, dtype=bool)
    for center_x, center_z, half_width, half_depth in rectangles:
        mask |= (np.abs(xs - center_x) < half_width) & (np.abs(zs - center_z) < half_depth)
    return mask


class BiomeClassifier:
    """
    Classifies world positions into biomes. The scalar and grid entry points
    share one implementation so they can never disagree.
    """
    def __init__(self, noise: NoiseField, rules: dict):
        self.noise = noise
        self.rules = {key: rules.get(key, default) for key, default in DEFAULTS.BIOME_RULE_DEFAULTS.items()}

    def continent_values(self, xs: np.ndarray, zs: np.ndarray) -> np.ndarray:
        """The lowest-frequency layer separating ocean, land and mountains."""
        size = self.rules["continent_feature_size"]
        return self.noise.octave_grid(
            xs / size, zs / size,
            self.rules["continent_octaves"], self.rules["continent_persistence"], 1.0
        )

    def classify_grid(self, xs: np.ndarray, zs: np.ndarray) -> np.ndarray:
        """Returns the biome code of every position in the coordinate arrays."""
        xs = np.asarray(xs, dtype=np.float64)
        zs = np.asarray(zs, dtype=np.float64)
        r = self.rules

        # 1. Noise layers and distance from the world origin.
        continent = self.continent_values(xs, zs)
        biome_size = r["biome_feature_size"]
        secondary = self.noise.octave_grid(
            xs / biome_size, zs / biome_size, r["biome_octaves"], r["biome_persistence"], 1.0
        )
        river_offset = DEFAULTS.RIVER_SEED_OFFSET
        river = self.noise.octave_grid(
            (xs + river_offset) / r["river_feature_size_x"],
            (zs + river_offset) / r["river_feature_size_z"],
            r["river_octaves"], r["river_persistence"], 1.0
        )
        village_offset = DEFAULTS.VILLAGE_SEED_OFFSET
        village_size = r["village_feature_size"]
        village = self.noise.octave_grid(
            (xs + village_offset) / village_size, (zs + village_offset) / village_size,
            r["village_octaves"], r["village_persistence"], 1.0
        )
        distance_km = np.hypot(xs, zs) / DEFAULTS.M_PER_KM

        # 2. Ordered cascade. np.select picks the first true condition.
        land = continent > r["beach_threshold"]
        mountainous = continent > r["mountain_threshold"]
        hilly = secondary > r["hills_threshold"]
        conditions = [
            (continent < r["ocean_threshold"]) | (distance_km > r["ocean_radius_km"]),
            continent < r["beach_threshold"],
            distance_km < r["urban_radius_km"],
            _in_rectangles(xs, zs, r["airports"]),
            _in_rectangles(xs, zs, r["theme_parks"]),
            _in_rectangles(xs, zs, r["industrial_zones"]),
            (village > r["village_threshold"])
            & (distance_km >= r["village_min_km"]) & (distance_km <= r["village_max_km"]),
            (np.abs(river) < r["river_band"]) & land,
            mountainous & (continent > r["snow_threshold"]),
            mountainous,
            hilly & (continent > r["hills_continent_threshold"]),
            hilly,
            secondary < r["desert_threshold"],
        ]
        choices = [
            Biome.OCEAN.code,
            Biome.BEACH.code,
            Biome.CITY.code,
            Biome.AIRPORT.code,
            Biome.PARK.code,
            Biome.INDUSTRIAL.code,
            Biome.VILLAGE.code,
            Biome.RIVER.code,
            Biome.SNOW.code,
            Biome.MOUNTAINS.code,
            Biome.HILLS.code,
            Biome.FOREST.code,
            Biome.DESERT.code,
        ]
        return np.select(conditions, choices, default=Biome.PLAINS.code).astype(np.int8)

    def classify(self, x: float, z: float) -> Biome:
        codes = self.classify_grid(np.array([[x]], dtype=np.float64), np.array([[z]], dtype=np.float64))
        return BIOMES_BY_CODE[int(codes[0, 0])]
