# roadworld/__init__.py

from .biomes import Biome, BiomeClassifier
from .chunks import ChunkStore
from .generator import ChunkGenerator, ChunkRecord
from .heightfield import HeightField
from .noise import NoiseField
from .placement import ObjectKind, PlacedObject
from .profiles import ProfileError, Ruleset, WorldProfile, available_profiles, load_profile

__all__ = [
    "Biome", "BiomeClassifier", "ChunkStore", "ChunkGenerator", "ChunkRecord",
    "HeightField", "NoiseField", "ObjectKind", "PlacedObject",
    "ProfileError", "Ruleset", "WorldProfile", "available_profiles", "load_profile",
]
