# roadworld/profiles.py

"""
================================================================================
WORLD PROFILES
================================================================================
A profile is the immutable configuration of a world session: its extent,
chunk geometry, seed and the object-placement ruleset the chunk generator
uses. Profiles are built from the named defaults in `config.py`, with any
key overridable by a user dictionary.

Unknown profile names, unknown rulesets and unusable geometry fail fast with
`ProfileError`; nothing is silently defaulted.
================================================================================
"""
import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from . import config as DEFAULTS
from .biomes import Biome

logger = logging.getLogger(__name__)


class ProfileError(ValueError):
    """Raised for an unknown profile or ruleset, or an invalid setting."""


class Ruleset(str, Enum):
    SPARSE = "sparse"
    URBAN = "urban"
    REGIONAL = "regional"
    FULL_WORLD = "full-world"


@dataclass(frozen=True)
class WorldProfile:
    name: str
    ruleset: Ruleset
    world_size_chunks: int
    chunk_size: float
    vertex_resolution: int
    sample_stride: int
    seed: int
    render_distance: int
    biome_rules: Mapping = field(default_factory=dict)
    height_layers: tuple = ()
    height_bands: Mapping = field(default_factory=dict)
    placement: Mapping = field(default_factory=dict)

    @property
    def world_extent(self) -> float:
        """Side length of the nominal world square in metres."""
        return self.world_size_chunks * self.chunk_size

    @property
    def half_extent_chunks(self) -> int:
        return self.world_size_chunks // 2

    def in_bounds(self, cx: int, cz: int) -> bool:
        """Whether a chunk lies inside the nominal world square around the origin."""
        half = self.half_extent_chunks
        return -half <= cx < self.world_size_chunks - half and -half <= cz < self.world_size_chunks - half


def available_profiles() -> list:
    return sorted(DEFAULTS.PROFILE_DEFAULTS)


def _parse_ruleset(value) -> Ruleset:
    try:
        return Ruleset(value)
    except ValueError:
        raise ProfileError(
            f"Unknown ruleset '{value}'. Expected one of: {', '.join(r.value for r in Ruleset)}"
        ) from None


def _parse_bands(raw: dict) -> dict:
    bands = {}
    for label, (low, high) in raw.items():
        try:
            biome = label if isinstance(label, Biome) else Biome.from_label(label)
        except ValueError as e:
            raise ProfileError(str(e)) from None
        bands[biome] = (low, high)
    return bands


def load_profile(name: str, overrides: dict = None) -> WorldProfile:
    """
    Builds the named profile, applying user overrides on top of its defaults.

    Args:
        name (str): One of `available_profiles()`.
        overrides (dict, optional): Top-level profile keys to replace. The
            nested 'biome_rules' and 'placement' dictionaries are merged key
            by key rather than replaced.
    """
    if name not in DEFAULTS.PROFILE_DEFAULTS:
        logger.error(f"Unknown world profile '{name}'.")
        raise ProfileError(
            f"Unknown world profile '{name}'. Available profiles: {', '.join(available_profiles())}"
        )
    defaults = DEFAULTS.PROFILE_DEFAULTS[name]
    user = overrides or {}

    # --- Consolidate Configuration ---
    settings = {key: user.get(key, value) for key, value in defaults.items()}
    settings['biome_rules'] = {**defaults['biome_rules'], **user.get('biome_rules', {})}
    settings['placement'] = {**defaults['placement'], **user.get('placement', {})}
    seed = user.get('seed', DEFAULTS.DEFAULT_SEED)

    chunk_size = float(settings['chunk_size'])
    resolution = int(settings['vertex_resolution'])
    stride = int(settings['sample_stride'])
    if not math.isfinite(chunk_size) or chunk_size <= 0:
        raise ProfileError(f"chunk_size must be a positive number, got {settings['chunk_size']}")
    if resolution < 2:
        raise ProfileError(f"vertex_resolution must be at least 2, got {resolution}")
    if stride < 1 or (resolution - 1) % stride != 0:
        raise ProfileError(
            f"sample_stride {stride} must be positive and divide vertex_resolution - 1 ({resolution - 1})"
        )
    if int(settings['world_size_chunks']) < 1:
        raise ProfileError(f"world_size_chunks must be at least 1, got {settings['world_size_chunks']}")
    if not settings['height_layers']:
        raise ProfileError("A profile needs at least one height layer.")

    ruleset = _parse_ruleset(settings['ruleset'])
    if ruleset is Ruleset.URBAN:
        # The odd street lines of the block grid must continue across chunks.
        spacing = float(settings['placement'].get('block_spacing', 0.0))
        blocks = chunk_size / spacing if spacing > 0 else 0.0
        if blocks < 2 or abs(blocks - round(blocks)) > 1e-9 or int(round(blocks)) % 2:
            raise ProfileError(
                f"chunk_size {chunk_size} must be an even multiple of block_spacing {spacing}"
            )

    return WorldProfile(
        name=name,
        ruleset=ruleset,
        world_size_chunks=int(settings['world_size_chunks']),
        chunk_size=chunk_size,
        vertex_resolution=resolution,
        sample_stride=stride,
        seed=int(seed),
        render_distance=int(settings['render_distance']),
        biome_rules=MappingProxyType(settings['biome_rules']),
        height_layers=tuple(tuple(layer) for layer in settings['height_layers']),
        height_bands=MappingProxyType(_parse_bands(settings['height_bands'])),
        placement=MappingProxyType(settings['placement']),
    )
