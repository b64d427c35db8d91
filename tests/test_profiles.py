import dataclasses

import pytest

from roadworld.biomes import Biome
from roadworld.profiles import ProfileError, Ruleset, available_profiles, load_profile


def test_named_profiles_are_available():
    assert set(available_profiles()) >= {"regional", "world", "empty-fields", "megacity"}


@pytest.mark.parametrize("name, ruleset", [
    ("regional", Ruleset.REGIONAL),
    ("world", Ruleset.FULL_WORLD),
    ("empty-fields", Ruleset.SPARSE),
    ("megacity", Ruleset.URBAN),
])
def test_profile_rulesets(name, ruleset):
    assert load_profile(name).ruleset is ruleset


def test_profile_geometry(regional_profile, fields_profile):
    assert regional_profile.chunk_size == 1000.0
    assert regional_profile.vertex_resolution == 129
    assert regional_profile.world_extent == 20000.0
    assert fields_profile.chunk_size == 500.0
    assert fields_profile.vertex_resolution == 65


def test_unknown_profile_fails_fast():
    with pytest.raises(ProfileError):
        load_profile("atlantis")
    assert issubclass(ProfileError, ValueError)


@pytest.mark.parametrize("overrides", [
    {"ruleset": "suburban"},
    {"vertex_resolution": 1},
    {"vertex_resolution": 130},
    {"sample_stride": 0},
    {"chunk_size": 0},
    {"chunk_size": float("inf")},
    {"world_size_chunks": 0},
    {"height_layers": []},
    {"height_bands": {"Lava": (0.0, 1.0)}},
])
def test_invalid_overrides_are_rejected(overrides):
    with pytest.raises(ProfileError):
        load_profile("regional", overrides)


@pytest.mark.parametrize("overrides", [
    {"chunk_size": 250.0},
    {"chunk_size": 350.0},
    {"chunk_size": 320.0},
    {"chunk_size": 50.0},
    {"placement": {"block_spacing": 0.0}},
])
def test_urban_grid_must_tile_across_chunks(overrides):
    with pytest.raises(ProfileError):
        load_profile("megacity", overrides)


def test_urban_grid_accepts_even_block_counts():
    assert load_profile("megacity", {"chunk_size": 400.0}).chunk_size == 400.0
    assert load_profile("megacity", {"placement": {"block_spacing": 75.0}}).placement["block_spacing"] == 75.0
    # Other rulesets have no block grid.
    assert load_profile("regional", {"chunk_size": 250.0}).chunk_size == 250.0


def test_nested_overrides_merge_with_defaults():
    profile = load_profile("world", {"biome_rules": {"urban_radius_km": 2.0}, "placement": {"road_width": 9.0}})
    assert profile.biome_rules["urban_radius_km"] == 2.0
    assert profile.biome_rules["airports"] == [(15000.0, 15000.0, 1200.0, 1200.0)]
    assert profile.placement["road_width"] == 9.0
    assert profile.placement["street_spacing"] == 200.0


def test_seed_override():
    assert load_profile("regional", {"seed": 99}).seed == 99
    assert load_profile("regional").seed == 12345


def test_height_bands_are_keyed_by_biome(regional_profile):
    assert regional_profile.height_bands[Biome.OCEAN] == (None, -10.0)
    assert regional_profile.height_bands[Biome.AIRPORT] == (0.0, 0.0)


def test_profiles_are_immutable(regional_profile):
    with pytest.raises(dataclasses.FrozenInstanceError):
        regional_profile.seed = 1
    with pytest.raises(TypeError):
        regional_profile.biome_rules["urban_radius_km"] = 1.0


def test_in_bounds(regional_profile):
    assert regional_profile.in_bounds(0, 0)
    assert regional_profile.in_bounds(-10, -10)
    assert regional_profile.in_bounds(9, 9)
    assert not regional_profile.in_bounds(10, 0)
    assert not regional_profile.in_bounds(0, -11)
