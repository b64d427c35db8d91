import math

import numpy as np
import pytest

from roadworld import config as DEFAULTS
from roadworld.biomes import Biome
from roadworld.generator import ChunkGenerator
from roadworld.placement import (
    FullWorldPlacer, ObjectKind, RegionalPlacer, SparsePlacer, UrbanPlacer, chunk_rng, create_placer,
)
from roadworld.profiles import load_profile


def _kinds(objects, kind):
    return [obj for obj in objects if obj.kind is kind]


def _fresh_placer(profile_name, overrides=None):
    """A placer with its own empty traffic-light registry."""
    return ChunkGenerator(load_profile(profile_name, overrides)).placer


def test_create_placer_per_ruleset(regional_generator, world_generator, fields_generator, megacity_generator):
    assert isinstance(regional_generator.placer, RegionalPlacer)
    assert isinstance(world_generator.placer, FullWorldPlacer)
    assert isinstance(fields_generator.placer, SparsePlacer)
    assert isinstance(megacity_generator.placer, UrbanPlacer)
    placer = create_placer(regional_generator.profile, regional_generator.classifier)
    assert isinstance(placer, RegionalPlacer)


def test_chunk_rng_is_seeded_per_chunk():
    assert chunk_rng(1, 2, 3).random() == chunk_rng(1, 2, 3).random()
    assert chunk_rng(1, 2, 3).random() != chunk_rng(1, -2, 3).random()
    assert chunk_rng(1, 2, 3).random() != chunk_rng(2, 2, 3).random()


def test_scatter_is_replayable(regional_generator):
    placer = regional_generator.placer
    first = placer.place_objects(3, 4, Biome.FOREST)
    second = placer.place_objects(3, 4, Biome.FOREST)
    assert first == second
    assert first != placer.place_objects(4, 3, Biome.FOREST)


def test_regional_forest(regional_generator):
    trees = regional_generator.placer.place_objects(2, -1, Biome.FOREST)
    assert len(_kinds(trees, ObjectKind.TREE)) == 15
    for tree in _kinds(trees, ObjectKind.TREE):
        assert abs(tree.x - 2000.0) <= 400.0
        assert abs(tree.z + 1000.0) <= 400.0
        assert 0.8 <= tree.scale <= 1.3


def test_regional_city_keeps_buildings_off_the_streets(regional_generator):
    objects = regional_generator.placer.place_objects(0, 0, Biome.CITY)
    roads = _kinds(objects, ObjectKind.ROAD)
    assert len(roads) == 10
    assert len([r for r in roads if r.direction == DEFAULTS.NORTH_SOUTH]) == 5
    assert not _kinds(objects, ObjectKind.HIGHWAY)
    for building in _kinds(objects, ObjectKind.BUILDING):
        for offset in (building.x, building.z):
            m = abs(offset) % 200.0
            assert min(m, 200.0 - m) >= 30.0


def test_regional_highways_run_along_the_axes(regional_generator):
    placer = regional_generator.placer
    north = _kinds(placer.place_objects(0, 6, Biome.PLAINS), ObjectKind.HIGHWAY)
    east = _kinds(placer.place_objects(6, 0, Biome.PLAINS), ObjectKind.HIGHWAY)
    assert [h.direction for h in north] == [DEFAULTS.NORTH_SOUTH]
    assert [h.direction for h in east] == [DEFAULTS.EAST_WEST]
    assert not _kinds(placer.place_objects(0, 3, Biome.PLAINS), ObjectKind.HIGHWAY)
    assert not _kinds(placer.place_objects(5, 5, Biome.PLAINS), ObjectKind.HIGHWAY)


def test_regional_gas_stations_only_on_axes_in_annulus(regional_generator):
    placer = regional_generator.placer
    for cx in range(-10, 11):
        for cz in range(-10, 11):
            for station in _kinds(placer.place_objects(cx, cz, Biome.PLAINS), ObjectKind.GAS_STATION):
                assert cx == 0 or cz == 0
                assert 3.0 < math.hypot(cx, cz) < 8.0
                assert abs(station.x - cx * 1000.0) <= 100.0


def test_sparse_roads_and_trees(fields_generator):
    placer = fields_generator.placer
    roads = _kinds(placer.place_objects(0, 0, Biome.PLAINS), ObjectKind.ROAD)
    assert sorted(r.direction for r in roads) == [DEFAULTS.EAST_WEST, DEFAULTS.NORTH_SOUTH]
    assert not _kinds(placer.place_objects(1, 1, Biome.PLAINS), ObjectKind.ROAD)
    assert [r.x for r in _kinds(placer.place_objects(0, 3, Biome.PLAINS), ObjectKind.ROAD)] == [0.0]
    assert len(_kinds(placer.place_objects(2, 2, Biome.PLAINS), ObjectKind.TREE)) <= 6
    assert not _kinds(placer.place_objects(2, 2, Biome.FOREST), ObjectKind.TREE)


def test_urban_grid_leaves_intersections_free():
    placer = _fresh_placer("megacity")
    objects = placer.place_objects(0, 0, Biome.CITY)
    buildings = _kinds(objects, ObjectKind.BUILDING)
    lights = _kinds(objects, ObjectKind.TRAFFIC_LIGHT)
    assert len(buildings) == 27
    assert len(lights) == 16
    assert len(_kinds(objects, ObjectKind.ROAD)) == 6
    for building in buildings:
        i, j = round(building.x / 50.0), round(building.z / 50.0)
        assert not (i % 2 and j % 2)
        assert 20.0 <= building.height <= 140.0
    for light in lights:
        i, j = round(light.x / 50.0), round(light.z / 50.0)
        assert i % 2 and j % 2


def test_urban_buildings_never_on_odd_odd_nodes_anywhere():
    placer = _fresh_placer("megacity")
    for cx, cz in [(1, 0), (-3, 2), (7, -5)]:
        for building in _kinds(placer.place_objects(cx, cz, Biome.CITY), ObjectKind.BUILDING):
            i, j = round(building.x / 50.0), round(building.z / 50.0)
            assert not (i % 2 and j % 2)


def test_urban_seam_objects_belong_to_one_chunk():
    placer = _fresh_placer("megacity")
    buildings, roads = [], []
    for cx, cz in [(0, 0), (1, 0), (0, 1), (1, 1)]:
        objects = placer.place_objects(cx, cz, Biome.CITY)
        buildings += [(b.x, b.z) for b in _kinds(objects, ObjectKind.BUILDING)]
        roads += [(r.x, r.z, r.direction) for r in _kinds(objects, ObjectKind.ROAD)]
    assert len(buildings) == len(set(buildings)) == 4 * 27
    assert len(roads) == len(set(roads)) == 4 * 6
    # The column on the shared edge at x=150 is built exactly once.
    assert sorted(z for x, z in buildings if x == 150.0 and z < 150.0) == [-150.0, -50.0, 50.0]


def test_border_traffic_lights_are_shared():
    placer = _fresh_placer("megacity")
    left = _kinds(placer.place_objects(0, 0, Biome.CITY), ObjectKind.TRAFFIC_LIGHT)
    right = _kinds(placer.place_objects(1, 0, Biome.CITY), ObjectKind.TRAFFIC_LIGHT)
    shared = {light.key for light in left} & {light.key for light in right}
    assert len(shared) == 4
    assert all(key[0] == 3 for key in shared)
    assert len(placer.traffic_lights) == 28
    light = placer.traffic_lights.lookup(150.0, 50.0)
    assert light is placer.traffic_lights.get_or_create(150.0, 50.0)


def test_urban_grid_crosses_chunks_on_odd_lines():
    placer = _fresh_placer("megacity")
    for cx in (-2, -1, 1, 2):
        for road in _kinds(placer.place_objects(cx, 0, Biome.CITY), ObjectKind.ROAD):
            if road.direction == DEFAULTS.NORTH_SOUTH:
                assert round(road.x / 50.0) % 2 == 1


def test_urban_placer_ignores_other_biomes():
    placer = _fresh_placer("megacity")
    assert placer.place_objects(0, 0, Biome.PLAINS) == []


def test_world_city_block(world_generator):
    objects = world_generator.placer.place_objects(0, 0, Biome.CITY)
    lights = _kinds(objects, ObjectKind.TRAFFIC_LIGHT)
    assert len(lights) == 25
    assert len({light.key for light in lights}) == 25
    assert len(_kinds(objects, ObjectKind.ROAD)) == 10
    buildings = _kinds(objects, ObjectKind.BUILDING)
    assert 0 < len(buildings) <= 16
    for building in buildings:
        assert building.height >= 12.0
        assert abs(building.x) % 200.0 == 100.0
        assert abs(building.z) % 200.0 == 100.0


def test_world_rail_through_a_city(world_generator):
    objects = world_generator.placer.place_objects(0, 3, Biome.CITY)
    rails = _kinds(objects, ObjectKind.RAILWAY)
    assert [(r.x, r.z, r.direction) for r in rails] == [(0.0, 3000.0, DEFAULTS.EAST_WEST)]
    crossings = _kinds(objects, ObjectKind.RAILWAY_CROSSING)
    assert sorted(c.x for c in crossings) == [-400.0, -200.0, 0.0, 200.0, 400.0]
    assert all(c.z == 3000.0 and c.direction == DEFAULTS.NORTH_SOUTH for c in crossings)
    assert len(_kinds(objects, ObjectKind.TRAIN_STATION)) == 1


def test_world_rail_in_the_countryside(world_generator):
    objects = world_generator.placer.place_objects(-5, 10, Biome.PLAINS)
    rails = _kinds(objects, ObjectKind.RAILWAY)
    assert [(r.x, r.direction) for r in rails] == [(-5000.0, DEFAULTS.NORTH_SOUTH)]
    assert not _kinds(objects, ObjectKind.RAILWAY_CROSSING)
    assert not _kinds(objects, ObjectKind.TRAIN_STATION)


def test_no_rail_over_the_ocean(world_generator):
    assert world_generator.placer.place_objects(0, 3, Biome.OCEAN) == []


def test_highway_level_crossing():
    line = {"axis": "x", "offset": 10000.0, "start": -40000.0, "end": 40000.0}
    placer = _fresh_placer("world", {"placement": {"rail_lines": [line]}})
    objects = placer.place_objects(0, 10, Biome.PLAINS)
    assert len(_kinds(objects, ObjectKind.HIGHWAY)) == 1
    crossings = _kinds(objects, ObjectKind.RAILWAY_CROSSING)
    assert [(c.x, c.z, c.direction) for c in crossings] == [(0.0, 10000.0, DEFAULTS.NORTH_SOUTH)]


def test_rail_line_ends(world_generator):
    assert not _kinds(world_generator.placer.place_objects(41, 3, Biome.PLAINS), ObjectKind.RAILWAY)


def test_world_village(world_generator):
    objects = world_generator.placer.place_objects(20, 0, Biome.VILLAGE)
    fountains = _kinds(objects, ObjectKind.FOUNTAIN)
    assert [(f.x, f.z) for f in fountains] == [(20000.0, 0.0)]
    roads = _kinds(objects, ObjectKind.ROAD)
    assert [(r.z, r.direction) for r in roads] == [(0.0, DEFAULTS.EAST_WEST)]


@pytest.mark.parametrize("cx, cz", [(20, 0), (15, -12), (-18, 9), (11, 27), (-30, -4), (24, 24)])
def test_village_houses_stay_off_the_main_street(world_generator, cx, cz):
    objects = world_generator.placer.place_objects(cx, cz, Biome.VILLAGE)
    houses = _kinds(objects, ObjectKind.HOUSE)
    road = _kinds(objects, ObjectKind.ROAD)[0]
    assert 6 <= len(houses) <= 10
    assert len(houses) % 2 == 0
    for house in houses:
        assert math.hypot(house.x - cx * 1000.0, house.z - road.z) == pytest.approx(120.0)
        assert abs(house.z - road.z) > road.width / 2.0 + house.depth / 2.0


def test_world_airport_terminal_only_in_home_chunk(world_generator):
    home = world_generator.placer.place_objects(15, 15, Biome.AIRPORT)
    neighbour = world_generator.placer.place_objects(14, 15, Biome.AIRPORT)
    assert len(_kinds(home, ObjectKind.RUNWAY)) == 1
    assert len(_kinds(home, ObjectKind.TERMINAL)) == 1
    assert len(_kinds(neighbour, ObjectKind.RUNWAY)) == 1
    assert not _kinds(neighbour, ObjectKind.TERMINAL)


def test_world_theme_park(world_generator):
    objects = world_generator.placer.place_objects(-9, 8, Biome.PARK)
    assert len(_kinds(objects, ObjectKind.ROLLERCOASTER)) == 1
    assert len(_kinds(objects, ObjectKind.FERRISWHEEL)) == 1
    assert 3 <= len(_kinds(objects, ObjectKind.ATTRACTION)) <= 6
    assert len(_kinds(objects, ObjectKind.TREE)) == 8


def test_world_industrial_zone(world_generator):
    objects = world_generator.placer.place_objects(9, -7, Biome.INDUSTRIAL)
    warehouses = _kinds(objects, ObjectKind.BUILDING)
    assert len(warehouses) == 9
    assert all(10.0 <= w.height <= 25.0 for w in warehouses)


def test_world_trees_by_biome(world_generator):
    placer = world_generator.placer
    assert len(_kinds(placer.place_objects(20, 20, Biome.FOREST), ObjectKind.TREE)) == 25
    assert len(_kinds(placer.place_objects(20, 20, Biome.HILLS), ObjectKind.TREE)) == 8
    assert len(_kinds(placer.place_objects(20, 20, Biome.MOUNTAINS), ObjectKind.TREE)) == 3
    assert not placer.place_objects(20, 20, Biome.DESERT)


def test_placed_objects_are_immutable(regional_generator):
    tree = regional_generator.placer.place_objects(1, 1, Biome.FOREST)[0]
    with pytest.raises(AttributeError):
        tree.x = 0.0
    assert np.isfinite(tree.scale)
