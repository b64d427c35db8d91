# roadworld/placement.py

"""
================================================================================
OBJECT PLACEMENT
================================================================================
Per chunk and per biome, emits the ordered list of placed features: trees,
buildings, roads, highways, rail, stations and landmarks.

Placement mixes two kinds of rules:
    - Fixed layouts (street grids, radial villages, runways, highways, rail)
      that are pure functions of the chunk coordinate.
    - Scatter (tree counts and positions, building presence and height) drawn
      from a per-chunk random stream seeded from (seed, cx, cz), so a chunk
      always receives the same objects no matter when it is generated.

There is one placer class per ruleset, all behind `ObjectPlacer.place_objects`.
================================================================================
"""
import logging
import math
from dataclasses import dataclass
from enum import Enum

import numpy as np

from . import config as DEFAULTS
from .biomes import Biome, BiomeClassifier
from .profiles import ProfileError, Ruleset, WorldProfile
from .traffic import TrafficLightRegistry


class ObjectKind(str, Enum):
    TREE = "tree"
    BUILDING = "building"
    ROAD = "road"
    HIGHWAY = "highway"
    RAILWAY = "railway"
    RAILWAY_CROSSING = "railwayCrossing"
    TRAIN_STATION = "trainStation"
    HOUSE = "house"
    FOUNTAIN = "fountain"
    TERMINAL = "terminal"
    RUNWAY = "runway"
    ROLLERCOASTER = "rollercoaster"
    FERRISWHEEL = "ferriswheel"
    ATTRACTION = "attraction"
    GAS_STATION = "gasStation"
    TRAFFIC_LIGHT = "trafficLight"


@dataclass(frozen=True)
class PlacedObject:
    """A placed feature. Only the attributes meaningful for its kind are set."""
    kind: ObjectKind
    x: float
    z: float
    scale: float = None
    height: float = None
    width: float = None
    depth: float = None
    length: float = None
    direction: str = None
    radius: float = None
    rotation: float = None
    key: tuple = None


def _zigzag(n: int) -> int:
    """Maps signed integers onto non-negative ones without collisions."""
    return 2 * n if n >= 0 else -2 * n - 1


def chunk_rng(seed: int, cx: int, cz: int) -> np.random.Generator:
    """The scatter stream of one chunk."""
    return np.random.default_rng([_zigzag(int(seed)), _zigzag(int(cx)), _zigzag(int(cz))])


def _near_line(offset: float, spacing: float, clearance: float) -> bool:
    """Whether an offset from a grid line origin lies within clearance of a grid line."""
    m = abs(offset) % spacing
    return min(m, spacing - m) < clearance


def intersection_cell_size(profile: WorldProfile) -> float:
    """The traffic-light registry cell for a profile."""
    if profile.ruleset is Ruleset.URBAN:
        return float(profile.placement['block_spacing'])
    return float(profile.placement.get('street_spacing', 200.0))


class ObjectPlacer:
    """Common machinery; subclasses implement the per-ruleset rules."""
    ruleset = None

    def __init__(self, profile: WorldProfile, classifier: BiomeClassifier,
                 traffic_lights: TrafficLightRegistry = None, logger: logging.Logger = None):
        self.profile = profile
        self.params = profile.placement
        self.chunk_size = profile.chunk_size
        self.classifier = classifier
        self.traffic_lights = traffic_lights if traffic_lights is not None else TrafficLightRegistry(
            intersection_cell_size(profile)
        )
        self.logger = logger or logging.getLogger(__name__)

    def place_objects(self, cx: int, cz: int, biome: Biome) -> list:
        """Features first, then the road and rail network of the chunk."""
        rng = chunk_rng(self.profile.seed, cx, cz)
        center_x = cx * self.chunk_size
        center_z = cz * self.chunk_size
        objects = self._place_features(cx, cz, center_x, center_z, biome, rng)
        objects.extend(self._place_roads(cx, cz, center_x, center_z, biome))
        return objects

    def _place_features(self, cx, cz, center_x, center_z, biome, rng) -> list:
        raise NotImplementedError

    def _place_roads(self, cx, cz, center_x, center_z, biome) -> list:
        return []

    # --- Shared helpers ---
    def _scatter_point(self, rng, center_x, center_z, spread=None):
        spread = self.chunk_size * (self.params.get('scatter_spread', 0.8) if spread is None else spread)
        x = (rng.random() - 0.5) * spread + center_x
        z = (rng.random() - 0.5) * spread + center_z
        return float(x), float(z)

    def _trees(self, rng, center_x, center_z, count, scale_range, spread=None) -> list:
        low, high = scale_range
        trees = []
        for _ in range(count):
            x, z = self._scatter_point(rng, center_x, center_z, spread)
            trees.append(PlacedObject(ObjectKind.TREE, x, z, scale=float(rng.uniform(low, high))))
        return trees

    def _sparse_trees(self, rng, center_x, center_z) -> list:
        """Each attempt draws its position and scale, then keeps the tree by chance."""
        low, high = self.params['plains_tree_scale']
        trees = []
        for _ in range(self.params['plains_tree_attempts']):
            keep = rng.random() < self.params['plains_tree_chance']
            x, z = self._scatter_point(rng, center_x, center_z)
            scale = float(rng.uniform(low, high))
            if keep:
                trees.append(PlacedObject(ObjectKind.TREE, x, z, scale=scale))
        return trees

    def _street_grid(self, center_x, center_z) -> list:
        spacing = self.params['street_spacing']
        roads = []
        for i in range(-self.params['street_count'], self.params['street_count'] + 1):
            roads.append(PlacedObject(
                ObjectKind.ROAD, center_x + i * spacing, center_z,
                width=self.params['road_width'], length=self.chunk_size, direction=DEFAULTS.NORTH_SOUTH,
            ))
            roads.append(PlacedObject(
                ObjectKind.ROAD, center_x, center_z + i * spacing,
                width=self.params['road_width'], length=self.chunk_size, direction=DEFAULTS.EAST_WEST,
            ))
        return roads

    def _highways(self, center_x, center_z) -> list:
        """Axis highways inside the configured distance annulus."""
        low, high = self.params['highway_annulus_km']
        tolerance = self.params['highway_axis_tolerance']
        distance_km = math.hypot(center_x, center_z) / DEFAULTS.M_PER_KM
        if not (low < distance_km < high):
            return []
        if abs(center_x) < tolerance:
            direction = DEFAULTS.NORTH_SOUTH
        elif abs(center_z) < tolerance:
            direction = DEFAULTS.EAST_WEST
        else:
            return []
        return [PlacedObject(
            ObjectKind.HIGHWAY, center_x, center_z,
            width=self.params['highway_width'], length=self.chunk_size, direction=direction,
        )]

    def _gas_station(self, rng, center_x, center_z) -> list:
        low, high = self.params['gas_station_annulus_km']
        tolerance = self.params['gas_station_axis_tolerance']
        distance_km = math.hypot(center_x, center_z) / DEFAULTS.M_PER_KM
        if not (low < distance_km < high):
            return []
        if abs(center_x) >= tolerance and abs(center_z) >= tolerance:
            return []
        if rng.random() >= self.params['gas_station_chance']:
            return []
        jitter = self.params['gas_station_jitter']
        x = center_x + (rng.random() - 0.5) * jitter
        z = center_z + (rng.random() - 0.5) * jitter
        return [PlacedObject(ObjectKind.GAS_STATION, float(x), float(z))]


class SparsePlacer(ObjectPlacer):
    """Open countryside: a few field trees and the two axis country roads."""
    ruleset = Ruleset.SPARSE

    def _place_features(self, cx, cz, center_x, center_z, biome, rng):
        if biome is not Biome.PLAINS:
            return []
        return self._sparse_trees(rng, center_x, center_z)

    def _place_roads(self, cx, cz, center_x, center_z, biome):
        roads = []
        if cx == 0:
            roads.append(PlacedObject(
                ObjectKind.ROAD, 0.0, center_z,
                width=self.params['road_width'], length=self.chunk_size, direction=DEFAULTS.NORTH_SOUTH,
            ))
        if cz == 0:
            roads.append(PlacedObject(
                ObjectKind.ROAD, center_x, 0.0,
                width=self.params['road_width'], length=self.chunk_size, direction=DEFAULTS.EAST_WEST,
            ))
        return roads


class UrbanPlacer(ObjectPlacer):
    """
    A regular block grid. Grid offsets where both indices are odd are road
    intersections: they carry a traffic light instead of a building, and the
    avenues and streets run along the odd grid lines.

    A chunk owns the half-open index range [-n, n) on each axis, so nodes and
    lines on a shared edge belong to exactly one chunk. Traffic lights are
    referenced over the closed range and deduplicated by the registry.
    Profiles guarantee chunk_size / block_spacing is even, so the odd lines
    line up across chunks.
    """
    ruleset = Ruleset.URBAN

    def _grid_half_count(self) -> int:
        return int(round(self.chunk_size / self.params['block_spacing'])) // 2

    def _place_features(self, cx, cz, center_x, center_z, biome, rng):
        if biome is not Biome.CITY:
            return []
        spacing = self.params['block_spacing']
        footprint = self.params['building_footprint']
        low, high = self.params['building_height_range']
        n = self._grid_half_count()

        objects = []
        for i in range(-n, n + 1):
            for j in range(-n, n + 1):
                x = center_x + i * spacing
                z = center_z + j * spacing
                if i % 2 and j % 2:
                    light = self.traffic_lights.get_or_create(x, z)
                    objects.append(PlacedObject(ObjectKind.TRAFFIC_LIGHT, light.x, light.z, key=light.key))
                elif i < n and j < n:
                    objects.append(PlacedObject(
                        ObjectKind.BUILDING, x, z,
                        height=float(rng.uniform(low, high)), width=footprint, depth=footprint,
                    ))
        return objects

    def _place_roads(self, cx, cz, center_x, center_z, biome):
        if biome is not Biome.CITY:
            return []
        spacing = self.params['block_spacing']
        n = self._grid_half_count()
        roads = []
        for i in range(-n, n):
            if not i % 2:
                continue
            roads.append(PlacedObject(
                ObjectKind.ROAD, center_x + i * spacing, center_z,
                width=self.params['road_width'], length=self.chunk_size, direction=DEFAULTS.NORTH_SOUTH,
            ))
            roads.append(PlacedObject(
                ObjectKind.ROAD, center_x, center_z + i * spacing,
                width=self.params['road_width'], length=self.chunk_size, direction=DEFAULTS.EAST_WEST,
            ))
        return roads


class RegionalPlacer(ObjectPlacer):
    """A 20km region: forests, a central city, fields and highways."""
    ruleset = Ruleset.REGIONAL

    def _place_features(self, cx, cz, center_x, center_z, biome, rng):
        if biome is Biome.FOREST:
            return self._trees(rng, center_x, center_z, self.params['forest_trees'], self.params['forest_tree_scale'])

        if biome is Biome.CITY:
            spacing = self.params['street_spacing']
            clearance = self.params['road_clearance']
            low, high = self.params['building_height_range']
            buildings = []
            for _ in range(self.params['city_building_attempts']):
                x, z = self._scatter_point(rng, center_x, center_z)
                height = float(rng.uniform(low, high))
                near_road = _near_line(x - center_x, spacing, clearance) or _near_line(z - center_z, spacing, clearance)
                if not near_road:
                    buildings.append(PlacedObject(ObjectKind.BUILDING, x, z, height=height))
            return buildings

        if biome is Biome.PLAINS:
            objects = self._sparse_trees(rng, center_x, center_z)
            objects.extend(self._gas_station(rng, center_x, center_z))
            return objects

        return []

    def _place_roads(self, cx, cz, center_x, center_z, biome):
        roads = self._street_grid(center_x, center_z) if biome is Biome.CITY else []
        roads.extend(self._highways(center_x, center_z))
        return roads


class FullWorldPlacer(ObjectPlacer):
    """Every landmark family of the 100km world, plus rail."""
    ruleset = Ruleset.FULL_WORLD

    def _place_features(self, cx, cz, center_x, center_z, biome, rng):
        if biome is Biome.CITY:
            return self._city(center_x, center_z, rng)
        if biome is Biome.VILLAGE:
            return self._village(center_x, center_z, rng)
        if biome is Biome.AIRPORT:
            return self._airport(cx, cz, center_x, center_z)
        if biome is Biome.PARK:
            return self._theme_park(center_x, center_z, rng)
        if biome is Biome.INDUSTRIAL:
            return self._industrial(center_x, center_z, rng)
        if biome is Biome.FOREST:
            return self._trees(rng, center_x, center_z, self.params['forest_trees'], self.params['forest_tree_scale'])
        if biome is Biome.HILLS:
            return self._trees(rng, center_x, center_z, self.params['hills_trees'], self.params['forest_tree_scale'])
        if biome is Biome.MOUNTAINS:
            return self._trees(rng, center_x, center_z, self.params['mountain_trees'], self.params['plains_tree_scale'])
        if biome is Biome.PLAINS:
            objects = self._sparse_trees(rng, center_x, center_z)
            objects.extend(self._gas_station(rng, center_x, center_z))
            return objects
        return []

    def _city(self, center_x, center_z, rng):
        spacing = self.params['street_spacing']
        clearance = self.params['road_clearance']
        lattice = self.params['building_lattice']
        low, high = self.params['building_height_range']
        urban_radius_km = self.classifier.rules['urban_radius_km']
        distance_km = math.hypot(center_x, center_z) / DEFAULTS.M_PER_KM
        # Taller towers towards downtown.
        downtown = max(0.0, 1.0 - distance_km / urban_radius_km) if urban_radius_km > 0 else 0.0
        boost = 1.0 + (self.params['downtown_height_boost'] - 1.0) * downtown

        objects = []
        n = int((self.chunk_size / 2.0) // lattice)
        for i in range(-n, n + 1):
            for j in range(-n, n + 1):
                dx, dz = i * lattice, j * lattice
                if abs(dx) >= self.chunk_size / 2.0 or abs(dz) >= self.chunk_size / 2.0:
                    continue
                if _near_line(dx, spacing, clearance) or _near_line(dz, spacing, clearance):
                    continue
                if rng.random() >= self.params['building_chance']:
                    continue
                objects.append(PlacedObject(
                    ObjectKind.BUILDING, center_x + dx, center_z + dz,
                    height=float(rng.uniform(low, high)) * boost,
                    width=float(rng.uniform(30.0, 60.0)),
                    depth=float(rng.uniform(30.0, 60.0)),
                ))

        count = self.params['street_count']
        for i in range(-count, count + 1):
            for j in range(-count, count + 1):
                light = self.traffic_lights.get_or_create(center_x + i * spacing, center_z + j * spacing)
                objects.append(PlacedObject(ObjectKind.TRAFFIC_LIGHT, light.x, light.z, key=light.key))
        return objects

    def _village(self, center_x, center_z, rng):
        low, high = self.params['village_house_count']
        size_low, size_high = self.params['village_house_size']
        radius = self.params['village_ring_radius']
        # Even counts only: with the half-step offset no house then sits at
        # angle 0 or pi, on the main street.
        house_count = max(2, int(rng.integers(low, high + 1)) // 2 * 2)

        objects = [
            PlacedObject(ObjectKind.FOUNTAIN, center_x, center_z, radius=4.0),
            PlacedObject(
                ObjectKind.ROAD, center_x, center_z,
                width=self.params['village_road_width'], length=self.chunk_size, direction=DEFAULTS.EAST_WEST,
            ),
        ]
        for k in range(house_count):
            angle = 2.0 * math.pi * (k + 0.5) / house_count
            size = float(rng.uniform(size_low, size_high))
            objects.append(PlacedObject(
                ObjectKind.HOUSE,
                center_x + math.cos(angle) * radius,
                center_z + math.sin(angle) * radius,
                width=size, depth=size, height=size * 0.6,
                # Facing the fountain.
                rotation=angle + math.pi,
            ))
        return objects

    def _airport(self, cx, cz, center_x, center_z):
        objects = [PlacedObject(
            ObjectKind.RUNWAY, center_x, center_z + self.params['runway_offset'],
            width=self.params['runway_width'], length=self.chunk_size, direction=DEFAULTS.EAST_WEST,
        )]
        width, depth, height = self.params['terminal_size']
        for airport_x, airport_z, _, _ in self.classifier.rules['airports']:
            home = (int(math.floor(airport_x / self.chunk_size + 0.5)), int(math.floor(airport_z / self.chunk_size + 0.5)))
            if home == (cx, cz):
                objects.append(PlacedObject(
                    ObjectKind.TERMINAL, airport_x, airport_z + self.params['terminal_offset'],
                    width=width, depth=depth, height=height,
                ))
        return objects

    def _theme_park(self, center_x, center_z, rng):
        length, width, height = self.params['rollercoaster_size']
        objects = [
            PlacedObject(ObjectKind.ROLLERCOASTER, center_x - 150.0, center_z,
                         length=length, width=width, height=height),
            PlacedObject(ObjectKind.FERRISWHEEL, center_x + 200.0, center_z - 100.0,
                         radius=self.params['ferriswheel_radius']),
        ]
        low, high = self.params['park_attractions']
        for _ in range(int(rng.integers(low, high + 1))):
            x, z = self._scatter_point(rng, center_x, center_z, spread=0.6)
            objects.append(PlacedObject(ObjectKind.ATTRACTION, x, z, scale=float(rng.uniform(0.8, 1.5))))
        objects.extend(self._trees(rng, center_x, center_z, self.params['park_trees'], self.params['plains_tree_scale']))
        return objects

    def _industrial(self, center_x, center_z, rng):
        spacing = self.params['warehouse_spacing']
        size_low, size_high = self.params['warehouse_size']
        height_low, height_high = self.params['warehouse_height']
        n = int((self.chunk_size / 2.0 - spacing / 2.0) // spacing)
        objects = []
        for i in range(-n, n + 1):
            for j in range(-n, n + 1):
                objects.append(PlacedObject(
                    ObjectKind.BUILDING, center_x + i * spacing, center_z + j * spacing,
                    width=float(rng.uniform(size_low, size_high)),
                    depth=float(rng.uniform(size_low, size_high)),
                    height=float(rng.uniform(height_low, height_high)),
                ))
        return objects

    def _place_roads(self, cx, cz, center_x, center_z, biome):
        streets = self._street_grid(center_x, center_z) if biome is Biome.CITY else []
        highways = self._highways(center_x, center_z)
        rail = self._rail(cx, cz, center_x, center_z, biome, streets, highways)
        return streets + highways + rail

    def _rail(self, cx, cz, center_x, center_z, biome, streets, highways):
        """Rail segments, level crossings and stations on the configured lines."""
        if biome is Biome.OCEAN:
            return []
        half = self.chunk_size / 2.0
        objects = []
        for line in self.params['rail_lines']:
            offset = line['offset']
            if line['axis'] == 'x':
                across, along, along_index = center_z, center_x, cx
                x, z = center_x, offset
                direction = DEFAULTS.EAST_WEST
            else:
                across, along, along_index = center_x, center_z, cz
                x, z = offset, center_z
                direction = DEFAULTS.NORTH_SOUTH
            if not (across - half <= offset < across + half):
                continue
            if not (line['start'] <= along <= line['end']):
                continue

            objects.append(PlacedObject(
                ObjectKind.RAILWAY, x, z,
                width=self.params['rail_width'], length=self.chunk_size, direction=direction,
            ))
            for road in streets + highways:
                if road.direction == direction:
                    continue
                # A perpendicular road crosses the line at its own position.
                crossing_x = road.x if direction == DEFAULTS.EAST_WEST else x
                crossing_z = z if direction == DEFAULTS.EAST_WEST else road.z
                objects.append(PlacedObject(
                    ObjectKind.RAILWAY_CROSSING, crossing_x, crossing_z, width=road.width, direction=road.direction,
                ))
            if biome in (Biome.CITY, Biome.VILLAGE) and along_index % self.params['station_interval_chunks'] == 0:
                objects.append(PlacedObject(
                    ObjectKind.TRAIN_STATION, x, z, length=150.0, width=30.0, direction=direction,
                ))
        return objects


PLACERS = {
    Ruleset.SPARSE: SparsePlacer,
    Ruleset.URBAN: UrbanPlacer,
    Ruleset.REGIONAL: RegionalPlacer,
    Ruleset.FULL_WORLD: FullWorldPlacer,
}


def create_placer(profile: WorldProfile, classifier: BiomeClassifier,
                  traffic_lights: TrafficLightRegistry = None, logger: logging.Logger = None) -> ObjectPlacer:
    try:
        placer_class = PLACERS[profile.ruleset]
    except KeyError:
        raise ProfileError(f"No object placer for ruleset '{profile.ruleset}'") from None
    return placer_class(profile, classifier, traffic_lights, logger)
