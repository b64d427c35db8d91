# roadworld/config.py

"""
================================================================================
INTERNAL DEFAULT CONFIGURATION
================================================================================
This module contains the default, fallback internal constants for the chunk
generator and one defaults dictionary per named world profile. These values
are used if they are not explicitly provided by the user's configuration.

DO NOT MODIFY THIS FILE FOR A SPECIFIC SESSION.
Instead, pass an overrides dictionary to `profiles.load_profile()`.

Units: world coordinates are in metres, distance thresholds in kilometres.
Feature sizes are divisors: a noise layer with feature size 2000 samples the
noise at (x / 2000, z / 2000).
================================================================================
"""

INF = float("inf")

# --- Noise Generation ---
DEFAULT_SEED = 12345
PERMUTATION_SIZE = 256
# Offsets (in metres) added to the coordinates of secondary noise layers so
# they are decorrelated from the continent layer while sharing one table.
VILLAGE_SEED_OFFSET = 54321.0
RIVER_SEED_OFFSET = 0.0

# --- Unit Conversion ---
M_PER_KM = 1000.0

# --- Coordinate Safety ---
# Finite coordinates beyond this magnitude are clamped before sampling.
MAX_ABS_COORDINATE = 1.0e7

# --- Object Directions ---
NORTH_SOUTH = "north-south"
EAST_WEST = "east-west"

# --- Biome Cascade Defaults ---
# Every profile starts from these and overrides what it needs. A threshold of
# INF / -INF disables the corresponding rule without changing cascade order.
BIOME_RULE_DEFAULTS = {
    "continent_feature_size": 10000.0,
    "continent_octaves": 4,
    "continent_persistence": 0.5,

    "biome_feature_size": 2000.0,
    "biome_octaves": 3,
    "biome_persistence": 0.6,

    # Rivers are stretched along z (narrower frequency along x).
    "river_feature_size_x": 1000.0,
    "river_feature_size_z": 2000.0,
    "river_octaves": 2,
    "river_persistence": 0.5,
    "river_band": 0.1,

    "village_feature_size": 3000.0,
    "village_octaves": 2,
    "village_persistence": 0.5,
    "village_threshold": INF,
    "village_min_km": 0.0,
    "village_max_km": 0.0,

    "ocean_threshold": -0.3,
    "beach_threshold": -0.1,
    "ocean_radius_km": 8.0,
    "urban_radius_km": 5.0,

    # Rectangles are (center_x, center_z, half_width, half_depth) in metres.
    "airports": [],
    "theme_parks": [],
    "industrial_zones": [],

    "mountain_threshold": 0.4,
    "snow_threshold": 0.6,
    "hills_threshold": 0.2,
    "hills_continent_threshold": 0.2,
    "desert_threshold": -INF,
}

# --- Named Profiles ---
# Height layers are (feature_size, octaves, persistence, amplitude).
# Height bands map a biome label to a (low, high) clamp; None is unbounded.
PROFILE_DEFAULTS = {
    # A 20km x 20km driving region around one city.
    "regional": {
        "ruleset": "regional",
        "world_size_chunks": 20,
        "chunk_size": 1000.0,
        "vertex_resolution": 129,
        "sample_stride": 4,
        "render_distance": 1,
        "biome_rules": {
            "airports": [(6000.0, 6000.0, 500.0, 500.0)],
        },
        "height_layers": [
            (1250.0, 6, 0.6, 40.0),
            (3333.333, 4, 0.5, 80.0),
            (500.0, 3, 0.4, 20.0),
            (100.0, 2, 0.3, 3.0),
        ],
        "height_bands": {
            "Ocean": (None, -10.0),
            "Beach": (-2.0, 2.0),
            "River": (None, -2.0),
            "Airport": (0.0, 0.0),
            "City": (0.0, 5.0),
        },
        "placement": {
            "street_spacing": 200.0,
            "street_count": 2,
            "road_width": 20.0,
            "road_clearance": 30.0,
            "city_building_attempts": 20,
            "building_height_range": (10.0, 40.0),
            "scatter_spread": 0.8,
            "forest_trees": 15,
            "forest_tree_scale": (0.8, 1.3),
            "plains_tree_attempts": 3,
            "plains_tree_chance": 0.3,
            "plains_tree_scale": (0.5, 0.8),
            "gas_station_annulus_km": (3.0, 8.0),
            "gas_station_axis_tolerance": 100.0,
            "gas_station_chance": 0.3,
            "gas_station_jitter": 200.0,
            "highway_annulus_km": (4.0, 9.0),
            "highway_axis_tolerance": 50.0,
            "highway_width": 15.0,
        },
    },

    # The full 100km x 100km world with every landmark family.
    "world": {
        "ruleset": "full-world",
        "world_size_chunks": 100,
        "chunk_size": 1000.0,
        "vertex_resolution": 65,
        "sample_stride": 4,
        "render_distance": 1,
        "biome_rules": {
            "continent_feature_size": 15000.0,
            "biome_feature_size": 2500.0,
            "river_feature_size_x": 1200.0,
            "river_feature_size_z": 2400.0,
            "river_band": 0.06,
            "village_feature_size": 4000.0,
            "village_threshold": 0.25,
            "village_min_km": 9.0,
            "village_max_km": 35.0,
            "ocean_threshold": -0.35,
            "beach_threshold": -0.15,
            "ocean_radius_km": 45.0,
            "urban_radius_km": 6.0,
            "airports": [(15000.0, 15000.0, 1200.0, 1200.0)],
            "theme_parks": [(-9000.0, 8000.0, 800.0, 600.0)],
            "industrial_zones": [(9000.0, -7000.0, 1500.0, 1000.0)],
            "mountain_threshold": 0.45,
            "snow_threshold": 0.65,
            "desert_threshold": -0.35,
        },
        "height_layers": [
            (2000.0, 6, 0.55, 45.0),
            (6000.0, 4, 0.5, 120.0),
            (600.0, 3, 0.4, 18.0),
            (120.0, 2, 0.3, 3.0),
        ],
        "height_bands": {
            "Ocean": (None, -15.0),
            "Beach": (-2.0, 2.0),
            "River": (None, -3.0),
            "City": (0.0, 8.0),
            "Airport": (0.0, 2.0),
            "Village": (0.0, 6.0),
            "Industrial": (0.0, 4.0),
            "Park": (0.0, 6.0),
        },
        "placement": {
            "street_spacing": 200.0,
            "street_count": 2,
            "road_width": 20.0,
            "road_clearance": 30.0,
            "building_lattice": 100.0,
            "building_chance": 0.8,
            "building_height_range": (12.0, 45.0),
            "downtown_height_boost": 2.5,
            "scatter_spread": 0.8,
            "forest_trees": 25,
            "hills_trees": 8,
            "mountain_trees": 3,
            "forest_tree_scale": (0.8, 1.3),
            "plains_tree_attempts": 4,
            "plains_tree_chance": 0.35,
            "plains_tree_scale": (0.5, 0.8),
            "village_ring_radius": 120.0,
            "village_house_count": (6, 10),
            "village_house_size": (10.0, 16.0),
            "village_road_width": 10.0,
            "runway_offset": -150.0,
            "runway_width": 60.0,
            "terminal_offset": 250.0,
            "terminal_size": (300.0, 80.0, 25.0),
            "rollercoaster_size": (400.0, 120.0, 45.0),
            "ferriswheel_radius": 40.0,
            "park_attractions": (3, 6),
            "park_trees": 8,
            "warehouse_spacing": 250.0,
            "warehouse_size": (40.0, 90.0),
            "warehouse_height": (10.0, 25.0),
            "gas_station_annulus_km": (6.0, 40.0),
            "gas_station_axis_tolerance": 100.0,
            "gas_station_chance": 0.25,
            "gas_station_jitter": 200.0,
            "highway_annulus_km": (6.0, 44.0),
            "highway_axis_tolerance": 50.0,
            "highway_width": 18.0,
            # Lines along "x" run east-west at z=offset; along "z" run
            # north-south at x=offset. start/end bound the running axis.
            "rail_lines": [
                {"axis": "x", "offset": 3000.0, "start": -40000.0, "end": 40000.0},
                {"axis": "z", "offset": -5000.0, "start": -40000.0, "end": 40000.0},
            ],
            "rail_width": 6.0,
            "station_interval_chunks": 4,
            "trains_per_line": 2,
            "train_speed": 40.0,
        },
    },

    # A flat, empty countryside used for handling tests.
    "empty-fields": {
        "ruleset": "sparse",
        "world_size_chunks": 10,
        "chunk_size": 500.0,
        "vertex_resolution": 65,
        "sample_stride": 4,
        "render_distance": 1,
        "biome_rules": {
            "ocean_threshold": -INF,
            "beach_threshold": -INF,
            "ocean_radius_km": INF,
            "urban_radius_km": 0.0,
            "river_band": 0.0,
            "mountain_threshold": INF,
            "snow_threshold": INF,
            "hills_threshold": INF,
        },
        "height_layers": [
            (2000.0, 1, 0.5, 8.0),
        ],
        "height_bands": {},
        "placement": {
            "scatter_spread": 0.8,
            "plains_tree_attempts": 6,
            "plains_tree_chance": 0.5,
            "plains_tree_scale": (0.6, 1.1),
            "road_width": 10.0,
        },
    },

    # A city that never ends.
    "megacity": {
        "ruleset": "urban",
        "world_size_chunks": 40,
        "chunk_size": 300.0,
        "vertex_resolution": 33,
        "sample_stride": 4,
        "render_distance": 2,
        "biome_rules": {
            "ocean_threshold": -INF,
            "beach_threshold": -INF,
            "ocean_radius_km": INF,
            "urban_radius_km": INF,
        },
        "height_layers": [
            (800.0, 3, 0.5, 6.0),
            (150.0, 2, 0.4, 2.0),
        ],
        "height_bands": {
            "City": (0.0, 3.0),
        },
        "placement": {
            "block_spacing": 50.0,
            "road_width": 12.0,
            "building_footprint": 30.0,
            "building_height_range": (20.0, 140.0),
        },
    },
}

# --- Runtime Timers ---
# The time of day at session start, in minutes since midnight (12:00).
START_TIME_MINUTES = 720.0
# Game seconds that pass per real second.
INITIAL_TIME_SCALE = 10.0
SUNRISE_HOUR = 6.0
SUNSET_HOUR = 18.0
DAY_NIGHT_TRANSITION_DURATION_HOURS = 1.0
MAX_BRIGHTNESS = 1.0
MIN_BRIGHTNESS = 0.25
DAY_SKY_COLOR = (0.53, 0.81, 0.92)
NIGHT_SKY_COLOR = (0.1, 0.1, 0.3)

# Traffic signal timing in real seconds.
SIGNAL_GREEN_SECONDS = 20.0
SIGNAL_YELLOW_SECONDS = 4.0
