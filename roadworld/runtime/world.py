# roadworld/runtime/world.py

"""
================================================================================
WORLD RUNTIME
================================================================================
This module provides the user-facing `World` class, the primary interface a
game uses to stream a procedurally generated world. It composes one
ChunkStore (terrain, biomes, placed objects) with the cosmetic periodic
state: the game clock, the day/night cycle, traffic signals and trains.

Several World instances can coexist; each owns its own caches and registries.
================================================================================
"""
import logging

from ..biomes import Biome
from ..chunks import ChunkStore
from ..generator import ChunkRecord, clamp_coordinate
from ..profiles import Ruleset, load_profile
from .clock import GameClock
from .day_night_cycle import DayNightCycle
from .rail import RailNetwork


class World:
    """
    The main runtime class for a streamed world session.
    """
    def __init__(self, profile_name: str = "regional", config: dict = None, logger: logging.Logger = None):
        """
        Initializes a World session.

        Args:
            profile_name (str): The named world profile to generate.
            config (dict, optional): Profile overrides, plus an optional
                'runtime' dictionary for the clock and lighting.
            logger (logging.Logger, optional): Logger for all output.
        """
        self.logger = logger or logging.getLogger(__name__)
        config = dict(config or {})
        runtime_config = config.pop('runtime', {})
        self.logger.info(f"Initializing world session with profile '{profile_name}'")

        # --- 1. Terrain ---
        self.profile = load_profile(profile_name, config)
        self.chunks = ChunkStore(self.profile, self.logger)

        # --- 2. Periodic State ---
        self.clock = GameClock(runtime_config)
        self.day_night_cycle = DayNightCycle(self.clock, runtime_config)
        if self.profile.ruleset is Ruleset.FULL_WORLD:
            self.rail = RailNetwork.from_profile(self.profile, self._has_track)
        else:
            self.rail = RailNetwork([])

        self.logger.info(f"World session '{self.profile.name}' ready.")

    def update(self, real_delta_time: float):
        """
        Updates the world's internal state. Should be called once per frame.

        Args:
            real_delta_time (float): The real-world time elapsed since the last frame, in seconds.
        """
        self.clock.update(real_delta_time)
        self.day_night_cycle.update()

    # --- Terrain ---
    def ensure_chunk(self, cx: int, cz: int) -> ChunkRecord:
        return self.chunks.ensure_chunk(cx, cz)

    def ensure_chunks_around(self, x: float, z: float, radius: int = None) -> list:
        return self.chunks.ensure_chunks_around(x, z, radius)

    def height_at_position(self, x: float, z: float) -> float:
        return self.chunks.height_at_position(x, z)

    def get_current_chunk(self, x: float, z: float) -> tuple:
        return self.chunks.get_current_chunk(x, z)

    # --- Moving Entities & Signals ---
    def _has_track(self, x: float, z: float) -> bool:
        # No rail is laid in ocean chunks.
        cx, cz = self.chunks.get_current_chunk(x, z)
        return self.chunks.generator.chunk_biome(cx, cz) is not Biome.OCEAN

    def nearby_moving_entities(self, x: float, z: float, radius: float) -> list:
        """Active rail vehicles within `radius` of (x, z)."""
        x = clamp_coordinate(x)
        z = clamp_coordinate(z)
        return self.rail.nearby(x, z, radius, self.clock.real_elapsed)

    def traffic_signal_at(self, x: float, z: float):
        """The current phase of the traffic light at (x, z), or None if there is none."""
        light = self.chunks.traffic_lights.lookup(clamp_coordinate(x), clamp_coordinate(z))
        if light is None:
            return None
        return light.phase_at(self.clock.real_elapsed)

    # --- Public API for User Control ---
    def set_game_speed(self, new_scale: float):
        """
        Sets the speed of the in-game time.
        0 = paused, 1 = real-time, > 1 = fast-forward.
        """
        self.clock.set_speed(new_scale)
        self.logger.info(f"Game speed set to {new_scale}x.")

    def get_time_string(self) -> str:
        return self.clock.get_time_string()

    @property
    def is_daytime(self) -> bool:
        return self.day_night_cycle.is_daytime

    @property
    def sky_color(self) -> tuple:
        return self.day_night_cycle.sky_color
