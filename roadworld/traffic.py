# roadworld/traffic.py

"""
================================================================================
TRAFFIC LIGHTS
================================================================================
Traffic lights are memoized by intersection cell so that two chunks which
both reference an intersection on their shared border reuse one instance.
The registry is owned by a single world session (its ChunkStore); it is an
append-only map with a lock around get-or-create and lock-free reads.

A light's signal phase is a simple periodic state machine of elapsed time:
north-south green, north-south yellow, east-west green, east-west yellow.
================================================================================
"""
import math
import threading
from dataclasses import dataclass
from enum import Enum

from . import config as DEFAULTS


class SignalPhase(Enum):
    NORTH_SOUTH_GREEN = "north-south-green"
    NORTH_SOUTH_YELLOW = "north-south-yellow"
    EAST_WEST_GREEN = "east-west-green"
    EAST_WEST_YELLOW = "east-west-yellow"


def signal_cycle_seconds(green: float = DEFAULTS.SIGNAL_GREEN_SECONDS,
                         yellow: float = DEFAULTS.SIGNAL_YELLOW_SECONDS) -> float:
    return 2.0 * (green + yellow)


@dataclass(frozen=True)
class TrafficLight:
    key: tuple
    x: float
    z: float
    # Seconds into the cycle at elapsed time 0, so neighbours are not in lockstep.
    phase_offset: float = 0.0

    def phase_at(self, elapsed_seconds: float,
                 green: float = DEFAULTS.SIGNAL_GREEN_SECONDS,
                 yellow: float = DEFAULTS.SIGNAL_YELLOW_SECONDS) -> SignalPhase:
        t = (elapsed_seconds + self.phase_offset) % signal_cycle_seconds(green, yellow)
        if t < green:
            return SignalPhase.NORTH_SOUTH_GREEN
        if t < green + yellow:
            return SignalPhase.NORTH_SOUTH_YELLOW
        if t < 2 * green + yellow:
            return SignalPhase.EAST_WEST_GREEN
        return SignalPhase.EAST_WEST_YELLOW


def _cell_offset(key: tuple) -> float:
    """Deterministic per-intersection offset into the signal cycle."""
    gx, gz = key
    mixed = (gx * 73856093) ^ (gz * 19349663)
    return float(mixed % 97) / 97.0 * signal_cycle_seconds()


class TrafficLightRegistry:
    """Session-owned map from intersection cell to its single TrafficLight."""

    def __init__(self, cell_size: float):
        if cell_size <= 0:
            raise ValueError(f"cell_size must be positive, got {cell_size}")
        self.cell_size = float(cell_size)
        self._lights = {}
        self._lock = threading.Lock()

    def key_for(self, x: float, z: float) -> tuple:
        return (int(math.floor(x / self.cell_size + 0.5)), int(math.floor(z / self.cell_size + 0.5)))

    def get_or_create(self, x: float, z: float) -> TrafficLight:
        """Returns the light for the intersection at (x, z), creating it once."""
        key = self.key_for(x, z)
        light = self._lights.get(key)
        if light is not None:
            return light
        with self._lock:
            light = self._lights.get(key)
            if light is None:
                light = TrafficLight(
                    key=key,
                    x=key[0] * self.cell_size,
                    z=key[1] * self.cell_size,
                    phase_offset=_cell_offset(key),
                )
                self._lights[key] = light
            return light

    def lookup(self, x: float, z: float):
        """The light of the intersection cell containing (x, z), or None."""
        return self._lights.get(self.key_for(x, z))

    def __len__(self):
        return len(self._lights)

    def __contains__(self, key):
        return key in self._lights

    def __iter__(self):
        return iter(list(self._lights.values()))
