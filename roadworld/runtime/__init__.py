# roadworld/runtime/__init__.py

# Periodic session state layered over the chunk store.

from .world import World
from .clock import GameClock
from .day_night_cycle import DayNightCycle
from .rail import RailNetwork, Train

__all__ = ["World", "GameClock", "DayNightCycle", "RailNetwork", "Train"]
