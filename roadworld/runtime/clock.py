# roadworld/runtime/clock.py

"""
================================================================================
GAME CLOCK
================================================================================
This module provides a self-contained, data-only class for tracking the
in-game time of day. It drives the day/night cycle; traffic signals and
trains run on the real elapsed time it also tracks.

Data Contract:
---------------
- Inputs (on initialization):
    - config (dict, optional): Overrides for the start time and time scale.
- Public Methods:
    - update(real_delta_time): Advances the clock.
    - set_speed(new_scale): Changes the speed of time.
    - get_time_string(): Returns "HH:MM".
- Public Properties:
    - minutes_of_day (float), hour, minute (ints), real_elapsed (seconds).
- Side Effects: None.
- Invariants: The time of day is derived from one accumulator, so it does not
  depend on the frequency of updates, and always lies in [0, 1440).
================================================================================
"""
from .. import config as DEFAULTS

MINUTES_PER_DAY = 1440.0
SECONDS_PER_MINUTE = 60.0


class GameClock:
    """Manages the passage of time in a world session."""

    def __init__(self, config: dict = None):
        config = config or {}
        self.start_minutes = config.get('start_time_minutes', DEFAULTS.START_TIME_MINUTES)
        self.time_scale = config.get('time_scale', DEFAULTS.INITIAL_TIME_SCALE)

        self.real_elapsed = 0.0
        self._game_seconds_elapsed = 0.0

        self.minutes_of_day = 0.0
        self.hour = 0
        self.minute = 0
        self._recalculate_time()

    def update(self, real_delta_time: float):
        """
        Advances the clock by a given amount of real-world time.

        Args:
            real_delta_time (float): The time elapsed in the real world, in seconds.
        """
        if real_delta_time <= 0:
            return
        self.real_elapsed += real_delta_time
        if self.time_scale > 0:
            self._game_seconds_elapsed += real_delta_time * self.time_scale
        self._recalculate_time()

    def _recalculate_time(self):
        total_minutes = self.start_minutes + self._game_seconds_elapsed / SECONDS_PER_MINUTE
        self.minutes_of_day = total_minutes % MINUTES_PER_DAY
        self.hour = int(self.minutes_of_day // 60)
        self.minute = int(self.minutes_of_day % 60)

    def set_speed(self, new_scale: float):
        """
        Sets the speed of the in-game time.
        0 = paused, 1 = real-time, > 1 = fast-forward.
        """
        self.time_scale = max(0.0, new_scale)

    def get_time_string(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"
