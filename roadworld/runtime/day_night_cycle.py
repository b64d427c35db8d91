# roadworld/runtime/day_night_cycle.py

"""
================================================================================
DAY/NIGHT CYCLE
================================================================================
Calculates the ambient brightness and sky color from a GameClock's time of
day. The renderer consumes `current_brightness` and `sky_color`.

Data Contract:
---------------
- Inputs (on initialization):
    - clock (GameClock): An instance of the GameClock.
    - config (dict, optional): Overrides for the lighting parameters.
- Public Methods:
    - update(): Recalculates the lighting based on the clock's current time.
- Public Properties:
    - is_daytime (bool), current_brightness (float in [0, 1]),
      sky_color (r, g, b floats in [0, 1]).
- Side Effects: None.
- Invariants: The output is a deterministic function of the clock's time.
================================================================================
"""
from typing import TYPE_CHECKING

import numpy as np

from .. import config as DEFAULTS

# Use a forward reference for the type hint to avoid circular imports.
if TYPE_CHECKING:
    from .clock import GameClock


def _lerp_color(color1: tuple, color2: tuple, t: float) -> tuple:
    """Linearly interpolates between two RGB colors with float channels."""
    t = np.clip(t, 0.0, 1.0)
    interpolated_color = np.array(color1) * (1 - t) + np.array(color2) * t
    return tuple(float(c) for c in interpolated_color)


def _lerp_float(val1: float, val2: float, t: float) -> float:
    """Linearly interpolates between two float values."""
    t = np.clip(t, 0.0, 1.0)
    return float(val1 * (1 - t) + val2 * t)


class DayNightCycle:
    """Ambient lighting of the world based on the in-game time."""

    def __init__(self, clock: 'GameClock', config: dict = None):
        config = config or {}
        self.clock = clock

        self.sunrise_hour = config.get('sunrise_hour', DEFAULTS.SUNRISE_HOUR)
        self.sunset_hour = config.get('sunset_hour', DEFAULTS.SUNSET_HOUR)
        self.transition_duration = config.get(
            'day_night_transition_duration_hours', DEFAULTS.DAY_NIGHT_TRANSITION_DURATION_HOURS
        )
        self.max_brightness = config.get('max_brightness', DEFAULTS.MAX_BRIGHTNESS)
        self.min_brightness = config.get('min_brightness', DEFAULTS.MIN_BRIGHTNESS)
        self.day_sky_color = tuple(config.get('day_sky_color', DEFAULTS.DAY_SKY_COLOR))
        self.night_sky_color = tuple(config.get('night_sky_color', DEFAULTS.NIGHT_SKY_COLOR))

        # The light ramps up after sunrise and down before sunset.
        self.sunrise_end = self.sunrise_hour + self.transition_duration
        self.sunset_start = self.sunset_hour - self.transition_duration

        self.is_daytime = False
        self.current_brightness = self.min_brightness
        self.sky_color = self.night_sky_color
        self.update()

    def update(self):
        """
        Night -> Sunrise -> Full Day -> Sunset -> Night. Daytime itself is the
        half-open interval [sunrise, sunset).
        """
        current_hour = self.clock.minutes_of_day / 60.0
        self.is_daytime = self.sunrise_hour <= current_hour < self.sunset_hour

        if self.sunrise_hour <= current_hour < self.sunrise_end:
            t = (current_hour - self.sunrise_hour) / self.transition_duration
        elif self.sunrise_end <= current_hour < self.sunset_start:
            t = 1.0
        elif self.sunset_start <= current_hour < self.sunset_hour:
            t = 1.0 - (current_hour - self.sunset_start) / self.transition_duration
        else:
            t = 0.0

        self.current_brightness = _lerp_float(self.min_brightness, self.max_brightness, t)
        self.sky_color = _lerp_color(self.night_sky_color, self.day_sky_color, t)
