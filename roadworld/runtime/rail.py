# roadworld/runtime/rail.py

"""
================================================================================
RAIL TRAFFIC
================================================================================
Trains shuttle back and forth along the rail lines of a profile. Their
positions are a pure function of elapsed time, so any number of queries in
one frame agree, and nothing needs to be stepped.
================================================================================
"""
import math
from dataclasses import dataclass


@dataclass(frozen=True)
class Train:
    train_id: int
    line_index: int
    x: float
    z: float
    # Unit velocity direction along the world axes.
    heading_x: float
    heading_z: float
    speed: float

    def distance_to(self, x: float, z: float) -> float:
        return math.hypot(self.x - x, self.z - z)


class RailNetwork:
    """
    The moving rail vehicles of a world session.

    `has_track`, when given, is called with a train position and decides
    whether track exists there; trains elsewhere are not reported.
    """

    def __init__(self, rail_lines, trains_per_line: int = 0, speed: float = 0.0, has_track=None):
        self.rail_lines = [dict(line) for line in rail_lines]
        self.has_track = has_track
        self.trains_per_line = int(trains_per_line)
        self.speed = float(speed)

    @classmethod
    def from_profile(cls, profile, has_track=None) -> "RailNetwork":
        params = profile.placement
        return cls(
            params.get('rail_lines', []),
            params.get('trains_per_line', 0),
            params.get('train_speed', 0.0),
            has_track,
        )

    def trains_at(self, elapsed_seconds: float) -> list:
        trains = []
        for line_index, line in enumerate(self.rail_lines):
            length = line['end'] - line['start']
            if length <= 0 or self.trains_per_line <= 0:
                continue
            round_trip = 2.0 * length
            for k in range(self.trains_per_line):
                # Trains on one line are spread evenly over the round trip.
                s = (elapsed_seconds * self.speed + k * round_trip / self.trains_per_line) % round_trip
                outbound = s < length
                along = line['start'] + (s if outbound else round_trip - s)
                sign = 1.0 if outbound else -1.0
                if line['axis'] == 'x':
                    x, z, heading = along, line['offset'], (sign, 0.0)
                else:
                    x, z, heading = line['offset'], along, (0.0, sign)
                trains.append(Train(
                    train_id=line_index * self.trains_per_line + k,
                    line_index=line_index,
                    x=float(x),
                    z=float(z),
                    heading_x=heading[0],
                    heading_z=heading[1],
                    speed=self.speed,
                ))
        return trains

    def nearby(self, x: float, z: float, radius: float, elapsed_seconds: float) -> list:
        """Trains within `radius` of (x, z), nearest first."""
        found = [
            train for train in self.trains_at(elapsed_seconds)
            if train.distance_to(x, z) <= radius
            and (self.has_track is None or self.has_track(train.x, train.z))
        ]
        return sorted(found, key=lambda train: train.distance_to(x, z))
