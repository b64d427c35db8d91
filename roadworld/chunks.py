# roadworld/chunks.py

"""
================================================================================
CHUNK STORE
================================================================================
Session-lifetime cache of generated chunks, keyed by integer chunk
coordinate. Chunks are generated lazily on first request and never evicted
or regenerated.

The store owns everything a world session accumulates while streaming:
    - the ChunkRecords themselves,
    - a per-chunk nearest-neighbour index over the sparse height samples,
    - the traffic-light registry shared by overlapping chunks,
    - the list of gas-station locations found so far.

Concurrency: first requests for the same coordinate are serialized by a
per-key lock, so a chunk is generated exactly once even when several threads
ask for it. Reads of already generated chunks take no lock.
================================================================================
"""
import logging
import math
import threading

import numpy as np
from scipy.spatial import cKDTree

from .generator import ChunkGenerator, ChunkRecord, check_finite, clamp_coordinate
from .placement import ObjectKind, intersection_cell_size
from .profiles import WorldProfile
from .traffic import TrafficLightRegistry


class ChunkStore:
    """Lazily generated, append-only chunk cache for one world session."""

    def __init__(self, profile: WorldProfile, logger: logging.Logger = None,
                 permutation_table: np.ndarray = None):
        self.logger = logger or logging.getLogger(__name__)
        self.profile = profile
        self.traffic_lights = TrafficLightRegistry(intersection_cell_size(profile))
        self.generator = ChunkGenerator(profile, self.logger, permutation_table, self.traffic_lights)

        self._chunks = {}
        self._height_index = {}
        self._gas_stations = []
        self._lock = threading.Lock()
        self._key_locks = {}

    # --- Coordinates ---
    def get_current_chunk(self, x: float, z: float) -> tuple:
        """The chunk whose centered square contains (x, z)."""
        x = clamp_coordinate(x)
        z = clamp_coordinate(z)
        size = self.profile.chunk_size
        return (int(math.floor(x / size + 0.5)), int(math.floor(z / size + 0.5)))

    def _key(self, cx, cz) -> tuple:
        check_finite(cx, cz)
        if int(cx) != cx or int(cz) != cz:
            raise ValueError(f"Chunk coordinates must be integers, got ({cx}, {cz})")
        return (self.generator.clamp_chunk_index(cx), self.generator.clamp_chunk_index(cz))

    # --- Generation ---
    def ensure_chunk(self, cx: int, cz: int) -> ChunkRecord:
        """Returns the chunk at (cx, cz), generating and caching it on first use."""
        key = self._key(cx, cz)
        record = self._chunks.get(key)
        if record is not None:
            return record

        with self._lock:
            key_lock = self._key_locks.setdefault(key, threading.Lock())
        with key_lock:
            record = self._chunks.get(key)
            if record is not None:
                return record
            try:
                record = self.generator.generate_chunk(*key)
                tree = cKDTree(record.height_samples[:, :2])
                gas_stations = [(obj.x, obj.z) for obj in record.objects_of_kind(ObjectKind.GAS_STATION)]
                with self._lock:
                    # Record before index: lock-free readers that find the index
                    # must also find the record.
                    self._chunks[key] = record
                    self._height_index[key] = tree
                    self._gas_stations.extend(gas_stations)
            finally:
                with self._lock:
                    self._key_locks.pop(key, None)
        self.logger.debug(f"Chunk {key} cached ({len(self._chunks)} chunks in store).")
        return record

    def ensure_chunks_around(self, x: float, z: float, radius: int = None) -> list:
        """Ensures the (2r+1)^2 neighbourhood of the chunk containing (x, z)."""
        radius = self.profile.render_distance if radius is None else int(radius)
        center_cx, center_cz = self.get_current_chunk(x, z)
        return [
            self.ensure_chunk(center_cx + dx, center_cz + dz)
            for dz in range(-radius, radius + 1)
            for dx in range(-radius, radius + 1)
        ]

    def get_chunk(self, cx: int, cz: int):
        """The cached chunk, or None if it was never generated."""
        return self._chunks.get(self._key(cx, cz))

    # --- Queries ---
    def height_at_position(self, x: float, z: float) -> float:
        """
        Approximate ground height: the nearest sparse sample of the owning
        chunk. Returns 0.0 if that chunk has not been generated.
        """
        key = self.get_current_chunk(x, z)
        tree = self._height_index.get(key)
        if tree is None:
            return 0.0
        _, index = tree.query((clamp_coordinate(x), clamp_coordinate(z)))
        return float(self._chunks[key].height_samples[index, 2])

    @property
    def gas_station_locations(self) -> list:
        return list(self._gas_stations)

    def __contains__(self, key) -> bool:
        return tuple(key) in self._chunks

    def __len__(self) -> int:
        return len(self._chunks)

    def __iter__(self):
        return iter(list(self._chunks.values()))
