from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

from roadworld.biomes import Biome
from roadworld.chunks import ChunkStore
from roadworld.placement import ObjectKind


@pytest.fixture
def fields_store(fields_profile):
    return ChunkStore(fields_profile)


@pytest.fixture
def megacity_store(megacity_profile):
    return ChunkStore(megacity_profile)


def test_ensure_chunk_is_idempotent(fields_store):
    record = fields_store.ensure_chunk(0, 0)
    assert fields_store.ensure_chunk(0, 0) is record
    assert len(fields_store) == 1
    assert (0, 0) in fields_store
    assert fields_store.get_chunk(0, 0) is record
    assert fields_store.get_chunk(5, 5) is None


def test_fresh_store_regenerates_identical_chunks(fields_profile):
    first = ChunkStore(fields_profile).ensure_chunk(2, -3)
    second = ChunkStore(fields_profile).ensure_chunk(2, -3)
    assert first is not second
    assert first == second
    assert not first != second


def test_chunk_records_compare_by_content(megacity_store):
    record = megacity_store.ensure_chunk(0, 0)
    neighbour = megacity_store.ensure_chunk(1, 0)
    assert record == record
    assert record != neighbour
    assert record != "chunk"
    with pytest.raises(TypeError):
        hash(record)


def test_empty_fields_chunk(fields_store):
    record = fields_store.ensure_chunk(0, 0)
    assert record.biome is Biome.PLAINS
    assert record.resolution == 65
    assert record.vertex_count == 65 * 65
    assert record.vertices.shape == (65 * 65, 3)
    assert np.all(np.abs(record.heights()) <= 8.4)
    assert np.all(record.biome_codes == Biome.PLAINS.code)
    assert len(record.height_samples) == 17 * 17
    assert not record.vertices.flags.writeable


def test_vertices_span_the_centered_chunk_square(fields_store):
    record = fields_store.ensure_chunk(1, -2)
    xs, zs = record.vertices[:, 0], record.vertices[:, 2]
    assert xs.min() == 250.0 and xs.max() == 750.0
    assert zs.min() == -1250.0 and zs.max() == -750.0


def test_adjacent_chunks_share_edge_heights(fields_store):
    left = fields_store.ensure_chunk(0, 0)
    right = fields_store.ensure_chunk(1, 0)
    assert np.array_equal(left.heights()[-1, :], right.heights()[0, :])
    top = fields_store.ensure_chunk(0, 1)
    assert np.array_equal(left.heights()[:, -1], top.heights()[:, 0])


def test_height_at_position_before_generation_is_zero(fields_store):
    assert fields_store.height_at_position(1234.0, -987.0) == 0.0


def test_height_at_position_uses_nearest_sample(fields_store):
    record = fields_store.ensure_chunk(0, 0)
    x, z, height = record.height_samples[6 * 17 + 7]
    assert fields_store.height_at_position(x, z) == height
    assert fields_store.height_at_position(x + 3.0, z - 2.0) == height
    assert height == pytest.approx(fields_store.generator.height_at(x, z))


def test_get_current_chunk(fields_store):
    assert fields_store.get_current_chunk(0.0, 0.0) == (0, 0)
    assert fields_store.get_current_chunk(249.0, -249.0) == (0, 0)
    assert fields_store.get_current_chunk(251.0, 0.0) == (1, 0)
    assert fields_store.get_current_chunk(-251.0, 760.0) == (-1, 2)


def test_non_finite_coordinates_are_rejected(fields_store):
    with pytest.raises(ValueError):
        fields_store.ensure_chunk(float("nan"), 0)
    with pytest.raises(ValueError):
        fields_store.height_at_position(0.0, float("inf"))
    with pytest.raises(ValueError):
        fields_store.get_current_chunk(float("nan"), 0.0)
    with pytest.raises(ValueError):
        fields_store.ensure_chunk(0.5, 0)


def test_huge_coordinates_are_clamped(fields_store):
    assert fields_store.height_at_position(1.0e300, 0.0) == 0.0
    record = fields_store.ensure_chunk(10 ** 12, 0)
    assert record.cx == fields_store.generator.max_chunk_index
    assert fields_store.ensure_chunk(record.cx, 0) is record


def test_concurrent_requests_generate_once(fields_store):
    with ThreadPoolExecutor(max_workers=8) as pool:
        records = list(pool.map(lambda _: fields_store.ensure_chunk(3, 3), range(16)))
    assert all(record is records[0] for record in records)
    assert len(fields_store) == 1


def test_failed_generation_can_be_retried(fields_store, monkeypatch):
    def broken(cx, cz):
        raise RuntimeError("generation failed")

    monkeypatch.setattr(fields_store.generator, "generate_chunk", broken)
    with pytest.raises(RuntimeError):
        fields_store.ensure_chunk(4, 4)
    assert fields_store._key_locks == {}
    assert (4, 4) not in fields_store

    monkeypatch.undo()
    assert fields_store.ensure_chunk(4, 4).coordinate == (4, 4)
    assert fields_store._key_locks == {}


def test_ensure_chunks_around(fields_store):
    records = fields_store.ensure_chunks_around(10.0, -10.0)
    assert len(records) == 9
    assert {record.coordinate for record in records} == {(dx, dz) for dx in (-1, 0, 1) for dz in (-1, 0, 1)}
    assert len(fields_store.ensure_chunks_around(0.0, 0.0, radius=2)) == 25
    assert len(fields_store) == 25


def test_megacity_chunk(megacity_store):
    record = megacity_store.ensure_chunk(0, 0)
    assert record.biome is Biome.CITY
    heights = record.heights()
    assert heights.min() >= 0.0 and heights.max() <= 3.0
    assert len(record.objects_of_kind(ObjectKind.BUILDING)) == 27


def test_megacity_neighbours_share_traffic_lights(megacity_store):
    left = megacity_store.ensure_chunk(0, 0)
    right = megacity_store.ensure_chunk(1, 0)
    left_keys = {obj.key for obj in left.objects_of_kind(ObjectKind.TRAFFIC_LIGHT)}
    right_keys = {obj.key for obj in right.objects_of_kind(ObjectKind.TRAFFIC_LIGHT)}
    assert len(left_keys & right_keys) == 4
    assert len(megacity_store.traffic_lights) == 28


def test_world_landmark_chunks(world_profile):
    store = ChunkStore(world_profile)
    assert store.ensure_chunk(0, 0).biome is Biome.CITY
    airport = store.ensure_chunk(15, 15)
    assert airport.biome is Biome.AIRPORT
    assert len(airport.objects_of_kind(ObjectKind.TERMINAL)) == 1
    assert 0.0 <= store.generator.height_at(15000.0, 15000.0) <= 8.0


def test_gas_station_locations_are_collected(regional_profile):
    store = ChunkStore(regional_profile)
    for cx in range(4, 8):
        store.ensure_chunk(cx, 0)
    expected = [
        (obj.x, obj.z)
        for record in store
        for obj in record.objects_of_kind(ObjectKind.GAS_STATION)
    ]
    assert sorted(store.gas_station_locations) == sorted(expected)
