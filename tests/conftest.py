import pytest

from roadworld.generator import ChunkGenerator
from roadworld.profiles import load_profile


@pytest.fixture(scope="session")
def regional_profile():
    return load_profile("regional")


@pytest.fixture(scope="session")
def world_profile():
    return load_profile("world")


@pytest.fixture(scope="session")
def fields_profile():
    return load_profile("empty-fields")


@pytest.fixture(scope="session")
def megacity_profile():
    return load_profile("megacity")


# Generators below carry a traffic-light registry that fills up as tests run.
# Tests that count lights build their own placer or store.
@pytest.fixture(scope="session")
def regional_generator(regional_profile):
    return ChunkGenerator(regional_profile)


@pytest.fixture(scope="session")
def world_generator(world_profile):
    return ChunkGenerator(world_profile)


@pytest.fixture(scope="session")
def fields_generator(fields_profile):
    return ChunkGenerator(fields_profile)


@pytest.fixture(scope="session")
def megacity_generator(megacity_profile):
    return ChunkGenerator(megacity_profile)
