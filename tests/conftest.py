"""Shared test fixtures for the tilemap generator."""

import numpy as np
import pytest

from enums import Direction
from model.adjacency_rules import AdjacencyRules
from model.tilemap import Tilemap


CHECKERBOARD = [
    [0, 1, 0, 1],
    [1, 0, 1, 0],
    [0, 1, 0, 1],
    [1, 0, 1, 0],
]

CHECKERBOARD_2X2 = [
    [0, 1],
    [1, 0],
]

ISLAND = [
    [0, 0, 0, 0, 0, 0],
    [0, 1, 1, 1, 1, 0],
    [0, 1, 2, 2, 1, 0],
    [0, 1, 2, 2, 1, 0],
    [0, 1, 1, 1, 1, 0],
    [0, 0, 0, 0, 0, 0],
]


class RecordingSink:
    """Output sink that records every set_tile() call in order."""

    def __init__(self):
        self.calls = []

    def set_tile(self, x, y, tile):
        self.calls.append((x, y, tile))

    @property
    def coords(self):
        return [(x, y) for x, y, _ in self.calls]

    def to_array(self, width, height):
        array = np.full((height, width), -99, dtype=np.int_)
        for x, y, tile in self.calls:
            array[y, x] = tile
        return array


def assert_adjacency_respected(tile_array, rules):
    """Asserts that every pair of adjacent cells was observed next to each other in the sample."""
    height, width = tile_array.shape
    for y in range(height):
        for x in range(width):
            tile = int(tile_array[y, x])
            for direction in Direction:
                dx, dy = direction.to_vector()
                if 0 <= x + dx < width and 0 <= y + dy < height:
                    neighbor = int(tile_array[y + dy, x + dx])
                    assert neighbor in rules.get_compatible_tiles(tile, direction), (
                        f"Tile {neighbor} at ({x + dx}, {y + dy}) is not allowed {direction.name} of tile {tile} "
                        f"at ({x}, {y})"
                    )


@pytest.fixture
def checkerboard_sample() -> Tilemap:
    """A 4x4 sample with two tiles alternating in both directions."""
    return Tilemap.from_array(np.array(CHECKERBOARD))


@pytest.fixture
def checkerboard_rules(checkerboard_sample) -> AdjacencyRules:
    return AdjacencyRules.from_sample(checkerboard_sample, checkerboard_sample.bounds)


@pytest.fixture
def small_checkerboard_rules() -> AdjacencyRules:
    """Rules learned from the smallest checkerboard: 0 at (0, 0) and (1, 1), 1 at (1, 0) and (0, 1)."""
    sample = Tilemap.from_array(np.array(CHECKERBOARD_2X2))
    return AdjacencyRules.from_sample(sample, sample.bounds)


@pytest.fixture
def island_sample() -> Tilemap:
    """A 6x6 sample of water (0) surrounding sand (1) surrounding grass (2)."""
    return Tilemap.from_array(np.array(ISLAND))


@pytest.fixture
def island_rules(island_sample) -> AdjacencyRules:
    return AdjacencyRules.from_sample(island_sample, island_sample.bounds)


@pytest.fixture
def single_tile_rules() -> AdjacencyRules:
    """A catalog with only tile 7, allowed next to itself in every direction."""
    return AdjacencyRules.from_tables({7: 4}, {7: {direction: {7} for direction in Direction}})


@pytest.fixture
def never_touching_rules() -> AdjacencyRules:
    """Two tiles that were never observed next to anything."""
    return AdjacencyRules.from_tables({0: 1, 1: 1}, {})


@pytest.fixture
def recording_sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(1234)
