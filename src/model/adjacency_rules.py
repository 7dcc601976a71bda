"""Learns and stores the tile catalog, tile frequencies and adjacency rules of a sample."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from constants import EMPTY_TILE
from enums import Direction
from logging_config import get_logger
from model.errors import EmptyCatalogError

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from numpy.typing import NDArray

    from model.tilemap import SampleRegion, TileSource


logger = get_logger(__name__)


class AdjacencyRules:
    """The learned model of a sample: tile catalog, tile frequencies and adjacency rules.

    Every distinct tile of the sample gets a catalog index in the order it was first encountered while scanning the
    sample row by row. All arrays are indexed by catalog index, and the catalog order is the fixed enumeration order
    used whenever the WFC algorithm iterates over a set of tiles. Instances are read-only once created and can be shared
    by any number of generation runs.

    Attributes:
        tiles: The tile indices of the catalog, ordered by catalog index.
    """

    tiles: tuple[int, ...]

    # Maps each tile index to its catalog index.
    _catalog_indices: dict[int, int]
    # The number of sample cells containing each tile (used as probability weights).
    _frequency_hints: NDArray[np.int_]
    # The 3D boolean array defining compatibility: [t1, t2, direction] is True exactly if tile t2 was observed directly
    # next to tile t1 in the specified direction.
    _adjacency_rules: NDArray[np.bool_]

    def __init__(
        self, tiles: Sequence[int], frequency_hints: NDArray[np.int_], adjacency_rules: NDArray[np.bool_]
    ) -> None:
        """Stores the catalog, frequencies and rules and makes them read-only.

        Args:
            tiles: The tile indices of the catalog, ordered by catalog index.
            frequency_hints: The frequency of each catalog tile, indexed by catalog index.
            adjacency_rules: Boolean array of shape (tile count, tile count, 4) indexed by [tile, neighbor, direction].

        Raises:
            EmptyCatalogError: If the catalog contains no tiles.
            ValueError: If the array shapes don't match the catalog or a frequency is not positive.
        """
        if len(tiles) == 0:
            raise EmptyCatalogError()

        tile_count = len(tiles)
        if len(set(tiles)) != tile_count:
            raise ValueError("The tile catalog must not contain duplicates")
        if np.shape(frequency_hints) != (tile_count,):
            raise ValueError(f"Expected {tile_count} frequencies, got an array of shape {np.shape(frequency_hints)}")
        if np.shape(adjacency_rules) != (tile_count, tile_count, len(Direction)):
            raise ValueError(
                f"Adjacency rules have shape {np.shape(adjacency_rules)}, expected "
                f"{(tile_count, tile_count, len(Direction))}"
            )
        if np.any(np.asarray(frequency_hints) < 1):
            raise ValueError("Every tile frequency must be at least 1")

        self.tiles = tuple(int(tile) for tile in tiles)
        self._catalog_indices = {tile: index for index, tile in enumerate(self.tiles)}

        self._frequency_hints = np.array(frequency_hints, dtype=np.int_)
        self._frequency_hints.flags.writeable = False
        self._adjacency_rules = np.array(adjacency_rules, dtype=bool)
        self._adjacency_rules.flags.writeable = False

    @classmethod
    def from_sample(cls, source: TileSource, region: SampleRegion, ignore_empty: bool = False) -> AdjacencyRules:
        """Learns the catalog, frequencies and adjacency rules from a sample region.

        Every cell of the region increments the frequency of its tile. For each direction whose neighbor cell also lies
        inside the region, the neighbor's tile is recorded as an allowed neighbor in that direction. There is no wrap
        around, so border cells record fewer neighbors. Each direction is learned on its own, no symmetry is inferred.

        Args:
            source: The tile source the sample is read from.
            region: The inclusive bounds of the sample.
            ignore_empty: If True, empty cells (EMPTY_TILE) are neither counted nor recorded as neighbors. Defaults to
                False, in which case the empty tile is treated like any other tile.

        Returns:
            The learned adjacency rules.

        Raises:
            EmptyCatalogError: If the sample contains no (non-ignored) tiles.
        """
        # The sample array is indexed by [row, col], so row = y - y_min and col = x - x_min.
        sample_array = np.array(
            [
                [source.get_tile(x, y) for x in range(region.x_min, region.x_max + 1)]
                for y in range(region.y_min, region.y_max + 1)
            ],
            dtype=np.int_,
        )

        tiles: list[int] = []
        catalog_indices: dict[int, int] = {}
        frequencies: list[int] = []

        for row in range(sample_array.shape[0]):
            for col in range(sample_array.shape[1]):
                tile = int(sample_array[row, col])
                if ignore_empty and tile == EMPTY_TILE:
                    continue
                if tile not in catalog_indices:
                    catalog_indices[tile] = len(tiles)
                    tiles.append(tile)
                    frequencies.append(1)
                else:
                    frequencies[catalog_indices[tile]] += 1

        if not tiles:
            raise EmptyCatalogError(f"The sample region {region} contains no tiles")

        adjacency_rules = np.full((len(tiles), len(tiles), len(Direction)), False, dtype=bool)

        for row in range(sample_array.shape[0]):
            for col in range(sample_array.shape[1]):
                tile = int(sample_array[row, col])
                if tile not in catalog_indices:
                    continue
                for direction in Direction:
                    dx, dy = direction.to_vector()
                    neighbor_row = row + dy
                    neighbor_col = col + dx
                    if not (0 <= neighbor_row < sample_array.shape[0] and 0 <= neighbor_col < sample_array.shape[1]):
                        continue

                    neighbor_tile = int(sample_array[neighbor_row, neighbor_col])
                    if neighbor_tile not in catalog_indices:
                        continue
                    adjacency_rules[catalog_indices[tile], catalog_indices[neighbor_tile], direction.value] = True

        rules = cls(tiles, np.array(frequencies, dtype=np.int_), adjacency_rules)
        logger.info(
            f"Learned {rules.tile_count} tiles and {rules.rule_count} adjacency rules "
            f"from a {region.width}x{region.height} sample"
        )
        return rules

    @classmethod
    def from_tables(
        cls, frequencies: Mapping[int, int], rules: Mapping[int, Mapping[Direction, set[int]]]
    ) -> AdjacencyRules:
        """Creates adjacency rules from explicit frequency and rule tables.

        Args:
            frequencies: Maps each tile index to its frequency. The iteration order defines the catalog order.
            rules: Maps a tile index and a direction to the set of tile indices allowed next to it in that direction.
                Missing tiles or directions allow no neighbors.

        Raises:
            EmptyCatalogError: If the frequency table is empty.
            ValueError: If a tile used in the rule table has no frequency or a frequency is not positive.
        """
        if not frequencies:
            raise EmptyCatalogError()

        tiles = list(frequencies.keys())
        catalog_indices = {tile: index for index, tile in enumerate(tiles)}
        adjacency_rules = np.full((len(tiles), len(tiles), len(Direction)), False, dtype=bool)

        for tile, neighbors_by_direction in rules.items():
            if tile not in catalog_indices:
                raise ValueError(f"Tile {tile} has adjacency rules but no frequency")
            for direction, neighbor_tiles in neighbors_by_direction.items():
                for neighbor_tile in neighbor_tiles:
                    if neighbor_tile not in catalog_indices:
                        raise ValueError(f"Tile {neighbor_tile} is used as a neighbor but has no frequency")
                    adjacency_rules[catalog_indices[tile], catalog_indices[neighbor_tile], direction.value] = True

        return cls(tiles, np.array([frequencies[tile] for tile in tiles], dtype=np.int_), adjacency_rules)

    @property
    def tile_count(self) -> int:
        """The number of distinct tiles in the catalog."""
        return len(self.tiles)

    @property
    def rule_count(self) -> int:
        """The number of (tile, neighbor, direction) combinations that are allowed."""
        return int(self._adjacency_rules.sum())

    @property
    def frequency_hints(self) -> NDArray[np.int_]:
        """Read-only array of tile frequencies indexed by catalog index."""
        return self._frequency_hints

    @property
    def adjacency_array(self) -> NDArray[np.bool_]:
        """Read-only boolean array indexed by [tile, neighbor, direction] (catalog indices)."""
        return self._adjacency_rules

    def contains(self, tile: int) -> bool:
        """Returns True if the tile is part of the catalog."""
        return tile in self._catalog_indices

    def get_tile_index(self, tile: int) -> int:
        """Returns the catalog index of a tile.

        Raises:
            KeyError: If the tile is not part of the catalog.
        """
        return self._catalog_indices[tile]

    def get_tile(self, tile_index: int) -> int:
        """Returns the tile at the given catalog index."""
        return self.tiles[tile_index]

    def get_frequency(self, tile: int) -> int:
        """Returns the number of times the tile occurred in the sample (0 for unknown tiles)."""
        if tile not in self._catalog_indices:
            return 0
        return int(self._frequency_hints[self._catalog_indices[tile]])

    def get_frequencies(self) -> dict[int, int]:
        """Returns the frequency table as a dict mapping tile index to count, in catalog order."""
        return {tile: int(self._frequency_hints[index]) for index, tile in enumerate(self.tiles)}

    def get_compatible_tiles(self, tile: int, direction: Direction) -> set[int]:
        """Returns all tiles observed directly next to the given tile in the given direction.

        Args:
            tile: The tile to check compatibility for.
            direction: The direction, seen from the given tile.

        Returns:
            The set of compatible tile indices (empty for unknown tiles).
        """
        if tile not in self._catalog_indices:
            return set()
        compatible_indices = np.flatnonzero(self._adjacency_rules[self._catalog_indices[tile], :, direction.value])
        return {self.tiles[index] for index in compatible_indices}


def learn_adjacency_rules(source: TileSource, region: SampleRegion, ignore_empty: bool = False) -> AdjacencyRules:
    """Learns adjacency rules from a sample region (see AdjacencyRules.from_sample())."""
    return AdjacencyRules.from_sample(source, region, ignore_empty)
