"""Contains the tilemap used as sample source and output sink of the WFC algorithm."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Protocol, TYPE_CHECKING

import numpy as np

from constants import EMPTY_TILE
from model.errors import InvalidDimensionsError

if TYPE_CHECKING:
    from numpy.typing import NDArray


class TileSource(Protocol):
    """Read access to the tiles of a sample tilemap."""

    def get_tile(self, x: int, y: int) -> int: ...


class TileSink(Protocol):
    """Write access used to hand each collapsed output cell to its consumer."""

    def set_tile(self, x: int, y: int, tile: int) -> None: ...


@dataclass(frozen=True)
class SampleRegion:
    """Rectangular tilemap region with inclusive bounds."""

    x_min: int
    y_min: int
    x_max: int
    y_max: int

    def __post_init__(self) -> None:
        if self.x_min > self.x_max or self.y_min > self.y_max:
            raise InvalidDimensionsError(
                f"Invalid region bounds ({self.x_min}, {self.y_min})..({self.x_max}, {self.y_max})"
            )

    @property
    def width(self) -> int:
        return self.x_max - self.x_min + 1

    @property
    def height(self) -> int:
        return self.y_max - self.y_min + 1

    def contains(self, x: int, y: int) -> bool:
        """Returns True if (x, y) lies inside the region (bounds included)."""
        return self.x_min <= x <= self.x_max and self.y_min <= y <= self.y_max

    def coords(self) -> Iterator[tuple[int, int]]:
        """Yields all (x, y) coordinates of the region row by row."""
        for y in range(self.y_min, self.y_max + 1):
            for x in range(self.x_min, self.x_max + 1):
                yield x, y


class Tilemap:
    """A rectangular grid of tile indices addressed in world coordinates.

    The tilemap serves both as the source the adjacency rules are learned from and as the sink that receives the
    generated tiles. Its cells are stored in a 2D array indexed by [row, col], where the world coordinates (x, y) map to
    row = y - origin_y and col = x - origin_x. This allows sample areas with negative coordinates, like a sample painted
    somewhere in an editor scene.

    Attributes:
        origin: The world coordinates (x, y) of the top-left cell.
    """

    origin: tuple[int, int]

    # The 2D array of tile indices, EMPTY_TILE for empty cells.
    _tiles: NDArray[np.int_]

    def __init__(self, width: int, height: int, origin: tuple[int, int] = (0, 0), fill: int = EMPTY_TILE) -> None:
        """Creates a tilemap of the given size filled with a single tile.

        Args:
            width: The number of columns.
            height: The number of rows.
            origin: The world coordinates (x, y) of the top-left cell. Defaults to (0, 0).
            fill: The tile index every cell starts with. Defaults to EMPTY_TILE.
        """
        if width < 1 or height < 1:
            raise InvalidDimensionsError(f"Tilemap size must be positive, got {width}x{height}")
        self.origin = origin
        self._tiles = np.full((height, width), fill, dtype=np.int_)

    @classmethod
    def from_array(cls, tile_array: NDArray[np.int_], origin: tuple[int, int] = (0, 0)) -> Tilemap:
        """Creates a tilemap from a 2D array of tile indices indexed by [row, col]."""
        tile_array = np.atleast_2d(np.asarray(tile_array, dtype=np.int_))
        tilemap = cls(tile_array.shape[1], tile_array.shape[0], origin)
        tilemap._tiles[:] = tile_array
        return tilemap

    @classmethod
    def from_csv(cls, file_path: str, origin: tuple[int, int] = (0, 0)) -> Tilemap:
        """Loads a tilemap from a .csv file containing one row of comma separated tile indices per line."""
        return cls.from_array(np.genfromtxt(file_path, delimiter=",", dtype=np.int_, ndmin=2), origin)

    @property
    def width(self) -> int:
        return int(self._tiles.shape[1])

    @property
    def height(self) -> int:
        return int(self._tiles.shape[0])

    @property
    def bounds(self) -> SampleRegion:
        """The region covered by the tilemap in world coordinates."""
        return SampleRegion(
            self.origin[0], self.origin[1], self.origin[0] + self.width - 1, self.origin[1] + self.height - 1
        )

    def get_tile(self, x: int, y: int) -> int:
        """Returns the tile index at (x, y), or EMPTY_TILE if (x, y) lies outside the tilemap."""
        if not self.bounds.contains(x, y):
            return EMPTY_TILE
        return int(self._tiles[y - self.origin[1], x - self.origin[0]])

    def set_tile(self, x: int, y: int, tile: int) -> None:
        """Sets the tile index at (x, y).

        Raises:
            IndexError: If (x, y) lies outside the tilemap.
        """
        if not self.bounds.contains(x, y):
            raise IndexError(f"({x}, {y}) lies outside the tilemap bounds {self.bounds}")
        self._tiles[y - self.origin[1], x - self.origin[0]] = tile

    def clear_region(self, region: SampleRegion | None = None) -> None:
        """Resets all cells inside the region (or the whole tilemap if None) to EMPTY_TILE."""
        if region is None:
            self._tiles[:] = EMPTY_TILE
            return
        for x, y in region.coords():
            if self.bounds.contains(x, y):
                self._tiles[y - self.origin[1], x - self.origin[0]] = EMPTY_TILE

    def to_array(self) -> NDArray[np.int_]:
        """Returns a copy of the tile indices as a 2D array indexed by [row, col]."""
        return self._tiles.copy()

    def save_csv(self, file_path: str) -> None:
        """Saves the tile indices to a .csv file (one row per line)."""
        np.savetxt(file_path, self._tiles, fmt="%i", delimiter=",")
