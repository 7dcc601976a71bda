"""Contains the per-run state of the output grid (domains, entropies, cell states)."""

from __future__ import annotations

from typing import Iterator, TYPE_CHECKING

import numpy as np

from constants import EMPTY_TILE
from enums import CellStatus, Direction
from model.errors import EmptyCatalogError, InvalidDimensionsError

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from model.adjacency_rules import AdjacencyRules


def shannon_entropy(weights: NDArray[np.int_]) -> float:
    """Calculates the Shannon entropy (base 2) of the distribution given by positive weights.

    Returns exactly 0.0 for zero or one weight, so a collapsed cell never carries rounding noise.
    """
    if len(weights) <= 1:
        return 0.0
    total = float(np.sum(weights))
    probabilities = np.asarray(weights, dtype=np.double) / total
    return float(-(probabilities * np.log2(probabilities)).sum())


class GridState:
    """The state of every output cell during one generation run.

    Each cell owns a domain (the tiles that are still possible there), the Shannon entropy of that domain weighted by
    the tile frequencies, and an explicit status. Domains only ever shrink. The entropy is cached and recomputed
    whenever a domain changes. The status is kept separately from the entropy, because an entropy of 0 is shared by
    collapsed and contradicted cells.

    Attributes:
        width: The number of columns of the output grid.
        height: The number of rows of the output grid.
        rules: The learned adjacency rules the grid was initialized from.
    """

    width: int
    height: int
    rules: AdjacencyRules

    # Boolean array indexed by [y, x, catalog index], True for each tile still possible in a cell.
    _coefficients: NDArray[np.bool_]
    # Number of tiles still possible in each cell, indexed by [y, x].
    _domain_sizes: NDArray[np.int_]
    # Cached Shannon entropy of each cell, indexed by [y, x].
    _entropies: NDArray[np.double]
    # The CellStatus value of each cell, indexed by [y, x].
    _statuses: NDArray[np.int_]

    def __init__(self, width: int, height: int, rules: AdjacencyRules) -> None:
        """Initializes every cell with the full tile catalog as its domain.

        The entropy is calculated once for the full catalog and used for all cells, since all domains are identical at
        the start. With a single-tile catalog every cell starts collapsed.

        Raises:
            InvalidDimensionsError: If width or height is smaller than 1.
            EmptyCatalogError: If the catalog contains no tiles.
        """
        if width < 1 or height < 1:
            raise InvalidDimensionsError(f"Output size must be positive, got {width}x{height}")
        if rules.tile_count == 0:
            raise EmptyCatalogError()

        self.width = width
        self.height = height
        self.rules = rules

        self._coefficients = np.full((height, width, rules.tile_count), True, dtype=bool)
        self._domain_sizes = np.full((height, width), rules.tile_count, dtype=np.int_)
        self._entropies = np.full((height, width), shannon_entropy(rules.frequency_hints), dtype=np.double)

        initial_status = CellStatus.COLLAPSED if rules.tile_count == 1 else CellStatus.UNCOLLAPSED
        self._statuses = np.full((height, width), initial_status.value, dtype=np.int_)

    def in_bounds(self, x: int, y: int) -> bool:
        """Returns True if (x, y) is a cell of the grid."""
        return 0 <= x < self.width and 0 <= y < self.height

    def neighbors(self, x: int, y: int) -> Iterator[tuple[int, int, Direction]]:
        """Yields (neighbor_x, neighbor_y, direction) for each in-bounds neighbor (direction points to it)."""
        for direction in Direction:
            dx, dy = direction.to_vector()
            if self.in_bounds(x + dx, y + dy):
                yield x + dx, y + dy, direction

    def get_domain(self, x: int, y: int) -> set[int]:
        """Returns the set of tiles still possible at (x, y)."""
        return {self.rules.get_tile(index) for index in self.get_domain_indices(x, y)}

    def get_domain_indices(self, x: int, y: int) -> NDArray[np.int_]:
        """Returns the catalog indices still possible at (x, y) in ascending (catalog) order."""
        return np.flatnonzero(self._coefficients[y, x])

    def get_domain_mask(self, x: int, y: int) -> NDArray[np.bool_]:
        """Returns a copy of the boolean coefficient vector of (x, y)."""
        return self._coefficients[y, x].copy()

    def get_domain_size(self, x: int, y: int) -> int:
        return int(self._domain_sizes[y, x])

    def get_entropy(self, x: int, y: int) -> float:
        return float(self._entropies[y, x])

    def get_status(self, x: int, y: int) -> CellStatus:
        return CellStatus(int(self._statuses[y, x]))

    def get_tile(self, x: int, y: int) -> int | None:
        """Returns the tile of a collapsed cell, or None if the cell is not collapsed."""
        if self.get_status(x, y) != CellStatus.COLLAPSED:
            return None
        return self.rules.get_tile(int(self.get_domain_indices(x, y)[0]))

    def get_entropy_array(self) -> NDArray[np.double]:
        """Returns a copy of all cached entropies, indexed by [y, x]."""
        return self._entropies.copy()

    def get_status_array(self) -> NDArray[np.int_]:
        """Returns a copy of all CellStatus values, indexed by [y, x]."""
        return self._statuses.copy()

    def get_domain_size_array(self) -> NDArray[np.int_]:
        """Returns a copy of all domain sizes, indexed by [y, x]."""
        return self._domain_sizes.copy()

    def is_complete(self) -> bool:
        """Returns True if every cell is collapsed."""
        return bool(np.all(self._statuses == CellStatus.COLLAPSED.value))

    def contradicted_cells(self) -> list[tuple[int, int]]:
        """Returns the (x, y) coordinates of all contradicted cells."""
        rows, cols = np.nonzero(self._statuses == CellStatus.CONTRADICTED.value)
        return [(int(col), int(row)) for row, col in zip(rows, cols)]

    def to_tile_array(self, undetermined: int = EMPTY_TILE) -> NDArray[np.int_]:
        """Converts the grid into a 2D array of tiles indexed by [y, x].

        Args:
            undetermined: The value used for cells that are not collapsed. Defaults to EMPTY_TILE.
        """
        tile_array = np.full((self.height, self.width), undetermined, dtype=np.int_)
        for y in range(self.height):
            for x in range(self.width):
                tile = self.get_tile(x, y)
                if tile is not None:
                    tile_array[y, x] = tile
        return tile_array

    def fix_cell(self, x: int, y: int, tile_index: int) -> None:
        """Collapses (x, y) to the tile with the given catalog index."""
        self._coefficients[y, x] = False
        self._coefficients[y, x, tile_index] = True
        self._update_cell(x, y)

    def restrict_domain(self, x: int, y: int, allowed: NDArray[np.bool_]) -> int:
        """Removes every tile from the domain of (x, y) that is not allowed.

        Args:
            x: The x coordinate of the cell.
            y: The y coordinate of the cell.
            allowed: Boolean vector over the catalog, True for each tile that may stay.

        Returns:
            The number of tiles that were removed.
        """
        remaining = self._coefficients[y, x] & allowed
        removed = int(self._domain_sizes[y, x]) - int(remaining.sum())
        if removed > 0:
            self._coefficients[y, x] = remaining
            self._update_cell(x, y)
        return removed

    def _update_cell(self, x: int, y: int) -> None:
        """Recomputes domain size, entropy and status of a changed cell."""
        domain_indices = self.get_domain_indices(x, y)
        self._domain_sizes[y, x] = len(domain_indices)
        self._entropies[y, x] = shannon_entropy(self.rules.frequency_hints[domain_indices])

        if len(domain_indices) == 0:
            self._statuses[y, x] = CellStatus.CONTRADICTED.value
        elif len(domain_indices) == 1:
            self._statuses[y, x] = CellStatus.COLLAPSED.value
        else:
            self._statuses[y, x] = CellStatus.UNCOLLAPSED.value

    def __repr__(self) -> str:
        collapsed = int(np.sum(self._statuses == CellStatus.COLLAPSED.value))
        return f"GridState({self.width}x{self.height}, {collapsed}/{self.width * self.height} collapsed)"
