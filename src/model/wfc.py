"""Implements the core WFC algorithm: cell scheduling, weighted tile choice and constraint propagation."""

from __future__ import annotations

from typing import Collection, TYPE_CHECKING

import numpy as np

from enums import CellStatus, Direction
from logging_config import get_logger, log_generation
from model.errors import ContradictionError, EmptyDomainError
from model.grid_state import GridState

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from model.adjacency_rules import AdjacencyRules
    from model.tilemap import TileSink


logger = get_logger(__name__)


def choose_next_cell(grid_state: GridState, rng: np.random.Generator) -> tuple[int, int] | None:
    """Picks the uncollapsed cell with the lowest positive entropy.

    All cells sharing the lowest entropy are collected row by row and one of them is drawn uniformly at random.

    Args:
        grid_state: The current grid state.
        rng: The random generator shared by the whole generation run.

    Returns:
        The (x, y) coordinates of the chosen cell, or None if no uncollapsed cell is left.
    """
    entropies = grid_state.get_entropy_array()
    eligible = (grid_state.get_status_array() == CellStatus.UNCOLLAPSED.value) & (entropies > 0.0)
    if not eligible.any():
        return None

    min_entropy = entropies[eligible].min()
    rows, cols = np.nonzero(eligible & (entropies == min_entropy))

    choice = 0
    if len(rows) > 1:
        # Break ties randomly.
        choice = int(rng.integers(len(rows)))
    return int(cols[choice]), int(rows[choice])


def choose_weighted_tile_index(
    domain_indices: NDArray[np.int_], frequency_hints: NDArray[np.int_], rng: np.random.Generator
) -> int:
    """Randomly picks a catalog index from a domain, weighed by tile frequency.

    The cumulative probabilities of the domain tiles are accumulated in the given (catalog) order and compared with a
    random number u in [0, 1). The first tile whose cumulative probability is >= u gets picked. If rounding leaves u
    above the last cumulative probability, the last tile is picked.

    Raises:
        EmptyDomainError: If the domain is empty.
    """
    if len(domain_indices) == 0:
        raise EmptyDomainError()

    weights = np.asarray(frequency_hints, dtype=np.double)[domain_indices]
    cumulative_probabilities = np.cumsum(weights / weights.sum())
    select = rng.random()

    position = int(np.searchsorted(cumulative_probabilities, select, side="left"))
    return int(domain_indices[min(position, len(domain_indices) - 1)])


def choose_weighted_tile(domain: Collection[int], rules: AdjacencyRules, rng: np.random.Generator) -> int:
    """Randomly picks a tile from a set of tiles, weighed by tile frequency.

    The tiles are enumerated in catalog order, so the result only depends on the domain content and the state of the
    random generator, not on the iteration order of the given collection.

    Args:
        domain: The tiles to choose from.
        rules: The learned adjacency rules providing catalog order and frequencies.
        rng: The random generator shared by the whole generation run.

    Returns:
        The chosen tile.

    Raises:
        EmptyDomainError: If the domain is empty.
    """
    domain_indices = np.array(sorted(rules.get_tile_index(tile) for tile in domain), dtype=np.int_)
    return rules.get_tile(choose_weighted_tile_index(domain_indices, rules.frequency_hints, rng))


class WFC:
    """Runs the simple tiled WFC algorithm for one output grid.

    Each step picks the cell with the lowest entropy, collapses it to a tile chosen by frequency and propagates the new
    constraint to the neighboring cells. The propagation cascades until no domain changes anymore. Cells that are left
    with a single tile during propagation count as collapsed as well. Every collapsed cell is handed to the output sink
    exactly once, in the order the cells collapse. The algorithm does not backtrack: a cell without any possible tile
    ends the run with a ContradictionError.

    Attributes:
        width: The number of columns of the output grid.
        height: The number of rows of the output grid.
        rules: The learned adjacency rules.
        collapsed_cells: The number of cells collapsed so far (chosen directly or by propagation).
        observations: The number of cells collapsed by a direct (random) choice.
        propagation_steps: The number of work items processed by the propagation so far.
    """

    width: int
    height: int
    rules: AdjacencyRules
    collapsed_cells: int
    observations: int
    propagation_steps: int

    # The random generator used for tie breaking and tile choice. A single instance for the whole run keeps the result
    # reproducible for a fixed seed.
    _rng: np.random.Generator
    # Receives every collapsed cell (may be None).
    _sink: TileSink | None
    # The grid state of the current run (None before run() was called).
    _grid_state: GridState | None
    # LIFO stack of cells whose domains have to be checked against an updated neighbor.
    _propagation_stack: list[_PropagationItem]

    def __init__(
        self, width: int, height: int, rules: AdjacencyRules, rng: np.random.Generator, sink: TileSink | None = None
    ) -> None:
        """Initializes the WFC run.

        Args:
            width: The number of columns of the output grid.
            height: The number of rows of the output grid.
            rules: The learned adjacency rules.
            rng: The random generator shared by the whole generation run.
            sink: Receives each collapsed cell via set_tile(x, y, tile). Defaults to None.
        """
        self.width = width
        self.height = height
        self.rules = rules
        self._rng = rng
        self._sink = sink
        self._grid_state = None
        self._propagation_stack = []
        self.collapsed_cells = 0
        self.observations = 0
        self.propagation_steps = 0

    @property
    def grid_state(self) -> GridState | None:
        """The grid state of the current or last run."""
        return self._grid_state

    def run(self) -> GridState:
        """Generates the output grid.

        Returns:
            The final grid state with every cell collapsed.

        Raises:
            InvalidDimensionsError: If width or height is smaller than 1.
            EmptyCatalogError: If the catalog contains no tiles.
            ContradictionError: If propagation removed every tile from a cell.
        """
        self._grid_state = GridState(self.width, self.height, self.rules)
        self.collapsed_cells = 0
        self.observations = 0
        self.propagation_steps = 0

        # With a single-tile catalog all cells are collapsed from the start.
        for y in range(self.height):
            for x in range(self.width):
                if self._grid_state.get_status(x, y) == CellStatus.COLLAPSED:
                    self._emit(x, y)

        while True:
            next_coords = choose_next_cell(self._grid_state, self._rng)
            if next_coords is None:
                break

            tile_index = choose_weighted_tile_index(
                self._grid_state.get_domain_indices(*next_coords), self.rules.frequency_hints, self._rng
            )
            self.observations += 1
            self._propagate(next_coords, tile_index)

        log_generation(
            logger,
            "RUN FINISHED",
            f"{self.width}x{self.height} | observations={self.observations} | "
            f"propagation_steps={self.propagation_steps}",
        )
        return self._grid_state

    def _propagate(self, origin: tuple[int, int], tile_index: int) -> None:
        """Fixes the origin cell to a tile and propagates the constraint through the grid.

        Every work item re-checks one cell against one already updated neighbor (the source) and carries the direction
        from the cell back to the source. A tile stays in the cell only if at least one tile still possible at the
        source was observed next to it in that direction. Whenever a cell loses tiles, all of its neighbors are pushed
        onto the stack again.

        Args:
            origin: The (x, y) coordinates of the cell to fix.
            tile_index: The catalog index of the tile to fix the cell to.

        Raises:
            ContradictionError: If a cell is left without any possible tile.
        """
        assert self._grid_state is not None
        grid_state = self._grid_state
        adjacency_rules = self.rules.adjacency_array

        grid_state.fix_cell(origin[0], origin[1], tile_index)
        self._emit(*origin)

        self._propagation_stack = [
            _PropagationItem((neighbor_x, neighbor_y), direction.reverse())
            for neighbor_x, neighbor_y, direction in grid_state.neighbors(*origin)
        ]

        while self._propagation_stack:
            item = self._propagation_stack.pop()
            self.propagation_steps += 1
            x, y = item._coords
            direction = item._back_direction
            dx, dy = direction.to_vector()
            source_x, source_y = x + dx, y + dy

            source_domain = grid_state.get_domain_mask(source_x, source_y)
            # supported[t] is True if some tile still possible at the source may lie next to t in this direction.
            supported = adjacency_rules[:, source_domain, direction.value].any(axis=1)

            if grid_state.restrict_domain(x, y, supported) == 0:
                continue

            status = grid_state.get_status(x, y)
            if status == CellStatus.CONTRADICTED:
                log_generation(
                    logger, "CONTRADICTION", f"cell=({x}, {y}) | propagation_steps={self.propagation_steps}"
                )
                raise ContradictionError(x, y, grid_state)

            for neighbor_x, neighbor_y, neighbor_direction in grid_state.neighbors(x, y):
                self._propagation_stack.append(_PropagationItem((neighbor_x, neighbor_y), neighbor_direction.reverse()))

            if status == CellStatus.COLLAPSED:
                self._emit(x, y)

    def _emit(self, x: int, y: int) -> None:
        """Hands a newly collapsed cell to the output sink."""
        assert self._grid_state is not None
        self.collapsed_cells += 1
        if self._sink is not None:
            tile = self._grid_state.get_tile(x, y)
            assert tile is not None
            self._sink.set_tile(x, y, tile)


def generate(
    width: int, height: int, rules: AdjacencyRules, rng: np.random.Generator, sink: TileSink | None = None
) -> GridState:
    """Generates an output grid of the given size (see WFC.run())."""
    return WFC(width, height, rules, rng, sink).run()


class _PropagationItem:
    """Container tracking a cell that has to be checked against an updated neighbor."""

    # The coords of the cell whose domain is checked.
    _coords: tuple[int, int]
    # The direction from the checked cell back to the already updated neighbor cell.
    _back_direction: Direction

    def __init__(self, coords: tuple[int, int], back_direction: Direction) -> None:
        """Creates a new propagation item instance and initializes it."""
        self._coords = coords
        self._back_direction = back_direction
