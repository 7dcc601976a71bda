"""Contains the class that learns adjacency rules from a sample and runs the WFC algorithm."""

from __future__ import annotations

import logging
import random
from typing import TYPE_CHECKING

import numpy as np

import constants
from logging_config import get_logger, log_generation
from model.adjacency_rules import AdjacencyRules
from model.errors import ContradictionError, RulesNotLearnedError
from model.tilemap import Tilemap
from model.wfc import WFC

if TYPE_CHECKING:
    from model.grid_state import GridState
    from model.tilemap import SampleRegion, TileSink, TileSource


logger = get_logger(__name__)


class WFCManager:
    """Entry point for learning adjacency rules and generating tilemaps from them.

    The rules are learned once by learn() and then reused by any number of generate() calls. Every generation run gets a
    fresh grid state and its own random generator, so runs are independent of each other and a run with a given seed is
    reproducible.

    Attributes:
        rules: The adjacency rules learned by the last learn() call (None before).
        last_seed: The seed used by the last generation run (None before).
        last_grid_state: The grid state of the last generation run, also set if the run ended with a contradiction.
        last_run: The WFC run object of the last generation run, holding its step counts.
    """

    rules: AdjacencyRules | None
    last_seed: int | None
    last_grid_state: GridState | None
    last_run: WFC | None

    # The default sink receiving the collapsed cells of each run (may be None).
    _sink: TileSink | None

    def __init__(self, sink: TileSink | None = None) -> None:
        """Initializes the WFC manager.

        Args:
            sink: The default sink receiving the collapsed cells of each run via set_tile(x, y, tile). Defaults to None.
        """
        self._sink = sink
        self.rules = None
        self.last_seed = None
        self.last_grid_state = None
        self.last_run = None

    def learn(
        self,
        source: TileSource,
        region: SampleRegion | None = None,
        clear_sample: bool = False,
        ignore_empty: bool = False,
    ) -> AdjacencyRules:
        """Learns the tile catalog, frequencies and adjacency rules from a sample.

        Args:
            source: The tile source containing the sample.
            region: The inclusive bounds of the sample. Defaults to the bounds of the source if it is a Tilemap.
            clear_sample: If True, the sample region is cleared on the source afterwards (the source must provide
                clear_region()). Defaults to False.
            ignore_empty: If True, empty cells are left out of the catalog and the rules. Defaults to False.

        Returns:
            The learned adjacency rules (also stored in 'rules').

        Raises:
            ValueError: If no region is given and the source is not a Tilemap.
            EmptyCatalogError: If the sample contains no tiles.
        """
        if region is None:
            if not isinstance(source, Tilemap):
                raise ValueError("A sample region is required for tile sources other than Tilemap")
            region = source.bounds

        self.rules = AdjacencyRules.from_sample(source, region, ignore_empty=ignore_empty)
        log_generation(logger, "LEARNED", f"region={region} | tiles={self.rules.tiles}", level=logging.INFO)

        if clear_sample:
            source.clear_region(region)  # type: ignore[attr-defined]

        return self.rules

    def generate(
        self, width: int, height: int, seed: int | None = None, sink: TileSink | None = None
    ) -> GridState:
        """Generates a tilemap of the given size from the learned rules.

        Args:
            width: The number of columns of the output.
            height: The number of rows of the output.
            seed: Seed for the random generator. If None, a new seed is drawn and stored in 'last_seed' so the run can
                be reproduced later.
            sink: Receives each collapsed cell. Defaults to the sink passed to the constructor.

        Returns:
            The final grid state with every cell collapsed.

        Raises:
            RulesNotLearnedError: If learn() was not called before.
            InvalidDimensionsError: If width or height is smaller than 1.
            ContradictionError: If the run ended in a cell without any possible tile. Generating again with a different
                seed may succeed.
        """
        if self.rules is None:
            raise RulesNotLearnedError()

        if seed is None:
            seed = random.randint(0, constants.RANDOM_SEED_MAX)
        self.last_seed = seed

        log_generation(logger, "RUN STARTED", f"{width}x{height} | seed={seed}", level=logging.INFO)

        if sink is None:
            sink = self._sink

        self.last_run = WFC(width, height, self.rules, np.random.default_rng(seed), sink)
        try:
            self.last_grid_state = self.last_run.run()
        except ContradictionError as e:
            self.last_grid_state = e.grid_state
            logger.warning(f"Generation of a {width}x{height} tilemap with seed {seed} failed: {e}")
            raise

        log_generation(
            logger,
            "RUN SUCCEEDED",
            f"{width}x{height} | seed={seed} | collapsed={self.last_run.collapsed_cells}",
            level=logging.INFO,
        )
        return self.last_grid_state

    def generate_tilemap(self, width: int, height: int, seed: int | None = None) -> Tilemap:
        """Generates a tilemap of the given size and returns it as a new Tilemap with its origin at (0, 0)."""
        tilemap = Tilemap(width, height)
        self.generate(width, height, seed, sink=tilemap)
        return tilemap
