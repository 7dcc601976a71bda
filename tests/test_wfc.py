"""Tests for the WFC algorithm: scheduling, weighted choice, propagation and full runs."""

import numpy as np
import pytest

from conftest import RecordingSink, assert_adjacency_respected
from enums import CellStatus, Direction
from model.adjacency_rules import AdjacencyRules
from model.errors import ContradictionError, EmptyDomainError, InvalidDimensionsError
from model.grid_state import GridState
from model.wfc import WFC, choose_next_cell, choose_weighted_tile, choose_weighted_tile_index, generate


class FixedRandom:
    """Stand-in for numpy's Generator that returns preset values."""

    def __init__(self, random_value=0.0, integer_value=0):
        self.random_value = random_value
        self.integer_value = integer_value
        self.integer_calls = []

    def random(self):
        return self.random_value

    def integers(self, high):
        self.integer_calls.append(high)
        return self.integer_value


class SnapshotSink(RecordingSink):
    """Sink that snapshots the domain sizes of the running WFC instance on every collapsed cell."""

    def __init__(self):
        super().__init__()
        self.wfc = None
        self.snapshots = []

    def set_tile(self, x, y, tile):
        super().set_tile(x, y, tile)
        self.snapshots.append(self.wfc.grid_state.get_domain_size_array())


class TestChooseNextCell:
    """Test the lowest-entropy scheduler."""

    def test_picks_the_lowest_entropy_cell(self, island_rules):
        grid_state = GridState(3, 3, island_rules)
        grid_state.restrict_domain(2, 1, np.array([True, True, False]))
        rng = FixedRandom()

        assert choose_next_cell(grid_state, rng) == (2, 1)
        assert rng.integer_calls == []

    def test_breaks_ties_randomly_in_row_major_order(self, island_rules):
        """Tied cells should be collected row by row and indexed by the random draw."""
        grid_state = GridState(3, 2, island_rules)
        rng = FixedRandom(integer_value=4)

        assert choose_next_cell(grid_state, rng) == (1, 1)
        assert rng.integer_calls == [6]

    def test_skips_collapsed_cells(self, island_rules):
        grid_state = GridState(2, 1, island_rules)
        grid_state.fix_cell(0, 0, 0)
        assert choose_next_cell(grid_state, FixedRandom()) == (1, 0)

    def test_returns_none_when_everything_is_collapsed(self, island_rules):
        grid_state = GridState(2, 1, island_rules)
        grid_state.fix_cell(0, 0, 0)
        grid_state.fix_cell(1, 0, 2)
        assert choose_next_cell(grid_state, FixedRandom()) is None

    def test_ignores_contradicted_cells(self, island_rules):
        grid_state = GridState(1, 1, island_rules)
        grid_state.restrict_domain(0, 0, np.array([False, False, False]))
        assert choose_next_cell(grid_state, FixedRandom()) is None


class TestWeightedChoice:
    """Test the frequency-weighted tile choice."""

    def test_empty_domain_raises(self):
        with pytest.raises(EmptyDomainError):
            choose_weighted_tile_index(np.array([], dtype=np.int_), np.array([1, 2]), FixedRandom())

    def test_first_tile_whose_cumulative_probability_reaches_u(self):
        """With weights 1:3 the cumulative probabilities are 0.25 and 1.0."""
        frequencies = np.array([1, 3])
        domain = np.array([0, 1])
        assert choose_weighted_tile_index(domain, frequencies, FixedRandom(0.0)) == 0
        assert choose_weighted_tile_index(domain, frequencies, FixedRandom(0.25)) == 0
        assert choose_weighted_tile_index(domain, frequencies, FixedRandom(0.26)) == 1

    def test_falls_back_to_the_last_tile(self):
        """If u lies above the last cumulative probability, the last tile should be picked."""
        assert choose_weighted_tile_index(np.array([0, 2]), np.array([1, 1, 1]), FixedRandom(1.5)) == 2

    def test_only_domain_tiles_are_weighted(self):
        domain = np.array([2])
        assert choose_weighted_tile_index(domain, np.array([100, 100, 1]), FixedRandom(0.99)) == 2

    def test_distribution_follows_frequencies(self, rng):
        """Over many draws, a tile 3 times as frequent should be picked about 3 times as often."""
        frequencies = np.array([1, 3])
        draws = [choose_weighted_tile_index(np.array([0, 1]), frequencies, rng) for _ in range(4000)]
        assert np.mean(draws) == pytest.approx(0.75, abs=0.03)

    def test_choose_weighted_tile_uses_catalog_order(self, island_rules):
        """The result should not depend on the iteration order of the given domain."""
        first = choose_weighted_tile([2, 1, 0], island_rules, FixedRandom(0.5))
        second = choose_weighted_tile({0, 1, 2}, island_rules, FixedRandom(0.5))
        assert first == second == 0

    def test_choose_weighted_tile_empty_domain_raises(self, island_rules):
        with pytest.raises(EmptyDomainError):
            choose_weighted_tile([], island_rules, FixedRandom())


class TestScenarios:
    """Test complete generation runs."""

    def test_checkerboard_output_alternates(self, checkerboard_rules, rng):
        """Learning a checkerboard should reproduce a checkerboard of either phase."""
        grid_state = generate(4, 4, checkerboard_rules, rng)
        tile_array = grid_state.to_tile_array()

        assert grid_state.is_complete()
        for y in range(4):
            for x in range(4):
                assert tile_array[y, x] == (tile_array[0, 0] + x + y) % 2

    def test_small_checkerboard_sample_gives_alternating_output(self, small_checkerboard_rules):
        """Rules learned from a 2x2 checkerboard should force a 4x4 checkerboard for any seed."""
        for direction in Direction:
            assert small_checkerboard_rules.get_compatible_tiles(0, direction) == {1}
            assert small_checkerboard_rules.get_compatible_tiles(1, direction) == {0}

        for seed in range(20):
            tile_array = generate(4, 4, small_checkerboard_rules, np.random.default_rng(seed)).to_tile_array()
            for y in range(4):
                for x in range(4):
                    assert tile_array[y, x] == (tile_array[0, 0] + x + y) % 2, f"seed {seed}, cell ({x}, {y})"

    def test_checkerboard_needs_a_single_observation(self, checkerboard_rules, rng):
        """Propagation should collapse the whole board after the first choice."""
        wfc = WFC(5, 3, checkerboard_rules, rng)
        wfc.run()
        assert wfc.observations == 1
        assert wfc.collapsed_cells == 15

    def test_single_tile_fills_the_output(self, single_tile_rules, recording_sink, rng):
        """A single-tile catalog should fill every cell without any observation."""
        wfc = WFC(3, 2, single_tile_rules, rng, recording_sink)
        grid_state = wfc.run()

        assert np.all(grid_state.to_tile_array() == 7)
        assert wfc.observations == 0
        assert recording_sink.coords == [(0, 0), (1, 0), (2, 0), (0, 1), (1, 1), (2, 1)]

    def test_never_touching_tiles_contradict(self, never_touching_rules, rng):
        """Two cells side by side cannot be filled if no tile may touch another."""
        with pytest.raises(ContradictionError) as exc_info:
            generate(2, 1, never_touching_rules, rng)

        error = exc_info.value
        assert error.grid_state is not None
        assert error.grid_state.get_status(error.x, error.y) == CellStatus.CONTRADICTED
        assert error.coords in [(0, 0), (1, 0)]

    def test_never_touching_tiles_fit_a_single_cell(self, never_touching_rules, rng):
        grid_state = generate(1, 1, never_touching_rules, rng)
        assert grid_state.is_complete()

    def test_result_respects_adjacency(self, island_rules, rng):
        grid_state = generate(12, 9, island_rules, rng)
        assert grid_state.is_complete()
        assert_adjacency_respected(grid_state.to_tile_array(), island_rules)

    def test_learned_sample_output_is_valid_for_several_seeds(self, island_rules):
        for seed in range(5):
            grid_state = generate(8, 8, island_rules, np.random.default_rng(seed))
            assert_adjacency_respected(grid_state.to_tile_array(), island_rules)

    def test_invalid_dimensions_raise(self, island_rules, rng):
        with pytest.raises(InvalidDimensionsError):
            generate(0, 5, island_rules, rng)


class TestSinkAndDeterminism:
    """Test the output sink contract and reproducibility."""

    def test_sink_receives_each_coordinate_once(self, island_rules, recording_sink, rng):
        generate(7, 5, island_rules, rng, recording_sink)
        coords = recording_sink.coords

        assert len(coords) == 35
        assert set(coords) == {(x, y) for x in range(7) for y in range(5)}

    def test_sink_tiles_match_final_grid(self, island_rules, recording_sink, rng):
        grid_state = generate(6, 6, island_rules, rng, recording_sink)
        assert np.array_equal(recording_sink.to_array(6, 6), grid_state.to_tile_array())

    def test_domain_sizes_never_grow(self, island_rules, rng):
        """Between two collapsed cells, no domain may gain a tile."""
        sink = SnapshotSink()
        wfc = WFC(6, 6, island_rules, rng, sink)
        sink.wfc = wfc
        wfc.run()

        assert len(sink.snapshots) == 36
        for previous, current in zip(sink.snapshots, sink.snapshots[1:]):
            assert np.all(current <= previous)

    def test_same_seed_gives_identical_results(self, island_rules):
        first_sink, second_sink = RecordingSink(), RecordingSink()
        first = generate(10, 10, island_rules, np.random.default_rng(99), first_sink)
        second = generate(10, 10, island_rules, np.random.default_rng(99), second_sink)

        assert np.array_equal(first.to_tile_array(), second.to_tile_array())
        assert first_sink.calls == second_sink.calls

    def test_different_seeds_can_differ(self, island_rules):
        results = set()
        for seed in range(5):
            results.add(generate(10, 10, island_rules, np.random.default_rng(seed)).to_tile_array().tobytes())
        assert len(results) > 1

    def test_step_counters(self, island_rules, rng):
        wfc = WFC(5, 5, island_rules, rng)
        wfc.run()
        assert wfc.collapsed_cells == 25
        assert 1 <= wfc.observations <= 25
        assert wfc.propagation_steps > 0


class TestSmallRules:
    """Test runs with hand-written rules."""

    def test_propagation_respects_rule_direction(self):
        """With 1 only allowed EAST of 0, every successful 2x1 run should be [0, 1], never [1, 0]."""
        rules = AdjacencyRules.from_tables({0: 1, 1: 1}, {0: {Direction.EAST: {1}}, 1: {Direction.WEST: {0}}})
        successes = 0
        for seed in range(20):
            try:
                tile_array = generate(2, 1, rules, np.random.default_rng(seed)).to_tile_array()
            except ContradictionError:
                continue
            successes += 1
            assert tile_array.tolist() == [[0, 1]]
        assert successes > 0

    def test_horizontal_rules_do_not_apply_vertically(self, rng):
        """Rules learned only along the x axis should not allow vertical neighbors."""
        rules = AdjacencyRules.from_tables({0: 1, 1: 1}, {0: {Direction.EAST: {1}}, 1: {Direction.WEST: {0}}})
        with pytest.raises(ContradictionError):
            generate(1, 2, rules, rng)

    def test_stripes(self, rng):
        """A tile that only allows itself horizontally and the other tile vertically should produce stripes."""
        rules = AdjacencyRules.from_tables(
            {0: 1, 1: 1},
            {
                0: {Direction.EAST: {0}, Direction.WEST: {0}, Direction.NORTH: {1}, Direction.SOUTH: {1}},
                1: {Direction.EAST: {1}, Direction.WEST: {1}, Direction.NORTH: {0}, Direction.SOUTH: {0}},
            },
        )
        tile_array = generate(4, 4, rules, rng).to_tile_array()
        for y in range(4):
            assert len(set(tile_array[y])) == 1
        assert tile_array[0, 0] != tile_array[1, 0]
