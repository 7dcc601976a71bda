"""Tests for the numpy-backed tilemap."""

from pathlib import Path

import numpy as np
import pytest

from constants import EMPTY_TILE
from enums import Direction
from model.adjacency_rules import AdjacencyRules
from model.errors import InvalidDimensionsError
from model.tilemap import SampleRegion, Tilemap


class TestTilemapAccess:
    """Test reading and writing tiles in world coordinates."""

    def test_new_tilemap_is_empty(self):
        tilemap = Tilemap(3, 2)
        assert tilemap.to_array().shape == (2, 3)
        assert np.all(tilemap.to_array() == EMPTY_TILE)

    def test_set_and_get_tile(self):
        tilemap = Tilemap(3, 2)
        tilemap.set_tile(2, 1, 5)
        assert tilemap.get_tile(2, 1) == 5
        assert tilemap.to_array()[1, 2] == 5

    def test_outside_reads_are_empty(self):
        tilemap = Tilemap(2, 2, fill=4)
        assert tilemap.get_tile(2, 0) == EMPTY_TILE
        assert tilemap.get_tile(-1, 0) == EMPTY_TILE

    def test_outside_writes_raise(self):
        tilemap = Tilemap(2, 2)
        with pytest.raises(IndexError):
            tilemap.set_tile(0, 2, 1)

    def test_origin_offsets_world_coordinates(self):
        """A tilemap placed at a negative origin should be addressed by world coordinates."""
        tilemap = Tilemap.from_array(np.array([[1, 2], [3, 4]]), origin=(-3, -9))
        assert tilemap.get_tile(-3, -9) == 1
        assert tilemap.get_tile(-2, -8) == 4
        assert tilemap.get_tile(0, 0) == EMPTY_TILE
        assert tilemap.bounds == SampleRegion(-3, -9, -2, -8)

    @pytest.mark.parametrize("width, height", [(0, 1), (1, 0), (-2, 3)])
    def test_invalid_size_raises(self, width, height):
        with pytest.raises(InvalidDimensionsError):
            Tilemap(width, height)

    def test_to_array_returns_a_copy(self):
        tilemap = Tilemap(2, 2, fill=1)
        tilemap.to_array()[0, 0] = 9
        assert tilemap.get_tile(0, 0) == 1


class TestClearRegion:
    """Test clearing tilemap regions."""

    def test_clear_region(self):
        tilemap = Tilemap(3, 3, fill=1)
        tilemap.clear_region(SampleRegion(1, 1, 2, 2))
        assert tilemap.to_array().tolist() == [[1, 1, 1], [1, -1, -1], [1, -1, -1]]

    def test_clear_region_partially_outside(self):
        tilemap = Tilemap(2, 2, fill=1)
        tilemap.clear_region(SampleRegion(1, -5, 8, 0))
        assert tilemap.to_array().tolist() == [[1, -1], [1, 1]]

    def test_clear_everything(self):
        tilemap = Tilemap(2, 2, fill=1)
        tilemap.clear_region()
        assert np.all(tilemap.to_array() == EMPTY_TILE)


class TestCsv:
    """Test loading and saving tilemaps as .csv files."""

    def test_save_and_load(self, tmp_path):
        tilemap = Tilemap.from_array(np.array([[0, 1, 2], [-1, 3, 4]]))
        file_path = tmp_path / "tilemap.csv"
        tilemap.save_csv(str(file_path))

        assert file_path.read_text().splitlines() == ["0,1,2", "-1,3,4"]
        assert np.array_equal(Tilemap.from_csv(str(file_path)).to_array(), tilemap.to_array())

    def test_single_row_csv(self, tmp_path):
        """A .csv file with one line should still give a 2D tilemap."""
        file_path = tmp_path / "row.csv"
        file_path.write_text("4,5,6\n")
        tilemap = Tilemap.from_csv(str(file_path), origin=(2, 3))

        assert (tilemap.width, tilemap.height) == (3, 1)
        assert tilemap.get_tile(4, 3) == 6

    def test_single_column_csv(self, tmp_path):
        """A .csv file with one value per line should load as a column, not as a row."""
        file_path = tmp_path / "column.csv"
        file_path.write_text("0\n1\n2\n")
        tilemap = Tilemap.from_csv(str(file_path))

        assert (tilemap.width, tilemap.height) == (1, 3)
        assert tilemap.get_tile(0, 2) == 2

    def test_single_column_csv_learns_vertical_rules(self, tmp_path):
        """Neighbors in a single-column sample should be learned as SOUTH/NORTH neighbors."""
        file_path = tmp_path / "column.csv"
        file_path.write_text("0\n1\n2\n")
        tilemap = Tilemap.from_csv(str(file_path))
        rules = AdjacencyRules.from_sample(tilemap, tilemap.bounds)

        assert rules.get_compatible_tiles(0, Direction.SOUTH) == {1}
        assert rules.get_compatible_tiles(2, Direction.NORTH) == {1}
        assert rules.get_compatible_tiles(0, Direction.EAST) == set()

    def test_example_sample_loads(self):
        """The bundled example sample should be a 12x12 tilemap."""
        sample_path = Path(__file__).parent.parent / "assets" / "samples" / "island_12x12.csv"
        tilemap = Tilemap.from_csv(str(sample_path))
        assert (tilemap.width, tilemap.height) == (12, 12)
