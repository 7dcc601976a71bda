"""Manages the visual representation of tilesets and tilemaps."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
from PIL import Image

import constants
from logging_config import get_logger

if TYPE_CHECKING:
    from numpy.typing import NDArray


logger = get_logger(__name__)


class TilesetManager:
    """Maps tile indices to tile images and renders tilemaps.

    This class owns the table between tile indices (as used by the WFC algorithm) and the drawable tile images. The
    images are either sliced from a tileset image, read row by row, or generated as flat color swatches for tile indices
    the tileset doesn't contain. The table works in both directions, so a painted tilemap image can also be converted
    back into tile indices, e.g. to acquire a sample.
    """

    # The dimensions (width, height) of a single tile in pixels.
    _tile_size: tuple[int, int]
    # A completely black tile image used to represent empty cells.
    _empty_tile: Image.Image
    # A dictionary mapping tile indices (int) to their corresponding PIL Image objects.
    _tiles: dict[int, Image.Image]
    # The reverse table mapping the raw RGB bytes of a tile image to its tile index.
    _tile_indices_by_bytes: dict[bytes, int]
    # The source image containing all individual tiles arranged in a grid (None if no tileset image is loaded).
    _tileset_img: Image.Image | None

    def __init__(self, tile_size: tuple[int, int], tileset_img_path: str | None = None) -> None:
        """Initializes the manager and loads the tileset image if a path is given.

        Args:
            tile_size: The dimensions (width, height) of a single tile in pixels.
            tileset_img_path: The file path to the source tileset image. Defaults to None, in which case every tile is
                drawn as a flat color swatch.
        """
        self.set_tileset(tileset_img_path, tile_size)

    def set_tileset(self, tileset_img_path: str | None, tile_size: tuple[int, int]) -> None:
        """Loads a new tileset image and extracts individual tile images.

        The image is opened and then sliced into individual tiles based on 'tile_size'. Each tile is stored in '_tiles'
        with its index, calculated by reading the tileset image row by row.

        Args:
            tileset_img_path: The file path to the source tileset image, or None to use color swatches only.
            tile_size: The dimensions (width, height) of a single tile in pixels.
        """
        self._tile_size = tile_size

        self._empty_tile = Image.new("RGB", self._tile_size)

        self._tiles = {}
        self._tile_indices_by_bytes = {}
        self._tileset_img = None

        if tileset_img_path is None:
            return

        with Image.open(tileset_img_path) as img:
            self._tileset_img = img.convert("RGB")

        rows = self._tileset_img.size[1] // self._tile_size[1]
        cols = self._tileset_img.size[0] // self._tile_size[0]
        for row in range(rows):
            for col in range(cols):
                box = (
                    col * self._tile_size[0],
                    row * self._tile_size[1],
                    (col + 1) * self._tile_size[0],
                    (row + 1) * self._tile_size[1],
                )
                self._register_tile(row * cols + col, self._tileset_img.crop(box))

        logger.info(f"Loaded {len(self._tiles)} tiles from {tileset_img_path}")

    @property
    def tile_size(self) -> tuple[int, int]:
        return self._tile_size

    def get_tileset_img(self) -> Image.Image | None:
        """Returns the source PIL image containing all individual tiles (None if no tileset image is loaded)."""
        return self._tileset_img

    def get_tile_img(self, tile_index: int) -> Image.Image:
        """Returns the image for a tile index.

        Tile indices missing from the tileset get a flat color swatch. constants.EMPTY_TILE is drawn black.
        """
        if tile_index == constants.EMPTY_TILE:
            return self._empty_tile
        if tile_index not in self._tiles:
            color = constants.TILE_SWATCH_COLORS[tile_index % len(constants.TILE_SWATCH_COLORS)]
            self._register_tile(tile_index, Image.new("RGB", self._tile_size, color))
        return self._tiles[tile_index]

    def get_tile_index(self, tile_img: Image.Image) -> int | None:
        """Returns the tile index of a tile image, constants.EMPTY_TILE for a black tile, or None if it is unknown."""
        tile_bytes = tile_img.convert("RGB").tobytes()
        if tile_bytes in self._tile_indices_by_bytes:
            return self._tile_indices_by_bytes[tile_bytes]
        if tile_bytes == self._empty_tile.tobytes():
            return constants.EMPTY_TILE
        return None

    def get_tilemap_img(self, tilemap_array: NDArray[np.int_]) -> Image.Image:
        """Renders a tilemap array into a complete PIL Image object.

        The tilemap array contains tile indices. The method iterates through the array, fetches the corresponding tile
        images, and pastes them onto a new canvas.

        Args:
            tilemap_array: A 2D array containing tile indices, indexed by [row, col].

        Returns:
            A PIL Image representing the visual tilemap.
        """
        # tile_size is (width, height) while tilemap_array.shape is (rows, cols), so the indices have to be swapped.
        img_size = (tilemap_array.shape[1] * self._tile_size[0], tilemap_array.shape[0] * self._tile_size[1])
        tilemap_img = Image.new("RGB", img_size)
        for row in range(tilemap_array.shape[0]):
            for col in range(tilemap_array.shape[1]):
                tilemap_img.paste(self.get_tile_img(int(tilemap_array[row, col])), self._get_tile_box(col, row))
        return tilemap_img

    def get_tilemap_array(self, tilemap_img: Image.Image) -> NDArray[np.int_]:
        """Converts a tilemap image back into a 2D array of tile indices.

        Tile images that are not known yet get the next free tile index, so a sample can be painted with arbitrary
        tiles.

        Args:
            tilemap_img: The tilemap image. Its size should be a multiple of the tile size, partial tiles are ignored.

        Returns:
            A 2D array of tile indices, indexed by [row, col].
        """
        rows = tilemap_img.size[1] // self._tile_size[1]
        cols = tilemap_img.size[0] // self._tile_size[0]
        tilemap_array = np.full((rows, cols), constants.EMPTY_TILE, dtype=np.int_)
        for row in range(rows):
            for col in range(cols):
                tile_img = tilemap_img.crop(self._get_tile_box(col, row))
                tile_index = self.get_tile_index(tile_img)
                if tile_index is None:
                    tile_index = max(self._tiles.keys(), default=-1) + 1
                    self._register_tile(tile_index, tile_img.convert("RGB"))
                tilemap_array[row, col] = tile_index
        return tilemap_array

    def get_initial_tilemap_img(self, tilemap_size: tuple[int, int]) -> Image.Image:
        """Creates an empty (black) image canvas for a new tilemap of the given (width, height) in tiles."""
        img_size = (tilemap_size[0] * self._tile_size[0], tilemap_size[1] * self._tile_size[1])
        return Image.new("RGB", img_size)

    def update_tilemap_img_tile(
        self, tilemap_img: Image.Image, tile_index: int, tile_coords: tuple[int, int]
    ) -> Image.Image:
        """Updates a single tile at the given coordinates on an existing image.

        Args:
            tilemap_img: The existing image canvas to be modified.
            tile_index: The index of the new tile to paste.
            tile_coords: A tuple (x, y) specifying the location of the tile.

        Returns:
            The modified image canvas (the input image, as the operation is in-place).
        """
        tilemap_img.paste(self.get_tile_img(tile_index), self._get_tile_box(tile_coords[0], tile_coords[1]))
        return tilemap_img

    def save_tilemap_img(self, tilemap_img: Image.Image, file_path: str) -> None:
        """Saves a generated tilemap image to the specified file path.

        Args:
            tilemap_img: The PIL Image object to be saved.
            file_path: The destination path (including filename and extension).
        """
        tilemap_img.save(file_path)
        logger.info(f"Saved tilemap image to {file_path}")

    def _register_tile(self, tile_index: int, tile_img: Image.Image) -> None:
        """Adds a tile image to both directions of the tile table."""
        self._tiles[tile_index] = tile_img
        self._tile_indices_by_bytes.setdefault(tile_img.tobytes(), tile_index)

    def _get_tile_box(self, col: int, row: int) -> tuple[int, int, int, int]:
        """Returns the pixel box (left, upper, right, lower) of the tile at column 'col' and row 'row'."""
        return (
            col * self._tile_size[0],
            row * self._tile_size[1],
            (col + 1) * self._tile_size[0],
            (row + 1) * self._tile_size[1],
        )
