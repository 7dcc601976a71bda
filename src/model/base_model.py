"""Manages the generator settings: output size, random seed and the sample."""

from __future__ import annotations

from typing import TYPE_CHECKING

from PIL import Image

import constants
from logging_config import get_logger
from model.errors import InvalidDimensionsError
from model.tilemap import SampleRegion, Tilemap

if TYPE_CHECKING:
    from model.tileset_manager import TilesetManager


logger = get_logger(__name__)


class BaseModel:
    """
    Manages the settings of the tilemap generator.

    This class tracks the size of the output tilemap, the random seed, the size of the individual tiles and the sample
    tilemap together with the region of it that the adjacency rules are learned from.

    Attributes:
        tilemap_width: The width of the output tilemap (in tiles).
        tilemap_height: The height of the output tilemap (in tiles).
        random_seed: The seed for the next generation run, or None to draw a new seed for every run.
        tile_size: The (width, height) of a single tile in pixels.
        sample: The sample tilemap, or None if no sample is loaded.
        sample_region: The inclusive bounds of the sample area, or None to use the whole sample.
    """

    tilemap_width: int
    tilemap_height: int

    random_seed: int | None

    tile_size: tuple[int, int]

    sample: Tilemap | None
    sample_region: SampleRegion | None

    def __init__(self) -> None:
        """Initializes the model with the default output size and no sample."""
        self.tilemap_width = constants.TILEMAP_SIZE_DEFAULT
        self.tilemap_height = constants.TILEMAP_SIZE_DEFAULT

        self.random_seed = None

        self.tile_size = (constants.TILE_SIZE_DEFAULT, constants.TILE_SIZE_DEFAULT)

        self.sample = None
        self.sample_region = None

    def set_tilemap_size(self, tilemap_width: int, tilemap_height: int) -> None:
        """Sets the output tilemap size.

        Sizes above constants.TILEMAP_SIZE_MAX_LIMIT are allowed but logged, as they are slow to generate interactively.

        Raises:
            InvalidDimensionsError: If a dimension is smaller than 1.
        """
        if tilemap_width < 1 or tilemap_height < 1:
            raise InvalidDimensionsError(f"Tilemap size must be positive, got {tilemap_width}x{tilemap_height}")
        if max(tilemap_width, tilemap_height) > constants.TILEMAP_SIZE_MAX_LIMIT:
            logger.info(
                f"Tilemap size {tilemap_width}x{tilemap_height} exceeds the interactive limit of "
                f"{constants.TILEMAP_SIZE_MAX_LIMIT}"
            )
        self.tilemap_width = tilemap_width
        self.tilemap_height = tilemap_height

    def set_random_seed(self, random_seed: int | None) -> None:
        """Sets the seed for the next runs (None for a new seed on every run).

        Raises:
            ValueError: If the seed is outside of [0, constants.RANDOM_SEED_MAX].
        """
        if random_seed is not None and not 0 <= random_seed <= constants.RANDOM_SEED_MAX:
            raise ValueError(f"Random seed must be between 0 and {constants.RANDOM_SEED_MAX}, got {random_seed}")
        self.random_seed = random_seed

    def set_tile_size(self, tile_width: int, tile_height: int) -> None:
        """Sets the size of a single tile in pixels."""
        if tile_width < 1 or tile_height < 1:
            raise InvalidDimensionsError(f"Tile size must be positive, got {tile_width}x{tile_height}")
        self.tile_size = (tile_width, tile_height)

    def set_sample(self, sample: Tilemap, sample_region: SampleRegion | None = None) -> None:
        """Sets the sample tilemap and the region of it to learn from (None for the whole sample)."""
        self.sample = sample
        self.sample_region = sample_region

    def set_sample_region(self, sample_region: SampleRegion | None) -> None:
        """Sets the inclusive bounds of the sample area (None for the whole sample)."""
        self.sample_region = sample_region

    def load_sample(self, file_path: str, origin: tuple[int, int] = (0, 0)) -> Tilemap:
        """Loads the sample tilemap from a .csv file and uses all of it as the sample area.

        Args:
            file_path: The path to the .csv file.
            origin: The world coordinates (x, y) of the top-left sample cell. Defaults to (0, 0).

        Returns:
            The loaded sample tilemap.
        """
        sample = Tilemap.from_csv(file_path, origin)
        self.set_sample(sample)
        logger.info(f"Loaded {sample.width}x{sample.height} sample from {file_path}")
        return sample

    def load_sample_img(
        self, file_path: str, tileset_manager: TilesetManager, origin: tuple[int, int] = (0, 0)
    ) -> Tilemap:
        """Loads the sample tilemap from a painted tilemap image and uses all of it as the sample area.

        The image is cut into tiles of the tileset manager's tile size. Each tile image is looked up in the tileset,
        tile images missing from it are registered as new tiles.

        Args:
            file_path: The path to the tilemap image.
            tileset_manager: The tileset manager used to convert tile images into tile indices.
            origin: The world coordinates (x, y) of the top-left sample cell. Defaults to (0, 0).

        Returns:
            The loaded sample tilemap.

        Raises:
            InvalidDimensionsError: If the image is smaller than a single tile.
        """
        with Image.open(file_path) as img:
            sample_array = tileset_manager.get_tilemap_array(img.convert("RGB"))
        if sample_array.size == 0:
            raise InvalidDimensionsError(f"The image {file_path} is smaller than a single tile")

        sample = Tilemap.from_array(sample_array, origin)
        self.set_sample(sample)
        logger.info(f"Loaded {sample.width}x{sample.height} sample from image {file_path}")
        return sample

    def get_effective_sample_region(self) -> SampleRegion | None:
        """Returns the configured sample region, or the bounds of the sample if no region is set."""
        if self.sample_region is not None:
            return self.sample_region
        if self.sample is not None:
            return self.sample.bounds
        return None
