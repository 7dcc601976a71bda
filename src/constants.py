"""Contains global constants and default values used throughout the project."""

EXAMPLE_TILESET_IMG_PATH: str = "./assets/tilesets/example_tileset.png"

EXAMPLE_SAMPLE_PATH: str = "./assets/samples/island_12x12.csv"

# === MODEL CONSTANTS ===

# Tile index of an empty tilemap cell. It is a regular tile index for the WFC algorithm and takes part in the learned
# frequencies and adjacency rules like any other tile.
EMPTY_TILE: int = -1

TILEMAP_SIZE_DEFAULT: int = 10
TILEMAP_SIZE_MIN_LIMIT: int = 1
TILEMAP_SIZE_MAX_LIMIT: int = 20

TILE_SIZE_DEFAULT: int = 16
TILE_SIZE_MIN_LIMIT: int = 8
TILE_SIZE_MAX_LIMIT: int = 256

RANDOM_SEED_MAX: int = 999999999

# Colors used for tiles that have no image in the tileset (cycled by tile index).
TILE_SWATCH_COLORS: tuple[tuple[int, int, int], ...] = (
    (36, 92, 168),
    (224, 204, 140),
    (88, 160, 72),
    (40, 100, 48),
    (128, 128, 128),
    (176, 112, 64),
    (232, 232, 232),
    (160, 48, 48),
)

# === LOGGING CONSTANTS ===

LOGGER_NAMESPACE: str = "tilemap_generator"
LOG_FILE_NAME: str = "generator.log"
# 5 MB per file.
MAX_LOG_SIZE: int = 5 * 1024 * 1024
LOG_BACKUP_COUNT: int = 3

# === VIEW CONSTANTS ===

LAYOUT_LEFT_SIDE_MAX_WIDTH: int = 350
LAYOUT_LEFT_SIDE_VBOX_SPACING: int = 20
LAYOUT_GRID_MIDDLE_COLUMN_MIN_WIDTH: int = 20
LAYOUT_GRID_RIGHT_COLUMN_MIN_WIDTH: int = 150
