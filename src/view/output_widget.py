"""Contains the widget class for generating/displaying the output tilemap."""

from __future__ import annotations

from typing import TYPE_CHECKING

from PIL.ImageQt import ImageQt
from PyQt6 import QtCore as qtc
from PyQt6 import QtGui as qtg
from PyQt6 import QtWidgets as qtw

import constants
from logging_config import get_logger
from model.errors import ContradictionError, WFCError
from model.tilemap import Tilemap

if TYPE_CHECKING:
    from PIL import Image

    from model.base_model import BaseModel
    from model.tileset_manager import TilesetManager
    from model.wfc_manager import WFCManager


logger = get_logger(__name__)


class _TilemapImgSink:
    """Output sink that writes each collapsed cell into a tilemap and paints it onto the tilemap image."""

    tilemap: Tilemap
    tilemap_img: Image.Image

    # The tileset manager providing the tile images.
    _tileset_manager: TilesetManager

    def __init__(self, width: int, height: int, tileset_manager: TilesetManager) -> None:
        self._tileset_manager = tileset_manager
        self.tilemap = Tilemap(width, height)
        self.tilemap_img = tileset_manager.get_initial_tilemap_img((width, height))

    def set_tile(self, x: int, y: int, tile: int) -> None:
        self.tilemap.set_tile(x, y, tile)
        self._tileset_manager.update_tilemap_img_tile(self.tilemap_img, tile, (x, y))


class OutputWidget(qtw.QWidget):
    """The widget class for generating/displaying the output tilemap.

    This widget starts the generation from the rules learned by the settings widget and displays the resulting tilemap
    together with a status line (the seed of the run, or the reason it failed). It also provides options for
    saving the tilemap data (.csv format) and its visual representation (.png format).
    """

    # The base model managing the generator settings.
    _model: BaseModel
    # The WFC manager holding the learned rules and running the WFC algorithm.
    _wfc_manager: WFCManager
    # The tileset manager responsible for tileset lookup and image manipulation.
    _tileset_manager: TilesetManager

    # Button to start generating the output tilemap via WFC.
    _generate_tilemap_button: qtw.QPushButton
    # Label showing the seed of the last run or the error it ended with.
    _status_label: qtw.QLabel

    # Button to save the raw tilemap data (.csv format).
    _save_tilemap_button: qtw.QPushButton
    # Button to save the tilemap image (.png format).
    _save_tilemap_image_button: qtw.QPushButton

    # Label to display the tilemap image.
    _tilemap_img_label: qtw.QLabel

    # The last generated tilemap and its image (None before the first successful run).
    tilemap: Tilemap | None
    tilemap_img: Image.Image | None

    def __init__(self, model: BaseModel, wfc_manager: WFCManager, tileset_manager: TilesetManager) -> None:
        """Initializes the widget and sets up the GUI elements and connections.

        Args:
            model: The base model managing the generator settings.
            wfc_manager: The WFC manager holding the learned rules and running the WFC algorithm.
            tileset_manager: The tileset manager responsible for tileset lookup and image manipulation.
        """
        super().__init__()

        self._model = model
        self._wfc_manager = wfc_manager
        self._tileset_manager = tileset_manager

        self.tilemap = None
        self.tilemap_img = None

        # === LEFT SIDE - WIDGETS ===

        self._generate_tilemap_button = qtw.QPushButton("Generate Tilemap")
        self._generate_tilemap_button.clicked.connect(self.on_generate_tilemap_button_clicked)

        self._status_label = qtw.QLabel()
        self._status_label.setWordWrap(True)

        self._save_tilemap_button = qtw.QPushButton("Save Tilemap (to CSV File)")
        self._save_tilemap_button.setEnabled(False)
        self._save_tilemap_button.clicked.connect(self.save_tilemap)

        self._save_tilemap_image_button = qtw.QPushButton("Save Tilemap Image")
        self._save_tilemap_image_button.setEnabled(False)
        self._save_tilemap_image_button.clicked.connect(self.save_tilemap_image)

        # === LEFT SIDE - LAYOUT ===

        container_tilemap_generation = qtw.QGroupBox("Tilemap Generation")
        container_tilemap_generation_layout = qtw.QGridLayout()
        container_tilemap_generation.setLayout(container_tilemap_generation_layout)
        container_tilemap_generation_layout.addWidget(self._generate_tilemap_button, 0, 0, 1, -1)
        container_tilemap_generation_layout.addWidget(self._status_label, 1, 0, 1, -1)

        container_tilemap_storage = qtw.QGroupBox("Tilemap Storage")
        container_tilemap_storage_layout = qtw.QGridLayout()
        container_tilemap_storage.setLayout(container_tilemap_storage_layout)
        container_tilemap_storage_layout.addWidget(self._save_tilemap_button, 0, 0, 1, -1)
        container_tilemap_storage_layout.addWidget(self._save_tilemap_image_button, 1, 0, 1, -1)

        container_left = qtw.QWidget()
        container_left.setMaximumWidth(constants.LAYOUT_LEFT_SIDE_MAX_WIDTH)
        container_left_layout = qtw.QVBoxLayout()
        container_left.setLayout(container_left_layout)
        container_left_layout.setSpacing(constants.LAYOUT_LEFT_SIDE_VBOX_SPACING)
        container_left_layout.addWidget(container_tilemap_generation)
        container_left_layout.addWidget(container_tilemap_storage)
        container_left_layout.addStretch()

        # === RIGHT SIDE ===

        self._tilemap_img_label = qtw.QLabel()
        self._tilemap_img_label.setAlignment(qtc.Qt.AlignmentFlag.AlignCenter)

        container_right = qtw.QWidget()
        container_right_layout = qtw.QVBoxLayout()
        container_right.setLayout(container_right_layout)
        container_right_layout.addWidget(self._tilemap_img_label)

        # === COMBINE SIDES ===

        layout = qtw.QHBoxLayout()
        self.setLayout(layout)
        layout.addWidget(container_left)
        layout.addWidget(container_right)

    def on_generate_tilemap_button_clicked(self) -> None:
        """Generates a new tilemap from the learned rules with the current settings.

        Engine errors are shown in the status line. A contradiction leaves the partially generated image on display, as
        it shows where the run got stuck.
        """
        if self._wfc_manager.rules is None:
            self._status_label.setText("Load a sample first.")
            return

        width, height = self._model.tilemap_width, self._model.tilemap_height
        sink = _TilemapImgSink(width, height, self._tileset_manager)

        try:
            self._wfc_manager.generate(width, height, self._model.random_seed, sink=sink)
        except ContradictionError as e:
            self._status_label.setText(
                f"{e} (seed {self._wfc_manager.last_seed}). Try again with another seed or a smaller tilemap."
            )
            self._draw_tilemap_img(sink.tilemap_img)
            return
        except WFCError as e:
            self._status_label.setText(str(e))
            return

        self.tilemap = sink.tilemap
        self.tilemap_img = sink.tilemap_img
        self._draw_tilemap_img(sink.tilemap_img)
        self._status_label.setText(f"Generated a {width}x{height} tilemap with seed {self._wfc_manager.last_seed}.")

        self._save_tilemap_button.setEnabled(True)
        self._save_tilemap_image_button.setEnabled(True)

    def save_tilemap(self) -> None:
        """Opens a file dialog and saves the tilemap data as a .csv file."""
        file_path, _ = qtw.QFileDialog.getSaveFileName(self, "Save Tilemap to...", "tilemap", "CSV Files (*.csv)")
        if file_path and self.tilemap is not None:
            self.tilemap.save_csv(file_path)
            logger.info(f"Saved tilemap to {file_path}")

    def save_tilemap_image(self) -> None:
        """Opens a file dialog and saves the tilemap image as a .png file."""
        # Saving to .jpg results in blurry tiles, so only .png is offered.
        file_path, _ = qtw.QFileDialog.getSaveFileName(self, "Save Tilemap Image to...", "tilemap", "PNG Files (*.png)")
        if file_path and self.tilemap_img is not None:
            self._tileset_manager.save_tilemap_img(self.tilemap_img, file_path)

    def _draw_tilemap_img(self, tilemap_img: Image.Image) -> None:
        """Converts the PIL Image to a QPixmap and displays it in the label."""
        tilemap_img_pixmap = qtg.QPixmap.fromImage(ImageQt(tilemap_img).copy())
        if (
            tilemap_img_pixmap.width() > self._tilemap_img_label.width()
            or tilemap_img_pixmap.height() > self._tilemap_img_label.height()
        ):
            # One pixel less than the label height, otherwise the label grows by one pixel per draw.
            tilemap_img_pixmap = tilemap_img_pixmap.scaled(
                self._tilemap_img_label.width(),
                self._tilemap_img_label.height() - 1,
                qtc.Qt.AspectRatioMode.KeepAspectRatio,
            )
        self._tilemap_img_label.setPixmap(tilemap_img_pixmap)
