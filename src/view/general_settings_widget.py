"""Contains the widget class for general configuration options."""

from __future__ import annotations

from typing import TYPE_CHECKING

from PIL.ImageQt import ImageQt
from PyQt6 import QtCore as qtc
from PyQt6 import QtGui as qtg
from PyQt6 import QtWidgets as qtw

import constants
from logging_config import get_logger
from model.errors import WFCError
from view.int_spin_box import IntSpinBox

if TYPE_CHECKING:
    from PIL import Image

    from model.base_model import BaseModel
    from model.tileset_manager import TilesetManager
    from model.wfc_manager import WFCManager


logger = get_logger(__name__)


class GeneralSettingsWidget(qtw.QWidget):
    """The widget class for general configuration options.

    This widget contains the tileset settings (tile size and tileset image), the sample settings (loading the sample
    tilemap from a .csv file or a painted tilemap image) and the output settings (tilemap size and random seed). The
    adjacency rules are learned whenever the sample or the ignore-empty option changes. The loaded sample is displayed
    on the right side.
    """

    # The base model managing the generator settings.
    _model: BaseModel
    # The tileset manager responsible for tileset lookup and image manipulation.
    _tileset_manager: TilesetManager
    # The WFC manager holding the rules learned from the current sample.
    _wfc_manager: WFCManager

    # Input for the width of individual tiles in the tileset image (in pixels).
    _tile_width_input: IntSpinBox
    # Input for the height of individual tiles in the tileset image (in pixels).
    _tile_height_input: IntSpinBox
    # Button to trigger the file dialog for loading a new tileset.
    _load_tileset_file_button: qtw.QPushButton
    # Button to trigger the file dialog for loading a new sample.
    _load_sample_file_button: qtw.QPushButton
    # Button to trigger the file dialog for loading a new sample from a painted tilemap image.
    _load_sample_img_file_button: qtw.QPushButton
    # Checkbox to leave empty sample cells out of the learned rules.
    _ignore_empty_checkbox: qtw.QCheckBox

    # Input for the desired width of the output tilemap (in tiles).
    _tilemap_width_input: IntSpinBox
    # Input for the desired height of the output tilemap (in tiles).
    _tilemap_height_input: IntSpinBox
    # Input for the random seed ('Random' draws a new seed for every run).
    _random_seed_input: IntSpinBox

    # Label used to display the currently loaded sample.
    _sample_img_label: qtw.QLabel

    def __init__(self, model: BaseModel, tileset_manager: TilesetManager, wfc_manager: WFCManager) -> None:
        """Initializes the widget and sets up the GUI elements and connections.

        Args:
            model: The base model managing the generator settings.
            tileset_manager: The tileset manager responsible for tileset lookup and image manipulation.
            wfc_manager: The WFC manager holding the rules learned from the current sample.
        """
        super().__init__()

        self._model = model
        self._tileset_manager = tileset_manager
        self._wfc_manager = wfc_manager

        # === LEFT SIDE - WIDGETS ===

        self._tile_width_input = IntSpinBox(
            constants.TILE_SIZE_DEFAULT, constants.TILE_SIZE_MIN_LIMIT, constants.TILE_SIZE_MAX_LIMIT, 1
        )
        self._tile_height_input = IntSpinBox(
            constants.TILE_SIZE_DEFAULT, constants.TILE_SIZE_MIN_LIMIT, constants.TILE_SIZE_MAX_LIMIT, 1
        )

        self._load_tileset_file_button = qtw.QPushButton("Load Tileset (from JPEG/PNG File)")
        self._load_tileset_file_button.clicked.connect(self.load_tileset_file)

        self._load_sample_file_button = qtw.QPushButton("Load Sample (from CSV File)")
        self._load_sample_file_button.clicked.connect(self.load_sample_file)
        self._load_sample_img_file_button = qtw.QPushButton("Load Sample (from JPEG/PNG File)")
        self._load_sample_img_file_button.clicked.connect(self.load_sample_img_file)

        self._ignore_empty_checkbox = qtw.QCheckBox("Ignore Empty Sample Cells")
        self._ignore_empty_checkbox.toggled.connect(self.on_ignore_empty_checkbox_toggled)

        self._tilemap_width_input = IntSpinBox(
            constants.TILEMAP_SIZE_DEFAULT, constants.TILEMAP_SIZE_MIN_LIMIT, constants.TILEMAP_SIZE_MAX_LIMIT, 1
        )
        self._tilemap_width_input.value_change_commited.connect(self.on_tilemap_size_input_changed)
        self._tilemap_height_input = IntSpinBox(
            constants.TILEMAP_SIZE_DEFAULT, constants.TILEMAP_SIZE_MIN_LIMIT, constants.TILEMAP_SIZE_MAX_LIMIT, 1
        )
        self._tilemap_height_input.value_change_commited.connect(self.on_tilemap_size_input_changed)

        self._random_seed_input = IntSpinBox(-1, 0, constants.RANDOM_SEED_MAX, 1, special_value_text="Random")
        self._random_seed_input.value_change_commited.connect(self.on_random_seed_input_changed)

        # === LEFT SIDE - LAYOUT ===

        container_tileset_settings = qtw.QGroupBox("Tileset Settings")
        container_tileset_settings_layout = qtw.QGridLayout()
        container_tileset_settings.setLayout(container_tileset_settings_layout)
        container_tileset_settings_layout.setColumnStretch(0, 1)
        container_tileset_settings_layout.setColumnMinimumWidth(1, constants.LAYOUT_GRID_MIDDLE_COLUMN_MIN_WIDTH)
        container_tileset_settings_layout.setColumnMinimumWidth(2, constants.LAYOUT_GRID_RIGHT_COLUMN_MIN_WIDTH)
        container_tileset_settings_layout.addWidget(qtw.QLabel("Tile Width"), 0, 0)
        container_tileset_settings_layout.addWidget(self._tile_width_input, 0, 2)
        container_tileset_settings_layout.addWidget(qtw.QLabel("Tile Height"), 1, 0)
        container_tileset_settings_layout.addWidget(self._tile_height_input, 1, 2)
        container_tileset_settings_layout.addWidget(self._load_tileset_file_button, 2, 0, 1, -1)

        container_sample_settings = qtw.QGroupBox("Sample Settings")
        container_sample_settings_layout = qtw.QGridLayout()
        container_sample_settings.setLayout(container_sample_settings_layout)
        container_sample_settings_layout.addWidget(self._load_sample_file_button, 0, 0, 1, -1)
        container_sample_settings_layout.addWidget(self._load_sample_img_file_button, 1, 0, 1, -1)
        container_sample_settings_layout.addWidget(self._ignore_empty_checkbox, 2, 0, 1, -1)

        container_output_settings = qtw.QGroupBox("Output Settings")
        container_output_settings_layout = qtw.QGridLayout()
        container_output_settings.setLayout(container_output_settings_layout)
        container_output_settings_layout.setColumnStretch(0, 1)
        container_output_settings_layout.setColumnMinimumWidth(1, constants.LAYOUT_GRID_MIDDLE_COLUMN_MIN_WIDTH)
        container_output_settings_layout.setColumnMinimumWidth(2, constants.LAYOUT_GRID_RIGHT_COLUMN_MIN_WIDTH)
        container_output_settings_layout.addWidget(qtw.QLabel("Tilemap Width"), 0, 0)
        container_output_settings_layout.addWidget(self._tilemap_width_input, 0, 2)
        container_output_settings_layout.addWidget(qtw.QLabel("Tilemap Height"), 1, 0)
        container_output_settings_layout.addWidget(self._tilemap_height_input, 1, 2)
        container_output_settings_layout.addWidget(qtw.QLabel("Random Seed"), 2, 0)
        container_output_settings_layout.addWidget(self._random_seed_input, 2, 2)

        container_left = qtw.QWidget()
        container_left.setMaximumWidth(constants.LAYOUT_LEFT_SIDE_MAX_WIDTH)
        container_left_layout = qtw.QVBoxLayout()
        container_left.setLayout(container_left_layout)
        container_left_layout.setSpacing(constants.LAYOUT_LEFT_SIDE_VBOX_SPACING)
        container_left_layout.addWidget(container_tileset_settings)
        container_left_layout.addWidget(container_sample_settings)
        container_left_layout.addWidget(container_output_settings)
        container_left_layout.addStretch()

        # === RIGHT SIDE ===

        self._sample_img_label = qtw.QLabel()
        self._sample_img_label.setAlignment(qtc.Qt.AlignmentFlag.AlignCenter)

        container_right = qtw.QWidget()
        container_right_layout = qtw.QVBoxLayout()
        container_right.setLayout(container_right_layout)
        container_right_layout.addWidget(self._sample_img_label)

        # === COMBINE SIDES ===

        layout = qtw.QHBoxLayout()
        self.setLayout(layout)
        layout.addWidget(container_left)
        layout.addWidget(container_right)

        self._learn_sample()
        self._draw_sample()

    def load_tileset_file(self) -> None:
        """Opens a file dialog for the user to select a new tileset image and redraws the sample with it."""
        file_path, _ = qtw.QFileDialog.getOpenFileName(
            self, "Load Tileset from...", "", "JPEG/PNG Files (*.jpeg *.jpg *.png)"
        )
        if not file_path:
            return

        tile_size = (self._tile_width_input.value(), self._tile_height_input.value())
        self._model.set_tile_size(*tile_size)
        self._tileset_manager.set_tileset(file_path, tile_size)
        self._draw_sample()

    def load_sample_file(self) -> None:
        """Opens a file dialog for the user to select a new sample tilemap (.csv), learns its rules and displays it."""
        file_path, _ = qtw.QFileDialog.getOpenFileName(self, "Load Sample from...", "", "CSV Files (*.csv)")
        if not file_path:
            return

        try:
            self._model.load_sample(file_path)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not load sample from {file_path}: {e}")
            qtw.QMessageBox.warning(self, "Load Sample", f"Could not load the sample:\n{e}")
            return
        self._learn_sample()
        self._draw_sample()

    def load_sample_img_file(self) -> None:
        """Opens a file dialog for the user to select a painted tilemap image as the new sample.

        The image is cut into tiles of the current tileset's tile size, each tile image is turned into a tile index.
        """
        file_path, _ = qtw.QFileDialog.getOpenFileName(
            self, "Load Sample from...", "", "JPEG/PNG Files (*.jpeg *.jpg *.png)"
        )
        if not file_path:
            return

        try:
            self._model.load_sample_img(file_path, self._tileset_manager)
        except (OSError, ValueError, WFCError) as e:
            logger.warning(f"Could not load sample image from {file_path}: {e}")
            qtw.QMessageBox.warning(self, "Load Sample", f"Could not load the sample:\n{e}")
            return
        self._learn_sample()
        self._draw_sample()

    def on_ignore_empty_checkbox_toggled(self) -> None:
        """Learns the rules again, with or without the empty sample cells."""
        self._learn_sample()

    def on_tilemap_size_input_changed(self) -> None:
        """Updates the model's tilemap size when the input values change."""
        self._model.set_tilemap_size(self._tilemap_width_input.value(), self._tilemap_height_input.value())

    def on_random_seed_input_changed(self) -> None:
        """Updates the model's random seed when the input value changes."""
        self._model.set_random_seed(self._random_seed_input.optional_value())

    def _learn_sample(self) -> None:
        """Learns the adjacency rules from the current sample region, so generating does not depend on later edits."""
        if self._model.sample is None:
            return
        try:
            self._wfc_manager.learn(
                self._model.sample,
                self._model.get_effective_sample_region(),
                ignore_empty=self._ignore_empty_checkbox.isChecked(),
            )
        except WFCError as e:
            self._wfc_manager.rules = None
            logger.warning(f"Could not learn the rules from the sample: {e}")
            qtw.QMessageBox.warning(self, "Learn Rules", f"Could not learn the rules from the sample:\n{e}")

    def _draw_sample(self) -> None:
        """Renders the current sample and displays it in the label."""
        if self._model.sample is None:
            self._sample_img_label.setText("No sample loaded")
            return
        sample_img = self._tileset_manager.get_tilemap_img(self._model.sample.to_array())
        self._draw_img(sample_img)

    def _draw_img(self, img: Image.Image) -> None:
        """Converts the PIL Image to a QPixmap and displays it in the label."""
        self._sample_img_label.setPixmap(qtg.QPixmap.fromImage(ImageQt(img).copy()))
