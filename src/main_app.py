"""Serves as the entry point and initializer for the tilemap generator."""

import os
import sys

from PyQt6 import QtWidgets as qtw

from constants import EXAMPLE_SAMPLE_PATH, EXAMPLE_TILESET_IMG_PATH
from logging_config import get_logger, setup_logging
from model.base_model import BaseModel
from model.tileset_manager import TilesetManager
from model.wfc_manager import WFCManager
from view.general_settings_widget import GeneralSettingsWidget
from view.main_window import MainWindow
from view.output_widget import OutputWidget


logger = get_logger(__name__)


class MainApp(qtw.QApplication):
    """The application initializer and integrator for the tilemap generator.

    Inherits from PyQt's QApplication. It creates the model components (settings, tileset and WFC manager) and the
    widgets operating on them. The example sample and tileset are loaded if they can be found.
    """

    # The top-level window of the application, which holds all widgets.
    _main_window: MainWindow

    def __init__(self, argv: list[str]) -> None:
        """Initializes the PyQt application and all application components.

        Args:
            argv: Command line arguments passed to the application (sys.argv).
        """
        super().__init__(argv)

        model = BaseModel()
        if os.path.isfile(EXAMPLE_SAMPLE_PATH):
            model.load_sample(EXAMPLE_SAMPLE_PATH)
        else:
            logger.warning(f"Example sample not found at {EXAMPLE_SAMPLE_PATH}")

        tileset_img_path = EXAMPLE_TILESET_IMG_PATH if os.path.isfile(EXAMPLE_TILESET_IMG_PATH) else None
        tileset_manager = TilesetManager(model.tile_size, tileset_img_path)
        wfc_manager = WFCManager()

        general_settings_widget = GeneralSettingsWidget(model, tileset_manager, wfc_manager)
        output_widget = OutputWidget(model, wfc_manager, tileset_manager)

        self._main_window = MainWindow(general_settings_widget, output_widget)
        self._main_window.show()


if __name__ == "__main__":
    setup_logging()

    app = MainApp(sys.argv)
    sys.exit(app.exec())
