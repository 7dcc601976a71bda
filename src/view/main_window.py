"""Contains the main window widget class for the tilemap generator."""

from __future__ import annotations

from typing import TYPE_CHECKING

from PyQt6 import QtWidgets as qtw

if TYPE_CHECKING:
    from view.general_settings_widget import GeneralSettingsWidget
    from view.output_widget import OutputWidget


class MainWindow(qtw.QMainWindow):
    """The main window of the application.

    Holds the general settings widget and the output widget in two tabs of a central QTabWidget.
    """

    def __init__(self, general_settings_widget: GeneralSettingsWidget, output_widget: OutputWidget) -> None:
        """Initializes the main window and sets up the tabbed interface.

        Args:
            general_settings_widget: The widget for the tileset, the sample and the output settings.
            output_widget: The widget for generating and displaying the output tilemap.
        """
        super().__init__()

        self.resize(1000, 700)
        self.setWindowTitle("Sample Tilemap Generator")

        self.main_tabs = qtw.QTabWidget()
        self.main_tabs.addTab(general_settings_widget, "General Settings")
        self.main_tabs.addTab(output_widget, "Output")

        self.setCentralWidget(self.main_tabs)
