"""UI package - Qt widgets for the workflow editor.

Classes:
    - CanvasWidget: Paints a session and forwards Qt input to it
    - PaletteWidget: Drag source for tool items
    - PropertiesPanel: Editor for the inspected node
    - MainWindow: Top-level window

Author: Michael Economou
Date: 2026-02-07
"""

from flowcanvas.ui.canvas_widget import CanvasWidget
from flowcanvas.ui.main_window import MainWindow
from flowcanvas.ui.palette_widget import PaletteWidget
from flowcanvas.ui.properties_panel import PropertiesPanel

__all__ = [
    "CanvasWidget",
    "MainWindow",
    "PaletteWidget",
    "PropertiesPanel",
]
