"""Tool palette drag source.

Lists the palette items; dragging one onto the canvas carries its JSON
payload under DRAG_MIME_TYPE.

Author:
    Michael Economou

Date:
    2026-02-07
"""

from __future__ import annotations

import logging

from PyQt5.QtCore import QByteArray, QMimeData, Qt
from PyQt5.QtWidgets import QAbstractItemView, QListWidget, QListWidgetItem, QWidget

from flowcanvas.config import DRAG_MIME_TYPE
from flowcanvas.core.palette import TOOL_ITEMS, ToolItem, encode_drag_payload

logger = logging.getLogger(__name__)

TOOL_ITEM_ROLE = Qt.UserRole + 1


class PaletteWidget(QListWidget):
    """List of tool items that can be dragged onto the canvas."""

    def __init__(
        self, items: tuple[ToolItem, ...] = TOOL_ITEMS, parent: QWidget | None = None
    ) -> None:
        super().__init__(parent)
        self.setDragEnabled(True)
        self.setDragDropMode(QAbstractItemView.DragOnly)
        self.setSelectionMode(QAbstractItemView.SingleSelection)

        for tool in items:
            self.add_tool_item(tool)

    def add_tool_item(self, tool: ToolItem) -> QListWidgetItem:
        item = QListWidgetItem(tool.label, self)
        item.setData(TOOL_ITEM_ROLE, tool)
        item.setToolTip(f"Drag to add a {tool.label} node")
        return item

    def tool_item(self, item: QListWidgetItem) -> ToolItem | None:
        return item.data(TOOL_ITEM_ROLE)

    def mimeTypes(self) -> list[str]:
        return [DRAG_MIME_TYPE]

    def mimeData(self, items: list[QListWidgetItem]) -> QMimeData:
        mime = QMimeData()
        tools = [tool for tool in (self.tool_item(item) for item in items) if tool is not None]
        if tools:
            mime.setData(DRAG_MIME_TYPE, QByteArray(encode_drag_payload(tools[0])))
            logger.debug("[PaletteWidget] Dragging %s", tools[0].id)
        return mime
