"""Canvas widget for the workflow editor.

This module provides CanvasWidget, the Qt surface of an InteractionSession.
It translates Qt input into the session's toolkit-neutral events and
paints the session's state:

- Mouse press/move/release to pointer_down/pointer_move/pointer_up
- Wheel to zoom steps
- Delete, Backspace and Escape to key_press
- Palette drops carrying DRAG_MIME_TYPE data to drop

Nodes, connections and the rubber-band line are drawn with QPainter
under the session's pan/zoom transform. The widget repaints whenever the
model or the view reports a change.

Author:
    Michael Economou

Date:
    2026-02-07
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from PyQt5.QtCore import QPointF, QRectF, QSize, Qt, pyqtSignal
from PyQt5.QtGui import (
    QBrush,
    QColor,
    QDragEnterEvent,
    QDragMoveEvent,
    QDropEvent,
    QFont,
    QKeyEvent,
    QMouseEvent,
    QPainter,
    QPainterPath,
    QPaintEvent,
    QPen,
    QWheelEvent,
)
from PyQt5.QtWidgets import QWidget

from flowcanvas.config import DRAG_MIME_TYPE, HANDLE_RADIUS
from flowcanvas.core.interaction import InteractionSession, Key, PointerButton
from flowcanvas.utils.qt_helpers import event_point, has_selection_modifier

if TYPE_CHECKING:
    from flowcanvas.core.graph_model import Connection, Node

logger = logging.getLogger(__name__)

_BUTTONS = {
    Qt.LeftButton: PointerButton.LEFT,
    Qt.MiddleButton: PointerButton.MIDDLE,
    Qt.RightButton: PointerButton.RIGHT,
}

_KEYS = {
    Qt.Key_Delete: Key.DELETE,
    Qt.Key_Backspace: Key.BACKSPACE,
    Qt.Key_Escape: Key.ESCAPE,
}

# Node border colour per status
_STATUS_COLORS = {
    "draft": "#7f8c8d",
    "running": "#2980b9",
    "completed": "#27ae60",
    "failed": "#c0392b",
}


class CanvasWidget(QWidget):
    """Widget rendering and editing one InteractionSession.

    Attributes:
        session: Session whose model and view are shown.

    Signals:
        graph_pos_changed: Pointer position in graph space, on every move.
        node_dropped: Id of a node created from a palette drop.
    """

    graph_pos_changed = pyqtSignal(int, int)
    node_dropped = pyqtSignal(str)

    def __init__(self, session: InteractionSession, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.session = session

        self.init_assets()
        self.init_ui()

        session.model.add_changed_listener(self.update)
        session.model.add_selection_changed_listener(self.update)
        session.add_view_changed_listener(self.update)

    def init_ui(self) -> None:
        self.setAcceptDrops(True)
        self.setMouseTracking(True)
        self.setFocusPolicy(Qt.StrongFocus)
        self.setAutoFillBackground(True)

    def init_assets(self) -> None:
        self._color_background = QColor("#393939")
        self._color_grid = QColor("#2f2f2f")
        self._brush_node = QBrush(QColor("#e0e0e0"))
        self._brush_handle = QBrush(QColor("#f39c12"))
        self._pen_selected = QPen(QColor("#ffa637"), 3)
        self._pen_connection = QPen(QColor("#bdc3c7"), 2)
        self._pen_rubber_band = QPen(QColor("#ffffff"), 2, Qt.DashLine)
        self._pen_text = QPen(QColor("#212121"))
        self._font_label = QFont("Ubuntu", 10)

    def sizeHint(self) -> QSize:
        return QSize(800, 600)

    # Mouse

    def mousePressEvent(self, event: QMouseEvent) -> None:
        button = _BUTTONS.get(event.button())
        if button is None:
            super().mousePressEvent(event)
            return
        x, y = event_point(event)
        try:
            self.session.pointer_down(
                x,
                y,
                button=button,
                modifier=has_selection_modifier(event),
            )
        except Exception:
            logger.exception("[CanvasWidget] Pointer down failed")

    def mouseMoveEvent(self, event: QMouseEvent) -> None:
        x, y = event_point(event)
        try:
            self.session.pointer_move(x, y)
        except Exception:
            logger.exception("[CanvasWidget] Pointer move failed")

        point = self.session.graph_point(x, y)
        self.graph_pos_changed.emit(int(point.x), int(point.y))

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        button = _BUTTONS.get(event.button())
        if button is None:
            super().mouseReleaseEvent(event)
            return
        x, y = event_point(event)
        try:
            self.session.pointer_up(x, y, button=button)
        except Exception:
            logger.exception("[CanvasWidget] Pointer up failed")

    def wheelEvent(self, event: QWheelEvent) -> None:
        try:
            self.session.wheel(event.angleDelta().y())
        except Exception:
            logger.exception("[CanvasWidget] Zoom failed")

    # Keyboard

    def keyPressEvent(self, event: QKeyEvent) -> None:
        key = _KEYS.get(event.key())
        if key is None:
            super().keyPressEvent(event)
            return
        try:
            self.session.key_press(key)
        except Exception:
            logger.exception("[CanvasWidget] Key %s failed", key.value)

    # Drag & drop

    def dragEnterEvent(self, event: QDragEnterEvent) -> None:
        if event.mimeData().hasFormat(DRAG_MIME_TYPE):
            event.acceptProposedAction()
        else:
            event.ignore()

    def dragMoveEvent(self, event: QDragMoveEvent) -> None:
        if event.mimeData().hasFormat(DRAG_MIME_TYPE):
            event.acceptProposedAction()
        else:
            event.ignore()

    def dropEvent(self, event: QDropEvent) -> None:
        mime = event.mimeData()
        if not mime.hasFormat(DRAG_MIME_TYPE):
            event.ignore()
            return

        x, y = event_point(event)
        try:
            node_id = self.session.drop(x, y, bytes(mime.data(DRAG_MIME_TYPE)))
        except Exception:
            logger.exception("[CanvasWidget] Drop failed")
            event.ignore()
            return

        if node_id is None:
            event.ignore()
            return

        event.acceptProposedAction()
        self.setFocus()
        self.node_dropped.emit(node_id)

    # Painting

    def paintEvent(self, event: QPaintEvent) -> None:
        painter = QPainter(self)
        try:
            painter.setRenderHints(QPainter.Antialiasing | QPainter.TextAntialiasing)
            painter.fillRect(self.rect(), self._color_background)

            pan = self.session.pan
            zoom = self.session.zoom
            painter.translate(pan.x, pan.y)
            painter.scale(zoom, zoom)

            self.paint_grid(painter)
            for connection in self.session.model.connections:
                self.paint_connection(painter, connection)
            for node in self.session.model.nodes:
                self.paint_node(painter, node)
            self.paint_rubber_band(painter)
        except Exception:
            logger.exception("[CanvasWidget] Paint failed")
        finally:
            painter.end()

    def paint_grid(self, painter: QPainter) -> None:
        grid = self.session.grid_size
        if grid <= 0:
            return

        visible = painter.transform().inverted()[0].mapRect(QRectF(self.rect()))
        left = int(visible.left()) - int(visible.left()) % grid
        top = int(visible.top()) - int(visible.top()) % grid

        painter.setPen(QPen(self._color_grid, 1))
        x = left
        while x < visible.right():
            painter.drawLine(QPointF(x, visible.top()), QPointF(x, visible.bottom()))
            x += grid
        y = top
        while y < visible.bottom():
            painter.drawLine(QPointF(visible.left(), y), QPointF(visible.right(), y))
            y += grid

    def paint_connection(self, painter: QPainter, connection: Connection) -> None:
        model = self.session.model
        source = model.get_node(connection.from_id)
        target = model.get_node(connection.to_id)
        if source is None or target is None:
            return

        start = source.handle_position
        end = target.center
        dx = abs(end.x - start.x) * 0.5

        path = QPainterPath(QPointF(start.x, start.y))
        path.cubicTo(
            QPointF(start.x + dx, start.y),
            QPointF(end.x - dx, end.y),
            QPointF(end.x, end.y),
        )
        painter.setPen(self._pen_connection)
        painter.setBrush(Qt.NoBrush)
        painter.drawPath(path)

        if connection.label:
            mid = path.pointAtPercent(0.5)
            painter.setPen(QPen(self._pen_connection.color()))
            painter.setFont(self._font_label)
            painter.drawText(mid, connection.label)

    def paint_node(self, painter: QPainter, node: Node) -> None:
        rect = QRectF(node.position.x, node.position.y, node.size.width, node.size.height)
        selected = self.session.model.is_selected(node.id)

        if selected:
            painter.setPen(self._pen_selected)
        else:
            painter.setPen(QPen(QColor(_STATUS_COLORS.get(node.status, "#7f8c8d")), 2))
        painter.setBrush(self._brush_node)
        painter.drawRoundedRect(rect, 8, 8)

        painter.setPen(self._pen_text)
        painter.setFont(self._font_label)
        painter.drawText(rect, Qt.AlignCenter, node.label or node.type)

        # Handle keeps its screen size at any zoom, matching hit_test.
        handle = node.handle_position
        radius = HANDLE_RADIUS / self.session.zoom
        painter.setPen(Qt.NoPen)
        painter.setBrush(self._brush_handle)
        painter.drawRect(QRectF(handle.x - radius, handle.y - radius, radius * 2, radius * 2))

    def paint_rubber_band(self, painter: QPainter) -> None:
        band = self.session.rubber_band
        if band is None:
            return
        anchor, cursor = band
        painter.setPen(self._pen_rubber_band)
        painter.drawLine(QPointF(anchor.x, anchor.y), QPointF(cursor.x, cursor.y))
