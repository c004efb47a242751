"""Properties panel for the inspected node.

Shows the first selected node's fields and the connections touching it,
and writes edits back to the model:

- label, lambdaName, width and height of the node
- prompt and input of an AI node (kept in node.data)
- label of each related connection, and removal of a connection

Author:
    Michael Economou

Date:
    2026-02-07
"""

from __future__ import annotations

import logging

from PyQt5.QtCore import Qt
from PyQt5.QtWidgets import (
    QAbstractItemView,
    QFormLayout,
    QHeaderView,
    QLabel,
    QLineEdit,
    QPushButton,
    QSpinBox,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from flowcanvas.config import NODE_SIZE_MAX, NODE_SIZE_MIN
from flowcanvas.core.graph_model import NodeType, Size
from flowcanvas.core.interaction import InteractionSession

logger = logging.getLogger(__name__)

# node.data keys edited for AI nodes
AI_FIELDS = ("prompt", "input")


class PropertiesPanel(QWidget):
    """Editor for the node returned by InteractionSession.inspected_node()."""

    def __init__(self, session: InteractionSession, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.session = session
        self._node_id: str | None = None
        self._refreshing = False
        # (from, to) of each connections_table row
        self._connection_keys: list[tuple[str, str]] = []

        self.init_ui()

        session.model.add_selection_changed_listener(self.refresh)
        session.model.add_changed_listener(self.refresh)
        self.refresh()

    def init_ui(self) -> None:
        self.empty_label = QLabel("Select a node to edit its properties")
        self.id_label = QLabel()
        self.type_label = QLabel()
        self.status_label = QLabel()
        self.label_edit = QLineEdit()
        self.lambda_edit = QLineEdit()
        self.lambda_edit.setPlaceholderText("lambdaName")
        self.width_spin = self._size_spin_box()
        self.height_spin = self._size_spin_box()

        self.form = QWidget()
        form_layout = QFormLayout(self.form)
        form_layout.addRow("Id", self.id_label)
        form_layout.addRow("Type", self.type_label)
        form_layout.addRow("Status", self.status_label)
        form_layout.addRow("Label", self.label_edit)
        form_layout.addRow("Lambda", self.lambda_edit)
        form_layout.addRow("Width", self.width_spin)
        form_layout.addRow("Height", self.height_spin)

        self.ai_group = QWidget()
        ai_layout = QFormLayout(self.ai_group)
        ai_layout.setContentsMargins(0, 0, 0, 0)
        self.ai_edits: dict[str, QLineEdit] = {}
        for key in AI_FIELDS:
            edit = QLineEdit()
            edit.setPlaceholderText(key)
            edit.editingFinished.connect(lambda key=key: self.on_ai_field_edited(key))
            ai_layout.addRow(key.capitalize(), edit)
            self.ai_edits[key] = edit

        self.connections_table = QTableWidget(0, 2)
        self.connections_table.setHorizontalHeaderLabels(["Connection", "Label"])
        self.connections_table.horizontalHeader().setSectionResizeMode(QHeaderView.Stretch)
        self.connections_table.verticalHeader().setVisible(False)
        self.connections_table.setSelectionBehavior(QAbstractItemView.SelectRows)
        self.connections_table.setSelectionMode(QAbstractItemView.SingleSelection)
        self.remove_connection_button = QPushButton("Remove connection")

        layout = QVBoxLayout(self)
        layout.addWidget(self.empty_label)
        layout.addWidget(self.form)
        layout.addWidget(self.ai_group)
        layout.addWidget(QLabel("Connections"))
        layout.addWidget(self.connections_table)
        layout.addWidget(self.remove_connection_button)
        layout.addStretch()

        self.label_edit.editingFinished.connect(self.on_label_edited)
        self.lambda_edit.editingFinished.connect(self.on_lambda_edited)
        self.width_spin.valueChanged.connect(self.on_size_edited)
        self.height_spin.valueChanged.connect(self.on_size_edited)
        self.connections_table.itemChanged.connect(self.on_connection_item_changed)
        self.remove_connection_button.clicked.connect(self.on_remove_connection)

    def _size_spin_box(self) -> QSpinBox:
        spin = QSpinBox()
        spin.setRange(NODE_SIZE_MIN, NODE_SIZE_MAX)
        spin.setKeyboardTracking(False)
        return spin

    def _node_widgets(self) -> list[QWidget]:
        return [self.form, self.connections_table, self.remove_connection_button]

    def refresh(self) -> None:
        node = self.session.inspected_node()
        self._node_id = node.id if node is not None else None

        self.empty_label.setVisible(node is None)
        for widget in self._node_widgets():
            widget.setEnabled(node is not None)
        self.form.setVisible(node is not None)
        self.ai_group.setVisible(node is not None and node.type == NodeType.AI.value)

        self._refreshing = True
        try:
            if node is None:
                self.connections_table.setRowCount(0)
                self._connection_keys = []
                return

            self.id_label.setText(node.id)
            self.type_label.setText(node.type)
            self.status_label.setText(node.status)
            if not self.label_edit.hasFocus():
                self.label_edit.setText(node.label)
            if not self.lambda_edit.hasFocus():
                self.lambda_edit.setText(node.lambda_name or "")
            self.width_spin.setValue(int(node.size.width))
            self.height_spin.setValue(int(node.size.height))
            for key, edit in self.ai_edits.items():
                if not edit.hasFocus():
                    value = node.data.get(key, "")
                    edit.setText(value if isinstance(value, str) else str(value))

            self.refresh_connections(node.id)
        finally:
            self._refreshing = False

    def refresh_connections(self, node_id: str) -> None:
        """Show the node's connections, rebuilding rows only when the set changed."""
        table = self.connections_table
        connections = self.session.model.connections_of(node_id)
        keys = [conn.key for conn in connections]

        if keys != self._connection_keys:
            self._connection_keys = keys
            table.setRowCount(0)
            table.setRowCount(len(connections))
            for row, conn in enumerate(connections):
                endpoints = QTableWidgetItem(f"{conn.from_id} -> {conn.to_id}")
                endpoints.setFlags(endpoints.flags() & ~Qt.ItemIsEditable)
                table.setItem(row, 0, endpoints)
                table.setItem(row, 1, QTableWidgetItem(conn.label))
            return

        for row, conn in enumerate(connections):
            label_item = table.item(row, 1)
            if label_item.text() != conn.label:
                label_item.setText(conn.label)

    def connection_key(self, row: int) -> tuple[str, str] | None:
        if 0 <= row < len(self._connection_keys):
            return self._connection_keys[row]
        return None

    # Edits

    def on_label_edited(self) -> None:
        if self._refreshing or self._node_id is None:
            return
        node = self.session.model.get_node(self._node_id)
        label = self.label_edit.text()
        if node is not None and node.label != label:
            self.session.model.update_node(self._node_id, label=label)

    def on_lambda_edited(self) -> None:
        if self._refreshing or self._node_id is None:
            return
        node = self.session.model.get_node(self._node_id)
        lambda_name = self.lambda_edit.text().strip() or None
        if node is not None and node.lambda_name != lambda_name:
            self.session.model.update_node(self._node_id, lambda_name=lambda_name)
            logger.debug("[PropertiesPanel] %s lambdaName set to %s", self._node_id, lambda_name)

    def on_size_edited(self) -> None:
        if self._refreshing or self._node_id is None:
            return
        node = self.session.model.get_node(self._node_id)
        size = Size(self.width_spin.value(), self.height_spin.value())
        if node is not None and node.size != size:
            self.session.model.update_node(self._node_id, size=size)

    def on_ai_field_edited(self, key: str) -> None:
        if self._refreshing or self._node_id is None:
            return
        node = self.session.model.get_node(self._node_id)
        value = self.ai_edits[key].text()
        if node is None or node.data.get(key, "") == value:
            return
        data = dict(node.data)
        data[key] = value
        self.session.model.update_node(self._node_id, data=data)

    def on_connection_item_changed(self, item: QTableWidgetItem) -> None:
        if self._refreshing or item.column() != 1:
            return
        key = self.connection_key(item.row())
        if key is not None:
            self.session.model.update_connection(key, label=item.text())

    def on_remove_connection(self) -> None:
        key = self.connection_key(self.connections_table.currentRow())
        if key is None:
            return
        removed = self.session.model.remove_connection(*key)
        logger.debug("[PropertiesPanel] Removed %d connection(s) %s -> %s", removed, *key)
