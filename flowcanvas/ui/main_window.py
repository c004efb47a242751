"""Main application window for the workflow editor.

Wires the palette, the canvas and the properties panel around one
WorkflowController, with actions for the workflow lifecycle:

- New, Save, Load (by workflow id), Run
- Export to and import from a local JSON file

Author:
    Michael Economou

Date:
    2026-02-07
"""

from __future__ import annotations

import logging
import os

from PyQt5.QtCore import QSize, Qt
from PyQt5.QtWidgets import (
    QAction,
    QDockWidget,
    QFileDialog,
    QInputDialog,
    QLabel,
    QLineEdit,
    QMainWindow,
    QMessageBox,
    QToolBar,
)

from flowcanvas.config import REQUEST_TIMEOUT, WINDOW_TITLE
from flowcanvas.core.graph_validator import ValidationResult
from flowcanvas.persistence.codec import LoadReport
from flowcanvas.persistence.workflow_json import (
    InvalidFileError,
    export_graph_to_file,
    import_graph_from_file,
)
from flowcanvas.services.workflow_controller import WorkflowController
from flowcanvas.ui.canvas_widget import CanvasWidget
from flowcanvas.ui.palette_widget import PaletteWidget
from flowcanvas.ui.properties_panel import PropertiesPanel

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    """Top-level editor window.

    Attributes:
        controller: Save/load/run orchestration for the open workflow.
        canvas: Canvas widget editing the controller's session.
    """

    def __init__(self, controller: WorkflowController | None = None) -> None:
        super().__init__()
        self.controller = controller if controller is not None else WorkflowController(parent=self)

        self.init_ui()

    def init_ui(self) -> None:
        self.create_actions()
        self.create_menus()
        self.create_toolbar()

        self.canvas = CanvasWidget(self.controller.session, self)
        self.setCentralWidget(self.canvas)

        self.palette = PaletteWidget(parent=self)
        palette_dock = QDockWidget("Palette", self)
        palette_dock.setWidget(self.palette)
        self.addDockWidget(Qt.LeftDockWidgetArea, palette_dock)

        self.properties = PropertiesPanel(self.controller.session, self)
        properties_dock = QDockWidget("Properties", self)
        properties_dock.setWidget(self.properties)
        self.addDockWidget(Qt.RightDockWidgetArea, properties_dock)

        self.create_status_bar()

        self.controller.saved.connect(self.on_saved)
        self.controller.loaded.connect(self.on_loaded)
        self.controller.run_finished.connect(self.on_run_finished)
        self.controller.validation_reported.connect(self.on_validation_reported)
        self.controller.error_reported.connect(self.on_error_reported)
        self.controller.busy_changed.connect(self.on_busy_changed)
        self.controller.model.add_has_been_modified_listener(self.set_title)

        self.set_title()

    def sizeHint(self) -> QSize:
        return QSize(1200, 800)

    def create_status_bar(self) -> None:
        self.statusBar().showMessage("")
        self.status_graph_pos = QLabel("")
        self.statusBar().addPermanentWidget(self.status_graph_pos)
        self.canvas.graph_pos_changed.connect(self.on_graph_pos_changed)

    def create_actions(self) -> None:
        self.actNew = QAction(
            "&New", self, shortcut="Ctrl+N",
            statusTip="Create a new workflow", triggered=self.on_workflow_new
        )
        self.actSave = QAction(
            "&Save", self, shortcut="Ctrl+S",
            statusTip="Save the workflow to the server", triggered=self.on_workflow_save
        )
        self.actLoad = QAction(
            "&Load...", self, shortcut="Ctrl+O",
            statusTip="Load a workflow from the server", triggered=self.on_workflow_load
        )
        self.actRun = QAction(
            "&Run", self, shortcut="Ctrl+R",
            statusTip="Run the saved workflow", triggered=self.on_workflow_run
        )
        self.actExport = QAction(
            "&Export...", self, shortcut="Ctrl+E",
            statusTip="Export the workflow to a JSON file", triggered=self.on_file_export
        )
        self.actImport = QAction(
            "&Import...", self, shortcut="Ctrl+I",
            statusTip="Import a workflow from a JSON file", triggered=self.on_file_import
        )
        self.actExit = QAction(
            "E&xit", self, shortcut="Ctrl+Q",
            statusTip="Exit application", triggered=self.close
        )

    def create_menus(self) -> None:
        menubar = self.menuBar()
        self.workflowMenu = menubar.addMenu("&Workflow")
        self.workflowMenu.addAction(self.actNew)
        self.workflowMenu.addSeparator()
        self.workflowMenu.addAction(self.actLoad)
        self.workflowMenu.addAction(self.actSave)
        self.workflowMenu.addAction(self.actRun)
        self.workflowMenu.addSeparator()
        self.workflowMenu.addAction(self.actImport)
        self.workflowMenu.addAction(self.actExport)
        self.workflowMenu.addSeparator()
        self.workflowMenu.addAction(self.actExit)

    def create_toolbar(self) -> None:
        toolbar = QToolBar("Workflow", self)
        toolbar.setMovable(False)
        self.name_edit = QLineEdit(self.controller.name)
        self.name_edit.setMaximumWidth(280)
        self.name_edit.editingFinished.connect(self.on_name_edited)
        toolbar.addWidget(self.name_edit)
        toolbar.addSeparator()
        for action in (self.actSave, self.actLoad, self.actRun):
            toolbar.addAction(action)
        self.addToolBar(toolbar)

    def set_title(self) -> None:
        title = f"{WINDOW_TITLE} - {self.controller.name}"
        if self.controller.workflow_id:
            title += f" [{self.controller.workflow_id}]"
        if self.controller.model.has_been_modified:
            title += "*"
        self.setWindowTitle(title)

    def ask_save_changes(self) -> int:
        return QMessageBox.warning(
            self, "About to lose your work?",
            "The workflow has been modified.\n Do you want to save your changes?",
            QMessageBox.Save | QMessageBox.Discard | QMessageBox.Cancel
        )

    def maybe_save(self) -> bool:
        """Offer to save unsaved changes.

        Returns:
            True to continue, False to cancel the operation.
        """
        if not self.controller.model.has_been_modified:
            return True

        res = self.ask_save_changes()
        if res == QMessageBox.Save:
            self.on_workflow_save()
            return True
        return res != QMessageBox.Cancel

    def closeEvent(self, event) -> None:
        if self.controller.model.has_been_modified:
            res = self.ask_save_changes()
            if res == QMessageBox.Cancel:
                event.ignore()
                return
            if res == QMessageBox.Save:
                self.on_name_edited()
                self.controller.save().wait(int(REQUEST_TIMEOUT * 1000))
        self.shutdown()
        event.accept()

    def shutdown(self) -> None:
        self.controller.cancel_all()
        self.controller.client.close()
        logger.info("[MainWindow] Session closed")

    # Workflow actions

    def on_workflow_new(self) -> None:
        if self.maybe_save():
            self.controller.new_workflow()
            self.name_edit.setText(self.controller.name)
            self.set_title()

    def on_workflow_save(self) -> None:
        self.on_name_edited()
        self.controller.save()
        self.statusBar().showMessage("Saving...")

    def on_workflow_load(self) -> None:
        if not self.maybe_save():
            return
        key, ok = QInputDialog.getText(self, "Load workflow", "Workflow id:")
        if ok and key.strip():
            self.controller.load(key.strip())
            self.statusBar().showMessage(f"Loading {key.strip()}...")

    def on_workflow_run(self) -> None:
        if self.controller.run() is not None:
            self.statusBar().showMessage("Starting run...")

    def on_name_edited(self) -> None:
        name = self.name_edit.text().strip()
        if name and name != self.controller.name:
            self.controller.name = name
            self.controller.model.has_been_modified = True
            self.set_title()

    # File actions

    def get_file_dialog_filter(self) -> str:
        return "Workflow (*.json);;All files (*)"

    def on_file_export(self) -> None:
        fname, _filter = QFileDialog.getSaveFileName(
            self, "Export workflow to file", "", self.get_file_dialog_filter()
        )
        if fname == "":
            return
        try:
            export_graph_to_file(
                self.controller.model, fname, self.controller.name, self.controller.description
            )
        except OSError as e:
            logger.error("[MainWindow] Export to %s failed: %s", fname, e)
            self.on_error_reported(f"Could not export to {fname}: {e}")
            return
        self.statusBar().showMessage(f"Exported to {fname}", 5000)

    def on_file_import(self) -> None:
        if not self.maybe_save():
            return
        fname, _filter = QFileDialog.getOpenFileName(
            self, "Import workflow from file", "", self.get_file_dialog_filter()
        )
        if fname == "" or not os.path.isfile(fname):
            return

        self.controller.session.cancel_gesture()
        try:
            report = import_graph_from_file(self.controller.model, fname)
        except (InvalidFileError, OSError, ValueError) as e:
            logger.error("[MainWindow] Import of %s failed: %s", fname, e)
            self.on_error_reported(f"Could not import {os.path.basename(fname)}: {e}")
            return
        self.controller.apply_load_report(report)

    # Controller signals

    def on_saved(self, workflow_id: str) -> None:
        self.statusBar().showMessage(f"Saved workflow {workflow_id}", 5000)
        self.set_title()

    def on_loaded(self, report: LoadReport) -> None:
        self.name_edit.setText(self.controller.name)
        message = f"Loaded {report.node_count} node(s), {report.connection_count} connection(s)"
        if report.errors:
            message += f", {len(report.errors)} dropped"
        self.statusBar().showMessage(message, 5000)
        self.set_title()

    def on_run_finished(self, _result) -> None:
        self.statusBar().showMessage("Run started", 5000)

    def on_validation_reported(self, result: ValidationResult) -> None:
        for warning in result.warnings:
            logger.info("[MainWindow] Validation warning: %s", warning)

    def on_error_reported(self, message: str) -> None:
        self.statusBar().showMessage(message, 8000)
        QMessageBox.warning(self, WINDOW_TITLE, message)

    def on_busy_changed(self, busy: bool) -> None:
        for action in (self.actSave, self.actLoad, self.actRun):
            action.setEnabled(not busy)

    def on_graph_pos_changed(self, x: int, y: int) -> None:
        self.status_graph_pos.setText(f"Graph Pos: [{x}, {y}]")
