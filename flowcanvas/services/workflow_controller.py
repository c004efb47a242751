"""Module: workflow_controller.py

Author: Michael Economou
Date: 2026-02-06

Save, load and run orchestration for one editing session.

WorkflowController owns the session's InteractionSession and the API
client. Each request runs on a WorkflowRequestWorker; results come back
to the controller's thread through queued signals, so the graph model is
only ever read or written on the UI thread:

- save(): snapshot the model, then create the workflow (first save) or
  overwrite its structure
- load(key): fetch the matching document, then rebuild the model from it
- run(): validate the graph (advisory), then start a run

A failed request leaves the model untouched and is reported through
error_reported.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from PyQt5.QtCore import QObject, pyqtSignal, pyqtSlot

from flowcanvas.config import UNTITLED_WORKFLOW_NAME
from flowcanvas.core.graph_model import GraphModel
from flowcanvas.core.graph_validator import GraphValidator, ValidationResult
from flowcanvas.core.interaction import InteractionSession
from flowcanvas.persistence.codec import (
    InvalidWorkflowError,
    LoadReport,
    deserialize_workflow,
    serialize_workflow,
)
from flowcanvas.persistence.identity import document_identifier
from flowcanvas.services.transport import TransportError, WorkflowApiClient
from flowcanvas.services.workflow_worker import WorkflowRequestWorker

logger = logging.getLogger(__name__)


class WorkflowController(QObject):
    """Binds an InteractionSession to the workflow API.

    Signals:
        saved: Workflow id after a successful save.
        loaded: LoadReport after a successful load.
        run_finished: Opaque run result from the server.
        validation_reported: ValidationResult computed before a run.
        error_reported: Readable message for any failure.
        busy_changed: True while at least one request is outstanding.
    """

    saved = pyqtSignal(str)
    loaded = pyqtSignal(object)
    run_finished = pyqtSignal(object)
    validation_reported = pyqtSignal(object)
    error_reported = pyqtSignal(str)
    busy_changed = pyqtSignal(bool)

    def __init__(
        self,
        session: InteractionSession | None = None,
        client: WorkflowApiClient | None = None,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self.session = session if session is not None else InteractionSession()
        self.client = client if client is not None else WorkflowApiClient()

        self.workflow_id: str | None = None
        self.name: str = UNTITLED_WORKFLOW_NAME
        self.description: str = ""

        self._workers: list[WorkflowRequestWorker] = []
        # Bumped whenever the session switches to another workflow
        self._generation = 0

    @property
    def model(self) -> GraphModel:
        return self.session.model

    @property
    def is_busy(self) -> bool:
        return bool(self._workers)

    # Operations

    def new_workflow(self) -> None:
        """Start over with an empty, unsaved workflow."""
        self.session.cancel_gesture()
        self.model.clear()
        self.model.has_been_modified = False
        self.workflow_id = None
        self.name = UNTITLED_WORKFLOW_NAME
        self.description = ""
        self._generation += 1

    def save(self) -> WorkflowRequestWorker:
        """Persist the current graph.

        The payload is captured now; edits made while the request is in
        flight are not part of this save and keep the model modified. If
        the session moves to another workflow before the server answers,
        the result is not adopted.
        """
        payload = serialize_workflow(self.model, self.name, self.description)
        workflow_id = self.workflow_id
        generation = self._generation
        revision = self.model.revision
        client = self.client

        def task() -> str:
            if workflow_id is None:
                created = client.create_workflow(payload)
                new_id = document_identifier(created)
                if new_id is None:
                    raise TransportError("Server did not return an id for the new workflow")
                return new_id
            client.save_structure(workflow_id, payload)
            return workflow_id

        logger.info(
            "[WorkflowController] Saving %s (%d node(s))",
            workflow_id or "new workflow",
            len(payload["nodes"]),
        )
        return self._start(
            "save", task, lambda saved_id: self._on_saved(saved_id, generation, revision)
        )

    def load(self, key: str) -> WorkflowRequestWorker:
        """Fetch the workflow matching ``key`` and load it into the model."""
        client = self.client
        logger.info("[WorkflowController] Loading workflow %s", key)
        return self._start("load", lambda: client.fetch_workflow(key), self._on_fetched)

    def run(self) -> WorkflowRequestWorker | None:
        """Validate the graph and start a run of the saved workflow.

        Validation never blocks the run; its errors are reported and the
        request is issued anyway.

        Returns:
            The request worker, or None if the workflow was never saved.
        """
        if self.workflow_id is None:
            self.error_reported.emit("Save the workflow before running it")
            return None

        result = GraphValidator(self.model).validate()
        self.validation_reported.emit(result)
        if not result.is_valid:
            self.error_reported.emit("Validation: " + "; ".join(result.errors))

        workflow_id = self.workflow_id
        client = self.client
        logger.info("[WorkflowController] Running workflow %s", workflow_id)
        return self._start("run", lambda: client.run_workflow(workflow_id), self._on_run_finished)

    def validate(self) -> ValidationResult:
        return GraphValidator(self.model).validate()

    def cancel_all(self, wait_ms: int = 2000) -> None:
        """Cancel outstanding requests and wait for their threads to stop.

        Results of cancelled requests are discarded.
        """
        workers = list(self._workers)
        for worker in workers:
            worker.request_cancel()
        for worker in workers:
            if not worker.wait(wait_ms):
                logger.warning(
                    "[WorkflowController] %s request still running after %dms",
                    worker.operation,
                    wait_ms,
                )
        if workers:
            logger.info("[WorkflowController] Cancelled %d request(s)", len(workers))

    # Worker plumbing

    def _start(
        self,
        operation: str,
        task: Callable[[], Any],
        on_success: Callable[[Any], None],
    ) -> WorkflowRequestWorker:
        worker = WorkflowRequestWorker(operation, task, parent=self)
        worker.success_handler = on_success
        worker.finished_work.connect(self._on_worker_result)
        worker.error.connect(self._on_worker_error)
        worker.finished.connect(self._on_worker_done)

        was_busy = self.is_busy
        self._workers.append(worker)
        if not was_busy:
            self.busy_changed.emit(True)

        worker.start()
        return worker

    @pyqtSlot(object)
    def _on_worker_result(self, data: Any) -> None:
        worker = self.sender()
        if not isinstance(worker, WorkflowRequestWorker) or worker.is_cancelled:
            return
        if worker.success_handler is not None:
            worker.success_handler(data)

    @pyqtSlot(str)
    def _on_worker_error(self, message: str) -> None:
        worker = self.sender()
        if isinstance(worker, WorkflowRequestWorker) and worker.is_cancelled:
            return
        self.error_reported.emit(message)

    @pyqtSlot()
    def _on_worker_done(self) -> None:
        worker = self.sender()
        if worker in self._workers:
            self._workers.remove(worker)
            worker.deleteLater()
        if not self.is_busy:
            self.busy_changed.emit(False)

    # Result handlers (UI thread)

    def _on_saved(self, workflow_id: str, generation: int, revision: int) -> None:
        logger.info("[WorkflowController] Saved workflow %s", workflow_id)
        if generation != self._generation:
            logger.info(
                "[WorkflowController] Session moved on, %s not adopted", workflow_id
            )
            self.saved.emit(workflow_id)
            return

        self.workflow_id = workflow_id
        if self.model.revision == revision:
            self.model.has_been_modified = False
        else:
            logger.debug("[WorkflowController] Graph changed during save, still modified")
        self.saved.emit(workflow_id)

    def _on_fetched(self, document: dict[str, Any]) -> None:
        self.session.cancel_gesture()
        try:
            report = deserialize_workflow(document, self.model)
        except InvalidWorkflowError as e:
            logger.error("[WorkflowController] Could not load workflow: %s", e)
            self.error_reported.emit(f"Could not load workflow: {e}")
            return
        self.apply_load_report(report)

    def apply_load_report(self, report: LoadReport) -> None:
        """Adopt a loaded document's identity and announce the load."""
        self.workflow_id = report.workflow_id
        self.name = report.name or UNTITLED_WORKFLOW_NAME
        self.description = report.description
        self._generation += 1
        if not report.is_complete:
            self.error_reported.emit(
                f"{len(report.errors)} connection(s) could not be restored: "
                + "; ".join(str(error) for error in report.errors)
            )
        self.loaded.emit(report)

    def _on_run_finished(self, result: Any) -> None:
        logger.info("[WorkflowController] Run accepted for %s", self.workflow_id)
        self.run_finished.emit(result)
