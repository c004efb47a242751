"""Module: workflow_worker.py

Author: Michael Economou
Date: 2026-02-06

Background worker for workflow API requests.

This module provides:
- CancellableMixin: Reusable cancellation logic for QThread workers
- WorkerResult: Success/data/error container
- WorkflowRequestWorker: Runs one blocking API call off the UI thread

A request already on the wire cannot be aborted; cancelling a worker
means its outcome is discarded instead of delivered.

Usage:
    worker = WorkflowRequestWorker("save", lambda: client.save_structure(wid, payload))
    worker.finished_work.connect(on_result)
    worker.error.connect(on_error)
    worker.start()
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from PyQt5.QtCore import QMutex, QMutexLocker, QObject, QThread, pyqtSignal

from flowcanvas.services.transport import TransportError

logger = logging.getLogger(__name__)


class CancellableMixin:
    """Cancellation flag shared between the UI thread and a request thread.

    The flag is guarded by a QMutex; once set it stays set, and the
    worker drops whatever its request returns.
    """

    def __init__(self) -> None:
        self._cancel_mutex = QMutex()
        self._cancelled = False

    def request_cancel(self) -> None:
        """Mark the request as abandoned; safe to call from any thread."""
        with QMutexLocker(self._cancel_mutex):
            self._cancelled = True

    @property
    def is_cancelled(self) -> bool:
        with QMutexLocker(self._cancel_mutex):
            return self._cancelled


class WorkerResult:
    """Container for worker execution results."""

    def __init__(
        self,
        success: bool = True,
        data: Any = None,
        error_message: str | None = None,
    ) -> None:
        self.success = success
        self.data = data
        self.error_message = error_message

    def __bool__(self) -> bool:
        return self.success

    def __repr__(self) -> str:
        if self.success:
            return f"WorkerResult(success=True, data={type(self.data).__name__})"
        return f"WorkerResult(success=False, error={self.error_message!r})"


class WorkflowRequestWorker(QThread, CancellableMixin):
    """Runs a single workflow API call in a background thread.

    Signals:
        finished_work: Emitted with the call's return value on success.
        error: Emitted with a readable message on failure.

    Attributes:
        operation: Short name of the request ("save", "load", "run").
        success_handler: Optional callback the owner runs with the result.
    """

    finished_work = pyqtSignal(object)
    error = pyqtSignal(str)

    def __init__(
        self,
        operation: str,
        task: Callable[[], Any],
        parent: QObject | None = None,
    ) -> None:
        QThread.__init__(self, parent)
        CancellableMixin.__init__(self)

        self.operation = operation
        self._task = task
        self.success_handler: Callable[[Any], None] | None = None
        self.result: WorkerResult | None = None

    def run(self) -> None:
        if self.is_cancelled:
            return

        try:
            data = self._task()
        except TransportError as e:
            logger.error("[WorkflowRequestWorker] %s failed: %s", self.operation, e)
            self.result = WorkerResult(success=False, error_message=str(e))
        except Exception as e:
            logger.exception("[WorkflowRequestWorker] %s failed unexpectedly", self.operation)
            self.result = WorkerResult(success=False, error_message=f"{self.operation} failed: {e}")
        else:
            self.result = WorkerResult(data=data)

        if self.is_cancelled:
            logger.debug("[WorkflowRequestWorker] %s cancelled, result discarded", self.operation)
            return

        if self.result:
            self.finished_work.emit(self.result.data)
        else:
            self.error.emit(self.result.error_message)
