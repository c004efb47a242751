"""Services package - workflow API access and request orchestration.

Author: Michael Economou
Date: 2026-02-06
"""

from flowcanvas.services.transport import (
    TransportError,
    WorkflowApiClient,
    WorkflowNotFoundError,
)
from flowcanvas.services.workflow_controller import WorkflowController
from flowcanvas.services.workflow_worker import WorkflowRequestWorker

__all__ = [
    "TransportError",
    "WorkflowApiClient",
    "WorkflowController",
    "WorkflowNotFoundError",
    "WorkflowRequestWorker",
]
