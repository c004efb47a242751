"""Persistence for workflow graphs.

The codec and identity modules are IO-free; ``workflow_json`` is a thin
file adapter on top of them.

Author:
    Michael Economou

Date:
    2026-02-04
"""

from flowcanvas.persistence.codec import (
    InvalidWorkflowError,
    LoadReport,
    ReconciliationError,
    deserialize_workflow,
    find_workflow,
    serialize_workflow,
)
from flowcanvas.persistence.identity import document_identifier

__all__ = [
    "InvalidWorkflowError",
    "LoadReport",
    "ReconciliationError",
    "deserialize_workflow",
    "document_identifier",
    "find_workflow",
    "serialize_workflow",
]
