"""JSON file adapter for workflow payloads.

Exports the save payload produced by ``serialize_workflow`` to disk and
reads it back for ``deserialize_workflow``. Kept outside the codec so
that the codec stays IO-free.

Author:
    Michael Economou

Date:
    2026-02-05
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any

from flowcanvas.core.graph_model import GraphModel
from flowcanvas.persistence.codec import LoadReport, deserialize_workflow, serialize_workflow

logger = logging.getLogger(__name__)


class InvalidFileError(Exception):
    """Raised when file loading fails due to invalid format or content."""


def read_workflow_from_file(filename: str) -> dict[str, Any]:
    """Read a workflow dict from disk."""
    with open(filename, encoding="utf-8") as file:
        raw_data = file.read()

    try:
        data = json.loads(raw_data)
    except json.JSONDecodeError:
        raise InvalidFileError(f"{os.path.basename(filename)} is not a valid JSON file") from None

    if not isinstance(data, dict):
        raise InvalidFileError(f"{os.path.basename(filename)} does not contain a JSON object")
    return data


def write_workflow_to_file(payload: dict[str, Any], filename: str) -> None:
    """Write a workflow dict to disk."""
    with open(filename, "w", encoding="utf-8") as file:
        file.write(json.dumps(payload, indent=4))


def export_graph_to_file(
    model: GraphModel, filename: str, name: str = "", description: str = ""
) -> None:
    """Serialize a graph and write it to disk."""
    write_workflow_to_file(serialize_workflow(model, name, description), filename)
    logger.info("[WorkflowJson] Exported %d node(s) to %s", len(model.nodes), filename)


def import_graph_from_file(model: GraphModel, filename: str) -> LoadReport:
    """Read a workflow file and load it into the graph."""
    return deserialize_workflow(read_workflow_from_file(filename), model)
