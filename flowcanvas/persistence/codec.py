"""Workflow document codec.

Converts a GraphModel to the transport payload sent on save, and rebuilds
a GraphModel from a fetched workflow document.

Save payload::

    {
        "name": str,
        "description": str,
        "nodes": [{"id", "canvasId", "type", "label", "position": {"x", "y"},
                   "width", "height", "data", "lambdaName", "status"}],
        "connections": [{"source", "target", "label"}],
    }

Loading reconciles node identity across schema revisions (see
``flowcanvas.persistence.identity``): every node gets a normalized,
collision-free id, and each connection endpoint is resolved through the
aliases the old document may have used. A connection that cannot be
resolved is dropped and recorded on the LoadReport; loading itself does
not fail because of it.

Author:
    Michael Economou

Date:
    2026-02-04
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from flowcanvas.config import DEFAULT_NODE_HEIGHT, DEFAULT_NODE_STATUS, DEFAULT_NODE_WIDTH
from flowcanvas.core.graph_model import (
    Connection,
    GraphModel,
    Node,
    NodeType,
    Size,
    resolve_lambda_name,
)
from flowcanvas.core.transform import Point
from flowcanvas.persistence.identity import (
    WORKFLOW_IDENTIFIER_ACCESSORS,
    build_reconciliation_map,
    derive_node_identifier,
    document_identifier,
    resolve_endpoint,
)
from flowcanvas.utils.ids import new_node_id

logger = logging.getLogger(__name__)


class InvalidWorkflowError(ValueError):
    """Raised when a document is not a workflow object at all."""


@dataclass
class ReconciliationError:
    """A persisted connection that was dropped during load.

    Attributes:
        index: Position of the connection in the persisted list.
        source: Raw stored source value.
        target: Raw stored target value.
        reason: Human-readable cause.
    """

    index: int
    source: Any
    target: Any
    reason: str

    def __str__(self) -> str:
        return f"connection #{self.index} ({self.source!r} -> {self.target!r}): {self.reason}"


@dataclass
class LoadReport:
    """Outcome of deserialize_workflow."""

    workflow_id: str | None = None
    name: str = ""
    description: str = ""
    node_count: int = 0
    connection_count: int = 0
    synthesized_ids: list[str] = field(default_factory=list)
    errors: list[ReconciliationError] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        return not self.errors


# Serialization


def serialize_node(node: Node) -> dict[str, Any]:
    return {
        "id": node.id,
        "canvasId": node.id,
        "type": node.type,
        "label": node.label,
        "position": {"x": node.position.x, "y": node.position.y},
        "width": node.size.width,
        "height": node.size.height,
        "data": dict(node.data),
        "lambdaName": resolve_lambda_name(node),
        "status": node.status,
    }


def serialize_connection(connection: Connection) -> dict[str, Any]:
    return {
        "source": connection.from_id,
        "target": connection.to_id,
        "label": connection.label,
    }


def serialize_workflow(model: GraphModel, name: str = "", description: str = "") -> dict[str, Any]:
    """Build the save payload for a graph.

    Args:
        model: Graph to serialize.
        name: Workflow name.
        description: Workflow description.

    Returns:
        JSON-ready payload dictionary.
    """
    return {
        "name": name,
        "description": description,
        "nodes": [serialize_node(node) for node in model.nodes],
        "connections": [serialize_connection(conn) for conn in model.connections],
    }


# Deserialization


def _as_number(value: Any, default: float) -> float:
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return default
    return default


def _read_position(raw: Mapping[str, Any]) -> Point:
    position = raw.get("position")
    # The first canvas revision stored x/y directly on the node.
    source = position if isinstance(position, Mapping) else raw
    return Point(_as_number(source.get("x"), 0), _as_number(source.get("y"), 0))


def _read_size(raw: Mapping[str, Any]) -> Size:
    size = raw.get("size")
    source = size if isinstance(size, Mapping) else raw
    return Size(
        _as_number(source.get("width"), DEFAULT_NODE_WIDTH),
        _as_number(source.get("height"), DEFAULT_NODE_HEIGHT),
    )


def deserialize_node(raw: Mapping[str, Any], node_id: str) -> Node:
    """Rebuild a Node from a persisted dict, defaulting missing fields.

    Legacy task entries carry ``config`` instead of ``data`` and ``name``
    instead of ``label``; both are accepted.
    """
    data = raw.get("data")
    if not isinstance(data, Mapping):
        data = raw.get("config")

    label = raw.get("label")
    if not isinstance(label, str) or not label:
        name = raw.get("name")
        label = name if isinstance(name, str) else ""

    node_type = raw.get("type")
    status = raw.get("status")
    lambda_name = raw.get("lambdaName")

    return Node(
        id=node_id,
        type=node_type if isinstance(node_type, str) and node_type else NodeType.TASK.value,
        label=label,
        position=_read_position(raw),
        size=_read_size(raw),
        data=dict(data) if isinstance(data, Mapping) else {},
        status=status if isinstance(status, str) and status else DEFAULT_NODE_STATUS,
        lambda_name=lambda_name if isinstance(lambda_name, str) and lambda_name else None,
    )


def _persisted_nodes(document: Mapping[str, Any]) -> list[Any]:
    nodes = document.get("nodes")
    if isinstance(nodes, list) and nodes:
        return nodes
    # Documents from before the canvas only have a task list.
    tasks = document.get("tasks")
    if isinstance(tasks, list) and tasks:
        return tasks
    return nodes if isinstance(nodes, list) else []


def _connection_endpoint(raw: Mapping[str, Any], key: str, legacy_key: str) -> Any:
    value = raw.get(key)
    return value if value is not None else raw.get(legacy_key)


def _connection_label(raw: Mapping[str, Any]) -> str:
    label = raw.get("label")
    if isinstance(label, str):
        return label
    meta = raw.get("metadata")
    if isinstance(meta, Mapping) and isinstance(meta.get("label"), str):
        return meta["label"]
    return ""


def deserialize_workflow(document: Mapping[str, Any], model: GraphModel) -> LoadReport:
    """Replace the model's contents with a persisted workflow document.

    Steps:
        1. Derive each node's original identifier by priority
           (id, canvasId, _id, name), or synthesize one.
        2. Rebuild every node with defaults for missing fields; a node
           whose identifier is already taken gets a synthesized id.
        3. Map every alias of every node to its normalized id.
        4. Resolve each connection's endpoints through that map, falling
           back to the raw value if it already is a loaded node's id;
           unresolvable connections are dropped and reported.
        5. Swap nodes and connections into the model in one step and
           clear the selection.

    Args:
        document: Workflow document as fetched from the store.
        model: Graph to load into.

    Returns:
        LoadReport listing synthesized ids and dropped connections.

    Raises:
        InvalidWorkflowError: If ``document`` is not a mapping.
    """
    if not isinstance(document, Mapping):
        raise InvalidWorkflowError(f"Workflow document must be an object, got {type(document).__name__}")

    report = LoadReport(
        workflow_id=document_identifier(document),
        name=document.get("name") if isinstance(document.get("name"), str) else "",
        description=(
            document.get("description") if isinstance(document.get("description"), str) else ""
        ),
    )

    loaded: list[tuple[Mapping[str, Any], str]] = []
    nodes: list[Node] = []
    used_ids: set[str] = set()

    for index, raw in enumerate(_persisted_nodes(document)):
        if not isinstance(raw, Mapping):
            logger.warning("[Codec] Skipped node #%d, not an object", index)
            continue

        node_id = derive_node_identifier(raw)
        if node_id is None or node_id in used_ids:
            if node_id is not None:
                logger.warning("[Codec] Node id %s is used twice, assigning a fresh id", node_id)
            node_id = new_node_id()
            while node_id in used_ids:
                node_id = new_node_id()
            report.synthesized_ids.append(node_id)

        used_ids.add(node_id)
        loaded.append((raw, node_id))
        nodes.append(deserialize_node(raw, node_id))

    reconciliation_map = build_reconciliation_map(loaded)

    connections: list[Connection] = []
    raw_connections = document.get("connections")
    if not isinstance(raw_connections, list):
        raw_connections = []

    for index, raw in enumerate(raw_connections):
        if not isinstance(raw, Mapping):
            error = ReconciliationError(index, None, None, "connection is not an object")
            report.errors.append(error)
            logger.warning("[Codec] Dropped %s", error)
            continue

        source = _connection_endpoint(raw, "source", "from")
        target = _connection_endpoint(raw, "target", "to")
        from_id = resolve_endpoint(source, reconciliation_map, used_ids)
        to_id = resolve_endpoint(target, reconciliation_map, used_ids)

        if from_id is None or to_id is None:
            unresolved = [
                side
                for side, resolved in (("source", from_id), ("target", to_id))
                if resolved is None
            ]
            error = ReconciliationError(
                index, source, target, f"unresolved {' and '.join(unresolved)}"
            )
            report.errors.append(error)
            logger.warning("[Codec] Dropped %s", error)
            continue

        connections.append(Connection(from_id, to_id, _connection_label(raw)))

    model.replace_contents(nodes, connections)
    model.has_been_modified = False

    report.node_count = len(nodes)
    report.connection_count = len(connections)
    logger.info(
        "[Codec] Loaded workflow %s: %d node(s), %d connection(s), %d dropped",
        report.workflow_id,
        report.node_count,
        report.connection_count,
        len(report.errors),
    )
    return report


# Workflow lookup


def find_workflow(documents: Iterable[Mapping[str, Any]], key: str) -> Mapping[str, Any] | None:
    """Locate the document whose identifier matches ``key``.

    Identifier shapes are tried in order across all documents: bare
    string id, wrapped object id, then secondary ids.

    Returns:
        The matching document, or None.
    """
    documents = [doc for doc in documents if isinstance(doc, Mapping)]
    key = key.strip()
    for accessor in WORKFLOW_IDENTIFIER_ACCESSORS:
        for document in documents:
            if accessor.get(document) == key:
                logger.debug("[Codec] Workflow %s matched by %s", key, accessor.name)
                return document
    return None
