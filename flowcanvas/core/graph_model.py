"""Graph model: the authoritative set of nodes and connections.

This module defines Node, Connection and GraphModel. The model owns every
node and connection of the editing session plus the selection set; the
interaction layer only ever holds node ids and derived geometry.

Invariants:
    - Node ids are unique within the session.
    - No connection references a node that is not in the model. Removing a
      node removes every connection touching it before any listener runs.
    - The selection set only contains ids of nodes in the model.

Mutations that target an absent node are skipped and logged, never raised:
the editor must keep working when it acts on a node that was removed in
the meantime.

Author:
    Michael Economou

Date:
    2026-02-02
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from flowcanvas.config import (
    DEFAULT_NODE_HEIGHT,
    DEFAULT_NODE_STATUS,
    DEFAULT_NODE_WIDTH,
    HANDLE_RADIUS,
)
from flowcanvas.core.transform import Point
from flowcanvas.utils.ids import new_node_id

logger = logging.getLogger(__name__)


class NodeType(str, Enum):
    """Built-in node types. Node.type stays a plain string so that types
    written by other producers survive a load/save cycle."""

    TASK = "task"
    DECISION = "decision"
    START = "start"
    END = "end"
    AI = "ai"


class NodeStatus(str, Enum):
    """Node status values written by the editor and the run endpoint."""

    DRAFT = "draft"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class Size:
    width: float = DEFAULT_NODE_WIDTH
    height: float = DEFAULT_NODE_HEIGHT


@dataclass
class Node:
    """A typed node placed on the canvas.

    Attributes:
        id: Session-unique identifier.
        type: Node type, usually a NodeType value.
        label: Display label.
        position: Top-left corner in graph space.
        size: Width and height in graph units.
        data: Opaque key-value payload (prompt, input, execution binding...).
        status: Node status, "draft" for nodes created in the editor.
        lambda_name: Execution binding name, if set directly on the node.
    """

    id: str
    type: str
    label: str = ""
    position: Point = field(default_factory=Point)
    size: Size = field(default_factory=Size)
    data: dict[str, Any] = field(default_factory=dict)
    status: str = DEFAULT_NODE_STATUS
    lambda_name: str | None = None

    @property
    def center(self) -> Point:
        return Point(
            self.position.x + self.size.width / 2,
            self.position.y + self.size.height / 2,
        )

    @property
    def handle_position(self) -> Point:
        """Centre of the connection handle, on the middle of the right edge."""
        return Point(self.position.x + self.size.width, self.position.y + self.size.height / 2)

    def contains(self, x: float, y: float) -> bool:
        """Axis-aligned bounding box hit test, edges inclusive."""
        return (
            self.position.x <= x <= self.position.x + self.size.width
            and self.position.y <= y <= self.position.y + self.size.height
        )

    def handle_contains(self, x: float, y: float, radius: float = HANDLE_RADIUS) -> bool:
        handle = self.handle_position
        return abs(x - handle.x) <= radius and abs(y - handle.y) <= radius


@dataclass
class Connection:
    """Directed, labeled connection between two nodes.

    ``from_id``/``to_id`` stand for the ``from``/``to`` endpoints.
    """

    from_id: str
    to_id: str
    label: str = ""

    @property
    def key(self) -> tuple[str, str]:
        return (self.from_id, self.to_id)

    def touches(self, node_id: str) -> bool:
        return node_id in (self.from_id, self.to_id)


def resolve_lambda_name(node: Node) -> str:
    """Execution binding of a node.

    Producers have written it on the node itself or under
    ``data["lambdaName"]``; the node's own field wins.
    """
    if node.lambda_name:
        return node.lambda_name
    value = node.data.get("lambdaName") if isinstance(node.data, dict) else None
    return value if isinstance(value, str) else ""


class GraphModel:
    """Container for the nodes, connections and selection of one session.

    Listeners registered with add_changed_listener are called with no
    arguments after every mutation of nodes or connections; listeners
    registered with add_selection_changed_listener after the selection
    set changes.

    Attributes:
        has_been_modified: True once the graph changed since the last
            save or load.
    """

    NODE_FIELDS = frozenset({"type", "label", "position", "size", "data", "status", "lambda_name"})
    CONNECTION_FIELDS = frozenset({"label"})

    def __init__(self) -> None:
        self._nodes: dict[str, Node] = {}
        self._connections: list[Connection] = []
        # dict used as an ordered set: the first key is the inspected node
        self._selection: dict[str, None] = {}

        self._has_been_modified: bool = False
        self._revision: int = 0

        self._has_been_modified_listeners: list[Callable[[], None]] = []
        self._changed_listeners: list[Callable[[], None]] = []
        self._selection_changed_listeners: list[Callable[[], None]] = []

    # Modification state

    @property
    def has_been_modified(self) -> bool:
        return self._has_been_modified

    @has_been_modified.setter
    def has_been_modified(self, value: bool) -> None:
        """Update modification state; listeners fire only on the
        transition from unmodified to modified."""
        if not self._has_been_modified and value:
            self._has_been_modified = value
            for callback in self._has_been_modified_listeners:
                callback()

        self._has_been_modified = value

    @property
    def revision(self) -> int:
        """Counter bumped by every content change; selection does not count."""
        return self._revision

    # Event listener management

    def add_has_been_modified_listener(self, callback: Callable[[], None]) -> None:
        self._has_been_modified_listeners.append(callback)

    def add_changed_listener(self, callback: Callable[[], None]) -> None:
        self._changed_listeners.append(callback)

    def add_selection_changed_listener(self, callback: Callable[[], None]) -> None:
        self._selection_changed_listeners.append(callback)

    def _notify_changed(self) -> None:
        self._revision += 1
        self.has_been_modified = True
        for callback in self._changed_listeners:
            callback()

    def _notify_selection_changed(self) -> None:
        for callback in self._selection_changed_listeners:
            callback()

    # Queries

    @property
    def nodes(self) -> list[Node]:
        """All nodes, in insertion order."""
        return list(self._nodes.values())

    @property
    def connections(self) -> list[Connection]:
        return self._connections.copy()

    def get_node(self, node_id: str) -> Node | None:
        return self._nodes.get(node_id)

    def has_node(self, node_id: str) -> bool:
        return node_id in self._nodes

    def connections_of(self, node_id: str) -> list[Connection]:
        """Connections where the node is either endpoint."""
        return [conn for conn in self._connections if conn.touches(node_id)]

    def node_at(self, x: float, y: float, exclude: str | None = None) -> Node | None:
        """Return the first node whose bounding box contains (x, y).

        Overlapping boxes resolve to the first node in insertion order.

        Args:
            x: Graph X coordinate.
            y: Graph Y coordinate.
            exclude: Node id to skip, typically a connection's origin.
        """
        for node in self._nodes.values():
            if node.id != exclude and node.contains(x, y):
                return node
        return None

    def handle_at(self, x: float, y: float, radius: float = HANDLE_RADIUS) -> Node | None:
        """Return the first node whose connection handle contains (x, y)."""
        for node in self._nodes.values():
            if node.handle_contains(x, y, radius):
                return node
        return None

    # Node mutations

    def add_node(
        self,
        node_type: str,
        label: str = "",
        position: Point | None = None,
        data: dict[str, Any] | None = None,
        size: Size | None = None,
        status: str = DEFAULT_NODE_STATUS,
        lambda_name: str | None = None,
    ) -> str:
        """Create a node with a fresh session-unique id.

        Returns:
            The id of the new node.
        """
        node_id = new_node_id()
        while node_id in self._nodes:
            node_id = new_node_id()

        node = Node(
            id=node_id,
            type=str(node_type.value if isinstance(node_type, NodeType) else node_type),
            label=label,
            position=position if position is not None else Point(),
            size=size if size is not None else Size(),
            data=dict(data) if data else {},
            status=status,
            lambda_name=lambda_name,
        )
        self._nodes[node_id] = node
        logger.debug("[GraphModel] Added node %s (%s)", node_id, node.type)
        self._notify_changed()
        return node_id

    def update_node(self, node_id: str, **fields: Any) -> bool:
        """Replace only the given fields of a node.

        Args:
            node_id: Node to update.
            **fields: Any of NODE_FIELDS.

        Returns:
            True if the node was updated, False if it does not exist.

        Raises:
            ValueError: If an unknown field name is passed.
        """
        unknown = set(fields) - self.NODE_FIELDS
        if unknown:
            raise ValueError(f"Unknown node fields: {', '.join(sorted(unknown))}")

        node = self._nodes.get(node_id)
        if node is None:
            logger.warning("[GraphModel] update_node skipped, no node %s", node_id)
            return False

        self._nodes[node_id] = replace(node, **fields)
        self._notify_changed()
        return True

    def move_nodes(self, positions: dict[str, Point]) -> None:
        """Set the position of several nodes with a single change notification.

        Ids that are no longer in the model are skipped.
        """
        moved = False
        for node_id, position in positions.items():
            node = self._nodes.get(node_id)
            if node is None or node.position == position:
                continue
            self._nodes[node_id] = replace(node, position=position)
            moved = True

        if moved:
            self._notify_changed()

    def remove_node(self, node_id: str) -> bool:
        """Remove a node, every connection touching it, and its selection entry.

        Returns:
            True if the node existed.
        """
        if node_id not in self._nodes:
            logger.warning("[GraphModel] remove_node skipped, no node %s", node_id)
            return False

        remaining = [conn for conn in self._connections if not conn.touches(node_id)]
        removed_count = len(self._connections) - len(remaining)

        was_selected = node_id in self._selection
        del self._nodes[node_id]
        self._connections = remaining
        self._selection.pop(node_id, None)

        logger.debug(
            "[GraphModel] Removed node %s and %d connection(s)", node_id, removed_count
        )
        self._notify_changed()
        if was_selected:
            self._notify_selection_changed()
        return True

    # Connection mutations

    def add_connection(self, from_id: str, to_id: str, label: str = "") -> Connection | None:
        """Connect two existing nodes.

        Duplicate connections and self-loops are accepted.

        Returns:
            The new Connection, or None if either endpoint is absent.
        """
        missing = [node_id for node_id in (from_id, to_id) if node_id not in self._nodes]
        if missing:
            logger.warning(
                "[GraphModel] Connection %s -> %s rejected, unknown node(s): %s",
                from_id,
                to_id,
                ", ".join(missing),
            )
            return None

        connection = Connection(from_id, to_id, label)
        self._connections.append(connection)
        logger.debug("[GraphModel] Connected %s -> %s", from_id, to_id)
        self._notify_changed()
        return connection

    def update_connection(self, key: tuple[str, str], **fields: Any) -> int:
        """Update every connection whose (from, to) pair equals key.

        Connections sharing both endpoints cannot be addressed separately.

        Returns:
            Number of connections updated.

        Raises:
            ValueError: If an unknown field name is passed.
        """
        unknown = set(fields) - self.CONNECTION_FIELDS
        if unknown:
            raise ValueError(f"Unknown connection fields: {', '.join(sorted(unknown))}")

        updated = 0
        for index, conn in enumerate(self._connections):
            if conn.key == key:
                self._connections[index] = replace(conn, **fields)
                updated += 1

        if updated:
            self._notify_changed()
        else:
            logger.warning("[GraphModel] update_connection skipped, no connection %s -> %s", *key)
        return updated

    def remove_connection(self, from_id: str, to_id: str) -> int:
        """Remove every connection with the given endpoint pair.

        Returns:
            Number of connections removed.
        """
        remaining = [conn for conn in self._connections if conn.key != (from_id, to_id)]
        removed = len(self._connections) - len(remaining)
        if removed:
            self._connections = remaining
            self._notify_changed()
        return removed

    # Selection management

    @property
    def selected_ids(self) -> list[str]:
        return list(self._selection)

    def selected_nodes(self) -> list[Node]:
        return [self._nodes[node_id] for node_id in self._selection]

    def primary_selected(self) -> Node | None:
        """First selected node, the one the properties panel shows."""
        for node_id in self._selection:
            return self._nodes[node_id]
        return None

    def is_selected(self, node_id: str) -> bool:
        return node_id in self._selection

    def select_only(self, node_id: str) -> None:
        """Replace the selection with a single node."""
        if node_id not in self._nodes:
            logger.warning("[GraphModel] select_only skipped, no node %s", node_id)
            return
        if list(self._selection) == [node_id]:
            return
        self._selection = {node_id: None}
        self._notify_selection_changed()

    def toggle_selection(self, node_id: str) -> None:
        """Add the node to the selection, or remove it if already selected."""
        if node_id in self._selection:
            del self._selection[node_id]
        elif node_id in self._nodes:
            self._selection[node_id] = None
        else:
            logger.warning("[GraphModel] toggle_selection skipped, no node %s", node_id)
            return
        self._notify_selection_changed()

    def clear_selection(self) -> None:
        if not self._selection:
            return
        self._selection = {}
        self._notify_selection_changed()

    # Bulk operations

    def replace_contents(self, nodes: Iterable[Node], connections: Iterable[Connection]) -> None:
        """Swap in a complete node and connection set and clear the selection.

        Both sets are built before either is assigned, so listeners never
        observe a half-replaced graph. Connections whose endpoints are not
        among ``nodes`` are discarded.

        Raises:
            ValueError: If two nodes share an id.
        """
        new_nodes: dict[str, Node] = {}
        for node in nodes:
            if node.id in new_nodes:
                raise ValueError(f"Duplicate node id: {node.id}")
            new_nodes[node.id] = node

        new_connections = []
        for conn in connections:
            if conn.from_id in new_nodes and conn.to_id in new_nodes:
                new_connections.append(conn)
            else:
                logger.warning(
                    "[GraphModel] Dropped dangling connection %s -> %s", conn.from_id, conn.to_id
                )

        had_selection = bool(self._selection)
        self._nodes = new_nodes
        self._connections = new_connections
        self._selection = {}
        self._revision += 1

        for callback in self._changed_listeners:
            callback()
        if had_selection:
            self._notify_selection_changed()

    def clear(self) -> None:
        """Remove all nodes and connections and reset the modification state."""
        self.replace_contents([], [])
        self.has_been_modified = False
