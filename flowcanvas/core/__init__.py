"""Core module - Qt-free graph interaction engine.

Classes:
    - Point: Immutable 2-D point
    - Node, Connection: Graph elements
    - GraphModel: Container for nodes, connections and selection
    - InteractionSession: Pointer/keyboard state machine and view transform
    - GraphValidator: Pre-run structural checks

Author: Michael Economou
Date: 2026-02-02
"""

from flowcanvas.core.transform import Point, snap, to_graph_space, to_screen_space, zoom_step
from flowcanvas.core.graph_model import (
    Connection,
    GraphModel,
    Node,
    NodeStatus,
    NodeType,
    Size,
)
from flowcanvas.core.palette import TOOL_ITEMS, ToolItem
from flowcanvas.core.interaction import (
    ConnectingFrom,
    Dragging,
    Hit,
    HitKind,
    Idle,
    InteractionSession,
    Key,
    Panning,
    PointerButton,
)
from flowcanvas.core.graph_validator import GraphValidator, ValidationResult

__all__ = [
    "TOOL_ITEMS",
    "ConnectingFrom",
    "Connection",
    "Dragging",
    "GraphModel",
    "GraphValidator",
    "Hit",
    "HitKind",
    "Idle",
    "InteractionSession",
    "Key",
    "Node",
    "NodeStatus",
    "NodeType",
    "Panning",
    "Point",
    "PointerButton",
    "Size",
    "ToolItem",
    "ValidationResult",
    "snap",
    "to_graph_space",
    "to_screen_space",
    "zoom_step",
]
