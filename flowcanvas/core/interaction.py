"""Pointer and keyboard interaction state machine.

This module provides InteractionSession, the context object for one
editing session. It owns the view transform (pan and zoom), the active
gesture, and a reference to the GraphModel it edits, and it consumes
toolkit-neutral pointer, wheel, key and drop events:

- Pointer-down on a node body starts dragging it, or the whole selection
  if the node is already selected. With a modifier held the node's
  selection membership is toggled instead.
- Pointer-down on a node's connection handle starts drawing a connection
  from the node's centre; releasing over another node connects them.
- Middle-button pointer-down pans the view.
- Wheel ticks zoom around the canvas origin.
- Pointer-down on empty background clears the selection.

The active gesture is a single tagged value (Idle, Dragging,
ConnectingFrom or Panning), so only one gesture can be active at a time.
A drag request pre-empts an active connection or pan; any other request
made while a gesture is active is ignored.

Author:
    Michael Economou

Date:
    2026-02-03
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from flowcanvas.config import DEFAULT_ZOOM, GRID_SIZE, HANDLE_RADIUS
from flowcanvas.core.graph_model import GraphModel, Node
from flowcanvas.core.palette import parse_drag_payload
from flowcanvas.core.transform import Point, snap, to_graph_space, zoom_step

logger = logging.getLogger(__name__)


class PointerButton(Enum):
    LEFT = "left"
    MIDDLE = "middle"
    RIGHT = "right"


class HitKind(Enum):
    BACKGROUND = "background"
    NODE_BODY = "node_body"
    NODE_HANDLE = "node_handle"


class Key(Enum):
    DELETE = "delete"
    BACKSPACE = "backspace"
    ESCAPE = "escape"


@dataclass(frozen=True)
class Hit:
    """What lies under the pointer."""

    kind: HitKind
    node_id: str | None = None


BACKGROUND_HIT = Hit(HitKind.BACKGROUND)


# Gesture states


@dataclass(frozen=True)
class Idle:
    name = "Idle"


@dataclass(frozen=True)
class Dragging:
    """Nodes being dragged, with each node's pointer offset at drag start."""

    node_ids: tuple[str, ...]
    offsets: dict[str, Point] = field(default_factory=dict, hash=False)
    name = "Dragging"


@dataclass(frozen=True)
class ConnectingFrom:
    """Connection being drawn from ``node_id``; ``cursor`` is the free end."""

    node_id: str
    anchor: Point
    cursor: Point
    name = "Connecting"


@dataclass(frozen=True)
class Panning:
    anchor_screen: Point
    anchor_pan: Point
    name = "Panning"


GestureState = Union[Idle, Dragging, ConnectingFrom, Panning]

IDLE = Idle()


class InteractionSession:
    """State of one editing session.

    Attributes:
        model: GraphModel being edited.
        pan: View pan offset in screen pixels.
        zoom: View zoom factor, within [ZOOM_MIN, ZOOM_MAX].
        grid_size: Snap grid used by drops and drags.
        state: Active gesture.
    """

    def __init__(self, model: GraphModel | None = None, grid_size: int = GRID_SIZE) -> None:
        self.model: GraphModel = model if model is not None else GraphModel()
        self.grid_size: int = grid_size

        self.pan: Point = Point()
        self.zoom: float = DEFAULT_ZOOM
        self.state: GestureState = IDLE

        self._view_changed_listeners: list[Callable[[], None]] = []

    # Listeners

    def add_view_changed_listener(self, callback: Callable[[], None]) -> None:
        """Register a callback for pan, zoom and gesture changes."""
        self._view_changed_listeners.append(callback)

    def _notify_view_changed(self) -> None:
        for callback in self._view_changed_listeners:
            callback()

    # Derived state

    @property
    def is_idle(self) -> bool:
        return isinstance(self.state, Idle)

    @property
    def rubber_band(self) -> tuple[Point, Point] | None:
        """Anchor and free end of the connection being drawn, if any."""
        if isinstance(self.state, ConnectingFrom):
            return self.state.anchor, self.state.cursor
        return None

    def graph_point(self, screen_x: float, screen_y: float) -> Point:
        return to_graph_space(screen_x, screen_y, self.pan, self.zoom)

    def hit_test(self, screen_x: float, screen_y: float) -> Hit:
        """Classify what lies under a screen position.

        Handles win over bodies so a handle on an overlapping node stays
        reachable.
        """
        point = self.graph_point(screen_x, screen_y)
        node = self.model.handle_at(point.x, point.y, HANDLE_RADIUS / self.zoom)
        if node is not None:
            return Hit(HitKind.NODE_HANDLE, node.id)
        node = self.model.node_at(point.x, point.y)
        if node is not None:
            return Hit(HitKind.NODE_BODY, node.id)
        return BACKGROUND_HIT

    def inspected_node(self) -> Node | None:
        """Node shown in the properties panel: the first selected one."""
        return self.model.primary_selected()

    # Gesture bookkeeping

    def _begin(self, gesture: GestureState) -> bool:
        current = self.state
        if isinstance(current, Idle):
            self.state = gesture
        elif isinstance(gesture, Dragging) and not isinstance(current, Dragging):
            logger.debug("[Interaction] %s pre-empted by drag", current.name)
            self.state = gesture
        else:
            logger.debug("[Interaction] Ignored %s while %s", gesture.name, current.name)
            return False

        logger.debug("[Interaction] -> %s", gesture.name)
        self._notify_view_changed()
        return True

    def _end(self) -> None:
        if not isinstance(self.state, Idle):
            logger.debug("[Interaction] %s -> Idle", self.state.name)
            self.state = IDLE
            self._notify_view_changed()

    def cancel_gesture(self) -> None:
        """Abandon the active gesture; a half-drawn connection is discarded."""
        self._end()

    # Pointer events

    def pointer_down(
        self,
        screen_x: float,
        screen_y: float,
        button: PointerButton = PointerButton.LEFT,
        modifier: bool = False,
        hit: Hit | None = None,
    ) -> None:
        """Handle a pointer press.

        Args:
            screen_x: Screen X coordinate.
            screen_y: Screen Y coordinate.
            button: Pressed button.
            modifier: True if a selection modifier (Ctrl/Shift) is held.
            hit: What lies under the pointer; hit-tested if omitted.
        """
        if button is PointerButton.MIDDLE:
            self._begin(Panning(Point(screen_x, screen_y), self.pan))
            return
        if button is not PointerButton.LEFT:
            return

        # The held drag owns the selection until release.
        if isinstance(self.state, Dragging):
            logger.debug("[Interaction] Ignored press while Dragging")
            return

        if hit is None:
            hit = self.hit_test(screen_x, screen_y)

        node = self.model.get_node(hit.node_id) if hit.node_id is not None else None
        if hit.kind is not HitKind.BACKGROUND and node is None:
            hit = BACKGROUND_HIT

        if hit.kind is HitKind.BACKGROUND:
            self.model.clear_selection()
            return

        if hit.kind is HitKind.NODE_HANDLE:
            center = node.center
            self._begin(ConnectingFrom(node.id, center, center))
            return

        if modifier:
            self.model.toggle_selection(node.id)
            return

        if not self.model.is_selected(node.id):
            self.model.select_only(node.id)

        pointer = self.graph_point(screen_x, screen_y)
        offsets = {}
        for selected in self.model.selected_nodes():
            offsets[selected.id] = pointer - selected.position
        self._begin(Dragging(tuple(offsets), offsets))

    def pointer_move(self, screen_x: float, screen_y: float) -> None:
        state = self.state

        if isinstance(state, Dragging):
            pointer = self.graph_point(screen_x, screen_y)
            positions = {}
            for node_id in state.node_ids:
                target = pointer - state.offsets[node_id]
                positions[node_id] = snap(target.x, target.y, self.grid_size)
            self.model.move_nodes(positions)

        elif isinstance(state, ConnectingFrom):
            cursor = self.graph_point(screen_x, screen_y)
            self.state = ConnectingFrom(state.node_id, state.anchor, cursor)
            self._notify_view_changed()

        elif isinstance(state, Panning):
            delta = Point(screen_x, screen_y) - state.anchor_screen
            self.pan = state.anchor_pan + delta
            self._notify_view_changed()

    def pointer_up(
        self,
        screen_x: float,
        screen_y: float,
        button: PointerButton = PointerButton.LEFT,
    ) -> None:
        state = self.state

        if isinstance(state, Panning):
            if button is PointerButton.MIDDLE:
                self._end()
            return

        if button is not PointerButton.LEFT:
            return

        if isinstance(state, ConnectingFrom):
            point = self.graph_point(screen_x, screen_y)
            target = self.model.node_at(point.x, point.y, exclude=state.node_id)
            if target is not None:
                self.model.add_connection(state.node_id, target.id)
            else:
                logger.debug("[Interaction] Connection from %s discarded", state.node_id)
            self._end()

        elif isinstance(state, Dragging):
            # Positions were committed on every move.
            self._end()

    def wheel(self, delta: float) -> None:
        """Zoom one step in (delta > 0) or out (delta < 0).

        The zoom centres on the canvas origin; pan is not compensated.
        """
        if delta == 0:
            return
        zoom = zoom_step(self.zoom, zoom_in=delta > 0)
        if zoom != self.zoom:
            self.zoom = zoom
            self._notify_view_changed()

    # Keyboard

    def key_press(self, key: Key) -> None:
        if key is Key.ESCAPE:
            self.cancel_gesture()
        elif key in (Key.DELETE, Key.BACKSPACE):
            self.delete_selected()

    def delete_selected(self) -> int:
        """Remove every selected node; returns how many were removed."""
        removed = 0
        for node_id in self.model.selected_ids:
            if self.model.remove_node(node_id):
                removed += 1
        return removed

    # Palette drop

    def drop(self, screen_x: float, screen_y: float, payload: Any) -> str | None:
        """Create a node from a palette drag payload at a snapped position.

        Args:
            screen_x: Screen X coordinate of the drop.
            screen_y: Screen Y coordinate of the drop.
            payload: Raw drag payload (bytes, text or dict).

        Returns:
            The new node id, or None if the payload was not usable.
        """
        item = parse_drag_payload(payload)
        if item is None:
            return None

        point = self.graph_point(screen_x, screen_y)
        position = snap(point.x, point.y, self.grid_size)
        return self.model.add_node(item.id, item.label, position, item.data)
