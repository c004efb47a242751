"""Coordinate transform between screen space and graph space.

Screen space is raw pointer coordinates as reported by the input device.
Graph space is the unscaled, unpanned system node positions are stored in.
The view applies the pan offset in screen space before scaling, so the
inverse undoes translation first and scale second.

Drop and drag gestures snap to the grid; connection drawing and panning
use the unsnapped coordinates.

All functions here are pure.

Author:
    Michael Economou

Date:
    2026-02-02
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from flowcanvas.config import GRID_SIZE, ZOOM_IN_FACTOR, ZOOM_MAX, ZOOM_MIN, ZOOM_OUT_FACTOR


@dataclass(frozen=True)
class Point:
    """Immutable 2-D point, used for positions, pan offsets and pointers."""

    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: Point) -> Point:
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Point) -> Point:
        return Point(self.x - other.x, self.y - other.y)

    def as_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y}


def to_graph_space(pointer_x: float, pointer_y: float, pan: Point, zoom: float) -> Point:
    """Convert a screen-space pointer position into graph space.

    Args:
        pointer_x: Screen X coordinate.
        pointer_y: Screen Y coordinate.
        pan: Current pan offset, in screen pixels.
        zoom: Current zoom factor.

    Returns:
        The graph-space point under the pointer.
    """
    return Point((pointer_x - pan.x) / zoom, (pointer_y - pan.y) / zoom)


def to_screen_space(graph_x: float, graph_y: float, pan: Point, zoom: float) -> Point:
    """Convert a graph-space position into screen space (inverse of to_graph_space)."""
    return Point(graph_x * zoom + pan.x, graph_y * zoom + pan.y)


def snap_value(value: float, grid_size: int = GRID_SIZE) -> float:
    """Round a single coordinate to the nearest multiple of grid_size.

    Halves round up, matching browser-style rounding rather than
    Python's round-half-to-even.
    """
    if grid_size <= 0:
        return value
    return math.floor(value / grid_size + 0.5) * grid_size


def snap(graph_x: float, graph_y: float, grid_size: int = GRID_SIZE) -> Point:
    """Snap a graph-space position to the grid.

    Args:
        graph_x: Graph X coordinate.
        graph_y: Graph Y coordinate.
        grid_size: Grid spacing; 0 or less disables snapping.

    Returns:
        The snapped point.
    """
    return Point(snap_value(graph_x, grid_size), snap_value(graph_y, grid_size))


def clamp_zoom(zoom: float) -> float:
    """Clamp a zoom factor into [ZOOM_MIN, ZOOM_MAX]."""
    return max(ZOOM_MIN, min(ZOOM_MAX, zoom))


def zoom_step(zoom: float, zoom_in: bool) -> float:
    """Apply one wheel tick to a zoom factor.

    Zoom is multiplicative: one tick multiplies by ZOOM_IN_FACTOR or
    ZOOM_OUT_FACTOR, and the result is clamped.

    Args:
        zoom: Current zoom factor.
        zoom_in: True for a zoom-in tick, False for zoom-out.

    Returns:
        The new, clamped zoom factor.
    """
    factor = ZOOM_IN_FACTOR if zoom_in else ZOOM_OUT_FACTOR
    return clamp_zoom(zoom * factor)
