"""Module: palette.py

Author: Michael Economou
Date: 2026-02-02

Static tool palette and the drag-source payload exchanged between the
palette and the canvas.

The payload is ``{"id": tool_type_id, "label": str, "data": {...}}``
encoded as JSON under DRAG_MIME_TYPE. ``data`` is optional.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any

from flowcanvas.core.graph_model import NodeType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolItem:
    """A palette entry; ``id`` becomes the dropped node's type."""

    id: str
    label: str
    data: dict[str, Any] = field(default_factory=dict)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"id": self.id, "label": self.label}
        if self.data:
            payload["data"] = dict(self.data)
        return payload


TOOL_ITEMS: tuple[ToolItem, ...] = (
    ToolItem(NodeType.TASK.value, "Task"),
    ToolItem(NodeType.DECISION.value, "Decision"),
    ToolItem(NodeType.START.value, "Start"),
    ToolItem(NodeType.END.value, "End"),
    ToolItem(NodeType.AI.value, "AI", {"prompt": "", "input": ""}),
)


def encode_drag_payload(item: ToolItem) -> bytes:
    """Encode a palette item for the platform drag-data channel."""
    return json.dumps(item.to_payload()).encode("utf-8")


def parse_drag_payload(raw: bytes | str | dict | None) -> ToolItem | None:
    """Decode a drag payload into a ToolItem.

    Accepts the raw bytes or text from the drag-data channel, or an
    already decoded dict.

    Returns:
        The decoded ToolItem, or None if the payload is empty or malformed.
    """
    if not raw:
        return None

    payload: Any = raw
    if isinstance(raw, (bytes, bytearray)):
        try:
            payload = raw.decode("utf-8")
        except UnicodeDecodeError:
            logger.warning("[Palette] Drag payload is not UTF-8")
            return None
    if isinstance(payload, str):
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError:
            logger.warning("[Palette] Drag payload is not valid JSON")
            return None

    if not isinstance(payload, dict):
        logger.warning("[Palette] Drag payload is not an object")
        return None

    tool_id = payload.get("id")
    if not isinstance(tool_id, str) or not tool_id:
        logger.warning("[Palette] Drag payload has no tool id")
        return None

    label = payload.get("label")
    data = payload.get("data")
    return ToolItem(
        id=tool_id,
        label=label if isinstance(label, str) else tool_id,
        data=dict(data) if isinstance(data, dict) else {},
    )
