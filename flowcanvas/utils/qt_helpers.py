"""Qt event helpers for the canvas widget.

Author:
    Michael Economou

Date:
    2026-02-02
"""

from PyQt5.QtCore import Qt

# Ctrl (Cmd on macOS) or Shift adds/removes a node from the selection.
SELECTION_MODIFIERS = Qt.ControlModifier | Qt.ShiftModifier


def has_selection_modifier(event) -> bool:
    """Check if a selection-toggling modifier is held during a Qt event."""
    return bool(event.modifiers() & SELECTION_MODIFIERS)


def event_point(event) -> tuple[float, float]:
    """Widget-local position of a mouse or drop event as floats.

    Mouse events carry a sub-pixel ``localPos()``; drop events only a
    ``posF()``.
    """
    pos = event.localPos() if hasattr(event, "localPos") else event.posF()
    return pos.x(), pos.y()
