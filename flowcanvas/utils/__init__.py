"""Utility functions and helpers for flowcanvas.

Qt-free helpers only; Qt helpers live in ``flowcanvas.utils.qt_helpers``
and must be imported explicitly.

Author:
    Michael Economou

Date:
    2026-02-02
"""

from flowcanvas.utils.ids import is_ulid, new_node_id, new_ulid
from flowcanvas.utils.logging_config import get_logger, setup_logging

__all__ = [
    "get_logger",
    "is_ulid",
    "new_node_id",
    "new_ulid",
    "setup_logging",
]
