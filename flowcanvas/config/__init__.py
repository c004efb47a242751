"""Module: flowcanvas.config

Author: Michael Economou
Date: 2026-02-02

Configuration package for flowcanvas.

This package organizes configuration into logical modules:
- app: Application info, logging
- canvas: Grid, zoom, node defaults, handle geometry, drag mime type
- transport: Workflow API location, timeouts, endpoints

All settings are re-exported from this module:
    from flowcanvas.config import GRID_SIZE, API_BASE_URL
"""

from flowcanvas.config.app import *  # noqa: F401, F403
from flowcanvas.config.canvas import *  # noqa: F401, F403
from flowcanvas.config.transport import *  # noqa: F401, F403
