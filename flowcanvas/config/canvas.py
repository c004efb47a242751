"""Module: flowcanvas.config.canvas

Author: Michael Economou
Date: 2026-02-02

Canvas configuration: grid snapping, zoom limits, node defaults,
connection handle geometry and the palette drag-data key.
"""

# =====================================
# GRID & ZOOM
# =====================================

GRID_SIZE = 20

DEFAULT_ZOOM = 1.0
ZOOM_MIN = 0.3
ZOOM_MAX = 2.5
ZOOM_IN_FACTOR = 1.1
ZOOM_OUT_FACTOR = 0.9

# =====================================
# NODES
# =====================================

DEFAULT_NODE_WIDTH = 160
DEFAULT_NODE_HEIGHT = 64
DEFAULT_NODE_STATUS = "draft"

# Half-size of the square connection handle centred on the node's right edge
HANDLE_RADIUS = 8

# =====================================
# DRAG & DROP
# =====================================

DRAG_MIME_TYPE = "application/x-autoflow-item"

# Size limits offered by the properties panel
NODE_SIZE_MIN = 40
NODE_SIZE_MAX = 2000
