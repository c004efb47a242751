"""flowcanvas - visual workflow editor.

Packages:
    - core: Qt-free graph model, coordinate transform and interaction state machine
    - persistence: Workflow document codec and JSON file adapter
    - services: Workflow API client and background request orchestration
    - ui: PyQt5 widgets

Author: Michael Economou
Date: 2026-02-02
"""

from flowcanvas.config import APP_VERSION

__version__ = APP_VERSION
