"""Module: flowcanvas.config.app

Author: Michael Economou
Date: 2026-02-02

Application-level configuration: app info and logging settings.
"""

# =====================================
# APPLICATION INFORMATION
# =====================================

APP_NAME = "flowcanvas"
APP_VERSION = "1.0.0"
APP_AUTHOR = "Michael Economou"

# Window
WINDOW_TITLE = "Workflow Builder"
UNTITLED_WORKFLOW_NAME = "Untitled workflow"

# =====================================
# LOGGING CONFIGURATION
# =====================================

LOG_LEVEL = "INFO"
LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_DIR = "logs"
LOG_TO_FILE = True
