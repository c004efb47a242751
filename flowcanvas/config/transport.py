"""Module: flowcanvas.config.transport

Author: Michael Economou
Date: 2026-02-02

Workflow API settings. The base URL can be overridden with the
FLOWCANVAS_API_URL environment variable or the --api-url CLI flag.
"""

import os

API_BASE_URL = os.environ.get("FLOWCANVAS_API_URL", "http://localhost:8080")

# Seconds; applies to connect and read
REQUEST_TIMEOUT = 10

WORKFLOWS_ENDPOINT = "/workflows"
WORKFLOW_ENDPOINT = "/workflows/{workflow_id}"
WORKFLOW_STRUCTURE_ENDPOINT = "/workflows/{workflow_id}/structure"
WORKFLOW_RUN_ENDPOINT = "/workflows/{workflow_id}/run"
