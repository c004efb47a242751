#!/usr/bin/env python3
"""
Module: flowcanvas.__main__

Author: Michael Economou
Date: 2026-02-07

Entry point for the workflow editor:
    python -m flowcanvas [--api-url URL] [--workflow ID] [--log-level LEVEL]

Sets up logging, creates the Qt application and the main window, and
optionally loads a workflow from the server on start.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys

from PyQt5.QtWidgets import QApplication

from flowcanvas.config import API_BASE_URL, APP_NAME, APP_VERSION, LOG_DIR, LOG_LEVEL
from flowcanvas.services.transport import WorkflowApiClient
from flowcanvas.services.workflow_controller import WorkflowController
from flowcanvas.ui.main_window import MainWindow
from flowcanvas.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


def get_user_config_dir(app_name: str = APP_NAME) -> str:
    """Get user configuration directory based on OS."""
    if os.name == "nt":
        base_dir = os.environ.get("APPDATA", os.path.expanduser("~"))
    else:
        base_dir = os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
    return os.path.join(base_dir, app_name)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog=APP_NAME, description="Visual workflow editor")
    parser.add_argument("--api-url", default=API_BASE_URL, help="workflow API base URL")
    parser.add_argument("--workflow", help="id of a workflow to load on start")
    parser.add_argument("--log-level", default=LOG_LEVEL, help="console log level")
    parser.add_argument("--version", action="version", version=f"%(prog)s {APP_VERSION}")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    setup_logging(log_dir=os.path.join(get_user_config_dir(), LOG_DIR), log_level=args.log_level)
    logger.info("[Main] %s %s starting, API at %s", APP_NAME, APP_VERSION, args.api_url)

    app = QApplication(sys.argv[:1])
    app.setApplicationName(APP_NAME)
    app.setApplicationVersion(APP_VERSION)

    controller = WorkflowController(client=WorkflowApiClient(base_url=args.api_url))
    window = MainWindow(controller)
    controller.setParent(window)
    window.show()

    if args.workflow:
        controller.load(args.workflow)

    exit_code = app.exec_()
    logger.info("[Main] Exiting with code %d", exit_code)
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
