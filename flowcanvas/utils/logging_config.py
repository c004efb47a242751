"""Logging setup for flowcanvas.

setup_logging() installs one console handler on the root logger and,
unless disabled, three per-session log files split by severity:

    flowcanvas_INFO_{timestamp}.log   INFO and WARNING
    flowcanvas_DEBUG_{timestamp}.log  DEBUG only (gesture traces)
    flowcanvas_ERROR_{timestamp}.log  ERROR and CRITICAL (transport failures)

Modules log through ``logging.getLogger(__name__)``; get_logger() is the
same call for code that prefers a helper.

Author:
    Michael Economou

Date:
    2026-02-02
"""

import logging
import os
from datetime import datetime

from flowcanvas.config import LOG_DATE_FORMAT, LOG_DIR, LOG_FORMAT, LOG_LEVEL, LOG_TO_FILE

# (file suffix, handler level, highest level written)
_FILE_SPLITS = (
    ("INFO", logging.INFO, logging.WARNING),
    ("DEBUG", logging.DEBUG, logging.DEBUG),
    ("ERROR", logging.ERROR, logging.CRITICAL),
)

# Third-party loggers that would flood the DEBUG file with connection chatter.
_QUIET_LOGGERS = ("urllib3", "PyQt5")


def _max_level_filter(max_level: int):
    return lambda record: record.levelno <= max_level


def setup_logging(
    log_dir: str = LOG_DIR,
    log_level: int | str = LOG_LEVEL,
    to_file: bool = LOG_TO_FILE,
) -> list[str]:
    """Configure root logging for an editor session.

    Args:
        log_dir: Directory for the log files, created if missing.
        log_level: Console threshold, as a level number or name.
        to_file: If False, only the console handler is installed.

    Returns:
        Paths of the log files opened for this session.
    """
    if isinstance(log_level, str):
        log_level = logging.getLevelName(log_level.upper())

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    if not to_file:
        return []

    os.makedirs(log_dir, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    log_files = []
    for suffix, level, max_level in _FILE_SPLITS:
        path = os.path.join(log_dir, f"flowcanvas_{suffix}_{timestamp}.log")
        handler = logging.FileHandler(path, encoding="utf-8")
        handler.setLevel(level)
        handler.addFilter(_max_level_filter(max_level))
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)
        log_files.append(path)

    logging.getLogger(__name__).debug("[Logging] Writing logs to %s", log_dir)
    return log_files


def get_logger(name: str) -> logging.Logger:
    """Return the module logger for ``name`` (usually ``__name__``)."""
    return logging.getLogger(name)
