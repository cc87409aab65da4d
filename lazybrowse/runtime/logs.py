"""Logging setup for the interactive session.

The TUI owns stdout, so records go to a rotating file under the platform log
directory instead of the console.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from platformdirs import user_log_dir

from .config import APP_NAME

LOG_FILENAME = "lazybrowse.log"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s - [%(filename)s:%(lineno)d]"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def default_log_path() -> Path:
    return Path(user_log_dir(APP_NAME, appauthor=False)) / LOG_FILENAME


def configure_logging(level: str = "WARNING", log_file: Path | None = None) -> Path | None:
    """Attach a rotating file handler to the ``lazybrowse`` logger.

    Returns the log file in use, or ``None`` when it could not be opened; in
    that case records are discarded rather than written over the UI.
    """
    package_logger = logging.getLogger(APP_NAME)
    package_logger.setLevel(getattr(logging, level.upper(), logging.WARNING))
    package_logger.propagate = False
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    path = log_file if log_file is not None else default_log_path()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = RotatingFileHandler(
            path,
            maxBytes=2 * 1024 * 1024,
            backupCount=3,
            encoding="utf-8",
        )
    except OSError:
        package_logger.addHandler(logging.NullHandler())
        return None

    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    package_logger.addHandler(handler)
    package_logger.info("Logging initialized: %s", path)
    return path


__all__ = [
    "LOG_FILENAME",
    "default_log_path",
    "configure_logging",
]
