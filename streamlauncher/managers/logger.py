"""Logging for both launcher front-ends.

Every module logs through ``get_logger(__name__)``; the first call attaches
the handlers to the ``streamlauncher`` logger:

* rotating file under ``DATA_DIR/logs/app.log`` (DEBUG, 5 MiB, 3 backups),
  skipped when the data directory is read-only
* stderr console (INFO)

System actions log at WARNING so they stand out in the kiosk journal.
"""

from __future__ import annotations

import logging
import logging.handlers
import pathlib
from typing import Optional

from streamlauncher.constants import DATA_DIR

ROOT_LOGGER = "streamlauncher"
LOG_MAX_BYTES = 5 * 1024 * 1024
LOG_BACKUPS = 3

_FILE_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s  %(message)s"
_CONSOLE_FORMAT = "%(levelname)-8s  %(name)s  %(message)s"

_configured = False


def get_logger(name: str) -> logging.Logger:
    """Return *name* as a child of the ``streamlauncher`` logger."""
    _configure_once()
    if not name.startswith(ROOT_LOGGER):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


def _file_handler(log_dir: pathlib.Path) -> Optional[logging.Handler]:
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        handler = logging.handlers.RotatingFileHandler(
            log_dir / "app.log",
            maxBytes=LOG_MAX_BYTES,
            backupCount=LOG_BACKUPS,
            encoding="utf-8",
        )
    except OSError:
        return None
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def _configure_once() -> None:
    global _configured
    if _configured:
        return
    _configured = True

    launcher = logging.getLogger(ROOT_LOGGER)
    if launcher.handlers:
        return
    launcher.setLevel(logging.DEBUG)

    file_handler = _file_handler(DATA_DIR / "logs")
    if file_handler is not None:
        launcher.addHandler(file_handler)

    console = logging.StreamHandler()
    console.setLevel(logging.INFO)
    console.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    launcher.addHandler(console)
