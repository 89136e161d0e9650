"""
Process-wide logging setup.

Every module logs through ``logging.getLogger(__name__)``; this module
only decides where those records go.  ``create_app`` calls
``setup_logging`` with ``LOG_LEVEL`` and ``LOG_FILE`` from the settings.
"""

import logging
from pathlib import Path
from typing import List, Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Loggers of libraries we run inside; they follow the application level.
SERVER_LOGGERS = ("uvicorn.error", "uvicorn.access")


def _build_handlers(logfile: Optional[str]) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if logfile:
        handlers.append(logging.FileHandler(Path(logfile).resolve(), encoding="utf-8"))
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def setup_logging(level: str = "INFO", logfile: Optional[str] = None) -> None:
    """Attach console (and optional file) handlers to the root logger.

    Parameters
    ----------
    level : str
        Level name such as ``"DEBUG"``; unknown names mean ``INFO``.
    logfile : Optional[str]
        Also write records to this file when given.

    Nothing happens when the root logger already has handlers, e.g.
    when the test runner installed its own or ``create_app`` is called
    more than once.
    """
    root = logging.getLogger()
    if root.handlers:
        return

    numeric_level = getattr(logging, level.upper(), logging.INFO)
    root.setLevel(numeric_level)
    for handler in _build_handlers(logfile):
        root.addHandler(handler)
    for name in SERVER_LOGGERS:
        logging.getLogger(name).setLevel(numeric_level)
