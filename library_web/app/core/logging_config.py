"""
Logging configuration for the library application.

``setup_logging`` is called once by ``create_app`` with the values from
``Settings``: ``LOG_LEVEL`` picks the level, ``DEBUG`` forces
``DEBUG`` regardless, and ``LOG_FILE`` adds a file handler next to the
console one.  Uvicorn's per-request access log is kept at ``WARNING``
unless debugging, since the page handlers already log what they do.
"""

import logging
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def resolve_level(level: str, debug: bool = False) -> int:
    """Translate a level name into a ``logging`` constant.

    Unknown names fall back to ``INFO``; ``debug`` wins over ``level``.
    """
    if debug:
        return logging.DEBUG
    numeric = logging.getLevelName(level.strip().upper())
    return numeric if isinstance(numeric, int) else logging.INFO


def setup_logging(level: str = "INFO", logfile: Optional[str] = None, debug: bool = False) -> None:
    """Configure the root logger unless it already has handlers.

    Parameters
    ----------
    level : str
        Logging level name such as ``"INFO"``; case insensitive.
    logfile : Optional[str]
        File to append log records to, resolved against the current
        working directory.  No file handler when omitted.
    debug : bool
        Log everything at ``DEBUG``, including uvicorn's access log.
    """
    root = logging.getLogger()
    if root.handlers:
        # Repeated create_app() calls (tests) must not stack handlers.
        return

    root.setLevel(resolve_level(level, debug))
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if logfile:
        handlers.append(logging.FileHandler(Path(logfile).resolve(), encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    if not debug:
        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
