"""
Logging for GuideRoute.

Everything logs through one named logger. The console shows bare messages;
per-run log files get a timestamp and level so they can be read on their own.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Optional


LOGGER_NAME = "GuideRoute"
_CONSOLE_FORMAT = "%(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)-7s %(message)s"

_file_handlers: Dict[str, logging.Handler] = {}


def _level(debug: bool) -> int:
    return logging.DEBUG if debug else logging.INFO


def setup_logging(debug: bool = False) -> logging.Logger:
    """Attach a console handler once; later calls only adjust the level."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(_level(debug))
    console = [h for h in logger.handlers if h.get_name() == "console"]
    if console:
        console[0].setLevel(_level(debug))
        return logger

    handler = logging.StreamHandler()
    handler.set_name("console")
    handler.setLevel(_level(debug))
    handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    logger.addHandler(handler)
    logger.debug("Console logging at %s", logging.getLevelName(logger.level))
    return logger


def get_logger() -> logging.Logger:
    return logging.getLogger(LOGGER_NAME)


def add_file_handler(path: Path | str, level: Optional[int] = None) -> Path:
    """Mirror the project log into ``path`` (used for each run's output dir)."""
    target = Path(path)
    key = str(target.resolve())
    if key in _file_handlers:
        return target
    target.parent.mkdir(parents=True, exist_ok=True)

    logger = get_logger()
    handler = logging.FileHandler(target, encoding="utf-8")
    handler.setLevel(level if level is not None else logger.getEffectiveLevel())
    handler.setFormatter(logging.Formatter(_FILE_FORMAT))
    logger.addHandler(handler)
    _file_handlers[key] = handler
    logger.debug("Writing run log to %s", target)
    return target


def close_file_handlers() -> None:
    """Detach and close every handler added by :func:`add_file_handler`."""
    logger = get_logger()
    for handler in _file_handlers.values():
        logger.removeHandler(handler)
        handler.close()
    _file_handlers.clear()
