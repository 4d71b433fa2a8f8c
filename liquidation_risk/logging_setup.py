"""Utilities for configuring consistent logging across the risk tools."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import IO, Optional

TRACE_LEVEL = 5
TRACE_LEVEL_NAME = "TRACE"

DEFAULT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s %(message)s"
DEFAULT_DATEFMT = "%Y-%m-%dT%H:%M:%S"


def _ensure_trace_level() -> None:
    if logging.getLevelName(TRACE_LEVEL) != TRACE_LEVEL_NAME:
        logging.addLevelName(TRACE_LEVEL, TRACE_LEVEL_NAME)


def _normalize_debug(debug: Optional[int | str]) -> int:
    if debug is None:
        return 1
    if isinstance(debug, bool):
        return 1 if debug else 0
    try:
        return int(debug)
    except (TypeError, ValueError):
        return 1


def debug_to_level(debug: Optional[int | str]) -> int:
    """Map the 0-3 verbosity scale onto logging levels."""

    level = _normalize_debug(debug)
    if level <= 0:
        return logging.WARNING
    if level == 1:
        return logging.INFO
    if level == 2:
        return logging.DEBUG
    return TRACE_LEVEL


def configure_logging(
    debug: Optional[int | str] = 1,
    *,
    log_file: Optional[str] = None,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
    stream: bool = True,
    stream_target: Optional[IO[str]] = None,
    fmt: str = DEFAULT_FORMAT,
    datefmt: str = DEFAULT_DATEFMT,
) -> None:
    """Initialise the root logger, replacing any handlers already installed."""

    _ensure_trace_level()
    numeric_level = debug_to_level(debug)
    formatter = logging.Formatter(fmt=fmt, datefmt=datefmt)
    handlers: list[logging.Handler] = []

    if stream:
        stream_handler = logging.StreamHandler(stream_target)
        stream_handler.setFormatter(formatter)
        stream_handler.setLevel(numeric_level)
        handlers.append(stream_handler)

    if log_file:
        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(path, maxBytes=max_bytes, backupCount=backup_count)
        file_handler.setFormatter(formatter)
        file_handler.setLevel(numeric_level)
        handlers.append(file_handler)

    root = logging.getLogger()
    root.setLevel(numeric_level)
    for existing in list(root.handlers):
        root.removeHandler(existing)
        existing.close()
    for handler in handlers:
        root.addHandler(handler)
    logging.getLogger("liquidation_risk").setLevel(numeric_level)
