# File: site_indexer/logger.py
"""Logging for **SiteIndexer**.

All modules log under the ``SiteIndexer`` hierarchy:

* :data:`logger` is the root project logger (orchestrator, CLI)::

      from site_indexer.logger import logger
      logger.info("Indexing started")
* :func:`get_logger` returns a component child (``SiteIndexer.crawler``,
  ``SiteIndexer.web``) that writes through the same handlers.
* :class:`SessionLogger` tags every record of one indexing run with its
  session id, so interleaved runs of a long-lived server stay readable.

Handlers live only on the project logger; :func:`configure` swaps them.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, List, Optional, Union

DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOGGER_NAME: Final[str] = "SiteIndexer"

#: rotation of the optional log file
LOG_FILE_MAX_BYTES: Final[int] = 5 * 1024 * 1024
LOG_FILE_BACKUPS: Final[int] = 3

_LevelT = Union[int, str]


def _build_handlers(log_format: str, log_file: Optional[Union[str, Path]]) -> List[logging.Handler]:
    formatter = logging.Formatter(log_format)
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                filename=str(log_file),
                maxBytes=LOG_FILE_MAX_BYTES,
                backupCount=LOG_FILE_BACKUPS,
                encoding="utf-8",
            )
        )
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def configure(
    *,
    level: _LevelT = "INFO",
    log_file: Optional[Union[str, Path]] = None,
    log_format: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """Replace the handlers of the project logger.

    Console output always; *log_file* adds a rotating file next to it.
    Previous handlers are closed, so repeated CLI invocations in one process
    (tests) do not leak file descriptors.
    """
    project = logging.getLogger(LOGGER_NAME)
    project.setLevel(level)
    for handler in list(project.handlers):
        project.removeHandler(handler)
        handler.close()
    for handler in _build_handlers(log_format, log_file):
        project.addHandler(handler)
    project.propagate = False
    return project


def init_logging(
    level: _LevelT = "INFO",
    log_file: Optional[Union[str, Path]] = None,
    log_format: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """Entry point for the CLI group callback."""
    return configure(level=level, log_file=log_file, log_format=log_format)


def get_logger(component: str) -> logging.Logger:
    """Child logger ``SiteIndexer.<component>``."""
    return logging.getLogger(f"{LOGGER_NAME}.{component}")


class SessionLogger(logging.LoggerAdapter):
    """Prefixes messages with ``[session <id>]``."""

    def __init__(self, base: logging.Logger, session_id: object) -> None:
        super().__init__(base, {"session_id": str(session_id)})

    def process(self, msg, kwargs):
        return f"[session {self.extra['session_id']}] {msg}", kwargs


logger: logging.Logger = init_logging()

__all__ = [
    "logger",
    "configure",
    "init_logging",
    "get_logger",
    "SessionLogger",
    "DEFAULT_FORMAT",
    "LOGGER_NAME",
]
