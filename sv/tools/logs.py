# -*- coding: utf-8 -*-
# sv/tools/logs.py

"""
Logging setup for scripts and kernel log files.

- setup_logging: console logging in the 'LEVEL:name:message' format.
- attach_file_log / detach_file_log: route one logger hierarchy into a log file.
"""

import logging
from typing import Dict, Optional

DEFAULT_FORMAT = "%(levelname)s:%(name)s:%(message)s"

_FILE_HANDLERS: Dict[str, logging.FileHandler] = {}


def setup_logging(level="INFO", fmt: str = DEFAULT_FORMAT) -> logging.Logger:
    """Configure root logging once and return the package logger."""
    logging.basicConfig(level=level, format=fmt)
    return logging.getLogger("sv")


def attach_file_log(logger_name: str, file_name: str, level=logging.DEBUG) -> logging.FileHandler:
    """
    Send records of `logger_name` (and its children) to `file_name`.

    A previously attached file handler for the same logger is replaced.
    """
    detach_file_log(logger_name)
    handler = logging.FileHandler(file_name, mode="w", encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(asctime)s " + DEFAULT_FORMAT))
    log = logging.getLogger(logger_name)
    log.addHandler(handler)
    if log.level == logging.NOTSET or log.level > level:
        log.setLevel(level)
    _FILE_HANDLERS[logger_name] = handler
    return handler


def detach_file_log(logger_name: str) -> Optional[str]:
    """Remove and close the file handler of `logger_name`; return its file name or None."""
    handler = _FILE_HANDLERS.pop(logger_name, None)
    if handler is None:
        return None
    logging.getLogger(logger_name).removeHandler(handler)
    handler.close()
    return handler.baseFilename
