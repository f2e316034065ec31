"""
Project-wide logging setup for netpol.

Provides a simple, consistent console logger with optional JSON output.
Controlled via settings / environment variables:
- NETPOL_LOG_LEVEL: DEBUG|INFO|WARNING|ERROR (default: INFO)
- NETPOL_LOG_FORMAT: text|json (default: text)
"""
from __future__ import annotations

import logging
from typing import Optional

from pythonjsonlogger import jsonlogger

from netpol.config import get_settings

TEXT_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"


def _get_level(level: Optional[str] = None) -> int:
    name = (level or get_settings().LOG_LEVEL).upper()
    return getattr(logging, name, logging.INFO)


def _build_formatter(fmt: str) -> logging.Formatter:
    if fmt == "json":
        return jsonlogger.JsonFormatter(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
            rename_fields={"levelname": "level", "name": "logger"},
        )
    return logging.Formatter(fmt=TEXT_FORMAT, datefmt=DATE_FORMAT)


def setup_logging(force: bool = False, *, logger: Optional[logging.Logger] = None,
                  level: Optional[str] = None) -> None:
    """Configure root logging for console output.

    If a handler is already present and force is False, this is a no-op.
    """
    target_logger = logger or logging.getLogger()
    if target_logger.handlers and not force:
        return

    if force:
        for h in list(target_logger.handlers):
            target_logger.removeHandler(h)

    target_logger.setLevel(_get_level(level))

    handler = logging.StreamHandler()
    handler.setFormatter(_build_formatter(get_settings().LOG_FORMAT.lower()))
    target_logger.addHandler(handler)
