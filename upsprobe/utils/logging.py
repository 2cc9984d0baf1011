"""
Project-wide logging setup for upsprobe.

Diagnostics go to stderr so that stdout carries only the check result line.
Controlled via environment variables:
- UPSPROBE_LOG_LEVEL: DEBUG|INFO|WARNING|ERROR (default: WARNING)
- UPSPROBE_LOG_FORMAT: text|json (default: text)
"""
from __future__ import annotations

import logging
import os
import sys
from typing import Optional

from pythonjsonlogger.json import JsonFormatter


def _get_level() -> int:
    level = os.getenv("UPSPROBE_LOG_LEVEL", "WARNING").upper()
    return getattr(logging, level, logging.WARNING)


def setup_logging(force: bool = False, *, level: Optional[int] = None,
                  logger: Optional[logging.Logger] = None) -> None:
    """Configure root logging for stderr output.

    If a handler is already present and force is False, this is a no-op.
    An explicit level overrides UPSPROBE_LOG_LEVEL.
    """
    target_logger = logger or logging.getLogger()
    if target_logger.handlers and not force:
        return

    # Clear existing handlers when forcing
    if force:
        for h in list(target_logger.handlers):
            target_logger.removeHandler(h)

    target_logger.setLevel(level if level is not None else _get_level())

    handler = logging.StreamHandler(sys.stderr)

    fmt = os.getenv("UPSPROBE_LOG_FORMAT", "text").lower()
    if fmt == "json":
        formatter: logging.Formatter = JsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s",
            rename_fields={"levelname": "level", "name": "logger"},
        )
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S%z",
        )

    handler.setFormatter(formatter)
    target_logger.addHandler(handler)
