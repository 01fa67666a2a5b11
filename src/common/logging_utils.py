"""Centralized logging setup and structured logging helpers.

All modules log through ``logging.getLogger(__name__)``; this module owns the
root handler configuration and the small helpers used for DEBUG traces
(``extra_context``, ``is_debug_enabled``, ``Timer``).
"""
from __future__ import annotations

import logging
import os
import sys
import time
from typing import Any, Dict, Optional

from constants import Constants

_START = time.monotonic()


class UptimeFormatter(logging.Formatter):
    """Formatter exposing ``%(uptime)s``: seconds since process start as ``ssss.mmm``."""

    def format(self, record: logging.LogRecord) -> str:
        elapsed = max(0.0, record.created - _wall_start())
        seconds = int(elapsed)
        millis = int((elapsed - seconds) * 1000)
        record.uptime = f"{seconds:>4}.{millis:03d}"
        return super().format(record)


def _wall_start() -> float:
    """Wall-clock timestamp matching the monotonic module start."""
    return time.time() - (time.monotonic() - _START)


def _level_from_env() -> int:
    name = (
        os.environ.get(Constants.ENV_LOG_LEVEL)
        or os.environ.get(Constants.ENV_LOG_LEVEL_FALLBACK)
        or "INFO"
    )
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """Configure the root logger.

    Args:
        level: Level name overriding the environment (``VAT_LOG_LEVEL`` or ``LOG_LEVEL``).
        log_file: Optional path for an additional plain file handler.
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(UptimeFormatter(Constants.LOG_FORMAT))
    root.addHandler(console)

    if level:
        value = logging.getLevelName(str(level).upper())
        root.setLevel(value if isinstance(value, int) else logging.INFO)
    else:
        root.setLevel(_level_from_env())

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(Constants.LOG_FILE_FORMAT))
        root.addHandler(file_handler)


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True when DEBUG records from ``logger`` would be emitted."""
    return logger.isEnabledFor(logging.DEBUG)


def extra_context(**fields: Any) -> Dict[str, Any]:
    """Build an ``extra=`` mapping for structured log records, dropping None values."""
    return {k: v for k, v in fields.items() if v is not None}


class Timer:
    """Context manager measuring elapsed wall time."""

    def __init__(self) -> None:
        self._start = 0.0
        self._end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.monotonic()
        self._end = None
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self._end = time.monotonic()

    def elapsed(self) -> float:
        """Elapsed seconds; keeps counting while the block is still running."""
        end = self._end if self._end is not None else time.monotonic()
        return end - self._start

    def duration_ms(self) -> int:
        """Elapsed milliseconds."""
        return int(self.elapsed() * 1000)
