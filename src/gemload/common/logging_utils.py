"""Logging helpers: setup, structured context and timing.

Modules obtain their own ``logging.getLogger(__name__)`` logger and attach
structured fields through ``extra=extra_context(...)`` so handlers and
formatters can pick them up without parsing messages.
"""
from __future__ import annotations

import logging
import os
import time
from typing import Any, Dict, Optional

from ..constants import Constants, EnvVars


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging once.

    The level comes from the argument, then ``GEMLOAD_LOG_LEVEL``, then
    ``Constants.LOG_LEVEL``. Unknown level names fall back to INFO.
    """
    name = (level or os.environ.get(EnvVars.LOG_LEVEL.value) or Constants.LOG_LEVEL).upper()
    level_value = getattr(logging, name, logging.INFO)
    if not isinstance(level_value, int):
        level_value = logging.INFO

    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(Constants.LOG_FORMAT))
        root.addHandler(handler)
    root.setLevel(level_value)


def extra_context(**kwargs: Any) -> Dict[str, Any]:
    """Build an ``extra`` mapping for a log record, dropping ``None`` values.

    Keys must not collide with ``logging.LogRecord`` attributes, so package
    names travel as ``package`` rather than ``name``.
    """
    return {k: v for k, v in kwargs.items() if v is not None}


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True when DEBUG records would be emitted by ``logger``."""
    return logger.isEnabledFor(logging.DEBUG)


class Timer:
    """Context manager measuring wall time in milliseconds."""

    def __init__(self) -> None:
        self._start = 0.0
        self._end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        self._end = None
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._end = time.perf_counter()

    def duration_ms(self) -> float:
        """Elapsed milliseconds, measured up to now while still running."""
        end = self._end if self._end is not None else time.perf_counter()
        return round((end - self._start) * 1000.0, 3)
