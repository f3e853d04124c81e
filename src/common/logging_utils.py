"""Centralized logging helpers.

Structured DEBUG traces are emitted with ``extra=extra_context(...)`` so a
handler can pick the fields up; the plain message stays readable on a console.
"""
from __future__ import annotations

import logging
import os
import time
from typing import Any, Dict, Optional

from constants import Constants

_CONTEXT_FIELDS = ("event", "component", "action", "target", "outcome")


def configure_logging(level: Optional[str] = None) -> None:
    """Configure the root logger once for CLI usage.

    The level comes from ``level`` or the environment variable named by
    ``Constants.ENV_LOG_LEVEL``; defaults to INFO.
    """
    level_name = (level or os.environ.get(Constants.ENV_LOG_LEVEL) or "INFO").upper()
    level_value = getattr(logging, level_name, logging.INFO)
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(Constants.LOG_FORMAT))
        root.addHandler(handler)
    root.setLevel(level_value)


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True when DEBUG records would be emitted by ``logger``."""
    return logger.isEnabledFor(logging.DEBUG)


def extra_context(**fields: Any) -> Dict[str, Any]:
    """Build an ``extra`` mapping for structured log records.

    None values are dropped. Well-known fields keep their names; anything else
    is prefixed with ``ctx_`` so it cannot collide with LogRecord attributes.
    """
    context: Dict[str, Any] = {}
    for key, value in fields.items():
        if value is None:
            continue
        if key in _CONTEXT_FIELDS:
            context[key] = value
        else:
            context[f"ctx_{key}"] = value
    return context


class Timer:
    """Context manager measuring wall-clock duration."""

    def __init__(self) -> None:
        self._start = 0.0
        self._end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._end = time.perf_counter()

    def duration_ms(self) -> int:
        """Elapsed milliseconds, measured up to now while still running."""
        end = self._end if self._end is not None else time.perf_counter()
        return int((end - self._start) * 1000)
