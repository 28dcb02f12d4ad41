"""Centralized logging helpers.

Every module logs through its own ``logging.getLogger(__name__)``; this module
only provides the shared setup and the structured ``extra=`` payload builder so
DEBUG traces carry the same keys everywhere.
"""
from __future__ import annotations

import logging
import os
import sys
import time
from typing import Any, Dict, Optional

from constants import Constants

_CONFIGURED_ATTR = "_debsolve_configured"


def _level_from_env() -> int:
    name = os.environ.get(Constants.ENV_LOG_LEVEL, "INFO").strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def configure_logging() -> None:
    """Install a single stream handler on the root logger.

    The level comes from the DEBSOLVE_LOG_LEVEL environment variable. Calling
    this more than once only refreshes the level.
    """
    root = logging.getLogger()
    root.setLevel(_level_from_env())
    if getattr(root, _CONFIGURED_ATTR, False):
        return
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(Constants.LOG_FORMAT))
    root.addHandler(handler)
    setattr(root, _CONFIGURED_ATTR, True)


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True when DEBUG records from ``logger`` would be emitted."""
    return logger.isEnabledFor(logging.DEBUG)


def extra_context(
    event: str,
    component: str,
    action: str,
    outcome: Optional[str] = None,
    **fields: Any,
) -> Dict[str, Any]:
    """Build the ``extra`` mapping for a structured log record.

    Keys whose value is None are dropped so formatters never see half-filled
    records.
    """
    ctx: Dict[str, Any] = {
        "event": event,
        "component": component,
        "action": action,
        "outcome": outcome,
    }
    ctx.update(fields)
    return {k: v for k, v in ctx.items() if v is not None}


class Timer:
    """Context manager measuring elapsed wall time."""

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
        """Elapsed milliseconds; still running timers report time so far."""
        end = self._end if self._end is not None else time.perf_counter()
        return round((end - self._start) * 1000.0, 3)
