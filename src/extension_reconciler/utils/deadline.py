"""Deadline propagation for blocking backend calls."""

from __future__ import annotations

import time

from extension_reconciler.core.errors import DeadlineExceededError


def deadline_after(seconds: float) -> float:
    return time.monotonic() + seconds


def remaining(deadline: float | None, default: float, operation: str) -> float:
    """Timeout for the next call: ``default`` capped by what is left of ``deadline``."""
    if deadline is None:
        return default
    left = deadline - time.monotonic()
    if left <= 0:
        raise DeadlineExceededError(operation)
    return min(default, left)
