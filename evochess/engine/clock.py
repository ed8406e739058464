"""Wall clock helpers shared by the progression systems."""
from __future__ import annotations

import time

MS_PER_HOUR = 1000 * 60 * 60


def now_ms() -> int:
    """Return the current wall clock time in integer milliseconds."""

    return int(time.time() * 1000)


def ms_to_hours(milliseconds: float) -> float:
    return max(0.0, float(milliseconds)) / MS_PER_HOUR


__all__ = ["MS_PER_HOUR", "now_ms", "ms_to_hours"]
