"""Feedback-driven reshaping of a probability field."""

from __future__ import annotations

import numpy as np


def adjust(field, index: int, accepted: bool, max_step: float = 0.3) -> np.ndarray:
    """Return a new field nudged toward (or away from) ``index``.

    Each slot moves by ``±1 / (distance + 3)``, never leaves ``[0, 1]`` and
    never moves more than ``max_step`` in a single call.
    """

    values = np.asarray(field, dtype=float)
    distance = np.abs(np.arange(values.size) - int(index))
    delta = (1.0 if accepted else -1.0) / (distance + 3)

    raw = np.maximum(0.0, values + delta)
    lower = np.maximum(0.0, values - max_step)
    upper = np.minimum(1.0, values + max_step)
    return np.minimum(np.maximum(raw, lower), upper)


def update_average(average: int, minutes: int) -> int:
    """Move a running average duration halfway toward ``minutes``."""

    return (int(average) + int(minutes)) // 2
