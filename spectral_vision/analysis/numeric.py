"""
Numeric helpers shared by every evaluator.

Every scalar in the engine is a score in [0, 1]. Out-of-range input is
coerced into range rather than rejected.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import numpy as np


def clamp01(value: Any) -> float:
    """
    Coerce a raw value into the closed interval [0, 1].

    None, non-finite and negative values become 0.0; values above 1
    (including integers too large for a float) become 1.0.

    Args:
        value: Raw numeric value (int, float, numpy scalar, or None)

    Returns:
        Score in [0, 1]
    """
    if value is None:
        return 0.0

    try:
        x = float(value)
    except OverflowError:
        # Integers beyond float range saturate at the matching bound
        return 1.0 if value > 0 else 0.0

    if not np.isfinite(x) or x < 0.0:
        return 0.0
    if x > 1.0:
        return 1.0
    return x


def mean_or_default(values: Sequence[float], default: float = 0.0) -> float:
    """Arithmetic mean of values, or default when empty."""
    if len(values) == 0:
        return default
    return float(np.mean(np.asarray(values, dtype=np.float64)))


def min_or_default(values: Sequence[float], default: float = 1.0) -> float:
    """Minimum of values, or default when empty."""
    if len(values) == 0:
        return default
    return float(np.min(np.asarray(values, dtype=np.float64)))
