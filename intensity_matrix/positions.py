"""Split real coordinates into integer and fractional parts."""
from __future__ import annotations

import dataclasses
import math
from typing import Tuple

import numpy as np


@dataclasses.dataclass(frozen=True)
class PositionSplit:
    """Floor and non-negative remainder of a real coordinate."""

    integer_part: int
    fraction: float


def split_position(n: float) -> PositionSplit:
    """Decompose *n* into ``floor(n)`` and ``n - floor(n)``.

    Args:
        n: Real coordinate, may be negative.

    Returns:
        PositionSplit whose fraction lies in ``[0, 1)``.

    Raises:
        ValueError: If *n* is NaN or infinite.
    """
    if not math.isfinite(n):
        raise ValueError(f"Cannot split non-finite position {n}")
    floored = math.floor(n)
    return PositionSplit(integer_part=int(floored), fraction=float(n - floored))


def is_integral(x: float, tolerance: float = 0.0) -> bool:
    """Return ``True`` when *x* has no fractional part.

    With a positive *tolerance*, values within that distance of the nearest
    integer (from either side) also count as integral. NaN and infinities
    are never integral.
    """
    if not math.isfinite(x):
        return False
    fraction = split_position(x).fraction
    if tolerance <= 0.0:
        return fraction == 0.0
    return fraction <= tolerance or (1.0 - fraction) <= tolerance


def split_positions(values: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Vectorised :func:`split_position` returning ``(integer_parts, fractions)``."""
    values = np.asarray(values, dtype=np.float64)
    floored = np.floor(values)
    return floored.astype(np.intp), values - floored


def snap_dimension(value: float, tolerance: float = 0.0) -> int:
    """Truncate *value* toward zero, snapping near-integers to the integer first."""
    if tolerance > 0.0 and is_integral(value, tolerance):
        return int(round(value))
    return int(value)


__all__ = [
    "PositionSplit",
    "is_integral",
    "snap_dimension",
    "split_position",
    "split_positions",
]
