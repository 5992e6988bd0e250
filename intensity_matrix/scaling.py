"""Adaptive scale-factor search and bilinear resampling.

``scale_matrix`` resizes a buffer either directly (target dimensions are the
source dimensions times the factor, truncated toward zero) or after nudging
the factor until both resized dimensions are integral, which keeps the
sampling grid aligned with the destination boundary.

The search walks candidates ``scale_factor + k * step`` for ``k = 0, 1, ...``.
A product counts as integral when it lies within half a step of a positive
integer (see :func:`search_tolerance`). Below ``EngineSettings.iteration_cap``
a candidate must make both products integral; from the cap onwards an
integral width alone is accepted. That fallback can leave the height
fractional, in which case the result is marked ``exact=False`` and a warning
is logged. The walk never exceeds ``iteration_cap + fallback_limit``
candidates and never reaches a factor of zero.
"""
from __future__ import annotations

import dataclasses
import logging
import math
from typing import Optional, Tuple

import numpy as np

from .buffer import DTYPE, InvalidDimension, MatrixBuffer
from .positions import snap_dimension, split_positions
from .settings import EngineSettings, resolve_settings

LOGGER = logging.getLogger("intensity_matrix")

_SEARCH_CHUNK = 1 << 16


@dataclasses.dataclass(frozen=True)
class AdjustedScale:
    """Outcome of :func:`adjust_scale_factor`.

    Attributes:
        new_height: Source height multiplied by the final factor.
        new_width: Source width multiplied by the final factor.
        scale_factor: Final scale factor.
        iterations: Number of candidates tested.
        exact: ``False`` when only the width was integral at the stop.
    """

    new_height: float
    new_width: float
    scale_factor: float
    iterations: int
    exact: bool


def search_step(scale_factor: float, settings: Optional[EngineSettings] = None) -> float:
    """Return the signed search step for *scale_factor* (0.0 when it is 1)."""
    settings = resolve_settings(settings)
    if scale_factor > 1:
        return settings.search_step
    if scale_factor < 1:
        return -settings.search_step
    return 0.0


def search_tolerance(
    dimension: float, step: float, settings: Optional[EngineSettings] = None
) -> float:
    """Return how close ``dimension * factor`` must be to an integer during the search.

    Adjacent candidates move the product by ``|step| * dimension``; half of that
    is the resolution at which the walk can see an integer, so every integer it
    crosses is matched by the nearest candidate.
    """
    settings = resolve_settings(settings)
    return 0.5 * abs(step) * dimension + settings.integral_tolerance


def _integral_hits(products: np.ndarray, tolerance: float) -> np.ndarray:
    nearest = np.rint(products)
    return (np.abs(products - nearest) <= tolerance) & (nearest >= 1)


def adjust_scale_factor(
    height: float,
    width: float,
    scale_factor: float,
    step: Optional[float] = None,
    *,
    settings: Optional[EngineSettings] = None,
) -> AdjustedScale:
    """Find a factor near *scale_factor* giving integral resized dimensions.

    Args:
        height: Current height.
        width: Current width.
        scale_factor: Requested factor, tested first.
        step: Signed increment between candidates. Defaults to
            :func:`search_step`.
        settings: Engine settings, defaults to the ``"default"`` preset.

    Returns:
        AdjustedScale holding the resized (float) dimensions and final factor.

    Raises:
        InvalidDimension: If *scale_factor* is not finite and positive.
    """
    if not math.isfinite(scale_factor) or scale_factor <= 0:
        raise InvalidDimension(f"scale_factor must be finite and positive, got {scale_factor}")
    settings = resolve_settings(settings)
    if step is None:
        step = search_step(scale_factor, settings)
    if step == 0:
        return AdjustedScale(
            new_height=height * scale_factor,
            new_width=width * scale_factor,
            scale_factor=scale_factor,
            iterations=0,
            exact=True,
        )

    height_tolerance = search_tolerance(height, step, settings)
    width_tolerance = search_tolerance(width, step, settings)
    cap = settings.iteration_cap
    limit = cap + settings.fallback_limit

    start = 0
    while start < limit:
        stop = min(start + _SEARCH_CHUNK, limit)
        k = np.arange(start, stop, dtype=np.float64)
        factors = scale_factor + k * step
        positive = factors > 0
        if not positive.all():
            # The downward walk ends at the last positive candidate.
            limit = stop = start + int(np.argmin(positive))
            k = k[: stop - start]
            factors = factors[: stop - start]
        width_ok = _integral_hits(factors * width, width_tolerance)
        both_ok = width_ok & _integral_hits(factors * height, height_tolerance)
        accepted = np.where(k < cap, both_ok, width_ok)
        hits = np.flatnonzero(accepted)
        if hits.size:
            hit = int(hits[0])
            factor = float(factors[hit])
            exact = bool(both_ok[hit])
            iterations = start + hit + 1
            if exact:
                LOGGER.debug(
                    "Adjusted scale factor %s -> %s after %s candidate(s)",
                    scale_factor,
                    factor,
                    iterations,
                )
            else:
                LOGGER.warning(
                    "Scale search passed %s candidates; accepting factor %s with "
                    "integral width only (height %s is fractional)",
                    cap,
                    factor,
                    height * factor,
                )
            return AdjustedScale(height * factor, width * factor, factor, iterations, exact)
        start = stop

    factor = scale_factor + (limit - 1) * step
    LOGGER.warning(
        "Scale search exhausted %s candidates without an integral width; using factor %s",
        limit,
        factor,
    )
    return AdjustedScale(height * factor, width * factor, factor, limit, False)


def target_dimensions(
    height: int,
    width: int,
    scale_factor: float,
    adjust: bool = False,
    *,
    settings: Optional[EngineSettings] = None,
) -> Tuple[int, int, float, float]:
    """Return ``(int_height, int_width, new_height, new_width)`` for a resize.

    Raises:
        InvalidDimension: If the factor is not finite and positive, or a
            truncated dimension would be zero.
    """
    settings = resolve_settings(settings)
    if not math.isfinite(scale_factor) or scale_factor <= 0:
        raise InvalidDimension(f"scale_factor must be finite and positive, got {scale_factor}")

    if adjust:
        adjusted = adjust_scale_factor(height, width, scale_factor, settings=settings)
        new_height, new_width = adjusted.new_height, adjusted.new_width
        step = search_step(scale_factor, settings)
        height_tolerance = search_tolerance(height, step, settings)
        width_tolerance = search_tolerance(width, step, settings)
    else:
        new_height = height * scale_factor
        new_width = width * scale_factor
        height_tolerance = width_tolerance = settings.integral_tolerance

    int_height = snap_dimension(new_height, height_tolerance)
    int_width = snap_dimension(new_width, width_tolerance)
    if int_height <= 0 or int_width <= 0:
        raise InvalidDimension(
            f"Scaling {height}x{width} by {scale_factor} gives an empty {int_height}x{int_width} result"
        )
    return int_height, int_width, new_height, new_width


def resample_bilinear(
    src: np.ndarray,
    out_height: int,
    out_width: int,
    new_height: float,
    new_width: float,
) -> np.ndarray:
    """Sample *src* on an ``out_height x out_width`` grid.

    Destination ``(x, y)`` maps to source ``(x * width / new_width,
    y * height / new_height)``. Neighbours past the last row or column are
    clamped onto it.
    """
    height, width = src.shape
    x = np.arange(out_width, dtype=np.float64) * width / new_width
    y = np.arange(out_height, dtype=np.float64) * height / new_height
    x0, x_weight = split_positions(x)
    y0, y_weight = split_positions(y)
    x0 = np.clip(x0, 0, width - 1)
    y0 = np.clip(y0, 0, height - 1)
    x1 = np.clip(x0 + 1, 0, width - 1)
    y1 = np.clip(y0 + 1, 0, height - 1)
    x_weight = x_weight.reshape(1, -1)
    y_weight = y_weight.reshape(-1, 1)

    plane = src.astype(np.float64)
    Ia = plane[np.ix_(y0, x0)]
    Ib = plane[np.ix_(y0, x1)]
    Ic = plane[np.ix_(y1, x0)]
    Id = plane[np.ix_(y1, x1)]

    with np.errstate(invalid="ignore", over="ignore"):
        return (
            (1.0 - x_weight) * (1.0 - y_weight) * Ia
            + x_weight * (1.0 - y_weight) * Ib
            + (1.0 - x_weight) * y_weight * Ic
            + x_weight * y_weight * Id
        )


def clamp_samples(values: np.ndarray, settings: Optional[EngineSettings] = None) -> np.ndarray:
    """Zero out NaN samples and samples outside ``[clamp_min, clamp_max)``."""
    settings = resolve_settings(settings)
    with np.errstate(invalid="ignore"):
        keep = np.isfinite(values) & (values >= settings.clamp_min) & (values < settings.clamp_max)
    return np.where(keep, values, 0.0)


def scale_matrix(
    source: MatrixBuffer,
    scale_factor: float,
    adjust: bool = False,
    *,
    settings: Optional[EngineSettings] = None,
) -> MatrixBuffer:
    """Resize *source* by *scale_factor* using bilinear resampling.

    Args:
        source: Buffer to resize; never modified.
        scale_factor: Requested factor (> 0).
        adjust: Nudge the factor until the resized dimensions are integral.
        settings: Engine settings, defaults to the ``"default"`` preset.

    Returns:
        New buffer with the resized contents.

    Raises:
        InvalidDimension: If the factor is invalid or the result would be empty.
    """
    settings = resolve_settings(settings)
    src = source.view()
    int_height, int_width, new_height, new_width = target_dimensions(
        source.height, source.width, scale_factor, adjust, settings=settings
    )
    LOGGER.debug(
        "Scaling %sx%s by %s (adjust=%s) -> %sx%s",
        source.height,
        source.width,
        scale_factor,
        adjust,
        int_height,
        int_width,
    )
    values = resample_bilinear(src, int_height, int_width, new_height, new_width)
    values = clamp_samples(values, settings)
    return MatrixBuffer(int_height, int_width, values.astype(DTYPE))


__all__ = [
    "AdjustedScale",
    "adjust_scale_factor",
    "clamp_samples",
    "resample_bilinear",
    "scale_matrix",
    "search_step",
    "search_tolerance",
    "target_dimensions",
]
