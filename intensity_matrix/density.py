"""Row and column density projections.

The projections report mean intensity divided by ``density_scale`` (255 by
default), so 8-bit inputs map to ratios in ``[0, 1]``. ``average_darkness``
deliberately returns the raw mean without that division.
"""
from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from .buffer import MatrixBuffer
from .settings import EngineSettings, resolve_settings

LOGGER = logging.getLogger("intensity_matrix")


def horiz_density(source: MatrixBuffer, *, settings: Optional[EngineSettings] = None) -> MatrixBuffer:
    """Return a ``height x 1`` buffer of per-row density ratios."""
    settings = resolve_settings(settings)
    means = source.view().mean(axis=1, dtype=np.float64)
    return MatrixBuffer(source.height, 1, means / settings.density_scale)


def vert_density(source: MatrixBuffer, *, settings: Optional[EngineSettings] = None) -> MatrixBuffer:
    """Return a ``1 x width`` buffer of per-column density ratios."""
    settings = resolve_settings(settings)
    means = source.view().mean(axis=0, dtype=np.float64)
    return MatrixBuffer(1, source.width, means / settings.density_scale)


def average_darkness(source: MatrixBuffer) -> float:
    """Mean of every element, not normalised."""
    value = float(source.data.mean(dtype=np.float64))
    LOGGER.debug("Average darkness of %sx%s buffer: %.4f", source.height, source.width, value)
    return value


__all__ = ["average_darkness", "horiz_density", "vert_density"]
