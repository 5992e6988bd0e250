"""Toroidal translation of buffers."""
from __future__ import annotations

import logging

import numpy as np

from .buffer import MatrixBuffer

LOGGER = logging.getLogger("intensity_matrix")


def translate(source: MatrixBuffer, x_offset: int, y_offset: int) -> MatrixBuffer:
    """Shift *source* with wrap-around at the edges.

    Destination ``(x, y)`` takes the source value at
    ``((x + x_offset) mod width, (y + y_offset) mod height)``, so offsets of
    any sign or magnitude are accepted.

    Args:
        source: Buffer to shift; never modified.
        x_offset: Column offset.
        y_offset: Row offset.

    Returns:
        New buffer of the same size.
    """
    x_shift = int(x_offset) % source.width
    y_shift = int(y_offset) % source.height
    LOGGER.debug("Translating %sx%s by (%s, %s)", source.width, source.height, x_shift, y_shift)
    shifted = np.roll(source.view(), shift=(-y_shift, -x_shift), axis=(0, 1))
    return MatrixBuffer(source.height, source.width, shifted)


__all__ = ["translate"]
