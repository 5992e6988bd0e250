"""Rectangular region extraction and centered compositing."""
from __future__ import annotations

import logging

from .buffer import InvalidDimension, MatrixBuffer, OutOfBounds, SizeMismatch

LOGGER = logging.getLogger("intensity_matrix")


def select_region(source: MatrixBuffer, x: int, y: int, w: int, h: int) -> MatrixBuffer:
    """Copy the ``w x h`` rectangle with top-left corner ``(x, y)``.

    Args:
        source: Buffer to read from; never modified.
        x: Left column of the rectangle.
        y: Top row of the rectangle.
        w: Rectangle width.
        h: Rectangle height.

    Returns:
        New ``h x w`` buffer.

    Raises:
        InvalidDimension: If ``w`` or ``h`` is not positive.
        OutOfBounds: If the rectangle does not fit inside *source*.
    """
    if w <= 0 or h <= 0:
        raise InvalidDimension(f"Region size must be positive, got {w}x{h}")
    if x < 0 or y < 0 or x + w > source.width or y + h > source.height:
        raise OutOfBounds(
            f"Region (x={x}, y={y}, w={w}, h={h}) exceeds {source.width}x{source.height} source"
        )
    LOGGER.debug("Selecting region x=%s y=%s w=%s h=%s", x, y, w, h)
    return MatrixBuffer(h, w, source.view()[y : y + h, x : x + w])


def centre_offset(fg: MatrixBuffer, bg: MatrixBuffer) -> tuple[int, int]:
    """Return the ``(x_offset, y_offset)`` placing *fg* in the middle of *bg*."""
    return (bg.width - fg.width) // 2, (bg.height - fg.height) // 2


def paste(fg: MatrixBuffer, bg: MatrixBuffer) -> MatrixBuffer:
    """Overlay *fg* centered on a copy of *bg*.

    Raises:
        SizeMismatch: If *fg* is wider or taller than *bg*.
    """
    if fg.width > bg.width or fg.height > bg.height:
        raise SizeMismatch(
            f"Foreground {fg.width}x{fg.height} does not fit in background {bg.width}x{bg.height}"
        )
    x_offset, y_offset = centre_offset(fg, bg)
    composed = bg.to_array()
    composed[y_offset : y_offset + fg.height, x_offset : x_offset + fg.width] = fg.view()
    LOGGER.debug("Pasted %sx%s at offset (%s, %s)", fg.width, fg.height, x_offset, y_offset)
    return MatrixBuffer(bg.height, bg.width, composed)


__all__ = ["centre_offset", "paste", "select_region"]
