"""Conversion between Pillow images and matrix buffers.

Only in-memory images are handled: callers open and save files themselves.
"""
from __future__ import annotations

import logging

import numpy as np
from PIL import Image

from .buffer import MatrixBuffer

LOGGER = logging.getLogger("intensity_matrix")


def buffer_from_image(image: Image.Image) -> MatrixBuffer:
    """Convert *image* to a single-plane buffer of 0-255 intensities.

    Non-grayscale images are converted to mode ``"L"`` first.
    """
    if image.mode != "L":
        LOGGER.debug("Converting %s image to grayscale", image.mode)
        image = image.convert("L")
    return MatrixBuffer.from_array(np.asarray(image, dtype=np.float32))


def buffer_to_image(buffer: MatrixBuffer) -> Image.Image:
    """Render *buffer* as a mode ``"L"`` image, clipping to ``[0, 255]``."""
    arr = np.clip(np.rint(buffer.view()), 0, 255).astype(np.uint8)
    # 2-D uint8 arrays always map to mode "L".
    return Image.fromarray(arr)


__all__ = ["buffer_from_image", "buffer_to_image"]
