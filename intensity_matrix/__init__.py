"""Grayscale intensity matrix transforms for recognition preprocessing.

This package resizes, crops, projects, composites and shifts dense 2-D
intensity planes. It is a numeric stage only: callers decode images and hand
over :class:`MatrixBuffer` values, and every transform returns a new buffer
without touching its inputs.

Module Organization
-------------------

buffer
    The ``MatrixBuffer`` value type, ``create``/``destroy`` and the error
    taxonomy (``InvalidDimension``, ``OutOfBounds``, ``SizeMismatch``).

positions
    Floor/fraction splitting of real coordinates and integrality tests.

scaling
    Adaptive scale-factor search and bilinear resampling.

regions
    Rectangular region extraction and centered compositing.

density
    Row/column density projections and whole-buffer average.

translation
    Wrap-around translation.

settings
    Numeric constants, named presets and JSON/YAML loading.

pipeline
    Picklable transform chains and batch execution with optional progress.

imaging
    Conversion to and from in-memory Pillow images.

Example Usage
-------------

    from intensity_matrix import MatrixBuffer, paste, scale_matrix, create

    glyph = MatrixBuffer.from_rows([[0, 255], [255, 0]])
    scaled = scale_matrix(glyph, 2.0)
    canvas = paste(scaled, create(8, 8))
"""
from __future__ import annotations

import logging

from .buffer import (
    BufferReleased,
    InvalidDimension,
    MatrixBuffer,
    MatrixError,
    OutOfBounds,
    SizeMismatch,
    create,
    destroy,
)
from .density import average_darkness, horiz_density, vert_density
from .imaging import buffer_from_image, buffer_to_image
from .pipeline import TransformStep, apply_steps, run_batch
from .positions import PositionSplit, is_integral, split_position
from .regions import paste, select_region
from .scaling import AdjustedScale, adjust_scale_factor, scale_matrix
from .settings import DEFAULT_SETTINGS_NAME, SETTINGS_PROFILES, EngineSettings, load_settings
from .translation import translate

LOGGER = logging.getLogger("intensity_matrix")

__all__ = [
    "AdjustedScale",
    "BufferReleased",
    "DEFAULT_SETTINGS_NAME",
    "EngineSettings",
    "InvalidDimension",
    "MatrixBuffer",
    "MatrixError",
    "OutOfBounds",
    "PositionSplit",
    "SETTINGS_PROFILES",
    "SizeMismatch",
    "TransformStep",
    "adjust_scale_factor",
    "apply_steps",
    "average_darkness",
    "buffer_from_image",
    "buffer_to_image",
    "create",
    "destroy",
    "horiz_density",
    "is_integral",
    "load_settings",
    "paste",
    "run_batch",
    "scale_matrix",
    "select_region",
    "split_position",
    "translate",
    "vert_density",
]
