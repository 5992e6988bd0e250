"""Matrix buffer value type and the engine's error taxonomy.

A :class:`MatrixBuffer` owns a flat, row-major ``float32`` array together with
its width and height. Every transform in the package consumes buffers and
returns freshly allocated ones; nothing here ever aliases another buffer's
storage.

Key Components
--------------

MatrixBuffer
    Owned intensity plane with bounds-checked element access.

create / destroy
    Explicit allocation and idempotent release helpers.

MatrixError
    Base class for the engine's failures (``InvalidDimension``,
    ``OutOfBounds``, ``SizeMismatch``, ``BufferReleased``).
"""
from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence, Tuple

import numpy as np

LOGGER = logging.getLogger("intensity_matrix")

DTYPE = np.float32


class MatrixError(ValueError):
    """Base class for matrix engine failures."""


class InvalidDimension(MatrixError):
    """Raised when a width or height would not be a positive integer."""


class OutOfBounds(MatrixError):
    """Raised when an access or geometry falls outside a buffer."""


class SizeMismatch(OutOfBounds):
    """Raised when two buffers have incompatible dimensions."""


class BufferReleased(MatrixError):
    """Raised when a released buffer is read or written."""


def _ensure_dimension(name: str, value: object) -> int:
    if isinstance(value, (bool, np.bool_)) or not isinstance(value, (int, np.integer)):
        raise InvalidDimension(f"{name} must be an integer, got {value!r}")
    if value <= 0:
        raise InvalidDimension(f"{name} must be positive, got {value}")
    return int(value)


class MatrixBuffer:
    """Row-major grayscale intensity plane.

    Attributes:
        width: Number of columns.
        height: Number of rows.
        data: Flat ``float32`` array of length ``width * height``;
            ``None`` once the buffer has been released.
    """

    __slots__ = ("width", "height", "_data")

    def __init__(self, height: int, width: int, data: Optional[np.ndarray] = None) -> None:
        self.height = _ensure_dimension("height", height)
        self.width = _ensure_dimension("width", width)
        size = self.height * self.width
        if data is None:
            self._data: Optional[np.ndarray] = np.zeros(size, dtype=DTYPE)
        else:
            flat = np.array(data, dtype=DTYPE, copy=True).reshape(-1)
            if flat.size != size:
                raise SizeMismatch(
                    f"Expected {size} elements for a {self.height}x{self.width} buffer, got {flat.size}"
                )
            self._data = flat

    @classmethod
    def from_array(cls, array: object) -> "MatrixBuffer":
        """Build a buffer from a 2-D array-like, copying its contents.

        Args:
            array: Anything :func:`numpy.asarray` accepts with two dimensions.

        Returns:
            New buffer with ``height, width == array.shape``.
        """
        arr = np.asarray(array, dtype=DTYPE)
        if arr.ndim != 2:
            raise InvalidDimension(f"Expected a 2-D array, got {arr.ndim} dimension(s)")
        height, width = arr.shape
        return cls(height, width, arr)

    @classmethod
    def from_rows(cls, rows: Iterable[Sequence[float]]) -> "MatrixBuffer":
        """Build a buffer from nested row sequences."""
        rows = [list(row) for row in rows]
        if not rows or not rows[0]:
            raise InvalidDimension("Rows must describe at least a 1x1 buffer")
        width = len(rows[0])
        if any(len(row) != width for row in rows):
            raise SizeMismatch("All rows must have the same length")
        return cls.from_array(rows)

    @property
    def data(self) -> np.ndarray:
        if self._data is None:
            raise BufferReleased("Buffer storage has already been released")
        return self._data

    @property
    def released(self) -> bool:
        return self._data is None

    @property
    def shape(self) -> Tuple[int, int]:
        return self.height, self.width

    def index(self, row: int, col: int) -> int:
        """Return the flat index of ``(row, col)`` after bounds checking."""
        if not (0 <= row < self.height and 0 <= col < self.width):
            raise OutOfBounds(
                f"Position (row={row}, col={col}) outside {self.height}x{self.width} buffer"
            )
        return row * self.width + col

    def get(self, row: int, col: int) -> float:
        return float(self.data[self.index(row, col)])

    def set(self, row: int, col: int, value: float) -> None:
        self.data[self.index(row, col)] = value

    def to_array(self) -> np.ndarray:
        """Return a ``(height, width)`` copy of the contents."""
        return self.data.reshape(self.height, self.width).copy()

    def view(self) -> np.ndarray:
        """Return a read-only ``(height, width)`` view for internal transforms."""
        view = self.data.reshape(self.height, self.width).view()
        view.setflags(write=False)
        return view

    def copy(self) -> "MatrixBuffer":
        return MatrixBuffer(self.height, self.width, self.data)

    def release(self) -> None:
        """Drop the backing storage. Releasing twice is a no-op."""
        if self._data is None:
            return
        LOGGER.debug("Releasing %sx%s buffer", self.height, self.width)
        self._data = None

    def __enter__(self) -> "MatrixBuffer":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.release()
        return False

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MatrixBuffer):
            return NotImplemented
        if self.released or other.released:
            return False
        return self.shape == other.shape and bool(np.array_equal(self._data, other._data))

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        state = "released" if self.released else "live"
        return f"MatrixBuffer(height={self.height}, width={self.width}, {state})"


def create(height: int, width: int) -> MatrixBuffer:
    """Allocate a ``height x width`` buffer.

    Contents are unspecified by contract; the current implementation
    zero-fills them.

    Raises:
        InvalidDimension: If either dimension is not a positive integer.
    """
    return MatrixBuffer(height, width)


def destroy(buffer: Optional[MatrixBuffer]) -> None:
    """Release *buffer*'s storage; ``None`` and released buffers are ignored."""
    if buffer is None:
        return
    buffer.release()


__all__ = [
    "BufferReleased",
    "DTYPE",
    "InvalidDimension",
    "MatrixBuffer",
    "MatrixError",
    "OutOfBounds",
    "SizeMismatch",
    "create",
    "destroy",
]
