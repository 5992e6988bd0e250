from __future__ import annotations

import pytest

np = pytest.importorskip("numpy")

try:
    from .documentation import documents
except ImportError:  # pragma: no cover - fallback for direct execution
    from tests.documentation import documents

import intensity_matrix as im  # noqa: E402
from intensity_matrix.buffer import (  # noqa: E402
    BufferReleased,
    InvalidDimension,
    MatrixBuffer,
    OutOfBounds,
    SizeMismatch,
)


def test_create_allocates_row_major_storage():
    buffer = im.create(3, 4)

    assert buffer.height == 3
    assert buffer.width == 4
    assert buffer.shape == (3, 4)
    assert buffer.data.shape == (12,)
    assert buffer.data.dtype == np.float32


@pytest.mark.parametrize("height, width", [(0, 3), (3, 0), (-1, 2), (2.5, 3), (True, 2)])
def test_create_rejects_invalid_dimensions(height, width):
    with pytest.raises(InvalidDimension):
        im.create(height, width)


@documents("Releasing a buffer is idempotent and tolerates missing handles")
def test_destroy_releases_storage_once():
    buffer = im.create(2, 2)

    im.destroy(buffer)
    assert buffer.released
    im.destroy(buffer)
    im.destroy(None)

    with pytest.raises(BufferReleased):
        _ = buffer.data


def test_context_manager_releases_on_exit():
    with im.create(2, 3) as buffer:
        buffer.set(1, 2, 7.0)
        assert buffer.get(1, 2) == 7.0
    assert buffer.released


def test_index_is_row_major():
    buffer = im.create(3, 4)

    assert buffer.index(0, 0) == 0
    assert buffer.index(1, 0) == 4
    assert buffer.index(2, 3) == 11


@pytest.mark.parametrize("row, col", [(-1, 0), (0, -1), (3, 0), (0, 4)])
def test_element_access_is_bounds_checked(row, col):
    buffer = im.create(3, 4)

    with pytest.raises(OutOfBounds):
        buffer.get(row, col)
    with pytest.raises(OutOfBounds):
        buffer.set(row, col, 1.0)


def test_from_array_copies_input():
    source = np.arange(6, dtype=np.float32).reshape(2, 3)
    buffer = MatrixBuffer.from_array(source)

    source[0, 0] = 99.0

    assert buffer.get(0, 0) == 0.0
    assert buffer.get(1, 2) == 5.0


def test_from_rows_rejects_ragged_rows():
    with pytest.raises(SizeMismatch):
        MatrixBuffer.from_rows([[1, 2], [3]])


def test_data_length_must_match_dimensions():
    with pytest.raises(SizeMismatch):
        MatrixBuffer(2, 2, np.zeros(3))


def test_from_array_requires_two_dimensions():
    with pytest.raises(InvalidDimension):
        MatrixBuffer.from_array(np.zeros(4))


def test_copy_and_to_array_do_not_alias():
    buffer = MatrixBuffer.from_rows([[1, 2], [3, 4]])
    duplicate = buffer.copy()
    plane = buffer.to_array()

    duplicate.set(0, 0, 10.0)
    plane[1, 1] = -1.0

    assert buffer.get(0, 0) == 1.0
    assert buffer.get(1, 1) == 4.0
    assert duplicate != buffer


def test_view_is_read_only():
    buffer = MatrixBuffer.from_rows([[1, 2], [3, 4]])

    with pytest.raises(ValueError):
        buffer.view()[0, 0] = 5.0


def test_equality_compares_shape_and_contents():
    a = MatrixBuffer.from_rows([[1, 2, 3, 4]])
    b = MatrixBuffer.from_rows([[1, 2], [3, 4]])

    assert a != b
    assert b == MatrixBuffer.from_rows([[1, 2], [3, 4]])


def test_errors_share_a_common_base():
    assert issubclass(InvalidDimension, im.MatrixError)
    assert issubclass(SizeMismatch, OutOfBounds)
    assert issubclass(im.MatrixError, ValueError)
