from __future__ import annotations

import pytest

np = pytest.importorskip("numpy")

try:
    from .documentation import documents
except ImportError:  # pragma: no cover - fallback for direct execution
    from tests.documentation import documents

import intensity_matrix as im  # noqa: E402
from intensity_matrix import pipeline  # noqa: E402
from intensity_matrix.buffer import MatrixBuffer  # noqa: E402
from intensity_matrix.pipeline import TransformStep, apply_steps, run_batch  # noqa: E402


def _glyph(seed: int) -> MatrixBuffer:
    rng = np.random.default_rng(seed)
    return MatrixBuffer.from_array(rng.integers(0, 256, size=(6, 8)))


@pytest.fixture
def steps() -> list[TransformStep]:
    return [
        TransformStep("select_region", {"x": 1, "y": 1, "w": 4, "h": 4}),
        TransformStep("scale", {"scale_factor": 2.0}),
        TransformStep("paste", {"background": im.create(10, 10)}),
        TransformStep("translate", {"x_offset": 1, "y_offset": -1}),
    ]


def _sequential(buffer: MatrixBuffer) -> MatrixBuffer:
    region = im.select_region(buffer, 1, 1, 4, 4)
    scaled = im.scale_matrix(region, 2.0)
    pasted = im.paste(scaled, im.create(10, 10))
    return im.translate(pasted, 1, -1)


@documents("A step chain matches calling the operations one after another")
def test_apply_steps_matches_sequential_calls(steps):
    source = _glyph(1)

    result = apply_steps(source, steps)

    assert result == _sequential(source)
    assert result.shape == (10, 10)


def test_apply_steps_leaves_input_untouched(steps):
    source = _glyph(2)
    before = source.to_array()

    apply_steps(source, steps)

    assert not source.released
    assert np.array_equal(source.to_array(), before)


def test_apply_no_steps_returns_copy():
    source = _glyph(3)

    result = apply_steps(source, [])

    assert result == source
    assert result is not source


def test_density_steps_produce_projections():
    source = _glyph(4)

    result = apply_steps(source, [TransformStep("vert_density")])

    assert result == im.vert_density(source)


def test_unknown_operation_rejected():
    with pytest.raises(ValueError, match="Unknown operation"):
        TransformStep("rotate", {"degrees": 90})


def test_run_batch_preserves_order(steps):
    buffers = [_glyph(seed) for seed in range(4)]

    results = run_batch(buffers, steps)

    assert len(results) == len(buffers)
    for buffer, result in zip(buffers, results):
        assert result == _sequential(buffer)


def test_run_batch_with_process_pool(steps):
    buffers = [_glyph(seed) for seed in range(3)]

    results = run_batch(buffers, steps, workers=2)

    assert [result.shape for result in results] == [(10, 10)] * 3
    for buffer, result in zip(buffers, results):
        assert result == _sequential(buffer)


def test_run_batch_progress_without_tqdm(monkeypatch, steps):
    monkeypatch.setattr(pipeline, "_tqdm", None)

    results = run_batch([_glyph(5)], steps, progress=True)

    assert len(results) == 1


def test_run_batch_rejects_bad_worker_count(steps):
    with pytest.raises(ValueError):
        run_batch([_glyph(6)], steps, workers=0)
