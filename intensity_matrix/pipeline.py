"""Chained transforms applied to batches of buffers.

A recognition front end typically normalises every glyph crop the same way:
cut the region of interest, scale it, center it on a blank canvas and shift
it. :class:`TransformStep` captures one such stage as plain, picklable data so
that :func:`run_batch` can fan a chain out over a process pool.
"""
from __future__ import annotations

import dataclasses
import logging
import uuid
from concurrent.futures import ProcessPoolExecutor, as_completed
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from .buffer import MatrixBuffer, destroy
from .density import horiz_density, vert_density
from .regions import paste, select_region
from .scaling import scale_matrix
from .settings import EngineSettings, resolve_settings
from .translation import translate

try:  # Optional progress bar for batch runs
    from tqdm import tqdm as _tqdm  # type: ignore
except ImportError:  # pragma: no cover - optional dependency
    _tqdm = None

LOGGER = logging.getLogger("intensity_matrix")
WORKER_LOGGER = LOGGER.getChild("worker")


def _scale(buffer: MatrixBuffer, settings: EngineSettings, *, scale_factor: float, adjust: bool = False) -> MatrixBuffer:
    return scale_matrix(buffer, scale_factor, adjust, settings=settings)


def _select_region(buffer: MatrixBuffer, settings: EngineSettings, *, x: int, y: int, w: int, h: int) -> MatrixBuffer:
    return select_region(buffer, x, y, w, h)


def _paste(buffer: MatrixBuffer, settings: EngineSettings, *, background: MatrixBuffer) -> MatrixBuffer:
    return paste(buffer, background)


def _translate(buffer: MatrixBuffer, settings: EngineSettings, *, x_offset: int = 0, y_offset: int = 0) -> MatrixBuffer:
    return translate(buffer, x_offset, y_offset)


def _horiz_density(buffer: MatrixBuffer, settings: EngineSettings) -> MatrixBuffer:
    return horiz_density(buffer, settings=settings)


def _vert_density(buffer: MatrixBuffer, settings: EngineSettings) -> MatrixBuffer:
    return vert_density(buffer, settings=settings)


OPERATIONS: Dict[str, Callable[..., MatrixBuffer]] = {
    "scale": _scale,
    "select_region": _select_region,
    "paste": _paste,
    "translate": _translate,
    "horiz_density": _horiz_density,
    "vert_density": _vert_density,
}


@dataclasses.dataclass(frozen=True)
class TransformStep:
    """One named operation and its keyword parameters.

    Attributes:
        operation: Key into :data:`OPERATIONS`.
        params: Keyword arguments for the operation.
    """

    operation: str
    params: Mapping[str, Any] = dataclasses.field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.operation not in OPERATIONS:
            known = ", ".join(sorted(OPERATIONS))
            raise ValueError(f"Unknown operation {self.operation!r}; expected one of: {known}")

    def __call__(self, buffer: MatrixBuffer, settings: EngineSettings) -> MatrixBuffer:
        return OPERATIONS[self.operation](buffer, settings, **dict(self.params))


def apply_steps(
    buffer: MatrixBuffer,
    steps: Sequence[TransformStep],
    *,
    settings: Optional[EngineSettings] = None,
) -> MatrixBuffer:
    """Run *steps* in order on *buffer* and return the final result.

    Intermediate buffers are released as soon as the next one exists. The
    input buffer is never modified or released; with no steps a copy of it is
    returned.
    """
    settings = resolve_settings(settings)
    current = buffer
    for step in steps:
        result = step(current, settings)
        if current is not buffer:
            destroy(current)
        current = result
    if current is buffer:
        return buffer.copy()
    return current


def _apply_steps_worker(
    buffer: MatrixBuffer, steps: Sequence[TransformStep], settings: EngineSettings
) -> MatrixBuffer:
    """Process-pool entry point for :func:`apply_steps`."""

    WORKER_LOGGER.debug("Transforming %sx%s buffer through %s step(s)", buffer.height, buffer.width, len(steps))
    return apply_steps(buffer, steps, settings=settings)


def _wrap_with_progress(iterable: Iterable[Any], *, total: Optional[int], enabled: bool) -> Iterable[Any]:
    """Return an iterable wrapped with :mod:`tqdm` when available."""

    if not enabled:
        return iterable
    if _tqdm is None:
        LOGGER.debug("Progress helper not available; install tqdm for progress reporting.")
        return iterable
    return _tqdm(iterable, total=total, desc="Transforming buffers", unit="buffer")


def run_batch(
    buffers: Sequence[MatrixBuffer],
    steps: Sequence[TransformStep],
    *,
    workers: int = 1,
    progress: bool = False,
    settings: Optional[EngineSettings] = None,
) -> List[MatrixBuffer]:
    """Apply the same chain of *steps* to every buffer.

    Args:
        buffers: Input buffers; never modified.
        steps: Transform chain.
        workers: Number of worker processes; ``1`` runs in-process.
        progress: Show a tqdm progress bar when tqdm is installed.
        settings: Engine settings, defaults to the ``"default"`` preset.

    Returns:
        Results in the same order as *buffers*.
    """
    if workers < 1:
        raise ValueError(f"workers must be at least 1, got {workers}")
    settings = resolve_settings(settings)
    steps = list(steps)
    run_id = uuid.uuid4().hex
    LOGGER.info("Starting batch run %s: %s buffer(s), %s step(s)", run_id, len(buffers), len(steps))

    results: List[Optional[MatrixBuffer]] = [None] * len(buffers)
    if workers == 1:
        for index in _wrap_with_progress(range(len(buffers)), total=len(buffers), enabled=progress):
            results[index] = apply_steps(buffers[index], steps, settings=settings)
    else:
        with ProcessPoolExecutor(max_workers=workers) as executor:
            futures = {
                executor.submit(_apply_steps_worker, buffer, steps, settings): index
                for index, buffer in enumerate(buffers)
            }
            for future in _wrap_with_progress(as_completed(futures), total=len(futures), enabled=progress):
                results[futures[future]] = future.result()

    LOGGER.info("Finished batch run %s", run_id)
    return [result for result in results if result is not None]


__all__ = [
    "OPERATIONS",
    "TransformStep",
    "apply_steps",
    "run_batch",
]
