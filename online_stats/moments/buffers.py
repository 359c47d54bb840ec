"""Batch feeding: one (buffer, length) core plus native-sequence adapters."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from itertools import islice

import numpy as np

LOGGER = logging.getLogger(__name__)


def as_float_buffer(values) -> Sequence | None:
    """Return an indexable 1-D view of ``values`` without copying when possible.

    Lists and tuples are used as-is. Anything else goes through
    ``numpy.asarray`` without a dtype, so float64 arrays, ``array.array`` and
    memoryviews are viewed in place. Elements are converted with ``float`` one
    at a time by the accumulator, never up front.
    """
    if values is None:
        return None
    if isinstance(values, (list, tuple)):
        return values
    return np.asarray(values).reshape(-1)


def _effective_length(buffer: Sequence | None, length: int | None) -> int:
    if buffer is None:
        return 0
    size = len(buffer)
    if length is None:
        return size
    return max(0, min(int(length), size))


def feed_scalars(buffer: Sequence | None, length: int, sink: Callable[[float], None]) -> int:
    """Push the first ``length`` elements of ``buffer`` into ``sink``.

    A ``None`` buffer or a non-positive length is a no-op. Returns the number
    of elements consumed.
    """
    if buffer is None or length <= 0:
        return 0
    for value in islice(buffer, length):
        sink(value)
    return length


def feed_pairs(
    xs: Sequence | None,
    ys: Sequence | None,
    length: int,
    sink: Callable[[float, float], None],
) -> int:
    """Paired counterpart of :func:`feed_scalars`."""
    if xs is None or ys is None or length <= 0:
        return 0
    for x_value, y_value in zip(islice(xs, length), islice(ys, length)):
        sink(x_value, y_value)
    return length


def scalar_batch(values, length: int | None = None) -> tuple[Sequence | None, int]:
    """Adapt any 1-D sequence into ``(buffer, length)`` form."""
    buffer = as_float_buffer(values)
    return buffer, _effective_length(buffer, length)


def paired_batch(
    xs, ys, length: int | None = None
) -> tuple[Sequence | None, Sequence | None, int]:
    """Adapt two co-indexed sequences into ``(xs, ys, length)`` form.

    Raises ``ValueError`` when the two sides would supply a different number
    of elements.
    """
    x_buffer = as_float_buffer(xs)
    y_buffer = as_float_buffer(ys)
    if x_buffer is None or y_buffer is None:
        return None, None, 0

    x_length = _effective_length(x_buffer, length)
    y_length = _effective_length(y_buffer, length)
    if x_length != y_length:
        LOGGER.warning("Rejected paired batch with lengths %d and %d", x_length, y_length)
        raise ValueError(
            f"Paired batch length mismatch: x has {x_length} values, y has {y_length}."
        )
    return x_buffer, y_buffer, x_length
