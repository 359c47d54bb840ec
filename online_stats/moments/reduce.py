"""Tree reduction over independently fed accumulators."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TypeVar

LOGGER = logging.getLogger(__name__)

AccumulatorT = TypeVar("AccumulatorT")


def merge_all(accumulators: Iterable[AccumulatorT]) -> AccumulatorT:
    """Merge same-kind accumulators pairwise into a new accumulator.

    Works for ``RunningStats``, ``OnlineCovariance`` and
    ``OnlineStandardScaler``. Inputs are copied first and never mutated. The
    reduction is a balanced binary tree, which keeps rounding error growth
    logarithmic in the number of partials.
    """
    items = list(accumulators)
    if not items:
        raise ValueError("merge_all needs at least one accumulator.")
    kind = type(items[0])
    for item in items[1:]:
        if type(item) is not kind:
            raise TypeError(
                f"Cannot merge {type(item).__name__} with {kind.__name__} accumulators."
            )

    level = [item.copy() for item in items]
    while len(level) > 1:
        paired = []
        for idx in range(0, len(level) - 1, 2):
            left = level[idx]
            left.merge(level[idx + 1])
            paired.append(left)
        if len(level) % 2:
            paired.append(level[-1])
        level = paired

    LOGGER.debug("Merged %d %s partials", len(items), kind.__name__)
    return level[0]
