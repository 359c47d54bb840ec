"""Online mean/variance for a single scalar stream (Welford)."""

from __future__ import annotations

import logging
import math
from dataclasses import replace

from online_stats.moments.buffers import feed_scalars, scalar_batch
from online_stats.moments.state import MomentState, combine_moments

LOGGER = logging.getLogger(__name__)

_NAN = float("nan")


def _sqrt_or_nan(variance: float) -> float:
    # IEEE overflow can leave m2 at -inf; math.sqrt would raise there.
    if math.isnan(variance) or variance < 0.0:
        return _NAN
    return math.sqrt(variance)


class RunningStats:
    """Mergeable running mean and variance with O(1) updates.

    Undefined statistics are reported as NaN rather than raised: population
    variance needs one observation, sample variance needs two.
    """

    def __init__(self, state: MomentState | None = None):
        self.state = state or MomentState()

    @classmethod
    def from_snapshot(cls, snapshot: MomentState) -> RunningStats:
        return cls(state=replace(snapshot))

    def push(self, x: float) -> None:
        value = float(x)
        state = self.state
        state.count += 1
        delta = value - state.mean
        state.mean += delta / state.count
        # delta2 must use the updated mean.
        delta2 = value - state.mean
        state.m2 += delta * delta2

    def push_batch(self, values, length: int | None = None) -> int:
        """Push a batch in order; ``None`` or an empty batch is a no-op."""
        buffer, count = scalar_batch(values, length)
        return feed_scalars(buffer, count, self.push)

    def merge(self, other: RunningStats) -> None:
        """Absorb ``other``'s history into this accumulator."""
        if not isinstance(other, RunningStats):
            raise TypeError(f"Cannot merge {type(other).__name__} into RunningStats.")
        LOGGER.debug(
            "Merging RunningStats with %d observations into %d", other.state.count, self.state.count
        )
        self.state = combine_moments(self.state, other.state)

    def merged(self, other: RunningStats) -> RunningStats:
        result = self.copy()
        result.merge(other)
        return result

    def copy(self) -> RunningStats:
        return RunningStats.from_snapshot(self.state)

    def snapshot(self) -> MomentState:
        return replace(self.state)

    def count(self) -> int:
        return self.state.count

    def mean(self) -> float:
        return self.state.mean

    def variance_population(self) -> float:
        if self.state.count < 1:
            return _NAN
        return self.state.m2 / float(self.state.count)

    def variance_sample(self) -> float:
        if self.state.count < 2:
            return _NAN
        return self.state.m2 / float(self.state.count - 1)

    def stddev_population(self) -> float:
        return _sqrt_or_nan(self.variance_population())

    def stddev_sample(self) -> float:
        return _sqrt_or_nan(self.variance_sample())

    def reset(self) -> None:
        self.state = MomentState()

    def to_state(self) -> dict:
        return {
            "count": self.state.count,
            "mean": self.state.mean,
            "m2": self.state.m2,
        }

    def load_state(self, raw_state: dict) -> None:
        if not isinstance(raw_state, dict):
            return
        count = int(raw_state.get("count") or 0)
        if count < 0:
            raise ValueError("count must be >= 0.")
        raw_mean = raw_state.get("mean")
        raw_m2 = raw_state.get("m2")
        mean = float(raw_mean) if raw_mean is not None else 0.0
        m2 = float(raw_m2) if raw_m2 is not None else 0.0
        if count == 0 and (mean != 0.0 or m2 != 0.0):
            raise ValueError("An empty state must have mean and m2 equal to 0.")
        # -inf is reachable through overflow and is kept for round trips.
        if math.isfinite(m2) and m2 < 0.0:
            raise ValueError("m2 must be >= 0.")
        self.state = MomentState(count=count, mean=mean, m2=m2)

    def __repr__(self) -> str:
        return (
            f"RunningStats(count={self.state.count}, mean={self.state.mean!r}, "
            f"m2={self.state.m2!r})"
        )
