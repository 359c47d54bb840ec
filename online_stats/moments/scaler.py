"""Online z-score standardization backed by a single RunningStats."""

from __future__ import annotations

import math

import numpy as np

from online_stats.moments.buffers import feed_scalars, scalar_batch
from online_stats.moments.running_stats import RunningStats
from online_stats.moments.state import DEFAULT_EPS

_NAN = float("nan")


class OnlineStandardScaler:
    """Streaming ``z = (x - mean) / std`` with an explicit readiness gate.

    Until at least two observations with population variance above
    ``eps**2`` have been seen, every transform yields NaN.
    """

    def __init__(self, *, eps: float = DEFAULT_EPS, stats: RunningStats | None = None):
        self.stats = stats or RunningStats()
        self.eps = float(eps)

    @classmethod
    def from_config(cls, config) -> OnlineStandardScaler:
        """Build a scaler from a ``RuntimeConfig`` (or a bare ``MomentsConfig``)."""
        moments = getattr(config, "moments", config)
        return cls(eps=moments.eps)

    def observe(self, x: float) -> None:
        self.stats.push(x)

    def observe_batch(self, values, length: int | None = None) -> int:
        buffer, count = scalar_batch(values, length)
        return feed_scalars(buffer, count, self.stats.push)

    def ready(self) -> bool:
        if self.stats.count() < 2:
            return False
        variance = self.stats.variance_population()
        if math.isnan(variance):
            return False
        return variance > self.eps * self.eps

    def count(self) -> int:
        return self.stats.count()

    def mean(self) -> float:
        return self.stats.mean()

    def stddev(self) -> float:
        return self.stats.stddev_population()

    def _inverse_std(self) -> float:
        return 1.0 / math.sqrt(self.stats.variance_population())

    def transform(self, x: float) -> float:
        if not self.ready():
            return _NAN
        return (float(x) - self.stats.mean()) * self._inverse_std()

    def transform_inplace(self, buffer) -> None:
        """Standardize a mutable buffer in place.

        When the scaler is not ready every element is overwritten with NaN so
        that an unfit scaler cannot be mistaken for a trivial input.
        """
        if buffer is None:
            return
        if isinstance(buffer, np.ndarray):
            if not np.issubdtype(buffer.dtype, np.floating):
                raise TypeError(f"transform_inplace needs a float buffer, got {buffer.dtype}.")
            if not self.ready():
                buffer[...] = np.nan
                return
            buffer -= self.stats.mean()
            buffer *= self._inverse_std()
            return

        if not self.ready():
            for idx in range(len(buffer)):
                buffer[idx] = _NAN
            return
        mean = self.stats.mean()
        inverse_std = self._inverse_std()
        for idx in range(len(buffer)):
            buffer[idx] = (float(buffer[idx]) - mean) * inverse_std

    def transform_batch(self, values) -> np.ndarray:
        """Return standardized copies of ``values`` as a float64 array."""
        if values is None:
            return np.empty(0, dtype=np.float64)
        arr = np.asarray(values, dtype=np.float64).reshape(-1)
        if not self.ready():
            return np.full(arr.shape, np.nan, dtype=np.float64)
        return (arr - self.stats.mean()) * self._inverse_std()

    def merge(self, other: OnlineStandardScaler) -> None:
        if not isinstance(other, OnlineStandardScaler):
            raise TypeError(f"Cannot merge {type(other).__name__} into OnlineStandardScaler.")
        self.stats.merge(other.stats)

    def merged(self, other: OnlineStandardScaler) -> OnlineStandardScaler:
        result = self.copy()
        result.merge(other)
        return result

    def copy(self) -> OnlineStandardScaler:
        return OnlineStandardScaler(eps=self.eps, stats=self.stats.copy())

    def reset(self) -> None:
        self.stats.reset()

    def to_state(self) -> dict:
        return self.stats.to_state()

    def load_state(self, raw_state: dict) -> None:
        self.stats.load_state(raw_state)

    def __repr__(self) -> str:
        return f"OnlineStandardScaler(eps={self.eps!r}, stats={self.stats!r})"
