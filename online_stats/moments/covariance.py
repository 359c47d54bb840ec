"""Online covariance and Pearson correlation for two co-indexed streams."""

from __future__ import annotations

import logging
import math
from dataclasses import replace

from online_stats.moments.buffers import feed_pairs, paired_batch
from online_stats.moments.state import DEFAULT_EPS, PairedMomentState, combine_paired_moments

LOGGER = logging.getLogger(__name__)

_NAN = float("nan")


class OnlineCovariance:
    """Bivariate Welford accumulator with a readiness-gated correlation."""

    def __init__(self, state: PairedMomentState | None = None, *, eps: float = DEFAULT_EPS):
        self.state = state or PairedMomentState()
        self.eps = float(eps)

    @classmethod
    def from_snapshot(
        cls, snapshot: PairedMomentState, *, eps: float = DEFAULT_EPS
    ) -> OnlineCovariance:
        return cls(state=replace(snapshot), eps=eps)

    def observe(self, x: float, y: float) -> None:
        x_value = float(x)
        y_value = float(y)
        state = self.state
        state.count += 1

        dx = x_value - state.mean_x
        dy = y_value - state.mean_y

        state.mean_x += dx / state.count
        state.mean_y += dy / state.count

        dx2 = x_value - state.mean_x
        dy2 = y_value - state.mean_y

        state.m2_x += dx * dx2
        state.m2_y += dy * dy2
        # Old x-delta against new y-delta keeps the cross moment exact.
        state.c += dx * dy2

    def observe_batch(self, xs, ys, length: int | None = None) -> int:
        """Observe pairs positionally.

        ``None`` on either side or a zero length is a no-op. Sequences that
        would supply a different number of values raise ``ValueError``.
        """
        x_buffer, y_buffer, count = paired_batch(xs, ys, length)
        return feed_pairs(x_buffer, y_buffer, count, self.observe)

    def merge(self, other: OnlineCovariance) -> None:
        if not isinstance(other, OnlineCovariance):
            raise TypeError(f"Cannot merge {type(other).__name__} into OnlineCovariance.")
        LOGGER.debug(
            "Merging OnlineCovariance with %d pairs into %d", other.state.count, self.state.count
        )
        self.state = combine_paired_moments(self.state, other.state)

    def merged(self, other: OnlineCovariance) -> OnlineCovariance:
        result = self.copy()
        result.merge(other)
        return result

    def copy(self) -> OnlineCovariance:
        return OnlineCovariance.from_snapshot(self.state, eps=self.eps)

    def snapshot(self) -> PairedMomentState:
        return replace(self.state)

    def count(self) -> int:
        return self.state.count

    def mean_x(self) -> float:
        return self.state.mean_x

    def mean_y(self) -> float:
        return self.state.mean_y

    def _population(self, moment: float) -> float:
        if self.state.count < 1:
            return _NAN
        return moment / float(self.state.count)

    def _sample(self, moment: float) -> float:
        if self.state.count < 2:
            return _NAN
        return moment / float(self.state.count - 1)

    def variance_x_population(self) -> float:
        return self._population(self.state.m2_x)

    def variance_y_population(self) -> float:
        return self._population(self.state.m2_y)

    def variance_x_sample(self) -> float:
        return self._sample(self.state.m2_x)

    def variance_y_sample(self) -> float:
        return self._sample(self.state.m2_y)

    def covariance_population(self) -> float:
        return self._population(self.state.c)

    def covariance_sample(self) -> float:
        return self._sample(self.state.c)

    def ready(self) -> bool:
        """True once both streams have a variance above ``eps**2``."""
        if self.state.count < 2:
            return False
        var_x = self.variance_x_population()
        var_y = self.variance_y_population()
        if math.isnan(var_x) or math.isnan(var_y):
            return False
        floor = self.eps * self.eps
        return var_x > floor and var_y > floor

    def correlation(self) -> float:
        if not self.ready():
            return _NAN
        denom = math.sqrt(self.variance_x_population() * self.variance_y_population())
        if not math.isfinite(denom) or denom <= self.eps:
            return _NAN
        # Population and sample normalization cancel in the ratio.
        return self.covariance_population() / denom

    def reset(self) -> None:
        self.state = PairedMomentState()

    def to_state(self) -> dict:
        return {
            "count": self.state.count,
            "mean_x": self.state.mean_x,
            "mean_y": self.state.mean_y,
            "m2_x": self.state.m2_x,
            "m2_y": self.state.m2_y,
            "c": self.state.c,
        }

    def load_state(self, raw_state: dict) -> None:
        if not isinstance(raw_state, dict):
            return
        count = int(raw_state.get("count") or 0)
        if count < 0:
            raise ValueError("count must be >= 0.")
        values = {}
        for key in ("mean_x", "mean_y", "m2_x", "m2_y", "c"):
            raw_value = raw_state.get(key)
            values[key] = float(raw_value) if raw_value is not None else 0.0
        if count == 0 and any(value != 0.0 for value in values.values()):
            raise ValueError("An empty state must have every moment equal to 0.")
        for key in ("m2_x", "m2_y"):
            if math.isfinite(values[key]) and values[key] < 0.0:
                raise ValueError(f"{key} must be >= 0.")
        self.state = PairedMomentState(count=count, **values)

    def __repr__(self) -> str:
        return (
            f"OnlineCovariance(count={self.state.count}, mean_x={self.state.mean_x!r}, "
            f"mean_y={self.state.mean_y!r}, c={self.state.c!r})"
        )
