"""Moment snapshots and the pairwise combine rules used by every merge."""

from __future__ import annotations

from dataclasses import dataclass, replace

DEFAULT_EPS = 1e-12


@dataclass(slots=True)
class MomentState:
    """Welford state for a single stream: count, running mean, and M2."""

    count: int = 0
    mean: float = 0.0
    m2: float = 0.0


@dataclass(slots=True)
class PairedMomentState:
    """Welford state for two co-indexed streams plus their cross moment."""

    count: int = 0
    mean_x: float = 0.0
    mean_y: float = 0.0
    m2_x: float = 0.0
    m2_y: float = 0.0
    c: float = 0.0


def combine_moments(first: MomentState, second: MomentState) -> MomentState:
    """Return the state of ``first`` followed by ``second`` (Chan et al.).

    Neither input is modified. The result holds for any split point, so
    partial states can be reduced in any order or tree shape.
    """
    if second.count == 0:
        return replace(first)
    if first.count == 0:
        return replace(second)

    n_a = float(first.count)
    n_b = float(second.count)
    n_total = n_a + n_b

    delta = second.mean - first.mean
    return MomentState(
        count=first.count + second.count,
        mean=(n_a * first.mean + n_b * second.mean) / n_total,
        m2=first.m2 + second.m2 + (delta * delta) * (n_a * n_b / n_total),
    )


def combine_paired_moments(
    first: PairedMomentState, second: PairedMomentState
) -> PairedMomentState:
    """Bivariate form of :func:`combine_moments`, including the cross moment."""
    if second.count == 0:
        return replace(first)
    if first.count == 0:
        return replace(second)

    n_a = float(first.count)
    n_b = float(second.count)
    n_total = n_a + n_b
    weight = n_a * n_b / n_total

    dx = second.mean_x - first.mean_x
    dy = second.mean_y - first.mean_y
    return PairedMomentState(
        count=first.count + second.count,
        mean_x=first.mean_x + dx * (n_b / n_total),
        mean_y=first.mean_y + dy * (n_b / n_total),
        m2_x=first.m2_x + second.m2_x + dx * dx * weight,
        m2_y=first.m2_y + second.m2_y + dy * dy * weight,
        c=first.c + second.c + dx * dy * weight,
    )
