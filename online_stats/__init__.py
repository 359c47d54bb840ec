"""Numerically stable, mergeable online statistics."""

from online_stats.moments import (
    DEFAULT_EPS,
    OnlineCovariance,
    OnlineStandardScaler,
    RunningStats,
    merge_all,
)

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_EPS",
    "OnlineCovariance",
    "OnlineStandardScaler",
    "RunningStats",
    "merge_all",
    "__version__",
]
