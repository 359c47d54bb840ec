"""Mergeable single-pass moment estimators."""

from .buffers import as_float_buffer as as_float_buffer
from .buffers import paired_batch as paired_batch
from .buffers import scalar_batch as scalar_batch
from .covariance import OnlineCovariance as OnlineCovariance
from .reduce import merge_all as merge_all
from .running_stats import RunningStats as RunningStats
from .scaler import OnlineStandardScaler as OnlineStandardScaler
from .state import DEFAULT_EPS as DEFAULT_EPS
from .state import MomentState as MomentState
from .state import PairedMomentState as PairedMomentState
from .state import combine_moments as combine_moments
from .state import combine_paired_moments as combine_paired_moments
