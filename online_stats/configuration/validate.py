"""Runtime configuration validation."""

from __future__ import annotations

import math

from online_stats.configuration.schema import RuntimeConfig

LOG_LEVELS = frozenset({"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET"})


def validate_runtime_config(runtime: RuntimeConfig) -> None:
    """Validate runtime configuration invariants."""
    eps = runtime.moments.eps
    if not math.isfinite(eps) or eps < 0.0:
        raise ValueError("moments.eps must be a finite value >= 0.")
    if runtime.system.log_level not in LOG_LEVELS:
        raise ValueError(f"system.log_level must be one of: {', '.join(sorted(LOG_LEVELS))}.")
    if not str(runtime.system.log_dir or "").strip():
        raise ValueError("system.log_dir must not be empty.")
