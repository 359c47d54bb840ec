"""Typed runtime configuration schema."""

from __future__ import annotations

from dataclasses import dataclass, field

from online_stats.moments.state import DEFAULT_EPS


@dataclass(slots=True)
class SystemConfig:
    """Logging settings."""

    log_level: str = "INFO"
    json_log: bool = False
    log_dir: str = "logs"


@dataclass(slots=True)
class MomentsConfig:
    """Estimator settings shared by the covariance and scaler readiness gates."""

    eps: float = DEFAULT_EPS


@dataclass(slots=True)
class RuntimeConfig:
    """Full runtime configuration bundle."""

    system: SystemConfig = field(default_factory=SystemConfig)
    moments: MomentsConfig = field(default_factory=MomentsConfig)
