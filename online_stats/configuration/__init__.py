"""Typed configuration API."""

from online_stats.configuration.loader import load_runtime_config
from online_stats.configuration.schema import MomentsConfig, RuntimeConfig, SystemConfig
from online_stats.configuration.validate import validate_runtime_config

__all__ = [
    "MomentsConfig",
    "RuntimeConfig",
    "SystemConfig",
    "load_runtime_config",
    "validate_runtime_config",
]
