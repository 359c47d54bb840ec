"""Configuration loader with YAML, `.env`, and environment overrides."""

import json
import logging
import os
from collections.abc import Mapping
from dataclasses import fields
from pathlib import Path
from typing import Any, TypeVar

import yaml
from dotenv import load_dotenv
from online_stats.configuration.schema import MomentsConfig, RuntimeConfig, SystemConfig
from online_stats.configuration.validate import validate_runtime_config
from online_stats.moments.state import DEFAULT_EPS

LOGGER = logging.getLogger(__name__)

ENV_PREFIX = "OSTATS__"
CONFIG_PATH_ENV = "OSTATS_CONFIG_PATH"

T = TypeVar("T")


def _as_bool(value: Any, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return default


def _as_float(value: Any, default: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return float(default)


def load_yaml_config(config_path: str) -> dict[str, Any]:
    """Load YAML config from project root, the working directory, or an absolute path."""
    project_root = Path(__file__).resolve().parents[2]
    raw_path = Path(config_path)
    candidates: list[Path] = []
    if raw_path.is_absolute():
        candidates.append(raw_path)
    else:
        candidates.extend([Path.cwd() / config_path, project_root / config_path])

    path = next((candidate for candidate in candidates if candidate.exists()), None)
    if path is None:
        tried = ", ".join(str(candidate.absolute()) for candidate in candidates)
        raise FileNotFoundError(f"Configuration file not found. Tried: {tried}")
    with open(path, encoding="utf-8") as file:
        loaded = yaml.safe_load(file) or {}
    if not isinstance(loaded, dict):
        return {}
    LOGGER.debug("Loaded configuration from %s", path)
    return loaded


def _parse_env_scalar(raw: str) -> Any:
    lowered = raw.strip().lower()
    if lowered in {"true", "false"}:
        return lowered == "true"
    if raw.strip().startswith(("[", "{")):
        try:
            return json.loads(raw)
        except (TypeError, ValueError):
            return raw
    try:
        if "." in raw or "e" in lowered:
            return float(raw)
        return int(raw)
    except ValueError:
        return raw


def _set_nested_value(container: dict[str, Any], path_tokens: list[str], value: Any) -> None:
    cur: dict[str, Any] = container
    for token in path_tokens[:-1]:
        key = token.lower()
        node = cur.get(key)
        if not isinstance(node, dict):
            node = {}
            cur[key] = node
        cur = node
    cur[path_tokens[-1].lower()] = value


def apply_env_overrides(data: dict[str, Any], env: Mapping[str, str]) -> dict[str, Any]:
    """Apply `OSTATS__SECTION__KEY` env overrides onto the config dictionary."""
    merged = {key: dict(value) if isinstance(value, dict) else value for key, value in data.items()}
    for key, raw_value in env.items():
        if not key.startswith(ENV_PREFIX):
            continue
        tokens = [token for token in key[len(ENV_PREFIX) :].split("__") if token]
        if not tokens:
            continue
        _set_nested_value(merged, tokens, _parse_env_scalar(raw_value))
    return merged


def _coerce_dataclass_kwargs(raw: dict[str, Any], model_cls: type[T]) -> dict[str, Any]:
    allowed = {item.name for item in fields(model_cls)}
    return {key: value for key, value in raw.items() if key in allowed}


def build_runtime_config(data: dict[str, Any], env: Mapping[str, str]) -> RuntimeConfig:
    """Build a strongly typed runtime config from raw dict + environment."""
    mapped = apply_env_overrides(data, env)

    system_raw = mapped.get("system", {}) if isinstance(mapped.get("system", {}), dict) else {}
    moments_raw = mapped.get("moments", {}) if isinstance(mapped.get("moments", {}), dict) else {}

    runtime = RuntimeConfig(
        system=SystemConfig(**_coerce_dataclass_kwargs(system_raw, SystemConfig)),
        moments=MomentsConfig(**_coerce_dataclass_kwargs(moments_raw, MomentsConfig)),
    )

    runtime.system.log_level = str(runtime.system.log_level or "INFO").strip().upper()
    runtime.system.json_log = _as_bool(runtime.system.json_log, False)
    runtime.system.log_dir = str(runtime.system.log_dir or "logs")
    runtime.moments.eps = _as_float(runtime.moments.eps, DEFAULT_EPS)
    return runtime


def load_runtime_config(
    config_path: str | None = None, env: Mapping[str, str] | None = None
) -> RuntimeConfig:
    """Load `.env`, read YAML when a path is given, apply overrides, and validate.

    Without ``config_path`` the ``OSTATS_CONFIG_PATH`` variable is consulted;
    when neither is set, only defaults and env overrides apply.
    """
    load_dotenv()
    effective_env = os.environ if env is None else env
    path = config_path or effective_env.get(CONFIG_PATH_ENV)
    raw = load_yaml_config(config_path=path) if path else {}
    runtime = build_runtime_config(raw, effective_env)
    validate_runtime_config(runtime)
    return runtime
