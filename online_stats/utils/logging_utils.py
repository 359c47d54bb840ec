import json
import logging
import os
from logging.handlers import RotatingFileHandler

from online_stats.configuration.schema import RuntimeConfig


class JsonLogFormatter(logging.Formatter):
    def format(self, record):
        payload = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "logger": record.name,
            "level": record.levelname,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True)


def _resolve_logs_dir(config: RuntimeConfig) -> str:
    candidate = str(os.getenv("OSTATS_LOG_DIR", config.system.log_dir) or "").strip()
    return candidate or "logs"


def _use_json(config: RuntimeConfig) -> bool:
    raw = os.getenv("OSTATS_JSON_LOG")
    if raw is None:
        return bool(config.system.json_log)
    return raw.strip().lower() in {"1", "true", "yes"}


def setup_logging(name="online_stats", config: RuntimeConfig | None = None):
    """Sets up a logger with a StreamHandler and a rotating FileHandler."""
    runtime = config or RuntimeConfig()
    logger = logging.getLogger(name)
    logger.setLevel(runtime.system.log_level)
    logger.propagate = False

    # Prevent duplicate handlers when setup_logging is called multiple times.
    if logger.handlers:
        return logger

    if _use_json(runtime):
        formatter = JsonLogFormatter()
    else:
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    ch = logging.StreamHandler()
    ch.setFormatter(formatter)
    logger.addHandler(ch)

    # 10MB limit, 5 backups
    logs_dir = _resolve_logs_dir(runtime)
    os.makedirs(logs_dir, exist_ok=True)
    fh = RotatingFileHandler(
        os.path.join(logs_dir, f"{name}.log"),
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
    )
    fh.setFormatter(formatter)
    logger.addHandler(fh)

    return logger
