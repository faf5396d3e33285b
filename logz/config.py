"""Configuration: frozen dataclass built from defaults, env vars and an optional YAML file."""

import logging
import math
import os
from dataclasses import dataclass, fields, replace

import yaml

from logz.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _parse_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("true", "1", "yes")


def _parse_interval(value, field_name: str = "poll_interval") -> float:
    try:
        interval = float(value)
    except (TypeError, ValueError):
        raise ConfigError(field_name, value, "not a number") from None
    if not math.isfinite(interval) or interval <= 0:
        raise ConfigError(field_name, value, "must be a finite number greater than zero")
    return interval


@dataclass(frozen=True)
class LogzConfig:
    date_format: str = DEFAULT_DATE_FORMAT
    poll_interval: float = 0.5
    from_start: bool = False
    log_level: str = "WARNING"


def load_yaml_config(path: str | None) -> dict:
    """Load overrides from a YAML file. Returns empty dict if no path or file missing."""
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning("Config file %s not found, using defaults", path)
        return {}
    except yaml.YAMLError as e:
        raise ConfigError("config", path, f"invalid YAML: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError("config", path, "top level must be a mapping")
    logger.debug("Loaded YAML config from %s", path)
    return data


def load_config(yaml_data: dict | None = None, env=None) -> LogzConfig:
    """Build LogzConfig from env vars, then override with parsed YAML data."""
    env = os.environ if env is None else env
    yaml_data = yaml_data or {}

    known = {f.name for f in fields(LogzConfig)}
    unknown = sorted(set(yaml_data) - known)
    if unknown:
        logger.warning("Ignoring unknown config keys: %s", ", ".join(unknown))

    cfg = LogzConfig(
        date_format=env.get("LOGZ_DATE_FORMAT", LogzConfig.date_format),
        poll_interval=_parse_interval(env.get("LOGZ_POLL_INTERVAL", LogzConfig.poll_interval)),
        from_start=_parse_bool(env.get("LOGZ_FROM_START", "false")),
        log_level=env.get("LOGZ_LOG_LEVEL", LogzConfig.log_level).upper(),
    )

    overrides = {}
    if "date_format" in yaml_data:
        overrides["date_format"] = str(yaml_data["date_format"])
    if "poll_interval" in yaml_data:
        overrides["poll_interval"] = _parse_interval(yaml_data["poll_interval"])
    if "from_start" in yaml_data:
        overrides["from_start"] = _parse_bool(yaml_data["from_start"])
    if "log_level" in yaml_data:
        overrides["log_level"] = str(yaml_data["log_level"]).upper()

    cfg = replace(cfg, **overrides)
    if cfg.log_level not in LOG_LEVELS:
        raise ConfigError("log_level", cfg.log_level, f"must be one of {', '.join(LOG_LEVELS)}")
    return cfg
