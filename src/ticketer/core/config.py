import dataclasses
import json
import logging
import os
import re
import tempfile
from datetime import timedelta
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, cast

import yaml

from .exceptions import ConfigError
from .expiry import SWEEP_INTERVAL
from .logging_utils import LogConfig

logger = logging.getLogger("ticketer.core.config")

CONFIG_FILENAME = "ticketer.yml"
ENV_PREFIX = "TICKETER_"

_DURATION_PART_RE = re.compile(r"(\d+)([smhdw])")
_DURATION_MULTIPLIERS = {"s": 1, "m": 60, "h": 3600, "d": 86400, "w": 604800}
_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def _default_config() -> Dict[str, Any]:
    return {
        "path": os.path.join(tempfile.gettempdir(), "tickets"),
        "ttl": None,
        "sequence": False,
        "sweep_interval": int(SWEEP_INTERVAL.total_seconds()),
        "log": {
            "level": "INFO",
            "path": None,
            "max_bytes": 10 * 1024 * 1024,
            "backup_count": 3,
        },
    }


@dataclasses.dataclass
class TicketerConfig:
    path: Path
    ttl: Optional[timedelta]
    sequence: bool
    sweep_interval: timedelta
    log: LogConfig
    source: Optional[Path] = None


def parse_duration(value: Any, *, field: str = "duration") -> timedelta:
    """Parse `90`, `30m`, `2h`, `1h30m` and friends into a timedelta."""
    if isinstance(value, bool):
        raise ConfigError(f"{field} must be a duration, got {value!r}")
    if isinstance(value, (int, float)):
        seconds = float(value)
    else:
        raw = str(value or "").strip().lower()
        if not raw:
            raise ConfigError(f"{field} must not be empty")
        if raw.isdigit():
            seconds = float(raw)
        else:
            matches = list(_DURATION_PART_RE.finditer(raw))
            if not matches or "".join(m.group(0) for m in matches) != raw:
                raise ConfigError(
                    f"Invalid {field} {value!r}. Use forms like 30m, 2h, 7d, or combined 1h30m."
                )
            seconds = float(
                sum(int(m.group(1)) * _DURATION_MULTIPLIERS[m.group(2)] for m in matches)
            )
    if seconds <= 0:
        raise ConfigError(f"{field} must be greater than zero")
    return timedelta(seconds=seconds)


def parse_bool(value: Any, *, field: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ConfigError(f"{field} must be a boolean, got {value!r}")


def _merge_defaults(base: Dict[str, Any], overrides: Mapping[str, Any]) -> Dict[str, Any]:
    merged = cast(Dict[str, Any], json.loads(json.dumps(base)))
    for key, value in overrides.items():
        if isinstance(value, dict) and key in merged and isinstance(merged[key], dict):
            merged[key] = _merge_defaults(merged[key], value)
        else:
            merged[key] = value
    return merged


def _load_yaml_dict(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    except Exception as exc:
        raise ConfigError(f"Failed to read config file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config file must be a mapping: {path}")
    return data


def _env_overrides(env: Mapping[str, str]) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    if env.get(f"{ENV_PREFIX}PATH"):
        overrides["path"] = env[f"{ENV_PREFIX}PATH"]
    if env.get(f"{ENV_PREFIX}TTL"):
        overrides["ttl"] = env[f"{ENV_PREFIX}TTL"]
    if f"{ENV_PREFIX}SEQUENCE" in env:
        overrides["sequence"] = env[f"{ENV_PREFIX}SEQUENCE"]
    if env.get(f"{ENV_PREFIX}LOG_LEVEL"):
        overrides["log"] = {"level": env[f"{ENV_PREFIX}LOG_LEVEL"]}
    return overrides


def _parse_log_config(raw: Any) -> LogConfig:
    if not isinstance(raw, dict):
        raise ConfigError("log must be a mapping")
    level = raw.get("level") or "INFO"
    if not isinstance(level, str) or not isinstance(
        logging.getLevelName(level.upper()), int
    ):
        raise ConfigError(f"log.level is not a logging level: {level!r}")
    path = raw.get("path")
    if path is not None and not isinstance(path, str):
        raise ConfigError("log.path must be a string when set")
    max_bytes = raw.get("max_bytes")
    backup_count = raw.get("backup_count")
    if not isinstance(max_bytes, int) or max_bytes < 0:
        raise ConfigError("log.max_bytes must be a non-negative integer")
    if not isinstance(backup_count, int) or backup_count < 0:
        raise ConfigError("log.backup_count must be a non-negative integer")
    return LogConfig(
        level=level.upper(),
        path=Path(path).expanduser() if path else None,
        max_bytes=max_bytes,
        backup_count=backup_count,
    )


def parse_config(data: Mapping[str, Any], *, source: Optional[Path] = None) -> TicketerConfig:
    merged = _merge_defaults(_default_config(), data)
    path = merged.get("path")
    if not isinstance(path, str) or not path.strip():
        raise ConfigError("path must be a non-empty string")
    ttl_raw = merged.get("ttl")
    ttl = parse_duration(ttl_raw, field="ttl") if ttl_raw is not None else None
    return TicketerConfig(
        path=Path(path).expanduser(),
        ttl=ttl,
        sequence=parse_bool(merged.get("sequence"), field="sequence"),
        sweep_interval=parse_duration(merged.get("sweep_interval"), field="sweep_interval"),
        log=_parse_log_config(merged.get("log")),
        source=source,
    )


def load_config(
    config_path: Optional[Path] = None,
    *,
    env: Optional[Mapping[str, str]] = None,
) -> TicketerConfig:
    """Load `ticketer.yml` (or `config_path`), then apply TICKETER_* overrides."""
    if config_path is not None and not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")
    path = config_path or Path.cwd() / CONFIG_FILENAME
    data = _load_yaml_dict(path)
    data = _merge_defaults(data, _env_overrides(os.environ if env is None else env))
    config = parse_config(data, source=path if path.exists() else None)
    logger.debug("Loaded ticketer config from %s", config.source or "defaults")
    return config


__all__ = [
    "CONFIG_FILENAME",
    "TicketerConfig",
    "load_config",
    "parse_bool",
    "parse_config",
    "parse_duration",
]
