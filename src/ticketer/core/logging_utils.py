from __future__ import annotations

import dataclasses
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional

_PACKAGE_LOGGER = "ticketer"
_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclasses.dataclass
class LogConfig:
    level: str = "INFO"
    path: Optional[Path] = None
    max_bytes: int = 10 * 1024 * 1024
    backup_count: int = 3


def _format_value(value: Any) -> str:
    if isinstance(value, BaseException):
        return f"{type(value).__name__}({value})"
    text = str(value)
    if not text or any(ch.isspace() for ch in text):
        return repr(text)
    return text


def log_event(logger: logging.Logger, level: int, event: str, **fields: Any) -> None:
    """Emit `event key=value ...`; fields set to None are omitted."""
    if not logger.isEnabledFor(level):
        return
    parts = [event]
    for key, value in fields.items():
        if value is None:
            continue
        parts.append(f"{key}={_format_value(value)}")
    logger.log(level, " ".join(parts))


def setup_logging(config: LogConfig) -> logging.Logger:
    """Configure the package logger. Safe to call more than once."""
    logger = logging.getLogger(_PACKAGE_LOGGER)
    level = logging.getLevelName(config.level.upper())
    logger.setLevel(level if isinstance(level, int) else logging.INFO)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(_FORMAT)
    stream = logging.StreamHandler()
    stream.setFormatter(formatter)
    logger.addHandler(stream)

    if config.path is not None:
        config.path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            config.path,
            maxBytes=config.max_bytes,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
    return logger


__all__ = ["LogConfig", "log_event", "setup_logging"]
