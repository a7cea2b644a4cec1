from __future__ import annotations

import logging
from datetime import timedelta
from pathlib import Path
from typing import NoReturn, Optional

import typer

from ....core.config import TicketerConfig, load_config
from ....core.config import parse_duration as _parse_config_duration
from ....core.exceptions import ConfigError
from ....core.logging_utils import setup_logging
from ....core.space import TicketSpace

logger = logging.getLogger("ticketer.cli")


def get_ticketer_version() -> str:
    import importlib.metadata

    try:
        return importlib.metadata.version("ticketer")
    except Exception:
        return "unknown"


def raise_exit(message: str, *, cause: Optional[BaseException] = None) -> NoReturn:
    typer.echo(message, err=True)
    if cause is not None:
        raise typer.Exit(code=1) from cause
    raise typer.Exit(code=1)


def parse_duration(value: Optional[str]) -> Optional[timedelta]:
    if value is None:
        return None
    try:
        return _parse_config_duration(value, field="duration")
    except ConfigError as exc:
        raise_exit(str(exc), cause=exc)


def require_config(config_path: Optional[Path]) -> TicketerConfig:
    try:
        config = load_config(config_path)
    except ConfigError as exc:
        raise_exit(f"Invalid configuration: {exc}", cause=exc)
    setup_logging(config.log)
    return config


def require_space(
    path: Optional[Path],
    config_path: Optional[Path],
    *,
    sequence: bool = False,
) -> tuple[TicketSpace, TicketerConfig]:
    """Build the ticket space for a command from flags and config."""
    config = require_config(config_path)
    space = TicketSpace(path or config.path)
    if not space.path.is_dir():
        raise_exit(f"Ticket directory is not usable: {space.path}")
    if sequence or config.sequence:
        space.queue()
    return space, config
