"""Filesystem primitives used by a ticket space.

Openers return None instead of raising, including for paths the OS rejects
outright (embedded NUL), so callers can degrade to a boolean result;
directory listing raises `TicketScanError` so the difference between
"unreadable" and "empty" is still available to callers that want it.
"""

from __future__ import annotations

import itertools
import logging
import os
from pathlib import Path
from typing import BinaryIO, Optional

from .exceptions import TicketScanError
from .logging_utils import log_event

logger = logging.getLogger(__name__)

COPY_CHUNK_BYTES = 64 * 1024


def ensure_directory(path: Path) -> bool:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except (OSError, ValueError) as exc:
        log_event(logger, logging.WARNING, "ticketer.space.mkdir_failed", path=str(path), exc=exc)
        return False
    return path.is_dir()


def create_writer(path: Path, *, exclusive: bool = False) -> Optional[BinaryIO]:
    mode = "xb" if exclusive else "wb"
    try:
        return open(path, mode)
    except (OSError, ValueError) as exc:
        log_event(logger, logging.DEBUG, "ticketer.create.failed", path=str(path), exc=exc)
        return None


def open_reader(path: Path) -> Optional[BinaryIO]:
    try:
        return open(path, "rb")
    except (OSError, ValueError) as exc:
        log_event(logger, logging.DEBUG, "ticketer.open.failed", path=str(path), exc=exc)
        return None


def copy_stream(source: BinaryIO, sink: BinaryIO) -> int:
    """Copy everything from `source` into `sink`; errors propagate."""
    total = 0
    while True:
        chunk = source.read(COPY_CHUNK_BYTES)
        if not chunk:
            break
        sink.write(chunk)
        total += len(chunk)
    return total


def list_entries(path: Path, limit: Optional[int] = None) -> list[os.DirEntry[str]]:
    """Entries of `path` in directory order, at most `limit` of them."""
    try:
        with os.scandir(path) as it:
            if limit is None:
                return list(it)
            return list(itertools.islice(it, max(0, limit)))
    except OSError as exc:
        raise TicketScanError(f"failed to list {path}: {exc}", path=str(path)) from exc


def remove_path(path: Path) -> bool:
    try:
        os.remove(path)
    except (OSError, ValueError) as exc:
        log_event(logger, logging.DEBUG, "ticketer.remove.failed", path=str(path), exc=exc)
        return False
    return True


def modified_time(entry: os.DirEntry[str]) -> Optional[float]:
    try:
        return entry.stat(follow_symlinks=False).st_mtime
    except OSError:
        return None
