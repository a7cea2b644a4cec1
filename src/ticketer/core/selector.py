from __future__ import annotations

import logging
import secrets
from pathlib import Path
from typing import Final, Optional

from .exceptions import TicketScanError
from .logging_utils import log_event
from .storage import list_entries

logger = logging.getLogger(__name__)

DEFAULT_SCAN_LIMIT: Final = 1000


def random_index(count: int) -> int:
    """Uniform index in [0, count) from a secure random uint64."""
    if count <= 0:
        raise ValueError("count must be positive")
    return int.from_bytes(secrets.token_bytes(8), "little") % count


def select_entry(
    directory: Path,
    *,
    random: bool = False,
    limit: int = DEFAULT_SCAN_LIMIT,
) -> Optional[Path]:
    """Pick the next entry to process from one bounded listing of `directory`.

    Head mode returns the first entry in directory enumeration order, which is
    not creation order. Random mode picks uniformly among the listed entries.
    Nothing is removed or locked, so two callers may select the same entry.
    Returns None when the directory is empty or cannot be read.
    """
    try:
        entries = list_entries(directory, limit)
    except TicketScanError as exc:
        log_event(logger, logging.DEBUG, "ticketer.scan.failed", path=str(directory), exc=exc)
        return None
    if not entries:
        return None
    entry = entries[random_index(len(entries))] if random else entries[0]
    return directory / entry.name


__all__ = ["DEFAULT_SCAN_LIMIT", "random_index", "select_entry"]
