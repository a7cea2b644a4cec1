from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import TYPE_CHECKING, Final, Optional

from .logging_utils import log_event
from .storage import list_entries, modified_time, remove_path

if TYPE_CHECKING:
    from .space import TicketSpace

logger = logging.getLogger(__name__)

DEFAULT_TTL: Final = timedelta(hours=12)
MIN_TTL: Final = timedelta(hours=1)
SWEEP_INTERVAL: Final = timedelta(hours=1)


@dataclass(frozen=True)
class SweepSummary:
    scanned: int
    removed: int
    kept: int
    errors: int
    ttl: timedelta


def resolve_ttl(current: timedelta, override: Optional[timedelta] = None) -> timedelta:
    """Effective TTL for a sweep.

    No override and nothing set yet falls back to 12 hours; a positive
    override replaces the current value; the result never drops below 1 hour.
    """
    ttl = current
    if override is None and ttl == timedelta(0):
        ttl = DEFAULT_TTL
    if override is not None and override > timedelta(0):
        ttl = override
    if ttl < MIN_TTL:
        ttl = MIN_TTL
    return ttl


def sweep_directory(
    directory: Path, ttl: timedelta, *, now: Optional[float] = None
) -> SweepSummary:
    """Delete regular files whose mtime + ttl falls before `now`.

    Raises TicketScanError when the directory cannot be listed. Entries that
    fail to stat or delete are skipped.
    """
    entries = list_entries(directory)
    cutoff = int(time.time() if now is None else now)
    ttl_seconds = ttl.total_seconds()
    removed = kept = errors = 0
    for entry in entries:
        try:
            regular = entry.is_file(follow_symlinks=False)
        except OSError:
            errors += 1
            continue
        if not regular:
            continue
        mtime = modified_time(entry)
        if mtime is None:
            errors += 1
            continue
        if mtime + ttl_seconds < cutoff:
            if remove_path(directory / entry.name):
                removed += 1
            else:
                errors += 1
        else:
            kept += 1
    summary = SweepSummary(
        scanned=len(entries), removed=removed, kept=kept, errors=errors, ttl=ttl
    )
    log_event(
        logger,
        logging.DEBUG,
        "ticketer.sweep.completed",
        path=str(directory),
        scanned=summary.scanned,
        removed=summary.removed,
        errors=summary.errors or None,
        ttl_seconds=int(ttl_seconds),
    )
    return summary


async def run_periodic(
    space: "TicketSpace",
    cancel_event: asyncio.Event,
    *,
    interval: timedelta = SWEEP_INTERVAL,
) -> None:
    """Sweep `space` now and then once per `interval` until `cancel_event` is set.

    Returns immediately when the space is not sequencing. Cancellation wins
    over a pending tick and no final sweep is made.
    """
    if not space.sequencing:
        return
    space.ensure_directory()
    await asyncio.to_thread(space.expire)
    timeout = interval.total_seconds()
    while not cancel_event.is_set():
        try:
            await asyncio.wait_for(cancel_event.wait(), timeout)
        except asyncio.TimeoutError:
            await asyncio.to_thread(space.expire)
            continue
        break


class ExpiryWorker:
    """Background task running the periodic sweep for one ticket space."""

    def __init__(
        self,
        space: "TicketSpace",
        *,
        interval: timedelta = SWEEP_INTERVAL,
        log: Optional[logging.Logger] = None,
    ) -> None:
        self.space = space
        self.interval = interval
        self._log = log or logger
        self._task: Optional[asyncio.Task[None]] = None
        self._cancel_event = asyncio.Event()
        self._lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> bool:
        async with self._lock:
            if self.is_running:
                return False
            if not self.space.sequencing:
                log_event(
                    self._log,
                    logging.DEBUG,
                    "ticketer.expiry.skipped",
                    path=str(self.space.path),
                )
                return False
            self._cancel_event = asyncio.Event()
            self._task = asyncio.create_task(
                run_periodic(self.space, self._cancel_event, interval=self.interval)
            )
            log_event(
                self._log,
                logging.INFO,
                "ticketer.expiry.started",
                path=str(self.space.path),
                interval_seconds=int(self.interval.total_seconds()),
            )
            return True

    async def stop(self) -> None:
        async with self._lock:
            task = self._task
            if task is None:
                return
            self._cancel_event.set()
            self._task = None
        try:
            await task
        finally:
            log_event(self._log, logging.INFO, "ticketer.expiry.stopped", path=str(self.space.path))


__all__ = [
    "DEFAULT_TTL",
    "MIN_TTL",
    "SWEEP_INTERVAL",
    "ExpiryWorker",
    "SweepSummary",
    "resolve_ttl",
    "run_periodic",
    "sweep_directory",
]
