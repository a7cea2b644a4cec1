from __future__ import annotations

import asyncio
import io
import logging
import os
import tempfile
from datetime import timedelta
from pathlib import Path
from typing import BinaryIO, Optional, Union

from .exceptions import TicketScanError
from .expiry import SWEEP_INTERVAL, SweepSummary, resolve_ttl, run_periodic, sweep_directory
from .ids import encode_ticket, random_ticket_bytes, sequential_ticket_bytes
from .logging_utils import log_event
from .selector import DEFAULT_SCAN_LIMIT, select_entry
from .sequence import SequenceState
from .storage import copy_stream, create_writer, ensure_directory, open_reader, remove_path

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]
Payload = Union[bytes, bytearray, memoryview, BinaryIO]


class TicketSpace:
    """A directory of ticketed payload files.

    Tickets name the files; `generate()` hands out random tickets until
    `queue()` switches on sequencing, after which each ticket embeds a
    counter. Storage operations report failure as False/None rather than
    raising.

    The sequence counter is thread-safe. The TTL is not: set it once (via
    `expire(age)`) before running the background sweeper.
    """

    def __init__(self, path: Optional[PathLike] = None) -> None:
        self.path = Path(path) if path else Path(tempfile.gettempdir())
        self._ttl = timedelta(0)
        self._sequence = SequenceState()
        self.ensure_directory()

    def __repr__(self) -> str:
        return f"TicketSpace(path={str(self.path)!r}, sequence={self._sequence.value})"

    @property
    def sequence(self) -> SequenceState:
        return self._sequence

    @property
    def sequencing(self) -> bool:
        return self._sequence.enabled

    @property
    def ttl(self) -> timedelta:
        """TTL applied by the last sweep; zero until one has run."""
        return self._ttl

    def ensure_directory(self) -> bool:
        return ensure_directory(self.path)

    def path_for(self, ticket: str) -> Path:
        """Path of `ticket` inside the space; directory components are dropped."""
        name = os.path.basename(str(ticket).replace("\\", "/"))
        if name in ("", ".", ".."):
            name = "_"
        return self.path / name

    # -------- identifiers --------

    def queue(self) -> "TicketSpace":
        """Switch on sequencing. Later calls are no-ops."""
        if self._sequence.enable():
            log_event(logger, logging.DEBUG, "ticketer.sequence.enabled", path=str(self.path))
        return self

    def generate(self) -> str:
        if not self._sequence.enabled:
            return encode_ticket(random_ticket_bytes())
        raw = sequential_ticket_bytes(self._sequence.advance())
        if self._sequence.reset_if_at_ceiling():
            log_event(logger, logging.DEBUG, "ticketer.sequence.reset", path=str(self.path))
        return encode_ticket(raw)

    # -------- storage --------

    def writer(self, ticket: str) -> Optional[BinaryIO]:
        return create_writer(self.path_for(ticket))

    def reader(self, ticket: str) -> Optional[BinaryIO]:
        return open_reader(self.path_for(ticket))

    def save(self, source: Payload, ticket: Optional[str] = None) -> tuple[str, bool]:
        """Store `source` under `ticket` (generated when None).

        Returns the ticket and whether the file was created. An existing
        file with the same ticket is overwritten.
        """
        if ticket is None:
            ticket = self.generate()
        if isinstance(source, (bytes, bytearray, memoryview)):
            source = io.BytesIO(bytes(source))
        handle = self.writer(ticket)
        if handle is None:
            log_event(logger, logging.DEBUG, "ticketer.save.failed", ticket=ticket)
            return ticket, False
        try:
            with handle:
                copy_stream(source, handle)
        except OSError as exc:
            log_event(logger, logging.DEBUG, "ticketer.save.failed", ticket=ticket, exc=exc)
            return ticket, False
        return ticket, True

    def load(self, ticket: str, sink: BinaryIO) -> bool:
        handle = self.reader(ticket)
        if handle is None:
            log_event(logger, logging.DEBUG, "ticketer.load.failed", ticket=ticket)
            return False
        try:
            with handle:
                copy_stream(handle, sink)
        except OSError as exc:
            log_event(logger, logging.DEBUG, "ticketer.load.failed", ticket=ticket, exc=exc)
            return False
        return True

    def read_bytes(self, ticket: str) -> Optional[bytes]:
        buffer = io.BytesIO()
        if not self.load(ticket, buffer):
            return None
        return buffer.getvalue()

    def remove(self, ticket: str) -> bool:
        return remove_path(self.path_for(ticket))

    # -------- selection --------

    def next(self, random: bool = False, *, limit: int = DEFAULT_SCAN_LIMIT) -> Optional[Path]:
        """Path of the next entry to process, or None when nothing is available.

        Head mode follows directory order (not FIFO). The entry stays in place;
        remove it after processing.
        """
        return select_entry(self.path, random=random, limit=limit)

    # -------- expiration --------

    def expire(self, age: Optional[timedelta] = None) -> Optional[SweepSummary]:
        """Remove entries older than the TTL.

        `age` sets the TTL (floored at one hour); without it the current TTL,
        or 12 hours when none was ever set, applies. Returns None when the
        directory could not be read.
        """
        self._ttl = resolve_ttl(self._ttl, age)
        try:
            return sweep_directory(self.path, self._ttl)
        except TicketScanError as exc:
            log_event(logger, logging.DEBUG, "ticketer.scan.failed", path=str(self.path), exc=exc)
            return None

    async def run_periodic(
        self, cancel_event: asyncio.Event, *, interval: timedelta = SWEEP_INTERVAL
    ) -> None:
        await run_periodic(self, cancel_event, interval=interval)


__all__ = ["TicketSpace"]
