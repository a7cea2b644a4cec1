"""Ticket identifier encoding.

A ticket is 18 bytes rendered as five lowercase hex groups:

    random     e4e45937-79c9-c3b4-07e4-7c13d989f9235e15
    sequential 00000001-5d9b-95d2-de8d-9c7cb21451fac9c1

Sequential layout, in write order:

    bytes 0-7   unix time in seconds, uint64 big-endian
    bytes 0-3   sequence number, uint32 big-endian (overwrites the high half)
    bytes 8-17  random

so bytes 4-7 carry the low 32 bits of the timestamp.
"""

from __future__ import annotations

import re
import secrets
import struct
import time
from dataclasses import dataclass
from typing import Final, Optional

from .exceptions import InvalidTicketError

TICKET_BYTES: Final = 18
TICKET_GROUPS: Final = (4, 2, 2, 2, 8)
TICKET_LENGTH: Final = TICKET_BYTES * 2 + len(TICKET_GROUPS) - 1

_TICKET_RE = re.compile(
    "^" + "-".join(f"[0-9a-f]{{{size * 2}}}" for size in TICKET_GROUPS) + "$"
)


@dataclass(frozen=True)
class TicketFields:
    sequence: int
    timestamp_low: int
    entropy: bytes


def encode_ticket(raw: bytes) -> str:
    if len(raw) != TICKET_BYTES:
        raise InvalidTicketError(
            f"ticket must be {TICKET_BYTES} bytes, got {len(raw)}"
        )
    groups = []
    offset = 0
    for size in TICKET_GROUPS:
        groups.append(raw[offset : offset + size].hex())
        offset += size
    return "-".join(groups)


def parse_ticket(text: str) -> bytes:
    value = (text or "").strip()
    if not _TICKET_RE.match(value):
        raise InvalidTicketError(f"not a ticket: {text!r}")
    return bytes.fromhex(value.replace("-", ""))


def is_ticket(text: str) -> bool:
    return bool(_TICKET_RE.match((text or "").strip()))


def decode_ticket(text: str) -> TicketFields:
    raw = parse_ticket(text)
    sequence, timestamp_low = struct.unpack(">II", raw[:8])
    return TicketFields(sequence=sequence, timestamp_low=timestamp_low, entropy=raw[8:])


def random_ticket_bytes() -> bytes:
    return secrets.token_bytes(TICKET_BYTES)


def sequential_ticket_bytes(
    sequence: int,
    *,
    now: Optional[int] = None,
    entropy: Optional[bytes] = None,
) -> bytes:
    if now is None:
        now = int(time.time())
    if entropy is None:
        entropy = secrets.token_bytes(TICKET_BYTES - 8)
    if len(entropy) != TICKET_BYTES - 8:
        raise InvalidTicketError(f"entropy must be {TICKET_BYTES - 8} bytes")
    raw = bytearray(TICKET_BYTES)
    struct.pack_into(">Q", raw, 0, now & 0xFFFFFFFFFFFFFFFF)
    struct.pack_into(">I", raw, 0, sequence & 0xFFFFFFFF)
    raw[8:] = entropy
    return bytes(raw)


__all__ = [
    "TICKET_BYTES",
    "TICKET_GROUPS",
    "TICKET_LENGTH",
    "TicketFields",
    "decode_ticket",
    "encode_ticket",
    "is_ticket",
    "parse_ticket",
    "random_ticket_bytes",
    "sequential_ticket_bytes",
]
