"""Disk-backed ticket space: ticketed payload files with expiry and selection."""

from .core import (
    ExpiryWorker,
    InvalidTicketError,
    SweepSummary,
    TicketerError,
    TicketFields,
    TicketSpace,
    decode_ticket,
    is_ticket,
)

__all__ = [
    "ExpiryWorker",
    "InvalidTicketError",
    "SweepSummary",
    "TicketFields",
    "TicketSpace",
    "TicketerError",
    "decode_ticket",
    "is_ticket",
]
