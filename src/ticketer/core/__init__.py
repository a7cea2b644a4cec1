"""Core ticket space primitives."""

from .exceptions import (
    ConfigError,
    InvalidTicketError,
    SequencingDisabledError,
    TicketerError,
    TicketScanError,
)
from .expiry import ExpiryWorker, SweepSummary
from .ids import TicketFields, decode_ticket, encode_ticket, is_ticket
from .sequence import SequenceMode, SequenceState
from .space import TicketSpace

__all__ = [
    "ConfigError",
    "ExpiryWorker",
    "InvalidTicketError",
    "SequenceMode",
    "SequenceState",
    "SequencingDisabledError",
    "SweepSummary",
    "TicketFields",
    "TicketScanError",
    "TicketSpace",
    "TicketerError",
    "decode_ticket",
    "encode_ticket",
    "is_ticket",
]
