from __future__ import annotations

from typing import Optional


class TicketerError(Exception):
    """Base ticketer error."""

    def __init__(self, message: str, *, user_message: Optional[str] = None) -> None:
        super().__init__(message)
        self.user_message = user_message


class ConfigError(TicketerError):
    """Configuration file or environment value could not be used."""


class InvalidTicketError(TicketerError, ValueError):
    """Text is not a rendered ticket identifier."""


class SequencingDisabledError(TicketerError):
    """The sequence counter was advanced while sequencing is off."""


class TicketScanError(TicketerError, OSError):
    """Listing the ticket space directory failed."""

    def __init__(self, message: str, *, path: Optional[str] = None) -> None:
        super().__init__(message, user_message=f"Unable to read ticket directory {path}")
        self.path = path


__all__ = [
    "TicketerError",
    "ConfigError",
    "InvalidTicketError",
    "SequencingDisabledError",
    "TicketScanError",
]
