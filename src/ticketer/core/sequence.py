from __future__ import annotations

import enum
import threading
from typing import Final

from .exceptions import SequencingDisabledError

SEQUENCE_CEILING: Final = 100_000_000
SEQUENCE_RESET_VALUE: Final = 1
_DISABLED_VALUE: Final = -1


class SequenceMode(str, enum.Enum):
    DISABLED = "disabled"
    SEQUENCING = "sequencing"


class SequenceState:
    """Sequence counter shared by every ticket generated from one space.

    Starts DISABLED (purely random tickets). `enable()` arms the counter at
    zero exactly once; there is no way back to DISABLED. The lock stands in
    for the atomic add and compare-and-swap primitives: each method is one
    atomic step, so `advance()` is linearizable across threads while a
    ceiling reset issued as a separate step can lose a race, in which case the
    counter keeps running past the ceiling until the next pass.
    """

    def __init__(self, *, ceiling: int = SEQUENCE_CEILING) -> None:
        self._lock = threading.Lock()
        self._mode = SequenceMode.DISABLED
        self._counter = _DISABLED_VALUE
        self.ceiling = ceiling

    @property
    def mode(self) -> SequenceMode:
        with self._lock:
            return self._mode

    @property
    def enabled(self) -> bool:
        return self.mode is SequenceMode.SEQUENCING

    @property
    def value(self) -> int:
        """Current counter value; -1 while disabled."""
        with self._lock:
            return self._counter

    def enable(self) -> bool:
        """Arm the counter at zero. Returns False when already sequencing."""
        with self._lock:
            if self._mode is SequenceMode.SEQUENCING:
                return False
            self._mode = SequenceMode.SEQUENCING
            self._counter = 0
            return True

    def advance(self) -> int:
        with self._lock:
            if self._mode is not SequenceMode.SEQUENCING:
                raise SequencingDisabledError("sequence counter is disabled")
            self._counter += 1
            return self._counter

    def compare_and_swap(self, expected: int, new: int) -> bool:
        with self._lock:
            if self._mode is not SequenceMode.SEQUENCING or self._counter != expected:
                return False
            self._counter = new
            return True

    def reset_if_at_ceiling(self) -> bool:
        return self.compare_and_swap(self.ceiling, SEQUENCE_RESET_VALUE)

    def __repr__(self) -> str:
        with self._lock:
            return f"SequenceState(mode={self._mode.value}, counter={self._counter})"


__all__ = [
    "SEQUENCE_CEILING",
    "SEQUENCE_RESET_VALUE",
    "SequenceMode",
    "SequenceState",
]
