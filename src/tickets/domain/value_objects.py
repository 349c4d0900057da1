"""
Ticket Value Objects
====================

Ticket numbers: "BI-" followed by six digits. The digits start from the
last six digits of the creation time in epoch milliseconds, and are kept
strictly increasing within the process so two tickets created in the same
millisecond (or a clock step backwards) never share a number.
"""

import re
import threading
import time
from typing import Callable, Optional

TICKET_NUMBER_PREFIX = "BI-"
TICKET_NUMBER_DIGITS = 6
TICKET_NUMBER_PATTERN = re.compile(r"^BI-\d{6}$")

_MODULUS = 10 ** TICKET_NUMBER_DIGITS


def format_ticket_number(sequence: int) -> str:
    """BI-000042 style display form of a sequence value."""
    return f"{TICKET_NUMBER_PREFIX}{sequence % _MODULUS:0{TICKET_NUMBER_DIGITS}d}"


def is_ticket_number(value: str) -> bool:
    return bool(TICKET_NUMBER_PATTERN.match(value))


def _epoch_millis() -> int:
    return time.time_ns() // 1_000_000


class TicketNumberGenerator:
    """
    Thread-safe ticket number source.

    Uniqueness against already stored tickets is checked by the caller;
    calling `next()` again after a clash yields the following number.
    """

    def __init__(self, clock: Optional[Callable[[], int]] = None):
        self._clock = clock or _epoch_millis
        self._last: Optional[int] = None
        self._lock = threading.Lock()

    def next(self) -> str:
        with self._lock:
            candidate = self._clock() % _MODULUS
            if self._last is not None and candidate <= self._last:
                candidate = (self._last + 1) % _MODULUS
            self._last = candidate
            return format_ticket_number(candidate)
