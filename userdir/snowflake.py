"""
Time-ordered 64-bit identifiers.

Layout, most significant bit first::

    | 42 bits: ms since EPOCH | 5 bits: worker | 5 bits: process | 12 bits: seq |

Identifiers generated later compare greater, and the creation time can be
recovered from any identifier with :func:`timestamp`.
"""

from typing import Optional
from datetime import datetime
import os
import threading
import time

from pytz import UTC

EPOCH = 1420070400000
"""2015-01-01T00:00:00Z, in milliseconds."""

_WORKER_BITS = 5
_PROCESS_BITS = 5
_SEQUENCE_BITS = 12
_SEQUENCE_MASK = (1 << _SEQUENCE_BITS) - 1


class SnowflakeGenerator:
    """Generates unique identifiers for one worker/process pair."""

    def __init__(self, worker_id: int = 0,
                 process_id: Optional[int] = None) -> None:
        if process_id is None:
            process_id = os.getpid()
        self.worker_id = worker_id & ((1 << _WORKER_BITS) - 1)
        self.process_id = process_id & ((1 << _PROCESS_BITS) - 1)
        self._sequence = 0
        self._last = -1
        self._lock = threading.Lock()

    def generate(self) -> int:
        """Get a new identifier."""
        with self._lock:
            millis = int(time.time() * 1000)
            if millis < self._last:     # Clock went backwards; hold still.
                millis = self._last
            if millis == self._last:
                self._sequence = (self._sequence + 1) & _SEQUENCE_MASK
                if self._sequence == 0:
                    while millis <= self._last:
                        millis = int(time.time() * 1000)
            else:
                self._sequence = 0
            self._last = millis
            return ((millis - EPOCH)
                    << (_WORKER_BITS + _PROCESS_BITS + _SEQUENCE_BITS)) \
                | (self.worker_id << (_PROCESS_BITS + _SEQUENCE_BITS)) \
                | (self.process_id << _SEQUENCE_BITS) \
                | self._sequence


def timestamp(snowflake: int) -> datetime:
    """Get the creation time encoded in an identifier."""
    shift = _WORKER_BITS + _PROCESS_BITS + _SEQUENCE_BITS
    millis = (int(snowflake) >> shift) + EPOCH
    return datetime.fromtimestamp(millis / 1000, tz=UTC)


_generator = SnowflakeGenerator(
    worker_id=int(os.environ.get('SNOWFLAKE_WORKER_ID', '0'))
)


def generate() -> int:
    """Get a new identifier from the process-wide generator."""
    return _generator.generate()
