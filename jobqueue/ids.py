"""Sequential 128-bit identifiers for the job store.

Identifiers are laid out as a 48-bit millisecond timestamp followed by an
80-bit counter, so comparing two ids as raw bytes (or as lowercase hex
strings, which is how SQLite stores them) gives creation order. The job
scheduler relies on this to dequeue in FIFO order with a plain
``ORDER BY job_id``.
"""

import os
import threading
import time
import uuid

COUNTER_BITS = 80

_COUNTER_MASK = (1 << COUNTER_BITS) - 1
# Random seed for a fresh millisecond leaves the top counter bit clear,
# so a burst within one millisecond has 2**79 increments of headroom.
_SEED_BITS = COUNTER_BITS - 1


class SequentialIdGenerator:
    """Generate unique, strictly increasing ids for one logical store."""

    def __init__(self, clock=None):
        """
        Initialize the generator.

        Args:
            clock: Optional callable returning the current time in milliseconds
        """
        self._clock = clock or (lambda: time.time_ns() // 1_000_000)
        self._lock = threading.Lock()
        self._last_ms = -1
        self._counter = 0

    def create(self) -> uuid.UUID:
        """Return an id greater than every id previously returned by this generator."""
        with self._lock:
            now_ms = self._clock()

            if now_ms > self._last_ms:
                self._last_ms = now_ms
                self._counter = int.from_bytes(os.urandom(10), "big") >> (COUNTER_BITS - _SEED_BITS)
            else:
                # Same millisecond or the clock went backwards: keep counting
                # from the last issued value.
                self._counter += 1
                if self._counter > _COUNTER_MASK:
                    self._last_ms += 1
                    self._counter = 0

            value = (self._last_ms << COUNTER_BITS) | self._counter

        return uuid.UUID(int=value)
