"""Time-ordered ids for ledger entries (the ``transactions`` table).

Ids are generated in-process, so inserting an entry needs no sequence
round-trip, and sorting by id matches sorting by creation time. Several API
instances can share one table as long as each runs with its own ``NODE_ID``.

Bit layout of the integer (rendered as a decimal string, fits in int64):

    | 41 bits ms since 2025-01-01 | 10 bits node | 12 bits counter |
"""

import threading
import time

from config.settings import settings

EPOCH_MS = 1_735_689_600_000  # 2025-01-01T00:00:00Z
NODE_BITS = 10
COUNTER_BITS = 12
MAX_NODE = (1 << NODE_BITS) - 1
MAX_COUNTER = (1 << COUNTER_BITS) - 1


class LedgerIdGenerator:
    """Thread-safe; up to 4096 ids per millisecond per node."""

    def __init__(self, node_id: int = 0) -> None:
        if not 0 <= node_id <= MAX_NODE:
            raise ValueError(f"node_id must be between 0 and {MAX_NODE}, got {node_id}")
        self._node_id = node_id
        self._last_ms = -1
        self._counter = 0
        self._lock = threading.Lock()

    @staticmethod
    def _clock_ms() -> int:
        return time.time_ns() // 1_000_000

    def next_id(self) -> str:
        with self._lock:
            # Never step back in time: a clock adjustment reuses the last tick
            now = max(self._clock_ms(), self._last_ms)
            if now == self._last_ms:
                self._counter = (self._counter + 1) & MAX_COUNTER
                if self._counter == 0:
                    while now <= self._last_ms:
                        now = self._clock_ms()
            else:
                self._counter = 0
            self._last_ms = now

            value = (now - EPOCH_MS) << (NODE_BITS + COUNTER_BITS)
            value |= self._node_id << COUNTER_BITS
            value |= self._counter
            return str(value)


_generator = LedgerIdGenerator(settings.NODE_ID)


def generate_id() -> str:
    return _generator.next_id()
