"""Client Statistics Cache — FIFO of latency records awaiting piggyback on the next call.

Invariants:
    - Every read (take head) and write (append) happens under one lock
    - Critical sections never await: the lock is held only for deque operations
    - pop_next() returns None when nothing is pending; it never blocks
    - Records are immutable strings: "MessageId=<id>,ResponseTime=<ms>,SoapAction=<op>;"

Design Decisions:
    - threading.Lock over asyncio.Lock: the default cache is process-wide and may
      be shared by services running on different event loops or threads
    - Module-level default_cache; ItemService accepts its own cache for isolation
"""

import threading
from collections import deque


def format_client_statistic(request_id: str, elapsed_ms: int, operation: str) -> str:
    """Render one telemetry record in the service's client-statistics syntax."""
    return f"MessageId={request_id},ResponseTime={elapsed_ms},SoapAction={operation};"


class ClientStatisticsCache:
    """Lock-guarded queue of pending client statistics records."""

    def __init__(self):
        self._records: deque[str] = deque()
        self._lock = threading.Lock()

    def add(self, record: str) -> None:
        with self._lock:
            self._records.append(record)

    def pop_next(self) -> str | None:
        with self._lock:
            if self._records:
                return self._records.popleft()
            return None

    def clear(self) -> None:
        with self._lock:
            self._records.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def snapshot(self) -> list[str]:
        """Copy of pending records, oldest first."""
        with self._lock:
            return list(self._records)


default_cache = ClientStatisticsCache()
