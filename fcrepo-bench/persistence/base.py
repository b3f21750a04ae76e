"""
Thread-safe collection of per-object benchmark results.
"""

import threading
import logging
from typing import List

from persistence.record import BenchToolResult

logger = logging.getLogger(__name__)


class ResultCollector:
    """Append-only container shared by the benchmark threads.

    Storage order is not meaningful; consumers must treat a snapshot as an
    unordered multiset.
    """

    def __init__(self):
        self._results: List[BenchToolResult] = []
        self._lock = threading.Lock()

    def append(self, result: BenchToolResult) -> None:
        """Add a result. Safe to call from any thread."""
        with self._lock:
            self._results.append(result)

    def snapshot(self) -> List[BenchToolResult]:
        """Return a copy of the results collected so far."""
        with self._lock:
            return list(self._results)

    def __len__(self) -> int:
        with self._lock:
            return len(self._results)
