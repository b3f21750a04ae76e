"""
Basic data structures for the Fedora benchmark.
"""

import threading
import time


class BenchToolResult:
    """Outcome of one action against one object.

    ``size`` echoes the configured payload size; the number of bytes actually
    transferred is not measured.
    """

    def __init__(self, object_id: str, action: str, duration_ms: int, size: int,
                 start_ts: float = None, end_ts: float = None, thread_name: str = None):
        self.object_id = object_id
        self.action = action
        self.duration_ms = max(int(duration_ms), 0)
        self.size = size
        self.start_ts = start_ts or time.time()
        self.end_ts = end_ts or time.time()
        self.thread_name = thread_name or threading.current_thread().name

    def __repr__(self):
        return (f"BenchToolResult(object_id={self.object_id!r}, action={self.action!r}, "
                f"duration_ms={self.duration_ms}, size={self.size})")
