"""
Unit of work submitted to the benchmark thread pool.
"""

import logging
import threading
import time

from common.types import Action
from persistence.record import BenchToolResult

logger = logging.getLogger(__name__)


class ActionWorker:
    """Runs one action against one object and times the remote call.

    Remote failures are not caught here; they surface through the future
    the worker was submitted as.
    """

    def __init__(self, client, action: Action, object_id: str, size: int):
        self.client = client
        self.action = action
        self.object_id = object_id
        self.size = size

    def __call__(self) -> BenchToolResult:
        start_ts = time.time()
        self.client.execute(self.action, self.object_id, self.size)
        end_ts = time.time()

        duration_ms = int((end_ts - start_ts) * 1000)
        logger.debug(f"{self.action.value} {self.object_id} took {duration_ms} ms")

        return BenchToolResult(
            object_id=self.object_id,
            action=self.action.value,
            duration_ms=duration_ms,
            size=self.size,
            start_ts=start_ts,
            end_ts=end_ts,
            thread_name=threading.current_thread().name,
        )
