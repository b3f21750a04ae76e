"""
Plain-text log of per-object action durations.
"""

import logging
from typing import Optional, TextIO

logger = logging.getLogger(__name__)


class DurationLog:
    """Writes one duration in milliseconds per line.

    Only the harvesting thread writes to the log, so no locking is done. A
    log that cannot be opened is disabled instead of failing the run.
    """

    def __init__(self, path: Optional[str]):
        self.path = path
        self._file: Optional[TextIO] = None

        if not path:
            return
        try:
            self._file = open(path, "w")
        except OSError as e:
            logger.warning(f"Unable to open log file at {path}. No log output will be generated ({e})")

    def write(self, duration_ms: int) -> None:
        if self._file is not None:
            self._file.write(f"{duration_ms}\n")

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
