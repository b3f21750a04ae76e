"""
Sized random payloads streamed as HTTP request bodies.
"""

import os

from configuration import PAYLOAD_CHUNK_SIZE


class RandomPayload:
    """File-like body of ``size`` random bytes, generated chunk by chunk.

    ``len()`` is the full size so requests sends a Content-Length header
    instead of chunked transfer encoding.
    """

    def __init__(self, size: int, chunk_size: int = PAYLOAD_CHUNK_SIZE):
        self.size = size
        self.chunk_size = chunk_size
        self._remaining = size

    def __len__(self):
        return self.size

    def read(self, amt: int = -1) -> bytes:
        if self._remaining <= 0:
            return b""
        if amt is None or amt < 0:
            amt = self._remaining
        amt = min(amt, self.chunk_size, self._remaining)
        self._remaining -= amt
        return os.urandom(amt)

    def __iter__(self):
        chunk = self.read(self.chunk_size)
        while chunk:
            yield chunk
            chunk = self.read(self.chunk_size)
