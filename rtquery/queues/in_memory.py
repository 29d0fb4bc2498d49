"""
In-memory FIFO buffer bounded by the total size of buffered payloads.
"""

from __future__ import annotations

import threading
from collections import deque
from typing import Deque

from rtquery.errors import ConfigurationError, QueueEmptyError
from rtquery.queues.abstract import AbstractLogsQueue
from rtquery.utils.logging import get_logger

log = get_logger(__name__)

MB_IN_BYTES = 1024 * 1024
UNLIMITED_CAPACITY = -1
DEFAULT_CAPACITY_BYTES = 100 * MB_IN_BYTES


class InMemoryQueue(AbstractLogsQueue):
    """
    Thread-safe byte-bounded buffer.

    The capacity check happens before a payload is added: once the buffered
    size has reached `capacity_bytes`, new payloads are dropped until the
    consumer drains some. A single payload may therefore push the size past
    the capacity. Pass UNLIMITED_CAPACITY to disable the check.
    """

    def __init__(self, capacity_bytes: int = DEFAULT_CAPACITY_BYTES) -> None:
        if capacity_bytes != UNLIMITED_CAPACITY and capacity_bytes < 0:
            raise ConfigurationError(
                f"capacity_bytes must be >= 0 or {UNLIMITED_CAPACITY} (unlimited), "
                f"got {capacity_bytes}"
            )
        self.capacity_bytes = capacity_bytes
        self._buffer: Deque[bytes] = deque()
        self._size_bytes = 0
        self._dropped = 0
        self._lock = threading.Lock()

    @property
    def unlimited(self) -> bool:
        return self.capacity_bytes == UNLIMITED_CAPACITY

    @property
    def size_bytes(self) -> int:
        with self._lock:
            return self._size_bytes

    @property
    def dropped(self) -> int:
        with self._lock:
            return self._dropped

    def enqueue(self, payload: bytes) -> bool:
        with self._lock:
            if not self.unlimited and self._size_bytes >= self.capacity_bytes:
                self._dropped += 1
                dropped_now = True
            else:
                self._buffer.append(payload)
                self._size_bytes += len(payload)
                dropped_now = False
        if dropped_now:
            log.warning(
                "Dropping logs - crossed the memory threshold of %d MB",
                self.capacity_bytes // MB_IN_BYTES,
                extra={"capacity_bytes": self.capacity_bytes},
            )
        return not dropped_now

    def dequeue(self) -> bytes:
        with self._lock:
            if not self._buffer:
                raise QueueEmptyError("in-memory queue is empty")
            payload = self._buffer.popleft()
            self._size_bytes -= len(payload)
        return payload

    def is_empty(self) -> bool:
        with self._lock:
            return not self._buffer

    def __len__(self) -> int:
        with self._lock:
            return len(self._buffer)


__all__ = ["InMemoryQueue", "UNLIMITED_CAPACITY", "DEFAULT_CAPACITY_BYTES", "MB_IN_BYTES"]
