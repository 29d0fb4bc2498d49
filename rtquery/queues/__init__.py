"""
Log buffering package: the queue interface, the byte-bounded in-memory buffer,
the persistent disk buffer and the filtering queue placed in front of them.
"""

from rtquery.queues.abstract import AbstractLogsQueue, LogsQueue
from rtquery.queues.disk import NO_DISK_CHECK, DiskQueue
from rtquery.queues.filtered import FilteredQueue
from rtquery.queues.in_memory import DEFAULT_CAPACITY_BYTES, UNLIMITED_CAPACITY, InMemoryQueue

__all__ = [
    "LogsQueue",
    "AbstractLogsQueue",
    "FilteredQueue",
    "InMemoryQueue",
    "DiskQueue",
    "DEFAULT_CAPACITY_BYTES",
    "UNLIMITED_CAPACITY",
    "NO_DISK_CHECK",
]
