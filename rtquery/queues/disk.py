"""
Persistent FIFO buffer backed by a diskcache Deque.

Payloads survive process restarts: a queue reopened on the same directory
still holds whatever was not dequeued. Instead of a byte capacity the queue
watches the filesystem it lives on and drops payloads once the used space
reaches `fs_percent_threshold` percent.

    with DiskQueue("/var/lib/rtquery/buffer") as queue:
        queue.enqueue(b'{"message": "hello"}')
"""

from __future__ import annotations

import sqlite3
import threading
from pathlib import Path
from typing import Optional, Union

import diskcache
import psutil

from rtquery.errors import ConfigurationError, QueueEmptyError
from rtquery.queues.abstract import AbstractLogsQueue
from rtquery.utils.logging import get_logger

log = get_logger(__name__)

DEFAULT_FS_PERCENT_THRESHOLD = 98
DEFAULT_GC_INTERVAL_SECONDS = 30.0
NO_DISK_CHECK = -1


class DiskQueue(AbstractLogsQueue):
    """
    Disk-backed buffer with a used-space drop threshold.

    Parameters
    ----------
    directory : str or Path
        Queue directory; created if missing.
    fs_percent_threshold : int
        Drop payloads once the filesystem is this full (0-100).
        NO_DISK_CHECK (-1) disables the check.
    gc_interval_seconds : float
        Interval of the background cleanup of the underlying store.
        0 disables the background thread; cleanup still runs on close.
    """

    def __init__(
        self,
        directory: Union[str, Path],
        fs_percent_threshold: int = DEFAULT_FS_PERCENT_THRESHOLD,
        gc_interval_seconds: float = DEFAULT_GC_INTERVAL_SECONDS,
    ) -> None:
        path = Path(directory).absolute()
        if not path.name:
            raise ConfigurationError(f"queue directory must not be a filesystem root: {path}")
        if fs_percent_threshold != NO_DISK_CHECK and not 0 <= fs_percent_threshold <= 100:
            raise ConfigurationError(
                f"fs_percent_threshold must be within 0-100 or {NO_DISK_CHECK}, "
                f"got {fs_percent_threshold}"
            )
        if gc_interval_seconds < 0:
            raise ConfigurationError(
                f"gc_interval_seconds must not be negative, got {gc_interval_seconds}"
            )
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ConfigurationError(
                f"cannot create queue directory {path}: {exc.strerror}"
            ) from exc

        self.directory = path
        self.fs_percent_threshold = fs_percent_threshold
        self.gc_interval_seconds = gc_interval_seconds
        self._items = diskcache.Deque(directory=str(path))
        self._dropped = 0
        self._lock = threading.Lock()
        self._closed = False
        self._stop_gc = threading.Event()
        self._gc_thread: Optional[threading.Thread] = None
        if gc_interval_seconds > 0:
            self._gc_thread = threading.Thread(
                target=self._gc_loop, name="rtquery-disk-queue-gc", daemon=True
            )
            self._gc_thread.start()

    @property
    def dropped(self) -> int:
        with self._lock:
            return self._dropped

    @property
    def size_bytes(self) -> int:
        """Bytes the store occupies on disk, not the sum of payload sizes."""
        return self._items.cache.volume()

    def used_percent(self) -> int:
        usage = psutil.disk_usage(str(self.directory))
        return 100 - int(usage.free / usage.total * 100)

    def has_enough_space(self) -> bool:
        if self.fs_percent_threshold == NO_DISK_CHECK:
            return True
        used = self.used_percent()
        if used >= self.fs_percent_threshold:
            log.warning(
                "Dropping logs, as FS used space on %s is %d percent, "
                "and the drop threshold is %d percent",
                self.directory,
                used,
                self.fs_percent_threshold,
            )
            return False
        return True

    def enqueue(self, payload: bytes) -> bool:
        if not self.has_enough_space():
            with self._lock:
                self._dropped += 1
            return False
        self._items.append(bytes(payload))
        return True

    def dequeue(self) -> bytes:
        try:
            return self._items.popleft()
        except IndexError:
            raise QueueEmptyError(f"disk queue {self.directory} is empty") from None

    def is_empty(self) -> bool:
        return len(self._items) == 0

    def __len__(self) -> int:
        return len(self._items)

    def collect(self) -> int:
        """Reclaim space held by removed entries; returns the number culled."""
        return self._items.cache.cull()

    def _gc_loop(self) -> None:
        while not self._stop_gc.wait(timeout=self.gc_interval_seconds):
            try:
                self.collect()
            except (diskcache.Timeout, sqlite3.Error, OSError):
                log.exception("Disk queue cleanup failed", extra={"directory": str(self.directory)})

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._stop_gc.set()
        if self._gc_thread is not None:
            self._gc_thread.join(timeout=1.0)
        self.collect()
        self._items.cache.close()


__all__ = [
    "DiskQueue",
    "DEFAULT_FS_PERCENT_THRESHOLD",
    "DEFAULT_GC_INTERVAL_SECONDS",
    "NO_DISK_CHECK",
]
