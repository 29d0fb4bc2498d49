from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Callable, Mapping

import pytest

from rtquery.errors import ConfigurationError, QueueEmptyError
from rtquery.filters import MatchAllFilter
from rtquery.queues import (
    NO_DISK_CHECK,
    UNLIMITED_CAPACITY,
    DiskQueue,
    FilteredQueue,
    InMemoryQueue,
    LogsQueue,
)
from rtquery.queues import disk


class _FieldEquals:
    def __init__(self, field: str, value: Any) -> None:
        self.name = f"{field}={value}"
        self.field = field
        self.value = value
        self.calls = 0

    def matches(self, log: Mapping[str, Any]) -> bool:
        self.calls += 1
        return log.get(self.field) == self.value


class _ClosingQueue(InMemoryQueue):
    def __init__(self) -> None:
        super().__init__()
        self.closed = False

    def close(self) -> None:
        self.closed = True


def _payload(**fields: Any) -> bytes:
    return json.dumps(fields).encode("utf-8")


def test_in_memory_queue_is_fifo() -> None:
    queue = InMemoryQueue()
    assert isinstance(queue, LogsQueue)
    assert queue.is_empty()

    assert queue.enqueue(b"first")
    assert queue.enqueue(b"second!")
    assert len(queue) == 2
    assert queue.size_bytes == len(b"first") + len(b"second!")

    assert queue.dequeue() == b"first"
    assert queue.dequeue() == b"second!"
    assert queue.is_empty()
    assert queue.size_bytes == 0


def test_dequeue_on_empty_queue_raises() -> None:
    with pytest.raises(QueueEmptyError):
        InMemoryQueue().dequeue()


def test_capacity_drops_once_threshold_reached(caplog: pytest.LogCaptureFixture) -> None:
    queue = InMemoryQueue(capacity_bytes=10)

    assert queue.enqueue(b"123456")
    # Size is below capacity before this one, so it is accepted and overshoots.
    assert queue.enqueue(b"789012")
    with caplog.at_level(logging.WARNING, logger="rtquery.queues.in_memory"):
        assert not queue.enqueue(b"x")

    assert queue.dropped == 1
    assert len(queue) == 2
    assert "memory threshold" in caplog.text

    queue.dequeue()
    assert queue.enqueue(b"x")


def test_unlimited_capacity_never_drops() -> None:
    queue = InMemoryQueue(capacity_bytes=UNLIMITED_CAPACITY)
    for _ in range(100):
        assert queue.enqueue(b"0123456789")
    assert queue.dropped == 0
    assert queue.size_bytes == 1000


def test_zero_capacity_drops_everything() -> None:
    queue = InMemoryQueue(capacity_bytes=0)
    assert not queue.enqueue(b"a")
    assert queue.is_empty()


def test_invalid_capacity_rejected() -> None:
    with pytest.raises(ConfigurationError) as exc_info:
        InMemoryQueue(capacity_bytes=-5)
    assert isinstance(exc_info.value, ValueError)


def test_concurrent_producers_keep_size_consistent() -> None:
    queue = InMemoryQueue(capacity_bytes=UNLIMITED_CAPACITY)

    def produce() -> None:
        for _ in range(500):
            queue.enqueue(b"abcd")

    threads = [threading.Thread(target=produce) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(queue) == 2000
    assert queue.size_bytes == 8000


def test_filtered_queue_without_filters_keeps_everything() -> None:
    queue = FilteredQueue(InMemoryQueue())
    assert queue.enqueue(_payload(level="DEBUG"))
    assert json.loads(queue.dequeue()) == {"level": "DEBUG"}


def test_realtime_match_wins_over_default_filter() -> None:
    errors = _FieldEquals("level", "ERROR")
    queue = FilteredQueue(
        InMemoryQueue(), realtime_filters=[errors], default_filters=[MatchAllFilter()]
    )

    assert queue.enqueue(_payload(level="ERROR", n=1))
    assert not queue.enqueue(_payload(level="INFO", n=2))

    assert queue.filtered_out == 1
    assert json.loads(queue.dequeue())["n"] == 1
    assert queue.is_empty()


def test_default_filters_only_drop_matching_logs() -> None:
    debug = _FieldEquals("level", "DEBUG")
    queue = FilteredQueue(InMemoryQueue(), default_filters=[debug])

    assert not queue.enqueue(_payload(level="DEBUG"))
    assert queue.enqueue(_payload(level="INFO"))
    assert queue.filtered_out == 1


def test_first_matching_realtime_filter_short_circuits() -> None:
    first = _FieldEquals("level", "ERROR")
    second = _FieldEquals("level", "ERROR")
    queue = FilteredQueue(InMemoryQueue(), realtime_filters=[first, second])

    queue.enqueue(_payload(level="ERROR"))
    assert first.calls == 1
    assert second.calls == 0


@pytest.mark.parametrize("payload", [b"not json", b"[1, 2]", b"\xff\xfe", b'"text"'])
def test_non_object_payloads_are_rejected(payload: bytes) -> None:
    target = InMemoryQueue()
    queue = FilteredQueue(target)

    assert not queue.enqueue(payload)
    assert queue.rejected == 1
    assert target.is_empty()


def test_filtered_queue_reports_buffer_drops() -> None:
    target = InMemoryQueue(capacity_bytes=1)
    queue = FilteredQueue(target)

    assert queue.enqueue(_payload(a=1))
    assert not queue.enqueue(_payload(a=2))
    assert target.dropped == 1


def test_filtered_queue_closes_target_on_exit() -> None:
    target = _ClosingQueue()
    with FilteredQueue(target) as queue:
        queue.enqueue(_payload(a=1))
    assert target.closed


def test_buffered_payload_is_unchanged() -> None:
    raw = b'{"b": 2,   "a": 1}'
    queue = FilteredQueue(InMemoryQueue())
    queue.enqueue(raw)
    assert queue.dequeue() == raw


def _disk_usage(used_percent: int) -> Callable[[str], SimpleNamespace]:
    def fake(path: str) -> SimpleNamespace:
        return SimpleNamespace(
            total=100, used=used_percent, free=100 - used_percent, percent=float(used_percent)
        )

    return fake


def test_disk_queue_is_fifo_and_survives_reopen(tmp_path: Path) -> None:
    directory = tmp_path / "buffer" / "logs"
    with DiskQueue(directory, fs_percent_threshold=NO_DISK_CHECK, gc_interval_seconds=0) as queue:
        assert isinstance(queue, LogsQueue)
        assert directory.is_dir()
        assert queue.enqueue(b"first")
        assert queue.enqueue(b"second")
        assert len(queue) == 2
        assert queue.dequeue() == b"first"

    reopened = DiskQueue(directory, fs_percent_threshold=NO_DISK_CHECK, gc_interval_seconds=0)
    with reopened:
        assert reopened.dequeue() == b"second"
        assert reopened.is_empty()
        with pytest.raises(QueueEmptyError):
            reopened.dequeue()


@pytest.mark.parametrize(
    "used, threshold, accepted",
    [(95, 95, False), (95, 96, True), (0, 0, False), (100, NO_DISK_CHECK, True)],
)
def test_disk_queue_drops_at_used_space_threshold(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    caplog: pytest.LogCaptureFixture,
    used: int,
    threshold: int,
    accepted: bool,
) -> None:
    monkeypatch.setattr(disk.psutil, "disk_usage", _disk_usage(used))

    with DiskQueue(tmp_path / "q", fs_percent_threshold=threshold, gc_interval_seconds=0) as queue:
        with caplog.at_level(logging.WARNING, logger="rtquery.queues.disk"):
            assert queue.enqueue(b"x") is accepted
        assert queue.dropped == (0 if accepted else 1)
        assert queue.is_empty() is not accepted

    assert ("drop threshold" in caplog.text) is not accepted


def test_disk_queue_used_percent(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(disk.psutil, "disk_usage", _disk_usage(42))
    with DiskQueue(tmp_path / "q", gc_interval_seconds=0) as queue:
        assert queue.used_percent() == 42


@pytest.mark.parametrize(
    "kwargs",
    [
        {"fs_percent_threshold": 101},
        {"fs_percent_threshold": -2},
        {"gc_interval_seconds": -1},
    ],
)
def test_disk_queue_rejects_bad_settings(tmp_path: Path, kwargs: Any) -> None:
    with pytest.raises(ConfigurationError):
        DiskQueue(tmp_path / "q", **kwargs)


def test_disk_queue_rejects_filesystem_root() -> None:
    with pytest.raises(ConfigurationError) as exc_info:
        DiskQueue(Path("/"))
    assert "root" in str(exc_info.value)


def test_disk_queue_background_cleanup(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    collected = threading.Event()
    queue = DiskQueue(tmp_path / "q", fs_percent_threshold=NO_DISK_CHECK, gc_interval_seconds=0.01)

    def collect() -> int:
        collected.set()
        return 0

    monkeypatch.setattr(queue, "collect", collect)
    try:
        assert collected.wait(timeout=2.0)
    finally:
        queue.close()
    queue.close()


def test_filtered_queue_over_disk_queue(tmp_path: Path) -> None:
    target = DiskQueue(tmp_path / "q", fs_percent_threshold=NO_DISK_CHECK, gc_interval_seconds=0)
    errors = _FieldEquals("level", "ERROR")

    queue = FilteredQueue(target, realtime_filters=[errors], default_filters=[MatchAllFilter()])
    with queue:
        assert queue.enqueue(_payload(level="ERROR", n=1))
        assert not queue.enqueue(_payload(level="INFO", n=2))
        assert json.loads(queue.dequeue()) == {"level": "ERROR", "n": 1}
        assert queue.is_empty()
