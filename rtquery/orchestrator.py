"""
Orchestrator for filter runs: stream log lines through the saved queries.

Usage (example from CLI):
    from rtquery.domain import load_query_records
    from rtquery.orchestrator import filter_logs

    records = load_query_records("queries.json")
    with open("app.log", "rb") as f:
        result = filter_logs(f, records)
    print(result["matched"], result["throughput_lines_per_sec"])

Lines are fed into a FilteredQueue in front of an InMemoryQueue and the buffer
is drained every `batch_size` lines, so the buffer capacity bounds memory per
batch rather than for the whole input.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, TypedDict, Union

from rtquery.config import Settings, get_settings
from rtquery.domain.models import QueryRecord
from rtquery.errors import ConfigurationError
from rtquery.filters.abstract import RTFilter
from rtquery.filters.match_all import MatchAllFilter
from rtquery.filters.record_filter import LogFieldNames, QueryRecordFilter
from rtquery.queues.disk import DiskQueue
from rtquery.queues.filtered import FilteredQueue
from rtquery.queues.in_memory import InMemoryQueue
from rtquery.utils.logging import get_logger
from rtquery.utils.profiler import ProfileStats, profile_block

log = get_logger(__name__)

DEFAULT_BATCH_SIZE = 1_000


class FilterRunResult(TypedDict, total=False):
    """
    Summary of one filter run.

    `received` counts non-blank input lines. Every received line ends up in
    exactly one of `matched`, `filtered_out`, `dropped` (buffer full) or
    `rejected` (not a JSON object).
    """

    received: int
    matched: int
    filtered_out: int
    dropped: int
    rejected: int
    queries: int
    matched_logs: List[Dict[str, Any]]
    duration_seconds: float
    throughput_lines_per_sec: float
    peak_rss_bytes: Optional[int]
    cpu_percent: Optional[float]


def _round_float(value: float, decimals: int = 2) -> float:
    return round(value, decimals)


def build_filters(
    records: Iterable[QueryRecord], fields: Optional[LogFieldNames] = None
) -> List[QueryRecordFilter]:
    """One QueryRecordFilter per saved query."""
    return [QueryRecordFilter(record, fields) for record in records]


def _drain(queue: FilteredQueue, sink: List[Dict[str, Any]]) -> None:
    while not queue.is_empty():
        sink.append(json.loads(queue.dequeue()))


def _build_buffer(
    settings: Settings, capacity_bytes: Optional[int], queue_dir: Optional[Union[str, Path]]
) -> Union[InMemoryQueue, DiskQueue]:
    if queue_dir is None:
        queue_dir = settings.queue_dir
    if queue_dir:
        return DiskQueue(
            queue_dir,
            fs_percent_threshold=settings.fs_percent_threshold,
            gc_interval_seconds=settings.queue_gc_interval_seconds,
        )
    if capacity_bytes is None:
        capacity_bytes = settings.queue_capacity_bytes
    return InMemoryQueue(capacity_bytes=capacity_bytes)


def _to_bytes(line: Union[str, bytes]) -> bytes:
    return line.encode("utf-8") if isinstance(line, str) else line


def filter_logs(
    lines: Iterable[Union[str, bytes]],
    records: Iterable[QueryRecord],
    default_filters: Optional[Iterable[RTFilter]] = None,
    capacity_bytes: Optional[int] = None,
    fields: Optional[LogFieldNames] = None,
    batch_size: int = DEFAULT_BATCH_SIZE,
    queue_dir: Optional[Union[str, Path]] = None,
) -> FilterRunResult:
    """
    Route each JSON log line through the saved queries and collect the matches.

    Parameters
    ----------
    lines : iterable of str or bytes
        One JSON object per line; blank lines are skipped.
    records : iterable of QueryRecord
        Saved queries acting as real-time filters.
    default_filters : iterable of RTFilter, optional
        Logs matching none of the queries but one of these are filtered out.
        Defaults to a single MatchAllFilter, so only query matches are kept;
        pass an empty tuple to keep every well-formed log.
    capacity_bytes : int, optional
        In-memory buffer capacity; defaults to the QUEUE_CAPACITY_BYTES setting.
    fields : LogFieldNames, optional
        Field names to read from events; defaults to the LOG_*_FIELD settings.
    batch_size : int
        Number of lines fed between buffer drains.
    queue_dir : str or Path, optional
        Buffer in a DiskQueue at this directory instead of memory; defaults to
        the QUEUE_DIR setting. Payloads left there by an earlier run are drained
        into the matches as well.
    """
    if batch_size <= 0:
        raise ConfigurationError(f"batch_size must be positive, got {batch_size}")
    settings = get_settings()
    if fields is None:
        fields = LogFieldNames.from_settings(settings)
    if default_filters is None:
        default_filters = (MatchAllFilter(),)

    realtime = build_filters(records, fields)
    buffer = _build_buffer(settings, capacity_bytes, queue_dir)
    matched_logs: List[Dict[str, Any]] = []
    received = 0

    log.info("[FILTER START]", extra={"queries": len(realtime)})
    with FilteredQueue(buffer, realtime, default_filters) as queue:
        with profile_block("filter-run") as stats:
            for line in lines:
                payload = _to_bytes(line).strip()
                if not payload:
                    continue
                received += 1
                queue.enqueue(payload)
                if received % batch_size == 0:
                    _drain(queue, matched_logs)
            _drain(queue, matched_logs)

    result = FilterRunResult(
        received=received,
        matched=len(matched_logs),
        filtered_out=queue.filtered_out,
        dropped=buffer.dropped,
        rejected=queue.rejected,
        queries=len(realtime),
        matched_logs=matched_logs,
    )
    merged = _merge_profile(result, stats)
    counters = ("received", "matched", "filtered_out", "dropped", "rejected")
    log.info("[FILTER DONE]", extra={k: merged[k] for k in counters})
    return merged


def _merge_profile(result: FilterRunResult, stats: ProfileStats) -> FilterRunResult:
    """Attach profiler measurements, rounding floats for readability."""
    merged = FilterRunResult(**result)
    duration = stats.duration_seconds
    merged["duration_seconds"] = _round_float(duration, 4)
    merged["throughput_lines_per_sec"] = (
        _round_float(result["received"] / duration) if duration > 0 else 0.0
    )
    merged["peak_rss_bytes"] = stats.peak_rss_bytes
    merged["cpu_percent"] = _round_float(stats.cpu_percent, 1) if stats.cpu_percent else None
    return merged


__all__ = ["FilterRunResult", "build_filters", "filter_logs", "DEFAULT_BATCH_SIZE"]
