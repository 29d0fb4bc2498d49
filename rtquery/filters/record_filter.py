"""
Filter built from a saved QueryRecord.

A log event matches when it passes every constraint the record sets: host,
tag, time window and query string. Unset constraints (None or empty filters,
zero timestamps, blank query) do not restrict anything.

Hostnames and tags are compared exactly, case included; query terms compare
case-insensitively. A query starting with `$` is a JSONPath expression instead
of query terms.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Tuple

from rtquery.config import Settings
from rtquery.domain.models import QueryRecord
from rtquery.filters.abstract import AbstractRTFilter
from rtquery.filters.jsonpath import JsonPathFilter, is_jsonpath
from rtquery.filters.query import QueryTerm, is_missing, parse_query, resolve_field


@dataclass(frozen=True)
class LogFieldNames:
    """Where the filter finds message, host, tags and timestamp in a log event."""

    message: str = "message"
    hostname: str = "hostname"
    tags: str = "tags"
    timestamp: str = "@timestamp"

    @classmethod
    def from_settings(cls, settings: Settings) -> LogFieldNames:
        return cls(
            message=settings.log_message_field,
            hostname=settings.log_hostname_field,
            tags=settings.log_tags_field,
            timestamp=settings.log_timestamp_field,
        )


class QueryRecordFilter(AbstractRTFilter):
    """
    Match log events against a saved query.

    The query string (terms or JSONPath) is parsed once at construction, so a
    malformed query raises QuerySyntaxError here rather than on the first event.
    """

    def __init__(self, record: QueryRecord, fields: Optional[LogFieldNames] = None) -> None:
        self.record = record
        self.fields = fields or LogFieldNames()
        self.name = f"query:{record.id}"
        self._jsonpath: Optional[JsonPathFilter] = None
        self._terms: Tuple[QueryTerm, ...] = ()
        if is_jsonpath(record.query):
            self._jsonpath = JsonPathFilter(record.query)
        else:
            self._terms = parse_query(record.query)
        self._hostnames = frozenset(record.hostname or ())
        self._tags = frozenset(record.tag or ())

    def matches(self, log: Mapping[str, Any]) -> bool:
        return (
            self._matches_hostname(log)
            and self._matches_tags(log)
            and self._matches_window(log)
            and self._matches_query(log)
        )

    def _matches_query(self, log: Mapping[str, Any]) -> bool:
        if self._jsonpath is not None:
            return self._jsonpath.matches(log)
        return all(term.matches(log, self.fields.message) for term in self._terms)

    def _matches_hostname(self, log: Mapping[str, Any]) -> bool:
        if not self._hostnames:
            return True
        host = resolve_field(log, self.fields.hostname)
        return isinstance(host, str) and host in self._hostnames

    def _matches_tags(self, log: Mapping[str, Any]) -> bool:
        if not self._tags:
            return True
        tags = resolve_field(log, self.fields.tags)
        if isinstance(tags, str):
            return tags in self._tags
        if isinstance(tags, (list, tuple)):
            return any(isinstance(tag, str) and tag in self._tags for tag in tags)
        return False

    def _matches_window(self, log: Mapping[str, Any]) -> bool:
        start, end = self.record.start_date, self.record.end_date
        if start <= 0 and end <= 0:
            return True
        timestamp = parse_timestamp_ms(resolve_field(log, self.fields.timestamp))
        if timestamp is None:
            return False
        if start > 0 and timestamp < start:
            return False
        if end > 0 and timestamp > end:
            return False
        return True


def parse_timestamp_ms(value: Any) -> Optional[int]:
    """
    Read an event timestamp as epoch milliseconds.

    Accepts integers/floats (already milliseconds), digit strings and ISO-8601
    strings. Naive ISO timestamps are taken as UTC. Returns None when the value
    cannot be read, including NaN and infinite numbers.
    """
    if is_missing(value) or value is None or isinstance(value, bool):
        return None
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, int):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()
    if text.isascii() and text.isdigit():
        return int(text)
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return int(parsed.timestamp() * 1000)
    except (ValueError, OverflowError):
        return None


__all__ = ["LogFieldNames", "QueryRecordFilter", "parse_timestamp_ms"]
