"""
Exception hierarchy for rtquery.

QueryRecord itself never raises; these cover decoding saved queries, parsing
query strings, configuring buffers and draining them.
"""

from __future__ import annotations


class RTQueryError(Exception):
    """Base class for all rtquery errors."""


class RecordDecodeError(RTQueryError):
    """Raised when saved query JSON cannot be turned into QueryRecord values."""

    def __init__(self, source: str, reason: str) -> None:
        super().__init__(f"Cannot decode query records from {source}: {reason}")
        self.source = source
        self.reason = reason


class QuerySyntaxError(RTQueryError):
    """Raised when a query string cannot be tokenized."""

    def __init__(self, query: str, reason: str) -> None:
        super().__init__(f"Invalid query {query!r}: {reason}")
        self.query = query
        self.reason = reason


class QueueEmptyError(RTQueryError):
    """Raised by dequeue() when the buffer holds no logs."""


class ConfigurationError(RTQueryError, ValueError):
    """Raised when a buffer or filter run is given an unusable setting."""


__all__ = [
    "RTQueryError",
    "RecordDecodeError",
    "QuerySyntaxError",
    "QueueEmptyError",
    "ConfigurationError",
]
