"""
rtquery - saved real-time queries for JSON log streams.

The package centers on QueryRecord, an immutable saved query (title, query
string, optional hostname and tag filters, time window), and provides:

- JSON reading/writing of saved queries in their camelCase wire layout
- Real-time filters that match decoded log events against saved queries
- JSONPath filters for ad-hoc routing rules
- Byte-bounded in-memory and persistent on-disk log buffers with a filtering
  queue in front of them
- A filter-run orchestrator and a typer CLI with rich output
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from rtquery.config import Settings, get_settings
from rtquery.domain import (
    EMPTY_QUERY_RECORD,
    QueryRecord,
    dump_query_records,
    load_query_records,
    parse_query_records,
)
from rtquery.errors import (
    ConfigurationError,
    QueueEmptyError,
    QuerySyntaxError,
    RecordDecodeError,
    RTQueryError,
)
from rtquery.filters import (
    AbstractRTFilter,
    JsonPathFilter,
    LogFieldNames,
    MatchAllFilter,
    QueryRecordFilter,
    RTFilter,
    parse_query,
)
from rtquery.orchestrator import FilterRunResult, filter_logs
from rtquery.queues import DiskQueue, FilteredQueue, InMemoryQueue, LogsQueue, UNLIMITED_CAPACITY
from rtquery.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Domain
    "QueryRecord",
    "EMPTY_QUERY_RECORD",
    "dump_query_records",
    "load_query_records",
    "parse_query_records",
    # Errors
    "RTQueryError",
    "RecordDecodeError",
    "QuerySyntaxError",
    "QueueEmptyError",
    "ConfigurationError",
    # Filters
    "RTFilter",
    "AbstractRTFilter",
    "MatchAllFilter",
    "JsonPathFilter",
    "QueryRecordFilter",
    "LogFieldNames",
    "parse_query",
    # Queues
    "LogsQueue",
    "InMemoryQueue",
    "DiskQueue",
    "FilteredQueue",
    "UNLIMITED_CAPACITY",
    # Orchestration
    "FilterRunResult",
    "filter_logs",
    # Logging
    "configure_logging",
    "get_logger",
]
