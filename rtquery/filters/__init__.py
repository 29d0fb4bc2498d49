"""
Real-time filters package.

Exports the filter interfaces and the concrete filters used by FilteredQueue.
"""

from rtquery.filters.abstract import AbstractRTFilter, RTFilter
from rtquery.filters.jsonpath import JsonPathFilter, is_jsonpath
from rtquery.filters.match_all import MatchAllFilter
from rtquery.filters.query import QueryTerm, parse_query
from rtquery.filters.record_filter import LogFieldNames, QueryRecordFilter, parse_timestamp_ms

__all__ = [
    "RTFilter",
    "AbstractRTFilter",
    "MatchAllFilter",
    "JsonPathFilter",
    "is_jsonpath",
    "QueryTerm",
    "parse_query",
    "LogFieldNames",
    "QueryRecordFilter",
    "parse_timestamp_ms",
]
