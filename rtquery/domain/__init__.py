"""
Domain package for rtquery.

Exports the saved query record and helpers to read and write collections of
records. Keep this package focused on data definitions.
"""

from rtquery.domain.models import EMPTY_QUERY_RECORD, QueryRecord
from rtquery.domain.serialization import (
    dump_query_records,
    load_query_records,
    parse_query_records,
)

__all__ = [
    "QueryRecord",
    "EMPTY_QUERY_RECORD",
    "dump_query_records",
    "load_query_records",
    "parse_query_records",
]
