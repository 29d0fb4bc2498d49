"""
Reading and writing collections of saved queries.

A saved-query file is a JSON array of objects using the wire field names
(`id`, `title`, `query`, `hostname`, `tag`, `startDate`, `endDate`).
"""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, List

from pydantic import TypeAdapter, ValidationError

from rtquery.domain.models import QueryRecord, _summarize
from rtquery.errors import RecordDecodeError
from rtquery.utils.logging import get_logger

log = get_logger(__name__)

_RECORDS_ADAPTER = TypeAdapter(List[QueryRecord])


def parse_query_records(text: str | bytes, source: str = "<string>") -> List[QueryRecord]:
    """Parse a JSON array of saved queries."""
    try:
        return _RECORDS_ADAPTER.validate_json(text)
    except ValidationError as exc:
        raise RecordDecodeError(source, _summarize(exc)) from exc


def load_query_records(path: Path | str) -> List[QueryRecord]:
    """Load saved queries from a JSON file."""
    path = Path(path)
    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise RecordDecodeError(str(path), exc.strerror or str(exc)) from exc
    records = parse_query_records(raw, source=str(path))
    log.debug("Loaded saved queries", extra={"path": str(path), "count": len(records)})
    return records


def dump_query_records(records: Iterable[QueryRecord], path: Path | str) -> Path:
    """Write saved queries to `path` as an indented JSON array."""
    path = Path(path)
    items = list(records)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = _RECORDS_ADAPTER.dump_json(items, by_alias=True, indent=2)
    path.write_bytes(payload + b"\n")
    log.debug("Wrote saved queries", extra={"path": str(path), "count": len(items)})
    return path


__all__ = ["parse_query_records", "load_query_records", "dump_query_records"]
