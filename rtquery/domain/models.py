"""
Domain models for rtquery.

Defines the saved real-time query record. The record is a frozen value: it
carries no behavior beyond field access, structural equality/hashing and
conversion to and from its camelCase wire layout.
"""
from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from pydantic import BaseModel, Field, ValidationError

from rtquery.errors import RecordDecodeError


class QueryRecord(BaseModel):
    """
    A saved query: what to look for, on which hosts and tags, and when.

    `hostname` and `tag` are optional sequences. None means the filter was never
    set and is kept distinct from an empty tuple in equality and serialization.
    Any sequence given for them, lists included, is stored as a tuple so the
    record stays hashable: `hostname=["web-1"]` reads back as `("web-1",)`.
    Timestamps are opaque epoch values (milliseconds by convention); no ordering
    between `start_date` and `end_date` is enforced.
    """

    id: int = Field(..., description="Identifier of the saved query.")
    title: str = Field(..., description="Human readable title.")
    query: str = Field(..., description="Query string, e.g. 'level:ERROR'.")
    hostname: Optional[Tuple[str, ...]] = Field(..., description="Hostnames to restrict to.")
    tag: Optional[Tuple[str, ...]] = Field(..., description="Tags to restrict to.")
    start_date: int = Field(..., alias="startDate", description="Window start (epoch).")
    end_date: int = Field(..., alias="endDate", description="Window end (epoch).")

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "arbitrary_types_allowed": False,
    }

    @classmethod
    def create(
        cls,
        id: int,
        title: str,
        query: str,
        hostname: Optional[Sequence[str]],
        tag: Optional[Sequence[str]],
        start_date: int,
        end_date: int,
    ) -> QueryRecord:
        """Positional constructor mirroring the wire field order."""
        return cls(
            id=id,
            title=title,
            query=query,
            hostname=hostname,
            tag=tag,
            start_date=start_date,
            end_date=end_date,
        )

    @classmethod
    def empty(cls) -> QueryRecord:
        """Return the default record: zero id and dates, empty text, no filters."""
        return cls(id=0, title="", query="", hostname=None, tag=None, start_date=0, end_date=0)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-compatible dict keyed by the wire field names."""
        return self.model_dump(by_alias=True, mode="json")

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> QueryRecord:
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise RecordDecodeError("mapping", _summarize(exc)) from exc

    @classmethod
    def from_json(cls, text: str | bytes) -> QueryRecord:
        try:
            return cls.model_validate_json(text)
        except ValidationError as exc:
            raise RecordDecodeError("json", _summarize(exc)) from exc


def _summarize(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error["loc"]) or "<root>"
        parts.append(f"{location}: {error['msg']}")
    return "; ".join(parts)


EMPTY_QUERY_RECORD = QueryRecord.empty()


__all__ = ["QueryRecord", "EMPTY_QUERY_RECORD"]
